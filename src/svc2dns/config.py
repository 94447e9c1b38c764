"""Load source configuration from svc2dns.toml."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from svc2dns.derivations.annotations import CONTROLLER_VALUE
from svc2dns.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "svc2dns.toml"


@dataclass
class SourceConfig:
    """Options controlling which services are read and how names are derived.

    Attributes:
        namespace: Namespace to read services from, '' for all
        annotation_filter: Selector applied to service annotations
        label_filter: Selector applied to service labels
        fqdn_template: jinja2 template producing hostnames for a service
        combine_fqdn_annotation: Use the template in addition to annotations
        compatibility: Legacy annotation mode ('', 'mate', 'molecule',
            'kops-dns-controller')
        publish_internal: Publish cluster IPs of ClusterIP services
        publish_host_ip: Publish pod host IPs for headless services
        always_publish_not_ready_addresses: Publish unready pods of headless
            services even if the service does not ask for it
        service_types: Service types to consider, empty for all
        ignore_hostname_annotation: Ignore hostname annotations
        resolve_load_balancer_hostname: Publish addresses of load-balancer
            hostnames instead of CNAMEs
        controller: Value of the controller annotation claimed by this source
    """

    namespace: str = ""
    annotation_filter: str = ""
    label_filter: str = ""
    fqdn_template: str = ""
    combine_fqdn_annotation: bool = False
    compatibility: str = ""
    publish_internal: bool = False
    publish_host_ip: bool = False
    always_publish_not_ready_addresses: bool = False
    service_types: list[str] = field(default_factory=list)
    ignore_hostname_annotation: bool = False
    resolve_load_balancer_hostname: bool = False
    controller: str = CONTROLLER_VALUE


_STRING_FIELDS = (
    "namespace",
    "annotation_filter",
    "label_filter",
    "fqdn_template",
    "compatibility",
    "controller",
)

_BOOL_FIELDS = (
    "combine_fqdn_annotation",
    "publish_internal",
    "publish_host_ip",
    "always_publish_not_ready_addresses",
    "ignore_hostname_annotation",
    "resolve_load_balancer_hostname",
)


def _build_source(data: dict) -> SourceConfig:
    """Build a SourceConfig from the [source] table of parsed TOML data."""
    section = data.get("source", {})
    if not isinstance(section, dict):
        raise ConfigurationError("[source] must be a table")

    kwargs: dict[str, object] = {}
    for name in _STRING_FIELDS:
        if name in section:
            if not isinstance(section[name], str):
                raise ConfigurationError(f"source.{name} must be a string")
            kwargs[name] = section[name]
    for name in _BOOL_FIELDS:
        if name in section:
            if not isinstance(section[name], bool):
                raise ConfigurationError(f"source.{name} must be true or false")
            kwargs[name] = section[name]

    service_types = section.get("service_types", [])
    if not isinstance(service_types, list) or not all(isinstance(t, str) for t in service_types):
        raise ConfigurationError("source.service_types must be a list of strings")
    kwargs["service_types"] = list(service_types)

    unknown = sorted(set(section) - set(_STRING_FIELDS) - set(_BOOL_FIELDS) - {"service_types"})
    if unknown:
        raise ConfigurationError(f"unknown option(s) in [source]: {', '.join(unknown)}")

    return SourceConfig(**kwargs)


def load_config(config_path: Path | str | None = None) -> SourceConfig:
    """Load source configuration from a TOML file.

    If config_path is None, looks for svc2dns.toml in the current
    directory.

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigurationError: If the file is not valid TOML or has bad values.
    """
    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_PATH)
    else:
        config_path = Path(config_path)

    with open(config_path, "rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"{config_path}: {e}") from e

    return _build_source(data)
