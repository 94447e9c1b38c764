"""FQDN naming templates rendered with jinja2.

A template such as ``{{ name }}.{{ namespace }}.example.com`` is rendered
once per Service. The result may name several hostnames separated by
commas.
"""

from __future__ import annotations

import jinja2

from svc2dns.errors import ConfigurationError, TemplateRenderError
from svc2dns.models.cluster import Service


def _trim_prefix(value: str, prefix: str) -> str:
    return value[len(prefix):] if prefix and value.startswith(prefix) else value


def _trim_suffix(value: str, suffix: str) -> str:
    return value[:-len(suffix)] if suffix and value.endswith(suffix) else value


_ENVIRONMENT = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    autoescape=False,
    keep_trailing_newline=False,
)
_ENVIRONMENT.filters["trim_prefix"] = _trim_prefix
_ENVIRONMENT.filters["trim_suffix"] = _trim_suffix


def parse_template(source: str) -> jinja2.Template | None:
    """Compile an FQDN template; an empty source means no template.

    Raises:
        ConfigurationError: If the template has a syntax error.
    """
    if not source.strip():
        return None
    try:
        return _ENVIRONMENT.from_string(source)
    except jinja2.TemplateSyntaxError as e:
        raise ConfigurationError(f"failed to parse FQDN template {source!r}: {e}") from e


def template_context(service: Service) -> dict[str, object]:
    """The fields of a Service visible to templates."""
    return {
        "name": service.name,
        "namespace": service.namespace,
        "labels": dict(service.labels),
        "annotations": dict(service.annotations),
    }


def exec_template(template: jinja2.Template, service: Service) -> list[str]:
    """Render the template for a service and split it into hostnames.

    Raises:
        TemplateRenderError: If rendering fails (e.g. an undefined field).
    """
    try:
        rendered = template.render(**template_context(service))
    except jinja2.TemplateError as e:
        raise TemplateRenderError(
            f"failed to apply FQDN template to service {service}: {e}"
        ) from e

    hostnames = []
    for name in rendered.split(","):
        name = name.strip()
        if name.endswith("."):
            name = name[:-1]
        if name:
            hostnames.append(name)
    return hostnames
