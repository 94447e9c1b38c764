"""Annotation extraction: hostnames, targets, TTL and provider hints.

Every annotation key svc2dns understands is defined here, together with
its parsing rule. Raw annotation maps go no further than this module
(and derivations.legacy for the compatibility-mode keys).
"""

from __future__ import annotations

import logging
import re
from typing import Mapping

from svc2dns.models.endpoint import ProviderSpecificProperty

logger = logging.getLogger(__name__)

ANNOTATION_PREFIX = "external-dns.alpha.kubernetes.io/"

CONTROLLER_KEY = ANNOTATION_PREFIX + "controller"
HOSTNAME_KEY = ANNOTATION_PREFIX + "hostname"
INTERNAL_HOSTNAME_KEY = ANNOTATION_PREFIX + "internal-hostname"
TARGET_KEY = ANNOTATION_PREFIX + "target"
TTL_KEY = ANNOTATION_PREFIX + "ttl"
ACCESS_KEY = ANNOTATION_PREFIX + "access"
ENDPOINTS_TYPE_KEY = ANNOTATION_PREFIX + "endpoints-type"
SET_IDENTIFIER_KEY = ANNOTATION_PREFIX + "set-identifier"
ALIAS_KEY = ANNOTATION_PREFIX + "alias"
CLOUDFLARE_PROXIED_KEY = ANNOTATION_PREFIX + "cloudflare-proxied"
CLOUDFLARE_CUSTOM_HOSTNAME_KEY = ANNOTATION_PREFIX + "cloudflare-custom-hostname"

# Default identity checked against CONTROLLER_KEY
CONTROLLER_VALUE = "dns-controller"

ACCESS_PUBLIC = "public"
ACCESS_PRIVATE = "private"

ENDPOINTS_TYPE_NODE_EXTERNAL_IP = "NodeExternalIP"
ENDPOINTS_TYPE_HOST_IP = "HostIP"

# Annotation key prefix -> provider-specific property name prefix
_PROVIDER_PREFIXES = (
    (ANNOTATION_PREFIX + "aws-", "aws/"),
    (ANNOTATION_PREFIX + "scw-", "scw/"),
    (ANNOTATION_PREFIX + "ibmcloud-", "ibmcloud-"),
    (ANNOTATION_PREFIX + "webhook-", "webhook/"),
)

TTL_MINIMUM = 1
TTL_MAXIMUM = 2**31 - 1

_INTEGER_RE = re.compile(r"^[+-]?\d+$")
_DURATION_RE = re.compile(r"^[+-]?(?:\d*\.?\d+(?:ns|us|µs|μs|ms|s|m|h))+$")
_DURATION_PART_RE = re.compile(r"(\d*\.?\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def split_hostname_annotation(value: str) -> list[str]:
    """Split a comma-separated annotation value, dropping blanks.

    >>> split_hostname_annotation(' a.example.com, b.example.com ,, ')
    ['a.example.com', 'b.example.com']
    """
    return [part.strip() for part in value.split(",") if part.strip()]


def hostnames(annotations: Mapping[str, str]) -> list[str]:
    """Hostnames requested by the hostname annotation."""
    return split_hostname_annotation(annotations.get(HOSTNAME_KEY, ""))


def internal_hostnames(annotations: Mapping[str, str]) -> list[str]:
    """Hostnames requested by the internal-hostname annotation."""
    return split_hostname_annotation(annotations.get(INTERNAL_HOSTNAME_KEY, ""))


def targets_from_annotation(annotations: Mapping[str, str]) -> list[str]:
    """Explicit targets from the target annotation, trailing dots removed.

    >>> targets_from_annotation({TARGET_KEY: 'lb.example.com., 10.0.0.1'})
    ['lb.example.com', '10.0.0.1']
    """
    targets = []
    for target in split_hostname_annotation(annotations.get(TARGET_KEY, "")):
        if target.endswith("."):
            target = target[:-1]
        if target:
            targets.append(target)
    return targets


def provider_specific_and_set_identifier(
    annotations: Mapping[str, str],
) -> tuple[list[ProviderSpecificProperty], str]:
    """Collect provider-specific properties and the set identifier.

    Fixed keys come first, then prefixed keys in key order so the result
    does not depend on annotation map ordering.
    """
    properties: list[ProviderSpecificProperty] = []

    for key in (CLOUDFLARE_PROXIED_KEY, CLOUDFLARE_CUSTOM_HOSTNAME_KEY):
        if key in annotations:
            properties.append(ProviderSpecificProperty(name=key, value=annotations[key]))

    if annotations.get(ALIAS_KEY) == "true":
        properties.append(ProviderSpecificProperty(name="alias", value="true"))

    for key in sorted(annotations):
        for annotation_prefix, name_prefix in _PROVIDER_PREFIXES:
            if key.startswith(annotation_prefix):
                attr = key[len(annotation_prefix):]
                properties.append(ProviderSpecificProperty(
                    name=name_prefix + attr,
                    value=annotations[key],
                ))
                break

    return properties, annotations.get(SET_IDENTIFIER_KEY, "")


def parse_ttl(value: str) -> int:
    """Parse a TTL given as whole seconds or as a duration string.

    >>> parse_ttl('300')
    300
    >>> parse_ttl('1h30m')
    5400
    >>> parse_ttl('1.5s')
    1

    Raises:
        ValueError: If the value is malformed or outside 1..2147483647.
    """
    value = value.strip()
    if _INTEGER_RE.match(value):
        seconds = int(value)
    elif _DURATION_RE.match(value):
        total = 0.0
        for number, unit in _DURATION_PART_RE.findall(value):
            total += float(number) * _DURATION_UNITS[unit]
        if value.startswith("-"):
            total = -total
        seconds = int(total)
    else:
        raise ValueError(f"invalid TTL {value!r}")

    if not TTL_MINIMUM <= seconds <= TTL_MAXIMUM:
        raise ValueError(f"TTL value must be between [{TTL_MINIMUM}, {TTL_MAXIMUM}], got {value!r}")
    return seconds


def ttl(annotations: Mapping[str, str], resource: str) -> int | None:
    """TTL from the ttl annotation; None if absent or invalid.

    Invalid values are logged against ``resource`` and otherwise ignored.
    """
    value = annotations.get(TTL_KEY)
    if value is None:
        return None
    try:
        return parse_ttl(value)
    except ValueError as e:
        logger.warning("%s has an invalid TTL annotation: %s", resource, e)
        return None


def access(annotations: Mapping[str, str]) -> str:
    """'public', 'private' or '' when unset."""
    value = annotations.get(ACCESS_KEY, "")
    if value in (ACCESS_PUBLIC, ACCESS_PRIVATE):
        return value
    return ""


def endpoints_type(annotations: Mapping[str, str]) -> str:
    """'NodeExternalIP', 'HostIP' or '' for the default address source."""
    value = annotations.get(ENDPOINTS_TYPE_KEY, "")
    if value in (ENDPOINTS_TYPE_NODE_EXTERNAL_IP, ENDPOINTS_TYPE_HOST_IP):
        return value
    return ""


def is_managed_by(annotations: Mapping[str, str], controller: str = CONTROLLER_VALUE) -> bool:
    """False if another controller has claimed the object via annotation.

    >>> is_managed_by({})
    True
    >>> is_managed_by({CONTROLLER_KEY: 'someone-else'})
    False
    """
    value = annotations.get(CONTROLLER_KEY)
    return value is None or value == controller
