"""IP address utility functions shared across the package."""

from __future__ import annotations

import ipaddress

from svc2dns.models.endpoint import RECORD_TYPE_A, RECORD_TYPE_AAAA, RECORD_TYPE_CNAME


def parse_ip(value: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """Parse an IP literal, returning None for anything else.

    Scoped IPv6 literals ('fe80::1%eth0') are not addresses here.

    >>> parse_ip('10.0.0.1')
    IPv4Address('10.0.0.1')
    >>> parse_ip('example.com') is None
    True
    """
    if "%" in value:
        return None
    try:
        return ipaddress.ip_address(value)
    except ValueError:
        return None


def suitable_type(target: str) -> str:
    """Return the record type a target string belongs in.

    IPv4 literals are A targets, IPv6 literals are AAAA targets (except
    IPv4-mapped addresses, which are A), everything else is a CNAME.

    >>> suitable_type('10.0.0.1')
    'A'
    >>> suitable_type('::1')
    'AAAA'
    >>> suitable_type('::ffff:10.0.0.1')
    'A'
    >>> suitable_type('example.com')
    'CNAME'
    """
    ip = parse_ip(target)
    if ip is None:
        return RECORD_TYPE_CNAME
    if ip.version == 4:
        return RECORD_TYPE_A
    if ip.ipv4_mapped is not None:
        return RECORD_TYPE_A
    return RECORD_TYPE_AAAA


def is_ipv6(target: str) -> bool:
    """True if the target classifies as an AAAA target."""
    return suitable_type(target) == RECORD_TYPE_AAAA
