"""Forward resolution of load-balancer hostnames via dnspython."""

from __future__ import annotations

import logging
from typing import Callable

import dns.exception
import dns.resolver

from svc2dns.errors import ResolutionError

logger = logging.getLogger(__name__)

# Signature of a hostname resolver: hostname -> addresses, or ResolutionError
HostnameResolver = Callable[[str], list[str]]


def resolve_hostname(hostname: str, resolver: dns.resolver.Resolver | None = None) -> list[str]:
    """Resolve a hostname to all of its IPv4 and IPv6 addresses.

    A and AAAA are queried separately; a name with only one family is
    fine. If neither query yields an address, the last error is reported.

    Raises:
        ResolutionError: If no address could be found.
    """
    resolver = resolver or dns.resolver.get_default_resolver()

    addresses: list[str] = []
    errors: list[str] = []
    for rdtype in ("A", "AAAA"):
        try:
            answer = resolver.resolve(hostname, rdtype)
        except dns.resolver.NoAnswer:
            logger.debug("No %s records for %s", rdtype, hostname)
            continue
        except dns.exception.DNSException as e:
            errors.append(f"{rdtype}: {e}")
            continue
        for rdata in answer:
            addresses.append(rdata.to_text())

    if not addresses:
        detail = "; ".join(errors) if errors else "no A or AAAA records"
        raise ResolutionError(f"unable to resolve {hostname!r}: {detail}")
    return addresses
