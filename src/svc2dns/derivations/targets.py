"""Target resolution for ClusterIP, LoadBalancer and ExternalName services.

NodePort targets live in derivations.nodeport and headless services in
derivations.headless; both need the cluster state provider.
"""

from __future__ import annotations

import logging

from svc2dns.errors import ResolutionError
from svc2dns.models.cluster import Service
from svc2dns.utils.resolve import HostnameResolver

logger = logging.getLogger(__name__)


def cluster_ip_targets(service: Service) -> list[str]:
    """The service's cluster IP; none for headless services."""
    if service.is_headless:
        logger.debug("Unable to associate headless service %s with a cluster IP", service)
        return []
    if not service.cluster_ip:
        return []
    return [service.cluster_ip]


def external_name_targets(service: Service) -> list[str]:
    if not service.external_name:
        return []
    return [service.external_name]


def load_balancer_targets(
    service: Service,
    resolve_hostname: HostnameResolver | None = None,
) -> list[str]:
    """Targets for a LoadBalancer service.

    Declared external IPs win outright. Otherwise every ingress point
    contributes its IP and its hostname; with a resolver, the hostname is
    replaced by the addresses it resolves to. An ingress point whose
    hostname fails to resolve contributes nothing.
    """
    if service.external_ips:
        return list(service.external_ips)

    targets: list[str] = []
    for ingress in service.load_balancer_ingress:
        if ingress.ip:
            targets.append(ingress.ip)
        if not ingress.hostname:
            continue
        if resolve_hostname is None:
            targets.append(ingress.hostname)
            continue
        try:
            addresses = resolve_hostname(ingress.hostname)
        except ResolutionError as e:
            logger.error("Unable to resolve %r for service %s: %s", ingress.hostname, service, e)
            continue
        targets.extend(addresses)
    return targets
