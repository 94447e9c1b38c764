"""Compatibility modes: hostnames from annotations of older DNS controllers.

Only consulted when a service yields no records from its own hostname
annotations and a compatibility mode is configured.

  mate                 zalando.org/dnsname
  molecule             domainName, for services labelled dns=route53
  kops-dns-controller  dns.alpha.kubernetes.io/external and .../internal
"""

from __future__ import annotations

import logging

from svc2dns.models.cluster import (
    NODE_EXTERNAL_IP,
    NODE_INTERNAL_IP,
    SERVICE_TYPE_LOAD_BALANCER,
    SERVICE_TYPE_NODE_PORT,
    Service,
)
from svc2dns.models.endpoint import RECORD_TYPE_A, RECORD_TYPE_CNAME, Endpoint, new_endpoint
from svc2dns.sources.provider import ClusterStateProvider
from svc2dns.utils.ip import suitable_type
from svc2dns.utils.selector import EVERYTHING

logger = logging.getLogger(__name__)

COMPATIBILITY_MATE = "mate"
COMPATIBILITY_MOLECULE = "molecule"
COMPATIBILITY_KOPS_DNS_CONTROLLER = "kops-dns-controller"

COMPATIBILITY_MODES = (
    COMPATIBILITY_MATE,
    COMPATIBILITY_MOLECULE,
    COMPATIBILITY_KOPS_DNS_CONTROLLER,
)

MATE_HOSTNAME_KEY = "zalando.org/dnsname"
MOLECULE_HOSTNAME_KEY = "domainName"
KOPS_EXTERNAL_HOSTNAME_KEY = "dns.alpha.kubernetes.io/external"
KOPS_INTERNAL_HOSTNAME_KEY = "dns.alpha.kubernetes.io/internal"


def _split(value: str) -> list[str]:
    return [h.strip() for h in value.split(",") if h.strip()]


def _ingress_endpoints(service: Service, hostname: str) -> list[Endpoint]:
    """One single-target record per load-balancer ingress point."""
    endpoints = []
    for ingress in service.load_balancer_ingress:
        if ingress.ip:
            endpoints.append(new_endpoint(hostname, RECORD_TYPE_A, ingress.ip))
        if ingress.hostname:
            endpoints.append(new_endpoint(hostname, RECORD_TYPE_CNAME, ingress.hostname))
    return endpoints


def mate_endpoints(service: Service) -> list[Endpoint]:
    hostname = service.annotations.get(MATE_HOSTNAME_KEY)
    if not hostname:
        return []
    return _ingress_endpoints(service, hostname.strip())


def molecule_endpoints(service: Service) -> list[Endpoint]:
    # Services opt in with a label
    if service.labels.get("dns") != "route53":
        return []
    endpoints = []
    for hostname in _split(service.annotations.get(MOLECULE_HOSTNAME_KEY, "")):
        endpoints.extend(_ingress_endpoints(service, hostname))
    return endpoints


def kops_dns_controller_endpoints(service: Service, provider: ClusterStateProvider) -> list[Endpoint]:
    """Records for kOps dns-controller annotations.

    A service carrying both the external and the internal annotation is
    ignored, as dns-controller does.
    """
    is_external = KOPS_EXTERNAL_HOSTNAME_KEY in service.annotations
    is_internal = KOPS_INTERNAL_HOSTNAME_KEY in service.annotations
    if is_external == is_internal:
        return []

    if service.type == SERVICE_TYPE_LOAD_BALANCER:
        if not is_external:
            return []
        endpoints = []
        for hostname in _split(service.annotations[KOPS_EXTERNAL_HOSTNAME_KEY]):
            endpoints.extend(_ingress_endpoints(service, hostname))
        return endpoints

    if service.type == SERVICE_TYPE_NODE_PORT:
        if is_external:
            key, address_type = KOPS_EXTERNAL_HOSTNAME_KEY, NODE_EXTERNAL_IP
        else:
            key, address_type = KOPS_INTERNAL_HOSTNAME_KEY, NODE_INTERNAL_IP
        hostnames = _split(service.annotations[key])
        endpoints = []
        for node in provider.list_nodes(EVERYTHING):
            for address in node.addresses_of_type(address_type):
                for hostname in hostnames:
                    endpoints.append(new_endpoint(hostname, suitable_type(address), address))
        return endpoints

    return []


def legacy_endpoints(service: Service, mode: str, provider: ClusterStateProvider) -> list[Endpoint]:
    """Records for the configured compatibility mode; [] when disabled.

    Raises:
        ProviderError: If nodes cannot be listed (kops-dns-controller).
    """
    if mode == COMPATIBILITY_MATE:
        endpoints = mate_endpoints(service)
    elif mode == COMPATIBILITY_MOLECULE:
        endpoints = molecule_endpoints(service)
    elif mode == COMPATIBILITY_KOPS_DNS_CONTROLLER:
        endpoints = kops_dns_controller_endpoints(service, provider)
    else:
        return []

    if endpoints:
        logger.debug("Generated %d %s compatibility endpoints for %s", len(endpoints), mode, service)
    return endpoints
