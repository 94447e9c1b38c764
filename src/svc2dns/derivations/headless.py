"""Headless services: per-pod address records and SRV records.

A headless service has no cluster IP, so its name is published with the
addresses of the pods behind it, taken from the service's Endpoints
object. Each pod that declares a hostname also gets its own name under
the service hostname, and every named container port gets an SRV record.
"""

from __future__ import annotations

import logging

from svc2dns.derivations import annotations as ann
from svc2dns.errors import ProviderError
from svc2dns.models.cluster import NODE_EXTERNAL_IP, NODE_INTERNAL_IP, Pod, Service
from svc2dns.models.endpoint import RECORD_TYPE_SRV, Endpoint, new_endpoint
from svc2dns.sources.provider import ClusterStateProvider
from svc2dns.utils.ip import is_ipv6, suitable_type
from svc2dns.utils.selector import Selector

logger = logging.getLogger(__name__)


def _srv_endpoints(service: Service, pod: Pod, hostname: str, ttl: int | None) -> list[Endpoint]:
    """SRV records for the named container ports of one pod.

    Names follow ``_port-name._protocol.service.namespace.svc.hostname``
    and point at ``pod-hostname.service.namespace.svc.hostname``. A pod
    without a hostname has no name to point at and gets no SRV records.
    """
    if not pod.hostname:
        return []
    endpoints = []
    for container in pod.containers:
        for port in container.ports:
            if not port.name:
                continue
            protocol = port.protocol.lower() or "tcp"
            svc_domain = f"{service.name}.{service.namespace}.svc.{hostname}"
            record_name = f"_{port.name}._{protocol}.{svc_domain}"
            target = f"0 50 {port.container_port} {pod.hostname}.{svc_domain}"
            endpoints.append(new_endpoint(record_name, RECORD_TYPE_SRV, target, ttl=ttl))
    return endpoints


def _headless_domains(pod: Pod, hostname: str) -> list[str]:
    domains = [hostname]
    if pod.hostname:
        domains.append(f"{pod.hostname}.{hostname}")
    return domains


def headless_endpoints(
    service: Service,
    hostname: str,
    ttl: int | None,
    provider: ClusterStateProvider,
    *,
    publish_host_ip: bool = False,
    always_publish_not_ready: bool = False,
) -> list[Endpoint]:
    """Build the records of a headless service.

    Returns SRV records first, then one address record per
    (domain, record type) sorted by domain and type. Lookup failures are
    logged; they reduce the result rather than failing the pass.
    """
    try:
        endpoints_object = provider.get_endpoints(service.namespace, service.name)
    except ProviderError as e:
        logger.error("Get endpoints of service %s error: %s", service, e)
        return []

    try:
        pods = provider.list_pods(service.namespace, Selector.from_labels(service.selector))
    except ProviderError as e:
        logger.error("List pods of service %s error: %s", service, e)
        return []
    pods_by_name = {pod.name: pod for pod in pods}

    endpoints_type = ann.endpoints_type(service.annotations)
    publish_not_ready = service.publish_not_ready_addresses or always_publish_not_ready

    srv_endpoints: list[Endpoint] = []
    targets_by_key: dict[tuple[str, str], list[str]] = {}

    for subset in endpoints_object.subsets:
        addresses = list(subset.addresses)
        if publish_not_ready:
            addresses.extend(subset.not_ready_addresses)

        for address in addresses:
            ref = address.target_ref
            if ref is None or ref.kind != "Pod":
                logger.debug("Skipping address %s because its target is not a pod", address.ip)
                continue
            pod = pods_by_name.get(ref.name)
            if pod is None:
                logger.error("Pod %s not found for address %s", ref.name, address.ip)
                continue

            srv_endpoints.extend(_srv_endpoints(service, pod, hostname, ttl))

            try:
                targets = _pod_targets(pod, address.ip, endpoints_type, publish_host_ip, provider)
            except ProviderError as e:
                logger.error(
                    "Get node %r of pod %s error: %s; not adding any NodeExternalIP endpoints",
                    pod.node_name, pod.name, e,
                )
                break

            for domain in _headless_domains(pod, hostname):
                for target in targets:
                    key = (domain, suitable_type(target))
                    targets_by_key.setdefault(key, []).append(target)

    endpoints = srv_endpoints
    for domain, record_type in sorted(targets_by_key):
        targets = list(dict.fromkeys(targets_by_key[(domain, record_type)]))
        endpoints.append(new_endpoint(domain, record_type, *targets, ttl=ttl))

    for ep in endpoints:
        logger.debug("Generated headless endpoint: %s", ep)
    return endpoints


def _pod_targets(
    pod: Pod,
    address_ip: str,
    endpoints_type: str,
    publish_host_ip: bool,
    provider: ClusterStateProvider,
) -> list[str]:
    """Address targets for one pod behind a headless service.

    Raises:
        ProviderError: If the pod's node is needed but cannot be fetched.
    """
    targets = ann.targets_from_annotation(pod.annotations)
    if targets:
        return targets

    if endpoints_type == ann.ENDPOINTS_TYPE_NODE_EXTERNAL_IP:
        node = provider.get_node(pod.node_name)
        return [
            a.address for a in node.addresses
            if a.type == NODE_EXTERNAL_IP
            or (a.type == NODE_INTERNAL_IP and is_ipv6(a.address))
        ]
    if endpoints_type == ann.ENDPOINTS_TYPE_HOST_IP or publish_host_ip:
        return [pod.host_ip] if pod.host_ip else []
    return [address_ip]
