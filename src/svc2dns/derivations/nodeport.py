"""NodePort services: node address targets and SRV records.

Target selection depends on the external traffic policy. With 'Local',
only nodes that run a backing pod can route traffic, so those are
selected in three tiers, most preferred first:

  1. Nodes with a Running, Ready pod that is not terminating
  2. Nodes with a Running, Ready pod
  3. Nodes with a Running pod

Otherwise every node in the cluster is a target.
"""

from __future__ import annotations

import logging

from svc2dns.derivations import annotations as ann
from svc2dns.errors import NotFoundError
from svc2dns.models.cluster import (
    NODE_EXTERNAL_IP,
    NODE_INTERNAL_IP,
    TRAFFIC_POLICY_LOCAL,
    Node,
    Service,
)
from svc2dns.models.endpoint import RECORD_TYPE_SRV, Endpoint, new_endpoint
from svc2dns.sources.provider import ClusterStateProvider
from svc2dns.utils.ip import is_ipv6
from svc2dns.utils.selector import EVERYTHING, Selector

logger = logging.getLogger(__name__)


def _local_policy_nodes(service: Service, provider: ClusterStateProvider) -> list[Node]:
    """Nodes hosting a running pod of the service, best tier first."""
    pods = provider.list_pods(service.namespace, Selector.from_labels(service.selector))

    # Each tier maps node name -> node, in first-seen order
    running: dict[str, Node] = {}
    ready: dict[str, Node] = {}
    live: dict[str, Node] = {}
    for pod in pods:
        if not pod.is_running:
            continue
        try:
            node = provider.get_node(pod.node_name)
        except NotFoundError:
            logger.debug("Unable to find node %r where pod %s/%s is running",
                         pod.node_name, pod.namespace, pod.name)
            continue

        running.setdefault(node.name, node)
        if pod.is_ready:
            ready.setdefault(node.name, node)
            if not pod.is_terminating:
                live.setdefault(node.name, node)

    if live:
        return list(live.values())
    if ready:
        logger.debug("All pods of %s are terminating, using ready pods", service)
        return list(ready.values())
    logger.debug("No pods of %s are ready, using all running pods", service)
    return list(running.values())


def node_port_targets(service: Service, provider: ClusterStateProvider) -> list[str]:
    """Node addresses a NodePort service should be published on.

    The access annotation picks the address family: 'public' gives
    external IPs plus IPv6 internal IPs, 'private' gives internal IPs,
    and unset behaves like 'public' unless no node has an external IP.

    Raises:
        ProviderError: If pods or nodes cannot be listed.
    """
    if service.external_traffic_policy == TRAFFIC_POLICY_LOCAL:
        nodes = _local_policy_nodes(service, provider)
    else:
        nodes = provider.list_nodes(EVERYTHING)

    external_ips: list[str] = []
    internal_ips: list[str] = []
    ipv6_ips: list[str] = []
    for node in nodes:
        for address in node.addresses:
            if address.type == NODE_EXTERNAL_IP:
                external_ips.append(address.address)
            elif address.type == NODE_INTERNAL_IP:
                internal_ips.append(address.address)
                if is_ipv6(address.address):
                    ipv6_ips.append(address.address)

    access = ann.access(service.annotations)
    if access == ann.ACCESS_PUBLIC:
        return external_ips + ipv6_ips
    if access == ann.ACCESS_PRIVATE:
        return internal_ips
    if external_ips:
        return external_ips + ipv6_ips
    return internal_ips


def node_port_srv_endpoints(service: Service, hostname: str, ttl: int | None) -> list[Endpoint]:
    """One SRV record per port with an allocated node port.

    Follows RFC 2782 naming, ``_service._proto.name``, with priority 0
    and weight 50.
    """
    endpoints = []
    for port in service.ports:
        if port.node_port <= 0:
            continue
        protocol = port.protocol.lower() or "tcp"
        record_name = f"_{service.name}._{protocol}.{hostname}"
        target = f"0 50 {port.node_port} {hostname}"
        endpoints.append(new_endpoint(record_name, RECORD_TYPE_SRV, target, ttl=ttl))

    for ep in endpoints:
        logger.debug("Generated node port endpoint: %s", ep)
    return endpoints
