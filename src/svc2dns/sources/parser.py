"""Kubernetes object parser: convert API JSON into snapshot models.

Accepts objects in the shape returned by the API server (and by
``kubectl get -o json``). Only the fields the derivations use are read;
missing optional fields fall back to their API defaults.
"""

from __future__ import annotations

from typing import Any

from svc2dns.errors import SnapshotError
from svc2dns.models.cluster import (
    SERVICE_TYPE_CLUSTER_IP,
    TRAFFIC_POLICY_CLUSTER,
    Container,
    ContainerPort,
    EndpointAddress,
    EndpointsObject,
    EndpointSubset,
    LoadBalancerIngress,
    Node,
    NodeAddress,
    ObjectReference,
    Pod,
    PodCondition,
    Service,
    ServicePort,
)


def _metadata(obj: dict[str, Any]) -> dict[str, Any]:
    metadata = obj.get("metadata")
    if not isinstance(metadata, dict) or not metadata.get("name"):
        raise SnapshotError(f"{obj.get('kind', 'object')} without metadata.name")
    return metadata


def _string_map(value: Any) -> dict[str, str]:
    if not value:
        return {}
    return {str(k): str(v) for k, v in value.items()}


def parse_service(obj: dict[str, Any]) -> Service:
    metadata = _metadata(obj)
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}
    ingress = (status.get("loadBalancer") or {}).get("ingress") or []

    return Service(
        namespace=metadata.get("namespace", "default"),
        name=metadata["name"],
        labels=_string_map(metadata.get("labels")),
        annotations=_string_map(metadata.get("annotations")),
        type=spec.get("type") or SERVICE_TYPE_CLUSTER_IP,
        cluster_ip=spec.get("clusterIP", ""),
        external_ips=tuple(spec.get("externalIPs") or ()),
        external_name=spec.get("externalName", ""),
        external_traffic_policy=spec.get("externalTrafficPolicy") or TRAFFIC_POLICY_CLUSTER,
        load_balancer_ingress=tuple(
            LoadBalancerIngress(ip=i.get("ip", ""), hostname=i.get("hostname", ""))
            for i in ingress
        ),
        ports=tuple(
            ServicePort(
                name=p.get("name", ""),
                protocol=p.get("protocol", ""),
                port=int(p.get("port", 0)),
                node_port=int(p.get("nodePort", 0)),
            )
            for p in spec.get("ports") or ()
        ),
        selector=_string_map(spec.get("selector")),
        publish_not_ready_addresses=bool(spec.get("publishNotReadyAddresses", False)),
    )


def parse_pod(obj: dict[str, Any]) -> Pod:
    metadata = _metadata(obj)
    spec = obj.get("spec") or {}
    status = obj.get("status") or {}

    return Pod(
        namespace=metadata.get("namespace", "default"),
        name=metadata["name"],
        hostname=spec.get("hostname", ""),
        node_name=spec.get("nodeName", ""),
        phase=status.get("phase", ""),
        host_ip=status.get("hostIP", ""),
        conditions=tuple(
            PodCondition(type=c.get("type", ""), status=c.get("status", ""))
            for c in status.get("conditions") or ()
        ),
        deletion_timestamp=metadata.get("deletionTimestamp"),
        labels=_string_map(metadata.get("labels")),
        annotations=_string_map(metadata.get("annotations")),
        containers=tuple(
            Container(
                name=c.get("name", ""),
                ports=tuple(
                    ContainerPort(
                        name=p.get("name", ""),
                        protocol=p.get("protocol", ""),
                        container_port=int(p.get("containerPort", 0)),
                    )
                    for p in c.get("ports") or ()
                ),
            )
            for c in spec.get("containers") or ()
        ),
    )


def parse_node(obj: dict[str, Any]) -> Node:
    metadata = _metadata(obj)
    status = obj.get("status") or {}
    return Node(
        name=metadata["name"],
        labels=_string_map(metadata.get("labels")),
        addresses=tuple(
            NodeAddress(type=a.get("type", ""), address=a.get("address", ""))
            for a in status.get("addresses") or ()
        ),
    )


def _parse_address(obj: dict[str, Any]) -> EndpointAddress:
    ref = obj.get("targetRef")
    return EndpointAddress(
        ip=obj.get("ip", ""),
        hostname=obj.get("hostname", ""),
        node_name=obj.get("nodeName", ""),
        target_ref=ObjectReference(
            kind=ref.get("kind", ""),
            name=ref.get("name", ""),
            namespace=ref.get("namespace", ""),
        ) if ref else None,
    )


def parse_endpoints(obj: dict[str, Any]) -> EndpointsObject:
    metadata = _metadata(obj)
    return EndpointsObject(
        namespace=metadata.get("namespace", "default"),
        name=metadata["name"],
        subsets=tuple(
            EndpointSubset(
                addresses=tuple(_parse_address(a) for a in s.get("addresses") or ()),
                not_ready_addresses=tuple(
                    _parse_address(a) for a in s.get("notReadyAddresses") or ()
                ),
            )
            for s in obj.get("subsets") or ()
        ),
    )


PARSERS = {
    "Service": parse_service,
    "Pod": parse_pod,
    "Node": parse_node,
    "Endpoints": parse_endpoints,
}


def flatten_items(document: Any) -> list[dict[str, Any]]:
    """Flatten a JSON document into a list of API objects.

    Accepts a single object, a ``List`` (or any object with ``items``) and
    a bare JSON array, nested arbitrarily.
    """
    if isinstance(document, list):
        objects = []
        for item in document:
            objects.extend(flatten_items(item))
        return objects
    if not isinstance(document, dict):
        raise SnapshotError(f"expected a JSON object or array, got {type(document).__name__}")
    if (document.get("kind") or "").endswith("List") or ("items" in document and "metadata" not in document):
        return flatten_items(document.get("items") or [])
    return [document]
