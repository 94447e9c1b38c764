"""Data models for cluster snapshots and DNS endpoints."""

from svc2dns.models.cluster import (
    EndpointAddress,
    EndpointsObject,
    EndpointSubset,
    Node,
    Pod,
    Service,
)
from svc2dns.models.endpoint import Endpoint, ProviderSpecificProperty

__all__ = [
    "Endpoint",
    "EndpointAddress",
    "EndpointsObject",
    "EndpointSubset",
    "Node",
    "Pod",
    "ProviderSpecificProperty",
    "Service",
]
