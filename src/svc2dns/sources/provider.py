"""Cluster state provider protocol: the read-only view the derivations query."""

from __future__ import annotations

from typing import Callable, Protocol

from svc2dns.models.cluster import EndpointsObject, Node, Pod, Service
from svc2dns.utils.selector import Selector


class ClusterStateProvider(Protocol):
    """Protocol for cluster state providers.

    All calls are synchronous reads against a locally cached, eventually
    consistent mirror of the cluster. An empty namespace means all
    namespaces. Lookups of a single object raise NotFoundError when the
    object is absent; any other failure raises ProviderError.
    """

    def list_services(self, namespace: str, selector: Selector) -> list[Service]:
        ...

    def get_endpoints(self, namespace: str, name: str) -> EndpointsObject:
        ...

    def list_pods(self, namespace: str, selector: Selector) -> list[Pod]:
        ...

    def list_nodes(self, selector: Selector) -> list[Node]:
        ...

    def get_node(self, name: str) -> Node:
        ...

    def add_service_event_handler(self, handler: Callable[[], None]) -> None:
        """Register a callback run whenever the set of Services changes."""
        ...
