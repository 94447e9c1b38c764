"""In-memory cluster state provider backed by a snapshot of API objects.

Objects are usually loaded from ``kubectl get services,endpoints,pods,nodes
-A -o json`` output. A watcher may keep the snapshot current by calling
the ``set_*`` methods; registered service handlers run after every change
to the set of Services.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Iterable

from svc2dns.errors import NotFoundError, SnapshotError
from svc2dns.models.cluster import EndpointsObject, Node, Pod, Service
from svc2dns.sources.parser import PARSERS, flatten_items
from svc2dns.utils.selector import Selector

logger = logging.getLogger(__name__)


def _in_namespace(namespace: str, obj_namespace: str) -> bool:
    return not namespace or namespace == obj_namespace


class ClusterSnapshot:
    """A ClusterStateProvider holding cluster objects in memory."""

    def __init__(
        self,
        services: Iterable[Service] = (),
        endpoints: Iterable[EndpointsObject] = (),
        pods: Iterable[Pod] = (),
        nodes: Iterable[Node] = (),
    ) -> None:
        self._lock = threading.Lock()
        self._services = {(s.namespace, s.name): s for s in services}
        self._endpoints = {(e.namespace, e.name): e for e in endpoints}
        self._pods = {(p.namespace, p.name): p for p in pods}
        self._nodes = {n.name: n for n in nodes}
        self._service_handlers: list[Callable[[], None]] = []

    # -- loading -------------------------------------------------------------

    @classmethod
    def from_objects(cls, objects: Iterable[dict[str, Any]]) -> ClusterSnapshot:
        """Build a snapshot from API objects; unknown kinds are skipped.

        Raises:
            SnapshotError: If an object of a known kind is malformed.
        """
        parsed: dict[str, list] = {kind: [] for kind in PARSERS}
        for obj in objects:
            kind = obj.get("kind", "")
            parser = PARSERS.get(kind)
            if parser is None:
                logger.debug("Ignoring object of kind %r", kind)
                continue
            try:
                parsed[kind].append(parser(obj))
            except (TypeError, ValueError, AttributeError) as e:
                name = (obj.get("metadata") or {}).get("name", "?")
                raise SnapshotError(f"malformed {kind} {name!r}: {e}") from e

        return cls(
            services=parsed["Service"],
            endpoints=parsed["Endpoints"],
            pods=parsed["Pod"],
            nodes=parsed["Node"],
        )

    @classmethod
    def from_json(cls, text: str) -> ClusterSnapshot:
        try:
            document = json.loads(text)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"invalid JSON: {e}") from e
        return cls.from_objects(flatten_items(document))

    @classmethod
    def from_file(cls, path: Path | str) -> ClusterSnapshot:
        """Load a snapshot from a JSON file.

        Raises:
            FileNotFoundError: If the file does not exist.
            SnapshotError: If the file content is not a valid snapshot.
        """
        text = Path(path).read_text(encoding="utf-8")
        try:
            return cls.from_json(text)
        except SnapshotError as e:
            raise SnapshotError(f"{path}: {e}") from e

    # -- ClusterStateProvider ------------------------------------------------

    def list_services(self, namespace: str, selector: Selector) -> list[Service]:
        with self._lock:
            services = list(self._services.values())
        return sorted(
            (s for s in services
             if _in_namespace(namespace, s.namespace) and selector.matches(s.labels)),
            key=lambda s: (s.namespace, s.name),
        )

    def get_endpoints(self, namespace: str, name: str) -> EndpointsObject:
        with self._lock:
            endpoints = self._endpoints.get((namespace, name))
        if endpoints is None:
            raise NotFoundError("Endpoints", f"{namespace}/{name}")
        return endpoints

    def list_pods(self, namespace: str, selector: Selector) -> list[Pod]:
        with self._lock:
            pods = list(self._pods.values())
        return sorted(
            (p for p in pods
             if _in_namespace(namespace, p.namespace) and selector.matches(p.labels)),
            key=lambda p: (p.namespace, p.name),
        )

    def list_nodes(self, selector: Selector) -> list[Node]:
        with self._lock:
            nodes = list(self._nodes.values())
        return sorted((n for n in nodes if selector.matches(n.labels)), key=lambda n: n.name)

    def get_node(self, name: str) -> Node:
        with self._lock:
            node = self._nodes.get(name)
        if node is None:
            raise NotFoundError("Node", name)
        return node

    def add_service_event_handler(self, handler: Callable[[], None]) -> None:
        with self._lock:
            self._service_handlers.append(handler)

    # -- updates -------------------------------------------------------------

    def set_service(self, service: Service) -> None:
        with self._lock:
            self._services[(service.namespace, service.name)] = service
        self._notify_services()

    def delete_service(self, namespace: str, name: str) -> None:
        with self._lock:
            removed = self._services.pop((namespace, name), None)
        if removed is not None:
            self._notify_services()

    def set_endpoints(self, endpoints: EndpointsObject) -> None:
        with self._lock:
            self._endpoints[(endpoints.namespace, endpoints.name)] = endpoints

    def set_pod(self, pod: Pod) -> None:
        with self._lock:
            self._pods[(pod.namespace, pod.name)] = pod

    def set_node(self, node: Node) -> None:
        with self._lock:
            self._nodes[node.name] = node

    def _notify_services(self) -> None:
        with self._lock:
            handlers = list(self._service_handlers)
        for handler in handlers:
            handler()
