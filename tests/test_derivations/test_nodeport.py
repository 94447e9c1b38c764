"""Tests for NodePort targets and SRV records."""

import pytest

from svc2dns.derivations import annotations as ann
from svc2dns.derivations.nodeport import node_port_srv_endpoints, node_port_targets
from svc2dns.errors import ProviderError
from svc2dns.models.cluster import (
    Node,
    NodeAddress,
    Pod,
    PodCondition,
    Service,
    ServicePort,
)
from svc2dns.models.endpoint import Endpoint
from svc2dns.sources.snapshot import ClusterSnapshot


def _node(name, external=None, internal=None):
    addresses = []
    if external:
        addresses.append(NodeAddress(type="ExternalIP", address=external))
    for address in internal or ():
        addresses.append(NodeAddress(type="InternalIP", address=address))
    return Node(name=name, addresses=tuple(addresses))


def _pod(name, node, phase="Running", ready=True, terminating=False):
    return Pod(
        namespace="default",
        name=name,
        node_name=node,
        phase=phase,
        conditions=(PodCondition(type="Ready", status="True" if ready else "False"),),
        deletion_timestamp="2024-01-01T00:00:00Z" if terminating else None,
        labels={"app": "web"},
    )


def _service(annotations=None, policy="Cluster"):
    return Service(
        namespace="default",
        name="web",
        type="NodePort",
        annotations=annotations or {},
        external_traffic_policy=policy,
        selector={"app": "web"},
        ports=(ServicePort(name="http", protocol="TCP", port=80, node_port=30080),),
    )


NODES = [
    _node("n1", external="203.0.113.1", internal=["10.0.0.1", "2001:db8::1"]),
    _node("n2", external="203.0.113.2", internal=["10.0.0.2"]),
    _node("n3", internal=["10.0.0.3"]),
]


class TestClusterPolicy:
    def test_default_prefers_external(self):
        snapshot = ClusterSnapshot(nodes=NODES)
        assert node_port_targets(_service(), snapshot) == [
            "203.0.113.1", "203.0.113.2", "2001:db8::1",
        ]

    def test_public(self):
        snapshot = ClusterSnapshot(nodes=NODES)
        service = _service({ann.ACCESS_KEY: "public"})
        assert node_port_targets(service, snapshot) == [
            "203.0.113.1", "203.0.113.2", "2001:db8::1",
        ]

    def test_private(self):
        snapshot = ClusterSnapshot(nodes=NODES)
        service = _service({ann.ACCESS_KEY: "private"})
        assert node_port_targets(service, snapshot) == [
            "10.0.0.1", "2001:db8::1", "10.0.0.2", "10.0.0.3",
        ]

    def test_default_falls_back_to_internal(self):
        snapshot = ClusterSnapshot(nodes=[_node("n3", internal=["10.0.0.3"])])
        assert node_port_targets(_service(), snapshot) == ["10.0.0.3"]

    def test_public_without_external_ips(self):
        snapshot = ClusterSnapshot(nodes=[_node("n3", internal=["10.0.0.3"])])
        service = _service({ann.ACCESS_KEY: "public"})
        assert node_port_targets(service, snapshot) == []


class TestLocalPolicy:
    def test_only_nodes_with_pods(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[_pod("p1", "n2")])
        assert node_port_targets(_service(policy="Local"), snapshot) == ["203.0.113.2"]

    def test_prefers_non_terminating(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[
            _pod("p1", "n1", terminating=True),
            _pod("p2", "n2"),
        ])
        assert node_port_targets(_service(policy="Local"), snapshot) == ["203.0.113.2"]

    def test_falls_back_to_terminating_ready(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[
            _pod("p1", "n1", terminating=True),
            _pod("p2", "n2", ready=False),
        ])
        assert node_port_targets(_service(policy="Local"), snapshot) == [
            "203.0.113.1", "2001:db8::1",
        ]

    def test_falls_back_to_running(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[
            _pod("p1", "n2", ready=False),
            _pod("p2", "n1", phase="Pending"),
        ])
        assert node_port_targets(_service(policy="Local"), snapshot) == ["203.0.113.2"]

    def test_node_listed_once(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[_pod("p1", "n2"), _pod("p2", "n2")])
        assert node_port_targets(_service(policy="Local"), snapshot) == ["203.0.113.2"]

    def test_node_with_terminating_and_live_pods_stays_live(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[
            _pod("a-old", "n1", terminating=True),
            _pod("b-new", "n1"),
            _pod("c", "n2"),
        ])
        assert node_port_targets(_service(policy="Local"), snapshot) == [
            "203.0.113.1", "203.0.113.2", "2001:db8::1",
        ]

    def test_tiers_checked_per_pod(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[
            _pod("a", "n1", ready=False),
            _pod("b", "n1", terminating=True),
        ])
        assert node_port_targets(_service(policy="Local"), snapshot) == [
            "203.0.113.1", "2001:db8::1",
        ]

    def test_missing_node_skipped(self):
        snapshot = ClusterSnapshot(nodes=NODES, pods=[_pod("p1", "gone"), _pod("p2", "n2")])
        assert node_port_targets(_service(policy="Local"), snapshot) == ["203.0.113.2"]

    def test_pods_of_other_services_ignored(self):
        other = Pod(namespace="default", name="x", node_name="n1", phase="Running",
                    conditions=(PodCondition(type="Ready", status="True"),),
                    labels={"app": "db"})
        snapshot = ClusterSnapshot(nodes=NODES, pods=[other, _pod("p1", "n2")])
        assert node_port_targets(_service(policy="Local"), snapshot) == ["203.0.113.2"]


class _BrokenNodes(ClusterSnapshot):
    def list_nodes(self, selector):
        raise ProviderError("api unavailable")


class TestProviderFailure:
    def test_list_nodes_failure_propagates(self):
        with pytest.raises(ProviderError):
            node_port_targets(_service(), _BrokenNodes())


class TestSrvEndpoints:
    def test_srv_per_node_port(self):
        service = Service(
            namespace="default", name="web", type="NodePort",
            ports=(
                ServicePort(name="http", protocol="TCP", port=80, node_port=30080),
                ServicePort(name="dns", protocol="UDP", port=53, node_port=30053),
                ServicePort(name="none", protocol="TCP", port=81),
            ),
        )
        assert node_port_srv_endpoints(service, "web.example.com", 60) == [
            Endpoint("_web._tcp.web.example.com", "SRV", ["0 50 30080 web.example.com"], 60),
            Endpoint("_web._udp.web.example.com", "SRV", ["0 50 30053 web.example.com"], 60),
        ]

    def test_default_protocol(self):
        service = Service(
            namespace="default", name="web", type="NodePort",
            ports=(ServicePort(port=80, node_port=30080),),
        )
        [ep] = node_port_srv_endpoints(service, "web.example.com", None)
        assert ep.dns_name == "_web._tcp.web.example.com"
        assert ep.record_ttl is None
