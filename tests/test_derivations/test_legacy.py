"""Tests for compatibility-mode annotations."""

from svc2dns.derivations.legacy import (
    KOPS_EXTERNAL_HOSTNAME_KEY,
    KOPS_INTERNAL_HOSTNAME_KEY,
    MATE_HOSTNAME_KEY,
    MOLECULE_HOSTNAME_KEY,
    kops_dns_controller_endpoints,
    legacy_endpoints,
    mate_endpoints,
    molecule_endpoints,
)
from svc2dns.models.cluster import LoadBalancerIngress, Node, NodeAddress, Service
from svc2dns.models.endpoint import Endpoint
from svc2dns.sources.snapshot import ClusterSnapshot

INGRESS = (
    LoadBalancerIngress(ip="198.51.100.1"),
    LoadBalancerIngress(hostname="lb.example.com"),
)

NODES = [
    Node(name="n1", addresses=(
        NodeAddress(type="ExternalIP", address="203.0.113.1"),
        NodeAddress(type="InternalIP", address="10.0.0.1"),
    )),
    Node(name="n2", addresses=(
        NodeAddress(type="InternalIP", address="2001:db8::2"),
    )),
]


def _service(annotations=None, labels=None, type="LoadBalancer"):
    return Service(
        namespace="default",
        name="web",
        type=type,
        annotations=annotations or {},
        labels=labels or {},
        load_balancer_ingress=INGRESS,
    )


class TestMate:
    def test_hostname(self):
        service = _service({MATE_HOSTNAME_KEY: "web.example.com"})
        assert mate_endpoints(service) == [
            Endpoint("web.example.com", "A", ["198.51.100.1"]),
            Endpoint("web.example.com", "CNAME", ["lb.example.com"]),
        ]

    def test_missing(self):
        assert mate_endpoints(_service()) == []


class TestMolecule:
    def test_requires_route53_label(self):
        service = _service({MOLECULE_HOSTNAME_KEY: "web.example.com"})
        assert molecule_endpoints(service) == []

    def test_hostnames(self):
        service = _service(
            {MOLECULE_HOSTNAME_KEY: "a.example.com,b.example.com"},
            labels={"dns": "route53"},
        )
        assert [ep.dns_name for ep in molecule_endpoints(service)] == [
            "a.example.com", "a.example.com", "b.example.com", "b.example.com",
        ]


class TestKopsDnsController:
    def test_load_balancer_external(self):
        service = _service({KOPS_EXTERNAL_HOSTNAME_KEY: "web.example.com"})
        assert kops_dns_controller_endpoints(service, ClusterSnapshot()) == [
            Endpoint("web.example.com", "A", ["198.51.100.1"]),
            Endpoint("web.example.com", "CNAME", ["lb.example.com"]),
        ]

    def test_load_balancer_internal_ignored(self):
        service = _service({KOPS_INTERNAL_HOSTNAME_KEY: "web.internal"})
        assert kops_dns_controller_endpoints(service, ClusterSnapshot()) == []

    def test_both_annotations_ignored(self):
        service = _service({
            KOPS_EXTERNAL_HOSTNAME_KEY: "web.example.com",
            KOPS_INTERNAL_HOSTNAME_KEY: "web.internal",
        })
        assert kops_dns_controller_endpoints(service, ClusterSnapshot()) == []

    def test_node_port_external(self):
        service = _service({KOPS_EXTERNAL_HOSTNAME_KEY: "web.example.com"}, type="NodePort")
        assert kops_dns_controller_endpoints(service, ClusterSnapshot(nodes=NODES)) == [
            Endpoint("web.example.com", "A", ["203.0.113.1"]),
        ]

    def test_node_port_internal(self):
        service = _service({KOPS_INTERNAL_HOSTNAME_KEY: "web.internal"}, type="NodePort")
        assert kops_dns_controller_endpoints(service, ClusterSnapshot(nodes=NODES)) == [
            Endpoint("web.internal", "A", ["10.0.0.1"]),
            Endpoint("web.internal", "AAAA", ["2001:db8::2"]),
        ]

    def test_cluster_ip_ignored(self):
        service = _service({KOPS_EXTERNAL_HOSTNAME_KEY: "web.example.com"}, type="ClusterIP")
        assert kops_dns_controller_endpoints(service, ClusterSnapshot(nodes=NODES)) == []


class TestLegacyEndpoints:
    def test_dispatch(self):
        service = _service({MATE_HOSTNAME_KEY: "web.example.com"})
        assert legacy_endpoints(service, "mate", ClusterSnapshot()) == mate_endpoints(service)

    def test_disabled(self):
        service = _service({MATE_HOSTNAME_KEY: "web.example.com"})
        assert legacy_endpoints(service, "", ClusterSnapshot()) == []
