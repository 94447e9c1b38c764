"""Cluster snapshot models: Services, Pods, Nodes and Endpoints objects.

These are read-only views of the Kubernetes objects a reconciliation pass
looks at. Only the fields the derivations need are carried; everything
else in the API object is dropped by the parser.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Service types
SERVICE_TYPE_CLUSTER_IP = "ClusterIP"
SERVICE_TYPE_LOAD_BALANCER = "LoadBalancer"
SERVICE_TYPE_NODE_PORT = "NodePort"
SERVICE_TYPE_EXTERNAL_NAME = "ExternalName"

SERVICE_TYPES = (
    SERVICE_TYPE_CLUSTER_IP,
    SERVICE_TYPE_LOAD_BALANCER,
    SERVICE_TYPE_NODE_PORT,
    SERVICE_TYPE_EXTERNAL_NAME,
)

# Sentinel cluster IP of a headless service
CLUSTER_IP_NONE = "None"

TRAFFIC_POLICY_CLUSTER = "Cluster"
TRAFFIC_POLICY_LOCAL = "Local"

NODE_EXTERNAL_IP = "ExternalIP"
NODE_INTERNAL_IP = "InternalIP"

POD_RUNNING = "Running"
POD_READY = "Ready"


@dataclass(frozen=True)
class ServicePort:
    """A port exposed by a Service.

    Attributes:
        name: Port name (may be empty for single-port services)
        protocol: 'TCP', 'UDP' or 'SCTP'; empty means the API default
        port: The service port
        node_port: Allocated node port, 0 when none
    """

    name: str = ""
    protocol: str = ""
    port: int = 0
    node_port: int = 0


@dataclass(frozen=True)
class LoadBalancerIngress:
    """One load-balancer ingress point; carries an IP, a hostname, or both."""

    ip: str = ""
    hostname: str = ""


@dataclass(frozen=True)
class Service:
    """A Kubernetes Service.

    Attributes:
        namespace: Namespace the service lives in
        name: Service name
        type: One of SERVICE_TYPES
        cluster_ip: Allocated cluster IP, or CLUSTER_IP_NONE for headless
        external_ips: Explicitly declared external IPs
        external_name: Target of an ExternalName service
        external_traffic_policy: 'Cluster' or 'Local'
        load_balancer_ingress: Ingress points from the load-balancer status
        ports: Declared service ports
        selector: Pod label selector
        publish_not_ready_addresses: Publish endpoints of unready pods too
    """

    namespace: str
    name: str
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    type: str = SERVICE_TYPE_CLUSTER_IP
    cluster_ip: str = ""
    external_ips: tuple[str, ...] = ()
    external_name: str = ""
    external_traffic_policy: str = TRAFFIC_POLICY_CLUSTER
    load_balancer_ingress: tuple[LoadBalancerIngress, ...] = ()
    ports: tuple[ServicePort, ...] = ()
    selector: dict[str, str] = field(default_factory=dict)
    publish_not_ready_addresses: bool = False

    @property
    def is_headless(self) -> bool:
        return self.cluster_ip == CLUSTER_IP_NONE

    @property
    def resource(self) -> str:
        """The ownership label value for records produced from this service.

        >>> Service(namespace='ns', name='web').resource
        'service/ns/web'
        """
        return f"service/{self.namespace}/{self.name}"

    def __str__(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass(frozen=True)
class ContainerPort:
    name: str = ""
    protocol: str = ""
    container_port: int = 0


@dataclass(frozen=True)
class Container:
    name: str
    ports: tuple[ContainerPort, ...] = ()


@dataclass(frozen=True)
class PodCondition:
    type: str
    status: str


@dataclass(frozen=True)
class Pod:
    """A Kubernetes Pod.

    Attributes:
        hostname: spec.hostname, empty unless the pod sets one
        node_name: Node the pod is scheduled on
        phase: status.phase ('Pending', 'Running', ...)
        host_ip: status.hostIP
        conditions: status.conditions
        deletion_timestamp: Set once the pod is terminating
    """

    namespace: str
    name: str
    hostname: str = ""
    node_name: str = ""
    phase: str = ""
    host_ip: str = ""
    conditions: tuple[PodCondition, ...] = ()
    deletion_timestamp: str | None = None
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    containers: tuple[Container, ...] = ()

    @property
    def is_running(self) -> bool:
        return self.phase == POD_RUNNING

    @property
    def is_ready(self) -> bool:
        """True if the pod has a Ready condition with status True."""
        for condition in self.conditions:
            if condition.type == POD_READY:
                return condition.status == "True"
        return False

    @property
    def is_terminating(self) -> bool:
        return self.deletion_timestamp is not None


@dataclass(frozen=True)
class NodeAddress:
    type: str
    address: str


@dataclass(frozen=True)
class Node:
    """A Kubernetes Node and the addresses reported in its status."""

    name: str
    labels: dict[str, str] = field(default_factory=dict)
    addresses: tuple[NodeAddress, ...] = ()

    def addresses_of_type(self, address_type: str) -> list[str]:
        return [a.address for a in self.addresses if a.type == address_type]


@dataclass(frozen=True)
class ObjectReference:
    kind: str
    name: str
    namespace: str = ""


@dataclass(frozen=True)
class EndpointAddress:
    ip: str
    hostname: str = ""
    node_name: str = ""
    target_ref: ObjectReference | None = None


@dataclass(frozen=True)
class EndpointSubset:
    addresses: tuple[EndpointAddress, ...] = ()
    not_ready_addresses: tuple[EndpointAddress, ...] = ()


@dataclass(frozen=True)
class EndpointsObject:
    """The low-level Endpoints object backing a Service (same name)."""

    namespace: str
    name: str
    subsets: tuple[EndpointSubset, ...] = ()
