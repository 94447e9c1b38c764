"""Output record model: a DNS name with its targets and metadata."""

from __future__ import annotations

from dataclasses import dataclass, field

RECORD_TYPE_A = "A"
RECORD_TYPE_AAAA = "AAAA"
RECORD_TYPE_CNAME = "CNAME"
RECORD_TYPE_SRV = "SRV"

# Label key recording which resource produced an endpoint
RESOURCE_LABEL_KEY = "resource"


@dataclass(frozen=True)
class ProviderSpecificProperty:
    """A provider-specific name/value pair passed through to the DNS sink."""

    name: str
    value: str


@dataclass
class Endpoint:
    """A desired DNS record set.

    Attributes:
        dns_name: Fully qualified name without trailing dot
        record_type: 'A', 'AAAA', 'CNAME' or 'SRV'
        targets: Record data; IPs, hostnames or SRV target strings
        record_ttl: TTL in seconds, None when unconfigured
        set_identifier: Routing-policy discriminator, '' for none
        provider_specific: Ordered provider-specific properties
        labels: Metadata; always carries RESOURCE_LABEL_KEY once owned
    """

    dns_name: str
    record_type: str
    targets: list[str] = field(default_factory=list)
    record_ttl: int | None = None
    set_identifier: str = ""
    provider_specific: list[ProviderSpecificProperty] = field(default_factory=list)
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def ttl_configured(self) -> bool:
        return self.record_ttl is not None

    @property
    def resource(self) -> str:
        return self.labels.get(RESOURCE_LABEL_KEY, "")

    def key(self) -> tuple[str, str, str, int | None]:
        """The identity used when merging records from different services."""
        return (self.dns_name, self.record_type, self.set_identifier, self.record_ttl)

    def __str__(self) -> str:
        ttl = f" (TTL={self.record_ttl})" if self.record_ttl is not None else ""
        return f"{self.dns_name} {self.record_type} {self.targets}{ttl}"


def new_endpoint(
    dns_name: str,
    record_type: str,
    *targets: str,
    ttl: int | None = None,
) -> Endpoint:
    """Create an endpoint with a fresh label map.

    >>> new_endpoint('a.example.com', 'A', '10.0.0.1', ttl=60)
    Endpoint(dns_name='a.example.com', record_type='A', targets=['10.0.0.1'], record_ttl=60, set_identifier='', provider_specific=[], labels={})
    """
    return Endpoint(
        dns_name=dns_name,
        record_type=record_type,
        targets=list(targets),
        record_ttl=ttl,
    )
