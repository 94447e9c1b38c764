"""Exception types raised by svc2dns."""

from __future__ import annotations


class Svc2DnsError(Exception):
    """Base class for all svc2dns errors."""


class ConfigurationError(Svc2DnsError):
    """Invalid source configuration; raised before any pass runs."""


class SelectorError(ConfigurationError):
    """A label or annotation selector expression could not be parsed."""


class ProviderError(Svc2DnsError):
    """The cluster state provider could not answer a query."""


class NotFoundError(ProviderError):
    """A named object is not present in the cluster state provider.

    Attributes:
        kind: Object kind (e.g. 'Node', 'Endpoints')
        name: Object name, namespace-qualified where it applies
    """

    def __init__(self, kind: str, name: str) -> None:
        super().__init__(f"{kind} {name!r} not found")
        self.kind = kind
        self.name = name


class ResolutionError(Svc2DnsError):
    """A hostname could not be resolved to any address."""


class TemplateRenderError(Svc2DnsError):
    """The FQDN template failed to render for a service."""


class SnapshotError(Svc2DnsError):
    """A cluster snapshot file is malformed."""
