"""Service source: reconcile all Services into one list of DNS endpoints.

This is the entry point of a reconciliation pass. It lists and filters
services, synthesizes records per service, stamps each record with its
owning service and merges everything into a stable, deduplicated list.
"""

from __future__ import annotations

import logging
from typing import Callable

from svc2dns.config import SourceConfig
from svc2dns.derivations.endpoints import SynthesisContext, endpoints_for_service
from svc2dns.derivations.legacy import COMPATIBILITY_MODES
from svc2dns.derivations.merge import merge_endpoints, set_resource_label
from svc2dns.errors import ConfigurationError
from svc2dns.models.cluster import SERVICE_TYPES, Service
from svc2dns.models.endpoint import Endpoint
from svc2dns.sources.provider import ClusterStateProvider
from svc2dns.utils.fqdn_template import parse_template
from svc2dns.utils.resolve import HostnameResolver, resolve_hostname
from svc2dns.utils.selector import Selector

logger = logging.getLogger(__name__)


class ServiceSource:
    """Derives DNS endpoints from the Services a provider knows about.

    Configuration is validated up front; a source that constructs
    successfully never fails a pass because of its configuration.

    Raises:
        ConfigurationError: From the constructor, for an invalid selector,
            template, compatibility mode or service type.
    """

    def __init__(
        self,
        provider: ClusterStateProvider,
        config: SourceConfig | None = None,
        resolver: HostnameResolver | None = None,
    ) -> None:
        config = config or SourceConfig()
        self.provider = provider
        self.config = config

        self.annotation_filter = Selector.parse(config.annotation_filter)
        self.label_selector = Selector.parse(config.label_filter)

        if config.compatibility and config.compatibility not in COMPATIBILITY_MODES:
            raise ConfigurationError(
                f"unknown compatibility mode {config.compatibility!r}, "
                f"expected one of {', '.join(COMPATIBILITY_MODES)}"
            )

        unknown_types = [t for t in config.service_types if t not in SERVICE_TYPES]
        if unknown_types:
            raise ConfigurationError(f"unknown service type(s): {', '.join(unknown_types)}")
        self.service_types = frozenset(config.service_types)

        if config.resolve_load_balancer_hostname:
            resolver = resolver or resolve_hostname
        else:
            resolver = None

        self.context = SynthesisContext(
            provider=provider,
            publish_internal=config.publish_internal,
            publish_host_ip=config.publish_host_ip,
            always_publish_not_ready=config.always_publish_not_ready_addresses,
            resolve_hostname=resolver,
            compatibility=config.compatibility,
            fqdn_template=parse_template(config.fqdn_template),
            combine_fqdn_annotation=config.combine_fqdn_annotation,
            ignore_hostname_annotation=config.ignore_hostname_annotation,
            controller=config.controller,
        )

    def services(self) -> list[Service]:
        """Services in scope after label, annotation and type filtering.

        Raises:
            ProviderError: If services cannot be listed.
        """
        services = self.provider.list_services(self.config.namespace, self.label_selector)
        if not self.annotation_filter.empty:
            services = [s for s in services if self.annotation_filter.matches(s.annotations)]
        if self.service_types:
            services = [s for s in services if s.type in self.service_types]
        return services

    def endpoints(self) -> list[Endpoint]:
        """Run one reconciliation pass.

        Raises:
            ProviderError: If services cannot be listed.
            TemplateRenderError: If the FQDN template fails for a service.
        """
        candidates: list[Endpoint] = []
        for service in self.services():
            svc_endpoints = endpoints_for_service(service, self.context)
            if not svc_endpoints:
                logger.debug("No endpoints could be generated from service %s", service)
                continue

            logger.debug("Endpoints generated from service %s: %s",
                         service, ", ".join(str(ep) for ep in svc_endpoints))
            set_resource_label(svc_endpoints, service.resource)
            candidates.extend(svc_endpoints)

        return merge_endpoints(candidates)

    def add_event_handler(self, handler: Callable[[], None]) -> None:
        """Call ``handler`` whenever the provider's set of Services changes."""
        logger.debug("Adding event handler for services")
        self.provider.add_service_event_handler(handler)
