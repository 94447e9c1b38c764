"""Endpoint synthesis: turn one Service and hostname into DNS records.

Per service, hostname sources are tried in this order:

  1. hostname annotations (public, then internal)
  2. compatibility-mode annotations, if 1 produced nothing
  3. the FQDN template, if nothing was produced so far or the template
     is combined with annotations
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from svc2dns.derivations import annotations as ann
from svc2dns.derivations.headless import headless_endpoints
from svc2dns.derivations.legacy import legacy_endpoints
from svc2dns.derivations.nodeport import node_port_srv_endpoints, node_port_targets
from svc2dns.derivations.targets import (
    cluster_ip_targets,
    external_name_targets,
    load_balancer_targets,
)
from svc2dns.errors import ProviderError
from svc2dns.models.cluster import (
    SERVICE_TYPE_CLUSTER_IP,
    SERVICE_TYPE_EXTERNAL_NAME,
    SERVICE_TYPE_LOAD_BALANCER,
    SERVICE_TYPE_NODE_PORT,
    Service,
)
from svc2dns.models.endpoint import (
    RECORD_TYPE_A,
    RECORD_TYPE_AAAA,
    RECORD_TYPE_CNAME,
    Endpoint,
    ProviderSpecificProperty,
)
from svc2dns.utils.fqdn_template import exec_template
from svc2dns.utils.ip import suitable_type

if TYPE_CHECKING:
    import jinja2

    from svc2dns.sources.provider import ClusterStateProvider
    from svc2dns.utils.resolve import HostnameResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisContext:
    """Everything endpoint synthesis needs besides the service itself.

    Attributes:
        provider: Cluster state to look up pods, nodes and endpoints in
        publish_internal: Publish cluster IPs of non-headless ClusterIP services
        publish_host_ip: Publish pod host IPs for headless services
        always_publish_not_ready: Include not-ready addresses of headless services
        resolve_hostname: Resolver for load-balancer hostnames, None to
            publish them as CNAME targets
        compatibility: Compatibility mode, '' when disabled
        fqdn_template: Compiled naming template, or None
        combine_fqdn_annotation: Add template names to annotation names
        ignore_hostname_annotation: Skip hostname annotations entirely
        controller: Controller identity for the controller annotation
    """

    provider: ClusterStateProvider
    publish_internal: bool = False
    publish_host_ip: bool = False
    always_publish_not_ready: bool = False
    resolve_hostname: HostnameResolver | None = None
    compatibility: str = ""
    fqdn_template: jinja2.Template | None = None
    combine_fqdn_annotation: bool = False
    ignore_hostname_annotation: bool = False
    controller: str = ann.CONTROLLER_VALUE


def _raw_targets(
    service: Service,
    hostname: str,
    ttl: int | None,
    use_cluster_ip: bool,
    context: SynthesisContext,
    endpoints: list[Endpoint],
) -> list[str] | None:
    """Targets for the service type; whole records go into ``endpoints``.

    Returns None when NodePort targets could not be computed, in which
    case the service contributes only what is already in ``endpoints``.
    """
    if service.type == SERVICE_TYPE_LOAD_BALANCER:
        if use_cluster_ip:
            return cluster_ip_targets(service)
        return load_balancer_targets(service, context.resolve_hostname)

    if service.type == SERVICE_TYPE_CLUSTER_IP:
        if service.is_headless:
            endpoints.extend(headless_endpoints(
                service, hostname, ttl, context.provider,
                publish_host_ip=context.publish_host_ip,
                always_publish_not_ready=context.always_publish_not_ready,
            ))
            return []
        if use_cluster_ip or context.publish_internal:
            return cluster_ip_targets(service)
        return []

    if service.type == SERVICE_TYPE_NODE_PORT:
        try:
            targets = node_port_targets(service, context.provider)
        except ProviderError as e:
            logger.error("Unable to extract targets from service %s error: %s", service, e)
            return None
        endpoints.extend(node_port_srv_endpoints(service, hostname, ttl))
        return targets

    if service.type == SERVICE_TYPE_EXTERNAL_NAME:
        return external_name_targets(service)

    return []


def generate_endpoints(
    service: Service,
    hostname: str,
    provider_specific: list[ProviderSpecificProperty],
    set_identifier: str,
    use_cluster_ip: bool,
    context: SynthesisContext,
) -> list[Endpoint]:
    """Build the records one hostname of a service resolves to.

    Targets come from the target annotation if present, otherwise from
    the service type. They are sorted into A, AAAA and CNAME records,
    which follow any SRV or headless records the service type produced.
    """
    if hostname.endswith("."):
        hostname = hostname[:-1]
    if not hostname:
        return []
    ttl = ann.ttl(service.annotations, service.resource)

    endpoints: list[Endpoint] = []
    targets = ann.targets_from_annotation(service.annotations)
    if not targets:
        targets = _raw_targets(service, hostname, ttl, use_cluster_ip, context, endpoints)
        if targets is None:
            return endpoints

    by_type: dict[str, list[str]] = {
        RECORD_TYPE_A: [],
        RECORD_TYPE_AAAA: [],
        RECORD_TYPE_CNAME: [],
    }
    for target in targets:
        bucket = by_type[suitable_type(target)]
        if target not in bucket:
            bucket.append(target)

    for record_type, type_targets in by_type.items():
        if type_targets:
            endpoints.append(Endpoint(
                dns_name=hostname,
                record_type=record_type,
                targets=type_targets,
                record_ttl=ttl,
            ))

    for ep in endpoints:
        ep.provider_specific = list(provider_specific)
        ep.set_identifier = set_identifier
    return endpoints


def endpoints_from_annotations(service: Service, context: SynthesisContext) -> list[Endpoint]:
    """Records for the hostname and internal-hostname annotations."""
    if context.ignore_hostname_annotation:
        return []

    provider_specific, set_identifier = ann.provider_specific_and_set_identifier(service.annotations)
    endpoints: list[Endpoint] = []
    for hostname in ann.hostnames(service.annotations):
        endpoints.extend(generate_endpoints(
            service, hostname, provider_specific, set_identifier, False, context,
        ))
    for hostname in ann.internal_hostnames(service.annotations):
        endpoints.extend(generate_endpoints(
            service, hostname, provider_specific, set_identifier, True, context,
        ))
    return endpoints


def endpoints_from_template(service: Service, context: SynthesisContext) -> list[Endpoint]:
    """Records for the hostnames the FQDN template renders.

    Raises:
        TemplateRenderError: If the template cannot be rendered.
    """
    if context.fqdn_template is None:
        return []

    provider_specific, set_identifier = ann.provider_specific_and_set_identifier(service.annotations)
    endpoints: list[Endpoint] = []
    for hostname in exec_template(context.fqdn_template, service):
        endpoints.extend(generate_endpoints(
            service, hostname, provider_specific, set_identifier, False, context,
        ))
    return endpoints


def endpoints_for_service(service: Service, context: SynthesisContext) -> list[Endpoint]:
    """All records a single service contributes, before ownership and merging.

    Raises:
        TemplateRenderError: If the FQDN template cannot be rendered.
    """
    if not ann.is_managed_by(service.annotations, context.controller):
        logger.debug(
            "Skipping service %s because controller value does not match, found: %s, required: %s",
            service, service.annotations.get(ann.CONTROLLER_KEY), context.controller,
        )
        return []

    endpoints = endpoints_from_annotations(service, context)

    if not endpoints and context.compatibility:
        try:
            endpoints = legacy_endpoints(service, context.compatibility, context.provider)
        except ProviderError as e:
            logger.error("Unable to build %s compatibility endpoints for service %s: %s",
                         context.compatibility, service, e)

    if context.fqdn_template is not None and (context.combine_fqdn_annotation or not endpoints):
        template_endpoints = endpoints_from_template(service, context)
        if context.combine_fqdn_annotation:
            endpoints = endpoints + template_endpoints
        else:
            endpoints = template_endpoints

    return endpoints
