"""Merging records from all services into one stable, deduplicated list.

Two services may ask for the same name. Their records are merged into
one, and the service that ends up owning the merged record must be the
same on every pass, otherwise the DNS sink would see a different owner
each time and rewrite the record. Sorting by owner first and then
stably by name and type makes the owner with the smallest resource
label win, whatever order the services were listed in.

The stable sort key also carries set identifier and TTL, so records
that can merge are always adjacent. Among records sharing a name and
type, output is therefore ordered by set identifier, then by TTL
(unconfigured first), and only then by owner.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from svc2dns.models.endpoint import RESOURCE_LABEL_KEY, Endpoint

logger = logging.getLogger(__name__)


def set_resource_label(endpoints: list[Endpoint], resource: str) -> None:
    """Stamp the owning resource on freshly built records."""
    for ep in endpoints:
        ep.labels[RESOURCE_LABEL_KEY] = resource


def merge_endpoints(candidates: list[Endpoint]) -> list[Endpoint]:
    """Merge records sharing name, type, set identifier and TTL.

    A merged-in record contributes only its first target; its owner is
    discarded in favour of the record already kept. Every returned
    record is a new object with its targets sorted.
    """
    ordered = sorted(candidates, key=lambda ep: ep.resource)
    ordered.sort(key=_merge_order)

    merged: list[Endpoint] = []
    for ep in ordered:
        if not ep.targets:
            continue
        if merged and merged[-1].key() == ep.key():
            kept = merged[-1]
            first = ep.targets[0]
            if first not in kept.targets:
                kept.targets.append(first)
            logger.debug("Merged %s from %s into record owned by %s",
                         ep, ep.resource, kept.resource)
            continue
        merged.append(replace(
            ep,
            targets=list(dict.fromkeys(ep.targets)),
            provider_specific=list(ep.provider_specific),
            labels=dict(ep.labels),
        ))

    for ep in merged:
        ep.targets.sort()
    return merged


def _merge_order(ep: Endpoint) -> tuple[str, str, str, bool, int]:
    # Set identifier and TTL are included so mergeable records are always adjacent
    return (ep.dns_name, ep.record_type, ep.set_identifier, ep.ttl_configured, ep.record_ttl or 0)
