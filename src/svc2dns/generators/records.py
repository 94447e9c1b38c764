"""Record output generators: zone-file style text and JSON.

Generators contain no derivation logic; they only format the endpoint
list a reconciliation pass returned.
"""

from __future__ import annotations

import json

from svc2dns.models.endpoint import Endpoint


def generate_text(endpoints: list[Endpoint]) -> str:
    """One zone-file style line per target.

    Records carrying a set identifier or an owner get a leading comment.
    """
    output: list[str] = []
    for ep in endpoints:
        notes = []
        if ep.resource:
            notes.append(f"owner={ep.resource}")
        if ep.set_identifier:
            notes.append(f"set-identifier={ep.set_identifier}")
        for prop in ep.provider_specific:
            notes.append(f"{prop.name}={prop.value}")
        if notes:
            output.append(f"; {' '.join(notes)}")

        ttl = "" if ep.record_ttl is None else str(ep.record_ttl)
        for target in ep.targets:
            output.append(f"{ep.dns_name}\t{ttl}\tIN\t{ep.record_type}\t{target}")

    if not output:
        return ""
    output.append("")
    return "\n".join(output)


def endpoint_to_dict(ep: Endpoint) -> dict[str, object]:
    return {
        "dnsName": ep.dns_name,
        "recordType": ep.record_type,
        "targets": list(ep.targets),
        "recordTTL": ep.record_ttl,
        "setIdentifier": ep.set_identifier,
        "providerSpecific": [
            {"name": p.name, "value": p.value} for p in ep.provider_specific
        ],
        "labels": dict(sorted(ep.labels.items())),
    }


def generate_json(endpoints: list[Endpoint]) -> str:
    return json.dumps([endpoint_to_dict(ep) for ep in endpoints], indent=2) + "\n"
