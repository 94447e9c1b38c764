"""CLI entry point for svc2dns.

Subcommands:
    endpoints  Derive DNS records from a cluster snapshot.
    info       Show the effective source configuration.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from svc2dns.errors import ConfigurationError


def _load_config(args: argparse.Namespace):
    """Load source config, handling errors.

    A missing config file is only an error when it was named explicitly;
    otherwise the defaults apply.
    """
    from svc2dns.config import DEFAULT_CONFIG_PATH, SourceConfig, load_config

    config_path = getattr(args, "config", None)
    if config_path is None and not Path(DEFAULT_CONFIG_PATH).exists():
        return SourceConfig()
    try:
        return load_config(config_path)
    except FileNotFoundError:
        print(f"Error: config file not found: {config_path}", file=sys.stderr)
        sys.exit(1)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


# ---------------------------------------------------------------------------
# Subcommand: endpoints
# ---------------------------------------------------------------------------

def cmd_endpoints(args: argparse.Namespace) -> int:
    """Derive DNS records from a snapshot and print them."""
    from svc2dns.errors import Svc2DnsError
    from svc2dns.generators.records import generate_json, generate_text
    from svc2dns.source import ServiceSource
    from svc2dns.sources.snapshot import ClusterSnapshot

    config = _load_config(args)
    if args.namespace is not None:
        config.namespace = args.namespace

    try:
        snapshot = ClusterSnapshot.from_file(args.snapshot)
    except FileNotFoundError:
        print(f"Error: snapshot file not found: {args.snapshot}", file=sys.stderr)
        return 1
    except Svc2DnsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        source = ServiceSource(snapshot, config)
        endpoints = source.endpoints()
    except Svc2DnsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.format == "json":
        sys.stdout.write(generate_json(endpoints))
    else:
        sys.stdout.write(generate_text(endpoints))
    return 0


# ---------------------------------------------------------------------------
# Subcommand: info
# ---------------------------------------------------------------------------

def cmd_info(args: argparse.Namespace) -> int:
    """Show the effective source configuration."""
    config = _load_config(args)

    print(f"Namespace:          {config.namespace or '(all)'}")
    print(f"Label filter:       {config.label_filter or '(none)'}")
    print(f"Annotation filter:  {config.annotation_filter or '(none)'}")
    print(f"Service types:      {', '.join(config.service_types) or '(all)'}")
    print(f"FQDN template:      {config.fqdn_template or '(none)'}")
    print(f"Combine template:   {config.combine_fqdn_annotation}")
    print(f"Compatibility:      {config.compatibility or '(disabled)'}")
    print(f"Controller:         {config.controller}")
    print()

    print("Publishing:")
    print(f"  internal cluster IPs:   {config.publish_internal}")
    print(f"  pod host IPs:           {config.publish_host_ip}")
    print(f"  not-ready addresses:    {config.always_publish_not_ready_addresses}")
    print(f"  resolve LB hostnames:   {config.resolve_load_balancer_hostname}")
    print(f"  ignore hostname annot.: {config.ignore_hostname_annotation}")

    return 0


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="svc2dns",
        description="Derive DNS records from Kubernetes Services.",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to svc2dns.toml (default: ./svc2dns.toml if present)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log debug output to stderr",
    )

    subparsers = parser.add_subparsers(dest="command")

    # endpoints
    ep_parser = subparsers.add_parser("endpoints", help="Derive DNS records from a snapshot")
    ep_parser.add_argument(
        "snapshot",
        help="JSON file with Services, Endpoints, Pods and Nodes (kubectl get -o json)",
    )
    ep_parser.add_argument(
        "--format", choices=("text", "json"), default="text",
        help="Output format (default: text)",
    )
    ep_parser.add_argument(
        "-n", "--namespace",
        help="Only consider services in this namespace (overrides config)",
    )

    # info
    subparsers.add_parser("info", help="Show source configuration")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    _configure_logging(args.verbose)

    commands = {
        "endpoints": cmd_endpoints,
        "info": cmd_info,
    }

    return commands[args.command](args)


if __name__ == "__main__":
    sys.exit(main())
