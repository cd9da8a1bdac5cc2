#!/usr/bin/env python3
"""
run_domains.py - Inspect a domain configuration.

Builds a MultiProvider from a domains YAML file and prints what it holds.
Providers are constructed but never called.

Usage:
    python run_domains.py
    python run_domains.py --config config/domains.yaml --json
"""

import json
import sys
from pathlib import Path

import click

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from chains.multi_provider import load_multi_provider
from core.exceptions import MultiProviderError
from core.logging import get_logger, set_global_context, setup_logging

logger = get_logger("multiprovider.cli")


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    default=None,
    type=click.Path(dir_okay=False),
    help="Domains YAML file (default: config/domains.yaml)",
)
@click.option(
    "--log-level",
    "-l",
    default="WARNING",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Log level",
)
@click.option(
    "--json-logs/--no-json-logs",
    default=False,
    help="Use JSON log format",
)
@click.option(
    "--strict-names/--no-strict-names",
    default=False,
    help="Fail on domain names shared by several ids",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the summary as JSON",
)
def main(
    config_path: str | None,
    log_level: str,
    json_logs: bool,
    strict_names: bool,
    as_json: bool,
) -> None:
    """
    Domain registry inspector.

    Lists domains, the connection each would hand out, and their policy.
    """
    setup_logging(level=log_level, json_output=json_logs)
    set_global_context(service="multiprovider-cli")

    try:
        mp = load_multi_provider(config_path, strict_names=strict_names)
    except (FileNotFoundError, MultiProviderError) as e:
        logger.error(
            f"Could not load domains: {e}",
            extra={"context": {"config": config_path}},
        )
        raise SystemExit(1)

    summary = mp.summary()

    if as_json:
        click.echo(json.dumps(summary, indent=2, default=str))
        return

    click.echo("=" * 60)
    click.echo("DOMAINS")
    click.echo("=" * 60)
    for d in summary["domains"]:
        overrides = ", ".join(f"{k}={v}" for k, v in d["overrides"].items()) or "-"
        click.echo(
            f"{d['id']:>8}  {d['name']:<16} {d['connection']:<9} "
            f"conf={d['confirmations']:<3} {overrides}"
        )
    if summary["missing_providers"]:
        click.echo(f"Missing providers: {summary['missing_providers']}")
    click.echo("=" * 60)


if __name__ == "__main__":
    main()
