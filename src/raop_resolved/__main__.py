"""CLI entry point for raop-resolved."""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

import click

from .config import AddressFamily, Config
from .discovery.endpoints import EndpointResolver
from .errors import ResolverError
from .service import RaopDiscoveryService, connect_resolved
from .tunnels.properties import build_sink_properties
from .utils.log_setup import configure_logging


@click.group()
@click.option(
    "--config-file", "-c",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Path to a JSON configuration file.",
    envvar="RAOP_RESOLVED_CONFIG_FILE"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None, # Default comes from the Config object
    help="Override the logging level (e.g., DEBUG, INFO).",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"], case_sensitive=False),
    default=None,
    help="Override logging format.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], log_level: Optional[str], log_format: Optional[str]) -> None:
    """raop-resolved - discovers RAOP receivers through systemd-resolved and creates PipeWire sinks for them."""
    try:
        if config_file:
            cfg = Config.from_file(Path(config_file))
        else:
            # Environment variables (and .env file if present)
            cfg = Config()
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)

    if log_level:
        cfg.logging.level = log_level.upper()
    if log_format:
        cfg.logging.format = log_format.lower()

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Discover receivers and create one sink per endpoint until interrupted."""
    config: Config = ctx.obj["config"]
    configure_logging(config.logging)

    service = RaopDiscoveryService(app_config=config)
    try:
        service.build_loops()
    except ImportError as e:
        click.echo(f"D-Bus bindings are missing (install the 'resolved' extra): {e}", err=True)
        sys.exit(1)
    except ResolverError as e:
        click.echo(f"Cannot connect to the system resolver: {e}", err=True)
        sys.exit(1)

    try:
        asyncio.run(service.run())
    except KeyboardInterrupt:
        click.echo("\nInterrupted, released all sinks.", err=True)
        sys.exit(130)


@cli.command()
@click.option(
    "--address-family", "-f",
    type=click.Choice([family.value for family in AddressFamily], case_sensitive=False),
    default=None,
    help="Override the address family used for service resolution."
)
@click.pass_context
def scan(ctx: click.Context, address_family: Optional[str]) -> None:
    """Run a single browse/resolve pass and print the endpoints as JSON (no sinks are created)."""
    config: Config = ctx.obj["config"]
    configure_logging(config.logging)
    if address_family:
        config.discovery.address_family = AddressFamily(address_family.lower())

    try:
        client = connect_resolved(config)
        resolver = EndpointResolver(
            client,
            channel=None,
            service_name=config.discovery.service_name,
            address_family=config.discovery.address_family,
        )
        endpoints = resolver.scan()
    except ImportError as e:
        click.echo(f"D-Bus bindings are missing (install the 'resolved' extra): {e}", err=True)
        sys.exit(1)
    except ResolverError as e:
        click.echo(f"Scan failed: {e}", err=True)
        sys.exit(1)

    output = []
    for endpoint in endpoints:
        properties = build_sink_properties(endpoint)
        output.append({
            "hostname": endpoint.hostname,
            "address": str(endpoint.socket_address),
            "txt": list(endpoint.auxiliary_text),
            "sink_properties": properties.to_module_args(),
        })
    click.echo(json.dumps(output, indent=2))


@cli.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    click.echo(f"raop-resolved v{__version__}")


@cli.command()
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config = ctx.obj["config"]
    click.echo(json.dumps(config.model_dump(mode="json"), indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
