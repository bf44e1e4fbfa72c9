"""CLI entry point for the SSDP agent."""

import json
import sys
from pathlib import Path
from typing import Optional

import click

from .agent import SSDPAgent
from .config import Config
from .exceptions import SSDPAgentError
from .utils.logging import setup_logging


@click.group()
@click.option(
    "--config-file", "-c",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    help="Path to a JSON configuration file.",
    envvar="SSDP_AGENT_CONFIG_FILE"
)
@click.option(
    "--log-level", "-l",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
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
    """SSDP Agent - discovers UPnP devices on the local network."""
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

    setup_logging(cfg.logging)
    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command()
@click.option("--target", "-t", default=None, help="Search target (ST). Defaults to the configured target, 'ssdp:all'.")
@click.option("--timeout", type=click.FloatRange(min=0.1), default=5.0, show_default=True, help="Seconds to listen for responses.")
@click.option("--json", "as_json", is_flag=True, help="Print discovered devices as JSON.")
@click.pass_context
def search(ctx: click.Context, target: Optional[str], timeout: float, as_json: bool) -> None:
    """Send an M-SEARCH and list the devices that respond."""
    config: Config = ctx.obj["config"]
    search_target = target or config.discovery.search_target

    agent = SSDPAgent(config)
    try:
        with agent:
            agent.query_search(search_target)
            # Responses arrive over MX seconds; listen for the whole window.
            agent.wait_for(lambda entry: False, timeout=timeout)
            devices = agent.devices()
    except SSDPAgentError as e:
        click.echo(f"Discovery failed: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("\nDiscovery interrupted by user.", err=True)
        sys.exit(130)

    if as_json:
        payload = {
            usn: {"source": entry.source_host, "headers": entry.headers()}
            for usn, entry in sorted(devices.items())
        }
        click.echo(json.dumps(payload, indent=2))
        return

    if not devices:
        click.echo("No devices responded.")
        return
    for usn, entry in sorted(devices.items()):
        click.echo(usn)
        click.echo(f"  SERVER:   {entry.get('SERVER') or '-'}")
        click.echo(f"  LOCATION: {entry.get('LOCATION') or '-'}")
    click.echo(f"\n{len(devices)} device(s) discovered.")


@cli.command()
def version() -> None:
    """Show version information."""
    from . import __version__
    click.echo(f"SSDP Agent v{__version__}")


@cli.command()
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show current configuration."""
    config: Config = ctx.obj["config"]
    click.echo(json.dumps(config.model_dump(mode="json"), indent=2))


if __name__ == "__main__":
    cli()
