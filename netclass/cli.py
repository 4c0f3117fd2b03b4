"""CLI interface for netclass.

Usage:
    netclass status [--json]
    netclass type
    netclass interfaces
    netclass watch [--duration SECONDS]
    netclass call <method>
"""

import json
import time
from pathlib import Path
from typing import Optional

import typer
from loguru import logger

from netclass import __version__
from netclass.core.config import Config
from netclass.core.constants import LOG_LEVEL
from netclass.core.logger import configure_logging
from netclass.services.classifier import interface_medium, is_active
from netclass.services.network_service import MethodStatus, NetworkService

app = typer.Typer(
    name="netclass",
    help="Report the host's connectivity class and watch for changes",
    add_completion=False,
)

_NETWORK_ICONS = {
    "ethernet": "🔌",
    "wifi": "📶",
    "mobile": "📱",
    "none": "❌",
}


def _init_core(config_path: Optional[Path] = None, log_level: Optional[str] = None) -> NetworkService:
    """Set up logging and build the network service.

    The console level comes from --log-level when given, otherwise from the
    config file's log_level (itself defaulting to NETCLASS_LOG_LEVEL).
    """
    config = Config(config_path)
    configure_logging(level=log_level or config.get("log_level", LOG_LEVEL))
    return NetworkService.from_config(config)


def _format_snapshot(payload: dict) -> str:
    network_type = payload["networkType"]
    icon = _NETWORK_ICONS.get(network_type, "")
    stamp = time.strftime("%H:%M:%S", time.localtime(payload["timestamp"] / 1000))
    return (
        f"[{stamp}] {icon} {network_type} "
        f"(connected={payload['isConnected']}, wifi_or_ethernet={payload['isWifiOrEthernet']})"
    )


@app.command()
def status(
    as_json: bool = typer.Option(False, "--json", help="Print the snapshot record as JSON"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
):
    """Show the current connectivity snapshot."""
    service = _init_core(config)
    payload = service.snapshot().to_dict()

    if as_json:
        typer.echo(json.dumps(payload))
        return

    typer.echo("📊 Connectivity Status:")
    typer.echo(f"   Network type: {_NETWORK_ICONS.get(payload['networkType'], '')} {payload['networkType']}")
    typer.echo(f"   Connected: {'✅ yes' if payload['isConnected'] else '❌ no'}")
    typer.echo(f"   Wi-Fi or Ethernet: {'✅ yes' if payload['isWifiOrEthernet'] else '❌ no'}")


@app.command("type")
def network_type(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
):
    """Print the network type (none, mobile, wifi or ethernet)."""
    service = _init_core(config)
    typer.echo(service.get_network_type())


@app.command()
def interfaces(
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
):
    """List enumerated interfaces and how each one is classified."""
    from netclass.utils.network_interface import get_interface_provider

    _init_core(config)
    provider = get_interface_provider()

    try:
        found = provider.list_active_interfaces()
    except Exception as e:
        typer.echo(f"❌ Error: Failed to enumerate interfaces: {e}", err=True)
        raise typer.Exit(1)

    if not found:
        typer.echo("ℹ️  No interfaces found")
        return

    typer.echo(f"🔎 Interfaces ({len(found)}):\n")
    for interface in found:
        marker = "✅" if is_active(interface) else "⏸️ "
        typer.echo(f"  {marker} {interface.name}")
        typer.echo(
            f"     state={interface.operational_state.value} "
            f"address={'yes' if interface.has_valid_address else 'no'} "
            f"medium={interface_medium(interface).value}"
        )


@app.command()
def watch(
    duration: Optional[float] = typer.Option(
        None, "--duration", "-d", help="Stop after this many seconds (default: until Ctrl+C)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print each snapshot record as JSON"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Console log level (default: config log_level)"
    ),
):
    """Start monitoring and print a line for every connectivity change."""
    service = _init_core(config, log_level)

    def on_snapshot(payload: dict):
        typer.echo(json.dumps(payload) if as_json else _format_snapshot(payload))

    service.events.listen(on_snapshot)
    typer.echo("👀 Watching connectivity (Ctrl+C to stop)...")

    started = time.monotonic()
    try:
        service.start_network_monitoring()
        while duration is None or time.monotonic() - started < duration:
            time.sleep(0.1)
    except KeyboardInterrupt:
        logger.debug("[CLI] Interrupted")
    finally:
        service.dispose()

    typer.echo("✅ Stopped")


@app.command()
def call(
    method: str = typer.Argument(..., help="Method name, e.g. getNetworkType"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to configuration file"),
):
    """Invoke a request-surface method by name and print its result."""
    service = _init_core(config)
    result = service.handle(method)

    if result.status == MethodStatus.NOT_IMPLEMENTED:
        typer.echo(f"⚠️  {result.message}", err=True)
        typer.echo(f"   Available: {', '.join(service.methods)}", err=True)
        raise typer.Exit(2)
    if result.status == MethodStatus.ERROR:
        typer.echo(f"❌ Error: {result.message}", err=True)
        raise typer.Exit(1)

    typer.echo(json.dumps(result.value))


@app.command()
def version():
    """Show version information."""
    typer.echo(f"netclass v{__version__}")


if __name__ == "__main__":
    app()
