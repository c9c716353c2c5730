"""Run the HTTP API under uvicorn."""

import sys
from pathlib import Path

import click
import uvicorn
from rich.console import Console

from tradeledger.system import LoggerFactory, reload_system_config


@click.command("serve")
@click.option("--host", default=None, help="Bind address (default: api.host from config)")
@click.option("--port", type=int, default=None, help="Bind port (default: api.port from config)")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $TRADELEDGER_CONFIG or config/tradeledger.yaml)",
)
def serve_command(host: str | None, port: int | None, config_path: Path | None):
    """
    Start the portfolio API server.

    Example:
        tradeledger serve
        tradeledger serve --port 9000 --config config/tradeledger.yaml
    """
    console = Console()

    if config_path is not None and not config_path.exists():
        console.print(f"[red]Error: config file not found: {config_path}[/red]")
        sys.exit(1)

    try:
        config = reload_system_config(config_path)
    except ValueError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        sys.exit(1)

    LoggerFactory.configure(config.logging.to_logger_config())

    # Imported after logging is configured so module loggers pick it up
    from tradeledger.api import create_app

    app = create_app(config=config)
    bind_host = host or config.api.host
    bind_port = port or config.api.port

    console.print(f"[cyan]TradeLedger API on http://{bind_host}:{bind_port}[/cyan]")
    console.print(f"[dim]Quotes: {config.quotes.provider} (timeout {config.quotes.timeout_seconds}s)[/dim]")
    uvicorn.run(app, host=bind_host, port=bind_port, log_config=None)
