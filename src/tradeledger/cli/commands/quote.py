"""Print current quotes."""

import sys
from pathlib import Path

import click
from rich.console import Console

from tradeledger.cli.ui import add_quote_row, create_quote_table
from tradeledger.errors import QuoteUnavailableError
from tradeledger.services.container import build_quote_providers
from tradeledger.services.forex import SUPPORTED_PAIRS
from tradeledger.system import reload_system_config


@click.command("quote")
@click.argument("symbols", nargs=-1, required=True)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: $TRADELEDGER_CONFIG or config/tradeledger.yaml)",
)
def quote_command(symbols: tuple[str, ...], config_path: Path | None):
    """
    Show quotes for stock symbols or forex pairs.

    Example:
        tradeledger quote AAPL MSFT
        tradeledger quote EUR/USD
    """
    console = Console()
    config = reload_system_config(config_path)
    stock_quotes, forex_quotes = build_quote_providers(config)

    table = create_quote_table()
    failures = 0
    try:
        for raw in symbols:
            symbol = raw.strip().upper()
            provider = forex_quotes if symbol in SUPPORTED_PAIRS else stock_quotes
            try:
                add_quote_row(table, provider.get_quote(symbol))
            except QuoteUnavailableError as e:
                failures += 1
                console.print(f"[red]{e}[/red]")
    finally:
        for provider in (stock_quotes, forex_quotes):
            shutdown = getattr(provider, "shutdown", None)
            if shutdown is not None:
                shutdown()

    if table.row_count:
        console.print(table)
    if failures:
        sys.exit(1)
