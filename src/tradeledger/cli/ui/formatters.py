"""Rich table formatters for CLI output."""

from decimal import Decimal

from rich.table import Table

from tradeledger.services.quotes import Quote


def format_money(value: Decimal, places: int = 2) -> str:
    """Format a Decimal with thousands separators, e.g. 12,345.68."""
    return f"{value:,.{places}f}"


def create_quote_table() -> Table:
    """
    Create a Rich table for quotes.

    Returns:
        Configured Rich Table with columns
    """
    table = Table(title="Quotes")
    table.add_column("Symbol", style="cyan", no_wrap=True)
    table.add_column("Price", style="white", justify="right")
    table.add_column("Change", justify="right")
    table.add_column("Change %", justify="right")
    table.add_column("Volume", style="dim", justify="right")
    return table


def add_quote_row(table: Table, quote: Quote) -> None:
    """
    Add a quote row, coloring the change green/red.

    Args:
        table: Rich Table instance
        quote: Quote to display
    """
    color = "green" if quote.change >= 0 else "red"
    places = 2 if quote.price >= 10 else 5
    table.add_row(
        quote.symbol,
        format_money(quote.price, places),
        f"[{color}]{quote.change:+.{places}f}[/{color}]",
        f"[{color}]{quote.change_percent:+.2f}%[/{color}]",
        f"{quote.volume:,}" if quote.volume else "-",
    )
