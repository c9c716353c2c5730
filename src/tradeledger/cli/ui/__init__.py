"""CLI UI components - formatters."""

from tradeledger.cli.ui.formatters import add_quote_row, create_quote_table, format_money

__all__ = ["add_quote_row", "create_quote_table", "format_money"]
