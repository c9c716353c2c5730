"""Commands __init__ - exports all commands."""

from tradeledger.cli.commands.quote import quote_command
from tradeledger.cli.commands.serve import serve_command

__all__ = ["quote_command", "serve_command"]
