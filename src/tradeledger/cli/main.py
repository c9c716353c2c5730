"""TradeLedger CLI main entry point."""

import click

from tradeledger import __version__
from tradeledger.cli.commands import quote_command, serve_command


@click.group()
@click.version_option(version=__version__)
def main():
    """TradeLedger - Portfolio Accounting Backend"""
    pass


# Register commands
main.add_command(serve_command)
main.add_command(quote_command)


if __name__ == "__main__":
    main()
