"""TradeLedger command line interface."""
