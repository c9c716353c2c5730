"""Domain services: quotes, storage, wallet, portfolio and forex."""
