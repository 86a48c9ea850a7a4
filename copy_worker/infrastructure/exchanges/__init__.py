"""Exchange connector infrastructure (CCXT, paper trading, resilience)."""
