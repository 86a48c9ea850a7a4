"""Executions application layer - copy-trade execution use cases."""
