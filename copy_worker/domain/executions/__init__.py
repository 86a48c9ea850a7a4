"""Executions bounded context - copy-trade execution jobs and risk gating."""
