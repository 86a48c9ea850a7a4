"""Exchanges Bounded Context - port and value objects for exchange connectors."""
