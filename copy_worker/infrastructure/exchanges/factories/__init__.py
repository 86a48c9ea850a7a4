"""Exchange factory for creating adapters."""

from .exchange_factory import ExchangeFactory, ExchangeName

__all__ = ["ExchangeFactory", "ExchangeName"]
