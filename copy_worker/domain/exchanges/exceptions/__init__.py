"""Exceptions for Exchange bounded context."""

from .exchange_exceptions import (
    AssetNotFoundError,
    ExchangeAPIError,
    ExchangeConnectionError,
    ExchangeError,
    ExchangeUnavailableError,
    InsufficientBalanceError,
    InvalidOrderError,
    OrderNotFilledError,
    OrderNotFoundError,
    OrderStateUnknownError,
    UnsupportedExchangeError,
)

__all__ = [
    "ExchangeError",
    "ExchangeConnectionError",
    "ExchangeAPIError",
    "ExchangeUnavailableError",
    "InvalidOrderError",
    "AssetNotFoundError",
    "InsufficientBalanceError",
    "OrderNotFilledError",
    "OrderNotFoundError",
    "OrderStateUnknownError",
    "UnsupportedExchangeError",
]
