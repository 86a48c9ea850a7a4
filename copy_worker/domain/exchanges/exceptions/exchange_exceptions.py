"""Exceptions for Exchange bounded context."""

from copy_worker.domain.shared import DomainException


class ExchangeError(DomainException):
    """Base exception for all exchange-related errors."""

    pass


class ExchangeConnectionError(ExchangeError):
    """Raised when the connector cannot reach the exchange."""

    pass


class ExchangeAPIError(ExchangeError):
    """Raised when the exchange API returned an error."""

    pass


class ExchangeUnavailableError(ExchangeError):
    """Raised when the exchange circuit breaker is open (fast fail)."""

    pass


class InvalidOrderError(ExchangeError):
    """Raised when the exchange rejects the order parameters."""

    pass


class AssetNotFoundError(ExchangeError):
    """Raised when an asset is not found in the account balances."""

    pass


class InsufficientBalanceError(ExchangeError):
    """Raised when the account lacks funds for the order."""

    pass


class OrderNotFilledError(ExchangeError):
    """Raised when an IOC order was cancelled without any fill.

    Usually means the price moved beyond the allowed slippage.
    """

    pass


class OrderNotFoundError(ExchangeError):
    """Raised when the exchange has no order with the given ID."""

    pass


class OrderStateUnknownError(ExchangeError):
    """Raised when an order may have reached the exchange but its state cannot be read.

    The job must not be retried; the order has to be reconciled against the
    exchange by its client order ID.
    """

    pass


class UnsupportedExchangeError(ExchangeError):
    """Raised when no connector exists for the requested venue."""

    pass
