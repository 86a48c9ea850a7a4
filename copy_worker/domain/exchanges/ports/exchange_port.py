"""ExchangePort - abstract interface for exchange connectors.

The domain declares WHAT it needs from an exchange; the infrastructure layer
provides HOW (CCXT adapter, paper adapter).
"""

from abc import ABC, abstractmethod
from decimal import Decimal

from ..value_objects import Balance, OrderRequest, OrderResult


class ExchangePort(ABC):
    """Abstract interface for all exchange connectors.

    Example:
        >>> exchange = factory.create_exchange("binance")
        >>> await exchange.initialize()
        >>> price = await exchange.get_reference_price("BTC/USDT")
        >>> result = await exchange.submit_order(request)
        >>> await exchange.close()
    """

    name: str
    """Venue name (e.g., "binance")."""

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize exchange connection (load markets, open session).

        Raises:
            ExchangeConnectionError: If connection failed.
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close exchange connection and release HTTP sessions."""
        pass

    @abstractmethod
    async def get_reference_price(self, symbol: str) -> Decimal:
        """Get current reference (last traded) price for symbol.

        Args:
            symbol: Trading pair in BASE/QUOTE form.

        Returns:
            Positive price in quote currency.

        Raises:
            ExchangeAPIError: If the ticker is unavailable.
        """
        pass

    @abstractmethod
    async def submit_order(self, request: OrderRequest) -> OrderResult:
        """Submit an IOC limit order.

        Args:
            request: Order request built from an approved execution job.

        Returns:
            OrderResult with fill details (possibly a partial fill).

        Raises:
            OrderNotFilledError: IOC order cancelled with zero fill.
            InsufficientBalanceError: Not enough funds.
            InvalidOrderError: Exchange rejected order parameters.
            ExchangeUnavailableError: Circuit breaker open.
            ExchangeAPIError: Any other exchange failure.
        """
        pass

    @abstractmethod
    async def get_balance(self, asset: str) -> Balance:
        """Get balance for specific asset.

        Raises:
            AssetNotFoundError: If asset not found.
        """
        pass
