"""CCXT Exchange Adapter - implements ExchangePort for CCXT venues.

One adapter class serves binance, kucoin and kraken through CCXT's unified
API. Every call goes through the exchange's circuit breaker and the retry
policy; CCXT errors are mapped to domain exceptions.

Order placement is the exception: it is never retried blindly, an ambiguous
submission is first looked up by client order ID.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Awaitable, Callable, Optional, TypeVar

import ccxt.async_support as ccxt

from copy_worker.domain.exchanges.exceptions import (
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
)
from copy_worker.domain.exchanges.ports import ExchangePort
from copy_worker.domain.exchanges.value_objects import (
    Balance,
    OrderRequest,
    OrderResult,
    OrderStatus,
)
from copy_worker.infrastructure.exchanges.circuit_breakers import (
    CircuitBreaker,
    CircuitBreakerOpenError,
)
from copy_worker.infrastructure.exchanges.retry import RetryableError, RetryPolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

FINAL_ORDER_STATUSES = frozenset({"closed", "canceled", "cancelled", "expired", "rejected"})


class CCXTExchangeAdapter(ExchangePort):
    """CCXT exchange adapter with retry logic and circuit breaker.

    Example:
        >>> client = ccxt.binance({"apiKey": "...", "secret": "...", "enableRateLimit": True})
        >>> adapter = CCXTExchangeAdapter("binance", client, RetryPolicy(), breaker)
        >>> await adapter.initialize()
        >>> price = await adapter.get_reference_price("BTC/USDT")
        >>> result = await adapter.submit_order(request)
        >>> await adapter.close()
    """

    def __init__(
        self,
        name: str,
        client: Any,
        retry_policy: RetryPolicy,
        circuit_breaker: CircuitBreaker,
    ) -> None:
        """Initialize adapter.

        Args:
            name: Venue name (e.g., "binance").
            client: CCXT async exchange instance.
            retry_policy: Retry parameters for transient failures.
            circuit_breaker: The venue's process-wide circuit breaker.
        """
        self.name = name
        self._client = client
        self._retry = retry_policy
        self._circuit_breaker = circuit_breaker
        self._initialized = False

    async def initialize(self) -> None:
        """Load markets.

        Raises:
            ExchangeConnectionError: If markets could not be loaded.
            ExchangeUnavailableError: If the circuit breaker is open.
        """
        if self._initialized:
            return

        await self._call("load_markets", self._client.load_markets)
        self._initialized = True
        logger.info(
            "ccxt.initialized",
            extra={"exchange": self.name, "markets_count": len(self._client.markets or {})},
        )

    async def close(self) -> None:
        """Close HTTP session."""
        try:
            await self._client.close()
        except ccxt.BaseError as e:
            logger.warning("ccxt.close_failed", extra={"exchange": self.name, "error": str(e)})
            return
        logger.debug("ccxt.closed", extra={"exchange": self.name})

    async def get_reference_price(self, symbol: str) -> Decimal:
        """Last traded price (falls back to bid/ask mid, then close)."""
        ticker = await self._call("fetch_ticker", self._client.fetch_ticker, symbol)

        price = ticker.get("last")
        if price is None and ticker.get("bid") and ticker.get("ask"):
            price = (ticker["bid"] + ticker["ask"]) / 2
        if price is None:
            price = ticker.get("close")

        if not price or price <= 0:
            raise ExchangeAPIError(
                "No reference price available",
                exchange=self.name,
                symbol=symbol,
            )
        return Decimal(str(price))

    async def submit_order(self, request: OrderRequest) -> OrderResult:
        """Submit an IOC limit order.

        The client order ID makes the order traceable for reconciliation.

        Raises:
            OrderNotFilledError: IOC order cancelled with zero fill.
            OrderStateUnknownError: The order may exist but could not be found.
            InsufficientBalanceError: Not enough funds.
            InvalidOrderError: Exchange rejected order parameters.
            ExchangeUnavailableError: Circuit breaker open.
            ExchangeConnectionError: No submission reached the exchange.
            ExchangeAPIError: Any other exchange failure.
        """
        amount = self._to_precision("amount", request.symbol, request.quantity)
        price = self._to_precision("price", request.symbol, request.limit_price)

        logger.info(
            "ccxt.submit_order.start",
            extra={
                "exchange": self.name,
                "client_order_id": request.client_order_id,
                "symbol": request.symbol,
                "side": request.side,
                "amount": amount,
                "limit_price": price,
            },
        )

        order = await self._place_order(request, amount, price)

        if order.get("status") not in FINAL_ORDER_STATUSES or order.get("filled") is None:
            order = await self._call("fetch_order", self._client.fetch_order, order["id"], request.symbol)

        result = self._normalize_order_result(order, request)

        logger.info(
            "ccxt.submit_order.success",
            extra={
                "exchange": self.name,
                "client_order_id": request.client_order_id,
                "order_id": result.order_id,
                "status": result.status.value,
                "filled_quantity": str(result.filled_quantity),
                "avg_price": str(result.avg_fill_price),
            },
        )
        return result

    async def get_balance(self, asset: str) -> Balance:
        response = await self._call("fetch_balance", self._client.fetch_balance)

        amounts = response.get(asset)
        if not amounts:
            raise AssetNotFoundError(f"Asset {asset} not found in balances", exchange=self.name)

        return Balance(
            asset=asset,
            free=Decimal(str(amounts.get("free") or 0)),
            locked=Decimal(str(amounts.get("used") or 0)),
        )

    # --- PRIVATE HELPERS ---

    async def _call(self, operation: str, func: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Run a CCXT call through circuit breaker and retry policy."""

        async def attempt() -> T:
            return await self._circuit_breaker.call(self._translate_errors, operation, func, *args)

        attempt.__name__ = f"{self.name}.{operation}"

        try:
            return await self._retry.run(attempt)
        except CircuitBreakerOpenError as e:
            raise ExchangeUnavailableError(str(e), exchange=self.name, operation=operation) from e
        except RetryableError as e:
            raise ExchangeConnectionError(
                f"{operation} failed after retries: {e}",
                exchange=self.name,
            ) from e

    async def _place_order(self, request: OrderRequest, amount: str, price: str) -> dict[str, Any]:
        """Submit the order, resubmitting only when it provably never arrived.

        After a network error or a duplicate client order ID the order may
        exist on the exchange, so it is looked up by client order ID before
        anything else happens.

        Raises:
            OrderStateUnknownError: If the order may exist but could not be found.
            ExchangeUnavailableError: If the circuit breaker is open.
            ExchangeConnectionError: If no submission reached the exchange.
        """
        params = {"timeInForce": "IOC", "clientOrderId": request.client_order_id}
        error: Exception

        for attempt in range(self._retry.max_retries + 1):
            try:
                return await self._circuit_breaker.call(
                    self._translate_errors,
                    "create_order",
                    self._client.create_order,
                    request.symbol,
                    "limit",
                    request.side,
                    float(amount),
                    float(price),
                    params,
                )
            except CircuitBreakerOpenError as e:
                raise ExchangeUnavailableError(str(e), exchange=self.name, operation="create_order") from e
            except (RetryableError, OrderStateUnknownError) as e:
                error = e

            logger.warning(
                "ccxt.create_order.ambiguous",
                extra={
                    "exchange": self.name,
                    "client_order_id": request.client_order_id,
                    "attempt": attempt + 1,
                    "error": str(error),
                },
            )

            order = await self._find_order(request, error)
            if order is not None:
                return order
            if isinstance(error, OrderStateUnknownError):
                raise OrderStateUnknownError(
                    f"{error.message}, order not found by client order ID",
                    exchange=self.name,
                    client_order_id=request.client_order_id,
                ) from error

            if attempt < self._retry.max_retries:
                await asyncio.sleep(self._retry.delay_for(attempt))

        raise ExchangeConnectionError(
            f"create_order failed after retries: {error}",
            exchange=self.name,
        ) from error

    async def _find_order(self, request: OrderRequest, cause: Exception) -> Optional[dict[str, Any]]:
        """Look an order up by client order ID; None if the exchange has none.

        Raises:
            OrderStateUnknownError: If the lookup itself fails.
        """
        try:
            order = await self._call(
                "fetch_order",
                self._client.fetch_order,
                None,
                request.symbol,
                {"clientOrderId": request.client_order_id},
            )
        except OrderNotFoundError:
            return None
        except ExchangeError as e:
            logger.critical(
                "ccxt.order_state_unknown",
                extra={
                    "exchange": self.name,
                    "client_order_id": request.client_order_id,
                    "cause": str(cause),
                    "error": str(e),
                },
            )
            raise OrderStateUnknownError(
                f"Order lookup failed after {cause}: {e}",
                exchange=self.name,
                client_order_id=request.client_order_id,
            ) from e

        logger.info(
            "ccxt.create_order.found",
            extra={
                "exchange": self.name,
                "client_order_id": request.client_order_id,
                "order_id": order.get("id"),
                "status": order.get("status"),
            },
        )
        return order

    async def _translate_errors(self, operation: str, func: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Map CCXT exceptions to domain exceptions (or RetryableError)."""
        try:
            return await func(*args)

        except ccxt.InsufficientFunds as e:
            logger.warning("ccxt.insufficient_funds", extra={"exchange": self.name, "error": str(e)})
            raise InsufficientBalanceError(f"Insufficient balance: {e}", exchange=self.name) from e

        except ccxt.OrderNotFound as e:
            raise OrderNotFoundError(f"Order not found: {e}", exchange=self.name) from e

        except ccxt.DuplicateOrderId as e:
            # An earlier submission reached the exchange
            raise OrderStateUnknownError(
                f"Duplicate client order ID: {e}",
                exchange=self.name,
            ) from e

        except (ccxt.InvalidOrder, ccxt.BadSymbol) as e:
            raise InvalidOrderError(f"Order rejected: {e}", exchange=self.name) from e

        except ccxt.RateLimitExceeded as e:
            logger.warning("ccxt.rate_limit", extra={"exchange": self.name, "operation": operation})
            raise RetryableError(f"{self.name} rate limit exceeded: {e}") from e

        except ccxt.NetworkError as e:
            logger.warning(
                "ccxt.network_error",
                extra={"exchange": self.name, "operation": operation, "error": str(e)},
            )
            raise RetryableError(f"{self.name} network error: {e}") from e

        except ccxt.BaseError as e:
            logger.error(
                "ccxt.api_error",
                extra={"exchange": self.name, "operation": operation, "error": str(e)},
            )
            raise ExchangeAPIError(f"{self.name} API error: {e}", operation=operation) from e

    def _to_precision(self, kind: str, symbol: str, value: Decimal) -> str:
        formatter = self._client.amount_to_precision if kind == "amount" else self._client.price_to_precision
        try:
            return formatter(symbol, float(value))
        except ccxt.BaseError as e:
            raise InvalidOrderError(
                f"Invalid order {kind}: {e}",
                exchange=self.name,
                symbol=symbol,
                value=str(value),
            ) from e

    def _normalize_order_result(self, order: dict[str, Any], request: OrderRequest) -> OrderResult:
        """Normalize CCXT order response to OrderResult value object.

        Raises:
            OrderNotFilledError: If nothing was filled.
        """
        filled = Decimal(str(order.get("filled") or 0))
        if filled <= 0:
            raise OrderNotFilledError(
                "IOC order was not filled",
                exchange=self.name,
                client_order_id=request.client_order_id,
                order_status=order.get("status"),
            )

        average = order.get("average") or order.get("price") or request.limit_price
        avg_price = Decimal(str(average))
        cost = Decimal(str(order.get("cost") or 0)) or filled * avg_price

        fee_amount = Decimal("0")
        fee_currency = request.symbol.split("/")[1]
        if order.get("fee"):
            fee_amount = Decimal(str(order["fee"].get("cost") or 0))
            fee_currency = order["fee"].get("currency") or fee_currency
        elif order.get("fees"):
            fee_amount = sum((Decimal(str(f.get("cost") or 0)) for f in order["fees"]), Decimal("0"))

        ordered = Decimal(str(order.get("amount") or request.quantity))
        remaining = order.get("remaining")
        fully_filled = filled >= ordered or (remaining is not None and Decimal(str(remaining)) == 0)
        status = OrderStatus.FILLED if fully_filled else OrderStatus.PARTIALLY_FILLED

        return OrderResult(
            order_id=str(order["id"]),
            status=status,
            symbol=request.symbol,
            filled_quantity=filled,
            avg_fill_price=avg_price,
            total_cost=cost,
            fee_amount=fee_amount,
            fee_currency=fee_currency,
        )
