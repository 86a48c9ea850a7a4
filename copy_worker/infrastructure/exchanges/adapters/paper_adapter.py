"""Paper Exchange Adapter - dry-run fills without real funds.

Prices come from a real connector (public market data) or from a static
price table; orders fill fully at the reference price when the IOC limit
allows it.
"""

import logging
from decimal import Decimal
from typing import Optional
from uuid import uuid4

from copy_worker.domain.exchanges.exceptions import (
    AssetNotFoundError,
    ExchangeAPIError,
    InsufficientBalanceError,
    OrderNotFilledError,
)
from copy_worker.domain.exchanges.ports import ExchangePort
from copy_worker.domain.exchanges.value_objects import (
    Balance,
    OrderRequest,
    OrderResult,
    OrderStatus,
)

logger = logging.getLogger(__name__)


class PaperExchangeAdapter(ExchangePort):
    """Simulated exchange for dry-run mode.

    Balances are only enforced for assets present in ``balances``; assets
    not listed are unlimited.

    Example:
        >>> paper = PaperExchangeAdapter("binance", prices={"BTC/USDT": Decimal("50000")})
        >>> result = await paper.submit_order(request)
        >>> result.avg_fill_price  # Decimal("50000")
    """

    def __init__(
        self,
        name: str,
        price_source: Optional[ExchangePort] = None,
        prices: Optional[dict[str, Decimal]] = None,
        balances: Optional[dict[str, Decimal]] = None,
        fee_rate: Decimal = Decimal("0.001"),
    ) -> None:
        """Initialize paper adapter.

        Args:
            name: Venue name being simulated.
            price_source: Real connector used for reference prices only.
            prices: Static prices by symbol (take precedence over price_source).
            balances: Simulated free balances by asset.
            fee_rate: Fee charged on the fill cost, in quote currency.
        """
        self.name = name
        self._price_source = price_source
        self._prices = dict(prices or {})
        self._balances = dict(balances or {})
        self._fee_rate = fee_rate
        self.orders: list[OrderResult] = []

    async def initialize(self) -> None:
        if self._price_source is not None:
            await self._price_source.initialize()
        logger.info("paper.initialized", extra={"exchange": self.name})

    async def close(self) -> None:
        if self._price_source is not None:
            await self._price_source.close()

    def set_price(self, symbol: str, price: Decimal) -> None:
        self._prices[symbol] = price

    async def get_reference_price(self, symbol: str) -> Decimal:
        if symbol in self._prices:
            return self._prices[symbol]
        if self._price_source is not None:
            return await self._price_source.get_reference_price(symbol)
        raise ExchangeAPIError("No paper price for symbol", exchange=self.name, symbol=symbol)

    async def submit_order(self, request: OrderRequest) -> OrderResult:
        price = await self.get_reference_price(request.symbol)

        crosses = price <= request.limit_price if request.side == "buy" else price >= request.limit_price
        if not crosses:
            raise OrderNotFilledError(
                "IOC order was not filled",
                exchange=self.name,
                client_order_id=request.client_order_id,
                reference_price=str(price),
                limit_price=str(request.limit_price),
            )

        base, quote = request.symbol.split("/")
        cost = request.quantity * price
        fee = cost * self._fee_rate

        if request.side == "buy":
            self._debit(quote, cost + fee)
            self._credit(base, request.quantity)
        else:
            self._debit(base, request.quantity)
            self._credit(quote, cost - fee)

        result = OrderResult(
            order_id=f"paper-{uuid4().hex[:12]}",
            status=OrderStatus.FILLED,
            symbol=request.symbol,
            filled_quantity=request.quantity,
            avg_fill_price=price,
            total_cost=cost,
            fee_amount=fee,
            fee_currency=quote,
        )
        self.orders.append(result)

        logger.info(
            "paper.order_filled",
            extra={
                "exchange": self.name,
                "client_order_id": request.client_order_id,
                "order_id": result.order_id,
                "symbol": request.symbol,
                "side": request.side,
                "quantity": str(request.quantity),
                "price": str(price),
            },
        )
        return result

    async def get_balance(self, asset: str) -> Balance:
        if asset not in self._balances:
            raise AssetNotFoundError(f"Asset {asset} not found in balances", exchange=self.name)
        return Balance(asset=asset, free=self._balances[asset], locked=Decimal("0"))

    def _debit(self, asset: str, amount: Decimal) -> None:
        if asset not in self._balances:
            return
        if self._balances[asset] < amount:
            raise InsufficientBalanceError(
                f"Insufficient {asset} balance",
                exchange=self.name,
                available=str(self._balances[asset]),
                required=str(amount),
            )
        self._balances[asset] -= amount

    def _credit(self, asset: str, amount: Decimal) -> None:
        if asset in self._balances:
            self._balances[asset] += amount
