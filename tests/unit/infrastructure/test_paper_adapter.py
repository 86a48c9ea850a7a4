"""Unit tests for PaperExchangeAdapter (dry-run fills)."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from copy_worker.domain.exchanges.exceptions import (
    AssetNotFoundError,
    ExchangeAPIError,
    InsufficientBalanceError,
    OrderNotFilledError,
)
from copy_worker.domain.exchanges.ports import ExchangePort
from copy_worker.domain.exchanges.value_objects import OrderRequest, OrderStatus
from copy_worker.infrastructure.exchanges.adapters import PaperExchangeAdapter


def _request(side="buy", quantity="0.01", limit_price="50250"):
    return OrderRequest(
        client_order_id="job-1",
        symbol="BTC/USDT",
        side=side,
        quantity=Decimal(quantity),
        limit_price=Decimal(limit_price),
    )


@pytest.fixture
def paper():
    return PaperExchangeAdapter("binance", prices={"BTC/USDT": Decimal("50000")})


class TestPaperFills:
    @pytest.mark.asyncio
    async def test_buy_fills_at_reference_price(self, paper):
        result = await paper.submit_order(_request())

        assert result.status == OrderStatus.FILLED
        assert result.order_id.startswith("paper-")
        assert result.filled_quantity == Decimal("0.01")
        assert result.avg_fill_price == Decimal("50000")
        assert result.total_cost == Decimal("500")
        assert result.fee_amount == Decimal("0.5")
        assert result.fee_currency == "USDT"
        assert paper.orders == [result]

    @pytest.mark.asyncio
    async def test_buy_limit_below_market_is_not_filled(self, paper):
        with pytest.raises(OrderNotFilledError):
            await paper.submit_order(_request(limit_price="49900"))

        assert paper.orders == []

    @pytest.mark.asyncio
    async def test_sell_limit_above_market_is_not_filled(self, paper):
        with pytest.raises(OrderNotFilledError):
            await paper.submit_order(_request(side="sell", limit_price="50100"))

    @pytest.mark.asyncio
    async def test_sell_fills(self, paper):
        result = await paper.submit_order(_request(side="sell", limit_price="49750"))

        assert result.avg_fill_price == Decimal("50000")

    @pytest.mark.asyncio
    async def test_set_price(self, paper):
        paper.set_price("BTC/USDT", Decimal("60000"))

        assert await paper.get_reference_price("BTC/USDT") == Decimal("60000")

    @pytest.mark.asyncio
    async def test_unknown_symbol_without_source(self, paper):
        with pytest.raises(ExchangeAPIError):
            await paper.get_reference_price("ETH/USDT")


class TestPaperBalances:
    @pytest.mark.asyncio
    async def test_tracked_balances_are_debited_and_credited(self):
        paper = PaperExchangeAdapter(
            "binance",
            prices={"BTC/USDT": Decimal("50000")},
            balances={"USDT": Decimal("1000"), "BTC": Decimal("0")},
        )

        await paper.submit_order(_request())

        assert (await paper.get_balance("USDT")).free == Decimal("499.5")
        assert (await paper.get_balance("BTC")).free == Decimal("0.01")

    @pytest.mark.asyncio
    async def test_insufficient_tracked_balance(self):
        paper = PaperExchangeAdapter(
            "binance",
            prices={"BTC/USDT": Decimal("50000")},
            balances={"USDT": Decimal("100")},
        )

        with pytest.raises(InsufficientBalanceError):
            await paper.submit_order(_request())

    @pytest.mark.asyncio
    async def test_untracked_asset_balance(self, paper):
        with pytest.raises(AssetNotFoundError):
            await paper.get_balance("DOGE")


class TestPaperPriceSource:
    @pytest.mark.asyncio
    async def test_prices_from_real_connector(self):
        source = AsyncMock(spec=ExchangePort)
        source.get_reference_price.return_value = Decimal("3000")
        paper = PaperExchangeAdapter("kraken", price_source=source)

        await paper.initialize()
        price = await paper.get_reference_price("ETH/USDT")
        await paper.close()

        assert price == Decimal("3000")
        source.initialize.assert_awaited_once()
        source.close.assert_awaited_once()
        source.submit_order.assert_not_called()
