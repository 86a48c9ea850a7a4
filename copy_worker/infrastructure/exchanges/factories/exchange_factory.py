"""Exchange Factory - creates exchange adapters based on configuration.

Factory Pattern picking the right adapter for an exchange name: a CCXT
adapter for live trading, wrapped by the paper adapter in dry-run mode.
"""

import logging
from enum import Enum
from typing import Any, Optional

import ccxt.async_support as ccxt

from copy_worker.config import Settings, get_settings
from copy_worker.domain.exchanges.exceptions import UnsupportedExchangeError
from copy_worker.domain.exchanges.ports import ExchangePort
from copy_worker.infrastructure.exchanges.adapters import CCXTExchangeAdapter, PaperExchangeAdapter
from copy_worker.infrastructure.exchanges.circuit_breakers import (
    CircuitBreakerRegistry,
    get_circuit_breaker_registry,
)
from copy_worker.infrastructure.exchanges.retry import RetryPolicy

logger = logging.getLogger(__name__)


class ExchangeName(str, Enum):
    """Supported exchanges."""

    BINANCE = "binance"
    KUCOIN = "kucoin"
    KRAKEN = "kraken"


class ExchangeFactory:
    """Factory for exchange adapters.

    Credentials, sandbox mode, timeouts, retry and circuit breaker settings
    come from Settings. Each call returns a fresh adapter (own HTTP session);
    circuit breakers are shared per exchange.

    Example:
        >>> factory = ExchangeFactory()
        >>> adapter = factory.create_exchange("binance")
        >>> await adapter.initialize()
        >>> ...
        >>> await adapter.close()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        circuit_breakers: Optional[CircuitBreakerRegistry] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.circuit_breakers = circuit_breakers or get_circuit_breaker_registry()

    def create_exchange(self, exchange_name: str) -> ExchangePort:
        """Create exchange adapter based on name.

        Raises:
            UnsupportedExchangeError: If exchange_name is not supported.
        """
        name = exchange_name.lower()
        if not self.is_supported(name):
            supported = ", ".join(self.get_supported_exchanges())
            raise UnsupportedExchangeError(
                f"Unsupported exchange: {exchange_name}. Supported exchanges: {supported}"
            )

        logger.info(
            "exchange_factory.creating",
            extra={
                "exchange": name,
                "testnet": self.settings.exchange_testnet,
                "dry_run": self.settings.dry_run,
            },
        )

        adapter = CCXTExchangeAdapter(
            name=name,
            client=self._create_client(name),
            retry_policy=RetryPolicy(
                max_retries=self.settings.exchange_max_retries,
                base_delay=self.settings.exchange_retry_base_delay,
                max_delay=self.settings.exchange_retry_max_delay,
            ),
            circuit_breaker=self.circuit_breakers.get(name),
        )

        if self.settings.dry_run:
            return PaperExchangeAdapter(
                name=name,
                price_source=adapter,
                fee_rate=self.settings.paper_fee_rate,
            )
        return adapter

    def _create_client(self, name: str) -> Any:
        exchange_class = getattr(ccxt, name)
        client = exchange_class(
            {
                **self.settings.exchange_credentials(name),
                "enableRateLimit": True,
                "timeout": self.settings.exchange_timeout_ms,
                "options": {"defaultType": "spot"},
            }
        )
        if self.settings.exchange_testnet:
            try:
                client.set_sandbox_mode(True)
            except ccxt.NotSupported as e:
                raise UnsupportedExchangeError(
                    f"{name} has no sandbox environment", exchange=name
                ) from e
        return client

    def is_supported(self, exchange_name: str) -> bool:
        try:
            ExchangeName(exchange_name.lower())
            return True
        except ValueError:
            return False

    def get_supported_exchanges(self) -> list[str]:
        return [e.value for e in ExchangeName]
