"""Exchange adapters implementing ExchangePort interface."""

from .ccxt_adapter import CCXTExchangeAdapter
from .paper_adapter import PaperExchangeAdapter

__all__ = ["CCXTExchangeAdapter", "PaperExchangeAdapter"]
