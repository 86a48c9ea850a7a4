"""Ports for Exchange bounded context."""

from .exchange_port import ExchangePort

__all__ = ["ExchangePort"]
