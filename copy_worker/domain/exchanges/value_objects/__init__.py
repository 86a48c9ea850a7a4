"""Value objects for Exchange bounded context."""

from .balance import Balance
from .order import OrderRequest, OrderResult, OrderStatus

__all__ = ["Balance", "OrderRequest", "OrderResult", "OrderStatus"]
