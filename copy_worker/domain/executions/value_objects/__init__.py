"""Value objects for Executions bounded context."""

from .asset_pair import AssetPair
from .enums import JobStatus, OrderSide
from .risk import AccountActivity, RiskDecision, RiskParameters

__all__ = [
    "AssetPair",
    "JobStatus",
    "OrderSide",
    "RiskParameters",
    "AccountActivity",
    "RiskDecision",
]
