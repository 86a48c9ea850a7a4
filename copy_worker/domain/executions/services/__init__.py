"""Domain services for Executions bounded context."""

from .risk_evaluator import RiskEvaluator

__all__ = ["RiskEvaluator"]
