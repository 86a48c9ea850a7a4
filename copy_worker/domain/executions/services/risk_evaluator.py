"""Risk Evaluator - pre-trade risk gate for execution jobs.

Pure domain service: no I/O. The application layer loads the account's
risk limits and activity, fetches the reference price and passes them in.
"""

from datetime import datetime, timedelta, timezone
from decimal import ROUND_DOWN, Decimal
from typing import Optional

from ..entities import ExecutionJob
from ..value_objects import AccountActivity, OrderSide, RiskDecision, RiskParameters

SIZE_QUANTUM = Decimal("0.00000001")
HUNDRED = Decimal("100")


class RiskEvaluator:
    """Applies an account's risk limits to an execution job.

    Checks run in order and the first failing check rejects the job:
    1. Risk limits missing (fail closed)
    2. Copy trading disabled for the account
    3. Daily execution cap reached
    4. Cooldown since the last execution not elapsed
    5. Size scaled by risk multiplier and capped by max investment
    6. Limit price bounded by the effective slippage
    7. Stop-loss / take-profit prices by side

    Example:
        >>> decision = RiskEvaluator().evaluate(job, params, activity, Decimal("50000"))
        >>> if decision.approved:
        ...     request = OrderRequest(..., quantity=decision.size, limit_price=decision.limit_price)
    """

    def evaluate(
        self,
        job: ExecutionJob,
        params: Optional[RiskParameters],
        activity: AccountActivity,
        reference_price: Decimal,
        now: Optional[datetime] = None,
    ) -> RiskDecision:
        """Evaluate job against account risk limits.

        Args:
            job: Execution job being processed.
            params: Account risk limits (None if not configured).
            activity: Account's executions today and last execution time.
            reference_price: Current market price of the job's pair.
            now: Evaluation time (defaults to current UTC time).

        Returns:
            RiskDecision; approved decisions carry size and prices.
        """
        now = now or datetime.now(timezone.utc)

        if params is None:
            return RiskDecision.reject(f"No risk limits configured for account {job.account}")

        if not params.is_active:
            return RiskDecision.reject(f"Copy trading is disabled for account {job.account}")

        if reference_price <= Decimal("0"):
            return RiskDecision.reject(f"Invalid reference price {reference_price}")

        if params.max_executions_per_day and activity.executions_today >= params.max_executions_per_day:
            return RiskDecision.reject(
                f"Daily execution limit reached ({params.max_executions_per_day})"
            )

        if params.cooldown_seconds and activity.last_executed_at is not None:
            ready_at = activity.last_executed_at + timedelta(seconds=params.cooldown_seconds)
            if now < ready_at:
                remaining = int((ready_at - now).total_seconds()) + 1
                return RiskDecision.reject(f"Cooldown active, {remaining}s remaining")

        warnings: list[str] = []

        size = job.requested_size * params.risk_multiplier
        if params.risk_multiplier != Decimal("1"):
            warnings.append(f"Size scaled by risk multiplier {params.risk_multiplier}")

        if size * reference_price > params.max_investment:
            size = params.max_investment / reference_price
            warnings.append(f"Size reduced to max investment {params.max_investment}")

        size = size.quantize(SIZE_QUANTUM, rounding=ROUND_DOWN)
        if size <= Decimal("0"):
            return RiskDecision.reject("Size reduced to zero by risk limits")

        slippage = job.max_slippage
        if params.max_slippage_percent is not None:
            slippage = min(slippage, params.max_slippage_percent)

        is_buy = job.side == OrderSide.BUY
        limit_price = self._offset(reference_price, slippage, up=is_buy)

        stop_loss_price = None
        if params.stop_loss_percent is not None:
            stop_loss_price = self._offset(reference_price, params.stop_loss_percent, up=not is_buy)

        take_profit_price = None
        if params.take_profit_percent is not None:
            take_profit_price = self._offset(reference_price, params.take_profit_percent, up=is_buy)

        return RiskDecision(
            approved=True,
            size=size,
            limit_price=limit_price,
            stop_loss_price=stop_loss_price,
            take_profit_price=take_profit_price,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _offset(price: Decimal, percent: Decimal, up: bool) -> Decimal:
        factor = percent / HUNDRED
        return price * (Decimal("1") + factor) if up else price * (Decimal("1") - factor)
