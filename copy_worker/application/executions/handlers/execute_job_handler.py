"""ExecuteJob Handler - orchestrates one copy-trade execution.

This is the core use case of the worker: validate → claim → risk gate →
submit → report.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from copy_worker.application.executions.commands import ExecuteJobCommand, RejectJobCommand
from copy_worker.application.executions.dtos import ExecutionOutcomeDTO
from copy_worker.application.shared import CommandHandler, UnitOfWork
from copy_worker.domain.exchanges.exceptions import ExchangeError, OrderStateUnknownError
from copy_worker.domain.exchanges.ports import ExchangePort
from copy_worker.domain.exchanges.value_objects import OrderRequest, OrderResult
from copy_worker.domain.executions.entities import ExecutionJob
from copy_worker.domain.executions.exceptions import (
    ExecutionJobNotFoundError,
    JobValidationError,
    RiskRejectedError,
)
from copy_worker.domain.executions.services import RiskEvaluator
from copy_worker.domain.executions.value_objects import (
    AccountActivity,
    AssetPair,
    OrderSide,
    RiskDecision,
)
from copy_worker.infrastructure.exchanges.factories import ExchangeFactory
from copy_worker.infrastructure.messaging import EventBus

from .reject_job_handler import RejectJobHandler

logger = logging.getLogger(__name__)


def build_job(command: ExecuteJobCommand) -> ExecutionJob:
    """Build a QUEUED job from command fields.

    Raises:
        JobValidationError: If any field is missing or malformed.
    """
    try:
        asset_pair = AssetPair(base=command.base.upper(), quote=command.quote.upper())
        side = OrderSide(command.side.lower())
    except ValueError as e:
        raise JobValidationError(str(e), execution_id=command.execution_id) from e

    return ExecutionJob(
        id=command.execution_id,
        source_signal=command.source_signal,
        account=command.account,
        exchange=command.exchange,
        asset_pair=asset_pair,
        side=side,
        requested_size=command.requested_size,
        max_slippage=command.max_slippage,
    )


class ExecuteJobHandler(CommandHandler[ExecuteJobCommand, ExecutionOutcomeDTO]):
    """Handler for ExecuteJob command.

    Flow:
    1. **Claim**: load or create the job. A final job returns its stored
       outcome; a PROCESSING job is failed for reconciliation.
    2. **Reference price** from the exchange connector.
    3. **Phase 1**: QUEUED → PROCESSING and the risk gate, in one transaction
       holding the account's risk-limit row lock.
    4. **Submit** the IOC limit order (client order ID = job ID).
    5. **Phase 2**: record the fill or the exchange failure.
       An order whose state is unknown fails the job for reconciliation.

    Business failures (validation, risk, exchange) end as a FAILED job and an
    ``executed=False`` outcome. Infrastructure errors propagate; a job left
    in PROCESSING is picked up by stale job recovery.

    Example:
        >>> handler = ExecuteJobHandler(
        ...     uow=unit_of_work,
        ...     exchange_factory=exchange_factory,
        ...     event_bus=event_bus,
        ... )
        >>> outcome = await handler.handle(command)
        >>> outcome.to_dict()  # {"executed": True, "executionId": "job-1"}
    """

    def __init__(
        self,
        uow: UnitOfWork,
        exchange_factory: ExchangeFactory,
        event_bus: EventBus,
        risk_evaluator: Optional[RiskEvaluator] = None,
    ) -> None:
        self.uow = uow
        self.exchange_factory = exchange_factory
        self.event_bus = event_bus
        self.risk_evaluator = risk_evaluator or RiskEvaluator()
        self._reject_handler = RejectJobHandler(uow, event_bus)

    async def handle(self, command: ExecuteJobCommand) -> ExecutionOutcomeDTO:
        """Execute copy-trade job.

        Returns:
            ExecutionOutcomeDTO (executed=True with the job ID on success).
        """
        logger.info(
            "execute_job.started",
            extra={
                "execution_id": command.execution_id,
                "account": command.account,
                "exchange": command.exchange,
                "side": command.side,
                "requested_size": str(command.requested_size),
            },
        )

        try:
            candidate = build_job(command)
        except JobValidationError as e:
            return await self._reject_handler.handle(
                RejectJobCommand(execution_id=command.execution_id, reason=str(e))
            )

        # ===== CLAIM / IDEMPOTENCY =====
        async with self.uow:
            job = await self.uow.jobs.get_by_id(candidate.id)

            if job is None:
                job = candidate
                await self.uow.jobs.save(job)
                await self.uow.commit()

            elif job.is_terminal:
                logger.info(
                    "execute_job.already_final",
                    extra={"execution_id": job.id, "status": job.status.value},
                )
                return ExecutionOutcomeDTO.from_entity(job)

            elif job.is_processing:
                logger.error(
                    "execute_job.interrupted_attempt",
                    extra={"execution_id": job.id, "attempts": job.attempts},
                )
                job.mark_needs_reconciliation("previous attempt was interrupted")
                await self.uow.jobs.save(job)
                await self.uow.commit()
                await self._publish(job)
                return ExecutionOutcomeDTO.from_entity(job)

        try:
            exchange = self.exchange_factory.create_exchange(job.exchange)
        except ExchangeError as e:
            return await self._fail(job.id, str(e))

        try:
            return await self._execute(job, exchange)
        finally:
            await exchange.close()

    async def _execute(self, job: ExecutionJob, exchange: ExchangePort) -> ExecutionOutcomeDTO:
        try:
            await exchange.initialize()
            reference_price = await exchange.get_reference_price(job.symbol)
        except ExchangeError as e:
            logger.error(
                "execute_job.reference_price_failed",
                extra={"execution_id": job.id, "error": str(e)},
            )
            return await self._fail(job.id, f"Exchange error: {e}")

        # ===== PHASE 1: CLAIM + RISK GATE =====
        async with self.uow:
            job = await self._load(job.id)

            if not job.is_queued:
                # Claimed by a concurrent delivery of the same message
                logger.warning(
                    "execute_job.claimed_elsewhere",
                    extra={"execution_id": job.id, "status": job.status.value},
                )
                return ExecutionOutcomeDTO.from_entity(job)

            job.start_processing()
            try:
                decision = await self._check_risk(job, reference_price)
            except RiskRejectedError as e:
                decision = None
                job.mark_failed(f"Risk rejected: {e.message}")

            await self.uow.jobs.save(job)
            await self.uow.commit()

        await self._publish(job)

        if decision is None:
            logger.warning(
                "execute_job.risk_rejected",
                extra={"execution_id": job.id, "reason": job.error_message},
            )
            return ExecutionOutcomeDTO.from_entity(job)

        logger.info(
            "execute_job.phase1_committed",
            extra={
                "execution_id": job.id,
                "size": str(decision.size),
                "limit_price": str(decision.limit_price),
                "warnings": list(decision.warnings),
            },
        )

        # ===== EXCHANGE CALL =====
        request = OrderRequest(
            client_order_id=job.id,
            symbol=job.symbol,
            side=job.side.value,
            quantity=decision.size,
            limit_price=decision.limit_price,
        )
        try:
            order_result = await exchange.submit_order(request)
        except OrderStateUnknownError as e:
            logger.critical(
                "execute_job.order_state_unknown",
                extra={"execution_id": job.id, "error": str(e)},
            )
            return await self._reconcile(job.id, f"order state unknown: {e}")
        except ExchangeError as e:
            logger.error(
                "execute_job.exchange_failed",
                extra={"execution_id": job.id, "error": str(e)},
            )
            return await self._fail(job.id, f"Exchange error: {e}")

        logger.info(
            "execute_job.exchange_success",
            extra={
                "execution_id": job.id,
                "order_id": order_result.order_id,
                "filled_quantity": str(order_result.filled_quantity),
                "status": order_result.status.value,
            },
        )

        # ===== PHASE 2: REPORT =====
        return await self._confirm(job.id, order_result, decision)

    async def _check_risk(self, job: ExecutionJob, reference_price: Decimal) -> RiskDecision:
        """Run the risk gate inside the Phase 1 transaction.

        Raises:
            RiskRejectedError: If the account's limits reject the job.
        """
        now = datetime.now(timezone.utc)
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

        params = await self.uow.risk_limits.get_for_account(job.account, for_update=True)
        activity = AccountActivity(
            executions_today=await self.uow.jobs.count_submitted_since(
                job.account, start_of_day, exclude_id=job.id
            ),
            last_executed_at=await self.uow.jobs.last_submitted_at(job.account, exclude_id=job.id),
        )

        decision = self.risk_evaluator.evaluate(job, params, activity, reference_price, now=now)
        if not decision.approved:
            raise RiskRejectedError(decision.reason or "rejected", execution_id=job.id)
        return decision

    async def _confirm(
        self,
        execution_id: str,
        order_result: OrderResult,
        decision: RiskDecision,
    ) -> ExecutionOutcomeDTO:
        async with self.uow:
            job = await self._load(execution_id)

            if not job.is_processing:
                # Stale job recovery already failed it; the fill must be reconciled
                logger.critical(
                    "execute_job.fill_after_recovery",
                    extra={
                        "execution_id": job.id,
                        "order_id": order_result.order_id,
                        "filled_quantity": str(order_result.filled_quantity),
                        "status": job.status.value,
                    },
                )
                return ExecutionOutcomeDTO.from_entity(job)

            job.mark_executed(
                order_result,
                stop_loss_price=decision.stop_loss_price,
                take_profit_price=decision.take_profit_price,
            )
            await self.uow.jobs.save(job)
            await self.uow.commit()

        logger.info(
            "execute_job.completed",
            extra={"execution_id": job.id, "order_id": job.exchange_order_id},
        )
        await self._publish(job)
        return ExecutionOutcomeDTO.from_entity(job)

    async def _fail(self, execution_id: str, reason: str) -> ExecutionOutcomeDTO:
        async with self.uow:
            job = await self._load(execution_id)
            if job.is_terminal:
                return ExecutionOutcomeDTO.from_entity(job)

            job.mark_failed(reason)
            await self.uow.jobs.save(job)
            await self.uow.commit()

        logger.warning(
            "execute_job.failed",
            extra={"execution_id": job.id, "error": reason},
        )
        await self._publish(job)
        return ExecutionOutcomeDTO.from_entity(job)

    async def _reconcile(self, execution_id: str, reason: str) -> ExecutionOutcomeDTO:
        async with self.uow:
            job = await self._load(execution_id)
            if not job.is_processing:
                return ExecutionOutcomeDTO.from_entity(job)

            job.mark_needs_reconciliation(reason)
            await self.uow.jobs.save(job)
            await self.uow.commit()

        await self._publish(job)
        return ExecutionOutcomeDTO.from_entity(job)

    async def _load(self, execution_id: str) -> ExecutionJob:
        job = await self.uow.jobs.get_by_id(execution_id, for_update=True)
        if job is None:
            raise ExecutionJobNotFoundError("Execution job not found", execution_id=execution_id)
        return job

    async def _publish(self, job: ExecutionJob) -> None:
        await self.event_bus.publish_all(job.get_domain_events())
        job.clear_domain_events()
