"""ExecutionJob Mapper - converts between ExecutionJob entity and ORM model."""

from datetime import datetime, timezone
from typing import Optional

from copy_worker.domain.executions.entities import ExecutionJob
from copy_worker.domain.executions.value_objects import AssetPair, JobStatus, OrderSide
from copy_worker.infrastructure.persistence.sqlalchemy.models import ExecutionJobModel


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes (SQLite drops the timezone)."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ExecutionJobMapper:
    """Mapper for ExecutionJob entity ↔ ExecutionJobModel ORM.

    Example:
        >>> mapper = ExecutionJobMapper()
        >>> model = mapper.to_model(job)  # Domain → ORM
        >>> job_back = mapper.to_entity(model)  # ORM → Domain
    """

    def to_entity(self, model: ExecutionJobModel) -> ExecutionJob:
        job = ExecutionJob(
            id=model.id,
            source_signal=model.source_signal,
            account=model.account,
            exchange=model.exchange,
            asset_pair=AssetPair(base=model.base_asset, quote=model.quote_asset),
            side=OrderSide(model.side),
            requested_size=model.requested_size,
            max_slippage=model.max_slippage,
            status=JobStatus(model.status),
            attempts=model.attempts,
            created_at=as_utc(model.created_at),
            started_at=as_utc(model.started_at),
            completed_at=as_utc(model.completed_at),
            exchange_order_id=model.exchange_order_id,
            filled_quantity=model.filled_quantity,
            average_price=model.average_price,
            fee_amount=model.fee_amount,
            stop_loss_price=model.stop_loss_price,
            take_profit_price=model.take_profit_price,
            error_message=model.error_message,
        )

        # Loaded state must not replay events
        job.clear_domain_events()
        return job

    def to_model(self, entity: ExecutionJob) -> ExecutionJobModel:
        model = ExecutionJobModel(
            id=entity.id,
            source_signal=entity.source_signal,
            account=entity.account,
            exchange=entity.exchange,
            base_asset=entity.asset_pair.base,
            quote_asset=entity.asset_pair.quote,
            side=entity.side.value,
            requested_size=entity.requested_size,
            max_slippage=entity.max_slippage,
            created_at=entity.created_at,
        )
        return self.update_model_from_entity(model, entity)

    def update_model_from_entity(
        self, model: ExecutionJobModel, entity: ExecutionJob
    ) -> ExecutionJobModel:
        """Copy mutable state (status, execution details) onto the model."""
        model.status = entity.status.value
        model.attempts = entity.attempts
        model.exchange_order_id = entity.exchange_order_id
        model.filled_quantity = entity.filled_quantity
        model.average_price = entity.average_price
        model.fee_amount = entity.fee_amount
        model.stop_loss_price = entity.stop_loss_price
        model.take_profit_price = entity.take_profit_price
        model.error_message = entity.error_message
        model.started_at = entity.started_at
        model.completed_at = entity.completed_at
        return model
