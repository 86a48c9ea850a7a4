"""SQLAlchemy implementation of RiskLimitsRepository."""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from copy_worker.domain.executions.repositories import (
    RiskLimitsRepository as RiskLimitsRepositoryPort,
)
from copy_worker.domain.executions.value_objects import RiskParameters
from copy_worker.infrastructure.persistence.sqlalchemy.mappers import RiskLimitsMapper
from copy_worker.infrastructure.persistence.sqlalchemy.models import RiskLimitsModel

logger = logging.getLogger(__name__)


class SQLAlchemyRiskLimitsRepository(RiskLimitsRepositoryPort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._mapper = RiskLimitsMapper()

    async def get_for_account(
        self,
        account: str,
        for_update: bool = False,
    ) -> Optional[RiskParameters]:
        """Load account limits.

        Invalid stored limits are treated as missing, so the risk gate
        rejects the job.
        """
        stmt = select(RiskLimitsModel).where(RiskLimitsModel.account_id == account)
        if for_update:
            stmt = stmt.with_for_update()

        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        if model is None:
            return None

        try:
            return self._mapper.to_value_object(model)
        except ValueError as e:
            logger.error(
                "risk_limits.invalid",
                extra={"account": account, "error": str(e)},
            )
            return None
