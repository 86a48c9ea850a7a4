"""RiskLimitsRepository Port - read access to per-account risk limits."""

from abc import ABC, abstractmethod
from typing import Optional

from ..value_objects import RiskParameters


class RiskLimitsRepository(ABC):
    """Abstract interface for account risk limits.

    The worker never writes risk limits; they are owned by account
    configuration.
    """

    @abstractmethod
    async def get_for_account(
        self,
        account: str,
        for_update: bool = False,
    ) -> Optional[RiskParameters]:
        """Load risk limits for account.

        Args:
            account: Account ID.
            for_update: Lock the row until the transaction ends. Concurrent
                jobs of the same account serialize on this lock.

        Returns:
            RiskParameters or None if the account has no limits configured.
        """
        pass
