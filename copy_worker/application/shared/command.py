"""Base Command class for CQRS pattern.

A command requests a change of system state (write operation).
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Command(ABC):
    """Base class for all commands.

    Commands are immutable, verb-named (ExecuteJob, CancelJob) and carry
    data only; the logic lives in the handler.

    Example:
        >>> @dataclass(frozen=True)
        ... class CancelJobCommand(Command):
        ...     execution_id: str

        >>> result = await handler.handle(CancelJobCommand(execution_id="job-1"))
    """

    pass
