"""GetExecution Query - read one execution job."""

from dataclasses import dataclass

from copy_worker.application.shared import Query


@dataclass(frozen=True)
class GetExecutionQuery(Query):
    execution_id: str
