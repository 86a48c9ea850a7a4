"""Handlers for Executions bounded context."""

from .cancel_job_handler import CancelJobHandler
from .enqueue_job_handler import EnqueueJobHandler
from .execute_job_handler import ExecuteJobHandler, build_job
from .get_execution_handler import GetExecutionHandler
from .recover_stale_jobs_handler import RecoverStaleJobsHandler
from .reject_job_handler import RejectJobHandler

__all__ = [
    "ExecuteJobHandler",
    "EnqueueJobHandler",
    "RejectJobHandler",
    "CancelJobHandler",
    "RecoverStaleJobsHandler",
    "GetExecutionHandler",
    "build_job",
]
