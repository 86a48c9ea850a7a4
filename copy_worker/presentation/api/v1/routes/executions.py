"""Executions API routes - enqueue, inspect and cancel copy-trade jobs."""

import logging
from dataclasses import asdict

from fastapi import APIRouter, status

from copy_worker.application.executions.commands import CancelJobCommand
from copy_worker.application.executions.queries import GetExecutionQuery
from copy_worker.presentation.api.dependencies import (
    CancelJobHandlerDep,
    DispatcherDep,
    GetExecutionHandlerDep,
    UnitOfWorkDep,
)
from copy_worker.presentation.api.v1.schemas import ErrorResponse, ExecutionResponse
from copy_worker.presentation.schemas import ExecutionTaskPayload
from copy_worker.presentation.workers.tasks import enqueue_execution

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/executions", tags=["Executions"])


@router.post(
    "",
    response_model=ExecutionResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Enqueue execution job",
    responses={
        422: {"model": ErrorResponse, "description": "Invalid job payload"},
    },
)
async def create_execution(
    request: ExecutionTaskPayload,
    uow: UnitOfWorkDep,
    dispatch: DispatcherDep,
) -> ExecutionResponse:
    """Persist a QUEUED job and dispatch it to the execution queue.

    Idempotent by job ID: posting an existing job returns its current state.
    """
    job = await enqueue_execution(request.model_dump(mode="json"), uow, dispatch)

    logger.info(
        "api.create_execution.accepted",
        extra={"execution_id": job.id, "status": job.status},
    )
    return ExecutionResponse.model_validate(asdict(job))


@router.get(
    "/{execution_id}",
    response_model=ExecutionResponse,
    summary="Get execution job",
    responses={404: {"model": ErrorResponse, "description": "Unknown execution ID"}},
)
async def get_execution(execution_id: str, handler: GetExecutionHandlerDep) -> ExecutionResponse:
    job = await handler.handle(GetExecutionQuery(execution_id=execution_id))
    return ExecutionResponse.model_validate(asdict(job))


@router.post(
    "/{execution_id}/cancel",
    response_model=ExecutionResponse,
    summary="Cancel queued execution job",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown execution ID"},
        409: {"model": ErrorResponse, "description": "Job already claimed or final"},
    },
)
async def cancel_execution(execution_id: str, handler: CancelJobHandlerDep) -> ExecutionResponse:
    job = await handler.handle(CancelJobCommand(execution_id=execution_id))

    logger.info("api.cancel_execution.cancelled", extra={"execution_id": execution_id})
    return ExecutionResponse.model_validate(asdict(job))
