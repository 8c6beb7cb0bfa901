"""Application API: thin routes delegating to the progression engine, action handlers and queries.

Engine operations return result values instead of raising; a failed result
is rendered with the status code mapped from its error kind.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from permit_workflow.api.v1.dependencies import (
    get_action_handlers,
    get_application_repo,
    get_progression_engine,
    get_workflow_queries,
)
from permit_workflow.application.dtos.application import ApplicationCreate
from permit_workflow.application.dtos.workflow import ActionResult, ProgressionResult
from permit_workflow.application.use_cases.workflow import (
    ProgressionEngine,
    StageActionHandler,
    WorkflowQueries,
)
from permit_workflow.core.exception_handlers import status_for_error
from permit_workflow.core.limiter import limit_writes
from permit_workflow.domain.enums import ReviewStage
from permit_workflow.domain.exceptions import ApplicationNotFoundException
from permit_workflow.infrastructure.persistence.repositories import ApplicationRepository
from permit_workflow.schemas.application import (
    ActionResultResponse,
    ActorRequest,
    ApplicationCreateRequest,
    ApplicationResponse,
    ApproveRequest,
    AssignmentHistoryResponse,
    ConsistencyResponse,
    OverrideRequest,
    ProgressionHistoryResponse,
    ProgressionResultResponse,
    ReassignRequest,
    RejectRequest,
    TerminateRequest,
    WorkflowStageResponse,
)

router = APIRouter()

Handlers = Annotated[dict[ReviewStage, StageActionHandler], Depends(get_action_handlers)]
Engine = Annotated[ProgressionEngine, Depends(get_progression_engine)]
Queries = Annotated[WorkflowQueries, Depends(get_workflow_queries)]


def _render(
    result: ProgressionResult | ActionResult,
    model: type[BaseModel],
    success_status: int = 200,
) -> JSONResponse:
    body = model.model_validate(result).model_dump(mode="json")
    status_code = success_status if result.success else status_for_error(result.error_kind)
    return JSONResponse(status_code=status_code, content=body)


@router.post("", response_model=ProgressionResultResponse, status_code=201)
@limit_writes
async def submit_application(
    request: Request,
    body: ApplicationCreateRequest,
    engine: Engine,
):
    """Create an application, submit it, and route it to a junior engineer.

    A missing junior engineer leaves it Submitted; the 201 body then carries
    NO_OFFICER_AVAILABLE and POST /{id}/retry finishes routing later.
    """
    result = await engine.submit_application(
        ApplicationCreate(
            position=body.position,
            applicant_name=body.applicant_name,
            applicant_email=str(body.applicant_email),
            created_by=body.submitted_by,
        )
    )
    return _render(result, ProgressionResultResponse, success_status=201)


@router.get("/{application_id}", response_model=ApplicationResponse)
async def get_application(
    application_id: int,
    application_repo: Annotated[ApplicationRepository, Depends(get_application_repo)],
):
    application = await application_repo.get_by_id(application_id)
    if not application:
        raise ApplicationNotFoundException(application_id)
    return ApplicationResponse.model_validate(application)


@router.get("/{application_id}/stage", response_model=WorkflowStageResponse)
async def get_workflow_stage(application_id: int, queries: Queries):
    """Current stage, progress percentage, and whether the application can advance."""
    return WorkflowStageResponse.model_validate(
        await queries.get_workflow_stage(application_id)
    )


@router.get(
    "/{application_id}/history", response_model=list[ProgressionHistoryResponse]
)
async def get_workflow_history(application_id: int, queries: Queries):
    """Status transitions, oldest first."""
    history = await queries.get_workflow_history(application_id)
    return [ProgressionHistoryResponse.model_validate(h) for h in history]


@router.get(
    "/{application_id}/assignments", response_model=list[AssignmentHistoryResponse]
)
async def get_assignment_history(application_id: int, queries: Queries):
    """Assignment changes, oldest first."""
    history = await queries.get_assignment_history(application_id)
    return [AssignmentHistoryResponse.model_validate(h) for h in history]


@router.get("/{application_id}/consistency", response_model=ConsistencyResponse)
async def check_consistency(application_id: int, queries: Queries):
    """Compare the cached assignee and status with the history tables."""
    return ConsistencyResponse.model_validate(
        await queries.check_consistency(application_id)
    )


@router.post("/{application_id}/retry", response_model=ProgressionResultResponse)
@limit_writes
async def retry_progression(
    request: Request, application_id: int, body: ActorRequest, engine: Engine
):
    """Re-run the boundary for the current status (e.g. after NO_OFFICER_AVAILABLE)."""
    result = await engine.retry_progression(application_id, body.actor)
    return _render(result, ProgressionResultResponse)


@router.post("/{application_id}/payment", response_model=ProgressionResultResponse)
@limit_writes
async def record_payment(
    request: Request, application_id: int, body: ActorRequest, engine: Engine
):
    """Record a completed payment and hand the application to a clerk."""
    result = await engine.record_payment(application_id, body.actor)
    return _render(result, ProgressionResultResponse)


@router.post("/{application_id}/resubmit", response_model=ProgressionResultResponse)
@limit_writes
async def resubmit_application(
    request: Request, application_id: int, body: ActorRequest, engine: Engine
):
    """Resubmit a rejected application; routing follows RESUBMISSION_POLICY."""
    result = await engine.resubmit(application_id, body.actor)
    return _render(result, ProgressionResultResponse)


@router.post("/{application_id}/reassign", response_model=ActionResultResponse)
@limit_writes
async def reassign_application(
    request: Request, application_id: int, body: ReassignRequest, engine: Engine
):
    result = await engine.reassign(application_id, body.officer_id, body.reason, body.actor)
    return _render(result, ActionResultResponse)


@router.post("/{application_id}/override", response_model=ActionResultResponse)
@limit_writes
async def override_status(
    request: Request, application_id: int, body: OverrideRequest, engine: Engine
):
    """Administrative status change; the transition must still be legal."""
    result = await engine.override_status(
        application_id, body.to_status, body.comments, body.actor
    )
    return _render(result, ActionResultResponse)


@router.post("/{application_id}/terminate", response_model=ActionResultResponse)
@limit_writes
async def terminate_application(
    request: Request, application_id: int, body: TerminateRequest, engine: Engine
):
    result = await engine.terminate(application_id, body.reason, body.actor)
    return _render(result, ActionResultResponse)


@router.post(
    "/{application_id}/actions/{stage}/approve", response_model=ActionResultResponse
)
@limit_writes
async def approve_application(
    request: Request,
    application_id: int,
    stage: ReviewStage,
    body: ApproveRequest,
    handlers: Handlers,
):
    """Record the assigned officer's approval and advance to the next stage."""
    result = await handlers[stage].approve(
        application_id,
        body.remarks,
        body.acting_officer_id,
        signature_ref=body.signature_ref,
    )
    return _render(result, ActionResultResponse)


@router.post(
    "/{application_id}/actions/{stage}/reject", response_model=ActionResultResponse
)
@limit_writes
async def reject_application(
    request: Request,
    application_id: int,
    stage: ReviewStage,
    body: RejectRequest,
    handlers: Handlers,
):
    """Record the assigned officer's rejection; a reason is required."""
    result = await handlers[stage].reject(application_id, body.reason, body.acting_officer_id)
    return _render(result, ActionResultResponse)
