"""Officer API: thin routes delegating to OfficerAdministration and the read repositories."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from permit_workflow.api.v1.dependencies import (
    get_application_repo,
    get_officer_administration,
    get_officer_repo,
    get_workflow_queries,
)
from permit_workflow.application.dtos.officer import OfficerCreate
from permit_workflow.application.use_cases.officers import OfficerAdministration
from permit_workflow.application.use_cases.workflow import WorkflowQueries
from permit_workflow.core.limiter import limit_writes
from permit_workflow.domain.enums import OfficerRole
from permit_workflow.domain.exceptions import OfficerNotFoundException
from permit_workflow.infrastructure.persistence.repositories import (
    ApplicationRepository,
    OfficerRepository,
)
from permit_workflow.schemas.application import ApplicationResponse
from permit_workflow.schemas.officer import (
    OfficerCreateRequest,
    OfficerResponse,
    OfficerWorkloadResponse,
)

router = APIRouter()


@router.post("", response_model=OfficerResponse, status_code=201)
@limit_writes
async def register_officer(
    request: Request,
    body: OfficerCreateRequest,
    admin: Annotated[OfficerAdministration, Depends(get_officer_administration)],
):
    """Register an officer. Role cannot be changed afterwards."""
    officer = await admin.register_officer(
        OfficerCreate(
            name=body.name,
            email=str(body.email),
            role=body.role,
            is_active=body.is_active,
        )
    )
    return OfficerResponse.model_validate(officer)


@router.get("/workload", response_model=list[OfficerWorkloadResponse])
async def get_officer_workload(
    queries: Annotated[WorkflowQueries, Depends(get_workflow_queries)],
    role: OfficerRole = Query(...),
):
    """Open-application count per active officer holding role."""
    workloads = await queries.get_officer_workload(role)
    return [OfficerWorkloadResponse.model_validate(w) for w in workloads]


@router.get("/{officer_id}", response_model=OfficerResponse)
async def get_officer(
    officer_id: int,
    officer_repo: Annotated[OfficerRepository, Depends(get_officer_repo)],
):
    officer = await officer_repo.get_by_id(officer_id)
    if not officer:
        raise OfficerNotFoundException(officer_id)
    return OfficerResponse.model_validate(officer)


@router.get("/{officer_id}/applications", response_model=list[ApplicationResponse])
async def list_officer_applications(
    officer_id: int,
    application_repo: Annotated[ApplicationRepository, Depends(get_application_repo)],
):
    """Applications currently assigned to the officer (the officer's queue)."""
    applications = await application_repo.list_assigned_to(officer_id)
    return [ApplicationResponse.model_validate(a) for a in applications]


@router.post("/{officer_id}/activate", response_model=OfficerResponse)
@limit_writes
async def activate_officer(
    request: Request,
    officer_id: int,
    admin: Annotated[OfficerAdministration, Depends(get_officer_administration)],
):
    """Make the officer eligible for new assignments."""
    return OfficerResponse.model_validate(await admin.activate_officer(officer_id))


@router.post("/{officer_id}/deactivate", response_model=OfficerResponse)
@limit_writes
async def deactivate_officer(
    request: Request,
    officer_id: int,
    admin: Annotated[OfficerAdministration, Depends(get_officer_administration)],
):
    """Remove the officer from future assignments; current assignments stay."""
    return OfficerResponse.model_validate(await admin.deactivate_officer(officer_id))
