"""Application and workflow API schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from permit_workflow.domain.enums import (
    ApplicationStatus,
    AssignmentStrategy,
    OfficerRole,
    PositionType,
)
from permit_workflow.shared.enums import AssignmentAction


class ApplicationCreateRequest(BaseModel):
    """Request body for submitting an application."""

    position: PositionType
    applicant_name: str = Field(..., min_length=1, max_length=255)
    applicant_email: EmailStr
    submitted_by: str = Field(..., min_length=1, max_length=128)


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    application_number: str
    position: PositionType
    status: ApplicationStatus
    assigned_officer_id: int | None
    applicant_name: str
    applicant_email: str
    stage_decisions: dict[str, dict[str, Any]]
    created_by: str | None
    updated_by: str | None
    created_at: datetime | None
    updated_at: datetime | None


class ApproveRequest(BaseModel):
    acting_officer_id: int
    remarks: str | None = Field(default=None, max_length=4000)
    signature_ref: str | None = Field(default=None, max_length=255)


class RejectRequest(BaseModel):
    """Reason emptiness is checked by the handler so it reports MISSING_REASON."""

    acting_officer_id: int
    reason: str | None = Field(default=None, max_length=4000)


class ActorRequest(BaseModel):
    actor: str = Field(..., min_length=1, max_length=128)


class ReassignRequest(ActorRequest):
    officer_id: int
    reason: str | None = Field(default=None, max_length=4000)


class OverrideRequest(ActorRequest):
    to_status: ApplicationStatus
    comments: str | None = Field(default=None, max_length=4000)


class TerminateRequest(ActorRequest):
    reason: str | None = Field(default=None, max_length=4000)


class ProgressionResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    application_id: int
    new_status: ApplicationStatus | None
    assigned_officer_id: int | None
    error_kind: str | None
    message: str


class ActionResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    success: bool
    message: str
    application_id: int
    new_status: ApplicationStatus | None
    error_kind: str | None


class WorkflowStageResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    application_id: int
    application_number: str
    current_status: ApplicationStatus
    current_officer_id: int | None
    current_officer_name: str | None
    stage_number: int
    total_stages: int
    stage_name: str
    next_stage_name: str | None
    progress_percentage: float
    can_progress: bool
    blocked_reason: str | None


class ProgressionHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    from_status: ApplicationStatus
    to_status: ApplicationStatus
    from_officer_id: int | None
    to_officer_id: int | None
    comments: str | None
    is_auto_progression: bool
    triggered_by: str
    created_at: datetime


class AssignmentHistoryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    officer_id: int | None
    previous_officer_id: int | None
    role: OfficerRole | None
    action: AssignmentAction
    status_at_assignment: ApplicationStatus
    assigned_by: str
    strategy: AssignmentStrategy | None
    workload_at_assignment: int | None
    reason: str | None
    created_at: datetime


class ConsistencyResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    application_id: int
    consistent: bool
    problems: list[str]
