"""DTOs for append-only assignment and progression history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from permit_workflow.domain.enums import (
    ApplicationStatus,
    AssignmentStrategy,
    OfficerRole,
)
from permit_workflow.shared.enums import SYSTEM_ACTOR, AssignmentAction


@dataclass(frozen=True)
class AssignmentHistoryCreate:
    """One officer binding change. officer_id is None for Unassigned."""

    application_id: int
    officer_id: int | None
    previous_officer_id: int | None
    role: OfficerRole | None
    action: AssignmentAction
    status_at_assignment: ApplicationStatus
    assigned_by: str = SYSTEM_ACTOR
    strategy: AssignmentStrategy | None = None
    workload_at_assignment: int | None = None
    reason: str | None = None


@dataclass(frozen=True)
class AssignmentHistoryResult:
    id: str
    application_id: int
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


@dataclass(frozen=True)
class ProgressionHistoryCreate:
    """One status transition."""

    application_id: int
    from_status: ApplicationStatus
    to_status: ApplicationStatus
    from_officer_id: int | None
    to_officer_id: int | None
    comments: str | None
    is_auto_progression: bool
    triggered_by: str = SYSTEM_ACTOR


@dataclass(frozen=True)
class ProgressionHistoryResult:
    id: str
    application_id: int
    from_status: ApplicationStatus
    to_status: ApplicationStatus
    from_officer_id: int | None
    to_officer_id: int | None
    comments: str | None
    is_auto_progression: bool
    triggered_by: str
    created_at: datetime
