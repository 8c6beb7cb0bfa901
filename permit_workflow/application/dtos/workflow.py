"""Result values returned by the progression engine and action handlers.

Expected failures are reported through ``error_kind`` (the domain
exception's error_code) instead of raised exceptions.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from permit_workflow.domain.enums import ApplicationStatus


@dataclass(frozen=True)
class ProgressionResult:
    """Outcome of one progression boundary."""

    success: bool
    application_id: int
    new_status: ApplicationStatus | None = None
    assigned_officer_id: int | None = None
    error_kind: str | None = None
    message: str = ""


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an officer's approve/reject, or of an administrative action.

    ``success`` reflects the core transition only. When an approval is
    recorded but the follow-on hand-off could not run (e.g. no officer
    available), ``success`` stays True and ``error_kind`` names the
    pending hand-off problem.
    """

    success: bool
    message: str
    application_id: int
    new_status: ApplicationStatus | None = None
    error_kind: str | None = None


@dataclass(frozen=True)
class WorkflowStageInfo:
    """Where an application stands in the eight-stage workflow."""

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


@dataclass(frozen=True)
class ConsistencyReport:
    """Result of cross-checking an application against its history."""

    application_id: int
    consistent: bool
    problems: list[str] = field(default_factory=list)
