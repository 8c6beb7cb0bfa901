"""DTOs for permit applications (no dependency on ORM)."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from permit_workflow.domain.entities import ApplicationEntity, StageDecision
from permit_workflow.domain.enums import ApplicationStatus, PositionType, ReviewStage


@dataclass(frozen=True)
class ApplicationCreate:
    """Input for creating an application at submission."""

    position: PositionType
    applicant_name: str
    applicant_email: str
    created_by: str


@dataclass(frozen=True)
class ApplicationResult:
    """Application read model as stored."""

    id: int
    application_number: str
    position: PositionType
    status: ApplicationStatus
    assigned_officer_id: int | None
    version: int
    applicant_name: str
    applicant_email: str
    stage_decisions: dict[str, dict[str, Any]] = field(default_factory=dict)
    created_by: str | None = None
    updated_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_entity(self) -> ApplicationEntity:
        """Build the domain entity used by the status machine and handlers."""
        return ApplicationEntity(
            id=self.id,
            application_number=self.application_number,
            position=self.position,
            status=self.status,
            assigned_officer_id=self.assigned_officer_id,
            version=self.version,
            decisions={
                ReviewStage(stage): StageDecision.from_dict(data)
                for stage, data in self.stage_decisions.items()
            },
        )


@dataclass(frozen=True)
class ApplicationTransition:
    """Compare-and-set write of one status change.

    Applied only while the stored row still has ``expected_status`` and
    ``expected_version``.
    """

    application_id: int
    expected_status: ApplicationStatus
    expected_version: int
    new_status: ApplicationStatus
    assigned_officer_id: int | None
    stage_decisions: dict[str, dict[str, Any]]
    updated_by: str
