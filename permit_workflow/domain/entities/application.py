"""Application domain entity and per-stage decision record."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from permit_workflow.domain.enums import (
    ApplicationStatus,
    OfficerRole,
    PositionType,
    ReviewStage,
)
from permit_workflow.domain.routing import expected_role


@dataclass(frozen=True)
class StageDecision:
    """Approval or rejection recorded by a stage's officer."""

    approved: bool
    officer_id: int
    comments: str | None
    decided_at: datetime
    signature_ref: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "approved": self.approved,
            "officer_id": self.officer_id,
            "comments": self.comments,
            "decided_at": self.decided_at.isoformat(),
            "signature_ref": self.signature_ref,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StageDecision":
        return cls(
            approved=bool(data["approved"]),
            officer_id=int(data["officer_id"]),
            comments=data.get("comments"),
            decided_at=datetime.fromisoformat(data["decided_at"]),
            signature_ref=data.get("signature_ref"),
        )


@dataclass
class ApplicationEntity:
    """Domain entity for a permit application.

    ``version`` is the optimistic-lock token read with the row; a write
    succeeds only while the stored version still matches it.
    """

    id: int
    application_number: str
    position: PositionType
    status: ApplicationStatus
    assigned_officer_id: int | None
    version: int
    decisions: dict[ReviewStage, StageDecision] = field(default_factory=dict)

    def is_assigned_to(self, officer_id: int) -> bool:
        """Return whether ``officer_id`` is the current assignee."""
        return self.assigned_officer_id is not None and (
            self.assigned_officer_id == officer_id
        )

    def expected_assignee_role(self) -> OfficerRole | None:
        """Return the role the assignee must hold for the current status."""
        return expected_role(self.position, self.status)

    def record_decision(self, stage: ReviewStage, decision: StageDecision) -> None:
        """Record (or overwrite, after resubmission) the decision for ``stage``."""
        self.decisions[stage] = decision
