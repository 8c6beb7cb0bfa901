"""Application ORM model. Status and assignee change only via compare-and-set."""

from typing import Any

from sqlalchemy import JSON, CheckConstraint, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from permit_workflow.domain.enums import ApplicationStatus, PositionType
from permit_workflow.infrastructure.persistence.database import Base
from permit_workflow.infrastructure.persistence.models.mixins import (
    ActorAuditMixin,
    VersionedMixin,
)

_STATUS_VALUES = ", ".join(f"'{v}'" for v in ApplicationStatus.values())
_POSITION_VALUES = ", ".join(f"'{v}'" for v in PositionType.values())


class Application(ActorAuditMixin, VersionedMixin, Base):
    """Permit application. Table: application."""

    __tablename__ = "application"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Assigned after insert from the id; nullable only within the creating transaction.
    application_number: Mapped[str | None] = mapped_column(
        String(32), nullable=True, unique=True
    )
    position: Mapped[str] = mapped_column(String(32), nullable=False)
    status: Mapped[str] = mapped_column(String(48), nullable=False, index=True)
    assigned_officer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("officer.id", ondelete="RESTRICT"), nullable=True
    )
    applicant_name: Mapped[str] = mapped_column(String(255), nullable=False)
    applicant_email: Mapped[str] = mapped_column(String(320), nullable=False)
    # ReviewStage value -> StageDecision.to_dict()
    stage_decisions: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict
    )

    __table_args__ = (
        CheckConstraint(f"status IN ({_STATUS_VALUES})", name="application_status_check"),
        CheckConstraint(
            f"position IN ({_POSITION_VALUES})", name="application_position_check"
        ),
        Index("ix_application_assigned_status", "assigned_officer_id", "status"),
    )
