"""Append-only history models: assignment history and workflow progression history."""

from sqlalchemy import Boolean, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from permit_workflow.infrastructure.persistence.database import Base
from permit_workflow.infrastructure.persistence.models.mixins import (
    CuidMixin,
    SequencedMixin,
)


class AssignmentHistory(CuidMixin, SequencedMixin, Base):
    """Officer binding change. officer_id is null for an unassignment."""

    __tablename__ = "assignment_history"

    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("application.id", ondelete="RESTRICT"), nullable=False
    )
    officer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("officer.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    previous_officer_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("officer.id", ondelete="RESTRICT"), nullable=True
    )
    role: Mapped[str | None] = mapped_column(String(64), nullable=True)
    action: Mapped[str] = mapped_column(String(32), nullable=False)
    status_at_assignment: Mapped[str] = mapped_column(String(48), nullable=False)
    assigned_by: Mapped[str] = mapped_column(String(128), nullable=False)
    strategy: Mapped[str | None] = mapped_column(String(32), nullable=True)
    workload_at_assignment: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_assignment_history_application", "application_id", "seq"),
    )


class WorkflowProgressionHistory(CuidMixin, SequencedMixin, Base):
    """Status transition record."""

    __tablename__ = "workflow_progression_history"

    application_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("application.id", ondelete="RESTRICT"), nullable=False
    )
    from_status: Mapped[str] = mapped_column(String(48), nullable=False)
    to_status: Mapped[str] = mapped_column(String(48), nullable=False)
    from_officer_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    to_officer_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_auto_progression: Mapped[bool] = mapped_column(Boolean, nullable=False)
    triggered_by: Mapped[str] = mapped_column(String(128), nullable=False)

    __table_args__ = (
        Index("ix_progression_history_application", "application_id", "seq"),
    )
