"""Append-only history repositories (assignment, workflow progression)."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from permit_workflow.application.dtos.history import (
    AssignmentHistoryCreate,
    AssignmentHistoryResult,
    ProgressionHistoryCreate,
    ProgressionHistoryResult,
)
from permit_workflow.domain.enums import (
    ApplicationStatus,
    AssignmentStrategy,
    OfficerRole,
)
from permit_workflow.infrastructure.persistence.models.history import (
    AssignmentHistory,
    WorkflowProgressionHistory,
)
from permit_workflow.shared.enums import AssignmentAction
from permit_workflow.shared.utils.datetime import ensure_utc

# Actions that bind an officer (count for round-robin recency).
_BINDING_ACTIONS = [
    AssignmentAction.AUTO_ASSIGNED.value,
    AssignmentAction.MANUALLY_ASSIGNED.value,
    AssignmentAction.REASSIGNED.value,
]


def _to_assignment_result(h: AssignmentHistory) -> AssignmentHistoryResult:
    return AssignmentHistoryResult(
        id=h.id,
        application_id=h.application_id,
        officer_id=h.officer_id,
        previous_officer_id=h.previous_officer_id,
        role=OfficerRole(h.role) if h.role else None,
        action=AssignmentAction(h.action),
        status_at_assignment=ApplicationStatus(h.status_at_assignment),
        assigned_by=h.assigned_by,
        strategy=AssignmentStrategy(h.strategy) if h.strategy else None,
        workload_at_assignment=h.workload_at_assignment,
        reason=h.reason,
        created_at=ensure_utc(h.created_at),
    )


def _to_progression_result(h: WorkflowProgressionHistory) -> ProgressionHistoryResult:
    return ProgressionHistoryResult(
        id=h.id,
        application_id=h.application_id,
        from_status=ApplicationStatus(h.from_status),
        to_status=ApplicationStatus(h.to_status),
        from_officer_id=h.from_officer_id,
        to_officer_id=h.to_officer_id,
        comments=h.comments,
        is_auto_progression=h.is_auto_progression,
        triggered_by=h.triggered_by,
        created_at=ensure_utc(h.created_at),
    )


class AssignmentHistoryRepository:
    """Assignment history repository. Implements IAssignmentHistoryRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, data: AssignmentHistoryCreate) -> AssignmentHistoryResult:
        row = AssignmentHistory(
            application_id=data.application_id,
            officer_id=data.officer_id,
            previous_officer_id=data.previous_officer_id,
            role=data.role.value if data.role else None,
            action=data.action.value,
            status_at_assignment=data.status_at_assignment.value,
            assigned_by=data.assigned_by,
            strategy=data.strategy.value if data.strategy else None,
            workload_at_assignment=data.workload_at_assignment,
            reason=data.reason,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _to_assignment_result(row)

    async def list_by_application(
        self, application_id: int
    ) -> list[AssignmentHistoryResult]:
        result = await self.db.execute(
            select(AssignmentHistory)
            .where(AssignmentHistory.application_id == application_id)
            .order_by(AssignmentHistory.seq)
        )
        return [_to_assignment_result(h) for h in result.scalars().all()]

    async def get_latest(self, application_id: int) -> AssignmentHistoryResult | None:
        result = await self.db.execute(
            select(AssignmentHistory)
            .where(AssignmentHistory.application_id == application_id)
            .order_by(AssignmentHistory.seq.desc())
            .limit(1)
        )
        row = result.scalar_one_or_none()
        return _to_assignment_result(row) if row else None

    async def last_assignment_seq(self, officer_ids: list[int]) -> dict[int, int]:
        if not officer_ids:
            return {}
        result = await self.db.execute(
            select(AssignmentHistory.officer_id, func.max(AssignmentHistory.seq))
            .where(
                AssignmentHistory.officer_id.in_(officer_ids),
                AssignmentHistory.action.in_(_BINDING_ACTIONS),
            )
            .group_by(AssignmentHistory.officer_id)
        )
        return {officer_id: seq for officer_id, seq in result.all()}


class ProgressionHistoryRepository:
    """Workflow progression history repository. Implements IProgressionHistoryRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def append(self, data: ProgressionHistoryCreate) -> ProgressionHistoryResult:
        row = WorkflowProgressionHistory(
            application_id=data.application_id,
            from_status=data.from_status.value,
            to_status=data.to_status.value,
            from_officer_id=data.from_officer_id,
            to_officer_id=data.to_officer_id,
            comments=data.comments,
            is_auto_progression=data.is_auto_progression,
            triggered_by=data.triggered_by,
        )
        self.db.add(row)
        await self.db.flush()
        await self.db.refresh(row)
        return _to_progression_result(row)

    async def list_by_application(
        self, application_id: int
    ) -> list[ProgressionHistoryResult]:
        result = await self.db.execute(
            select(WorkflowProgressionHistory)
            .where(WorkflowProgressionHistory.application_id == application_id)
            .order_by(WorkflowProgressionHistory.seq)
        )
        return [_to_progression_result(h) for h in result.scalars().all()]
