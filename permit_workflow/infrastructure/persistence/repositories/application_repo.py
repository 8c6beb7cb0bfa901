"""Application repository. Status changes are compare-and-set updates."""

from __future__ import annotations

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from permit_workflow.application.dtos.application import (
    ApplicationCreate,
    ApplicationResult,
    ApplicationTransition,
)
from permit_workflow.domain.enums import ApplicationStatus, PositionType
from permit_workflow.domain.status_machine import TERMINAL_STATUSES
from permit_workflow.infrastructure.persistence.models.application import Application
from permit_workflow.shared.utils.datetime import ensure_utc, utc_now
from permit_workflow.shared.utils.generators import format_application_number

_TERMINAL_VALUES = [s.value for s in TERMINAL_STATUSES]


def _to_result(a: Application) -> ApplicationResult:
    """Map Application ORM to ApplicationResult DTO."""
    return ApplicationResult(
        id=a.id,
        application_number=a.application_number or "",
        position=PositionType(a.position),
        status=ApplicationStatus(a.status),
        assigned_officer_id=a.assigned_officer_id,
        version=a.version,
        applicant_name=a.applicant_name,
        applicant_email=a.applicant_email,
        stage_decisions=dict(a.stage_decisions or {}),
        created_by=a.created_by,
        updated_by=a.updated_by,
        created_at=ensure_utc(a.created_at),
        updated_at=ensure_utc(a.updated_at),
    )


class ApplicationRepository:
    """Application repository. Implements IApplicationRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, application_id: int) -> ApplicationResult | None:
        result = await self.db.execute(
            select(Application)
            .where(Application.id == application_id)
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        return _to_result(row) if row else None

    async def create(
        self, data: ApplicationCreate, number_prefix: str
    ) -> ApplicationResult:
        """Insert a Draft application; the number is derived from the new id."""
        application = Application(
            position=data.position.value,
            status=ApplicationStatus.DRAFT.value,
            applicant_name=data.applicant_name,
            applicant_email=data.applicant_email,
            stage_decisions={},
            created_by=data.created_by,
            updated_by=data.created_by,
        )
        self.db.add(application)
        await self.db.flush()
        application.application_number = format_application_number(
            number_prefix, utc_now().year, application.id
        )
        await self.db.flush()
        await self.db.refresh(application)
        return _to_result(application)

    async def apply_transition(self, transition: ApplicationTransition) -> bool:
        """Compare-and-set on (status, version). Returns True if the row was updated."""
        result = await self.db.execute(
            update(Application)
            .where(
                Application.id == transition.application_id,
                Application.status == transition.expected_status.value,
                Application.version == transition.expected_version,
            )
            .values(
                status=transition.new_status.value,
                assigned_officer_id=transition.assigned_officer_id,
                stage_decisions=transition.stage_decisions,
                updated_by=transition.updated_by,
                updated_at=func.now(),
                version=Application.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def count_open_by_officer(self, officer_ids: list[int]) -> dict[int, int]:
        if not officer_ids:
            return {}
        result = await self.db.execute(
            select(Application.assigned_officer_id, func.count(Application.id))
            .where(
                Application.assigned_officer_id.in_(officer_ids),
                Application.status.not_in(_TERMINAL_VALUES),
            )
            .group_by(Application.assigned_officer_id)
        )
        return {officer_id: count for officer_id, count in result.all()}

    async def list_assigned_to(self, officer_id: int) -> list[ApplicationResult]:
        result = await self.db.execute(
            select(Application)
            .where(Application.assigned_officer_id == officer_id)
            .order_by(Application.id)
        )
        return [_to_result(a) for a in result.scalars().all()]
