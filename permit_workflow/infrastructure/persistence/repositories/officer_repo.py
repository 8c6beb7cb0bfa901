"""Officer repository."""

from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from permit_workflow.application.dtos.officer import OfficerCreate, OfficerResult
from permit_workflow.domain.enums import OfficerRole
from permit_workflow.infrastructure.persistence.models.officer import Officer
from permit_workflow.shared.utils.datetime import ensure_utc


def _to_result(o: Officer) -> OfficerResult:
    """Map Officer ORM to OfficerResult DTO."""
    return OfficerResult(
        id=o.id,
        name=o.name,
        email=o.email,
        role=OfficerRole(o.role),
        is_active=o.is_active,
        created_at=ensure_utc(o.created_at),
    )


class OfficerRepository:
    """Officer repository. Implements IOfficerRepository."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get_by_id(self, officer_id: int) -> OfficerResult | None:
        officer = await self.db.get(Officer, officer_id)
        return _to_result(officer) if officer else None

    async def get_by_email(self, email: str) -> OfficerResult | None:
        result = await self.db.execute(
            select(Officer).where(func.lower(Officer.email) == email.lower())
        )
        officer = result.scalar_one_or_none()
        return _to_result(officer) if officer else None

    async def list_active_by_role(self, role: OfficerRole) -> list[OfficerResult]:
        result = await self.db.execute(
            select(Officer)
            .where(Officer.role == role.value, Officer.is_active.is_(True))
            .order_by(Officer.id)
        )
        return [_to_result(o) for o in result.scalars().all()]

    async def create(self, data: OfficerCreate) -> OfficerResult:
        officer = Officer(
            name=data.name,
            email=data.email,
            role=data.role.value,
            is_active=data.is_active,
        )
        self.db.add(officer)
        await self.db.flush()
        await self.db.refresh(officer)
        return _to_result(officer)

    async def set_active(self, officer_id: int, is_active: bool) -> OfficerResult | None:
        officer = await self.db.get(Officer, officer_id)
        if officer is None:
            return None
        officer.is_active = is_active
        await self.db.flush()
        await self.db.refresh(officer)
        return _to_result(officer)
