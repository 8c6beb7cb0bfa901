"""Register, activate and deactivate officers.

Officers are never deleted and their role never changes; deactivation
only removes them from future assignment. Applications already assigned
to a deactivated officer keep that assignee until reassigned.
"""

from __future__ import annotations

from permit_workflow.application.dtos.officer import OfficerCreate, OfficerResult
from permit_workflow.application.interfaces.repositories import IOfficerRepository
from permit_workflow.domain.exceptions import (
    OfficerNotFoundException,
    ValidationException,
)
from permit_workflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class OfficerAdministration:
    """Officer lifecycle operations over IOfficerRepository."""

    def __init__(self, officer_repo: IOfficerRepository) -> None:
        self._officers = officer_repo

    async def register_officer(self, data: OfficerCreate) -> OfficerResult:
        """Register an officer.

        Raises:
            ValidationException: Blank name or email already registered.
        """
        if not data.name.strip():
            raise ValidationException("Officer name is required", "name")
        if await self._officers.get_by_email(data.email) is not None:
            raise ValidationException(
                f"Officer with email {data.email} already exists", "email"
            )
        officer = await self._officers.create(data)
        logger.info(
            "Officer %s registered (role=%s, active=%s)",
            officer.id,
            officer.role.value,
            officer.is_active,
        )
        return officer

    async def activate_officer(self, officer_id: int) -> OfficerResult:
        return await self._set_active(officer_id, True)

    async def deactivate_officer(self, officer_id: int) -> OfficerResult:
        return await self._set_active(officer_id, False)

    async def _set_active(self, officer_id: int, is_active: bool) -> OfficerResult:
        officer = await self._officers.set_active(officer_id, is_active)
        if officer is None:
            raise OfficerNotFoundException(officer_id)
        logger.info(
            "Officer %s %s", officer_id, "activated" if is_active else "deactivated"
        )
        return officer
