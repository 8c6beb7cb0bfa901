"""Officer directory: read-only view over officers and their derived workload."""

from __future__ import annotations

from permit_workflow.application.dtos.officer import OfficerResult, OfficerWorkload
from permit_workflow.application.interfaces.repositories import (
    IApplicationRepository,
    IAssignmentHistoryRepository,
    IOfficerRepository,
)
from permit_workflow.domain.enums import OfficerRole
from permit_workflow.domain.exceptions import OfficerNotFoundException


class OfficerDirectory:
    """Answers "who can take this stage". Never mutates state.

    Workload is counted from open applications on every call rather than
    kept as a counter, so concurrent assignments cannot make it drift.
    """

    def __init__(
        self,
        officer_repo: IOfficerRepository,
        application_repo: IApplicationRepository,
        assignment_history_repo: IAssignmentHistoryRepository,
    ) -> None:
        self._officer_repo = officer_repo
        self._application_repo = application_repo
        self._assignment_history_repo = assignment_history_repo

    async def find_eligible(self, role: OfficerRole) -> list[OfficerResult]:
        """Return active officers with the given role, ordered by id."""
        return await self._officer_repo.list_active_by_role(role)

    async def find(self, officer_id: int) -> OfficerResult | None:
        return await self._officer_repo.get_by_id(officer_id)

    async def get(self, officer_id: int) -> OfficerResult:
        """Return the officer.

        Raises:
            OfficerNotFoundException: If no officer has this id.
        """
        officer = await self._officer_repo.get_by_id(officer_id)
        if officer is None:
            raise OfficerNotFoundException(officer_id)
        return officer

    async def open_workloads(self, officer_ids: list[int]) -> dict[int, int]:
        """Return open-application counts for every id (0 when none)."""
        if not officer_ids:
            return {}
        counts = await self._application_repo.count_open_by_officer(officer_ids)
        return {officer_id: counts.get(officer_id, 0) for officer_id in officer_ids}

    async def last_assigned(self, officer_ids: list[int]) -> dict[int, int]:
        """Return the history sequence of each officer's latest binding, if any."""
        if not officer_ids:
            return {}
        return await self._assignment_history_repo.last_assignment_seq(officer_ids)

    async def workload_by_role(self, role: OfficerRole) -> list[OfficerWorkload]:
        """Return the workload of every active officer holding role."""
        officers = await self.find_eligible(role)
        counts = await self.open_workloads([o.id for o in officers])
        return [
            OfficerWorkload(
                officer_id=o.id,
                name=o.name,
                role=o.role,
                open_applications=counts[o.id],
            )
            for o in officers
        ]
