"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Protocol

from permit_workflow.domain.enums import OfficerRole

if TYPE_CHECKING:
    from permit_workflow.application.dtos.application import (
        ApplicationCreate,
        ApplicationResult,
        ApplicationTransition,
    )
    from permit_workflow.application.dtos.history import (
        AssignmentHistoryCreate,
        AssignmentHistoryResult,
        ProgressionHistoryCreate,
        ProgressionHistoryResult,
    )
    from permit_workflow.application.dtos.officer import OfficerCreate, OfficerResult


# Application repository interface
class IApplicationRepository(Protocol):
    """Protocol for application persistence (DIP)."""

    async def get_by_id(self, application_id: int) -> ApplicationResult | None:
        """Return the application or None."""

    async def create(
        self, data: ApplicationCreate, number_prefix: str
    ) -> ApplicationResult:
        """Insert a Draft application and assign its application number."""

    async def apply_transition(self, transition: ApplicationTransition) -> bool:
        """Compare-and-set status, assignee and decisions.

        Returns False (and writes nothing) when the stored status or
        version no longer match the transition's expectations.
        """

    async def count_open_by_officer(self, officer_ids: list[int]) -> dict[int, int]:
        """Return open (non-terminal) application counts keyed by assignee id."""

    async def list_assigned_to(self, officer_id: int) -> list[ApplicationResult]:
        """Return applications currently assigned to the officer."""


# Officer repository interface
class IOfficerRepository(Protocol):
    """Protocol for officer persistence (DIP)."""

    async def get_by_id(self, officer_id: int) -> OfficerResult | None:
        """Return the officer or None."""

    async def get_by_email(self, email: str) -> OfficerResult | None:
        """Return the officer registered with email (case-insensitive) or None."""

    async def list_active_by_role(self, role: OfficerRole) -> list[OfficerResult]:
        """Return active officers holding role, ordered by id."""

    async def create(self, data: OfficerCreate) -> OfficerResult:
        """Register an officer."""

    async def set_active(self, officer_id: int, is_active: bool) -> OfficerResult | None:
        """Activate or deactivate; return updated officer or None if missing."""


# Assignment history repository interface (append-only)
class IAssignmentHistoryRepository(Protocol):
    """Protocol for assignment history (DIP)."""

    async def append(self, data: AssignmentHistoryCreate) -> AssignmentHistoryResult:
        """Append one record."""

    async def list_by_application(
        self, application_id: int
    ) -> list[AssignmentHistoryResult]:
        """Return records for the application, oldest first."""

    async def get_latest(self, application_id: int) -> AssignmentHistoryResult | None:
        """Return the most recent record for the application."""

    async def last_assignment_seq(self, officer_ids: list[int]) -> dict[int, int]:
        """Return the insertion sequence of each officer's latest binding record.

        Officers never bound are absent. Higher means more recent.
        """


# Progression history repository interface (append-only)
class IProgressionHistoryRepository(Protocol):
    """Protocol for workflow progression history (DIP)."""

    async def append(self, data: ProgressionHistoryCreate) -> ProgressionHistoryResult:
        """Append one record."""

    async def list_by_application(
        self, application_id: int
    ) -> list[ProgressionHistoryResult]:
        """Return records for the application, oldest first."""


# Unit of work: atomic scope for one transition
class IUnitOfWork(Protocol):
    """Protocol for an all-or-nothing scope around a transition's writes."""

    def atomic(self) -> AbstractAsyncContextManager[None]:
        """Return a context in which writes commit together or not at all."""
