"""In-memory fakes of the repository and collaborator ports.

The repositories keep the compare-and-set contract of the SQL versions and
yield to the event loop on reads, so concurrently scheduled operations
interleave between load and write the way they do against Postgres.
FakeUnitOfWork undoes every write made inside a failed atomic() block.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime, timedelta

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
from permit_workflow.application.services.assignment_selector import AssignmentSelector
from permit_workflow.application.services.officer_directory import OfficerDirectory
from permit_workflow.application.services.side_effects import SideEffectDispatcher
from permit_workflow.application.use_cases.officers import OfficerAdministration
from permit_workflow.application.use_cases.workflow import (
    ProgressionEngine,
    StageActionHandler,
    WorkflowQueries,
    build_action_handlers,
)
from permit_workflow.domain.enums import (
    ApplicationStatus,
    AssignmentStrategy,
    OfficerRole,
    PositionType,
    ResubmissionPolicy,
    ReviewStage,
)
from permit_workflow.domain.status_machine import TERMINAL_STATUSES, StatusMachine
from permit_workflow.shared.enums import AssignmentAction
from permit_workflow.shared.utils.generators import format_application_number

_BINDING_ACTIONS = {
    AssignmentAction.AUTO_ASSIGNED,
    AssignmentAction.MANUALLY_ASSIGNED,
    AssignmentAction.REASSIGNED,
}


class FakeClock:
    """Strictly increasing timestamps (one second apart)."""

    def __init__(self) -> None:
        self._now = datetime(2025, 1, 15, 9, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        self._now += timedelta(seconds=1)
        return self._now


class Journal:
    """Undo log shared by the fake repositories and FakeUnitOfWork."""

    def __init__(self) -> None:
        self.entries: list[Callable[[], None]] = []

    def record(self, undo: Callable[[], None]) -> None:
        self.entries.append(undo)

    def rollback_to(self, mark: int) -> None:
        while len(self.entries) > mark:
            self.entries.pop()()


class FakeUnitOfWork:
    """Savepoint semantics: a failed block undoes only its own writes."""

    def __init__(self, journal: Journal) -> None:
        self._journal = journal

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        mark = len(self._journal.entries)
        try:
            yield
        except BaseException:
            self._journal.rollback_to(mark)
            raise


class FakeOfficerRepository:
    def __init__(self, clock: FakeClock) -> None:
        self.rows: dict[int, OfficerResult] = {}
        self._clock = clock

    async def get_by_id(self, officer_id: int) -> OfficerResult | None:
        return self.rows.get(officer_id)

    async def get_by_email(self, email: str) -> OfficerResult | None:
        for officer in self.rows.values():
            if officer.email.lower() == email.lower():
                return officer
        return None

    async def list_active_by_role(self, role: OfficerRole) -> list[OfficerResult]:
        await asyncio.sleep(0)
        return sorted(
            (o for o in self.rows.values() if o.role == role and o.is_active),
            key=lambda o: o.id,
        )

    async def create(self, data: OfficerCreate) -> OfficerResult:
        officer = OfficerResult(
            id=len(self.rows) + 1,
            name=data.name,
            email=data.email,
            role=data.role,
            is_active=data.is_active,
            created_at=self._clock(),
        )
        self.rows[officer.id] = officer
        return officer

    async def set_active(self, officer_id: int, is_active: bool) -> OfficerResult | None:
        officer = self.rows.get(officer_id)
        if officer is None:
            return None
        self.rows[officer_id] = replace(officer, is_active=is_active)
        return self.rows[officer_id]


class FakeApplicationRepository:
    def __init__(self, journal: Journal, clock: FakeClock) -> None:
        self.rows: dict[int, ApplicationResult] = {}
        self._journal = journal
        self._clock = clock
        self._next_id = 1

    async def get_by_id(self, application_id: int) -> ApplicationResult | None:
        row = self.rows.get(application_id)
        await asyncio.sleep(0)
        return row

    async def create(
        self, data: ApplicationCreate, number_prefix: str
    ) -> ApplicationResult:
        application_id = self._next_id
        self._next_id += 1
        now = self._clock()
        row = ApplicationResult(
            id=application_id,
            application_number=format_application_number(
                number_prefix, now.year, application_id
            ),
            position=data.position,
            status=ApplicationStatus.DRAFT,
            assigned_officer_id=None,
            version=1,
            applicant_name=data.applicant_name,
            applicant_email=data.applicant_email,
            stage_decisions={},
            created_by=data.created_by,
            updated_by=data.created_by,
            created_at=now,
            updated_at=now,
        )
        self.rows[application_id] = row
        self._journal.record(lambda: self.rows.pop(application_id, None))
        return row

    async def apply_transition(self, transition: ApplicationTransition) -> bool:
        row = self.rows.get(transition.application_id)
        if (
            row is None
            or row.status != transition.expected_status
            or row.version != transition.expected_version
        ):
            return False
        self.rows[row.id] = replace(
            row,
            status=transition.new_status,
            assigned_officer_id=transition.assigned_officer_id,
            stage_decisions=dict(transition.stage_decisions),
            updated_by=transition.updated_by,
            updated_at=self._clock(),
            version=row.version + 1,
        )
        self._journal.record(lambda: self.rows.__setitem__(row.id, row))
        return True

    async def count_open_by_officer(self, officer_ids: list[int]) -> dict[int, int]:
        counts: dict[int, int] = {}
        for row in self.rows.values():
            if row.assigned_officer_id in officer_ids and row.status not in TERMINAL_STATUSES:
                counts[row.assigned_officer_id] = counts.get(row.assigned_officer_id, 0) + 1
        return counts

    async def list_assigned_to(self, officer_id: int) -> list[ApplicationResult]:
        return [r for r in self.rows.values() if r.assigned_officer_id == officer_id]

    def force(self, application_id: int, **changes) -> None:
        """Overwrite stored fields directly (sets up inconsistent states)."""
        self.rows[application_id] = replace(self.rows[application_id], **changes)


class FakeAssignmentHistoryRepository:
    def __init__(self, journal: Journal, clock: FakeClock) -> None:
        self.rows: list[AssignmentHistoryResult] = []
        self._journal = journal
        self._clock = clock

    async def append(self, data: AssignmentHistoryCreate) -> AssignmentHistoryResult:
        row = AssignmentHistoryResult(
            id=f"ah{len(self.rows) + 1}",
            application_id=data.application_id,
            officer_id=data.officer_id,
            previous_officer_id=data.previous_officer_id,
            role=data.role,
            action=data.action,
            status_at_assignment=data.status_at_assignment,
            assigned_by=data.assigned_by,
            strategy=data.strategy,
            workload_at_assignment=data.workload_at_assignment,
            reason=data.reason,
            created_at=self._clock(),
        )
        self.rows.append(row)
        self._journal.record(lambda: self.rows.remove(row))
        return row

    async def list_by_application(
        self, application_id: int
    ) -> list[AssignmentHistoryResult]:
        return [r for r in self.rows if r.application_id == application_id]

    async def get_latest(self, application_id: int) -> AssignmentHistoryResult | None:
        rows = await self.list_by_application(application_id)
        return rows[-1] if rows else None

    async def last_assignment_seq(self, officer_ids: list[int]) -> dict[int, int]:
        result: dict[int, int] = {}
        for seq, row in enumerate(self.rows, start=1):
            if row.officer_id in officer_ids and row.action in _BINDING_ACTIONS:
                result[row.officer_id] = seq
        return result


class FakeProgressionHistoryRepository:
    def __init__(self, journal: Journal, clock: FakeClock) -> None:
        self.rows: list[ProgressionHistoryResult] = []
        self._journal = journal
        self._clock = clock

    async def append(self, data: ProgressionHistoryCreate) -> ProgressionHistoryResult:
        row = ProgressionHistoryResult(
            id=f"ph{len(self.rows) + 1}",
            application_id=data.application_id,
            from_status=data.from_status,
            to_status=data.to_status,
            from_officer_id=data.from_officer_id,
            to_officer_id=data.to_officer_id,
            comments=data.comments,
            is_auto_progression=data.is_auto_progression,
            triggered_by=data.triggered_by,
            created_at=self._clock(),
        )
        self.rows.append(row)
        self._journal.record(lambda: self.rows.remove(row))
        return row

    async def list_by_application(
        self, application_id: int
    ) -> list[ProgressionHistoryResult]:
        return [r for r in self.rows if r.application_id == application_id]


class RecordingNotifier:
    def __init__(self, failures: int = 0) -> None:
        self.calls: list[tuple[int, ApplicationStatus, str | None]] = []
        self._failures = failures

    async def notify_stage(
        self, application_id: int, new_status: ApplicationStatus, remarks: str | None
    ) -> None:
        if self._failures > 0:
            self._failures -= 1
            raise ConnectionError("SMTP unavailable")
        self.calls.append((application_id, new_status, remarks))


class RecordingCertificateGenerator:
    def __init__(self, results: list[bool] | None = None) -> None:
        self.calls: list[int] = []
        self._results = list(results or [])

    async def generate_certificate(self, application_id: int) -> bool:
        self.calls.append(application_id)
        return self._results.pop(0) if self._results else True


class StubPaymentStatus:
    def __init__(self, completed: bool = True) -> None:
        self.completed = completed

    async def payment_completed(self, application_id: int) -> bool:
        return self.completed


class StubSignatureStatus:
    def __init__(self, signed: bool = True) -> None:
        self.signed = signed
        self.calls: list[tuple[int, int]] = []

    async def signature_completed(self, application_id: int, officer_id: int) -> bool:
        self.calls.append((application_id, officer_id))
        return self.signed


ALL_ROLES_FOR_ARCHITECT = (
    OfficerRole.JUNIOR_ARCHITECT,
    OfficerRole.ASSISTANT_ARCHITECT,
    OfficerRole.EXECUTIVE_ENGINEER,
    OfficerRole.CITY_ENGINEER,
    OfficerRole.CLERK,
)


@dataclass
class Workflow:
    """Engine, handlers and queries wired over shared in-memory state."""

    officers: FakeOfficerRepository
    applications: FakeApplicationRepository
    assignments: FakeAssignmentHistoryRepository
    progressions: FakeProgressionHistoryRepository
    notifier: RecordingNotifier
    certificates: RecordingCertificateGenerator
    payment: StubPaymentStatus
    signature: StubSignatureStatus
    side_effects: SideEffectDispatcher
    directory: OfficerDirectory
    selector: AssignmentSelector
    engine: ProgressionEngine
    handlers: dict[ReviewStage, StageActionHandler]
    queries: WorkflowQueries
    admin: OfficerAdministration
    _emails: int = field(default=0)

    async def add_officer(
        self, role: OfficerRole, name: str | None = None, is_active: bool = True
    ) -> OfficerResult:
        self._emails += 1
        return await self.officers.create(
            OfficerCreate(
                name=name or f"{role.value} {self._emails}",
                email=f"officer{self._emails}@permits.example",
                role=role,
                is_active=is_active,
            )
        )

    async def staff(self, roles=ALL_ROLES_FOR_ARCHITECT) -> dict[OfficerRole, OfficerResult]:
        """One active officer per role."""
        return {role: await self.add_officer(role) for role in roles}

    async def submit(
        self, position: PositionType = PositionType.ARCHITECT, actor: str = "applicant:1"
    ):
        return await self.engine.submit_application(
            ApplicationCreate(
                position=position,
                applicant_name="Priya Naik",
                applicant_email="priya@example.com",
                created_by=actor,
            )
        )

    async def status(self, application_id: int) -> ApplicationStatus:
        return (await self.applications.get_by_id(application_id)).status

    async def assignee(self, application_id: int) -> int | None:
        return (await self.applications.get_by_id(application_id)).assigned_officer_id

    async def approve(self, stage: ReviewStage, application_id: int, remarks: str = "ok"):
        officer_id = await self.assignee(application_id)
        return await self.handlers[stage].approve(application_id, remarks, officer_id)

    async def reject(self, stage: ReviewStage, application_id: int, reason: str = "incomplete"):
        officer_id = await self.assignee(application_id)
        return await self.handlers[stage].reject(application_id, reason, officer_id)


def build_workflow(
    strategy: AssignmentStrategy = AssignmentStrategy.RANDOM,
    policy: ResubmissionPolicy = ResubmissionPolicy.RESTART,
    priority_officer_ids: tuple[int, ...] = (),
    payment_completed: bool = True,
    signed: bool = True,
    seed: int = 7,
) -> Workflow:
    clock = FakeClock()
    journal = Journal()
    officers = FakeOfficerRepository(clock)
    applications = FakeApplicationRepository(journal, clock)
    assignments = FakeAssignmentHistoryRepository(journal, clock)
    progressions = FakeProgressionHistoryRepository(journal, clock)
    notifier = RecordingNotifier()
    certificates = RecordingCertificateGenerator()
    payment = StubPaymentStatus(payment_completed)
    signature = StubSignatureStatus(signed)
    side_effects = SideEffectDispatcher(
        notifier, certificates, max_attempts=3, retry_delay_seconds=0
    )
    status_machine = StatusMachine(policy)
    directory = OfficerDirectory(officers, applications, assignments)
    selector = AssignmentSelector(
        directory,
        default_strategy=strategy,
        priority_officer_ids=priority_officer_ids,
        rng=random.Random(seed),
    )
    engine = ProgressionEngine(
        application_repo=applications,
        assignment_history_repo=assignments,
        progression_history_repo=progressions,
        unit_of_work=FakeUnitOfWork(journal),
        directory=directory,
        selector=selector,
        status_machine=status_machine,
        side_effects=side_effects,
        payment_status=payment,
        application_number_prefix="PMC",
    )
    return Workflow(
        officers=officers,
        applications=applications,
        assignments=assignments,
        progressions=progressions,
        notifier=notifier,
        certificates=certificates,
        payment=payment,
        signature=signature,
        side_effects=side_effects,
        directory=directory,
        selector=selector,
        engine=engine,
        handlers=build_action_handlers(engine, signature),
        queries=WorkflowQueries(
            applications, assignments, progressions, directory, status_machine
        ),
        admin=OfficerAdministration(officers),
    )
