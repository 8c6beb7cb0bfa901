"""Read-side workflow queries: stage info, histories, workload, consistency."""

from __future__ import annotations

from permit_workflow.application.dtos.history import (
    AssignmentHistoryResult,
    ProgressionHistoryResult,
)
from permit_workflow.application.dtos.officer import OfficerWorkload
from permit_workflow.application.dtos.workflow import ConsistencyReport, WorkflowStageInfo
from permit_workflow.application.interfaces.repositories import (
    IApplicationRepository,
    IAssignmentHistoryRepository,
    IProgressionHistoryRepository,
)
from permit_workflow.application.services.officer_directory import OfficerDirectory
from permit_workflow.domain.entities import ApplicationEntity
from permit_workflow.domain.enums import (
    ApplicationStatus,
    OfficerRole,
    ResubmissionPolicy,
)
from permit_workflow.domain.exceptions import ApplicationNotFoundException
from permit_workflow.domain.routing import (
    ProgressionBoundary,
    boundary_from,
    expected_role,
    is_rejection,
    rejecting_stage,
    resolve_role,
    resume_boundary,
    submitted_boundary,
)
from permit_workflow.domain.status_machine import StatusMachine

S = ApplicationStatus

TOTAL_STAGES = 8

# Stage number per status; 0 means not in review (draft, submitted, rejected).
_STAGE_NAMES: dict[int, str] = {
    1: "Junior Engineer Review",
    2: "Assistant Engineer Review",
    3: "Executive Engineer Review",
    4: "City Engineer Review",
    5: "Payment",
    6: "Clerk Processing",
    7: "Executive Engineer Digital Signature",
    8: "City Engineer Final Signature",
}
_STATUS_STAGE_NUMBER: dict[ApplicationStatus, int] = {
    S.UNDER_REVIEW_BY_JE: 1,
    S.APPROVED_BY_JE: 1,
    S.UNDER_REVIEW_BY_AE: 2,
    S.APPROVED_BY_AE: 2,
    S.UNDER_REVIEW_BY_EE1: 3,
    S.APPROVED_BY_EE1: 3,
    S.UNDER_REVIEW_BY_CE1: 4,
    S.APPROVED_BY_CE1: 4,
    S.PAYMENT_PENDING: 5,
    S.PAYMENT_COMPLETED: 5,
    S.UNDER_PROCESSING_BY_CLERK: 6,
    S.PROCESSED_BY_CLERK: 6,
    S.UNDER_DIGITAL_SIGNATURE_BY_EE2: 7,
    S.DIGITAL_SIGNATURE_COMPLETED_BY_EE2: 7,
    S.UNDER_FINAL_APPROVAL_BY_CE2: 8,
    S.CERTIFICATE_ISSUED: 8,
    S.COMPLETED: 8,
}


def _progress_percentage(status: ApplicationStatus, stage_number: int) -> float:
    if status == S.COMPLETED:
        return 100.0
    return round(stage_number / TOTAL_STAGES * 100, 1)


class WorkflowQueries:
    """Read-only views over applications and their histories."""

    def __init__(
        self,
        application_repo: IApplicationRepository,
        assignment_history_repo: IAssignmentHistoryRepository,
        progression_history_repo: IProgressionHistoryRepository,
        directory: OfficerDirectory,
        status_machine: StatusMachine,
    ) -> None:
        self._applications = application_repo
        self._assignments = assignment_history_repo
        self._progressions = progression_history_repo
        self._directory = directory
        self._status_machine = status_machine

    async def _load(self, application_id: int) -> ApplicationEntity:
        result = await self._applications.get_by_id(application_id)
        if result is None:
            raise ApplicationNotFoundException(application_id)
        return result.to_entity()

    async def get_workflow_stage(self, application_id: int) -> WorkflowStageInfo:
        """Return current stage, progress, and whether the application can advance.

        Raises:
            ApplicationNotFoundException: If it does not exist.
        """
        application = await self._load(application_id)
        status = application.status
        stage_number = _STATUS_STAGE_NUMBER.get(status, 0)

        officer_name = None
        if application.assigned_officer_id is not None:
            officer = await self._directory.find(application.assigned_officer_id)
            officer_name = officer.name if officer else None

        routing = None
        if status == S.SUBMITTED:
            routing = await self._submitted_boundary(application.id)
        can_progress, blocked_reason = await self._progress_state(application, routing)
        if stage_number == 0:
            stage_name = status.value
        elif status == S.COMPLETED:
            stage_name = "Completed"
        else:
            stage_name = _STAGE_NAMES[stage_number]
        return WorkflowStageInfo(
            application_id=application.id,
            application_number=application.application_number,
            current_status=status,
            current_officer_id=application.assigned_officer_id,
            current_officer_name=officer_name,
            stage_number=stage_number,
            total_stages=TOTAL_STAGES,
            stage_name=stage_name,
            next_stage_name=self._next_stage_name(status, stage_number, routing),
            progress_percentage=_progress_percentage(status, stage_number),
            can_progress=can_progress,
            blocked_reason=blocked_reason,
        )

    async def _submitted_boundary(self, application_id: int) -> ProgressionBoundary:
        history = await self._progressions.list_by_application(application_id)
        return submitted_boundary(
            self._status_machine.policy, [(r.from_status, r.to_status) for r in history]
        )

    def _next_stage_name(
        self,
        status: ApplicationStatus,
        stage_number: int,
        routing: ProgressionBoundary | None,
    ) -> str | None:
        if self._status_machine.is_terminal(status):
            return None
        if routing is not None:
            return _STAGE_NAMES[_STATUS_STAGE_NUMBER[routing.to_status]]
        stage = rejecting_stage(status)
        if stage is not None and self._status_machine.policy == ResubmissionPolicy.RESUME:
            return _STAGE_NAMES[_STATUS_STAGE_NUMBER[resume_boundary(stage).to_status]]
        return _STAGE_NAMES.get(stage_number + 1)

    async def _progress_state(
        self, application: ApplicationEntity, routing: ProgressionBoundary | None
    ) -> tuple[bool, str | None]:
        status = application.status
        if self._status_machine.is_terminal(status):
            return False, f"Workflow finished ({status.value})"
        if is_rejection(status):
            return False, "Rejected; awaiting resubmission by the applicant"
        if status == S.DRAFT:
            return False, "Not submitted"
        if status == S.PAYMENT_PENDING:
            return False, "Awaiting payment"
        boundary = routing or boundary_from(status)
        if boundary is None:
            role = expected_role(application.position, status)
            who = role.value if role else "an officer"
            return False, f"Awaiting action by {who}"
        if boundary.stage is not None:
            role = resolve_role(application.position, boundary.stage)
            if not await self._directory.find_eligible(role):
                return False, f"No active {role.value} available"
        return True, None

    async def get_workflow_history(
        self, application_id: int
    ) -> list[ProgressionHistoryResult]:
        """Return progression history ordered by time.

        Raises:
            ApplicationNotFoundException: If it does not exist.
        """
        await self._load(application_id)
        return await self._progressions.list_by_application(application_id)

    async def get_assignment_history(
        self, application_id: int
    ) -> list[AssignmentHistoryResult]:
        await self._load(application_id)
        return await self._assignments.list_by_application(application_id)

    async def get_officer_workload(self, role: OfficerRole) -> list[OfficerWorkload]:
        return await self._directory.workload_by_role(role)

    async def check_consistency(self, application_id: int) -> ConsistencyReport:
        """Cross-check the cached assignee and status against both histories."""
        application = await self._load(application_id)
        problems: list[str] = []

        latest = await self._assignments.get_latest(application_id)
        history_assignee = latest.officer_id if latest else None
        if history_assignee != application.assigned_officer_id:
            problems.append(
                f"assignee {application.assigned_officer_id} does not match "
                f"assignment history ({history_assignee})"
            )

        role = application.expected_assignee_role()
        if role is None and application.assigned_officer_id is not None:
            problems.append(
                f"status {application.status.value} expects no assignee, "
                f"found officer {application.assigned_officer_id}"
            )
        elif role is not None:
            officer = (
                await self._directory.find(application.assigned_officer_id)
                if application.assigned_officer_id is not None
                else None
            )
            if officer is None:
                problems.append(f"status {application.status.value} expects a {role.value}")
            elif officer.role != role:
                problems.append(
                    f"assignee {officer.id} has role {officer.role.value}, expected {role.value}"
                )

        progression = await self._progressions.list_by_application(application_id)
        steps = [(r.from_status, r.to_status) for r in progression]
        problems.extend(self._status_machine.path_violations(steps))
        if steps and steps[-1][1] != application.status:
            problems.append(
                f"last history step ends at {steps[-1][1].value}, "
                f"application is {application.status.value}"
            )
        return ConsistencyReport(
            application_id=application_id,
            consistent=not problems,
            problems=problems,
        )
