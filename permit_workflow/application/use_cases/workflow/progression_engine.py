"""Progression engine: guarded status hand-offs with officer assignment.

Each boundary operation loads the application, checks the boundary's
precondition, selects the next officer when the target stage needs one,
applies the transition through the status machine, and persists the
status change together with its assignment and progression history in
one atomic unit. Notifications and certificate generation are dispatched
afterwards and never undo the transition.

Public operations return ProgressionResult / ActionResult values;
domain exceptions are used internally and converted at the boundary.
"""

from __future__ import annotations

import logging

from permit_workflow.application.dtos.application import (
    ApplicationCreate,
    ApplicationTransition,
)
from permit_workflow.application.dtos.history import (
    AssignmentHistoryCreate,
    ProgressionHistoryCreate,
)
from permit_workflow.application.dtos.workflow import ActionResult, ProgressionResult
from permit_workflow.application.interfaces.repositories import (
    IApplicationRepository,
    IAssignmentHistoryRepository,
    IProgressionHistoryRepository,
    IUnitOfWork,
)
from permit_workflow.application.interfaces.services import (
    IPaymentStatusProvider,
    ISideEffectDispatcher,
)
from permit_workflow.application.services.assignment_selector import (
    AssignmentSelection,
    AssignmentSelector,
)
from permit_workflow.application.services.officer_directory import OfficerDirectory
from permit_workflow.application.services.side_effects import (
    GenerateCertificate,
    NotifyStage,
)
from permit_workflow.domain.entities import ApplicationEntity
from permit_workflow.domain.enums import (
    ApplicationStatus,
    ReviewStage,
)
from permit_workflow.domain.exceptions import (
    CONSISTENCY,
    ApplicationNotFoundException,
    InvalidStageForProgressionException,
    MissingReasonException,
    NoEligibleOfficerException,
    NoOfficerAvailableException,
    PaymentNotCompletedException,
    PermitWorkflowException,
    ValidationException,
    WrongStageException,
)
from permit_workflow.domain.routing import (
    COMPLETE_WORKFLOW,
    RECORD_PAYMENT,
    TO_ASSISTANT_ENGINEER,
    TO_CITY_ENGINEER,
    TO_CITY_ENGINEER_FINAL_SIGNATURE,
    TO_CLERK,
    TO_EXECUTIVE_ENGINEER_SIGNATURE,
    TO_EXECUTIVE_ENGINEER_STAGE1,
    TO_JUNIOR_ENGINEER,
    TO_PAYMENT,
    ProgressionBoundary,
    boundary_from,
    is_rejection,
    stage_for_status,
    submitted_boundary,
)
from permit_workflow.domain.status_machine import StatusMachine
from permit_workflow.shared.enums import SYSTEM_ACTOR, AssignmentAction
from permit_workflow.shared.telemetry.logging import get_logger
from permit_workflow.shared.telemetry.telemetry import get_tracer

logger = get_logger(__name__)
tracer = get_tracer(__name__)


def log_failure(
    exc: PermitWorkflowException, operation: str, application_id: int, actor: str
) -> None:
    """Log an expected failure; consistency errors at error severity."""
    level = logging.ERROR if exc.category == CONSISTENCY else logging.WARNING
    logger.log(
        level,
        "%s failed for application %s (actor: %s): [%s] %s",
        operation,
        application_id,
        actor,
        exc.error_code,
        exc.message,
    )


def _require_reason(reason: str | None, message: str) -> str:
    if reason is None or not reason.strip():
        raise MissingReasonException(message)
    return reason.strip()


class ProgressionEngine:
    """Orchestrates stage-to-stage hand-offs for permit applications."""

    def __init__(
        self,
        application_repo: IApplicationRepository,
        assignment_history_repo: IAssignmentHistoryRepository,
        progression_history_repo: IProgressionHistoryRepository,
        unit_of_work: IUnitOfWork,
        directory: OfficerDirectory,
        selector: AssignmentSelector,
        status_machine: StatusMachine,
        side_effects: ISideEffectDispatcher,
        payment_status: IPaymentStatusProvider,
        application_number_prefix: str = "PMC",
    ) -> None:
        self._applications = application_repo
        self._assignments = assignment_history_repo
        self._progressions = progression_history_repo
        self._uow = unit_of_work
        self._directory = directory
        self._selector = selector
        self.status_machine = status_machine
        self._side_effects = side_effects
        self._payment_status = payment_status
        self._number_prefix = application_number_prefix

    # ---- Boundary operations ----

    async def progress_to_junior_engineer(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(application_id, TO_JUNIOR_ENGINEER, actor)

    async def progress_to_assistant_engineer(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(application_id, TO_ASSISTANT_ENGINEER, actor)

    async def progress_to_executive_engineer_stage1(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(application_id, TO_EXECUTIVE_ENGINEER_STAGE1, actor)

    async def progress_to_city_engineer(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(application_id, TO_CITY_ENGINEER, actor)

    async def progress_to_payment(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(application_id, TO_PAYMENT, actor)

    async def progress_to_clerk(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(application_id, TO_CLERK, actor)

    async def progress_to_executive_engineer_signature(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(
            application_id, TO_EXECUTIVE_ENGINEER_SIGNATURE, actor
        )

    async def progress_to_city_engineer_final_signature(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(
            application_id, TO_CITY_ENGINEER_FINAL_SIGNATURE, actor
        )

    async def complete_workflow(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        return await self._progress(application_id, COMPLETE_WORKFLOW, actor)

    async def record_payment(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        """Consume the payment fact, then hand the application to a clerk.

        Certificate generation is dispatched in the background once the
        payment is recorded. If no clerk is available the result is still
        successful and carries NO_OFFICER_AVAILABLE; retry_progression
        finishes the hand-off later.
        """
        try:
            application = await self.load(application_id)
            self._require_status(application, RECORD_PAYMENT.from_status)
            if not await self._payment_status.payment_completed(application_id):
                raise PaymentNotCompletedException(application_id)
            await self.transition(
                application,
                RECORD_PAYMENT.to_status,
                actor=actor,
                comments="Payment completed",
                is_auto=True,
            )
        except PermitWorkflowException as exc:
            log_failure(exc, RECORD_PAYMENT.name, application_id, actor)
            return _failed(application_id, exc)

        self._side_effects.dispatch(GenerateCertificate(application_id))
        self.notify(application_id, application.status, "Payment completed")
        return _with_handoff(
            application, await self._progress(application_id, TO_CLERK, actor)
        )

    async def retry_progression(
        self, application_id: int, actor: str = SYSTEM_ACTOR
    ) -> ProgressionResult:
        """Run whichever boundary matches the current status.

        Used after NO_OFFICER_AVAILABLE once an officer is activated.
        """
        try:
            application = await self.load(application_id)
        except PermitWorkflowException as exc:
            log_failure(exc, "retry_progression", application_id, actor)
            return _failed(application_id, exc)
        if application.status == ApplicationStatus.SUBMITTED:
            return await self._route_submitted(application, actor)
        if application.status == RECORD_PAYMENT.from_status:
            return await self.record_payment(application_id, actor)
        boundary = boundary_from(application.status)
        if boundary is None:
            exc = InvalidStageForProgressionException(
                application_id, "a status awaiting progression", application.status.value
            )
            log_failure(exc, "retry_progression", application_id, actor)
            return _failed(application_id, exc)
        return await self._progress(application_id, boundary, actor)

    async def progress_from(
        self, application_id: int, status: ApplicationStatus, actor: str
    ) -> ProgressionResult:
        """Run the boundary leaving ``status`` (after an officer's approval)."""
        boundary = boundary_from(status)
        if boundary is None:
            return ProgressionResult(
                success=True,
                application_id=application_id,
                new_status=status,
                message="No further progression",
            )
        return await self._progress(application_id, boundary, actor)

    # ---- Intake and resubmission ----

    async def submit_application(self, data: ApplicationCreate) -> ProgressionResult:
        """Create the application, submit it, and route it to a junior engineer."""
        try:
            if not data.applicant_name.strip():
                raise ValidationException("Applicant name is required", "applicant_name")
            async with self._uow.atomic():
                created = await self._applications.create(data, self._number_prefix)
                application = created.to_entity()
                await self.transition(
                    application,
                    ApplicationStatus.SUBMITTED,
                    actor=data.created_by,
                    comments="Application submitted",
                    is_auto=False,
                )
        except PermitWorkflowException as exc:
            log_failure(exc, "submit_application", 0, data.created_by)
            return _failed(0, exc)
        logger.info(
            "Application %s (%s) submitted by %s",
            application.id,
            application.application_number,
            data.created_by,
        )
        return _with_handoff(
            application, await self._route_submitted(application, SYSTEM_ACTOR)
        )

    async def resubmit(self, application_id: int, actor: str) -> ProgressionResult:
        """Return a rejected application to Submitted and route it per policy."""
        try:
            application = await self.load(application_id)
            if not is_rejection(application.status):
                raise WrongStageException(
                    application_id, "a rejection status", application.status.value
                )
            await self.transition(
                application,
                ApplicationStatus.SUBMITTED,
                actor=actor,
                comments="Application resubmitted",
                is_auto=False,
            )
        except PermitWorkflowException as exc:
            log_failure(exc, "resubmit", application_id, actor)
            return _failed(application_id, exc)
        return _with_handoff(
            application, await self._route_submitted(application, SYSTEM_ACTOR)
        )

    async def _route_submitted(
        self, application: ApplicationEntity, actor: str
    ) -> ProgressionResult:
        history = await self._progressions.list_by_application(application.id)
        boundary = submitted_boundary(
            self.status_machine.policy, [(r.from_status, r.to_status) for r in history]
        )
        return await self._progress(application.id, boundary, actor)

    # ---- Administrative operations ----

    async def reassign(
        self, application_id: int, officer_id: int, reason: str | None, actor: str
    ) -> ActionResult:
        """Replace the current assignee with another eligible officer."""
        try:
            reason = _require_reason(reason, "Reassignment reason is required")
            application = await self.load(application_id)
            role = application.expected_assignee_role()
            if role is None:
                raise WrongStageException(
                    application_id, "a status with an assignee", application.status.value
                )
            officer = await self._directory.get(officer_id)
            if not officer.is_active:
                raise ValidationException(f"Officer {officer_id} is not active", "officer_id")
            if officer.role != role:
                raise ValidationException(
                    f"Officer {officer_id} has role {officer.role.value}, expected {role.value}",
                    "officer_id",
                )
            if application.is_assigned_to(officer_id):
                raise ValidationException(
                    f"Officer {officer_id} is already assigned", "officer_id"
                )
            workload = await self._directory.open_workloads([officer_id])
            record = AssignmentHistoryCreate(
                application_id=application_id,
                officer_id=officer_id,
                previous_officer_id=application.assigned_officer_id,
                role=role,
                action=AssignmentAction.REASSIGNED,
                status_at_assignment=application.status,
                assigned_by=actor,
                workload_at_assignment=workload[officer_id],
                reason=reason,
            )
            async with self._uow.atomic():
                await self._write(application, application.status, officer_id, actor)
                await self._assignments.append(record)
        except PermitWorkflowException as exc:
            log_failure(exc, "reassign", application_id, actor)
            return _action_failed(application_id, exc)
        application.assigned_officer_id = officer_id
        logger.info(
            "Application %s reassigned to officer %s by %s: %s",
            application_id,
            officer_id,
            actor,
            reason,
        )
        return ActionResult(
            success=True,
            message=f"Application reassigned to officer {officer_id}",
            application_id=application_id,
            new_status=application.status,
        )

    async def override_status(
        self,
        application_id: int,
        to_status: ApplicationStatus,
        comments: str | None,
        actor: str,
    ) -> ActionResult:
        """Administrative transition; still subject to the status machine."""
        try:
            comments = _require_reason(comments, "Override comments are required")
            application = await self.load(application_id)
            await self.transition(
                application, to_status, actor=actor, comments=comments, is_auto=False
            )
        except PermitWorkflowException as exc:
            log_failure(exc, "override_status", application_id, actor)
            return _action_failed(application_id, exc)
        self.notify(application_id, application.status, comments)
        return ActionResult(
            success=True,
            message=f"Status set to {application.status.value}",
            application_id=application_id,
            new_status=application.status,
        )

    async def terminate(
        self, application_id: int, reason: str | None, actor: str
    ) -> ActionResult:
        """Close a submitted application into the terminal Rejected status."""
        try:
            reason = _require_reason(reason, "Termination reason is required")
            application = await self.load(application_id)
            await self.transition(
                application,
                ApplicationStatus.REJECTED,
                actor=actor,
                comments=reason,
                is_auto=False,
            )
        except PermitWorkflowException as exc:
            log_failure(exc, "terminate", application_id, actor)
            return _action_failed(application_id, exc)
        self.notify(application_id, application.status, reason)
        return ActionResult(
            success=True,
            message="Application rejected",
            application_id=application_id,
            new_status=application.status,
        )

    # ---- Building blocks (shared with action handlers) ----

    async def load(self, application_id: int) -> ApplicationEntity:
        """Return the application entity.

        Raises:
            ApplicationNotFoundException: If it does not exist.
        """
        result = await self._applications.get_by_id(application_id)
        if result is None:
            raise ApplicationNotFoundException(application_id)
        return result.to_entity()

    async def transition(
        self,
        application: ApplicationEntity,
        to_status: ApplicationStatus,
        *,
        actor: str,
        comments: str | None,
        is_auto: bool,
    ) -> None:
        """Apply one status change with its assignment bookkeeping.

        The assignee follows the target status: cleared when the status
        has no stage, kept when the stage is unchanged, otherwise chosen
        by the assignment selector. Updates ``application`` in place on
        success.

        Raises:
            IllegalTransitionException: Transition not in the table.
            NoOfficerAvailableException: Target stage has no active officer.
            InvalidStageForProgressionException: Stored row changed since load.
        """
        from_status = application.status
        from_officer = application.assigned_officer_id
        self.status_machine.check(from_status, to_status)

        target_stage = stage_for_status(to_status)
        assignment: AssignmentHistoryCreate | None = None
        if target_stage is None:
            new_officer = None
            if from_officer is not None:
                assignment = AssignmentHistoryCreate(
                    application_id=application.id,
                    officer_id=None,
                    previous_officer_id=from_officer,
                    role=None,
                    action=AssignmentAction.UNASSIGNED,
                    status_at_assignment=to_status,
                    assigned_by=actor,
                    reason=f"Released at {to_status.value}",
                )
        elif target_stage == stage_for_status(from_status) and from_officer is not None:
            new_officer = from_officer
        else:
            selection = await self._select(application, target_stage)
            new_officer = selection.officer.id
            assignment = AssignmentHistoryCreate(
                application_id=application.id,
                officer_id=new_officer,
                previous_officer_id=from_officer,
                role=selection.role,
                action=(
                    AssignmentAction.AUTO_ASSIGNED
                    if is_auto
                    else AssignmentAction.MANUALLY_ASSIGNED
                ),
                status_at_assignment=to_status,
                assigned_by=actor,
                strategy=selection.strategy,
                workload_at_assignment=selection.open_applications,
                reason=selection.reason,
            )

        self.status_machine.apply(application, to_status)
        span_attributes = {
            "application.id": application.id,
            "workflow.from_status": from_status.value,
            "workflow.to_status": to_status.value,
            "workflow.actor": actor,
        }
        try:
            with tracer.start_as_current_span(
                "workflow.transition", attributes=span_attributes
            ):
                async with self._uow.atomic():
                    await self._write(application, from_status, new_officer, actor)
                    if assignment is not None:
                        await self._assignments.append(assignment)
                    await self._progressions.append(
                        ProgressionHistoryCreate(
                            application_id=application.id,
                            from_status=from_status,
                            to_status=to_status,
                            from_officer_id=from_officer,
                            to_officer_id=new_officer,
                            comments=comments,
                            is_auto_progression=is_auto,
                            triggered_by=actor,
                        )
                    )
        except BaseException:
            application.status = from_status
            raise
        application.assigned_officer_id = new_officer
        application.version += 1
        logger.info(
            "Application %s: %s -> %s (officer %s -> %s, actor: %s, auto: %s)",
            application.id,
            from_status.value,
            to_status.value,
            from_officer,
            new_officer,
            actor,
            is_auto,
        )

    def notify(
        self, application_id: int, status: ApplicationStatus, remarks: str | None
    ) -> None:
        """Dispatch a stage notification (fire-and-forget)."""
        self._side_effects.dispatch(NotifyStage(application_id, status, remarks))

    # ---- Internals ----

    async def _progress(
        self, application_id: int, boundary: ProgressionBoundary, actor: str
    ) -> ProgressionResult:
        try:
            application = await self.load(application_id)
            self._require_status(application, boundary.from_status)
            await self.transition(
                application,
                boundary.to_status,
                actor=actor,
                comments=f"Auto-progressed via {boundary.name}",
                is_auto=True,
            )
        except PermitWorkflowException as exc:
            log_failure(exc, boundary.name, application_id, actor)
            return _failed(application_id, exc)
        self.notify(application_id, application.status, None)
        return ProgressionResult(
            success=True,
            application_id=application_id,
            new_status=application.status,
            assigned_officer_id=application.assigned_officer_id,
            message=f"Application moved to {application.status.value}",
        )

    def _require_status(
        self, application: ApplicationEntity, expected: ApplicationStatus
    ) -> None:
        if application.status != expected:
            raise InvalidStageForProgressionException(
                application.id, expected.value, application.status.value
            )

    async def _select(
        self, application: ApplicationEntity, stage: ReviewStage
    ) -> AssignmentSelection:
        try:
            return await self._selector.select(application.position, stage)
        except NoEligibleOfficerException as exc:
            raise NoOfficerAvailableException(application.id, exc.role) from exc

    async def _write(
        self,
        application: ApplicationEntity,
        expected_status: ApplicationStatus,
        officer_id: int | None,
        actor: str,
    ) -> None:
        written = await self._applications.apply_transition(
            ApplicationTransition(
                application_id=application.id,
                expected_status=expected_status,
                expected_version=application.version,
                new_status=application.status,
                assigned_officer_id=officer_id,
                stage_decisions={
                    stage.value: decision.to_dict()
                    for stage, decision in application.decisions.items()
                },
                updated_by=actor,
            )
        )
        if not written:
            raise InvalidStageForProgressionException(
                application.id, expected_status.value
            )


def _failed(application_id: int, exc: PermitWorkflowException) -> ProgressionResult:
    return ProgressionResult(
        success=False,
        application_id=application_id,
        error_kind=exc.error_code,
        message=exc.message,
    )


def _action_failed(application_id: int, exc: PermitWorkflowException) -> ActionResult:
    return ActionResult(
        success=False,
        message=exc.message,
        application_id=application_id,
        error_kind=exc.error_code,
    )


def _with_handoff(
    application: ApplicationEntity, handoff: ProgressionResult
) -> ProgressionResult:
    """Result of a recorded step followed by a hand-off.

    The step itself succeeded; a failed hand-off leaves the application
    at the recorded status and its error kind is passed through.
    """
    if handoff.success:
        return handoff
    return ProgressionResult(
        success=True,
        application_id=application.id,
        new_status=application.status,
        assigned_officer_id=application.assigned_officer_id,
        error_kind=handoff.error_kind,
        message=f"Recorded {application.status.value}; hand-off pending: {handoff.message}",
    )
