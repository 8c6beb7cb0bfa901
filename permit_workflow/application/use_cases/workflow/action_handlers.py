"""Per-role approve/reject handlers.

Thin guards in front of the progression engine: they check that the
application waits on the handler's stage, that the acting officer is the
current assignee, and (for rejections) that a reason is given. An
approval records the stage decision and then runs the boundary that
hands the application to the next stage.
"""

from __future__ import annotations

from permit_workflow.application.dtos.workflow import ActionResult
from permit_workflow.application.interfaces.services import ISignatureStatusProvider
from permit_workflow.application.use_cases.workflow.progression_engine import (
    ProgressionEngine,
    log_failure,
)
from permit_workflow.domain.entities import ApplicationEntity, StageDecision
from permit_workflow.domain.enums import ReviewStage
from permit_workflow.domain.exceptions import (
    MissingReasonException,
    NotAssigneeException,
    PermitWorkflowException,
    SignatureNotCompletedException,
    WrongStageException,
)
from permit_workflow.domain.routing import STAGES, StageDefinition
from permit_workflow.shared.utils.datetime import utc_now


def officer_actor(officer_id: int) -> str:
    """Actor identity recorded in history for an officer's decision."""
    return f"officer:{officer_id}"


class StageActionHandler:
    """Approve/reject for one review stage."""

    def __init__(
        self,
        stage: ReviewStage,
        engine: ProgressionEngine,
        signature_status: ISignatureStatusProvider | None = None,
    ) -> None:
        self.definition: StageDefinition = STAGES[stage]
        if self.definition.requires_signature and signature_status is None:
            raise ValueError(f"Stage {stage.value} requires a signature status provider")
        self._engine = engine
        self._signature_status = signature_status

    @property
    def stage(self) -> ReviewStage:
        return self.definition.stage

    async def approve(
        self,
        application_id: int,
        remarks: str | None,
        acting_officer_id: int,
        signature_ref: str | None = None,
    ) -> ActionResult:
        """Record approval, then hand off to the next stage.

        When the hand-off cannot run (e.g. no officer available) the
        approval still stands: success is True, the status stays at the
        approved status, and error_kind names the hand-off problem.
        """
        actor = officer_actor(acting_officer_id)
        operation = f"{self.stage.value}.approve"
        try:
            application = await self._load_for_action(application_id, acting_officer_id)
            if self.definition.requires_signature and not (
                await self._signature_status.signature_completed(
                    application_id, acting_officer_id
                )
            ):
                raise SignatureNotCompletedException(application_id, acting_officer_id)
            application.record_decision(
                self.stage,
                StageDecision(
                    approved=True,
                    officer_id=acting_officer_id,
                    comments=remarks,
                    decided_at=utc_now(),
                    signature_ref=signature_ref,
                ),
            )
            await self._engine.transition(
                application,
                self.definition.approved_status,
                actor=actor,
                comments=remarks,
                is_auto=False,
            )
        except PermitWorkflowException as exc:
            log_failure(exc, operation, application_id, actor)
            return _failed(application_id, exc)

        self._engine.notify(application_id, application.status, remarks)
        handoff = await self._engine.progress_from(
            application_id, application.status, actor
        )
        if not handoff.success:
            return ActionResult(
                success=True,
                message=(
                    f"{self.definition.title}: approved; "
                    f"hand-off pending: {handoff.message}"
                ),
                application_id=application_id,
                new_status=application.status,
                error_kind=handoff.error_kind,
            )
        return ActionResult(
            success=True,
            message=f"{self.definition.title}: approved",
            application_id=application_id,
            new_status=handoff.new_status,
        )

    async def reject(
        self, application_id: int, reason: str | None, acting_officer_id: int
    ) -> ActionResult:
        """Record rejection and move to the stage's rejection status."""
        actor = officer_actor(acting_officer_id)
        operation = f"{self.stage.value}.reject"
        try:
            if reason is None or not reason.strip():
                raise MissingReasonException()
            application = await self._load_for_action(application_id, acting_officer_id)
            application.record_decision(
                self.stage,
                StageDecision(
                    approved=False,
                    officer_id=acting_officer_id,
                    comments=reason.strip(),
                    decided_at=utc_now(),
                ),
            )
            await self._engine.transition(
                application,
                self.definition.rejected_status,
                actor=actor,
                comments=reason.strip(),
                is_auto=False,
            )
        except PermitWorkflowException as exc:
            log_failure(exc, operation, application_id, actor)
            return _failed(application_id, exc)

        self._engine.notify(application_id, application.status, reason.strip())
        return ActionResult(
            success=True,
            message=f"{self.definition.title}: rejected",
            application_id=application_id,
            new_status=application.status,
        )

    async def _load_for_action(
        self, application_id: int, acting_officer_id: int
    ) -> ApplicationEntity:
        application = await self._engine.load(application_id)
        if application.status != self.definition.pending_status:
            raise WrongStageException(
                application_id,
                self.definition.pending_status.value,
                application.status.value,
            )
        if not application.is_assigned_to(acting_officer_id):
            raise NotAssigneeException(application_id, acting_officer_id)
        return application


def _failed(application_id: int, exc: PermitWorkflowException) -> ActionResult:
    return ActionResult(
        success=False,
        message=exc.message,
        application_id=application_id,
        error_kind=exc.error_code,
    )


def build_action_handlers(
    engine: ProgressionEngine, signature_status: ISignatureStatusProvider
) -> dict[ReviewStage, StageActionHandler]:
    """Return one handler per review stage."""
    return {
        stage: StageActionHandler(stage, engine, signature_status)
        for stage in ReviewStage
    }
