"""Stage definitions, role resolution, and progression boundaries.

Fixed tables describing who reviews an application at each stage and
which status hand-offs the progression engine performs.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from permit_workflow.domain.enums import (
    ApplicationStatus,
    OfficerRole,
    PositionType,
    ResubmissionPolicy,
    ReviewStage,
)

S = ApplicationStatus

# (junior role, assistant role) per position category.
POSITION_ROLES: dict[PositionType, tuple[OfficerRole, OfficerRole]] = {
    PositionType.ARCHITECT: (
        OfficerRole.JUNIOR_ARCHITECT,
        OfficerRole.ASSISTANT_ARCHITECT,
    ),
    PositionType.LICENCE_ENGINEER: (
        OfficerRole.JUNIOR_LICENCE_ENGINEER,
        OfficerRole.ASSISTANT_LICENCE_ENGINEER,
    ),
    PositionType.STRUCTURAL_ENGINEER: (
        OfficerRole.JUNIOR_STRUCTURAL_ENGINEER,
        OfficerRole.ASSISTANT_STRUCTURAL_ENGINEER,
    ),
    PositionType.SUPERVISOR1: (
        OfficerRole.JUNIOR_SUPERVISOR1,
        OfficerRole.ASSISTANT_SUPERVISOR1,
    ),
    PositionType.SUPERVISOR2: (
        OfficerRole.JUNIOR_SUPERVISOR2,
        OfficerRole.ASSISTANT_SUPERVISOR2,
    ),
}

_FIXED_STAGE_ROLES: dict[ReviewStage, OfficerRole] = {
    ReviewStage.EXECUTIVE_ENGINEER: OfficerRole.EXECUTIVE_ENGINEER,
    ReviewStage.CITY_ENGINEER: OfficerRole.CITY_ENGINEER,
    ReviewStage.CLERK: OfficerRole.CLERK,
    ReviewStage.EXECUTIVE_ENGINEER_SIGNATURE: OfficerRole.EXECUTIVE_ENGINEER,
    ReviewStage.CITY_ENGINEER_SIGNATURE: OfficerRole.CITY_ENGINEER,
}


@dataclass(frozen=True)
class StageDefinition:
    """One officer stage: the status it waits in and its decision statuses."""

    stage: ReviewStage
    title: str
    pending_status: ApplicationStatus
    approved_status: ApplicationStatus
    rejected_status: ApplicationStatus
    requires_signature: bool = False


STAGES: dict[ReviewStage, StageDefinition] = {
    ReviewStage.JUNIOR_ENGINEER: StageDefinition(
        ReviewStage.JUNIOR_ENGINEER,
        "Junior Engineer Review",
        S.UNDER_REVIEW_BY_JE,
        S.APPROVED_BY_JE,
        S.REJECTED_BY_JE,
    ),
    ReviewStage.ASSISTANT_ENGINEER: StageDefinition(
        ReviewStage.ASSISTANT_ENGINEER,
        "Assistant Engineer Review",
        S.UNDER_REVIEW_BY_AE,
        S.APPROVED_BY_AE,
        S.REJECTED_BY_AE,
    ),
    ReviewStage.EXECUTIVE_ENGINEER: StageDefinition(
        ReviewStage.EXECUTIVE_ENGINEER,
        "Executive Engineer Review",
        S.UNDER_REVIEW_BY_EE1,
        S.APPROVED_BY_EE1,
        S.REJECTED_BY_EE1,
    ),
    ReviewStage.CITY_ENGINEER: StageDefinition(
        ReviewStage.CITY_ENGINEER,
        "City Engineer Review",
        S.UNDER_REVIEW_BY_CE1,
        S.APPROVED_BY_CE1,
        S.REJECTED_BY_CE1,
    ),
    ReviewStage.CLERK: StageDefinition(
        ReviewStage.CLERK,
        "Clerk Processing",
        S.UNDER_PROCESSING_BY_CLERK,
        S.PROCESSED_BY_CLERK,
        S.REJECTED_BY_CLERK,
    ),
    ReviewStage.EXECUTIVE_ENGINEER_SIGNATURE: StageDefinition(
        ReviewStage.EXECUTIVE_ENGINEER_SIGNATURE,
        "Executive Engineer Digital Signature",
        S.UNDER_DIGITAL_SIGNATURE_BY_EE2,
        S.DIGITAL_SIGNATURE_COMPLETED_BY_EE2,
        S.REJECTED_BY_EE2,
        requires_signature=True,
    ),
    ReviewStage.CITY_ENGINEER_SIGNATURE: StageDefinition(
        ReviewStage.CITY_ENGINEER_SIGNATURE,
        "City Engineer Final Signature",
        S.UNDER_FINAL_APPROVAL_BY_CE2,
        S.CERTIFICATE_ISSUED,
        S.REJECTED_BY_CE2,
        requires_signature=True,
    ),
}

# Status -> stage whose officer holds the application in that status.
# A stage's officer keeps the application after approving it until the
# next boundary hands it off.
_STATUS_STAGE: dict[ApplicationStatus, ReviewStage] = {}
for _definition in STAGES.values():
    _STATUS_STAGE[_definition.pending_status] = _definition.stage
    _STATUS_STAGE[_definition.approved_status] = _definition.stage

_REJECTION_STAGE: dict[ApplicationStatus, ReviewStage] = {
    d.rejected_status: d.stage for d in STAGES.values()
}


def resolve_role(position: PositionType, stage: ReviewStage) -> OfficerRole:
    """Return the officer role that reviews ``position`` applications at ``stage``."""
    if stage == ReviewStage.JUNIOR_ENGINEER:
        return POSITION_ROLES[position][0]
    if stage == ReviewStage.ASSISTANT_ENGINEER:
        return POSITION_ROLES[position][1]
    return _FIXED_STAGE_ROLES[stage]


def stage_for_status(status: ApplicationStatus) -> ReviewStage | None:
    """Return the stage whose officer must hold an application in ``status``.

    None means the application must have no assignee.
    """
    return _STATUS_STAGE.get(status)


def expected_role(
    position: PositionType, status: ApplicationStatus
) -> OfficerRole | None:
    """Return the role the assignee must hold in ``status`` (None: unassigned)."""
    stage = stage_for_status(status)
    return resolve_role(position, stage) if stage else None


def rejecting_stage(status: ApplicationStatus) -> ReviewStage | None:
    """Return the stage that produced rejection ``status``, or None."""
    return _REJECTION_STAGE.get(status)


def is_rejection(status: ApplicationStatus) -> bool:
    return status in _REJECTION_STAGE


@dataclass(frozen=True)
class ProgressionBoundary:
    """A system-driven hand-off from one status to the next.

    ``stage`` is the stage receiving the application; None means the
    target status carries no assignee and the current one is released.
    """

    name: str
    from_status: ApplicationStatus
    to_status: ApplicationStatus
    stage: ReviewStage | None = None


TO_JUNIOR_ENGINEER = ProgressionBoundary(
    "progress_to_junior_engineer",
    S.SUBMITTED,
    S.UNDER_REVIEW_BY_JE,
    ReviewStage.JUNIOR_ENGINEER,
)
TO_ASSISTANT_ENGINEER = ProgressionBoundary(
    "progress_to_assistant_engineer",
    S.APPROVED_BY_JE,
    S.UNDER_REVIEW_BY_AE,
    ReviewStage.ASSISTANT_ENGINEER,
)
TO_EXECUTIVE_ENGINEER_STAGE1 = ProgressionBoundary(
    "progress_to_executive_engineer_stage1",
    S.APPROVED_BY_AE,
    S.UNDER_REVIEW_BY_EE1,
    ReviewStage.EXECUTIVE_ENGINEER,
)
TO_CITY_ENGINEER = ProgressionBoundary(
    "progress_to_city_engineer",
    S.APPROVED_BY_EE1,
    S.UNDER_REVIEW_BY_CE1,
    ReviewStage.CITY_ENGINEER,
)
TO_PAYMENT = ProgressionBoundary(
    "progress_to_payment", S.APPROVED_BY_CE1, S.PAYMENT_PENDING
)
RECORD_PAYMENT = ProgressionBoundary(
    "record_payment", S.PAYMENT_PENDING, S.PAYMENT_COMPLETED
)
TO_CLERK = ProgressionBoundary(
    "progress_to_clerk",
    S.PAYMENT_COMPLETED,
    S.UNDER_PROCESSING_BY_CLERK,
    ReviewStage.CLERK,
)
TO_EXECUTIVE_ENGINEER_SIGNATURE = ProgressionBoundary(
    "progress_to_executive_engineer_signature",
    S.PROCESSED_BY_CLERK,
    S.UNDER_DIGITAL_SIGNATURE_BY_EE2,
    ReviewStage.EXECUTIVE_ENGINEER_SIGNATURE,
)
TO_CITY_ENGINEER_FINAL_SIGNATURE = ProgressionBoundary(
    "progress_to_city_engineer_final_signature",
    S.DIGITAL_SIGNATURE_COMPLETED_BY_EE2,
    S.UNDER_FINAL_APPROVAL_BY_CE2,
    ReviewStage.CITY_ENGINEER_SIGNATURE,
)
COMPLETE_WORKFLOW = ProgressionBoundary(
    "complete_workflow", S.CERTIFICATE_ISSUED, S.COMPLETED
)

BOUNDARIES: tuple[ProgressionBoundary, ...] = (
    TO_JUNIOR_ENGINEER,
    TO_ASSISTANT_ENGINEER,
    TO_EXECUTIVE_ENGINEER_STAGE1,
    TO_CITY_ENGINEER,
    TO_PAYMENT,
    RECORD_PAYMENT,
    TO_CLERK,
    TO_EXECUTIVE_ENGINEER_SIGNATURE,
    TO_CITY_ENGINEER_FINAL_SIGNATURE,
    COMPLETE_WORKFLOW,
)

_BOUNDARY_BY_FROM: dict[ApplicationStatus, ProgressionBoundary] = {
    b.from_status: b for b in BOUNDARIES
}


def boundary_from(status: ApplicationStatus) -> ProgressionBoundary | None:
    """Return the boundary that advances an application waiting in ``status``."""
    return _BOUNDARY_BY_FROM.get(status)


def resume_boundary(stage: ReviewStage) -> ProgressionBoundary:
    """Boundary that routes a resubmitted application back to ``stage``."""
    definition = STAGES[stage]
    if stage == ReviewStage.JUNIOR_ENGINEER:
        return TO_JUNIOR_ENGINEER
    return ProgressionBoundary(
        f"resume_to_{stage.value.replace('-', '_')}",
        S.SUBMITTED,
        definition.pending_status,
        stage,
    )


def submitted_boundary(
    policy: ResubmissionPolicy,
    steps: Iterable[tuple[ApplicationStatus, ApplicationStatus]],
) -> ProgressionBoundary:
    """Boundary that routes a Submitted application.

    ``steps`` is the application's progression history as (from, to)
    pairs in order. Under the resume policy a resubmitted application
    returns to the stage whose rejection preceded the latest move into
    Submitted; otherwise it starts again at the junior engineer.
    """
    if policy != ResubmissionPolicy.RESUME:
        return TO_JUNIOR_ENGINEER
    for from_status, to_status in reversed(list(steps)):
        if to_status == S.SUBMITTED:
            stage = rejecting_stage(from_status)
            return resume_boundary(stage) if stage is not None else TO_JUNIOR_ENGINEER
    return TO_JUNIOR_ENGINEER
