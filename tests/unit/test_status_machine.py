"""Status machine tests: table shape, legality checks, re-entry, path validation."""

import pytest

from permit_workflow.domain.entities import ApplicationEntity
from permit_workflow.domain.enums import (
    ApplicationStatus,
    PositionType,
    ResubmissionPolicy,
)
from permit_workflow.domain.exceptions import IllegalTransitionException
from permit_workflow.domain.routing import STAGES, is_rejection
from permit_workflow.domain.status_machine import (
    TERMINAL_STATUSES,
    StatusMachine,
    build_transition_table,
)

S = ApplicationStatus

REJECTION_STATUSES = [s for s in ApplicationStatus if is_rejection(s)]


def _application(status: ApplicationStatus) -> ApplicationEntity:
    return ApplicationEntity(
        id=1,
        application_number="PMC-2025-000001",
        position=PositionType.ARCHITECT,
        status=status,
        assigned_officer_id=None,
        version=1,
    )


@pytest.mark.parametrize("policy", list(ResubmissionPolicy))
def test_every_status_has_a_table_entry(policy: ResubmissionPolicy) -> None:
    """The table covers every status so no lookup falls through."""
    table = build_transition_table(policy)
    assert set(table) == set(ApplicationStatus)


@pytest.mark.parametrize("policy", list(ResubmissionPolicy))
def test_non_terminal_statuses_have_an_exit(policy: ResubmissionPolicy) -> None:
    """Every non-terminal status has at least one legal outgoing transition."""
    machine = StatusMachine(policy)
    for status in machine.statuses():
        if status in TERMINAL_STATUSES:
            assert machine.is_terminal(status)
            assert machine.allowed_from(status) == frozenset()
        else:
            assert machine.allowed_from(status), status


@pytest.mark.parametrize("policy", list(ResubmissionPolicy))
@pytest.mark.parametrize("status", REJECTION_STATUSES)
def test_rejections_only_lead_back_to_submitted(
    policy: ResubmissionPolicy, status: ApplicationStatus
) -> None:
    machine = StatusMachine(policy)
    assert machine.allowed_from(status) == frozenset({S.SUBMITTED})


def test_seven_rejection_statuses() -> None:
    """JE, AE, EE1, CE1, Clerk, EE2 and CE2 can each reject."""
    assert set(REJECTION_STATUSES) == {d.rejected_status for d in STAGES.values()}
    assert len(REJECTION_STATUSES) == 7


def test_main_path_is_legal() -> None:
    path = [
        S.DRAFT,
        S.SUBMITTED,
        S.UNDER_REVIEW_BY_JE,
        S.APPROVED_BY_JE,
        S.UNDER_REVIEW_BY_AE,
        S.APPROVED_BY_AE,
        S.UNDER_REVIEW_BY_EE1,
        S.APPROVED_BY_EE1,
        S.UNDER_REVIEW_BY_CE1,
        S.APPROVED_BY_CE1,
        S.PAYMENT_PENDING,
        S.PAYMENT_COMPLETED,
        S.UNDER_PROCESSING_BY_CLERK,
        S.PROCESSED_BY_CLERK,
        S.UNDER_DIGITAL_SIGNATURE_BY_EE2,
        S.DIGITAL_SIGNATURE_COMPLETED_BY_EE2,
        S.UNDER_FINAL_APPROVAL_BY_CE2,
        S.CERTIFICATE_ISSUED,
        S.COMPLETED,
    ]
    machine = StatusMachine()
    for from_status, to_status in zip(path, path[1:]):
        assert machine.is_legal(from_status, to_status), (from_status, to_status)
    assert machine.path_violations(list(zip(path, path[1:]))) == []


def test_skipping_a_stage_is_illegal() -> None:
    machine = StatusMachine()
    assert not machine.is_legal(S.UNDER_REVIEW_BY_JE, S.UNDER_REVIEW_BY_AE)
    assert not machine.is_legal(S.APPROVED_BY_CE1, S.PAYMENT_COMPLETED)
    assert not machine.is_legal(S.COMPLETED, S.SUBMITTED)


def test_apply_mutates_status_and_returns_previous() -> None:
    application = _application(S.SUBMITTED)
    previous = StatusMachine().apply(application, S.UNDER_REVIEW_BY_JE)
    assert previous == S.SUBMITTED
    assert application.status == S.UNDER_REVIEW_BY_JE


def test_apply_illegal_transition_raises_and_leaves_status() -> None:
    application = _application(S.SUBMITTED)
    with pytest.raises(IllegalTransitionException) as exc_info:
        StatusMachine().apply(application, S.COMPLETED)
    assert application.status == S.SUBMITTED
    assert exc_info.value.error_code == "ILLEGAL_TRANSITION"
    assert exc_info.value.details == {"from_status": "Submitted", "to_status": "Completed"}


def test_restart_policy_routes_submitted_to_junior_engineer_only() -> None:
    machine = StatusMachine(ResubmissionPolicy.RESTART)
    assert machine.allowed_from(S.SUBMITTED) == frozenset({S.UNDER_REVIEW_BY_JE, S.REJECTED})
    assert not machine.is_legal(S.SUBMITTED, S.UNDER_REVIEW_BY_CE1)


def test_resume_policy_allows_every_pending_status_from_submitted() -> None:
    machine = StatusMachine(ResubmissionPolicy.RESUME)
    for definition in STAGES.values():
        assert machine.is_legal(S.SUBMITTED, definition.pending_status)
    assert machine.is_legal(S.SUBMITTED, S.REJECTED)


def test_reenterable_statuses_lie_on_the_rejection_loop() -> None:
    machine = StatusMachine()
    assert machine.is_reenterable(S.SUBMITTED)
    assert machine.is_reenterable(S.UNDER_REVIEW_BY_JE)
    assert machine.is_reenterable(S.UNDER_FINAL_APPROVAL_BY_CE2)
    assert not machine.is_reenterable(S.DRAFT)
    assert not machine.is_reenterable(S.CERTIFICATE_ISSUED)
    assert not machine.is_reenterable(S.COMPLETED)


def test_path_violations_reports_illegal_and_broken_steps() -> None:
    machine = StatusMachine()
    problems = machine.path_violations(
        [
            (S.DRAFT, S.SUBMITTED),
            (S.UNDER_REVIEW_BY_JE, S.APPROVED_BY_JE),
            (S.APPROVED_BY_JE, S.APPROVED_BY_AE),
        ]
    )
    assert len(problems) == 2
    assert "previous step ended at Submitted" in problems[0]
    assert "ApprovedByJE -> ApprovedByAE is not legal" in problems[1]


def test_path_violations_flags_repeated_exit_from_non_reenterable_status() -> None:
    machine = StatusMachine()
    problems = machine.path_violations(
        [(S.DRAFT, S.SUBMITTED), (S.DRAFT, S.SUBMITTED)]
    )
    assert any("not re-enterable" in p for p in problems)


def test_path_violations_accepts_resubmission_loop() -> None:
    machine = StatusMachine()
    steps = [
        (S.DRAFT, S.SUBMITTED),
        (S.SUBMITTED, S.UNDER_REVIEW_BY_JE),
        (S.UNDER_REVIEW_BY_JE, S.REJECTED_BY_JE),
        (S.REJECTED_BY_JE, S.SUBMITTED),
        (S.SUBMITTED, S.UNDER_REVIEW_BY_JE),
    ]
    assert machine.path_violations(steps) == []
