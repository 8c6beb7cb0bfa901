"""WorkflowQueries tests: stage info, histories, workload, consistency."""

import pytest

from permit_workflow.domain.enums import (
    ApplicationStatus,
    OfficerRole,
    ResubmissionPolicy,
    ReviewStage,
)
from permit_workflow.domain.exceptions import ApplicationNotFoundException
from tests.fakes import Workflow, build_workflow

S = ApplicationStatus


async def test_stage_info_under_review(workflow: Workflow) -> None:
    staff = await workflow.staff()
    application_id = (await workflow.submit()).application_id

    info = await workflow.queries.get_workflow_stage(application_id)
    assert info.application_number == f"PMC-2025-{application_id:06d}"
    assert info.current_status == S.UNDER_REVIEW_BY_JE
    assert info.current_officer_id == staff[OfficerRole.JUNIOR_ARCHITECT].id
    assert info.current_officer_name == staff[OfficerRole.JUNIOR_ARCHITECT].name
    assert info.stage_number == 1
    assert info.total_stages == 8
    assert info.stage_name == "Junior Engineer Review"
    assert info.next_stage_name == "Assistant Engineer Review"
    assert info.progress_percentage == 12.5
    assert not info.can_progress
    assert info.blocked_reason == "Awaiting action by JuniorArchitect"


async def test_stage_info_submitted_without_officer(workflow: Workflow) -> None:
    application_id = (await workflow.submit()).application_id
    info = await workflow.queries.get_workflow_stage(application_id)
    assert info.stage_number == 0
    assert info.stage_name == "Submitted"
    assert info.next_stage_name == "Junior Engineer Review"
    assert info.progress_percentage == 0.0
    assert info.current_officer_name is None
    assert not info.can_progress
    assert info.blocked_reason == "No active JuniorArchitect available"

    await workflow.add_officer(OfficerRole.JUNIOR_ARCHITECT)
    info = await workflow.queries.get_workflow_stage(application_id)
    assert info.can_progress
    assert info.blocked_reason is None


async def test_stage_info_payment_and_completion(workflow: Workflow) -> None:
    await workflow.staff()
    application_id = (await workflow.submit()).application_id

    workflow.applications.force(application_id, status=S.PAYMENT_PENDING, assigned_officer_id=None)
    info = await workflow.queries.get_workflow_stage(application_id)
    assert info.stage_number == 5
    assert info.stage_name == "Payment"
    assert info.progress_percentage == 62.5
    assert info.blocked_reason == "Awaiting payment"

    workflow.applications.force(application_id, status=S.COMPLETED)
    info = await workflow.queries.get_workflow_stage(application_id)
    assert info.stage_name == "Completed"
    assert info.next_stage_name is None
    assert info.progress_percentage == 100.0
    assert not info.can_progress
    assert info.blocked_reason == "Workflow finished (Completed)"


async def test_stage_info_after_rejection(workflow: Workflow) -> None:
    await workflow.staff()
    application_id = (await workflow.submit()).application_id
    await workflow.reject(ReviewStage.JUNIOR_ENGINEER, application_id)

    info = await workflow.queries.get_workflow_stage(application_id)
    assert info.current_status == S.REJECTED_BY_JE
    assert info.stage_number == 0
    assert info.blocked_reason == "Rejected; awaiting resubmission by the applicant"


async def test_stage_info_follows_resume_routing() -> None:
    """Under the resume policy a resubmitted application waits for the rejecting stage."""
    wf = build_workflow(policy=ResubmissionPolicy.RESUME)
    staff = await wf.staff()
    assistant = staff[OfficerRole.ASSISTANT_ARCHITECT]
    application_id = (await wf.submit()).application_id
    assert (await wf.approve(ReviewStage.JUNIOR_ENGINEER, application_id)).success
    assert (await wf.reject(ReviewStage.ASSISTANT_ENGINEER, application_id)).success

    info = await wf.queries.get_workflow_stage(application_id)
    assert info.next_stage_name == "Assistant Engineer Review"

    await wf.admin.deactivate_officer(assistant.id)
    resubmitted = await wf.engine.resubmit(application_id, "applicant:1")
    assert resubmitted.new_status == S.SUBMITTED
    assert resubmitted.error_kind == "NO_OFFICER_AVAILABLE"

    info = await wf.queries.get_workflow_stage(application_id)
    assert info.next_stage_name == "Assistant Engineer Review"
    assert not info.can_progress
    assert info.blocked_reason == "No active AssistantArchitect available"

    await wf.admin.activate_officer(assistant.id)
    info = await wf.queries.get_workflow_stage(application_id)
    assert info.can_progress
    assert info.blocked_reason is None

    retried = await wf.engine.retry_progression(application_id, "admin:ops")
    assert retried.new_status == S.UNDER_REVIEW_BY_AE
    assert retried.assigned_officer_id == assistant.id
    await wf.side_effects.drain()


async def test_queries_on_missing_application(workflow: Workflow) -> None:
    with pytest.raises(ApplicationNotFoundException):
        await workflow.queries.get_workflow_stage(42)
    with pytest.raises(ApplicationNotFoundException):
        await workflow.queries.get_workflow_history(42)
    with pytest.raises(ApplicationNotFoundException):
        await workflow.queries.get_assignment_history(42)


async def test_histories_are_chronological(workflow: Workflow) -> None:
    await workflow.staff()
    application_id = (await workflow.submit()).application_id
    await workflow.approve(ReviewStage.JUNIOR_ENGINEER, application_id)

    history = await workflow.queries.get_workflow_history(application_id)
    assert [h.to_status for h in history] == [
        S.SUBMITTED,
        S.UNDER_REVIEW_BY_JE,
        S.APPROVED_BY_JE,
        S.UNDER_REVIEW_BY_AE,
    ]
    assert all(a.created_at < b.created_at for a, b in zip(history, history[1:]))

    assignments = await workflow.queries.get_assignment_history(application_id)
    assert [a.role for a in assignments] == [
        OfficerRole.JUNIOR_ARCHITECT,
        OfficerRole.ASSISTANT_ARCHITECT,
    ]


async def test_consistency_detects_tampered_assignee(workflow: Workflow) -> None:
    staff = await workflow.staff()
    application_id = (await workflow.submit()).application_id
    assert (await workflow.queries.check_consistency(application_id)).consistent

    workflow.applications.force(
        application_id, assigned_officer_id=staff[OfficerRole.CLERK].id
    )
    report = await workflow.queries.check_consistency(application_id)
    assert not report.consistent
    assert any("does not match assignment history" in p for p in report.problems)
    assert any("expected JuniorArchitect" in p for p in report.problems)


async def test_consistency_detects_status_drift(workflow: Workflow) -> None:
    await workflow.staff()
    application_id = (await workflow.submit()).application_id
    workflow.applications.force(application_id, status=S.PAYMENT_PENDING)

    report = await workflow.queries.check_consistency(application_id)
    assert not report.consistent
    assert any("expects no assignee" in p for p in report.problems)
    assert any("last history step ends at UnderReviewByJE" in p for p in report.problems)


async def test_officer_workload_counts_open_applications(workflow: Workflow) -> None:
    je = await workflow.add_officer(OfficerRole.JUNIOR_ARCHITECT)
    await workflow.add_officer(OfficerRole.JUNIOR_ARCHITECT, is_active=False)
    ids = [(await workflow.submit()).application_id for _ in range(3)]
    workflow.applications.force(ids[0], status=S.COMPLETED)

    workload = await workflow.queries.get_officer_workload(OfficerRole.JUNIOR_ARCHITECT)
    assert [(w.officer_id, w.open_applications) for w in workload] == [(je.id, 2)]
    assert await workflow.queries.get_officer_workload(OfficerRole.CLERK) == []
