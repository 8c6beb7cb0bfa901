"""OfficerAdministration tests."""

import pytest

from permit_workflow.application.dtos.officer import OfficerCreate
from permit_workflow.domain.enums import ApplicationStatus, OfficerRole
from permit_workflow.domain.exceptions import OfficerNotFoundException, ValidationException
from tests.fakes import Workflow


async def test_register_officer(workflow: Workflow) -> None:
    officer = await workflow.admin.register_officer(
        OfficerCreate("Anil Joshi", "anil@permits.example", OfficerRole.CLERK)
    )
    assert officer.id == 1
    assert officer.is_active
    assert await workflow.officers.get_by_id(officer.id) == officer


async def test_register_rejects_blank_name_and_duplicate_email(workflow: Workflow) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await workflow.admin.register_officer(
            OfficerCreate(" ", "x@permits.example", OfficerRole.CLERK)
        )
    assert exc_info.value.details == {"field": "name"}

    await workflow.admin.register_officer(
        OfficerCreate("Anil Joshi", "anil@permits.example", OfficerRole.CLERK)
    )
    with pytest.raises(ValidationException) as exc_info:
        await workflow.admin.register_officer(
            OfficerCreate("Anil J", "ANIL@permits.example", OfficerRole.CITY_ENGINEER)
        )
    assert exc_info.value.details == {"field": "email"}


async def test_deactivated_officer_keeps_assignment_but_gets_no_new_work(
    workflow: Workflow,
) -> None:
    first = await workflow.add_officer(OfficerRole.JUNIOR_ARCHITECT)
    assigned = (await workflow.submit()).application_id

    deactivated = await workflow.admin.deactivate_officer(first.id)
    assert not deactivated.is_active
    assert await workflow.assignee(assigned) == first.id

    pending = await workflow.submit()
    assert pending.error_kind == "NO_OFFICER_AVAILABLE"

    await workflow.admin.activate_officer(first.id)
    retried = await workflow.engine.retry_progression(pending.application_id)
    assert retried.new_status == ApplicationStatus.UNDER_REVIEW_BY_JE
    assert retried.assigned_officer_id == first.id


async def test_activate_unknown_officer(workflow: Workflow) -> None:
    with pytest.raises(OfficerNotFoundException):
        await workflow.admin.activate_officer(99)
