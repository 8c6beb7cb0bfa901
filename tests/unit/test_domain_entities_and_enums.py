"""Tests for the application entity, stage decisions and enums."""

from datetime import UTC, datetime

from permit_workflow.domain.entities import ApplicationEntity, StageDecision
from permit_workflow.domain.enums import (
    ApplicationStatus,
    OfficerRole,
    PositionType,
    ReviewStage,
)


def _entity(**overrides) -> ApplicationEntity:
    fields = {
        "id": 1,
        "application_number": "PMC-2025-000001",
        "position": PositionType.LICENCE_ENGINEER,
        "status": ApplicationStatus.UNDER_REVIEW_BY_AE,
        "assigned_officer_id": 5,
        "version": 3,
    }
    fields.update(overrides)
    return ApplicationEntity(**fields)


def test_is_assigned_to() -> None:
    assert _entity().is_assigned_to(5)
    assert not _entity().is_assigned_to(6)
    assert not _entity(assigned_officer_id=None).is_assigned_to(5)


def test_expected_assignee_role_follows_position() -> None:
    assert _entity().expected_assignee_role() == OfficerRole.ASSISTANT_LICENCE_ENGINEER
    assert _entity(status=ApplicationStatus.PAYMENT_PENDING).expected_assignee_role() is None


def test_record_decision_overwrites_previous_decision() -> None:
    entity = _entity()
    first = StageDecision(False, 5, "missing plans", datetime(2025, 1, 1, tzinfo=UTC))
    second = StageDecision(True, 5, "fixed", datetime(2025, 2, 1, tzinfo=UTC))
    entity.record_decision(ReviewStage.ASSISTANT_ENGINEER, first)
    entity.record_decision(ReviewStage.ASSISTANT_ENGINEER, second)
    assert entity.decisions == {ReviewStage.ASSISTANT_ENGINEER: second}


def test_stage_decision_dict_form() -> None:
    decided_at = datetime(2025, 3, 4, 10, 30, tzinfo=UTC)
    decision = StageDecision(True, 9, "signed", decided_at, signature_ref="sig-123")
    data = decision.to_dict()
    assert data == {
        "approved": True,
        "officer_id": 9,
        "comments": "signed",
        "decided_at": "2025-03-04T10:30:00+00:00",
        "signature_ref": "sig-123",
    }
    assert StageDecision.from_dict(data) == decision


def test_status_aliases_share_values() -> None:
    assert ApplicationStatus.CLERK_PENDING is ApplicationStatus.UNDER_PROCESSING_BY_CLERK
    assert (
        ApplicationStatus.EXECUTIVE_ENGINEER_SIGN_PENDING
        is ApplicationStatus.UNDER_DIGITAL_SIGNATURE_BY_EE2
    )
    assert "UnderProcessingByClerk" in ApplicationStatus.values()
    assert len(ApplicationStatus.values()) == len(set(ApplicationStatus.values()))


def test_enum_values() -> None:
    assert len(OfficerRole.values()) == 13
    assert len(PositionType.values()) == 5
    assert ReviewStage("clerk") == ReviewStage.CLERK
