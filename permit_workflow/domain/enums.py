"""Domain enumerations for the permit workflow.

Statuses, officer roles, position categories, review stages and the
configurable policies (assignment strategy, resubmission policy).
"""

from enum import Enum

from permit_workflow.shared.enums import _ValuesMixin


class ApplicationStatus(_ValuesMixin, str, Enum):
    """Authoritative lifecycle status of a permit application.

    The ``*_PENDING`` names are aliases for the status in which an
    application waits on that role.
    """

    DRAFT = "Draft"
    SUBMITTED = "Submitted"
    UNDER_REVIEW_BY_JE = "UnderReviewByJE"
    APPROVED_BY_JE = "ApprovedByJE"
    REJECTED_BY_JE = "RejectedByJE"
    UNDER_REVIEW_BY_AE = "UnderReviewByAE"
    APPROVED_BY_AE = "ApprovedByAE"
    REJECTED_BY_AE = "RejectedByAE"
    UNDER_REVIEW_BY_EE1 = "UnderReviewByEE1"
    APPROVED_BY_EE1 = "ApprovedByEE1"
    REJECTED_BY_EE1 = "RejectedByEE1"
    UNDER_REVIEW_BY_CE1 = "UnderReviewByCE1"
    APPROVED_BY_CE1 = "ApprovedByCE1"
    REJECTED_BY_CE1 = "RejectedByCE1"
    PAYMENT_PENDING = "PaymentPending"
    PAYMENT_COMPLETED = "PaymentCompleted"
    UNDER_PROCESSING_BY_CLERK = "UnderProcessingByClerk"
    PROCESSED_BY_CLERK = "ProcessedByClerk"
    REJECTED_BY_CLERK = "RejectedByClerk"
    UNDER_DIGITAL_SIGNATURE_BY_EE2 = "UnderDigitalSignatureByEE2"
    DIGITAL_SIGNATURE_COMPLETED_BY_EE2 = "DigitalSignatureCompletedByEE2"
    REJECTED_BY_EE2 = "RejectedByEE2"
    UNDER_FINAL_APPROVAL_BY_CE2 = "UnderFinalApprovalByCE2"
    REJECTED_BY_CE2 = "RejectedByCE2"
    CERTIFICATE_ISSUED = "CertificateIssued"
    COMPLETED = "Completed"
    REJECTED = "Rejected"

    JUNIOR_ENGINEER_PENDING = "UnderReviewByJE"
    ASSISTANT_ENGINEER_PENDING = "UnderReviewByAE"
    EXECUTIVE_ENGINEER_PENDING = "UnderReviewByEE1"
    CITY_ENGINEER_PENDING = "UnderReviewByCE1"
    CLERK_PENDING = "UnderProcessingByClerk"
    EXECUTIVE_ENGINEER_SIGN_PENDING = "UnderDigitalSignatureByEE2"
    CITY_ENGINEER_SIGN_PENDING = "UnderFinalApprovalByCE2"


class PositionType(_ValuesMixin, str, Enum):
    """Licence category being applied for."""

    ARCHITECT = "Architect"
    LICENCE_ENGINEER = "LicenceEngineer"
    STRUCTURAL_ENGINEER = "StructuralEngineer"
    SUPERVISOR1 = "Supervisor1"
    SUPERVISOR2 = "Supervisor2"


class OfficerRole(_ValuesMixin, str, Enum):
    """Fixed officer roles. Junior/Assistant roles are per position category."""

    JUNIOR_ARCHITECT = "JuniorArchitect"
    ASSISTANT_ARCHITECT = "AssistantArchitect"
    JUNIOR_LICENCE_ENGINEER = "JuniorLicenceEngineer"
    ASSISTANT_LICENCE_ENGINEER = "AssistantLicenceEngineer"
    JUNIOR_STRUCTURAL_ENGINEER = "JuniorStructuralEngineer"
    ASSISTANT_STRUCTURAL_ENGINEER = "AssistantStructuralEngineer"
    JUNIOR_SUPERVISOR1 = "JuniorSupervisor1"
    ASSISTANT_SUPERVISOR1 = "AssistantSupervisor1"
    JUNIOR_SUPERVISOR2 = "JuniorSupervisor2"
    ASSISTANT_SUPERVISOR2 = "AssistantSupervisor2"
    EXECUTIVE_ENGINEER = "ExecutiveEngineer"
    CITY_ENGINEER = "CityEngineer"
    CLERK = "Clerk"


class ReviewStage(_ValuesMixin, str, Enum):
    """Officer stage an application passes through (one action handler each)."""

    JUNIOR_ENGINEER = "junior-engineer"
    ASSISTANT_ENGINEER = "assistant-engineer"
    EXECUTIVE_ENGINEER = "executive-engineer"
    CITY_ENGINEER = "city-engineer"
    CLERK = "clerk"
    EXECUTIVE_ENGINEER_SIGNATURE = "executive-engineer-signature"
    CITY_ENGINEER_SIGNATURE = "city-engineer-signature"


class AssignmentStrategy(_ValuesMixin, str, Enum):
    """Policy used by the assignment selector to pick among eligible officers."""

    RANDOM = "random"
    ROUND_ROBIN = "round_robin"
    WORKLOAD_BASED = "workload_based"
    PRIORITY_BASED = "priority_based"


class ResubmissionPolicy(_ValuesMixin, str, Enum):
    """Where a resubmitted application re-enters review."""

    RESTART = "restart"
    RESUME = "resume"
