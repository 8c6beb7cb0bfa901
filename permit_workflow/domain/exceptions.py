"""Domain exceptions for the permit workflow.

Business rule violations raised inside the engine. Public engine
operations convert them to result values carrying ``error_code`` as the
error kind; the HTTP layer maps the same codes to status codes.

Each exception has a ``category`` matching the error taxonomy:
validation, routing, consistency, or collaborator.
"""

from typing import Any

VALIDATION = "validation"
ROUTING = "routing"
CONSISTENCY = "consistency"
COLLABORATOR = "collaborator"


class PermitWorkflowException(Exception):
    """Base exception for all permit workflow errors.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code (the result's error kind).
        details: Additional error context (e.g. application_id, status).
        category: Error taxonomy bucket; drives log severity.
    """

    category = VALIDATION

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable representation for API responses."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(PermitWorkflowException):
    """Raised when input validation fails (e.g. empty name, unknown value)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ApplicationNotFoundException(PermitWorkflowException):
    """Raised when the referenced application does not exist."""

    def __init__(self, application_id: int) -> None:
        super().__init__(
            f"Application {application_id} not found",
            "APPLICATION_NOT_FOUND",
            {"application_id": application_id},
        )


class OfficerNotFoundException(PermitWorkflowException):
    """Raised when the referenced officer does not exist."""

    def __init__(self, officer_id: int) -> None:
        super().__init__(
            f"Officer {officer_id} not found",
            "OFFICER_NOT_FOUND",
            {"officer_id": officer_id},
        )


class NoEligibleOfficerException(PermitWorkflowException):
    """Raised by the assignment selector when no active officer holds the role."""

    category = ROUTING

    def __init__(self, role: str) -> None:
        super().__init__(
            f"No active officer with role {role}",
            "NO_ELIGIBLE_OFFICER",
            {"role": role},
        )
        self.role = role


class NoOfficerAvailableException(PermitWorkflowException):
    """Raised by a progression boundary that cannot pick the next assignee.

    Retryable: the application keeps its prior status.
    """

    category = ROUTING

    def __init__(self, application_id: int, role: str) -> None:
        super().__init__(
            f"No active {role} available for application {application_id}",
            "NO_OFFICER_AVAILABLE",
            {"application_id": application_id, "role": role},
        )


class IllegalTransitionException(PermitWorkflowException):
    """Raised when a transition is not in the status machine's table."""

    category = CONSISTENCY

    def __init__(self, from_status: str, to_status: str) -> None:
        super().__init__(
            f"Transition {from_status} -> {to_status} is not allowed",
            "ILLEGAL_TRANSITION",
            {"from_status": from_status, "to_status": to_status},
        )


class InvalidStageForProgressionException(PermitWorkflowException):
    """Raised when the stored status no longer matches a boundary's precondition.

    Covers both sequential re-invocation and losing a concurrent write.
    """

    category = CONSISTENCY

    def __init__(
        self,
        application_id: int,
        expected_status: str,
        actual_status: str | None = None,
    ) -> None:
        message = (
            f"Application {application_id} is not in status {expected_status}"
            + (f" (current: {actual_status})" if actual_status else "")
        )
        super().__init__(
            message,
            "INVALID_STAGE_FOR_PROGRESSION",
            {
                "application_id": application_id,
                "expected_status": expected_status,
                "actual_status": actual_status,
            },
        )


class WrongStageException(PermitWorkflowException):
    """Raised when an officer acts on an application not pending for their stage."""

    def __init__(
        self, application_id: int, expected_status: str, actual_status: str
    ) -> None:
        super().__init__(
            f"Application {application_id} is in status {actual_status}, "
            f"expected {expected_status}",
            "WRONG_STAGE",
            {
                "application_id": application_id,
                "expected_status": expected_status,
                "actual_status": actual_status,
            },
        )


class NotAssigneeException(PermitWorkflowException):
    """Raised when the acting officer is not the current assignee."""

    def __init__(self, application_id: int, officer_id: int) -> None:
        super().__init__(
            f"Officer {officer_id} is not assigned to application {application_id}",
            "NOT_ASSIGNEE",
            {"application_id": application_id, "officer_id": officer_id},
        )


class MissingReasonException(PermitWorkflowException):
    """Raised when a rejection or administrative action has no reason."""

    def __init__(self, message: str = "Rejection reason is required") -> None:
        super().__init__(message, "MISSING_REASON", {"field": "reason"})


class PaymentNotCompletedException(PermitWorkflowException):
    """Raised at the payment boundary when the payment fact is false."""

    def __init__(self, application_id: int) -> None:
        super().__init__(
            f"Payment for application {application_id} is not completed",
            "PAYMENT_NOT_COMPLETED",
            {"application_id": application_id},
        )


class SignatureNotCompletedException(PermitWorkflowException):
    """Raised at a signature stage when the signing officer has not signed."""

    def __init__(self, application_id: int, officer_id: int) -> None:
        super().__init__(
            f"Digital signature by officer {officer_id} on application "
            f"{application_id} is not completed",
            "SIGNATURE_NOT_COMPLETED",
            {"application_id": application_id, "officer_id": officer_id},
        )


class DatabaseNotConfiguredException(PermitWorkflowException):
    """Raised when a DB-backed dependency is used without DATABASE_URL."""

    category = COLLABORATOR

    def __init__(self) -> None:
        super().__init__(
            "Database not configured. Set DATABASE_URL and run migrations.",
            "DATABASE_NOT_CONFIGURED",
        )
