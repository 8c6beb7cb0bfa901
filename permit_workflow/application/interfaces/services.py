"""Collaborator interfaces (ports) consumed by the workflow engine.

Notification and certificate generation run as side effects; payment and
signature are boolean facts owned by external systems.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from permit_workflow.domain.enums import ApplicationStatus

if TYPE_CHECKING:
    from permit_workflow.application.services.side_effects import SideEffect


# Stage notification (e.g. email to applicant and next officer)
class INotificationService(Protocol):
    """Protocol for stage-change notifications."""

    async def notify_stage(
        self,
        application_id: int,
        new_status: ApplicationStatus,
        remarks: str | None,
    ) -> None:
        """Notify interested parties that the application reached new_status."""


# Certificate rendering (PDF etc.)
class ICertificateGenerator(Protocol):
    """Protocol for certificate generation. Must be idempotent per application."""

    async def generate_certificate(self, application_id: int) -> bool:
        """Generate the certificate; return True on success."""


# Payment gateway fact
class IPaymentStatusProvider(Protocol):
    """Protocol for the 'payment completed' fact."""

    async def payment_completed(self, application_id: int) -> bool:
        """Return True when the gateway has confirmed payment for the application."""


# Digital signature fact
class ISignatureStatusProvider(Protocol):
    """Protocol for the 'signed' fact from the signing service."""

    async def signature_completed(self, application_id: int, officer_id: int) -> bool:
        """Return True when officer_id has signed the application's certificate."""


# Side-effect dispatch (fire-and-forget)
class ISideEffectDispatcher(Protocol):
    """Protocol for dispatching side effects without blocking the caller."""

    def dispatch(self, effect: SideEffect) -> None:
        """Schedule the effect; never raises into the caller."""
