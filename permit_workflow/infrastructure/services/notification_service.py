"""Stage notification: log-only implementation of INotificationService."""

from __future__ import annotations

from permit_workflow.domain.enums import ApplicationStatus
from permit_workflow.shared.telemetry.logging import get_logger
from permit_workflow.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class LogOnlyNotificationService:
    """INotificationService implementation that logs instead of sending email.

    Use when no mail transport is configured. Production can swap in an
    SMTP or queue-based implementation.
    """

    async def notify_stage(
        self,
        application_id: int,
        new_status: ApplicationStatus,
        remarks: str | None,
    ) -> None:
        logger.info(
            "Stage notify: application %s is now %s",
            application_id,
            new_status.value,
        )
        logger.debug(
            "Stage notify remarks (first 500 chars, at %s): %s",
            utc_now().isoformat(),
            (remarks or "")[:500],
        )
