"""Certificate generation: log-only implementation of ICertificateGenerator."""

from __future__ import annotations

from permit_workflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class LogOnlyCertificateGenerator:
    """Records certificate requests without rendering a document.

    Stateless and idempotent: a repeated request for the same application
    logs the same line again and succeeds. Rendering lives in a separate
    document service.
    """

    async def generate_certificate(self, application_id: int) -> bool:
        logger.info("Certificate generation requested for application %s", application_id)
        return True
