"""Collaborator implementations (log-only notifier and certificate generator)."""

from permit_workflow.infrastructure.services.certificate_service import (
    LogOnlyCertificateGenerator,
)
from permit_workflow.infrastructure.services.notification_service import (
    LogOnlyNotificationService,
)

__all__ = ["LogOnlyCertificateGenerator", "LogOnlyNotificationService"]
