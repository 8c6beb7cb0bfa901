"""Clients for external systems (payment gateway, signing service)."""

from permit_workflow.infrastructure.external.status_clients import (
    HttpPaymentStatusClient,
    HttpSignatureStatusClient,
)

__all__ = ["HttpPaymentStatusClient", "HttpSignatureStatusClient"]
