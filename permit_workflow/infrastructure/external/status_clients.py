"""HTTP clients for the payment-completed and signature-completed facts.

The gateway and signing service own the protocol details; these clients
only read a boolean status. Any transport or protocol failure is logged
and reported as "not completed", so the engine refuses to advance.
"""

from __future__ import annotations

from typing import Any

import httpx

from permit_workflow.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class _HttpFactClient:
    """GET a JSON document and read one boolean field."""

    fact_name = "fact"

    def __init__(self, client: httpx.AsyncClient, base_url: str | None) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/") if base_url else None

    async def _read_flag(
        self, path: str, field: str, params: dict[str, Any] | None = None
    ) -> bool:
        if not self._base_url:
            logger.warning("%s status URL not configured; reporting not completed", self.fact_name)
            return False
        url = f"{self._base_url}{path}"
        try:
            response = await self._client.get(url, params=params)
        except httpx.HTTPError as e:
            logger.error("%s status request failed: %s", self.fact_name, e)
            return False
        if response.status_code != 200:
            logger.error(
                "%s status request failed: status=%d",
                self.fact_name,
                response.status_code,
            )
            return False
        try:
            data = response.json()
        except ValueError:
            logger.error("%s status response is not JSON", self.fact_name)
            return False
        return isinstance(data, dict) and data.get(field) is True


class HttpPaymentStatusClient(_HttpFactClient):
    """IPaymentStatusProvider: GET {base}/payments/{application_id} -> {"completed": bool}."""

    fact_name = "Payment"

    async def payment_completed(self, application_id: int) -> bool:
        return await self._read_flag(f"/payments/{application_id}", "completed")


class HttpSignatureStatusClient(_HttpFactClient):
    """ISignatureStatusProvider: GET {base}/signatures/{application_id}?officer_id= -> {"signed": bool}."""

    fact_name = "Signature"

    async def signature_completed(self, application_id: int, officer_id: int) -> bool:
        return await self._read_flag(
            f"/signatures/{application_id}",
            "signed",
            params={"officer_id": officer_id},
        )
