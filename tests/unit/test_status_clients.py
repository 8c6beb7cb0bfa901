"""Payment/signature status clients against httpx.MockTransport."""

import logging

import httpx
import pytest

from permit_workflow.domain.enums import ApplicationStatus
from permit_workflow.infrastructure.external.status_clients import (
    HttpPaymentStatusClient,
    HttpSignatureStatusClient,
)
from permit_workflow.infrastructure.services import (
    LogOnlyCertificateGenerator,
    LogOnlyNotificationService,
)


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def test_payment_completed_reads_flag() -> None:
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"completed": request.url.path.endswith("/12")})

    async with _client(handler) as http:
        payments = HttpPaymentStatusClient(http, "https://gateway.example/")
        assert await payments.payment_completed(12)
        assert not await payments.payment_completed(13)
    assert str(requests[0].url) == "https://gateway.example/payments/12"


async def test_signature_completed_passes_officer() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["officer_id"] = request.url.params["officer_id"]
        return httpx.Response(200, json={"signed": True})

    async with _client(handler) as http:
        signatures = HttpSignatureStatusClient(http, "https://sign.example")
        assert await signatures.signature_completed(5, 9)
    assert seen["officer_id"] == "9"


async def test_failures_report_not_completed() -> None:
    responses = iter(
        [
            httpx.Response(500),
            httpx.Response(200, content=b"not json"),
            httpx.Response(200, json={"completed": "yes"}),
            httpx.Response(200, json=[True]),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        return next(responses)

    async with _client(handler) as http:
        payments = HttpPaymentStatusClient(http, "https://gateway.example")
        for _ in range(4):
            assert not await payments.payment_completed(1)


async def test_transport_error_reports_not_completed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    async with _client(handler) as http:
        assert not await HttpPaymentStatusClient(http, "https://gateway.example").payment_completed(1)


async def test_unconfigured_url_reports_not_completed() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with _client(handler) as http:
        assert not await HttpSignatureStatusClient(http, None).signature_completed(1, 2)


async def test_log_only_collaborators_succeed(caplog: pytest.LogCaptureFixture) -> None:
    generator = LogOnlyCertificateGenerator()
    with caplog.at_level(logging.INFO):
        assert await generator.generate_certificate(1)
        assert await generator.generate_certificate(1)
    assert caplog.text.count("Certificate generation requested for application 1") == 2
    assert vars(generator) == {}
    await LogOnlyNotificationService().notify_stage(1, ApplicationStatus.COMPLETED, None)
