"""Application lifespan: startup and shutdown.

Wires process-wide infrastructure only: logging, tracing, the shared HTTP
client for external facts, and the side-effect dispatcher. Shutdown drains
pending side effects before disposing the DB engine.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI

from permit_workflow.application.services.side_effects import SideEffectDispatcher
from permit_workflow.core.config import get_settings
from permit_workflow.infrastructure.persistence.database import dispose_engine, get_engine
from permit_workflow.infrastructure.services import (
    LogOnlyCertificateGenerator,
    LogOnlyNotificationService,
)
from permit_workflow.shared.telemetry.logging import setup_logging
from permit_workflow.shared.telemetry.telemetry import (
    TelemetryConfig,
    get_telemetry,
    set_telemetry,
)

logger = logging.getLogger(__name__)


def _setup_telemetry(app: FastAPI) -> None:
    settings = get_settings()
    if not settings.telemetry_enabled:
        return
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        environment=settings.environment,
    )
    if telemetry.setup_telemetry(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    ) is None:
        return
    telemetry.instrument_fastapi(app)
    engine = get_engine()
    if engine is not None:
        telemetry.instrument_sqlalchemy(engine)
    set_telemetry(telemetry)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown."""
    settings = get_settings()
    setup_logging()

    # ---- Startup ----
    _setup_telemetry(app)
    app.state.http_client = httpx.AsyncClient(timeout=settings.external_timeout_seconds)
    app.state.side_effects = SideEffectDispatcher(
        notifier=LogOnlyNotificationService(),
        certificate_generator=LogOnlyCertificateGenerator(),
        max_attempts=settings.side_effect_max_attempts,
        retry_delay_seconds=settings.side_effect_retry_delay_seconds,
    )
    logger.info(
        "%s %s started (strategy=%s, resubmission=%s)",
        settings.app_name,
        settings.app_version,
        settings.assignment_strategy.value,
        settings.resubmission_policy.value,
    )

    yield

    # ---- Shutdown ----
    await app.state.side_effects.drain()
    logger.info("Pending side effects drained")

    await app.state.http_client.aclose()
    logger.info("HTTP client closed")

    telemetry = get_telemetry()
    if telemetry is not None:
        telemetry.shutdown()
        set_telemetry(None)

    await dispose_engine()
