"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for DB sessions and workflow use cases.
All use cases are built from infrastructure implementations here;
routes depend only on these dependencies, not on infra directly.

Write paths share one transactional session per request, so a progression
and all of its history rows commit or roll back together. Side effects
raised while handling the request are held until that transaction commits
and dropped if it rolls back.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from permit_workflow.application.interfaces.services import ISideEffectDispatcher
from permit_workflow.application.services.assignment_selector import AssignmentSelector
from permit_workflow.application.services.officer_directory import OfficerDirectory
from permit_workflow.application.services.side_effects import DeferredSideEffects
from permit_workflow.application.use_cases.officers import OfficerAdministration
from permit_workflow.application.use_cases.workflow import (
    ProgressionEngine,
    StageActionHandler,
    WorkflowQueries,
    build_action_handlers,
)
from permit_workflow.core.config import get_settings
from permit_workflow.domain.enums import ReviewStage
from permit_workflow.domain.status_machine import StatusMachine
from permit_workflow.infrastructure.external import (
    HttpPaymentStatusClient,
    HttpSignatureStatusClient,
)
from permit_workflow.infrastructure.persistence.database import (
    get_db,
    get_db_transactional,
    transaction,
)
from permit_workflow.infrastructure.persistence.repositories import (
    ApplicationRepository,
    AssignmentHistoryRepository,
    OfficerRepository,
    ProgressionHistoryRepository,
    SqlAlchemyUnitOfWork,
)


def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared client created at startup (see core.lifespan)."""
    return request.app.state.http_client


def get_side_effect_dispatcher(request: Request) -> ISideEffectDispatcher:
    """Process-wide dispatcher created at startup (see core.lifespan)."""
    return request.app.state.side_effects


def get_request_side_effects(
    dispatcher: Annotated[ISideEffectDispatcher, Depends(get_side_effect_dispatcher)],
) -> DeferredSideEffects:
    """Per-request buffer in front of the process-wide dispatcher."""
    return DeferredSideEffects(dispatcher)


async def get_write_session(
    side_effects: Annotated[DeferredSideEffects, Depends(get_request_side_effects)],
) -> AsyncIterator[AsyncSession]:
    """Transactional session whose buffered side effects run only after commit."""
    try:
        async with transaction() as session:
            yield session
    except BaseException:
        side_effects.discard()
        raise
    side_effects.flush()


def get_status_machine() -> StatusMachine:
    return StatusMachine(get_settings().resubmission_policy)


def _build_directory(db: AsyncSession) -> OfficerDirectory:
    return OfficerDirectory(
        OfficerRepository(db),
        ApplicationRepository(db),
        AssignmentHistoryRepository(db),
    )


async def get_officer_administration(
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> OfficerAdministration:
    """Officer register/activate/deactivate (transactional)."""
    return OfficerAdministration(OfficerRepository(db))


async def get_officer_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> OfficerRepository:
    """Officer repository for read operations."""
    return OfficerRepository(db)


async def get_application_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> ApplicationRepository:
    """Application repository for read operations."""
    return ApplicationRepository(db)


async def get_workflow_queries(
    db: Annotated[AsyncSession, Depends(get_db)],
    status_machine: Annotated[StatusMachine, Depends(get_status_machine)],
) -> WorkflowQueries:
    """Read-only workflow views (stage, histories, workload, consistency)."""
    return WorkflowQueries(
        ApplicationRepository(db),
        AssignmentHistoryRepository(db),
        ProgressionHistoryRepository(db),
        _build_directory(db),
        status_machine,
    )


async def get_progression_engine(
    db: Annotated[AsyncSession, Depends(get_write_session)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
    side_effects: Annotated[DeferredSideEffects, Depends(get_request_side_effects)],
    status_machine: Annotated[StatusMachine, Depends(get_status_machine)],
) -> ProgressionEngine:
    """Progression engine bound to the request's transactional session."""
    settings = get_settings()
    directory = _build_directory(db)
    return ProgressionEngine(
        application_repo=ApplicationRepository(db),
        assignment_history_repo=AssignmentHistoryRepository(db),
        progression_history_repo=ProgressionHistoryRepository(db),
        unit_of_work=SqlAlchemyUnitOfWork(db),
        directory=directory,
        selector=AssignmentSelector(
            directory,
            default_strategy=settings.assignment_strategy,
            priority_officer_ids=settings.assignment_priority_officer_ids,
        ),
        status_machine=status_machine,
        side_effects=side_effects,
        payment_status=HttpPaymentStatusClient(http_client, settings.payment_status_url),
        application_number_prefix=settings.application_number_prefix,
    )


async def get_action_handlers(
    engine: Annotated[ProgressionEngine, Depends(get_progression_engine)],
    http_client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> dict[ReviewStage, StageActionHandler]:
    """One approve/reject handler per review stage, sharing the request's engine."""
    signature_status = HttpSignatureStatusClient(
        http_client, get_settings().signature_status_url
    )
    return build_action_handlers(engine, signature_status)
