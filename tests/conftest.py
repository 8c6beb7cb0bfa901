"""Pytest configuration and fixtures for permit-workflow.

Uses permit_workflow.main:app for HTTP tests and
permit_workflow.infrastructure.persistence.database for DB-dependent fixtures.
Unit tests run against the in-memory fakes in tests/fakes.py.
"""

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from permit_workflow.api.v1 import dependencies as deps
from permit_workflow.core.limiter import limiter
from permit_workflow.infrastructure.persistence import database as db_mod
from permit_workflow.main import app
from tests.fakes import Workflow, build_workflow


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI). Clears dependency overrides after use."""
    limiter.reset()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
async def workflow() -> Workflow:
    """Engine, handlers and queries over in-memory repositories (random strategy, restart policy).

    Drains pending side effects after the test so no task outlives the loop.
    """
    wf = build_workflow()
    yield wf
    await wf.side_effects.drain()


@pytest.fixture
def api_workflow(client: AsyncClient, workflow: Workflow) -> Workflow:
    """Route the workflow dependencies of the app to the in-memory workflow."""
    app.dependency_overrides.update(
        {
            deps.get_progression_engine: lambda: workflow.engine,
            deps.get_action_handlers: lambda: workflow.handlers,
            deps.get_workflow_queries: lambda: workflow.queries,
            deps.get_officer_administration: lambda: workflow.admin,
            deps.get_officer_repo: lambda: workflow.officers,
            deps.get_application_repo: lambda: workflow.applications,
        }
    )
    return workflow


@pytest.fixture
async def db_session() -> AsyncSession:
    """Database session for repository/integration tests. Rolls back after test.

    Requires DATABASE_URL. Skips (pytest.skip) when Postgres is not configured.
    Use @pytest.mark.requires_db to mark tests that need this fixture; run
    without DB via: pytest -m 'not requires_db'.
    """
    db_mod._ensure_engine()
    if db_mod.AsyncSessionLocal is None:
        pytest.skip(
            "Postgres not configured: set DATABASE_URL, then run: alembic upgrade head"
        )
    async with db_mod.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
    await db_mod.dispose_engine()
