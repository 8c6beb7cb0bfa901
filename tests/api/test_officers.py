"""Tests for officer endpoints (in-memory repositories via dependency overrides)."""

from httpx import AsyncClient

from permit_workflow.domain.enums import OfficerRole
from tests.fakes import Workflow


async def test_register_officer_returns_201(client: AsyncClient, api_workflow: Workflow) -> None:
    """POST /api/v1/officers registers an active officer."""
    response = await client.post(
        "/api/v1/officers",
        json={"name": "Anil Joshi", "email": "anil@permits.example", "role": "Clerk"},
    )
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "Clerk"
    assert data["is_active"] is True

    fetched = await client.get(f"/api/v1/officers/{data['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["email"] == "anil@permits.example"


async def test_register_duplicate_email_returns_422(
    client: AsyncClient, api_workflow: Workflow
) -> None:
    body = {"name": "Anil Joshi", "email": "anil@permits.example", "role": "Clerk"}
    assert (await client.post("/api/v1/officers", json=body)).status_code == 201
    response = await client.post("/api/v1/officers", json={**body, "name": "Other"})
    assert response.status_code == 422
    assert response.json()["details"] == {"field": "email"}


async def test_register_unknown_role_returns_422(
    client: AsyncClient, api_workflow: Workflow
) -> None:
    response = await client.post(
        "/api/v1/officers",
        json={"name": "Anil", "email": "anil@permits.example", "role": "Mayor"},
    )
    assert response.status_code == 422


async def test_get_unknown_officer_returns_404(
    client: AsyncClient, api_workflow: Workflow
) -> None:
    response = await client.get("/api/v1/officers/404")
    assert response.status_code == 404
    assert response.json()["error"] == "OFFICER_NOT_FOUND"


async def test_deactivate_and_activate(client: AsyncClient, api_workflow: Workflow) -> None:
    """Deactivated officers drop out of the workload view until reactivated."""
    officer = await api_workflow.add_officer(OfficerRole.JUNIOR_ARCHITECT)

    response = await client.post(f"/api/v1/officers/{officer.id}/deactivate")
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    workload = await client.get("/api/v1/officers/workload", params={"role": "JuniorArchitect"})
    assert workload.json() == []

    response = await client.post(f"/api/v1/officers/{officer.id}/activate")
    assert response.json()["is_active"] is True
    workload = await client.get("/api/v1/officers/workload", params={"role": "JuniorArchitect"})
    assert workload.json() == [
        {
            "officer_id": officer.id,
            "name": officer.name,
            "role": "JuniorArchitect",
            "open_applications": 0,
        }
    ]

    missing = await client.post("/api/v1/officers/404/activate")
    assert missing.status_code == 404


async def test_officer_queue_lists_assigned_applications(
    client: AsyncClient, api_workflow: Workflow
) -> None:
    """GET /officers/{id}/applications returns the officer's current queue."""
    officer = await api_workflow.add_officer(OfficerRole.JUNIOR_ARCHITECT)
    submitted = await api_workflow.submit()

    response = await client.get(f"/api/v1/officers/{officer.id}/applications")
    assert response.status_code == 200
    assert [a["id"] for a in response.json()] == [submitted.application_id]


async def test_workload_requires_role(client: AsyncClient, api_workflow: Workflow) -> None:
    response = await client.get("/api/v1/officers/workload")
    assert response.status_code == 422
