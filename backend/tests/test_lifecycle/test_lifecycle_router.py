import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_lifecycle_batch(client: AsyncClient):
    response = await client.post(
        "/api/v1/lifecycle",
        json={
            "signals": [
                {"id": "m-1", "signal_type": "maintenance", "status": "in-motion", "created_at": "2020-01-01T00:00:00Z"},
                {"id": "p-1", "signal_type": "purchase", "status": "delivered"},
            ]
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data[0]["signal_id"] == "m-1"
    assert data[0]["lifecycle"]["current_stage"] == "in-repair"
    assert data[0]["lifecycle"]["current_owner"] == "Maintenance"
    assert data[0]["sla"]["overdue"] is True
    assert data[0]["pulse_state"] == "in-motion"
    assert data[1]["sla"] is None
    assert data[1]["lifecycle"]["current_index"] == 3


@pytest.mark.asyncio
async def test_workflow_stage_endpoint(client: AsyncClient):
    response = await client.get("/api/v1/lifecycle/workflow-stage/approved")
    assert response.status_code == 200
    assert response.json() == {"stage": 2, "total": 4, "label": "Approved"}


@pytest.mark.asyncio
async def test_workflow_stage_unknown_status(client: AsyncClient):
    response = await client.get("/api/v1/lifecycle/workflow-stage/lost")
    assert response.status_code == 200
    assert response.json()["stage"] == 0


@pytest.mark.asyncio
async def test_stage_config_endpoint(client: AsyncClient):
    response = await client.get("/api/v1/lifecycle/stage-config")
    assert response.status_code == 200
    types = response.json()["types"]
    assert types["purchase"]["stages"][0] == "submitted"
    assert types["general"]["default_sla_hours"] is None
