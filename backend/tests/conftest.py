from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pulse.dependencies import get_policy, get_sla_warning_ratio, get_stage_config_table
from pulse.lifecycle.stage_config import DEFAULT_STAGE_CONFIG_TABLE
from pulse.main import create_app
from pulse.signals.policy import ClassificationPolicy
from pulse.signals.schemas import Signal

NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)

TEST_POLICY = ClassificationPolicy(auto_approval_threshold=100, high_risk_amount_threshold=200)


@pytest.fixture
def policy() -> ClassificationPolicy:
    return TEST_POLICY


@pytest.fixture
def make_signal():
    """Build a Signal with sensible defaults; keyword arguments override any field."""
    counter = {"n": 0}

    def _make(**overrides) -> Signal:
        counter["n"] += 1
        data = {
            "id": f"sig-{counter['n']}",
            "signal_number": counter["n"],
            "title": "Test signal",
            "signal_type": "purchase",
            "status": "pending",
            "urgency": "normal",
            "amount": None,
            "confidence": None,
            "flag_reason": None,
            "submitter_name": "Anouk",
            "location": "Zonneweide",
            "created_at": NOW - timedelta(hours=1),
        }
        data.update(overrides)
        return Signal(**data)

    return _make


@pytest_asyncio.fixture
async def client():
    app = create_app()
    app.dependency_overrides[get_policy] = lambda: TEST_POLICY
    app.dependency_overrides[get_stage_config_table] = lambda: DEFAULT_STAGE_CONFIG_TABLE
    app.dependency_overrides[get_sla_warning_ratio] = lambda: 0.25
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
