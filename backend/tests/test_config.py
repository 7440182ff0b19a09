import pytest
from pydantic import ValidationError

from pulse.config import Settings
from pulse.signals.policy import DEFAULT_POLICY, ClassificationPolicy


def test_defaults():
    assert DEFAULT_POLICY.auto_approval_threshold == 100
    assert DEFAULT_POLICY.high_risk_amount_threshold == 200


def test_policy_from_environment(monkeypatch):
    monkeypatch.setenv("AUTO_APPROVAL_THRESHOLD", "50")
    monkeypatch.setenv("HIGH_RISK_AMOUNT_THRESHOLD", "150")

    policy = ClassificationPolicy.from_settings(Settings(_env_file=None))

    assert policy.auto_approval_threshold == 50
    assert policy.high_risk_amount_threshold == 150


@pytest.mark.parametrize(
    "env",
    [
        {"AUTO_APPROVAL_THRESHOLD": "-1"},
        {"HIGH_RISK_AMOUNT_THRESHOLD": "-0.01"},
        {"SLA_WARNING_RATIO": "1.5"},
    ],
)
def test_invalid_settings_fail_fast(monkeypatch, env):
    for key, value in env.items():
        monkeypatch.setenv(key, value)

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_policy_is_frozen():
    with pytest.raises(ValidationError):
        DEFAULT_POLICY.auto_approval_threshold = 1
