from datetime import timedelta

import pytest

from pulse.signals.grouping import classify_and_group, group_by_decision_layer, layer_stats
from conftest import NOW


@pytest.fixture
def snapshot(make_signal):
    return [
        make_signal(id="small-purchase", amount=34.50, confidence=94),
        make_signal(id="flagged-purchase", amount=420.0, flag_reason="non-contracted supplier", confidence=60),
        make_signal(id="compliance", signal_type="compliance", status="needs-clarity", flag_reason="log missing"),
        make_signal(id="handover", signal_type="shift-handover"),
        make_signal(id="delivered-repair", signal_type="maintenance", status="delivered", amount=80.0),
        make_signal(id="closed-purchase", status="closed", amount=900.0),
        make_signal(id="rejected-resource", signal_type="resource", status="rejected", amount=300.0),
        make_signal(id="backorder", signal_type="maintenance", status="awaiting-supplier", amount=60.0, bottleneck="Part on backorder"),
        make_signal(id="resource", signal_type="resource", amount=150.0, confidence=92),
    ]


def _ids(signals):
    return [s.id for s in signals]


def test_layers_partition_the_non_terminal_signals(snapshot, policy):
    layers = group_by_decision_layer(snapshot, policy)

    grouped = _ids(layers.judgment) + _ids(layers.exceptions) + _ids(layers.informational)
    expected = {s.id for s in snapshot if s.status not in {"delivered", "closed", "rejected"}}

    assert len(grouped) == len(set(grouped))
    assert set(grouped) == expected


def test_terminal_signals_are_excluded(snapshot, policy):
    layers = group_by_decision_layer(snapshot, policy)
    everything = _ids(layers.judgment) + _ids(layers.exceptions) + _ids(layers.informational)

    assert "delivered-repair" not in everything
    assert "closed-purchase" not in everything
    assert "rejected-resource" not in everything


def test_layer_membership(snapshot, policy):
    layers = group_by_decision_layer(snapshot, policy)

    assert set(_ids(layers.judgment)) == {"flagged-purchase", "resource"}
    assert set(_ids(layers.exceptions)) == {"compliance", "backorder"}
    assert set(_ids(layers.informational)) == {"small-purchase", "handover"}


def test_judgment_order_urgency_then_amount_then_oldest(make_signal, policy):
    signals = [
        make_signal(id="normal-big", amount=900.0, confidence=95, created_at=NOW - timedelta(hours=9)),
        make_signal(id="urgent-small", amount=120.0, confidence=95, urgency="urgent", created_at=NOW - timedelta(hours=1)),
        make_signal(id="critical", amount=110.0, confidence=95, urgency="critical", created_at=NOW),
        make_signal(id="urgent-big-newer", amount=300.0, confidence=95, urgency="urgent", created_at=NOW - timedelta(hours=1)),
        make_signal(id="urgent-big-older", amount=300.0, confidence=95, urgency="urgent", created_at=NOW - timedelta(hours=5)),
    ]

    layers = group_by_decision_layer(signals, policy)

    assert _ids(layers.judgment) == [
        "critical",
        "urgent-big-older",
        "urgent-big-newer",
        "urgent-small",
        "normal-big",
    ]


def test_undated_judgment_signals_queue_last_among_equals(make_signal, policy):
    signals = [
        make_signal(id="undated", amount=300.0, confidence=95, created_at=None),
        make_signal(id="dated", amount=300.0, confidence=95),
    ]

    layers = group_by_decision_layer(signals, policy)

    assert _ids(layers.judgment) == ["dated", "undated"]


def test_exceptions_rank_alerts_after_exceptions_within_tier(make_signal, policy):
    signals = [
        make_signal(id="alert", signal_type="maintenance", status="awaiting-supplier", amount=60.0,
                    bottleneck="Supplier delay", created_at=NOW - timedelta(hours=10)),
        make_signal(id="incident", signal_type="incident", created_at=NOW - timedelta(hours=1)),
        make_signal(id="critical-incident", signal_type="incident", urgency="critical", created_at=NOW),
    ]

    layers = group_by_decision_layer(signals, policy)

    assert _ids(layers.exceptions) == ["critical-incident", "incident", "alert"]


def test_informational_keeps_input_order(make_signal, policy):
    signals = [make_signal(id=f"h{i}", signal_type="shift-handover") for i in range(4)]

    layers = group_by_decision_layer(signals, policy)

    assert _ids(layers.informational) == ["h0", "h1", "h2", "h3"]


def test_grouper_does_not_cap(make_signal, policy):
    signals = [make_signal(amount=150.0 + i) for i in range(25)]

    layers = group_by_decision_layer(signals, policy)

    assert len(layers.judgment) == 25


def test_unknown_status_is_not_dropped(make_signal, policy):
    layers = group_by_decision_layer([make_signal(status="on-hold", amount=20.0)], policy)

    assert len(layers.informational) == 1


def test_empty_snapshot(policy):
    layers = group_by_decision_layer([], policy)

    assert layers.judgment == [] and layers.exceptions == [] and layers.informational == []
    stats = layer_stats(layers)
    assert stats.judgment_count == 0
    assert stats.total_financial_exposure == 0


def test_classify_and_group_buckets(snapshot, make_signal, policy):
    signals = [*snapshot, make_signal(id="critical-incident", signal_type="incident", urgency="critical")]

    buckets = classify_and_group(signals, policy)
    layers = group_by_decision_layer(signals, policy)

    assert _ids(buckets.approvals) == _ids(layers.judgment)
    assert _ids(buckets.exceptions) == _ids(layers.exceptions)
    assert set(_ids(buckets.alerts)) == {"critical-incident", "backorder"}
    assert set(_ids(buckets.alerts)) <= set(_ids(buckets.exceptions))


def test_layer_stats(snapshot, policy):
    stats = layer_stats(group_by_decision_layer(snapshot, policy))

    assert stats.judgment_count == 2
    assert stats.exception_count == 2
    assert stats.informational_count == 2
    assert stats.critical_count == 1
    assert stats.total_financial_exposure == 570.0
