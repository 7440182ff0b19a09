"""Signal grouping — partitions a snapshot into the three decision layers.

Terminal signals are dropped; every other signal lands in exactly one layer.
Grouping never caps list length: slicing for display is up to the caller.
"""

from collections.abc import Iterable
from datetime import datetime, timezone

from pulse.signals.classification import URGENCY_TIER_RANK, classify_signal, effective_amount
from pulse.signals.policy import DEFAULT_POLICY, ClassificationPolicy
from pulse.signals.schemas import (
    TERMINAL_STATUSES,
    ClassifiedSignal,
    DecisionLayers,
    LayerStats,
    Signal,
    SignalBuckets,
)

# Undated signals queue behind dated ones
_UNDATED = datetime.max.replace(tzinfo=timezone.utc)


def is_terminal(signal: Signal) -> bool:
    return signal.status in TERMINAL_STATUSES


def _judgment_sort_key(sig: ClassifiedSignal) -> tuple:
    # Most urgent, then highest value, then oldest first
    return (
        -URGENCY_TIER_RANK[sig.urgency_tier],
        -effective_amount(sig),
        sig.created_at or _UNDATED,
    )


def _exception_sort_key(sig: ClassifiedSignal) -> tuple:
    return (
        -URGENCY_TIER_RANK[sig.urgency_tier],
        sig.decision_type == "alert",
        sig.created_at or _UNDATED,
    )


def group_by_decision_layer(
    signals: Iterable[Signal],
    policy: ClassificationPolicy = DEFAULT_POLICY,
) -> DecisionLayers:
    """Classify the non-terminal signals and bucket them by decision layer.

    Order within ``judgment`` is the contract the cockpit depends on:
    urgency tier (critical first), amount descending, then ``created_at`` ascending.
    ``exceptions`` puts plain exceptions ahead of alerts within a tier;
    ``informational`` keeps input order.
    """
    layers = DecisionLayers()
    for signal in signals:
        if is_terminal(signal):
            continue
        classified = classify_signal(signal, policy)
        getattr(layers, classified.decision_layer).append(classified)

    layers.judgment.sort(key=_judgment_sort_key)
    layers.exceptions.sort(key=_exception_sort_key)
    return layers


def classify_and_group(
    signals: Iterable[Signal],
    policy: ClassificationPolicy = DEFAULT_POLICY,
) -> SignalBuckets:
    """Flatter three-bucket view over the same classification.

    ``alerts`` is the high-severity slice of ``exceptions`` (alert-type signals and
    anything in the critical tier), so it overlaps ``exceptions``.
    """
    layers = group_by_decision_layer(signals, policy)
    return SignalBuckets(
        approvals=layers.judgment,
        exceptions=layers.exceptions,
        alerts=[
            s for s in layers.exceptions
            if s.decision_type == "alert" or s.urgency_tier == "critical"
        ],
    )


def layer_stats(layers: DecisionLayers) -> LayerStats:
    everything = [*layers.judgment, *layers.exceptions, *layers.informational]
    return LayerStats(
        judgment_count=len(layers.judgment),
        exception_count=len(layers.exceptions),
        informational_count=len(layers.informational),
        critical_count=sum(1 for s in everything if s.urgency_tier == "critical"),
        total_financial_exposure=round(sum(s.financial_exposure for s in layers.judgment), 2),
    )
