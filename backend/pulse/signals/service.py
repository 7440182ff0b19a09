import structlog

from pulse.signals.classification import classify_signal
from pulse.signals.grouping import classify_and_group, group_by_decision_layer, layer_stats
from pulse.signals.policy import ClassificationPolicy
from pulse.signals.proposals import apply_proposal
from pulse.signals.schemas import (
    ClassifiedSignal,
    DecisionLayersResponse,
    ProposalResponse,
    Signal,
    SignalBuckets,
)

logger = structlog.get_logger()


def classify_snapshot(signals: list[Signal], policy: ClassificationPolicy) -> list[ClassifiedSignal]:
    """Classify every record in the snapshot, terminal ones included."""
    classified = [classify_signal(s, policy) for s in signals]
    logger.info("signals_classified", count=len(classified))
    return classified


def build_decision_layers(signals: list[Signal], policy: ClassificationPolicy) -> DecisionLayersResponse:
    layers = group_by_decision_layer(signals, policy)
    stats = layer_stats(layers)
    logger.info(
        "decision_layers_built",
        received=len(signals),
        judgment=stats.judgment_count,
        exceptions=stats.exception_count,
        informational=stats.informational_count,
        critical=stats.critical_count,
    )
    return DecisionLayersResponse(
        judgment=layers.judgment,
        exceptions=layers.exceptions,
        informational=layers.informational,
        stats=stats,
    )


def build_buckets(signals: list[Signal], policy: ClassificationPolicy) -> SignalBuckets:
    buckets = classify_and_group(signals, policy)
    logger.info(
        "signal_buckets_built",
        received=len(signals),
        approvals=len(buckets.approvals),
        exceptions=len(buckets.exceptions),
        alerts=len(buckets.alerts),
    )
    return buckets


def review_proposal(signal: Signal, proposal: dict | str, policy: ClassificationPolicy) -> ProposalResponse:
    merged, applied = apply_proposal(signal, proposal)
    return ProposalResponse(
        signal=merged,
        applied_fields=applied,
        classified=classify_signal(merged, policy),
    )
