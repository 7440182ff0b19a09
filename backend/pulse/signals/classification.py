"""Signal classification — risk level, urgency tier, decision type and the derived cockpit fields.

Every function here is total: malformed or unknown input falls back to the least
alarming value instead of raising.
"""

import math

import structlog

from pulse.signals.policy import DEFAULT_POLICY, ClassificationPolicy
from pulse.signals.schemas import (
    SIGNAL_TYPES,
    URGENCIES,
    ClassifiedSignal,
    DecisionLayer,
    DecisionType,
    RiskLevel,
    Signal,
    SignalDomain,
    UrgencyTier,
)

logger = structlog.get_logger()

APPROVAL_TYPES = {"purchase", "resource", "event"}
APPROVAL_STATUSES = {"pending", "needs-clarity"}
EXCEPTION_TYPES = {"compliance", "incident"}
CLINICAL_TYPES = {"incident", "shift-handover"}

DECISION_TYPE_LAYER: dict[str, DecisionLayer] = {
    "approval": "judgment",
    "exception": "exceptions",
    "alert": "exceptions",
    "informational": "informational",
}

URGENCY_TIER_RANK = {"normal": 0, "high": 1, "critical": 2}


def effective_amount(signal: Signal) -> float:
    """Amount used for every threshold comparison; missing, NaN or negative counts as 0."""
    amount = signal.amount
    if amount is None or math.isnan(amount) or math.isinf(amount) or amount < 0:
        return 0.0
    return amount


def effective_confidence(signal: Signal) -> float | None:
    confidence = signal.confidence
    if confidence is None or math.isnan(confidence):
        return None
    return min(100.0, max(0.0, confidence))


def effective_signal_type(signal: Signal) -> str:
    if signal.signal_type in SIGNAL_TYPES:
        return signal.signal_type
    logger.debug("signal_type_unknown", signal_id=signal.id, signal_type=signal.signal_type)
    return "general"


def effective_urgency(signal: Signal) -> str:
    if signal.urgency in URGENCIES:
        return signal.urgency
    logger.debug("signal_urgency_unknown", signal_id=signal.id, urgency=signal.urgency)
    return "normal"


def _has_flag(signal: Signal) -> bool:
    return bool(signal.flag_reason and signal.flag_reason.strip())


def classify_risk(signal: Signal, policy: ClassificationPolicy = DEFAULT_POLICY) -> RiskLevel:
    """How much scrutiny the signal's data warrants.

    - high: flagged and above the high-risk amount, or confidence below 50
    - medium: flagged, or confidence in [50, 80)
    - low: everything else, including signals with neither flag nor confidence
    """
    flagged = _has_flag(signal)
    amount = effective_amount(signal)
    confidence = effective_confidence(signal)

    if flagged and amount > policy.high_risk_amount_threshold:
        return "high"
    if confidence is not None and confidence < 50:
        return "high"
    if flagged:
        return "medium"
    if confidence is not None and confidence < 80:
        return "medium"
    return "low"


def map_urgency_tier(
    signal: Signal,
    risk_level: RiskLevel,
    policy: ClassificationPolicy = DEFAULT_POLICY,
) -> UrgencyTier:
    """Sort/visual priority only; never used to block anything."""
    urgency = effective_urgency(signal)
    if urgency == "critical":
        return "critical"
    if risk_level == "high" and effective_amount(signal) > policy.auto_approval_threshold:
        return "critical"
    if urgency == "urgent" or risk_level == "medium":
        return "high"
    return "normal"


def classify_decision_type(signal: Signal, policy: ClassificationPolicy = DEFAULT_POLICY) -> DecisionType:
    """Route a signal to approval / exception / alert / informational, first match wins."""
    signal_type = effective_signal_type(signal)
    amount = effective_amount(signal)
    flagged = _has_flag(signal)

    # Pure awareness items
    if signal_type == "shift-handover":
        return "informational"
    if amount <= 0 and not flagged and signal_type not in EXCEPTION_TYPES:
        return "informational"

    if (
        signal_type in APPROVAL_TYPES
        and signal.status in APPROVAL_STATUSES
        and amount > policy.auto_approval_threshold
    ):
        return "approval"

    # Three-way-match style variance counts as an exception too
    if flagged or signal_type in EXCEPTION_TYPES:
        return "exception"
    if signal.status == "needs-clarity" and amount > 0:
        return "exception"

    if signal.bottleneck and signal.bottleneck.strip():
        return "alert"

    return "informational"


def classify_domain(signal: Signal) -> SignalDomain:
    signal_type = effective_signal_type(signal)
    if signal_type == "purchase" or effective_amount(signal) > 0:
        return "financial"
    if signal_type in CLINICAL_TYPES:
        return "clinical"
    return "operational"


def due_label(signal: Signal) -> str | None:
    if effective_urgency(signal) == "critical":
        return "Overdue"
    if signal.expected_date:
        return f"Due: {signal.expected_date}"
    return None


def classify_signal(signal: Signal, policy: ClassificationPolicy = DEFAULT_POLICY) -> ClassifiedSignal:
    """Derive the full classified view of one signal. Never mutates the input."""
    risk_level = classify_risk(signal, policy)
    urgency_tier = map_urgency_tier(signal, risk_level, policy)
    decision_type = classify_decision_type(signal, policy)
    domain = classify_domain(signal)

    return ClassifiedSignal(
        **signal.model_dump(include=set(Signal.model_fields)),
        risk_level=risk_level,
        urgency_tier=urgency_tier,
        decision_type=decision_type,
        decision_layer=DECISION_TYPE_LAYER[decision_type],
        due_label=due_label(signal),
        signal_domain=domain,
        financial_exposure=effective_amount(signal) if domain == "financial" else 0.0,
        requires_manager_approval=decision_type == "approval",
    )
