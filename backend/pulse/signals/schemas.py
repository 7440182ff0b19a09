from datetime import datetime, timezone
from typing import Literal

import structlog
from pydantic import (
    AliasChoices,
    BaseModel,
    Field,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)

logger = structlog.get_logger()

SIGNAL_TYPES = (
    "purchase", "maintenance", "incident", "shift-handover",
    "compliance", "event", "resource", "general",
)
SIGNAL_STATUSES = (
    "pending", "needs-clarity", "approved", "auto-approved", "rejected",
    "in-motion", "awaiting-supplier", "delivered", "closed",
)
URGENCIES = ("normal", "urgent", "critical")

# Statuses that no longer need triage
TERMINAL_STATUSES = frozenset({"delivered", "closed", "rejected"})

RiskLevel = Literal["low", "medium", "high"]
UrgencyTier = Literal["normal", "high", "critical"]
DecisionType = Literal["approval", "exception", "alert", "informational"]
DecisionLayer = Literal["judgment", "exceptions", "informational"]
SignalDomain = Literal["financial", "clinical", "operational"]

_DATETIME = TypeAdapter(datetime)


def _to_float(value) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class Signal(BaseModel):
    """A signal record as handed over by the signal store. Read-only to this service."""

    id: str
    signal_number: int | None = None
    title: str = ""

    signal_type: str = "general"
    status: str = "pending"
    urgency: str = "normal"
    amount: float | None = None
    confidence: float | None = None
    confidence_level: str | None = None
    flag_reason: str | None = None
    bottleneck: str | None = None  # external blocker, e.g. supplier backorder
    expected_date: str | None = None

    lifecycle_stage: str | None = None
    sla_hours: float | None = None
    current_owner: str | None = None

    submitter_name: str = ""
    location: str = ""
    created_at: datetime | None = None
    funding_source: str | None = Field(None, validation_alias=AliasChoices("funding_source", "funding"))

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value):
        return str(value) if value is not None else value

    @field_validator(
        "title", "submitter_name", "location",
        "confidence_level", "flag_reason", "bottleneck", "expected_date",
        "lifecycle_stage", "current_owner", "funding_source",
        mode="before",
    )
    @classmethod
    def _lenient_text(cls, value, info: ValidationInfo):
        if isinstance(value, str):
            return value
        if isinstance(value, (bool, int, float)):
            return str(value)
        if value is not None:
            logger.debug("signal_field_not_text", field=info.field_name, value=repr(value)[:50])
        return cls.model_fields[info.field_name].default

    @field_validator("signal_number", mode="before")
    @classmethod
    def _lenient_signal_number(cls, value):
        number = _to_float(value)
        if number is None or not number.is_integer():
            if value not in (None, ""):
                logger.debug("signal_number_invalid", value=repr(value)[:50])
            return None
        return int(number)

    @field_validator("signal_type", "status", "urgency", mode="before")
    @classmethod
    def _normalize_vocabulary(cls, value, info: ValidationInfo):
        if value is None:
            return cls.model_fields[info.field_name].default
        return str(value).strip().lower()

    @field_validator("amount", "confidence", "sla_hours", mode="before")
    @classmethod
    def _lenient_number(cls, value, info: ValidationInfo):
        number = _to_float(value)
        if number is None and value not in (None, ""):
            logger.debug("signal_field_not_numeric", field=info.field_name, value=repr(value)[:50])
        return number

    @field_validator("created_at", mode="before")
    @classmethod
    def _lenient_timestamp(cls, value):
        if value is None or value == "":
            return None
        try:
            parsed = _DATETIME.validate_python(value)
        except ValidationError:
            logger.debug("signal_created_at_unparseable", value=repr(value)[:50])
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed


class ClassifiedSignal(Signal):
    risk_level: RiskLevel
    urgency_tier: UrgencyTier
    decision_type: DecisionType
    decision_layer: DecisionLayer
    due_label: str | None = None
    signal_domain: SignalDomain
    financial_exposure: float = 0.0
    requires_manager_approval: bool = False


class DecisionLayers(BaseModel):
    judgment: list[ClassifiedSignal] = Field(default_factory=list)
    exceptions: list[ClassifiedSignal] = Field(default_factory=list)
    informational: list[ClassifiedSignal] = Field(default_factory=list)


class LayerStats(BaseModel):
    judgment_count: int
    exception_count: int
    informational_count: int
    critical_count: int
    total_financial_exposure: float


class DecisionLayersResponse(DecisionLayers):
    stats: LayerStats


class SignalBuckets(BaseModel):
    approvals: list[ClassifiedSignal]
    exceptions: list[ClassifiedSignal]
    alerts: list[ClassifiedSignal]


class SignalBatchRequest(BaseModel):
    signals: list[Signal]


# ---------------------------------------------------------------------------
# System tension
# ---------------------------------------------------------------------------


class SystemTension(BaseModel):
    level: int  # 0 calm .. 3 high
    label: str
    description: str
    critical_count: int
    urgent_count: int
    pending_count: int


# ---------------------------------------------------------------------------
# Categorizer proposals
# ---------------------------------------------------------------------------


class ProposalRequest(BaseModel):
    signal: Signal
    proposal: dict | str


class ProposalResponse(BaseModel):
    signal: Signal
    applied_fields: list[str]
    classified: ClassifiedSignal
