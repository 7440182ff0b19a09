"""Lifecycle position, SLA status and coarse workflow progress for a signal."""

import math
from datetime import datetime, timezone

import structlog

from pulse.lifecycle.schemas import LifecycleInfo, LifecycleResponse, PulseState, SlaStatus, WorkflowStage
from pulse.lifecycle.stage_config import StageConfigTable
from pulse.signals.schemas import TERMINAL_STATUSES, Signal

logger = structlog.get_logger()

UNASSIGNED_OWNER = "Unassigned"
DEFAULT_SLA_WARNING_RATIO = 0.25

# Type-agnostic progress: (stage, total, label)
WORKFLOW_STAGES: dict[str, tuple[int, int, str]] = {
    "pending": (1, 4, "Submitted"),
    "needs-clarity": (1, 4, "Needs clarification"),
    "approved": (2, 4, "Approved"),
    "in-motion": (3, 4, "Processing"),
    "awaiting-supplier": (3, 4, "With vendor"),
    "delivered": (4, 4, "Delivered"),
    "closed": (4, 4, "Closed"),
    "auto-approved": (4, 4, "Auto-handled"),
    "rejected": (4, 4, "Rejected"),
}
WORKFLOW_TOTAL = 4

STATUS_PULSE_STATE: dict[str, PulseState] = {
    "pending": "needs-action",
    "needs-clarity": "needs-action",
    "approved": "in-motion",
    "in-motion": "in-motion",
    "awaiting-supplier": "blocked",
    "auto-approved": "auto-handled",
    "delivered": "resolved",
    "closed": "resolved",
    "rejected": "resolved",
}


def _stage_key(value: str) -> str:
    """Stage keys are lower-case and hyphenated ("In Progress" -> "in-progress")."""
    return "-".join(value.strip().lower().split())


def get_lifecycle_info(signal: Signal, table: StageConfigTable) -> LifecycleInfo:
    """Resolve where a signal sits in its type's workflow.

    Explicit overrides on the signal (stage, owner, SLA) win over the type defaults.
    The index is clamped to 0 when the resolved stage is not part of the workflow.
    """
    type_key, config = table.for_type(signal.signal_type)

    stage_key = (
        (_stage_key(signal.lifecycle_stage) if signal.lifecycle_stage else None)
        or config.status_to_stage_key.get(signal.status)
        or config.stages[0]
    )
    try:
        current_index = config.stages.index(stage_key)
    except ValueError:
        logger.debug("lifecycle_stage_unknown", signal_id=signal.id, stage=stage_key, signal_type=type_key)
        current_index = 0

    owner = signal.current_owner or config.default_owners.get(stage_key) or UNASSIGNED_OWNER
    sla_hours = signal.sla_hours if signal.sla_hours is not None else config.default_sla_hours
    if sla_hours is not None and (math.isnan(sla_hours) or sla_hours < 0):
        sla_hours = None

    return LifecycleInfo(
        signal_type=type_key,
        stages=list(config.stages),
        current_stage=stage_key,
        current_index=current_index,
        current_owner=owner,
        sla_hours=sla_hours,
    )


def _round_half_up(hours: float) -> int:
    return int(math.floor(hours + 0.5))


def _format_hours(hours: float) -> str:
    return str(int(hours)) if float(hours).is_integer() else f"{hours:g}"


def get_sla_status(
    signal: Signal,
    sla_hours: float | None,
    *,
    now: datetime | None = None,
    warning_ratio: float = DEFAULT_SLA_WARNING_RATIO,
) -> SlaStatus | None:
    """On-track / warning / overdue relative to ``created_at + sla_hours``.

    Returns None when there is nothing to track: no SLA, or the signal is terminal.
    An unusable ``created_at`` degrades to the static "SLA: <n>h" label.
    """
    if signal.status in TERMINAL_STATUSES:
        return None
    if sla_hours is None or math.isnan(sla_hours) or sla_hours < 0:
        return None

    static = SlaStatus(overdue=False, warning=False, label=f"SLA: {_format_hours(sla_hours)}h")
    created_at = signal.created_at
    if created_at is None:
        return static
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)

    hours_elapsed = (current - created_at).total_seconds() / 3600
    hours_remaining = sla_hours - hours_elapsed

    if hours_remaining < 0:
        return SlaStatus(overdue=True, warning=False, label=f"{_round_half_up(abs(hours_remaining))}h overdue")
    if hours_remaining < warning_ratio * sla_hours:
        return SlaStatus(overdue=False, warning=True, label=f"{_round_half_up(hours_remaining)}h remaining")
    return static


def get_workflow_stage(status: str) -> WorkflowStage:
    """Coarse progress for generic progress bars; unknown statuses sit at stage 0."""
    stage, total, label = WORKFLOW_STAGES.get(status, (0, WORKFLOW_TOTAL, status))
    return WorkflowStage(stage=stage, total=total, label=label)


def get_pulse_state(status: str) -> PulseState:
    # Unknown statuses read as the least alarming active state
    return STATUS_PULSE_STATE.get(status, "in-motion")


def describe_lifecycles(
    signals: list[Signal],
    table: StageConfigTable,
    *,
    now: datetime | None = None,
    warning_ratio: float = DEFAULT_SLA_WARNING_RATIO,
) -> list[LifecycleResponse]:
    current = now or datetime.now(timezone.utc)
    results = []
    for signal in signals:
        info = get_lifecycle_info(signal, table)
        results.append(
            LifecycleResponse(
                signal_id=signal.id,
                lifecycle=info,
                sla=get_sla_status(signal, info.sla_hours, now=current, warning_ratio=warning_ratio),
                pulse_state=get_pulse_state(signal.status),
            )
        )
    logger.info(
        "lifecycles_described",
        count=len(results),
        overdue=sum(1 for r in results if r.sla and r.sla.overdue),
        warning=sum(1 for r in results if r.sla and r.sla.warning),
    )
    return results
