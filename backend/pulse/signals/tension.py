"""System tension: a single calm/active/elevated/high reading over the open queue."""

from collections.abc import Iterable

from pulse.signals.classification import effective_urgency
from pulse.signals.schemas import Signal, SystemTension

OPEN_STATUSES = {"pending", "needs-clarity"}

TENSION_LEVELS: dict[int, tuple[str, str]] = {
    0: ("Calm", "All systems operating normally"),
    1: ("Active", "Some items need attention"),
    2: ("Elevated", "Multiple urgent items pending"),
    3: ("High", "Critical items require immediate attention"),
}


def compute_system_tension(signals: Iterable[Signal]) -> SystemTension:
    """Only signals still waiting on a human (pending / needs-clarity) count."""
    pending = [s for s in signals if s.status in OPEN_STATUSES]
    critical_count = sum(1 for s in pending if effective_urgency(s) == "critical")
    urgent_count = sum(1 for s in pending if effective_urgency(s) == "urgent")
    pending_count = len(pending)

    if critical_count > 0:
        level = 3
    elif urgent_count > 1 or pending_count > 10:
        level = 2
    elif urgent_count > 0 or pending_count > 5:
        level = 1
    else:
        level = 0

    label, description = TENSION_LEVELS[level]
    return SystemTension(
        level=level,
        label=label,
        description=description,
        critical_count=critical_count,
        urgent_count=urgent_count,
        pending_count=pending_count,
    )
