from typing import Literal

from pydantic import BaseModel

from pulse.signals.schemas import Signal

PulseState = Literal["needs-action", "in-motion", "blocked", "auto-handled", "resolved"]


class LifecycleInfo(BaseModel):
    signal_type: str  # the config entry actually used
    stages: list[str]
    current_stage: str
    current_index: int
    current_owner: str
    sla_hours: float | None


class SlaStatus(BaseModel):
    overdue: bool
    warning: bool
    label: str


class WorkflowStage(BaseModel):
    stage: int
    total: int
    label: str


class LifecycleRequest(BaseModel):
    signals: list[Signal]


class LifecycleResponse(BaseModel):
    signal_id: str
    lifecycle: LifecycleInfo
    sla: SlaStatus | None
    pulse_state: PulseState
