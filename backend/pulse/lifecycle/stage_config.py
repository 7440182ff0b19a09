"""Per-type lifecycle configuration: ordered stages, status mapping, owners and SLA defaults.

The table is immutable, loaded once at startup and shared by every request.
Swap it per environment with ``STAGE_CONFIG_PATH`` (a JSON file of the same shape).
"""

from pathlib import Path

import structlog
from pydantic import BaseModel, Field, model_validator

logger = structlog.get_logger()

FALLBACK_TYPE = "general"


class StageConfig(BaseModel):
    stages: tuple[str, ...] = Field(min_length=1)
    status_to_stage_key: dict[str, str] = Field(default_factory=dict)
    default_owners: dict[str, str] = Field(default_factory=dict)
    default_sla_hours: float | None = Field(None, ge=0)

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _keys_name_stages(self):
        known = set(self.stages)
        if len(known) != len(self.stages):
            raise ValueError(f"duplicate stage keys in {list(self.stages)}")
        unknown = {v for v in self.status_to_stage_key.values() if v not in known}
        unknown |= {k for k in self.default_owners if k not in known}
        if unknown:
            raise ValueError(f"stage keys {sorted(unknown)} are not in stages {list(self.stages)}")
        return self


class StageConfigTable(BaseModel):
    types: dict[str, StageConfig]

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _has_fallback(self):
        if FALLBACK_TYPE not in self.types:
            raise ValueError(f"stage config table needs a '{FALLBACK_TYPE}' entry")
        return self

    def for_type(self, signal_type: str) -> tuple[str, StageConfig]:
        """Return the entry for ``signal_type``, falling back to ``general``."""
        if signal_type in self.types:
            return signal_type, self.types[signal_type]
        return FALLBACK_TYPE, self.types[FALLBACK_TYPE]


DEFAULT_STAGE_CONFIG_TABLE = StageConfigTable(
    types={
        "purchase": StageConfig(
            stages=("submitted", "approved", "ordered", "delivered", "invoiced", "closed"),
            status_to_stage_key={
                "pending": "submitted",
                "needs-clarity": "submitted",
                "approved": "approved",
                "auto-approved": "approved",
                "in-motion": "ordered",
                "awaiting-supplier": "ordered",
                "delivered": "delivered",
                "closed": "closed",
            },
            default_owners={
                "submitted": "Requester",
                "approved": "Finance",
                "ordered": "Procurement",
                "delivered": "Requester",
                "invoiced": "Finance",
                "closed": "Completed",
            },
            default_sla_hours=24,
        ),
        "maintenance": StageConfig(
            stages=("reported", "assessed", "scheduled", "in-repair", "completed"),
            status_to_stage_key={
                "pending": "reported",
                "needs-clarity": "reported",
                "approved": "assessed",
                "awaiting-supplier": "scheduled",
                "in-motion": "in-repair",
                "delivered": "completed",
                "closed": "completed",
            },
            default_owners={
                "reported": "Care Team",
                "assessed": "Maintenance",
                "scheduled": "Maintenance",
                "in-repair": "Maintenance",
                "completed": "Completed",
            },
            default_sla_hours=48,
        ),
        "incident": StageConfig(
            stages=("reported", "reviewed", "resolved", "closed"),
            status_to_stage_key={
                "pending": "reported",
                "needs-clarity": "reported",
                "approved": "reviewed",
                "in-motion": "reviewed",
                "delivered": "resolved",
                "closed": "closed",
            },
            default_owners={
                "reported": "Care Team",
                "reviewed": "Team Lead",
                "resolved": "Care Team",
                "closed": "Completed",
            },
            default_sla_hours=4,
        ),
        "shift-handover": StageConfig(
            stages=("sent", "acknowledged"),
            status_to_stage_key={
                "pending": "sent",
                "approved": "acknowledged",
                "closed": "acknowledged",
            },
            default_owners={
                "sent": "Outgoing Shift",
                "acknowledged": "Incoming Shift",
            },
            default_sla_hours=None,
        ),
        "compliance": StageConfig(
            stages=("flagged", "under-review", "resolved"),
            status_to_stage_key={
                "pending": "flagged",
                "needs-clarity": "flagged",
                "in-motion": "under-review",
                "closed": "resolved",
            },
            default_owners={
                "flagged": "System",
                "under-review": "Compliance",
                "resolved": "Completed",
            },
            default_sla_hours=72,
        ),
        "event": StageConfig(
            stages=("planned", "confirmed", "in-progress", "completed"),
            status_to_stage_key={
                "pending": "planned",
                "approved": "confirmed",
                "in-motion": "in-progress",
                "closed": "completed",
            },
            default_owners={
                "planned": "Coordinator",
                "confirmed": "Coordinator",
                "in-progress": "Event Team",
                "completed": "Completed",
            },
            default_sla_hours=None,
        ),
        "resource": StageConfig(
            stages=("requested", "approved", "allocated", "closed"),
            status_to_stage_key={
                "pending": "requested",
                "approved": "approved",
                "in-motion": "allocated",
                "closed": "closed",
            },
            default_owners={
                "requested": "Requester",
                "approved": "Manager",
                "allocated": "HR/Resources",
                "closed": "Completed",
            },
            default_sla_hours=24,
        ),
        "general": StageConfig(
            stages=("submitted", "in-review", "resolved", "closed"),
            status_to_stage_key={
                "pending": "submitted",
                "needs-clarity": "submitted",
                "in-motion": "in-review",
                "closed": "resolved",
            },
            default_owners={
                "submitted": "Submitter",
                "in-review": "Reviewer",
                "resolved": "Completed",
                "closed": "Completed",
            },
            default_sla_hours=None,
        ),
    }
)


def load_stage_config_table(path: str | Path | None = None) -> StageConfigTable:
    """Load the stage table from a JSON file, or return the built-in one.

    An invalid file raises ``pydantic.ValidationError``; a broken table is never
    patched up silently.
    """
    if not path:
        logger.info("stage_config_loaded", source="builtin", types=len(DEFAULT_STAGE_CONFIG_TABLE.types))
        return DEFAULT_STAGE_CONFIG_TABLE

    raw = Path(path).read_text(encoding="utf-8")
    table = StageConfigTable.model_validate_json(raw)
    logger.info("stage_config_loaded", source=str(path), types=len(table.types))
    return table
