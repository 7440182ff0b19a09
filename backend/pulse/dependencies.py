from functools import lru_cache

from pulse.config import settings
from pulse.lifecycle.stage_config import StageConfigTable, load_stage_config_table
from pulse.signals.policy import ClassificationPolicy


@lru_cache
def get_policy() -> ClassificationPolicy:
    return ClassificationPolicy.from_settings(settings)


@lru_cache
def get_stage_config_table() -> StageConfigTable:
    return load_stage_config_table(settings.STAGE_CONFIG_PATH)


def get_sla_warning_ratio() -> float:
    return settings.SLA_WARNING_RATIO
