from fastapi import APIRouter, Depends

from pulse.dependencies import get_sla_warning_ratio, get_stage_config_table
from pulse.lifecycle.schemas import LifecycleRequest, LifecycleResponse, WorkflowStage
from pulse.lifecycle.service import describe_lifecycles, get_workflow_stage
from pulse.lifecycle.stage_config import StageConfigTable

router = APIRouter(prefix="/lifecycle", tags=["lifecycle"])


@router.post("", response_model=list[LifecycleResponse])
async def lifecycles(
    data: LifecycleRequest,
    table: StageConfigTable = Depends(get_stage_config_table),
    warning_ratio: float = Depends(get_sla_warning_ratio),
):
    return describe_lifecycles(data.signals, table, warning_ratio=warning_ratio)


@router.get("/workflow-stage/{status}", response_model=WorkflowStage)
async def workflow_stage(status: str):
    return get_workflow_stage(status)


@router.get("/stage-config", response_model=StageConfigTable)
async def stage_config(table: StageConfigTable = Depends(get_stage_config_table)):
    return table
