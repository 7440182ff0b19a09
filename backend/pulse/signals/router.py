from fastapi import APIRouter, Depends

from pulse.dependencies import get_policy
from pulse.signals.policy import ClassificationPolicy
from pulse.signals.schemas import (
    ClassifiedSignal,
    DecisionLayersResponse,
    ProposalRequest,
    ProposalResponse,
    SignalBatchRequest,
    SignalBuckets,
    SystemTension,
)
from pulse.signals.service import (
    build_buckets,
    build_decision_layers,
    classify_snapshot,
    review_proposal,
)
from pulse.signals.tension import compute_system_tension

router = APIRouter(prefix="/signals", tags=["signals"])


@router.post("/classify", response_model=list[ClassifiedSignal])
async def classify(
    data: SignalBatchRequest,
    policy: ClassificationPolicy = Depends(get_policy),
):
    return classify_snapshot(data.signals, policy)


@router.post("/decision-layers", response_model=DecisionLayersResponse)
async def decision_layers(
    data: SignalBatchRequest,
    policy: ClassificationPolicy = Depends(get_policy),
):
    return build_decision_layers(data.signals, policy)


@router.post("/buckets", response_model=SignalBuckets)
async def buckets(
    data: SignalBatchRequest,
    policy: ClassificationPolicy = Depends(get_policy),
):
    return build_buckets(data.signals, policy)


@router.post("/tension", response_model=SystemTension)
async def tension(data: SignalBatchRequest):
    return compute_system_tension(data.signals)


@router.post("/proposals", response_model=ProposalResponse)
async def proposals(
    data: ProposalRequest,
    policy: ClassificationPolicy = Depends(get_policy),
):
    return review_proposal(data.signal, data.proposal, policy)
