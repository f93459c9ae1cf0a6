"""Lease-end routes: classification, settlement, recovery timeline, progress.

The /processes routes drive a stored process through the coordinator; the
others are stateless calculators.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from src.api.deps import get_coordinator, get_policy
from src.api.schemas import (
    ClassifiedItemResponse,
    ClassifyRequest,
    ClassifyResponse,
    CreateProcessRequest,
    InspectionItemRequest,
    InspectionSummaryResponse,
    ProcessResponse,
    ProgressResponse,
    QuoteRequest,
    QuoteResponse,
    RenovationItemRequest,
    RenovationItemResponse,
    RenovationItemsRequest,
    RetentionDecisionRequest,
    RetentionDecisionResponse,
    RetentionLineResponse,
    RetentionProposalResponse,
    SettlementRequest,
    SettlementResponse,
    TimelineActionRequest,
    TimelineRequest,
    TimelineResponse,
    TimelineItemResponse,
    TransitionRequest,
)
from src.data.coordinator import LeaseEndCoordinator
from src.engine.allocator import allocate_costs
from src.engine.classifier import ClassificationPolicy, classify_items, summarize_inspection
from src.engine.errors import (
    InconsistentState,
    InvalidTransition,
    LeaseEndError,
    ProcessNotFound,
)
from src.engine.renovation import build_renovation_item
from src.engine.state_machine import progress_percentage
from src.engine.timeline import generate_timeline
from src.engine.triggers import allows_deposit
from src.models.inspection import InspectionCategory, InspectionItem, InspectionStatus
from src.models.lease_end import LeaseEndProcess, LeaseType, SettlementResult
from src.models.renovation import (
    Quote,
    RenovationItem,
    RenovationPayer,
    RenovationPriority,
    RenovationWorkType,
)
from src.models.retention import OwnerDecision, RetentionLine
from src.models.timeline import Timeline, TimelineActionType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/lease-end", tags=["lease-end"])


def _http_error(e: LeaseEndError) -> HTTPException:
    logger.warning("Lease-end request rejected: %s", e.message)
    if isinstance(e, ProcessNotFound):
        return HTTPException(status_code=404, detail=e.message)
    if isinstance(e, (InconsistentState, InvalidTransition)):
        return HTTPException(status_code=409, detail=e.message)
    return HTTPException(status_code=400, detail=e.message)


def _to_inspection_item(req: InspectionItemRequest) -> InspectionItem:
    try:
        return InspectionItem(
            category=InspectionCategory(req.category) if req.category else None,
            status=InspectionStatus(req.status),
            problem_description=req.problem_description,
            element_age_years=req.element_age_years,
            tenant_fault=req.tenant_fault,
            quantity=req.quantity,
            work_type=RenovationWorkType(req.work_type) if req.work_type else None,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


def _to_renovation_item(req: RenovationItemRequest) -> RenovationItem:
    try:
        work_type = RenovationWorkType(req.work_type)
        payer = RenovationPayer(req.payer)
        priority = RenovationPriority(req.priority) if req.priority else RenovationPriority.NORMAL
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return build_renovation_item(
        work_type=work_type,
        payer=payer,
        estimated_cost=req.estimated_cost,
        priority=priority,
        tenant_share=req.tenant_share,
        title=req.title,
    )


def _item_response(item: InspectionItem) -> ClassifiedItemResponse:
    return ClassifiedItemResponse(
        category=item.category.value if item.category else None,
        status=item.status.value,
        damage_type=item.damage_type.value if item.damage_type else None,
        estimated_cost=item.estimated_cost,
        vetusty_rate=item.vetusty_rate,
    )


def _settlement_response(
    result: SettlementResult,
    items: list[InspectionItem] | None = None,
) -> SettlementResponse:
    return SettlementResponse(
        tenant_damage_cost=result.tenant_damage_cost,
        vetusty_cost=result.vetusty_cost,
        renovation_cost=result.renovation_cost,
        deposit_retention_amount=result.deposit_retention_amount,
        deposit_refund_amount=result.deposit_refund_amount,
        total_budget=result.total_budget,
        outstanding_claim=result.outstanding_claim,
        items=[_item_response(i) for i in items or []],
    )


def _timeline_response(timeline: Timeline) -> TimelineResponse:
    return TimelineResponse(
        items=[
            TimelineItemResponse(
                day_offset=item.day_offset,
                action_type=item.action_type.value,
                title=item.title,
                status=item.status.value,
                scheduled_date=item.scheduled_date,
                completed_date=item.completed_date,
            )
            for item in timeline.items
        ],
        total_days=timeline.total_days,
        estimated_ready_date=timeline.estimated_ready_date,
    )


def _process_response(process: LeaseEndProcess) -> ProcessResponse:
    decision = process.retention_decision
    return ProcessResponse(
        id=process.id,
        status=process.status.value,
        progress_percentage=progress_percentage(process.status),
        lease_type=process.lease_type.value,
        deposit_amount=process.deposit_amount,
        lease_end_date=process.lease_end_date,
        plan_start_date=process.plan_start_date,
        inspection_item_count=len(process.inspection_items),
        renovation_item_count=len(process.renovation_items),
        tenant_damage_cost=process.tenant_damage_cost,
        vetusty_cost=process.vetusty_cost,
        renovation_cost=process.renovation_cost,
        deposit_retention_amount=process.deposit_retention_amount,
        deposit_refund_amount=process.deposit_refund_amount,
        total_budget=process.total_budget,
        retention_decision=decision.decision.value if decision else None,
    )


def _renovation_response(item: RenovationItem) -> RenovationItemResponse:
    return RenovationItemResponse(
        id=item.id,
        work_type=item.work_type.value,
        payer=item.payer.value,
        title=item.title,
        priority=item.priority.value,
        status=item.status.value,
        estimated_cost=item.estimated_cost,
        tenant_share=item.tenant_share,
        owner_share=item.owner_share,
    )


def _quote_response(quote: Quote) -> QuoteResponse:
    return QuoteResponse(
        id=quote.id,
        renovation_item_id=quote.renovation_item_id,
        amount=quote.amount,
        tax_amount=quote.tax_amount,
        total_amount=quote.total_amount,
        provider_name=quote.provider_name,
        status=quote.status.value,
    )


def _lines_response(lines: tuple[RetentionLine, ...]) -> list[RetentionLineResponse]:
    return [RetentionLineResponse(description=line.description, amount=line.amount) for line in lines]


@router.post("/classify", response_model=ClassifyResponse)
async def classify(
    req: ClassifyRequest,
    policy: ClassificationPolicy = Depends(get_policy),
):
    """Classify exit-inspection items. One invalid item rejects the whole request."""
    items = [_to_inspection_item(i) for i in req.items]
    try:
        classified = classify_items(items, policy, req.lease_duration_years)
    except LeaseEndError as e:
        raise _http_error(e)

    s = summarize_inspection(classified)
    return ClassifyResponse(
        items=[_item_response(i) for i in classified],
        summary=InspectionSummaryResponse(
            total_items=s.total_items,
            items_degraded=s.items_degraded,
            tenant_damage_count=s.tenant_damage_count,
            normal_wear_count=s.normal_wear_count,
            recommended_renovation_count=s.recommended_renovation_count,
            tenant_damage_cost=s.tenant_damage_cost,
            vetusty_cost=s.vetusty_cost,
            recommended_renovation_cost=s.recommended_renovation_cost,
        ),
    )


@router.post("/settlement", response_model=SettlementResponse)
async def settlement(
    req: SettlementRequest,
    policy: ClassificationPolicy = Depends(get_policy),
):
    """Inspection + renovation items in, deposit settlement and owner budget out.

    Orchestrates: classify → allocate → settle.
    """
    if not allows_deposit(req.lease_type) and req.deposit_amount > 0:
        raise HTTPException(
            status_code=400,
            detail=f"Lease type {req.lease_type} carries no security deposit",
        )

    items = [_to_inspection_item(i) for i in req.items]
    try:
        renovation_items = [_to_renovation_item(r) for r in req.renovation_items]
        classified = classify_items(items, policy, req.lease_duration_years)
        result = allocate_costs(classified, renovation_items, req.deposit_amount)
    except LeaseEndError as e:
        raise _http_error(e)

    return _settlement_response(result, classified)


@router.post("/timeline", response_model=TimelineResponse)
async def timeline(req: TimelineRequest):
    try:
        plan = generate_timeline(
            req.plan_start_date,
            owner_budget=req.owner_budget,
            renovation_items_count=req.renovation_items_count,
            retention_amount=req.retention_amount,
        )
    except LeaseEndError as e:
        raise _http_error(e)
    return _timeline_response(plan)


@router.get("/progress/{status}", response_model=ProgressResponse)
async def progress_for_status(status: str):
    """Display percentage for a status; unknown statuses render as 0."""
    return ProgressResponse(status=status, progress_percentage=progress_percentage(status))


@router.post("/processes/{process_id}/recalculate", response_model=SettlementResponse)
async def recalculate(
    process_id: str,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        result = coordinator.recalculate(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return _settlement_response(result)


@router.post("/processes/{process_id}/timeline", response_model=TimelineResponse)
async def plan_recovery(
    process_id: str,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        plan = coordinator.plan_recovery(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return _timeline_response(plan)


@router.post("/processes/{process_id}/status", response_model=ProgressResponse)
async def change_status(
    process_id: str,
    req: TransitionRequest,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        coordinator.advance(process_id, req.status)
        current = coordinator.progress(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return ProgressResponse(
        status=current.status.value,
        progress_percentage=current.progress_percentage,
    )


@router.get("/processes/{process_id}/progress", response_model=ProgressResponse)
async def process_progress(
    process_id: str,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        current = coordinator.progress(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return ProgressResponse(
        status=current.status.value,
        progress_percentage=current.progress_percentage,
    )


@router.post("/processes", response_model=ProcessResponse, status_code=201)
async def open_process(
    req: CreateProcessRequest,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        lease_type = LeaseType(req.lease_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        process = coordinator.open_process(
            req.deposit_amount,
            lease_type,
            lease_end_date=req.lease_end_date,
            plan_start_date=req.plan_start_date,
            process_id=req.id,
        )
    except LeaseEndError as e:
        raise _http_error(e)
    return _process_response(process)


@router.get("/processes/{process_id}", response_model=ProcessResponse)
async def get_process(
    process_id: str,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        process = coordinator.get(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return _process_response(process)


@router.post("/processes/{process_id}/inspection", response_model=SettlementResponse)
async def submit_inspection(
    process_id: str,
    req: ClassifyRequest,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    """Store the exit inspection, classified, and recompute the process totals."""
    items = [_to_inspection_item(i) for i in req.items]
    try:
        classified = coordinator.assess_damages(process_id, items, req.lease_duration_years)
        result = coordinator.recalculate(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return _settlement_response(result, classified)


@router.get("/processes/{process_id}/renovation-proposals", response_model=list[RenovationItemResponse])
async def renovation_proposals(
    process_id: str,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    """Owner-paid suggestions; nothing is stored until posted back as items."""
    try:
        proposals = coordinator.propose_renovations(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return [_renovation_response(item) for item in proposals]


@router.post("/processes/{process_id}/renovation-items", response_model=list[RenovationItemResponse],
             status_code=201)
async def add_renovation_items(
    process_id: str,
    req: RenovationItemsRequest,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        items = [_to_renovation_item(r) for r in req.items]
        added = coordinator.add_renovation_items(process_id, items)
    except LeaseEndError as e:
        raise _http_error(e)
    return [_renovation_response(item) for item in added]


@router.post("/processes/{process_id}/quotes", response_model=QuoteResponse, status_code=201)
async def add_quote(
    process_id: str,
    req: QuoteRequest,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        quote = coordinator.add_quote(
            process_id,
            req.renovation_item_id,
            req.amount,
            tax_amount=req.tax_amount,
            provider_name=req.provider_name,
        )
    except LeaseEndError as e:
        raise _http_error(e)
    return _quote_response(quote)


@router.post("/processes/{process_id}/quotes/{quote_id}/accept", response_model=RenovationItemResponse)
async def accept_quote(
    process_id: str,
    quote_id: str,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    """Accept a quote; the item is repriced and the process totals recomputed."""
    try:
        revised = coordinator.select_quote(process_id, quote_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return _renovation_response(revised)


@router.get("/processes/{process_id}/retention", response_model=RetentionProposalResponse)
async def retention_proposal(
    process_id: str,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        proposal = coordinator.retention_proposal(process_id)
    except LeaseEndError as e:
        raise _http_error(e)
    return RetentionProposalResponse(
        deposit_amount=proposal.deposit_amount,
        total_damage=proposal.total_damage,
        total_retention=proposal.total_retention,
        refund=proposal.refund,
        outstanding_claim=proposal.outstanding_claim,
        lines=_lines_response(proposal.lines),
    )


@router.post("/processes/{process_id}/retention/decision", response_model=RetentionDecisionResponse)
async def decide_retention(
    process_id: str,
    req: RetentionDecisionRequest,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    try:
        decision = OwnerDecision(req.decision)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        final = coordinator.decide_retention(
            process_id,
            decision,
            modified_amount=req.modified_amount,
            owner_comments=req.owner_comments,
        )
    except LeaseEndError as e:
        raise _http_error(e)
    return RetentionDecisionResponse(
        decision=final.decision.value,
        retention=final.retention,
        refund=final.refund,
        owner_comments=final.owner_comments,
        lines=_lines_response(final.lines),
    )


@router.post("/processes/{process_id}/timeline/actions/{action_type}", response_model=TimelineResponse)
async def update_action(
    process_id: str,
    action_type: str,
    req: TimelineActionRequest,
    coordinator: LeaseEndCoordinator = Depends(get_coordinator),
):
    """Complete a planned action, or mark it started with completed=false."""
    try:
        action = TimelineActionType(action_type)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    try:
        plan = coordinator.update_action(process_id, action, completed=req.completed, on=req.completed_on)
    except LeaseEndError as e:
        raise _http_error(e)
    return _timeline_response(plan)
