"""Pydantic schemas for API request/response models."""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


# ---- Request schemas ----

class InspectionItemRequest(BaseModel):
    category: str | None = Field(None, description="wall, floor, bathroom, kitchen, openings, electrical_plumbing, furniture")
    status: str = "pending"
    problem_description: str | None = None
    element_age_years: Decimal | None = None
    tenant_fault: bool | None = None
    quantity: Decimal = Decimal("1")
    work_type: str | None = None


class RenovationItemRequest(BaseModel):
    work_type: str
    payer: str = Field(..., description="tenant, owner or shared")
    estimated_cost: Decimal
    priority: str | None = None
    tenant_share: Decimal | None = None  # Shared items only; defaults to half
    title: str = ""


class ClassifyRequest(BaseModel):
    items: list[InspectionItemRequest]
    lease_duration_years: Decimal | None = None


class SettlementRequest(BaseModel):
    deposit_amount: Decimal
    lease_type: str = "nu"
    lease_duration_years: Decimal | None = None
    items: list[InspectionItemRequest] = []
    renovation_items: list[RenovationItemRequest] = []


class TimelineRequest(BaseModel):
    plan_start_date: date
    owner_budget: Decimal = Decimal("0")
    renovation_items_count: int = 0
    retention_amount: Decimal = Decimal("0")


class CreateProcessRequest(BaseModel):
    id: str | None = None  # Generated when omitted
    deposit_amount: Decimal
    lease_type: str = "nu"
    lease_end_date: date | None = None
    plan_start_date: date | None = None


class RenovationItemsRequest(BaseModel):
    items: list[RenovationItemRequest]


class QuoteRequest(BaseModel):
    renovation_item_id: str
    amount: Decimal
    tax_amount: Decimal = Decimal("0")
    provider_name: str | None = None


class RetentionDecisionRequest(BaseModel):
    decision: str = Field(..., description="approved, modified or rejected")
    modified_amount: Decimal | None = None
    owner_comments: str = ""


class TimelineActionRequest(BaseModel):
    completed: bool = True  # False marks the action started
    completed_on: date | None = None


# ---- Response schemas ----

class ClassifiedItemResponse(BaseModel):
    category: str | None
    status: str
    damage_type: str | None = None
    estimated_cost: Decimal
    vetusty_rate: Decimal | None = None


class InspectionSummaryResponse(BaseModel):
    total_items: int
    items_degraded: int
    tenant_damage_count: int
    normal_wear_count: int
    recommended_renovation_count: int
    tenant_damage_cost: Decimal
    vetusty_cost: Decimal
    recommended_renovation_cost: Decimal


class ClassifyResponse(BaseModel):
    items: list[ClassifiedItemResponse]
    summary: InspectionSummaryResponse


class SettlementResponse(BaseModel):
    tenant_damage_cost: Decimal
    vetusty_cost: Decimal
    renovation_cost: Decimal
    deposit_retention_amount: Decimal
    deposit_refund_amount: Decimal
    total_budget: Decimal
    outstanding_claim: Decimal = Decimal("0")
    items: list[ClassifiedItemResponse] = []


class TimelineItemResponse(BaseModel):
    day_offset: int
    action_type: str
    title: str
    status: str
    scheduled_date: date
    completed_date: date | None = None


class TimelineResponse(BaseModel):
    items: list[TimelineItemResponse]
    total_days: int
    estimated_ready_date: date


class ProgressResponse(BaseModel):
    status: str
    progress_percentage: int


class TransitionRequest(BaseModel):
    status: str


class ProcessResponse(BaseModel):
    id: str
    status: str
    progress_percentage: int
    lease_type: str
    deposit_amount: Decimal
    lease_end_date: date | None = None
    plan_start_date: date | None = None
    inspection_item_count: int = 0
    renovation_item_count: int = 0
    tenant_damage_cost: Decimal
    vetusty_cost: Decimal
    renovation_cost: Decimal
    deposit_retention_amount: Decimal
    deposit_refund_amount: Decimal
    total_budget: Decimal
    retention_decision: str | None = None


class RenovationItemResponse(BaseModel):
    id: str
    work_type: str
    payer: str
    title: str
    priority: str
    status: str
    estimated_cost: Decimal
    tenant_share: Decimal
    owner_share: Decimal


class QuoteResponse(BaseModel):
    id: str
    renovation_item_id: str
    amount: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    provider_name: str | None = None
    status: str


class RetentionLineResponse(BaseModel):
    description: str
    amount: Decimal


class RetentionProposalResponse(BaseModel):
    deposit_amount: Decimal
    total_damage: Decimal
    total_retention: Decimal
    refund: Decimal
    outstanding_claim: Decimal
    lines: list[RetentionLineResponse]


class RetentionDecisionResponse(BaseModel):
    decision: str
    retention: Decimal
    refund: Decimal
    owner_comments: str = ""
    lines: list[RetentionLineResponse]
