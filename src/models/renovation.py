"""Renovation work items, quotes, and cost grid data types."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


class RenovationWorkType(Enum):
    PAINT = "paint"
    FLOORING = "flooring"
    PLUMBING = "plumbing"
    ELECTRICAL = "electrical"
    CARPENTRY = "carpentry"
    CLEANING = "cleaning"
    BATHROOM = "bathroom"
    KITCHEN = "kitchen"
    OTHER = "other"


class RenovationPayer(Enum):
    TENANT = "tenant"
    OWNER = "owner"
    SHARED = "shared"


class RenovationPriority(Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class RenovationItemStatus(Enum):
    PENDING = "pending"
    QUOTE_REQUESTED = "quote_requested"
    QUOTE_RECEIVED = "quote_received"
    APPROVED = "approved"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class QuoteStatus(Enum):
    PENDING = "pending"
    RECEIVED = "received"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"


class CostUnit(Enum):
    SQUARE_METER = "m2"
    LINEAR_METER = "ml"
    UNIT = "unit"
    FLAT = "flat"


PRIORITY_RANK: dict[RenovationPriority, int] = {
    RenovationPriority.URGENT: 0,
    RenovationPriority.HIGH: 1,
    RenovationPriority.NORMAL: 2,
    RenovationPriority.LOW: 3,
}


@dataclass(frozen=True)
class RenovationItem:
    """A work item owned by the lease-end process.

    tenant_share + owner_share always equals estimated_cost.
    """

    work_type: RenovationWorkType
    payer: RenovationPayer
    estimated_cost: Decimal
    tenant_share: Decimal = Decimal("0")
    owner_share: Decimal = Decimal("0")
    priority: RenovationPriority = RenovationPriority.NORMAL
    title: str = ""
    status: RenovationItemStatus = RenovationItemStatus.PENDING
    id: str = ""
    actual_cost: Optional[Decimal] = None

    @property
    def needs_quotes(self) -> bool:
        return self.status in (
            RenovationItemStatus.PENDING,
            RenovationItemStatus.QUOTE_REQUESTED,
            RenovationItemStatus.QUOTE_RECEIVED,
        )


@dataclass(frozen=True)
class Quote:
    id: str
    renovation_item_id: str
    amount: Decimal
    tax_amount: Decimal = Decimal("0")
    provider_name: Optional[str] = None
    status: QuoteStatus = QuoteStatus.RECEIVED

    @property
    def total_amount(self) -> Decimal:
        return self.amount + self.tax_amount


@dataclass(frozen=True)
class RepairCostEntry:
    work_type: RenovationWorkType
    unit: CostUnit
    cost_min: Decimal
    cost_avg: Decimal
    cost_max: Decimal


@dataclass(frozen=True)
class EstimateLine:
    work_type: RenovationWorkType
    quantity: Decimal
    unit: CostUnit
    cost_min: Decimal
    cost_avg: Decimal
    cost_max: Decimal
    from_grid: bool = True  # False when the default fallback cost was used


@dataclass(frozen=True)
class RenovationEstimate:
    zone: str
    lines: tuple[EstimateLine, ...] = ()

    @property
    def total_min(self) -> Decimal:
        return sum((line.cost_min for line in self.lines), Decimal("0"))

    @property
    def total_avg(self) -> Decimal:
        return sum((line.cost_avg for line in self.lines), Decimal("0"))

    @property
    def total_max(self) -> Decimal:
        return sum((line.cost_max for line in self.lines), Decimal("0"))
