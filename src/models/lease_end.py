"""Lease-end process aggregate and settlement result types."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from src.models.retention import FinalRetention


class ProcessStatus(Enum):
    PENDING = "pending"
    TRIGGERED = "triggered"
    EDL_SCHEDULED = "edl_scheduled"
    EDL_IN_PROGRESS = "edl_in_progress"
    EDL_COMPLETED = "edl_completed"
    DAMAGES_ASSESSED = "damages_assessed"
    DG_CALCULATED = "dg_calculated"
    RENOVATION_PLANNED = "renovation_planned"
    RENOVATION_IN_PROGRESS = "renovation_in_progress"
    READY_TO_RENT = "ready_to_rent"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class LeaseType(Enum):
    NU = "nu"  # Unfurnished
    MEUBLE = "meuble"  # Furnished
    COLOCATION = "colocation"
    SAISONNIER = "saisonnier"  # Seasonal
    MOBILITE = "mobilite"  # Mobility lease, no deposit by law
    ETUDIANT = "etudiant"
    COMMERCIAL = "commercial"


@dataclass(frozen=True)
class ProcessContext:
    deposit_amount: Decimal
    lease_type: LeaseType = LeaseType.NU
    plan_start_date: Optional[date] = None


@dataclass(frozen=True)
class DepositSettlement:
    retention: Decimal
    refund: Decimal
    outstanding_claim: Decimal = Decimal("0")  # Damage beyond the deposit, claimed out of band


@dataclass(frozen=True)
class SettlementResult:
    tenant_damage_cost: Decimal = Decimal("0")
    vetusty_cost: Decimal = Decimal("0")  # Owner-borne
    renovation_cost: Decimal = Decimal("0")  # Gross, all payers
    deposit_retention_amount: Decimal = Decimal("0")
    deposit_refund_amount: Decimal = Decimal("0")
    total_budget: Decimal = Decimal("0")  # Owner out-of-pocket
    outstanding_claim: Decimal = Decimal("0")


@dataclass
class LeaseEndProcess:
    """Aggregate root for one tenancy's wind-down.

    Totals are derived data: they are overwritten as a block by the
    coordinator whenever inspection or renovation data changes.
    """

    id: str
    deposit_amount: Decimal = Decimal("0")
    lease_type: LeaseType = LeaseType.NU
    lease_end_date: Optional[date] = None
    plan_start_date: Optional[date] = None
    status: ProcessStatus = ProcessStatus.PENDING

    inspection_items: list = field(default_factory=list)
    renovation_items: list = field(default_factory=list)
    timeline: list = field(default_factory=list)
    quotes: list = field(default_factory=list)
    retention_decision: Optional[FinalRetention] = None  # Owner-approved retention, if decided

    tenant_damage_cost: Decimal = Decimal("0")
    vetusty_cost: Decimal = Decimal("0")
    renovation_cost: Decimal = Decimal("0")
    deposit_retention_amount: Decimal = Decimal("0")
    deposit_refund_amount: Decimal = Decimal("0")
    total_budget: Decimal = Decimal("0")

    @property
    def context(self) -> ProcessContext:
        return ProcessContext(
            deposit_amount=self.deposit_amount,
            lease_type=self.lease_type,
            plan_start_date=self.plan_start_date,
        )


@dataclass(frozen=True)
class ProcessProgress:
    status: ProcessStatus
    progress_percentage: int
