"""Exit-inspection data types."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional

from src.models.renovation import RenovationWorkType


class InspectionCategory(Enum):
    WALL = "wall"
    FLOOR = "floor"
    BATHROOM = "bathroom"
    KITCHEN = "kitchen"
    OPENINGS = "openings"
    ELECTRICAL_PLUMBING = "electrical_plumbing"
    FURNITURE = "furniture"


class InspectionStatus(Enum):
    PENDING = "pending"
    OK = "ok"
    PROBLEM = "problem"


class DamageType(Enum):
    TENANT_DAMAGE = "tenant_damage"
    NORMAL_WEAR = "normal_wear"
    RECOMMENDED_RENOVATION = "recommended_renovation"


@dataclass(frozen=True)
class InspectionItem:
    """One inspected element of the property.

    Inspection inputs (category, status, description, age) are set when the
    exit inspection is submitted. damage_type, estimated_cost and vetusty_rate
    are filled in by the damage classifier, which returns a new item.
    """

    category: Optional[InspectionCategory]
    status: InspectionStatus = InspectionStatus.PENDING
    problem_description: Optional[str] = None
    element_age_years: Optional[Decimal] = None
    tenant_fault: Optional[bool] = None  # Explicit misuse flag from the inspector
    quantity: Decimal = Decimal("1")  # Units of the matching work type (m2, ml, unit)
    work_type: Optional[RenovationWorkType] = None  # Overrides the category mapping

    # Classification output
    damage_type: Optional[DamageType] = None
    estimated_cost: Decimal = Decimal("0")
    vetusty_rate: Optional[Decimal] = None  # Only for NORMAL_WEAR

    @property
    def is_problem(self) -> bool:
        return self.status == InspectionStatus.PROBLEM

    @property
    def is_classified(self) -> bool:
        return self.damage_type is not None


@dataclass(frozen=True)
class InspectionSummary:
    """Counts and costs over a classified exit inspection."""

    total_items: int = 0
    items_degraded: int = 0
    tenant_damage_count: int = 0
    normal_wear_count: int = 0
    recommended_renovation_count: int = 0
    tenant_damage_cost: Decimal = Decimal("0")
    vetusty_cost: Decimal = Decimal("0")
    recommended_renovation_cost: Decimal = Decimal("0")
