"""Damage classifier.

Assigns each problem item of the exit inspection a damage type and a cost:

- tenant_damage: misuse signal (explicit flag or keyword match); full repair cost.
- normal_wear: element at or past wear_ratio_threshold of its lifespan;
  repair cost reduced by the vetusty rate, floored at the residual fraction.
- recommended_renovation: anything else; full repair cost, owner-optional.

Pure functions. Policy is passed in, defaulting to the configured one.
"""

import re
from dataclasses import dataclass, replace
from decimal import Decimal
from functools import lru_cache
from typing import Iterable, Optional

from src.config import Settings, settings
from src.engine.errors import InvalidInput
from src.engine.repair_costs import estimate_repair_cost
from src.engine.vetusty import depreciated_cost, lookup_vetusty, vetusty_rate
from src.models.inspection import (
    DamageType,
    InspectionCategory,
    InspectionItem,
    InspectionStatus,
    InspectionSummary,
)
from src.models.renovation import RenovationWorkType

CATEGORY_WORK_TYPES: dict[InspectionCategory, RenovationWorkType] = {
    InspectionCategory.WALL: RenovationWorkType.PAINT,
    InspectionCategory.FLOOR: RenovationWorkType.FLOORING,
    InspectionCategory.BATHROOM: RenovationWorkType.BATHROOM,
    InspectionCategory.KITCHEN: RenovationWorkType.KITCHEN,
    InspectionCategory.OPENINGS: RenovationWorkType.CARPENTRY,
    InspectionCategory.ELECTRICAL_PLUMBING: RenovationWorkType.PLUMBING,
    InspectionCategory.FURNITURE: RenovationWorkType.OTHER,
}


@dataclass(frozen=True)
class ClassificationPolicy:
    misuse_keywords: tuple[str, ...] = ()
    wear_ratio_threshold: Decimal = Decimal("0.5")
    default_repair_cost: Decimal = Decimal("150.00")
    zone: str = "france"

    @classmethod
    def from_settings(cls, config: Settings) -> "ClassificationPolicy":
        return cls(
            misuse_keywords=tuple(k.lower() for k in config.misuse_keywords),
            wear_ratio_threshold=config.wear_ratio_threshold,
            default_repair_cost=config.default_repair_cost,
            zone=config.repair_cost_zone,
        )


@lru_cache(maxsize=32)
def _misuse_pattern(keywords: tuple[str, ...]) -> re.Pattern | None:
    """Whole-word match on any keyword, plural "s" allowed."""
    if not keywords:
        return None
    alternatives = "|".join(re.escape(k.lower()) for k in keywords)
    return re.compile(rf"\b(?:{alternatives})s?\b")


def _is_tenant_misuse(item: InspectionItem, policy: ClassificationPolicy) -> bool:
    if item.tenant_fault is not None:
        return item.tenant_fault
    pattern = _misuse_pattern(policy.misuse_keywords)
    if pattern is None:
        return False
    return pattern.search((item.problem_description or "").lower()) is not None


def _work_type(item: InspectionItem) -> RenovationWorkType:
    if item.work_type is not None:
        return item.work_type
    return CATEGORY_WORK_TYPES.get(item.category, RenovationWorkType.OTHER)


def classify_item(
    item: InspectionItem,
    policy: Optional[ClassificationPolicy] = None,
    lease_duration_years: Optional[Decimal] = None,
) -> InspectionItem:
    """Classify one inspection item.

    Args:
        item: Inspection item; only PROBLEM items are classified.
        policy: Classification policy (defaults to settings).
        lease_duration_years: Age proxy when the element age is unknown.

    Returns:
        A new InspectionItem with damage_type, estimated_cost and (for
        normal wear) vetusty_rate set. Non-problem items come back cleared,
        with zero cost and no damage type.
    """
    policy = policy or ClassificationPolicy.from_settings(settings)

    if not item.is_problem:
        return replace(item, damage_type=None, estimated_cost=Decimal("0"), vetusty_rate=None)

    if item.category is None:
        raise InvalidInput(
            "Problem item has no category",
            {"problem_description": item.problem_description},
        )

    age = item.element_age_years if item.element_age_years is not None else lease_duration_years
    if age is not None and (not age.is_finite() or age < 0):
        raise InvalidInput(
            f"Element age must be a non-negative number, got {age}",
            {"category": item.category.value},
        )

    repair_cost = estimate_repair_cost(
        _work_type(item),
        item.quantity,
        zone=policy.zone,
        default_cost=policy.default_repair_cost,
    )

    if _is_tenant_misuse(item, policy):
        return replace(
            item,
            damage_type=DamageType.TENANT_DAMAGE,
            estimated_cost=repair_cost,
            vetusty_rate=None,
        )

    # No grid row means zero depreciation: the element never reads as worn out
    entry = lookup_vetusty(item.category)
    if entry is not None and age is not None:
        rate = vetusty_rate(age, entry.lifespan_years)
        if rate >= policy.wear_ratio_threshold:
            return replace(
                item,
                damage_type=DamageType.NORMAL_WEAR,
                estimated_cost=depreciated_cost(repair_cost, rate, entry.min_residual_fraction),
                vetusty_rate=rate,
            )

    return replace(
        item,
        damage_type=DamageType.RECOMMENDED_RENOVATION,
        estimated_cost=repair_cost,
        vetusty_rate=None,
    )


def classify_items(
    items: Iterable[InspectionItem],
    policy: Optional[ClassificationPolicy] = None,
    lease_duration_years: Optional[Decimal] = None,
) -> list[InspectionItem]:
    """Classify a whole inspection. Fails closed: one invalid item aborts the batch."""
    policy = policy or ClassificationPolicy.from_settings(settings)
    return [classify_item(item, policy, lease_duration_years) for item in items]


def summarize_inspection(items: Iterable[InspectionItem]) -> InspectionSummary:
    """Counts and cost subtotals by damage type for a classified inspection."""
    total = 0
    degraded = 0
    counts = {damage_type: 0 for damage_type in DamageType}
    costs = {damage_type: Decimal("0") for damage_type in DamageType}

    for item in items:
        total += 1
        if item.status != InspectionStatus.PROBLEM:
            continue
        degraded += 1
        if item.damage_type is not None:
            counts[item.damage_type] += 1
            costs[item.damage_type] += item.estimated_cost

    return InspectionSummary(
        total_items=total,
        items_degraded=degraded,
        tenant_damage_count=counts[DamageType.TENANT_DAMAGE],
        normal_wear_count=counts[DamageType.NORMAL_WEAR],
        recommended_renovation_count=counts[DamageType.RECOMMENDED_RENOVATION],
        tenant_damage_cost=costs[DamageType.TENANT_DAMAGE],
        vetusty_cost=costs[DamageType.NORMAL_WEAR],
        recommended_renovation_cost=costs[DamageType.RECOMMENDED_RENOVATION],
    )
