"""Wear-and-tear (vetusty) depreciation.

Lifespan grid lookup plus the straight-line rate: an element's share of value
consumed by age is age / lifespan, clamped to [0, 1]. The tenant never pays
for that share; the residual floor keeps a minimum fraction of the repair on
the books however old the element is.

Pure functions. The grid is a versioned JSON document loaded once.
"""

import json
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from pathlib import Path
from typing import Optional

from src.engine.errors import InvalidInput
from src.models.inspection import InspectionCategory

TWO_PLACES = Decimal("0.01")
RATE_PLACES = Decimal("0.0001")
DAYS_PER_YEAR = Decimal("365.25")

# Assumed age at move-in for elements that were not new at entry
AGE_AT_ENTRY_YEARS = Decimal("3")

_VETUSTY_GRID: dict | None = None


def _load_vetusty_grid() -> dict:
    global _VETUSTY_GRID
    if _VETUSTY_GRID is None:
        path = Path(__file__).parent.parent.parent / "data" / "vetusty_grid.json"
        with open(path) as f:
            _VETUSTY_GRID = json.load(f)
    return _VETUSTY_GRID


@dataclass(frozen=True)
class VetustyEntry:
    key: str
    category: InspectionCategory
    lifespan_years: Decimal
    yearly_depreciation: Decimal
    min_residual_fraction: Decimal


def _entry(key: str, category: str, row: dict) -> VetustyEntry:
    return VetustyEntry(
        key=key,
        category=InspectionCategory(category),
        lifespan_years=Decimal(str(row["lifespan_years"])),
        yearly_depreciation=Decimal(str(row["yearly_depreciation"])),
        min_residual_fraction=Decimal(str(row["min_residual_fraction"])),
    )


def grid_version() -> str:
    return _load_vetusty_grid()["version"]


def lookup_vetusty(category: InspectionCategory | str) -> Optional[VetustyEntry]:
    """Category-level lifespan entry, or None when the grid has no row."""
    key = category.value if isinstance(category, InspectionCategory) else category
    row = _load_vetusty_grid()["categories"].get(key)
    if row is None:
        return None
    return _entry(key, key, row)


def lookup_vetusty_item(item_id: str) -> Optional[VetustyEntry]:
    """Item-level entry (e.g. "carpet", "paint_standard")."""
    row = _load_vetusty_grid()["items"].get(item_id)
    if row is None:
        return None
    return _entry(item_id, row["category"], row)


def items_for_category(category: InspectionCategory) -> list[VetustyEntry]:
    items = _load_vetusty_grid()["items"]
    return [
        _entry(item_id, row["category"], row)
        for item_id, row in items.items()
        if row["category"] == category.value
    ]


def vetusty_rate(age_years: Decimal, lifespan_years: Decimal) -> Decimal:
    """Share of the element's value consumed by age, in [0, 1].

    Args:
        age_years: Age of the element (or lease duration as a proxy).
        lifespan_years: Expected service life from the grid.
    """
    if not age_years.is_finite() or age_years < 0:
        raise InvalidInput(f"Element age must be a non-negative number, got {age_years}")
    if lifespan_years <= 0:
        return Decimal("1")
    rate = (age_years / lifespan_years).quantize(RATE_PLACES, ROUND_HALF_UP)
    return min(Decimal("1"), rate)


def depreciated_cost(
    repair_cost: Decimal,
    rate: Decimal,
    min_residual_fraction: Decimal,
) -> Decimal:
    """Repair cost reduced by the vetusty rate, floored at the residual fraction."""
    reduced = repair_cost * (Decimal("1") - rate)
    floor = repair_cost * min_residual_fraction
    return max(reduced, floor).quantize(TWO_PLACES, ROUND_HALF_UP)


def estimate_age(installed_on: date, reference_date: date) -> Decimal:
    """Age in years (one decimal) between installation and the exit inspection."""
    days = Decimal((reference_date - installed_on).days)
    if days < 0:
        raise InvalidInput(
            f"Installation date {installed_on} is after reference date {reference_date}"
        )
    return (days / DAYS_PER_YEAR).quantize(Decimal("0.1"), ROUND_HALF_UP)


def estimate_age_from_lease(
    lease_start: date,
    lease_end: date,
    is_new_at_entry: bool = False,
) -> Decimal:
    """Element age when only the lease dates are known.

    Elements that were not new at move-in are assumed to have been
    AGE_AT_ENTRY_YEARS old already.
    """
    duration = estimate_age(lease_start, lease_end)
    if is_new_at_entry:
        return duration
    return duration + AGE_AT_ENTRY_YEARS
