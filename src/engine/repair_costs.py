"""Repair cost grid and renovation estimator.

Pure function: work types and quantities in, costs out. No I/O.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from src.config import settings
from src.engine.errors import InvalidInput
from src.models.renovation import (
    CostUnit,
    EstimateLine,
    RenovationEstimate,
    RenovationWorkType,
    RepairCostEntry,
)

TWO_PLACES = Decimal("0.01")

GRID_VERSION = "2025-01"

# Per-unit cost (EUR, national average, labour + materials): min / avg / max.
# OTHER deliberately has no row; callers fall back to the configured default.
COST_TABLE: dict[RenovationWorkType, RepairCostEntry] = {
    RenovationWorkType.PAINT: RepairCostEntry(
        RenovationWorkType.PAINT, CostUnit.SQUARE_METER,
        Decimal("20.00"), Decimal("28.00"), Decimal("40.00"),
    ),
    RenovationWorkType.FLOORING: RepairCostEntry(
        RenovationWorkType.FLOORING, CostUnit.SQUARE_METER,
        Decimal("30.00"), Decimal("45.00"), Decimal("70.00"),
    ),
    RenovationWorkType.PLUMBING: RepairCostEntry(
        RenovationWorkType.PLUMBING, CostUnit.UNIT,
        Decimal("80.00"), Decimal("150.00"), Decimal("300.00"),
    ),
    RenovationWorkType.ELECTRICAL: RepairCostEntry(
        RenovationWorkType.ELECTRICAL, CostUnit.UNIT,
        Decimal("60.00"), Decimal("120.00"), Decimal("250.00"),
    ),
    RenovationWorkType.CARPENTRY: RepairCostEntry(
        RenovationWorkType.CARPENTRY, CostUnit.UNIT,
        Decimal("100.00"), Decimal("200.00"), Decimal("400.00"),
    ),
    RenovationWorkType.CLEANING: RepairCostEntry(
        RenovationWorkType.CLEANING, CostUnit.FLAT,
        Decimal("150.00"), Decimal("250.00"), Decimal("400.00"),
    ),
    RenovationWorkType.BATHROOM: RepairCostEntry(
        RenovationWorkType.BATHROOM, CostUnit.FLAT,
        Decimal("300.00"), Decimal("600.00"), Decimal("1200.00"),
    ),
    RenovationWorkType.KITCHEN: RepairCostEntry(
        RenovationWorkType.KITCHEN, CostUnit.FLAT,
        Decimal("300.00"), Decimal("700.00"), Decimal("1500.00"),
    ),
}

# Regional labour cost multiplier
ZONE_COEFFICIENTS: dict[str, Decimal] = {
    "paris": Decimal("1.25"),
    "idf": Decimal("1.15"),
    "lyon": Decimal("1.05"),
    "marseille": Decimal("1.00"),
    "drom": Decimal("1.30"),
    "france": Decimal("1.00"),
}


def lookup_repair_cost(work_type: RenovationWorkType) -> Optional[RepairCostEntry]:
    return COST_TABLE.get(work_type)


def zone_coefficient(zone: str) -> Decimal:
    return ZONE_COEFFICIENTS.get(zone.lower(), Decimal("1.00"))


def _check_quantity(quantity: Decimal) -> None:
    if not quantity.is_finite() or quantity < 0:
        raise InvalidInput(f"Quantity must be a non-negative number, got {quantity}")


def estimate_line(
    work_type: RenovationWorkType,
    quantity: Decimal = Decimal("1"),
    zone: str = "france",
    default_cost: Optional[Decimal] = None,
) -> EstimateLine:
    """Min/avg/max cost for one work line.

    Work types without a grid row are priced at default_cost per unit
    (settings.default_repair_cost when not given) with min = avg = max.
    """
    _check_quantity(quantity)
    coeff = zone_coefficient(zone)
    entry = lookup_repair_cost(work_type)

    if entry is None:
        fallback = default_cost if default_cost is not None else settings.default_repair_cost
        cost = (fallback * quantity * coeff).quantize(TWO_PLACES, ROUND_HALF_UP)
        return EstimateLine(
            work_type=work_type,
            quantity=quantity,
            unit=CostUnit.UNIT,
            cost_min=cost,
            cost_avg=cost,
            cost_max=cost,
            from_grid=False,
        )

    def _scale(unit_cost: Decimal) -> Decimal:
        return (unit_cost * quantity * coeff).quantize(TWO_PLACES, ROUND_HALF_UP)

    return EstimateLine(
        work_type=work_type,
        quantity=quantity,
        unit=entry.unit,
        cost_min=_scale(entry.cost_min),
        cost_avg=_scale(entry.cost_avg),
        cost_max=_scale(entry.cost_max),
    )


def estimate_repair_cost(
    work_type: RenovationWorkType,
    quantity: Decimal = Decimal("1"),
    zone: str = "france",
    default_cost: Optional[Decimal] = None,
) -> Decimal:
    """Average repair cost for a work type; never None."""
    return estimate_line(work_type, quantity, zone, default_cost).cost_avg


def estimate_renovation(
    lines: Iterable[tuple[RenovationWorkType, Decimal]],
    zone: str = "france",
    default_cost: Optional[Decimal] = None,
) -> RenovationEstimate:
    """Estimate a list of (work_type, quantity) lines for a zone."""
    return RenovationEstimate(
        zone=zone,
        lines=tuple(
            estimate_line(work_type, quantity, zone, default_cost)
            for work_type, quantity in lines
        ),
    )
