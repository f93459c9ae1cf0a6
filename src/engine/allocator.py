"""Cost allocator: classified items in, process totals out.

Stateless. Every call re-sums the full item set, so calling it again as items
arrive always converges on the same totals.
"""

from decimal import Decimal
from typing import Iterable

from src.engine.errors import InconsistentState, InvalidInput
from src.engine.settlement import compute_total_budget, require_amount, settle_deposit
from src.models.inspection import DamageType, InspectionItem
from src.models.lease_end import SettlementResult
from src.models.renovation import RenovationItem


def validate_renovation_item(item: RenovationItem) -> None:
    require_amount(item.estimated_cost, "estimated_cost")
    require_amount(item.tenant_share, "tenant_share")
    require_amount(item.owner_share, "owner_share")
    if item.tenant_share + item.owner_share != item.estimated_cost:
        raise InvalidInput(
            "Renovation shares must sum to the estimated cost",
            {
                "work_type": item.work_type.value,
                "estimated_cost": str(item.estimated_cost),
                "tenant_share": str(item.tenant_share),
                "owner_share": str(item.owner_share),
            },
        )


def allocate_costs(
    inspection_items: Iterable[InspectionItem],
    renovation_items: Iterable[RenovationItem],
    deposit_amount: Decimal,
) -> SettlementResult:
    """Aggregate tenant/owner costs and settle the deposit.

    - tenant_damage items feed tenant_damage_cost; normal_wear items feed
      vetusty_cost; recommended_renovation items are advisory only.
    - Renovation items split by share into the tenant and owner buckets, and
      their full cost also goes into renovation_cost. renovation_cost is a
      gross total on purpose: it overlaps the per-payer buckets.

    Raises:
        InconsistentState: a problem item has not been classified.
        InvalidInput: negative/NaN cost or shares that do not sum.
    """
    tenant_damage_cost = Decimal("0")
    vetusty_cost = Decimal("0")
    renovation_cost = Decimal("0")

    for item in inspection_items:
        if not item.is_problem:
            continue
        if item.damage_type is None:
            raise InconsistentState(
                "Problem item reached the allocator without a damage type",
                {"category": item.category.value if item.category else None},
            )
        cost = require_amount(item.estimated_cost, "estimated_cost")
        if item.damage_type == DamageType.TENANT_DAMAGE:
            tenant_damage_cost += cost
        elif item.damage_type == DamageType.NORMAL_WEAR:
            vetusty_cost += cost
        elif item.damage_type == DamageType.RECOMMENDED_RENOVATION:
            pass
        else:
            raise InconsistentState(f"Unknown damage type: {item.damage_type}")

    for item in renovation_items:
        validate_renovation_item(item)
        tenant_damage_cost += item.tenant_share
        vetusty_cost += item.owner_share
        renovation_cost += item.estimated_cost

    settlement = settle_deposit(tenant_damage_cost, deposit_amount)

    return SettlementResult(
        tenant_damage_cost=tenant_damage_cost,
        vetusty_cost=vetusty_cost,
        renovation_cost=renovation_cost,
        deposit_retention_amount=settlement.retention,
        deposit_refund_amount=settlement.refund,
        total_budget=compute_total_budget(vetusty_cost, renovation_cost, tenant_damage_cost),
        outstanding_claim=settlement.outstanding_claim,
    )
