"""Renovation items: construction, suggestions from the inspection, quote acceptance."""

from dataclasses import replace
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional

from src.engine.classifier import CATEGORY_WORK_TYPES
from src.engine.errors import InvalidInput
from src.engine.settlement import require_amount
from src.models.inspection import DamageType, InspectionItem
from src.models.renovation import (
    PRIORITY_RANK,
    Quote,
    QuoteStatus,
    RenovationItem,
    RenovationItemStatus,
    RenovationPayer,
    RenovationPriority,
    RenovationWorkType,
)

TWO_PLACES = Decimal("0.01")


def _split(
    payer: RenovationPayer,
    cost: Decimal,
    tenant_share: Optional[Decimal],
) -> tuple[Decimal, Decimal]:
    if payer == RenovationPayer.TENANT:
        return cost, Decimal("0")
    if payer == RenovationPayer.OWNER:
        return Decimal("0"), cost
    # Shared: explicit tenant share, or half
    if tenant_share is None:
        tenant_share = (cost / 2).quantize(TWO_PLACES, ROUND_HALF_UP)
    tenant_share = require_amount(tenant_share, "tenant_share")
    if tenant_share > cost:
        raise InvalidInput(
            f"Tenant share {tenant_share} exceeds estimated cost {cost}",
            {"tenant_share": str(tenant_share), "estimated_cost": str(cost)},
        )
    return tenant_share, cost - tenant_share


def build_renovation_item(
    work_type: RenovationWorkType,
    payer: RenovationPayer,
    estimated_cost: Decimal,
    priority: RenovationPriority = RenovationPriority.NORMAL,
    tenant_share: Optional[Decimal] = None,
    title: str = "",
    item_id: str = "",
) -> RenovationItem:
    """Build a renovation item whose shares sum to its cost."""
    cost = require_amount(estimated_cost, "estimated_cost")
    tenant, owner = _split(payer, cost, tenant_share)
    return RenovationItem(
        work_type=work_type,
        payer=payer,
        estimated_cost=cost,
        tenant_share=tenant,
        owner_share=owner,
        priority=priority,
        title=title or work_type.value,
        id=item_id,
    )


def propose_renovation_items(items: Iterable[InspectionItem]) -> list[RenovationItem]:
    """Owner-paid suggestions for the inspection's recommended renovations.

    Suggestions are not added to the process; totals only move once the owner
    accepts them as renovation items.
    """
    proposals = []
    for item in items:
        if item.damage_type != DamageType.RECOMMENDED_RENOVATION:
            continue
        work_type = item.work_type or CATEGORY_WORK_TYPES.get(item.category, RenovationWorkType.OTHER)
        proposals.append(
            build_renovation_item(
                work_type=work_type,
                payer=RenovationPayer.OWNER,
                estimated_cost=item.estimated_cost,
                priority=RenovationPriority.LOW,
                title=item.problem_description or work_type.value,
            )
        )
    return proposals


def order_by_priority(items: Iterable[RenovationItem]) -> list[RenovationItem]:
    """Most urgent first; stable within a priority."""
    return sorted(items, key=lambda item: PRIORITY_RANK[item.priority])


def accept_quote(
    item: RenovationItem,
    quotes: Iterable[Quote],
    quote_id: str,
) -> tuple[RenovationItem, list[Quote]]:
    """Accept one quote for a renovation item.

    The accepted quote's total becomes the item cost; shares are rescaled
    proportionally and still sum to the cost. Other open quotes for the same
    item are rejected.

    Returns:
        (revised item, updated quotes)
    """
    quotes = list(quotes)
    accepted = next((q for q in quotes if q.id == quote_id), None)
    if accepted is None or accepted.renovation_item_id != item.id:
        raise InvalidInput(
            f"Quote {quote_id} not found for renovation item {item.id}",
            {"quote_id": quote_id, "renovation_item_id": item.id},
        )

    new_cost = require_amount(accepted.total_amount, "quote total_amount")
    if item.estimated_cost > 0:
        tenant_share = (item.tenant_share * new_cost / item.estimated_cost).quantize(
            TWO_PLACES, ROUND_HALF_UP
        )
    elif item.payer == RenovationPayer.TENANT:
        tenant_share = new_cost
    elif item.payer == RenovationPayer.SHARED:
        tenant_share = (new_cost / 2).quantize(TWO_PLACES, ROUND_HALF_UP)
    else:
        tenant_share = Decimal("0")

    revised = replace(
        item,
        estimated_cost=new_cost,
        tenant_share=tenant_share,
        owner_share=new_cost - tenant_share,
        status=RenovationItemStatus.APPROVED,
    )

    updated = []
    for quote in quotes:
        if quote.id == quote_id:
            updated.append(replace(quote, status=QuoteStatus.ACCEPTED))
        elif quote.renovation_item_id == item.id and quote.status in (
            QuoteStatus.PENDING,
            QuoteStatus.RECEIVED,
        ):
            updated.append(replace(quote, status=QuoteStatus.REJECTED))
        else:
            updated.append(quote)
    return revised, updated
