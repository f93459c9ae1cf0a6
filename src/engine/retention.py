"""Deposit retention proposal and owner approval.

The engine proposes a retention from the tenant-damage lines, capped at the
deposit. Nothing is final until the owner approves, modifies, or rejects it.
"""

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Iterable, Optional

from src.engine.errors import InvalidInput
from src.engine.settlement import require_amount, settle_deposit
from src.models.inspection import DamageType, InspectionItem
from src.models.renovation import RenovationItem
from src.models.retention import FinalRetention, OwnerDecision, RetentionLine, RetentionProposal

TWO_PLACES = Decimal("0.01")


def retention_lines(
    items: Iterable[InspectionItem],
    renovation_items: Iterable[RenovationItem] = (),
) -> list[RetentionLine]:
    """One line per tenant-damage item, then one per tenant renovation share."""
    lines = []
    for item in items:
        if item.damage_type != DamageType.TENANT_DAMAGE:
            continue
        label = item.category.value if item.category else "other"
        if item.problem_description:
            label = f"{label}: {item.problem_description}"
        lines.append(RetentionLine(description=label, amount=item.estimated_cost))
    for renovation in renovation_items:
        if renovation.tenant_share <= 0:
            continue
        label = f"renovation: {renovation.title or renovation.work_type.value}"
        lines.append(RetentionLine(description=label, amount=renovation.tenant_share))
    return lines


def propose_retention(lines: Iterable[RetentionLine], deposit_amount: Decimal) -> RetentionProposal:
    lines = tuple(lines)
    total = sum((require_amount(line.amount, "amount") for line in lines), Decimal("0"))
    settlement = settle_deposit(total, deposit_amount)
    return RetentionProposal(
        deposit_amount=max(Decimal("0"), deposit_amount),
        lines=lines,
        total_damage=total,
        total_retention=settlement.retention,
        refund=settlement.refund,
        outstanding_claim=settlement.outstanding_claim,
    )


def _rescale(lines: tuple[RetentionLine, ...], total: Decimal, target: Decimal) -> tuple[RetentionLine, ...]:
    """Scale line amounts so they sum to target.

    Largest remainder: every line is rounded down to the cent, then the
    missing cents go to the lines that lost the most. No line goes negative.
    """
    if target == 0:
        return ()
    if not lines or total == 0:
        return (RetentionLine(description="Owner adjustment", amount=target),)

    ratio = target / total
    exact = [line.amount * ratio for line in lines]
    amounts = [value.quantize(TWO_PLACES, ROUND_DOWN) for value in exact]
    missing_cents = int(((target - sum(amounts, Decimal("0"))) / TWO_PLACES).to_integral_value(ROUND_HALF_UP))

    by_remainder = sorted(range(len(lines)), key=lambda i: exact[i] - amounts[i], reverse=True)
    for i in by_remainder[:missing_cents]:
        amounts[i] += TWO_PLACES

    return tuple(RetentionLine(line.description, amount) for line, amount in zip(lines, amounts))


def apply_owner_decision(
    proposal: RetentionProposal,
    decision: OwnerDecision,
    modified_amount: Optional[Decimal] = None,
    owner_comments: str = "",
) -> FinalRetention:
    """Finalize a retention proposal.

    - APPROVED keeps the proposed retention; the breakdown is scaled to the
      capped total when damage exceeded the deposit.
    - MODIFIED sets the retention to modified_amount (0..deposit) and scales
      the breakdown proportionally.
    - REJECTED retains nothing.
    """
    if decision == OwnerDecision.REJECTED:
        retention = Decimal("0")
    elif decision == OwnerDecision.MODIFIED:
        if modified_amount is None:
            raise InvalidInput("A modified retention requires an amount")
        retention = require_amount(modified_amount, "modified_amount").quantize(TWO_PLACES, ROUND_HALF_UP)
        if retention > proposal.deposit_amount:
            raise InvalidInput(
                f"Retention {retention} exceeds deposit {proposal.deposit_amount}",
                {"modified_amount": str(retention), "deposit_amount": str(proposal.deposit_amount)},
            )
    else:
        retention = proposal.total_retention

    return FinalRetention(
        decision=decision,
        retention=retention,
        refund=proposal.deposit_amount - retention,
        lines=_rescale(proposal.lines, proposal.total_damage, retention),
        owner_comments=owner_comments,
    )
