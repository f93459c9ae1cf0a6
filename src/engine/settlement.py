"""Deposit settlement and owner budget.

Pure functions. Retention is clamped to the deposit; whatever the tenant owes
beyond it is reported as an outstanding claim, never as a negative refund.
"""

from decimal import Decimal

from src.engine.errors import InvalidInput
from src.models.lease_end import DepositSettlement

ZERO = Decimal("0")


def require_amount(value: Decimal, name: str) -> Decimal:
    """Reject negative, NaN and infinite amounts."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    if not value.is_finite():
        raise InvalidInput(f"{name} must be a finite amount, got {value}", {"field": name})
    if value < 0:
        raise InvalidInput(f"{name} must not be negative, got {value}", {"field": name})
    return value


def settle_deposit(tenant_damage_cost: Decimal, deposit_amount: Decimal) -> DepositSettlement:
    """Split the deposit into retention and refund.

    Args:
        tenant_damage_cost: Total owed by the tenant (>= 0).
        deposit_amount: Deposit held since lease start. Mobility leases hold 0.

    Returns:
        DepositSettlement where retention + refund == max(0, deposit) and
        outstanding_claim is the damage the deposit does not cover.
    """
    tenant_damage_cost = require_amount(tenant_damage_cost, "tenant_damage_cost")
    if not isinstance(deposit_amount, Decimal):
        deposit_amount = Decimal(str(deposit_amount))
    if not deposit_amount.is_finite():
        raise InvalidInput(f"deposit_amount must be a finite amount, got {deposit_amount}")

    held = max(ZERO, deposit_amount)
    retention = min(tenant_damage_cost, held)
    return DepositSettlement(
        retention=retention,
        refund=held - retention,
        outstanding_claim=tenant_damage_cost - retention,
    )


def compute_total_budget(
    vetusty_cost: Decimal,
    renovation_cost: Decimal,
    tenant_damage_cost: Decimal,
) -> Decimal:
    """Owner out-of-pocket spend: tenant liability offsets owner work, floored at 0."""
    return max(ZERO, vetusty_cost + renovation_cost - tenant_damage_cost)
