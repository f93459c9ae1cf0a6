"""When a lease-end process should start, by lease type.

Notice periods follow French rental law: unfurnished leases give three months,
furnished and most short leases one month, mobility leases fifteen days.
"""

from datetime import date, timedelta
from typing import Optional

from src.config import settings
from src.models.lease_end import LeaseType

LEASE_END_TRIGGER_DAYS: dict[LeaseType, int] = {
    LeaseType.NU: 90,
    LeaseType.MEUBLE: 30,
    LeaseType.COLOCATION: 30,
    LeaseType.SAISONNIER: 0,
    LeaseType.MOBILITE: 15,
    LeaseType.ETUDIANT: 30,
    LeaseType.COMMERCIAL: 180,
}

# Lease types that by law carry no security deposit
NO_DEPOSIT_LEASE_TYPES = frozenset({LeaseType.MOBILITE})


def _parse_lease_type(lease_type: LeaseType | str) -> Optional[LeaseType]:
    if isinstance(lease_type, LeaseType):
        return lease_type
    try:
        return LeaseType(lease_type)
    except ValueError:
        return None


def trigger_days(lease_type: LeaseType | str) -> int:
    parsed = _parse_lease_type(lease_type)
    if parsed is None:
        return settings.default_trigger_days
    return LEASE_END_TRIGGER_DAYS[parsed]


def trigger_date(lease_end_date: date, lease_type: LeaseType | str) -> date:
    return lease_end_date - timedelta(days=trigger_days(lease_type))


def should_trigger(
    lease_end_date: date,
    lease_type: LeaseType | str,
    today: Optional[date] = None,
) -> bool:
    return trigger_date(lease_end_date, lease_type) <= (today or date.today())


def allows_deposit(lease_type: LeaseType | str) -> bool:
    return _parse_lease_type(lease_type) not in NO_DEPOSIT_LEASE_TYPES
