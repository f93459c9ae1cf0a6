"""Deposit retention proposal and owner decision types."""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class OwnerDecision(Enum):
    APPROVED = "approved"
    MODIFIED = "modified"
    REJECTED = "rejected"


@dataclass(frozen=True)
class RetentionLine:
    description: str
    amount: Decimal


@dataclass(frozen=True)
class RetentionProposal:
    deposit_amount: Decimal
    lines: tuple[RetentionLine, ...]
    total_damage: Decimal
    total_retention: Decimal  # Capped at the deposit
    refund: Decimal
    outstanding_claim: Decimal


@dataclass(frozen=True)
class FinalRetention:
    decision: OwnerDecision
    retention: Decimal
    refund: Decimal
    lines: tuple[RetentionLine, ...]
    owner_comments: str = ""
