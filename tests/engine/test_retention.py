from decimal import Decimal

import pytest

from src.engine.errors import InvalidInput
from src.engine.retention import (
    OwnerDecision,
    RetentionLine,
    apply_owner_decision,
    propose_retention,
    retention_lines,
)
from src.engine.renovation import build_renovation_item
from src.models.inspection import DamageType
from src.models.renovation import RenovationPayer, RenovationWorkType


@pytest.fixture
def proposal():
    lines = [
        RetentionLine("wall: hole", Decimal("80.00")),
        RetentionLine("floor: burn mark", Decimal("250.00")),
    ]
    return propose_retention(lines, Decimal("1000"))


class TestProposal:
    def test_totals(self, proposal):
        assert proposal.total_damage == Decimal("330.00")
        assert proposal.total_retention == Decimal("330.00")
        assert proposal.refund == Decimal("670.00")

    def test_capped_at_deposit(self):
        lines = [RetentionLine("a", Decimal("900")), RetentionLine("b", Decimal("500"))]
        proposal = propose_retention(lines, Decimal("1000"))
        assert proposal.total_retention == Decimal("1000")
        assert proposal.outstanding_claim == Decimal("400")

    def test_lines_from_tenant_damage_only(self, make_classified):
        items = [
            make_classified(DamageType.TENANT_DAMAGE, "80"),
            make_classified(DamageType.NORMAL_WEAR, "40"),
        ]
        lines = retention_lines(items)
        assert len(lines) == 1
        assert lines[0].amount == Decimal("80")

    def test_lines_include_tenant_renovation_shares(self, make_classified):
        renovations = [
            build_renovation_item(RenovationWorkType.PAINT, RenovationPayer.SHARED, Decimal("300"),
                                  title="Repaint lounge"),
            build_renovation_item(RenovationWorkType.FLOORING, RenovationPayer.OWNER, Decimal("900")),
        ]
        lines = retention_lines([make_classified(DamageType.TENANT_DAMAGE, "80")], renovations)
        assert [line.description for line in lines][1:] == ["renovation: Repaint lounge"]
        assert [line.amount for line in lines] == [Decimal("80"), Decimal("150.00")]


class TestOwnerDecision:
    def test_approved(self, proposal):
        final = apply_owner_decision(proposal, OwnerDecision.APPROVED)
        assert final.retention == Decimal("330.00")
        assert final.refund == Decimal("670.00")
        assert final.lines == proposal.lines

    def test_modified_scales_lines(self, proposal):
        final = apply_owner_decision(proposal, OwnerDecision.MODIFIED, Decimal("200"),
                                     owner_comments="Goodwill")
        assert final.retention == Decimal("200")
        assert final.refund == Decimal("800")
        assert sum(line.amount for line in final.lines) == Decimal("200")
        assert final.owner_comments == "Goodwill"

    def test_rejected(self, proposal):
        final = apply_owner_decision(proposal, OwnerDecision.REJECTED)
        assert final.retention == Decimal("0")
        assert final.refund == Decimal("1000")
        assert final.lines == ()

    def test_approved_breakdown_matches_capped_total(self):
        lines = [RetentionLine("a", Decimal("900")), RetentionLine("b", Decimal("500"))]
        final = apply_owner_decision(propose_retention(lines, Decimal("1000")), OwnerDecision.APPROVED)
        assert sum(line.amount for line in final.lines) == Decimal("1000")

    def test_modified_above_deposit_rejected(self, proposal):
        with pytest.raises(InvalidInput):
            apply_owner_decision(proposal, OwnerDecision.MODIFIED, Decimal("1200"))

    def test_modified_requires_amount(self, proposal):
        with pytest.raises(InvalidInput):
            apply_owner_decision(proposal, OwnerDecision.MODIFIED)

    def test_small_modified_amount_keeps_lines_non_negative(self):
        lines = [
            RetentionLine("a", Decimal("0.25")),
            RetentionLine("b", Decimal("0.25")),
            RetentionLine("c", Decimal("0.25")),
            RetentionLine("d", Decimal("0.01")),
        ]
        proposal = propose_retention(lines, Decimal("1000"))
        final = apply_owner_decision(proposal, OwnerDecision.MODIFIED, Decimal("0.05"))
        amounts = [line.amount for line in final.lines]
        assert all(amount >= 0 for amount in amounts)
        assert sum(amounts) == Decimal("0.05")
        assert amounts == [Decimal("0.02"), Decimal("0.02"), Decimal("0.01"), Decimal("0.00")]
