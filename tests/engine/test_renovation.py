from decimal import Decimal

import pytest

from src.engine.errors import InvalidInput
from src.engine.renovation import (
    accept_quote,
    build_renovation_item,
    order_by_priority,
    propose_renovation_items,
)
from src.models.inspection import DamageType, InspectionCategory
from src.models.renovation import (
    Quote,
    QuoteStatus,
    RenovationItemStatus,
    RenovationPayer,
    RenovationPriority,
    RenovationWorkType,
)


class TestBuildRenovationItem:
    def test_owner_pays_all(self):
        item = build_renovation_item(RenovationWorkType.PAINT, RenovationPayer.OWNER, Decimal("300"))
        assert item.owner_share == Decimal("300")
        assert item.tenant_share == Decimal("0")

    def test_tenant_pays_all(self):
        item = build_renovation_item(RenovationWorkType.CLEANING, RenovationPayer.TENANT, Decimal("250"))
        assert item.tenant_share == Decimal("250")
        assert item.owner_share == Decimal("0")

    def test_shared_defaults_to_half(self):
        item = build_renovation_item(RenovationWorkType.FLOORING, RenovationPayer.SHARED, Decimal("201"))
        assert item.tenant_share == Decimal("100.50")
        assert item.tenant_share + item.owner_share == Decimal("201")

    def test_shared_tenant_share_above_cost(self):
        with pytest.raises(InvalidInput):
            build_renovation_item(
                RenovationWorkType.PAINT, RenovationPayer.SHARED, Decimal("100"),
                tenant_share=Decimal("150"),
            )

    def test_negative_cost(self):
        with pytest.raises(InvalidInput):
            build_renovation_item(RenovationWorkType.PAINT, RenovationPayer.OWNER, Decimal("-1"))

    def test_default_title(self):
        item = build_renovation_item(RenovationWorkType.PAINT, RenovationPayer.OWNER, Decimal("10"))
        assert item.title == "paint"


class TestProposals:
    def test_only_recommended_renovations(self, make_classified):
        items = [
            make_classified(DamageType.RECOMMENDED_RENOVATION, "700", InspectionCategory.KITCHEN),
            make_classified(DamageType.TENANT_DAMAGE, "280"),
        ]
        proposals = propose_renovation_items(items)
        assert len(proposals) == 1
        assert proposals[0].work_type == RenovationWorkType.KITCHEN
        assert proposals[0].payer == RenovationPayer.OWNER
        assert proposals[0].priority == RenovationPriority.LOW
        assert proposals[0].owner_share == Decimal("700")

    def test_order_by_priority(self):
        low = build_renovation_item(RenovationWorkType.PAINT, RenovationPayer.OWNER, Decimal("1"),
                                    priority=RenovationPriority.LOW)
        urgent = build_renovation_item(RenovationWorkType.PLUMBING, RenovationPayer.OWNER, Decimal("1"),
                                       priority=RenovationPriority.URGENT)
        assert order_by_priority([low, urgent]) == [urgent, low]


class TestAcceptQuote:
    @pytest.fixture
    def item(self):
        return build_renovation_item(
            RenovationWorkType.FLOORING, RenovationPayer.SHARED, Decimal("200"),
            tenant_share=Decimal("50"), item_id="r1",
        )

    @pytest.fixture
    def quotes(self):
        return [
            Quote(id="q1", renovation_item_id="r1", amount=Decimal("300"), tax_amount=Decimal("60")),
            Quote(id="q2", renovation_item_id="r1", amount=Decimal("280"), status=QuoteStatus.PENDING),
            Quote(id="q3", renovation_item_id="r2", amount=Decimal("90")),
        ]

    def test_quote_total_becomes_cost(self, item, quotes):
        revised, _ = accept_quote(item, quotes, "q1")
        assert revised.estimated_cost == Decimal("360")
        assert revised.tenant_share == Decimal("90.00")
        assert revised.owner_share == Decimal("270.00")
        assert revised.status == RenovationItemStatus.APPROVED

    def test_competing_quotes_rejected(self, item, quotes):
        _, updated = accept_quote(item, quotes, "q1")
        status = {q.id: q.status for q in updated}
        assert status == {
            "q1": QuoteStatus.ACCEPTED,
            "q2": QuoteStatus.REJECTED,
            "q3": QuoteStatus.RECEIVED,
        }

    def test_unknown_quote(self, item, quotes):
        with pytest.raises(InvalidInput):
            accept_quote(item, quotes, "q9")

    def test_quote_for_other_item(self, item, quotes):
        with pytest.raises(InvalidInput):
            accept_quote(item, quotes, "q3")
