from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from src.api.app import app
from src.api.deps import get_policy
from src.data.memory_store import InMemoryProcessStore

PREFIX = "/api/v1/lease-end"


@pytest.fixture
def client(store, policy):
    app.state.process_store = store
    app.dependency_overrides[get_policy] = lambda: policy
    yield TestClient(app)
    app.dependency_overrides.clear()
    app.state.process_store = InMemoryProcessStore()


def amount(value) -> Decimal:
    return Decimal(str(value))


INSPECTION = [
    {"category": "wall", "status": "problem", "problem_description": "Hole in wall", "quantity": 10},
    {"category": "floor", "status": "problem", "problem_description": "Worn laminate",
     "element_age_years": 6, "quantity": 20},
    {"category": "bathroom", "status": "ok"},
]


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}


class TestClassify:
    def test_classify(self, client):
        resp = client.post(f"{PREFIX}/classify", json={"items": INSPECTION})
        assert resp.status_code == 200
        data = resp.json()
        assert [i["damage_type"] for i in data["items"]] == ["tenant_damage", "normal_wear", None]
        assert data["summary"]["items_degraded"] == 2
        assert amount(data["summary"]["tenant_damage_cost"]) == Decimal("280")

    def test_unknown_category(self, client):
        resp = client.post(f"{PREFIX}/classify", json={"items": [{"category": "garage", "status": "problem"}]})
        assert resp.status_code == 400

    def test_problem_without_category(self, client):
        resp = client.post(f"{PREFIX}/classify", json={"items": [{"status": "problem"}]})
        assert resp.status_code == 400


class TestSettlement:
    def test_settlement(self, client):
        resp = client.post(f"{PREFIX}/settlement", json={"deposit_amount": 1000, "items": INSPECTION})
        assert resp.status_code == 200
        data = resp.json()
        assert amount(data["deposit_retention_amount"]) == Decimal("280")
        assert amount(data["deposit_refund_amount"]) == Decimal("720")
        assert amount(data["total_budget"]) == Decimal("80")
        assert amount(data["outstanding_claim"]) == Decimal("0")

    def test_damage_beyond_deposit(self, client):
        resp = client.post(f"{PREFIX}/settlement", json={
            "deposit_amount": 100,
            "items": [INSPECTION[0]],
        })
        data = resp.json()
        assert amount(data["deposit_retention_amount"]) == Decimal("100")
        assert amount(data["deposit_refund_amount"]) == Decimal("0")
        assert amount(data["outstanding_claim"]) == Decimal("180")

    def test_tenant_paid_renovation(self, client):
        resp = client.post(f"{PREFIX}/settlement", json={
            "deposit_amount": 1000,
            "renovation_items": [{"work_type": "cleaning", "payer": "tenant", "estimated_cost": 200}],
        })
        data = resp.json()
        assert amount(data["tenant_damage_cost"]) == Decimal("200")
        assert amount(data["total_budget"]) == Decimal("0")

    def test_mobility_lease_with_deposit(self, client):
        resp = client.post(f"{PREFIX}/settlement", json={"deposit_amount": 400, "lease_type": "mobilite"})
        assert resp.status_code == 400

    def test_shares_exceeding_cost(self, client):
        resp = client.post(f"{PREFIX}/settlement", json={
            "deposit_amount": 1000,
            "renovation_items": [{"work_type": "paint", "payer": "shared",
                                  "estimated_cost": 100, "tenant_share": 150}],
        })
        assert resp.status_code == 400


class TestTimeline:
    def test_nothing_to_do(self, client):
        resp = client.post(f"{PREFIX}/timeline", json={"plan_start_date": "2025-07-01"})
        data = resp.json()
        assert [i["action_type"] for i in data["items"]] == ["mark_ready"]
        assert data["estimated_ready_date"] == "2025-07-01"

    def test_default_plan(self, client):
        resp = client.post(f"{PREFIX}/timeline", json={
            "plan_start_date": "2025-07-01",
            "owner_budget": 500,
            "renovation_items_count": 2,
            "retention_amount": 300,
        })
        data = resp.json()
        assert data["total_days"] == 7
        assert data["estimated_ready_date"] == "2025-07-08"

    def test_negative_count(self, client):
        resp = client.post(f"{PREFIX}/timeline", json={
            "plan_start_date": "2025-07-01",
            "renovation_items_count": -1,
        })
        assert resp.status_code == 400


class TestProgress:
    def test_known_status(self, client):
        assert client.get(f"{PREFIX}/progress/dg_calculated").json()["progress_percentage"] == 55

    def test_unknown_status(self, client):
        assert client.get(f"{PREFIX}/progress/archived").json()["progress_percentage"] == 0


class TestProcesses:
    def test_recalculate_empty_process(self, client):
        resp = client.post(f"{PREFIX}/processes/proc-1/recalculate")
        assert resp.status_code == 200
        assert amount(resp.json()["deposit_refund_amount"]) == Decimal("1000")

    def test_missing_process(self, client):
        assert client.post(f"{PREFIX}/processes/nope/recalculate").status_code == 404
        assert client.get(f"{PREFIX}/processes/nope/progress").status_code == 404

    def test_plan_recovery(self, client):
        resp = client.post(f"{PREFIX}/processes/proc-1/timeline")
        assert resp.status_code == 200
        assert [i["action_type"] for i in resp.json()["items"]] == ["mark_ready"]

    def test_change_status(self, client):
        resp = client.post(f"{PREFIX}/processes/proc-1/status", json={"status": "damages_assessed"})
        assert resp.status_code == 200
        assert resp.json() == {"status": "damages_assessed", "progress_percentage": 45}
        assert client.get(f"{PREFIX}/processes/proc-1/progress").json()["progress_percentage"] == 45

    def test_unknown_status_conflict(self, client):
        resp = client.post(f"{PREFIX}/processes/proc-1/status", json={"status": "archived"})
        assert resp.status_code == 409


class TestProcessLifecycle:
    def open(self, client, **fields) -> dict:
        body = {"deposit_amount": 1200, "lease_type": "meuble", "plan_start_date": "2025-07-01", **fields}
        resp = client.post(f"{PREFIX}/processes", json=body)
        assert resp.status_code == 201
        return resp.json()

    def test_open_and_fetch(self, client):
        created = self.open(client)
        assert created["status"] == "pending"
        assert amount(created["deposit_amount"]) == Decimal("1200")

        fetched = client.get(f"{PREFIX}/processes/{created['id']}").json()
        assert fetched == created

    def test_open_inside_notice_window(self, client):
        created = self.open(client, lease_end_date="2020-01-31")
        assert created["status"] == "triggered"

    def test_open_rejections(self, client):
        assert client.post(f"{PREFIX}/processes", json={"deposit_amount": 500, "lease_type": "garage"}).status_code == 400
        assert client.post(f"{PREFIX}/processes", json={"deposit_amount": 500, "lease_type": "mobilite"}).status_code == 400
        assert client.post(f"{PREFIX}/processes", json={"deposit_amount": 500, "id": "proc-1"}).status_code == 400

    def test_full_settlement_flow(self, client):
        process_id = self.open(client)["id"]
        base = f"{PREFIX}/processes/{process_id}"

        resp = client.post(f"{base}/inspection", json={"items": INSPECTION})
        assert resp.status_code == 200
        assert amount(resp.json()["deposit_retention_amount"]) == Decimal("280")
        assert len(resp.json()["items"]) == 3

        resp = client.post(f"{base}/renovation-items", json={"items": [
            {"work_type": "paint", "payer": "owner", "estimated_cost": 300, "title": "Repaint bedroom"},
        ]})
        assert resp.status_code == 201
        item_id = resp.json()[0]["id"]

        resp = client.post(f"{base}/quotes", json={
            "renovation_item_id": item_id, "amount": 320, "tax_amount": 64, "provider_name": "Atelier Martin",
        })
        assert resp.status_code == 201
        quote_id = resp.json()["id"]
        assert amount(resp.json()["total_amount"]) == Decimal("384")

        resp = client.post(f"{base}/quotes/{quote_id}/accept")
        assert resp.status_code == 200
        assert resp.json()["status"] == "approved"
        assert amount(resp.json()["estimated_cost"]) == Decimal("384")

        proposal = client.get(f"{base}/retention").json()
        assert amount(proposal["total_retention"]) == Decimal("280")
        assert len(proposal["lines"]) == 1

        resp = client.post(f"{base}/retention/decision", json={
            "decision": "modified", "modified_amount": 200, "owner_comments": "Goodwill",
        })
        assert resp.status_code == 200
        assert amount(resp.json()["refund"]) == Decimal("1000")

        actions = [i["action_type"] for i in client.post(f"{base}/timeline").json()["items"]]
        assert actions[0] == "dg_retention"
        assert "start_renovation" in actions

        resp = client.post(f"{base}/timeline/actions/dg_retention", json={"completed_on": "2025-07-01"})
        assert resp.status_code == 200
        assert resp.json()["items"][0]["status"] == "completed"

        summary = client.get(base).json()
        assert summary["inspection_item_count"] == 3
        assert summary["renovation_item_count"] == 1
        assert summary["retention_decision"] == "modified"
        assert amount(summary["vetusty_cost"]) == Decimal("744")

    def test_renovation_proposals(self, client):
        dated_kitchen = {"category": "kitchen", "status": "problem",
                         "problem_description": "Dated cabinet fronts", "element_age_years": 2}
        client.post(f"{PREFIX}/processes/proc-1/inspection", json={"items": [dated_kitchen]})
        proposals = client.get(f"{PREFIX}/processes/proc-1/renovation-proposals").json()
        assert [(p["payer"], p["priority"]) for p in proposals] == [("owner", "low")]
        assert client.get(f"{PREFIX}/processes/proc-1").json()["renovation_item_count"] == 0

    def test_invalid_requests(self, client):
        base = f"{PREFIX}/processes/proc-1"
        assert client.post(f"{base}/quotes/missing/accept").status_code == 400
        assert client.post(f"{base}/quotes", json={"renovation_item_id": "missing", "amount": 10}).status_code == 400
        assert client.post(f"{base}/retention/decision", json={"decision": "maybe"}).status_code == 400
        assert client.post(f"{base}/retention/decision", json={"decision": "modified"}).status_code == 400
        assert client.post(f"{base}/timeline/actions/paint_walls", json={}).status_code == 400
        assert client.post(f"{base}/renovation-items", json={"items": [
            {"work_type": "paint", "payer": "landlord", "estimated_cost": 100},
        ]}).status_code == 400

    def test_unknown_process(self, client):
        assert client.get(f"{PREFIX}/processes/nope").status_code == 404
        assert client.get(f"{PREFIX}/processes/nope/retention").status_code == 404
        assert client.post(f"{PREFIX}/processes/nope/inspection", json={"items": INSPECTION}).status_code == 404
