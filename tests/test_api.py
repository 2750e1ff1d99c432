"""Tests for the HTTP API."""

from datetime import date

import pytest
from fastapi.testclient import TestClient

from conftest import OTHER_USER, USER
from pocketpilot.api.app import create_app
from pocketpilot.api.deps import get_current_owner, get_database


def test_health(api_client):
    response = api_client.get("/health")
    assert response.status_code == 200
    assert response.text == "ok"


def test_requires_authentication(temp_db):
    app = create_app(secret_key="test-secret")
    app.dependency_overrides[get_database] = lambda: temp_db
    client = TestClient(app)

    response = client.get("/api/goals")

    assert response.status_code == 401
    assert response.json() == {"error": "Not authenticated"}


class TestGoalsAPI:
    def test_create_and_get(self, api_client):
        response = api_client.post(
            "/api/goals",
            json={"name": "Vacation", "target_amount": 3000, "current_amount": 750, "default_milestones": True},
        )
        assert response.status_code == 201
        goal = response.json()
        assert goal["name"] == "Vacation"
        assert goal["percentage"] == 25.0
        assert goal["remaining"] == 2250.0
        assert [m["target_percentage"] for m in goal["milestones"]] == [25, 50, 75]
        assert goal["milestones"][0]["is_reached"] is True

        response = api_client.get(f"/api/goals/{goal['id']}")
        assert response.status_code == 200
        assert response.json()["current_amount"] == 750.0

        assert [g["id"] for g in api_client.get("/api/goals").json()] == [goal["id"]]

    def test_validation_error_shape(self, api_client):
        response = api_client.post("/api/goals", json={"name": "", "target_amount": -5})

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Validation failed"
        fields = {detail["field"] for detail in body["details"]}
        assert {"name", "target_amount"} <= fields

    def test_contribution_completes_goal(self, api_client):
        goal_id = api_client.post("/api/goals", json={"name": "Bike", "target_amount": 500}).json()["id"]

        response = api_client.post(
            "/api/goals/contributions",
            json={"goal_id": goal_id, "amount": 500, "date": "2024-06-01", "note": "bonus"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["contribution"]["amount"] == 500.0
        assert body["contribution"]["date"] == "2024-06-01"
        assert body["goal"]["is_completed"] is True

        response = api_client.delete(f"/api/goals/contributions/{body['contribution']['id']}")
        assert response.status_code == 204
        goal = api_client.get(f"/api/goals/{goal_id}").json()
        assert goal["current_amount"] == 0.0
        assert goal["is_completed"] is False

    def test_unknown_goal(self, api_client):
        response = api_client.get("/api/goals/999")
        assert response.status_code == 404
        assert response.json() == {"error": "Goal 999 not found"}

    def test_shared_goal_is_public(self, api_client, goal_service):
        goal_id = api_client.post("/api/goals", json={"name": "Wedding", "target_amount": 1000}).json()["id"]
        token = goal_service.set_sharing(USER, goal_id, True)

        response = api_client.get(f"/api/goals/share/{token}")

        assert response.status_code == 200
        assert response.json()["name"] == "Wedding"
        assert api_client.get("/api/goals/share/not-a-token").status_code == 404

    def test_delete(self, api_client):
        goal_id = api_client.post("/api/goals", json={"name": "Car", "target_amount": 1000}).json()["id"]
        assert api_client.delete(f"/api/goals/{goal_id}").status_code == 204
        assert api_client.get(f"/api/goals/{goal_id}").status_code == 404


class TestBudgetsAPI:
    def test_create_and_list(self, api_client, sample_categories):
        response = api_client.post(
            "/api/budgets",
            json={"category_id": sample_categories["Groceries"], "amount": 400, "alert_threshold": 80},
        )
        assert response.status_code == 201
        budget = response.json()
        assert budget["category_name"] == "Groceries"
        assert budget["amount"] == 400.0
        assert budget["status"] == "safe"

        assert [b["id"] for b in api_client.get("/api/budgets").json()] == [budget["id"]]

    def test_conflict(self, api_client, sample_categories):
        payload = {"category_id": sample_categories["Groceries"], "amount": 400}
        api_client.post("/api/budgets", json=payload)
        response = api_client.post("/api/budgets", json=payload)
        assert response.status_code == 409
        assert "already exists" in response.json()["error"]

    def test_threshold_out_of_range(self, api_client, sample_categories):
        response = api_client.post(
            "/api/budgets",
            json={"category_id": sample_categories["Groceries"], "amount": 400, "alert_threshold": 150},
        )
        assert response.status_code == 400
        assert response.json()["details"][0]["field"] == "alert_threshold"


class TestRulesAPI:
    def _create(self, client, name, pattern, category_id):
        response = client.post(
            "/api/categorization-rules",
            json={"name": name, "rule_type": "contains", "pattern": pattern, "target_category_id": category_id},
        )
        assert response.status_code == 201
        return response.json()

    def test_create_reorder_apply(self, api_client, sample_categories, make_transaction):
        first = self._create(api_client, "Coffee", "coffee", sample_categories["Restaurants"])
        second = self._create(api_client, "Gas", "shell", sample_categories["Transportation"])
        assert (first["rule_order"], second["rule_order"]) == (0, 1)

        response = api_client.post(
            "/api/categorization-rules/reorder", json={"rule_ids": [second["id"], first["id"]]}
        )
        assert response.status_code == 200
        assert [(r["id"], r["rule_order"]) for r in response.json()] == [(second["id"], 0), (first["id"], 1)]

        make_transaction(-4, "Coffee Shop")
        response = api_client.post("/api/categorization-rules/apply", json={"dry_run": True})
        assert response.status_code == 200
        body = response.json()
        assert body["total_matched"] == 1
        assert body["applied"] is False
        assert body["matches"][0]["rule_name"] == "Coffee"

    def test_invalid_rule_type(self, api_client, sample_categories):
        response = api_client.post(
            "/api/categorization-rules",
            json={"name": "x", "rule_type": "fuzzy", "pattern": "x", "target_category_id": sample_categories["Other"]},
        )
        assert response.status_code == 400

    def test_reorder_unknown_rule(self, api_client):
        response = api_client.post("/api/categorization-rules/reorder", json={"rule_ids": [42]})
        assert response.status_code == 404


class TestRecurringAPI:
    def test_create_and_generate(self, api_client, sample_account, temp_db):
        response = api_client.post(
            "/api/recurring-transactions",
            json={
                "account_id": sample_account.id,
                "description": "Gym",
                "amount": 45,
                "frequency": "monthly",
                "next_occurrence_date": "2024-01-10",
            },
        )
        assert response.status_code == 201
        template = response.json()
        assert template["amount"] == -45.0

        response = api_client.post("/api/recurring-transactions/generate")
        assert response.status_code == 200
        body = response.json()
        assert body["created"] == 1
        assert body["message"] == "Created 1 transaction(s)"
        assert body["transactions"][0]["date"] == "2024-01-10"
        assert body["transactions"][0]["next_occurrence"] == "2024-02-10"

        listed = api_client.get("/api/recurring-transactions").json()
        assert listed[0]["next_occurrence_date"] == "2024-02-10"

    def test_invalid_frequency(self, api_client, sample_account):
        response = api_client.post(
            "/api/recurring-transactions",
            json={
                "account_id": sample_account.id,
                "description": "Gym",
                "amount": 45,
                "frequency": "daily",
                "next_occurrence_date": "2024-01-10",
            },
        )
        assert response.status_code == 400


class TestSplitAPI:
    def test_split_and_fetch(self, api_client, make_transaction, sample_categories):
        txn_id = make_transaction(-100, "Costco")

        response = api_client.post(
            f"/api/transactions/{txn_id}/split",
            json={
                "splits": [
                    {"amount": 70, "category_id": sample_categories["Groceries"]},
                    {"amount": 30, "description": "Socks"},
                ]
            },
        )
        assert response.status_code == 201
        body = response.json()
        assert body["parent"]["is_split_parent"] is True
        assert sorted(c["amount"] for c in body["children"]) == [-70.0, -30.0]

        response = api_client.get(f"/api/transactions/{body['children'][0]['id']}/split")
        assert response.status_code == 200
        assert response.json()["parent"]["id"] == txn_id

    def test_mismatched_amounts(self, api_client, make_transaction):
        txn_id = make_transaction(-100)
        response = api_client.post(
            f"/api/transactions/{txn_id}/split", json={"splits": [{"amount": 70}, {"amount": 20}]}
        )
        assert response.status_code == 400
        assert "Missing $10.00" in response.json()["error"]

    def test_too_few_parts(self, api_client, make_transaction):
        txn_id = make_transaction(-100)
        response = api_client.post(f"/api/transactions/{txn_id}/split", json={"splits": [{"amount": 100}]})
        assert response.status_code == 400


class TestBulkAPI:
    def test_update_category(self, api_client, make_transaction, sample_categories, temp_db):
        a, b = make_transaction(-10), make_transaction(-20)

        response = api_client.post(
            "/api/transactions/bulk/update-category",
            json={"transaction_ids": [a, b], "category_id": sample_categories["Groceries"]},
        )

        assert response.status_code == 200
        assert response.json() == {"affected_count": 2, "message": "Successfully updated 2 transaction(s)"}
        assert temp_db.get_transaction(USER, b).category_id == sample_categories["Groceries"]

    def test_update_category_unknown_transaction(self, api_client, make_transaction):
        a = make_transaction(-10)
        response = api_client.post(
            "/api/transactions/bulk/update-category", json={"transaction_ids": [a, 9999], "category_id": None}
        )
        assert response.status_code == 404
        assert response.json()["error"] == "Transactions not found: 9999"

    def test_delete(self, api_client, make_transaction, temp_db):
        a, b = make_transaction(-10), make_transaction(-20)

        response = api_client.post("/api/transactions/bulk/delete", json={"transaction_ids": [a]})

        assert response.status_code == 200
        assert response.json()["affected_count"] == 1
        assert [t.id for t in temp_db.list_transactions(USER)] == [b]

    def test_empty_list(self, api_client):
        response = api_client.post("/api/transactions/bulk/delete", json={"transaction_ids": []})
        assert response.status_code == 400
        assert response.json()["error"] == "At least one transaction is required"


class TestTemplateAPI:
    def _create(self, api_client, account_id, **overrides):
        body = {"name": "Coffee", "account_id": account_id, "amount": 4.5, "is_favorite": True}
        body.update(overrides)
        return api_client.post("/api/transaction-templates", json=body)

    def test_lifecycle(self, api_client, sample_account, sample_categories):
        response = self._create(api_client, sample_account.id, category_id=sample_categories["Restaurants"])
        assert response.status_code == 201
        template = response.json()
        assert template["transaction_type"] == "expense"
        assert template["amount"] == 4.5
        assert template["usage_count"] == 0

        template_id = template["id"]
        response = api_client.put(
            f"/api/transaction-templates/{template_id}", json={"amount": 5, "category_id": None}
        )
        assert response.status_code == 200
        assert response.json()["amount"] == 5.0
        assert response.json()["category_id"] is None
        assert response.json()["name"] == "Coffee"

        response = api_client.post(
            f"/api/transaction-templates/{template_id}/apply", json={"date": "2024-03-01"}
        )
        assert response.status_code == 201
        assert response.json()["amount"] == -5.0
        assert response.json()["date"] == "2024-03-01"

        listed = api_client.get("/api/transaction-templates").json()
        assert [t["usage_count"] for t in listed] == [1]
        assert listed[0]["last_used_at"] is not None

        assert api_client.delete(f"/api/transaction-templates/{template_id}").status_code == 204
        assert api_client.get(f"/api/transaction-templates/{template_id}").status_code == 404

    def test_duplicate_name(self, api_client, sample_account):
        self._create(api_client, sample_account.id)
        response = self._create(api_client, sample_account.id, name="coffee")
        assert response.status_code == 409

    def test_invalid_type(self, api_client, sample_account):
        response = self._create(api_client, sample_account.id, transaction_type="transfer")
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    def test_apply_future_date(self, api_client, sample_account):
        template_id = self._create(api_client, sample_account.id).json()["id"]
        response = api_client.post(
            f"/api/transaction-templates/{template_id}/apply", json={"date": "2999-01-01"}
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Future dates are not allowed"


class TestExportAPI:
    def test_csv_download(self, api_client, make_transaction):
        make_transaction(-12.5, "Lunch", date(2024, 2, 2))

        response = api_client.get("/api/export", params={"format": "csv"})

        assert response.status_code == 200
        assert response.headers["content-type"] == "text/csv; charset=utf-8"
        assert response.headers["content-disposition"].startswith(
            'attachment; filename="pocket-pilot-transactions-'
        )
        assert "2024-02-02,Lunch,12.50,expense,Uncategorized,Chequing,No" in response.text

    def test_json_date_range(self, api_client, make_transaction):
        make_transaction(-1, "Old", date(2023, 12, 31))
        make_transaction(-2, "New", date(2024, 1, 2))

        response = api_client.get("/api/export", params={"format": "json", "start_date": "2024-01-01"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["total_transactions"] == 1
        assert payload["transactions"][0]["description"] == "New"

    def test_empty_export(self, api_client):
        response = api_client.get("/api/export")
        assert response.status_code == 404

    def test_bad_format(self, api_client):
        assert api_client.get("/api/export", params={"format": "xml"}).status_code == 400


@pytest.fixture
def other_owner_client(temp_db):
    app = create_app(secret_key="test-secret")
    app.dependency_overrides[get_database] = lambda: temp_db
    app.dependency_overrides[get_current_owner] = lambda: OTHER_USER
    return TestClient(app)


def test_other_owner_sees_nothing(api_client, other_owner_client, make_transaction):
    goal_id = api_client.post("/api/goals", json={"name": "Mine", "target_amount": 100}).json()["id"]
    txn_id = make_transaction(-10)

    assert other_owner_client.get("/api/goals").json() == []
    assert other_owner_client.get(f"/api/goals/{goal_id}").status_code == 404
    assert other_owner_client.get(f"/api/transactions/{txn_id}/split").status_code == 404
    assert other_owner_client.get("/api/export").status_code == 404
