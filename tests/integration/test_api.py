"""Integration tests for API endpoints"""

import calendar
import pytest
from datetime import date
from decimal import Decimal
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration

USER = "user_1"


def create_transaction(client: TestClient, **overrides) -> dict:
    payload = {
        "user_id": USER,
        "type": "expense",
        "name": "Expense",
        "value": "50.00",
        "due_date": "2025-10-20",
    }
    payload.update(overrides)
    response = client.post("/v1/transactions", json=payload)
    assert response.status_code == 201
    return response.json()


def set_billing_day(client: TestClient, day: int):
    return client.put("/v1/settings/billing-day", json={"user_id": USER, "billing_day": day})


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "payment_sessions_opened_total" in response.text


def test_request_id_header_is_echoed(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert response.headers["X-Request-ID"] == "req-123"


def test_billing_day_defaults_to_last_day_of_month(client: TestClient):
    today = date.today()

    response = client.get("/v1/settings/billing-day", params={"user_id": USER})

    assert response.status_code == 200
    assert response.json()["billing_day"] == calendar.monthrange(today.year, today.month)[1]


def test_billing_day_update_and_read_back(client: TestClient):
    response = set_billing_day(client, 15)
    assert response.status_code == 200

    response = client.get("/v1/settings/billing-day", params={"user_id": USER})
    assert response.json()["billing_day"] == 15


@pytest.mark.parametrize("day", [0, 32])
def test_billing_day_out_of_range_rejected(client: TestClient, day: int):
    """Test invalid cutoff day returns 422 and keeps the stored value"""
    set_billing_day(client, 10)

    response = set_billing_day(client, day)

    assert response.status_code == 422
    assert client.get("/v1/settings/billing-day", params={"user_id": USER}).json()["billing_day"] == 10


def test_billing_period_endpoint_uses_user_cutoff(client: TestClient):
    set_billing_day(client, 15)

    response = client.get("/v1/billing-periods/2025/12", params={"user_id": USER})

    assert response.status_code == 200
    data = response.json()
    assert data["period"]["start_date"] == "2025-12-15"
    assert data["period"]["end_date"] == "2026-01-15"
    assert data["period"]["label"] == "Dec 15 - Jan 15, 2026"
    assert data["previous"]["start_date"] == "2025-11-15"
    assert data["next"]["start_date"] == "2026-01-15"


def test_current_billing_period_contains_today(client: TestClient):
    response = client.get("/v1/billing-periods/current", params={"user_id": USER})

    assert response.status_code == 200
    data = response.json()
    today = date.today().isoformat()
    assert data["period"]["start_date"] <= today < data["period"]["end_date"]
    assert data["is_current"] is True


def test_billing_period_invalid_month(client: TestClient):
    response = client.get("/v1/billing-periods/2025/13", params={"user_id": USER})

    assert response.status_code == 422


def test_installment_preview(client: TestClient):
    """Test preview splits the total and puts the remainder on the last installment"""
    response = client.post(
        "/v1/installments/preview",
        json={"total_value": "100.00", "start_date": "2025-01-31", "installment_count": 3},
    )

    assert response.status_code == 200
    installments = response.json()["installments"]
    assert [Decimal(i["value"]) for i in installments] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
    assert [i["due_date"] for i in installments] == ["2025-01-31", "2025-02-28", "2025-03-31"]


def test_installment_preview_validation(client: TestClient):
    response = client.post(
        "/v1/installments/preview",
        json={"total_value": "100.00", "start_date": "2025-01-31", "installment_count": 1},
    )

    assert response.status_code == 422


def test_installment_plan_create_and_delete(client: TestClient):
    """Test plan creates one transaction per installment and deleting removes them"""
    response = client.post(
        "/v1/installment-plans",
        json={
            "user_id": USER,
            "name": "Laptop",
            "total_value": "200.00",
            "start_date": "2025-11-05",
            "installment_count": 3,
        },
    )

    assert response.status_code == 201
    plan = response.json()
    assert [t["name"] for t in plan["transactions"]] == ["Laptop (1/3)", "Laptop (2/3)", "Laptop (3/3)"]
    assert sum(Decimal(t["value"]) for t in plan["transactions"]) == Decimal("200.00")
    assert all(t["installment_plan_id"] == plan["plan_id"] for t in plan["transactions"])

    listed = client.get("/v1/transactions", params={"user_id": USER}).json()["transactions"]
    assert len(listed) == 3

    response = client.delete(f"/v1/installment-plans/{plan['plan_id']}", params={"user_id": USER})
    assert response.status_code == 204

    listed = client.get("/v1/transactions", params={"user_id": USER}).json()["transactions"]
    assert listed == []


def test_delete_unknown_installment_plan(client: TestClient):
    response = client.delete("/v1/installment-plans/missing", params={"user_id": USER})

    assert response.status_code == 404


def test_transactions_are_scoped_and_sorted(client: TestClient):
    create_transaction(client, name="Paid", paid=True, priority="very_high")
    create_transaction(client, name="Urgent", priority="very_high")
    create_transaction(client, name="Other user", user_id="user_2")

    response = client.get("/v1/transactions", params={"user_id": USER})

    assert response.status_code == 200
    assert [t["name"] for t in response.json()["transactions"]] == ["Urgent", "Paid"]


def test_dashboard_summary(client: TestClient):
    set_billing_day(client, 15)
    create_transaction(client, type="income", name="Salary", value="1000.00", due_date="2025-10-16")
    create_transaction(client, name="Rent", value="400.00", due_date="2025-10-20")
    create_transaction(client, name="Outside", value="999.00", due_date="2025-11-15")

    response = client.get("/v1/dashboard/summary", params={"user_id": USER, "year": 2025, "month": 10})

    assert response.status_code == 200
    data = response.json()
    assert data["period"]["start_date"] == "2025-10-15"
    assert Decimal(data["income"]) == Decimal("1000.00")
    assert Decimal(data["expenses"]) == Decimal("400.00")
    assert data["savings_rate"] == pytest.approx(60.0)
    assert [t["name"] for t in data["top_expenses"]] == ["Rent"]
    assert len(data["cash_flow"]) == 31


def test_payment_session_flow(client: TestClient):
    """Test select, warning gate, acknowledge, mark paid, skip and close"""
    set_billing_day(client, 15)
    create_transaction(client, type="income", name="Salary", value="100.00", due_date="2025-10-16")
    rent = create_transaction(client, name="Rent", value="60.00", due_date="2025-10-20")
    power = create_transaction(client, name="Power", value="70.00", due_date="2025-10-25")
    create_transaction(client, name="Next month", value="10.00", due_date="2025-11-20")

    response = client.post("/v1/payment-sessions", json={"user_id": USER, "year": 2025, "month": 10})
    assert response.status_code == 201
    session = response.json()
    session_id = session["session_id"]
    assert session["phase"] == "selection"
    assert [g["label"] for g in session["groups"]] == ["October 2025 (current)"]
    assert [t["id"] for t in session["groups"][0]["transactions"]] == [rent["id"], power["id"]]

    client.post(f"/v1/payment-sessions/{session_id}/toggle", json={"transaction_id": rent["id"]})
    response = client.post(f"/v1/payment-sessions/{session_id}/toggle", json={"transaction_id": power["id"]})
    session = response.json()
    assert Decimal(session["selected_total"]) == Decimal("130.00")
    assert session["requires_warning"] is True
    assert session["can_continue"] is False

    response = client.post(f"/v1/payment-sessions/{session_id}/continue")
    assert response.status_code == 409

    client.post(f"/v1/payment-sessions/{session_id}/acknowledge-warning")
    response = client.post(f"/v1/payment-sessions/{session_id}/continue")
    assert response.status_code == 200
    session = response.json()
    assert session["phase"] == "runner"
    assert session["current_transaction"]["id"] == rent["id"]

    response = client.post(f"/v1/payment-sessions/{session_id}/mark-paid")
    assert response.status_code == 200
    session = response.json()
    assert session["last_error"] is None
    assert session["current_transaction"]["id"] == power["id"]

    response = client.post(f"/v1/payment-sessions/{session_id}/skip")
    session = response.json()
    assert session["phase"] == "summary"
    assert [t["id"] for t in session["results"]["paid"]] == [rent["id"]]
    assert [t["id"] for t in session["results"]["skipped"]] == [power["id"]]

    listed = client.get("/v1/transactions", params={"user_id": USER}).json()["transactions"]
    paid = {t["id"]: t["paid"] for t in listed}
    assert paid[rent["id"]] is True
    assert paid[power["id"]] is False

    response = client.delete(f"/v1/payment-sessions/{session_id}")
    assert response.status_code == 204
    assert client.get(f"/v1/payment-sessions/{session_id}").status_code == 404


def test_payment_session_rejects_unknown_selection(client: TestClient):
    session_id = client.post("/v1/payment-sessions", json={"user_id": USER}).json()["session_id"]

    response = client.post(f"/v1/payment-sessions/{session_id}/toggle", json={"transaction_id": "missing"})

    assert response.status_code == 409


def test_payment_session_skip_before_start(client: TestClient):
    session_id = client.post("/v1/payment-sessions", json={"user_id": USER}).json()["session_id"]

    response = client.post(f"/v1/payment-sessions/{session_id}/skip")

    assert response.status_code == 409


@pytest.mark.parametrize("path", ["/v1/billing-periods/1/1", "/v1/billing-periods/9999/12"])
def test_billing_period_year_out_of_range(client: TestClient, path: str):
    """Test years whose neighbouring periods leave the calendar are rejected"""
    response = client.get(path, params={"user_id": USER})

    assert response.status_code == 422


def test_billing_period_supported_year_edges(client: TestClient):
    set_billing_day(client, 31)

    assert client.get("/v1/billing-periods/2/1", params={"user_id": USER}).status_code == 200
    assert client.get("/v1/billing-periods/9998/12", params={"user_id": USER}).status_code == 200


@pytest.mark.parametrize(
    "body",
    [
        {"user_id": USER, "year": 9999, "month": 12},
        {"user_id": USER, "year": 1, "month": 1},
        {"user_id": USER, "year": 2025},
        {"user_id": USER, "month": 10},
    ],
)
def test_payment_session_rejects_invalid_period(client: TestClient, body: dict):
    response = client.post("/v1/payment-sessions", json=body)

    assert response.status_code == 422


@pytest.mark.parametrize("params", [{"year": 9999, "month": 12}, {"year": 2025}, {"month": 10}])
def test_dashboard_rejects_invalid_period(client: TestClient, params: dict):
    response = client.get("/v1/dashboard/summary", params={"user_id": USER, **params})

    assert response.status_code == 422


def test_spending_categories_and_totals(client: TestClient):
    """Test category entries roll up into range totals and the dashboard"""
    set_billing_day(client, 15)
    response = client.post(
        "/v1/spending-categories", json={"user_id": USER, "name": "Groceries", "color": "#22c55e"}
    )
    assert response.status_code == 201
    groceries = response.json()
    fuel = client.post("/v1/spending-categories", json={"user_id": USER, "name": "Fuel", "color": "#f97316"}).json()

    for amount, created_at in (("12.50", "2025-10-16T10:00:00"), ("7.50", "2025-10-20T18:30:00"), ("99.00", "2025-11-15T09:00:00")):
        response = client.post(
            f"/v1/spending-categories/{groceries['id']}/entries",
            json={"user_id": USER, "amount": amount, "created_at": created_at},
        )
        assert response.status_code == 201

    response = client.get(
        "/v1/spending-categories/totals",
        params={"user_id": USER, "start_date": "2025-10-15", "end_date": "2025-11-15"},
    )
    assert response.status_code == 200
    totals = {c["id"]: Decimal(c["total_amount"]) for c in response.json()["categories"]}
    assert totals == {groceries["id"]: Decimal("20.00"), fuel["id"]: Decimal("0")}

    entries = client.get(
        f"/v1/spending-categories/{groceries['id']}/entries",
        params={"user_id": USER, "start_date": "2025-10-15", "end_date": "2025-11-15"},
    ).json()
    assert [Decimal(e["amount"]) for e in entries] == [Decimal("7.50"), Decimal("12.50")]

    summary = client.get("/v1/dashboard/summary", params={"user_id": USER, "year": 2025, "month": 10}).json()
    assert {c["name"]: Decimal(c["total_amount"]) for c in summary["category_totals"]} == {
        "Groceries": Decimal("20.00"),
        "Fuel": Decimal("0"),
    }
    assert len(summary["burndown"]) == 6


def test_spending_entries_and_category_delete(client: TestClient):
    category = client.post(
        "/v1/spending-categories", json={"user_id": USER, "name": "Fuel", "color": "#f97316"}
    ).json()
    entry = client.post(
        f"/v1/spending-categories/{category['id']}/entries", json={"user_id": USER, "amount": "40.00"}
    ).json()

    assert client.delete(f"/v1/spending-entries/{entry['id']}", params={"user_id": "user_2"}).status_code == 404
    assert client.delete(f"/v1/spending-entries/{entry['id']}", params={"user_id": USER}).status_code == 204

    response = client.delete(f"/v1/spending-categories/{category['id']}", params={"user_id": USER})
    assert response.status_code == 204
    assert client.get("/v1/spending-categories", params={"user_id": USER}).json() == []
    response = client.post(
        f"/v1/spending-categories/{category['id']}/entries", json={"user_id": USER, "amount": "1.00"}
    )
    assert response.status_code == 404


def test_spending_totals_rejects_inverted_range(client: TestClient):
    response = client.get(
        "/v1/spending-categories/totals",
        params={"user_id": USER, "start_date": "2025-11-15", "end_date": "2025-10-15"},
    )

    assert response.status_code == 422
