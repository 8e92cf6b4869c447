import pytest

from api.api_client import ApiError
from api.recurring_api import RecurringAPI
from api.transaction_api import TransactionAPI
from services.report_service import ReportService


def make_service(client):
    return ReportService(TransactionAPI(client), RecurringAPI(client))


def test_summary_savings_rate(make_client):
    client = make_client({("GET", "/transactions/summary"): {"income": 8000, "expense": 2000}})
    summary = make_service(client).get_summary("2025-03")
    assert summary["savings"] == 6000
    assert summary["savings_rate"] == 75
    query = client.last("GET", "/transactions/summary")[2]
    assert query == {"workspace": "personal", "startDate": "2025-03-01", "endDate": "2025-03-31"}


def test_summary_rate_never_negative(make_client):
    client = make_client({("GET", "/transactions/summary"): {"income": 100, "expense": 300}})
    assert make_service(client).get_summary("2025-03")["savings_rate"] == 0


def test_category_breakdown(make_client):
    client = make_client({("GET", "/transactions"): {"transactions": [
        {"_id": "1", "type": "expense", "category": "food", "amount": 300},
        {"_id": "2", "type": "expense", "category": "transport", "amount": 100},
        {"_id": "3", "type": "expense", "category": "food", "amount": 600},
    ]}})
    rows = make_service(client).get_category_breakdown("2025-03")
    assert [r["category"] for r in rows] == ["food", "transport"]
    assert rows[0]["label"] == "Food & Dining"
    assert rows[0]["total"] == 900
    assert rows[0]["percentage"] == 90
    assert client.last("GET", "/transactions")[2]["type"] == "expense"


def test_dashboard_snapshot(make_client):
    client = make_client({
        ("GET", "/transactions"): {"transactions": [{"_id": "t1", "amount": 5, "type": "expense"}]},
        ("GET", "/transactions/summary"): {"income": 50, "expense": 20, "balance": 30},
        ("GET", "/recurring"): {"recurringExpenses": [
            {"_id": "r1", "amount": 100, "status": "active"},
            {"_id": "r2", "amount": 40, "status": "paused"},
        ]},
    })
    snapshot = make_service(client).get_dashboard("2025-03")
    assert len(snapshot["transactions"]) == 1
    assert snapshot["summary"]["balance"] == 30
    assert snapshot["recurring_total"] == 100
    assert client.last("GET", "/transactions")[2]["limit"] == 5


def test_dashboard_survives_recurring_failure(make_client):
    client = make_client({
        ("GET", "/transactions/summary"): {"income": 50, "expense": 20},
        ("GET", "/recurring"): ApiError("nope", "ERROR", 500),
    })
    snapshot = make_service(client).get_dashboard("2025-03")
    assert snapshot["recurring"] == []
    assert snapshot["recurring_total"] == 0
    assert snapshot["summary"]["balance"] == 30


def test_dashboard_propagates_expired_session_from_recurring(make_client):
    client = make_client({
        ("GET", "/transactions/summary"): {"income": 50, "expense": 20},
        ("GET", "/recurring"): ApiError("expired", "SESSION_EXPIRED", 401),
    })
    with pytest.raises(ApiError) as exc:
        make_service(client).get_dashboard("2025-03")
    assert exc.value.is_session_expired


def test_dashboard_propagates_summary_failure(make_client):
    client = make_client({("GET", "/transactions/summary"): ApiError("down", "NETWORK_ERROR", 0)})
    with pytest.raises(ApiError):
        make_service(client).get_dashboard("2025-03")


def test_monthly_chart_data_is_oldest_first(make_client):
    client = make_client({("GET", "/transactions/summary"): {"income": 10, "expense": 4}})
    rows = make_service(client).get_monthly_chart_data(months=3)
    assert len(rows) == 3
    assert rows[0]["month"] < rows[1]["month"] < rows[2]["month"]
    assert all(r["net"] == 6 for r in rows)


def test_export_csv_rows(make_client):
    client = make_client({("GET", "/transactions"): {"transactions": [
        {"_id": "b", "type": "income", "category": "salary", "amount": 1000,
         "date": "2025-03-05", "note": "March", "walletName": "HBL"},
        {"_id": "a", "type": "expense", "category": "food", "amount": 12.5,
         "date": "2025-03-01"},
    ]}})
    rows = make_service(client).export_csv("2025-03")
    assert rows[0] == ["Date", "Type", "Category", "Note", "Amount", "Wallet"]
    assert rows[1] == ["2025-03-01", "expense", "Food & Dining", "", "12.50", ""]
    assert rows[2] == ["2025-03-05", "income", "Salary", "March", "1000.00", "HBL"]
