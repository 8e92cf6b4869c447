from datetime import date, datetime

import pytest

from api.recurring_api import RecurringAPI
from api.transaction_api import TransactionAPI
from models.recurring_expense import RecurringExpense
from services.recurring_service import (
    RecurringService, is_paid_for_current_period, next_due_date,
    next_due_display, payment_period_label, processed_period_key,
    total_active_amount,
)


def make_expense(**overrides):
    fields = dict(
        id="r1", name="Rent", amount=25000, category="bills", wallet_id="w1",
        frequency="monthly", start_month="2025-01", day_of_month=15,
    )
    fields.update(overrides)
    return RecurringExpense(**fields)


def make_service(client):
    return RecurringService(RecurringAPI(client), TransactionAPI(client))


# ── Period reconciliation ────────────────────────────────────────────────────

def test_monthly_unprocessed_before_due_day_is_due_this_month():
    expense = make_expense()
    now = datetime(2025, 3, 10, 9, 0)
    assert is_paid_for_current_period(expense, now) is False
    assert next_due_date(expense, now) == date(2025, 3, 15)


def test_monthly_unprocessed_after_due_day_moves_to_next_month():
    expense = make_expense()
    assert next_due_date(expense, datetime(2025, 3, 20)) == date(2025, 4, 15)


def test_monthly_due_day_at_noon_has_passed():
    expense = make_expense()
    assert next_due_date(expense, datetime(2025, 3, 15, 12, 0)) == date(2025, 4, 15)



def test_monthly_due_day_at_midnight_is_still_due():
    expense = make_expense()
    assert next_due_date(expense, datetime(2025, 3, 15, 0, 0)) == date(2025, 3, 15)
    assert next_due_date(expense, datetime(2025, 3, 15, 0, 0, 1)) == date(2025, 4, 15)

def test_monthly_paid_moves_to_next_month():
    expense = make_expense(last_processed_month="2025-03")
    now = datetime(2025, 3, 10)
    assert is_paid_for_current_period(expense, now) is True
    assert next_due_date(expense, now) == date(2025, 4, 15)


def test_monthly_paid_last_month_is_unpaid_now():
    expense = make_expense(last_processed_month="2025-02")
    assert is_paid_for_current_period(expense, datetime(2025, 3, 1)) is False


def test_monthly_december_rolls_into_next_year():
    expense = make_expense(last_processed_month="2025-12")
    assert next_due_date(expense, datetime(2025, 12, 1)) == date(2026, 1, 15)


def test_day_past_month_end_rolls_forward():
    expense = make_expense(day_of_month=31)
    assert next_due_date(expense, datetime(2025, 4, 1)) == date(2025, 5, 1)


def test_yearly_paid_only_within_processed_year():
    expense = make_expense(frequency="yearly", last_processed_month="2025-01")
    assert is_paid_for_current_period(expense, datetime(2025, 8, 1)) is True
    assert is_paid_for_current_period(expense, datetime(2026, 1, 2)) is False


def test_yearly_next_due_is_in_january():
    expense = make_expense(frequency="yearly", day_of_month=10)
    assert next_due_date(expense, datetime(2025, 1, 5)) == date(2025, 1, 10)
    assert next_due_date(expense, datetime(2025, 6, 1)) == date(2026, 1, 10)


def test_weekly_paid_when_stored_month_started_within_a_week():
    expense = make_expense(frequency="weekly", last_processed_month="2025-03")
    assert is_paid_for_current_period(expense, datetime(2025, 3, 5)) is True
    assert is_paid_for_current_period(expense, datetime(2025, 3, 20)) is False


def test_weekly_next_due():
    unpaid = make_expense(frequency="weekly")
    paid = make_expense(frequency="weekly", last_processed_month="2025-03")
    now = datetime(2025, 3, 5, 14, 30)
    assert next_due_date(unpaid, now) == date(2025, 3, 5)
    assert next_due_date(paid, now) == date(2025, 3, 12)


def test_no_due_date_when_not_active():
    expense = make_expense(status="paused")
    assert next_due_date(expense, datetime(2025, 3, 1)) is None
    assert next_due_display(expense, datetime(2025, 3, 1)) == "-"


def test_unknown_frequency():
    expense = make_expense(frequency="daily", last_processed_month="2025-03")
    now = datetime(2025, 3, 1)
    assert is_paid_for_current_period(expense, now) is False
    assert next_due_date(expense, now) is None


def test_next_due_display_formats():
    now = datetime(2025, 3, 1)
    assert next_due_display(make_expense(day_of_month=5), now) == "Mar 5"
    assert next_due_display(make_expense(frequency="yearly", day_of_month=5), now) == "Jan 2026"


# ── Period keys ──────────────────────────────────────────────────────────────

def test_processed_period_key_monthly():
    assert processed_period_key("monthly", date(2025, 3, 10)) == "2025-03"


def test_processed_period_key_weekly_monday():
    assert processed_period_key("weekly", date(2025, 3, 10)) == "2025-03"


def test_processed_period_key_weekly_crosses_month_start():
    # Wednesday 2025-04-02 belongs to the week starting Monday 2025-03-31.
    assert processed_period_key("weekly", date(2025, 4, 2)) == "2025-03"


def test_processed_period_key_weekly_sunday_maps_to_next_monday():
    # Sunday 2025-03-30 -> Monday 2025-03-31; Sunday 2025-08-31 -> 2025-09-01.
    assert processed_period_key("weekly", date(2025, 3, 30)) == "2025-03"
    assert processed_period_key("weekly", date(2025, 8, 31)) == "2025-09"


def test_processed_period_key_yearly_and_other():
    assert processed_period_key("yearly", date(2025, 7, 4)) == "2025-01"
    assert processed_period_key("daily", date(2025, 7, 4)) == "2025-07"


def test_payment_period_label():
    assert payment_period_label(make_expense(frequency="weekly")) == "This Week"
    assert payment_period_label(make_expense()) == "This Month"
    assert payment_period_label(make_expense(frequency="yearly")) == "This Year"
    assert payment_period_label(make_expense(frequency="daily")) == "Current Period"


def test_total_active_amount_skips_paused_and_completed():
    expenses = [
        make_expense(amount=100),
        make_expense(amount=50, status="paused"),
        make_expense(amount=25, status="completed"),
        make_expense(amount=10),
    ]
    assert total_active_amount(expenses) == 110


# ── Service ──────────────────────────────────────────────────────────────────

def test_record_payment_creates_transaction_and_marks_period(make_client):
    client = make_client({
        ("POST", "/transactions"): {"transaction": {"_id": "t1", "type": "expense", "amount": 500}},
        ("PUT", "/recurring/r1"): {"recurringExpense": {
            "_id": "r1", "name": "Gym", "frequency": "weekly", "lastProcessedMonth": "2025-03",
        }},
    })
    service = make_service(client)
    expense = make_expense(name="Gym", frequency="weekly", category="healthcare")

    tx, updated = service.record_payment(expense, 500, "w2", date(2025, 3, 10), notes="March")

    body = client.last("POST", "/transactions")[2]
    assert body["walletId"] == "w2"
    assert body["type"] == "expense"
    assert body["category"] == "healthcare"
    assert body["note"] == "Gym - Recurring payment (March)"
    assert body["workspace"] == "personal"
    assert body["date"] == "2025-03-10"
    assert client.last("PUT", "/recurring/r1")[2] == {"lastProcessedMonth": "2025-03"}
    assert tx.id == "t1"
    assert updated.last_processed_month == "2025-03"


def test_record_payment_without_notes(make_client):
    client = make_client()
    make_service(client).record_payment(make_expense(), 100, "w1", date(2025, 5, 2))
    assert client.last("POST", "/transactions")[2]["note"] == "Rent - Recurring payment"


@pytest.mark.parametrize("amount,wallet", [(0, "w1"), (-5, "w1"), (10, "")])
def test_record_payment_rejects_bad_input(make_client, amount, wallet):
    client = make_client()
    with pytest.raises(ValueError):
        make_service(client).record_payment(make_expense(), amount, wallet, date(2025, 5, 2))
    assert client.calls == []


def test_create_sends_payload(make_client):
    client = make_client({("POST", "/recurring"): {"recurringExpense": {"_id": "new", "name": "Netflix"}}})
    expense = make_service(client).create(
        " Netflix ", 1500, "w1", "entertainment", "monthly", "2025-03", day_of_month=5,
    )
    body = client.last("POST", "/recurring")[2]
    assert body["name"] == "Netflix"
    assert body["dayOfMonth"] == 5
    assert body["workspace"] == "personal"
    assert "endMonth" not in body
    assert expense.id == "new"


@pytest.mark.parametrize("kwargs", [
    dict(name=""),
    dict(amount=0),
    dict(frequency="daily"),
    dict(day_of_month=32),
    dict(start_month="March"),
    dict(end_month="2024-12"),
])
def test_create_validation(make_client, kwargs):
    args = dict(name="Rent", amount=100, wallet_id="w1", category="bills",
                frequency="monthly", start_month="2025-01", day_of_month=1)
    args.update(kwargs)
    with pytest.raises(ValueError):
        make_service(make_client()).create(**args)


def test_toggle_status(make_client):
    client = make_client()
    service = make_service(client)
    service.toggle_status(make_expense(status="active"))
    service.toggle_status(make_expense(status="paused"))
    assert client.last("PATCH", "/recurring/r1/pause") is not None
    assert client.last("PATCH", "/recurring/r1/resume") is not None
    with pytest.raises(ValueError):
        service.toggle_status(make_expense(status="completed"))


def test_get_all_filters_by_workspace(make_client):
    client = make_client({("GET", "/recurring"): {"recurringExpenses": [
        {"_id": "a", "name": "Rent", "walletId": {"_id": "w1", "name": "Cash"}},
        None,
    ]}})
    expenses = make_service(client).get_all(status="active")
    assert client.last("GET", "/recurring")[2] == {"workspace": "personal", "status": "active"}
    assert len(expenses) == 1
    assert expenses[0].wallet_id == "w1"
    assert expenses[0].wallet_name == "Cash"
