import pytest

from api.api_client import ApiError
from api.student_api import StudentAPI
from api.tuition_api import TuitionAPI
from models.student import FeeHistoryEntry, Student
from services.tuition_service import (
    TuitionService, apply_payment, fee_entry_for_month, fee_status, filter_students,
    net_monthly_fee, pending_fees, total_collected,
)


def make_student(**overrides):
    fields = dict(
        id="s1", name="Ali", monthly_fee=5000, discount=500,
        fee_history=[
            FeeHistoryEntry(month="2025-01", due=4500, paid=4500, remaining=0, method="cash"),
            FeeHistoryEntry(month="2025-02", due=4500, paid=2000, remaining=2500, method="cash"),
        ],
    )
    fields.update(overrides)
    return Student(**fields)


def make_service(client):
    return TuitionService(StudentAPI(client), TuitionAPI(client))


def test_net_monthly_fee():
    assert net_monthly_fee(make_student()) == 4500


def test_fee_entry_for_missing_month_is_unpaid():
    entry = fee_entry_for_month(make_student(), "2025-03")
    assert entry.due == 4500
    assert entry.paid == 0
    assert entry.remaining == 4500


def test_apply_payment_partial_then_full():
    student = make_student()
    history = apply_payment(student, "2025-02", 1000, "online", "2025-02-20")
    feb = next(e for e in history if e.month == "2025-02")
    assert feb.paid == 3000
    assert feb.remaining == 1500
    assert feb.method == "online"
    assert feb.date == "2025-02-20"

    student.fee_history = history
    history = apply_payment(student, "2025-02", 1500)
    feb = next(e for e in history if e.month == "2025-02")
    assert feb.remaining == 0
    assert feb.is_settled


def test_apply_payment_keeps_fee_invariants():
    student = make_student()
    history = apply_payment(student, "2025-03", 1200, "cash")
    assert [e.month for e in history] == ["2025-01", "2025-02", "2025-03"]
    changed = history[-1]
    assert changed.due == student.monthly_fee - student.discount
    assert changed.remaining == changed.due - changed.paid


def test_apply_payment_uses_current_net_fee_for_the_month():
    student = make_student(discount=1000)
    history = apply_payment(student, "2025-02", 500)
    feb = next(e for e in history if e.month == "2025-02")
    assert feb.due == 4000
    assert feb.remaining == 4000 - 2500


def test_apply_payment_does_not_mutate_student():
    student = make_student()
    apply_payment(student, "2025-01", 100)
    assert student.fee_history[0].paid == 4500
    assert len(student.fee_history) == 2


def test_total_collected():
    payments = [{"paid": 1000}, {"paid": "250.5"}, {"paid": None}, {}]
    assert total_collected(payments) == 1250.5


def test_fee_status_for_month():
    student = make_student()
    assert fee_status(student, "2025-01") == "paid"
    assert fee_status(student, "2025-02") == "partial"
    assert fee_status(student, "2025-03") == "unpaid"


def test_filter_students_by_search_and_status():
    students = [
        make_student(),
        make_student(id="s2", name="Sara", phone="0300111", fee_history=[]),
        make_student(id="s3", name="Bilal", status="inactive"),
    ]
    assert [s.id for s in filter_students(students)] == ["s1", "s2"]
    assert [s.id for s in filter_students(students, status="inactive")] == ["s3"]
    assert [s.id for s in filter_students(students, "sar")] == ["s2"]
    assert [s.id for s in filter_students(students, "0300")] == ["s2"]
    assert [s.id for s in filter_students(students, status="partial", month="2025-02")] == ["s1"]
    assert [s.id for s in filter_students(students, status="unpaid", month="2025-02")] == ["s2"]


def test_pending_fees_lists_active_balances_largest_first():
    students = [
        make_student(),
        make_student(id="s2", name="Sara", fee_history=[]),
        make_student(id="s3", name="Bilal", status="inactive", fee_history=[]),
    ]
    rows = pending_fees(students, "2025-02")
    assert [(s.id, e.remaining) for s, e in rows] == [("s2", 4500), ("s1", 2500)]
    assert [s.id for s, _ in pending_fees(students, "2025-01")] == ["s2"]


def test_record_payment_uses_returned_student(make_client):
    client = make_client({("POST", "/tuition/students/s1/fees"): {
        "student": {"_id": "s1", "name": "Ali", "monthlyFee": 5000, "discount": 500,
                    "feeHistory": [{"month": "2025-03", "due": 4500, "paid": 4500}]},
        "payment": {"amount": 4500},
    }})
    service = make_service(client)
    student = service.record_payment("s1", "2025-03", 4500, "cash", wallet_id="w1",
                                     date="2025-03-05")
    body = client.last("POST", "/tuition/students/s1/fees")[2]
    assert body["amount"] == 4500
    assert body["month"] == "2025-03"
    assert body["walletId"] == "w1"
    assert student.fee_history[0].remaining == 0
    assert service.cached("s1") is student


def test_record_payment_falls_back_to_local_history(make_client):
    client = make_client({
        ("GET", "/tuition/students/s1"): {"student": {
            "_id": "s1", "name": "Ali", "monthlyFee": 5000, "discount": 500,
            "feeHistory": [{"month": "2025-02", "due": 4500, "paid": 2000, "remaining": 2500}],
        }},
        ("POST", "/tuition/students/s1/fees"): {"payment": {"amount": 2500}},
    })
    service = make_service(client)
    service.get_student("s1")
    student = service.record_payment("s1", "2025-02", 2500, "bank_transfer", date="2025-02-28")
    feb = student.fee_history[0]
    assert feb.paid == 4500
    assert feb.remaining == 0
    assert feb.method == "bank_transfer"


@pytest.mark.parametrize("kwargs", [
    dict(amount=0),
    dict(month="2025/02"),
    dict(method="crypto"),
    dict(date="28-02-2025"),
])
def test_record_payment_validation(make_client, kwargs):
    args = dict(student_id="s1", month="2025-02", amount=100, method="cash", date="2025-02-01")
    args.update(kwargs)
    client = make_client()
    with pytest.raises(ValueError):
        make_service(client).record_payment(**args)
    assert client.calls == []


@pytest.mark.parametrize("kwargs", [
    dict(name="  "),
    dict(monthly_fee=-1),
    dict(discount=-1),
    dict(monthly_fee=1000, discount=1500),
    dict(start_date="yesterday"),
])
def test_create_student_validation(make_client, kwargs):
    args = dict(name="Sara", monthly_fee=3000, discount=0)
    args.update(kwargs)
    with pytest.raises(ValueError):
        make_service(make_client()).create_student(**args)


def test_create_student_payload(make_client):
    client = make_client({("POST", "/tuition/students"): {"student": {"_id": "s9", "name": "Sara"}}})
    student = make_service(client).create_student(
        "Sara ", 3000, 200, phone="0300", class_name="Class 5", subjects=["Math"],
    )
    body = client.last("POST", "/tuition/students")[2]
    assert body["name"] == "Sara"
    assert body["class"] == "Class 5"
    assert body["subjects"] == ["Math"]
    assert body["guardianPhone"] is None
    assert student.id == "s9"


def test_stats_fall_back_to_zeros(make_client):
    client = make_client({("GET", "/tuition/stats"): ApiError("boom", "ERROR", 500)})
    stats = make_service(client).get_stats("2025-03")
    assert stats == {"totalCollected": 0, "totalPending": 0, "pendingCount": 0}


def test_stats_fill_missing_keys(make_client):
    client = make_client({("GET", "/tuition/stats"): {"totalCollected": 9000}})
    stats = make_service(client).get_stats("2025-03")
    assert stats["totalCollected"] == 9000
    assert stats["pendingCount"] == 0


def test_stats_do_not_hide_expired_session(make_client):
    client = make_client({("GET", "/tuition/stats"): ApiError("expired", "SESSION_EXPIRED", 401)})
    with pytest.raises(ApiError):
        make_service(client).get_stats("2025-03")
