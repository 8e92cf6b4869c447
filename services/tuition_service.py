import logging
from dataclasses import replace
from typing import Optional

from api.api_client import ApiError
from api.student_api import StudentAPI
from api.tuition_api import TuitionAPI
from models.student import FeeHistoryEntry, Student
from utils.constants import PAYMENT_METHODS
from utils.date_helpers import current_month_str, parse_date, parse_month, today_str

logger = logging.getLogger(__name__)

EMPTY_STATS = {"totalCollected": 0, "totalPending": 0, "pendingCount": 0}


# ── Fee arithmetic (pure) ────────────────────────────────────────────────────

def net_monthly_fee(student: Student) -> float:
    return student.monthly_fee - student.discount


def fee_entry_for_month(student: Student, month: str) -> FeeHistoryEntry:
    """The student's entry for month, or an unpaid one at the net fee."""
    for entry in student.fee_history:
        if entry.month == month:
            return entry
    due = net_monthly_fee(student)
    return FeeHistoryEntry(month=month, due=due, paid=0.0, remaining=due)


def apply_payment(
    student: Student,
    month: str,
    amount: float,
    method: str = "",
    date: str | None = None,
) -> list[FeeHistoryEntry]:
    """Return a new fee history with amount added to month's entry.

    The month's due is reset to the current net fee and remaining is
    recomputed from it. Other months are copied unchanged.
    """
    due = net_monthly_fee(student)
    history: list[FeeHistoryEntry] = []
    found = False
    for entry in student.fee_history:
        if entry.month == month:
            paid = entry.paid + amount
            entry = replace(
                entry, due=due, paid=paid, remaining=due - paid,
                method=method or entry.method, date=date or entry.date,
            )
            found = True
        else:
            entry = replace(entry)
        history.append(entry)
    if not found:
        history.append(FeeHistoryEntry(
            month=month, due=due, paid=amount, remaining=due - amount,
            method=method, date=date,
        ))
    return history


def total_collected(fee_payments: list[dict]) -> float:
    total = 0.0
    for payment in fee_payments:
        try:
            total += float(payment.get("paid") or 0)
        except (TypeError, ValueError):
            continue
    return total


def fee_status(student: Student, month: str) -> str:
    """'paid', 'partial' or 'unpaid' for the student's fee in month."""
    entry = next((e for e in student.fee_history if e.month == month), None)
    if entry is None or entry.paid == 0:
        return "unpaid"
    if entry.paid >= net_monthly_fee(student):
        return "paid"
    return "partial"


def filter_students(students: list[Student], query: str = "", status: str = "all",
                    month: str | None = None) -> list[Student]:
    """Search by name or phone, then filter.

    status is 'all' (active students), 'inactive', or a fee status for
    month among the active students.
    """
    month = month or current_month_str()
    query = query.strip().lower()
    result = []
    for s in students:
        if query and query not in s.name.lower() and query not in (s.phone or ""):
            continue
        if status == "inactive":
            if s.is_active:
                continue
        elif not s.is_active:
            continue
        elif status != "all" and fee_status(s, month) != status:
            continue
        result.append(s)
    return result


def pending_fees(students: list[Student], month: str) -> list[tuple[Student, FeeHistoryEntry]]:
    """Active students with money still owed for month, largest balance first."""
    rows = []
    for s in students:
        if not s.is_active:
            continue
        entry = fee_entry_for_month(s, month)
        if entry.remaining > 0:
            rows.append((s, entry))
    rows.sort(key=lambda r: r[1].remaining, reverse=True)
    return rows


# ── Service ──────────────────────────────────────────────────────────────────

class TuitionService:
    def __init__(self, student_api: StudentAPI, tuition_api: TuitionAPI):
        self._students = student_api
        self._tuition = tuition_api
        self._cache: dict[str, Student] = {}

    # ── Students ─────────────────────────────────────────────────────────────

    def get_students(self, status: str | None = None, search: str | None = None) -> list[Student]:
        students = self._students.get_all(status=status, search=search)
        for s in students:
            self._cache[s.id] = s
        return students

    def get_student(self, student_id: str) -> Optional[Student]:
        student = self._students.get_by_id(student_id)
        if student:
            self._cache[student.id] = student
        return student

    def cached(self, student_id: str) -> Optional[Student]:
        return self._cache.get(student_id)

    def create_student(
        self,
        name: str,
        monthly_fee: float,
        discount: float = 0.0,
        phone: str = "",
        guardian_phone: str = "",
        class_name: str = "",
        subjects: list[str] | None = None,
        admission_fee: float = 0.0,
        start_date: str | None = None,
    ) -> Student:
        self._validate(name, monthly_fee, discount, admission_fee, start_date)
        student = self._students.create(self._payload(
            name, monthly_fee, discount, phone, guardian_phone, class_name,
            subjects, admission_fee, start_date,
        ))
        self._cache[student.id] = student
        logger.info("Created student %s", student.id)
        return student

    def update_student(
        self,
        student_id: str,
        name: str,
        monthly_fee: float,
        discount: float = 0.0,
        phone: str = "",
        guardian_phone: str = "",
        class_name: str = "",
        subjects: list[str] | None = None,
        admission_fee: float = 0.0,
        start_date: str | None = None,
        status: str | None = None,
    ) -> Student:
        self._validate(name, monthly_fee, discount, admission_fee, start_date)
        payload = self._payload(
            name, monthly_fee, discount, phone, guardian_phone, class_name,
            subjects, admission_fee, start_date,
        )
        if status:
            if status not in ("active", "inactive"):
                raise ValueError("Invalid status.")
            payload["status"] = status
        student = self._students.update(student_id, payload)
        self._cache[student.id] = student
        return student

    def delete_student(self, student_id: str):
        self._students.delete(student_id)
        self._cache.pop(student_id, None)

    # ── Fees ─────────────────────────────────────────────────────────────────

    def record_payment(
        self,
        student_id: str,
        month: str,
        amount: float,
        method: str = "cash",
        wallet_id: str | None = None,
        notes: str = "",
        date: str | None = None,
    ) -> Optional[Student]:
        """Post a fee payment and return the student with its updated history."""
        if amount is None or amount <= 0:
            raise ValueError("Amount must be positive.")
        if not parse_month(month):
            raise ValueError("Invalid month. Use YYYY-MM.")
        if method not in PAYMENT_METHODS:
            raise ValueError("Invalid payment method.")
        date = date or today_str()
        if not parse_date(date):
            raise ValueError("Invalid date. Use YYYY-MM-DD.")

        payload = {
            "amount": amount,
            "month": month,
            "method": method,
            "walletId": wallet_id,
            "notes": notes.strip() or None,
            "date": date,
        }
        student, _payment = self._students.record_payment(student_id, payload)
        if student is None:
            cached = self._cache.get(student_id)
            if cached is not None:
                student = replace(
                    cached, fee_history=apply_payment(cached, month, amount, method, date)
                )
        if student is not None:
            self._cache[student_id] = student
        logger.info("Recorded fee payment for student %s, month %s", student_id, month)
        return student

    def get_payments(self, student_id: str, year: int | None = None,
                     month: str | None = None) -> dict:
        return self._students.get_payments(student_id, year=year, month=month)

    def get_all_fee_payments(self, month: str | None = None, **filters) -> list[dict]:
        return self._students.get_all_fee_payments(month=month, **filters)

    # ── Stats ────────────────────────────────────────────────────────────────

    def get_stats(self, month: str | None = None) -> dict:
        month = month or current_month_str()
        try:
            stats = self._tuition.get_stats(month)
        except ApiError as e:
            if e.is_session_expired:
                raise
            logger.warning("Tuition stats unavailable for %s: %s", month, e.message)
            return dict(EMPTY_STATS)
        return {**EMPTY_STATS, **stats}

    def get_trends(self, months: int = 6) -> dict:
        return self._tuition.get_trends(months)

    def get_pending_fees(self, month: str | None = None) -> dict:
        return self._tuition.get_pending_fees(month or current_month_str())

    def get_transactions(self, **filters) -> dict:
        return self._tuition.get_transactions(**filters)

    def get_transaction_summary(self, start_date: str | None = None,
                                end_date: str | None = None) -> dict:
        return self._tuition.get_transaction_summary(startDate=start_date, endDate=end_date)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _validate(self, name, monthly_fee, discount, admission_fee, start_date):
        if not name or not name.strip():
            raise ValueError("Student name cannot be empty.")
        if monthly_fee is None or monthly_fee < 0:
            raise ValueError("Monthly fee cannot be negative.")
        if discount is None or discount < 0:
            raise ValueError("Discount cannot be negative.")
        if discount > monthly_fee:
            raise ValueError("Discount cannot exceed the monthly fee.")
        if admission_fee is not None and admission_fee < 0:
            raise ValueError("Admission fee cannot be negative.")
        if start_date and not parse_date(start_date):
            raise ValueError("Invalid start date. Use YYYY-MM-DD.")

    @staticmethod
    def _payload(name, monthly_fee, discount, phone, guardian_phone, class_name,
                 subjects, admission_fee, start_date) -> dict:
        return {
            "name": name.strip(),
            "monthlyFee": monthly_fee,
            "discount": discount,
            "phone": phone.strip() or None,
            "guardianPhone": guardian_phone.strip() or None,
            "class": class_name or None,
            "subjects": list(subjects or []),
            "admissionFee": admission_fee or 0,
            "startDate": start_date or None,
        }
