from typing import Optional
from api.api_client import ApiClient, record_id
from models.student import FeeHistoryEntry, Student


def _float(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


class StudentAPI:
    """/tuition/students endpoints, including fee payments."""

    def __init__(self, client: ApiClient):
        self._client = client

    def _fee_to_model(self, data: dict) -> FeeHistoryEntry:
        due = _float(data.get("due"))
        paid = _float(data.get("paid"))
        remaining = data.get("remaining")
        return FeeHistoryEntry(
            month=data.get("month", ""),
            due=due,
            paid=paid,
            remaining=_float(remaining) if remaining is not None else due - paid,
            method=data.get("method") or "",
            date=(data.get("date") or "")[:10] or None,
        )

    def _to_model(self, data: dict) -> Student:
        return Student(
            id=record_id(data),
            name=data.get("name", ""),
            monthly_fee=_float(data.get("monthlyFee")),
            discount=_float(data.get("discount")),
            phone=data.get("phone") or "",
            guardian_phone=data.get("guardianPhone") or data.get("parentPhone") or "",
            class_name=data.get("class") or data.get("grade") or "",
            subjects=list(data.get("subjects") or []),
            admission_fee=_float(data.get("admissionFee")),
            status=data.get("status") or "active",
            start_date=(data.get("startDate") or "")[:10] or None,
            fee_history=[self._fee_to_model(f) for f in data.get("feeHistory") or [] if f],
        )

    def get_all(self, **filters) -> list[Student]:
        """filters: status, search, page, limit."""
        data = self._client.get("/tuition/students", filters)
        return [self._to_model(s) for s in data.get("students") or [] if s]

    def get_by_id(self, student_id: str) -> Optional[Student]:
        data = self._client.get(f"/tuition/students/{student_id}")
        student = data.get("student", data)
        return self._to_model(student) if student else None

    def create(self, payload: dict) -> Student:
        data = self._client.post("/tuition/students", payload)
        return self._to_model(data.get("student", data))

    def update(self, student_id: str, payload: dict) -> Student:
        data = self._client.put(f"/tuition/students/{student_id}", payload)
        return self._to_model(data.get("student", data))

    def delete(self, student_id: str):
        self._client.delete(f"/tuition/students/{student_id}")

    def record_payment(self, student_id: str, payload: dict) -> tuple[Optional[Student], dict]:
        """payload: amount, month, method, walletId, notes, date.

        Returns (updated_student or None, payment).
        """
        data = self._client.post(f"/tuition/students/{student_id}/fees", payload)
        student = data.get("student")
        return (self._to_model(student) if student else None), data.get("payment") or {}

    def get_payments(self, student_id: str, **filters) -> dict:
        """filters: year, month."""
        return self._client.get(f"/tuition/students/{student_id}/fees", filters)

    def get_all_fee_payments(self, **filters) -> list[dict]:
        """filters: month, studentId, startDate, endDate, limit, page."""
        data = self._client.get("/tuition/students/fees/all", filters)
        return list(data.get("feePayments") or data.get("payments") or [])
