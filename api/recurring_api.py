from typing import Optional
from api.api_client import ApiClient, record_id, wallet_ref
from models.recurring_expense import RecurringExpense


class RecurringAPI:
    def __init__(self, client: ApiClient):
        self._client = client

    def _to_model(self, data: dict) -> RecurringExpense:
        wallet_id, wallet_name = wallet_ref(data.get("walletId"))
        return RecurringExpense(
            id=record_id(data),
            name=data.get("name", ""),
            amount=float(data.get("amount") or 0),
            category=data.get("category", ""),
            wallet_id=wallet_id,
            frequency=data.get("frequency") or "monthly",
            start_month=data.get("startMonth") or "",
            day_of_month=int(data.get("dayOfMonth") or 1),
            end_month=data.get("endMonth") or None,
            last_processed_month=data.get("lastProcessedMonth") or None,
            status=data.get("status") or "active",
            workspace=data.get("workspace") or "personal",
            wallet_name=data.get("wallet") if isinstance(data.get("wallet"), str) else wallet_name,
        )

    def _one(self, data: dict) -> RecurringExpense:
        return self._to_model(data.get("recurringExpense", data))

    def get_all(self, workspace: str | None = None, status: str | None = None) -> list[RecurringExpense]:
        data = self._client.get("/recurring", {"workspace": workspace, "status": status})
        return [self._to_model(r) for r in data.get("recurringExpenses") or [] if r]

    def get_by_id(self, expense_id: str) -> Optional[RecurringExpense]:
        data = self._client.get(f"/recurring/{expense_id}")
        return self._one(data) if data else None

    def create(self, payload: dict) -> RecurringExpense:
        """payload: name, amount, walletId, category, workspace, frequency,
        startMonth, endMonth?, dayOfMonth."""
        return self._one(self._client.post("/recurring", payload))

    def update(self, expense_id: str, **fields) -> RecurringExpense:
        """fields: name, amount, category, dayOfMonth, endMonth, lastProcessedMonth."""
        return self._one(self._client.put(f"/recurring/{expense_id}", fields))

    def pause(self, expense_id: str) -> RecurringExpense:
        return self._one(self._client.patch(f"/recurring/{expense_id}/pause"))

    def resume(self, expense_id: str) -> RecurringExpense:
        return self._one(self._client.patch(f"/recurring/{expense_id}/resume"))

    def delete(self, expense_id: str):
        self._client.delete(f"/recurring/{expense_id}")
