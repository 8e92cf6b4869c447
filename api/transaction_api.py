from typing import Optional
from api.api_client import ApiClient, record_id, wallet_ref
from models.transaction import Transaction


class TransactionAPI:
    def __init__(self, client: ApiClient):
        self._client = client

    def _to_model(self, data: dict) -> Transaction:
        wallet_id, wallet_name = wallet_ref(data.get("walletId"))
        return Transaction(
            id=record_id(data),
            wallet_id=wallet_id,
            type=data.get("type", "expense"),
            category=data.get("category", ""),
            amount=float(data.get("amount") or 0),
            date=(data.get("date") or "")[:10],
            note=data.get("note") or "",
            workspace=data.get("workspace") or "personal",
            is_recurring=bool(data.get("isRecurring")),
            wallet_name=data.get("walletName") or wallet_name,
            created_at=data.get("createdAt") or "",
        )

    def get_all(self, **filters) -> tuple[list[Transaction], dict]:
        """filters: workspace, type, category, walletId, startDate, endDate, page, limit.

        Returns (transactions, pagination).
        """
        data = self._client.get("/transactions", filters)
        rows = [self._to_model(t) for t in data.get("transactions") or [] if t]
        return rows, data.get("pagination") or {}

    def get_summary(self, **filters) -> dict:
        return self._client.get("/transactions/summary", filters)

    def get_by_id(self, tx_id: str) -> Optional[Transaction]:
        data = self._client.get(f"/transactions/{tx_id}")
        tx = data.get("transaction", data)
        return self._to_model(tx) if tx else None

    def create(
        self,
        wallet_id: str,
        type_: str,
        category: str,
        amount: float,
        date: str | None = None,
        note: str = "",
        workspace: str = "personal",
        is_recurring: bool = False,
    ) -> Transaction:
        data = self._client.post("/transactions", {
            "walletId": wallet_id,
            "type": type_,
            "category": category,
            "amount": amount,
            "date": date,
            "note": note,
            "workspace": workspace,
            "isRecurring": is_recurring,
        })
        return self._to_model(data.get("transaction", data))

    def update(self, tx_id: str, **fields) -> Transaction:
        """fields: category, amount, date, note."""
        data = self._client.put(f"/transactions/{tx_id}", fields)
        return self._to_model(data.get("transaction", data))

    def delete(self, tx_id: str):
        self._client.delete(f"/transactions/{tx_id}")

    def clear_all(self, workspace: str = "personal") -> dict:
        return self._client.delete("/transactions/clear", {"workspace": workspace})
