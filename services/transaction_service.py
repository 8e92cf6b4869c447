from api.transaction_api import TransactionAPI
from models.transaction import Transaction
from utils.constants import TRANSACTION_TYPES, TRANSACTIONS_PAGE_SIZE
from utils.date_helpers import parse_date


class TransactionService:
    def __init__(self, tx_api: TransactionAPI):
        self._api = tx_api

    def get_page(
        self,
        workspace: str = "personal",
        type_filter: str | None = None,
        category: str | None = None,
        wallet_id: str | None = None,
        start_date: str | None = None,
        end_date: str | None = None,
        page: int = 1,
        limit: int = TRANSACTIONS_PAGE_SIZE,
    ) -> tuple[list[Transaction], dict]:
        """Returns (transactions, pagination). Empty filters are left out of the query."""
        return self._api.get_all(
            workspace=workspace,
            type=type_filter,
            category=category,
            walletId=wallet_id,
            startDate=start_date,
            endDate=end_date,
            page=page,
            limit=limit,
        )

    def get_summary(self, workspace: str = "personal", start_date: str | None = None,
                    end_date: str | None = None) -> dict:
        summary = self._api.get_summary(workspace=workspace, startDate=start_date, endDate=end_date)
        income = float(summary.get("income") or 0)
        expense = float(summary.get("expense") or 0)
        return {"income": income, "expense": expense, "balance": income - expense}

    def get_by_id(self, tx_id: str) -> Transaction | None:
        return self._api.get_by_id(tx_id)

    def create(
        self,
        wallet_id: str,
        type_: str,
        category: str,
        amount: float,
        date: str,
        note: str = "",
        workspace: str = "personal",
    ) -> Transaction:
        self._validate(type_, amount, date)
        if not wallet_id:
            raise ValueError("Please select a wallet.")
        if not category:
            raise ValueError("Please select a category.")
        return self._api.create(
            wallet_id=wallet_id,
            type_=type_,
            category=category,
            amount=amount,
            date=date,
            note=note.strip(),
            workspace=workspace,
        )

    def update(self, tx: Transaction, category: str, amount: float, date: str,
               note: str = "") -> Transaction:
        self._validate(tx.type, amount, date)
        if not category:
            raise ValueError("Please select a category.")
        return self._api.update(tx.id, category=category, amount=amount, date=date,
                                note=note.strip())

    def delete(self, tx_id: str):
        self._api.delete(tx_id)

    def clear_all(self, workspace: str = "personal") -> dict:
        return self._api.clear_all(workspace)

    # ── Helpers ──────────────────────────────────────────────────────────────

    @staticmethod
    def _validate(type_: str, amount: float, date: str):
        if type_ not in TRANSACTION_TYPES:
            raise ValueError(f"Invalid transaction type '{type_}'.")
        if amount is None or amount <= 0:
            raise ValueError("Amount must be positive.")
        if not parse_date(date):
            raise ValueError("Invalid date. Use YYYY-MM-DD.")
