import logging
from concurrent.futures import ThreadPoolExecutor

from api.api_client import ApiError
from api.recurring_api import RecurringAPI
from api.transaction_api import TransactionAPI
from models.category import category_icon, category_label
from services.recurring_service import total_active_amount
from utils.date_helpers import current_month_str, month_range, prev_month

logger = logging.getLogger(__name__)

CHART_COLORS = [
    "#ef4444", "#f59e0b", "#8b5cf6", "#3b82f6",
    "#ec4899", "#10b981", "#6b7280", "#14b8a6",
]
# Upper bound on rows pulled for a single month's breakdown or export.
_MONTH_FETCH_LIMIT = 1000


class ReportService:
    def __init__(self, tx_api: TransactionAPI, recurring_api: RecurringAPI,
                 workspace: str = "personal"):
        self._tx_api = tx_api
        self._recurring_api = recurring_api
        self._workspace = workspace

    def set_workspace(self, workspace: str):
        self._workspace = workspace

    def get_summary(self, month: str | None = None) -> dict:
        """{income, expense, savings, savings_rate} for the month; rate is a 0-100 percentage."""
        start, end = month_range(month or current_month_str())
        raw = self._tx_api.get_summary(workspace=self._workspace, startDate=start, endDate=end)
        income = float(raw.get("income") or 0)
        expense = float(raw.get("expense") or 0)
        savings = income - expense
        rate = round(savings / income * 100) if income > 0 else 0
        return {"income": income, "expense": expense, "savings": savings,
                "savings_rate": max(rate, 0)}

    def get_category_breakdown(self, month: str | None = None) -> list[dict]:
        """Return [{category, label, icon, color, total, percentage}, ...] largest first."""
        totals: dict[str, float] = {}
        for tx in self._month_transactions(month, type_="expense"):
            totals[tx.category] = totals.get(tx.category, 0.0) + tx.amount
        grand = sum(totals.values())

        rows = []
        ranked = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
        for i, (key, total) in enumerate(ranked):
            rows.append({
                "category": key,
                "label": category_label(key),
                "icon": category_icon(key),
                "color": CHART_COLORS[i % len(CHART_COLORS)],
                "total": total,
                "percentage": round(total / grand * 100) if grand else 0,
            })
        return rows

    def get_monthly_chart_data(self, months: int = 6) -> list[dict]:
        """Return [{month, income, expense, net}, ...] oldest first for the bar chart."""
        month_keys = [current_month_str()]
        for _ in range(months - 1):
            month_keys.insert(0, prev_month(month_keys[0]))
        with ThreadPoolExecutor(max_workers=3) as pool:
            summaries = list(pool.map(self.get_summary, month_keys))
        return [
            {"month": m, "income": s["income"], "expense": s["expense"],
             "net": s["income"] - s["expense"]}
            for m, s in zip(month_keys, summaries)
        ]

    def get_dashboard(self, month: str | None = None, recent: int = 5) -> dict:
        """Recent transactions, summary and active recurring total for the month.

        The three requests run in parallel. A failed recurring request
        leaves an empty list; the other two propagate their errors.
        """
        start, end = month_range(month or current_month_str())
        with ThreadPoolExecutor(max_workers=3) as pool:
            tx_future = pool.submit(
                self._tx_api.get_all, workspace=self._workspace, limit=recent,
                startDate=start, endDate=end,
            )
            summary_future = pool.submit(
                self._tx_api.get_summary, workspace=self._workspace,
                startDate=start, endDate=end,
            )
            recurring_future = pool.submit(self._recurring_api.get_all, workspace=self._workspace)

            transactions, _pagination = tx_future.result()
            raw_summary = summary_future.result()
            try:
                recurring = recurring_future.result()
            except ApiError as e:
                if e.is_session_expired:
                    raise
                logger.warning("Recurring expenses unavailable: %s", e.message)
                recurring = []

        income = float(raw_summary.get("income") or 0)
        expense = float(raw_summary.get("expense") or 0)
        return {
            "transactions": transactions,
            "summary": {
                "income": income,
                "expense": expense,
                "balance": float(raw_summary.get("balance", income - expense) or 0),
            },
            "recurring": recurring,
            "recurring_total": total_active_amount(recurring),
        }

    def export_csv(self, month: str | None = None) -> list[list[str]]:
        """Return rows suitable for CSV export."""
        transactions = sorted(self._month_transactions(month), key=lambda t: (t.date, t.id))
        rows = [["Date", "Type", "Category", "Note", "Amount", "Wallet"]]
        for tx in transactions:
            rows.append([
                tx.date,
                tx.type,
                category_label(tx.category),
                tx.note,
                f"{tx.amount:.2f}",
                tx.wallet_name,
            ])
        return rows

    def _month_transactions(self, month: str | None, type_: str | None = None):
        start, end = month_range(month or current_month_str())
        transactions, _pagination = self._tx_api.get_all(
            workspace=self._workspace, type=type_, startDate=start, endDate=end,
            limit=_MONTH_FETCH_LIMIT,
        )
        return transactions
