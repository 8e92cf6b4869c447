import logging
from datetime import date, datetime, time, timedelta

from api.recurring_api import RecurringAPI
from api.transaction_api import TransactionAPI
from models.recurring_expense import RecurringExpense
from models.transaction import Transaction
from utils.constants import FREQUENCIES, MONTH_FORMAT
from utils.date_helpers import (
    format_date, format_month, now as current_time, parse_month,
    rolling_date, short_day_label, week_monday,
)

logger = logging.getLogger(__name__)

PERIOD_LABELS = {
    "weekly": "This Week",
    "monthly": "This Month",
    "yearly": "This Year",
}


# ── Period reconciliation (pure) ─────────────────────────────────────────────

def is_paid_for_current_period(expense: RecurringExpense, now: datetime | None = None) -> bool:
    """Whether a payment has been recorded for the period containing `now`.

    Weekly expenses only store a month key, so "paid" means the first day
    of the stored month falls within the last 7 days.
    """
    if not expense.last_processed_month:
        return False
    now = now or current_time()

    if expense.frequency == "weekly":
        last = parse_month(expense.last_processed_month)
        if last is None:
            return False
        return datetime.combine(last, time.min) >= now - timedelta(days=7)

    if expense.frequency == "monthly":
        return expense.last_processed_month == now.strftime(MONTH_FORMAT)

    if expense.frequency == "yearly":
        return expense.last_processed_month[:4] == str(now.year)

    return False


def next_due_date(expense: RecurringExpense, now: datetime | None = None) -> date | None:
    """Next date a payment is due, or None for inactive or unknown-frequency expenses.

    Monthly and yearly candidates advance one period when the current one is
    already paid or the candidate day has passed. Day values past the end of
    a month roll into the next month.
    """
    if not expense.is_active:
        return None
    now = now or current_time()
    paid = is_paid_for_current_period(expense, now)
    day = expense.day_of_month or 1

    if expense.frequency == "weekly":
        return (now + timedelta(days=7)).date() if paid else now.date()

    if expense.frequency == "monthly":
        due = rolling_date(now.year, now.month, day)
        if paid or datetime.combine(due, time.min) < now:
            due = rolling_date(now.year, now.month + 1, day)
        return due

    if expense.frequency == "yearly":
        due = rolling_date(now.year, 1, day)
        if paid or datetime.combine(due, time.min) < now:
            due = rolling_date(now.year + 1, 1, day)
        return due

    return None


def next_due_display(expense: RecurringExpense, now: datetime | None = None) -> str:
    """'Mar 15' for weekly/monthly, 'Jan 2026' for yearly, '-' when nothing is due."""
    due = next_due_date(expense, now)
    if due is None:
        return "-"
    if expense.frequency == "yearly":
        return due.strftime("%b %Y")
    return short_day_label(due)


def processed_period_key(frequency: str, payment_date: date) -> str:
    """The lastProcessedMonth value to store for a payment made on payment_date."""
    if frequency == "weekly":
        return format_month(week_monday(payment_date))
    if frequency == "yearly":
        return f"{payment_date.year}-01"
    return format_month(payment_date)


def payment_period_label(expense: RecurringExpense) -> str:
    return PERIOD_LABELS.get(expense.frequency, "Current Period")


def total_active_amount(expenses: list[RecurringExpense]) -> float:
    return sum(e.amount for e in expenses if e.is_active)


# ── Service ──────────────────────────────────────────────────────────────────

class RecurringService:
    def __init__(self, recurring_api: RecurringAPI, tx_api: TransactionAPI,
                 workspace: str = "personal"):
        self._api = recurring_api
        self._tx_api = tx_api
        self._workspace = workspace

    def set_workspace(self, workspace: str):
        self._workspace = workspace

    def get_all(self, status: str | None = None) -> list[RecurringExpense]:
        return self._api.get_all(workspace=self._workspace, status=status)

    def get_by_id(self, expense_id: str) -> RecurringExpense | None:
        return self._api.get_by_id(expense_id)

    def create(
        self,
        name: str,
        amount: float,
        wallet_id: str,
        category: str,
        frequency: str,
        start_month: str,
        day_of_month: int = 1,
        end_month: str | None = None,
    ) -> RecurringExpense:
        self._validate(name, amount, frequency, day_of_month, start_month, end_month)
        if not wallet_id:
            raise ValueError("Please select a wallet.")
        if not category:
            raise ValueError("Please select a category.")
        payload = {
            "name": name.strip(),
            "amount": amount,
            "walletId": wallet_id,
            "category": category,
            "workspace": self._workspace,
            "frequency": frequency,
            "startMonth": start_month,
            "dayOfMonth": day_of_month,
        }
        if end_month:
            payload["endMonth"] = end_month
        expense = self._api.create(payload)
        logger.info("Created recurring expense %s (%s)", expense.id, frequency)
        return expense

    def update(
        self,
        expense: RecurringExpense,
        name: str,
        amount: float,
        category: str,
        day_of_month: int,
        end_month: str | None = None,
    ) -> RecurringExpense:
        self._validate(name, amount, expense.frequency, day_of_month,
                       expense.start_month, end_month)
        return self._api.update(
            expense.id, name=name.strip(), amount=amount, category=category,
            dayOfMonth=day_of_month, endMonth=end_month,
        )

    def toggle_status(self, expense: RecurringExpense) -> RecurringExpense:
        """Pause an active expense or resume a paused one."""
        if expense.status == "active":
            return self._api.pause(expense.id)
        if expense.status == "paused":
            return self._api.resume(expense.id)
        raise ValueError("Completed recurring expenses cannot be paused or resumed.")

    def delete(self, expense_id: str):
        self._api.delete(expense_id)

    def record_payment(
        self,
        expense: RecurringExpense,
        amount: float,
        wallet_id: str,
        payment_date: date,
        notes: str = "",
    ) -> tuple[Transaction, RecurringExpense]:
        """Log an expense transaction for the payment, then mark the period processed."""
        if amount <= 0:
            raise ValueError("Amount must be positive.")
        if not wallet_id:
            raise ValueError("Please select a wallet.")

        note = f"{expense.name} - Recurring payment"
        if notes.strip():
            note += f" ({notes.strip()})"
        tx = self._tx_api.create(
            wallet_id=wallet_id,
            type_="expense",
            category=expense.category,
            amount=amount,
            date=format_date(payment_date),
            note=note,
            workspace=self._workspace,
        )
        period = processed_period_key(expense.frequency, payment_date)
        updated = self._api.update(expense.id, lastProcessedMonth=period)
        logger.info("Recorded payment for recurring expense %s, period %s", expense.id, period)
        return tx, updated

    def _validate(self, name, amount, frequency, day_of_month, start_month, end_month):
        if not name or not name.strip():
            raise ValueError("Name cannot be empty.")
        if amount is None or amount <= 0:
            raise ValueError("Amount must be positive.")
        if frequency not in FREQUENCIES:
            raise ValueError("Invalid frequency.")
        if not isinstance(day_of_month, int) or not 1 <= day_of_month <= 31:
            raise ValueError("Day of month must be between 1 and 31.")
        if not parse_month(start_month):
            raise ValueError("Invalid start month. Use YYYY-MM.")
        if end_month:
            if not parse_month(end_month):
                raise ValueError("Invalid end month. Use YYYY-MM.")
            if end_month < start_month:
                raise ValueError("End month cannot be before the start month.")
