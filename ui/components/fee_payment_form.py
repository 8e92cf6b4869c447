import customtkinter as ctk

from models.student import Student
from models.wallet import Wallet
from services.tuition_service import fee_entry_for_month
from services.workspace_service import WorkspaceService
from ui.components.date_picker import DatePickerWidget, MonthPickerWidget
from ui.components.form_dialog import FormDialog
from utils.constants import PAYMENT_METHODS
from utils.currency import format_currency
from utils.date_helpers import current_month_str, today_str

_METHOD_LABELS = {m: m.replace("_", " ").title() for m in PAYMENT_METHODS}


class FeePaymentForm(FormDialog):
    """Record a student's fee payment for a month."""

    def __init__(self, master, workspace_service: WorkspaceService, student: Student,
                 wallets: list[Wallet], symbol: str = "Rs. ",
                 date_format: str = "MM/DD/YYYY", month: str | None = None, **kwargs):
        super().__init__(master, f"Record Payment - {student.name}", **kwargs)
        self._svc = workspace_service
        self._student = student
        self._wallets = wallets
        self._symbol = symbol

        month = month or current_month_str()
        entry = fee_entry_for_month(student, month)

        self._month_picker = self._add_widget("Month:", MonthPickerWidget(
            self, month, command=self._show_balance,
        ), sticky="w")
        self._balance_label = ctk.CTkLabel(self, text="", text_color="gray60", anchor="w")
        self._add_widget("", self._balance_label)
        self._show_balance(month)

        self._amount_var = self._add_entry(
            "Amount:", f"{entry.remaining:.0f}" if entry.remaining > 0 else "",
        )

        default = next((w.name for w in wallets if w.is_default), "")
        self._wallet_var, _ = self._add_combo("Deposit to Wallet:", [w.name for w in wallets], default)
        self._add_hint("The payment is added to this wallet and recorded as tuition income.")

        self._method_var = ctk.StringVar(value=_METHOD_LABELS[PAYMENT_METHODS[0]])
        self._add_widget("Method:", ctk.CTkSegmentedButton(
            self, values=list(_METHOD_LABELS.values()), variable=self._method_var,
        ), sticky="w")

        self._date_picker = self._add_widget(
            "Date:", DatePickerWidget(self, today_str(), date_format), sticky="w",
        )
        self._notes_var = self._add_entry("Notes:")

        self._finish(save_text="Save Payment")

    def _show_balance(self, month: str):
        entry = fee_entry_for_month(self._student, month)
        self._balance_label.configure(text=(
            f"Due {format_currency(entry.due, self._symbol)} · "
            f"Paid {format_currency(entry.paid, self._symbol)} · "
            f"Remaining {format_currency(entry.remaining, self._symbol)}"
        ))

    def _on_save(self):
        amount = self._parse_amount(self._amount_var)
        if amount is None:
            return
        if not self._date_picker.is_valid():
            self._error_var.set("Invalid date.")
            return
        wallet = next((w for w in self._wallets if w.name == self._wallet_var.get()), None)
        method = next(
            (k for k, v in _METHOD_LABELS.items() if v == self._method_var.get()), "cash",
        )
        self._submit(lambda: self._svc.record_payment(
            self._student.id,
            month=self._month_picker.get(),
            amount=amount,
            method=method,
            wallet_id=wallet.id if wallet else None,
            notes=self._notes_var.get(),
            date=self._date_picker.get(),
        ))
