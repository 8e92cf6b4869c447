import customtkinter as ctk

from models.recurring_expense import RecurringExpense
from models.wallet import Wallet
from services.recurring_service import RecurringService, payment_period_label
from ui.components.date_picker import DatePickerWidget
from ui.components.form_dialog import FormDialog
from utils.currency import format_currency
from utils.date_helpers import parse_date, today_str


class PaymentForm(FormDialog):
    """Pay a recurring expense in full or in part for its current period."""

    def __init__(
        self,
        master,
        recurring_service: RecurringService,
        expense: RecurringExpense,
        wallets: list[Wallet],
        symbol: str = "Rs. ",
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, f"Pay {expense.name}", **kwargs)
        self._svc = recurring_service
        self._expense = expense
        self._wallets = wallets
        self._symbol = symbol

        ctk.CTkLabel(
            self, text=f"{expense.frequency.title()} • {payment_period_label(expense)}",
            text_color="gray60",
        ).grid(row=self._row, column=0, columnspan=2, padx=16, pady=(12, 4))
        self._row += 1

        self._mode_var = ctk.StringVar(value="full")
        modes = ctk.CTkSegmentedButton(
            self,
            values=["full", "partial"],
            variable=self._mode_var,
            command=self._on_mode_change,
        )
        self._add_widget("Payment Type:", modes, sticky="w")
        self._add_hint(f"Full payment is {format_currency(expense.amount, symbol)}.")

        self._amount_var = ctk.StringVar(value=f"{expense.amount:.2f}")
        self._amount_entry = ctk.CTkEntry(self, textvariable=self._amount_var, width=self.FIELD_WIDTH)
        self._add_widget("Amount:", self._amount_entry)
        self._amount_entry.configure(state="disabled")

        labels = [f"{w.name} ({format_currency(w.balance, symbol)})" for w in wallets]
        self._wallet_labels = labels
        preferred = next((w for w in wallets if w.id == expense.wallet_id), None)
        self._wallet_var, _ = self._add_combo(
            "Pay from Wallet:", labels,
            labels[wallets.index(preferred)] if preferred else "",
        )

        self._date_picker = self._add_widget(
            "Payment Date:", DatePickerWidget(self, today_str(), date_format), sticky="w",
        )
        self._notes_var = self._add_entry("Notes:")

        self._finish(save_text="Record Payment")

    def _on_mode_change(self, mode: str):
        if mode == "full":
            self._amount_var.set(f"{self._expense.amount:.2f}")
            self._amount_entry.configure(state="disabled")
        else:
            self._amount_entry.configure(state="normal")
            self._amount_var.set("")
            self._amount_entry.focus_set()

    def _on_save(self):
        amount = self._parse_amount(self._amount_var)
        if amount is None:
            return
        if self._mode_var.get() == "partial" and amount > self._expense.amount:
            self._error_var.set(
                f"A partial payment cannot exceed {format_currency(self._expense.amount, self._symbol)}."
            )
            return
        if not self._date_picker.is_valid():
            self._error_var.set("Invalid payment date.")
            return

        label = self._wallet_var.get()
        wallet = self._wallets[self._wallet_labels.index(label)] if label in self._wallet_labels else None
        payment_date = parse_date(self._date_picker.get())
        self._submit(lambda: self._svc.record_payment(
            self._expense, amount, wallet.id if wallet else "", payment_date,
            self._notes_var.get(),
        ))
