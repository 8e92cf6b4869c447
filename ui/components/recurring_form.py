import customtkinter as ctk

from models.category import categories_for
from models.recurring_expense import RecurringExpense
from models.wallet import Wallet
from services.recurring_service import RecurringService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.date_picker import MonthPickerWidget
from ui.components.form_dialog import FormDialog
from utils.constants import FREQUENCIES
from utils.date_helpers import current_month_str, friendly_month

_DAY_CHOICES = [str(i) for i in range(1, 32)]


class RecurringForm(FormDialog):
    """Add or edit a recurring expense."""

    def __init__(
        self,
        master,
        recurring_service: RecurringService,
        wallets: list[Wallet],
        expense: RecurringExpense | None = None,
        **kwargs,
    ):
        super().__init__(
            master, "Edit Recurring Expense" if expense else "New Recurring Expense", **kwargs
        )
        self._svc = recurring_service
        self._wallets = wallets
        self._expense = expense

        self._name_var = self._add_entry("Name:", expense.name if expense else "")
        self._amount_var = self._add_entry(
            "Amount:", f"{expense.amount:.2f}" if expense else ""
        )

        if expense:
            self._add_widget("Wallet:", ctk.CTkLabel(self, text=expense.wallet_name or "-", anchor="w"))
        else:
            default = next((w.name for w in wallets if w.is_default), "")
            self._wallet_var, _ = self._add_combo("Wallet:", [w.name for w in wallets], default)

        self._cats = categories_for("personal", "expense")
        labels = [f"{c.icon} {c.label}" for c in self._cats]
        current = next(
            (lbl for lbl, c in zip(labels, self._cats) if expense and c.key == expense.category),
            "",
        )
        self._cat_var, _ = self._add_combo("Category:", labels, current)

        if expense:
            self._add_widget("Frequency:", ctk.CTkLabel(
                self, text=expense.frequency.title(), anchor="w",
            ))
        else:
            self._freq_var, _ = self._add_combo(
                "Frequency:", [f.title() for f in FREQUENCIES], "Monthly",
            )

        self._day_var, _ = self._add_combo(
            "Day of Month:", _DAY_CHOICES, str(expense.day_of_month) if expense else "1",
        )
        self._add_hint("Yearly expenses fall due on this day of January.")

        if expense:
            self._add_widget("Start Month:", ctk.CTkLabel(
                self, text=friendly_month(expense.start_month), anchor="w",
            ))
        else:
            self._start_picker = self._add_widget(
                "Start Month:", MonthPickerWidget(self, current_month_str()), sticky="w",
            )
        self._end_picker = self._add_widget("End Month:", MonthPickerWidget(
            self, expense.end_month if expense else None, allow_empty=True,
        ), sticky="w")
        self._add_hint("Leave the month as '-' to keep it running.")

        self._finish(on_delete=self._on_delete if expense else None)

    def _category_key(self) -> str:
        labels = [f"{c.icon} {c.label}" for c in self._cats]
        label = self._cat_var.get()
        return self._cats[labels.index(label)].key if label in labels else ""

    def _on_save(self):
        name = self._name_var.get()
        amount = self._parse_amount(self._amount_var)
        if amount is None:
            return
        day = int(self._day_var.get())
        category = self._category_key()
        end_month = self._end_picker.get() or None

        if self._expense:
            self._submit(lambda: self._svc.update(
                self._expense, name, amount, category, day, end_month,
            ))
            return

        wallet = next((w for w in self._wallets if w.name == self._wallet_var.get()), None)
        self._submit(lambda: self._svc.create(
            name, amount, wallet.id if wallet else "", category,
            self._freq_var.get().lower(), self._start_picker.get(),
            day_of_month=day, end_month=end_month,
        ))

    def _on_delete(self):
        dlg = ConfirmDialog(
            self, "Delete Recurring Expense",
            f"Delete '{self._expense.name}'? Past payments stay in your transactions.",
            confirm_text="Delete",
        )
        if dlg.result:
            self._submit(lambda: self._svc.delete(self._expense.id))
