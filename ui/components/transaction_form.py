import customtkinter as ctk

from models.category import categories_for
from models.transaction import Transaction
from models.wallet import Wallet
from services.transaction_service import TransactionService
from ui.components.date_picker import DatePickerWidget
from ui.components.form_dialog import FormDialog
from utils.date_helpers import today_str


class TransactionForm(FormDialog):
    """Add or edit an income or expense transaction."""

    _last_date: str = today_str()  # reset to today on each app launch

    def __init__(
        self,
        master,
        tx_service: TransactionService,
        wallets: list[Wallet],
        workspace: str = "personal",
        initial_type: str = "expense",
        transaction: Transaction | None = None,
        date_format: str = "MM/DD/YYYY",
        get_categories=None,  # callable(type_) -> list[Category]
        **kwargs,
    ):
        if transaction:
            initial_type = transaction.type
        super().__init__(
            master, f"{'Edit' if transaction else 'Add'} {initial_type.title()}", **kwargs
        )
        self._svc = tx_service
        self._wallets = wallets
        self._workspace = transaction.workspace if transaction else workspace
        self._transaction = transaction
        self._get_categories = get_categories or (lambda t: categories_for(self._workspace, t))

        self._type_var = ctk.StringVar(value=initial_type)
        if not transaction:
            type_frame = ctk.CTkFrame(self, fg_color="transparent")
            for t in ("expense", "income"):
                ctk.CTkRadioButton(
                    type_frame, text=t.title(), variable=self._type_var, value=t,
                    command=self._on_type_change,
                ).pack(side="left", padx=4)
            self._add_widget("Type:", type_frame, sticky="w")

        self._amount_var = self._add_entry(
            "Amount:", f"{transaction.amount:.2f}" if transaction else ""
        )

        wallet_names = [w.name for w in wallets]
        if transaction:
            self._add_widget("Wallet:", ctk.CTkLabel(
                self, text=transaction.wallet_name or "-", anchor="w",
            ))
        else:
            default = next((w.name for w in wallets if w.is_default), "")
            self._wallet_var, _ = self._add_combo("Wallet:", wallet_names, default)

        self._cats = self._get_categories(initial_type)
        labels = [f"{c.icon} {c.label}" for c in self._cats]
        current = next(
            (l for l, c in zip(labels, self._cats) if transaction and c.key == transaction.category),
            "",
        )
        self._cat_var, self._cat_combo = self._add_combo("Category:", labels, current)

        self._date_picker = self._add_widget("Date:", DatePickerWidget(
            self,
            initial_date=transaction.date if transaction else TransactionForm._last_date,
            date_format=date_format,
        ), sticky="w")

        self._note_var = self._add_entry("Note:", transaction.note if transaction else "")

        self._finish()

    def _on_type_change(self):
        self._cats = self._get_categories(self._type_var.get())
        labels = [f"{c.icon} {c.label}" for c in self._cats]
        self._cat_combo.configure(values=labels)
        self._cat_var.set(labels[0] if labels else "")

    def _category_key(self) -> str:
        labels = [f"{c.icon} {c.label}" for c in self._cats]
        label = self._cat_var.get()
        return self._cats[labels.index(label)].key if label in labels else ""

    def _on_save(self):
        amount = self._parse_amount(self._amount_var)
        if amount is None:
            return
        if not self._date_picker.is_valid():
            self._error_var.set("Invalid date.")
            return
        date = self._date_picker.get()
        category = self._category_key()
        note = self._note_var.get()

        if self._transaction:
            saved = self._submit(lambda: self._svc.update(
                self._transaction, category, amount, date, note,
            ))
        else:
            wallet = next((w for w in self._wallets if w.name == self._wallet_var.get()), None)
            saved = self._submit(lambda: self._svc.create(
                wallet.id if wallet else "", self._type_var.get(), category,
                amount, date, note, workspace=self._workspace,
            ))
        if saved:
            TransactionForm._last_date = date
