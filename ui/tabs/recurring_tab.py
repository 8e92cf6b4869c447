import customtkinter as ctk

from api.api_client import ApiError
from models.category import category_icon, category_label
from models.recurring_expense import RecurringExpense
from services.recurring_service import (
    RecurringService, is_paid_for_current_period, next_due_display, total_active_amount,
)
from ui.components.loader import BackgroundLoader
from ui.components.payment_form import PaymentForm
from ui.components.recurring_form import RecurringForm
from utils.currency import format_currency

_STATUS_COLORS = {"active": "#4CAF50", "paused": "#FF9800", "completed": "gray60"}


class RecurringTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        recurring_service: RecurringService,
        get_wallets,      # callable -> list[Wallet]
        get_symbol,       # callable -> str
        notify_refresh,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = recurring_service
        self._get_wallets = get_wallets
        self._get_symbol = get_symbol
        self._notify_refresh = notify_refresh
        self._date_format = date_format
        self._status_var = ctk.StringVar(value="All")
        self._loader = BackgroundLoader(self)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_list()
        self._load()

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(
            bar, text="Recurring Expenses",
            font=ctk.CTkFont(size=14, weight="bold"),
        ).pack(side="left", padx=12, pady=8)
        ctk.CTkSegmentedButton(
            bar, values=["All", "Active", "Paused", "Completed"],
            variable=self._status_var,
            command=lambda _: self._load(),
        ).pack(side="left", padx=8)
        ctk.CTkButton(bar, text="+ Add Expense", command=self._open_add).pack(
            side="right", padx=8, pady=6
        )
        self._total_label = ctk.CTkLabel(bar, text="", text_color="gray60")
        self._total_label.pack(side="right", padx=12)

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=1, column=0, sticky="nsew", padx=8, pady=8)
        self._scroll.grid_columnconfigure(0, weight=1)

    def _clear(self):
        for w in self._scroll.winfo_children():
            w.destroy()

    def _message(self, text: str, color="gray60"):
        self._clear()
        ctk.CTkLabel(self._scroll, text=text, text_color=color).grid(row=0, column=0, pady=40)

    def _load(self):
        status = self._status_var.get().lower()
        self._message("Loading...")
        self._loader.run(
            lambda: self._svc.get_all(None if status == "all" else status),
            self._show,
            lambda msg: self._message(msg, "#F44336"),
        )

    def _show(self, expenses: list[RecurringExpense]):
        self._clear()
        symbol = self._get_symbol()
        self._total_label.configure(
            text=f"Active monthly total: {format_currency(total_active_amount(expenses), symbol)}"
        )
        if not expenses:
            self._message("No recurring expenses yet. Click '+ Add Expense' to create one.")
            return

        hdr = ctk.CTkFrame(self._scroll, fg_color=("gray82", "gray22"), corner_radius=0)
        hdr.grid(row=0, column=0, sticky="ew", pady=(0, 2))
        for i, (col, w) in enumerate([
            ("Name", 170), ("Amount", 100), ("Category", 140), ("Wallet", 110),
            ("Frequency", 80), ("Next Due", 80), ("This Period", 80),
            ("Status", 80), ("Actions", 150),
        ]):
            ctk.CTkLabel(
                hdr, text=col, width=w, anchor="w",
                font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=i, padx=4, pady=4)

        for idx, expense in enumerate(expenses):
            self._add_row(idx + 1, expense, symbol)

    def _add_row(self, idx: int, expense: RecurringExpense, symbol: str):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)

        paid = is_paid_for_current_period(expense)
        data = [
            (expense.name, 170),
            (format_currency(expense.amount, symbol), 100),
            (f"{category_icon(expense.category)} {category_label(expense.category)}", 140),
            (expense.wallet_name or "-", 110),
            (expense.frequency.title(), 80),
            (next_due_display(expense) if expense.is_active else "-", 80),
        ]
        for i, (text, width) in enumerate(data):
            ctk.CTkLabel(row, text=text, width=width, anchor="w").grid(
                row=0, column=i, padx=4, pady=4
            )

        ctk.CTkLabel(
            row, text="Paid" if paid else "Due", width=80, anchor="w",
            text_color="#4CAF50" if paid else "#FF9800",
        ).grid(row=0, column=6, padx=4)
        ctk.CTkLabel(
            row, text=expense.status.title(), width=80, anchor="w",
            text_color=_STATUS_COLORS.get(expense.status, "gray60"),
        ).grid(row=0, column=7, padx=4)

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=8, padx=(4, 6))
        if expense.is_active and not paid:
            ctk.CTkButton(
                acts, text="Pay", width=40, height=24,
                fg_color="#4CAF50", hover_color="#388E3C",
                command=lambda e=expense: self._open_pay(e),
            ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Edit", width=40, height=24,
            command=lambda e=expense: self._open_edit(e),
        ).pack(side="left", padx=2)
        if expense.status != "completed":
            ctk.CTkButton(
                acts, text="Pause" if expense.is_active else "Resume", width=56, height=24,
                fg_color="transparent", border_width=1,
                text_color=("gray10", "gray90"),
                command=lambda e=expense: self._toggle_status(e),
            ).pack(side="left")

    def _open_add(self):
        form = RecurringForm(self.winfo_toplevel(), self._svc, self._get_wallets())
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("recurring")

    def _open_edit(self, expense: RecurringExpense):
        form = RecurringForm(self.winfo_toplevel(), self._svc, self._get_wallets(), expense=expense)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("recurring")

    def _open_pay(self, expense: RecurringExpense):
        form = PaymentForm(
            self.winfo_toplevel(), self._svc, expense, self._get_wallets(),
            symbol=self._get_symbol(), date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("payment")

    def _toggle_status(self, expense: RecurringExpense):
        try:
            self._svc.toggle_status(expense)
        except ValueError as e:
            self._message(str(e), "#F44336")
            return
        except ApiError as e:
            if not e.is_session_expired:
                self._message(e.message, "#F44336")
            return
        self._notify_refresh("recurring")
