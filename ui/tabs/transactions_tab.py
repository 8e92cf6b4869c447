import customtkinter as ctk

from api.api_client import ApiError
from models.category import category_icon, category_label
from models.transaction import Transaction
from services.transaction_service import TransactionService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.loader import BackgroundLoader
from ui.components.transaction_form import TransactionForm
from utils.currency import format_currency
from utils.date_helpers import (
    current_month_str, format_display_date, friendly_month, month_range, next_month, prev_month,
)

_ALL = "All"
_TYPE_COLORS = {"income": "#4CAF50", "expense": "#F44336", "transfer": "#2196F3"}
_TYPE_SIGNS = {"income": "+", "expense": "-", "transfer": "~"}


class TransactionsTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        tx_service: TransactionService,
        get_workspace,    # callable -> 'personal' | 'tuition'
        get_wallets,      # callable -> list[Wallet]
        get_categories,   # callable(type_) -> list[Category]
        get_symbol,       # callable -> str
        notify_refresh,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = tx_service
        self._get_workspace = get_workspace
        self._get_wallets = get_wallets
        self._get_categories = get_categories
        self._get_symbol = get_symbol
        self._notify_refresh = notify_refresh
        self._date_format = date_format
        self._loader = BackgroundLoader(self)

        self._month = current_month_str()
        self._all_time_var = ctk.BooleanVar(value=False)
        self._type_var = ctk.StringVar(value="all")
        self._wallet_var = ctk.StringVar(value=_ALL)
        self._category_var = ctk.StringVar(value=_ALL)
        self._page = 1
        self._total_pages = 1

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_filter_bar()
        self._build_header()
        self._build_list()
        self._build_pager()
        self._load()

    def refresh(self):
        self._load()

    # ── Filter bar ──────────────────────────────────────────────────────────
    def _build_filter_bar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkButton(bar, text="◀", width=28, command=self._prev_month).pack(
            side="left", padx=(8, 0), pady=6
        )
        self._month_label = ctk.CTkLabel(bar, text=friendly_month(self._month, long=False),
                                         width=90, anchor="center")
        self._month_label.pack(side="left", padx=4)
        ctk.CTkButton(bar, text="▶", width=28, command=self._next_month).pack(side="left")
        ctk.CTkCheckBox(
            bar, text="All time", variable=self._all_time_var, width=80,
            command=self._filters_changed,
        ).pack(side="left", padx=8)

        ctk.CTkSegmentedButton(
            bar, values=["all", "income", "expense", "transfer"],
            variable=self._type_var,
            command=lambda _: self._filters_changed(),
        ).pack(side="left", padx=8)

        self._wallet_combo = ctk.CTkComboBox(
            bar, values=[_ALL], variable=self._wallet_var, width=130, state="readonly",
            command=lambda _: self._filters_changed(),
        )
        self._wallet_combo.pack(side="left", padx=4)
        self._category_combo = ctk.CTkComboBox(
            bar, values=[_ALL], variable=self._category_var, width=150, state="readonly",
            command=lambda _: self._filters_changed(),
        )
        self._category_combo.pack(side="left", padx=4)

        ctk.CTkButton(
            bar, text="Clear All", width=80,
            fg_color="#F44336", hover_color="#D32F2F",
            command=self._clear_all,
        ).pack(side="right", padx=(2, 8))
        ctk.CTkButton(bar, text="+ Expense", width=84,
                      command=lambda: self._open_add("expense")).pack(side="right", padx=2)
        ctk.CTkButton(bar, text="+ Income", width=84,
                      command=lambda: self._open_add("income")).pack(side="right", padx=2)

    def _prev_month(self):
        self._month = prev_month(self._month)
        self._filters_changed()

    def _next_month(self):
        self._month = next_month(self._month)
        self._filters_changed()

    def _filters_changed(self):
        self._page = 1
        self._load()

    def _refresh_filter_choices(self):
        self._wallet_combo.configure(values=[_ALL] + [w.name for w in self._get_wallets()])
        cats = self._get_categories("income") + self._get_categories("expense")
        self._cat_labels = {f"{c.icon} {c.label}": c.key for c in cats}
        self._category_combo.configure(values=[_ALL] + list(self._cat_labels))
        if self._category_var.get() not in self._cat_labels:
            self._category_var.set(_ALL)

    # ── Header / list / pager ────────────────────────────────────────────────
    def _build_header(self):
        hdr = ctk.CTkFrame(self, fg_color=("gray82", "gray22"), corner_radius=0)
        hdr.grid(row=1, column=0, sticky="ew", padx=8, pady=(4, 0))
        for i, (label, width) in enumerate([
            ("Date", 90), ("Type", 72), ("Category", 160), ("Note", 220),
            ("Wallet", 110), ("Amount", 110), ("Actions", 110),
        ]):
            ctk.CTkLabel(
                hdr, text=label, width=width, anchor="w",
                font=ctk.CTkFont(weight="bold"),
            ).grid(row=0, column=i, padx=4, pady=4, sticky="w")

    def _build_list(self):
        self._scroll = ctk.CTkScrollableFrame(self)
        self._scroll.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 4))
        self._scroll.grid_columnconfigure(0, weight=1)

    def _build_pager(self):
        pager = ctk.CTkFrame(self, fg_color="transparent")
        pager.grid(row=3, column=0, pady=(0, 8))
        self._prev_btn = ctk.CTkButton(pager, text="Previous", width=80, command=self._prev_page)
        self._prev_btn.pack(side="left")
        self._page_label = ctk.CTkLabel(pager, text="", width=120)
        self._page_label.pack(side="left", padx=8)
        self._next_btn = ctk.CTkButton(pager, text="Next", width=80, command=self._next_page)
        self._next_btn.pack(side="left")

    def _prev_page(self):
        if self._page > 1:
            self._page -= 1
            self._load()

    def _next_page(self):
        if self._page < self._total_pages:
            self._page += 1
            self._load()

    def _message(self, text: str, color="gray60"):
        for w in self._scroll.winfo_children():
            w.destroy()
        ctk.CTkLabel(self._scroll, text=text, text_color=color).grid(row=0, column=0, pady=20)

    # ── Loading ─────────────────────────────────────────────────────────────
    def _load(self):
        self._refresh_filter_choices()
        self._month_label.configure(text=friendly_month(self._month, long=False))

        start = end = None
        if not self._all_time_var.get():
            start, end = month_range(self._month)
        type_f = self._type_var.get()
        wallet = next((w for w in self._get_wallets() if w.name == self._wallet_var.get()), None)
        category = self._cat_labels.get(self._category_var.get())
        page = self._page
        workspace = self._get_workspace()

        self._message("Loading...")
        self._loader.run(
            lambda: self._svc.get_page(
                workspace=workspace,
                type_filter=None if type_f == "all" else type_f,
                category=category,
                wallet_id=wallet.id if wallet else None,
                start_date=start,
                end_date=end,
                page=page,
            ),
            self._show,
            lambda msg: self._message(msg, "#F44336"),
        )

    def _show(self, result: tuple[list[Transaction], dict]):
        transactions, pagination = result
        self._total_pages = max(int(pagination.get("totalPages") or 1), 1)
        self._page_label.configure(text=f"Page {self._page} of {self._total_pages}")
        self._prev_btn.configure(state="normal" if self._page > 1 else "disabled")
        self._next_btn.configure(state="normal" if self._page < self._total_pages else "disabled")

        for w in self._scroll.winfo_children():
            w.destroy()
        if not transactions:
            self._message("No transactions found.")
            return
        symbol = self._get_symbol()
        for idx, tx in enumerate(transactions):
            self._add_row(idx, tx, symbol)

    def _add_row(self, idx: int, tx: Transaction, symbol: str):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        row = ctk.CTkFrame(self._scroll, fg_color=bg, corner_radius=4)
        row.grid(row=idx, column=0, sticky="ew", pady=1, padx=2)

        type_text = tx.type.title() + (" ↻" if tx.is_recurring else "")
        for i, (text, width) in enumerate([
            (format_display_date(tx.date, self._date_format), 90),
            (type_text, 72),
            (f"{category_icon(tx.category)} {category_label(tx.category)}", 160),
            (tx.note or "-", 220),
            (tx.wallet_name or "-", 110),
        ]):
            ctk.CTkLabel(row, text=text, width=width, anchor="w").grid(
                row=0, column=i, padx=4, pady=3
            )
        ctk.CTkLabel(
            row, text=f"{_TYPE_SIGNS.get(tx.type, '')}{format_currency(tx.amount, symbol)}",
            width=110, anchor="w", text_color=_TYPE_COLORS.get(tx.type, "gray60"),
        ).grid(row=0, column=5, padx=4)

        acts = ctk.CTkFrame(row, fg_color="transparent")
        acts.grid(row=0, column=6, padx=(4, 6))
        if tx.type != "transfer":
            ctk.CTkButton(
                acts, text="Edit", width=44, height=24,
                command=lambda t=tx: self._open_edit(t),
            ).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Delete", width=54, height=24,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=lambda t=tx: self._delete(t),
        ).pack(side="left", padx=2)

    # ── Actions ─────────────────────────────────────────────────────────────
    def _open_add(self, type_: str):
        form = TransactionForm(
            self.winfo_toplevel(), self._svc, self._get_wallets(),
            workspace=self._get_workspace(), initial_type=type_,
            date_format=self._date_format, get_categories=self._get_categories,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")

    def _open_edit(self, tx: Transaction):
        form = TransactionForm(
            self.winfo_toplevel(), self._svc, self._get_wallets(),
            transaction=tx, date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("transaction")

    def _delete(self, tx: Transaction):
        dlg = ConfirmDialog(
            self.winfo_toplevel(), "Delete Transaction",
            "Delete this transaction? The wallet balance will be adjusted.",
            confirm_text="Delete",
        )
        if not dlg.result:
            return
        if self._run(lambda: self._svc.delete(tx.id)):
            self._notify_refresh("transaction")

    def _clear_all(self):
        workspace = self._get_workspace()
        dlg = ConfirmDialog(
            self.winfo_toplevel(), "Clear All Transactions",
            f"Delete every {workspace} transaction? This cannot be undone.",
            confirm_text="Clear All",
        )
        if not dlg.result:
            return
        if self._run(lambda: self._svc.clear_all(workspace)):
            self._page = 1
            self._notify_refresh("transaction")

    def _run(self, action) -> bool:
        try:
            action()
        except ApiError as e:
            if not e.is_session_expired:
                self._message(e.message, "#F44336")
            return False
        return True
