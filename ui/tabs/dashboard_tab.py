import customtkinter as ctk

from models.category import category_icon, category_label
from services.recurring_service import is_paid_for_current_period, next_due_display
from services.report_service import ReportService
from services.tuition_service import TuitionService
from ui.components.loader import BackgroundLoader
from utils.currency import format_currency
from utils.date_helpers import (
    current_month_str, format_display_date, friendly_month, next_month, prev_month,
)

_TYPE_COLORS = {"income": "#4CAF50", "expense": "#F44336", "transfer": "#2196F3"}
_TYPE_SIGNS = {"income": "+", "expense": "-", "transfer": "~"}


class DashboardTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        report_service: ReportService,
        tuition_service: TuitionService,
        get_workspace,    # callable -> 'personal' | 'tuition'
        get_symbol,       # callable -> str
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._report_svc = report_service
        self._tuition_svc = tuition_service
        self._get_workspace = get_workspace
        self._get_symbol = get_symbol
        self._date_format = date_format
        self._month = current_month_str()
        self._loader = BackgroundLoader(self)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(3, weight=1)

        self._build_month_nav()
        self._build_summary_cards()
        self._build_notice_area()
        self._build_bottom_section()
        self._load()

    def refresh(self):
        self._load()

    def _build_month_nav(self):
        nav = ctk.CTkFrame(self, fg_color="transparent")
        nav.grid(row=0, column=0, sticky="ew", padx=16, pady=(12, 0))
        ctk.CTkButton(nav, text="◀", width=28, command=self._prev_month).pack(side="left")
        self._month_label = ctk.CTkLabel(
            nav, text=friendly_month(self._month),
            font=ctk.CTkFont(size=15, weight="bold"), width=150, anchor="center",
        )
        self._month_label.pack(side="left", padx=8)
        ctk.CTkButton(nav, text="▶", width=28, command=self._next_month).pack(side="left")
        self._status_label = ctk.CTkLabel(nav, text="", text_color="gray60")
        self._status_label.pack(side="right")

    def _prev_month(self):
        self._month = prev_month(self._month)
        self._load()

    def _next_month(self):
        self._month = next_month(self._month)
        self._load()

    def _build_summary_cards(self):
        self._card_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._card_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=12)
        self._card_frame.grid_columnconfigure((0, 1, 2), weight=1)

    def _build_notice_area(self):
        self._notice_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._notice_frame.grid(row=2, column=0, sticky="ew", padx=16)

    def _build_bottom_section(self):
        bottom = ctk.CTkFrame(self, fg_color="transparent")
        bottom.grid(row=3, column=0, sticky="nsew", padx=16, pady=(0, 12))
        bottom.grid_columnconfigure((0, 1), weight=1)
        bottom.grid_rowconfigure(0, weight=1)

        self._recent_frame = ctk.CTkScrollableFrame(
            bottom, label_text="Recent Transactions", height=240
        )
        self._recent_frame.grid(row=0, column=0, sticky="nsew", padx=(0, 8))

        self._side_frame = ctk.CTkScrollableFrame(
            bottom, label_text="Recurring Expenses", height=240
        )
        self._side_frame.grid(row=0, column=1, sticky="nsew", padx=(8, 0))

    # ── Data loading ─────────────────────────────────────────────────────────

    def _load(self):
        month = self._month
        tuition = self._get_workspace() == "tuition"
        self._month_label.configure(text=friendly_month(month))
        self._status_label.configure(text="Loading...", text_color="gray60")

        def fetch():
            data = self._report_svc.get_dashboard(month)
            if tuition:
                data["stats"] = self._tuition_svc.get_stats(month)
            return data

        self._loader.run(fetch, lambda data: self._on_data_ready(data, tuition), self._on_error)

    def _on_error(self, message: str):
        self._status_label.configure(text=message, text_color="#F44336")

    def _on_data_ready(self, data: dict, tuition: bool):
        self._status_label.configure(text="")
        symbol = self._get_symbol()
        summary = data["summary"]

        for w in self._card_frame.winfo_children():
            w.destroy()
        for i, (label, value, color) in enumerate([
            ("Income", summary["income"], "#4CAF50"),
            ("Expenses", summary["expense"], "#F44336"),
            ("Balance", summary["balance"], "#2196F3" if summary["balance"] >= 0 else "#FF9800"),
        ]):
            self._make_card(self._card_frame, 0, i, label, format_currency(value, symbol), color)

        for w in self._notice_frame.winfo_children():
            w.destroy()
        if tuition:
            self._show_tuition_stats(data["stats"], symbol)

        self._show_recent(data["transactions"], symbol)
        self._show_recurring(data["recurring"], data["recurring_total"], symbol)

    def _show_tuition_stats(self, stats: dict, symbol: str):
        cards = ctk.CTkFrame(self._notice_frame, fg_color="transparent")
        cards.pack(fill="x", pady=(0, 8))
        cards.grid_columnconfigure((0, 1, 2), weight=1)
        self._make_card(cards, 0, 0, "Fees Collected",
                        format_currency(float(stats["totalCollected"] or 0), symbol), "#4CAF50")
        self._make_card(cards, 0, 1, "Fees Pending",
                        format_currency(float(stats["totalPending"] or 0), symbol), "#FF9800")
        self._make_card(cards, 0, 2, "Students Pending", str(stats["pendingCount"] or 0), "#2196F3")

        count = int(stats["pendingCount"] or 0)
        if count > 0:
            ctk.CTkLabel(
                self._notice_frame,
                text=f"⚠ {count} student{'s' if count != 1 else ''} have pending fees this month.",
                text_color="#FF9800", anchor="w",
            ).pack(fill="x", pady=(0, 6))

    def _show_recent(self, transactions, symbol: str):
        for w in self._recent_frame.winfo_children():
            w.destroy()
        if not transactions:
            ctk.CTkLabel(
                self._recent_frame, text="No transactions this month.", text_color="gray60",
            ).pack(pady=20)
            return
        for idx, tx in enumerate(transactions):
            bg = ("gray90", "gray20") if idx % 2 == 0 else ("gray86", "gray24")
            f = ctk.CTkFrame(self._recent_frame, fg_color=bg, corner_radius=4)
            f.pack(fill="x", pady=1)
            f.grid_columnconfigure(1, weight=1)

            ctk.CTkLabel(
                f, text=format_display_date(tx.date, self._date_format), width=85, anchor="w"
            ).grid(row=0, column=0, padx=6, pady=3)
            title = tx.note or f"{category_icon(tx.category)} {category_label(tx.category)}"
            ctk.CTkLabel(f, text=title, anchor="w").grid(row=0, column=1, padx=4, sticky="ew")
            ctk.CTkLabel(
                f, text=f"{_TYPE_SIGNS.get(tx.type, '')}{format_currency(tx.amount, symbol)}",
                text_color=_TYPE_COLORS.get(tx.type, "gray60"), anchor="e", width=110,
            ).grid(row=0, column=2, padx=6)

    def _show_recurring(self, expenses, total: float, symbol: str):
        for w in self._side_frame.winfo_children():
            w.destroy()
        active = [e for e in expenses if e.is_active]
        ctk.CTkLabel(
            self._side_frame,
            text=f"Active total: {format_currency(total, symbol)}",
            font=ctk.CTkFont(weight="bold"), anchor="w",
        ).pack(fill="x", padx=4, pady=(4, 6))
        if not active:
            ctk.CTkLabel(
                self._side_frame, text="No active recurring expenses.", text_color="gray60",
            ).pack(pady=20)
            return
        for expense in active:
            paid = is_paid_for_current_period(expense)
            f = ctk.CTkFrame(self._side_frame, fg_color="transparent")
            f.pack(fill="x", pady=2, padx=4)
            ctk.CTkLabel(f, text=expense.name, anchor="w").pack(side="left")
            ctk.CTkLabel(
                f, text="Paid" if paid else f"Due {next_due_display(expense)}",
                text_color="#4CAF50" if paid else "#FF9800", width=90, anchor="e",
            ).pack(side="right")
            ctk.CTkLabel(
                f, text=format_currency(expense.amount, symbol),
                text_color="gray60", anchor="e",
            ).pack(side="right", padx=8)

    def _make_card(self, parent, row, col, label, text, color):
        card = ctk.CTkFrame(parent, fg_color=("gray90", "gray20"), corner_radius=10)
        card.grid(row=row, column=col, padx=6, sticky="ew")
        card.grid_columnconfigure(0, weight=1)
        ctk.CTkLabel(
            card, text=label, font=ctk.CTkFont(size=12), text_color="gray60",
        ).grid(row=0, column=0, pady=(12, 0), padx=16)
        ctk.CTkLabel(
            card, text=text,
            font=ctk.CTkFont(size=20, weight="bold"),
            text_color=color,
        ).grid(row=1, column=0, pady=(4, 12), padx=16)
