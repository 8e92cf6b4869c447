import customtkinter as ctk

from services.tuition_service import TuitionService, pending_fees, total_collected
from services.workspace_service import WorkspaceService
from ui.components.date_picker import MonthPickerWidget
from ui.components.fee_payment_form import FeePaymentForm
from ui.components.loader import BackgroundLoader
from utils.currency import format_currency
from utils.date_helpers import current_month_str, format_display_date, friendly_month

_ALL_STUDENTS = "All Students"
_FETCH_LIMIT = 50


class TuitionFeesTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        tuition_service: TuitionService,
        workspace_service: WorkspaceService,
        get_wallets,      # callable -> list[Wallet]
        get_symbol,       # callable -> str
        notify_refresh,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._tuition_svc = tuition_service
        self._ws_svc = workspace_service
        self._get_wallets = get_wallets
        self._get_symbol = get_symbol
        self._notify_refresh = notify_refresh
        self._date_format = date_format
        self._student_var = ctk.StringVar(value=_ALL_STUDENTS)
        self._loader = BackgroundLoader(self)

        self.grid_columnconfigure(0, weight=3)
        self.grid_columnconfigure(1, weight=2)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_summary()
        self._build_records()
        self._build_pending()
        self._load()

    def refresh(self):
        self._load()

    # ── Layout ───────────────────────────────────────────────────────────────

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, columnspan=2, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkLabel(bar, text="Month:").pack(side="left", padx=(12, 4), pady=8)
        self._month_picker = MonthPickerWidget(
            bar, current_month_str(), command=lambda _m: self._load(),
        )
        self._month_picker.pack(side="left", padx=(0, 12))
        ctk.CTkLabel(bar, text="Student:").pack(side="left", padx=(0, 4))
        self._student_combo = ctk.CTkComboBox(
            bar, values=[_ALL_STUDENTS], variable=self._student_var, width=180,
            state="readonly", command=lambda _: self._load(),
        )
        self._student_combo.pack(side="left")

    def _build_summary(self):
        frame = ctk.CTkFrame(self, fg_color="transparent")
        frame.grid(row=1, column=0, columnspan=2, sticky="ew", padx=16, pady=10)
        frame.grid_columnconfigure((0, 1, 2), weight=1)
        self._collected_label = self._make_card(frame, 0, "Total Collected", "#4CAF50")
        self._count_label = self._make_card(frame, 1, "Payments", "#2196F3")
        self._pending_label = self._make_card(frame, 2, "Outstanding", "#FF9800")

    def _make_card(self, parent, col, title, color) -> ctk.CTkLabel:
        card = ctk.CTkFrame(parent, fg_color=("gray90", "gray20"), corner_radius=10)
        card.grid(row=0, column=col, padx=6, sticky="ew")
        ctk.CTkLabel(card, text=title, text_color="gray60").pack(pady=(10, 0), padx=16)
        value = ctk.CTkLabel(card, text="-", font=ctk.CTkFont(size=18, weight="bold"),
                             text_color=color)
        value.pack(pady=(4, 10), padx=16)
        return value

    def _build_records(self):
        self._records = ctk.CTkScrollableFrame(self, label_text="Fee Records")
        self._records.grid(row=2, column=0, sticky="nsew", padx=(8, 4), pady=(0, 8))
        self._records.grid_columnconfigure(0, weight=1)

    def _build_pending(self):
        self._pending = ctk.CTkScrollableFrame(self, label_text="Pending Fees")
        self._pending.grid(row=2, column=1, sticky="nsew", padx=(4, 8), pady=(0, 8))
        self._pending.grid_columnconfigure(0, weight=1)

    # ── Loading ─────────────────────────────────────────────────────────────

    def _selected_student(self):
        name = self._student_var.get()
        return next((s for s in self._ws_svc.students if s.name == name), None)

    def _load(self):
        month = self._month_picker.get()
        student = self._selected_student()
        filters = {"limit": _FETCH_LIMIT}
        if student:
            filters["studentId"] = student.id

        for w in self._records.winfo_children():
            w.destroy()
        ctk.CTkLabel(self._records, text="Loading fee records...", text_color="gray60").grid(
            row=0, column=0, pady=20
        )

        def fetch():
            if not self._ws_svc.students:
                self._ws_svc.load_students()
            return self._tuition_svc.get_all_fee_payments(month, **filters)

        self._loader.run(fetch, lambda payments: self._show(month, payments), self._on_error)

    def _on_error(self, message: str):
        for w in self._records.winfo_children():
            w.destroy()
        ctk.CTkLabel(self._records, text=message or "Failed to load fee records",
                     text_color="#F44336").grid(row=0, column=0, pady=20)

    def _show(self, month: str, payments: list[dict]):
        symbol = self._get_symbol()
        self._student_combo.configure(values=[_ALL_STUDENTS] + [s.name for s in self._ws_svc.students])
        self._collected_label.configure(text=format_currency(total_collected(payments), symbol))
        self._count_label.configure(text=str(len(payments)))

        for w in self._records.winfo_children():
            w.destroy()
        if not payments:
            ctk.CTkLabel(
                self._records, text=f"No fee records for {friendly_month(month)}.",
                text_color="gray60",
            ).grid(row=0, column=0, pady=20)
        for idx, payment in enumerate(payments):
            self._add_record(idx, payment, symbol)

        self._show_pending(month, symbol)

    def _add_record(self, idx: int, payment: dict, symbol: str):
        bg = ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
        card = ctk.CTkFrame(self._records, fg_color=bg, corner_radius=6)
        card.grid(row=idx, column=0, sticky="ew", pady=2, padx=2)
        card.grid_columnconfigure(0, weight=1)

        title = payment.get("studentName") or "-"
        if payment.get("studentClass"):
            title += f"  ·  {payment['studentClass']}"
        ctk.CTkLabel(card, text=title, font=ctk.CTkFont(weight="bold"), anchor="w").grid(
            row=0, column=0, padx=8, pady=(6, 0), sticky="ew"
        )
        ctk.CTkLabel(
            card, text=format_currency(float(payment.get("paid") or 0), symbol),
            text_color="#4CAF50", font=ctk.CTkFont(weight="bold"),
        ).grid(row=0, column=1, padx=8, pady=(6, 0))

        remaining = float(payment.get("remaining") or 0)
        date = payment.get("paymentDate") or payment.get("date")
        parts = [
            f"Due {format_currency(float(payment.get('due') or 0), symbol)}",
            (payment.get("method") or "cash").replace("_", " ").title(),
            format_display_date(date[:10], self._date_format) if date else "N/A",
        ]
        if remaining > 0:
            parts.insert(1, f"Remaining {format_currency(remaining, symbol)}")
        ctk.CTkLabel(card, text=" · ".join(parts), text_color="gray60", anchor="w").grid(
            row=1, column=0, columnspan=2, padx=8, pady=(0, 2), sticky="ew"
        )
        if payment.get("notes"):
            ctk.CTkLabel(card, text=f"Notes: {payment['notes']}", text_color="gray60",
                         anchor="w").grid(row=2, column=0, columnspan=2, padx=8, sticky="ew")

    def _show_pending(self, month: str, symbol: str):
        for w in self._pending.winfo_children():
            w.destroy()
        rows = pending_fees(self._ws_svc.students, month)
        self._pending_label.configure(
            text=format_currency(sum(e.remaining for _, e in rows), symbol)
        )
        if not rows:
            ctk.CTkLabel(self._pending, text="All fees are settled.", text_color="gray60").grid(
                row=0, column=0, pady=20
            )
            return
        for idx, (student, entry) in enumerate(rows):
            f = ctk.CTkFrame(self._pending, fg_color="transparent")
            f.grid(row=idx, column=0, sticky="ew", pady=2, padx=4)
            f.grid_columnconfigure(0, weight=1)
            ctk.CTkLabel(f, text=student.name, anchor="w").grid(row=0, column=0, sticky="ew")
            ctk.CTkLabel(
                f, text=format_currency(entry.remaining, symbol), text_color="#F44336",
            ).grid(row=0, column=1, padx=6)
            ctk.CTkButton(
                f, text="Collect", width=64, height=24,
                command=lambda s=student: self._open_payment(s, month),
            ).grid(row=0, column=2)

    def _open_payment(self, student, month: str):
        form = FeePaymentForm(
            self.winfo_toplevel(), self._ws_svc, student, self._get_wallets(),
            symbol=self._get_symbol(), date_format=self._date_format, month=month,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("fee")
