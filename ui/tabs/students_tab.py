import customtkinter as ctk

from api.api_client import ApiError
from models.student import Student
from services.tuition_service import fee_status, filter_students, net_monthly_fee
from services.workspace_service import WorkspaceService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.fee_payment_form import FeePaymentForm
from ui.components.loader import BackgroundLoader
from ui.components.student_form import StudentForm
from utils.currency import format_currency
from utils.date_helpers import current_month_str, format_display_date, friendly_month

_STATUS_COLORS = {"paid": "#4CAF50", "partial": "#FF9800", "unpaid": "#F44336"}


class StudentsTab(ctk.CTkFrame):
    """Student list on the left, the selected student's details and fee history on the right."""

    def __init__(
        self,
        master,
        workspace_service: WorkspaceService,
        get_wallets,      # callable -> list[Wallet]
        get_symbol,       # callable -> str
        notify_refresh,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._svc = workspace_service
        self._get_wallets = get_wallets
        self._get_symbol = get_symbol
        self._notify_refresh = notify_refresh
        self._date_format = date_format
        self._selected_id: str | None = None
        self._loader = BackgroundLoader(self)

        self._search_var = ctk.StringVar()
        self._search_var.trace_add("write", lambda *_: self._populate_list())
        self._status_var = ctk.StringVar(value="all")

        self.grid_columnconfigure(0, weight=2)
        self.grid_columnconfigure(1, weight=3)
        self.grid_rowconfigure(1, weight=1)

        self._build_toolbar()
        self._build_list()
        self._build_details()
        self._load()

    def refresh(self):
        self._load()

    # ── Layout ───────────────────────────────────────────────────────────────

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, columnspan=2, sticky="ew", padx=8, pady=(8, 0))
        ctk.CTkEntry(
            bar, textvariable=self._search_var,
            placeholder_text="Search name or phone…", width=200,
        ).pack(side="left", padx=8, pady=6)
        ctk.CTkSegmentedButton(
            bar, values=["all", "paid", "partial", "unpaid", "inactive"],
            variable=self._status_var,
            command=lambda _: self._populate_list(),
        ).pack(side="left", padx=8)
        ctk.CTkButton(bar, text="+ Add Student", command=self._open_add).pack(
            side="right", padx=8, pady=6
        )
        self._counts_label = ctk.CTkLabel(bar, text="", text_color="gray60")
        self._counts_label.pack(side="right", padx=8)

    def _build_list(self):
        self._list = ctk.CTkScrollableFrame(self)
        self._list.grid(row=1, column=0, sticky="nsew", padx=(8, 4), pady=8)
        self._list.grid_columnconfigure(0, weight=1)

    def _build_details(self):
        self._details = ctk.CTkScrollableFrame(self, fg_color=("gray90", "gray20"))
        self._details.grid(row=1, column=1, sticky="nsew", padx=(4, 8), pady=8)
        self._details.grid_columnconfigure(1, weight=1)

    # ── Loading ─────────────────────────────────────────────────────────────

    def _load(self):
        self._loader.run(self._svc.load_students, lambda _s: self._on_loaded())

    def _on_loaded(self):
        self._populate_list()
        self._show_details(self._svc.find_student(self._selected_id) if self._selected_id else None)

    def _populate_list(self):
        for w in self._list.winfo_children():
            w.destroy()

        if self._svc.students_error:
            ctk.CTkLabel(
                self._list, text=self._svc.students_error, text_color="#F44336",
            ).grid(row=0, column=0, pady=20)
            return

        month = current_month_str()
        active = self._svc.active_students()
        counts = {k: sum(1 for s in active if fee_status(s, month) == k)
                  for k in ("paid", "partial", "unpaid")}
        self._counts_label.configure(
            text=f"{len(active)} active · {counts['paid']} paid · "
                 f"{counts['partial']} partial · {counts['unpaid']} unpaid"
        )

        students = filter_students(
            self._svc.students, self._search_var.get(), self._status_var.get(), month,
        )
        if not students:
            ctk.CTkLabel(
                self._list, text="No students found.", text_color="gray60",
            ).grid(row=0, column=0, pady=20)
            return

        symbol = self._get_symbol()
        for idx, student in enumerate(students):
            status = fee_status(student, month)
            selected = student.id == self._selected_id
            bg = ("gray78", "gray28") if selected else (
                ("gray92", "gray17") if idx % 2 == 0 else ("gray88", "gray21")
            )
            row = ctk.CTkFrame(self._list, fg_color=bg, corner_radius=6)
            row.grid(row=idx, column=0, sticky="ew", pady=2, padx=2)
            row.grid_columnconfigure(0, weight=1)

            name = ctk.CTkLabel(row, text=student.name, anchor="w",
                                font=ctk.CTkFont(weight="bold"))
            name.grid(row=0, column=0, padx=8, pady=(6, 0), sticky="ew")
            sub = ctk.CTkLabel(
                row, text=f"{student.class_name or '-'} · {format_currency(net_monthly_fee(student), symbol)}/mo",
                text_color="gray60", anchor="w",
            )
            sub.grid(row=1, column=0, padx=8, pady=(0, 6), sticky="ew")
            badge = ctk.CTkLabel(
                row, text=status.title() if student.is_active else "Inactive", width=70,
                text_color=_STATUS_COLORS.get(status, "gray60") if student.is_active else "gray60",
            )
            badge.grid(row=0, column=1, rowspan=2, padx=8)

            for widget in (row, name, sub, badge):
                widget.bind("<Button-1>", lambda _e, s=student: self._select(s))

    def _select(self, student: Student):
        self._selected_id = student.id
        self._populate_list()
        self._show_details(student)

    # ── Details ─────────────────────────────────────────────────────────────

    def _show_details(self, student: Student | None):
        for w in self._details.winfo_children():
            w.destroy()
        if student is None:
            self._selected_id = None
            ctk.CTkLabel(
                self._details, text="Select a student to see their details.",
                text_color="gray60",
            ).grid(row=0, column=0, columnspan=2, pady=40)
            return

        symbol = self._get_symbol()
        ctk.CTkLabel(
            self._details, text=student.name, font=ctk.CTkFont(size=18, weight="bold"), anchor="w",
        ).grid(row=0, column=0, columnspan=2, padx=12, pady=(12, 4), sticky="ew")

        info = [
            ("Class", student.class_name or "-"),
            ("Subjects", ", ".join(student.subjects) or "-"),
            ("Phone", student.phone or "-"),
            ("Guardian", student.guardian_phone or "-"),
            ("Monthly Fee", format_currency(student.monthly_fee, symbol)),
            ("Discount", format_currency(student.discount, symbol)),
            ("Net Fee", format_currency(net_monthly_fee(student), symbol)),
            ("Admission Fee", format_currency(student.admission_fee, symbol)),
            ("Start Date", format_display_date(student.start_date, self._date_format)
             if student.start_date else "-"),
            ("Status", student.status.title()),
        ]
        for i, (label, value) in enumerate(info, start=1):
            ctk.CTkLabel(self._details, text=f"{label}:", text_color="gray60", anchor="e").grid(
                row=i, column=0, padx=(12, 6), pady=1, sticky="e"
            )
            ctk.CTkLabel(self._details, text=value, anchor="w").grid(
                row=i, column=1, padx=(0, 12), pady=1, sticky="w"
            )

        row = len(info) + 1
        acts = ctk.CTkFrame(self._details, fg_color="transparent")
        acts.grid(row=row, column=0, columnspan=2, padx=12, pady=10, sticky="w")
        ctk.CTkButton(
            acts, text="Record Payment", width=120,
            fg_color="#4CAF50", hover_color="#388E3C",
            command=lambda: self._open_payment(student),
        ).pack(side="left", padx=(0, 6))
        ctk.CTkButton(acts, text="Edit", width=60,
                      command=lambda: self._open_edit(student)).pack(side="left", padx=2)
        ctk.CTkButton(
            acts, text="Delete", width=60,
            fg_color="#F44336", hover_color="#D32F2F",
            command=lambda: self._delete(student),
        ).pack(side="left", padx=2)
        row += 1

        ctk.CTkLabel(
            self._details, text="Fee History", font=ctk.CTkFont(size=14, weight="bold"), anchor="w",
        ).grid(row=row, column=0, columnspan=2, padx=12, pady=(6, 2), sticky="ew")
        row += 1

        history = sorted(student.fee_history, key=lambda e: e.month, reverse=True)
        if not history:
            ctk.CTkLabel(self._details, text="No payments recorded yet.", text_color="gray60").grid(
                row=row, column=0, columnspan=2, pady=12
            )
            return
        table = ctk.CTkFrame(self._details, fg_color="transparent")
        table.grid(row=row, column=0, columnspan=2, padx=12, pady=(0, 12), sticky="ew")
        for col, (text, w) in enumerate([("Month", 90), ("Due", 90), ("Paid", 90),
                                         ("Remaining", 90), ("Method", 90)]):
            ctk.CTkLabel(table, text=text, width=w, anchor="w",
                         font=ctk.CTkFont(weight="bold")).grid(row=0, column=col, padx=2)
        for r, entry in enumerate(history, start=1):
            values = [
                (friendly_month(entry.month, long=False), None),
                (format_currency(entry.due, symbol), None),
                (format_currency(entry.paid, symbol), "#4CAF50"),
                (format_currency(entry.remaining, symbol),
                 "#F44336" if entry.remaining > 0 else None),
                ((entry.method or "cash").replace("_", " ").title(), None),
            ]
            for col, (text, color) in enumerate(values):
                ctk.CTkLabel(
                    table, text=text, width=90, anchor="w",
                    text_color=color or ("gray10", "gray90"),
                ).grid(row=r, column=col, padx=2)

    # ── Actions ─────────────────────────────────────────────────────────────

    def _open_add(self):
        form = StudentForm(self.winfo_toplevel(), self._svc, date_format=self._date_format)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("student")

    def _open_edit(self, student: Student):
        form = StudentForm(self.winfo_toplevel(), self._svc, student=student,
                           date_format=self._date_format)
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("student")

    def _open_payment(self, student: Student):
        form = FeePaymentForm(
            self.winfo_toplevel(), self._svc, student, self._get_wallets(),
            symbol=self._get_symbol(), date_format=self._date_format,
        )
        self.wait_window(form)
        if form.saved:
            self._notify_refresh("fee")

    def _delete(self, student: Student):
        dlg = ConfirmDialog(
            self.winfo_toplevel(), "Delete Student",
            f"Delete '{student.name}' and their fee records?",
            confirm_text="Delete",
        )
        if not dlg.result:
            return
        try:
            self._svc.delete_student(student.id)
        except ApiError as e:
            if not e.is_session_expired:
                self._show_error(e.message)
            return
        self._selected_id = None
        self._notify_refresh("student")

    def _show_error(self, message: str):
        ctk.CTkLabel(self._details, text=message, text_color="#F44336").grid(
            row=99, column=0, columnspan=2, pady=8
        )
