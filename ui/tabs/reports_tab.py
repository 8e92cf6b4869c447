import csv
import logging
import tkinter as tk
from tkinter import filedialog

import customtkinter as ctk
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg
from matplotlib.figure import Figure

from api.api_client import ApiError
from services.report_service import ReportService
from ui.components.loader import BackgroundLoader
from utils.currency import format_currency
from utils.date_helpers import current_month_str, friendly_month, next_month, prev_month

logger = logging.getLogger(__name__)


class ReportsTab(ctk.CTkFrame):
    def __init__(
        self,
        master,
        report_service: ReportService,
        get_symbol,       # callable -> str
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._report_svc = report_service
        self._get_symbol = get_symbol
        self._month = current_month_str()
        self._loader = BackgroundLoader(self)

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._build_toolbar()
        self._build_summary()
        self._build_charts()
        self.after(100, self._load)

    def refresh(self):
        self._load()

    def _build_toolbar(self):
        bar = ctk.CTkFrame(self, fg_color=("gray88", "gray18"), corner_radius=8)
        bar.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 0))

        ctk.CTkLabel(bar, text="Month:").pack(side="left", padx=(12, 4), pady=8)
        ctk.CTkButton(bar, text="◀", width=28, command=self._prev_month).pack(side="left")
        self._month_label = ctk.CTkLabel(bar, text=friendly_month(self._month),
                                         width=130, anchor="center")
        self._month_label.pack(side="left", padx=4)
        ctk.CTkButton(bar, text="▶", width=28, command=self._next_month).pack(side="left", padx=(0, 12))

        self._status_label = ctk.CTkLabel(bar, text="", text_color="gray60")
        self._status_label.pack(side="left", padx=8)

        ctk.CTkButton(bar, text="Export CSV", command=self._export_csv).pack(side="right", padx=8)

    def _prev_month(self):
        self._month = prev_month(self._month)
        self._load()

    def _next_month(self):
        self._month = next_month(self._month)
        self._load()

    def _build_summary(self):
        self._summary_frame = ctk.CTkFrame(self, fg_color="transparent")
        self._summary_frame.grid(row=1, column=0, sticky="ew", padx=16, pady=10)
        self._summary_frame.grid_columnconfigure((0, 1, 2, 3), weight=1)

    def _build_charts(self):
        charts = ctk.CTkFrame(self, fg_color="transparent")
        charts.grid(row=2, column=0, sticky="nsew", padx=16, pady=(0, 12))
        charts.grid_columnconfigure(0, weight=3)
        charts.grid_columnconfigure(1, weight=2)
        charts.grid_rowconfigure(0, weight=1)

        bar_outer = ctk.CTkFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        bar_outer.grid(row=0, column=0, sticky="nsew", padx=(0, 8))
        ctk.CTkLabel(
            bar_outer, text="Monthly Income vs Expenses",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._bar_fig = Figure(figsize=(5, 3), dpi=80, tight_layout=True)
        self._bar_ax = self._bar_fig.add_subplot(111)
        self._bar_mpl = FigureCanvasTkAgg(self._bar_fig, master=bar_outer)
        self._bar_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))

        pie_outer = ctk.CTkFrame(charts, fg_color=("gray90", "gray20"), corner_radius=8)
        pie_outer.grid(row=0, column=1, sticky="nsew")
        ctk.CTkLabel(
            pie_outer, text="Expense Breakdown",
            font=ctk.CTkFont(size=13, weight="bold"),
        ).pack(pady=(10, 0))
        self._pie_fig = Figure(figsize=(3, 3), dpi=80, tight_layout=True)
        self._pie_ax = self._pie_fig.add_subplot(111)
        self._pie_mpl = FigureCanvasTkAgg(self._pie_fig, master=pie_outer)
        self._pie_mpl.get_tk_widget().pack(fill="both", expand=True, padx=8, pady=(4, 10))
        self._legend_frame = ctk.CTkFrame(pie_outer, fg_color="transparent")
        self._legend_frame.pack(fill="x", padx=8, pady=(0, 8))

    def _style_ax(self, ax, fig):
        is_dark = ctk.get_appearance_mode() == "Dark"
        bg = "#2b2b2b" if is_dark else "#e4e4e4"
        fg = "#aaaaaa" if is_dark else "#444444"
        fig.patch.set_facecolor(bg)
        ax.set_facecolor(bg)
        ax.tick_params(colors=fg, labelsize=8)
        for spine in ax.spines.values():
            spine.set_edgecolor(fg)

    # ── Data loading ─────────────────────────────────────────────────────────

    def _load(self):
        month = self._month
        self._month_label.configure(text=friendly_month(month))
        self._status_label.configure(text="Loading...", text_color="gray60")

        def fetch():
            return {
                "summary": self._report_svc.get_summary(month),
                "breakdown": self._report_svc.get_category_breakdown(month),
                "monthly": self._report_svc.get_monthly_chart_data(months=6),
            }

        self._loader.run(fetch, self._on_data_ready, self._on_error)

    def _on_error(self, message: str):
        self._status_label.configure(text=message, text_color="#F44336")

    def _on_data_ready(self, data: dict):
        self._status_label.configure(text="")
        symbol = self._get_symbol()
        summary = data["summary"]

        for w in self._summary_frame.winfo_children():
            w.destroy()
        for i, (label, text, color) in enumerate([
            ("Income", format_currency(summary["income"], symbol), "#4CAF50"),
            ("Expenses", format_currency(summary["expense"], symbol), "#F44336"),
            ("Savings", format_currency(summary["savings"], symbol),
             "#2196F3" if summary["savings"] >= 0 else "#FF9800"),
            ("Savings Rate", f"{summary['savings_rate']}%", "#2196F3"),
        ]):
            card = ctk.CTkFrame(
                self._summary_frame, fg_color=("gray90", "gray20"), corner_radius=10
            )
            card.grid(row=0, column=i, padx=6, sticky="ew")
            ctk.CTkLabel(card, text=label, text_color="gray60").pack(pady=(10, 0), padx=16)
            ctk.CTkLabel(
                card, text=text,
                font=ctk.CTkFont(size=18, weight="bold"),
                text_color=color,
            ).pack(pady=(4, 10), padx=16)

        breakdown = data["breakdown"]
        self._draw_bar_chart(data["monthly"])
        self._draw_pie_chart(breakdown)

        for w in self._legend_frame.winfo_children():
            w.destroy()
        for item in breakdown[:8]:
            row = ctk.CTkFrame(self._legend_frame, fg_color="transparent")
            row.pack(fill="x", pady=1)
            tk.Label(row, bg=item["color"], width=2).pack(side="left", padx=(0, 4))
            ctk.CTkLabel(
                row,
                text=f"{item['icon']} {item['label']}: {format_currency(item['total'], symbol)} "
                     f"({item['percentage']}%)",
                anchor="w", font=ctk.CTkFont(size=11),
            ).pack(side="left")

    # ── Chart drawing ─────────────────────────────────────────────────────────

    def _draw_bar_chart(self, data: list[dict]):
        ax = self._bar_ax
        ax.clear()
        self._style_ax(ax, self._bar_fig)

        if not data or not any(d["income"] or d["expense"] for d in data):
            ax.text(0.5, 0.5, "No data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            self._bar_mpl.draw_idle()
            return

        labels = [friendly_month(d["month"], long=False)[:3] for d in data]
        incomes = [d["income"] for d in data]
        expenses = [d["expense"] for d in data]
        x = list(range(len(labels)))
        w = 0.35
        ax.bar([i - w / 2 for i in x], incomes, w, color="#4CAF50")
        ax.bar([i + w / 2 for i in x], expenses, w, color="#F44336")
        ax.set_xticks(x)
        ax.set_xticklabels(labels)
        ax.yaxis.set_major_formatter(
            lambda v, _: f"{v/1000:.0f}k" if abs(v) >= 1000 else f"{v:.0f}"
        )
        self._bar_mpl.draw_idle()

    def _draw_pie_chart(self, breakdown: list[dict]):
        ax = self._pie_ax
        ax.clear()
        self._style_ax(ax, self._pie_fig)

        total = sum(d["total"] for d in breakdown)
        if not breakdown or total == 0:
            ax.text(0.5, 0.5, "No expense data", ha="center", va="center",
                    transform=ax.transAxes, color="gray")
            self._pie_mpl.draw_idle()
            return

        ax.pie(
            [d["total"] for d in breakdown],
            colors=[d["color"] for d in breakdown],
            startangle=90,
        )
        ax.set_aspect("equal")
        self._pie_mpl.draw_idle()

    # ── Export ───────────────────────────────────────────────────────────────

    def _export_csv(self):
        month = self._month
        path = filedialog.asksaveasfilename(
            defaultextension=".csv",
            filetypes=[("CSV files", "*.csv")],
            initialfile=f"fintrack_{month}.csv",
        )
        if not path:
            return
        try:
            rows = self._report_svc.export_csv(month)
        except ApiError as e:
            if not e.is_session_expired:
                self._on_error(e.message)
            return
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerows(rows)
        logger.info("Exported %d transactions to %s", len(rows) - 1, path)
        self._status_label.configure(text=f"Exported {len(rows) - 1} transactions.",
                                     text_color="#4CAF50")
