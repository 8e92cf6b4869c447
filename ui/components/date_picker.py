import tkinter as tk
from tkinter import ttk

import customtkinter as ctk
from tkcalendar import Calendar

from utils.date_helpers import (
    format_date, format_display_date, parse_date, parse_display_date, parse_month, today,
)

_MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
                "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


class DatePickerWidget(ctk.CTkFrame):
    """CTkEntry in the user's display format plus a calendar popup button.

    .get() always returns a YYYY-MM-DD string for the API.
    .set(date_str) accepts YYYY-MM-DD and converts to the display format.
    """

    def __init__(
        self,
        master,
        initial_date: str | None = None,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self.grid_columnconfigure(0, weight=1)

        self._date_format = date_format
        self._popup: ctk.CTkToplevel | None = None
        self._var = tk.StringVar(
            value=format_display_date(initial_date, date_format) if initial_date else ""
        )

        self._entry = ctk.CTkEntry(self, textvariable=self._var, width=110)
        self._entry.grid(row=0, column=0, sticky="ew")
        self._entry.bind("<FocusOut>", self._on_focus_out)
        self._entry.bind("<Return>", self._on_focus_out)

        ctk.CTkButton(self, text="📅", width=32, command=self._open_popup).grid(
            row=0, column=1, padx=(4, 0)
        )

    def _parsed(self):
        raw = self._var.get().strip()
        if not raw:
            return None
        return parse_display_date(raw, self._date_format) or parse_date(
            raw.replace("/", "-").replace(".", "-")
        )

    def get(self) -> str:
        """Return YYYY-MM-DD, '' when empty, or the raw text when unparseable."""
        d = self._parsed()
        if d:
            return format_date(d)
        return self._var.get().strip()

    def set(self, date_str: str):
        d = parse_date(date_str) if date_str else None
        self._var.set(format_display_date(format_date(d), self._date_format) if d else (date_str or ""))
        self._reset_border()

    def is_valid(self) -> bool:
        return self._parsed() is not None

    def _on_focus_out(self, _event=None):
        if not self._var.get().strip():
            self._reset_border()
            return
        d = self._parsed()
        if d:
            self._var.set(format_display_date(format_date(d), self._date_format))
            self._reset_border()
        else:
            self._entry.configure(border_color="#F44336")

    def _reset_border(self):
        self._entry.configure(border_color=("gray65", "gray35"))

    def _open_popup(self):
        if self._popup and self._popup.winfo_exists():
            self._popup.destroy()
            self._popup = None
            return

        popup = ctk.CTkToplevel(self)
        popup.overrideredirect(True)
        popup.resizable(False, False)
        self._popup = popup

        if ctk.get_appearance_mode() == "Dark":
            bg, fg = "#2b2b2b", "#ffffff"
        else:
            bg, fg = "#ffffff", "#000000"
        style = ttk.Style(popup)
        style.theme_use("default")
        style.configure("Calendar.Treeview", background=bg, foreground=fg, fieldbackground=bg)

        current = self._parsed() or today()
        cal = Calendar(
            popup,
            selectmode="day",
            year=current.year,
            month=current.month,
            day=current.day,
            date_pattern="yyyy-mm-dd",
            background=bg,
            foreground=fg,
            headersbackground=bg,
            headersforeground=fg,
            selectbackground="#1f6aa5",
            weekendbackground=bg,
            weekendforeground=fg,
            othermonthforeground="gray60",
            bordercolor=bg,
        )
        cal.pack(padx=4, pady=4)
        cal.bind("<<CalendarSelected>>", lambda e: self._on_date_selected(cal, popup))

        self._entry.update_idletasks()
        x = self._entry.winfo_rootx()
        y = self._entry.winfo_rooty() + self._entry.winfo_height() + 2
        popup.geometry(f"+{x}+{y}")
        popup.bind("<FocusOut>", lambda e: self._maybe_close(popup))

    def _on_date_selected(self, cal, popup):
        # tkcalendar hands back yyyy-mm-dd
        self.set(cal.get_date())
        popup.destroy()
        self._popup = None

    def _maybe_close(self, popup):
        try:
            focused = popup.focus_get()
        except (KeyError, tk.TclError):
            # focus moved to a widget tkinter cannot name (e.g. a CTk internal)
            focused = None
        if focused is None or not str(focused).startswith(str(popup)):
            popup.destroy()
            self._popup = None


class MonthPickerWidget(ctk.CTkFrame):
    """Month + year combos for YYYY-MM values. .get() returns '' when allow_empty and unset."""

    def __init__(self, master, initial_month: str | None = None,
                 allow_empty: bool = False, years_back: int = 3, years_ahead: int = 5,
                 command=None, **kwargs):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._command = command
        this_year = today().year
        years = [str(y) for y in range(this_year - years_back, this_year + years_ahead + 1)]
        months = (["-"] if allow_empty else []) + _MONTH_NAMES

        d = parse_month(initial_month) if initial_month else None
        if d is None and not allow_empty:
            d = today()
        if d is not None and str(d.year) not in years:
            years.insert(0, str(d.year))

        self._month_var = ctk.StringVar(value=_MONTH_NAMES[d.month - 1] if d else "-")
        self._year_var = ctk.StringVar(value=str(d.year) if d else str(this_year))

        ctk.CTkComboBox(
            self, values=months, variable=self._month_var, width=80, state="readonly",
            command=self._on_change,
        ).pack(side="left")
        ctk.CTkComboBox(
            self, values=years, variable=self._year_var, width=90, state="readonly",
            command=self._on_change,
        ).pack(side="left", padx=(6, 0))

    def _on_change(self, _value=None):
        if self._command and self.get():
            self._command(self.get())

    def get(self) -> str:
        name = self._month_var.get()
        if name not in _MONTH_NAMES:
            return ""
        return f"{self._year_var.get()}-{_MONTH_NAMES.index(name) + 1:02d}"

    def set(self, month_str: str | None):
        d = parse_month(month_str) if month_str else None
        self._month_var.set(_MONTH_NAMES[d.month - 1] if d else "-")
        if d:
            self._year_var.set(str(d.year))
