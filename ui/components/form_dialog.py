import customtkinter as ctk

from api.api_client import ApiError
from ui.components.confirm_dialog import center_over


class FormDialog(ctk.CTkToplevel):
    """Base for the modal add/edit forms: label/field rows, an error line and buttons.

    Subclasses add rows in __init__ and finish with self._finish(). After the
    dialog closes, .saved tells the caller whether anything changed.
    """

    FIELD_WIDTH = 240

    def __init__(self, master, title: str, **kwargs):
        super().__init__(master, **kwargs)
        self.saved = False
        self._row = 0
        self.title(title)
        self.resizable(False, False)
        self.grid_columnconfigure(1, weight=1)
        self._error_var = ctk.StringVar()

    # ── Row builders ─────────────────────────────────────────────────────────

    def _add_label(self, text: str):
        ctk.CTkLabel(self, text=text).grid(
            row=self._row, column=0, padx=(16, 8), pady=4, sticky="e"
        )

    def _add_widget(self, label: str, widget, sticky: str = "ew"):
        self._add_label(label)
        widget.grid(row=self._row, column=1, padx=(0, 16), pady=4, sticky=sticky)
        self._row += 1
        return widget

    def _add_entry(self, label: str, value: str = "", **entry_kwargs) -> ctk.StringVar:
        var = ctk.StringVar(value=value)
        self._add_widget(label, ctk.CTkEntry(
            self, textvariable=var, width=self.FIELD_WIDTH, **entry_kwargs
        ))
        return var

    def _add_combo(self, label: str, values: list[str], value: str = "",
                   command=None) -> tuple[ctk.StringVar, ctk.CTkComboBox]:
        var = ctk.StringVar(value=value or (values[0] if values else ""))
        combo = ctk.CTkComboBox(
            self, values=values, variable=var, width=self.FIELD_WIDTH,
            state="readonly", command=command,
        )
        self._add_widget(label, combo)
        return var, combo

    def _add_hint(self, text: str):
        ctk.CTkLabel(
            self, text=text, text_color="gray60", font=ctk.CTkFont(size=11),
            wraplength=self.FIELD_WIDTH, justify="left",
        ).grid(row=self._row, column=1, padx=(0, 16), pady=(0, 4), sticky="w")
        self._row += 1

    def _finish(self, save_text: str = "Save", on_delete=None):
        ctk.CTkLabel(
            self, textvariable=self._error_var,
            text_color="#F44336", wraplength=300, anchor="w", justify="left",
        ).grid(row=self._row, column=0, columnspan=2, padx=16, pady=(0, 4), sticky="ew")
        self._row += 1

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=self._row, column=0, columnspan=2, padx=16, pady=(4, 16), sticky="ew")
        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self.destroy,
        ).pack(side="left")
        if on_delete:
            ctk.CTkButton(
                btn_frame, text="Delete", width=80,
                fg_color="#F44336", hover_color="#D32F2F",
                command=on_delete,
            ).pack(side="left", padx=8)
        ctk.CTkButton(btn_frame, text=save_text, width=90, command=self._on_save).pack(side="right")

        self.bind("<Escape>", lambda _e: self.destroy())
        self.transient(self.master)
        self.grab_set()
        center_over(self, self.master)

    # ── Saving ───────────────────────────────────────────────────────────────

    def _on_save(self):
        raise NotImplementedError

    def _submit(self, action) -> bool:
        """Run action(); on success mark saved and close, else show the error."""
        self._error_var.set("")
        try:
            action()
        except ValueError as e:
            self._error_var.set(str(e))
            return False
        except ApiError as e:
            if e.is_session_expired:
                self.destroy()
                return False
            self._error_var.set(e.message)
            return False
        self.saved = True
        self.destroy()
        return True

    def _parse_amount(self, var: ctk.StringVar, label: str = "amount",
                      allow_zero: bool = False) -> float | None:
        text = var.get().replace(",", "").strip()
        try:
            amount = float(text)
        except ValueError:
            self._error_var.set(f"Invalid {label}.")
            return None
        if amount < 0 or (amount == 0 and not allow_zero):
            self._error_var.set(f"{label.capitalize()} must be positive.")
            return None
        return amount
