import customtkinter as ctk


class ConfirmDialog(ctk.CTkToplevel):
    """Modal yes/no question. Blocks until closed; read .result afterwards.

    danger=False renders the confirm button in the default accent colour,
    for questions like "Log out?" that destroy nothing.
    """

    def __init__(self, master, title: str, message: str,
                 confirm_text: str = "Confirm", danger: bool = True, **kwargs):
        super().__init__(master, **kwargs)
        self.title(title)
        self.result = False
        self.resizable(False, False)

        self.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            self, text=message, wraplength=360, justify="left", padx=20, pady=16
        ).grid(row=0, column=0, sticky="ew")

        btn_frame = ctk.CTkFrame(self, fg_color="transparent")
        btn_frame.grid(row=1, column=0, pady=(0, 16), padx=20, sticky="e")

        ctk.CTkButton(
            btn_frame, text="Cancel", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._close,
        ).pack(side="left", padx=(0, 8))

        colors = {"fg_color": "#F44336", "hover_color": "#D32F2F"} if danger else {}
        ctk.CTkButton(
            btn_frame, text=confirm_text, width=90,
            command=lambda: self._close(True), **colors,
        ).pack(side="left")

        self.bind("<Escape>", lambda _e: self._close())
        self.transient(master)
        self.grab_set()
        center_over(self, master)
        self.wait_window()

    def _close(self, result: bool = False):
        self.result = result
        self.destroy()


def center_over(window, master):
    """Place a toplevel over the middle of its master window."""
    window.update_idletasks()
    mx = master.winfo_x() + master.winfo_width() // 2
    my = master.winfo_y() + master.winfo_height() // 2
    w, h = window.winfo_reqwidth(), window.winfo_reqheight()
    window.geometry(f"+{mx - w // 2}+{my - h // 2}")
