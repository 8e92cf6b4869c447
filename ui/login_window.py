import customtkinter as ctk

from services.session_service import SessionService, validate_login, validate_registration
from ui.components.alert_banner import show_banner
from ui.components.loader import BackgroundLoader
from utils.constants import APP_NAME, LOGIN_HEIGHT, LOGIN_WIDTH


class LoginWindow(ctk.CTk):
    """Sign-in / registration window shown before the main app.

    After mainloop() returns, .signed_in tells the caller whether to open
    the app window.
    """

    def __init__(self, session_service: SessionService, expired_message: str | None = None,
                 **kwargs):
        super().__init__(**kwargs)
        self._svc = session_service
        self._loader = BackgroundLoader(self)
        self.signed_in = False

        self.title(f"{APP_NAME} - Sign In")
        self.geometry(f"{LOGIN_WIDTH}x{LOGIN_HEIGHT}")
        self.resizable(False, False)
        self.grid_columnconfigure(0, weight=2)
        self.grid_columnconfigure(1, weight=3)
        self.grid_rowconfigure(0, weight=1)

        self._build_brand_panel()
        self._build_form_panel()

        if expired_message:
            show_banner(self._banner_frame, expired_message, severity="warning")

    # ── Layout ───────────────────────────────────────────────────────────────

    def _build_brand_panel(self):
        panel = ctk.CTkFrame(self, fg_color="#1f6aa5", corner_radius=0)
        panel.grid(row=0, column=0, sticky="nsew")
        ctk.CTkLabel(
            panel, text=f"💰 {APP_NAME}", text_color="white",
            font=ctk.CTkFont(size=28, weight="bold"),
        ).pack(pady=(120, 8), padx=24)
        ctk.CTkLabel(
            panel, text="Personal finance and tuition\nfees in one place.",
            text_color="white", font=ctk.CTkFont(size=14), justify="center",
        ).pack(padx=24)

    def _build_form_panel(self):
        panel = ctk.CTkFrame(self, fg_color="transparent")
        panel.grid(row=0, column=1, sticky="nsew", padx=32, pady=16)
        panel.grid_columnconfigure(0, weight=1)

        self._banner_frame = ctk.CTkFrame(panel, fg_color="transparent", height=0)
        self._banner_frame.grid(row=0, column=0, sticky="ew")

        self._mode_var = ctk.StringVar(value="Sign In")
        ctk.CTkSegmentedButton(
            panel, values=["Sign In", "Create Account"], variable=self._mode_var,
            command=self._on_mode_change,
        ).grid(row=1, column=0, pady=(8, 12))

        self._form = ctk.CTkFrame(panel, fg_color="transparent")
        self._form.grid(row=2, column=0, sticky="ew")
        self._form.grid_columnconfigure(0, weight=1)

        self._name_var = ctk.StringVar()
        self._email_var = ctk.StringVar()
        self._password_var = ctk.StringVar()
        self._confirm_var = ctk.StringVar()
        self._center_var = ctk.StringVar()
        self._error_var = ctk.StringVar()

        self._entries = {
            "name": ctk.CTkEntry(self._form, textvariable=self._name_var,
                                 placeholder_text="Full name"),
            "email": ctk.CTkEntry(self._form, textvariable=self._email_var,
                                  placeholder_text="Email"),
            "password": ctk.CTkEntry(self._form, textvariable=self._password_var,
                                     placeholder_text="Password", show="*"),
            "confirm": ctk.CTkEntry(self._form, textvariable=self._confirm_var,
                                    placeholder_text="Confirm password", show="*"),
            "center": ctk.CTkEntry(self._form, textvariable=self._center_var,
                                   placeholder_text="Tuition center name (optional)"),
        }

        ctk.CTkLabel(
            panel, textvariable=self._error_var, text_color="#F44336",
            wraplength=380, justify="left",
        ).grid(row=3, column=0, sticky="ew", pady=(4, 0))

        self._submit_btn = ctk.CTkButton(panel, text="Sign In", height=36, command=self._submit)
        self._submit_btn.grid(row=4, column=0, sticky="ew", pady=(8, 0))

        self.bind("<Return>", lambda _e: self._submit())
        self._on_mode_change("Sign In")

    def _on_mode_change(self, mode: str):
        register = mode == "Create Account"
        for entry in self._entries.values():
            entry.grid_forget()
        keys = ["name", "email", "password", "confirm", "center"] if register else ["email", "password"]
        for row, key in enumerate(keys):
            self._entries[key].grid(row=row, column=0, sticky="ew", pady=4)
        self._submit_btn.configure(text="Create Account" if register else "Sign In")
        self._error_var.set("")
        self._entries[keys[0]].focus_set()

    # ── Submit ───────────────────────────────────────────────────────────────

    def _submit(self):
        if self._submit_btn.cget("state") == "disabled":
            return
        register = self._mode_var.get() == "Create Account"
        email = self._email_var.get()
        password = self._password_var.get()

        if register:
            name = self._name_var.get()
            error = validate_registration(name, email, password, self._confirm_var.get())
            center = self._center_var.get()
            action = lambda: self._svc.register(name, email, password, center)
        else:
            error = validate_login(email, password)
            action = lambda: self._svc.login(email, password)
        if error:
            self._error_var.set(error)
            return

        self._error_var.set("")
        self._submit_btn.configure(state="disabled", text="Please wait...")
        self._loader.run(action, self._on_result)

    def _on_result(self, result: tuple[bool, str]):
        ok, message = result
        if ok:
            self.signed_in = True
            self.destroy()
            return
        self._submit_btn.configure(state="normal")
        self._on_mode_change(self._mode_var.get())
        self._error_var.set(message)
