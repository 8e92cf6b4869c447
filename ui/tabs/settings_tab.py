import customtkinter as ctk
from tkinter import filedialog

from api.api_client import ApiError
from services.session_service import SessionService
from services.user_service import UserService
from services.workspace_service import WorkspaceService
from ui.components.confirm_dialog import ConfirmDialog
from ui.components.form_dialog import FormDialog
from utils import app_config
from utils.constants import CURRENCIES
from utils.date_helpers import DATE_FORMAT_OPTIONS


class SettingsTab(ctk.CTkFrame):
    """Settings tab: profile, account preferences, app preferences and security."""

    def __init__(
        self,
        master,
        session_service: SessionService,
        user_service: UserService,
        workspace_service: WorkspaceService,
        notify_refresh,
        on_signed_out,    # callable, run after logout or account deletion
        **kwargs,
    ):
        super().__init__(master, fg_color="transparent", **kwargs)
        self._session_svc = session_service
        self._user_svc = user_service
        self._ws_svc = workspace_service
        self._notify_refresh = notify_refresh
        self._on_signed_out = on_signed_out

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(0, weight=1)

        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.grid(row=0, column=0, sticky="nsew")
        scroll.grid_columnconfigure(0, weight=1)

        self._build_profile_section(scroll)
        self._build_preferences_section(scroll)
        self._build_app_settings_section(scroll)
        self._build_security_section(scroll)
        self.refresh()

    def refresh(self):
        """Re-read the signed-in user and local config into the form."""
        user = self._session_svc.user
        if user:
            self._name_var.set(user.full_name)
            self._email_var.set(user.email)
            self._center_var.set(user.tuition_center_name or "")
            self._avatar_var.set(user.avatar or "No avatar uploaded")
            self._currency_var.set(user.settings.currency)
            self._notifications_var.set(user.settings.notifications_enabled)
            self._dark_mode_var.set(user.settings.dark_mode_enabled)

        appearance = app_config.get_setting("appearance_mode", "system")
        self._appearance_var.set(appearance.title() if appearance != "system" else "System")
        date_fmt = app_config.get_setting("date_format", "MM/DD/YYYY")
        if date_fmt in DATE_FORMAT_OPTIONS:
            self._date_fmt_var.set(date_fmt)
        self._api_url_var.set(app_config.get_api_url())

    # ── Section 1: Profile ────────────────────────────────────────────────────

    def _build_profile_section(self, parent):
        section = self._make_section(parent, "Profile", row=0)

        self._name_var = ctk.StringVar()
        self._email_var = ctk.StringVar()
        self._center_var = ctk.StringVar()
        self._avatar_var = ctk.StringVar()

        self._add_row(section, 0, "Full Name:", ctk.CTkEntry(section, textvariable=self._name_var, width=260))
        self._add_row(section, 1, "Email:", ctk.CTkEntry(
            section, textvariable=self._email_var, width=260, state="readonly",
        ))
        self._add_row(section, 2, "Tuition Center:", ctk.CTkEntry(
            section, textvariable=self._center_var, width=260,
        ))

        avatar = ctk.CTkFrame(section, fg_color="transparent")
        ctk.CTkLabel(avatar, textvariable=self._avatar_var, text_color="gray60",
                     anchor="w", width=200).pack(side="left")
        ctk.CTkButton(
            avatar, text="Upload…", width=90,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._upload_avatar,
        ).pack(side="left", padx=(8, 0))
        self._add_row(section, 3, "Avatar:", avatar)

        ctk.CTkButton(
            section, text="Save Profile", width=140, command=self._save_profile,
        ).grid(row=4, column=0, columnspan=2, pady=(10, 4))
        self._profile_status = self._status_label(section, 5)

    def _save_profile(self):
        if self._run(
            lambda: self._ws_svc.update_profile(self._name_var.get(), self._center_var.get()),
            self._profile_status,
        ):
            self._session_svc.refresh_user()
            self._profile_status.configure(text="Profile updated.", text_color="#4CAF50")

    def _upload_avatar(self):
        path = filedialog.askopenfilename(
            title="Choose Avatar",
            filetypes=[("Images", "*.png *.jpg *.jpeg *.webp")],
        )
        if not path:
            return
        if self._run(lambda: self._user_svc.upload_avatar(path), self._profile_status):
            self.refresh()
            self._profile_status.configure(text="Avatar uploaded.", text_color="#4CAF50")

    # ── Section 2: Account preferences (stored on the server) ───────────────

    def _build_preferences_section(self, parent):
        section = self._make_section(parent, "Preferences", row=1)

        self._currency_var = ctk.StringVar(value=CURRENCIES[0])
        self._add_row(section, 0, "Currency:", ctk.CTkComboBox(
            section, values=CURRENCIES, variable=self._currency_var, width=180, state="readonly",
        ))
        self._notifications_var = ctk.BooleanVar(value=True)
        self._add_row(section, 1, "", ctk.CTkSwitch(
            section, text="Notifications", variable=self._notifications_var,
        ))
        self._dark_mode_var = ctk.BooleanVar(value=False)
        self._add_row(section, 2, "", ctk.CTkSwitch(
            section, text="Dark mode", variable=self._dark_mode_var,
        ))

        ctk.CTkButton(
            section, text="Save Preferences", width=140, command=self._save_preferences,
        ).grid(row=3, column=0, columnspan=2, pady=(10, 4))
        self._prefs_status = self._status_label(section, 4)

    def _save_preferences(self):
        dark = self._dark_mode_var.get()
        if self._run(
            lambda: self._user_svc.update_settings(
                currency=self._currency_var.get(),
                notifications_enabled=self._notifications_var.get(),
                dark_mode_enabled=dark,
            ),
            self._prefs_status,
        ):
            ctk.set_appearance_mode("dark" if dark else "light")
            app_config.set_setting("appearance_mode", "dark" if dark else "light")
            self._appearance_var.set("Dark" if dark else "Light")
            self._prefs_status.configure(text="Preferences saved.", text_color="#4CAF50")
            self._notify_refresh("full")

    # ── Section 3: App settings (this computer only) ─────────────────────────

    def _build_app_settings_section(self, parent):
        section = self._make_section(parent, "App Settings", row=2)

        self._appearance_var = ctk.StringVar(value="System")
        self._add_row(section, 0, "Appearance:", ctk.CTkComboBox(
            section, values=["System", "Light", "Dark"], variable=self._appearance_var,
            width=180, state="readonly",
        ))
        self._date_fmt_var = ctk.StringVar(value="MM/DD/YYYY")
        self._add_row(section, 1, "Date Format:", ctk.CTkComboBox(
            section, values=DATE_FORMAT_OPTIONS, variable=self._date_fmt_var,
            width=180, state="readonly",
        ))
        self._api_url_var = ctk.StringVar()
        self._add_row(section, 2, "Server URL:", ctk.CTkEntry(
            section, textvariable=self._api_url_var, width=260,
        ))

        ctk.CTkLabel(
            section,
            text="Date format and server URL changes take effect on next app restart.",
            text_color="gray60",
            font=ctk.CTkFont(size=11),
            anchor="w",
        ).grid(row=3, column=0, columnspan=2, sticky="w", padx=8)

        ctk.CTkButton(
            section, text="Save Settings", width=140,
            command=self._save_settings,
        ).grid(row=4, column=0, columnspan=2, pady=(10, 4))
        self._settings_status = self._status_label(section, 5)

    def _save_settings(self):
        appearance_key = self._appearance_var.get().lower()
        url = self._api_url_var.get().strip()
        if url and not url.startswith(("http://", "https://")):
            self._settings_status.configure(
                text="Server URL must start with http:// or https://", text_color="#F44336",
            )
            return

        app_config.set_setting("appearance_mode", appearance_key)
        app_config.set_setting("date_format", self._date_fmt_var.get())
        app_config.set_api_url(url or None)
        ctk.set_appearance_mode(appearance_key)
        self._settings_status.configure(text="Settings saved.", text_color="#4CAF50")

    # ── Section 4: Security ──────────────────────────────────────────────────

    def _build_security_section(self, parent):
        section = self._make_section(parent, "Security", row=3)
        btn_frame = ctk.CTkFrame(section, fg_color="transparent")
        btn_frame.grid(row=0, column=0, columnspan=2, sticky="w", padx=8, pady=6)

        ctk.CTkButton(
            btn_frame, text="Change Password", width=140,
            command=self._change_password,
        ).pack(side="left", padx=4)
        ctk.CTkButton(
            btn_frame, text="Log Out", width=100,
            fg_color="transparent", border_width=1,
            text_color=("gray10", "gray90"),
            command=self._logout,
        ).pack(side="left", padx=4)
        ctk.CTkButton(
            btn_frame, text="Delete Account", width=130,
            fg_color="#F44336", hover_color="#D32F2F",
            command=self._delete_account,
        ).pack(side="left", padx=4)
        self._security_status = self._status_label(section, 1)

    def _change_password(self):
        dlg = _ChangePasswordDialog(self.winfo_toplevel(), self._user_svc)
        self.wait_window(dlg)
        if dlg.saved:
            self._security_status.configure(text="Password changed.", text_color="#4CAF50")

    def _logout(self):
        dlg = ConfirmDialog(
            self.winfo_toplevel(), "Log Out", "Log out of FinTrack?",
            confirm_text="Log Out", danger=False,
        )
        if dlg.result:
            self._session_svc.logout()
            self._on_signed_out()

    def _delete_account(self):
        dlg = _DeleteAccountDialog(self.winfo_toplevel(), self._user_svc)
        self.wait_window(dlg)
        if dlg.saved:
            self._on_signed_out()

    # ── Helpers ───────────────────────────────────────────────────────────────

    def _run(self, action, status_label) -> bool:
        status_label.configure(text="")
        try:
            action()
        except ValueError as e:
            status_label.configure(text=str(e), text_color="#F44336")
            return False
        except ApiError as e:
            if not e.is_session_expired:
                status_label.configure(text=e.message, text_color="#F44336")
            return False
        return True

    def _add_row(self, section, row: int, label: str, widget):
        ctk.CTkLabel(section, text=label, anchor="e", width=120).grid(
            row=row, column=0, padx=(8, 4), pady=6, sticky="e"
        )
        widget.grid(row=row, column=1, padx=4, pady=6, sticky="w")

    def _status_label(self, section, row: int) -> ctk.CTkLabel:
        label = ctk.CTkLabel(section, text="", font=ctk.CTkFont(size=11))
        label.grid(row=row, column=0, columnspan=2, pady=(0, 8))
        return label

    def _make_section(self, parent, title: str, row: int) -> ctk.CTkFrame:
        """Create a labelled card section and return its inner frame."""
        outer = ctk.CTkFrame(parent, corner_radius=8)
        outer.grid(row=row, column=0, sticky="ew", padx=12, pady=8)
        outer.grid_columnconfigure(0, weight=1)

        ctk.CTkLabel(
            outer,
            text=title,
            font=ctk.CTkFont(size=14, weight="bold"),
            anchor="w",
        ).grid(row=0, column=0, sticky="w", padx=12, pady=(10, 4))

        inner = ctk.CTkFrame(outer, fg_color="transparent")
        inner.grid(row=1, column=0, sticky="ew", padx=4, pady=(0, 8))
        inner.grid_columnconfigure(1, weight=1)
        return inner


class _ChangePasswordDialog(FormDialog):
    def __init__(self, master, user_service: UserService):
        super().__init__(master, "Change Password")
        self._svc = user_service
        self._current_var = self._add_entry("Current Password:", show="*")
        self._new_var = self._add_entry("New Password:", show="*")
        self._confirm_var = self._add_entry("Confirm Password:", show="*")
        self._finish(save_text="Change")

    def _on_save(self):
        self._submit(lambda: self._svc.change_password(
            self._current_var.get(), self._new_var.get(), self._confirm_var.get(),
        ))


class _DeleteAccountDialog(FormDialog):
    """Asks for the password, then deletes the account and signs out."""

    def __init__(self, master, user_service: UserService):
        super().__init__(master, "Delete Account")
        self._svc = user_service
        self._add_hint("This permanently deletes your account and all of its data.")
        self._password_var = self._add_entry("Password:", show="*")
        self._finish(save_text="Delete")

    def _on_save(self):
        self._submit(lambda: self._svc.delete_account(self._password_var.get()))
