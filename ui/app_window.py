import logging

import customtkinter as ctk

from api.session import Session
from models.wallet import Wallet
from services.recurring_service import RecurringService
from services.report_service import ReportService
from services.session_service import SessionService
from services.transaction_service import TransactionService
from services.tuition_service import TuitionService
from services.user_service import UserService
from services.wallet_service import WalletService
from services.workspace_service import WorkspaceService
from ui.components.alert_banner import show_banner
from ui.components.loader import BackgroundLoader
from ui.components.tuition_setup_dialog import TuitionSetupDialog
from ui.tabs.dashboard_tab import DashboardTab
from ui.tabs.recurring_tab import RecurringTab
from ui.tabs.reports_tab import ReportsTab
from ui.tabs.settings_tab import SettingsTab
from ui.tabs.students_tab import StudentsTab
from ui.tabs.transactions_tab import TransactionsTab
from ui.tabs.tuition_fees_tab import TuitionFeesTab
from ui.tabs.wallets_tab import WalletsTab
from utils.constants import APP_HEIGHT, APP_NAME, APP_WIDTH
from utils.currency import currency_symbol

logger = logging.getLogger(__name__)

_TAB_LAYOUT = {
    "personal": [
        ("dashboard", "Dashboard"), ("wallets", "Wallets"), ("transactions", "Transactions"),
        ("recurring", "Recurring"), ("reports", "Reports"), ("settings", "Settings"),
    ],
    "tuition": [
        ("dashboard", "Dashboard"), ("students", "Students"), ("fees", "Fees"),
        ("wallets", "Wallets"), ("transactions", "Transactions"), ("settings", "Settings"),
    ],
}

_REFRESH_SCOPES: dict[str, set[str]] = {
    "transaction": {"dashboard", "wallets", "transactions", "reports"},
    "wallet":      {"dashboard", "wallets", "transactions"},
    "recurring":   {"dashboard", "recurring"},
    "payment":     {"dashboard", "recurring", "wallets", "transactions", "reports"},
    "student":     {"dashboard", "students", "fees"},
    "fee":         {"dashboard", "students", "fees", "wallets", "transactions"},
    "full":        {"dashboard", "wallets", "transactions", "recurring", "reports",
                    "students", "fees", "settings"},
}


class AppWindow(ctk.CTk):
    """Main window for a signed-in user.

    After mainloop() returns, .signed_out tells the caller to show the
    login window again instead of exiting.
    """

    def __init__(
        self,
        session: Session,
        session_service: SessionService,
        user_service: UserService,
        workspace_service: WorkspaceService,
        wallet_service: WalletService,
        tx_service: TransactionService,
        recurring_service: RecurringService,
        report_service: ReportService,
        tuition_service: TuitionService,
        date_format: str = "MM/DD/YYYY",
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._session = session
        self._session_svc = session_service
        self._user_svc = user_service
        self._ws_svc = workspace_service
        self._wallet_svc = wallet_service
        self._tx_svc = tx_service
        self._recurring_svc = recurring_service
        self._report_svc = report_service
        self._tuition_svc = tuition_service
        self._date_format = date_format
        self._loader = BackgroundLoader(self)

        self.signed_out = False
        self._wallets: list[Wallet] = []
        self._tabs: dict[str, ctk.CTkFrame] = {}
        self._tabview = None

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(2, weight=1)

        self._sync_workspace(self._ws_svc.workspace)
        self._build_header()
        self._build_banner_area()
        self._build_tabs()

        self._session.on_expired(self._on_expired_signal)
        self.protocol("WM_DELETE_WINDOW", self.close)
        self._loader.run(self._load_workspace_data, self._on_workspace_data)

    # ── Header ───────────────────────────────────────────────────────────────

    def _build_header(self):
        bar = ctk.CTkFrame(self, fg_color=("gray85", "gray15"), corner_radius=0, height=48)
        bar.grid(row=0, column=0, sticky="ew")
        bar.pack_propagate(False)

        ctk.CTkLabel(
            bar, text=f"💰 {APP_NAME}", font=ctk.CTkFont(size=16, weight="bold"),
        ).pack(side="left", padx=(12, 16), pady=8)

        self._ws_var = ctk.StringVar(value=self._ws_svc.workspace.title())
        self._ws_switch = ctk.CTkSegmentedButton(
            bar, values=["Personal", "Tuition"], variable=self._ws_var,
            command=self._on_workspace_selected,
        )
        self._ws_switch.pack(side="left", padx=4)

        self._center_label = ctk.CTkLabel(bar, text="", text_color="gray60")
        self._center_label.pack(side="left", padx=12)

        user = self._session_svc.user
        self._user_label = ctk.CTkLabel(
            bar, text=f"Hi, {user.full_name.split()[0] if user and user.full_name else 'there'}",
        )
        self._user_label.pack(side="right", padx=12)
        self._update_center_label()

    def _update_center_label(self):
        name = self._ws_svc.tuition_center_name
        if not name and self._session_svc.user:
            name = self._session_svc.user.tuition_center_name or ""
        text = f"🎓 {name}" if self._ws_svc.is_tuition and name else ""
        self._center_label.configure(text=text)

    def _build_banner_area(self):
        self._banner_frame = ctk.CTkFrame(self, fg_color="transparent", height=0)
        self._banner_frame.grid(row=1, column=0, sticky="ew", padx=8)

    # ── Tabs ─────────────────────────────────────────────────────────────────

    def _build_tabs(self):
        if self._tabview is not None:
            self._tabview.destroy()
        self._tabs = {}
        self._tabview = ctk.CTkTabview(self)
        self._tabview.grid(row=2, column=0, sticky="nsew", padx=8, pady=(0, 8))

        for key, title in _TAB_LAYOUT[self._ws_svc.workspace]:
            self._tabview.add(title)
            page = self._tabview.tab(title)
            page.grid_columnconfigure(0, weight=1)
            page.grid_rowconfigure(0, weight=1)
            tab = self._make_tab(key, page)
            tab.grid(row=0, column=0, sticky="nsew")
            self._tabs[key] = tab

    def _make_tab(self, key: str, page) -> ctk.CTkFrame:
        if key == "dashboard":
            return DashboardTab(
                page, report_service=self._report_svc, tuition_service=self._tuition_svc,
                get_workspace=self._get_workspace, get_symbol=self._get_symbol,
                date_format=self._date_format,
            )
        if key == "wallets":
            return WalletsTab(
                page, wallet_service=self._wallet_svc, get_symbol=self._get_symbol,
                notify_refresh=self.notify_tabs_refresh, on_wallets=self._set_wallets,
            )
        if key == "transactions":
            return TransactionsTab(
                page, tx_service=self._tx_svc, get_workspace=self._get_workspace,
                get_wallets=self._get_wallets, get_categories=self._ws_svc.categories,
                get_symbol=self._get_symbol, notify_refresh=self.notify_tabs_refresh,
                date_format=self._date_format,
            )
        if key == "recurring":
            return RecurringTab(
                page, recurring_service=self._recurring_svc, get_wallets=self._get_wallets,
                get_symbol=self._get_symbol, notify_refresh=self.notify_tabs_refresh,
                date_format=self._date_format,
            )
        if key == "reports":
            return ReportsTab(page, report_service=self._report_svc, get_symbol=self._get_symbol)
        if key == "students":
            return StudentsTab(
                page, workspace_service=self._ws_svc, get_wallets=self._get_wallets,
                get_symbol=self._get_symbol, notify_refresh=self.notify_tabs_refresh,
                date_format=self._date_format,
            )
        if key == "fees":
            return TuitionFeesTab(
                page, tuition_service=self._tuition_svc, workspace_service=self._ws_svc,
                get_wallets=self._get_wallets, get_symbol=self._get_symbol,
                notify_refresh=self.notify_tabs_refresh, date_format=self._date_format,
            )
        return SettingsTab(
            page, session_service=self._session_svc, user_service=self._user_svc,
            workspace_service=self._ws_svc, notify_refresh=self._on_settings_changed,
            on_signed_out=self._sign_out,
        )

    # ── Shared state for tabs ────────────────────────────────────────────────

    def _get_workspace(self) -> str:
        return self._ws_svc.workspace

    def _get_wallets(self) -> list[Wallet]:
        return self._wallets

    def _set_wallets(self, wallets: list[Wallet]):
        self._wallets = wallets

    def _get_symbol(self) -> str:
        user = self._session_svc.user
        return currency_symbol(user.settings.currency if user else None)

    # ── Workspace ────────────────────────────────────────────────────────────

    def _sync_workspace(self, workspace: str):
        self._recurring_svc.set_workspace(workspace)
        self._report_svc.set_workspace(workspace)

    def _load_workspace_data(self):
        self._ws_svc.load_categories()
        return self._ws_svc.load_profile()

    def _on_workspace_data(self, _profile):
        self._update_center_label()
        self._check_tuition_setup()

    def _on_workspace_selected(self, value: str):
        workspace = value.lower()
        if workspace == self._ws_svc.workspace:
            return
        logger.info("Switching workspace to %s", workspace)
        self._ws_switch.configure(state="disabled")

        def switch():
            self._ws_svc.switch(workspace)
            self._ws_svc.load_categories()
            if self._ws_svc.profile is None:
                self._ws_svc.load_profile()
            return workspace

        self._loader.run(switch, self._on_workspace_switched, self._on_switch_failed)

    def _on_workspace_switched(self, workspace: str):
        self._ws_switch.configure(state="normal")
        self._sync_workspace(workspace)
        for w in self._banner_frame.winfo_children():
            w.destroy()
        self._update_center_label()
        self._build_tabs()
        self._check_tuition_setup()

    def _check_tuition_setup(self):
        if not (self._ws_svc.is_tuition and self._ws_svc.needs_tuition_setup):
            return
        dlg = TuitionSetupDialog(self, self._ws_svc)
        self.wait_window(dlg)
        if self.signed_out:
            return
        if not dlg.saved:
            self._ws_var.set("Personal")
            self._on_workspace_selected("Personal")
            return
        self._session_svc.refresh_user()
        self._update_center_label()
        if "settings" in self._tabs:
            self._tabs["settings"].refresh()

    def _on_switch_failed(self, message: str):
        self._ws_switch.configure(state="normal")
        self._ws_var.set(self._ws_svc.workspace.title())
        show_banner(self._banner_frame, message, severity="error")

    # ── Refresh ──────────────────────────────────────────────────────────────

    def notify_tabs_refresh(self, scope: str = "full"):
        keys = _REFRESH_SCOPES.get(scope, _REFRESH_SCOPES["full"])
        for key, tab in self._tabs.items():
            if key in keys:
                tab.refresh()

    def _on_settings_changed(self, scope: str = "full"):
        user = self._session_svc.user
        if user and user.full_name:
            self._user_label.configure(text=f"Hi, {user.full_name.split()[0]}")
        self._update_center_label()
        self.notify_tabs_refresh(scope)

    # ── Session ──────────────────────────────────────────────────────────────

    def _on_expired_signal(self, _message: str):
        # May arrive on a loader thread.
        self.after(0, self._on_session_expired)

    def _on_session_expired(self):
        if self.signed_out:
            return
        self._session_svc.handle_expired()
        self._sign_out()

    def _sign_out(self):
        self.signed_out = True
        self.close()

    def close(self):
        self._session.off_expired(self._on_expired_signal)
        self.destroy()
