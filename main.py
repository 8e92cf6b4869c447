import logging
import os
import sys

import customtkinter as ctk

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from api.api_client import ApiClient
from api.auth_api import AuthAPI
from api.category_api import CategoryAPI
from api.recurring_api import RecurringAPI
from api.session import Session
from api.student_api import StudentAPI
from api.transaction_api import TransactionAPI
from api.tuition_api import TuitionAPI
from api.user_api import UserAPI
from api.wallet_api import WalletAPI

from services.recurring_service import RecurringService
from services.report_service import ReportService
from services.session_service import SessionService
from services.transaction_service import TransactionService
from services.tuition_service import TuitionService
from services.user_service import UserService
from services.wallet_service import WalletService
from services.workspace_service import WorkspaceService

from ui.app_window import AppWindow
from ui.login_window import LoginWindow
from utils import app_config
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main():
    setup_logging()

    # ── HTTP client ──────────────────────────────────────────────────────────
    session = Session()
    api_url = app_config.get_api_url()
    client = ApiClient(api_url, session, cookie_file=app_config.CONFIG_DIR / "cookies.txt")
    logger.info("Starting against %s", api_url)

    # ── API wrappers ─────────────────────────────────────────────────────────
    auth_api = AuthAPI(client)
    user_api = UserAPI(client)
    wallet_api = WalletAPI(client)
    tx_api = TransactionAPI(client)
    recurring_api = RecurringAPI(client)
    student_api = StudentAPI(client)
    tuition_api = TuitionAPI(client)
    category_api = CategoryAPI(client)

    # ── Services ─────────────────────────────────────────────────────────────
    session_svc = SessionService(auth_api, user_api, session)
    user_svc = UserService(user_api, session_svc)
    tuition_svc = TuitionService(student_api, tuition_api)
    workspace_svc = WorkspaceService(tuition_svc, user_api, category_api)
    wallet_svc = WalletService(wallet_api)
    tx_svc = TransactionService(tx_api)
    recurring_svc = RecurringService(recurring_api, tx_api, workspace_svc.workspace)
    report_svc = ReportService(tx_api, recurring_api, workspace_svc.workspace)

    # ── Appearance ───────────────────────────────────────────────────────────
    ctk.set_appearance_mode(app_config.get_setting("appearance_mode", "system"))
    ctk.set_default_color_theme("blue")

    # ── Sign in, run, repeat until the user closes the window ────────────────
    signed_in = session_svc.restore()
    while True:
        if not signed_in:
            login = LoginWindow(session_svc, expired_message=session_svc.pop_expired_message())
            login.mainloop()
            if not login.signed_in:
                break

        app = AppWindow(
            session=session,
            session_service=session_svc,
            user_service=user_svc,
            workspace_service=workspace_svc,
            wallet_service=wallet_svc,
            tx_service=tx_svc,
            recurring_service=recurring_svc,
            report_service=report_svc,
            tuition_service=tuition_svc,
            date_format=app_config.get_setting("date_format", "MM/DD/YYYY"),
        )
        app.mainloop()
        if not app.signed_out:
            break
        signed_in = False
        logger.info("Signed out, returning to login")


if __name__ == "__main__":
    main()
