import logging
import re
from typing import Optional

from api.api_client import ApiError
from api.auth_api import AuthAPI
from api.session import Session
from api.user_api import UserAPI
from models.user import User

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")


def validate_login(email: str, password: str) -> Optional[str]:
    """Return the first problem with the login form, or None."""
    if not email.strip():
        return "Email is required"
    if not _EMAIL_RE.search(email):
        return "Please enter a valid email"
    if not password:
        return "Password is required"
    return None


def validate_new_password(password: str, confirm: str) -> Optional[str]:
    if not password:
        return "Password is required"
    if len(password) < 8:
        return "Password must be at least 8 characters"
    if not re.search(r"[a-zA-Z]", password):
        return "Password must contain at least one letter"
    if not re.search(r"[0-9]", password):
        return "Password must contain at least one number"
    if password != confirm:
        return "Passwords do not match"
    return None


def validate_registration(name: str, email: str, password: str, confirm: str) -> Optional[str]:
    if not name.strip():
        return "Full name is required"
    if len(name.strip()) < 2:
        return "Name must be at least 2 characters"
    if not email.strip():
        return "Email is required"
    if not _EMAIL_RE.search(email):
        return "Please enter a valid email"
    return validate_new_password(password, confirm)


class SessionService:
    """Sign-in state for the desktop app.

    Wraps the auth endpoints and keeps the Session's token and cached
    user in step with the server.
    """

    def __init__(self, auth_api: AuthAPI, user_api: UserAPI, session: Session):
        self._auth = auth_api
        self._users = user_api
        self._session = session
        self.user: Optional[User] = None

    @property
    def is_authenticated(self) -> bool:
        return self._session.has_token and self.user is not None

    def register(self, name: str, email: str, password: str,
                 tuition_center_name: str | None = None) -> tuple[bool, str]:
        try:
            data = self._auth.register(name.strip(), email.strip(), password,
                                       (tuition_center_name or "").strip() or None)
        except ApiError as e:
            return False, e.message or "Registration failed. Please try again."
        self._set_user(data.get("user"))
        logger.info("Registered new account")
        return True, ""

    def login(self, email: str, password: str) -> tuple[bool, str]:
        try:
            data = self._auth.login(email.strip(), password)
        except ApiError as e:
            return False, e.message or "Login failed. Please try again."
        self._set_user(data.get("user"))
        logger.info("Signed in")
        return True, ""

    def restore(self) -> bool:
        """Resume a stored session at startup. Returns True when signed in."""
        if not self._session.has_token:
            return False
        if self._session.cached_user:
            self.user = self._users.to_model(self._session.cached_user)

        try:
            self._set_user(self._auth.me().get("user"))
            return True
        except ApiError as e:
            logger.info("Stored token rejected (%s), trying refresh", e.code)

        try:
            self._auth.refresh()
            self._set_user(self._auth.me().get("user"))
            return True
        except ApiError as e:
            logger.info("Session refresh failed: %s", e.message)
            self.logout()
            return False

    def logout(self):
        try:
            self._auth.logout()
        except ApiError as e:
            logger.debug("Ignoring logout error: %s", e.message)
        self._session.clear()
        self.user = None

    def refresh_user(self) -> Optional[User]:
        try:
            self._set_user(self._auth.me().get("user"))
        except ApiError as e:
            logger.debug("Could not refresh user: %s", e.message)
        return self.user

    def set_user(self, data: dict | None):
        """Replace the cached user after a profile or settings change."""
        self._set_user(data)

    def pop_expired_message(self) -> Optional[str]:
        return self._session.pop_expired_message()

    def handle_expired(self):
        self.user = None

    def _set_user(self, data: dict | None):
        if not data:
            return
        self._session.set_user(data)
        self.user = self._users.to_model(data)
