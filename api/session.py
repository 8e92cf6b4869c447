import logging
from typing import Callable, Optional

from utils import app_config
from utils.constants import SESSION_EXPIRED_MESSAGE

logger = logging.getLogger(__name__)


class Session:
    """Holds the access token and cached user for the signed-in account.

    Persisted to ~/.fintrack/session.json so a restart can resume. The
    session-expired message is kept in memory only and is read once.
    """

    def __init__(self, persist: bool = True):
        self._persist = persist
        self._expired_message: Optional[str] = None
        self._listeners: list[Callable[[str], None]] = []
        stored = app_config.load_session() if persist else {}
        self.access_token: Optional[str] = stored.get("access_token")
        self.cached_user: Optional[dict] = stored.get("user")

    @property
    def has_token(self) -> bool:
        return bool(self.access_token)

    def set_token(self, token: str | None):
        self.access_token = token
        self._save()

    def set_user(self, user: dict | None):
        self.cached_user = user
        self._save()

    def clear(self):
        self.access_token = None
        self.cached_user = None
        if self._persist:
            app_config.clear_session()

    # ── Expiry ───────────────────────────────────────────────────────────────

    def on_expired(self, callback: Callable[[str], None]):
        """Register a callback run with the message whenever the session expires."""
        self._listeners.append(callback)

    def off_expired(self, callback: Callable[[str], None]):
        if callback in self._listeners:
            self._listeners.remove(callback)

    def expire(self, message: str | None = None):
        message = message or SESSION_EXPIRED_MESSAGE
        logger.info("Session expired: %s", message)
        self.clear()
        self._expired_message = message
        for callback in list(self._listeners):
            callback(message)

    def pop_expired_message(self) -> Optional[str]:
        """Return the pending expiry message once, then forget it."""
        message, self._expired_message = self._expired_message, None
        return message

    def _save(self):
        if not self._persist:
            return
        if self.access_token is None and self.cached_user is None:
            app_config.clear_session()
            return
        app_config.save_session({"access_token": self.access_token, "user": self.cached_user})
