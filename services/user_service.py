import logging
from pathlib import Path

from api.user_api import UserAPI
from services.session_service import SessionService
from utils.constants import AVATAR_MAX_BYTES, AVATAR_TYPES, CURRENCIES

logger = logging.getLogger(__name__)


class UserService:
    """Settings-page operations on the signed-in account."""

    def __init__(self, user_api: UserAPI, session_service: SessionService):
        self._api = user_api
        self._session = session_service

    def update_settings(self, currency: str | None = None, **toggles) -> dict:
        """toggles: notifications_enabled, dark_mode_enabled, biometric_enabled."""
        body = {}
        if currency is not None:
            if currency not in CURRENCIES:
                raise ValueError(f"Unsupported currency '{currency}'.")
            body["currency"] = currency
        for key in ("notifications_enabled", "dark_mode_enabled", "biometric_enabled"):
            if key in toggles:
                head, *rest = key.split("_")
                body[head + "".join(w.title() for w in rest)] = bool(toggles.pop(key))
        if toggles:
            raise ValueError(f"Unknown setting(s): {', '.join(toggles)}.")
        result = self._api.update_settings(**body)
        self._session.refresh_user()
        return result

    def change_password(self, current: str, new: str, confirm: str) -> dict:
        if not current:
            raise ValueError("Please enter your current password.")
        if not new:
            raise ValueError("Please enter a new password.")
        if new != confirm:
            raise ValueError("New passwords do not match")
        result = self._api.change_password(current, new, confirm)
        logger.info("Password changed")
        return result

    def delete_account(self, password: str):
        if not password:
            raise ValueError("Please enter your password")
        self._api.delete_account(password)
        logger.info("Account deleted")
        self._session.logout()

    def upload_avatar(self, path: str | Path) -> dict:
        path = Path(path)
        mime_type = AVATAR_TYPES.get(path.suffix.lower())
        if mime_type is None:
            raise ValueError("Please upload a PNG, JPEG, or WebP image")
        content = path.read_bytes()
        if len(content) > AVATAR_MAX_BYTES:
            raise ValueError("Image must be less than 2MB")
        result = self._api.upload_avatar(path.name, content, mime_type)
        self._session.refresh_user()
        return result
