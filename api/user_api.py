from api.api_client import ApiClient, record_id
from models.user import User, UserSettings


class UserAPI:
    """/users endpoints: profile, settings, password, account, avatar."""

    def __init__(self, client: ApiClient):
        self._client = client

    def to_model(self, data: dict) -> User:
        settings = data.get("settings") or {}
        return User(
            id=record_id(data),
            full_name=data.get("fullName") or "",
            email=data.get("email") or "",
            tuition_center_name=data.get("tuitionCenterName"),
            avatar=data.get("avatar"),
            settings=UserSettings(
                currency=settings.get("currency") or "PKR",
                notifications_enabled=bool(settings.get("notificationsEnabled", True)),
                dark_mode_enabled=bool(settings.get("darkModeEnabled", False)),
                biometric_enabled=bool(settings.get("biometricEnabled", False)),
            ),
        )

    def get_profile(self) -> dict:
        return self._client.get("/users/profile").get("user") or {}

    def update_profile(self, full_name: str | None = None,
                       tuition_center_name: str | None = None) -> dict:
        body = {"fullName": full_name, "tuitionCenterName": tuition_center_name}
        body = {k: v for k, v in body.items() if v is not None}
        return self._client.put("/users/profile", body).get("user") or {}

    def update_settings(self, **settings) -> dict:
        """settings: currency, notificationsEnabled, darkModeEnabled, biometricEnabled."""
        return self._client.put("/users/settings", settings)

    def change_password(self, current_password: str, new_password: str, confirm_password: str) -> dict:
        return self._client.put("/users/password", {
            "currentPassword": current_password,
            "newPassword": new_password,
            "confirmPassword": confirm_password,
        })

    def delete_account(self, password: str) -> dict:
        return self._client.delete("/users/account", {"password": password})

    def upload_avatar(self, filename: str, content: bytes, mime_type: str) -> dict:
        return self._client.upload("/users/avatar", "avatar", filename, content, mime_type)
