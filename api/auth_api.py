from api.api_client import ApiClient


class AuthAPI:
    """/auth endpoints. Stores the returned access token on the client's session."""

    def __init__(self, client: ApiClient):
        self._client = client

    def register(self, full_name: str, email: str, password: str,
                 tuition_center_name: str | None = None) -> dict:
        data = self._client.post("/auth/register", {
            "fullName": full_name,
            "email": email,
            "password": password,
            "tuitionCenterName": tuition_center_name or None,
        }, skip_auth=True)
        self._store_token(data)
        return data

    def login(self, email: str, password: str) -> dict:
        data = self._client.post(
            "/auth/login", {"email": email, "password": password}, skip_auth=True
        )
        self._store_token(data)
        return data

    def refresh(self) -> dict:
        data = self._client.post("/auth/refresh", skip_auth=True, skip_session_expiry=True)
        self._store_token(data)
        return data

    def logout(self):
        self._client.post("/auth/logout", skip_session_expiry=True)

    def me(self) -> dict:
        return self._client.get("/auth/me", skip_session_expiry=True)

    def _store_token(self, data: dict):
        token = data.get("accessToken")
        if token:
            self._client.session.set_token(token)
