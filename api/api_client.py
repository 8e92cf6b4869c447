import json
import logging
import urllib.error
import urllib.parse
import urllib.request
import uuid
from http.cookiejar import LWPCookieJar
from pathlib import Path

from api.session import Session
from utils.constants import (
    API_TIMEOUT_SECONDS, NETWORK_ERROR_MESSAGE, SESSION_EXPIRED_MESSAGE,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Raised for every failed request: HTTP errors, network errors, expired sessions."""

    def __init__(self, message: str, code: str = "ERROR", status: int = 0, details=None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.details = details

    @property
    def is_session_expired(self) -> bool:
        return self.code == "SESSION_EXPIRED"


def build_query(params: dict | None) -> str:
    """Encode params, dropping None and empty-string values."""
    if not params:
        return ""
    clean = []
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        clean.append((key, value))
    return urllib.parse.urlencode(clean)


class ApiClient:
    """JSON-over-HTTP client for the FinTrack REST API.

    Every response is the envelope {"success", "data", "error"}; the helper
    methods return the "data" part. A 401 on an authenticated request
    expires the injected Session before the ApiError is raised.
    """

    def __init__(
        self,
        base_url: str,
        session: Session,
        timeout: float = API_TIMEOUT_SECONDS,
        cookie_file: str | Path | None = None,
        opener=None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self._timeout = timeout
        self._cookies = LWPCookieJar(str(cookie_file)) if cookie_file else LWPCookieJar()
        if cookie_file and Path(cookie_file).exists():
            try:
                self._cookies.load(ignore_discard=True)
            except (OSError, ValueError):
                logger.warning("Ignoring unreadable cookie file %s", cookie_file)
        self._opener = opener or urllib.request.build_opener(
            urllib.request.HTTPCookieProcessor(self._cookies)
        )

    # ── Core request ─────────────────────────────────────────────────────────

    def request(
        self,
        method: str,
        endpoint: str,
        body: dict | None = None,
        query: dict | None = None,
        skip_auth: bool = False,
        skip_session_expiry: bool = False,
        raw_body: bytes | None = None,
        content_type: str = "application/json",
    ) -> dict:
        url = f"{self.base_url}{endpoint}"
        qs = build_query(query)
        if qs:
            url = f"{url}?{qs}"

        headers = {"Content-Type": content_type, "Accept": "application/json"}
        if self.session.access_token and not skip_auth:
            headers["Authorization"] = f"Bearer {self.session.access_token}"

        data = raw_body
        if data is None and body is not None:
            data = json.dumps(body).encode("utf-8")

        req = urllib.request.Request(url, data=data, headers=headers, method=method)
        logger.debug("%s %s", method, endpoint)
        try:
            with self._opener.open(req, timeout=self._timeout) as resp:
                status = resp.status
                raw = resp.read()
        except urllib.error.HTTPError as e:
            status = e.code
            raw = e.read()
        except (urllib.error.URLError, OSError) as e:
            logger.warning("%s %s failed: %s", method, endpoint, e)
            raise ApiError(NETWORK_ERROR_MESSAGE, "NETWORK_ERROR", 0) from e
        self._save_cookies()

        try:
            payload = json.loads(raw.decode("utf-8")) if raw else {}
        except ValueError as e:
            logger.warning("%s %s returned a non-JSON body (status %s)", method, endpoint, status)
            raise ApiError(NETWORK_ERROR_MESSAGE, "NETWORK_ERROR", 0) from e
        if not isinstance(payload, dict):
            payload = {"data": payload}

        if 200 <= status < 300:
            logger.debug("%s %s -> %s", method, endpoint, status)
            return payload

        error = payload.get("error") or {}
        if not isinstance(error, dict):
            error = {"message": str(error)}
        logger.warning("%s %s -> %s %s", method, endpoint, status, error.get("code", ""))

        if status == 401 and not skip_auth and not skip_session_expiry:
            message = error.get("message") or SESSION_EXPIRED_MESSAGE
            self.session.expire(message)
            raise ApiError(message, "SESSION_EXPIRED", 401)

        raise ApiError(
            error.get("message") or "An error occurred",
            error.get("code") or "ERROR",
            status,
            error.get("details"),
        )

    # ── Verb helpers (return the envelope's "data") ──────────────────────────

    def get(self, endpoint: str, query: dict | None = None, **options) -> dict:
        return self._data(self.request("GET", endpoint, query=query, **options))

    def post(self, endpoint: str, body: dict | None = None, **options) -> dict:
        return self._data(self.request("POST", endpoint, body=body, **options))

    def put(self, endpoint: str, body: dict | None = None, **options) -> dict:
        return self._data(self.request("PUT", endpoint, body=body, **options))

    def patch(self, endpoint: str, body: dict | None = None, **options) -> dict:
        return self._data(self.request("PATCH", endpoint, body=body, **options))

    def delete(self, endpoint: str, body: dict | None = None, **options) -> dict:
        return self._data(self.request("DELETE", endpoint, body=body, **options))

    def upload(self, endpoint: str, field: str, filename: str, content: bytes, mime_type: str) -> dict:
        """POST a single file as multipart/form-data."""
        boundary = uuid.uuid4().hex
        body = b"".join([
            f"--{boundary}\r\n".encode(),
            f'Content-Disposition: form-data; name="{field}"; filename="{filename}"\r\n'.encode(),
            f"Content-Type: {mime_type}\r\n\r\n".encode(),
            content,
            f"\r\n--{boundary}--\r\n".encode(),
        ])
        return self._data(self.request(
            "POST", endpoint, raw_body=body,
            content_type=f"multipart/form-data; boundary={boundary}",
        ))

    @staticmethod
    def _data(payload: dict) -> dict:
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    def _save_cookies(self):
        if self._cookies.filename:
            try:
                self._cookies.save(ignore_discard=True)
            except OSError:
                logger.warning("Could not save cookies to %s", self._cookies.filename)


def record_id(data: dict | None) -> str:
    """Documents carry either 'id' or Mongo-style '_id'."""
    if not data:
        return ""
    return str(data.get("id") or data.get("_id") or "")


def wallet_ref(value) -> tuple[str | None, str]:
    """walletId is either an id string or a populated {_id, name} document."""
    if isinstance(value, dict):
        return record_id(value) or None, value.get("name", "")
    return (str(value) if value else None), ""
