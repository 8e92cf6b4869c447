import io
import json
import urllib.error

import pytest

from api.api_client import ApiError
from api.session import Session
from utils import app_config


class FakeClient:
    """Stands in for ApiClient: records calls and replays canned "data" payloads.

    responses maps (METHOD, endpoint) to a dict, or to an ApiError to raise.
    """

    def __init__(self, responses=None, session=None):
        self.responses = dict(responses or {})
        self.session = session or Session(persist=False)
        self.calls = []

    def _reply(self, method, endpoint, payload, options):
        self.calls.append((method, endpoint, payload, options))
        result = self.responses.get((method, endpoint), {})
        if isinstance(result, ApiError):
            raise result
        if callable(result):
            return result(payload)
        return result

    def get(self, endpoint, query=None, **options):
        return self._reply("GET", endpoint, query, options)

    def post(self, endpoint, body=None, **options):
        return self._reply("POST", endpoint, body, options)

    def put(self, endpoint, body=None, **options):
        return self._reply("PUT", endpoint, body, options)

    def patch(self, endpoint, body=None, **options):
        return self._reply("PATCH", endpoint, body, options)

    def delete(self, endpoint, body=None, **options):
        return self._reply("DELETE", endpoint, body, options)

    def upload(self, endpoint, field, filename, content, mime_type):
        return self._reply("UPLOAD", endpoint, {
            "field": field, "filename": filename, "size": len(content), "mime": mime_type,
        }, {})

    def last(self, method, endpoint):
        for call in reversed(self.calls):
            if call[0] == method and call[1] == endpoint:
                return call
        return None


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self._body = body

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class FakeOpener:
    """urllib opener replacement; each queued reply is (status, body) or an exception."""

    def __init__(self, *replies):
        self.replies = list(replies)
        self.requests = []

    def open(self, req, timeout=None):
        self.requests.append(req)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if isinstance(body, (dict, list)):
            body = json.dumps(body).encode("utf-8")
        if status >= 400:
            raise urllib.error.HTTPError(req.full_url, status, "error", {}, io.BytesIO(body))
        return FakeResponse(status, body)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setattr(app_config, "CONFIG_FILE", tmp_path / "config.json")
    monkeypatch.setattr(app_config, "SESSION_FILE", tmp_path / "session.json")
    monkeypatch.delenv("FINTRACK_API_URL", raising=False)
    return tmp_path


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def make_client():
    return FakeClient


@pytest.fixture
def make_opener():
    return FakeOpener
