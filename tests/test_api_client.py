import json
import urllib.error

import pytest

from api.api_client import ApiClient, ApiError, build_query, record_id, wallet_ref
from api.auth_api import AuthAPI
from api.session import Session
from utils.constants import NETWORK_ERROR_MESSAGE, SESSION_EXPIRED_MESSAGE


def make_api(opener, token="tok-1"):
    session = Session(persist=False)
    session.access_token = token
    return ApiClient("http://api.test/api/v1/", session, opener=opener), session


def test_build_query_drops_empty_values():
    qs = build_query({"workspace": "personal", "type": "", "category": None,
                      "page": 2, "isRecurring": False})
    assert qs == "workspace=personal&page=2&isRecurring=false"
    assert build_query({}) == ""
    assert build_query(None) == ""


def test_success_returns_data_and_sends_bearer(make_opener):
    opener = make_opener((200, {"success": True, "data": {"wallets": []}}))
    client, _ = make_api(opener)
    assert client.get("/wallets", {"page": 1, "type": ""}) == {"wallets": []}
    req = opener.requests[0]
    assert req.full_url == "http://api.test/api/v1/wallets?page=1"
    assert req.get_header("Authorization") == "Bearer tok-1"
    assert req.get_method() == "GET"


def test_json_body_is_encoded(make_opener):
    opener = make_opener((201, {"success": True, "data": {}}))
    client, _ = make_api(opener)
    client.post("/wallets", {"name": "Cash"})
    assert json.loads(opener.requests[0].data) == {"name": "Cash"}


def test_skip_auth_omits_token(make_opener):
    opener = make_opener((200, {"success": True, "data": {}}))
    client, _ = make_api(opener)
    client.post("/auth/login", {}, skip_auth=True)
    assert opener.requests[0].get_header("Authorization") is None


def test_error_body_becomes_api_error(make_opener):
    opener = make_opener((400, {"success": False, "error": {
        "message": "Amount must be positive", "code": "VALIDATION_ERROR",
        "details": [{"field": "amount"}],
    }}))
    client, session = make_api(opener)
    with pytest.raises(ApiError) as exc:
        client.post("/transactions", {"amount": -1})
    assert exc.value.message == "Amount must be positive"
    assert exc.value.code == "VALIDATION_ERROR"
    assert exc.value.status == 400
    assert exc.value.details == [{"field": "amount"}]
    assert session.access_token == "tok-1"


def test_error_without_body_uses_fallback(make_opener):
    opener = make_opener((500, {"success": False}))
    client, _ = make_api(opener)
    with pytest.raises(ApiError) as exc:
        client.get("/wallets")
    assert exc.value.message == "An error occurred"
    assert exc.value.code == "ERROR"
    assert exc.value.status == 500


def test_401_expires_session_once(make_opener):
    opener = make_opener((401, {"success": False, "error": {"message": "Token expired"}}))
    client, session = make_api(opener)
    seen = []
    session.on_expired(seen.append)
    session.cached_user = {"fullName": "Ali"}

    with pytest.raises(ApiError) as exc:
        client.get("/wallets")

    assert exc.value.code == "SESSION_EXPIRED"
    assert exc.value.status == 401
    assert exc.value.is_session_expired
    assert session.access_token is None
    assert session.cached_user is None
    assert seen == ["Token expired"]
    assert session.pop_expired_message() == "Token expired"
    assert session.pop_expired_message() is None


def test_401_default_message(make_opener):
    opener = make_opener((401, {"success": False}))
    client, session = make_api(opener)
    with pytest.raises(ApiError):
        client.get("/wallets")
    assert session.pop_expired_message() == SESSION_EXPIRED_MESSAGE


def test_401_on_login_does_not_expire(make_opener):
    opener = make_opener((401, {"success": False, "error": {"message": "Invalid credentials"}}))
    client, session = make_api(opener)
    with pytest.raises(ApiError) as exc:
        AuthAPI(client).login("a@b.co", "wrong")
    assert exc.value.code == "ERROR"
    assert exc.value.message == "Invalid credentials"
    assert session.access_token == "tok-1"
    assert session.pop_expired_message() is None


def test_401_with_skip_session_expiry(make_opener):
    opener = make_opener((401, {"success": False}))
    client, session = make_api(opener)
    with pytest.raises(ApiError) as exc:
        client.get("/auth/me", skip_session_expiry=True)
    assert not exc.value.is_session_expired
    assert session.access_token == "tok-1"


def test_network_error(make_opener):
    opener = make_opener(urllib.error.URLError("connection refused"))
    client, _ = make_api(opener)
    with pytest.raises(ApiError) as exc:
        client.get("/wallets")
    assert exc.value.code == "NETWORK_ERROR"
    assert exc.value.status == 0
    assert exc.value.message == NETWORK_ERROR_MESSAGE


def test_timeout_is_network_error(make_opener):
    opener = make_opener(TimeoutError("timed out"))
    client, _ = make_api(opener)
    with pytest.raises(ApiError) as exc:
        client.get("/wallets")
    assert exc.value.code == "NETWORK_ERROR"


def test_non_json_body_is_network_error(make_opener):
    opener = make_opener((502, b"<html>Bad Gateway</html>"))
    client, _ = make_api(opener)
    with pytest.raises(ApiError) as exc:
        client.get("/wallets")
    assert exc.value.code == "NETWORK_ERROR"
    assert exc.value.status == 0


def test_login_stores_token(make_opener):
    opener = make_opener((200, {"success": True, "data": {
        "accessToken": "fresh", "user": {"_id": "u1"},
    }}))
    client, session = make_api(opener, token=None)
    AuthAPI(client).login("a@b.co", "secret123")
    assert session.access_token == "fresh"


def test_upload_is_multipart(make_opener):
    opener = make_opener((200, {"success": True, "data": {"avatar": "x.png"}}))
    client, _ = make_api(opener)
    client.upload("/users/avatar", "avatar", "me.png", b"\x89PNG", "image/png")
    req = opener.requests[0]
    assert req.get_header("Content-type").startswith("multipart/form-data; boundary=")
    assert b'name="avatar"; filename="me.png"' in req.data
    assert b"\x89PNG" in req.data


def test_record_id_and_wallet_ref():
    assert record_id({"_id": "abc"}) == "abc"
    assert record_id({"id": 5}) == "5"
    assert record_id(None) == ""
    assert wallet_ref({"_id": "w1", "name": "Cash"}) == ("w1", "Cash")
    assert wallet_ref("w2") == ("w2", "")
    assert wallet_ref(None) == (None, "")
