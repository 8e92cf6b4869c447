import pytest

from api.api_client import ApiError
from api.auth_api import AuthAPI
from api.session import Session
from api.user_api import UserAPI
from services.session_service import (
    SessionService, validate_login, validate_new_password, validate_registration,
)
from utils import app_config

USER = {"_id": "u1", "fullName": "Ayesha Khan", "email": "ayesha@example.com",
        "settings": {"currency": "USD"}}


def make_service(client):
    return SessionService(AuthAPI(client), UserAPI(client), client.session)


def test_login_stores_token_and_user(make_client):
    client = make_client({("POST", "/auth/login"): {"accessToken": "abc", "user": USER}})
    service = make_service(client)
    ok, message = service.login(" ayesha@example.com ", "pass1234")
    assert ok and message == ""
    assert client.session.access_token == "abc"
    assert service.user.full_name == "Ayesha Khan"
    assert service.user.settings.currency == "USD"
    assert service.is_authenticated
    assert client.last("POST", "/auth/login")[2]["email"] == "ayesha@example.com"


def test_login_failure_returns_message(make_client):
    client = make_client({("POST", "/auth/login"): ApiError("Invalid email or password", "ERROR", 401)})
    ok, message = make_service(client).login("a@b.co", "nope")
    assert not ok
    assert message == "Invalid email or password"


def test_register_sends_optional_center_name(make_client):
    client = make_client({("POST", "/auth/register"): {"accessToken": "t", "user": USER}})
    ok, _ = make_service(client).register("Ayesha", "a@b.co", "pass1234", "  ")
    body = client.last("POST", "/auth/register")[2]
    assert ok
    assert body["tuitionCenterName"] is None
    assert body["fullName"] == "Ayesha"


def test_restore_without_token(make_client):
    client = make_client()
    assert make_service(client).restore() is False
    assert client.calls == []


def test_restore_with_valid_token(make_client):
    client = make_client({("GET", "/auth/me"): {"user": USER}})
    client.session.access_token = "abc"
    service = make_service(client)
    assert service.restore() is True
    assert service.user.email == "ayesha@example.com"


def test_restore_refreshes_then_retries(make_client):
    attempts = {"n": 0}

    def me(_query):
        attempts["n"] += 1
        if attempts["n"] == 1:
            raise ApiError("expired", "ERROR", 401)
        return {"user": USER}

    client = make_client({
        ("GET", "/auth/me"): me,
        ("POST", "/auth/refresh"): {"accessToken": "new"},
    })
    client.session.access_token = "old"
    service = make_service(client)
    assert service.restore() is True
    assert client.session.access_token == "new"
    assert attempts["n"] == 2


def test_restore_logs_out_when_refresh_fails(make_client):
    client = make_client({
        ("GET", "/auth/me"): ApiError("expired", "ERROR", 401),
        ("POST", "/auth/refresh"): ApiError("no refresh token", "ERROR", 401),
        ("POST", "/auth/logout"): ApiError("whatever", "ERROR", 401),
    })
    client.session.access_token = "old"
    client.session.cached_user = USER
    service = make_service(client)
    assert service.restore() is False
    assert client.session.access_token is None
    assert service.user is None


def test_logout_ignores_errors_and_clears(make_client):
    client = make_client({("POST", "/auth/logout"): ApiError("down", "NETWORK_ERROR", 0)})
    client.session.access_token = "abc"
    service = make_service(client)
    service.logout()
    assert client.session.access_token is None
    assert not service.is_authenticated


def test_refresh_user_ignores_errors(make_client):
    client = make_client({("GET", "/auth/me"): ApiError("down", "NETWORK_ERROR", 0)})
    service = make_service(client)
    assert service.refresh_user() is None


def test_persisted_session_round_trip():
    session = Session()
    session.set_token("persisted")
    session.set_user(USER)
    restored = Session()
    assert restored.access_token == "persisted"
    assert restored.cached_user["fullName"] == "Ayesha Khan"
    restored.expire()
    assert not app_config.SESSION_FILE.exists()
    assert Session().access_token is None


def test_expiry_listeners_and_one_shot_message():
    session = Session(persist=False)
    session.set_token("t")
    seen = []
    session.on_expired(seen.append)
    session.expire("Bye")
    session.off_expired(seen.append)
    session.expire()
    assert seen == ["Bye"]
    assert session.access_token is None
    assert session.pop_expired_message() == "Your session has expired. Please log in again."
    assert session.pop_expired_message() is None


@pytest.mark.parametrize("email,password,expected", [
    ("", "x", "Email is required"),
    ("not-an-email", "x", "Please enter a valid email"),
    ("a@b.co", "", "Password is required"),
    ("a@b.co", "x", None),
])
def test_validate_login(email, password, expected):
    assert validate_login(email, password) == expected


@pytest.mark.parametrize("password,confirm,expected", [
    ("short1", "short1", "Password must be at least 8 characters"),
    ("12345678", "12345678", "Password must contain at least one letter"),
    ("abcdefgh", "abcdefgh", "Password must contain at least one number"),
    ("abcd1234", "abcd12345", "Passwords do not match"),
    ("abcd1234", "abcd1234", None),
])
def test_validate_new_password(password, confirm, expected):
    assert validate_new_password(password, confirm) == expected


def test_validate_registration_name():
    assert validate_registration("A", "a@b.co", "abcd1234", "abcd1234") == \
        "Name must be at least 2 characters"
    assert validate_registration("Al", "a@b.co", "abcd1234", "abcd1234") is None
