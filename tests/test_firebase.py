import pytest
from firebase_admin import auth

from app.auth import firebase
from app.errors import AppError, AuthError, UpstreamError

APP = object()


@pytest.fixture(autouse=True)
def fake_app(monkeypatch):
    monkeypatch.setattr(firebase, "_ensure_app", lambda: APP)


def test_verify_id_token_returns_uid(monkeypatch):
    seen = {}

    def fake_verify(token, app=None):
        seen["args"] = (token, app)
        return {"uid": "alice", "email": "alice@example.com"}

    monkeypatch.setattr(auth, "verify_id_token", fake_verify)
    assert firebase.verify_id_token("id-token") == "alice"
    assert seen["args"] == ("id-token", APP)


@pytest.mark.parametrize(
    "error",
    [
        auth.InvalidIdTokenError("bad signature"),
        auth.ExpiredIdTokenError("expired", cause=None),
        auth.UserDisabledError("disabled"),
    ],
)
def test_verify_id_token_rejections_are_auth_errors(monkeypatch, error):
    def fake_verify(token, app=None):
        raise error

    monkeypatch.setattr(auth, "verify_id_token", fake_verify)
    with pytest.raises(AuthError) as exc:
        firebase.verify_id_token("id-token")
    assert exc.value.status_code == 401
    assert exc.value.public_message == "Invalid bearer token"


def test_certificate_fetch_failure_is_opaque(monkeypatch):
    def fake_verify(token, app=None):
        raise auth.CertificateFetchError("cannot reach google", cause=None)

    monkeypatch.setattr(auth, "verify_id_token", fake_verify)
    with pytest.raises(UpstreamError) as exc:
        firebase.verify_id_token("id-token")
    assert exc.value.public_message == "Internal error"


def test_get_or_create_user_returns_existing(monkeypatch):
    existing = object()
    monkeypatch.setattr(auth, "get_user", lambda uid, app=None: existing)

    def no_create(**kwargs):
        raise AssertionError("should not create an existing user")

    monkeypatch.setattr(auth, "create_user", no_create)
    assert firebase.get_or_create_user("li-1", email="a@example.com") is existing


def test_get_or_create_user_creates_missing(monkeypatch):
    def missing(uid, app=None):
        raise auth.UserNotFoundError("no user")

    created = {}

    def fake_create(**kwargs):
        created.update(kwargs)
        return "record"

    monkeypatch.setattr(auth, "get_user", missing)
    monkeypatch.setattr(auth, "create_user", fake_create)
    assert firebase.get_or_create_user("li-1", email="a@example.com", display_name="Ada") == "record"
    assert created == {
        "uid": "li-1",
        "app": APP,
        "email": "a@example.com",
        "email_verified": True,
        "display_name": "Ada",
    }


def test_create_custom_token_decodes_bytes(monkeypatch):
    monkeypatch.setattr(auth, "create_custom_token", lambda uid, app=None: b"signed." + uid.encode())
    assert firebase.create_custom_token("li-1") == "signed.li-1"


def test_missing_project_id_is_a_server_fault_not_a_bad_token(monkeypatch):
    def fake_verify(token, app=None):
        raise ValueError("Failed to ascertain project ID from the credential or the environment.")

    monkeypatch.setattr(auth, "verify_id_token", fake_verify)
    with pytest.raises(AppError) as exc:
        firebase.verify_id_token("id-token")
    assert not isinstance(exc.value, AuthError)
    assert exc.value.status_code == 500
    assert exc.value.public_message == "Internal error"


def test_failed_user_lookup_is_opaque(monkeypatch):
    def unavailable(uid, app=None):
        raise auth.UnexpectedResponseError("backend unavailable")

    monkeypatch.setattr(auth, "get_user", unavailable)
    with pytest.raises(UpstreamError) as exc:
        firebase.get_or_create_user("li-1")
    assert exc.value.public_message == "Internal error"


def test_email_taken_by_another_account_is_opaque(monkeypatch):
    def missing(uid, app=None):
        raise auth.UserNotFoundError("no user")

    def taken(**kwargs):
        raise auth.EmailAlreadyExistsError("email exists", None, None)

    monkeypatch.setattr(auth, "get_user", missing)
    monkeypatch.setattr(auth, "create_user", taken)
    with pytest.raises(UpstreamError) as exc:
        firebase.get_or_create_user("li-1", email="a@example.com")
    assert exc.value.public_message == "Internal error"


def test_unsignable_custom_token_is_opaque(monkeypatch):
    def cannot_sign(uid, app=None):
        raise auth.TokenSignError("no signer available", None)

    monkeypatch.setattr(auth, "create_custom_token", cannot_sign)
    with pytest.raises(UpstreamError):
        firebase.create_custom_token("li-1")
