import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import JWTError, jwk, jwt

from app.auth import oidc


@pytest.fixture(scope="module")
def keypair():
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = "li-key-1"
    return private_pem, public_jwk


@pytest.fixture(autouse=True)
def jwks(monkeypatch, keypair):
    monkeypatch.setattr(oidc._jwks, "get", lambda: {"keys": [keypair[1]]})


def _token(private_pem, kid="li-key-1", **overrides):
    now = int(time.time())
    claims = {
        "iss": "https://www.linkedin.com/oauth",
        "aud": "test-client",
        "sub": "li-sub-9",
        "name": "Ada Lovelace",
        "iat": now,
        "exp": now + 600,
    }
    claims.update(overrides)
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": kid})


def test_valid_token_returns_claims(keypair):
    claims = oidc.decode_linkedin_id_token(_token(keypair[0]), audience="test-client")
    assert claims["sub"] == "li-sub-9"
    assert claims["name"] == "Ada Lovelace"


def test_wrong_audience_is_rejected(keypair):
    with pytest.raises(JWTError):
        oidc.decode_linkedin_id_token(_token(keypair[0], aud="someone-else"), audience="test-client")


def test_expired_token_is_rejected(keypair):
    with pytest.raises(JWTError):
        oidc.decode_linkedin_id_token(_token(keypair[0], exp=int(time.time()) - 60), audience="test-client")


def test_foreign_issuer_is_rejected(keypair):
    with pytest.raises(JWTError):
        oidc.decode_linkedin_id_token(_token(keypair[0], iss="https://evil.example"), audience="test-client")


def test_unknown_key_id_is_rejected(keypair):
    with pytest.raises(ValueError):
        oidc.decode_linkedin_id_token(_token(keypair[0], kid="rotated-away"), audience="test-client")


def test_jwks_cache_fetches_once_per_ttl(monkeypatch):
    calls = []

    class FakeResponse:
        def raise_for_status(self):
            pass

        def json(self):
            return {"keys": [{"kid": str(len(calls))}]}

    class FakeClient:
        def __init__(self, *args, **kwargs):
            pass

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def get(self, url):
            calls.append(url)
            return FakeResponse()

    monkeypatch.setattr(oidc.httpx, "Client", FakeClient)
    cache = oidc.JwksCache(url="https://jwks.example/keys", ttl=3600)
    first = cache.get()
    assert cache.get() is first
    assert calls == ["https://jwks.example/keys"]

    cache.ttl = -1
    cache.get()
    assert len(calls) == 2
