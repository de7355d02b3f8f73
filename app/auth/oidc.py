# app/auth/oidc.py
import threading
import time
from typing import Any, Dict, Optional

import httpx
from jose import jwt, exceptions as jose_errors

from app.config import settings

# Known LinkedIn issuer variants seen in the wild
LINKEDIN_ISS_ALLOWLIST = {
    "https://www.linkedin.com",
    "https://www.linkedin.com/",
    "https://www.linkedin.com/oauth",
    "https://www.linkedin.com/oauth/",
}

LINKEDIN_JWKS = "https://www.linkedin.com/oauth/openid/jwks"
ALGS = ["RS256"]
JWKS_TTL_SECONDS = 3600


class JwksCache:
    """LinkedIn signing keys, refetched at most once per TTL."""

    def __init__(self, url: str = LINKEDIN_JWKS, ttl: float = JWKS_TTL_SECONDS):
        self.url = url
        self.ttl = ttl
        self._keys: Optional[Dict[str, Any]] = None
        self._fetched_at = 0.0
        self._lock = threading.Lock()

    def get(self) -> Dict[str, Any]:
        with self._lock:
            if not self._keys or time.time() - self._fetched_at > self.ttl:
                with httpx.Client(timeout=httpx.Timeout(settings.http_timeout, connect=5)) as client:
                    r = client.get(self.url)
                    r.raise_for_status()
                    self._keys = r.json()
                    self._fetched_at = time.time()
            return self._keys


_jwks = JwksCache()


def _select_jwk_for_token(id_token: str, jwks: dict) -> dict:
    header = jwt.get_unverified_header(id_token)
    kid = header.get("kid")
    if not kid:
        raise ValueError("ID token header missing 'kid'")
    for k in jwks.get("keys", []):
        if k.get("kid") == kid:
            return k
    raise ValueError(f"No matching JWK for kid={kid}")


def decode_linkedin_id_token(id_token: str, audience: Optional[str] = None) -> dict:
    """
    Verifies signature with LinkedIn JWKS, expiry, audience (when given) and
    that the issuer is one of LINKEDIN_ISS_ALLOWLIST. Returns the claims.
    """
    jwk = _select_jwk_for_token(id_token, _jwks.get())
    claims = jwt.decode(
        id_token,
        jwk,
        algorithms=ALGS,
        audience=audience,
        options={"verify_aud": audience is not None, "verify_iss": False},
    )
    iss = claims.get("iss")
    if iss not in LINKEDIN_ISS_ALLOWLIST:
        raise jose_errors.JWTClaimsError(f"Invalid issuer: {iss}")
    return claims
