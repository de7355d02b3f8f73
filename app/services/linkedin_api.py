# app/services/linkedin_api.py
import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode, quote

import httpx

from app.config import settings
from app.errors import UpstreamError

logger = logging.getLogger(__name__)

AUTH_URL  = "https://www.linkedin.com/oauth/v2/authorization"
TOKEN_URL = "https://www.linkedin.com/oauth/v2/accessToken"
UGC_URL   = "https://api.linkedin.com/v2/ugcPosts"

USERINFO_URL = "https://api.linkedin.com/v2/userinfo"
ME_URL = "https://api.linkedin.com/v2/me"


class LinkedInError(UpstreamError):
    """Any failed LinkedIn call. Opaque to API callers; details go to the log."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message, expose=False)
        self.status = status


def _client() -> httpx.Client:
    return httpx.Client(timeout=httpx.Timeout(settings.http_timeout, connect=5))


def _log_request_id(resp: httpx.Response) -> None:
    req_id = resp.headers.get("x-restli-request-id")
    if req_id:
        logger.debug("LinkedIn request id: %s", req_id)


def _send(context: str, method: str, url: str, **kwargs) -> httpx.Response:
    # Single attempt: authorization codes are one-shot, so nothing here is retried.
    try:
        with _client() as c:
            r = c.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        logger.error("[%s] request failed: %s", context, e)
        raise LinkedInError(f"{context}: {e.__class__.__name__}") from e
    _log_request_id(r)
    if r.status_code >= 400:
        logger.error("[%s] LinkedIn returned %s: %s", context, r.status_code, r.text[:500])
        raise LinkedInError(f"{context}: LinkedIn returned {r.status_code}", status=r.status_code)
    return r


def _json(context: str, r: httpx.Response) -> Dict[str, Any]:
    try:
        data = r.json()
    except ValueError as e:
        raise LinkedInError(f"{context}: response is not JSON", status=r.status_code) from e
    if not isinstance(data, dict):
        raise LinkedInError(f"{context}: unexpected response shape", status=r.status_code)
    return data


def _bearer(access_token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def auth_url(state: str, redirect_uri: str, scopes: Optional[str] = None) -> str:
    """Return the authorization url. If scopes is provided use that, otherwise use settings.linkedin_scopes."""
    params = {
        "response_type": "code",
        "client_id": settings.linkedin_client_id,
        "redirect_uri": redirect_uri,
        "scope": scopes or settings.linkedin_scopes,
        "state": state,
    }
    qs = urlencode(params, quote_via=quote, safe=":/")
    return f"{AUTH_URL}?{qs}"


def exchange_code_for_token(code: str, redirect_uri: str) -> Dict[str, Any]:
    data = {
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "client_id": settings.linkedin_client_id,
        "client_secret": settings.linkedin_client_secret,
    }
    r = _send(
        "token_exchange", "POST", TOKEN_URL,
        data=data,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    payload = _json("token_exchange", r)
    if not payload.get("access_token"):
        raise LinkedInError("token_exchange: no access_token in response", status=r.status_code)
    return payload


def userinfo(access_token: str) -> Dict[str, Any]:
    """OpenID profile of the token owner: sub, name, email, picture."""
    r = _send("userinfo", "GET", USERINFO_URL, headers=_bearer(access_token))
    return _json("userinfo", r)


def get_member_id(access_token: str) -> str:
    """Return the person id from /v2/me."""
    r = _send("me", "GET", ME_URL, headers=_bearer(access_token), params={"projection": "(id)"})
    # LinkedIn returns {"id": "AbC123..."}
    member_id = str(_json("me", r).get("id") or "")
    if not member_id:
        raise LinkedInError("me: profile has no id", status=r.status_code)
    return member_id


def post_text(access_token: str, author_urn: str, text: str) -> str:
    """Create a public plain-text share and return its id (urn:li:share:... / urn:li:ugcPost:...)."""
    payload = {
        "author": author_urn,
        "lifecycleState": "PUBLISHED",
        "specificContent": {
            "com.linkedin.ugc.ShareContent": {
                "shareCommentary": {"text": text},
                "shareMediaCategory": "NONE",
            }
        },
        "visibility": {"com.linkedin.ugc.MemberNetworkVisibility": "PUBLIC"},
    }
    r = _send(
        "post_text", "POST", UGC_URL,
        headers={
            **_bearer(access_token),
            "Content-Type": "application/json",
            "X-Restli-Protocol-Version": "2.0.0",
        },
        json=payload,
    )
    post_id = r.headers.get("x-restli-id") or ""
    if not post_id and r.content:
        post_id = str(_json("post_text", r).get("id") or "")
    if not post_id:
        raise LinkedInError("post_text: LinkedIn did not return a post id", status=r.status_code)
    return post_id
