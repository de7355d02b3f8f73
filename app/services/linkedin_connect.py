# app/services/linkedin_connect.py
# Authorization codes are single use, so nothing here retries.
import logging
from typing import Any, Dict, Optional

import httpx
from jose import JWTError
from sqlalchemy.orm import Session

from app.auth import firebase
from app.auth.oidc import decode_linkedin_id_token
from app.config import settings
from app.db import crud_users
from app.errors import InvalidRequest
from app.services import linkedin_api
from app.services.linkedin_api import LinkedInError

logger = logging.getLogger(__name__)


def _require_code(code: Optional[str]) -> str:
    if not code or not code.strip():
        raise InvalidRequest("Missing code")
    return code.strip()


def connect_account(db: Session, uid: str, code: Optional[str]) -> None:
    code = _require_code(code)
    token_resp = linkedin_api.exchange_code_for_token(code, settings.linkedin_connect_redirect_uri)
    # the code is spent from here on; a failed write below cannot be retried with it
    crud_users.save_linkedin_token(db, uid, token_resp["access_token"])
    logger.info("LinkedIn connected for uid=%s (expires_in=%s)", uid, token_resp.get("expires_in"))


def _profile_from_token_response(token_resp: Dict[str, Any]) -> Dict[str, Any]:
    id_token = token_resp.get("id_token")
    if not id_token:
        return linkedin_api.userinfo(token_resp["access_token"])
    try:
        return decode_linkedin_id_token(id_token, audience=settings.linkedin_client_id or None)
    except (JWTError, ValueError, httpx.HTTPError) as e:
        logger.error("LinkedIn id_token rejected: %s", e)
        raise LinkedInError("id_token verification failed") from e


def sign_in_with_linkedin(db: Session, code: Optional[str]) -> str:
    code = _require_code(code)
    token_resp = linkedin_api.exchange_code_for_token(code, settings.linkedin_login_redirect_uri)
    profile = _profile_from_token_response(token_resp)

    uid = profile.get("sub")
    if not uid:
        raise LinkedInError("LinkedIn profile has no 'sub'")

    firebase.get_or_create_user(
        uid,
        email=profile.get("email"),
        display_name=profile.get("name"),
        photo_url=profile.get("picture"),
    )
    crud_users.ensure_user(db, uid)
    logger.info("LinkedIn sign-in for uid=%s", uid)
    return firebase.create_custom_token(uid)
