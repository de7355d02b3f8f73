# app/auth/firebase.py
import logging
import threading
from typing import Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from app.config import settings
from app.errors import AppError, AuthError, UpstreamError

logger = logging.getLogger(__name__)

_init_lock = threading.Lock()


def _ensure_app() -> firebase_admin.App:
    with _init_lock:
        try:
            return firebase_admin.get_app()
        except ValueError:
            cred = credentials.Certificate(settings.firebase_credentials) if settings.firebase_credentials else None
            options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
            logger.info("Initializing Firebase app (project=%s)", settings.firebase_project_id or "default")
            return firebase_admin.initialize_app(cred, options)


def verify_id_token(id_token: str) -> str:
    """Return the uid behind a Firebase ID token or raise AuthError."""
    app = _ensure_app()
    try:
        decoded = auth.verify_id_token(id_token, app=app)
    except auth.CertificateFetchError as e:
        raise UpstreamError("Could not fetch identity provider certificates", expose=False) from e
    except (auth.InvalidIdTokenError, auth.UserDisabledError) as e:
        # ExpiredIdTokenError and RevokedIdTokenError are InvalidIdTokenError subclasses
        logger.info("Rejected bearer token: %s", e.__class__.__name__)
        raise AuthError("Invalid bearer token") from e
    except ValueError as e:
        # raised for a missing project id, not for a bad token
        logger.error("Identity provider is misconfigured: %s", e)
        raise AppError("Identity provider is misconfigured", expose=False) from e
    except FirebaseError as e:
        logger.error("Identity provider rejected token check: %s", e)
        raise UpstreamError("Identity provider request failed", expose=False) from e
    return decoded["uid"]


def get_or_create_user(
    uid: str,
    email: Optional[str] = None,
    display_name: Optional[str] = None,
    photo_url: Optional[str] = None,
) -> auth.UserRecord:
    app = _ensure_app()
    try:
        return auth.get_user(uid, app=app)
    except auth.UserNotFoundError:
        pass
    except FirebaseError as e:
        logger.error("Looking up identity-provider user uid=%s failed: %s", uid, e)
        raise UpstreamError("Identity provider request failed", expose=False) from e
    profile = {"email": email, "display_name": display_name, "photo_url": photo_url}
    kwargs = {k: v for k, v in profile.items() if v}
    if email:
        kwargs["email_verified"] = True
    logger.info("Creating identity-provider user for uid=%s", uid)
    try:
        return auth.create_user(uid=uid, app=app, **kwargs)
    except FirebaseError as e:
        # e.g. EmailAlreadyExistsError when another account holds the LinkedIn email
        logger.error("Creating identity-provider user uid=%s failed: %s", uid, e)
        raise UpstreamError("Identity provider request failed", expose=False) from e


def create_custom_token(uid: str) -> str:
    try:
        token = auth.create_custom_token(uid, app=_ensure_app())
    except FirebaseError as e:
        # TokenSignError when the credentials cannot sign
        logger.error("Minting custom token for uid=%s failed: %s", uid, e)
        raise UpstreamError("Identity provider request failed", expose=False) from e
    return token.decode() if isinstance(token, bytes) else token
