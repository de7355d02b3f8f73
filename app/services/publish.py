# app/services/publish.py
# Draft is saved before the LinkedIn call; on failure it stays a draft.
import logging
import threading
from contextlib import contextmanager
from typing import Iterator, Optional, Set

from sqlalchemy.orm import Session

from app.db import crud_users, models
from app.errors import Conflict, NotConnected, ReconnectRequired
from app.services import drafts, linkedin_api
from app.services.draft_feed import DraftFeed
from app.services.linkedin_api import LinkedInError

logger = logging.getLogger(__name__)


class PublishGuard:
    """Single-flight per draft id within this process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight: Set[int] = set()

    @contextmanager
    def hold(self, draft_id: int) -> Iterator[None]:
        with self._lock:
            if draft_id in self._in_flight:
                raise Conflict("A publish for this draft is already in progress")
            self._in_flight.add(draft_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(draft_id)

    def is_held(self, draft_id: int) -> bool:
        with self._lock:
            return draft_id in self._in_flight


def _send_to_linkedin(db: Session, feed: DraftFeed, uid: str, draft: models.Draft, access_token: str) -> models.Draft:
    try:
        member_id = linkedin_api.get_member_id(access_token)
        post_id = linkedin_api.post_text(access_token, f"urn:li:person:{member_id}", draft.content)
    except LinkedInError as e:
        if e.status == 401:
            # expired or revoked token; drop it so the account reads as disconnected
            crud_users.clear_linkedin_token(db, uid)
            logger.warning("LinkedIn rejected stored token for uid=%s; cleared", uid)
            raise ReconnectRequired() from e
        logger.error("Publish of draft=%s failed: %s", draft.id, e.message)
        raise

    try:
        draft = drafts.mark_published(db, feed, draft, post_id)
    except Exception:
        logger.error("Draft=%s is live as %s but could not be marked published", draft.id, post_id)
        raise
    logger.info("Published draft=%s for uid=%s as %s", draft.id, uid, post_id)
    return draft


def publish(
    db: Session,
    feed: DraftFeed,
    guard: PublishGuard,
    uid: str,
    content: Optional[str],
    draft_id: Optional[int] = None,
) -> models.Draft:
    content = drafts.require_content(content)

    access_token = crud_users.get_access_token(db, uid)
    if not access_token:
        raise NotConnected()

    if draft_id is not None:
        with guard.hold(draft_id):
            draft = drafts.update_draft(db, feed, uid, draft_id, content)
            return _send_to_linkedin(db, feed, uid, draft, access_token)

    draft = drafts.create_draft(db, feed, uid, content)
    with guard.hold(draft.id):
        return _send_to_linkedin(db, feed, uid, draft, access_token)
