from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from app.db import crud_drafts, crud_users, models
from app.errors import Conflict, InvalidRequest, NotFound
from app.services.draft_feed import DraftFeed

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() + "Z" if value else None

def serialize(d: models.Draft) -> Dict[str, Any]:
    return {
        "id": d.id,
        "user_id": d.user_id,
        "content": d.content,
        "status": d.status,
        "created_at": _iso(d.created_at),
        "updated_at": _iso(d.updated_at),
        "remote_post_id": d.remote_post_id,
        "published_at": _iso(d.published_at),
    }

def list_drafts(db: Session, user_id: str) -> List[Dict[str, Any]]:
    return [serialize(d) for d in crud_drafts.list_drafts(db, user_id)]

def _broadcast(db: Session, feed: DraftFeed, user_id: str) -> None:
    if feed.subscriber_count(user_id):
        feed.notify(user_id, list_drafts(db, user_id))

def require_content(content: Optional[str]) -> str:
    if not content or not content.strip():
        raise InvalidRequest("Empty content")
    return content

def get_owned(db: Session, user_id: str, draft_id: int) -> models.Draft:
    d = crud_drafts.get_draft(db, user_id, draft_id)
    if not d:
        raise NotFound("Draft not found")
    return d

def create_draft(db: Session, feed: DraftFeed, user_id: str, content: Optional[str]) -> models.Draft:
    content = require_content(content)
    crud_users.ensure_user(db, user_id)
    d = crud_drafts.create_draft(db, user_id, content)
    _broadcast(db, feed, user_id)
    return d

def update_draft(db: Session, feed: DraftFeed, user_id: str, draft_id: int, content: Optional[str]) -> models.Draft:
    content = require_content(content)
    d = get_owned(db, user_id, draft_id)
    if d.status == models.STATUS_PUBLISHED:
        raise Conflict("Published drafts cannot be edited")
    d = crud_drafts.update_content(db, d, content)
    _broadcast(db, feed, user_id)
    return d

def mark_published(db: Session, feed: DraftFeed, d: models.Draft, remote_post_id: str) -> models.Draft:
    d = crud_drafts.mark_published(db, d, remote_post_id)
    _broadcast(db, feed, d.user_id)
    return d

def delete_draft(db: Session, feed: DraftFeed, user_id: str, draft_id: int) -> None:
    d = get_owned(db, user_id, draft_id)
    crud_drafts.delete_draft(db, d)
    _broadcast(db, feed, user_id)
