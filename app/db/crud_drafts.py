from datetime import datetime
from sqlalchemy.orm import Session
from typing import Optional, List
from app.db import models

def create_draft(db: Session, user_id: str, content: str) -> models.Draft:
    obj = models.Draft(user_id=user_id, content=content, status=models.STATUS_DRAFT, created_at=models.utcnow())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def get_draft(db: Session, user_id: str, draft_id: int) -> Optional[models.Draft]:
    # owner-scoped: another user's draft is indistinguishable from a missing one
    return (
        db.query(models.Draft)
        .filter(models.Draft.id == draft_id, models.Draft.user_id == user_id)
        .first()
    )

def update_content(db: Session, draft: models.Draft, content: str) -> models.Draft:
    draft.content = content
    draft.updated_at = models.utcnow()
    db.add(draft)
    db.commit()
    db.refresh(draft)
    return draft

def mark_published(
    db: Session, draft: models.Draft, remote_post_id: str, published_at: Optional[datetime] = None
) -> models.Draft:
    draft.status = models.STATUS_PUBLISHED
    draft.remote_post_id = remote_post_id
    draft.published_at = published_at or models.utcnow()
    db.add(draft)
    db.commit()
    db.refresh(draft)
    return draft

def delete_draft(db: Session, draft: models.Draft) -> None:
    db.delete(draft)
    db.commit()

def list_drafts(db: Session, user_id: str) -> List[models.Draft]:
    return (
        db.query(models.Draft)
        .filter(models.Draft.user_id == user_id)
        .order_by(models.Draft.created_at.desc(), models.Draft.id.desc())
        .all()
    )
