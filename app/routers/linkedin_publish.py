# app/routers/linkedin_publish.py
from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from typing import Dict, Any, Optional
from sqlalchemy.orm import Session

from app.deps import get_current_uid, get_db, get_draft_feed, get_publish_guard
from app.services import publish as publish_flow
from app.services.draft_feed import DraftFeed
from app.services.publish import PublishGuard

router = APIRouter(prefix="/api", tags=["linkedin"])

class PublishIn(BaseModel):
    content: Optional[str] = None
    draft_id: Optional[int] = Field(None, alias="draftId")

@router.post("/publishPost")
def publish_post(
    body: PublishIn,
    uid: str = Depends(get_current_uid),
    db: Session = Depends(get_db),
    feed: DraftFeed = Depends(get_draft_feed),
    guard: PublishGuard = Depends(get_publish_guard),
) -> Dict[str, Any]:
    draft = publish_flow.publish(db, feed, guard, uid, body.content, draft_id=body.draft_id)
    return {"success": True, "id": draft.remote_post_id, "draftId": draft.id}
