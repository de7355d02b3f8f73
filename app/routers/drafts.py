# app/routers/drafts.py
import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.deps import get_current_uid, get_db, get_draft_feed, uid_from_token
from app.errors import AppError
from app.services import drafts
from app.services.draft_feed import DraftFeed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/drafts", tags=["drafts"])

class DraftIn(BaseModel):
    content: Optional[str] = None

@router.get("")
def list_drafts(uid: str = Depends(get_current_uid), db: Session = Depends(get_db)) -> Dict[str, Any]:
    return {"success": True, "drafts": drafts.list_drafts(db, uid)}

@router.post("")
def create_draft(
    body: DraftIn,
    uid: str = Depends(get_current_uid),
    db: Session = Depends(get_db),
    feed: DraftFeed = Depends(get_draft_feed),
) -> Dict[str, Any]:
    d = drafts.create_draft(db, feed, uid, body.content)
    return {"success": True, "draft": drafts.serialize(d)}

@router.patch("/{draft_id}")
def update_draft(
    draft_id: int,
    body: DraftIn,
    uid: str = Depends(get_current_uid),
    db: Session = Depends(get_db),
    feed: DraftFeed = Depends(get_draft_feed),
) -> Dict[str, Any]:
    d = drafts.update_draft(db, feed, uid, draft_id, body.content)
    return {"success": True, "draft": drafts.serialize(d)}

@router.delete("/{draft_id}")
def delete_draft(
    draft_id: int,
    uid: str = Depends(get_current_uid),
    db: Session = Depends(get_db),
    feed: DraftFeed = Depends(get_draft_feed),
) -> Dict[str, Any]:
    drafts.delete_draft(db, feed, uid, draft_id)
    return {"success": True}

def _snapshot(session_factory, uid: str) -> List[Dict[str, Any]]:
    # short-lived session; an open stream must not pin a pooled connection
    with session_factory() as db:
        return drafts.list_drafts(db, uid)

async def _read_until_closed(websocket: WebSocket) -> None:
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except ValueError:
                continue
            if isinstance(data, dict) and data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        return

@router.websocket("/stream")
async def stream_drafts(websocket: WebSocket, token: str = Query("")):
    # browsers cannot set headers on a WebSocket, so the identity token rides in the query
    try:
        uid = await run_in_threadpool(uid_from_token, token)
    except AppError as e:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason=e.public_message)
        return

    await websocket.accept()
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue()
    feed: DraftFeed = websocket.app.state.draft_feed
    # writers run in worker threads; hop onto this socket's loop
    sub = feed.subscribe(uid, lambda snapshot: loop.call_soon_threadsafe(queue.put_nowait, snapshot))
    reader = asyncio.create_task(_read_until_closed(websocket))
    getter: Optional[asyncio.Task] = None
    try:
        initial = await run_in_threadpool(_snapshot, websocket.app.state.session_factory, uid)
        await websocket.send_json({"type": "snapshot", "drafts": initial})
        while True:
            getter = asyncio.create_task(queue.get())
            done, _ = await asyncio.wait({getter, reader}, return_when=asyncio.FIRST_COMPLETED)
            if reader in done:
                break
            await websocket.send_json({"type": "snapshot", "drafts": getter.result()})
    except WebSocketDisconnect:
        pass
    finally:
        sub.cancel()
        for task in (getter, reader):
            if task is not None and not task.done():
                task.cancel()
        logger.debug("Draft stream closed for uid=%s", uid)
