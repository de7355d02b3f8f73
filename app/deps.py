from typing import Generator, Optional
from fastapi import Header, Request
from app.auth import firebase
from app.db.base import SessionLocal, engine, Base
from app.db import models  # noqa: F401  (registers tables on Base.metadata)
from app.errors import AppError, AuthError
from app.services.article_store import ArticleStore
from app.services.draft_feed import DraftFeed
from app.services.publish import PublishGuard

def init_db() -> None:
    Base.metadata.create_all(bind=engine)

def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def uid_from_token(token: Optional[str]) -> str:
    if not token:
        raise AuthError("Missing bearer token")
    return firebase.verify_id_token(token)

def get_current_uid(authorization: Optional[str] = Header(None)) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("Missing bearer token")
    return uid_from_token(authorization[len("Bearer "):].strip())

def get_article_store(request: Request) -> ArticleStore:
    store = getattr(request.app.state, "article_store", None)
    if store is None:
        raise AppError("Article store is not initialized", expose=False)
    return store

def get_draft_feed(request: Request) -> DraftFeed:
    return request.app.state.draft_feed

def get_publish_guard(request: Request) -> PublishGuard:
    return request.app.state.publish_guard
