from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from app.db.base import Base

STATUS_DRAFT = "draft"
STATUS_PUBLISHED = "published"

def utcnow() -> datetime:
    # naive UTC, so values compare equal before and after a SQLite round trip
    return datetime.now(timezone.utc).replace(tzinfo=None)

class User(Base):
    __tablename__ = "users"
    uid = Column(String(128), primary_key=True)  # identity-provider user id
    # linked LinkedIn account; a non-empty token is the only "connected" signal
    linkedin_access_token_encrypted = Column(Text, nullable=True)
    linkedin_connected_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

class Draft(Base):
    __tablename__ = "drafts"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), ForeignKey("users.uid"), index=True, nullable=False)
    content = Column(Text, nullable=False)
    status = Column(String(16), default=STATUS_DRAFT, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, nullable=True)
    remote_post_id = Column(String(256), nullable=True)  # e.g. urn:li:share:...
    published_at = Column(DateTime, nullable=True)
