# app/db/crud_users.py
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from app.db.models import User, utcnow
from app.db import token_crypto

def get_user(db: Session, uid: str) -> Optional[User]:
    return db.query(User).filter(User.uid == uid).first()

def ensure_user(db: Session, uid: str) -> User:
    # user rows are created implicitly the first time we see an identity
    u = get_user(db, uid)
    if u:
        return u
    u = User(uid=uid)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u

def save_linkedin_token(
    db: Session,
    uid: str,
    access_token: str,
    connected_at: Optional[datetime] = None,
) -> User:
    """Attach (or overwrite) the linked LinkedIn account on a user record.

    Only the linked-account fields are touched, so anything else stored on
    the record survives a reconnect.
    """
    u = get_user(db, uid) or User(uid=uid)
    u.linkedin_access_token_encrypted = token_crypto.encrypt_token(access_token)
    u.linkedin_connected_at = connected_at or utcnow()
    db.add(u)
    db.commit()
    db.refresh(u)
    return u

def is_connected(u: Optional[User]) -> bool:
    return bool(u and u.linkedin_access_token_encrypted)

def get_access_token(db: Session, uid: str) -> Optional[str]:
    u = get_user(db, uid)
    if not is_connected(u):
        return None
    return token_crypto.decrypt_token(u.linkedin_access_token_encrypted) or None

def clear_linkedin_token(db: Session, uid: str) -> None:
    u = get_user(db, uid)
    if not u:
        return
    u.linkedin_access_token_encrypted = None
    u.linkedin_connected_at = None
    db.add(u)
    db.commit()
