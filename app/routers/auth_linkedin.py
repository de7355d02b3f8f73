# app/routers/auth_linkedin.py
import secrets
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from app.config import settings
from app.deps import get_current_uid, get_db
from app.db import crud_users
from app.errors import InvalidRequest
from app.services import linkedin_api, linkedin_connect

router = APIRouter(prefix="/api", tags=["linkedin-auth"])

class CodeIn(BaseModel):
    code: Optional[str] = None

@router.post("/linkedinAuth")
def linkedin_auth(body: CodeIn, db: Session = Depends(get_db)) -> Dict[str, Any]:
    """Sign in with LinkedIn: returns a custom token for the identity provider."""
    token = linkedin_connect.sign_in_with_linkedin(db, body.code)
    return {"token": token}

@router.post("/saveLinkedInTokens")
def save_linkedin_tokens(
    body: CodeIn,
    uid: str = Depends(get_current_uid),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    linkedin_connect.connect_account(db, uid, body.code)
    return {"success": True}

@router.get("/linkedin/status")
def linkedin_status(uid: str = Depends(get_current_uid), db: Session = Depends(get_db)) -> Dict[str, Any]:
    user = crud_users.get_user(db, uid)
    connected = crud_users.is_connected(user)
    return {
        "connected": connected,
        "connected_at": user.linkedin_connected_at.isoformat() + "Z" if connected and user.linkedin_connected_at else None,
    }

@router.get("/linkedin/authorize-url")
def authorize_url(flow: str = Query("connect")) -> Dict[str, Any]:
    redirects = {
        "connect": settings.linkedin_connect_redirect_uri,
        "login": settings.linkedin_login_redirect_uri,
    }
    if flow not in redirects:
        raise InvalidRequest("flow must be 'connect' or 'login'")
    state = secrets.token_urlsafe(24)
    return {"url": linkedin_api.auth_url(state, redirects[flow]), "state": state}
