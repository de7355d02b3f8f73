from fastapi import APIRouter, Depends
from pydantic import BaseModel
from typing import Any, Dict, Optional
from app.deps import get_article_store
from app.errors import NotFound
from app.services.article_store import ArticleStore
from app.services.summarize import summarize_text
from app.services.rewrite import rewrite_linkedin

router = APIRouter(prefix="/api/articles", tags=["articles"])

class TextIn(BaseModel):
    text: Optional[Any] = None

@router.get("")
def list_articles(store: ArticleStore = Depends(get_article_store)) -> Dict[str, Any]:
    return {"success": True, "articles": store.list_recent()}

@router.post("/summarize")
def summarize(body: TextIn):
    return {"success": True, "summary": summarize_text(body.text)}

@router.post("/generate-post")
def generate_post(body: TextIn):
    return {"success": True, "post": rewrite_linkedin(body.text)}

@router.get("/{article_id}")
def get_article(article_id: str, store: ArticleStore = Depends(get_article_store)) -> Dict[str, Any]:
    article = store.get(article_id)
    if not article:
        raise NotFound("Article not found")
    return {"success": True, "article": article}
