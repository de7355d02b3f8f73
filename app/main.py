import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.config import settings
from app.db.base import SessionLocal
from app.deps import init_db
from app.errors import AppError, GENERIC_MESSAGE
from app.services.article_store import ArticleStore
from app.services.draft_feed import DraftFeed
from app.services.publish import PublishGuard

# Routers
from app.routers import articles, auth_linkedin, drafts, linkedin_publish

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="LinkedIn Drafts Dashboard API", version="1.0.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# process-wide collaborators, shared by all requests
app.state.session_factory = SessionLocal
app.state.draft_feed = DraftFeed()
app.state.publish_guard = PublishGuard()
app.state.article_store = None

@app.on_event("startup")
def _startup():
    if not settings.mongodb_uri:
        raise RuntimeError("MONGODB_URI is not set; the article store cannot start")
    init_db()
    app.state.article_store = ArticleStore(
        settings.mongodb_uri,
        settings.mongodb_db,
        settings.articles_collection,
        timeout_ms=int(settings.http_timeout * 1000),
    )

@app.on_event("shutdown")
def _shutdown():
    if app.state.article_store is not None:
        app.state.article_store.close()
        app.state.article_store = None

@app.exception_handler(AppError)
async def _app_error(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.public_message})

@app.exception_handler(RequestValidationError)
async def _bad_body(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"success": False, "error": message})

@app.exception_handler(SQLAlchemyError)
async def _db_error(request: Request, exc: SQLAlchemyError):
    logger.error("%s %s database error: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=500, content={"success": False, "error": GENERIC_MESSAGE})

@app.get("/")
def root():
    return {"message": "LinkedIn Drafts Dashboard API is running!"}

# Mount routes
app.include_router(auth_linkedin.router)      # /api/linkedinAuth, /api/saveLinkedInTokens, /api/linkedin/*
app.include_router(linkedin_publish.router)   # /api/publishPost
app.include_router(drafts.router)             # /api/drafts/*
app.include_router(articles.router)           # /api/articles/*
