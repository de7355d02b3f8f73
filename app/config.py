import os
from typing import List
from dotenv import load_dotenv

load_dotenv()

class Settings:
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./app.db")

    # Article store (populated by an external scraper, read-only here)
    mongodb_uri: str = os.getenv("MONGODB_URI", "")
    mongodb_db: str = os.getenv("MONGODB_DB", "agentic_ai_db")
    articles_collection: str = os.getenv("ARTICLES_COLLECTION", "articles")

    gemini_api_key: str = os.getenv("GEMINI_API_KEY", "")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    gemini_api_base: str = os.getenv("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")

    linkedin_client_id: str = os.getenv("LINKEDIN_CLIENT_ID", "")
    linkedin_client_secret: str = os.getenv("LINKEDIN_CLIENT_SECRET", "")
    # The connect and sign-in flows use different callback pages; LinkedIn requires
    # the exchange to repeat the exact redirect_uri used for the authorization request.
    linkedin_connect_redirect_uri: str = os.getenv(
        "LINKEDIN_CONNECT_REDIRECT_URI", "http://localhost:5173/auth/linkedin/connect-callback"
    )
    linkedin_login_redirect_uri: str = os.getenv(
        "LINKEDIN_LOGIN_REDIRECT_URI", "http://localhost:5173/auth/linkedin/callback"
    )
    linkedin_scopes: str = os.getenv("LINKEDIN_SCOPES", "openid profile email w_member_social")
    fernet_key: str = os.getenv("FERNET_KEY", "")

    firebase_credentials: str = os.getenv("FIREBASE_CREDENTIALS", "")
    firebase_project_id: str = os.getenv("FIREBASE_PROJECT_ID", "")

    http_timeout: float = float(os.getenv("HTTP_TIMEOUT", "20"))
    cors_origins: str = os.getenv("CORS_ORIGINS", "http://localhost:5173")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

settings = Settings()
