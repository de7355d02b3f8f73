import logging
import httpx
from typing import Optional, Dict, Any
from app.config import settings
from app.errors import UpstreamError

logger = logging.getLogger(__name__)

class GeminiClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.api_key = api_key or settings.gemini_api_key
        if not self.api_key:
            raise UpstreamError("Gemini API key not configured")
        self.model = model or settings.gemini_model
        self.headers = {"x-goog-api-key": self.api_key, "Content-Type": "application/json"}
        self.client = httpx.Client(timeout=timeout or settings.http_timeout, transport=transport)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "GeminiClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def generate(self, prompt: str) -> str:
        """Return the first candidate's text, or "" when Gemini produced none."""
        url = f"{settings.gemini_api_base}/models/{self.model}:generateContent"
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        try:
            r = self.client.post(url, headers=self.headers, json=payload)
        except httpx.HTTPError as e:
            logger.error("Gemini request failed: %s", e)
            raise UpstreamError(f"Gemini request failed: {e.__class__.__name__}") from e
        try:
            data: Dict[str, Any] = r.json()
        except ValueError:
            data = {}
        if r.status_code >= 400:
            logger.error("Gemini API error %s: %s", r.status_code, r.text[:500])
            err = data.get("error") if isinstance(data, dict) else None
            if isinstance(err, dict):
                message = err.get("message")
            else:
                message = err if isinstance(err, str) else None
            raise UpstreamError(message or "Gemini API failed")
        return _first_candidate_text(data)

def _first_candidate_text(data: Any) -> str:
    # shape: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
    try:
        parts = data["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        return ""
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()
