from typing import Any
from app.errors import InvalidRequest, UpstreamError
from app.services.genai_client import GeminiClient

MIN_TEXT_LENGTH = 100

def summarize_text(text: Any) -> str:
    if not text or not isinstance(text, str):
        raise InvalidRequest("Text is required and must be a string")
    if len(text) < MIN_TEXT_LENGTH:
        raise InvalidRequest(f"Text too short to summarize (minimum {MIN_TEXT_LENGTH} characters)")
    with GeminiClient() as gemini:
        summary = gemini.generate(text)
    if not summary:
        raise UpstreamError("Gemini returned no summary")
    return summary
