from textwrap import dedent
from typing import Any
from app.errors import InvalidRequest, UpstreamError
from app.services.genai_client import GeminiClient
from app.services.summarize import MIN_TEXT_LENGTH

GUIDELINES = '''- Professional tone
- Strong hook in first line
- 2-4 short paragraphs
- Add insights or key takeaways
- Add 3-5 relevant hashtags at the end
- No emojis unless essential'''

def _truncate(text: str, max_chars: int = 12000) -> str:
    return text[:max_chars]

def _build_prompt(text: str) -> str:
    return dedent('''
    Write a LinkedIn-style post based on the following article content.

    Guidelines:
    {guidelines}

    CONTENT:
    {content}
    ''').strip().format(guidelines=GUIDELINES, content=_truncate(text))

def rewrite_linkedin(text: Any) -> str:
    if not text or not isinstance(text, str) or len(text) < MIN_TEXT_LENGTH:
        raise InvalidRequest("Not enough content to generate a LinkedIn post.")
    with GeminiClient() as gemini:
        post = gemini.generate(_build_prompt(text))
    if not post:
        raise UpstreamError("Gemini returned no post")
    return post
