import json
import logging
from typing import Any, Optional

from openai import OpenAI, OpenAIError

from utils.config import Settings
from utils.exceptions import AIServiceError, ConfigurationError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are a helpful AI assistant."


class AIService:
    def __init__(self, settings: Settings, client: Optional[OpenAI] = None):
        """Text-completion passthrough for task drafting.

        The endpoint is OpenAI-compatible. Without an API key the client stays None
        and every call raises ConfigurationError, which is distinct from auth errors.
        """
        self.model = settings.ai_model
        self.client = client
        if self.client is None and settings.ai_api_key:
            self.client = OpenAI(
                api_key=settings.ai_api_key,
                base_url=settings.ai_base_url,
                timeout=30.0,
                max_retries=2,
            )
        if self.client is None:
            logger.warning("PPLX_API_KEY not set. AI assist is unavailable.")

    def chat(self, prompt: str, as_json: bool = False, system_prompt: Optional[str] = None) -> Any:
        """Run one completion. Callers may replace the system prompt, e.g. for drafting or improving a description."""
        if self.client is None:
            raise ConfigurationError("PPLX_API_KEY is not set in environment variables")
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt or SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.3,
            )
        except OpenAIError as e:
            logger.error(f"AI completion failed: {e}")
            raise AIServiceError(f"AI service error: {e}") from e

        text = response.choices[0].message.content if response.choices else None
        if not text:
            raise AIServiceError("No content returned from AI service")
        if not as_json:
            return text
        return extract_json(text)


def extract_json(text: str) -> Any:
    """Parse the outermost {...} in a reply, tolerating markdown fences around it."""
    start = text.find("{")
    end = text.rfind("}")
    candidate = text[start:end + 1] if start != -1 and end != -1 else text
    try:
        return json.loads(candidate)
    except ValueError:
        logger.error(f"Failed to parse JSON from AI response: {text[:200]}")
        raise AIServiceError("Failed to parse JSON from AI response")
