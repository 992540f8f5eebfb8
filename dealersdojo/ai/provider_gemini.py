"""Google Gemini provider in JSON response mode."""

import logging
import os
from typing import Optional

from .prompts import build_conversation, to_gemini_contents
from .provider_base import ChatModel, parse_reply
from ..core.errors import ConfigError, ExternalModelError
from ..core.models import ChatTurn, RelayReply

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-1.5-pro-latest"

SAFETY_CATEGORIES = (
    "HARM_CATEGORY_HARASSMENT",
    "HARM_CATEGORY_HATE_SPEECH",
    "HARM_CATEGORY_SEXUALLY_EXPLICIT",
    "HARM_CATEGORY_DANGEROUS_CONTENT",
)


def build_safety_settings() -> dict:
    """Block medium-and-above content in every harm category."""
    from google.generativeai.types import HarmBlockThreshold, HarmCategory

    return {
        getattr(HarmCategory, category): HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE
        for category in SAFETY_CATEGORIES
    }


class GeminiProvider(ChatModel):
    def __init__(self, api_key: Optional[str] = None, model: str = DEFAULT_MODEL):
        self.api_key = api_key or os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY")
        self.model = model
        self._client: Optional[object] = None
        if not self.api_key:
            logger.warning("No Gemini API key provided; chat requests will be rejected")
            return

        import google.generativeai as genai

        genai.configure(api_key=self.api_key)
        self._client = genai.GenerativeModel(
            model_name=self.model,
            generation_config={"response_mime_type": "application/json"},
            safety_settings=build_safety_settings(),
        )
        logger.info("Google Gemini initialized: %s", self.model)

    @property
    def name(self) -> str:
        return f"Google Gemini ({self.model})"

    @property
    def configured(self) -> bool:
        return self._client is not None

    def reply(self, system_prompt: str, history: list[ChatTurn], user_message: str) -> RelayReply:
        if not self._client:
            raise ConfigError("API key not configured.")

        contents = to_gemini_contents(build_conversation(system_prompt, history, user_message))
        try:
            chat = self._client.start_chat(history=contents[:-1])
            res = chat.send_message(contents[-1]["parts"])
            text = res.text
        except Exception as e:
            logger.error("Gemini API error: %s", e)
            raise ExternalModelError("Failed to fetch AI response.", details=str(e)) from e
        return parse_reply(text)


def create_gemini_provider(api_key: Optional[str] = None, model: Optional[str] = None) -> GeminiProvider:
    """Factory for Gemini provider."""
    return GeminiProvider(api_key=api_key, model=model or DEFAULT_MODEL)
