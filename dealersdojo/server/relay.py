"""Chat relay service.

Validates relay requests and forwards them to the configured chat model.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..ai.provider_base import ChatModel
from ..ai.provider_gemini import create_gemini_provider
from ..ai.provider_mock import MockProvider
from ..core.errors import ConfigError, ValidationError
from ..core.models import ChatTurn, RelayReply
from ..core.state import Settings

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("systemPrompt", "history", "userMessage")


def _is_missing(body: dict, key: str) -> bool:
    value = body.get(key)
    if key == "history":
        return value is None
    return not value


class ChatRelay:
    """Stateless passthrough from relay requests to a ``ChatModel``."""

    def __init__(self, provider: ChatModel) -> None:
        self.provider = provider

    def ensure_configured(self) -> None:
        if not self.provider.configured:
            raise ConfigError("API key not configured.")

    def parse_request(self, body: Any) -> tuple[str, list[ChatTurn], str]:
        """Check a decoded request body and return its three fields."""
        if not isinstance(body, dict) or any(_is_missing(body, key) for key in REQUIRED_FIELDS):
            raise ValidationError("Missing required fields.")
        if not isinstance(body["systemPrompt"], str) or not isinstance(body["userMessage"], str):
            raise ValidationError("systemPrompt and userMessage must be strings.")
        if not isinstance(body["history"], list):
            raise ValidationError("history must be a list.")
        try:
            history = [ChatTurn.model_validate(turn) for turn in body["history"]]
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid history entry: {e.errors()[0]['msg']}") from e
        return body["systemPrompt"], history, body["userMessage"]

    def relay(self, system_prompt: str, history: list[ChatTurn], user_message: str) -> RelayReply:
        self.ensure_configured()
        logger.debug("Relaying turn with %d history entries", len(history))
        return self.provider.reply(system_prompt, history, user_message)


def create_provider(settings: Settings) -> ChatModel:
    """Build the provider named by ``settings.ai_provider``."""
    provider_type = settings.ai_provider.lower()
    if provider_type == "mock":
        return MockProvider()
    if provider_type == "gemini":
        return create_gemini_provider(model=settings.ai_model)
    raise ConfigError(f"Unknown AI provider: {settings.ai_provider}")


def build_relay(settings: Settings) -> ChatRelay:
    provider = create_provider(settings)
    logger.info("AI provider: %s", provider.name)
    return ChatRelay(provider)
