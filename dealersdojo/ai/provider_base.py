"""Base class for chat model providers."""

import json
import re
from abc import ABC, abstractmethod

from pydantic import ValidationError as PydanticValidationError

from ..core.errors import ExternalModelError
from ..core.models import ChatTurn, RelayReply


def extract_json(text: str) -> str:
    """Extract a JSON object from model output (may include code fences)."""
    json_match = re.search(r"```(?:json)?\s*(\{.*?\})\s*```", text, re.DOTALL)
    if json_match:
        return json_match.group(1)
    json_match = re.search(r"\{.*\}", text, re.DOTALL)
    if json_match:
        return json_match.group(0)
    return text.strip()


def parse_reply(text: str) -> RelayReply:
    try:
        return RelayReply.model_validate(json.loads(extract_json(text)))
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ExternalModelError("Failed to fetch AI response.", details=str(e)) from e


class ChatModel(ABC):
    """Unified interface for the in-character negotiation model."""

    @property
    @abstractmethod
    def name(self) -> str:
        raise NotImplementedError

    @property
    def configured(self) -> bool:
        """False when a required credential is missing."""
        return True

    @abstractmethod
    def reply(self, system_prompt: str, history: list[ChatTurn], user_message: str) -> RelayReply:
        """Answer ``user_message`` given the persona prompt and prior turns.

        Raises:
            ConfigError: the provider is not configured
            ExternalModelError: the call failed or returned unusable output
        """
        raise NotImplementedError
