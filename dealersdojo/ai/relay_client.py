"""HTTP client for the chat relay.

One POST per turn. Every failure (transport, HTTP status, malformed body) is
reported as a single ``RelayError``; the caller decides what to do with it.
"""

import logging
from typing import Optional

import requests
from pydantic import ValidationError as PydanticValidationError

from ..core.errors import RelayError
from ..core.models import ChatTurn, RelayReply

logger = logging.getLogger(__name__)

CHAT_PATH = "/api/chat"


class RelayClient:
    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.url = base_url.rstrip("/") + CHAT_PATH
        self.timeout = timeout
        self._session = session or requests.Session()

    def send(self, system_prompt: str, history: list[ChatTurn], new_message: str) -> RelayReply:
        payload = {
            "systemPrompt": system_prompt,
            "history": [turn.model_dump() for turn in history],
            "userMessage": new_message,
        }
        try:
            resp = self._session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Relay request failed: %s", e)
            raise RelayError(str(e)) from e

        if not resp.ok:
            raise RelayError(self._error_message(resp))

        try:
            return RelayReply.model_validate(resp.json())
        except (ValueError, PydanticValidationError) as e:
            logger.error("Malformed relay response: %s", e)
            raise RelayError("Malformed response from server") from e

    @staticmethod
    def _error_message(resp: requests.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return "Server error"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return "Server error"
