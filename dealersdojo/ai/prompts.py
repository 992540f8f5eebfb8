"""Conversation framing sent to the model."""

from ..core.models import ChatTurn

# Canned model acknowledgment that follows the persona prompt, so the real
# history always starts after a well-formed JSON reply.
PRIMING_ACK = '{"response": "Understood. I am ready to begin the simulation.", "score_change": 0}'


def priming_turns(system_prompt: str) -> list[ChatTurn]:
    return [
        ChatTurn(role="user", content=system_prompt),
        ChatTurn(role="model", content=PRIMING_ACK),
    ]


def build_conversation(system_prompt: str, history: list[ChatTurn], user_message: str) -> list[ChatTurn]:
    """Priming exchange, then the mission history, then the new user message."""
    return [
        *priming_turns(system_prompt),
        *history,
        ChatTurn(role="user", content=user_message),
    ]


def to_gemini_contents(turns: list[ChatTurn]) -> list[dict]:
    return [{"role": turn.role, "parts": [turn.content]} for turn in turns]
