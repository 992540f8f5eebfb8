"""Mock provider

Canned, keyword-scored replies for playing without a model API key.
"""

from .provider_base import ChatModel
from ..core.models import ChatTurn, RelayReply

POSITIVE_MARKERS = (
    "because",
    "research",
    "market",
    "data",
    "compar",
    "understand",
    "appreciate",
    "together",
    "commit",
    "long-term",
    "flexib",
    "alternative",
)

NEGATIVE_MARKERS = (
    "ridiculous",
    "stupid",
    "scam",
    "take it or leave it",
    "final offer",
    "whatever",
    "i don't care",
    "or else",
    "shut up",
)

REPLIES = (
    "Interesting. Tell me more about what you have in mind.",
    "I hear you, but you have to understand my position here.",
    "That's a fair point. I might be able to move a little.",
    "Let's not get ahead of ourselves. What else can you offer?",
    "Alright, you drive a hard bargain. Where do we go from here?",
)


class MockProvider(ChatModel):
    """Mock provider - local heuristics, no network."""

    @property
    def name(self) -> str:
        return "Mock Provider (Local)"

    def reply(self, system_prompt: str, history: list[ChatTurn], user_message: str) -> RelayReply:
        text = user_message.lower()
        score = sum(2 for marker in POSITIVE_MARKERS if marker in text)
        score -= sum(3 for marker in NEGATIVE_MARKERS if marker in text)
        if "?" in text:
            score += 1
        score = max(-5, min(5, score))

        turn_index = len(history) // 2
        return RelayReply(response=REPLIES[turn_index % len(REPLIES)], score_change=score)
