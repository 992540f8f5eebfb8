"""Data models (Pydantic) for levels, chat turns and player progress."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class LevelDefinition(BaseModel):
    """One mission as described by the static level catalog."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: int = Field(..., description="Unique level id (1-based by convention)")
    title: str = Field(..., description="Card and game-screen title")
    briefing: str = Field(..., description="Narrative shown before the first turn")
    system_prompt: str = Field(..., alias="systemPrompt", description="Persona instructions for the model")
    mission_length: int = Field(..., alias="missionLength", gt=0, description="User turns per mission")
    pass_score: int = Field(..., alias="passScore", description="Inclusive pass threshold")


class ChatTurn(BaseModel):
    """Model-facing history entry."""

    role: Literal["user", "model"]
    content: str


class RelayReply(BaseModel):
    """Structured reply produced by the model and forwarded by the relay."""

    response: str = Field(..., description="In-character reply text")
    score_change: int = Field(..., description="Signed score delta for this turn")

    def to_turn(self) -> ChatTurn:
        return ChatTurn(role="model", content=self.model_dump_json())


class TranscriptEntry(BaseModel):
    """Player-visible chat log line."""

    sender: Literal["user", "ai", "system"]
    text: str


class PlayerProgress(BaseModel):
    """Unlocks and high scores, index-aligned with the level catalog."""

    unlocks: list[bool] = Field(default_factory=lambda: [True])
    scores: list[int] = Field(default_factory=lambda: [0])

    @classmethod
    def default(cls, level_count: int) -> "PlayerProgress":
        """Level 0 unlocked, everything else locked, all scores zero."""
        count = max(level_count, 1)
        return cls(
            unlocks=[True] + [False] * (count - 1),
            scores=[0] * count,
        )

    def fit(self, level_count: int) -> "PlayerProgress":
        """Return a copy padded or truncated to ``level_count`` entries."""
        count = max(level_count, 1)
        unlocks = (list(self.unlocks) + [False] * count)[:count]
        scores = (list(self.scores) + [0] * count)[:count]
        unlocks[0] = True
        return PlayerProgress(unlocks=unlocks, scores=scores)

    def is_unlocked(self, index: int) -> bool:
        return 0 <= index < len(self.unlocks) and self.unlocks[index]

    def high_score(self, index: int) -> int:
        if 0 <= index < len(self.scores):
            return self.scores[index]
        return 0
