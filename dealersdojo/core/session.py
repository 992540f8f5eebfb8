"""Mission session controller.

Owns the transient state of the level being played (score, message count,
chat history, transcript) and drives the mission lifecycle::

    IDLE -> BRIEFING -> AWAITING_INPUT -> PROCESSING -> AWAITING_INPUT | ENDED

The controller never touches a rendering surface. Views subscribe to
``SessionEvent`` notifications and read state back from the controller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from .catalog import LevelCatalog
from .errors import RelayError
from .models import ChatTurn, LevelDefinition, PlayerProgress, RelayReply, TranscriptEntry
from .save import ProgressStore

logger = logging.getLogger(__name__)

RELAY_ERROR_PREFIX = "Error: Could not get response from AI."


class MissionState(str, Enum):
    IDLE = "idle"
    BRIEFING = "briefing"
    AWAITING_INPUT = "awaiting_input"
    PROCESSING = "processing"
    ENDED = "ended"


ALLOWED_TRANSITIONS: dict[MissionState, frozenset[MissionState]] = {
    MissionState.IDLE: frozenset({MissionState.BRIEFING}),
    MissionState.BRIEFING: frozenset({MissionState.AWAITING_INPUT}),
    MissionState.AWAITING_INPUT: frozenset({MissionState.PROCESSING, MissionState.IDLE}),
    MissionState.PROCESSING: frozenset({MissionState.AWAITING_INPUT, MissionState.ENDED}),
    MissionState.ENDED: frozenset({MissionState.IDLE}),
}


class SessionEvent(str, Enum):
    LEVEL_STARTED = "level_started"
    TRANSCRIPT = "transcript"
    SCORE_CHANGED = "score_changed"
    MESSAGE_COUNT_CHANGED = "message_count_changed"
    STATE_CHANGED = "state_changed"
    MISSION_ENDED = "mission_ended"
    LEVEL_SELECT = "level_select"


Listener = Callable[[SessionEvent, Any], None]


@dataclass
class SessionState:
    level: LevelDefinition
    score: int = 0
    message_count: int = 0
    history: list[ChatTurn] = field(default_factory=list)
    transcript: list[TranscriptEntry] = field(default_factory=list)


@dataclass(frozen=True)
class PendingTurn:
    """A submitted turn waiting for its relay round trip."""

    session: SessionState
    text: str
    system_prompt: str
    history: tuple[ChatTurn, ...]


@dataclass(frozen=True)
class MissionResult:
    level: LevelDefinition
    passed: bool
    unlocked_next: bool
    score: int
    high_score: int


@dataclass(frozen=True)
class LevelCard:
    """Level-select view of one catalog entry."""

    level: LevelDefinition
    index: int
    unlocked: bool
    high_score: int


def resolve_mission(
    session: SessionState,
    progress: PlayerProgress,
    *,
    level_index: int,
    level_count: int,
    store: Optional[ProgressStore] = None,
) -> MissionResult:
    """Apply the end-of-mission rules to ``progress`` and persist it.

    The mission passes when the score reaches ``pass_score`` (ties pass). The
    stored high score is replaced only by a strictly greater score, and a pass
    unlocks the next level when there is one. Unlocks are never cleared.
    """
    score = session.score
    passed = score >= session.level.pass_score

    if score > progress.scores[level_index]:
        progress.scores[level_index] = score

    unlocked_next = False
    next_index = level_index + 1
    if passed and next_index < level_count and not progress.unlocks[next_index]:
        progress.unlocks[next_index] = True
        unlocked_next = True

    if store is not None:
        store.save(progress)

    return MissionResult(
        level=session.level,
        passed=passed,
        unlocked_next=unlocked_next,
        score=score,
        high_score=progress.scores[level_index],
    )


class SessionController:
    """Mission state machine with injected catalog, progress store and relay."""

    def __init__(
        self,
        *,
        catalog: LevelCatalog,
        store: ProgressStore,
        relay,
        progress: Optional[PlayerProgress] = None,
    ) -> None:
        self.catalog = catalog
        self.store = store
        self.relay = relay
        self.progress = progress if progress is not None else store.load()
        self.last_result: Optional[MissionResult] = None

        self._state = MissionState.IDLE
        self._session: Optional[SessionState] = None
        self._listeners: list[Listener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: SessionEvent, payload: Any = None) -> None:
        for listener in list(self._listeners):
            listener(event, payload)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def state(self) -> MissionState:
        return self._state

    @property
    def session(self) -> Optional[SessionState]:
        return self._session

    @property
    def accepting_input(self) -> bool:
        return self._state is MissionState.AWAITING_INPUT

    def level_cards(self) -> list[LevelCard]:
        return [
            LevelCard(
                level=level,
                index=index,
                unlocked=self.progress.is_unlocked(index),
                high_score=self.progress.high_score(index),
            )
            for index, level in enumerate(self.catalog)
        ]

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _set_state(self, new_state: MissionState) -> None:
        if new_state not in ALLOWED_TRANSITIONS[self._state]:
            raise RuntimeError(f"Illegal mission transition {self._state.value} -> {new_state.value}")
        self._state = new_state
        self._emit(SessionEvent.STATE_CHANGED, new_state)

    def _append_transcript(self, sender: str, text: str) -> None:
        entry = TranscriptEntry(sender=sender, text=text)
        self._session.transcript.append(entry)
        self._emit(SessionEvent.TRANSCRIPT, entry)

    def start_level(self, level_id: int) -> bool:
        """Start the mission for ``level_id``.

        Unknown or locked levels, and calls outside IDLE, are ignored.
        """
        level = self.catalog.get(level_id)
        if level is None:
            logger.debug("start_level ignored: unknown level id %s", level_id)
            return False
        if self._state is not MissionState.IDLE:
            logger.debug("start_level ignored in state %s", self._state.value)
            return False
        if not self.progress.is_unlocked(self.catalog.index_of(level_id)):
            logger.debug("start_level ignored: level %s is locked", level_id)
            return False

        self._session = SessionState(level=level)
        self.last_result = None
        self._set_state(MissionState.BRIEFING)
        self._emit(SessionEvent.LEVEL_STARTED, level)
        self._emit(SessionEvent.SCORE_CHANGED, 0)
        self._emit(SessionEvent.MESSAGE_COUNT_CHANGED, 0)
        self._append_transcript("system", level.briefing)
        self._set_state(MissionState.AWAITING_INPUT)
        logger.info("Mission started: %s", level.title)
        return True

    def begin_turn(self, text: str) -> Optional[PendingTurn]:
        """Accept a user message and move to PROCESSING.

        Returns None when the message is blank or input is not being accepted.
        """
        message = text.strip() if text else ""
        if not message or self._state is not MissionState.AWAITING_INPUT:
            return None

        session = self._session
        pending = PendingTurn(
            session=session,
            text=message,
            system_prompt=session.level.system_prompt,
            history=tuple(session.history),
        )
        self._append_transcript("user", message)
        session.message_count += 1
        self._emit(SessionEvent.MESSAGE_COUNT_CHANGED, session.message_count)
        self._set_state(MissionState.PROCESSING)
        return pending

    def complete_turn(
        self,
        pending: PendingTurn,
        reply: Optional[RelayReply] = None,
        error: Optional[RelayError] = None,
    ) -> None:
        """Apply the outcome of a relay round trip started by ``begin_turn``."""
        if self._state is not MissionState.PROCESSING or pending.session is not self._session:
            logger.warning("Discarding stale turn completion")
            return

        session = self._session
        if reply is not None:
            session.history.append(ChatTurn(role="user", content=pending.text))
            session.history.append(reply.to_turn())
            session.score += reply.score_change
            self._append_transcript("ai", reply.response)
            self._emit(SessionEvent.SCORE_CHANGED, session.score)
        else:
            message = error.message if error is not None else "Unknown error"
            logger.warning("Relay failure on turn %d: %s", session.message_count, message)
            self._append_transcript("system", f"{RELAY_ERROR_PREFIX} {message}")

        if session.message_count >= session.level.mission_length:
            self._end_mission()
        else:
            self._set_state(MissionState.AWAITING_INPUT)

    def submit_turn(self, text: str) -> bool:
        """Run a whole turn with a blocking relay call."""
        pending = self.begin_turn(text)
        if pending is None:
            return False
        try:
            reply = self.relay.send(pending.system_prompt, list(pending.history), pending.text)
        except RelayError as e:
            self.complete_turn(pending, error=e)
        except Exception as e:
            logger.exception("Unexpected relay failure")
            self.complete_turn(pending, error=RelayError(str(e)))
        else:
            self.complete_turn(pending, reply=reply)
        return True

    def _end_mission(self) -> None:
        self._set_state(MissionState.ENDED)
        session = self._session
        result = resolve_mission(
            session,
            self.progress,
            level_index=self.catalog.index_of(session.level.id),
            level_count=len(self.catalog),
            store=self.store,
        )
        self.last_result = result
        logger.info(
            "Mission ended: %s score=%d passed=%s unlocked_next=%s",
            session.level.title,
            result.score,
            result.passed,
            result.unlocked_next,
        )
        self._emit(SessionEvent.MISSION_ENDED, result)

    def return_to_level_select(self) -> bool:
        """Drop the current session and go back to IDLE."""
        if self._state not in (MissionState.AWAITING_INPUT, MissionState.ENDED):
            return False
        self._session = None
        self._set_state(MissionState.IDLE)
        self._emit(SessionEvent.LEVEL_SELECT, None)
        return True

    def reset_progress(self) -> bool:
        """Restore default progress; only allowed between missions."""
        if self._state is not MissionState.IDLE:
            return False
        self.progress = self.store.reset()
        self._emit(SessionEvent.LEVEL_SELECT, None)
        return True
