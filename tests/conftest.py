"""Shared fixtures: a small catalog, a temp progress store and a scripted relay."""

from __future__ import annotations

from pathlib import Path

import pytest

from dealersdojo.core.catalog import LevelCatalog, parse_catalog
from dealersdojo.core.errors import RelayError
from dealersdojo.core.models import ChatTurn, RelayReply
from dealersdojo.core.save import ProgressStore
from dealersdojo.core.session import SessionController


def level_dict(level_id: int, mission_length: int = 3, pass_score: int = 10) -> dict:
    return {
        "id": level_id,
        "title": f"Level {level_id}",
        "briefing": f"Briefing for level {level_id}",
        "systemPrompt": f"You are the counterpart in level {level_id}.",
        "missionLength": mission_length,
        "passScore": pass_score,
    }


class ScriptedRelay:
    """Relay double: returns queued replies or raises queued exceptions."""

    def __init__(self, outcomes=None):
        self.outcomes = list(outcomes or [])
        self.calls: list[tuple[str, list[ChatTurn], str]] = []

    def send(self, system_prompt: str, history: list[ChatTurn], new_message: str) -> RelayReply:
        self.calls.append((system_prompt, list(history), new_message))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, int):
            return RelayReply(response=f"reply {len(self.calls)}", score_change=outcome)
        return outcome


def fail(message: str = "Server error") -> RelayError:
    return RelayError(message)


@pytest.fixture()
def catalog() -> LevelCatalog:
    return parse_catalog([level_dict(1), level_dict(2), level_dict(3)])


@pytest.fixture()
def save_path(tmp_path: Path) -> str:
    return str(tmp_path / "save" / "progress.json")


@pytest.fixture()
def store(save_path: str, catalog: LevelCatalog) -> ProgressStore:
    return ProgressStore(save_path, len(catalog))


@pytest.fixture()
def relay() -> ScriptedRelay:
    return ScriptedRelay()


@pytest.fixture()
def controller(catalog: LevelCatalog, store: ProgressStore, relay: ScriptedRelay) -> SessionController:
    return SessionController(catalog=catalog, store=store, relay=relay)
