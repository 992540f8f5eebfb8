"""Player progress persistence

Reads and writes the single local progress record.
"""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from .errors import CorruptProgressError
from .models import PlayerProgress

logger = logging.getLogger(__name__)


def ensure_save_dir(save_path: str) -> None:
    """Create the parent directory of the progress file if needed."""
    Path(save_path).parent.mkdir(parents=True, exist_ok=True)


def has_progress(save_path: str) -> bool:
    return os.path.exists(save_path)


def read_progress(save_path: str) -> Optional[PlayerProgress]:
    """Load the stored record.

    Args:
        save_path: progress file path

    Returns:
        PlayerProgress, or None when nothing has been saved yet

    Raises:
        CorruptProgressError: the file exists but cannot be read as a valid record
    """
    if not os.path.exists(save_path):
        return None

    try:
        with open(save_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return PlayerProgress.model_validate(data)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, PydanticValidationError) as e:
        raise CorruptProgressError(f"Unreadable progress record at {save_path}: {e}") from e


def serialize_progress(progress: PlayerProgress) -> str:
    return json.dumps(progress.model_dump(), ensure_ascii=False, indent=2) + "\n"


def write_progress(progress: PlayerProgress, save_path: str) -> None:
    """Replace the stored record with ``progress``.

    The payload goes to a sibling temp file first so a crash never leaves a
    half-written record behind.
    """
    ensure_save_dir(save_path)
    tmp_path = f"{save_path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        f.write(serialize_progress(progress))
    os.replace(tmp_path, save_path)


def delete_progress(save_path: str) -> bool:
    try:
        if os.path.exists(save_path):
            os.remove(save_path)
        return True
    except OSError as e:
        logger.warning("Could not delete progress at %s: %s", save_path, e)
        return False


class ProgressStore:
    """Load/save access to the player's progress, sized to the level catalog."""

    def __init__(self, save_path: str, level_count: int):
        self.save_path = save_path
        self.level_count = level_count

    def load(self) -> PlayerProgress:
        """Return the stored progress, creating and persisting the default
        record when there is none or the stored one is corrupt."""
        try:
            stored = read_progress(self.save_path)
        except CorruptProgressError as e:
            logger.warning("%s; starting with fresh progress", e)
            stored = None

        if stored is None:
            progress = PlayerProgress.default(self.level_count)
            self.save(progress)
            return progress

        progress = stored.fit(self.level_count)
        if progress != stored:
            logger.info(
                "Progress record resized from %d to %d levels",
                len(stored.unlocks),
                self.level_count,
            )
            self.save(progress)
        return progress

    def save(self, progress: PlayerProgress) -> bool:
        try:
            write_progress(progress, self.save_path)
            return True
        except OSError as e:
            logger.warning("Could not save progress to %s: %s", self.save_path, e)
            return False

    def reset(self) -> PlayerProgress:
        """Forget all unlocks and high scores."""
        progress = PlayerProgress.default(self.level_count)
        self.save(progress)
        return progress
