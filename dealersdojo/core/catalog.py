"""Level catalog loader.

The catalog is an ordered JSON list of level definitions. It is read once at
startup, either from a local file or from the relay server over HTTP.
"""

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Optional, Union

import requests
from pydantic import ValidationError as PydanticValidationError

from .errors import CatalogLoadError
from .models import LevelDefinition

logger = logging.getLogger(__name__)

DEFAULT_PATH = Path(__file__).resolve().parent.parent / "data" / "levels.json"


class LevelCatalog:
    """Immutable, ordered collection of levels."""

    def __init__(self, levels: list[LevelDefinition]):
        self._levels = tuple(levels)

    def __len__(self) -> int:
        return len(self._levels)

    def __iter__(self) -> Iterator[LevelDefinition]:
        return iter(self._levels)

    def __getitem__(self, index: int) -> LevelDefinition:
        return self._levels[index]

    @property
    def levels(self) -> tuple[LevelDefinition, ...]:
        return self._levels

    def get(self, level_id: int) -> Optional[LevelDefinition]:
        for level in self._levels:
            if level.id == level_id:
                return level
        return None

    def index_of(self, level_id: int) -> int:
        """Position of ``level_id`` in the catalog (the progress array index)."""
        for index, level in enumerate(self._levels):
            if level.id == level_id:
                return index
        raise KeyError(level_id)


def _is_url(source: str) -> bool:
    return source.startswith("http://") or source.startswith("https://")


def _fetch(source: str, timeout: float) -> Any:
    try:
        resp = requests.get(source, timeout=timeout)
        resp.raise_for_status()
        return resp.json()
    except (requests.RequestException, ValueError) as e:
        raise CatalogLoadError(f"Failed to load level data from {source}: {e}") from e


def _read(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise CatalogLoadError(f"Failed to load level data from {path}: {e}") from e


def parse_catalog(raw: Any) -> LevelCatalog:
    if not isinstance(raw, list) or not raw:
        raise CatalogLoadError("Level data must be a non-empty list")

    levels: list[LevelDefinition] = []
    seen: set[int] = set()
    for position, item in enumerate(raw):
        try:
            level = LevelDefinition.model_validate(item)
        except PydanticValidationError as e:
            raise CatalogLoadError(f"Level #{position + 1} is invalid: {e}") from e
        if level.id in seen:
            raise CatalogLoadError(f"Duplicate level id {level.id}")
        seen.add(level.id)
        if level.id != position + 1:
            logger.warning(
                "Level id %d sits at position %d; progress follows catalog order",
                level.id,
                position,
            )
        levels.append(level)
    return LevelCatalog(levels)


def load_catalog(source: Union[str, Path, None] = None, timeout: float = 10.0) -> LevelCatalog:
    """Load and validate the catalog.

    Raises:
        CatalogLoadError: the source is unreachable or the data is malformed
    """
    if source is None:
        source = DEFAULT_PATH
    if isinstance(source, str) and _is_url(source):
        raw = _fetch(source, timeout)
    else:
        raw = _read(Path(source))
    catalog = parse_catalog(raw)
    logger.info("Loaded %d levels from %s", len(catalog), source)
    return catalog
