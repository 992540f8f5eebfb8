"""Tests for dealersdojo.core.save: progress persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dealersdojo.core.errors import CorruptProgressError
from dealersdojo.core.models import PlayerProgress
from dealersdojo.core.save import (
    ProgressStore,
    delete_progress,
    has_progress,
    read_progress,
    write_progress,
)


# ---------------------------------------------------------------------------
# PlayerProgress defaults
# ---------------------------------------------------------------------------

class TestDefaultProgress:
    def test_first_level_unlocked_rest_locked(self):
        p = PlayerProgress.default(4)
        assert p.unlocks == [True, False, False, False]
        assert p.scores == [0, 0, 0, 0]

    def test_single_level(self):
        p = PlayerProgress.default(1)
        assert p.unlocks == [True]
        assert p.scores == [0]

    def test_fit_pads_new_levels(self):
        p = PlayerProgress(unlocks=[True, True], scores=[5, 3]).fit(4)
        assert p.unlocks == [True, True, False, False]
        assert p.scores == [5, 3, 0, 0]

    def test_fit_truncates_and_forces_first_unlock(self):
        p = PlayerProgress(unlocks=[False, True, True], scores=[1, 2, 3]).fit(2)
        assert p.unlocks == [True, True]
        assert p.scores == [1, 2]


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

class TestReadWrite:
    def test_read_missing_returns_none(self, tmp_path: Path):
        assert read_progress(str(tmp_path / "nope.json")) is None

    def test_write_then_read(self, tmp_path: Path):
        path = str(tmp_path / "deep" / "progress.json")
        write_progress(PlayerProgress(unlocks=[True, True], scores=[7, 0]), path)
        assert has_progress(path)
        assert read_progress(path) == PlayerProgress(unlocks=[True, True], scores=[7, 0])

    def test_write_leaves_no_temp_file(self, tmp_path: Path):
        path = tmp_path / "progress.json"
        write_progress(PlayerProgress.default(2), str(path))
        assert [p.name for p in tmp_path.iterdir()] == ["progress.json"]

    def test_corrupt_json_raises(self, tmp_path: Path):
        path = tmp_path / "progress.json"
        path.write_text("NOT VALID JSON", encoding="utf-8")
        with pytest.raises(CorruptProgressError):
            read_progress(str(path))

    def test_wrong_shape_raises(self, tmp_path: Path):
        path = tmp_path / "progress.json"
        path.write_text(json.dumps({"unlocks": "yes", "scores": [1]}), encoding="utf-8")
        with pytest.raises(CorruptProgressError):
            read_progress(str(path))

    def test_delete(self, tmp_path: Path):
        path = str(tmp_path / "progress.json")
        write_progress(PlayerProgress.default(1), path)
        assert delete_progress(path)
        assert not has_progress(path)
        assert delete_progress(path)


# ---------------------------------------------------------------------------
# ProgressStore
# ---------------------------------------------------------------------------

class TestProgressStoreLoad:
    def test_fresh_load_returns_default(self, store: ProgressStore):
        p = store.load()
        assert p.unlocks[0] is True
        assert p.unlocks[1:] == [False, False]
        assert p.scores == [0, 0, 0]

    def test_fresh_load_persists_default(self, store: ProgressStore):
        store.load()
        data = json.loads(Path(store.save_path).read_text(encoding="utf-8"))
        assert data == {"unlocks": [True, False, False], "scores": [0, 0, 0]}

    def test_corrupt_record_falls_back_to_default(self, store: ProgressStore):
        Path(store.save_path).parent.mkdir(parents=True, exist_ok=True)
        Path(store.save_path).write_text("{broken", encoding="utf-8")
        p = store.load()
        assert p == PlayerProgress.default(3)
        assert read_progress(store.save_path) == PlayerProgress.default(3)

    def test_unreadable_path_falls_back_to_default(self, store: ProgressStore):
        Path(store.save_path).mkdir(parents=True)
        with pytest.raises(CorruptProgressError):
            read_progress(store.save_path)
        assert store.load() == PlayerProgress.default(3)

    def test_loads_saved_record(self, store: ProgressStore):
        saved = PlayerProgress(unlocks=[True, True, False], scores=[12, 4, 0])
        store.save(saved)
        assert store.load() == saved

    def test_record_resized_to_catalog(self, store: ProgressStore):
        write_progress(PlayerProgress(unlocks=[True, True], scores=[9, 2]), store.save_path)
        p = store.load()
        assert p.unlocks == [True, True, False]
        assert p.scores == [9, 2, 0]
        assert read_progress(store.save_path) == p


class TestProgressStoreSave:
    def test_save_replaces_whole_record(self, store: ProgressStore):
        store.save(PlayerProgress(unlocks=[True, True, True], scores=[1, 2, 3]))
        store.save(PlayerProgress(unlocks=[True, False, False], scores=[0, 0, 0]))
        assert store.load() == PlayerProgress(unlocks=[True, False, False], scores=[0, 0, 0])

    def test_save_load_is_byte_stable(self, store: ProgressStore):
        store.save(PlayerProgress(unlocks=[True, True, False], scores=[11, -2, 0]))
        first = Path(store.save_path).read_bytes()
        for _ in range(3):
            store.save(store.load())
        assert Path(store.save_path).read_bytes() == first

    def test_reset(self, store: ProgressStore):
        store.save(PlayerProgress(unlocks=[True, True, True], scores=[10, 20, 30]))
        p = store.reset()
        assert p == PlayerProgress.default(3)
        assert store.load() == PlayerProgress.default(3)

    def test_save_failure_reports_false(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        s = ProgressStore(str(blocker / "progress.json"), 2)
        assert s.save(PlayerProgress.default(2)) is False
