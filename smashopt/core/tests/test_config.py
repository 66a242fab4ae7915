"""Tests for the persisted local state."""

import json
from pathlib import Path

from smashopt.core.config import LocalState
from smashopt.core.models import Optimization, OptimizationStatus, ProfileIdentity

MARIO = ProfileIdentity.from_words("Mario", 1, 2)
LUIGI = ProfileIdentity.from_words("Luigi", 3, 4)


class TestLoad:
    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        state = LocalState.load(tmp_path)
        assert state == LocalState()

    def test_garbage_file_gives_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "optimizer_data.json").write_text("{not json", encoding="utf-8")
        assert LocalState.load(tmp_path) == LocalState()

    def test_non_object_gives_defaults(self, tmp_path: Path) -> None:
        (tmp_path / "optimizer_data.json").write_text("[1, 2]", encoding="utf-8")
        assert LocalState.load(tmp_path) == LocalState()

    def test_skips_malformed_status_entries(self, tmp_path: Path) -> None:
        raw = {
            "emu_folder": "/emu/yuzu",
            "selected_user_profile": None,
            "user_statuses": [
                [MARIO.to_json(), {"settings_optimized": True, "future_flag": True}],
                [{"name": "Broken", "uuid": ["0", "0"]}, {}],
                ["not", "a", "pair"],
                [{"name": "NoUuid"}, {}],
                [LUIGI.to_json(), None],
            ],
        }
        (tmp_path / "optimizer_data.json").write_text(json.dumps(raw), encoding="utf-8")

        state = LocalState.load(tmp_path)
        assert state.emu_folder == Path("/emu/yuzu")
        assert state.user_statuses == {
            MARIO: OptimizationStatus(settings_optimized=True),
        }


    def test_malformed_selection_keeps_statuses(self, tmp_path: Path) -> None:
        raw = {
            "emu_folder": "/emu/yuzu",
            "selected_user_profile": {"name": "Mario", "uuid": ["0", "0"]},
            "user_statuses": [[MARIO.to_json(), {"mods_optimized": True}]],
        }
        (tmp_path / "optimizer_data.json").write_text(json.dumps(raw), encoding="utf-8")

        state = LocalState.load(tmp_path)
        assert state.selected_user_profile is None
        assert state.emu_folder == Path("/emu/yuzu")
        assert state.status_for(MARIO) == OptimizationStatus(mods_optimized=True)

    def test_non_object_selection_is_ignored(self, tmp_path: Path) -> None:
        raw = {"selected_user_profile": "Mario", "user_statuses": []}
        (tmp_path / "optimizer_data.json").write_text(json.dumps(raw), encoding="utf-8")
        assert LocalState.load(tmp_path).selected_user_profile is None


class TestSave:
    def test_round_trip(self, tmp_path: Path) -> None:
        state = LocalState(emu_folder=Path("/emu/yuzu"), selected_user_profile=MARIO)
        state.record_success(MARIO, Optimization.SAVE)
        state.save(tmp_path)

        assert LocalState.load(tmp_path) == state

    def test_statuses_are_written_as_pairs(self, tmp_path: Path) -> None:
        state = LocalState()
        state.record_success(MARIO, Optimization.MODS)
        state.save(tmp_path)

        raw = json.loads((tmp_path / "optimizer_data.json").read_text(encoding="utf-8"))
        assert raw == {
            "emu_folder": None,
            "selected_user_profile": None,
            "user_statuses": [[
                {"name": "Mario", "uuid": ["1", "2"]},
                {"settings_optimized": False, "mods_optimized": True,
                 "save_optimized": False},
            ]],
        }

    def test_creates_directory(self, tmp_path: Path) -> None:
        LocalState().save(tmp_path / "nested" / "dir")
        assert (tmp_path / "nested" / "dir" / "optimizer_data.json").is_file()


class TestStatusBookkeeping:
    def test_record_success_upserts(self) -> None:
        state = LocalState()
        state.record_success(MARIO, Optimization.SETTINGS)
        state.record_success(MARIO, Optimization.MODS)

        assert state.status_for(MARIO) == OptimizationStatus(
            settings_optimized=True, mods_optimized=True, save_optimized=False,
        )
        assert len(state.user_statuses) == 1

    def test_profiles_are_independent(self) -> None:
        state = LocalState()
        state.record_success(MARIO, Optimization.SETTINGS)
        state.record_success(LUIGI, Optimization.SAVE)

        assert state.status_for(MARIO) == OptimizationStatus(settings_optimized=True)
        assert state.status_for(LUIGI) == OptimizationStatus(save_optimized=True)

    def test_status_for_unknown_profile_is_all_false(self) -> None:
        assert LocalState().status_for(MARIO) == OptimizationStatus()

    def test_status_for_returns_copy(self) -> None:
        state = LocalState()
        state.record_success(MARIO, Optimization.SETTINGS)
        state.status_for(MARIO).mark(Optimization.SAVE)
        assert not state.status_for(MARIO).save_optimized
