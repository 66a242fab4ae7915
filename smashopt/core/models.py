# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Typed data models shared by the resolver, reader, engine, and session."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from smashopt.core.config import LocalState

_U64_MAX = 0xFFFF_FFFF_FFFF_FFFF


# ── Optimization kinds ───────────────────────────────────────────────────

class Optimization(str, Enum):
    SETTINGS = "Settings"
    MODS = "Mods"
    SAVE = "Save"


class AdvancedOption(str, Enum):
    """Destructive pre-clean steps available to the Mods optimization."""
    CLEAN_SKYLINE = "CleanSkyline"
    CLEAN_ARC = "CleanArc"


# ── Console user profile ─────────────────────────────────────────────────

@dataclass(frozen=True)
class ProfileIdentity:
    """One occupied slot of the console's profile store.

    *uuid* holds the two 64-bit UUID words as decimal strings so that the
    value survives a JSON round-trip without precision loss.  Two profiles
    are the same only if the name and both words match.
    """
    name: str
    uuid: tuple[str, str]

    def __post_init__(self) -> None:
        words = tuple(str(w) for w in self.uuid)
        if len(words) != 2:
            raise ValueError(f"uuid must have two words, got {len(words)}")
        for w in words:
            if not w.isdigit() or int(w) > _U64_MAX:
                raise ValueError(f"uuid word out of range: {w!r}")
        if words[0].strip("0") == "" and words[1].strip("0") == "":
            raise ValueError("uuid (0, 0) marks a vacant profile slot")
        object.__setattr__(self, "uuid", words)

    @classmethod
    def from_words(cls, name: str, uuid0: int, uuid1: int) -> ProfileIdentity:
        return cls(name=name, uuid=(str(uuid0), str(uuid1)))

    @property
    def uuid_words(self) -> tuple[int, int]:
        return int(self.uuid[0]), int(self.uuid[1])

    def nand_storage_id(self) -> str:
        """Save-directory name used under ``nand/user/save/0000000000000000``.

        The second word comes first, each rendered as 16 uppercase hex
        digits.
        """
        uuid0, uuid1 = self.uuid_words
        return f"{uuid1:016X}{uuid0:016X}"

    def arc_storage_ids(self) -> tuple[str, str]:
        """Two nested directory names used by ARCropolis' per-user config."""
        uuid0, uuid1 = self.uuid_words
        return str(uuid0), str(uuid1)

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "uuid": [self.uuid[0], self.uuid[1]]}

    @classmethod
    def from_json(cls, value: dict[str, Any]) -> ProfileIdentity:
        uuid = value["uuid"]
        if not isinstance(uuid, (list, tuple)):
            raise ValueError(f"uuid must be a list, got {type(uuid).__name__}")
        return cls(name=str(value["name"]), uuid=tuple(str(w) for w in uuid))


# ── Per-profile bookkeeping ──────────────────────────────────────────────

@dataclass
class OptimizationStatus:
    settings_optimized: bool = False
    mods_optimized: bool = False
    save_optimized: bool = False

    def mark(self, optimization: Optimization) -> None:
        """Set the flag for *optimization*; other flags are left alone."""
        if optimization is Optimization.SETTINGS:
            self.settings_optimized = True
        elif optimization is Optimization.MODS:
            self.mods_optimized = True
        elif optimization is Optimization.SAVE:
            self.save_optimized = True
        else:
            raise ValueError(f"Unknown optimization {optimization!r}")

    def is_done(self, optimization: Optimization) -> bool:
        return {
            Optimization.SETTINGS: self.settings_optimized,
            Optimization.MODS: self.mods_optimized,
            Optimization.SAVE: self.save_optimized,
        }[optimization]


# ── Resolved emulator layout ─────────────────────────────────────────────

@dataclass(frozen=True)
class EnvironmentInfo:
    """Where a Yuzu-family emulator keeps its config and storage roots.

    Either resolution succeeded and *emulator_name*, *config_dir* and
    *config_path* are all set, or every field is ``None``.  A storage root
    can still be ``None`` on success when ``qt-config.ini`` names no
    directory for it.
    """
    emulator_name: str | None = None
    config_dir: Path | None = None
    config_path: Path | None = None
    nand_dir: Path | None = None
    sdmc_dir: Path | None = None

    @classmethod
    def empty(cls) -> EnvironmentInfo:
        return cls()

    @property
    def is_resolved(self) -> bool:
        return self.emulator_name is not None and self.config_path is not None


# ── Session aggregate ────────────────────────────────────────────────────

@dataclass
class SessionConfig:
    """Persisted local state plus the values derived from the emu folder."""
    local_data: LocalState
    user_profiles: list[ProfileIdentity] = field(default_factory=list)
    environment: EnvironmentInfo = field(default_factory=EnvironmentInfo.empty)
