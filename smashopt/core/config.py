# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Persistent local state for SmashOpt.

The state is stored as a JSON file in the OS-appropriate data directory
(``%LOCALAPPDATA%/SmashOpt`` on Windows, ``~/.local/share/SmashOpt`` on
Linux).  It remembers the selected emulator folder, the selected console
profile, and which optimizations have been applied for each profile.

Profiles are composite keys, so ``user_statuses`` is written as a list of
``[profile, status]`` pairs rather than a JSON object.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

from PySide6.QtCore import QStandardPaths

from smashopt.core.models import Optimization, OptimizationStatus, ProfileIdentity

log = logging.getLogger(__name__)


# -- Defaults --------------------------------------------------------------

_APP_DIR_NAME = "SmashOpt"
_STATE_FILE   = "optimizer_data.json"


def app_data_dir() -> Path:
    """Return (and create) the per-user data directory."""
    base = QStandardPaths.writableLocation(
        QStandardPaths.StandardLocation.GenericDataLocation,
    )
    path = Path(base) / _APP_DIR_NAME
    path.mkdir(parents=True, exist_ok=True)
    return path


# -- Local state -----------------------------------------------------------

@dataclass
class LocalState:
    """Everything SmashOpt remembers between runs."""

    emu_folder: Path | None = None
    selected_user_profile: ProfileIdentity | None = None
    user_statuses: dict[ProfileIdentity, OptimizationStatus] = field(
        default_factory=dict,
    )

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @classmethod
    def load(cls, directory: Path | None = None) -> LocalState:
        """Load from disk, returning defaults if the file is missing or bad.

        A malformed selected profile or status entry is dropped on its own
        rather than discarding the whole file.
        """
        path = (directory or app_data_dir()) / _STATE_FILE
        if not path.exists():
            return cls()
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            return cls.from_json(raw)
        except Exception:
            log.warning("Ignoring unreadable local state at %s", path, exc_info=True)
            return cls()

    def save(self, directory: Path | None = None) -> None:
        """Write current state to disk."""
        directory = directory or app_data_dir()
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / _STATE_FILE
        path.write_text(
            json.dumps(self.to_json(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
        log.debug("Saved local state to %s", path)

    def to_json(self) -> dict[str, Any]:
        return {
            "emu_folder": str(self.emu_folder) if self.emu_folder else None,
            "selected_user_profile": (
                self.selected_user_profile.to_json()
                if self.selected_user_profile else None
            ),
            "user_statuses": [
                [profile.to_json(), asdict(status)]
                for profile, status in self.user_statuses.items()
            ],
        }

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> LocalState:
        if not isinstance(raw, dict):
            raise ValueError("local state must be a JSON object")

        emu_folder = raw.get("emu_folder")

        selected: ProfileIdentity | None = None
        if raw.get("selected_user_profile"):
            try:
                selected = ProfileIdentity.from_json(raw["selected_user_profile"])
            except (TypeError, ValueError, KeyError, AttributeError):
                log.debug("Ignoring malformed selected profile %r",
                          raw["selected_user_profile"])

        statuses: dict[ProfileIdentity, OptimizationStatus] = {}
        for item in raw.get("user_statuses") or []:
            try:
                profile_raw, status_raw = item
                profile = ProfileIdentity.from_json(profile_raw)
                statuses[profile] = _safe_dataclass_from_dict(
                    OptimizationStatus, status_raw,
                )
            except (TypeError, ValueError, KeyError, AttributeError):
                log.debug("Skipping malformed status entry %r", item)

        return cls(
            emu_folder=Path(emu_folder) if emu_folder else None,
            selected_user_profile=selected,
            user_statuses=statuses,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def status_for(self, profile: ProfileIdentity) -> OptimizationStatus:
        """Return a copy of *profile*'s status (all false if unknown)."""
        status = self.user_statuses.get(profile)
        return OptimizationStatus(**asdict(status)) if status else OptimizationStatus()

    def record_success(
        self, profile: ProfileIdentity, optimization: Optimization,
    ) -> OptimizationStatus:
        """Mark *optimization* done for *profile*, creating the entry if new."""
        status = self.user_statuses.setdefault(profile, OptimizationStatus())
        status.mark(optimization)
        return status


def _safe_dataclass_from_dict(dataclass_type: type, value: dict[str, Any]):
    """Build dataclass instance while ignoring unknown serialized keys."""
    known = {f.name for f in fields(dataclass_type)}
    filtered = {k: bool(v) for k, v in value.items() if k in known}
    return dataclass_type(**filtered)
