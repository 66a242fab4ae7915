# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Emulator layout discovery.

Given a Yuzu-family folder, :func:`resolve_environment` works out which
emulator it belongs to, where its ``qt-config.ini`` lives, and where the
``nand`` and ``sdmc`` storage roots are.  Two folder shapes are supported:

* the per-user data folder (``%APPDATA%/yuzu``, ``~/.local/share/eden``),
  whose name *is* the emulator name;
* a portable ``user`` folder next to the executable, where the emulator name
  is taken from the largest executable in the parent directory.

Resolution never raises: any failure is logged and yields
:meth:`EnvironmentInfo.empty`.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

from PySide6.QtCore import QStandardPaths

from smashopt.core import qt_ini
from smashopt.core.errors import InvalidDataError
from smashopt.core.models import EnvironmentInfo

log = logging.getLogger(__name__)

DEFAULT_EMU = "yuzu"

_PORTABLE_DATA_DIR = "user"
_STORAGE_SECTION = "Data%20Storage"
_NAND_KEY = "nand_directory"
_SDMC_KEY = "sdmc_directory"


# ---------------------------------------------------------------------------
# Executable detection
# ---------------------------------------------------------------------------

class ExecutableProbe:
    """Decides whether a directory entry looks like the emulator binary."""

    def is_candidate(self, entry: Path) -> bool:
        raise NotImplementedError


class WindowsExecutableProbe(ExecutableProbe):
    def is_candidate(self, entry: Path) -> bool:
        return entry.is_file() and entry.suffix.lower() == ".exe"


class PosixExecutableProbe(ExecutableProbe):
    """Linux/macOS builds ship extensionless binaries (or AppImages renamed)."""

    def is_candidate(self, entry: Path) -> bool:
        return entry.is_file() and not entry.suffix


def executable_probe_for(platform: str = sys.platform) -> ExecutableProbe:
    if platform == "win32":
        return WindowsExecutableProbe()
    return PosixExecutableProbe()


def infer_emulator_name(exe_dir: Path, probe: ExecutableProbe) -> str | None:
    """Return the stem of the largest executable-looking file in *exe_dir*."""
    best: tuple[int, str] | None = None
    try:
        entries = list(exe_dir.iterdir())
    except OSError:
        log.warning("Cannot list %s to infer the emulator name", exe_dir)
        return None
    for entry in entries:
        try:
            if not probe.is_candidate(entry):
                continue
            size = entry.stat().st_size
        except OSError:
            continue
        if best is None or size > best[0]:
            best = (size, entry.stem)
    return best[1] if best else None


# ---------------------------------------------------------------------------
# Platform locations
# ---------------------------------------------------------------------------

def platform_config_root(platform: str = sys.platform) -> Path:
    """Directory that holds per-emulator config folders outside Windows."""
    if platform == "darwin":
        location = QStandardPaths.StandardLocation.GenericDataLocation
    else:
        location = QStandardPaths.StandardLocation.GenericConfigLocation
    return Path(QStandardPaths.writableLocation(location))


def platform_data_root(platform: str = sys.platform) -> Path:
    """Directory that holds per-emulator data folders."""
    if platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
    return Path(QStandardPaths.writableLocation(
        QStandardPaths.StandardLocation.GenericDataLocation,
    ))


def default_emu_folder(platform: str = sys.platform) -> Path:
    return platform_data_root(platform) / DEFAULT_EMU


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def resolve_environment(
    emu_folder: str | Path,
    *,
    platform: str = sys.platform,
    probe: ExecutableProbe | None = None,
) -> EnvironmentInfo:
    """Resolve the emulator layout rooted at *emu_folder*."""
    folder = Path(emu_folder)
    probe = probe or executable_probe_for(platform)

    emu_name: str | None = folder.name or None
    portable = False
    if emu_name is not None and emu_name.lower() == _PORTABLE_DATA_DIR:
        portable = True
        log.info(
            "Portable '%s' data folder found; inferring emulator name from %s",
            folder.name, folder.parent,
        )
        emu_name = infer_emulator_name(folder.parent, probe)
    if not emu_name:
        log.warning("Could not determine an emulator name for %s", folder)
        return EnvironmentInfo.empty()

    if platform == "win32" or portable:
        config_dir = folder / "config"
    else:
        config_dir = platform_config_root(platform) / emu_name
    config_path = config_dir / qt_ini.CONFIG_FILE_NAME

    try:
        ini = qt_ini.read_ini(config_path)
    except (OSError, InvalidDataError) as exc:
        log.warning("Unable to load %s: %s", config_path, exc)
        return EnvironmentInfo.empty()

    storage = qt_ini.find_section(ini, _STORAGE_SECTION) or {}
    nand = qt_ini.resolve_default_override(
        storage, _NAND_KEY, str(folder / "nand"),
    )
    sdmc = qt_ini.resolve_default_override(
        storage, _SDMC_KEY, str(folder / "sdmc"),
    )

    env = EnvironmentInfo(
        emulator_name=emu_name,
        config_dir=config_dir,
        config_path=config_path,
        nand_dir=Path(nand) if nand else None,
        sdmc_dir=Path(sdmc) if sdmc else None,
    )
    log.info("Resolved %s environment: %s", emu_name, env)
    return env
