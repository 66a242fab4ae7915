# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
The three SSBU optimizations.

Each ``optimize_*`` function copies one or more bundled trees into paths
derived from the resolved :class:`EnvironmentInfo` and the selected
profile.  All target paths are computed (and all prerequisites checked)
before the filesystem is touched; once copying starts, a failure leaves
whatever was already written in place.

Callers record success in the per-profile status themselves (see
:mod:`smashopt.core.session`).
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

from smashopt.core import bundled_data, qt_ini
from smashopt.core.bundled_data import BundledAssets
from smashopt.core.environment import DEFAULT_EMU
from smashopt.core.models import (
    AdvancedOption,
    EnvironmentInfo,
    Optimization,
    ProfileIdentity,
)
from smashopt.core.profiles import SSBU_TITLE_ID, arc_config_dir, save_data_dir

log = logging.getLogger(__name__)

WEB_SERVICE_SECTION = "WebService"
WEB_API_URL = "api.ynet-fun.xyz"
WEB_TOKEN = "a" * 53


# ---------------------------------------------------------------------------
# Deployment primitive
# ---------------------------------------------------------------------------

def deploy_tree(source: str | Path, target: str | Path) -> int:
    """Copy every file under *source* to the same place under *target*.

    Existing files are overwritten and nothing is ever deleted, so running
    it twice gives the same result as running it once.  Returns the number
    of files written.
    """
    src = Path(source)
    dst = Path(target)
    if not src.is_dir():
        raise FileNotFoundError(f"Bundled tree not found: {src}")

    log.info("Creating directory path: %s", dst)
    dst.mkdir(parents=True, exist_ok=True)

    written = 0
    for path in sorted(src.rglob("*")):
        rel = path.relative_to(src)
        out = dst / rel
        if path.is_dir():
            out.mkdir(parents=True, exist_ok=True)
            continue
        out.parent.mkdir(parents=True, exist_ok=True)
        log.debug("Writing file: %s", out)
        shutil.copyfile(path, out)
        written += 1
    return written


def _remove_tree(path: Path, label: str) -> None:
    if path.is_dir():
        log.info("Removing %s files at %s", label, path)
        shutil.rmtree(path)


def _require(value, what: str):
    if value is None:
        raise FileNotFoundError(f"Unable to find {what}")
    return value


# ---------------------------------------------------------------------------
# Optimizations
# ---------------------------------------------------------------------------

def settings_updates(emulator_name: str, username: str) -> dict[str, str]:
    """``[WebService]`` entries written by the Settings optimization.

    Every value is paired with ``<key>\\default=false`` so the emulator
    honours it instead of its built-in default.
    """
    values = {
        "enable_telemetry": "false",
        "web_api_url": WEB_API_URL,
        f"{emulator_name}_username": username,
        f"{emulator_name}_token": WEB_TOKEN,
    }
    updates: dict[str, str] = {}
    for key, value in values.items():
        updates[qt_ini.default_flag_key(key)] = "false"
        updates[key] = value
    return updates


def optimize_settings(
    env: EnvironmentInfo,
    profile: ProfileIdentity,
    assets: BundledAssets,
) -> None:
    config_dir = _require(env.config_dir, "emulator config folder")
    config_path = _require(env.config_path, "emulator config file")
    source = assets.path(bundled_data.SETTINGS)

    ini = qt_ini.read_ini(config_path)
    if qt_ini.find_section(ini, WEB_SERVICE_SECTION) is None:
        raise FileNotFoundError(
            f"Unable to find {WEB_SERVICE_SECTION} section in {config_path}"
        )

    deploy_tree(source, config_dir / "custom")

    emu_name = env.emulator_name or DEFAULT_EMU
    qt_ini.patch_section(
        config_path, WEB_SERVICE_SECTION, settings_updates(emu_name, profile.name),
    )
    log.info("Patched %s web service settings in %s", emu_name, config_path)


def mods_targets(env: EnvironmentInfo, profile: ProfileIdentity) -> dict[str, Path]:
    """Target directories of the Mods optimization, keyed by bundled tree."""
    sdmc = _require(env.sdmc_dir, "sdmc directory")
    return {
        bundled_data.SKYLINE: sdmc / "atmosphere" / "contents" / SSBU_TITLE_ID,
        bundled_data.ARC_CONFIG: arc_config_dir(sdmc, profile),
        bundled_data.ARC_MODS: sdmc / "ultimate" / "mods",
    }


def optimize_mods(
    env: EnvironmentInfo,
    profile: ProfileIdentity,
    options: Iterable[AdvancedOption],
    assets: BundledAssets,
) -> None:
    options = set(options)
    targets = mods_targets(env, profile)
    sources = {name: assets.path(name) for name in targets}

    if AdvancedOption.CLEAN_SKYLINE in options:
        _remove_tree(targets[bundled_data.SKYLINE], "skyline")

    if AdvancedOption.CLEAN_ARC in options:
        # Wipes every profile's ARCropolis config and all installed mods.
        _remove_tree(targets[bundled_data.ARC_CONFIG], "arcropolis config")
        _remove_tree(env.sdmc_dir / "ultimate", "arcropolis")

    for name in (bundled_data.SKYLINE, bundled_data.ARC_CONFIG, bundled_data.ARC_MODS):
        deploy_tree(sources[name], targets[name])


def optimize_save(
    env: EnvironmentInfo,
    profile: ProfileIdentity,
    assets: BundledAssets,
) -> None:
    nand = _require(env.nand_dir, "nand directory")
    source = assets.path(bundled_data.SAVE)
    deploy_tree(source, save_data_dir(nand, profile))


def apply_optimization(
    env: EnvironmentInfo,
    profile: ProfileIdentity,
    optimization: Optimization,
    options: Iterable[AdvancedOption] = (),
    assets: BundledAssets | None = None,
) -> None:
    """Run *optimization* for *profile*; raises on any failure."""
    assets = assets or BundledAssets()
    log.info("Applying optimization for user %s: %s", profile.name, optimization.value)
    if optimization is Optimization.SETTINGS:
        optimize_settings(env, profile, assets)
    elif optimization is Optimization.MODS:
        optimize_mods(env, profile, options, assets)
    elif optimization is Optimization.SAVE:
        optimize_save(env, profile, assets)
    else:
        raise ValueError(f"Unknown optimization {optimization!r}")
