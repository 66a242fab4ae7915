# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Session state shared between the UI and the optimization workers.

A :class:`Session` owns one :class:`SessionConfig` behind a single lock.
The lock only guards reading and replacing that object; every disk access
(resolving the emulator, reading ``profiles.dat``, copying trees) happens
on a snapshot with the lock released, and the result is merged back
afterwards.
"""

from __future__ import annotations

import copy
import logging
import sys
import threading
from collections.abc import Iterable
from pathlib import Path

from smashopt.core import optimizer
from smashopt.core.bundled_data import BundledAssets
from smashopt.core.config import LocalState
from smashopt.core.environment import default_emu_folder, resolve_environment
from smashopt.core.errors import InvalidDataError, InvalidEnvironmentError
from smashopt.core.models import (
    AdvancedOption,
    EnvironmentInfo,
    Optimization,
    OptimizationStatus,
    ProfileIdentity,
    SessionConfig,
)
from smashopt.core.profiles import read_profiles

log = logging.getLogger(__name__)


def reconcile_selection(
    selected: ProfileIdentity | None, profiles: list[ProfileIdentity],
) -> ProfileIdentity | None:
    """Keep *selected* if still known, else fall back to the first profile."""
    if selected is None or selected in profiles:
        return selected
    return profiles[0] if profiles else None


def derive_session_config(
    local_data: LocalState,
    emu_folder: Path,
    *,
    platform: str = sys.platform,
) -> SessionConfig:
    """Resolve *emu_folder* and rebuild the derived parts of the session.

    *local_data* is updated in place: on success ``emu_folder`` is set and
    the selected profile reconciled with the new profile list; when no
    profiles can be read both are cleared.
    """
    environment = resolve_environment(emu_folder, platform=platform)

    profiles: list[ProfileIdentity] | None = None
    if environment.nand_dir is not None:
        try:
            profiles = read_profiles(environment.nand_dir)
        except (OSError, InvalidDataError) as exc:
            log.warning("Unable to read user profiles: %s", exc)

    if profiles is None:
        local_data.emu_folder = None
        local_data.selected_user_profile = None
        return SessionConfig(local_data=local_data, environment=environment)

    local_data.emu_folder = Path(emu_folder)
    local_data.selected_user_profile = reconcile_selection(
        local_data.selected_user_profile, profiles,
    )
    return SessionConfig(
        local_data=local_data,
        user_profiles=profiles,
        environment=environment,
    )


class Session:
    """Lock-protected owner of the current :class:`SessionConfig`."""

    def __init__(
        self,
        config: SessionConfig,
        *,
        app_data_dir: Path | None = None,
        assets: BundledAssets | None = None,
        platform: str = sys.platform,
    ):
        self._config = config
        self._lock = threading.Lock()
        self._app_data_dir = app_data_dir
        self._assets = assets or BundledAssets()
        self._platform = platform

    @classmethod
    def load(
        cls,
        app_data_dir: Path | None = None,
        emu_folder: Path | None = None,
        *,
        assets: BundledAssets | None = None,
        platform: str = sys.platform,
    ) -> Session:
        """Load persisted state and derive the environment and profiles.

        The folder is taken from *emu_folder*, then the persisted state,
        then the platform default.  An unusable folder is not an error
        here: the session simply starts without profiles.
        """
        local_data = LocalState.load(app_data_dir)
        folder = emu_folder or local_data.emu_folder or default_emu_folder(platform)
        config = derive_session_config(local_data, folder, platform=platform)
        log.info(
            "Loaded session: folder=%s profiles=%d",
            config.local_data.emu_folder, len(config.user_profiles),
        )
        return cls(config, app_data_dir=app_data_dir, assets=assets, platform=platform)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> SessionConfig:
        with self._lock:
            return copy.deepcopy(self._config)

    @property
    def assets(self) -> BundledAssets:
        return self._assets

    @property
    def environment(self) -> EnvironmentInfo:
        with self._lock:
            return self._config.environment

    @property
    def user_profiles(self) -> list[ProfileIdentity]:
        with self._lock:
            return list(self._config.user_profiles)

    @property
    def selected_profile(self) -> ProfileIdentity | None:
        with self._lock:
            return self._config.local_data.selected_user_profile

    def user_status(self, profile: ProfileIdentity) -> OptimizationStatus:
        with self._lock:
            return self._config.local_data.status_for(profile)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def select_environment(self, emu_folder: str | Path) -> SessionConfig:
        """Switch to *emu_folder* and persist the choice.

        Raises :class:`InvalidEnvironmentError` (leaving the session as it
        was) if the folder yields no readable profile store.
        """
        with self._lock:
            scratch = copy.deepcopy(self._config.local_data)

        derived = derive_session_config(scratch, Path(emu_folder), platform=self._platform)
        if derived.local_data.emu_folder is None:
            raise InvalidEnvironmentError(
                f"Incorrect emulator folder specified: {emu_folder}"
            )

        with self._lock:
            live = self._config.local_data
            live.emu_folder = derived.local_data.emu_folder
            live.selected_user_profile = derived.local_data.selected_user_profile
            self._config = SessionConfig(
                local_data=live,
                user_profiles=derived.user_profiles,
                environment=derived.environment,
            )
            result = copy.deepcopy(self._config)

        self.save()
        return result

    def select_profile(self, profile: ProfileIdentity | None) -> None:
        with self._lock:
            if profile is not None and profile not in self._config.user_profiles:
                raise ValueError(f"Unknown user profile {profile.name!r}")
            self._config.local_data.selected_user_profile = profile

    def apply_optimization(
        self,
        profile: ProfileIdentity,
        optimization: Optimization,
        options: Iterable[AdvancedOption] = (),
    ) -> OptimizationStatus:
        """Run *optimization* and record it in *profile*'s status.

        Errors propagate and leave the status untouched.
        """
        with self._lock:
            environment = self._config.environment

        optimizer.apply_optimization(
            environment, profile, optimization, options, self._assets,
        )

        with self._lock:
            status = self._config.local_data.record_success(profile, optimization)
            return copy.copy(status)

    def save(self) -> None:
        with self._lock:
            local_data = copy.deepcopy(self._config.local_data)
        log.info("Saving local data for %s", local_data.emu_folder)
        local_data.save(self._app_data_dir)
