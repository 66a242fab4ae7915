# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

from __future__ import annotations

import logging
import threading
from pathlib import Path

from PySide6.QtCore import QObject, Qt, Signal
from PySide6.QtWidgets import (
    QCheckBox, QComboBox, QFileDialog, QGridLayout, QGroupBox, QHBoxLayout,
    QLabel, QMainWindow, QPushButton, QVBoxLayout, QWidget,
)

from smashopt.core.errors import InvalidEnvironmentError
from smashopt.core.models import AdvancedOption, Optimization, ProfileIdentity
from smashopt.core.session import Session
from smashopt.ui import dialogs

log = logging.getLogger(__name__)

_OPTIMIZATION_LABELS: dict[Optimization, str] = {
    Optimization.SETTINGS: "Optimize settings",
    Optimization.MODS: "Install mods",
    Optimization.SAVE: "Install save data",
}


class _WorkerSignals(QObject):
    """Carries results from the optimization thread back to the GUI thread."""
    finished = Signal(object, object, object)   # profile, optimization, error


class MainWindow(QMainWindow):
    """
    Primary application window for SmashOpt.

    Lets the operator pick the emulator folder and a console profile, and
    runs the three optimizations on a background thread so the window stays
    responsive during long copies.
    """

    MIN_WIDTH = 520
    MIN_HEIGHT = 360

    def __init__(self, session: Session):
        super().__init__()
        self._session = session
        self._busy = False
        self._signals = _WorkerSignals()
        self._signals.finished.connect(self._on_optimization_finished)

        self.setWindowTitle("SmashOpt")
        self.setMinimumSize(self.MIN_WIDTH, self.MIN_HEIGHT)
        self._init_central_widget()
        self._refresh()
        self._warn_missing_assets()

    # -- Layout --------------------------------------------------------------

    def _init_central_widget(self) -> None:
        central = QWidget(self)
        root = QVBoxLayout(central)

        folder_row = QHBoxLayout()
        self._folder_label = QLabel()
        self._folder_label.setTextInteractionFlags(
            Qt.TextInteractionFlag.TextSelectableByMouse,
        )
        self._pick_button = QPushButton("Select emulator folder…")
        self._pick_button.clicked.connect(self._pick_folder)
        folder_row.addWidget(self._folder_label, 1)
        folder_row.addWidget(self._pick_button)
        root.addLayout(folder_row)

        profile_row = QHBoxLayout()
        profile_row.addWidget(QLabel("Profile:"))
        self._profile_combo = QComboBox()
        self._profile_combo.currentIndexChanged.connect(self._on_profile_changed)
        profile_row.addWidget(self._profile_combo, 1)
        root.addLayout(profile_row)

        actions = QGroupBox("Optimizations")
        grid = QGridLayout(actions)
        self._action_buttons: dict[Optimization, QPushButton] = {}
        self._status_labels: dict[Optimization, QLabel] = {}
        for row, optimization in enumerate(Optimization):
            btn = QPushButton(_OPTIMIZATION_LABELS[optimization])
            btn.clicked.connect(
                lambda _checked=False, o=optimization: self._start_optimization(o)
            )
            status = QLabel()
            grid.addWidget(btn, row, 0)
            grid.addWidget(status, row, 1)
            self._action_buttons[optimization] = btn
            self._status_labels[optimization] = status
        root.addWidget(actions)

        advanced = QGroupBox("Advanced (Install mods)")
        adv_layout = QVBoxLayout(advanced)
        self._clean_skyline = QCheckBox("Remove existing skyline plugins first")
        self._clean_arc = QCheckBox(
            "Reset ARCropolis (deletes every profile's config and all installed mods)"
        )
        adv_layout.addWidget(self._clean_skyline)
        adv_layout.addWidget(self._clean_arc)
        root.addWidget(advanced)

        root.addStretch(1)
        self.setCentralWidget(central)

    # -- State -> widgets ------------------------------------------------------

    def _refresh(self) -> None:
        snapshot = self._session.snapshot()
        folder = snapshot.local_data.emu_folder
        env = snapshot.environment
        if folder is None:
            self._folder_label.setText("No emulator folder selected")
        else:
            self._folder_label.setText(f"{env.emulator_name or 'Emulator'}: {folder}")

        self._profile_combo.blockSignals(True)
        self._profile_combo.clear()
        for profile in snapshot.user_profiles:
            self._profile_combo.addItem(profile.name, profile)
        selected = snapshot.local_data.selected_user_profile
        if selected is not None and selected in snapshot.user_profiles:
            self._profile_combo.setCurrentIndex(snapshot.user_profiles.index(selected))
        elif snapshot.user_profiles:
            self._profile_combo.setCurrentIndex(0)
            self._session.select_profile(snapshot.user_profiles[0])
        self._profile_combo.blockSignals(False)

        self._refresh_status()

    def _refresh_status(self) -> None:
        profile = self._current_profile()
        enabled = profile is not None and not self._busy
        status = self._session.user_status(profile) if profile else None
        for optimization, btn in self._action_buttons.items():
            btn.setEnabled(enabled)
            done = status is not None and status.is_done(optimization)
            self._status_labels[optimization].setText(
                "✔ applied" if done else "not applied"
            )
        self._profile_combo.setEnabled(not self._busy)
        self._pick_button.setEnabled(not self._busy)

    def _current_profile(self) -> ProfileIdentity | None:
        data = self._profile_combo.currentData()
        return data if isinstance(data, ProfileIdentity) else None

    def _warn_missing_assets(self) -> None:
        missing = self._session.assets.missing_trees()
        if missing:
            log.warning("Bundled data missing: %s", ", ".join(missing))
            self.statusBar().showMessage(
                "Bundled data missing; run main.py --fetch-bundled-data"
            )

    # -- Slots -----------------------------------------------------------------

    def _pick_folder(self) -> None:
        if self._busy:
            return
        start = self._session.snapshot().local_data.emu_folder or Path.home()
        chosen = QFileDialog.getExistingDirectory(
            self, "Select emulator folder", str(start),
        )
        if not chosen:
            return
        try:
            self._session.select_environment(chosen)
        except InvalidEnvironmentError as exc:
            dialogs.critical(self, "Emulator folder", str(exc))
            return
        self._refresh()

    def _on_profile_changed(self, _index: int) -> None:
        self._session.select_profile(self._current_profile())
        self._refresh_status()

    def _start_optimization(self, optimization: Optimization) -> None:
        profile = self._current_profile()
        if profile is None or self._busy:
            return

        options: list[AdvancedOption] = []
        if optimization is Optimization.MODS:
            if self._clean_skyline.isChecked():
                options.append(AdvancedOption.CLEAN_SKYLINE)
            if self._clean_arc.isChecked():
                if not dialogs.confirm_destructive(
                    self,
                    "Reset ARCropolis",
                    "This deletes the ARCropolis config of every profile and "
                    "all installed mods before reinstalling. Continue?",
                ):
                    return
                options.append(AdvancedOption.CLEAN_ARC)

        self._busy = True
        self._refresh_status()
        self.statusBar().showMessage(
            f"{_OPTIMIZATION_LABELS[optimization]} for {profile.name}…"
        )

        def _run() -> None:
            error: Exception | None = None
            try:
                self._session.apply_optimization(profile, optimization, options)
            except Exception as exc:
                log.exception("Error applying optimization")
                error = exc
            self._signals.finished.emit(profile, optimization, error)

        threading.Thread(target=_run, daemon=True).start()

    def _on_optimization_finished(self, profile, optimization, error) -> None:
        self._busy = False
        self._refresh_status()
        label = _OPTIMIZATION_LABELS[optimization]
        if error is not None:
            self.statusBar().showMessage(f"{label} failed")
            dialogs.critical(self, label, f"{label} failed for {profile.name}:\n{error}")
            return
        self.statusBar().showMessage(f"{label} done for {profile.name}", 5000)

    def closeEvent(self, event):
        if self._busy:
            event.ignore()
            return
        try:
            self._session.save()
        except OSError:
            log.exception("Unable to save local data")
        event.accept()
