# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

from pathlib import Path

from PySide6.QtWidgets import QApplication

from smashopt.core.session import Session
from smashopt.ui.main_window import MainWindow


class SmashOptApp:
    """Top-level application controller for SmashOpt."""

    def __init__(self, argv: list[str], emu_folder: Path | None = None):
        self._qt = QApplication(argv)
        self._qt.setApplicationName("SmashOpt")
        self._qt.setOrganizationName("SmashOpt")

        self._session = Session.load(emu_folder=emu_folder)
        self._window = MainWindow(self._session)

    def run(self) -> int:
        """Show the main window and enter the Qt event loop."""
        self._window.show()
        return self._qt.exec()
