# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Silent QMessageBox wrappers for SmashOpt.

On Windows, QMessageBox.information / warning / question all internally
call MessageBeep().  Setting QMessageBox.Icon.NoIcon is the only way to
suppress that call; these helpers do so while restoring the visual icon via
QStyle standard pixmaps.
"""

from __future__ import annotations

from PySide6.QtWidgets import QApplication, QMessageBox, QStyle


def _box(
    parent,
    std_pixmap: QStyle.StandardPixmap,
    title: str,
    text: str,
    buttons: QMessageBox.StandardButton = QMessageBox.StandardButton.Ok,
    default_button: QMessageBox.StandardButton | None = None,
) -> QMessageBox:
    box = QMessageBox(parent)
    box.setIcon(QMessageBox.Icon.NoIcon)   # suppresses Windows MessageBeep()
    box.setWindowTitle(title)
    box.setText(text)
    icon = QApplication.style().standardIcon(std_pixmap)
    box.setIconPixmap(icon.pixmap(32, 32))
    box.setStandardButtons(buttons)
    if default_button is not None:
        box.setDefaultButton(default_button)
    return box


def critical(parent, title: str, text: str) -> QMessageBox.StandardButton:
    return _box(
        parent, QStyle.StandardPixmap.SP_MessageBoxCritical, title, text,
    ).exec()


def confirm_destructive(parent, title: str, text: str) -> bool:
    """Yes/No question defaulting to No.  Returns True on Yes."""
    reply = _box(
        parent,
        QStyle.StandardPixmap.SP_MessageBoxWarning,
        title, text,
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        QMessageBox.StandardButton.No,
    ).exec()
    return reply == QMessageBox.StandardButton.Yes
