# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Exception types raised by the SmashOpt core.

Missing files and directories surface as :class:`FileNotFoundError` and
storage failures as plain :class:`OSError`; only malformed input data gets
its own type.
"""

from __future__ import annotations


class InvalidDataError(ValueError):
    """A file was found but its contents do not have the expected shape."""


class InvalidEnvironmentError(RuntimeError):
    """The selected folder does not contain a usable emulator installation."""
