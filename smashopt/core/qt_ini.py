# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""Read/write utilities for Yuzu-family ``qt-config.ini`` files.

The emulators store their settings in a Qt-style INI file where
backslash-escaped sub-keys (e.g. ``nand_directory\\default=true``) are
common and section names are percent-encoded (``[Data%20Storage]``).
Python's :mod:`configparser` cannot round-trip this format faithfully, so we
operate on raw text lines instead and never escape values on write.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from urllib.parse import unquote

from smashopt.core.errors import InvalidDataError

log = logging.getLogger(__name__)

CONFIG_FILE_NAME = "qt-config.ini"

_SECTION_RE = re.compile(r"^\[([^\]]+)\]$")
_COMMENT_PREFIXES = (";", "#")


def default_flag_key(key: str) -> str:
    """Return the ``<key>\\default`` companion key for *key*."""
    return f"{key}\\default"


def read_ini(config_path: str | Path) -> dict[str, dict[str, str]]:
    """Parse *config_path* into ``{section: {key: value}}``.

    Keys and values are returned verbatim (including backslash sub-keys).
    Raises :class:`FileNotFoundError` if the file is missing and
    :class:`InvalidDataError` if it is not UTF-8 or has lines that are
    neither a section header, a comment, nor ``key=value``.
    """
    path = Path(config_path)
    text = _read_text(path)

    sections: dict[str, dict[str, str]] = {}
    current: dict[str, str] | None = None
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue
        m = _SECTION_RE.match(line)
        if m:
            current = sections.setdefault(m.group(1), {})
            continue
        if "=" not in line or line.startswith("["):
            raise InvalidDataError(f"{path}:{lineno}: malformed line {line!r}")
        key, _, val = line.partition("=")
        if current is None:
            # Keys before the first header belong to Qt's implicit [General].
            current = sections.setdefault("General", {})
        current[key.strip()] = val.strip()

    return sections


def find_section(
    ini: dict[str, dict[str, str]], name: str,
) -> dict[str, str] | None:
    """Look up a section, treating ``%20`` and a literal space as equal."""
    if name in ini:
        return ini[name]
    wanted = unquote(name)
    for section_name, entries in ini.items():
        if unquote(section_name) == wanted:
            return entries
    return None


def parse_bool(value: str | None) -> bool:
    """Qt writes booleans as ``true``/``false``; anything unknown is false."""
    if value is None:
        return False
    return value.strip().lower() in ("true", "1")


def resolve_default_override(
    section: dict[str, str], key: str, default: str,
) -> str | None:
    """Apply the ``<key>\\default`` convention for one setting.

    When the flag is true the hardcoded *default* wins even if an explicit
    value is present.  Otherwise the explicit value is returned verbatim,
    or ``None`` if there is none.
    """
    if parse_bool(section.get(default_flag_key(key))):
        return default
    return section.get(key)


def patch_section(
    config_path: str | Path, section: str, updates: dict[str, str],
) -> None:
    """Update keys of one *section* in *config_path* atomically.

    Only keys present in *updates* are changed; everything else (including
    all other sections) is preserved byte-for-byte.  Keys missing from the
    section are appended at its end, and the section itself is appended if
    the file has none.  The file is written via temp-file-and-rename so the
    emulator never sees a half-written config.  A file that is not valid
    UTF-8 is refused with :class:`InvalidDataError` and left untouched.
    """
    path = Path(config_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.exists():
        original = _read_text(path)
    else:
        original = ""

    wanted = unquote(section)
    remaining = dict(updates)
    out_lines: list[str] = []
    in_target = False
    target_found = False
    remaining_inserted = False

    for raw_line in original.splitlines():
        stripped = raw_line.strip()
        m = _SECTION_RE.match(stripped)
        if m:
            if in_target and not remaining_inserted:
                _insert_before_blank_tail(out_lines, _format_updates(remaining))
                remaining.clear()
                remaining_inserted = True
            in_target = unquote(m.group(1)) == wanted
            if in_target:
                target_found = True
            out_lines.append(raw_line)
            continue

        if in_target and "=" in stripped:
            key = stripped.partition("=")[0].strip()
            if key in remaining:
                out_lines.append(f"{key}={remaining.pop(key)}")
                continue

        out_lines.append(raw_line)

    if in_target and not remaining_inserted and remaining:
        out_lines.extend(_format_updates(remaining))
        remaining.clear()

    if not target_found and remaining:
        if out_lines:
            out_lines.append("")
        out_lines.append(f"[{section}]")
        out_lines.extend(_format_updates(remaining))

    newline = "\r\n" if "\r\n" in original else "\n"
    text = newline.join(out_lines)
    if not text.endswith(newline):
        text += newline

    fd, tmp = tempfile.mkstemp(
        suffix=".ini", dir=str(path.parent), prefix=".tmp_smashopt_"
    )
    try:
        os.close(fd)
        Path(tmp).write_bytes(text.encode("utf-8"))
        Path(tmp).replace(path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise
    log.debug("Patched %d key(s) in [%s] of %s", len(updates), section, path)


def _read_text(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidDataError(f"{path} is not valid UTF-8: {exc}") from exc


def _insert_before_blank_tail(lines: list[str], new_lines: list[str]) -> None:
    # Keep the blank separator lines Qt puts between sections after the keys.
    idx = len(lines)
    while idx > 0 and not lines[idx - 1].strip():
        idx -= 1
    lines[idx:idx] = new_lines


def _format_updates(kvs: dict[str, str]) -> list[str]:
    return [f"{k}={v}" for k, v in kvs.items()]
