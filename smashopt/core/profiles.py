# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Reader for the console's ``profiles.dat`` account store.

The file lives in the system save area of the ``nand`` root and has a fixed
layout of 0x650 bytes::

    0x000  padding            0x10
    0x010  user record [8]    0xC8 each

    user record:
    0x00   uuid word 0        u64
    0x08   uuid word 1        u64
    0x10   secondary uuid     16 bytes (unused)
    0x20   timestamp          u64 (unused)
    0x28   username           32 bytes, NUL-padded UTF-8
    0x48   reserved           0x80

Integers are little-endian.  Slots whose two uuid words are both zero are
vacant.
"""

from __future__ import annotations

import logging
import struct
from pathlib import Path

from smashopt.core.errors import InvalidDataError
from smashopt.core.models import ProfileIdentity

log = logging.getLogger(__name__)

PROFILES_DAT_PATH = Path(
    "system", "save", "8000000000000010", "su", "avators", "profiles.dat",
)

MAX_USERS = 8
USERNAME_SIZE = 32

_HEADER_PADDING = 0x10
_USER_RECORD = struct.Struct("<QQ16sQ32s128s")
PROFILES_DAT_SIZE = _HEADER_PADDING + MAX_USERS * _USER_RECORD.size

assert PROFILES_DAT_SIZE == 0x650, (
    f"profiles.dat layout has wrong size: {PROFILES_DAT_SIZE:#x}"
)

USER_SAVE_ROOT = Path("user", "save", "0000000000000000")
SSBU_TITLE_ID = "01006A800016E000"


def profiles_dat_path(nand_dir: str | Path) -> Path:
    return Path(nand_dir) / PROFILES_DAT_PATH


def parse_profiles(data: bytes) -> list[ProfileIdentity]:
    """Decode a complete ``profiles.dat`` image.

    Returns occupied slots in file order.  Raises :class:`InvalidDataError`
    if *data* is not exactly :data:`PROFILES_DAT_SIZE` bytes or a username
    is not valid UTF-8.
    """
    if len(data) != PROFILES_DAT_SIZE:
        raise InvalidDataError(
            f"profiles.dat must be {PROFILES_DAT_SIZE} bytes, got {len(data)}"
        )

    profiles: list[ProfileIdentity] = []
    for slot in range(MAX_USERS):
        offset = _HEADER_PADDING + slot * _USER_RECORD.size
        uuid0, uuid1, _uuid2, _timestamp, raw_name, _reserved = (
            _USER_RECORD.unpack_from(data, offset)
        )
        if uuid0 == 0 and uuid1 == 0:
            continue
        name_bytes = raw_name.split(b"\x00", 1)[0]
        try:
            name = name_bytes.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidDataError(
                f"Username in profile slot {slot} is not valid UTF-8"
            ) from exc
        profiles.append(ProfileIdentity.from_words(name, uuid0, uuid1))
        log.debug("Profile slot %d: %r", slot, name)

    return profiles


def read_profiles(nand_dir: str | Path) -> list[ProfileIdentity]:
    """Read and decode ``profiles.dat`` under *nand_dir*.

    Raises :class:`FileNotFoundError` if the store is missing and
    :class:`InvalidDataError` if it has the wrong size or bad content.
    """
    path = profiles_dat_path(nand_dir)
    log.info("Reading user profiles from %s", path)
    with path.open("rb") as fh:
        # One byte past the expected size so oversized files are caught too.
        data = fh.read(PROFILES_DAT_SIZE + 1)
    return parse_profiles(data)


def save_data_dir(nand_dir: str | Path, profile: ProfileIdentity) -> Path:
    """``<nand>/user/save/0000000000000000/<profile id>/<SSBU title id>``."""
    return Path(nand_dir) / USER_SAVE_ROOT / profile.nand_storage_id() / SSBU_TITLE_ID


def arc_config_dir(sdmc_dir: str | Path, profile: ProfileIdentity) -> Path:
    """``<sdmc>/ultimate/arcropolis/config/<uuid0>/<uuid1>``."""
    uuid0, uuid1 = profile.arc_storage_ids()
    return Path(sdmc_dir) / "ultimate" / "arcropolis" / "config" / uuid0 / uuid1
