# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

"""
Bundled asset trees shipped with SmashOpt.

The optimizations copy five read-only directory trees into the emulator's
folders.  They live under ``<project>/bundled_data`` (or wherever
``SMASHOPT_BUNDLED_DATA`` points) and are too large to keep in the source
tree, so :func:`fetch_bundled_data` downloads the published archive.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import urllib.request
import zipfile
from pathlib import Path

log = logging.getLogger(__name__)

SETTINGS = "ssbu_settings"
ARC_CONFIG = "arc_config"
ARC_MODS = "arc_mods"
SKYLINE = "skyline"
SAVE = "save"

TREE_NAMES: tuple[str, ...] = (SETTINGS, ARC_CONFIG, ARC_MODS, SKYLINE, SAVE)

ENV_VAR = "SMASHOPT_BUNDLED_DATA"

_ARCHIVE_FILE_ID = "1OVsIizFF1zZWNfoLiX5gzkzjNaaUbQET"
ARCHIVE_URL = (
    f"https://drive.google.com/uc?export=download&id={_ARCHIVE_FILE_ID}"
)
_HTTP_HEADERS = {"User-Agent": "SmashOpt/1.0"}


def project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def default_root() -> Path:
    override = os.environ.get(ENV_VAR)
    if override:
        return Path(override)
    return project_root() / "bundled_data"


class BundledAssets:
    """Name-addressed access to the bundled trees under one root."""

    def __init__(self, root: str | Path | None = None):
        self.root = Path(root) if root is not None else default_root()

    def path(self, name: str) -> Path:
        """Return the directory of tree *name*.

        Raises :class:`FileNotFoundError` if it is not a known tree or is
        not present on disk.
        """
        if name not in TREE_NAMES:
            raise FileNotFoundError(f"Unknown bundled tree {name!r}")
        tree = self.root / name
        if not tree.is_dir():
            raise FileNotFoundError(f"Bundled tree {name!r} not found at {tree}")
        return tree

    def missing_trees(self) -> list[str]:
        return [n for n in TREE_NAMES if not (self.root / n).is_dir()]

    def __repr__(self) -> str:
        return f"BundledAssets({str(self.root)!r})"


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------

def _download(url: str, dest: Path) -> Path:
    req = urllib.request.Request(url, headers=_HTTP_HEADERS, method="GET")
    with urllib.request.urlopen(req, timeout=300) as res:
        data = res.read()
    dest.write_bytes(data)
    return dest


def _locate_tree_root(extracted: Path) -> Path:
    """Find the directory inside an extracted archive that holds the trees."""
    candidates = [extracted] + sorted(
        p for p in extracted.rglob("*") if p.is_dir()
    )
    for candidate in candidates:
        if all((candidate / n).is_dir() for n in TREE_NAMES):
            return candidate
    raise RuntimeError(
        "Downloaded archive does not contain the expected bundled trees: "
        + ", ".join(TREE_NAMES)
    )


def fetch_bundled_data(dest: str | Path | None = None, url: str = ARCHIVE_URL) -> Path:
    """Download and extract the bundled trees into *dest*.

    Each tree directory is replaced as a whole; anything else in *dest* is
    left alone.

    Returns the destination root.
    """
    target = Path(dest) if dest is not None else default_root()
    with tempfile.TemporaryDirectory(prefix="smashopt_") as tmp:
        tmp_dir = Path(tmp)
        log.info("Downloading bundled data from %s", url)
        archive = _download(url, tmp_dir / "bundled_data.zip")

        log.info("Extracting bundled data...")
        extracted = tmp_dir / "extracted"
        with zipfile.ZipFile(archive, "r") as zf:
            zf.extractall(extracted)
        source = _locate_tree_root(extracted)

        target.mkdir(parents=True, exist_ok=True)
        for name in TREE_NAMES:
            if (target / name).exists():
                shutil.rmtree(target / name)
            shutil.move(str(source / name), str(target / name))

    log.info("Bundled data is ready at %s", target)
    return target
