# Copyright (C) 2025-2026 SmashOpt Contributors
# SPDX-License-Identifier: AGPL-3.0-or-later
# See LICENSE for the full text.

import argparse
import os
import sys
import traceback
from datetime import datetime, timezone
from pathlib import Path

_ROOT = Path(__file__).resolve().parent
_CACHE_DIR = _ROOT / "cache"
_CRASH_LOG = _CACHE_DIR / "latest.log"
_DEBUG_ENV = "SMASHOPT_DEBUG"


def _install_crash_logger() -> None:
    """Replace the default exception hook so unhandled errors are written
    to ``cache/latest.log`` before the process terminates."""
    _original_hook = sys.excepthook

    def _crash_hook(exc_type, exc_value, exc_tb):
        try:
            _CACHE_DIR.mkdir(parents=True, exist_ok=True)
            tb_text = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
            timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
            header = (
                f"SmashOpt crash log\n"
                f"==================\n"
                f"Timestamp : {timestamp}\n"
                f"Python    : {sys.version}\n"
                f"Platform  : {sys.platform}\n"
                f"Exception : {exc_type.__name__}: {exc_value}\n"
                f"\n"
            )
            _CRASH_LOG.write_text(header + tb_text, encoding="utf-8")
        except OSError:
            pass
        _original_hook(exc_type, exc_value, exc_tb)

    sys.excepthook = _crash_hook


def _apply_debug_logging() -> None:
    """Configure Python logging from ``SMASHOPT_DEBUG``.

    Any level name (``DEBUG``, ``INFO``...) enables file logging at that
    level; ``1`` means ``DEBUG``.
    """
    import logging
    value = os.environ.get(_DEBUG_ENV, "").strip().upper()
    if not value or value == "0":
        logging.basicConfig(level=logging.WARNING, force=True)
        return

    level = logging.DEBUG if value == "1" else getattr(logging, value, logging.DEBUG)
    log_file = _CACHE_DIR / "smashopt_debug.log"
    _CACHE_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[
            logging.FileHandler(str(log_file), encoding="utf-8"),
            logging.StreamHandler(sys.stderr),
        ],
        force=True,
    )


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="smashopt")
    parser.add_argument(
        "--emu-folder", type=Path, default=None,
        help="emulator folder to open instead of the remembered one",
    )
    parser.add_argument(
        "--fetch-bundled-data", action="store_true",
        help="download the bundled optimization data and exit",
    )
    args, _qt_args = parser.parse_known_args(argv[1:])
    return args


def main():
    _install_crash_logger()
    _apply_debug_logging()
    args = _parse_args(sys.argv)

    if args.fetch_bundled_data:
        from smashopt.core.bundled_data import fetch_bundled_data
        print(f"Bundled data installed to {fetch_bundled_data()}")
        sys.exit(0)

    from smashopt.app import SmashOptApp
    app = SmashOptApp(sys.argv, emu_folder=args.emu_folder)
    sys.exit(app.run())


if __name__ == "__main__":
    main()
