"""Tests for emulator layout discovery."""

from pathlib import Path

from smashopt.core import environment
from smashopt.core.environment import (
    PosixExecutableProbe,
    WindowsExecutableProbe,
    infer_emulator_name,
    resolve_environment,
)
from smashopt.core.models import EnvironmentInfo


def _write_config(config_dir: Path, text: str) -> Path:
    config_dir.mkdir(parents=True, exist_ok=True)
    cfg = config_dir / "qt-config.ini"
    cfg.write_text(text, encoding="utf-8")
    return cfg


class TestResolveEnvironmentWindows:
    def test_default_flag_uses_folder_paths(self, tmp_path: Path) -> None:
        folder = tmp_path / "yuzu"
        cfg = _write_config(folder / "config", (
            "[Data%20Storage]\n"
            "nand_directory\\default=true\n"
            "nand_directory=D:/explicit/nand\n"
            "sdmc_directory\\default=true\n"
        ))

        env = resolve_environment(folder, platform="win32")
        assert env == EnvironmentInfo(
            emulator_name="yuzu",
            config_dir=folder / "config",
            config_path=cfg,
            nand_dir=folder / "nand",
            sdmc_dir=folder / "sdmc",
        )

    def test_explicit_values_used_when_flag_false(self, tmp_path: Path) -> None:
        folder = tmp_path / "suyu"
        _write_config(folder / "config", (
            "[Data Storage]\n"
            "nand_directory\\default=false\n"
            "nand_directory=/explicit/nand\n"
            "sdmc_directory=/explicit/sdmc\n"
        ))

        env = resolve_environment(folder, platform="win32")
        assert env.emulator_name == "suyu"
        assert env.nand_dir == Path("/explicit/nand")
        assert env.sdmc_dir == Path("/explicit/sdmc")

    def test_missing_storage_keys_leave_roots_unset(self, tmp_path: Path) -> None:
        folder = tmp_path / "yuzu"
        _write_config(folder / "config", "[UI]\ntheme=dark\n")

        env = resolve_environment(folder, platform="win32")
        assert env.is_resolved
        assert env.nand_dir is None
        assert env.sdmc_dir is None

    def test_missing_config_yields_empty(self, tmp_path: Path) -> None:
        folder = tmp_path / "yuzu"
        folder.mkdir()
        assert resolve_environment(folder, platform="win32") == EnvironmentInfo.empty()

    def test_malformed_config_yields_empty(self, tmp_path: Path) -> None:
        folder = tmp_path / "yuzu"
        _write_config(folder / "config", "[UI]\ngarbage line\n")
        assert resolve_environment(folder, platform="win32") == EnvironmentInfo.empty()


class TestPortableFolder:
    def test_name_comes_from_largest_executable(self, tmp_path: Path) -> None:
        install = tmp_path / "Eden"
        install.mkdir()
        (install / "eden.exe").write_bytes(b"x" * 4096)
        (install / "eden-cli.exe").write_bytes(b"x" * 128)
        (install / "big-readme.txt").write_bytes(b"x" * 10_000)
        folder = install / "user"
        _write_config(folder / "config", (
            "[Data%20Storage]\n"
            "nand_directory\\default=true\n"
            "sdmc_directory\\default=true\n"
        ))

        env = resolve_environment(folder, platform="win32")
        assert env.emulator_name == "eden"
        assert env.config_dir == folder / "config"
        assert env.nand_dir == folder / "nand"

    def test_no_executable_yields_empty(self, tmp_path: Path) -> None:
        folder = tmp_path / "install" / "user"
        _write_config(folder / "config", "[UI]\ntheme=dark\n")
        assert resolve_environment(folder, platform="win32") == EnvironmentInfo.empty()

    def test_posix_probe_skips_suffixed_files(self, tmp_path: Path) -> None:
        (tmp_path / "citron").write_bytes(b"x" * 100)
        (tmp_path / "citron.AppImage.zsync").write_bytes(b"x" * 1000)
        (tmp_path / "lib").mkdir()
        assert infer_emulator_name(tmp_path, PosixExecutableProbe()) == "citron"

    def test_windows_probe_is_case_insensitive(self, tmp_path: Path) -> None:
        (tmp_path / "Yuzu.EXE").write_bytes(b"x")
        assert infer_emulator_name(tmp_path, WindowsExecutableProbe()) == "Yuzu"


class TestResolveEnvironmentPosix:
    def test_config_lives_under_platform_config_root(
        self, tmp_path: Path, monkeypatch,
    ) -> None:
        config_root = tmp_path / "config"
        monkeypatch.setattr(
            environment, "platform_config_root", lambda platform=None: config_root,
        )
        folder = tmp_path / "share" / "eden"
        folder.mkdir(parents=True)
        cfg = _write_config(config_root / "eden", (
            "[Data%20Storage]\n"
            "nand_directory\\default=true\n"
            "sdmc_directory\\default=false\n"
            "sdmc_directory=/media/sd\n"
        ))

        env = resolve_environment(folder, platform="linux")
        assert env.config_path == cfg
        assert env.nand_dir == folder / "nand"
        assert env.sdmc_dir == Path("/media/sd")
