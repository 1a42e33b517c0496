"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from pathlib import Path

import pytest


def _write(path: Path, content: str = "x") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def playground(tmp_path: Path) -> Path:
    """A small Playground checkout with mapped, unmapped and excluded content."""
    root = tmp_path / "Playground"
    _write(root / "BadUSB" / "payload.txt")
    _write(root / "BadUSB" / "Windows" / "rickroll.txt")
    _write(root / "BadUSB" / "Windows" / ".DS_Store")
    _write(root / "Sub-GHz" / "Garages" / "door.sub")
    _write(root / "Sub-GHz" / "Garages" / "recording.wav")
    _write(root / "NFC" / "card.nfc")
    _write(root / "Applications" / "tool.fap")
    _write(root / "Music_Player" / "song.txt")
    _write(root / "Music_Player" / "intro.MP3")
    _write(root / "Graphics" / "logo.png")
    _write(root / "Graphics" / "._logo.png")
    _write(root / "Wav_Player" / "track.wav")
    _write(root / "New_Stuff" / "readme.md")
    _write(root / "New_Stuff" / ".git" / "HEAD")
    _write(root / ".git" / "config")
    _write(root / ".github" / "workflows" / "ci.yml")
    _write(root / "README.md")
    return root


@pytest.fixture
def sd_card(tmp_path: Path) -> Path:
    """A mounted SD card with the firmware's category directories and user files."""
    root = tmp_path / "FLIPPER SD"
    for category in ("apps", "badusb", "subghz", "nfc", "infrared", "music_player", "apps_data"):
        (root / category).mkdir(parents=True)
    _write(root / "subghz" / "my_capture.sub")
    _write(root / "badusb" / "demo_windows.txt")
    _write(root / "apps_data" / "nfc_tools" / "settings.conf")
    return root


@pytest.fixture
def mock_du_output() -> str:
    """Sample du -sk output for testing."""
    return "10000\t/tmp/staging\n"


@pytest.fixture
def mock_df_output() -> str:
    """Sample df -kP output for a card with spaces in its mount point."""
    return (
        "Filesystem     1024-blocks    Used Available Capacity Mounted on\n"
        "/dev/disk4s1      31154688 1154688  30000000       4% /Volumes/FLIPPER SD\n"
    )


@pytest.fixture
def isolated_dirs(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point XDG config and cache directories into a temporary home."""
    home = tmp_path / "home"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(home / ".cache"))
    return home
