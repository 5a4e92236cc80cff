"""
Test Configuration - Shared fixtures for core index tests.

Uses pytest fixtures to create an isolated SD card layout per test.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import pytest

from coreindex.config import IndexerConfig, set_config


def mra_xml(name: str, rbf: str = "", zips: tuple = ()) -> str:
    """Render a minimal arcade definition."""
    roms = "\n".join(f'    <rom index="{i}" zip="{z}"/>' for i, z in enumerate(zips))
    return (
        "<misterromdescription>\n"
        f"    <name>{name}</name>\n"
        f"    <rbf>{rbf}</rbf>\n"
        f"{roms}\n"
        "</misterromdescription>\n"
    )


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    tmp = tempfile.mkdtemp(prefix="coreindex_test_")
    # Resolve to handle macOS /var -> /private/var symlink
    resolved = Path(tmp).resolve()
    yield resolved
    shutil.rmtree(str(resolved), ignore_errors=True)


@pytest.fixture
def sd_root(temp_dir: Path) -> Path:
    root = temp_dir / "sd"
    root.mkdir()
    return root


@pytest.fixture
def test_config(temp_dir: Path, sd_root: Path) -> IndexerConfig:
    """Create an isolated test configuration."""
    config = IndexerConfig(
        sd_path=sd_root,
        cache_path=temp_dir / "cache",
        scanner_concurrency=4,
        hasher_concurrency=2,
        mister_fifo=temp_dir / "MiSTer_cmd",
        webmenu_sh_path=temp_dir / "webmenu.sh",
        update_command=["true"],
        reboot_delay_seconds=0.01,
        host="127.0.0.1",
        port=0,
    )
    set_config(config)
    return config


@pytest.fixture
def sd_card(sd_root: Path) -> dict[str, Path]:
    """
    Populate the SD card with a small category tree.

    Layout:
        _Arcade/_Console/game.mra       (rom2.zip present in mame/)
        _Arcade/missing.mra             (archive absent, plus an empty rom)
        _Arcade/broken.mra              (not XML)
        _Console/NeoGeo_20210615_v2.rbf
        _Console/Other/_Computer/c64.rbf
        _Console/readme.txt             (ignored)
        games/outside.rbf               (not under a category root)
        menu.rbf                        (not under a category root)
    """
    files = {}

    console = sd_root / "_Arcade" / "_Console"
    (console / "mame").mkdir(parents=True)
    (console / "mame" / "rom2.zip").write_bytes(b"PK\x03\x04")
    game = console / "game.mra"
    game.write_text(mra_xml("Game", "gamecore", ("rom1.zip|rom2.zip",)))
    files["game"] = game

    missing = sd_root / "_Arcade" / "missing.mra"
    missing.write_text(mra_xml("Missing", "other", ("", "nothere.zip")))
    files["missing"] = missing

    broken = sd_root / "_Arcade" / "broken.mra"
    broken.write_text("<misterromdescription><name>Broken</name>")
    files["broken"] = broken

    neogeo = sd_root / "_Console" / "NeoGeo_20210615_v2.rbf"
    neogeo.parent.mkdir(parents=True)
    neogeo.write_bytes(b"\x00\x01NEOGEO\xff" * 100)
    files["neogeo"] = neogeo

    c64 = sd_root / "_Console" / "Other" / "_Computer" / "c64.rbf"
    c64.parent.mkdir(parents=True)
    c64.write_bytes(b"C64 core bits")
    files["c64"] = c64

    readme = sd_root / "_Console" / "readme.txt"
    readme.write_text("not a core")
    files["readme"] = readme

    outside = sd_root / "games" / "outside.rbf"
    outside.parent.mkdir()
    outside.write_bytes(b"outside")
    files["outside"] = outside

    menu = sd_root / "menu.rbf"
    menu.write_bytes(b"menu core")
    files["menu"] = menu

    return files


@pytest.fixture
def duplicate_files(temp_dir: Path) -> tuple[Path, Path]:
    """Create two files with identical content."""
    content = b"This content is duplicated in two files.\n"

    file1 = temp_dir / "original.rbf"
    file1.write_bytes(content)

    file2 = temp_dir / "copy.rbf"
    file2.write_bytes(content)

    return file1, file2
