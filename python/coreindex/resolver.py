"""
Resolver - Checks that the ROM archives an arcade definition needs exist.

Each <rom zip="a.zip|b.zip"> reference is satisfied by any one of its
alternatives living next to the .mra or in one of the ROM subdirectories
(`mame`, `hbmame` by default). A missing archive is a normal negative
result, never an error.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, List, Sequence, Tuple

from .models import RomReference


logger = logging.getLogger(__name__)

DEFAULT_SEARCH_DIRS = ("mame", "hbmame")


def candidate_dirs(base_dir: Path, search_dirs: Sequence[str] = DEFAULT_SEARCH_DIRS) -> List[Path]:
    """Directories searched for archives, in search order."""
    return [base_dir] + [base_dir / d for d in search_dirs]


def is_reference_satisfied(
    rom: RomReference,
    base_dir: Path,
    search_dirs: Sequence[str] = DEFAULT_SEARCH_DIRS,
) -> bool:
    """True if any alternative of `rom` exists in any candidate directory."""
    dirs = candidate_dirs(base_dir, search_dirs)
    for name in rom.alternatives:
        for directory in dirs:
            if os.path.exists(directory / name):
                return True
    return False


def resolve_dependencies(
    base_dir: Path,
    roms: Iterable[RomReference],
    search_dirs: Sequence[str] = DEFAULT_SEARCH_DIRS,
) -> Tuple[List[RomReference], bool]:
    """
    Prune empty references and check the rest.

    Returns the non-empty references in source order and whether all of
    them are satisfied. Probing stops at the first unsatisfied reference;
    the remaining references are still returned.
    """
    kept = [rom for rom in roms if rom.zip != ""]

    found = True
    for rom in kept:
        if not is_reference_satisfied(rom, base_dir, search_dirs):
            logger.debug(f"Missing ROM archive {rom.zip!r} for {base_dir}")
            found = False
            break

    return kept, found
