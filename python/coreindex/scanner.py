"""
Scanner - Category tree traversal and per-file metadata extraction.

Walks every category root (marker-prefixed directory directly under the
SD card root), classifies each file by extension and turns cores and
arcade definitions into index entries. Per-file work runs on a thread
pool with controlled concurrency so a slow SD card is not hammered.
"""

import asyncio
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import AsyncGenerator, List

from .config import get_config, IndexerConfig
from .errors import handle_error
from .hasher import Hasher
from .lpath import derive_logical_path
from .models import (
    ArcadeDefinitionEntry, CoreIndex, FileInfo, FileKind,
    LogicImageEntry, ScanResult,
)
from .parser import parse_arcade_file, parse_core_filename
from .resolver import resolve_dependencies


logger = logging.getLogger(__name__)


class Scanner:
    """
    Builds a CoreIndex from the SD card.

    Entries are appended as their files finish processing, so the order of
    `rbfs` and `mras` is not stable between scans.
    """

    def __init__(self, config: IndexerConfig | None = None):
        self.config = config or get_config()
        self._hasher = Hasher(self.config)
        self._executor: ThreadPoolExecutor | None = None
        self._semaphore: asyncio.Semaphore | None = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.scanner_concurrency,
                thread_name_prefix="scanner"
            )
        return self._executor

    def category_roots(self) -> List[Path]:
        """Marker-prefixed entries directly under the SD root, sorted by name."""
        root = self.config.sd_path
        try:
            names = sorted(os.listdir(root))
        except OSError as e:
            handle_error(e, root, "category_roots")
            return []
        return [root / name for name in names if name.startswith(self.config.marker)]

    async def scan(self) -> ScanResult:
        """
        Scan all category roots and return the assembled index.

        Per-file failures are logged and counted; they never abort the scan.
        """
        self._semaphore = asyncio.Semaphore(self.config.scanner_concurrency)
        start_time = time.monotonic()
        index = CoreIndex()
        files_seen = 0
        errors = 0

        roots = self.category_roots()
        logger.info(f"Scanning {len(roots)} category roots under {self.config.sd_path}")

        tasks = []
        async for file_info in self.scan_iter(roots):
            files_seen += 1
            if file_info.kind is FileKind.IGNORED:
                continue
            tasks.append(asyncio.create_task(self._process_file(file_info)))

        results = await asyncio.gather(*tasks, return_exceptions=True)
        for result in results:
            # Already logged in _process_file
            if isinstance(result, BaseException):
                errors += 1
            elif result is not None:
                index.add(result)

        duration = time.monotonic() - start_time
        scan_result = ScanResult(
            index=index,
            files_seen=files_seen,
            error_count=errors,
            duration_seconds=duration,
        )
        logger.info(str(scan_result))
        return scan_result

    async def scan_iter(self, roots: List[Path] | None = None) -> AsyncGenerator[FileInfo, None]:
        """
        Iterate over every regular file below the given category roots.

        A root that cannot be read is logged and the remaining roots are
        still visited.
        """
        if roots is None:
            roots = self.category_roots()

        for root in roots:
            if not root.is_dir():
                logger.debug(f"Category root is not a directory: {root}")
                continue

            async for file_info in self._scan_directory(root):
                yield file_info

    async def _scan_directory(self, directory: Path) -> AsyncGenerator[FileInfo, None]:
        """Recursively scan a single directory, files first then subdirectories."""
        loop = asyncio.get_running_loop()
        try:
            entries = await loop.run_in_executor(
                self._get_executor(), lambda: list(os.scandir(directory))
            )
        except OSError as e:
            handle_error(e, directory, "scan_directory")
            return

        subdirs: List[Path] = []

        for entry in entries:
            try:
                if entry.is_dir(follow_symlinks=False):
                    subdirs.append(Path(entry.path))
                elif entry.is_file():
                    yield FileInfo.from_path(
                        Path(entry.path),
                        self.config.core_extensions,
                        self.config.arcade_extensions,
                    )
            except OSError as e:
                handle_error(e, Path(entry.path), "scan_entry")
                continue

        for subdir in subdirs:
            async for file_info in self._scan_directory(subdir):
                yield file_info

    async def _process_file(self, file_info: FileInfo) -> LogicImageEntry | ArcadeDefinitionEntry:
        """Dispatch one classified file to its extractor."""
        async with self._semaphore:
            try:
                if file_info.kind is FileKind.LOGIC_IMAGE:
                    return await self._scan_core(file_info)
                return await self._scan_arcade(file_info)
            except Exception as e:
                handle_error(e, file_info.path, f"scan_{file_info.kind.value}")
                raise

    async def _scan_core(self, file_info: FileInfo) -> LogicImageEntry:
        loop = asyncio.get_running_loop()
        path = file_info.path

        stat = await loop.run_in_executor(self._get_executor(), os.stat, path)
        digest = await self._hasher.hash_file(path)
        codename, codedate = parse_core_filename(file_info.name)

        return LogicImageEntry(
            path=str(path),
            filename=file_info.name,
            ctime=int(stat.st_mtime),
            digest=digest,
            lpath=derive_logical_path(path, self.config.sd_path, self.config.marker),
            codename=codename,
            codedate=codedate,
        )

    async def _scan_arcade(self, file_info: FileInfo) -> ArcadeDefinitionEntry:
        loop = asyncio.get_running_loop()
        digest = await self._hasher.hash_file(file_info.path)
        return await loop.run_in_executor(
            self._get_executor(), self._scan_arcade_sync, file_info, digest
        )

    def _scan_arcade_sync(self, file_info: FileInfo, digest: str) -> ArcadeDefinitionEntry:
        """Parse and resolve an arcade entry (runs in thread pool)."""
        path = file_info.path
        stat = os.stat(path)

        definition = parse_arcade_file(path)
        roms, roms_found = resolve_dependencies(
            path.parent, definition.roms, self.config.rom_search_dirs
        )

        return ArcadeDefinitionEntry(
            path=str(path),
            filename=file_info.name,
            ctime=int(stat.st_mtime),
            digest=digest,
            name=definition.name,
            rbf=definition.rbf,
            lpath=derive_logical_path(path, self.config.sd_path, self.config.marker),
            roms=roms,
            roms_found=roms_found,
        )

    def close(self):
        """Shutdown the thread pools."""
        self._hasher.close()
        if self._executor:
            self._executor.shutdown(wait=False)
            self._executor = None


async def scan_sd_card(config: IndexerConfig | None = None) -> ScanResult:
    """
    Convenience function to run one scan.

    Usage:
        result = await scan_sd_card()
        print(result)
    """
    scanner = Scanner(config)
    try:
        return await scanner.scan()
    finally:
        scanner.close()
