"""
Hasher - Fast content digests using xxHash.

Streams raw file bytes through xxHash64 in fixed-size chunks so large
core images never need to be held in memory.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import xxhash

from .config import get_config, IndexerConfig


logger = logging.getLogger(__name__)

CHUNK_SIZE = 65536


def compute_digest(path: Path) -> str:
    """
    Compute the hex digest of a file's bytes.

    Raises OSError if the file cannot be read to completion.
    """
    hasher = xxhash.xxh64()

    # Read in 64KB chunks for memory efficiency
    with open(path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            hasher.update(chunk)

    return hasher.hexdigest()


class Hasher:
    """
    Content hasher backed by a thread pool.

    File reads on the SD card are slow and blocking, so digests run on
    worker threads and are awaited from the scanner's event loop.
    """

    def __init__(self, config: IndexerConfig | None = None):
        self.config = config or get_config()
        self._executor: ThreadPoolExecutor | None = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.config.hasher_concurrency,
                thread_name_prefix="hasher"
            )
        return self._executor

    async def hash_file(self, path: Path) -> str:
        """Digest a single file without blocking the event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._get_executor(), compute_digest, path)

    def close(self):
        """Shutdown the thread pool."""
        if self._executor:
            self._executor.shutdown(wait=False)
            self._executor = None
