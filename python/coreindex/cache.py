"""
Index Cache - Single-flight build and persistence of the core index.

The persisted index is considered valid for as long as it exists; a
rebuild only happens when it is missing or when the caller forces one.
Concurrent callers share one lock, so at most one scan runs at a time
and callers arriving mid-scan wait for it instead of starting another.
"""

import asyncio
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable, Dict

from .config import get_config, IndexerConfig
from .errors import PersistenceError
from .models import CoreIndex, ScanResult
from .scanner import Scanner


logger = logging.getLogger(__name__)


class IndexCache:
    """
    Owner of the persisted index and of the scan lock.

    One instance per running service. The scanner factory is injectable so
    callers can substitute their own walker.
    """

    def __init__(
        self,
        config: IndexerConfig | None = None,
        scanner_factory: Callable[[IndexerConfig], Scanner] = Scanner,
    ):
        self.config = config or get_config()
        self._scanner_factory = scanner_factory
        self._lock = threading.Lock()
        self.last_result: ScanResult | None = None

    @property
    def path(self) -> Path:
        return self.config.cores_db_path

    def exists(self) -> bool:
        return self.path.exists()

    def ensure_index(self, force: bool = False) -> bool:
        """
        Make sure a persisted index is available.

        Args:
            force: Rescan and overwrite even if an index already exists

        Returns:
            True if a scan ran, False if the existing index was kept

        Raises:
            PersistenceError: the new index could not be written; any
                previously persisted index is left untouched
        """
        # Fast path: no need to queue behind a running scan
        if not force and self.exists():
            return False

        with self._lock:
            if not force and self.exists():
                return False

            logger.info(f"Building core index (force={force})")
            result = self._run_scan()
            self.write_index(result.index)
            self.last_result = result
            logger.info(f"Core index written to {self.path}: {result}")
            return True

    def _run_scan(self) -> ScanResult:
        scanner = self._scanner_factory(self.config)
        try:
            return asyncio.run(scanner.scan())
        finally:
            scanner.close()

    def write_index(self, index: CoreIndex) -> None:
        """
        Atomically replace the persisted index.

        The JSON is written to a temporary file next to the target and
        renamed over it, so readers never observe a partial index.
        """
        target = self.path
        tmp_path = None
        try:
            payload = json.dumps(index.to_dict()).encode("utf-8")
            target.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
            )
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, target)
        except (OSError, TypeError, ValueError) as e:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            error = PersistenceError(f"Cannot write index to {target}: {e}")
            logger.error(f"[write_index] {error}")
            raise error from e

    def read_index(self) -> bytes:
        """
        Return the persisted index bytes verbatim.

        Raises FileNotFoundError when no index has been built yet.
        """
        return self.path.read_bytes()

    def load_index(self) -> Dict[str, Any]:
        """Decoded form of read_index()."""
        return json.loads(self.read_index())
