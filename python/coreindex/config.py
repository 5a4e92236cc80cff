"""
Indexing Configuration - Centralized settings for the core index service.

Uses environment variables with sensible defaults for a MiSTer device.
All paths are resolved to absolute paths for reliability.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Set, List


DEFAULT_SD_PATH = Path("/media/fat")


@dataclass
class IndexerConfig:
    """
    Configuration for the core index service.

    All paths default to the MiSTer SD card layout.
    Concurrency limits are tuned for a slow removable medium.
    """

    # --- Paths ---
    sd_path: Path = DEFAULT_SD_PATH
    cache_path: Path = field(
        default_factory=lambda: DEFAULT_SD_PATH / "Scripts" / ".webmenu" / "cache"
    )
    cores_db_path: Path | None = None   # Defaults to <cache_path>/cores.json

    # --- Categorization ---
    marker: str = "_"                   # Prefix of category directories
    rom_search_dirs: List[str] = field(default_factory=lambda: ["mame", "hbmame"])

    # --- Supported File Types ---
    core_extensions: Set[str] = field(default_factory=lambda: {".rbf"})
    arcade_extensions: Set[str] = field(default_factory=lambda: {".mra"})

    # --- Concurrency Limits ---
    scanner_concurrency: int = 8    # Parallel stat/parse operations
    hasher_concurrency: int = 4     # Parallel file reads for digests

    # --- System Collaborators ---
    mister_fifo: Path = Path("/dev/MiSTer_cmd")
    webmenu_sh_path: Path = field(
        default_factory=lambda: DEFAULT_SD_PATH / "Scripts" / "webmenu.sh"
    )
    update_command: List[str] = field(
        default_factory=lambda: [str(DEFAULT_SD_PATH / "Scripts" / ".webmenu" / "update.sh")]
    )
    reboot_delay_seconds: float = 3.0

    # --- Server ---
    host: str = "0.0.0.0"
    port: int = 80

    def __post_init__(self):
        """Ensure all paths are absolute and the cache directory exists."""
        self.sd_path = Path(self.sd_path).expanduser().resolve()
        self.cache_path = Path(self.cache_path).expanduser().resolve()
        if self.cores_db_path is None:
            self.cores_db_path = self.cache_path / "cores.json"
        self.cores_db_path = Path(self.cores_db_path).expanduser().resolve()
        self.mister_fifo = Path(self.mister_fifo)
        self.webmenu_sh_path = Path(self.webmenu_sh_path)
        self.core_extensions = {e.lower() for e in self.core_extensions}
        self.arcade_extensions = {e.lower() for e in self.arcade_extensions}

        # Create directories if they don't exist
        self.cache_path.mkdir(parents=True, exist_ok=True)
        self.cores_db_path.parent.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls, sd_path: Path | None = None) -> "IndexerConfig":
        """
        Create config from environment variables.

        An explicit `sd_path` replaces WEBMENU_SD_PATH; the cache directory,
        launcher script and updater default to locations under whichever
        root is used, unless their own variables are set.

        Supported env vars:
            WEBMENU_SD_PATH: Storage root holding the category directories
            WEBMENU_CACHE_PATH: Directory served under /cached/
            WEBMENU_CORES_DB_PATH: Location of the persisted index
            WEBMENU_MARKER: Category directory prefix
            WEBMENU_ROM_DIRS: Comma-separated ROM search subdirectories
            WEBMENU_SCANNER_CONCURRENCY: Parallel per-file workers
            WEBMENU_HASHER_CONCURRENCY: Parallel file reads
            WEBMENU_FIFO: MiSTer command FIFO
            WEBMENU_SH_PATH: Menu launcher script
            WEBMENU_UPDATE_COMMAND: Updater command (space separated)
            WEBMENU_HOST / WEBMENU_PORT: HTTP bind address
        """
        kwargs = {}

        if sd_path is None and (env_sd := os.environ.get("WEBMENU_SD_PATH")):
            sd_path = Path(env_sd)

        if sd_path is not None:
            sd = Path(sd_path).expanduser()
            kwargs["sd_path"] = sd
            kwargs["cache_path"] = sd / "Scripts" / ".webmenu" / "cache"
            kwargs["webmenu_sh_path"] = sd / "Scripts" / "webmenu.sh"
            kwargs["update_command"] = [str(sd / "Scripts" / ".webmenu" / "update.sh")]

        if cache_path := os.environ.get("WEBMENU_CACHE_PATH"):
            kwargs["cache_path"] = Path(cache_path)

        if cores_db := os.environ.get("WEBMENU_CORES_DB_PATH"):
            kwargs["cores_db_path"] = Path(cores_db)

        if marker := os.environ.get("WEBMENU_MARKER"):
            kwargs["marker"] = marker

        if rom_dirs := os.environ.get("WEBMENU_ROM_DIRS"):
            kwargs["rom_search_dirs"] = [d.strip() for d in rom_dirs.split(",") if d.strip()]

        if scanner := os.environ.get("WEBMENU_SCANNER_CONCURRENCY"):
            kwargs["scanner_concurrency"] = int(scanner)

        if hasher := os.environ.get("WEBMENU_HASHER_CONCURRENCY"):
            kwargs["hasher_concurrency"] = int(hasher)

        if fifo := os.environ.get("WEBMENU_FIFO"):
            kwargs["mister_fifo"] = Path(fifo)

        if sh_path := os.environ.get("WEBMENU_SH_PATH"):
            kwargs["webmenu_sh_path"] = Path(sh_path)

        if update := os.environ.get("WEBMENU_UPDATE_COMMAND"):
            kwargs["update_command"] = update.split()

        if host := os.environ.get("WEBMENU_HOST"):
            kwargs["host"] = host

        if port := os.environ.get("WEBMENU_PORT"):
            kwargs["port"] = int(port)

        return cls(**kwargs)


# Singleton default config
_default_config: IndexerConfig | None = None


def get_config() -> IndexerConfig:
    """Get the default configuration (singleton)."""
    global _default_config
    if _default_config is None:
        _default_config = IndexerConfig.from_env()
    return _default_config


def set_config(config: IndexerConfig) -> None:
    """Override the default configuration (for testing)."""
    global _default_config
    _default_config = config
