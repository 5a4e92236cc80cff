"""
System Actions - Side effects the web menu triggers on the MiSTer.

Launching writes a single `load_core <path>` command to the MiSTer
command FIFO. Rebooting the menu and applying an update run external
scripts; their internals are not part of this package.
"""

import logging
import subprocess
import threading
from pathlib import Path
from typing import List

from .config import get_config, IndexerConfig
from .errors import ActionError


logger = logging.getLogger(__name__)


class SystemActions:
    """Launch, reboot and update hooks bound to one configuration."""

    def __init__(self, config: IndexerConfig | None = None):
        self.config = config or get_config()

    def launch(self, path: str) -> None:
        """
        Ask the MiSTer main process to load a core or arcade definition.

        Raises:
            ActionError: the command FIFO could not be written
        """
        command = f"load_core {path}"
        try:
            with open(self.config.mister_fifo, "w") as fifo:
                fifo.write(command)
        except OSError as e:
            raise ActionError(f"Cannot write to {self.config.mister_fifo}: {e}") from e
        logger.info(f"Launched {path}")

    def reboot_menu(self) -> threading.Thread:
        """
        Restart the web menu after a short delay.

        Returns immediately so the HTTP response goes out before the
        current process is replaced.
        """
        script = Path(self.config.webmenu_sh_path)
        delay = self.config.reboot_delay_seconds

        def _run():
            try:
                subprocess.run([str(script)], check=False)
            except OSError as e:
                logger.error(f"Cannot run {script}: {e}")

        timer = threading.Timer(delay, _run)
        timer.daemon = True
        timer.start()
        logger.info(f"Menu restart scheduled in {delay:.0f}s via {script}")
        return timer

    def update_system(self, version: str) -> None:
        """
        Run the external updater for the given version.

        Raises:
            ActionError: the updater could not be started or exited non-zero
        """
        command: List[str] = list(self.config.update_command) + [version]
        logger.info(f"Updating to {version}: {' '.join(command)}")
        try:
            proc = subprocess.run(command, capture_output=True, text=True)
        except OSError as e:
            raise ActionError(f"Cannot run updater: {e}") from e

        if proc.returncode != 0:
            message = (proc.stderr or proc.stdout or "").strip()
            raise ActionError(
                f"Updater exited with status {proc.returncode}: {message}"
            )
