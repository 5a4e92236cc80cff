#!/usr/bin/env python3
"""
Web Menu Server
A lightweight HTTP server exposing the core index to the MiSTer web menu.

Usage:
    python -m coreindex.server --port 8080

Endpoints:
    /api/cores/scan[?force=1]  - Build the core index if missing (or forced)
    /cached/<file>             - Files from the cache directory (cores.json)
    /api/run?path=<file>       - Launch a core or arcade definition
    /api/version/current       - Running version
    POST /api/webmenu/reboot   - Restart the web menu
    POST /api/update?version=v - Apply a system update
"""

import argparse
import logging
import mimetypes
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from . import __version__
from .actions import SystemActions
from .cache import IndexCache
from .config import get_config, IndexerConfig, set_config
from .errors import ActionError, PersistenceError


logger = logging.getLogger(__name__)


class WebMenuServer(ThreadingHTTPServer):
    """HTTP server holding the service's cache and action collaborators."""

    daemon_threads = True

    def __init__(
        self,
        address,
        cache: IndexCache,
        actions: SystemActions,
        version: str = __version__,
    ):
        self.cache = cache
        self.actions = actions
        self.version = version
        super().__init__(address, RequestHandler)


class RequestHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the web menu API"""

    server: WebMenuServer

    def log_message(self, format, *args):
        """Override to use our logger"""
        logger.info("%s - %s" % (self.address_string(), format % args))

    def send_text(self, text: str, status: int = 200):
        """Send a plain-text response"""
        body = text.encode()
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def send_bytes(self, body: bytes, content_type: str):
        self.send_response(200)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _query(self) -> Dict[str, List[str]]:
        return parse_qs(urlsplit(self.path).query)

    def _route(self) -> str:
        return urlsplit(self.path).path

    def do_GET(self):
        """Handle GET requests"""
        route = self._route()
        if route == "/api/version/current":
            self.send_text(self.server.version)
        elif route.startswith("/cached/"):
            self.serve_cached(unquote(route[len("/cached/"):]))
        else:
            self.handle_any(route)

    def do_POST(self):
        """Handle POST requests"""
        route = self._route()
        if route == "/api/webmenu/reboot":
            self.server.actions.reboot_menu()
            self.send_text("")
        elif route == "/api/update":
            self.perform_update()
        else:
            self.handle_any(route)

    def handle_any(self, route: str):
        """Routes that accept any method"""
        if route == "/api/cores/scan":
            self.scan_for_cores()
        elif route == "/api/run":
            self.run_core()
        else:
            self.send_text("Not found", 404)

    def scan_for_cores(self):
        force = self._query().get("force", [""])[0] == "1"
        try:
            self.server.cache.ensure_index(force=force)
        except PersistenceError as e:
            self.send_text(str(e), 500)
            return
        self.send_text("")

    def run_core(self):
        path = self._query().get("path")
        if not path:
            self.send_text("")
            return
        try:
            self.server.actions.launch(path[0])
        except ActionError as e:
            self.send_text(str(e), 500)
            return
        self.send_text("")

    def perform_update(self):
        version = self._query().get("version")
        if not version:
            self.send_text("Version is mandatory", 500)
            return
        try:
            self.server.actions.update_system(version[0])
        except ActionError as e:
            self.send_text(str(e), 500)
            return
        self.send_text("")

    def serve_cached(self, name: str):
        """Serve a file from the cache directory, refusing paths outside it."""
        cache_dir = self.server.cache.config.cache_path
        target = (cache_dir / name).resolve()
        if cache_dir not in target.parents or not target.is_file():
            self.send_text("Not found", 404)
            return
        try:
            body = target.read_bytes()
        except OSError as e:
            logger.error(f"Cannot read cached file {target}: {e}")
            self.send_text("Not found", 404)
            return
        content_type = mimetypes.guess_type(target.name)[0] or "application/octet-stream"
        self.send_bytes(body, content_type)


def create_server(config: Optional[IndexerConfig] = None) -> WebMenuServer:
    """Wire the cache and actions for `config` into a ready-to-serve server."""
    config = config or get_config()
    return WebMenuServer(
        (config.host, config.port),
        cache=IndexCache(config),
        actions=SystemActions(config),
    )


def main(argv: Optional[List[str]] = None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="MiSTer web menu core index server")
    parser.add_argument("--host", help="Address to bind")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--sd-path", help="Root of the SD card")
    parser.add_argument("--scan", action="store_true", help="Build the index once and exit")
    parser.add_argument("--force", action="store_true", help="Rebuild even if an index exists")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    args = parser.parse_args(argv)

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s"
    )

    if args.sd_path:
        config = IndexerConfig.from_env(sd_path=Path(args.sd_path))
    else:
        config = get_config()
    if args.host:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    set_config(config)

    if args.scan:
        try:
            IndexCache(config).ensure_index(force=args.force)
        except PersistenceError as e:
            logger.error(str(e))
            return 1
        return 0

    server = create_server(config)
    logger.info(f"MiSTer WebMenu {__version__} on http://{config.host}:{config.port}")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("\nShutting down...")
        server.shutdown()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
