"""
Core Index Package - Scan-and-index engine for the MiSTer web menu.

Modules:
    - config: Centralized configuration
    - hasher: xxHash content digests
    - parser: Core filename and arcade definition (.mra) parsing
    - lpath: Menu categories from marker-prefixed directories
    - resolver: ROM archive presence checks
    - scanner: Category tree traversal and classification
    - cache: Single-flight index build and persistence
    - actions: Launch, reboot and update hooks
    - server: HTTP API and CLI entry point

Flow:
    Cache miss or force → Scan → Classify → Hash/Parse/Resolve → Persist

Usage:
    from coreindex import IndexCache

    cache = IndexCache()
    cache.ensure_index(force=True)
    data = cache.read_index()
"""

__version__ = "0.1.0"

from .cache import IndexCache

__all__ = ["IndexCache", "__version__"]
