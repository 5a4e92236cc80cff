"""
Data Models - Type definitions for the scan-and-index pipeline.

These dataclasses represent the data flowing through the pipeline stages
and the shape of the persisted index.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from enum import Enum


class FileKind(Enum):
    """Kind of file found under a category root."""
    LOGIC_IMAGE = "rbf"             # Loadable FPGA core
    ARCADE_DEFINITION = "mra"       # Arcade descriptor referencing ROM zips
    IGNORED = "ignored"


def classify(
    extension: str,
    core_extensions: Iterable[str] = (".rbf",),
    arcade_extensions: Iterable[str] = (".mra",),
) -> FileKind:
    """Map a file extension (with leading dot, any case) to its FileKind."""
    ext = extension.lower()
    if ext in core_extensions:
        return FileKind.LOGIC_IMAGE
    if ext in arcade_extensions:
        return FileKind.ARCADE_DEFINITION
    return FileKind.IGNORED


@dataclass
class FileInfo:
    """
    Basic file information from the walker.

    Only what the directory entry tells us, no content read yet.
    """
    path: Path
    name: str
    extension: str
    kind: FileKind

    @classmethod
    def from_path(
        cls,
        path: Path,
        core_extensions: Iterable[str] = (".rbf",),
        arcade_extensions: Iterable[str] = (".mra",),
    ) -> "FileInfo":
        extension = path.suffix.lower()
        return cls(
            path=path,
            name=path.name,
            extension=extension,
            kind=classify(extension, core_extensions, arcade_extensions),
        )


@dataclass
class RomReference:
    """One <rom> element: a pipe-delimited set of acceptable zip names."""
    zip: str

    @property
    def alternatives(self) -> List[str]:
        return [name for name in self.zip.split("|") if name]

    def to_dict(self) -> Dict[str, Any]:
        return {"zip": self.zip}


@dataclass
class LogicImageEntry:
    """An .rbf core found on the SD card."""
    path: str
    filename: str
    ctime: int
    digest: str
    lpath: List[str] = field(default_factory=list)
    codename: Optional[str] = None
    codedate: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "filename": self.filename,
            "codename": self.codename or "",
            "codedate": self.codedate or "",
            "ctime": self.ctime,
            "lpath": list(self.lpath),
            "digest": self.digest,
        }


@dataclass
class ArcadeDefinitionEntry:
    """
    An .mra arcade definition found on the SD card.

    `rbf` is kept for callers inside the process but is not part of the
    serialized index.
    """
    path: str
    filename: str
    ctime: int
    digest: str
    name: str = ""
    rbf: str = ""
    lpath: List[str] = field(default_factory=list)
    roms: List[RomReference] = field(default_factory=list)
    roms_found: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "filename": self.filename,
            "ctime": self.ctime,
            "lpath": list(self.lpath),
            "digest": self.digest,
            "name": self.name,
            "roms": [rom.to_dict() for rom in self.roms],
            "roms_found": self.roms_found,
        }


@dataclass
class CoreIndex:
    """Everything one scan pass found."""
    rbfs: List[LogicImageEntry] = field(default_factory=list)
    mras: List[ArcadeDefinitionEntry] = field(default_factory=list)

    def add(self, entry: LogicImageEntry | ArcadeDefinitionEntry) -> None:
        if isinstance(entry, LogicImageEntry):
            self.rbfs.append(entry)
        else:
            self.mras.append(entry)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rbfs": [e.to_dict() for e in self.rbfs],
            "mras": [e.to_dict() for e in self.mras],
        }

    def __len__(self) -> int:
        return len(self.rbfs) + len(self.mras)


@dataclass
class ScanResult:
    """Result of scanning the category roots."""
    index: CoreIndex
    files_seen: int
    error_count: int
    duration_seconds: float

    def __str__(self) -> str:
        return (
            f"Indexed {len(self.index.rbfs)} cores and "
            f"{len(self.index.mras)} arcade definitions "
            f"({self.files_seen} files seen, {self.error_count} errors) "
            f"in {self.duration_seconds:.1f}s"
        )
