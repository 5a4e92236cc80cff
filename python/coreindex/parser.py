"""
Parser - Metadata extraction from core filenames and arcade definitions.

Cores follow the `<codename>_<YYYYMMDD><anything>.rbf` naming convention.
Arcade definitions (.mra) are small XML documents:

    <misterromdescription>
        <name>Pac-Man</name>
        <rbf>pacman</rbf>
        <rom index="0" zip="pacman.zip|puckman.zip" md5="...">...</rom>
    </misterromdescription>
"""

import logging
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import DefinitionParseError
from .models import RomReference


logger = logging.getLogger(__name__)

CORE_FILENAME_RE = re.compile(r"^([^_]+)_(\d{8})[^.]*\.rbf$", re.IGNORECASE)


def parse_core_filename(filename: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split a core filename into (codename, codedate).

    Returns (None, None) when the name does not follow the convention;
    that is a normal outcome, not an error.
    """
    match = CORE_FILENAME_RE.match(filename)
    if match is None:
        return None, None
    return match.group(1), match.group(2)


@dataclass
class ArcadeDefinition:
    """Fields read from an .mra document."""
    name: str = ""
    rbf: str = ""
    roms: List[RomReference] = field(default_factory=list)


def _definition_from_root(root: ET.Element) -> ArcadeDefinition:
    definition = ArcadeDefinition()
    for child in root:
        # A repeated <name> or <rbf> overrides the earlier one
        if child.tag == "name":
            definition.name = child.text or ""
        elif child.tag == "rbf":
            definition.rbf = child.text or ""
        elif child.tag == "rom":
            definition.roms.append(RomReference(zip=child.get("zip", "")))
    return definition


def parse_arcade_definition(data: bytes, path: Optional[Path] = None) -> ArcadeDefinition:
    """
    Parse the XML content of an arcade definition.

    Only direct children of the document element are considered. Text is
    kept as written, surrounding whitespace included. Every <rom> element
    yields a RomReference, including those with an empty or missing zip
    attribute; pruning happens during dependency resolution.

    Raises:
        DefinitionParseError: the content is not well-formed XML
    """
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise DefinitionParseError(path, str(e)) from e
    return _definition_from_root(root)


def parse_arcade_file(path: Path) -> ArcadeDefinition:
    """
    Parse an arcade definition straight from disk.

    Raises:
        DefinitionParseError: the file is not well-formed XML
        OSError: the file cannot be read
    """
    try:
        tree = ET.parse(path)
    except ET.ParseError as e:
        raise DefinitionParseError(path, str(e)) from e
    return _definition_from_root(tree.getroot())
