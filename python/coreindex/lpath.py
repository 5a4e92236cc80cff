"""Logical path - menu categories derived from marker-prefixed directories."""

import os
from pathlib import Path
from typing import List


def derive_logical_path(path: Path | str, root: Path | str, marker: str = "_") -> List[str]:
    """
    Category labels for a file, outermost first.

    `/sd/_Arcade/cores/_Console/x.rbf` under root `/sd` gives
    `["Arcade", "Console"]`: directories without the marker are
    organizational only and are left out.
    """
    directory = os.path.dirname(str(path))
    root_str = str(root)
    if directory.startswith(root_str):
        directory = directory[len(root_str):]

    return [
        segment.lstrip(marker)
        for segment in directory.split(os.sep)
        if segment.startswith(marker)
    ]
