"""Resolve caller-supplied file names against the asset root."""

from __future__ import annotations

import logging
import os
from pathlib import Path, PurePosixPath
from typing import Union

from ..core.errors import AssetNotFoundError

logger = logging.getLogger("AssetResolver")


class AssetResolver:
    """
    Maps a file identifier to an absolute path inside a single root directory.

    Names are matched exactly (the extension is part of the name). Sub-directories
    are allowed; anything that resolves outside the root, including through a
    symlink, is rejected the same way as a missing file.
    """

    def __init__(self, root: Union[str, Path]):
        self._root = Path(root).expanduser().resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, name: str) -> Path:
        if not name or not name.strip():
            raise AssetNotFoundError(name, "Empty file name")
        if "\x00" in name:
            raise AssetNotFoundError(name, "Invalid file name")

        relative = PurePosixPath(name.replace("\\", "/"))
        if relative.is_absolute() or Path(name).is_absolute():
            raise AssetNotFoundError(name, "Absolute paths are not allowed")

        candidate = (self._root / relative).resolve()
        if candidate != self._root and self._root not in candidate.parents:
            logger.warning("Rejected path outside asset root: %r", name)
            raise AssetNotFoundError(name, "Path escapes the asset root")

        if not candidate.is_file():
            raise AssetNotFoundError(name)
        if not os.access(candidate, os.R_OK):
            raise AssetNotFoundError(name, "File not readable")
        return candidate
