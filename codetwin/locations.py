"""File reference canonicalization and symbol locations."""

from __future__ import annotations

import posixpath
import re
from typing import Mapping, NamedTuple, Optional
from urllib.parse import unquote, urlparse

from .lsp_types import Position
from .models import CellId, FileOutline

_DRIVE = re.compile(r"^/?([A-Za-z]):(/|$)")


def canonical_path(ref: str) -> str:
    """Comparison key for a file reference given as a path or a ``file:`` URI.

    Separators become ``/``, drive letters are lower-cased and ``.``/``..``
    segments are collapsed, so ``file:///C:/a/b.py`` and ``c:\\a\\b.py``
    produce the same key.
    """
    if not ref:
        return ref
    path = ref
    if ref.startswith("file:"):
        parsed = urlparse(ref)
        path = unquote(parsed.path)
        if parsed.netloc and parsed.netloc != "localhost":
            path = f"//{parsed.netloc}{path}"
    path = path.replace("\\", "/")
    match = _DRIVE.match(path)
    if match:
        path = f"{match.group(1).lower()}:/{path[match.end():]}"
    return posixpath.normpath(path)


class SymbolLocation(NamedTuple):
    path: str
    line: int
    character: int

    @classmethod
    def from_position(cls, ref: str, position: Position) -> "SymbolLocation":
        return cls(canonical_path(ref), position.line, position.character)

    def location_id(self, files: Mapping[str, FileOutline]) -> Optional[CellId]:
        """Cell id this location would have, or None for unregistered files."""
        file = files.get(self.path)
        if file is None:
            return None
        return CellId(file.id, self.line, self.character)

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.character}"
