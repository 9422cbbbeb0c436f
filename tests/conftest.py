"""Pytest configuration and fixtures for CodeTwin tests."""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Generator, List, Optional

import pytest

from codetwin.generator import GraphGenerator
from codetwin.lsp_types import CallHierarchyItem, DocumentSymbol, Range, SymbolKind


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch):
    """Point config.toml at a temporary home so user settings never leak in."""
    base_dir = tmp_path / "codetwin_home"
    monkeypatch.setattr("codetwin.config.BASE_DIR", base_dir)
    monkeypatch.setattr("codetwin.config.CONFIG_FILE", base_dir / "config.toml")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def make_symbol() -> Callable[..., DocumentSymbol]:
    """Factory for outline symbols whose name starts at (line, character)."""

    def _make(
        name: str,
        kind: SymbolKind,
        line: int,
        character: int = 0,
        children: Optional[List[DocumentSymbol]] = None,
        detail: str = "",
    ) -> DocumentSymbol:
        return DocumentSymbol(
            name=name,
            kind=kind,
            range=Range.at(max(line - 1, 0)),
            selection_range=Range.at(line, character),
            detail=detail,
            children=children or [],
        )

    return _make


@pytest.fixture
def make_item() -> Callable[..., CallHierarchyItem]:
    """Factory for call-hierarchy items anchored at (line, character)."""

    def _make(name: str, uri: str, line: int, character: int = 0) -> CallHierarchyItem:
        return CallHierarchyItem(
            name=name,
            kind=SymbolKind.FUNCTION,
            uri=uri,
            range=Range.at(line, character),
            selection_range=Range.at(line, character),
        )

    return _make


@pytest.fixture
def ts_generator() -> GraphGenerator:
    """Generator for TypeScript files under /root."""
    return GraphGenerator("/root", "typescript")


@pytest.fixture
def facts_payload() -> dict:
    """A small Python project: main.caller -> util.helper, Base <- Impl."""

    def rng(line: int, character: int = 0) -> dict:
        pos = {"line": line, "character": character}
        return {"start": pos, "end": pos}

    def sym(name: str, kind: int, line: int, children=None, detail: str = "") -> dict:
        return {
            "name": name,
            "detail": detail,
            "kind": kind,
            "range": rng(line),
            "selectionRange": rng(line, 4),
            "children": children or [],
        }

    return {
        "root": "/proj",
        "language": "python",
        "files": [
            {"path": "/proj/main.py", "symbols": [sym("caller", 12, 1), sym("CONFIG", 14, 0)]},
            {"path": "file:///proj/pkg/util.py", "symbols": [sym("helper", 12, 3)]},
            {
                "path": "/proj/pkg/shapes/base.py",
                "symbols": [sym("Base", 11, 0, children=[sym("area", 6, 1), sym("sides", 8, 2)])],
            },
            {"path": "/proj/pkg/shapes/impl.py", "symbols": [sym("Impl", 5, 2)]},
            {"path": "/proj/tests/test_main.py", "symbols": [sym("test_caller", 12, 0)]},
        ],
        "outgoingCalls": [
            {
                "path": "/proj/main.py",
                "position": {"line": 1, "character": 4},
                "calls": [
                    {"to": {"name": "helper", "kind": 12, "uri": "file:///proj/pkg/util.py",
                            "range": rng(3), "selectionRange": rng(3, 4)}},
                    {"to": {"name": "print", "kind": 12, "uri": "file:///usr/lib/python3/builtins.py",
                            "range": rng(10), "selectionRange": rng(10, 4)}},
                ],
            }
        ],
        "incomingCalls": [
            {
                "path": "/proj/main.py",
                "position": {"line": 1, "character": 4},
                "calls": [
                    {"from": {"name": "test_caller", "kind": 12, "uri": "file:///proj/tests/test_main.py",
                              "range": rng(0), "selectionRange": rng(0, 4)}},
                ],
            }
        ],
        "implementations": [
            {
                "path": "/proj/pkg/shapes/base.py",
                "position": {"line": 0, "character": 4},
                "locations": [{"uri": "file:///proj/pkg/shapes/impl.py", "range": rng(2, 4)}],
            }
        ],
        "highlights": [{"path": "/proj/main.py", "position": {"line": 1, "character": 4}}],
    }


@pytest.fixture
def facts_file(temp_dir: Path, facts_payload: dict) -> Path:
    """The sample facts payload written to disk."""
    path = temp_dir / "facts.json"
    path.write_text(json.dumps(facts_payload), encoding="utf-8")
    return path
