"""Loading of language-server facts dumped to JSON.

A facts document is what a data-gathering client (an editor extension or a
script talking to a language server) records for one graph::

    {
      "root": "/workspace",
      "language": "python",
      "files": [{"path": "...", "symbols": [<DocumentSymbol>, ...]}],
      "incomingCalls": [{"path": "...", "position": {...}, "calls": [{"from": <item>}]}],
      "outgoingCalls": [{"path": "...", "position": {...}, "calls": [{"to": <item>}]}],
      "implementations": [{"path": "...", "position": {...}, "locations": [<Location>]}],
      "highlights": [{"path": "...", "position": {...}}]
    }

Symbols, call-hierarchy items and locations use the LSP JSON shapes.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from .errors import FactsError
from .generator import GraphGenerator
from .lsp_types import DocumentSymbol, IncomingCall, Location, OutgoingCall, Position, text_field

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class FileFacts:
    path: str
    symbols: List[DocumentSymbol] = field(default_factory=list)


@dataclass
class CallFacts:
    path: str
    position: Position
    calls: List[Any] = field(default_factory=list)


@dataclass
class ImplementationFacts:
    path: str
    position: Position
    locations: List[Location] = field(default_factory=list)


@dataclass
class Facts:
    root: str
    language: Optional[str] = None
    files: List[FileFacts] = field(default_factory=list)
    incoming_calls: List[CallFacts] = field(default_factory=list)
    outgoing_calls: List[CallFacts] = field(default_factory=list)
    implementations: List[ImplementationFacts] = field(default_factory=list)
    highlights: List[Tuple[str, Position]] = field(default_factory=list)


def load_facts(path: Path) -> Facts:
    """Read and parse a facts document from disk."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise FactsError(f"Cannot read facts file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise FactsError(f"Invalid JSON in {path}: {exc}") from exc
    return parse_facts(payload)


def parse_facts(payload: Dict[str, Any]) -> Facts:
    if not isinstance(payload, dict):
        raise FactsError("Facts document must be a JSON object")
    if not payload.get("root") or not isinstance(payload["root"], str):
        raise FactsError("Facts document has no 'root' path")
    language = payload.get("language")
    if language is not None and not isinstance(language, str):
        raise FactsError("'language' must be a string")

    facts = Facts(root=payload["root"], language=language)
    facts.files = _entries(payload, "files", _file_facts)
    facts.incoming_calls = _entries(payload, "incomingCalls", lambda e: _call_facts(e, IncomingCall.from_dict))
    facts.outgoing_calls = _entries(payload, "outgoingCalls", lambda e: _call_facts(e, OutgoingCall.from_dict))
    facts.implementations = _entries(payload, "implementations", _implementation_facts)
    facts.highlights = _entries(payload, "highlights", _highlight_facts)
    return facts


def _entries(payload: Dict[str, Any], key: str, parse: Callable[[Dict[str, Any]], T]) -> List[T]:
    raw = payload.get(key) or []
    if not isinstance(raw, list):
        raise FactsError(f"'{key}' must be a list")
    parsed = []
    for idx, entry in enumerate(raw):
        try:
            parsed.append(parse(entry))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise FactsError(f"Malformed entry {key}[{idx}]: {exc!r}") from exc
    return parsed


def _file_facts(entry: Dict[str, Any]) -> FileFacts:
    return FileFacts(
        path=text_field(entry, "path"),
        symbols=[DocumentSymbol.from_dict(s) for s in entry.get("symbols") or []],
    )


def _call_facts(entry: Dict[str, Any], parse_call: Callable[[Dict[str, Any]], Any]) -> CallFacts:
    return CallFacts(
        path=text_field(entry, "path"),
        position=Position.from_dict(entry["position"]),
        calls=[parse_call(c) for c in entry.get("calls") or []],
    )


def _highlight_facts(entry: Dict[str, Any]) -> Tuple[str, Position]:
    return text_field(entry, "path"), Position.from_dict(entry["position"])


def _implementation_facts(entry: Dict[str, Any]) -> ImplementationFacts:
    return ImplementationFacts(
        path=text_field(entry, "path"),
        position=Position.from_dict(entry["position"]),
        locations=[Location.from_dict(loc) for loc in entry.get("locations") or []],
    )


def feed(generator: GraphGenerator, facts: Facts) -> int:
    """Replay *facts* into *generator*; returns the number of files accepted."""
    accepted = 0
    for file in facts.files:
        if generator.add_file(file.path, file.symbols):
            accepted += 1
    for record in facts.incoming_calls:
        generator.add_incoming_calls(record.path, record.position, record.calls)
    for record in facts.outgoing_calls:
        generator.add_outgoing_calls(record.path, record.position, record.calls)
    for record in facts.implementations:
        generator.add_interface_implementations(record.path, record.position, record.locations)
    for path, position in facts.highlights:
        generator.highlight(path, position)
    logger.info("Accepted %d of %d files", accepted, len(facts.files))
    return accepted
