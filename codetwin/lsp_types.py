"""Value types mirroring the language-server payloads the graph is built from.

Only the fields the graph needs are modelled.  ``from_dict`` helpers accept the
camel-cased JSON shapes a language server emits (``selectionRange``,
``fromRanges``) so dumps can be replayed without a live server.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional


class SymbolKind(IntEnum):
    """LSP symbol kinds (1-based, as sent on the wire)."""

    FILE = 1
    MODULE = 2
    NAMESPACE = 3
    PACKAGE = 4
    CLASS = 5
    METHOD = 6
    PROPERTY = 7
    FIELD = 8
    CONSTRUCTOR = 9
    ENUM = 10
    INTERFACE = 11
    FUNCTION = 12
    VARIABLE = 13
    CONSTANT = 14
    STRING = 15
    NUMBER = 16
    BOOLEAN = 17
    ARRAY = 18
    OBJECT = 19
    KEY = 20
    NULL = 21
    ENUM_MEMBER = 22
    STRUCT = 23
    EVENT = 24
    OPERATOR = 25
    TYPE_PARAMETER = 26


def text_field(data: Dict[str, Any], key: str, default: Optional[str] = None) -> str:
    """String value of *key*; a null or absent value falls back to *default* when given."""
    if default is None:
        value = data[key]
    else:
        value = data.get(key)
        if value is None:
            value = default
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class Position:
    """Zero-based line/character position in a text document."""

    line: int
    character: int

    def __post_init__(self):
        if self.line < 0 or self.character < 0:
            raise ValueError(f"Invalid position: {self.line}:{self.character}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        return cls(line=int(data["line"]), character=int(data["character"]))


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Range":
        return cls(start=Position.from_dict(data["start"]), end=Position.from_dict(data["end"]))

    @classmethod
    def at(cls, line: int, character: int = 0) -> "Range":
        """Empty range at a single position."""
        pos = Position(line, character)
        return cls(start=pos, end=pos)


@dataclass
class DocumentSymbol:
    """One node of a file outline.

    ``selection_range`` marks the symbol's identity (usually its name);
    ``range`` spans the whole declaration.
    """

    name: str
    kind: SymbolKind
    range: Range
    selection_range: Range
    detail: str = ""
    children: List["DocumentSymbol"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentSymbol":
        full_range = Range.from_dict(data["range"])
        selection = data.get("selectionRange")
        return cls(
            name=text_field(data, "name"),
            kind=SymbolKind(int(data["kind"])),
            range=full_range,
            selection_range=Range.from_dict(selection) if selection else full_range,
            detail=text_field(data, "detail", ""),
            children=[cls.from_dict(child) for child in data.get("children") or []],
        )


@dataclass(frozen=True)
class CallHierarchyItem:
    name: str
    kind: SymbolKind
    uri: str
    range: Range
    selection_range: Optional[Range] = None
    detail: str = ""

    @property
    def anchor(self) -> Position:
        """Position identifying the item's symbol in its file."""
        if self.selection_range is not None:
            return self.selection_range.start
        return self.range.start

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CallHierarchyItem":
        selection = data.get("selectionRange")
        return cls(
            name=text_field(data, "name", ""),
            kind=SymbolKind(int(data.get("kind", SymbolKind.FUNCTION))),
            uri=text_field(data, "uri"),
            range=Range.from_dict(data["range"]),
            selection_range=Range.from_dict(selection) if selection else None,
            detail=text_field(data, "detail", ""),
        )


@dataclass(frozen=True)
class IncomingCall:
    """A caller of the queried symbol."""

    from_item: CallHierarchyItem
    from_ranges: List[Range] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IncomingCall":
        return cls(
            from_item=CallHierarchyItem.from_dict(data["from"]),
            from_ranges=[Range.from_dict(r) for r in data.get("fromRanges") or []],
        )


@dataclass(frozen=True)
class OutgoingCall:
    """A callee of the queried symbol."""

    to_item: CallHierarchyItem
    from_ranges: List[Range] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OutgoingCall":
        return cls(
            to_item=CallHierarchyItem.from_dict(data["to"]),
            from_ranges=[Range.from_dict(r) for r in data.get("fromRanges") or []],
        )


@dataclass(frozen=True)
class Location:
    uri: str
    range: Range

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Location":
        return cls(uri=text_field(data, "uri"), range=Range.from_dict(data["range"]))
