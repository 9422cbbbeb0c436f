"""Graph data models shared by the generator, the clusterer and the DOT writer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, List, NamedTuple, Optional, Set, Tuple

from .lsp_types import DocumentSymbol


class CssClass(str, Enum):
    """Semantic tags attached to cells and edges.

    Declaration order is the order tags are written out in.
    """

    # Node types
    MODULE = "module"
    INTERFACE = "interface"
    TYPE = "type"

    # Function types
    FUNCTION = "function"
    METHOD = "method"
    CONSTRUCTOR = "constructor"
    PROPERTY = "property"

    # Edge types
    IMPL = "impl"

    # Utility classes
    CLICKABLE = "clickable"
    HIGHLIGHT = "highlight"
    CELL = "cell"
    GRAPH = "graph"


_CLASS_ORDER = {css: idx for idx, css in enumerate(CssClass)}


def ordered_classes(classes: Iterable[CssClass]) -> List[str]:
    """Lower-cased tag names in declaration order."""
    return [c.value.lower() for c in sorted(set(classes), key=_CLASS_ORDER.__getitem__)]


@dataclass
class Style:
    classes: Set[CssClass] = field(default_factory=lambda: {CssClass.CELL})
    rounded: bool = False
    border: Optional[int] = None
    icon: Optional[str] = None


@dataclass(frozen=True)
class CellPosition:
    """Layout slot of a cell: row within its parent, nesting depth as column."""

    row: int
    col: int


@dataclass
class Cell:
    title: str
    style: Style
    children: List["Cell"] = field(default_factory=list)
    position: Optional[CellPosition] = None
    range_start: Tuple[int, int] = (0, 0)

    @property
    def port(self) -> str:
        return f"{self.range_start[0]}_{self.range_start[1]}"

    def walk(self) -> Iterator["Cell"]:
        """Depth-first, pre-order traversal including this cell."""
        yield self
        for child in self.children:
            yield from child.walk()


@dataclass
class TableSection:
    id: str
    label: str
    cells: List[Cell] = field(default_factory=list)


@dataclass
class TableNode:
    id: int
    label: str
    sections: List[TableSection] = field(default_factory=list)
    css_class: CssClass = CssClass.MODULE

    def walk_cells(self) -> Iterator[Cell]:
        for section in self.sections:
            for cell in section.cells:
                yield from cell.walk()


class CellId(NamedTuple):
    file_id: int
    line: int
    character: int

    def __str__(self) -> str:
        return f"{self.file_id}:{self.line}_{self.character}"


@dataclass(frozen=True)
class Edge:
    from_id: CellId
    to_id: CellId
    classes: FrozenSet[CssClass] = frozenset()


@dataclass
class Subgraph:
    title: str
    nodes: List[str] = field(default_factory=list)
    subgraphs: List["Subgraph"] = field(default_factory=list)


@dataclass
class Graph:
    nodes: List[TableNode] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    subgraphs: List[Subgraph] = field(default_factory=list)
    css_class: CssClass = CssClass.GRAPH


@dataclass
class FileOutline:
    """A registered source file and its symbol outline."""

    id: int
    path: str
    symbols: List[DocumentSymbol] = field(default_factory=list)
