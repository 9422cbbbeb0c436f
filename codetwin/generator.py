"""Call-graph assembly from symbol outlines and cross-reference facts.

:class:`GraphGenerator` collects files, call-hierarchy results and interface
implementations, then turns them into a :class:`~codetwin.models.Graph`:

1. one table per registered file, its cells built by the language rules;
2. the set of every rendered cell id;
3. call and implementation edges, kept only when both ends are rendered;
4. directory clusters over the registered files.

Facts referring to files that were never registered, or to symbols the rules
filtered out, are dropped quietly.  That is the normal case for calls into
libraries or tests.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .clustering import cluster_directories
from .dot import DotStyle, generate_dot_source
from .errors import UnknownLanguageError
from .languages import LanguageRules, get_language
from .locations import SymbolLocation, canonical_path
from .lsp_types import CallHierarchyItem, DocumentSymbol, IncomingCall, Location, OutgoingCall, Position
from .models import CellId, CssClass, Edge, FileOutline, Graph, TableNode
from .symbol_tree import file_repr

logger = logging.getLogger(__name__)


class GraphGenerator:
    """Accumulates facts for one language under one workspace root."""

    def __init__(self, root: str, language: str) -> None:
        self.root = canonical_path(root)
        self.language = language
        self.files: Dict[str, FileOutline] = {}
        self._next_file_id = 1
        self._incoming: Dict[str, Tuple[SymbolLocation, List[IncomingCall]]] = {}
        self._outgoing: Dict[str, Tuple[SymbolLocation, List[OutgoingCall]]] = {}
        self._interfaces: Dict[str, Tuple[SymbolLocation, List[Location]]] = {}
        self._highlights: Dict[int, Set[Tuple[int, int]]] = {}

    def _rules(self) -> Optional[LanguageRules]:
        try:
            return get_language(self.language)
        except UnknownLanguageError:
            return None

    # ------------------------------------------------------------------
    # Fact collection
    # ------------------------------------------------------------------

    def add_file(self, file_path: str, symbols: Sequence[DocumentSymbol]) -> bool:
        """Register a file; False if it is filtered out or already known."""
        rules = self._rules()
        if rules is None:
            logger.warning("No rules for language %s, ignoring %s", self.language, file_path)
            return False
        fs_path = canonical_path(file_path)
        if not rules.is_valid_file(fs_path):
            logger.debug("Filtered out file %s", fs_path)
            return False
        if fs_path in self.files:
            logger.debug("File already registered: %s", fs_path)
            return False

        file = FileOutline(id=self._next_file_id, path=fs_path, symbols=list(symbols))
        self._next_file_id += 1
        self.files[fs_path] = file
        logger.debug("Added file %s with id %d (%d symbols)", fs_path, file.id, len(file.symbols))
        return True

    def add_incoming_calls(self, file_path: str, position: Position, calls: Sequence[IncomingCall]) -> None:
        location = SymbolLocation.from_position(file_path, position)
        self._incoming[str(location)] = (location, list(calls))

    def add_outgoing_calls(self, file_path: str, position: Position, calls: Sequence[OutgoingCall]) -> None:
        location = SymbolLocation.from_position(file_path, position)
        self._outgoing[str(location)] = (location, list(calls))

    def add_interface_implementations(self, file_path: str, position: Position, locations: Sequence[Location]) -> None:
        location = SymbolLocation.from_position(file_path, position)
        self._interfaces[str(location)] = (location, list(locations))

    def highlight(self, file_path: str, position: Position) -> None:
        file = self.files.get(canonical_path(file_path))
        if file is None:
            return
        self._highlights.setdefault(file.id, set()).add((position.line, position.character))

    # ------------------------------------------------------------------
    # Graph generation
    # ------------------------------------------------------------------

    def generate_graph(self) -> Graph:
        rules = get_language(self.language)

        tables: List[TableNode] = []
        cell_ids: Set[CellId] = set()
        for file in self.files.values():
            table = file_repr(rules, file)
            positions = self._highlights.get(file.id)
            if positions:
                _highlight_cells(table, positions)
            tables.append(table)
            cell_ids.update(CellId(file.id, *cell.range_start) for cell in table.walk_cells())

        edges: Dict[Edge, None] = {}

        for key, (location, calls) in self._incoming.items():
            to_id = self._resolve(location, cell_ids)
            if to_id is None:
                logger.debug("Dropping incoming calls for unknown target %s", key)
                continue
            for call in calls:
                from_id = self._resolve_item(call.from_item, cell_ids)
                if from_id is not None:
                    edges.setdefault(Edge(from_id, to_id), None)

        for key, (location, calls) in self._outgoing.items():
            from_id = self._resolve(location, cell_ids)
            if from_id is None:
                logger.debug("Dropping outgoing calls for unknown source %s", key)
                continue
            for call in calls:
                to_id = self._resolve_item(call.to_item, cell_ids)
                if to_id is not None:
                    edges.setdefault(Edge(from_id, to_id), None)

        for key, (location, implementations) in self._interfaces.items():
            to_id = self._resolve(location, cell_ids)
            if to_id is None:
                logger.debug("Dropping implementations for unknown interface %s", key)
                continue
            for impl in implementations:
                start = impl.range.start
                from_id = self._resolve(SymbolLocation.from_position(impl.uri, start), cell_ids)
                if from_id is not None:
                    edges.setdefault(Edge(from_id, to_id, frozenset({CssClass.IMPL})), None)

        subgraphs = cluster_directories(
            ((posixpath.dirname(file.path), str(file.id)) for file in self.files.values()),
            self.root,
        )

        logger.info(
            "Generated graph: %d tables, %d edges, %d subgraphs",
            len(tables), len(edges), len(subgraphs),
        )
        return Graph(nodes=tables, edges=list(edges), subgraphs=subgraphs)

    def generate_dot_source(self, style: Optional[DotStyle] = None) -> str:
        return generate_dot_source(self.generate_graph(), style)

    def _resolve(self, location: SymbolLocation, cell_ids: Set[CellId]) -> Optional[CellId]:
        cell_id = location.location_id(self.files)
        if cell_id is None or cell_id not in cell_ids:
            logger.debug("No rendered cell at %s", location)
            return None
        return cell_id

    def _resolve_item(self, item: CallHierarchyItem, cell_ids: Set[CellId]) -> Optional[CellId]:
        return self._resolve(SymbolLocation.from_position(item.uri, item.anchor), cell_ids)


def _highlight_cells(table: TableNode, positions: Set[Tuple[int, int]]) -> None:
    for cell in table.walk_cells():
        if cell.range_start in positions:
            cell.style.classes.add(CssClass.HIGHLIGHT)
