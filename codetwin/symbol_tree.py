"""Conversion of file outlines into nested table cells."""

from __future__ import annotations

import logging
from typing import List

from .languages import LanguageRules
from .lsp_types import DocumentSymbol, SymbolKind
from .models import Cell, CellPosition, FileOutline, TableNode, TableSection

logger = logging.getLogger(__name__)


def build_cell(rules: LanguageRules, file_id: int, symbol: DocumentSymbol, position: CellPosition) -> Cell:
    """Build the cell for *symbol* and, recursively, for its visible children.

    Members of an interface are always kept; other parents filter their
    children with the same rule as top-level symbols.
    """
    keep_all = symbol.kind == SymbolKind.INTERFACE
    visible = [child for child in symbol.children if keep_all or rules.include_symbol(child)]
    children = [
        build_cell(rules, file_id, child, CellPosition(row=idx, col=position.col + 1))
        for idx, child in enumerate(visible)
    ]

    start = symbol.selection_range.start
    cell = Cell(
        title=rules.symbol_title(symbol),
        style=rules.symbol_style(symbol.kind),
        children=children,
        position=position,
        range_start=(start.line, start.character),
    )
    if not cell.title:
        logger.warning("Cell without title in file %s at %s", file_id, cell.range_start)
    return cell


def file_repr(rules: LanguageRules, file: FileOutline) -> TableNode:
    """Table node for a registered file; an empty outline gives an empty table."""
    symbols: List[DocumentSymbol] = [s for s in file.symbols if rules.include_symbol(s)]
    cells = [
        build_cell(rules, file.id, symbol, CellPosition(row=idx, col=0))
        for idx, symbol in enumerate(symbols)
    ]
    logger.debug("Built %d top-level cells for %s (id %d)", len(cells), file.path, file.id)
    return TableNode(
        id=file.id,
        label=rules.file_title(file.path),
        sections=[TableSection(id=f"{file.id}_main", label="Main", cells=cells)],
    )
