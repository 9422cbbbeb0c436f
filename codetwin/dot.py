"""Graphviz DOT output for call graphs.

Each file becomes a plaintext node whose label is an HTML-like table: a
header row with the file title, then one row per symbol.  Symbols with
children nest a bordered sub-table.  Every symbol row exposes a port named
``<line>_<character>`` so edges can attach to it as ``<file id>:"<port>"``.

Output follows the order of the graph's lists exactly, so equal graphs always
produce identical text.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import load_graph_config
from .errors import RenderError
from .models import Cell, Edge, Graph, Style, Subgraph, TableNode, ordered_classes

logger = logging.getLogger(__name__)

Renderer = Callable[[str], str]

_HTML_ESCAPES = (
    ("&", "&amp;"),
    ('"', "&quot;"),
    ("<", "&lt;"),
    (">", "&gt;"),
)


@dataclass(frozen=True)
class DotStyle:
    """Graph-wide attributes that are not derived from the graph itself."""

    rankdir: str = "LR"
    ranksep: float = 2.0
    fontname: str = "Arial"
    cluster_bgcolor: str = "#f0f0f0"
    cluster_color: str = "#666666"
    cluster_fontcolor: str = "#333333"
    container_bgcolor: str = "green"

    @classmethod
    def from_config(cls, values: Optional[Dict[str, Any]] = None) -> "DotStyle":
        """Defaults overlaid with the ``[graph]`` section of ``config.toml``."""
        if values is None:
            values = load_graph_config()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})


def escape_html(text: str) -> str:
    for raw, entity in _HTML_ESCAPES:
        text = text.replace(raw, entity)
    return text


def _dot_string(value: Any) -> str:
    """Body of a double-quoted DOT string."""
    return str(value).replace("\\", "\\\\").replace('"', '\\"')


def generate_dot_source(graph: Graph, style: Optional[DotStyle] = None) -> str:
    style = style or DotStyle()
    logger.debug(
        "Writing DOT for %d nodes, %d edges, %d subgraphs",
        len(graph.nodes), len(graph.edges), len(graph.subgraphs),
    )

    lines = [
        "digraph {",
        "    graph [",
        f'        class = "{graph.css_class.value}"',
        f'        rankdir = "{_dot_string(style.rankdir)}"',
        f'        ranksep = "{_dot_string(style.ranksep)}"',
        f'        fontname = "{_dot_string(style.fontname)}"',
        "        compound = true",
        "        newrank = true",
        "    ];",
        "    node [",
        '        fontsize = "16"',
        f'        fontname = "{_dot_string(style.fontname)}"',
        '        shape = "plaintext"',
        '        style = "rounded, filled"',
        "    ];",
        "    edge [",
        '        label = " "',
        "    ];",
    ]
    for table in graph.nodes:
        lines.append("")
        lines.extend(_table_lines(table, style))
    for subgraph in graph.subgraphs:
        lines.append("")
        lines.extend(_subgraph_lines(subgraph, style, parents=(), depth=1))
    if graph.edges:
        lines.append("")
        lines.extend(_edge_line(edge) for edge in graph.edges)
    lines.append("}")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Tables and cells
# ---------------------------------------------------------------------------

def _table_lines(table: TableNode, style: DotStyle) -> List[str]:
    lines = [
        f'    "{table.id}" [id="{table.id}", class="{table.css_class.value}", label=<',
        '        <TABLE BORDER="0" CELLBORDER="1" CELLSPACING="8" CELLPADDING="4">',
        '        <TR><TD WIDTH="230" BORDER="0" CELLPADDING="6" HREF="remove_me_url.title">'
        f"{escape_html(table.label)}</TD></TR>",
    ]
    for section in table.sections:
        for cell in section.cells:
            lines.extend(_cell_lines(table.id, cell, style, indent=8))
    lines.append('        <TR><TD HEIGHT="1" WIDTH="1" FIXEDSIZE="TRUE" STYLE="invis"></TD></TR>')
    lines.append("        </TABLE>")
    lines.append("    >];")
    return lines


def _cell_title(cell: Cell) -> str:
    icon = f"<B>{escape_html(cell.style.icon)}</B>  " if cell.style.icon else ""
    return icon + escape_html(cell.title)


def _style_attrs(style: Style) -> List[str]:
    attrs = []
    if style.border is not None:
        attrs.append(f'BORDER="{style.border}"')
    if style.rounded:
        attrs.append('STYLE="ROUNDED"')
    return attrs


def _href_attr(style: Style) -> List[str]:
    names = ordered_classes(style.classes)
    return [f'HREF="remove_me_url.{".".join(names)}"'] if names else []


def _cell_lines(table_id: int, cell: Cell, style: DotStyle, indent: int) -> List[str]:
    pad = " " * indent
    port = cell.port
    title = _cell_title(cell)

    if not cell.children:
        attrs = " ".join([f'PORT="{port}"', f'ID="{table_id}:{port}"'] + _style_attrs(cell.style) + _href_attr(cell.style))
        return [f"{pad}<TR><TD {attrs}>{title}</TD></TR>"]

    table_attrs = " ".join(
        [f'ID="{table_id}:{port}"', 'CELLSPACING="8"', 'CELLPADDING="4"', 'CELLBORDER="1"']
        + _style_attrs(cell.style)
        + [f'BGCOLOR="{escape_html(style.container_bgcolor)}"']
        + _href_attr(cell.style)
    )
    lines = [
        f'{pad}<TR><TD BORDER="0" CELLPADDING="0">',
        f"{pad}<TABLE {table_attrs}>",
        f'{pad}<TR><TD PORT="{port}" BORDER="0">{title}</TD></TR>',
    ]
    for child in cell.children:
        lines.extend(_cell_lines(table_id, child, style, indent))
    lines.append(f"{pad}</TABLE>")
    lines.append(f"{pad}</TD></TR>")
    return lines


# ---------------------------------------------------------------------------
# Clusters and edges
# ---------------------------------------------------------------------------

def _subgraph_lines(subgraph: Subgraph, style: DotStyle, parents: Sequence[str], depth: int) -> List[str]:
    pad = "    " * depth
    inner = pad + "    "
    path = list(parents) + [subgraph.title]
    lines = [
        f'{pad}subgraph "cluster_{escape_html("/".join(path))}" {{',
        f'{inner}label = "{escape_html(subgraph.title)}";',
        f'{inner}style = "rounded";',
        f'{inner}bgcolor = "{_dot_string(style.cluster_bgcolor)}";',
        f'{inner}color = "{_dot_string(style.cluster_color)}";',
        f'{inner}fontcolor = "{_dot_string(style.cluster_fontcolor)}";',
        f'{inner}margin = "16";',
    ]
    if subgraph.nodes:
        lines.append("")
        lines.extend(f'{inner}"{node_id}"' for node_id in subgraph.nodes)
    for child in subgraph.subgraphs:
        lines.append("")
        lines.extend(_subgraph_lines(child, style, path, depth + 1))
    lines.append(f"{pad}}};")
    return lines


def _edge_line(edge: Edge) -> str:
    src, dst = edge.from_id, edge.to_id
    attrs = [f'id="{src} -> {dst}"']
    names = ordered_classes(edge.classes)
    if names:
        attrs.append(f'class="{" ".join(names)}"')
    return (
        f'    {src.file_id}:"{src.line}_{src.character}" -> '
        f'{dst.file_id}:"{dst.line}_{dst.character}" [{", ".join(attrs)}];'
    )


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

def save_dot_source(source: str, output_path: Optional[Path] = None, filename: Optional[str] = None) -> Path:
    """Write DOT text to ``output_path/filename`` and return the file path.

    Defaults to the working directory and a timestamped ``graph_*.dot`` name.
    """
    directory = Path(output_path) if output_path is not None else Path.cwd()
    name = filename or f"graph_{datetime.now().strftime('%Y-%m-%dT%H-%M-%S')}.dot"
    full_path = directory / name
    full_path.parent.mkdir(parents=True, exist_ok=True)
    full_path.write_text(source, encoding="utf-8")
    logger.info("Saved DOT source to %s", full_path)
    return full_path


def render_svg(source: str, renderer: Renderer) -> str:
    """Render DOT text with an injected renderer."""
    try:
        return renderer(source)
    except RenderError:
        raise
    except Exception as exc:
        raise RenderError(f"Failed to render DOT to SVG: {exc}") from exc


def graphviz_renderer(engine: str = "dot", timeout: float = 60.0) -> Renderer:
    """Renderer that pipes DOT text through a Graphviz layout binary."""

    def _render(source: str) -> str:
        try:
            result = subprocess.run(
                [engine, "-Tsvg"],
                input=source,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise RenderError(f"Graphviz '{engine}' executable not found. Install Graphviz.") from exc
        except subprocess.TimeoutExpired as exc:
            raise RenderError(f"Graphviz '{engine}' timed out after {timeout:.0f}s") from exc
        if result.returncode != 0:
            raise RenderError(f"Graphviz '{engine}' failed: {result.stderr.strip()}")
        return result.stdout

    return _render
