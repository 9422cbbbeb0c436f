"""Tests for DOT serialization and rendering."""

from pathlib import Path

import pytest

from codetwin import config
from codetwin.dot import DotStyle, escape_html, generate_dot_source, render_svg, save_dot_source
from codetwin.errors import RenderError
from codetwin.models import (
    Cell,
    CellId,
    CellPosition,
    CssClass,
    Edge,
    Graph,
    Style,
    Subgraph,
    TableNode,
    TableSection,
    ordered_classes,
)


def _table(node_id: int, label: str, cells) -> TableNode:
    return TableNode(
        id=node_id,
        label=label,
        sections=[TableSection(id=f"{node_id}_main", label="Main", cells=list(cells))],
    )


@pytest.fixture
def graph() -> Graph:
    """Two files with a call edge, an implementation edge and nested clusters."""
    run = Cell(
        title="function run",
        style=Style({CssClass.CELL, CssClass.FUNCTION, CssClass.CLICKABLE}, rounded=True),
        position=CellPosition(0, 0),
        range_start=(1, 0),
    )
    area = Cell(
        title="area",
        style=Style({CssClass.CELL, CssClass.METHOD, CssClass.CLICKABLE}, rounded=True),
        position=CellPosition(0, 1),
        range_start=(6, 2),
    )
    shape = Cell(
        title="interface Shape",
        style=Style({CssClass.CELL, CssClass.INTERFACE, CssClass.CLICKABLE}, rounded=True, border=0),
        children=[area],
        position=CellPosition(0, 0),
        range_start=(5, 0),
    )
    return Graph(
        nodes=[_table(1, "caller", [run]), _table(2, "shape", [shape])],
        edges=[
            Edge(CellId(1, 1, 0), CellId(2, 6, 2)),
            Edge(CellId(1, 1, 0), CellId(2, 5, 0), frozenset({CssClass.IMPL})),
        ],
        subgraphs=[Subgraph(title="a", nodes=["1"], subgraphs=[Subgraph(title="b", nodes=["2"])])],
    )


class TestEscaping:
    """Tests for HTML-label escaping."""

    def test_escape_html(self):
        assert escape_html('A<B>&"C"') == "A&lt;B&gt;&amp;&quot;C&quot;"

    def test_ampersand_first(self):
        assert escape_html("&lt;") == "&amp;lt;"

    def test_titles_are_escaped(self):
        cell = Cell(title="Map<K, V>", style=Style(), range_start=(0, 0))
        dot = generate_dot_source(Graph(nodes=[_table(1, "a&b", [cell])]))
        assert "Map&lt;K, V&gt;" in dot
        assert "a&amp;b" in dot
        assert "Map<K, V>" not in dot


class TestOrderedClasses:
    """Tests for tag ordering."""

    def test_declaration_order(self):
        classes = {CssClass.CELL, CssClass.CLICKABLE, CssClass.FUNCTION, CssClass.HIGHLIGHT}
        assert ordered_classes(classes) == ["function", "clickable", "highlight", "cell"]

    def test_empty(self):
        assert ordered_classes(set()) == []


class TestGenerateDotSource:
    """Tests for generate_dot_source."""

    def test_deterministic(self, graph):
        assert generate_dot_source(graph) == generate_dot_source(graph)

    def test_header_uses_style(self, graph):
        dot = generate_dot_source(graph, DotStyle(rankdir="TB", fontname="Helvetica"))
        assert dot.startswith("digraph {\n")
        assert dot.endswith("}\n")
        assert 'rankdir = "TB"' in dot
        assert 'fontname = "Helvetica"' in dot
        assert "compound = true" in dot
        assert 'class = "graph"' in dot

    def test_table_node(self, graph):
        dot = generate_dot_source(graph)
        assert '"1" [id="1", class="module", label=<' in dot
        assert 'HREF="remove_me_url.title">caller</TD></TR>' in dot

    def test_leaf_cell_port(self, graph):
        dot = generate_dot_source(graph)
        assert (
            '<TR><TD PORT="1_0" ID="1:1_0" STYLE="ROUNDED" '
            'HREF="remove_me_url.function.clickable.cell">function run</TD></TR>'
        ) in dot

    def test_container_cell(self, graph):
        dot = generate_dot_source(graph)
        assert 'ID="2:5_0"' in dot
        assert 'BGCOLOR="green"' in dot
        assert '<TR><TD PORT="5_0" BORDER="0">interface Shape</TD></TR>' in dot
        assert 'PORT="6_2" ID="2:6_2"' in dot

    def test_icon_precedes_title(self):
        cell = Cell(title="Square", style=Style({CssClass.CELL, CssClass.TYPE}, icon="C"), range_start=(3, 0))
        dot = generate_dot_source(Graph(nodes=[_table(1, "square", [cell])]))
        assert "<B>C</B>  Square" in dot

    def test_edges(self, graph):
        dot = generate_dot_source(graph)
        assert '    1:"1_0" -> 2:"6_2" [id="1:1_0 -> 2:6_2"];' in dot
        assert '    1:"1_0" -> 2:"5_0" [id="1:1_0 -> 2:5_0", class="impl"];' in dot

    def test_edge_order_is_preserved(self, graph):
        dot = generate_dot_source(graph)
        assert dot.index('-> 2:"6_2"') < dot.index('-> 2:"5_0"')

    def test_nested_clusters(self, graph):
        dot = generate_dot_source(graph)
        assert 'subgraph "cluster_a" {' in dot
        assert 'subgraph "cluster_a/b" {' in dot
        assert 'label = "b";' in dot
        assert dot.index('subgraph "cluster_a" {') < dot.index('subgraph "cluster_a/b" {')

    def test_cluster_colors_from_style(self, graph):
        dot = generate_dot_source(graph, DotStyle(cluster_bgcolor="#ffffff"))
        assert 'bgcolor = "#ffffff";' in dot

    def test_empty_graph(self):
        dot = generate_dot_source(Graph())
        assert dot.startswith("digraph {")
        assert "->" not in dot
        assert "subgraph" not in dot


class TestDotStyle:
    """Tests for DotStyle configuration."""

    def test_from_config_values(self):
        style = DotStyle.from_config({"rankdir": "BT", "ranksep": 1.5, "unknown": "x"})
        assert style.rankdir == "BT"
        assert style.ranksep == 1.5
        assert style.fontname == "Arial"

    def test_from_config_file(self):
        config.save_graph_config({"fontname": "Courier"})
        assert DotStyle.from_config().fontname == "Courier"

    def test_defaults_without_config(self):
        assert DotStyle.from_config() == DotStyle()

    def test_quotes_in_settings_are_escaped(self, graph):
        style = DotStyle(fontname='Comic "Sans"', cluster_color='red" penwidth="9', container_bgcolor='a"b')
        dot = generate_dot_source(graph, style)

        assert 'fontname = "Comic \\"Sans\\""' in dot
        assert 'color = "red\\" penwidth=\\"9";' in dot
        assert 'BGCOLOR="a&quot;b"' in dot
        assert 'fontname = "Comic "Sans""' not in dot

    def test_backslash_in_settings_is_escaped(self, graph):
        dot = generate_dot_source(graph, DotStyle(fontname="C:\\fonts\\x"))
        assert 'fontname = "C:\\\\fonts\\\\x"' in dot

    def test_ranksep_is_quoted(self, graph):
        dot = generate_dot_source(graph, DotStyle(ranksep=1.5))
        assert 'ranksep = "1.5"' in dot


class TestOutput:
    """Tests for saving and rendering."""

    def test_save_dot_source(self, temp_dir: Path):
        path = save_dot_source("digraph {}\n", temp_dir, "out.dot")
        assert path == temp_dir / "out.dot"
        assert path.read_text(encoding="utf-8") == "digraph {}\n"

    def test_save_default_name(self, temp_dir: Path):
        path = save_dot_source("digraph {}\n", temp_dir)
        assert path.name.startswith("graph_")
        assert path.suffix == ".dot"

    def test_render_svg_uses_renderer(self):
        assert render_svg("digraph {}", lambda source: f"<svg>{len(source)}</svg>") == "<svg>10</svg>"

    def test_render_svg_wraps_failures(self):
        def broken(source):
            raise OSError("boom")

        with pytest.raises(RenderError, match="boom"):
            render_svg("digraph {}", broken)
