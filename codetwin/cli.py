"""Typer-based CLI for turning language-server facts into call-graph diagrams."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__, config
from .dot import DotStyle, generate_dot_source, graphviz_renderer, render_svg, save_dot_source
from .errors import CodeTwinError
from .facts import Facts, feed, load_facts
from .generator import GraphGenerator
from .languages import language_for_path, supported_languages

app = typer.Typer(
    help="🕸️  CodeTwin — call-graph diagrams from language-server facts.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(
    help="⚙️  Configuration — graph styling defaults.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
app.add_typer(config_app, name="config")

console = Console(stderr=True)


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"CodeTwin v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log generation details to stderr."),
):
    """CodeTwin: render call graphs recorded from a language server."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _pick_language(facts: Facts, override: Optional[str]) -> str:
    name = override or facts.language
    if not name:
        for file in facts.files:
            guessed = language_for_path(file.path)
            if guessed is not None:
                return guessed.value
        raise typer.BadParameter("Could not infer the language. Pass --language.")
    return name


@app.command("render")
def render(
    facts_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON facts recorded from a language server."),
    language: Optional[str] = typer.Option(None, "--language", "-l", help="Language rules to apply (overrides the facts file)."),
    root: Optional[str] = typer.Option(None, "--root", "-r", help="Workspace root (overrides the facts file)."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write to this file instead of stdout."),
    svg: bool = typer.Option(False, "--svg", help="Render through Graphviz and emit SVG instead of DOT."),
    engine: str = typer.Option("dot", "--engine", help="Graphviz layout binary used with --svg."),
):
    """Build the call graph for a facts file and print DOT (or SVG)."""
    try:
        facts = load_facts(facts_file)
        generator = GraphGenerator(root or facts.root, _pick_language(facts, language))
        accepted = feed(generator, facts)
        graph = generator.generate_graph()
        text = generate_dot_source(graph, DotStyle.from_config())
        if svg:
            text = render_svg(text, graphviz_renderer(engine))
    except CodeTwinError as exc:
        console.print(f"[red]❌ {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    if output is None:
        typer.echo(text, nl=False)
    else:
        written = save_dot_source(text, output.parent, output.name)
        console.print(f"[green]✓[/green] Wrote {written}")

    console.print(
        f"Files: {accepted}/{len(facts.files)} | "
        f"Edges: {len(graph.edges)} | Clusters: {len(graph.subgraphs)}"
    )


@app.command("languages")
def languages():
    """List supported languages and the file extensions they accept."""
    table = Table(title="Supported languages")
    table.add_column("Language", style="cyan")
    table.add_column("Extensions")
    for rules in supported_languages():
        table.add_row(rules.name, ", ".join(rules.extensions))
    Console().print(table)


@config_app.command("show")
def show_config():
    """Show the effective graph styling."""
    style = DotStyle.from_config()
    table = Table(title=f"Graph style ({config.CONFIG_FILE})")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key in config.GRAPH_KEYS:
        table.add_row(key, str(getattr(style, key)))
    Console().print(table)


@config_app.command("set")
def set_config(
    key: str = typer.Argument(..., help=f"One of: {', '.join(config.GRAPH_KEYS)}"),
    value: str = typer.Argument(..., help="New value."),
):
    """Persist a graph styling setting to config.toml."""
    if key not in config.GRAPH_KEYS:
        raise typer.BadParameter(f"Unknown setting '{key}'. Choose from: {', '.join(config.GRAPH_KEYS)}")
    parsed: object = value
    if key == "ranksep":
        try:
            parsed = float(value)
        except ValueError:
            raise typer.BadParameter("ranksep must be a number")
    if key == "rankdir":
        parsed = value.upper()
        if parsed not in ("LR", "RL", "TB", "BT"):
            raise typer.BadParameter("rankdir must be one of LR, RL, TB, BT")

    if not config.save_graph_config({key: parsed}):
        console.print(f"[red]❌ Could not write {config.CONFIG_FILE}[/red]")
        raise typer.Exit(code=1)
    typer.echo(f"Set {key} = {parsed}")


if __name__ == "__main__":
    app()
