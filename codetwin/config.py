"""Configuration paths and the optional ``config.toml`` for graph styling."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict

import toml

BASE_DIR = Path(os.environ.get("CODETWIN_HOME", str(Path.home() / ".codetwin"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

# Keys accepted in the [graph] section
GRAPH_KEYS = (
    "rankdir",
    "ranksep",
    "fontname",
    "cluster_bgcolor",
    "cluster_color",
    "cluster_fontcolor",
    "container_bgcolor",
)


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections), or {} if absent/unreadable."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError):
        return {}


def load_graph_config() -> Dict[str, Any]:
    """Return the known keys of the ``[graph]`` section."""
    section = load_full_config().get("graph", {})
    if not isinstance(section, dict):
        return {}
    return {key: value for key, value in section.items() if key in GRAPH_KEYS}


def save_graph_config(values: Dict[str, Any]) -> bool:
    """Write the ``[graph]`` section, preserving other sections.

    Returns:
        True if saved successfully, False otherwise
    """
    unknown = set(values) - set(GRAPH_KEYS)
    if unknown:
        raise ValueError(f"Unknown graph settings: {', '.join(sorted(unknown))}")

    config = load_full_config()
    config["graph"] = {**config.get("graph", {}), **values}
    try:
        BASE_DIR.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(config, f)
    except OSError:
        return False
    return True
