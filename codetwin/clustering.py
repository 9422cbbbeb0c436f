"""Grouping of file nodes into nested directory clusters."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Tuple

from .models import Subgraph

logger = logging.getLogger(__name__)

SEP = "/"


def cluster_directories(entries: Iterable[Tuple[str, str]], root: str) -> List[Subgraph]:
    """Build the subgraph forest for ``(directory, node_id)`` pairs.

    Directories are expected in canonical form (``/`` separators).  Files
    directly in *root* are left unclustered.  Every cluster title is a single
    path segment relative to its parent cluster, and intermediate directories
    without files of their own still get a cluster so the nesting mirrors the
    directory tree.  Directories outside *root* hang below a cluster for their
    filesystem root (``/`` or the drive), which no relative path can produce.
    """
    groups: Dict[str, List[str]] = {}
    for directory, node_id in entries:
        groups.setdefault(directory, []).append(node_id)

    forest: List[Subgraph] = []
    for directory, nodes in groups.items():
        if directory in (root, SEP, ".", ""):
            continue
        segments = _segments(directory, root)
        if not segments:
            continue
        _insert(segments, nodes, forest)
    return forest


def _segments(directory: str, root: str) -> List[str]:
    prefix = root.rstrip(SEP) + SEP
    if root and directory.startswith(prefix):
        return [part for part in directory[len(prefix):].split(SEP) if part]
    parts = [part for part in directory.split(SEP) if part]
    if directory.startswith(SEP):
        return [SEP] + parts
    # drive-qualified ("c:/x"): the drive is the first segment
    return parts


def _insert(segments: List[str], nodes: List[str], subgraphs: List[Subgraph]) -> None:
    head, rest = segments[0], segments[1:]
    subgraph = next((s for s in subgraphs if s.title == head), None)
    if subgraph is None:
        subgraph = Subgraph(title=head)
        subgraphs.append(subgraph)
        logger.debug("Created subgraph %r", head)

    if rest:
        _insert(rest, nodes, subgraph.subgraphs)
    else:
        subgraph.nodes.extend(nodes)
