"""Transforms of a finished report into its output shapes.

All functions here are pure: they read a report and return new data without
touching the filesystem or the cache.
"""

import posixpath
from typing import Any, Dict, List, TextIO

from .models import Report
from ..utils.formatters import format_file_size, format_percent


def to_rows(report: Report) -> List[Dict[str, Any]]:
    """Row encoding of the top-level entries, in report order.

    Args:
        report: Report to encode.

    Returns:
        List of dicts with ``name``, ``percentage``, ``size`` and ``is_directory``.
    """
    return [
        {
            "name": posixpath.basename(entry.name),
            "percentage": format_percent(entry.ratio),
            "size": format_file_size(entry.size),
            "is_directory": entry.is_directory,
        }
        for entry in report
    ]


def to_nested_tree(report: Report, name: str) -> Dict[str, Any]:
    """Nested encoding rooted at a node called ``name``.

    Node names are each entry's own path segment (``d``, not ``c/d``); the
    path of a node is the chain of names from the root. Leaves carry
    ``value``; directories with contents carry ``children`` and no value.
    An empty directory is encoded as a leaf of value 0.
    """
    root: Dict[str, Any] = {"name": name, "children": []}
    stack = [(report, root["children"])]
    while stack:
        entries, children = stack.pop()
        for entry in entries:
            if entry.children:
                node = {"name": entry.name, "children": []}
                stack.append((entry.children, node["children"]))
            else:
                node = {"name": entry.name, "value": entry.size}
            children.append(node)
    return root


def to_flat_arrays(report: Report) -> Dict[str, List[Any]]:
    """Flat parallel-array encoding of every node in the tree.

    Returns:
        Dict with index-aligned ``ids``, ``labels``, ``parents`` and ``values``
        lists, ordered by id. Directories have value 0; their magnitude is
        the sum of their descendants.
    """
    nodes: Dict[str, tuple] = {}
    stack = [(report, "")]
    while stack:
        entries, parent = stack.pop()
        for entry in entries:
            node_id = posixpath.join(parent, entry.name) if parent else entry.name
            if entry.is_directory:
                nodes[node_id] = (parent, 0)
                stack.append((entry.children or [], node_id))
            else:
                nodes[node_id] = (parent, entry.size)

    ids = sorted(nodes)
    return {
        "ids": ids,
        "labels": [posixpath.basename(node_id) for node_id in ids],
        "parents": [nodes[node_id][0] for node_id in ids],
        "values": [nodes[node_id][1] for node_id in ids],
    }


def write_text(report: Report, out: TextIO) -> None:
    """Write one ``name percent size`` line per top-level entry."""
    for entry in report:
        out.write(f"{entry.name} {format_percent(entry.ratio)} {format_file_size(entry.size)}\n")
