"""Helpers for reading generic provider trees (JSON or converted XML)."""

from __future__ import annotations

from typing import Any, List, Optional


def as_array(value: Any) -> List[Any]:
    """None -> [], list -> list, anything else -> [value]."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    return [value]


def attr(node: Any, name: str) -> Optional[str]:
    """Read `@name` (XML-style attribute) or `name`; empty strings count as missing."""
    if not isinstance(node, dict):
        return None
    for key in (f"@{name}", name):
        value = node.get(key)
        if value is None or isinstance(value, (dict, list)):
            continue
        text = str(value).strip()
        if text:
            return text
    return None


def first_attr(node: Any, *names: str) -> Optional[str]:
    for name in names:
        value = attr(node, name)
        if value is not None:
            return value
    return None


def child(node: Any, *path: str) -> Any:
    """Walk dict keys; returns None as soon as a step is missing."""
    current = node
    for key in path:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def top_level_keys(tree: Any) -> List[str]:
    if isinstance(tree, dict):
        return sorted(str(k) for k in tree.keys())
    return []
