"""
Convert provider XML into the same generic tree shape the JSON endpoints return.

- element attributes become "@name" keys
- repeated child elements become lists, a single child stays a dict
- text content becomes "#text", or the plain string for attribute-less leaves

Parsing goes through BeautifulSoup's lxml-backed "xml" builder, which keeps
tag and attribute case intact.
"""

from __future__ import annotations

from typing import Any, Dict

from bs4 import BeautifulSoup, CData, NavigableString, Tag


def _local_name(name: str) -> str:
    return name.rsplit(":", 1)[-1]


def _own_text(tag: Tag) -> str:
    # Comments, processing instructions and doctypes are NavigableString subclasses too.
    parts = [str(c) for c in tag.children if type(c) in (NavigableString, CData)]
    return "".join(parts).strip()


def element_to_tree(tag: Tag) -> Any:
    """Recursively convert one element."""
    node: Dict[str, Any] = {}
    for key, value in tag.attrs.items():
        node[f"@{_local_name(key)}"] = value

    for child in tag.find_all(True, recursive=False):
        name = _local_name(child.name)
        value = element_to_tree(child)
        if name in node:
            existing = node[name]
            if isinstance(existing, list):
                existing.append(value)
            else:
                node[name] = [existing, value]
        else:
            node[name] = value

    text = _own_text(tag)
    if not node:
        return text
    if text:
        node["#text"] = text
    return node


def parse_xml(text: str) -> Dict[str, Any]:
    """Parse an XML document into {root_tag: tree}. Raises ValueError when there is no root element."""
    soup = BeautifulSoup(text, "xml")
    root = soup.find(True, recursive=False)
    if root is None:
        raise ValueError("no root element")
    return {_local_name(root.name): element_to_tree(root)}
