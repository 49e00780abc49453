"""Minimal element tree and pure traversal helpers.

Markup is parsed with BeautifulSoup (lxml) and immediately converted into plain
Node objects, so the walking logic never depends on parser specifics.
Every helper accepts None for a missing node and answers None or "".
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import Comment, Doctype, ProcessingInstruction

TEXT = "#text"

_SKIPPED_STRINGS = (Comment, Doctype, ProcessingInstruction)


@dataclass
class Node:
    tag: str
    attrs: dict[str, str] = field(default_factory=dict)
    children: list[Node] = field(default_factory=list)
    text: str = ""  # only set on TEXT nodes

    @property
    def is_element(self) -> bool:
        return self.tag != TEXT


def _convert(element: Tag) -> Node:
    node = Node(tag=element.name, attrs={k: " ".join(v) if isinstance(v, list) else v for k, v in element.attrs.items()})
    for child in element.children:
        if isinstance(child, Tag):
            node.children.append(_convert(child))
        elif isinstance(child, NavigableString) and not isinstance(child, _SKIPPED_STRINGS):
            node.children.append(Node(tag=TEXT, text=str(child)))
    return node


def from_markup(markup: str) -> Node:
    """Parse an HTML document into a Node tree rooted at a synthetic document node."""
    soup = BeautifulSoup(markup, "lxml")
    root = Node(tag="#document")
    for child in soup.children:
        if isinstance(child, Tag):
            root.children.append(_convert(child))
    return root


def iter_elements(node: Node | None) -> Iterator[Node]:
    """Depth-first, document-order walk over ``node`` and its element descendants."""
    if node is None:
        return
    if node.is_element:
        yield node
    for child in node.children:
        yield from iter_elements(child)


def find_by_attr(node: Node | None, key: str, value: str) -> Node | None:
    """Return the first element whose attribute ``key`` equals ``value`` exactly."""
    return next((n for n in iter_elements(node) if n.attrs.get(key) == value), None)


def find_by_id(node: Node | None, element_id: str) -> Node | None:
    return find_by_attr(node, "id", element_id)


def find_by_class(node: Node | None, class_value: str) -> Node | None:
    """Match the whole class attribute, e.g. ``"panel-body markdown-body"``."""
    return find_by_attr(node, "class", class_value)


def has_class(node: Node | None, class_fragment: str) -> bool:
    return node is not None and class_fragment in node.attrs.get("class", "")


def child_elements(node: Node | None, tag: str = "div") -> list[Node]:
    if node is None:
        return []
    return [c for c in node.children if c.tag == tag]


def text_content(node: Node | None) -> str:
    """Join the stripped, non-empty text nodes under ``node`` with newlines."""
    if node is None:
        return ""
    parts: list[str] = []

    def _collect(n: Node) -> None:
        if not n.is_element:
            stripped = n.text.strip()
            if stripped:
                parts.append(stripped)
            return
        for c in n.children:
            _collect(c)

    _collect(node)
    return "\n".join(parts)
