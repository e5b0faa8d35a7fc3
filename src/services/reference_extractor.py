"""
Entity reference extraction from rich-text documents.

Documents are editor JSON trees: each node is a dict with an optional `type`, `text`,
`content` (child nodes) and `marks`. A reference is a mark of type `entityReference`
whose attrs carry targetType, targetId and displayText.
"""
from collections.abc import Iterator
from typing import Any

from schemas.note import ExtractedReference

REFERENCE_MARK = "entityReference"

# Node types rendered as line breaks when flattening to plain text.
BLOCK_NODE_TYPES = frozenset({
    "paragraph", "heading", "blockquote", "listItem", "codeBlock", "hardBreak",
})


def iter_nodes(document: dict[str, Any] | None) -> Iterator[dict[str, Any]]:
    """
    Yield every node in depth-first pre-order.

    Uses an explicit stack so deeply nested documents cannot exhaust the recursion
    limit. Non-dict nodes are ignored.
    """
    if not isinstance(document, dict):
        return
    stack: list[Any] = [document]
    while stack:
        node = stack.pop()
        if not isinstance(node, dict):
            continue
        yield node
        children = node.get("content")
        if isinstance(children, list):
            stack.extend(reversed(children))


def reference_from_mark(mark: Any) -> ExtractedReference | None:
    """Return the reference carried by a mark, or None for other or incomplete marks."""
    if not isinstance(mark, dict) or mark.get("type") != REFERENCE_MARK:
        return None
    attrs = mark.get("attrs")
    if not isinstance(attrs, dict):
        return None
    target_type = attrs.get("targetType")
    target_id = attrs.get("targetId")
    if not target_type or not target_id:
        return None
    return ExtractedReference(
        target_type=str(target_type),
        target_id=str(target_id),
        display_text=str(attrs.get("displayText") or ""),
    )


def extract_references(document: dict[str, Any] | None) -> list[ExtractedReference]:
    """
    Collect the unique references in a document.

    Keyed by 'type:id'; the first occurrence in traversal order wins, including its
    display text. The input is not modified and repeated calls return equal lists.
    """
    found: dict[str, ExtractedReference] = {}
    for node in iter_nodes(document):
        marks = node.get("marks")
        if not isinstance(marks, list):
            continue
        for mark in marks:
            reference = reference_from_mark(mark)
            if reference is not None and reference.key not in found:
                found[reference.key] = reference
    return list(found.values())


def plain_text(document: dict[str, Any] | None) -> str:
    """Flatten a document to text, one line per block node."""
    parts: list[str] = []
    for node in iter_nodes(document):
        if node.get("type") in BLOCK_NODE_TYPES and parts and not parts[-1].endswith("\n"):
            parts.append("\n")
        text = node.get("text")
        if isinstance(text, str):
            parts.append(text)
    return "".join(parts).strip()
