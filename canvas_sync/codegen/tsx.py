"""
TSX syntax trees
================

Thin layer over tree-sitter's TSX grammar shared by the markup parser, the
return extractor and the merge engine. Offsets reported by tree-sitter are
byte offsets into the UTF-8 encoded source.
"""

from functools import lru_cache
from typing import Iterator, List, Optional, Tuple

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_parser

from .errors import ParseFailure

MARKUP_NODE_TYPES = frozenset({"jsx_element", "jsx_self_closing_element", "jsx_fragment"})
FUNCTION_NODE_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "arrow_function",
})


@lru_cache(maxsize=1)
def tsx_parser() -> Parser:
    return get_parser("tsx")


def parse_tsx(source: str) -> Tuple[Tree, bytes]:
    """Parse TSX source; returns the tree and the encoded bytes its offsets refer to."""
    data = source.encode("utf-8")
    return tsx_parser().parse(data), data


def node_text(node: Node, data: bytes) -> str:
    return data[node.start_byte:node.end_byte].decode("utf-8")


def first_error(node: Node) -> Optional[Node]:
    """First ``ERROR`` or missing node in document order."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = first_error(child)
        if found is not None:
            return found
    return node


def raise_on_syntax_error(tree: Tree, data: bytes, what: str = "source", line_offset: int = 0) -> None:
    """Raise ``ParseFailure`` pointing at the first syntax error, if any."""
    root = tree.root_node
    if not root.has_error:
        return
    error = first_error(root) or root
    row, column = error.start_point
    snippet = node_text(error, data).strip().splitlines()
    near = f" near {snippet[0][:40]!r}" if snippet else ""
    raise ParseFailure(
        f"Invalid {what}: unexpected syntax{near}",
        line=max(1, row + 1 - line_offset),
        column=column + 1,
    )


def named_children(node: Node) -> List[Node]:
    """Named children without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def walk(node: Node) -> Iterator[Node]:
    """Pre-order walk over every node."""
    yield node
    for child in node.children:
        yield from walk(child)


def unwrap_parentheses(node: Optional[Node]) -> Optional[Node]:
    """The expression inside one level of parentheses (or the node itself)."""
    if node is not None and node.type == "parenthesized_expression":
        inner = named_children(node)
        if inner:
            return inner[0]
    return node


def is_markup(node: Optional[Node]) -> bool:
    """Markup element or fragment, allowing one level of parentheses."""
    node = unwrap_parentheses(node)
    return node is not None and node.type in MARKUP_NODE_TYPES


def line_indent(data: bytes, offset: int) -> str:
    """Leading whitespace of the line containing ``offset``."""
    line_start = data.rfind(b"\n", 0, offset) + 1
    end = line_start
    while end < len(data) and data[end:end + 1] in (b" ", b"\t"):
        end += 1
    return data[line_start:end].decode("utf-8")
