"""
Markup Parser
=============

Converts markup source (one or more sibling elements, or a whole component
file) into an element forest.

Tags starting with an uppercase letter become component elements, all
others markup elements. The ``style`` attribute fills the style bag and is
never kept as a prop. Constructs that need runtime values (spread
attributes, conditionals, loops, variable interpolation) are skipped rather
than failing the parse; malformed source raises ``ParseFailure``.
"""

import html
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from tree_sitter import Node

from ..canvas.element_factory import generate_id
from ..models.element_models import ComponentElement, Element, MarkupElement, TextLeaf
from .errors import ParseFailure
from .literals import UNSUPPORTED, decode_jsx_string, evaluate_literal
from .tsx import MARKUP_NODE_TYPES, named_children, node_text, parse_tsx, raise_on_syntax_error

logger = logging.getLogger(__name__)

TEXT_NODE_TYPES = frozenset({"jsx_text", "html_character_reference"})
_LINE_BREAK = re.compile(r"\r\n|\n|\r")


def collapse_jsx_whitespace(raw: str) -> str:
    """
    Whitespace handling of JSX text.

    Lines are trimmed where they meet a line break, blank lines disappear and
    the remaining lines are joined by single spaces.
    """
    lines = _LINE_BREAK.split(raw)
    kept = []
    for index, line in enumerate(lines):
        if index > 0:
            line = line.lstrip(" \t")
        if index < len(lines) - 1:
            line = line.rstrip(" \t")
        if line:
            kept.append(line)
    return " ".join(kept)


def parse_inline_style(css: str) -> Dict[str, Any]:
    """``"font-size: 12px; color: red"`` -> ``{"fontSize": "12px", "color": "red"}``."""
    styles: Dict[str, Any] = {}
    for declaration in css.split(";"):
        if ":" not in declaration:
            continue
        name, value = declaration.split(":", 1)
        name, value = name.strip(), value.strip()
        if not name or not value:
            continue
        if not name.startswith("--"):
            name = re.sub(r"-([a-z])", lambda m: m.group(1).upper(), name)
        styles[name] = value
    return styles


class MarkupReader:
    """Builds elements from markup syntax nodes of one parsed source."""

    def __init__(self, data: bytes):
        self.data = data
        self.skipped: List[str] = []

    def _skip(self, what: str, node: Node) -> None:
        row, column = node.start_point
        self.skipped.append(f"{what} at {row + 1}:{column + 1}")
        logger.debug(f"[PARSER] Skipped {what} at line {row + 1}")

    def read(self, node: Node) -> List[Element]:
        """Elements for a markup node; a fragment yields its children."""
        if node.type == "jsx_self_closing_element":
            return [self._element(node, [], has_closing_tag=False)]
        if node.type == "jsx_fragment":
            return self.read_children(node)
        open_tag = node.child_by_field_name("open_tag")
        if open_tag is None or open_tag.child_by_field_name("name") is None:
            return self.read_children(node)
        return [self._element(open_tag, self.read_children(node), has_closing_tag=True)]

    def read_children(self, node: Node) -> List[Element]:
        children: List[Element] = []
        text_run: List[Node] = []
        for child in named_children(node):
            if child.type in ("jsx_opening_element", "jsx_closing_element"):
                continue
            if child.type in TEXT_NODE_TYPES:
                text_run.append(child)
                continue
            self._flush_text(text_run, children)
            text_run = []
            if child.type in MARKUP_NODE_TYPES:
                children.extend(self.read(child))
            elif child.type == "jsx_expression":
                leaf = self._expression_child(child)
                if leaf is not None:
                    children.append(leaf)
        self._flush_text(text_run, children)
        return children

    def _flush_text(self, run: List[Node], children: List[Element]) -> None:
        if not run:
            return
        raw = self.data[run[0].start_byte:run[-1].end_byte].decode("utf-8")
        text = collapse_jsx_whitespace(raw).strip()
        if text:
            children.append(TextLeaf(id=generate_id("text"), text=html.unescape(text)))

    def _expression_child(self, node: Node) -> Optional[TextLeaf]:
        inner = named_children(node)
        if not inner:
            return None
        value = evaluate_literal(inner[0], self.data)
        if isinstance(value, str):
            return TextLeaf(id=generate_id("text"), text=value)
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return TextLeaf(id=generate_id("text"), text=str(value))
        self._skip(f"expression {{{node_text(inner[0], self.data)[:30]}}}", node)
        return None

    def _tag_name(self, name_node: Node) -> str:
        # <Foo.Bar> and <Foo . Bar> both become "Foo.Bar"
        return re.sub(r"\s+", "", node_text(name_node, self.data))

    def _attributes(self, tag_node: Node) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        props: Dict[str, Any] = {}
        styles: Dict[str, Any] = {}
        for attribute in named_children(tag_node):
            if attribute.type == "jsx_expression":
                self._skip("spread attribute", attribute)
                continue
            if attribute.type != "jsx_attribute":
                continue
            parts = named_children(attribute)
            if not parts:
                continue
            name = node_text(parts[0], self.data)
            value = self._attribute_value(parts[1] if len(parts) > 1 else None)
            if value is UNSUPPORTED:
                self._skip(f"attribute {name}", attribute)
                continue
            if name == "style":
                if isinstance(value, dict):
                    styles.update(value)
                elif isinstance(value, str):
                    styles.update(parse_inline_style(value))
                else:
                    self._skip("style attribute", attribute)
                continue
            props[name] = value
        return props, styles

    def _attribute_value(self, node: Optional[Node]) -> Any:
        if node is None:
            return True
        if node.type == "string":
            return decode_jsx_string(node_text(node, self.data))
        if node.type == "jsx_expression":
            inner = named_children(node)
            if not inner:
                return UNSUPPORTED
            return evaluate_literal(inner[0], self.data)
        return UNSUPPORTED

    def _element(self, tag_node: Node, children: List[Element], has_closing_tag: bool) -> Element:
        name_node = tag_node.child_by_field_name("name")
        tag = self._tag_name(name_node)
        props, styles = self._attributes(tag_node)
        if tag[:1].isupper():
            return ComponentElement(
                id=generate_id("el"),
                component_name=tag,
                props=props,
                styles=styles,
                children=children if (children or has_closing_tag) else None,
            )
        return MarkupElement(id=generate_id("el"), tag=tag, props=props, styles=styles, children=children)


def _outermost_markup(node: Node) -> List[Node]:
    """Markup nodes not nested inside other markup, in document order."""
    if node.type in MARKUP_NODE_TYPES:
        return [node]
    found: List[Node] = []
    for child in node.children:
        found.extend(_outermost_markup(child))
    return found


def parse_markup(source: str) -> List[Element]:
    """
    Parse markup into a list of root elements.

    ``source`` is either bare markup (siblings allowed) or a module whose
    markup expressions are collected in document order. Every call produces
    fresh ids.

    Raises:
        ParseFailure: the source is not syntactically valid.
    """
    if not source.strip():
        return []

    if source.lstrip().startswith("<"):
        tree, data = parse_tsx(f"(<>\n{source}\n</>);")
        raise_on_syntax_error(tree, data, "markup", line_offset=1)
        roots = _outermost_markup(tree.root_node)
        if not roots:
            raise ParseFailure("Invalid markup: no element found")
        reader = MarkupReader(data)
        elements = reader.read(roots[0])
    else:
        tree, data = parse_tsx(source)
        raise_on_syntax_error(tree, data, "source")
        reader = MarkupReader(data)
        elements = []
        for node in _outermost_markup(tree.root_node):
            elements.extend(reader.read(node))

    if reader.skipped:
        logger.info(f"[PARSER] Parsed {len(elements)} root(s), skipped {len(reader.skipped)} unsupported construct(s)")
    return elements
