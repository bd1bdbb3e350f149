"""
Static evaluation of literal expressions (strings, numbers, objects, ...).
"""

import html
import re
from typing import Any

from tree_sitter import Node

from .tsx import named_children, node_text

UNSUPPORTED = object()

_JS_ESCAPE = re.compile(r"\\(u\{[0-9a-fA-F]+\}|u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|\r\n|[\s\S])")
_SIMPLE_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


def _decode_escape(match: "re.Match[str]") -> str:
    body = match.group(1)
    if body.startswith("u{"):
        return chr(int(body[2:-1], 16))
    if body.startswith("u") and len(body) == 5:
        return chr(int(body[1:], 16))
    if body.startswith("x") and len(body) == 3:
        return chr(int(body[1:], 16))
    if body in ("\n", "\r\n", "\r", "\u2028", "\u2029"):
        return ""
    return _SIMPLE_ESCAPES.get(body, body)


def decode_js_string(raw: str) -> str:
    """Value of a quoted JS string literal (quotes included in ``raw``)."""
    return _JS_ESCAPE.sub(_decode_escape, raw[1:-1])


def decode_jsx_string(raw: str) -> str:
    """Value of a quoted JSX attribute string: no escapes, HTML entities decoded."""
    return html.unescape(raw[1:-1])


def _number(text: str) -> Any:
    cleaned = text.replace("_", "")
    if cleaned.endswith("n"):
        cleaned = cleaned[:-1]
    try:
        return int(cleaned, 0)
    except ValueError:
        pass
    try:
        return float(cleaned)
    except ValueError:
        return UNSUPPORTED


def _property_key(node: Node, data: bytes) -> Any:
    if node.type in ("property_identifier", "identifier"):
        return node_text(node, data)
    if node.type == "string":
        return decode_js_string(node_text(node, data))
    if node.type == "number":
        return node_text(node, data)
    return UNSUPPORTED


def evaluate_literal(node: Node, data: bytes) -> Any:
    """
    Python value of a literal expression, or ``UNSUPPORTED``.

    Handles strings, substitution-free template strings, numbers (including
    unary minus), booleans, ``null``, arrays and object literals whose keys
    are identifiers, strings or numbers. TypeScript ``as``/``satisfies``
    wrappers are looked through.
    """
    kind = node.type
    if kind == "parenthesized_expression" or kind in ("as_expression", "satisfies_expression",
                                                       "non_null_expression"):
        inner = named_children(node)
        return evaluate_literal(inner[0], data) if inner else UNSUPPORTED
    if kind == "string":
        return decode_js_string(node_text(node, data))
    if kind == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return UNSUPPORTED
        return decode_js_string(node_text(node, data))
    if kind == "number":
        return _number(node_text(node, data))
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind == "null":
        return None
    if kind == "unary_expression":
        operands = named_children(node)
        operator = node.child_by_field_name("operator")
        sign = node_text(operator, data) if operator is not None else node_text(node, data)[:1]
        if len(operands) == 1 and sign in ("-", "+"):
            value = evaluate_literal(operands[0], data)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return -value if sign == "-" else value
        return UNSUPPORTED
    if kind == "array":
        items = []
        for child in named_children(node):
            value = evaluate_literal(child, data)
            if value is UNSUPPORTED:
                return UNSUPPORTED
            items.append(value)
        return items
    if kind == "object":
        result = {}
        for child in named_children(node):
            if child.type != "pair":
                # Spreads, shorthand properties and methods need runtime values
                continue
            key_node = child.child_by_field_name("key")
            value_node = child.child_by_field_name("value")
            if key_node is None or value_node is None:
                continue
            key = _property_key(key_node, data)
            value = evaluate_literal(value_node, data)
            if key is UNSUPPORTED or value is UNSUPPORTED:
                continue
            result[key] = value
        return result
    return UNSUPPORTED
