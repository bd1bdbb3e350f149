"""
Component Locator
=================

Finds the component function of a module and the expression it returns.

The default export wins when it resolves to a function (declared inline,
wrapped in a call such as ``memo(...)``/``forwardRef(...)``, or referenced
by name). Otherwise the first function in document order that returns
markup is used.
"""

from typing import Dict, List, NamedTuple, Optional

from tree_sitter import Node

from .tsx import FUNCTION_NODE_TYPES, is_markup, named_children, node_text, unwrap_parentheses, walk

_SCOPE_BOUNDARIES = FUNCTION_NODE_TYPES | {"class_declaration", "class", "method_definition"}


class ReturnTarget(NamedTuple):
    """A component function and the expression its markup is returned from."""
    function: Node
    expression: Node


def _declarations(root: Node, data: bytes) -> Dict[str, Node]:
    """Top-level function and variable declarations by name."""
    found: Dict[str, Node] = {}
    for statement in named_children(root):
        if statement.type == "export_statement":
            inner = [child for child in named_children(statement) if child.type != "decorator"]
            statement = inner[0] if inner else statement
        if statement.type in ("function_declaration", "generator_function_declaration"):
            name = statement.child_by_field_name("name")
            if name is not None:
                found[node_text(name, data)] = statement
        elif statement.type in ("lexical_declaration", "variable_declaration"):
            for declarator in named_children(statement):
                if declarator.type != "variable_declarator":
                    continue
                name = declarator.child_by_field_name("name")
                value = declarator.child_by_field_name("value")
                if name is not None and value is not None:
                    found[node_text(name, data)] = value
    return found


def _function_of(node: Optional[Node], declarations: Dict[str, Node], data: bytes, depth: int = 0) -> Optional[Node]:
    node = unwrap_parentheses(node)
    if node is None or depth > 8:
        return None
    if node.type in FUNCTION_NODE_TYPES:
        return node
    if node.type == "call_expression":
        arguments = node.child_by_field_name("arguments")
        for argument in named_children(arguments) if arguments is not None else []:
            function = _function_of(argument, declarations, data, depth + 1)
            if function is not None:
                return function
        return None
    if node.type == "identifier":
        return _function_of(declarations.get(node_text(node, data)), declarations, data, depth + 1)
    if node.type in ("as_expression", "satisfies_expression"):
        inner = named_children(node)
        return _function_of(inner[0] if inner else None, declarations, data, depth + 1)
    return None


def _return_statements(node: Node) -> List[Node]:
    """Return statements of one function body, not descending into nested functions."""
    found: List[Node] = []
    for child in node.named_children:
        if child.type == "return_statement":
            found.append(child)
        elif child.type not in _SCOPE_BOUNDARIES:
            found.extend(_return_statements(child))
    return found


def _returned_value(statement: Node) -> Optional[Node]:
    values = named_children(statement)
    return values[0] if values else None


def find_return_expression(function: Node) -> Optional[Node]:
    """
    The expression a function returns its markup from.

    Expression-bodied arrows return their body. Block bodies use the first
    return whose value is markup, else the last top-level return with a
    value.
    """
    body = function.child_by_field_name("body")
    if body is None:
        return None
    if body.type != "statement_block":
        return body

    returns = _return_statements(body)
    for statement in returns:
        value = _returned_value(statement)
        if is_markup(value):
            return value
    for statement in reversed(named_children(body)):
        if statement.type == "return_statement" and _returned_value(statement) is not None:
            return _returned_value(statement)
    return None


def _default_export(root: Node) -> Optional[Node]:
    for statement in named_children(root):
        if statement.type != "export_statement":
            continue
        if not any(child.type == "default" for child in statement.children):
            continue
        exported = [child for child in named_children(statement) if child.type != "decorator"]
        return exported[0] if exported else None
    return None


def find_component_return(root: Node, data: bytes) -> Optional[ReturnTarget]:
    """Locate the component function of a parsed module and its return expression."""
    declarations = _declarations(root, data)

    function = _function_of(_default_export(root), declarations, data)
    if function is not None:
        expression = find_return_expression(function)
        if expression is not None:
            return ReturnTarget(function, expression)

    for node in walk(root):
        if node.type not in FUNCTION_NODE_TYPES:
            continue
        expression = find_return_expression(node)
        if is_markup(expression):
            return ReturnTarget(node, expression)
    return None
