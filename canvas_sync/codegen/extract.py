"""
Component Return Extraction
===========================

Pulls the returned markup out of a component file opened for editing,
together with what is needed to render a static snapshot of it: the
variables its interpolations reference, the component's prop names, and
literal initial values of local state and constants.
"""

import logging
import textwrap
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field
from tree_sitter import Node

from .errors import ComponentReturnNotFound
from .literals import UNSUPPORTED, evaluate_literal
from .locate import find_component_return
from .tsx import (
    FUNCTION_NODE_TYPES,
    MARKUP_NODE_TYPES,
    line_indent,
    named_children,
    node_text,
    parse_tsx,
    raise_on_syntax_error,
    unwrap_parentheses,
    walk,
)

logger = logging.getLogger(__name__)

IGNORED_NAMES = frozenset({"undefined", "React", "Fragment"})
_TAG_NODE_TYPES = frozenset({"jsx_opening_element", "jsx_closing_element", "jsx_self_closing_element"})


class ExtractedComponent(BaseModel):
    """Return markup of a component and the names it depends on."""
    return_markup: str
    variables: List[str] = Field(default_factory=list)
    props: List[str] = Field(default_factory=list)
    initial_values: Dict[str, Any] = Field(default_factory=dict)


def _add(names: List[str], name: str) -> None:
    if name not in names and name not in IGNORED_NAMES:
        names.append(name)


def _bound_names(pattern: Optional[Node], data: bytes) -> List[str]:
    """Names a parameter or destructuring pattern binds."""
    if pattern is None:
        return []
    kind = pattern.type
    if kind in ("identifier", "shorthand_property_identifier_pattern"):
        return [node_text(pattern, data)]
    if kind in ("required_parameter", "optional_parameter"):
        return _bound_names(pattern.child_by_field_name("pattern"), data)
    if kind == "assignment_pattern":
        return _bound_names(pattern.child_by_field_name("left"), data)
    if kind == "object_assignment_pattern":
        return _bound_names(pattern.child_by_field_name("left"), data)
    if kind == "pair_pattern":
        return _bound_names(pattern.child_by_field_name("value"), data)
    names: List[str] = []
    if kind in ("object_pattern", "array_pattern", "rest_pattern", "formal_parameters"):
        for child in named_children(pattern):
            names.extend(_bound_names(child, data))
    return names


def _function_parameters(function: Node) -> List[Node]:
    parameters = function.child_by_field_name("parameters")
    if parameters is not None:
        return named_children(parameters)
    # Single bare arrow parameter: item => ...
    parameter = function.child_by_field_name("parameter")
    return [parameter] if parameter is not None else []


def extract_props(function: Node, data: bytes) -> List[str]:
    """
    Prop names of a component from its first parameter.

    ``(props)`` yields ``props``; ``({ title, onClick: handler, ...rest })``
    yields the keys ``title``, ``onClick`` and the rest name ``rest``.
    """
    props: List[str] = []
    parameters = _function_parameters(function)
    if not parameters:
        return props
    parameter = parameters[0]
    if parameter.type in ("required_parameter", "optional_parameter"):
        parameter = parameter.child_by_field_name("pattern")
    if parameter is None:
        return props

    if parameter.type == "identifier":
        props.append(node_text(parameter, data))
    elif parameter.type == "object_pattern":
        for entry in named_children(parameter):
            if entry.type == "shorthand_property_identifier_pattern":
                props.append(node_text(entry, data))
            elif entry.type == "pair_pattern":
                key = entry.child_by_field_name("key")
                if key is not None:
                    props.append(node_text(key, data).strip("'\""))
            elif entry.type == "object_assignment_pattern":
                props.extend(_bound_names(entry.child_by_field_name("left"), data))
            elif entry.type == "rest_pattern":
                props.extend(_bound_names(entry, data))
    return props


def _nested_bindings(expression: Node, data: bytes) -> List[str]:
    """Parameters of callbacks inside the markup, e.g. ``item`` in ``items.map(item => ...)``."""
    names: List[str] = []
    for node in walk(expression):
        if node.type in FUNCTION_NODE_TYPES:
            for parameter in _function_parameters(node):
                names.extend(_bound_names(parameter, data))
    return names


def _is_tag_name(node: Node) -> bool:
    parent = node.parent
    while parent is not None and parent.type in ("member_expression", "nested_identifier"):
        parent = parent.parent
    return parent is not None and parent.type in _TAG_NODE_TYPES


def find_markup_variables(expression: Node, data: bytes) -> List[str]:
    """Free variables referenced from interpolations and spreads in the markup."""
    local = set(_nested_bindings(expression, data))
    variables: List[str] = []
    for node in walk(expression):
        if node.type != "jsx_expression":
            continue
        for inner in walk(node):
            if inner.type != "identifier" or _is_tag_name(inner):
                continue
            if node_text(inner, data) not in local:
                _add(variables, node_text(inner, data))
    return variables


def _is_use_state(call: Node, data: bytes) -> bool:
    callee = call.child_by_field_name("function")
    if callee is None:
        return False
    return node_text(callee, data) in ("useState", "React.useState")


def extract_initial_values(function: Node, data: bytes, variables: List[str], props: List[str]) -> Dict[str, Any]:
    """
    Literal initial values of referenced variables declared in the function.

    Handles ``const [x, setX] = useState(literal)`` and
    ``const x = literal``; names destructured from hook results start as
    ``None``. Non-literal initializers are left out.
    """
    wanted = set(variables) - set(props)
    values: Dict[str, Any] = {}
    for node in walk(function):
        if node.type != "variable_declarator":
            continue
        name = node.child_by_field_name("name")
        value = node.child_by_field_name("value")
        if name is None:
            continue
        if name.type == "array_pattern" and value is not None and value.type == "call_expression":
            if not _is_use_state(value, data):
                continue
            bound = named_children(name)
            arguments = value.child_by_field_name("arguments")
            state_args = named_children(arguments) if arguments is not None else []
            if bound and bound[0].type == "identifier" and node_text(bound[0], data) in wanted:
                initial = evaluate_literal(state_args[0], data) if state_args else None
                if initial is not UNSUPPORTED:
                    values[node_text(bound[0], data)] = initial
        elif name.type == "object_pattern":
            for bound_name in _bound_names(name, data):
                if bound_name in wanted:
                    values.setdefault(bound_name, None)
        elif name.type == "identifier" and node_text(name, data) in wanted and value is not None:
            initial = evaluate_literal(value, data)
            if initial is not UNSUPPORTED:
                values[node_text(name, data)] = initial
    return values


def extract_component_return(source: str) -> ExtractedComponent:
    """
    Extract the returned markup of a component file.

    Raises:
        ParseFailure: the source does not parse.
        ComponentReturnNotFound: no component function returning markup.
    """
    tree, data = parse_tsx(source)
    raise_on_syntax_error(tree, data, "component file")

    target = find_component_return(tree.root_node, data)
    markup = unwrap_parentheses(target.expression) if target is not None else None
    if markup is None or markup.type not in MARKUP_NODE_TYPES:
        raise ComponentReturnNotFound("No component function returning markup found")

    text = line_indent(data, markup.start_byte) + node_text(markup, data)
    return_markup = textwrap.dedent(text)

    props = extract_props(target.function, data)
    variables = find_markup_variables(markup, data)
    initial_values = extract_initial_values(target.function, data, variables, props)

    logger.info(
        f"[EXTRACT] Found return markup with {len(variables)} variable(s) and {len(props)} prop(s)"
    )
    return ExtractedComponent(
        return_markup=return_markup,
        variables=variables,
        props=props,
        initial_values=initial_values,
    )


def default_mock_value(name: str) -> Any:
    """Placeholder value for a variable, guessed from its name."""
    lower = name.lower()
    if lower == "props":
        return {}
    if lower.startswith(("is", "has", "should")):
        return False
    if "count" in lower or "index" in lower or "number" in lower:
        return 0
    if "items" in lower or "list" in lower or lower.endswith("s"):
        return []
    if lower == "children":
        return None
    return name[:1].upper() + name[1:]


def default_mock_values(extracted: ExtractedComponent) -> Dict[str, Any]:
    """Mock bindings for every referenced variable, preferring known initial values."""
    return {
        name: extracted.initial_values[name] if name in extracted.initial_values else default_mock_value(name)
        for name in extracted.variables
    }
