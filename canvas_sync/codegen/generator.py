"""
Markup Generator
================

Renders an element forest back to markup source, and scaffolds whole
component files for targets that do not exist yet.

Output is deterministic: the same forest (same child order, same prop and
style insertion order) always renders to byte-identical text, which the
merge engine and the tests rely on.
"""

import html
import json
import logging
import posixpath
import re
from typing import Any, List, Optional

from ..models.component_models import ComponentIndex
from ..models.element_models import ComponentElement, Element, MarkupElement, TextLeaf, element_label
from .imports import extract_component_dependencies, generate_imports

logger = logging.getLogger(__name__)

INDENT = "  "
_IDENTIFIER = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_RAW_TEXT_UNSAFE = re.compile(r"[{}<>&\n\r]")


def _clean_number(value: Any) -> Any:
    """Integral floats render as ints (``100.0`` -> ``100``), recursively."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, list):
        return [_clean_number(item) for item in value]
    if isinstance(value, dict):
        return {key: _clean_number(item) for key, item in value.items()}
    return value


def _js(value: Any) -> str:
    return json.dumps(_clean_number(value), ensure_ascii=False)


def _object_key(key: str) -> str:
    return key if _IDENTIFIER.match(key) else json.dumps(key, ensure_ascii=False)


def _render_prop(name: str, value: Any) -> str:
    if value is True:
        return name
    if isinstance(value, str) and "\n" not in value and "\r" not in value:
        return f'{name}="{html.escape(value, quote=True)}"'
    return f"{name}={{{_js(value)}}}"


def _render_style(styles: dict, pad: str) -> str:
    entries = [f"{_object_key(key)}: {_js(value)}" for key, value in styles.items()]
    if len(entries) == 1:
        return f"style={{{{ {entries[0]} }}}}"
    inner = pad + INDENT * 2
    body = ",\n".join(f"{inner}{entry}" for entry in entries)
    return f"style={{{{\n{body}\n{pad}{INDENT}}}}}"


def _attributes(element: Element, pad: str) -> str:
    parts = [_render_prop(name, value) for name, value in getattr(element, "props", {}).items() if name != "style"]
    if element.styles:
        parts.append(_render_style(element.styles, pad))
    return "".join(f" {part}" for part in parts)


def _text_token(text: str, raw_allowed: bool) -> str:
    """
    JSX text for a text leaf.

    Falls back to a string expression whenever raw text would not read back
    as the same single leaf.
    """
    if raw_allowed and text and text == text.strip() and not _RAW_TEXT_UNSAFE.search(text):
        return text
    return f"{{{_js(text)}}}"


def _render_nodes(elements: List[Element], pad: str) -> List[str]:
    """Lines for a sibling sequence at indentation ``pad``."""
    lines: List[str] = []
    previous_was_text = False
    for element in elements:
        if isinstance(element, TextLeaf) and not element.styles:
            lines.append(pad + _text_token(element.text, raw_allowed=not previous_was_text))
            previous_was_text = True
            continue
        lines.append(_render_element(element, pad))
        previous_was_text = False
    return lines


def _render_element(element: Element, pad: str) -> str:
    if isinstance(element, TextLeaf):
        # Styled text has no styling of its own in markup; it renders as a span
        attributes = _attributes(element, pad)
        return f"{pad}<span{attributes}>{_text_token(element.text, raw_allowed=True)}</span>"

    if not isinstance(element, (MarkupElement, ComponentElement)):
        raise TypeError(f"Unknown element type: {type(element).__name__}")

    label = element_label(element)
    opening = f"{pad}<{label}{_attributes(element, pad)}"
    children = element.children or []
    if not children:
        return f"{opening} />"
    lines = [f"{opening}>"]
    lines.extend(_render_nodes(children, pad + INDENT))
    lines.append(f"{pad}</{label}>")
    return "\n".join(lines)


def generate_markup(elements: List[Element], indent: int = 0) -> str:
    """
    Markup for a forest, roots one after another.

    ``indent`` is the number of spaces in front of each root. A root-level
    text leaf is wrapped in a fragment so that it parses back as a root.
    """
    pad = " " * indent
    lines: List[str] = []
    for element in elements:
        if isinstance(element, TextLeaf) and not element.styles:
            lines.append(f"{pad}<>{_text_token(element.text, raw_allowed=True)}</>")
        else:
            lines.append(_render_element(element, pad))
    return "\n".join(lines)


def render_return_markup(elements: List[Element], indent: int = 0) -> str:
    """
    Markup usable as a single return expression.

    Several roots are wrapped in a fragment; an empty forest renders as
    ``null``.
    """
    if not elements:
        return "null"
    if len(elements) == 1:
        return generate_markup(elements, indent)
    pad = " " * indent
    lines = [f"{pad}<>"]
    lines.extend(_render_nodes(elements, pad + INDENT))
    lines.append(f"{pad}</>")
    return "\n".join(lines)


def component_name_from_path(path: str) -> str:
    """
    Component name derived from a file name: ``app/user-card.tsx`` -> ``UserCard``.

    ``index`` files take the name of their directory.
    """
    stem = posixpath.splitext(posixpath.basename(path))[0]
    if stem == "index":
        stem = posixpath.basename(posixpath.dirname(path)) or stem
    words = [word for word in re.split(r"[^A-Za-z0-9]+", stem) if word]
    name = "".join(word[:1].upper() + word[1:] for word in words) or "Component"
    if name[0].isdigit():
        name = f"Component{name}"
    return name


def generate_complete_file(
    component_name: str,
    elements: List[Element],
    component_index: ComponentIndex,
    target_path: Optional[str] = None,
    include_react_import: bool = False,
) -> str:
    """
    Full source of a new component file.

    Imports are computed from the component elements in the forest, followed
    by a default-exported function returning the rendered markup.
    """
    imports = generate_imports(extract_component_dependencies(elements), component_index, target_path)
    if include_react_import:
        imports.insert(0, "import React from 'react'")

    lines: List[str] = []
    if imports:
        lines.extend(imports)
        lines.append("")
    lines.append(f"export default function {component_name}() {{")
    if elements:
        lines.append(f"{INDENT}return (")
        lines.append(render_return_markup(elements, indent=4))
        lines.append(f"{INDENT})")
    else:
        lines.append(f"{INDENT}return null")
    lines.append("}")

    logger.info(f"[GENERATOR] Generated {component_name} with {len(imports)} import(s)")
    return "\n".join(lines) + "\n"
