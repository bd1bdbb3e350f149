"""
Element Factory
===============

Creates new canvas elements: fresh ids, HTML tags with their default styles,
and component references seeded with default props from the Component Index.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from ..models.component_models import ComponentIndex, PropSchema, lookup_component
from ..models.element_models import CanvasPosition, ComponentElement, Element, MarkupElement, TextLeaf

logger = logging.getLogger(__name__)

DEFAULT_POSITION = CanvasPosition(x=100, y=100)

# Default styles for tags offered in the insert panel
HTML_TAG_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "div": {"width": "200px", "height": "100px", "background": "#f3f4f6", "display": "flex", "padding": "16px"},
    "section": {"width": "300px", "height": "150px", "background": "#f3f4f6", "display": "flex", "padding": "24px"},
    "header": {"width": "100%", "height": "80px", "background": "#f3f4f6", "display": "flex",
               "padding": "16px", "alignItems": "center"},
    "footer": {"width": "100%", "height": "60px", "background": "#f3f4f6", "display": "flex",
               "padding": "16px", "alignItems": "center"},
    "nav": {"display": "flex", "gap": "16px", "padding": "8px"},
    "main": {"width": "400px", "height": "200px", "display": "flex", "flexDirection": "column", "padding": "16px"},
    "p": {"fontSize": "16px", "color": "#111827"},
    "span": {"fontSize": "14px"},
    "a": {"color": "#2563eb", "textDecoration": "underline"},
    "h1": {"fontSize": "32px", "fontWeight": "700"},
    "h2": {"fontSize": "24px", "fontWeight": "600"},
    "h3": {"fontSize": "20px", "fontWeight": "600"},
    "button": {"padding": "8px 16px", "background": "#2563eb", "color": "#ffffff", "borderRadius": "6px"},
    "label": {"fontSize": "14px", "fontWeight": "500"},
    "input": {"width": "200px", "padding": "8px", "border": "1px solid #d1d5db", "borderRadius": "4px"},
    "img": {"width": "200px", "height": "150px", "objectFit": "cover"},
    "ul": {"paddingLeft": "20px"},
    "li": {"fontSize": "14px"},
}

# Placeholder text for text-level tags
HTML_TAG_TEXT: Dict[str, str] = {
    "p": "Paragraph text",
    "span": "Text",
    "a": "Link text",
    "h1": "Heading 1",
    "h2": "Heading 2",
    "h3": "Heading 3",
    "button": "Button",
    "label": "Label",
    "li": "List item",
}

# Prop types that cannot be given a placeholder value
_UNSEEDABLE_TYPE_MARKERS = ("=>", "ComponentType", "Element", "CSSProperties")


def generate_id(prefix: str = "el") -> str:
    """Unique element id such as ``el-3f2a...``."""
    return f"{prefix}-{uuid.uuid4().hex}"


def create_text_leaf(text: str, styles: Optional[Dict[str, Any]] = None) -> TextLeaf:
    return TextLeaf(id=generate_id("text"), text=text, styles=styles or {})


def create_element_from_tag(tag: str, position: Optional[CanvasPosition] = None) -> MarkupElement:
    """
    New root markup element for ``tag`` with its default styles.

    Text-level tags start with a placeholder text child.
    """
    text = HTML_TAG_TEXT.get(tag)
    children: List[Element] = [create_text_leaf(text)] if text else []
    return MarkupElement(
        id=generate_id("element"),
        tag=tag,
        styles=dict(HTML_TAG_DEFAULTS.get(tag, {})),
        children=children,
        canvas_position=position or DEFAULT_POSITION,
    )


def _literal_union_options(prop_type: str) -> List[str]:
    options = [option.strip().strip("'\"") for option in prop_type.split("|")]
    return [option for option in options if option and option not in ("undefined", "null")]


def default_prop_value(prop_name: str, schema: PropSchema) -> Any:
    """
    Placeholder for a required prop, or ``None`` when none can be derived.

    Quoted-literal unions take their first real literal, strings take the
    prop name, numbers 0 and booleans ``False``. Functions, elements and
    style objects are left unset.
    """
    prop_type = schema.type
    if any(marker in prop_type for marker in _UNSEEDABLE_TYPE_MARKERS):
        return None
    if "|" in prop_type and ('"' in prop_type or "'" in prop_type):
        options = _literal_union_options(prop_type)
        return options[0] if options else None
    if "string" in prop_type:
        return prop_name
    if "number" in prop_type:
        return 0
    if "boolean" in prop_type:
        return False
    return None


def seed_component_props(component_name: str, index: ComponentIndex) -> Dict[str, Any]:
    """Default props for a freshly inserted component (required props only)."""
    entry = lookup_component(index, component_name)
    props: Dict[str, Any] = {}
    if entry is None or not entry.props:
        return props
    for prop_name, schema in entry.props.items():
        if prop_name == "children" or not schema.required:
            continue
        value = default_prop_value(prop_name, schema)
        if value is not None:
            props[prop_name] = value
    return props


def create_component_element(
    component_name: str,
    index: ComponentIndex,
    position: Optional[CanvasPosition] = None,
) -> ComponentElement:
    """
    New root component element seeded from the Component Index.

    A ``children`` prop in the schema gives the element an empty children
    slot; otherwise it has none.
    """
    entry = lookup_component(index, component_name)
    if entry is None:
        logger.warning(f"[ELEMENT-FACTORY] Component '{component_name}' not in component index")
    has_children_slot = bool(entry and entry.props and "children" in entry.props)
    return ComponentElement(
        id=generate_id("component"),
        component_name=component_name,
        props=seed_component_props(component_name, index),
        children=[] if has_children_slot else None,
        canvas_position=position or DEFAULT_POSITION,
    )
