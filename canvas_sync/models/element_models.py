"""
Element Models for Canvas Sync
==============================

The element forest shown on the canvas: markup elements, component
references and text leaves, discriminated by ``kind``.

Serialized field names are camelCase (``componentName``, ``canvasPosition``)
so that a forest dumped with ``by_alias=True`` is exactly the ``elements``
field of a persisted canvas document.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase aliases."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class CanvasPosition(CamelModel):
    """Absolute placement of a root element on the infinite canvas."""
    model_config = ConfigDict(frozen=True)

    x: float = 0
    y: float = 0


class ElementBase(CamelModel):
    """Fields shared by every element kind."""
    model_config = ConfigDict(frozen=True)

    id: str
    styles: Dict[str, Any] = Field(default_factory=dict)
    canvas_position: Optional[CanvasPosition] = None


class MarkupElement(ElementBase):
    """A plain tag such as ``div`` or ``span``."""
    kind: Literal["markup"] = "markup"
    tag: str
    props: Dict[str, Any] = Field(default_factory=dict)
    children: List["Element"] = Field(default_factory=list)


class ComponentElement(ElementBase):
    """
    Reference to a reusable component from the Component Index.

    ``children`` is ``None`` when the component has no children slot and a
    (possibly empty) list when it accepts children.
    """
    kind: Literal["component"] = "component"
    component_name: str
    props: Dict[str, Any] = Field(default_factory=dict)
    children: Optional[List["Element"]] = None


class TextLeaf(ElementBase):
    """Literal text. Never has children."""
    kind: Literal["text"] = "text"
    text: str = ""

    @model_validator(mode="before")
    @classmethod
    def _reject_children(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("children"):
            raise ValueError("text leaves cannot have children")
        if isinstance(data, dict) and "children" in data:
            data = {k: v for k, v in data.items() if k != "children"}
        return data


Element = Annotated[
    Union[MarkupElement, ComponentElement, TextLeaf],
    Field(discriminator="kind"),
]

MarkupElement.model_rebuild()
ComponentElement.model_rebuild()

ForestAdapter = TypeAdapter(List[Element])


def children_of(element: Element) -> List[Element]:
    """Children of any element kind (text leaves and slotless components have none)."""
    if isinstance(element, TextLeaf):
        return []
    if isinstance(element, (MarkupElement, ComponentElement)):
        return element.children or []
    raise TypeError(f"Unknown element type: {type(element).__name__}")


def accepts_children(element: Element) -> bool:
    """Whether an element can receive children ("inside" insertion)."""
    return not isinstance(element, TextLeaf)


def with_children(element: Element, children: List[Element]) -> Element:
    """Copy of ``element`` with a new children list."""
    if isinstance(element, TextLeaf):
        return element
    return element.model_copy(update={"children": children})


def element_label(element: Element) -> str:
    """Tag or component name used in markup and in log messages."""
    if isinstance(element, MarkupElement):
        return element.tag
    if isinstance(element, ComponentElement):
        return element.component_name
    if isinstance(element, TextLeaf):
        return "#text"
    raise TypeError(f"Unknown element type: {type(element).__name__}")


def load_forest(data: Any) -> List[Element]:
    """Validate a JSON-compatible list into an element forest."""
    return ForestAdapter.validate_python(data)


def dump_forest(elements: List[Element]) -> List[Dict[str, Any]]:
    """Serialize a forest to the JSON shape stored in canvas documents."""
    return ForestAdapter.dump_python(elements, by_alias=True, exclude_none=True, mode="json")


def validate_forest(elements: List[Element]) -> List[str]:
    """
    Check the forest invariants.

    Returns a list of problems (empty when the forest is valid): duplicate
    identifiers anywhere in the forest, and canvas positions on non-root
    elements.
    """
    problems: List[str] = []
    seen = set()

    def visit(element: Element, is_root: bool) -> None:
        if element.id in seen:
            problems.append(f"duplicate id {element.id}")
        seen.add(element.id)
        if not is_root and element.canvas_position is not None:
            problems.append(f"non-root element {element.id} has a canvas position")
        for child in children_of(element):
            visit(child, False)

    for root in elements:
        visit(root, True)
    return problems


def structure_signature(elements: List[Element]) -> List[Dict[str, Any]]:
    """
    Identifier-free view of a forest.

    Two forests with equal signatures have the same shape, tags, props,
    styles and text. Canvas positions are ignored, and a component without a
    children slot compares equal to one with an empty slot.
    """
    signature: List[Dict[str, Any]] = []
    for element in elements:
        if isinstance(element, TextLeaf):
            entry = {"kind": "text", "text": element.text, "styles": dict(element.styles)}
        elif isinstance(element, MarkupElement):
            entry = {
                "kind": "markup",
                "tag": element.tag,
                "props": dict(element.props),
                "styles": dict(element.styles),
                "children": structure_signature(element.children),
            }
        elif isinstance(element, ComponentElement):
            entry = {
                "kind": "component",
                "name": element.component_name,
                "props": dict(element.props),
                "styles": dict(element.styles),
                "children": structure_signature(element.children or []),
            }
        else:
            raise TypeError(f"Unknown element type: {type(element).__name__}")
        signature.append(entry)
    return signature
