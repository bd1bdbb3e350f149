"""
Element Tree Utilities
======================

Pure lookup and mutation functions over the element forest.

Every mutation returns a new forest and leaves its input untouched. Unknown
ids are not errors: a stale id coming from UI state is expected, so the
input forest is returned unchanged.
"""

import logging
from typing import Any, Dict, Iterator, List, Literal, Optional, Set, Tuple

from ..models.element_models import (
    CanvasPosition,
    ComponentElement,
    Element,
    MarkupElement,
    TextLeaf,
    accepts_children,
    children_of,
    with_children,
)

logger = logging.getLogger(__name__)

InsertPosition = Literal["before", "after", "inside"]


def iter_elements(elements: List[Element]) -> Iterator[Element]:
    """Depth-first, pre-order walk of the whole forest."""
    for element in elements:
        yield element
        yield from iter_elements(children_of(element))


def collect_ids(elements: List[Element]) -> List[str]:
    """All ids in pre-order (duplicates included)."""
    return [element.id for element in iter_elements(elements)]


def find_element(elements: List[Element], element_id: str) -> Optional[Element]:
    """Find an element anywhere in the forest."""
    for element in elements:
        if element.id == element_id:
            return element
        found = find_element(children_of(element), element_id)
        if found is not None:
            return found
    return None


def find_parent_id(elements: List[Element], element_id: str) -> Optional[str]:
    """Id of the element's parent, or ``None`` for roots and unknown ids."""
    for element in elements:
        children = children_of(element)
        for child in children:
            if child.id == element_id:
                return element.id
        found = find_parent_id(children, element_id)
        if found is not None:
            return found
    return None


def ancestor_path(elements: List[Element], element_id: str) -> List[str]:
    """Ids from the root down to and including ``element_id`` (empty if unknown)."""
    for element in elements:
        if element.id == element_id:
            return [element.id]
        sub_path = ancestor_path(children_of(element), element_id)
        if sub_path:
            return [element.id] + sub_path
    return []


def is_descendant(ancestor_id: str, candidate_id: str, elements: List[Element]) -> bool:
    """Whether ``candidate_id`` sits strictly below ``ancestor_id``."""
    ancestor = find_element(elements, ancestor_id)
    if ancestor is None:
        return False
    return find_element(children_of(ancestor), candidate_id) is not None


def remove_element(elements: List[Element], element_id: str) -> Tuple[List[Element], Optional[Element]]:
    """
    Remove an element (with its subtree) from the forest.

    Returns:
        ``(new_forest, removed_element)``; ``removed_element`` is ``None``
        when the id was not found, in which case the input is returned.
    """
    removed: List[Element] = []

    def rebuild(level: List[Element]) -> List[Element]:
        result: List[Element] = []
        for element in level:
            if element.id == element_id and not removed:
                removed.append(element)
                continue
            children = children_of(element)
            if children:
                new_children = rebuild(children)
                if len(new_children) != len(children) or any(
                    a is not b for a, b in zip(new_children, children)
                ):
                    element = with_children(element, new_children)
            result.append(element)
        return result

    new_tree = rebuild(elements)
    if not removed:
        return elements, None
    return new_tree, removed[0]


def _as_child(element: Element) -> Element:
    """Descendants never carry a canvas position."""
    if element.canvas_position is None:
        return element
    return element.model_copy(update={"canvas_position": None})


def insert_element(
    elements: List[Element],
    target_id: str,
    element: Element,
    position: InsertPosition,
) -> List[Element]:
    """
    Insert ``element`` relative to ``target_id``.

    ``before``/``after`` place it as a sibling of the target; ``inside``
    appends it to the target's children. Inserting inside a text leaf,
    inserting next to an unknown target, or inserting an element whose ids
    already exist in the forest returns the forest unchanged.
    """
    existing = set(collect_ids(elements))
    if existing.intersection(collect_ids([element])):
        logger.warning(f"[TREE] Refusing insert of {element.id}: ids already present")
        return elements

    target = find_element(elements, target_id)
    if target is None:
        return elements
    if position == "inside" and not accepts_children(target):
        logger.debug(f"[TREE] Cannot insert inside text leaf {target_id}")
        return elements

    def rebuild(level: List[Element], is_root_level: bool) -> List[Element]:
        result: List[Element] = []
        for current in level:
            if current.id == target_id:
                if not is_root_level:
                    sibling = _as_child(element)
                elif element.canvas_position is None:
                    placed = current.canvas_position or CanvasPosition()
                    sibling = element.model_copy(update={"canvas_position": placed})
                else:
                    sibling = element
                if position == "before":
                    result.extend([sibling, current])
                elif position == "after":
                    result.extend([current, sibling])
                else:
                    result.append(with_children(current, children_of(current) + [_as_child(element)]))
                continue
            children = children_of(current)
            if children and find_element(children, target_id) is not None:
                current = with_children(current, rebuild(children, False))
            result.append(current)
        return result

    return rebuild(elements, True)


def add_root(elements: List[Element], element: Element, position: Optional[CanvasPosition] = None) -> List[Element]:
    """Append ``element`` as a new canvas root."""
    if set(collect_ids(elements)).intersection(collect_ids([element])):
        logger.warning(f"[TREE] Refusing to add root {element.id}: ids already present")
        return elements
    placed = position or element.canvas_position or CanvasPosition(x=0, y=0)
    return list(elements) + [element.model_copy(update={"canvas_position": placed})]


def move_element(
    elements: List[Element],
    dragged_id: str,
    target_id: str,
    position: InsertPosition,
) -> List[Element]:
    """
    Reparent or reorder ``dragged_id`` relative to ``target_id``.

    Moving an element relative to itself or to one of its own descendants
    would create a cycle and is rejected (forest returned unchanged).
    """
    if dragged_id == target_id or is_descendant(dragged_id, target_id, elements):
        logger.debug(f"[TREE] Rejected move of {dragged_id} under its own subtree ({target_id})")
        return elements
    target = find_element(elements, target_id)
    if target is None or (position == "inside" and not accepts_children(target)):
        return elements

    without, removed = remove_element(elements, dragged_id)
    if removed is None:
        return elements

    return insert_element(without, target_id, removed, position)


def detach_element(elements: List[Element], element_id: str, position: CanvasPosition) -> List[Element]:
    """
    Remove an element from its parent and make it a canvas root at ``position``.

    A root keeps its place in the forest and only moves.
    """
    if any(root.id == element_id for root in elements):
        return update_position(elements, element_id, position)
    without, removed = remove_element(elements, element_id)
    if removed is None:
        return elements
    return list(without) + [removed.model_copy(update={"canvas_position": position})]


def _replace(elements: List[Element], element_id: str, update: Dict[str, Any]) -> List[Element]:
    """Rebuild the path to ``element_id`` with ``update`` applied to it."""
    result: List[Element] = []
    changed = False
    for element in elements:
        if not changed and element.id == element_id:
            result.append(element.model_copy(update=update))
            changed = True
            continue
        children = children_of(element)
        if not changed and children:
            new_children = _replace(children, element_id, update)
            if new_children is not children:
                element = with_children(element, new_children)
                changed = True
        result.append(element)
    return result if changed else elements


def update_position(elements: List[Element], element_id: str, position: CanvasPosition) -> List[Element]:
    """Set the canvas position of a root element. Non-root ids are ignored."""
    if not any(root.id == element_id for root in elements):
        return elements
    return _replace(elements, element_id, {"canvas_position": position})


def update_styles(elements: List[Element], element_id: str, styles: Dict[str, Any]) -> List[Element]:
    """
    Merge ``styles`` into the element's style bag.

    A value of ``None`` removes that style property.
    """
    element = find_element(elements, element_id)
    if element is None:
        return elements
    merged = dict(element.styles)
    for key, value in styles.items():
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return _replace(elements, element_id, {"styles": merged})


def update_size(
    elements: List[Element],
    element_id: str,
    width: float,
    height: float,
    position: Optional[CanvasPosition] = None,
) -> List[Element]:
    """
    Set explicit width/height styles; move the element too when it is a root.

    Size is always explicit in the style bag, for roots and descendants alike.
    """
    updated = update_styles(elements, element_id, {"width": width, "height": height})
    if position is not None:
        updated = update_position(updated, element_id, position)
    return updated


def update_props(elements: List[Element], element_id: str, props: Dict[str, Any]) -> List[Element]:
    """Merge ``props`` into a markup or component element. ``None`` removes a prop."""
    element = find_element(elements, element_id)
    if not isinstance(element, (MarkupElement, ComponentElement)):
        return elements
    merged = dict(element.props)
    for key, value in props.items():
        if key == "style":
            continue
        if value is None:
            merged.pop(key, None)
        else:
            merged[key] = value
    return _replace(elements, element_id, {"props": merged})


def update_text(elements: List[Element], element_id: str, text: str) -> List[Element]:
    """Replace the content of a text leaf."""
    element = find_element(elements, element_id)
    if not isinstance(element, TextLeaf):
        return elements
    return _replace(elements, element_id, {"text": text})


def duplicate_ids(elements: List[Element]) -> Set[str]:
    """Ids that appear more than once in the forest."""
    seen: Set[str] = set()
    duplicates: Set[str] = set()
    for element_id in collect_ids(elements):
        if element_id in seen:
            duplicates.add(element_id)
        seen.add(element_id)
    return duplicates
