"""
Spatial Editing Engine
======================

Turns pointer gestures plus live layout geometry into tree edits.

Every function takes the current ``EditorSession`` and element forest and
returns new values; nothing is mutated and no state lives at module level.

Drag flow:
- ``begin_drag`` on pointer-down records the start point and start box.
- ``drag_move`` on every pointer-move projects the dragged box, looks for a
  drop target that fully contains it, and flags detachment when a child is
  pulled completely outside its current parent. Roots follow the pointer.
- ``end_drag`` on pointer-up applies exactly one outcome: reparent inside the
  drop target, detach to a new root, commit a root's position, or nothing.
"""

import logging
from enum import Enum
from typing import List, Optional, Tuple

from ..models.element_models import CanvasPosition, Element, TextLeaf
from ..models.session_models import (
    Box,
    DragState,
    EditorSession,
    LayoutSnapshot,
    ResizeState,
    SelectionMode,
)
from .geometry import is_completely_outside, is_fully_inside, screen_to_canvas
from .tree_utils import (
    ancestor_path,
    detach_element,
    find_element,
    find_parent_id,
    is_descendant,
    iter_elements,
    move_element,
    update_position,
    update_size,
)

logger = logging.getLogger(__name__)

MIN_WIDTH = 50
MIN_HEIGHT = 30
RESIZE_HANDLES = frozenset({"n", "s", "e", "w", "ne", "nw", "se", "sw"})


class DropOutcome(str, Enum):
    """What ``end_drag`` did to the forest."""
    REPARENTED = "reparented"
    DETACHED = "detached"
    MOVED = "moved"
    UNCHANGED = "unchanged"


# ---------------------------------------------------------------------------
# Selection and hover
# ---------------------------------------------------------------------------

def choose_selection_mode(session: EditorSession, modifier_pressed: bool = False) -> SelectionMode:
    """
    Pick the click policy for this click.

    A held modifier always drills to the deepest element; otherwise the first
    click lands on the topmost element and later clicks drill down.
    """
    if modifier_pressed or session.selected_id is not None:
        return SelectionMode.DEEPEST
    return SelectionMode.TOPMOST


def resolve_click_target(elements: List[Element], hit_id: str, mode: SelectionMode) -> Optional[str]:
    """Element a click on ``hit_id`` resolves to under ``mode``."""
    path = ancestor_path(elements, hit_id)
    if not path:
        return None
    return path[0] if mode == SelectionMode.TOPMOST else path[-1]


def select_element(
    session: EditorSession,
    elements: List[Element],
    hit_id: Optional[str],
    modifier_pressed: bool = False,
) -> EditorSession:
    """Apply a click: select the resolved element, or clear selection on empty canvas."""
    if hit_id is None:
        return session.model_copy(update={"selected_id": None})
    mode = choose_selection_mode(session, modifier_pressed)
    target = resolve_click_target(elements, hit_id, mode)
    return session.model_copy(update={"selected_id": target})


def hover_element(
    session: EditorSession,
    elements: List[Element],
    hit_id: Optional[str],
    modifier_pressed: bool = False,
) -> EditorSession:
    """Track the hovered element with the same policy a click would use."""
    if hit_id is None:
        return session.model_copy(update={"hover_id": None})
    mode = choose_selection_mode(session, modifier_pressed)
    return session.model_copy(update={"hover_id": resolve_click_target(elements, hit_id, mode)})


# ---------------------------------------------------------------------------
# Dragging
# ---------------------------------------------------------------------------

def begin_drag(
    session: EditorSession,
    elements: List[Element],
    element_id: str,
    pointer_x: float,
    pointer_y: float,
    layout: Optional[LayoutSnapshot] = None,
) -> EditorSession:
    """Start dragging ``element_id``; it also becomes the selection."""
    element = find_element(elements, element_id)
    if element is None:
        return session.model_copy(update={"drag": None})

    position = element.canvas_position
    drag = DragState(
        element_id=element_id,
        start_x=pointer_x,
        start_y=pointer_y,
        start_left=position.x if position else 0,
        start_top=position.y if position else 0,
        start_box=layout.boxes.get(element_id) if layout else None,
    )
    logger.debug(f"[SPATIAL] Drag start {element_id} at ({pointer_x}, {pointer_y})")
    return session.model_copy(update={"drag": drag, "selected_id": element_id, "resize": None})


def find_drop_target(
    elements: List[Element],
    dragged_id: str,
    projected: Box,
    layout: LayoutSnapshot,
    current_parent_id: Optional[str] = None,
) -> Optional[str]:
    """
    Element that fully contains the projected box and may become its parent.

    The dragged element, its descendants and text leaves never qualify.
    Among several candidates the smallest box wins (the innermost
    container); equal areas prefer the later, deeper element. When that
    innermost container is the current parent there is no new parent.
    """
    best_id: Optional[str] = None
    best_area: Optional[float] = None
    for candidate in iter_elements(elements):
        candidate_id = candidate.id
        if candidate_id == dragged_id:
            continue
        if isinstance(candidate, TextLeaf):
            continue
        if is_descendant(dragged_id, candidate_id, elements):
            continue
        box = layout.boxes.get(candidate_id)
        if box is None or not is_fully_inside(projected, box):
            continue
        area = box.width * box.height
        if best_area is None or area <= best_area:
            best_id, best_area = candidate_id, area
    if best_id is not None and best_id == current_parent_id:
        return None
    return best_id


def drag_move(
    session: EditorSession,
    elements: List[Element],
    pointer_x: float,
    pointer_y: float,
    layout: LayoutSnapshot,
) -> Tuple[EditorSession, List[Element]]:
    """
    Process one pointer-move tick of a drag.

    Returns the updated session (drop target, detach flag, delta) and the
    forest with a dragged root following the pointer.
    """
    drag = session.drag
    if drag is None:
        return session, elements

    element = find_element(elements, drag.element_id)
    if element is None:
        logger.info(f"[SPATIAL] Dragged element {drag.element_id} disappeared, dropping gesture")
        return session.model_copy(update={"drag": None}), elements

    zoom = layout.zoom or session.zoom
    delta_x = pointer_x - drag.start_x
    delta_y = pointer_y - drag.start_y
    start_box = drag.start_box or layout.boxes.get(drag.element_id)
    parent_id = find_parent_id(elements, drag.element_id)

    should_detach = False
    potential_parent_id = None
    if start_box is not None:
        projected = start_box.translate(delta_x, delta_y)
        if parent_id is not None:
            parent_box = layout.boxes.get(parent_id)
            should_detach = parent_box is not None and is_completely_outside(projected, parent_box)
        potential_parent_id = find_drop_target(elements, drag.element_id, projected, layout, parent_id)

    new_drag = drag.model_copy(update={
        "start_box": start_box,
        "delta_x": delta_x,
        "delta_y": delta_y,
        "potential_parent_id": potential_parent_id,
        "should_detach": should_detach,
    })

    if parent_id is None:
        elements = update_position(elements, drag.element_id, CanvasPosition(
            x=drag.start_left + delta_x / zoom,
            y=drag.start_top + delta_y / zoom,
        ))
    return session.model_copy(update={"drag": new_drag, "zoom": zoom}), elements


def end_drag(
    session: EditorSession,
    elements: List[Element],
    layout: Optional[LayoutSnapshot] = None,
) -> Tuple[EditorSession, List[Element], DropOutcome]:
    """
    Commit the drag on pointer-up.

    Priority: a qualifying drop target reparents the element inside it; else
    a detach flag promotes it to a root at its on-screen location; else a
    root keeps its moved position; else a child stays where it was.
    """
    drag = session.drag
    cleared = session.model_copy(update={"drag": None})
    if drag is None:
        return cleared, elements, DropOutcome.UNCHANGED
    if find_element(elements, drag.element_id) is None:
        return cleared, elements, DropOutcome.UNCHANGED

    zoom = layout.zoom if layout else session.zoom
    parent_id = find_parent_id(elements, drag.element_id)

    if drag.potential_parent_id is not None:
        moved = move_element(elements, drag.element_id, drag.potential_parent_id, "inside")
        if moved is not elements:
            logger.info(f"[SPATIAL] Reparented {drag.element_id} into {drag.potential_parent_id}")
            return cleared, moved, DropOutcome.REPARENTED

    if drag.should_detach and parent_id is not None and drag.start_box is not None:
        projected = drag.start_box.translate(drag.delta_x, drag.delta_y)
        origin = layout.canvas_origin if layout else None
        position = screen_to_canvas(projected.left, projected.top, origin, zoom)
        logger.info(f"[SPATIAL] Detached {drag.element_id} to root at ({position.x}, {position.y})")
        return cleared, detach_element(elements, drag.element_id, position), DropOutcome.DETACHED

    if parent_id is None:
        position = CanvasPosition(
            x=drag.start_left + drag.delta_x / zoom,
            y=drag.start_top + drag.delta_y / zoom,
        )
        return cleared, update_position(elements, drag.element_id, position), DropOutcome.MOVED

    return cleared, elements, DropOutcome.UNCHANGED


def cancel_drag(session: EditorSession, elements: List[Element]) -> Tuple[EditorSession, List[Element]]:
    """Abort the drag; a dragged root returns to where it started."""
    drag = session.drag
    cleared = session.model_copy(update={"drag": None})
    if drag is None:
        return cleared, elements
    if find_parent_id(elements, drag.element_id) is None and find_element(elements, drag.element_id):
        elements = update_position(
            elements, drag.element_id, CanvasPosition(x=drag.start_left, y=drag.start_top)
        )
    return cleared, elements


# ---------------------------------------------------------------------------
# Resizing
# ---------------------------------------------------------------------------

def _numeric(value) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    return None


def begin_resize(
    session: EditorSession,
    elements: List[Element],
    element_id: str,
    handle: str,
    pointer_x: float,
    pointer_y: float,
    layout: Optional[LayoutSnapshot] = None,
) -> EditorSession:
    """
    Start a resize from ``handle`` (``n``, ``se``, ...).

    Starting size comes from numeric width/height styles, falling back to the
    measured box (unscaled by zoom), then to 100x100.
    """
    element = find_element(elements, element_id)
    if element is None or handle not in RESIZE_HANDLES:
        return session

    zoom = layout.zoom if layout else session.zoom
    box = layout.boxes.get(element_id) if layout else None
    width = _numeric(element.styles.get("width"))
    height = _numeric(element.styles.get("height"))
    if width is None:
        width = box.width / zoom if box else 100
    if height is None:
        height = box.height / zoom if box else 100

    position = element.canvas_position
    resize = ResizeState(
        element_id=element_id,
        handle=handle,
        start_x=pointer_x,
        start_y=pointer_y,
        start_width=width,
        start_height=height,
        start_left=position.x if position else 0,
        start_top=position.y if position else 0,
    )
    return session.model_copy(update={"resize": resize, "drag": None, "zoom": zoom})


def compute_resize(
    state: ResizeState,
    delta_x: float,
    delta_y: float,
    zoom: float = 1.0,
) -> Tuple[float, float, float, float]:
    """
    New ``(width, height, left, top)`` for a screen-space pointer delta.

    West and north handles move the left/top edge while the opposite edge
    stays put; sizes never drop below ``MIN_WIDTH`` x ``MIN_HEIGHT``.
    """
    dx = delta_x / zoom
    dy = delta_y / zoom
    width, height = state.start_width, state.start_height
    left, top = state.start_left, state.start_top

    if "e" in state.handle:
        width = max(MIN_WIDTH, state.start_width + dx)
    if "w" in state.handle:
        width = max(MIN_WIDTH, state.start_width - dx)
        left = state.start_left + (state.start_width - width)
    if "s" in state.handle:
        height = max(MIN_HEIGHT, state.start_height + dy)
    if "n" in state.handle:
        height = max(MIN_HEIGHT, state.start_height - dy)
        top = state.start_top + (state.start_height - height)
    return width, height, left, top


def resize_move(
    session: EditorSession,
    elements: List[Element],
    pointer_x: float,
    pointer_y: float,
) -> Tuple[EditorSession, List[Element]]:
    """Apply one pointer-move tick of a resize to the forest."""
    state = session.resize
    if state is None:
        return session, elements
    if find_element(elements, state.element_id) is None:
        return session.model_copy(update={"resize": None}), elements

    width, height, left, top = compute_resize(
        state, pointer_x - state.start_x, pointer_y - state.start_y, session.zoom
    )
    is_root = find_parent_id(elements, state.element_id) is None
    position = CanvasPosition(x=left, y=top) if is_root else None
    return session, update_size(elements, state.element_id, width, height, position)


def end_resize(session: EditorSession) -> EditorSession:
    """Pointer-up or cancel: the resize gesture is over."""
    return session.model_copy(update={"resize": None})
