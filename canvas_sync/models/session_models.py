"""
Editor Session Models
=====================

Transient editing state owned by the active editing session: selection,
hover, and the pointer gesture in progress. Nothing here is persisted.
"""

from enum import Enum
from typing import Dict, Optional
from pydantic import BaseModel, ConfigDict, Field


class SelectionMode(str, Enum):
    """Which element a click lands on when elements are nested."""
    TOPMOST = "topmost"    # Shallowest ancestor under the pointer
    DEEPEST = "deepest"    # Innermost element under the pointer


class Box(BaseModel):
    """Axis-aligned rectangle in screen (or canvas) coordinates."""
    model_config = ConfigDict(frozen=True)

    left: float
    top: float
    width: float = 0
    height: float = 0

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    def translate(self, dx: float, dy: float) -> "Box":
        """Same box moved by ``(dx, dy)``."""
        return Box(left=self.left + dx, top=self.top + dy, width=self.width, height=self.height)


class LayoutSnapshot(BaseModel):
    """
    Live on-screen geometry reported by the presentation layer.

    ``boxes`` maps element ids to their screen boxes; ``canvas_origin`` is the
    screen box of the canvas surface, used to translate screen points into
    canvas coordinates.
    """
    boxes: Dict[str, Box] = Field(default_factory=dict)
    canvas_origin: Optional[Box] = None
    zoom: float = Field(default=1.0, gt=0)


class DragState(BaseModel):
    """Pointer drag in progress."""
    model_config = ConfigDict(frozen=True)

    element_id: str
    start_x: float
    start_y: float
    start_left: float = 0
    start_top: float = 0
    start_box: Optional[Box] = None
    delta_x: float = 0
    delta_y: float = 0
    potential_parent_id: Optional[str] = None
    should_detach: bool = False


class ResizeState(BaseModel):
    """Resize-handle gesture in progress."""
    model_config = ConfigDict(frozen=True)

    element_id: str
    handle: str
    start_x: float
    start_y: float
    start_width: float
    start_height: float
    start_left: float = 0
    start_top: float = 0


class EditorSession(BaseModel):
    """
    Session context passed into the spatial editing functions.

    Instances are immutable; every gesture step returns a new session.
    """
    model_config = ConfigDict(frozen=True)

    selected_id: Optional[str] = None
    hover_id: Optional[str] = None
    drag: Optional[DragState] = None
    resize: Optional[ResizeState] = None
    zoom: float = Field(default=1.0, gt=0)

    @property
    def potential_parent_id(self) -> Optional[str]:
        """Element currently highlighted as the drop target."""
        return self.drag.potential_parent_id if self.drag else None

    @property
    def is_dragging(self) -> bool:
        return self.drag is not None
