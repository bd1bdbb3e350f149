"""
Containment tests and coordinate conversion for the canvas.
"""

from typing import Optional

from ..models.element_models import CanvasPosition
from ..models.session_models import Box


def is_fully_inside(inner: Box, outer: Box) -> bool:
    """All four edges of ``inner`` lie within ``outer`` (touching edges count)."""
    return (
        inner.left >= outer.left
        and inner.right <= outer.right
        and inner.top >= outer.top
        and inner.bottom <= outer.bottom
    )


def is_completely_outside(inner: Box, outer: Box) -> bool:
    """``inner`` and ``outer`` are disjoint along at least one axis."""
    return (
        inner.right < outer.left
        or inner.left > outer.right
        or inner.bottom < outer.top
        or inner.top > outer.bottom
    )


def screen_to_canvas(
    screen_x: float,
    screen_y: float,
    canvas_origin: Optional[Box],
    zoom: float = 1.0,
) -> CanvasPosition:
    """
    Convert a screen point into canvas coordinates.

    Without a known canvas origin the screen point is only unscaled.
    """
    origin_left = canvas_origin.left if canvas_origin else 0
    origin_top = canvas_origin.top if canvas_origin else 0
    return CanvasPosition(x=(screen_x - origin_left) / zoom, y=(screen_y - origin_top) / zoom)
