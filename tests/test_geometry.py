"""
Containment and coordinate conversion tests.
"""

import pytest

from canvas_sync.canvas.geometry import is_completely_outside, is_fully_inside, screen_to_canvas
from canvas_sync.models.element_models import CanvasPosition
from canvas_sync.models.session_models import Box

OUTER = Box(left=0, top=0, width=100, height=100)


def test_fully_inside_includes_touching_edges():
    assert is_fully_inside(Box(left=0, top=0, width=100, height=100), OUTER)
    assert is_fully_inside(Box(left=10, top=10, width=20, height=20), OUTER)


@pytest.mark.parametrize("inner", [
    Box(left=-1, top=10, width=20, height=20),
    Box(left=90, top=10, width=20, height=20),
    Box(left=10, top=-1, width=20, height=20),
    Box(left=10, top=90, width=20, height=20),
])
def test_partial_overlap_is_neither_inside_nor_outside(inner):
    assert not is_fully_inside(inner, OUTER)
    assert not is_completely_outside(inner, OUTER)


@pytest.mark.parametrize("inner", [
    Box(left=101, top=0, width=10, height=10),
    Box(left=-20, top=0, width=10, height=10),
    Box(left=0, top=101, width=10, height=10),
    Box(left=0, top=-20, width=10, height=10),
])
def test_completely_outside_on_any_axis(inner):
    assert is_completely_outside(inner, OUTER)
    assert not is_fully_inside(inner, OUTER)


def test_sibling_box_overhanging_right_edge_is_not_contained():
    dragged = Box(left=210, top=10, width=100, height=80)
    target = Box(left=200, top=0, width=100, height=100)
    assert dragged.right == 310
    assert not is_fully_inside(dragged, target)


def test_screen_to_canvas():
    origin = Box(left=40, top=60, width=800, height=600)
    assert screen_to_canvas(140, 160, origin, zoom=2) == CanvasPosition(x=50, y=50)
    assert screen_to_canvas(30, 20, None) == CanvasPosition(x=30, y=20)
