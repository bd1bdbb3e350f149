"""
Element factory tests.
"""

import pytest

from canvas_sync.canvas.element_factory import (
    DEFAULT_POSITION,
    create_component_element,
    create_element_from_tag,
    default_prop_value,
    seed_component_props,
)
from canvas_sync.models.component_models import PropSchema
from canvas_sync.models.element_models import CanvasPosition, TextLeaf


def test_tag_defaults_and_placeholder_text():
    heading = create_element_from_tag("h1", CanvasPosition(x=5, y=6))
    assert heading.styles == {"fontSize": "32px", "fontWeight": "700"}
    assert heading.canvas_position == CanvasPosition(x=5, y=6)
    [text] = heading.children
    assert isinstance(text, TextLeaf)
    assert text.text == "Heading 1"

    box = create_element_from_tag("div")
    assert box.children == []
    assert box.canvas_position == DEFAULT_POSITION
    assert create_element_from_tag("article").styles == {}


def test_fresh_ids():
    assert create_element_from_tag("div").id != create_element_from_tag("div").id


@pytest.mark.parametrize("prop_type, expected", [
    ("string", "title"),
    ("number", 0),
    ("boolean", False),
    ("'primary' | 'secondary'", "primary"),
    ('undefined | "sm" | "lg"', "sm"),
    ("() => void", None),
    ("React.CSSProperties", None),
    ("ReactElement", None),
    ("any", None),
])
def test_default_prop_value(prop_type, expected):
    assert default_prop_value("title", PropSchema(type=prop_type)) == expected


def test_seed_only_required_props(component_index):
    assert seed_component_props("Button", component_index) == {"label": "label", "variant": "primary"}
    assert seed_component_props("Text", component_index) == {"size": 0, "muted": False}
    assert seed_component_props("Tabs", component_index) == {}
    assert seed_component_props("Missing", component_index) == {}


def test_component_children_slot(component_index):
    card = create_component_element("Card", component_index)
    assert card.children == []
    assert card.component_name == "Card"

    text = create_component_element("Text", component_index, CanvasPosition(x=1, y=2))
    assert text.children is None
    assert text.props == {"size": 0, "muted": False}
    assert text.canvas_position == CanvasPosition(x=1, y=2)

    trigger = create_component_element("Tabs.Trigger", component_index)
    assert trigger.children is None
    assert create_component_element("Missing", component_index).props == {}
