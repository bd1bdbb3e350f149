"""
Shared fixtures for the canvas sync tests.
"""

from typing import List

import pytest

from canvas_sync.models.component_models import ComponentIndex, load_component_index
from canvas_sync.models.element_models import (
    CanvasPosition,
    ComponentElement,
    Element,
    MarkupElement,
    TextLeaf,
)


@pytest.fixture
def component_index() -> ComponentIndex:
    return load_component_index({
        "Button": {
            "path": "components/ui/index.tsx",
            "exportName": "Button",
            "props": {
                "label": {"type": "string", "required": True},
                "variant": {"type": "'primary' | 'secondary'", "required": True},
                "onClick": {"type": "() => void", "required": True},
                "children": {"type": "ReactNode"},
            },
        },
        "Card": {
            "path": "components/ui/index.tsx",
            "exportName": "Card",
            "props": {"children": "ReactNode"},
        },
        "Text": {
            "path": "components/ui/text.tsx",
            "exportName": "Text",
            "props": {
                "size": {"type": "number", "required": True},
                "muted": {"type": "boolean", "required": True},
            },
        },
        "Tabs": {"path": "components/ui/tabs.tsx", "exportName": "Tabs"},
    })


def sample_forest() -> List[Element]:
    """
    root (div, at 10,20)
      child-a (section)
        text-a "Hello"
      child-b (Card)
    other (span, at 300,40)
    """
    return [
        MarkupElement(
            id="root",
            tag="div",
            styles={"width": 400, "height": 300},
            canvas_position=CanvasPosition(x=10, y=20),
            children=[
                MarkupElement(
                    id="child-a",
                    tag="section",
                    children=[TextLeaf(id="text-a", text="Hello")],
                ),
                ComponentElement(id="child-b", component_name="Card", children=[]),
            ],
        ),
        MarkupElement(id="other", tag="span", canvas_position=CanvasPosition(x=300, y=40)),
    ]


@pytest.fixture
def forest() -> List[Element]:
    return sample_forest()
