"""
Markup Generator Tests
======================
"""

import pytest

from canvas_sync.codegen.generator import (
    component_name_from_path,
    generate_complete_file,
    generate_markup,
    render_return_markup,
)
from canvas_sync.codegen.parser import parse_markup
from canvas_sync.models.element_models import (
    ComponentElement,
    MarkupElement,
    TextLeaf,
    dump_forest,
    load_forest,
    structure_signature,
)


def test_single_style_renders_inline():
    element = MarkupElement(id="a", tag="div", styles={"color": "red"})
    assert generate_markup([element]) == '<div style={{ color: "red" }} />'


def test_multiple_styles_render_one_per_line():
    element = MarkupElement(id="a", tag="div", styles={"width": 100.0, "height": 50, "z-index": 2})
    assert generate_markup([element]) == (
        "<div style={{\n"
        "    width: 100,\n"
        "    height: 50,\n"
        '    "z-index": 2\n'
        "  }} />"
    )


def test_prop_rendering():
    element = MarkupElement(
        id="a",
        tag="button",
        props={"type": "submit", "disabled": True, "hidden": False, "tabIndex": 2, "data": {"a": [1, 2]}},
    )
    assert generate_markup([element]) == (
        '<button type="submit" disabled hidden={false} tabIndex={2} data={{"a": [1, 2]}} />'
    )


def test_string_props_are_escaped():
    element = ComponentElement(id="a", component_name="Button", props={"label": 'Say "hi" <now>'})
    assert generate_markup([element]) == '<Button label="Say &quot;hi&quot; &lt;now&gt;" />'
    assert parse_markup(generate_markup([element]))[0].props == {"label": 'Say "hi" <now>'}


def test_text_children():
    element = MarkupElement(
        id="p",
        tag="p",
        children=[
            TextLeaf(id="t1", text="Hello"),
            TextLeaf(id="t2", text="World"),
            TextLeaf(id="t3", text="a < b"),
        ],
    )
    assert generate_markup([element]) == '<p>\n  Hello\n  {"World"}\n  {"a < b"}\n</p>'


def test_styled_text_leaf_renders_as_span():
    element = MarkupElement(id="p", tag="p", children=[TextLeaf(id="t", text="Hi", styles={"color": "blue"})])
    assert generate_markup([element]) == '<p>\n  <span style={{ color: "blue" }}>Hi</span>\n</p>'


def test_root_text_leaf_is_wrapped():
    assert generate_markup([TextLeaf(id="t", text="Loose")]) == "<>Loose</>"


def test_indentation():
    element = MarkupElement(id="a", tag="div", children=[MarkupElement(id="b", tag="span")])
    assert generate_markup([element], indent=4) == "    <div>\n      <span />\n    </div>"


def test_output_is_deterministic(forest):
    assert generate_markup(forest) == generate_markup(load_forest(dump_forest(forest)))


def test_round_trip_preserves_structure(forest):
    forest = forest + [
        MarkupElement(
            id="extra",
            tag="ul",
            props={"title": "List & more", "data": {"n": 1}},
            children=[
                MarkupElement(id="li", tag="li", children=[TextLeaf(id="t1", text="one"), TextLeaf(id="t2", text=" two ")]),
                ComponentElement(id="btn", component_name="Button", props={"label": "Go", "primary": True}),
            ],
        )
    ]
    parsed = parse_markup(generate_markup(forest))
    assert structure_signature(parsed) == structure_signature(forest)


def test_render_return_markup():
    assert render_return_markup([]) == "null"
    single = [MarkupElement(id="a", tag="div")]
    assert render_return_markup(single) == "<div />"
    pair = [MarkupElement(id="a", tag="div"), TextLeaf(id="t", text="after")]
    assert render_return_markup(pair, indent=2) == "  <>\n    <div />\n    after\n  </>"


def test_generate_complete_file(component_index):
    elements = [
        MarkupElement(
            id="root",
            tag="div",
            children=[
                ComponentElement(id="b", component_name="Button", props={"label": "Go"}),
                ComponentElement(id="c", component_name="Card"),
            ],
        )
    ]
    assert generate_complete_file("Page", elements, component_index) == (
        "import { Button, Card } from '@/components/ui/index'\n"
        "\n"
        "export default function Page() {\n"
        "  return (\n"
        "    <div>\n"
        '      <Button label="Go" />\n'
        "      <Card />\n"
        "    </div>\n"
        "  )\n"
        "}\n"
    )


def test_generate_complete_file_without_elements(component_index):
    assert generate_complete_file("Empty", [], component_index, include_react_import=True) == (
        "import React from 'react'\n"
        "\n"
        "export default function Empty() {\n"
        "  return null\n"
        "}\n"
    )


def test_generated_file_parses_back(component_index, forest):
    source = generate_complete_file("Page", forest, component_index, target_path="app/page.tsx")
    assert "from '../components/ui/index'" in source
    assert structure_signature(parse_markup(source)) == structure_signature(forest)


@pytest.mark.parametrize("path, expected", [
    ("app/page.tsx", "Page"),
    ("app/user-card.tsx", "UserCard"),
    ("components/nav_bar/index.tsx", "NavBar"),
    ("app/404.tsx", "Component404"),
])
def test_component_name_from_path(path, expected):
    assert component_name_from_path(path) == expected
