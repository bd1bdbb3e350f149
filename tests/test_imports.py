"""
Import synthesis tests.
"""

import pytest

from canvas_sync.codegen.errors import UnresolvedComponentReference
from canvas_sync.codegen.imports import (
    component_import_hints,
    extract_component_dependencies,
    find_unresolved_components,
    generate_imports,
    relative_import_path,
)
from canvas_sync.models.element_models import ComponentElement, MarkupElement


def test_components_from_one_file_share_a_statement(component_index):
    assert generate_imports(["Card", "Button"], component_index) == [
        "import { Button, Card } from '@/components/ui/index'"
    ]


def test_relative_paths_for_known_target(component_index):
    assert generate_imports(["Button"], component_index, target_path="app/page.tsx") == [
        "import { Button } from '../components/ui/index'"
    ]
    assert generate_imports(["Text", "Button"], component_index, target_path="components/ui/card.tsx") == [
        "import { Button } from './index'",
        "import { Text } from './text'",
    ]


@pytest.mark.parametrize("from_file, to_path, expected", [
    ("app/page.tsx", "components/ui/text", "../components/ui/text"),
    ("page.tsx", "components/ui/text", "./components/ui/text"),
    ("app/dashboard/page.tsx", "app/widgets/chart", "../widgets/chart"),
])
def test_relative_import_path(from_file, to_path, expected):
    assert relative_import_path(from_file, to_path) == expected


def test_unknown_component_is_skipped_with_warning(component_index):
    with pytest.warns(UnresolvedComponentReference):
        statements = generate_imports(["Missing", "Card"], component_index)
    assert statements == ["import { Card } from '@/components/ui/index'"]


def test_dotted_component_imports_its_base(component_index):
    elements = [ComponentElement(id="t", component_name="Tabs.List", children=[])]
    assert extract_component_dependencies(elements) == ["Tabs.List"]
    assert generate_imports(extract_component_dependencies(elements), component_index) == [
        "import { Tabs } from '@/components/ui/tabs'"
    ]


def test_dependencies_in_first_use_order(component_index):
    elements = [
        MarkupElement(
            id="root",
            tag="div",
            children=[
                ComponentElement(id="a", component_name="Text"),
                ComponentElement(id="b", component_name="Card", children=[
                    ComponentElement(id="c", component_name="Text"),
                    ComponentElement(id="d", component_name="Ghost"),
                ]),
            ],
        )
    ]
    assert extract_component_dependencies(elements) == ["Text", "Card", "Ghost"]
    assert find_unresolved_components(elements, component_index) == ["Ghost"]

    hints = component_import_hints(extract_component_dependencies(elements), component_index)
    assert [(hint.component, hint.import_path) for hint in hints] == [
        ("Text", "@/components/ui/text"),
        ("Card", "@/components/ui/index"),
    ]
