"""
Import Synthesis
================

Computes the import statements a generated component needs: one statement
per source file, naming every component taken from it.
"""

import logging
import posixpath
import re
import warnings
from typing import Dict, Iterable, List, Optional, Set

from pydantic import BaseModel

from ..models.component_models import ComponentIndex, lookup_component
from ..models.element_models import ComponentElement, Element, children_of
from .errors import UnresolvedComponentReference

logger = logging.getLogger(__name__)

ROOT_ALIAS = "@/"
_SOURCE_EXTENSION = re.compile(r"\.(tsx|ts|jsx|js)$")


class ImportHint(BaseModel):
    """Component name and where to import it from (root alias form)."""
    component: str
    import_path: str


def extract_component_dependencies(elements: List[Element]) -> List[str]:
    """Distinct component names used anywhere in the forest, in first-use order."""
    names: Dict[str, None] = {}

    def visit(element: Element) -> None:
        if isinstance(element, ComponentElement):
            names.setdefault(element.component_name, None)
        for child in children_of(element):
            visit(child)

    for element in elements:
        visit(element)
    return list(names)


def strip_source_extension(path: str) -> str:
    return _SOURCE_EXTENSION.sub("", path)


def relative_import_path(from_file: str, to_path: str) -> str:
    """
    Import specifier reaching ``to_path`` from the file ``from_file``.

    Both are project-relative POSIX paths, e.g.
    ``relative_import_path("app/page.tsx", "components/ui/text")`` is
    ``"../components/ui/text"``.
    """
    from_parts = [part for part in posixpath.dirname(from_file).split("/") if part]
    to_parts = [part for part in to_path.split("/") if part]

    common = 0
    for left, right in zip(from_parts, to_parts):
        if left != right:
            break
        common += 1

    relative = "../" * (len(from_parts) - common) + "/".join(to_parts[common:])
    return relative if relative.startswith(".") else f"./{relative}"


def alias_import_path(path: str) -> str:
    """Root-alias specifier (``@/components/ui/text``) for a project path."""
    path = strip_source_extension(path)
    return path if path.startswith(ROOT_ALIAS) else f"{ROOT_ALIAS}{path}"


def find_unresolved_components(elements: List[Element], index: ComponentIndex) -> List[str]:
    """Component names in the forest that the index cannot resolve."""
    return [name for name in extract_component_dependencies(elements) if lookup_component(index, name) is None]


def generate_imports(
    component_names: Iterable[str],
    index: ComponentIndex,
    target_path: Optional[str] = None,
) -> List[str]:
    """
    Import statements for ``component_names``.

    Components sharing a source file are grouped into one statement. Paths
    are relative to ``target_path`` when it is known, otherwise they use the
    root alias. Unknown components are skipped with an
    ``UnresolvedComponentReference`` warning.
    """
    by_path: Dict[str, Set[str]] = {}
    for name in component_names:
        entry = lookup_component(index, name)
        if entry is None:
            logger.warning(f"[IMPORTS] Component '{name}' not found in component index")
            warnings.warn(UnresolvedComponentReference(name), stacklevel=2)
            continue
        by_path.setdefault(strip_source_extension(entry.path), set()).add(entry.export_name)

    statements = []
    for path, export_names in by_path.items():
        if target_path:
            specifier = relative_import_path(target_path, path)
        else:
            specifier = alias_import_path(path)
        statements.append(f"import {{ {', '.join(sorted(export_names))} }} from '{specifier}'")
    return sorted(statements)


def component_import_hints(component_names: Iterable[str], index: ComponentIndex) -> List[ImportHint]:
    """Root-alias import locations, used as hints for the assistant merge."""
    hints = []
    for name in component_names:
        entry = lookup_component(index, name)
        if entry is None:
            continue
        hints.append(ImportHint(component=entry.export_name, import_path=alias_import_path(entry.path)))
    return hints
