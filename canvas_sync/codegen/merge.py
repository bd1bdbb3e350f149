"""
Source Merge Engine
===================

Deterministic merge of an edited element forest into an existing component
file. Only two regions of the file change:

- the component's return expression, replaced by freshly rendered markup
- component imports, replaced by the import list computed for the forest

Everything else (state, handlers, helper functions, comments, formatting)
is carried over byte for byte. Edits are applied as splices on the original
source and the result is re-parsed before it is returned, so a failed merge
never yields partial output.
"""

import logging
import posixpath
import textwrap
from typing import List, NamedTuple, Optional, Set

from tree_sitter import Node

from ..models.component_models import ComponentIndex
from ..models.element_models import Element
from .errors import MergeTargetNotFound, ParseFailure
from .generator import INDENT, render_return_markup
from .imports import ROOT_ALIAS, extract_component_dependencies, generate_imports, strip_source_extension
from .literals import decode_js_string
from .locate import find_component_return
from .tsx import line_indent, named_children, node_text, parse_tsx, raise_on_syntax_error

logger = logging.getLogger(__name__)

COMPONENT_DIR_SEGMENT = "components"


class SourceEdit(NamedTuple):
    """Replace bytes ``[start, end)`` of the original source with ``text``."""
    start: int
    end: int
    text: str


def apply_edits(data: bytes, edits: List[SourceEdit]) -> bytes:
    """Apply non-overlapping edits to ``data``."""
    ordered = sorted(edits, key=lambda edit: (edit.start, edit.end))
    for previous, current in zip(ordered, ordered[1:]):
        if current.start < previous.end:
            raise ValueError(f"Overlapping edits at byte {current.start}")
    result = data
    for edit in reversed(ordered):
        result = result[:edit.start] + edit.text.encode("utf-8") + result[edit.end:]
    return result


def _line_span(data: bytes, node: Node) -> SourceEdit:
    """Removal of the whole line(s) a statement occupies, when it is alone on them."""
    start = node.start_byte
    line_start = data.rfind(b"\n", 0, start) + 1
    if not data[line_start:start].strip():
        start = line_start
    end = node.end_byte
    line_end = data.find(b"\n", end)
    line_end = len(data) if line_end == -1 else line_end + 1
    if not data[end:line_end].strip():
        end = line_end
    return SourceEdit(start, end, "")


def _line_end(data: bytes, offset: int) -> int:
    newline = data.find(b"\n", offset)
    return len(data) if newline == -1 else newline + 1


def _known_component_paths(index: ComponentIndex) -> Set[str]:
    paths = set()
    for entry in index.values():
        path = strip_source_extension(entry.path)
        if path.startswith(ROOT_ALIAS):
            path = path[len(ROOT_ALIAS):]
        paths.add(posixpath.normpath(path))
    return paths


def _normalize_import_source(source: str, target_path: Optional[str]) -> Optional[str]:
    """Project-relative path an import refers to, when it can be known."""
    if source.startswith(ROOT_ALIAS):
        return posixpath.normpath(strip_source_extension(source[len(ROOT_ALIAS):]))
    if source.startswith("."):
        if not target_path:
            return None
        joined = posixpath.join(posixpath.dirname(target_path), source)
        return posixpath.normpath(strip_source_extension(joined))
    return strip_source_extension(source)


def is_component_import(source: str, component_paths: Set[str], target_path: Optional[str] = None) -> bool:
    """Whether an import source points at a component that the merge regenerates."""
    if COMPONENT_DIR_SEGMENT in source.split("/"):
        return True
    normalized = _normalize_import_source(source, target_path)
    return normalized is not None and normalized in component_paths


def _import_source(statement: Node, data: bytes) -> Optional[str]:
    source = statement.child_by_field_name("source")
    if source is None:
        return None
    return decode_js_string(node_text(source, data))


def _has_import_clause(statement: Node) -> bool:
    return any(child.type == "import_clause" for child in statement.named_children)


def _is_directive(statement: Node) -> bool:
    if statement.type != "expression_statement":
        return False
    inner = named_children(statement)
    return len(inner) == 1 and inner[0].type == "string"


def _import_edits(
    root: Node,
    data: bytes,
    new_imports: List[str],
    component_paths: Set[str],
    target_path: Optional[str],
    newline: str = "\n",
) -> List[SourceEdit]:
    removed: List[SourceEdit] = []
    last_kept_leading: Optional[Node] = None
    last_directive: Optional[Node] = None
    leading = True

    for statement in named_children(root):
        if statement.type == "import_statement":
            source = _import_source(statement, data)
            # Side-effect imports (stylesheets, polyfills) have no clause and are kept
            if source is not None and _has_import_clause(statement) and is_component_import(source, component_paths, target_path):
                removed.append(_line_span(data, statement))
                continue
            if leading:
                last_kept_leading = statement
            continue
        if leading and _is_directive(statement) and last_kept_leading is None and not removed:
            last_directive = statement
            continue
        leading = False

    block = "".join(statement + newline for statement in new_imports)
    if not block:
        return removed

    if last_kept_leading is not None:
        offset = _line_end(data, last_kept_leading.end_byte)
        prefix = "" if data[:offset].endswith(b"\n") else newline
        return removed + [SourceEdit(offset, offset, prefix + block)]
    if removed:
        first = removed[0]
        return [SourceEdit(first.start, first.end, block)] + removed[1:]
    if last_directive is not None:
        offset = _line_end(data, last_directive.end_byte)
        prefix = "" if data[:offset].endswith(b"\n") else newline
        return [SourceEdit(offset, offset, prefix + newline + block)]
    return [SourceEdit(0, 0, block + newline)]


def merge_into_existing_file(
    existing_source: str,
    elements: List[Element],
    component_index: ComponentIndex,
    target_path: Optional[str] = None,
) -> str:
    """
    Rewrite the return markup and component imports of ``existing_source``.

    Args:
        existing_source: Current file contents.
        elements: Edited forest to render into the component's return.
        component_index: Resolves component names to import paths.
        target_path: Project-relative path of the file, used for relative
            import paths; the root alias is used without it.

    Raises:
        ParseFailure: the existing file (or the merged result) does not parse.
        MergeTargetNotFound: no component function returning a value exists.
    """
    tree, data = parse_tsx(existing_source)
    raise_on_syntax_error(tree, data, "existing file")

    target = find_component_return(tree.root_node, data)
    if target is None:
        raise MergeTargetNotFound("No component function with a return expression found")

    expression = target.expression
    # Generated lines follow the file's own line endings
    newline = "\r\n" if b"\r\n" in data else "\n"
    if elements:
        base_indent = line_indent(data, expression.start_byte)
        markup = textwrap.indent(render_return_markup(elements), base_indent + INDENT)
        markup = markup.replace("\n", newline)
        replacement = f"({newline}{markup}{newline}{base_indent})"
    else:
        replacement = "null"
    edits = [SourceEdit(expression.start_byte, expression.end_byte, replacement)]

    new_imports = generate_imports(extract_component_dependencies(elements), component_index, target_path)
    edits.extend(_import_edits(tree.root_node, data, new_imports, _known_component_paths(component_index), target_path, newline))

    merged = apply_edits(data, edits).decode("utf-8")

    merged_tree, merged_data = parse_tsx(merged)
    try:
        raise_on_syntax_error(merged_tree, merged_data, "merged output")
    except ParseFailure:
        logger.error("[MERGE] Merged output failed to parse; leaving source unchanged")
        raise

    logger.info(f"[MERGE] Merged {len(elements)} root element(s) with {len(new_imports)} import(s)")
    return merged
