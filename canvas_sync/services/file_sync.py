"""
File Sync Service
=================

Reads component files for editing and writes edited element forests back
into the project.

Saving a forest to a path that does not exist scaffolds a new component
file. Saving to an existing file merges the forest into it, either with the
deterministic merge engine or with an injected alternate strategy. The file
is replaced atomically, and only once the complete new source is ready;
saves targeting the same path are serialized.
"""

import asyncio
import logging
import os
import tempfile
import weakref
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..codegen.errors import ComponentReturnNotFound, PathOutsideProject
from ..codegen.extract import ExtractedComponent, default_mock_values, extract_component_return
from ..codegen.generator import component_name_from_path, generate_complete_file, render_return_markup
from ..codegen.imports import component_import_hints, extract_component_dependencies, find_unresolved_components
from ..codegen.merge import merge_into_existing_file
from ..codegen.parser import parse_markup
from ..models.component_models import ComponentIndex
from ..models.element_models import Element
from .assistant_merge import AlternateMergeStrategy, AssistantMergeRequest

logger = logging.getLogger(__name__)


class ComponentSource(BaseModel):
    """A component file opened for editing."""
    path: str
    source: str
    extracted: Optional[ExtractedComponent] = None
    elements: List[Element] = Field(default_factory=list)
    mock_values: Dict[str, Any] = Field(default_factory=dict)


class SaveResult(BaseModel):
    """Outcome of one save."""
    path: str
    created: bool
    strategy: str
    source: str
    unresolved_components: List[str] = Field(default_factory=list)


class FileSyncService:
    """Round-trips element forests to component files under one project root."""

    def __init__(
        self,
        project_root: Path,
        component_index: ComponentIndex,
        alternate: Optional[AlternateMergeStrategy] = None,
    ):
        self.project_root = Path(project_root).resolve()
        self.component_index = component_index
        self.alternate = alternate
        # A lock lives only while a save for its path holds or awaits it
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()
        logger.info(
            f"[FILE-SYNC] Initialized with project_root={self.project_root}, "
            f"alternate={'yes' if alternate else 'no'}"
        )

    def resolve_path(self, relative_path: str) -> Path:
        """
        Absolute path of a project file.

        Raises:
            PathOutsideProject: the path escapes the project root.
        """
        candidate = (self.project_root / relative_path).resolve()
        if candidate != self.project_root and not candidate.is_relative_to(self.project_root):
            raise PathOutsideProject(f"Path outside project: {relative_path}")
        return candidate

    def project_path(self, path: Path) -> str:
        """POSIX path relative to the project root."""
        return path.relative_to(self.project_root).as_posix()

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    def read_component(self, relative_path: str) -> ComponentSource:
        """
        Load a component file for editing.

        The static part of the returned markup is parsed into elements;
        dynamic expressions are listed with mock values for snapshot
        rendering. Files without a component return still load, with no
        elements.

        Raises:
            PathOutsideProject: the path escapes the project root.
            FileNotFoundError: the file does not exist.
        """
        target = self.resolve_path(relative_path)
        source = target.read_text(encoding="utf-8")
        component = ComponentSource(path=self.project_path(target), source=source)

        try:
            extracted = extract_component_return(source)
        except ComponentReturnNotFound:
            logger.info(f"[FILE-SYNC] {component.path} has no component return")
            return component

        component.extracted = extracted
        component.elements = parse_markup(extracted.return_markup)
        component.mock_values = default_mock_values(extracted)
        logger.info(f"[FILE-SYNC] Read {component.path}: {len(component.elements)} root element(s)")
        return component

    def _write_atomic(self, target: Path, source: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(source)
            os.replace(temp_path, target)
        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)
            raise

    async def save(
        self,
        relative_path: str,
        elements: List[Element],
        mock_bindings: Optional[Dict[str, Any]] = None,
        use_alternate: Optional[bool] = None,
    ) -> SaveResult:
        """
        Write ``elements`` to a project file.

        Args:
            relative_path: Project-relative target path.
            elements: Forest to save.
            mock_bindings: Values substituted for dynamic expressions when the
                edited snapshot was rendered; passed to the alternate merge.
            use_alternate: Force (``True``) or skip (``False``) the alternate
                strategy for an existing file. By default it is used whenever
                one was injected.

        Raises:
            PathOutsideProject, ParseFailure, MergeTargetNotFound,
            AlternateMergeFailure. The target file is left untouched when
            any of them is raised.
        """
        target = self.resolve_path(relative_path)
        path = self.project_path(target)
        unresolved = find_unresolved_components(elements, self.component_index)
        for name in unresolved:
            logger.warning(f"[FILE-SYNC] Component '{name}' is not in the component index; its import is omitted")

        async with self._lock_for(path):
            if not target.exists():
                source = generate_complete_file(
                    component_name_from_path(path),
                    elements,
                    self.component_index,
                    target_path=path,
                )
                created, strategy = True, "scaffold"
            else:
                existing = target.read_text(encoding="utf-8")
                alternate = self.alternate if use_alternate is not False else None
                if use_alternate and alternate is None:
                    logger.warning("[FILE-SYNC] Alternate merge requested but none is configured")
                if alternate is not None:
                    request = AssistantMergeRequest(
                        file_path=path,
                        original_source=existing,
                        snapshot_markup=render_return_markup(elements),
                        import_hints=component_import_hints(
                            extract_component_dependencies(elements), self.component_index
                        ),
                        mock_bindings=mock_bindings,
                    )
                    source = await alternate.merge(request)
                    strategy = "assistant"
                else:
                    source = merge_into_existing_file(existing, elements, self.component_index, target_path=path)
                    strategy = "deterministic"
                created = False

            self._write_atomic(target, source)

        logger.info(f"[FILE-SYNC] Saved {path} ({strategy}, {len(elements)} root element(s))")
        return SaveResult(
            path=path,
            created=created,
            strategy=strategy,
            source=source,
            unresolved_components=unresolved,
        )
