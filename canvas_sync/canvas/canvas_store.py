"""
Canvas Store
============

Saved canvases with JSON persistence, one file per canvas.
"""

import json
import logging
import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from ..models.canvas_models import CanvasDocument, CanvasSummary
from .tree_utils import iter_elements

logger = logging.getLogger(__name__)

_CANVAS_ID = re.compile(r"^[A-Za-z0-9_-]+$")


class CanvasStore:
    """Saves, loads, lists and deletes canvas documents."""

    def __init__(self, canvases_dir: Optional[Path] = None):
        self.canvases_dir = Path(canvases_dir or "canvases")
        self.canvases_dir.mkdir(parents=True, exist_ok=True)
        self._cache: Dict[str, CanvasDocument] = {}
        logger.info(f"[CANVAS-STORE] Initialized with canvases_dir={self.canvases_dir}")

    def _canvas_path(self, canvas_id: str) -> Path:
        if not _CANVAS_ID.match(canvas_id):
            raise ValueError(f"Invalid canvas id: {canvas_id!r}")
        return self.canvases_dir / f"{canvas_id}.json"

    def new_id(self) -> str:
        return f"canvas-{uuid.uuid4().hex[:12]}"

    def save(self, document: CanvasDocument) -> CanvasDocument:
        """
        Persist a canvas.

        An existing canvas keeps its creation time; ``updated_at`` is always
        refreshed.
        """
        path = self._canvas_path(document.id)
        existing = self.load(document.id)
        updates = {"updated_at": datetime.now()}
        if existing is not None:
            updates["created_at"] = existing.created_at
        document = document.model_copy(update=updates)

        with open(path, "w") as f:
            json.dump(document.to_json_dict(), f, indent=2)
        self._cache[document.id] = document
        logger.info(f"[CANVAS-STORE] Saved canvas {document.id} ({len(document.elements)} root elements)")
        return document

    def load(self, canvas_id: str) -> Optional[CanvasDocument]:
        """Load a canvas, or ``None`` if it does not exist."""
        if canvas_id in self._cache:
            return self._cache[canvas_id]

        path = self._canvas_path(canvas_id)
        if not path.exists():
            return None
        with open(path) as f:
            document = CanvasDocument.model_validate(json.load(f))
        self._cache[canvas_id] = document
        return document

    def list(self) -> List[CanvasSummary]:
        """Summaries of every saved canvas, most recently updated first."""
        summaries = []
        for path in self.canvases_dir.glob("*.json"):
            try:
                document = self.load(path.stem)
            except (ValueError, json.JSONDecodeError) as e:
                logger.warning(f"[CANVAS-STORE] Skipping unreadable canvas {path.name}: {e}")
                continue
            if document is None:
                continue
            summaries.append(CanvasSummary(
                id=document.id,
                name=document.name,
                element_count=sum(1 for _ in iter_elements(document.elements)),
                updated_at=document.updated_at,
            ))
        return sorted(summaries, key=lambda summary: summary.updated_at, reverse=True)

    def delete(self, canvas_id: str) -> bool:
        """Delete a canvas; returns ``False`` if it did not exist."""
        path = self._canvas_path(canvas_id)
        self._cache.pop(canvas_id, None)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"[CANVAS-STORE] Deleted canvas {canvas_id}")
        return True
