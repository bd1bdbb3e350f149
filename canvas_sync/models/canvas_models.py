"""
Canvas Models for Canvas Sync
=============================

Persisted canvas documents: a named element forest plus view state.
"""

from typing import List, Optional, Dict, Any
from pydantic import Field
from datetime import datetime

from .element_models import CamelModel, Element


class PanOffset(CamelModel):
    """Viewport pan offset in screen pixels."""
    x: float = 0
    y: float = 0


class CanvasMetadata(CamelModel):
    """Free-form canvas description."""
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class CanvasDocument(CamelModel):
    """A saved canvas."""
    id: str
    name: str = "Untitled Canvas"
    elements: List[Element] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    zoom: Optional[float] = None
    pan: Optional[PanOffset] = None
    metadata: Optional[CanvasMetadata] = None

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON-compatible dict with camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class CanvasSummary(CamelModel):
    """Listing entry for a saved canvas."""
    id: str
    name: str
    element_count: int
    updated_at: datetime
