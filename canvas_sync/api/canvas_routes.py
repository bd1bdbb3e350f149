"""
Canvas Routes
==============

API routes for saved canvases.
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, List
from pydantic import Field

from ..canvas.canvas_store import CanvasStore
from ..models.canvas_models import CanvasDocument, CanvasMetadata, PanOffset
from ..models.element_models import CamelModel, Element, validate_forest

router = APIRouter(prefix="/api/canvas", tags=["canvas"])

# Injected by server
canvas_store: Optional[CanvasStore] = None


def get_canvas_store() -> CanvasStore:
    """Dependency to get the canvas store."""
    if canvas_store is None:
        raise HTTPException(500, "Canvas store not initialized")
    return canvas_store


class CanvasSaveRequest(CamelModel):
    """Canvas to create (no id) or overwrite."""
    id: Optional[str] = None
    name: str = "Untitled Canvas"
    elements: List[Element] = Field(default_factory=list)
    zoom: Optional[float] = None
    pan: Optional[PanOffset] = None
    metadata: Optional[CanvasMetadata] = None


@router.post("/save")
async def save_canvas(request: CanvasSaveRequest, store: CanvasStore = Depends(get_canvas_store)):
    """Save a canvas."""
    problems = validate_forest(request.elements)
    if problems:
        raise HTTPException(400, f"Invalid element forest: {'; '.join(problems)}")

    document = CanvasDocument(
        id=request.id or store.new_id(),
        name=request.name,
        elements=request.elements,
        zoom=request.zoom,
        pan=request.pan,
        metadata=request.metadata,
    )
    try:
        saved = store.save(document)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return saved.to_json_dict()


@router.get("")
async def list_canvases(store: CanvasStore = Depends(get_canvas_store)):
    """List saved canvases."""
    return {"canvases": [summary.model_dump(by_alias=True, mode="json") for summary in store.list()]}


@router.get("/{canvas_id}")
async def get_canvas(canvas_id: str, store: CanvasStore = Depends(get_canvas_store)):
    """Load a saved canvas."""
    try:
        document = store.load(canvas_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if document is None:
        raise HTTPException(404, f"Canvas not found: {canvas_id}")
    return document.to_json_dict()


@router.delete("/{canvas_id}")
async def delete_canvas(canvas_id: str, store: CanvasStore = Depends(get_canvas_store)):
    """Delete a saved canvas."""
    try:
        deleted = store.delete(canvas_id)
    except ValueError as e:
        raise HTTPException(400, str(e))
    if not deleted:
        raise HTTPException(404, f"Canvas not found: {canvas_id}")
    return {"message": "Canvas deleted", "id": canvas_id}
