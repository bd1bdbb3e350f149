"""
File Routes
===========

API routes for reading component files and saving edited forests into them.
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, Dict, Any, List
from pydantic import Field

from ..codegen.errors import (
    AlternateMergeFailure,
    ComponentReturnNotFound,
    ParseFailure,
    PathOutsideProject,
)
from ..models.element_models import CamelModel, Element, dump_forest
from ..services.file_sync import FileSyncService

router = APIRouter(prefix="/api/files", tags=["files"])

# Injected by server
file_sync: Optional[FileSyncService] = None


def get_file_sync() -> FileSyncService:
    """Dependency to get the file sync service."""
    if file_sync is None:
        raise HTTPException(500, "File sync service not initialized")
    return file_sync


class SaveFileRequest(CamelModel):
    """Edited forest to write into a file."""
    elements: List[Element] = Field(default_factory=list)
    mock_bindings: Optional[Dict[str, Any]] = None
    use_alternate: Optional[bool] = None


@router.get("/{path:path}")
async def read_file(path: str, service: FileSyncService = Depends(get_file_sync)):
    """Open a component file for editing."""
    try:
        component = service.read_component(path)
    except PathOutsideProject as e:
        raise HTTPException(403, str(e))
    except FileNotFoundError:
        raise HTTPException(404, f"File not found: {path}")
    except ParseFailure as e:
        raise HTTPException(400, str(e))

    extracted = component.extracted
    return {
        "path": component.path,
        "source": component.source,
        "returnMarkup": extracted.return_markup if extracted else None,
        "variables": extracted.variables if extracted else [],
        "props": extracted.props if extracted else [],
        "initialValues": extracted.initial_values if extracted else {},
        "mockValues": component.mock_values,
        "elements": dump_forest(component.elements),
    }


@router.post("/{path:path}")
async def save_file(path: str, request: SaveFileRequest, service: FileSyncService = Depends(get_file_sync)):
    """Save an edited forest, creating or merging into the file."""
    try:
        result = await service.save(
            path,
            request.elements,
            mock_bindings=request.mock_bindings,
            use_alternate=request.use_alternate,
        )
    except PathOutsideProject as e:
        raise HTTPException(403, str(e))
    except ParseFailure as e:
        raise HTTPException(400, str(e))
    except ComponentReturnNotFound as e:
        raise HTTPException(422, str(e))
    except AlternateMergeFailure as e:
        raise HTTPException(502, f"Alternate merge failed ({e.reason}): {e}")

    return {
        "path": result.path,
        "created": result.created,
        "strategy": result.strategy,
        "source": result.source,
        "unresolvedComponents": result.unresolved_components,
    }
