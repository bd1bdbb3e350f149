"""
Codegen Routes
==============

Stateless API routes around the markup parser, generator and merge engine.
"""

from fastapi import APIRouter, Depends, HTTPException
from typing import Optional, List, Literal
from pydantic import Field

from ..codegen.errors import ComponentReturnNotFound, ParseFailure
from ..codegen.generator import component_name_from_path, generate_complete_file, generate_markup
from ..codegen.imports import find_unresolved_components
from ..codegen.merge import merge_into_existing_file
from ..codegen.parser import parse_markup
from ..models.component_models import ComponentIndex
from ..models.element_models import CamelModel, Element, dump_forest

router = APIRouter(prefix="/api/codegen", tags=["codegen"])

# Injected by server
component_index: Optional[ComponentIndex] = None


def get_component_index() -> ComponentIndex:
    """Dependency to get the component index."""
    if component_index is None:
        raise HTTPException(500, "Component index not loaded")
    return component_index


class ParseRequest(CamelModel):
    source: str


class GenerateRequest(CamelModel):
    """Render a forest as markup or as a whole component file."""
    elements: List[Element] = Field(default_factory=list)
    mode: Literal["markup", "file"] = "markup"
    component_name: Optional[str] = None
    target_path: Optional[str] = None


class MergeRequest(CamelModel):
    existing_source: str
    elements: List[Element] = Field(default_factory=list)
    target_path: Optional[str] = None


@router.post("/parse")
async def parse(request: ParseRequest):
    """Parse markup source into an element forest."""
    try:
        elements = parse_markup(request.source)
    except ParseFailure as e:
        raise HTTPException(400, str(e))
    return {"elements": dump_forest(elements)}


@router.post("/generate")
async def generate(request: GenerateRequest, index: ComponentIndex = Depends(get_component_index)):
    """Generate markup (or a complete file) from an element forest."""
    if request.mode == "file":
        name = request.component_name or component_name_from_path(request.target_path or "Component.tsx")
        code = generate_complete_file(name, request.elements, index, target_path=request.target_path)
    else:
        code = generate_markup(request.elements)
    return {
        "code": code,
        "unresolvedComponents": find_unresolved_components(request.elements, index),
    }


@router.post("/merge")
async def merge(request: MergeRequest, index: ComponentIndex = Depends(get_component_index)):
    """Deterministically merge a forest into existing source without writing anything."""
    try:
        code = merge_into_existing_file(request.existing_source, request.elements, index, request.target_path)
    except ParseFailure as e:
        raise HTTPException(400, str(e))
    except ComponentReturnNotFound as e:
        raise HTTPException(422, str(e))
    return {
        "code": code,
        "unresolvedComponents": find_unresolved_components(request.elements, index),
    }
