"""
Component Index Models
======================

Read-only catalog of the project's reusable components, produced by the
component scanner and consumed for import synthesis and prop seeding.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class PropSchema(BaseModel):
    """Declared type of one component prop."""
    type: str = "any"
    required: bool = False

    @model_validator(mode="before")
    @classmethod
    def _accept_bare_type(cls, data: Any) -> Any:
        # Scanners sometimes emit just the type string
        if isinstance(data, str):
            return {"type": data}
        return data


class ComponentIndexEntry(BaseModel):
    """Where a component lives and which props it takes."""
    model_config = ConfigDict(populate_by_name=True)

    path: str
    export_name: str = Field(alias="exportName")
    props: Optional[Dict[str, PropSchema]] = None


ComponentIndex = Dict[str, ComponentIndexEntry]


def load_component_index(data: Dict[str, Any]) -> ComponentIndex:
    """Validate a raw ``{name: {path, exportName, props?}}`` mapping."""
    return {name: ComponentIndexEntry.model_validate(entry) for name, entry in data.items()}


def lookup_component(index: ComponentIndex, component_name: str) -> Optional[ComponentIndexEntry]:
    """
    Find the index entry for a component name.

    Dotted names (``Tabs.List``) resolve through their base identifier.
    """
    entry = index.get(component_name)
    if entry is None and "." in component_name:
        entry = index.get(component_name.split(".", 1)[0])
    return entry
