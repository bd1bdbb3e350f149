"""
Errors raised by the round-trip pipeline.
"""

from typing import Optional


class CanvasSyncError(Exception):
    """Base class for canvas sync failures."""


class ParseFailure(CanvasSyncError):
    """Source text is not syntactically valid markup/TSX."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        location = f" (line {line}, column {column})" if line is not None else ""
        super().__init__(f"{message}{location}")


class ComponentReturnNotFound(CanvasSyncError):
    """The source has no recognizable component function returning markup."""


class MergeTargetNotFound(ComponentReturnNotFound):
    """Deterministic merge found nothing to replace; nothing was written."""


class AlternateMergeFailure(CanvasSyncError):
    """
    The assistant-backed merge did not produce usable source.

    ``reason`` is one of ``timeout``, ``process``, ``network``,
    ``empty_response``, ``invalid_source`` or ``unavailable``.
    """

    def __init__(self, message: str, reason: str = "process"):
        self.reason = reason
        super().__init__(message)


class PathOutsideProject(CanvasSyncError):
    """A requested file path resolves outside the project root."""


class UnresolvedComponentReference(UserWarning):
    """A component in the tree is missing from the Component Index; its import was skipped."""

    def __init__(self, component_name: str):
        self.component_name = component_name
        super().__init__(f"Component '{component_name}' not found in component index")
