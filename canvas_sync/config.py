"""
Canvas Sync Configuration
=========================

Settings read from ``CANVAS_SYNC_*`` environment variables.
"""

import os
from pathlib import Path
from typing import Literal
from pydantic import BaseModel, Field

MergeStrategyName = Literal["deterministic", "assistant", "auto"]
AssistantBackendName = Literal["cli", "vertex"]


class Settings(BaseModel):
    """Server and file sync configuration."""
    project_root: Path = Field(default_factory=Path.cwd)
    component_index_path: Path = Path(".canvas-sync/component_index.json")
    canvases_dir: Path = Path(".canvas-sync/canvases")
    merge_strategy: MergeStrategyName = "auto"
    assistant_backend: AssistantBackendName = "cli"
    assistant_command: str = "claude"
    assistant_timeout: float = Field(default=120.0, gt=0)
    port: int = 4001

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the environment; unset variables keep their defaults."""
        env = {
            "project_root": os.getenv("CANVAS_SYNC_PROJECT_ROOT"),
            "component_index_path": os.getenv("CANVAS_SYNC_COMPONENT_INDEX"),
            "canvases_dir": os.getenv("CANVAS_SYNC_CANVASES_DIR"),
            "merge_strategy": os.getenv("CANVAS_SYNC_MERGE_STRATEGY"),
            "assistant_backend": os.getenv("CANVAS_SYNC_ASSISTANT_BACKEND"),
            "assistant_command": os.getenv("CANVAS_SYNC_ASSISTANT_COMMAND"),
            "assistant_timeout": os.getenv("CANVAS_SYNC_ASSISTANT_TIMEOUT"),
            "port": os.getenv("CANVAS_SYNC_PORT"),
        }
        return cls(**{key: value for key, value in env.items() if value})

    def resolve(self, path: Path) -> Path:
        """``path`` made absolute against the project root."""
        return path if path.is_absolute() else self.project_root / path
