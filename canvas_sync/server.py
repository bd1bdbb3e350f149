"""
Canvas Sync Server
==================

FastAPI server for the visual component editor.

Features:
- Open component files as element forests and save edits back into them
- Deterministic or assistant-backed merge into existing files
- Markup parse/generate/merge endpoints
- Saved canvases with JSON persistence
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

from .config import Settings
from .canvas.canvas_store import CanvasStore
from .services.assistant_merge import select_alternate_strategy
from .services.component_index import load_component_index_file
from .services.file_sync import FileSyncService

# Import API routers
from .api import canvas_routes, codegen_routes, file_routes


# Shared service instances
settings: Settings = None
canvas_store: CanvasStore = None
file_sync: FileSyncService = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global settings, canvas_store, file_sync

    logger.info("[CANVAS-SYNC] Starting up...")

    settings = Settings.from_env()
    component_index = load_component_index_file(settings.resolve(settings.component_index_path))

    canvas_store = CanvasStore(canvases_dir=settings.resolve(settings.canvases_dir))

    file_sync = FileSyncService(
        project_root=settings.project_root,
        component_index=component_index,
        alternate=select_alternate_strategy(settings),
    )

    # Inject into route modules
    file_routes.file_sync = file_sync
    codegen_routes.component_index = component_index
    canvas_routes.canvas_store = canvas_store

    logger.info(f"[CANVAS-SYNC] Services initialized for {settings.project_root}")

    yield

    logger.info("[CANVAS-SYNC] Shutting down...")
    file_routes.file_sync = None
    codegen_routes.component_index = None
    canvas_routes.canvas_store = None


# Create FastAPI app
app = FastAPI(
    title="Canvas Sync",
    description="Round-trip visual editing of UI component source files",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Editor runs on its own dev origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(file_routes.router)
app.include_router(codegen_routes.router)
app.include_router(canvas_routes.router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "canvas-sync",
        "projectRoot": str(settings.project_root) if settings else None,
        "alternateMerge": bool(file_sync and file_sync.alternate),
        "components": len(file_sync.component_index) if file_sync else 0,
    }


def main():
    """Run the server with uvicorn."""
    import uvicorn
    port = Settings.from_env().port
    uvicorn.run("canvas_sync.server:app", host="0.0.0.0", port=port)


if __name__ == "__main__":
    main()
