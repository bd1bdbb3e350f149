"""
Component index loading.
"""

import json
import logging
from pathlib import Path

from ..models.component_models import ComponentIndex, load_component_index

logger = logging.getLogger(__name__)


def load_component_index_file(path: Path) -> ComponentIndex:
    """
    Read the component index written by the component scanner.

    A missing file yields an empty index: markup elements still work and
    every component reference is reported as unresolved.
    """
    if not path.exists():
        logger.warning(f"[COMPONENT-INDEX] {path} not found, using an empty component index")
        return {}
    with open(path) as f:
        index = load_component_index(json.load(f))
    logger.info(f"[COMPONENT-INDEX] Loaded {len(index)} components from {path}")
    return index
