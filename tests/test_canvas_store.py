"""
Canvas store tests.
"""

import json
import time

import pytest

from canvas_sync.canvas.canvas_store import CanvasStore
from canvas_sync.models.canvas_models import CanvasDocument, PanOffset
from canvas_sync.models.element_models import structure_signature


def test_save_and_load_round_trip(tmp_path, forest):
    store = CanvasStore(tmp_path / "canvases")
    saved = store.save(CanvasDocument(id="landing", name="Landing", elements=forest, zoom=1.5, pan=PanOffset(x=4, y=8)))

    on_disk = json.loads((tmp_path / "canvases" / "landing.json").read_text())
    assert on_disk["name"] == "Landing"
    assert on_disk["elements"][0]["canvasPosition"] == {"x": 10.0, "y": 20.0}
    assert "createdAt" in on_disk and "updatedAt" in on_disk

    reloaded = CanvasStore(tmp_path / "canvases").load("landing")
    assert reloaded.name == "Landing"
    assert reloaded.zoom == 1.5
    assert reloaded.pan == PanOffset(x=4, y=8)
    assert structure_signature(reloaded.elements) == structure_signature(forest)
    assert reloaded.elements[0].canvas_position == saved.elements[0].canvas_position


def test_resave_keeps_creation_time(tmp_path):
    store = CanvasStore(tmp_path)
    first = store.save(CanvasDocument(id="c1"))
    time.sleep(0.01)
    second = store.save(CanvasDocument(id="c1", name="Renamed"))
    assert second.created_at == first.created_at
    assert second.updated_at > first.updated_at
    assert store.load("c1").name == "Renamed"


def test_list_most_recent_first(tmp_path, forest):
    store = CanvasStore(tmp_path)
    store.save(CanvasDocument(id="older", elements=forest))
    time.sleep(0.01)
    store.save(CanvasDocument(id="newer"))

    summaries = store.list()
    assert [summary.id for summary in summaries] == ["newer", "older"]
    assert summaries[1].element_count == 5
    assert summaries[0].element_count == 0


def test_missing_and_invalid_ids(tmp_path):
    store = CanvasStore(tmp_path)
    assert store.load("nope") is None
    assert store.delete("nope") is False
    with pytest.raises(ValueError):
        store.load("../escape")
    assert store.new_id().startswith("canvas-")


def test_delete(tmp_path):
    store = CanvasStore(tmp_path)
    store.save(CanvasDocument(id="gone"))
    assert store.delete("gone") is True
    assert store.load("gone") is None
    assert not (tmp_path / "gone.json").exists()
