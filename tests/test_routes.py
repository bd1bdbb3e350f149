"""
API Route Tests
===============

Runs the FastAPI app (with its lifespan) against a temporary project.
"""

import json

import pytest
from fastapi.testclient import TestClient

from canvas_sync.server import app

COMPONENT_INDEX = {
    "Card": {"path": "components/ui/index.tsx", "exportName": "Card", "props": {"children": "ReactNode"}},
    "Button": {"path": "components/ui/index.tsx", "exportName": "Button"},
}

CARD_FOREST = [
    {
        "kind": "markup",
        "id": "root",
        "tag": "div",
        "styles": {"padding": 16},
        "children": [
            {"kind": "component", "id": "card", "componentName": "Card", "children": [
                {"kind": "text", "id": "t", "text": "Hello"},
            ]},
        ],
    }
]


@pytest.fixture
def client(tmp_path, monkeypatch):
    index_dir = tmp_path / ".canvas-sync"
    index_dir.mkdir()
    (index_dir / "component_index.json").write_text(json.dumps(COMPONENT_INDEX))

    monkeypatch.setenv("CANVAS_SYNC_PROJECT_ROOT", str(tmp_path))
    monkeypatch.setenv("CANVAS_SYNC_MERGE_STRATEGY", "deterministic")
    with TestClient(app) as test_client:
        yield test_client


def test_health(client, tmp_path):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["projectRoot"] == str(tmp_path)
    assert data["alternateMerge"] is False
    assert data["components"] == 2


def test_parse(client):
    response = client.post("/api/codegen/parse", json={"source": "<Card><p>Hi</p></Card>"})
    assert response.status_code == 200
    [card] = response.json()["elements"]
    assert card["kind"] == "component"
    assert card["componentName"] == "Card"
    assert card["children"][0]["tag"] == "p"

    assert client.post("/api/codegen/parse", json={"source": "<div className=>x</div>"}).status_code == 400


def test_generate(client):
    response = client.post("/api/codegen/generate", json={"elements": CARD_FOREST})
    assert response.status_code == 200
    assert response.json() == {
        "code": "<div style={{ padding: 16 }}>\n  <Card>\n    Hello\n  </Card>\n</div>",
        "unresolvedComponents": [],
    }

    response = client.post("/api/codegen/generate", json={
        "elements": [{"kind": "component", "id": "g", "componentName": "Ghost"}],
        "mode": "file",
        "targetPath": "app/ghost-page.tsx",
    })
    data = response.json()
    assert data["code"].startswith("export default function GhostPage() {")
    assert data["unresolvedComponents"] == ["Ghost"]


def test_merge(client):
    existing = "export default function Page() {\n  return <span />\n}\n"
    response = client.post("/api/codegen/merge", json={"existingSource": existing, "elements": CARD_FOREST})
    assert response.status_code == 200
    assert response.json()["code"].startswith("import { Card } from '@/components/ui/index'\n")

    response = client.post("/api/codegen/merge", json={"existingSource": "export const x = 1\n", "elements": []})
    assert response.status_code == 422


def test_save_then_read_file(client, tmp_path):
    response = client.post("/api/files/app/page.tsx", json={"elements": CARD_FOREST})
    assert response.status_code == 200
    data = response.json()
    assert data["created"] is True
    assert data["strategy"] == "scaffold"
    assert (tmp_path / "app" / "page.tsx").read_text() == data["source"]

    response = client.get("/api/files/app/page.tsx")
    assert response.status_code == 200
    data = response.json()
    assert data["path"] == "app/page.tsx"
    assert data["returnMarkup"].startswith("<div style={{ padding: 16 }}>")
    assert data["elements"][0]["styles"] == {"padding": 16}
    assert data["elements"][0]["children"][0]["componentName"] == "Card"

    response = client.post("/api/files/app/page.tsx", json={"elements": [{"kind": "markup", "id": "m", "tag": "main"}]})
    assert response.json()["strategy"] == "deterministic"
    assert "Card" not in (tmp_path / "app" / "page.tsx").read_text()


def test_file_errors(client, tmp_path):
    assert client.get("/api/files/app/missing.tsx").status_code == 404

    (tmp_path / "lib").mkdir()
    (tmp_path / "lib" / "broken.tsx").write_text("export default function A() { return <div> }\n")
    assert client.post("/api/files/lib/broken.tsx", json={"elements": []}).status_code == 400

    (tmp_path / "lib" / "constants.ts").write_text("export const size = 2\n")
    assert client.post("/api/files/lib/constants.ts", json={"elements": []}).status_code == 422


def test_canvas_crud(client):
    response = client.post("/api/canvas/save", json={"name": "Home", "elements": CARD_FOREST, "zoom": 2})
    assert response.status_code == 200
    saved = response.json()
    canvas_id = saved["id"]
    assert canvas_id.startswith("canvas-")
    assert saved["elements"][0]["children"][0]["componentName"] == "Card"

    listing = client.get("/api/canvas").json()["canvases"]
    assert [(entry["id"], entry["elementCount"]) for entry in listing] == [(canvas_id, 3)]

    loaded = client.get(f"/api/canvas/{canvas_id}").json()
    assert loaded["name"] == "Home"
    assert loaded["zoom"] == 2

    assert client.delete(f"/api/canvas/{canvas_id}").status_code == 200
    assert client.get(f"/api/canvas/{canvas_id}").status_code == 404
    assert client.delete(f"/api/canvas/{canvas_id}").status_code == 404


def test_canvas_validation(client):
    duplicate = [
        {"kind": "markup", "id": "a", "tag": "div", "children": [{"kind": "markup", "id": "a", "tag": "p"}]}
    ]
    assert client.post("/api/canvas/save", json={"elements": duplicate}).status_code == 400
    assert client.get("/api/canvas/bad.id").status_code == 400
    assert client.post("/api/canvas/save", json={"elements": [{"kind": "bogus", "id": "x"}]}).status_code == 422
