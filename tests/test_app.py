"""
Tests for the REST API.

Tests cover:
1. Health and root endpoints
2. Session artifacts, stats, export/import
3. Knowledge graph endpoints and error status mapping
4. Notebook endpoints
"""

import json

import pytest
from fastapi.testclient import TestClient

import app as app_module


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("REASONKIT_LOG_LEVEL", "WARNING")
    with TestClient(app_module.app) as test_client:
        yield test_client


def thought(number: int) -> dict:
    return {"thought": f"step {number}", "thought_number": number, "total_thoughts": 3}


class TestMeta:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["services_initialized"] is True
        assert body["persistence_enabled"] is False

    def test_root(self, client):
        assert client.get("/").json()["name"] == "ReasonKit API"


class TestSessions:
    def test_create_and_list(self, client):
        created = client.post("/sessions", json={"session_id": "sess-1"}).json()
        generated = client.post("/sessions", json={}).json()

        assert created["session_id"] == "sess-1"
        assert set(client.get("/sessions").json()) == {"sess-1", generated["session_id"]}

    def test_add_and_list_artifacts(self, client):
        response = client.post("/sessions/sess-1/artifacts/thought", json=thought(1))

        assert response.status_code == 200
        assert response.json() == {
            "session_id": "sess-1",
            "kind": "thought",
            "accepted": True,
            "remaining": 99,
        }
        items = client.get("/sessions/sess-1/artifacts/thought").json()
        assert [i["thought"] for i in items] == ["step 1"]

    def test_stats(self, client):
        client.post("/sessions/sess-1/artifacts/thought", json=thought(1))

        stats = client.get("/sessions/sess-1/stats").json()

        assert stats["thought_count"] == 1
        assert stats["tools_used"] == ["sequential-thinking"]

    def test_unknown_session_is_404(self, client):
        response = client.get("/sessions/missing/stats")

        assert response.status_code == 404
        assert response.json()["error"] == "NotFoundError"

    def test_unknown_kind_is_400(self, client):
        response = client.post("/sessions/sess-1/artifacts/telepathy", json={})

        assert response.status_code == 400

    def test_invalid_artifact_is_400(self, client):
        response = client.post("/sessions/sess-1/artifacts/thought", json={"thought": "x"})

        assert response.status_code == 400
        assert response.json()["context"] == {"kind": "thought"}

    def test_export_and_import(self, client):
        client.post("/sessions/sess-1/artifacts/thought", json=thought(1))
        client.post(
            "/sessions/sess-1/artifacts/decision",
            json={"decision_statement": "Pick a DB", "decision_id": "d1"},
        )

        exported = client.get("/sessions/sess-1/export").json()
        only_thoughts = client.get("/sessions/sess-1/export?store_type=sequential").json()
        imported = client.post("/sessions/sess-2/import", json=exported).json()

        assert len(exported) == 2
        assert [r["session_type"] for r in only_thoughts] == ["sequential"]
        assert imported == {"session_id": "sess-2", "imported": 2}

    def test_delete(self, client):
        client.post("/sessions", json={"session_id": "sess-1"})

        assert client.delete("/sessions/sess-1").status_code == 200
        assert client.delete("/sessions/sess-1").status_code == 404


class TestGraphs:
    def test_nodes_edges_and_metrics(self, client):
        base = "/sessions/sess-1/graphs/main"
        root = client.post(f"{base}/nodes", json={"content": "root"}).json()["node_id"]
        child = client.post(
            f"{base}/nodes", json={"content": "child", "depth": 1, "parent_id": root}
        ).json()

        edge = client.post(
            f"{base}/edges",
            json={"source_id": root, "target_id": child["node_id"], "edge_type": "supports"},
        )
        metrics = client.get(f"{base}/metrics").json()

        assert child["node_count"] == 2
        assert edge.status_code == 200
        assert metrics["node_count"] == 2
        assert metrics["edge_count"] == 1
        assert metrics["max_depth"] == 1

    def test_depth_limit_is_409(self, client):
        response = client.post(
            "/sessions/sess-1/graphs/main/nodes", json={"content": "deep", "depth": 11}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "DepthLimitError"

    def test_edge_to_missing_node_is_404(self, client):
        base = "/sessions/sess-1/graphs/main"
        root = client.post(f"{base}/nodes", json={"content": "root"}).json()["node_id"]

        response = client.post(f"{base}/edges", json={"source_id": root, "target_id": "nope"})

        assert response.status_code == 404

    def test_invalid_node_body_is_422(self, client):
        response = client.post(
            "/sessions/sess-1/graphs/main/nodes", json={"node_type": "not-a-type"}
        )

        assert response.status_code == 422

    def test_export_and_replace(self, client):
        client.post("/sessions/sess-1/graphs/main/nodes", json={"content": "root"})
        text = client.get("/sessions/sess-1/graphs/main").text

        response = client.put("/sessions/sess-2/graphs/copy", content=text)

        assert response.json() == {"graph_id": "copy", "nodes": 1, "edges": 0}

    def test_replace_beyond_mode_ceiling_is_409(self, client):
        client.post("/sessions/sess-1/graphs/main/nodes", json={"content": "deep", "depth": 9})
        payload = client.get("/sessions/sess-1/graphs/main").json()
        payload["mode"] = "development"

        response = client.put("/sessions/sess-1/graphs/dev", content=json.dumps(payload))

        assert response.status_code == 409
        assert response.json()["error"] == "DepthLimitError"

    def test_replace_with_garbage_is_400(self, client):
        response = client.put("/sessions/sess-1/graphs/main", content="{broken")

        assert response.status_code == 400


class TestNotebooks:
    def test_presets(self, client):
        names = {p["name"] for p in client.get("/notebooks/presets").json()}

        assert "tree_of_thought" in names

    def test_create_and_edit(self, client):
        notebook = client.post("/notebooks", json={"session_id": "sess-1"}).json()
        nb = f"/notebooks/{notebook['id']}"

        cell = client.post(f"{nb}/cells", json={"cell_type": "markdown", "source": "# Hi"}).json()
        updated = client.put(f"{nb}/cells/{cell['id']}", json={"source": "# Hello"}).json()
        exported = client.get(f"{nb}/export").text

        assert updated["source"] == "# Hello"
        assert exported == "# Hello\n\n"
        assert client.delete(f"{nb}/cells/{cell['id']}").status_code == 200
        assert client.get(nb).json()["cells"] == []
        assert client.delete(nb).status_code == 200
        assert client.get(nb).status_code == 404

    def test_create_from_preset(self, client):
        notebook = client.post(
            "/notebooks", json={"session_id": "sess-1", "preset": "beam_search"}
        ).json()

        assert notebook["metadata"] == {"preset": "beam_search"}
        assert len(notebook["cells"]) == 2

    def test_unknown_preset_is_400(self, client):
        response = client.post("/notebooks", json={"session_id": "sess-1", "preset": "nope"})

        assert response.status_code == 400

    def test_running_markdown_is_400(self, client):
        notebook = client.post("/notebooks", json={"session_id": "sess-1"}).json()
        nb = f"/notebooks/{notebook['id']}"
        cell = client.post(f"{nb}/cells", json={"cell_type": "markdown", "source": "x"}).json()

        response = client.post(f"{nb}/cells/{cell['id']}/run")

        assert response.status_code == 400

    def test_bad_export_format_is_422(self, client):
        notebook = client.post("/notebooks", json={"session_id": "sess-1"}).json()

        response = client.get(f"/notebooks/{notebook['id']}/export?format=pdf")

        assert response.status_code == 422

    @pytest.mark.slow
    def test_run_cell(self, client):
        notebook = client.post("/notebooks", json={"session_id": "sess-1"}).json()
        nb = f"/notebooks/{notebook['id']}"
        cell = client.post(
            f"{nb}/cells", json={"cell_type": "code", "source": "print('hi')\n6 * 7"}
        ).json()

        execution = client.post(f"{nb}/cells/{cell['id']}/run", json={"timeout": 10}).json()
        exported = client.get(f"{nb}/export").text

        assert execution["status"] == "complete"
        assert [o["data"] for o in execution["outputs"]] == ["hi", "42"]
        assert "**Output:**\n```\nhi\nResult: 42\n```" in exported

    @pytest.mark.slow
    def test_timeout_is_408(self, client):
        notebook = client.post("/notebooks", json={"session_id": "sess-1"}).json()
        nb = f"/notebooks/{notebook['id']}"
        cell = client.post(
            f"{nb}/cells", json={"cell_type": "code", "source": "while True:\n    pass"}
        ).json()

        response = client.post(f"{nb}/cells/{cell['id']}/run", json={"timeout": 1})

        assert response.status_code == 408
        assert response.json()["error"] == "ExecutionTimeoutError"
