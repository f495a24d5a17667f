"""
Tests for the unified store.

Tests cover:
1. Kind-tagged records, stats and export/import by type
2. Auxiliary graph projection (kind labels, session HAS_ITEM edges)
3. Debounced persistence, flush/reload and corrupt-file recovery
"""

import json

import pytest

from reasonkit.config import PersistenceConfig
from reasonkit.core.unified_store import UnifiedStore
from reasonkit.core.unified_store.unified_store import DATA_FILE, HAS_ITEM
from reasonkit.models import (
    ArtifactKind,
    AuxiliaryGraph,
    AuxiliaryNode,
    DecisionData,
    ThoughtData,
    UnifiedRecord,
)


def thought(number: int = 1) -> ThoughtData:
    return ThoughtData(thought=f"t{number}", thought_number=number, total_thoughts=3)


@pytest.fixture
def persistence(tmp_path) -> PersistenceConfig:
    return PersistenceConfig(enabled=True, directory=str(tmp_path / "data"))


class TestRecords:
    def test_add_and_query(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought())
        store.add_artifact(
            "decision_1",
            ArtifactKind.DECISION,
            DecisionData(decision_statement="Pick a DB", decision_id="dec-1"),
        )

        assert store.size() == 2
        assert store.get("thought_1").data["thought"] == "t1"
        assert [r.kind for r in store.get_by_type("decision")] == [ArtifactKind.DECISION]
        assert store.get_stats() == {"thought": 1, "decision": 1}

    def test_clear(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought())

        store.clear()

        assert store.size() == 0
        assert store.get_knowledge_graph().nodes == []

    def test_export_import_by_type(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought(1))
        store.add_artifact("thought_2", ArtifactKind.THOUGHT, thought(2))
        exported = store.export_by_type()

        other = UnifiedStore(scheduler=scheduler)
        other.add("stale", UnifiedRecord(kind=ArtifactKind.CREATIVE, data={}))
        count = other.import_by_type(exported)

        assert count == 2
        assert other.get("stale") is None
        assert other.get_stats() == {"thought": 2}
        assert [r.data["thought_number"] for r in other.get_by_type("thought")] == [1, 2]


class TestAuxiliaryGraph:
    def test_projection_with_session_key(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        store.add_artifact(
            "decision_1",
            ArtifactKind.DECISION,
            DecisionData(decision_statement="Pick a DB", decision_id="dec-1"),
        )

        graph = store.get_knowledge_graph()
        item = graph.find_node("decision_1")
        session = graph.find_node("session:dec-1")
        edge = graph.find_edge(f"session:dec-1::{HAS_ITEM}::decision_1")

        assert item.type == "decision"
        assert item.labels == ["decision"]
        assert session.labels == ["session"]
        assert edge.from_id == "session:dec-1"
        assert edge.to_id == "decision_1"

    def test_projection_without_session_key(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought())

        graph = store.get_knowledge_graph()
        assert [n.id for n in graph.nodes] == ["thought_1"]
        assert graph.edges == []

    def test_re_adding_does_not_duplicate(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        decision = DecisionData(decision_statement="Pick a DB", decision_id="dec-1")
        store.add_artifact("decision_1", ArtifactKind.DECISION, decision)
        store.add_artifact("decision_1", ArtifactKind.DECISION, decision)

        graph = store.get_knowledge_graph()
        assert len(graph.nodes) == 2
        assert len(graph.edges) == 1
        assert graph.find_node("decision_1").labels == ["decision"]

    def test_relate_merges_properties(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        first = store.relate("a", "b", "CITES", {"weight": 1})
        second = store.relate("a", "b", "CITES", {"note": "x"})

        assert first is second
        assert second.properties == {"weight": 1, "note": "x"}

    def test_tag_unknown_node_ignored(self, scheduler):
        store = UnifiedStore(scheduler=scheduler)
        store.tag_node("missing", "label")

        assert store.get_knowledge_graph().nodes == []

    def test_loaded_graph_is_indexed(self):
        graph = AuxiliaryGraph.model_validate(
            {
                "nodes": [{"id": "a", "type": "thought"}],
                "edges": [{"id": "a::CITES::b", "from": "a", "to": "b", "relation": "CITES"}],
            }
        )
        graph.add_node(AuxiliaryNode(id="b", type="thought"))

        assert graph.find_node("a").type == "thought"
        assert graph.find_node("b") is graph.nodes[-1]
        assert graph.find_edge("a::CITES::b").to_id == "b"
        assert graph.find_node("missing") is None
        assert "_node_index" not in graph.model_dump()


class TestPersistence:
    def test_disabled_by_default(self, scheduler, tmp_path):
        store = UnifiedStore(scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought())

        assert store.data_path is None
        assert scheduler.pending() == []

    def test_writes_are_debounced(self, scheduler, persistence):
        store = UnifiedStore(persistence, scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought(1))
        store.add_artifact("thought_2", ArtifactKind.THOUGHT, thought(2))

        assert len(scheduler.pending()) == 1
        assert not store.data_path.exists()

        scheduler.advance(persistence.debounce_seconds)

        entries = json.loads(store.data_path.read_text())
        assert [item_id for item_id, _ in entries] == ["thought_1", "thought_2"]
        assert store.graph_path.exists()

    def test_flush_and_reload(self, scheduler, persistence):
        store = UnifiedStore(persistence, scheduler=scheduler)
        store.add_artifact(
            "decision_1",
            ArtifactKind.DECISION,
            DecisionData(decision_statement="Pick a DB", decision_id="dec-1"),
        )
        store.flush()

        assert scheduler.pending() == []

        reloaded = UnifiedStore(persistence, scheduler=scheduler)
        assert reloaded.get("decision_1").data["decision_id"] == "dec-1"
        assert reloaded.get_knowledge_graph().find_node("session:dec-1") is not None

    def test_graph_file_uses_from_to_keys(self, scheduler, persistence):
        store = UnifiedStore(persistence, scheduler=scheduler)
        store.add_artifact(
            "decision_1",
            ArtifactKind.DECISION,
            DecisionData(decision_statement="Pick a DB", decision_id="dec-1"),
        )
        store.flush()

        payload = json.loads(store.graph_path.read_text())
        assert payload["edges"][0]["from"] == "session:dec-1"
        assert payload["edges"][0]["to"] == "decision_1"
        assert "updatedAt" in payload

    def test_close_flushes_pending(self, scheduler, persistence):
        store = UnifiedStore(persistence, scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought())

        store.close()

        assert store.data_path.exists()
        assert scheduler.pending() == []

    def test_corrupt_file_starts_empty(self, scheduler, persistence, tmp_path):
        directory = tmp_path / "data"
        directory.mkdir()
        (directory / DATA_FILE).write_text("{not json")
        (directory / persistence.knowledge_graph_file).write_text("[1, 2")

        store = UnifiedStore(persistence, scheduler=scheduler)

        assert store.size() == 0
        assert store.get_knowledge_graph().nodes == []

    def test_write_failure_is_not_raised(self, scheduler, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        config = PersistenceConfig(enabled=True, directory=str(blocker))

        store = UnifiedStore(config, scheduler=scheduler)
        store.add_artifact("thought_1", ArtifactKind.THOUGHT, thought())
        store.flush()

        assert store.size() == 1
