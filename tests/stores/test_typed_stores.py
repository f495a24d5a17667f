"""
Tests for typed artifact stores.

Tests cover:
1. Generic keyed container behaviour
2. Secondary indices staying consistent under add / replace / delete / clear
3. Per-kind queries and statistics
"""

import pytest

from reasonkit.core.stores import (
    STORE_TYPES,
    ArgumentStore,
    CollaborativeStore,
    CreativeStore,
    DebuggingStore,
    DecisionStore,
    MentalModelStore,
    MetacognitiveStore,
    ScientificStore,
    SystemsStore,
    ThoughtStore,
    VisualStore,
)
from reasonkit.core.stores.mental_model_store import keywords_of
from reasonkit.models import (
    ArgumentData,
    ArtifactKind,
    CollaborativeSession,
    CreativeData,
    DebuggingSession,
    DecisionData,
    MentalModelData,
    MetacognitiveData,
    ScientificInquiryData,
    SystemsData,
    ThoughtData,
    VisualData,
)


def thought(number: int, **kwargs) -> ThoughtData:
    return ThoughtData(
        thought=f"thought {number}", thought_number=number, total_thoughts=5, **kwargs
    )


class TestTypedStore:
    """Generic container operations, exercised through ThoughtStore."""

    def test_add_get_has(self):
        store = ThoughtStore()
        store.add("t1", thought(1))

        assert store.has("t1")
        assert "t1" in store
        assert store.get("t1").thought == "thought 1"
        assert store.get("missing") is None
        assert store.size() == len(store) == 1

    def test_replace_keeps_single_entry(self):
        store = ThoughtStore()
        store.add("t1", thought(1))
        store.add("t1", thought(2))

        assert store.size() == 1
        assert store.get("t1").thought_number == 2

    def test_update(self):
        store = ThoughtStore()
        store.add("t1", thought(1))

        assert store.update("t1", lambda t: t.model_copy(update={"thought": "edited"}))
        assert store.get("t1").thought == "edited"
        assert store.update("missing", lambda t: t) is False

    def test_delete(self):
        store = ThoughtStore()
        store.add("t1", thought(1))

        assert store.delete("t1") is True
        assert store.delete("t1") is False
        assert store.size() == 0

    def test_filter_find_for_each(self):
        store = ThoughtStore()
        for n in (1, 2, 3):
            store.add(f"t{n}", thought(n))

        assert [t.thought_number for t in store.filter(lambda t: t.thought_number > 1)] == [2, 3]
        assert store.find(lambda t: t.thought_number == 2).thought == "thought 2"
        assert store.find(lambda t: t.thought_number == 9) is None

        seen = []
        store.for_each(lambda item, item_id: seen.append(item_id))
        assert seen == ["t1", "t2", "t3"]

    def test_export_import(self):
        store = ThoughtStore()
        store.add("t1", thought(1, branch_id="b"))
        exported = store.export()

        other = ThoughtStore()
        other.add("stale", thought(4))
        other.import_data(exported)

        assert other.keys() == ["t1"]
        assert len(other.get_branch("b")) == 1

    def test_get_all_is_a_snapshot(self):
        store = ThoughtStore()
        store.add("t1", thought(1))
        snapshot = store.get_all()
        store.add("t2", thought(2))

        assert len(snapshot) == 1

    def test_store_types_cover_every_kind(self):
        assert set(STORE_TYPES) == set(ArtifactKind)
        assert STORE_TYPES[ArtifactKind.SOCRATIC] is ArgumentStore


class TestThoughtStore:
    def test_chronological_order(self):
        store = ThoughtStore()
        store.add("c", thought(3))
        store.add("a", thought(1))
        store.add("b", thought(2))

        assert [t.thought_number for t in store.get_all()] == [1, 2, 3]
        assert store.get_latest().thought_number == 3
        assert [t.thought_number for t in store.get_range(2, 3)] == [2, 3]

    def test_branches_and_revisions(self):
        store = ThoughtStore()
        store.add("t1", thought(1))
        store.add("t2", thought(2, branch_from_thought=1, branch_id="alt"))
        store.add("t3", thought(3, is_revision=True, revises_thought=1))

        assert [t.thought_number for t in store.get_branch("alt")] == [2]
        assert list(store.get_all_branches()) == ["alt"]
        assert [t.thought_number for t in store.get_revisions(1)] == [3]

        stats = store.get_statistics()
        assert stats == {"total": 3, "regular": 1, "revisions": 1, "branched": 1, "branches": 1}

    def test_delete_drops_index_entries(self):
        store = ThoughtStore()
        store.add("t2", thought(2, branch_id="alt"))
        store.add("t3", thought(3, is_revision=True, revises_thought=1))

        store.delete("t2")
        store.delete("t3")

        assert store.get_branch("alt") == []
        assert store.get_all_branches() == {}
        assert store.get_revisions(1) == []

    def test_replace_moves_index_entry(self):
        store = ThoughtStore()
        store.add("t1", thought(1, branch_id="old"))
        store.add("t1", thought(1, branch_id="new"))

        assert store.get_branch("old") == []
        assert len(store.get_branch("new")) == 1

    def test_clear_resets_indices(self):
        store = ThoughtStore()
        store.add("t1", thought(1, branch_id="alt"))
        store.clear()

        assert store.size() == 0
        assert store.get_all_branches() == {}

    def test_pending_thoughts(self):
        store = ThoughtStore()
        store.add("t1", thought(1, next_thought_needed=True))
        store.add("t2", thought(2))

        assert [t.thought_number for t in store.get_pending_thoughts()] == [1]


class TestMentalModelStores:
    def test_keywords_of(self):
        assert keywords_of("The API is slow under load") == {"slow", "under", "load"}

    def test_mental_models(self):
        store = MentalModelStore()
        store.add("m1", MentalModelData(model_name="first_principles", problem="Scale the API"))
        store.add("m2", MentalModelData(model_name="first_principles", problem="Reduce cost"))
        store.add("m3", MentalModelData(model_name="pareto", problem="Scale the API"))

        assert len(store.get_by_model("first_principles")) == 2
        assert store.get_unique_problems() == ["Scale the API", "Reduce cost"]
        assert len(store.find_similar_applications("scale")) == 2
        assert store.get_most_used_model() == ("first_principles", 2)
        assert store.get_statistics() == {"first_principles": 2, "pareto": 1}

    def test_most_used_model_empty(self):
        assert MentalModelStore().get_most_used_model() is None

    def test_debugging(self):
        store = DebuggingStore()
        store.add(
            "d1",
            DebuggingSession(
                approach_name="binary_search", issue="Memory leak in worker", resolution="fixed"
            ),
        )
        store.add("d2", DebuggingSession(approach_name="binary_search", issue="Slow startup"))
        store.add(
            "d3",
            DebuggingSession(approach_name="cause_elimination", issue="Worker crash", resolution="ok"),
        )

        assert len(store.get_by_approach("binary_search")) == 2
        assert {s.issue for s in store.search_by_issue("worker")} == {
            "Memory leak in worker",
            "Worker crash",
        }
        assert len(store.get_resolved_sessions()) == 2
        assert store.get_most_effective_approach() == ("cause_elimination", 1.0)

        stats = store.get_statistics()
        assert stats["total_sessions"] == 3
        assert stats["resolved_sessions"] == 2
        assert stats["approach_usage"] == {"binary_search": 2, "cause_elimination": 1}
        assert stats["success_rate"] == pytest.approx(2 / 3)

    def test_debugging_keyword_index_follows_delete(self):
        store = DebuggingStore()
        store.add("d1", DebuggingSession(approach_name="a", issue="Memory leak"))
        store.delete("d1")

        assert store.search_by_issue("memory") == []


class TestCollaborativeStores:
    def test_collaborative(self):
        store = CollaborativeStore()
        store.add(
            "c1",
            CollaborativeSession(
                topic="API design",
                session_id="collab-1",
                personas=[{"id": "p1", "name": "Architect"}],
                contributions=[
                    {"persona_id": "p1", "content": "Use REST", "confidence": 0.8},
                    {"persona_id": "p1", "content": "Version it", "type": "suggestion"},
                ],
                consensus_points=["REST"],
                next_contribution_needed=True,
            ),
        )
        store.add("c2", CollaborativeSession(topic="Database choice", session_id="collab-2"))

        assert store.get_by_session_id("collab-1").topic == "API design"
        assert store.get_by_session_id("nope") is None
        assert [s.session_id for s in store.get_by_topic("api")] == ["collab-1"]
        assert len(store.get_by_persona("p1")) == 1
        assert len(store.get_active_sessions()) == 1
        assert len(store.get_consensus_sessions()) == 1
        assert store.get_disagreement_sessions() == []

        contribution_stats = store.get_contribution_stats("c1")
        assert contribution_stats is not None
        assert store.get_contribution_stats("missing") is None
        assert store.get_stage_distribution() == {"problem-definition": 2}

    def test_decisions(self):
        store = DecisionStore()
        store.add(
            "d1",
            DecisionData(
                decision_statement="Choose a database engine",
                decision_id="dec-1",
                options=[{"id": "pg", "name": "Postgres"}, {"id": "my", "name": "MySQL"}],
                criteria=[{"id": "perf", "name": "Performance"}],
                expected_values={"pg": 0.8, "my": 0.6},
                recommendation="Postgres",
            ),
        )
        store.add(
            "d2",
            DecisionData(
                decision_statement="Choose a database host",
                decision_id="dec-1",
                stage="evaluation",
                next_stage_needed=True,
            ),
        )

        assert store.get_by_decision_id("dec-1").stage == "evaluation"
        assert len(store.search_decisions("database")) == 2
        assert len(store.get_by_analysis_type("weighted-criteria")) == 2
        assert len(store.get_by_stage("evaluation")) == 1
        assert len(store.get_completed_decisions()) == 1
        assert len(store.get_active_decisions()) == 1
        assert store.get_best_option("d1") == "pg"
        assert store.get_best_option("d2") is None

        quality = store.get_decision_quality("d1")
        assert quality["breakdown"]["has_multiple_options"] is True
        assert quality["breakdown"]["has_stakeholders"] is False
        assert quality["score"] == pytest.approx(3 / 9)
        assert quality["completeness"] == "33%"
        assert store.get_decision_quality("missing") is None

        stats = store.get_statistics()
        assert stats["total_decisions"] == 2
        assert stats["completion_rate"] == 0.5


class TestInquiryStores:
    def test_metacognitive(self):
        store = MetacognitiveStore()
        store.add(
            "m1",
            MetacognitiveData(
                task="Estimate latency",
                monitoring_id="mon-1",
                overall_confidence=0.3,
                uncertainty_areas=["network", "cache", "disk"],
                knowledge_assessment={"domain": "networking", "confidence_score": 0.4},
                claims=[{"claim": "p99 < 100ms", "status": "speculation"}],
            ),
        )
        store.add(
            "m2",
            MetacognitiveData(task="Estimate latency", monitoring_id="mon-1", overall_confidence=0.7),
        )

        assert store.get_by_monitoring_id("mon-1").overall_confidence == 0.7
        assert len(store.get_by_task("Estimate latency")) == 2
        assert len(store.get_knowledge_by_domain("networking")) == 1
        assert store.get_assessed_domains() == ["networking"]
        assert len(store.get_low_confidence_sessions()) == 1
        assert len(store.get_high_uncertainty_sessions()) == 1
        assert [p["confidence"] for p in store.get_confidence_trend("mon-1")] == [0.3, 0.7]

    def test_scientific(self):
        store = ScientificStore()
        store.add(
            "s1",
            ScientificInquiryData(
                inquiry_id="inq-1",
                stage="hypothesis",
                hypothesis={"hypothesis_id": "h1", "statement": "Caching helps"},
                next_stage_needed=True,
            ),
        )
        store.add(
            "s2",
            ScientificInquiryData(
                inquiry_id="inq-1",
                stage="experiment",
                hypothesis={
                    "hypothesis_id": "h1",
                    "statement": "Caching helps a lot",
                    "status": "supported",
                    "iteration": 1,
                },
                experiment={
                    "experiment_id": "e1",
                    "hypothesis_id": "h1",
                    "design": "A/B",
                    "outcome_matched": True,
                    "unexpected_observations": ["memory spike"],
                },
                conclusion="Supported",
            ),
        )
        store.add(
            "s3",
            ScientificInquiryData(
                inquiry_id="inq-1",
                stage="hypothesis",
                hypothesis={
                    "hypothesis_id": "h2",
                    "statement": "Caching helps reads only",
                    "refinement_of": "h1",
                },
            ),
        )

        assert len(store.get_by_inquiry("inq-1")) == 3
        assert store.get_latest_for_inquiry("inq-1").hypothesis.hypothesis_id == "h2"
        assert store.get_hypothesis("h1").statement == "Caching helps a lot"
        assert store.get_experiment("e1").design == "A/B"
        assert len(store.get_hypotheses_by_status("supported")) == 1
        assert len(store.get_successful_experiments()) == 1
        assert len(store.get_experiments_with_surprises()) == 1
        assert len(store.get_active_inquiries()) == 1
        assert len(store.get_completed_inquiries()) == 1
        assert [h.hypothesis_id for h in store.get_hypothesis_evolution("h1")] == ["h1", "h2"]


class TestCreativeStores:
    def test_creative(self):
        store = CreativeStore()
        store.add(
            "c1",
            CreativeData(
                prompt="New onboarding flow",
                session_id="cr-1",
                ideas=["guided tour", "guided checklist"],
                techniques=["scamper", "brainstorm"],
                insights=["users skip tours"],
            ),
        )
        store.add(
            "c2",
            CreativeData(prompt="Retention ideas", session_id="cr-2", techniques=["scamper"]),
        )

        assert len(store.get_by_technique("scamper")) == 2
        assert [s.session_id for s in store.get_similar_prompts("onboarding")] == ["cr-1"]
        assert [s.session_id for s in store.find_cross_pollination("c1")] == ["cr-2"]
        assert store.get_top_techniques(1) == [("scamper", 2)]

        metrics = store.get_creativity_metrics("c1")
        assert metrics["idea_count"] == 2
        assert metrics["idea_diversity"] == pytest.approx(3 / 4)
        assert metrics["insight_ratio"] == 0.5
        assert store.get_creativity_metrics("missing") is None

    def test_systems(self):
        store = SystemsStore()
        store.add(
            "s1",
            SystemsData(
                system="Checkout",
                session_id="sys-1",
                components=["cart", "payment", "inventory"],
                feedback_loops=[{"components": ["cart", "payment"], "type": "negative"}],
            ),
        )
        store.add(
            "s2",
            SystemsData(system="Fulfilment", session_id="sys-2", components=["inventory", "shipping"]),
        )

        assert len(store.get_systems_with_component("inventory")) == 2
        assert len(store.get_systems_with_feedback_loops()) == 1
        assert store.get_systems_with_feedback_loops("positive") == []
        assert [s.system for s in store.find_related_systems("s1")] == ["Fulfilment"]
        assert store.get_component_co_occurrence()["cart|payment"] == 1


class TestVisualStore:
    def test_state_replays_operations(self):
        store = VisualStore()
        store.add(
            "v1",
            VisualData(
                diagram_id="d1",
                elements=[{"id": "a", "label": "A"}, {"id": "b", "label": "B"}],
            ),
        )
        store.add(
            "v2",
            VisualData(
                diagram_id="d1",
                operation="update",
                elements=[{"id": "a", "label": "A2"}, {"id": "c", "label": "C"}],
            ),
        )
        store.add(
            "v3",
            VisualData(diagram_id="d1", operation="delete", elements=[{"id": "b"}]),
        )
        store.add(
            "v4",
            VisualData(diagram_id="d1", operation="transform", elements=[{"id": "zz", "label": "Z"}]),
        )

        state = store.get_diagram_state("d1")
        assert [(e.id, e.label) for e in state] == [("a", "A2"), ("c", "C")]

    def test_delete_operation_rebuilds_state(self):
        store = VisualStore()
        store.add("v1", VisualData(diagram_id="d1", elements=[{"id": "a"}]))
        store.add("v2", VisualData(diagram_id="d1", elements=[{"id": "b"}]))

        store.delete("v2")

        assert [e.id for e in store.get_diagram_state("d1")] == ["a"]
        store.delete("v1")
        assert store.get_diagram_state("d1") == []
        assert store.get_diagrams_by_type("graph") == []

    def test_queries(self):
        store = VisualStore()
        store.add(
            "v1",
            VisualData(
                diagram_id="d1",
                elements=[
                    {"id": "a", "type": "node"},
                    {"id": "b", "type": "node"},
                    {"id": "e", "type": "edge", "source": "a", "target": "b"},
                ],
                insight="a feeds b",
            ),
        )
        store.add("v2", VisualData(diagram_id="d2", diagram_type="flowchart"))

        assert store.get_latest_for_diagram("d1").insight == "a feeds b"
        assert store.get_diagrams_by_type("flowchart") == ["d2"]

        complexity = store.get_diagram_complexity("d1")
        assert complexity["node_count"] == 2
        assert complexity["edge_count"] == 1
        assert complexity["connection_density"] == 1.0
        assert complexity["insight_count"] == 1
        assert store.get_statistics()["total_diagrams"] == 2


class TestArgumentStore:
    def test_indices_and_statistics(self):
        store = ArgumentStore()
        store.add("a1", ArgumentData(claim="X", argument_type="deductive", confidence=0.8))
        store.add(
            "a2",
            ArgumentData(claim="Y", argument_type="inductive", confidence=0.4, session_id="s1"),
        )

        assert len(store.get_by_type("deductive")) == 1
        assert len(store.get_by_session("s1")) == 1
        assert store.get_average_confidence() == pytest.approx(0.6)
        assert store.get_statistics()["type_distribution"] == {"deductive": 1, "inductive": 1}
