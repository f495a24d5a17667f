"""Collaborative reasoning and decision framework stores."""

from collections import Counter
from typing import Any

from reasonkit.core.stores.base import TypedStore
from reasonkit.core.stores.mental_model_store import keywords_of
from reasonkit.models.artifacts import CollaborativeSession, DecisionData


class CollaborativeStore(TypedStore[CollaborativeSession]):
    """Collaborative sessions indexed by topic and by participating persona."""

    def __init__(self) -> None:
        super().__init__()
        self._by_topic: dict[str, set[str]] = {}
        self._by_persona: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: CollaborativeSession) -> None:
        self._add_to(self._by_topic, item.topic, item_id)
        for persona in item.personas:
            self._add_to(self._by_persona, persona.id, item_id)

    def _unindex(self, item_id: str, item: CollaborativeSession) -> None:
        self._remove_from(self._by_topic, item.topic, item_id)
        for persona in item.personas:
            self._remove_from(self._by_persona, persona.id, item_id)

    def _reset_indices(self) -> None:
        self._by_topic.clear()
        self._by_persona.clear()

    def get_by_session_id(self, session_id: str) -> CollaborativeSession | None:
        return self.find(lambda s: s.session_id == session_id)

    def get_by_topic(self, topic: str) -> list[CollaborativeSession]:
        """Exact topic matches first, then case-insensitive partial matches."""
        exact_ids = self._by_topic.get(topic, set())
        exact = self._items_for(self._by_topic, topic)
        needle = topic.lower()
        partial = [
            item
            for item_id, item in self._items.items()
            if item_id not in exact_ids and needle in item.topic.lower()
        ]
        return exact + partial

    def get_by_persona(self, persona_id: str) -> list[CollaborativeSession]:
        return self._items_for(self._by_persona, persona_id)

    def get_active_sessions(self) -> list[CollaborativeSession]:
        return self.filter(lambda s: s.next_contribution_needed)

    def get_consensus_sessions(self) -> list[CollaborativeSession]:
        return self.filter(lambda s: bool(s.consensus_points))

    def get_disagreement_sessions(self) -> list[CollaborativeSession]:
        """Sessions with at least one unresolved disagreement."""
        return self.filter(lambda s: any(not d.resolution for d in s.disagreements))

    def get_contribution_stats(self, item_id: str) -> dict[str, Any] | None:
        session = self.get(item_id)
        if session is None:
            return None
        names = {p.id: p.name for p in session.personas}
        contributions = session.contributions
        return {
            "total_contributions": len(contributions),
            "by_type": dict(Counter(c.type for c in contributions)),
            "by_persona": dict(Counter(names.get(c.persona_id, "Unknown") for c in contributions)),
            "average_confidence": (
                sum(c.confidence for c in contributions) / len(contributions)
                if contributions
                else 0.0
            ),
        }

    def get_stage_distribution(self) -> dict[str, int]:
        return dict(Counter(s.stage for s in self.get_all()))

    def get_statistics(self) -> dict[str, Any]:
        sessions = self.get_all()
        count = len(sessions)
        return {
            "total_sessions": count,
            "active_sessions": len(self.get_active_sessions()),
            "sessions_with_consensus": len(self.get_consensus_sessions()),
            "sessions_with_disagreements": len(self.get_disagreement_sessions()),
            "average_contributions": (
                sum(len(s.contributions) for s in sessions) / count if count else 0.0
            ),
            "average_personas": sum(len(s.personas) for s in sessions) / count if count else 0.0,
            "stage_distribution": self.get_stage_distribution(),
        }


class DecisionStore(TypedStore[DecisionData]):
    """Decisions indexed by statement keywords and by analysis type."""

    def __init__(self) -> None:
        super().__init__()
        self._by_keyword: dict[str, set[str]] = {}
        self._by_analysis: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: DecisionData) -> None:
        for keyword in keywords_of(item.decision_statement):
            self._add_to(self._by_keyword, keyword, item_id)
        self._add_to(self._by_analysis, item.analysis_type, item_id)

    def _unindex(self, item_id: str, item: DecisionData) -> None:
        for keyword in keywords_of(item.decision_statement):
            self._remove_from(self._by_keyword, keyword, item_id)
        self._remove_from(self._by_analysis, item.analysis_type, item_id)

    def _reset_indices(self) -> None:
        self._by_keyword.clear()
        self._by_analysis.clear()

    def get_by_decision_id(self, decision_id: str) -> DecisionData | None:
        """Most recent record for a decision id."""
        matches = self.filter(lambda d: d.decision_id == decision_id)
        return matches[-1] if matches else None

    def search_decisions(self, keywords: str) -> list[DecisionData]:
        matching: set[str] = set()
        for term in keywords.lower().split():
            matching |= self._by_keyword.get(term, set())
        return [item for item_id, item in self._items.items() if item_id in matching]

    def get_by_analysis_type(self, analysis_type: str) -> list[DecisionData]:
        return self._items_for(self._by_analysis, analysis_type)

    def get_by_stage(self, stage: str) -> list[DecisionData]:
        return self.filter(lambda d: d.stage == stage)

    def get_completed_decisions(self) -> list[DecisionData]:
        return self.filter(lambda d: bool(d.recommendation and d.recommendation.strip()))

    def get_active_decisions(self) -> list[DecisionData]:
        return self.filter(lambda d: d.next_stage_needed)

    def get_decision_quality(self, item_id: str) -> dict[str, Any] | None:
        """Completeness score over the analysis facets a decision has filled in."""
        decision = self.get(item_id)
        if decision is None:
            return None
        breakdown = {
            "has_multiple_options": len(decision.options) > 1,
            "has_criteria": bool(decision.criteria),
            "has_evaluations": bool(decision.criteria_evaluations),
            "has_stakeholders": bool(decision.stakeholders),
            "has_constraints": bool(decision.constraints),
            "has_outcomes": bool(decision.possible_outcomes),
            "has_information_gaps": bool(decision.information_gaps),
            "has_sensitivity_analysis": bool(decision.sensitivity_insights),
            "has_recommendation": bool(decision.recommendation),
        }
        score = sum(breakdown.values()) / len(breakdown)
        return {"score": score, "breakdown": breakdown, "completeness": f"{round(score * 100)}%"}

    def get_best_option(self, item_id: str) -> str | None:
        """Option id with the highest expected value, else highest criteria score."""
        decision = self.get(item_id)
        if decision is None:
            return None
        scores = decision.expected_values or decision.multi_criteria_scores
        if not scores:
            return None
        return max(scores, key=lambda option_id: scores[option_id])

    def get_statistics(self) -> dict[str, Any]:
        decisions = self.get_all()
        count = len(decisions)
        completed = len(self.get_completed_decisions())
        return {
            "total_decisions": count,
            "completed_decisions": completed,
            "active_decisions": len(self.get_active_decisions()),
            "completion_rate": completed / count if count else 0.0,
            "average_options": sum(len(d.options) for d in decisions) / count if count else 0.0,
            "average_criteria": sum(len(d.criteria) for d in decisions) / count if count else 0.0,
            "analysis_type_distribution": {a: len(ids) for a, ids in self._by_analysis.items()},
            "stage_distribution": dict(Counter(d.stage for d in decisions)),
        }
