"""Creative and systems thinking stores."""

from collections import Counter
from typing import Any

from reasonkit.core.stores.base import TypedStore
from reasonkit.models.artifacts import CreativeData, SystemsData

# Prompts are bucketed by their leading characters
PROMPT_KEY_LENGTH = 50


class CreativeStore(TypedStore[CreativeData]):
    """Creative sessions indexed by prompt prefix and by technique."""

    def __init__(self) -> None:
        super().__init__()
        self._by_prompt: dict[str, set[str]] = {}
        self._by_technique: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: CreativeData) -> None:
        self._add_to(self._by_prompt, item.prompt[:PROMPT_KEY_LENGTH], item_id)
        for technique in item.techniques:
            self._add_to(self._by_technique, technique, item_id)

    def _unindex(self, item_id: str, item: CreativeData) -> None:
        self._remove_from(self._by_prompt, item.prompt[:PROMPT_KEY_LENGTH], item_id)
        for technique in item.techniques:
            self._remove_from(self._by_technique, technique, item_id)

    def _reset_indices(self) -> None:
        self._by_prompt.clear()
        self._by_technique.clear()

    def get_by_prompt_prefix(self, prompt: str) -> list[CreativeData]:
        return self._items_for(self._by_prompt, prompt[:PROMPT_KEY_LENGTH])

    def get_similar_prompts(self, prompt: str) -> list[CreativeData]:
        needle = prompt.lower()
        return self.filter(lambda s: needle in s.prompt.lower() or s.prompt.lower() in needle)

    def get_by_technique(self, technique: str) -> list[CreativeData]:
        return self._items_for(self._by_technique, technique)

    def get_all_techniques(self) -> list[str]:
        return list(self._by_technique)

    def get_active_sessions(self) -> list[CreativeData]:
        return self.filter(lambda s: s.next_idea_needed)

    def get_most_productive_sessions(self, limit: int = 5) -> list[CreativeData]:
        return sorted(self.get_all(), key=lambda s: len(s.ideas), reverse=True)[:limit]

    def get_creativity_metrics(self, item_id: str) -> dict[str, Any] | None:
        session = self.get(item_id)
        if session is None:
            return None
        ideas = len(session.ideas)
        return {
            "idea_count": ideas,
            "technique_count": len(session.techniques),
            "connection_count": len(session.connections),
            "insight_count": len(session.insights),
            "idea_diversity": self._idea_diversity(session.ideas),
            "connection_density": len(session.connections) / ideas if ideas else 0.0,
            "insight_ratio": len(session.insights) / ideas if ideas else 0.0,
        }

    @staticmethod
    def _idea_diversity(ideas: list[str]) -> float:
        """Distinct words over total words across all ideas."""
        words = [word for idea in ideas for word in idea.lower().split()]
        return len(set(words)) / len(words) if words else 0.0

    def find_cross_pollination(self, item_id: str) -> list[CreativeData]:
        """Other sessions sharing at least one technique."""
        session = self.get(item_id)
        if session is None:
            return []
        related: set[str] = set()
        for technique in session.techniques:
            related |= self._by_technique.get(technique, set())
        related.discard(item_id)
        return [item for other_id, item in self._items.items() if other_id in related]

    def get_top_techniques(self, limit: int = 5) -> list[tuple[str, int]]:
        usage = Counter({t: len(ids) for t, ids in self._by_technique.items()})
        return usage.most_common(limit)

    def get_statistics(self) -> dict[str, Any]:
        sessions = self.get_all()
        total_ideas = sum(len(s.ideas) for s in sessions)
        return {
            "total_sessions": len(sessions),
            "active_sessions": len(self.get_active_sessions()),
            "total_ideas": total_ideas,
            "total_insights": sum(len(s.insights) for s in sessions),
            "total_connections": sum(len(s.connections) for s in sessions),
            "average_ideas_per_session": total_ideas / len(sessions) if sessions else 0.0,
            "unique_techniques": len(self._by_technique),
            "top_techniques": self.get_top_techniques(),
        }


class SystemsStore(TypedStore[SystemsData]):
    """Systems analyses indexed by system name and by component."""

    def __init__(self) -> None:
        super().__init__()
        self._by_system: dict[str, set[str]] = {}
        self._by_component: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: SystemsData) -> None:
        self._add_to(self._by_system, item.system, item_id)
        for component in item.components:
            self._add_to(self._by_component, component, item_id)

    def _unindex(self, item_id: str, item: SystemsData) -> None:
        self._remove_from(self._by_system, item.system, item_id)
        for component in item.components:
            self._remove_from(self._by_component, component, item_id)

    def _reset_indices(self) -> None:
        self._by_system.clear()
        self._by_component.clear()

    def get_by_system(self, system: str) -> list[SystemsData]:
        return self._items_for(self._by_system, system)

    def get_systems_with_component(self, component: str) -> list[SystemsData]:
        return self._items_for(self._by_component, component)

    def get_all_components(self) -> list[str]:
        return list(self._by_component)

    def get_active_sessions(self) -> list[SystemsData]:
        return self.filter(lambda s: s.next_analysis_needed)

    def get_systems_with_feedback_loops(self, loop_type: str | None = None) -> list[SystemsData]:
        """Systems with any feedback loop, or with one of the given type."""
        return self.filter(
            lambda s: any(loop_type is None or loop.type == loop_type for loop in s.feedback_loops)
        )

    def get_complexity_metrics(self, item_id: str) -> dict[str, Any] | None:
        system = self.get(item_id)
        if system is None:
            return None
        components = len(system.components)
        relationships = len(system.relationships)
        max_relationships = components * (components - 1)
        density = relationships / max_relationships if max_relationships else 0.0
        return {
            "component_count": components,
            "relationship_count": relationships,
            "feedback_loop_count": len(system.feedback_loops),
            "emergent_property_count": len(system.emergent_properties),
            "leverage_point_count": len(system.leverage_points),
            "relationship_density": density,
            "complexity_score": min(
                1.0,
                0.3 * min(components / 20, 1.0)
                + 0.3 * density
                + 0.4 * min(len(system.feedback_loops) / 5, 1.0),
            ),
        }

    def find_related_systems(self, item_id: str) -> list[SystemsData]:
        """Other analyses sharing at least one component."""
        system = self.get(item_id)
        if system is None:
            return []
        related: set[str] = set()
        for component in system.components:
            related |= self._by_component.get(component, set())
        related.discard(item_id)
        return [item for other_id, item in self._items.items() if other_id in related]

    def get_component_co_occurrence(self) -> dict[str, int]:
        """Counts of component pairs ("a|b", sorted) appearing in the same analysis."""
        pairs: Counter[str] = Counter()
        for system in self.get_all():
            unique = sorted(set(system.components))
            for i, first in enumerate(unique):
                for second in unique[i + 1 :]:
                    pairs[f"{first}|{second}"] += 1
        return dict(pairs)

    def get_statistics(self) -> dict[str, Any]:
        systems = self.get_all()
        count = len(systems)
        return {
            "total_analyses": count,
            "unique_systems": len(self._by_system),
            "active_sessions": len(self.get_active_sessions()),
            "unique_components": len(self._by_component),
            "with_feedback_loops": len(self.get_systems_with_feedback_loops()),
            "average_components": (
                sum(len(s.components) for s in systems) / count if count else 0.0
            ),
        }
