"""Mental model and debugging approach stores."""

from typing import Any

from reasonkit.core.stores.base import TypedStore
from reasonkit.models.artifacts import DebuggingSession, MentalModelData


def keywords_of(text: str) -> set[str]:
    """Lower-cased whitespace tokens longer than three characters."""
    return {word for word in text.lower().split() if len(word) > 3}


class MentalModelStore(TypedStore[MentalModelData]):
    """Mental model applications indexed by model name."""

    def __init__(self) -> None:
        super().__init__()
        self._by_model: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: MentalModelData) -> None:
        self._add_to(self._by_model, item.model_name, item_id)

    def _unindex(self, item_id: str, item: MentalModelData) -> None:
        self._remove_from(self._by_model, item.model_name, item_id)

    def _reset_indices(self) -> None:
        self._by_model.clear()

    def get_by_model(self, model_name: str) -> list[MentalModelData]:
        return self._items_for(self._by_model, model_name)

    def get_unique_problems(self) -> list[str]:
        return list(dict.fromkeys(item.problem for item in self.get_all()))

    def find_similar_applications(self, problem: str) -> list[MentalModelData]:
        """Applications whose problem contains, or is contained in, the query."""
        needle = problem.lower()
        return self.filter(
            lambda m: needle in m.problem.lower() or m.problem.lower() in needle
        )

    def get_most_used_model(self) -> tuple[str, int] | None:
        best: tuple[str, int] | None = None
        for model_name, ids in self._by_model.items():
            if best is None or len(ids) > best[1]:
                best = (model_name, len(ids))
        return best

    def get_statistics(self) -> dict[str, int]:
        """Usage count per model name."""
        return {model_name: len(ids) for model_name, ids in self._by_model.items()}


class DebuggingStore(TypedStore[DebuggingSession]):
    """Debugging sessions indexed by approach and by issue keywords."""

    def __init__(self) -> None:
        super().__init__()
        self._by_approach: dict[str, set[str]] = {}
        self._by_keyword: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: DebuggingSession) -> None:
        self._add_to(self._by_approach, item.approach_name, item_id)
        for keyword in keywords_of(item.issue):
            self._add_to(self._by_keyword, keyword, item_id)

    def _unindex(self, item_id: str, item: DebuggingSession) -> None:
        self._remove_from(self._by_approach, item.approach_name, item_id)
        for keyword in keywords_of(item.issue):
            self._remove_from(self._by_keyword, keyword, item_id)

    def _reset_indices(self) -> None:
        self._by_approach.clear()
        self._by_keyword.clear()

    def get_by_approach(self, approach_name: str) -> list[DebuggingSession]:
        return self._items_for(self._by_approach, approach_name)

    def search_by_issue(self, keywords: str) -> list[DebuggingSession]:
        """Sessions whose issue shares any of the given keywords."""
        matching: set[str] = set()
        for term in keywords.lower().split():
            matching |= self._by_keyword.get(term, set())
        return [item for item_id, item in self._items.items() if item_id in matching]

    def get_resolved_sessions(self) -> list[DebuggingSession]:
        return self.filter(lambda s: bool(s.resolution.strip()))

    def get_most_effective_approach(self) -> tuple[str, float] | None:
        best: tuple[str, float] | None = None
        for approach in self._by_approach:
            sessions = self.get_by_approach(approach)
            resolved = sum(1 for s in sessions if s.resolution.strip())
            rate = resolved / len(sessions)
            if rate > 0 and (best is None or rate > best[1]):
                best = (approach, rate)
        return best

    def get_statistics(self) -> dict[str, Any]:
        resolved = len(self.get_resolved_sessions())
        return {
            "total_sessions": self.size(),
            "resolved_sessions": resolved,
            "approach_usage": {a: len(ids) for a, ids in self._by_approach.items()},
            "success_rate": resolved / self.size() if self.size() else 0.0,
        }
