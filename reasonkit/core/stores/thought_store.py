"""Sequential thinking store with branch and revision tracking."""

from typing import Any

from reasonkit.core.stores.base import TypedStore
from reasonkit.models.artifacts import ThoughtData


class ThoughtStore(TypedStore[ThoughtData]):
    """Thoughts indexed by branch id and by the thought number they revise."""

    def __init__(self) -> None:
        super().__init__()
        self._branches: dict[str, set[str]] = {}
        self._revisions: dict[int, set[str]] = {}

    def _index(self, item_id: str, item: ThoughtData) -> None:
        if item.branch_id:
            self._add_to(self._branches, item.branch_id, item_id)
        if item.is_revision and item.revises_thought is not None:
            self._revisions.setdefault(item.revises_thought, set()).add(item_id)

    def _unindex(self, item_id: str, item: ThoughtData) -> None:
        if item.branch_id:
            self._remove_from(self._branches, item.branch_id, item_id)
        if item.is_revision and item.revises_thought is not None:
            ids = self._revisions.get(item.revises_thought)
            if ids is not None:
                ids.discard(item_id)
                if not ids:
                    del self._revisions[item.revises_thought]

    def _reset_indices(self) -> None:
        self._branches.clear()
        self._revisions.clear()

    def get_all(self) -> list[ThoughtData]:
        """Thoughts in chronological order (by thought number, stable)."""
        return sorted(super().get_all(), key=lambda t: t.thought_number)

    def get_branch(self, branch_id: str) -> list[ThoughtData]:
        return self._items_for(self._branches, branch_id)

    def get_all_branches(self) -> dict[str, list[ThoughtData]]:
        return {branch_id: self.get_branch(branch_id) for branch_id in self._branches}

    def get_revisions(self, thought_number: int) -> list[ThoughtData]:
        ids = self._revisions.get(thought_number, set())
        return [item for item_id, item in self._items.items() if item_id in ids]

    def get_latest(self) -> ThoughtData | None:
        thoughts = self.get_all()
        return thoughts[-1] if thoughts else None

    def get_range(self, start: int, end: int) -> list[ThoughtData]:
        """Thoughts numbered start..end inclusive."""
        return [t for t in self.get_all() if start <= t.thought_number <= end]

    def get_pending_thoughts(self) -> list[ThoughtData]:
        return self.filter(lambda t: t.next_thought_needed)

    def get_statistics(self) -> dict[str, Any]:
        thoughts = self.get_all()
        return {
            "total": len(thoughts),
            "regular": sum(1 for t in thoughts if not t.is_revision and not t.branch_id),
            "revisions": sum(1 for t in thoughts if t.is_revision),
            "branched": sum(1 for t in thoughts if t.branch_id),
            "branches": len(self._branches),
        }
