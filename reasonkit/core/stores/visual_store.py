"""Visual reasoning and argumentation stores."""

from collections import Counter
from typing import Any

from reasonkit.core.stores.base import TypedStore
from reasonkit.models.artifacts import ArgumentData, VisualData, VisualElement


class VisualStore(TypedStore[VisualData]):
    """
    Diagram operations indexed by diagram id and diagram type.

    The live element list of each diagram is derived by replaying its
    operations in insertion order, so it always agrees with the stored
    records after any add, replace or delete.
    """

    def __init__(self) -> None:
        super().__init__()
        self._by_diagram: dict[str, set[str]] = {}
        self._by_type: dict[str, set[str]] = {}
        self._states: dict[str, list[VisualElement]] = {}

    def _index(self, item_id: str, item: VisualData) -> None:
        self._add_to(self._by_diagram, item.diagram_id, item_id)
        self._add_to(self._by_type, item.diagram_type, item.diagram_id)
        self._rebuild_state(item.diagram_id)

    def _unindex(self, item_id: str, item: VisualData) -> None:
        self._remove_from(self._by_diagram, item.diagram_id, item_id)
        if not any(
            other.diagram_type == item.diagram_type
            for other in self._items_for(self._by_diagram, item.diagram_id)
        ):
            self._remove_from(self._by_type, item.diagram_type, item.diagram_id)
        self._rebuild_state(item.diagram_id)

    def _reset_indices(self) -> None:
        self._by_diagram.clear()
        self._by_type.clear()
        self._states.clear()

    def _rebuild_state(self, diagram_id: str) -> None:
        operations = self._items_for(self._by_diagram, diagram_id)
        if not operations:
            self._states.pop(diagram_id, None)
            return
        state: list[VisualElement] = []
        for op in operations:
            state = self._apply(state, op)
        self._states[diagram_id] = state

    @staticmethod
    def _apply(state: list[VisualElement], op: VisualData) -> list[VisualElement]:
        if op.operation == "create":
            return state + list(op.elements)
        if op.operation == "delete":
            removed = {e.id for e in op.elements}
            return [e for e in state if e.id not in removed]
        if op.operation in ("update", "transform"):
            positions = {e.id: i for i, e in enumerate(state)}
            result = list(state)
            for element in op.elements:
                if element.id in positions:
                    result[positions[element.id]] = element
                elif op.operation == "update":
                    positions[element.id] = len(result)
                    result.append(element)
            return result
        # observe
        return state

    def get_by_diagram(self, diagram_id: str) -> list[VisualData]:
        return self._items_for(self._by_diagram, diagram_id)

    def get_latest_for_diagram(self, diagram_id: str) -> VisualData | None:
        operations = self.get_by_diagram(diagram_id)
        return operations[-1] if operations else None

    def get_diagrams_by_type(self, diagram_type: str) -> list[str]:
        return sorted(self._by_type.get(diagram_type, set()))

    def get_diagram_state(self, diagram_id: str) -> list[VisualElement]:
        return list(self._states.get(diagram_id, []))

    def get_by_operation(self, operation: str) -> list[VisualData]:
        return self.filter(lambda v: v.operation == operation)

    def get_active_sessions(self) -> list[VisualData]:
        return self.filter(lambda v: v.next_operation_needed)

    def get_diagram_complexity(self, diagram_id: str) -> dict[str, Any]:
        state = self.get_diagram_state(diagram_id)
        operations = self.get_by_diagram(diagram_id)
        kinds = Counter(e.type for e in state)
        nodes, edges = kinds["node"], kinds["edge"]
        return {
            "total_elements": len(state),
            "node_count": nodes,
            "edge_count": edges,
            "container_count": kinds["container"],
            "annotation_count": kinds["annotation"],
            "operation_count": len(operations),
            "connection_density": edges / (nodes * (nodes - 1) / 2) if nodes > 1 else 0.0,
            "transformation_count": sum(1 for o in operations if o.operation == "transform"),
            "insight_count": sum(1 for o in operations if o.insight),
            "hypothesis_count": sum(1 for o in operations if o.hypothesis),
        }

    def get_diagram_timeline(self, diagram_id: str) -> list[dict[str, Any]]:
        operations = sorted(self.get_by_diagram(diagram_id), key=lambda o: o.iteration)
        return [
            {
                "iteration": o.iteration,
                "operation": o.operation,
                "element_count": len(o.elements),
                "has_insight": bool(o.insight),
                "has_hypothesis": bool(o.hypothesis),
            }
            for o in operations
        ]

    def get_statistics(self) -> dict[str, Any]:
        operations = self.get_all()
        diagrams = len(self._states)
        return {
            "total_operations": len(operations),
            "total_diagrams": diagrams,
            "active_operations": len(self.get_active_sessions()),
            "operation_distribution": dict(Counter(o.operation for o in operations)),
            "diagram_type_distribution": {t: len(ids) for t, ids in self._by_type.items()},
            "average_operations_per_diagram": len(operations) / diagrams if diagrams else 0.0,
        }


class ArgumentStore(TypedStore[ArgumentData]):
    """Arguments (and Socratic steps) indexed by argument type and session id."""

    def __init__(self) -> None:
        super().__init__()
        self._by_type: dict[str, set[str]] = {}
        self._by_session: dict[str, set[str]] = {}

    def _index(self, item_id: str, item: ArgumentData) -> None:
        self._add_to(self._by_type, item.argument_type, item_id)
        if item.session_id:
            self._add_to(self._by_session, item.session_id, item_id)

    def _unindex(self, item_id: str, item: ArgumentData) -> None:
        self._remove_from(self._by_type, item.argument_type, item_id)
        if item.session_id:
            self._remove_from(self._by_session, item.session_id, item_id)

    def _reset_indices(self) -> None:
        self._by_type.clear()
        self._by_session.clear()

    def get_by_type(self, argument_type: str) -> list[ArgumentData]:
        return self._items_for(self._by_type, argument_type)

    def get_by_session(self, session_id: str) -> list[ArgumentData]:
        return self._items_for(self._by_session, session_id)

    def get_active_arguments(self) -> list[ArgumentData]:
        return self.filter(lambda a: a.next_argument_needed)

    def get_average_confidence(self) -> float:
        arguments = self.get_all()
        return sum(a.confidence for a in arguments) / len(arguments) if arguments else 0.0

    def get_statistics(self) -> dict[str, Any]:
        return {
            "total_arguments": self.size(),
            "active_arguments": len(self.get_active_arguments()),
            "type_distribution": {t: len(ids) for t, ids in self._by_type.items()},
            "average_confidence": self.get_average_confidence(),
        }
