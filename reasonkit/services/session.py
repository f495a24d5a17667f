"""
Reasoning session.

A session owns one typed store per artifact kind, an idle clock and any
knowledge graphs created for it. Every read or write touches the
session, re-arming the clock; when the clock fires, or cleanup() is
called, the stores are emptied and the session becomes terminal.
"""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from reasonkit.config import GraphConfig, SessionConfig
from reasonkit.core.knowledge_graph import KnowledgeGraph
from reasonkit.core.scheduling import ScheduledTask, Scheduler, default_scheduler
from reasonkit.core.stores import (
    STORE_TYPES,
    CollaborativeStore,
    DecisionStore,
    MetacognitiveStore,
    ScientificStore,
    TypedStore,
    VisualStore,
)
from reasonkit.core.unified_store import UnifiedStore
from reasonkit.models.artifacts import (
    ARTIFACT_MODELS,
    EXPORT_TAGS,
    TOOL_NAMES,
    ArgumentData,
    Artifact,
    ArtifactKind,
    CollaborativeSession,
    CreativeData,
    DebuggingSession,
    DecisionData,
    MentalModelData,
    MetacognitiveData,
    ScientificInquiryData,
    SocraticData,
    SystemsData,
    ThoughtData,
    VisualData,
    kind_for_export_tag,
)
from reasonkit.models.graph import DeploymentMode
from reasonkit.models.session import SessionExport, SessionStatistics
from reasonkit.utils.exceptions import SessionClosedError, ValidationError
from reasonkit.utils.id_generator import generate_artifact_id
from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_GRAPH_ID = "default"


class Session:
    """
    Per-session state container.

    Capacity is uniform across kinds: add() returns False once a kind's
    ceiling from SessionConfig.limit_for() is reached. Only thoughts have
    a finite ceiling by default.
    """

    def __init__(
        self,
        session_id: str,
        config: SessionConfig | None = None,
        scheduler: Scheduler | None = None,
        graph_config: GraphConfig | None = None,
        unified_store: UnifiedStore | None = None,
        on_cleanup: Callable[["Session"], None] | None = None,
    ):
        """
        Create a session and arm its idle clock.

        Args:
            session_id: Session identifier
            config: Capacity and timeout settings
            scheduler: Timer source for the idle clock
            graph_config: Defaults for knowledge graphs created in this session
            unified_store: Optional cross-session log that mirrors every added artifact
            on_cleanup: Called once when the session ends
        """
        self.session_id = session_id
        self.config = config or SessionConfig()
        self.graph_config = graph_config or GraphConfig()
        self._scheduler = scheduler or default_scheduler
        self._unified_store = unified_store
        self._on_cleanup = on_cleanup

        self.created_at = datetime.now(UTC)
        self.last_accessed_at = self.created_at
        self._stores: dict[ArtifactKind, TypedStore] = {
            kind: store_type() for kind, store_type in STORE_TYPES.items()
        }
        self._graphs: dict[str, KnowledgeGraph] = {}
        self._timer: ScheduledTask | None = None
        self._closed = False

        self.touch()
        logger.info(f"Session {session_id} created")

    # ═══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════

    @property
    def closed(self) -> bool:
        return self._closed

    def touch(self) -> None:
        """Record activity and re-arm the idle clock. No-op once closed."""
        if self._closed:
            return
        self.last_accessed_at = datetime.now(UTC)
        if self._timer is not None:
            self._timer.cancel()
        self._timer = self._scheduler.call_later(self.config.session_timeout, self._on_timeout)

    def is_active(self) -> bool:
        return not self._closed and self._timer is not None and not self._timer.cancelled()

    def _on_timeout(self) -> None:
        logger.info(
            f"Session {self.session_id} timed out after {self.config.session_timeout}s idle"
        )
        self._timer = None
        self.cleanup()

    def cleanup(self) -> None:
        """Cancel the clock and empty every store. Safe to call repeatedly."""
        if self._closed:
            return
        self._closed = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        for store in self._stores.values():
            store.clear()
        self._graphs.clear()
        logger.info(f"Session {self.session_id} cleaned up")
        if self._on_cleanup is not None:
            self._on_cleanup(self)

    def _ensure_open(self) -> None:
        if self._closed:
            raise SessionClosedError(
                f"Session {self.session_id} has been cleaned up",
                {"session_id": self.session_id},
            )

    # ═══════════════════════════════════════════════════════════
    # GENERIC ACCESS
    # ═══════════════════════════════════════════════════════════

    def add(self, kind: ArtifactKind | str, item: Artifact | dict[str, Any]) -> bool:
        """
        Store an artifact of the given kind.

        Returns:
            False if the kind's ceiling has been reached, True otherwise

        Raises:
            SessionClosedError: Session has been cleaned up
            ValidationError: Item does not match the kind's record type
        """
        self._ensure_open()
        kind = ArtifactKind(kind)
        artifact = self._coerce(kind, item)
        self.touch()

        store = self._stores[kind]
        limit = self.config.limit_for(kind)
        if limit is not None and store.size() >= limit:
            logger.warning(
                f"Session {self.session_id} refused {kind.value}: limit of {limit} reached"
            )
            return False

        item_id = generate_artifact_id(kind.value)
        store.add(item_id, artifact)
        if self._unified_store is not None:
            self._unified_store.add_artifact(item_id, kind, artifact)
        return True

    def get_all(self, kind: ArtifactKind | str) -> list[Any]:
        """Snapshot of one kind's artifacts."""
        self.touch()
        return self._stores[ArtifactKind(kind)].get_all()

    def store(self, kind: ArtifactKind | str) -> TypedStore:
        """Typed store for per-kind queries."""
        self.touch()
        return self._stores[ArtifactKind(kind)]

    def get_remaining(self, kind: ArtifactKind | str) -> int | None:
        """Free slots for a kind, or None when it is unbounded."""
        kind = ArtifactKind(kind)
        limit = self.config.limit_for(kind)
        if limit is None:
            return None
        return max(0, limit - self._stores[kind].size())

    @staticmethod
    def _coerce(kind: ArtifactKind, item: Artifact | dict[str, Any]) -> Artifact:
        model = ARTIFACT_MODELS[kind]
        if isinstance(item, model):
            return item
        if isinstance(item, Artifact):
            item = item.model_dump()
        try:
            return model.model_validate(item)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {kind.value} artifact: {e}", {"kind": kind.value}) from e

    # ═══════════════════════════════════════════════════════════
    # PER-KIND ACCESSORS
    # ═══════════════════════════════════════════════════════════

    def add_thought(self, thought: ThoughtData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.THOUGHT, thought)

    def get_thoughts(self) -> list[ThoughtData]:
        return self.get_all(ArtifactKind.THOUGHT)

    def get_remaining_thoughts(self) -> int | None:
        return self.get_remaining(ArtifactKind.THOUGHT)

    def add_mental_model(self, model: MentalModelData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.MENTAL_MODEL, model)

    def get_mental_models(self) -> list[MentalModelData]:
        return self.get_all(ArtifactKind.MENTAL_MODEL)

    def add_debugging_session(self, session: DebuggingSession | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.DEBUGGING, session)

    def get_debugging_sessions(self) -> list[DebuggingSession]:
        return self.get_all(ArtifactKind.DEBUGGING)

    def add_collaborative_session(self, session: CollaborativeSession | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.COLLABORATIVE, session)

    def get_collaborative_sessions(self) -> list[CollaborativeSession]:
        return self.get_all(ArtifactKind.COLLABORATIVE)

    def get_collaborative_session(self, session_id: str) -> CollaborativeSession | None:
        store: CollaborativeStore = self.store(ArtifactKind.COLLABORATIVE)
        return store.get_by_session_id(session_id)

    def add_decision(self, decision: DecisionData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.DECISION, decision)

    def get_decisions(self) -> list[DecisionData]:
        return self.get_all(ArtifactKind.DECISION)

    def get_decision(self, decision_id: str) -> DecisionData | None:
        store: DecisionStore = self.store(ArtifactKind.DECISION)
        return store.get_by_decision_id(decision_id)

    def add_metacognitive(self, session: MetacognitiveData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.METACOGNITIVE, session)

    def get_metacognitive_sessions(self) -> list[MetacognitiveData]:
        return self.get_all(ArtifactKind.METACOGNITIVE)

    def get_metacognitive_session(self, monitoring_id: str) -> MetacognitiveData | None:
        store: MetacognitiveStore = self.store(ArtifactKind.METACOGNITIVE)
        return store.get_by_monitoring_id(monitoring_id)

    def add_scientific_inquiry(self, inquiry: ScientificInquiryData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.SCIENTIFIC, inquiry)

    def get_scientific_inquiries(self) -> list[ScientificInquiryData]:
        return self.get_all(ArtifactKind.SCIENTIFIC)

    def get_scientific_inquiry(self, inquiry_id: str) -> ScientificInquiryData | None:
        store: ScientificStore = self.store(ArtifactKind.SCIENTIFIC)
        return store.get_latest_for_inquiry(inquiry_id)

    def add_creative_session(self, session: CreativeData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.CREATIVE, session)

    def get_creative_sessions(self) -> list[CreativeData]:
        return self.get_all(ArtifactKind.CREATIVE)

    def add_systems_analysis(self, analysis: SystemsData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.SYSTEMS, analysis)

    def get_systems_analyses(self) -> list[SystemsData]:
        return self.get_all(ArtifactKind.SYSTEMS)

    def add_visual_operation(self, operation: VisualData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.VISUAL, operation)

    def get_visual_operations(self) -> list[VisualData]:
        return self.get_all(ArtifactKind.VISUAL)

    def get_visual_diagram(self, diagram_id: str) -> VisualData | None:
        """Most recent operation on a diagram."""
        store: VisualStore = self.store(ArtifactKind.VISUAL)
        return store.get_latest_for_diagram(diagram_id)

    def add_argument(self, argument: ArgumentData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.ARGUMENT, argument)

    def get_arguments(self) -> list[ArgumentData]:
        return self.get_all(ArtifactKind.ARGUMENT)

    def add_socratic(self, step: SocraticData | dict[str, Any]) -> bool:
        return self.add(ArtifactKind.SOCRATIC, step)

    def get_socratic_sessions(self) -> list[SocraticData]:
        return self.get_all(ArtifactKind.SOCRATIC)

    # ═══════════════════════════════════════════════════════════
    # KNOWLEDGE GRAPHS
    # ═══════════════════════════════════════════════════════════

    def get_graph(
        self, graph_id: str | None = None, mode: DeploymentMode | str | None = None
    ) -> KnowledgeGraph:
        """
        Return the session's graph with this id, creating it on first use.

        The mode only applies at creation; an existing graph keeps its own.
        """
        self._ensure_open()
        self.touch()
        graph_id = graph_id or DEFAULT_GRAPH_ID
        graph = self._graphs.get(graph_id)
        if graph is None:
            graph = KnowledgeGraph(
                session_id=self.session_id,
                mode=DeploymentMode(mode) if mode else self.graph_config.default_mode,
            )
            self._graphs[graph_id] = graph
            logger.debug(f"Created graph {graph_id} ({graph.mode.value}) in {self.session_id}")
        return graph

    def list_graphs(self) -> list[str]:
        return list(self._graphs)

    def serialize_graph(self, graph_id: str | None = None) -> str:
        return self.get_graph(graph_id).serialize()

    def deserialize_graph(self, text: str, graph_id: str | None = None) -> KnowledgeGraph:
        """Replace (or create) a session graph from serialized text."""
        self._ensure_open()
        self.touch()
        graph = KnowledgeGraph.deserialize(text)
        self._graphs[graph_id or DEFAULT_GRAPH_ID] = graph
        return graph

    # ═══════════════════════════════════════════════════════════
    # STATISTICS / EXPORT
    # ═══════════════════════════════════════════════════════════

    def get_stats(self) -> SessionStatistics:
        self.touch()
        counts = {kind.value: store.size() for kind, store in self._stores.items()}
        return SessionStatistics(
            session_id=self.session_id,
            created_at=self.created_at,
            last_accessed_at=self.last_accessed_at,
            thought_count=counts[ArtifactKind.THOUGHT.value],
            tools_used=[TOOL_NAMES[kind] for kind, store in self._stores.items() if store.size()],
            total_operations=sum(counts.values()),
            is_active=self.is_active(),
            remaining_thoughts=self.get_remaining_thoughts(),
            stores=counts,
        )

    def export(self, store_type: ArtifactKind | str | None = None) -> list[SessionExport]:
        """
        Export artifacts as tagged records.

        Args:
            store_type: Kind or export tag to restrict the export to one store

        Raises:
            ValidationError: Unknown store type
        """
        self.touch()
        kinds = list(self._stores) if store_type is None else [self._resolve_kind(store_type)]
        return [
            SessionExport(
                session_id=self.session_id,
                session_type=EXPORT_TAGS[kind],
                data=item.model_dump(mode="json"),
            )
            for kind in kinds
            for item in self._stores[kind].get_all()
        ]

    def import_data(self, records: list[SessionExport | dict[str, Any]]) -> int:
        """
        Replay exported records through add().

        Every record is checked before any is applied.

        Returns:
            Number of records accepted (capacity refusals are not counted)

        Raises:
            ValidationError: A record is malformed or has an unknown session type
        """
        self._ensure_open()
        parsed: list[tuple[ArtifactKind, Artifact]] = []
        for record in records:
            try:
                envelope = (
                    record
                    if isinstance(record, SessionExport)
                    else SessionExport.model_validate(record)
                )
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid export record: {e}") from e
            kind = self._resolve_kind(envelope.session_type)
            parsed.append((kind, self._coerce(kind, envelope.data)))

        accepted = sum(1 for kind, artifact in parsed if self.add(kind, artifact))
        logger.info(f"Session {self.session_id} imported {accepted}/{len(parsed)} records")
        return accepted

    @staticmethod
    def _resolve_kind(store_type: ArtifactKind | str) -> ArtifactKind:
        kind = kind_for_export_tag(store_type)
        if kind is not None:
            return kind
        try:
            return ArtifactKind(store_type)
        except ValueError as e:
            raise ValidationError(f"Unknown store type: {store_type}") from e
