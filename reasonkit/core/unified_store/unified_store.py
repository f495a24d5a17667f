"""
Unified Store - Cross-kind append log with an auxiliary graph.

Every artifact added here is kept as a kind-tagged record and projected
into a small label/relation graph: one node per artifact, tagged with its
kind, plus a "session:<id>" node linked by HAS_ITEM when the artifact
carries a session-like key.

Persistence is optional and best-effort:
- unified-store.json holds the ordered [id, record] pairs
- the knowledge graph file holds the auxiliary graph
- every mutation schedules a debounced write; flush() writes immediately
- unreadable files on load and failed writes are logged, never raised
"""

import json
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from reasonkit.config import PersistenceConfig
from reasonkit.core.scheduling import ScheduledTask, Scheduler, default_scheduler
from reasonkit.models.artifacts import SESSION_KEY_FIELDS, ArtifactKind
from reasonkit.models.unified import AuxiliaryEdge, AuxiliaryGraph, AuxiliaryNode, UnifiedRecord
from reasonkit.utils.exceptions import PersistenceError
from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)

DATA_FILE = "unified-store.json"
HAS_ITEM = "HAS_ITEM"


class UnifiedStore:
    """Kind-tagged record log with debounced JSON persistence."""

    def __init__(
        self,
        config: PersistenceConfig | None = None,
        scheduler: Scheduler | None = None,
    ):
        """
        Initialize the store, reloading persisted state when enabled.

        Args:
            config: Persistence settings; persistence is off when disabled
            scheduler: Timer source for debounced writes
        """
        self.config = config or PersistenceConfig()
        self._scheduler = scheduler or default_scheduler
        self._records: dict[str, UnifiedRecord] = {}
        self._graph = AuxiliaryGraph()
        self._pending_save: ScheduledTask | None = None

        self._directory: Path | None = None
        if self.config.enabled:
            self._directory = Path(self.config.directory)
            try:
                self._directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning(f"Cannot create persistence directory {self._directory}: {e}")
            self._load_from_disk()

    @property
    def data_path(self) -> Path | None:
        return self._directory / DATA_FILE if self._directory else None

    @property
    def graph_path(self) -> Path | None:
        return self._directory / self.config.knowledge_graph_file if self._directory else None

    # ═══════════════════════════════════════════════════════════
    # RECORDS
    # ═══════════════════════════════════════════════════════════

    def add(self, item_id: str, record: UnifiedRecord) -> None:
        """Insert or replace a record and project it into the auxiliary graph."""
        self._records[item_id] = record
        self._project(item_id, record)
        self._schedule_save()

    def add_artifact(self, item_id: str, kind: ArtifactKind, artifact: BaseModel) -> None:
        """Store a typed artifact as JSON data."""
        self.add(item_id, UnifiedRecord(kind=kind, data=artifact.model_dump(mode="json")))

    def get(self, item_id: str) -> UnifiedRecord | None:
        return self._records.get(item_id)

    def get_by_type(self, kind: ArtifactKind | str) -> list[UnifiedRecord]:
        kind = ArtifactKind(kind)
        return [record for record in self._records.values() if record.kind == kind]

    def get_all(self) -> list[UnifiedRecord]:
        return list(self._records.values())

    def size(self) -> int:
        return len(self._records)

    def clear(self) -> None:
        """Empty the records and reset the auxiliary graph."""
        self._records.clear()
        self._graph = AuxiliaryGraph()
        self._schedule_save()

    def get_stats(self) -> dict[str, int]:
        """Record count per kind."""
        stats: dict[str, int] = {}
        for record in self._records.values():
            stats[record.kind.value] = stats.get(record.kind.value, 0) + 1
        return stats

    def export_by_type(self) -> dict[str, list[dict[str, Any]]]:
        result: dict[str, list[dict[str, Any]]] = {}
        for record in self._records.values():
            result.setdefault(record.kind.value, []).append(dict(record.data))
        return result

    def import_by_type(self, data: dict[str, list[dict[str, Any]]]) -> int:
        """
        Replace the contents with records grouped by kind.

        Imported records get fresh ids of the form <kind>_<millis>_<index>.

        Returns:
            Number of records imported
        """
        self.clear()
        stamp = int(time.time() * 1000)
        count = 0
        for kind, items in data.items():
            kind = ArtifactKind(kind)
            for index, item in enumerate(items):
                self.add(f"{kind.value}_{stamp}_{index}", UnifiedRecord(kind=kind, data=item))
                count += 1
        logger.info(f"Imported {count} records into unified store")
        return count

    # ═══════════════════════════════════════════════════════════
    # AUXILIARY GRAPH
    # ═══════════════════════════════════════════════════════════

    def tag_node(self, node_id: str, label: str) -> None:
        """Add a label to an existing node. Unknown ids are ignored."""
        node = self._graph.find_node(node_id)
        if node is None:
            return
        if label not in node.labels:
            node.labels.append(label)
        self._schedule_save()

    def relate(
        self,
        from_id: str,
        to_id: str,
        relation: str,
        properties: dict[str, Any] | None = None,
    ) -> AuxiliaryEdge:
        """Create or merge the edge "<from>::<relation>::<to>"."""
        edge_id = f"{from_id}::{relation}::{to_id}"
        edge = self._graph.find_edge(edge_id)
        if edge is None:
            edge = AuxiliaryEdge(
                id=edge_id,
                from_id=from_id,
                to_id=to_id,
                relation=relation,
                properties=dict(properties or {}),
            )
            self._graph.add_edge(edge)
        elif properties:
            edge.properties.update(properties)
        self._schedule_save()
        return edge

    def get_knowledge_graph(self) -> AuxiliaryGraph:
        return self._graph

    def _project(self, item_id: str, record: UnifiedRecord) -> None:
        if self._graph.find_node(item_id) is None:
            self._graph.add_node(AuxiliaryNode(id=item_id, type=record.kind.value))

        session_key = next(
            (record.data[field] for field in SESSION_KEY_FIELDS if record.data.get(field)),
            None,
        )
        if session_key:
            session_node_id = f"session:{session_key}"
            if self._graph.find_node(session_node_id) is None:
                self._graph.add_node(
                    AuxiliaryNode(id=session_node_id, type="concept", labels=["session"])
                )
            self.relate(session_node_id, item_id, HAS_ITEM)

        self.tag_node(item_id, record.kind.value)

    # ═══════════════════════════════════════════════════════════
    # PERSISTENCE
    # ═══════════════════════════════════════════════════════════

    def _schedule_save(self) -> None:
        if self._directory is None:
            return
        if self._pending_save is not None:
            self._pending_save.cancel()
        self._pending_save = self._scheduler.call_later(
            self.config.debounce_seconds, self._save_to_disk
        )

    def flush(self) -> None:
        """Write both files now, cancelling any pending debounced write."""
        if self._pending_save is not None:
            self._pending_save.cancel()
            self._pending_save = None
        self._save_to_disk()

    def close(self) -> None:
        """Flush pending writes; safe to call repeatedly."""
        if self._pending_save is not None:
            self.flush()

    def _save_to_disk(self) -> None:
        self._pending_save = None
        if self._directory is None:
            return
        entries = [
            [item_id, record.model_dump(mode="json")] for item_id, record in self._records.items()
        ]
        try:
            self._write_json(self.data_path, entries)
        except PersistenceError as e:
            logger.warning(f"Failed to persist unified store: {e}")
        self._graph.updated_at = datetime.now(UTC)
        try:
            self._write_json(self.graph_path, self._graph.model_dump(mode="json", by_alias=True))
        except PersistenceError as e:
            logger.warning(f"Failed to persist knowledge graph: {e}")

    @staticmethod
    def _write_json(path: Path, payload: Any) -> None:
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        try:
            tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Cannot write {path}: {e}", {"path": str(path)}) from e

    def _load_from_disk(self) -> None:
        data_path, graph_path = self.data_path, self.graph_path

        if data_path is not None and data_path.exists():
            try:
                entries = json.loads(data_path.read_text(encoding="utf-8"))
                self._records = {
                    item_id: UnifiedRecord.model_validate(record) for item_id, record in entries
                }
                logger.info(f"Loaded {len(self._records)} records from {data_path}")
            except (OSError, ValueError, TypeError, PydanticValidationError) as e:
                logger.warning(f"Ignoring unreadable unified store file {data_path}: {e}")
                self._records = {}

        if graph_path is not None and graph_path.exists():
            try:
                self._graph = AuxiliaryGraph.model_validate_json(
                    graph_path.read_text(encoding="utf-8")
                )
            except (OSError, ValueError, PydanticValidationError) as e:
                logger.warning(f"Ignoring unreadable knowledge graph file {graph_path}: {e}")
                self._graph = AuxiliaryGraph()
