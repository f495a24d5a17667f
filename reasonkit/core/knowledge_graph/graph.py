"""
Resource-bounded hierarchical + network knowledge graph.

Nodes form a tree through parent/child links and a general network
through typed, weighted edges. Ceilings on node count, edge count and
depth come from the graph's deployment mode, which is fixed at
construction.

Derived structures (source index, depth levels, adjacency sets, metrics)
are maintained on every mutation and rebuilt from nodes and edges on
deserialize, so the serialized form only needs to carry the primary
records.
"""

import json
from datetime import UTC, datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from reasonkit.models.graph import (
    MODE_LIMITS,
    Cluster,
    DeploymentMode,
    EdgeInput,
    EdgeMetadata,
    EdgeType,
    GraphEdge,
    GraphMetrics,
    GraphNode,
    KnowledgeGap,
    NodeArtifacts,
    NodeInput,
    NodeMetadata,
    NodeScores,
    NodeUpdate,
    ResourceLimits,
)
from reasonkit.utils.exceptions import (
    CapacityExceededError,
    DepthLimitError,
    NotFoundError,
    ValidationError,
)
from reasonkit.utils.id_generator import generate_edge_id, generate_node_id
from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)

SERIALIZATION_VERSION = 1


class KnowledgeGraph:
    """
    In-memory knowledge graph with per-mode resource ceilings.

    Capacity, depth, reference and weight violations raise before any
    state changes. Cluster assignment, centrality and knowledge gaps are
    accepted from callers and stored; the graph never computes them.
    """

    def __init__(
        self,
        session_id: str = "",
        mode: DeploymentMode = DeploymentMode.STANDARD,
    ):
        """
        Initialize an empty graph.

        Args:
            session_id: Owning session, carried through serialization
            mode: Deployment mode selecting the resource ceilings
        """
        self.session_id = session_id
        self._mode = DeploymentMode(mode)

        self._nodes: dict[str, GraphNode] = {}
        self._edges: dict[str, GraphEdge] = {}
        self._edges_by_source: dict[str, set[str]] = {}
        self._levels: dict[int, set[str]] = {}
        self._parent_child: dict[str, list[str]] = {}
        self._root_id: str | None = None
        self._clusters: dict[str, Cluster] = {}
        self._metrics = GraphMetrics()

    # ═══════════════════════════════════════════════════════════
    # PROPERTIES
    # ═══════════════════════════════════════════════════════════

    @property
    def mode(self) -> DeploymentMode:
        return self._mode

    @property
    def limits(self) -> ResourceLimits:
        return MODE_LIMITS[self._mode]

    @property
    def root_id(self) -> str | None:
        return self._root_id

    def node_count(self) -> int:
        return len(self._nodes)

    def edge_count(self) -> int:
        return len(self._edges)

    # ═══════════════════════════════════════════════════════════
    # MUTATION
    # ═══════════════════════════════════════════════════════════

    def create_node(self, data: NodeInput | dict[str, Any] | None = None) -> str:
        """
        Create a node and link it into the hierarchy.

        Args:
            data: Node fields; unspecified fields take their defaults

        Returns:
            The new node id

        Raises:
            CapacityExceededError: Node ceiling for the mode is reached
            DepthLimitError: Depth exceeds the mode's ceiling
            NotFoundError: parent_id does not name an existing node
            ValidationError: Invalid node data
        """
        node_input = self._coerce(NodeInput, data or {})
        limits = self.limits

        if len(self._nodes) >= limits.nodes:
            raise CapacityExceededError(
                f"Maximum node limit ({limits.nodes}) reached for mode {self._mode.value}",
                {"limit": limits.nodes, "mode": self._mode.value},
            )
        if node_input.depth < 0:
            raise ValidationError("Node depth cannot be negative", {"depth": node_input.depth})
        if node_input.depth > limits.depth:
            raise DepthLimitError(
                f"Maximum depth ({limits.depth}) exceeded",
                {"depth": node_input.depth, "limit": limits.depth, "mode": self._mode.value},
            )
        if node_input.parent_id is not None and node_input.parent_id not in self._nodes:
            raise NotFoundError(
                f"Parent node {node_input.parent_id} not found",
                {"parent_id": node_input.parent_id},
            )

        node = GraphNode(
            id=generate_node_id(),
            content=node_input.content,
            node_type=node_input.node_type,
            depth=node_input.depth,
            parent_id=node_input.parent_id,
            scores=NodeScores(confidence=node_input.confidence),
            metadata=NodeMetadata(
                created_in_pass=node_input.created_in_pass,
                tags=set(node_input.tags),
                pattern_used=node_input.pattern_used,
            ),
            artifacts=node_input.artifacts,
        )
        self._nodes[node.id] = node
        self._link_hierarchy(node)

        if self._root_id is None:
            self._root_id = node.id

        self._metrics.node_count = len(self._nodes)
        self._metrics.max_depth = max(self._metrics.max_depth, node.depth)
        self._update_average_degree()

        logger.debug(f"Created node {node.id} at depth {node.depth}")
        return node.id

    def add_edge(self, data: EdgeInput | dict[str, Any]) -> str:
        """
        Add a typed, weighted edge between two existing nodes.

        Raises:
            CapacityExceededError: Edge ceiling for the mode is reached
            NotFoundError: Source or target node does not exist
            ValidationError: Weight outside [0, 1] or invalid edge data
        """
        edge_input = self._coerce(EdgeInput, data)
        limits = self.limits

        if len(self._edges) >= limits.edges:
            raise CapacityExceededError(
                f"Maximum edge limit ({limits.edges}) reached for mode {self._mode.value}",
                {"limit": limits.edges, "mode": self._mode.value},
            )
        missing = [
            node_id
            for node_id in (edge_input.source_id, edge_input.target_id)
            if node_id not in self._nodes
        ]
        if missing:
            raise NotFoundError("Source or target node does not exist", {"missing": missing})
        if not 0.0 <= edge_input.weight <= 1.0:
            raise ValidationError(
                "Edge weight must be between 0 and 1", {"weight": edge_input.weight}
            )

        edge = GraphEdge(
            id=generate_edge_id(),
            source_id=edge_input.source_id,
            target_id=edge_input.target_id,
            edge_type=edge_input.edge_type,
            weight=edge_input.weight,
            metadata=EdgeMetadata(
                created_in_pass=edge_input.created_in_pass,
                confidence=edge_input.confidence,
                justification=edge_input.justification,
                bidirectional=edge_input.bidirectional,
            ),
        )
        self._edges[edge.id] = edge
        self._link_edge(edge)

        self._metrics.edge_count = len(self._edges)
        self._update_average_degree()
        return edge.id

    def update_node(self, node_id: str, updates: NodeUpdate | dict[str, Any]) -> GraphNode:
        """
        Apply a partial update to a node.

        Raises:
            NotFoundError: Node does not exist
        """
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(f"Node {node_id} not found", {"node_id": node_id})
        patch = self._coerce(NodeUpdate, updates)

        if patch.content is not None:
            node.content = patch.content
        if patch.node_type is not None:
            node.node_type = patch.node_type
        if patch.confidence is not None:
            node.scores.confidence = patch.confidence
        if patch.pass_scores is not None:
            node.scores.pass_scores.update(patch.pass_scores)
        if patch.tags is not None:
            node.metadata.tags = set(patch.tags)
        if patch.pattern_used is not None:
            node.metadata.pattern_used = patch.pattern_used
        if patch.artifacts is not None:
            current = node.artifacts.model_dump() if node.artifacts else {}
            node.artifacts = NodeArtifacts.model_validate(
                current | patch.artifacts.model_dump(exclude_unset=True)
            )
        node.metadata.last_modified = datetime.now(UTC)
        return node

    def remove_edge(self, edge_id: str) -> bool:
        """Detach an edge from every index. Returns False if it does not exist."""
        edge = self._edges.pop(edge_id, None)
        if edge is None:
            return False

        sources = self._edges_by_source.get(edge.source_id)
        if sources is not None:
            sources.discard(edge_id)
            if not sources:
                del self._edges_by_source[edge.source_id]
        for endpoint in (edge.source_id, edge.target_id):
            node = self._nodes.get(endpoint)
            if node is not None:
                node.incoming_edges.discard(edge_id)
                node.outgoing_edges.discard(edge_id)

        self._metrics.edge_count = len(self._edges)
        self._update_average_degree()
        return True

    def remove_node(self, node_id: str) -> bool:
        """
        Remove a node, its touching edges and its hierarchy links.

        Children keep their parent_id reference but are no longer listed
        under any parent. If the root is removed, the oldest remaining
        node becomes the root.
        """
        node = self._nodes.get(node_id)
        if node is None:
            return False

        for edge_id in list(node.incoming_edges | node.outgoing_edges):
            self.remove_edge(edge_id)

        del self._nodes[node_id]
        self._unlink_hierarchy(node)
        self._parent_child.pop(node_id, None)

        if self._root_id == node_id:
            self._root_id = next(iter(self._nodes), None)

        self._metrics.node_count = len(self._nodes)
        self._metrics.max_depth = max(self._levels, default=0)
        self._update_average_degree()

        logger.debug(f"Removed node {node_id}")
        return True

    def mark_selected(self, node_id: str, selected: bool = True) -> None:
        """Set the selection flag. Unknown ids are ignored."""
        node = self._nodes.get(node_id)
        if node is not None:
            node.metadata.selected = selected

    def set_clusters(self, clusters: dict[str, Cluster] | list[Cluster]) -> None:
        if isinstance(clusters, list):
            clusters = {cluster.id: cluster for cluster in clusters}
        self._clusters = dict(clusters)
        self._metrics.cluster_count = len(self._clusters)

    def update_centrality(self, centrality: dict[str, float]) -> None:
        """Store externally computed centrality scores. Unknown ids are ignored."""
        for node_id, score in centrality.items():
            node = self._nodes.get(node_id)
            if node is not None:
                node.scores.centrality = score

    def set_gaps(self, gaps: list[KnowledgeGap]) -> None:
        self._metrics.gaps = list(gaps)

    # ═══════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════

    def get_node(self, node_id: str) -> GraphNode | None:
        return self._nodes.get(node_id)

    def get_edge(self, edge_id: str) -> GraphEdge | None:
        return self._edges.get(edge_id)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def get_all_nodes(self) -> list[GraphNode]:
        return list(self._nodes.values())

    def get_all_edges(self) -> list[GraphEdge]:
        return list(self._edges.values())

    def get_outgoing_edges(self, node_id: str) -> list[GraphEdge]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [self._edges[e] for e in sorted(node.outgoing_edges) if e in self._edges]

    def get_incoming_edges(self, node_id: str) -> list[GraphEdge]:
        node = self._nodes.get(node_id)
        if node is None:
            return []
        return [self._edges[e] for e in sorted(node.incoming_edges) if e in self._edges]

    def get_edges_from_source(self, node_id: str) -> list[GraphEdge]:
        """Edges created with node_id as source, ignoring bidirectionality."""
        return [self._edges[e] for e in sorted(self._edges_by_source.get(node_id, ()))]

    def get_edges_by_type(self, edge_type: EdgeType | str) -> list[GraphEdge]:
        edge_type = EdgeType(edge_type)
        return [edge for edge in self._edges.values() if edge.edge_type == edge_type]

    def has_edge_between(self, first_id: str, second_id: str) -> bool:
        """True if an outgoing edge of first_id reaches second_id."""
        node = self._nodes.get(first_id)
        if node is None:
            return False
        for edge_id in node.outgoing_edges:
            edge = self._edges.get(edge_id)
            if edge is None:
                continue
            if edge.target_id == second_id:
                return True
            # Bidirectional edges are also outgoing from their target
            if edge.metadata.bidirectional and edge.source_id == second_id:
                return True
        return False

    def get_children(self, node_id: str) -> list[GraphNode]:
        return [self._nodes[c] for c in self._parent_child.get(node_id, []) if c in self._nodes]

    def get_level(self, depth: int) -> list[GraphNode]:
        ids = self._levels.get(depth, set())
        return [node for node_id, node in self._nodes.items() if node_id in ids]

    def get_selected_nodes(self) -> list[GraphNode]:
        return [node for node in self._nodes.values() if node.metadata.selected]

    def get_clusters(self) -> dict[str, Cluster]:
        return dict(self._clusters)

    def get_cluster(self, cluster_id: str) -> Cluster | None:
        return self._clusters.get(cluster_id)

    def get_gaps(self) -> list[KnowledgeGap]:
        return list(self._metrics.gaps)

    def get_metrics(self) -> GraphMetrics:
        """Copy of the current metrics."""
        return self._metrics.model_copy(deep=True)

    # ═══════════════════════════════════════════════════════════
    # SERIALIZATION
    # ═══════════════════════════════════════════════════════════

    def serialize(self) -> str:
        """
        JSON text holding the graph; sets become sorted lists.

        Hierarchy levels and metrics are written for readers of the file
        and recomputed on deserialize.
        """
        payload = {
            "version": SERIALIZATION_VERSION,
            "session_id": self.session_id,
            "mode": self._mode.value,
            "root_id": self._root_id,
            "nodes": [node.model_dump(mode="json") for node in self._nodes.values()],
            "edges": [edge.model_dump(mode="json") for edge in self._edges.values()],
            "hierarchy": {
                "root": self._root_id,
                "levels": {
                    str(depth): sorted(ids) for depth, ids in sorted(self._levels.items())
                },
                "parent_child": {
                    parent_id: list(children) for parent_id, children in self._parent_child.items()
                },
            },
            "clusters": [cluster.model_dump(mode="json") for cluster in self._clusters.values()],
            "metrics": self._metrics.model_dump(mode="json", exclude={"gaps"}),
            "gaps": [gap.model_dump(mode="json") for gap in self._metrics.gaps],
        }
        return json.dumps(payload)

    @classmethod
    def deserialize(cls, text: str) -> "KnowledgeGraph":
        """
        Rebuild a graph from serialize() output.

        Every derived index is recomputed from the nodes and edges rather
        than trusted from the payload. The mode's ceilings apply to the
        loaded records just as they do to create_node/create_edge.

        Raises:
            ValidationError: Text is not a valid serialized graph
            CapacityExceededError: More nodes or edges than the mode allows
            DepthLimitError: A node is deeper than the mode allows
        """
        try:
            payload = json.loads(text)
            graph = cls(
                session_id=payload.get("session_id", ""),
                mode=DeploymentMode(payload.get("mode", DeploymentMode.STANDARD.value)),
            )
            nodes = [GraphNode.model_validate(n) for n in payload.get("nodes", [])]
            edges = [GraphEdge.model_validate(e) for e in payload.get("edges", [])]
            clusters = [Cluster.model_validate(c) for c in payload.get("clusters", [])]
            gaps = [KnowledgeGap.model_validate(g) for g in payload.get("gaps", [])]
        except (ValueError, TypeError, AttributeError, PydanticValidationError) as e:
            raise ValidationError(f"Invalid serialized graph: {e}") from e

        limits = graph.limits
        mode = graph.mode.value
        if len(nodes) > limits.nodes:
            raise CapacityExceededError(
                f"Serialized graph has {len(nodes)} nodes; mode {mode} allows {limits.nodes}",
                {"count": len(nodes), "limit": limits.nodes, "mode": mode},
            )
        if len(edges) > limits.edges:
            raise CapacityExceededError(
                f"Serialized graph has {len(edges)} edges; mode {mode} allows {limits.edges}",
                {"count": len(edges), "limit": limits.edges, "mode": mode},
            )
        too_deep = [node.id for node in nodes if node.depth > limits.depth]
        if too_deep:
            raise DepthLimitError(
                f"Maximum depth ({limits.depth}) exceeded by {len(too_deep)} serialized nodes",
                {"node_ids": too_deep, "limit": limits.depth, "mode": mode},
            )

        for node in nodes:
            node.children_ids = set()
            node.incoming_edges = set()
            node.outgoing_edges = set()
            graph._nodes[node.id] = node
        for node in nodes:
            if node.parent_id is not None and node.parent_id in graph._nodes:
                graph._link_hierarchy(node)
            else:
                graph._levels.setdefault(node.depth, set()).add(node.id)
        for edge in edges:
            if edge.source_id in graph._nodes and edge.target_id in graph._nodes:
                graph._edges[edge.id] = edge
                graph._link_edge(edge)
            else:
                logger.warning(f"Dropping dangling edge {edge.id} during deserialize")

        root_id = payload.get("root_id")
        graph._root_id = root_id if root_id in graph._nodes else next(iter(graph._nodes), None)
        graph.set_clusters(clusters)
        graph._metrics.gaps = gaps
        graph._metrics.node_count = len(graph._nodes)
        graph._metrics.edge_count = len(graph._edges)
        graph._metrics.max_depth = max(graph._levels, default=0)
        graph._update_average_degree()
        return graph

    # ═══════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════

    @staticmethod
    def _coerce(model: type, data: Any) -> Any:
        if isinstance(data, model):
            return data
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid {model.__name__}: {e}") from e

    def _link_hierarchy(self, node: GraphNode) -> None:
        self._levels.setdefault(node.depth, set()).add(node.id)
        if node.parent_id is not None:
            parent = self._nodes[node.parent_id]
            parent.children_ids.add(node.id)
            self._parent_child.setdefault(node.parent_id, []).append(node.id)

    def _unlink_hierarchy(self, node: GraphNode) -> None:
        level = self._levels.get(node.depth)
        if level is not None:
            level.discard(node.id)
            if not level:
                del self._levels[node.depth]
        if node.parent_id is not None:
            parent = self._nodes.get(node.parent_id)
            if parent is not None:
                parent.children_ids.discard(node.id)
            siblings = self._parent_child.get(node.parent_id)
            if siblings is not None and node.id in siblings:
                siblings.remove(node.id)
                if not siblings:
                    del self._parent_child[node.parent_id]

    def _link_edge(self, edge: GraphEdge) -> None:
        self._edges_by_source.setdefault(edge.source_id, set()).add(edge.id)
        source = self._nodes[edge.source_id]
        target = self._nodes[edge.target_id]
        source.outgoing_edges.add(edge.id)
        target.incoming_edges.add(edge.id)
        if edge.metadata.bidirectional:
            target.outgoing_edges.add(edge.id)
            source.incoming_edges.add(edge.id)

    def _update_average_degree(self) -> None:
        if not self._nodes:
            self._metrics.avg_degree = 0.0
            return
        total = sum(len(n.incoming_edges) + len(n.outgoing_edges) for n in self._nodes.values())
        self._metrics.avg_degree = total / len(self._nodes)
