"""Knowledge graph models: nodes, edges, deployment modes and derived data."""

from datetime import UTC, datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class DeploymentMode(str, Enum):
    """Named resource-ceiling profile for a knowledge graph."""

    DEVELOPMENT = "development"
    STANDARD = "standard"
    EXTENDED = "extended"
    CLOUD = "cloud"


class ResourceLimits(BaseModel):
    """Hard ceilings for one deployment mode."""

    model_config = ConfigDict(frozen=True)

    nodes: int
    edges: int
    depth: int
    target_memory_mb: int  # advisory only
    requires_flag: str | None = None


MODE_LIMITS: dict[DeploymentMode, ResourceLimits] = {
    DeploymentMode.DEVELOPMENT: ResourceLimits(nodes=500, edges=2500, depth=8, target_memory_mb=10),
    DeploymentMode.STANDARD: ResourceLimits(nodes=5000, edges=25000, depth=10, target_memory_mb=50),
    DeploymentMode.EXTENDED: ResourceLimits(
        nodes=20000, edges=100000, depth=12, target_memory_mb=200
    ),
    DeploymentMode.CLOUD: ResourceLimits(
        nodes=50000,
        edges=250000,
        depth=15,
        target_memory_mb=500,
        requires_flag="large-heap",
    ),
}


class NodeType(str, Enum):
    """Types of nodes in the knowledge graph."""

    SUBJECT = "subject"
    CONCEPT = "concept"
    EVIDENCE = "evidence"
    QUESTION = "question"
    INSIGHT = "insight"


class EdgeType(str, Enum):
    """Types of relationships between nodes."""

    SUPPORTS = "supports"
    CONTRADICTS = "contradicts"
    REFINES = "refines"
    QUESTIONS = "questions"
    LEADS_TO = "leads-to"
    RELATES_TO = "relates-to"
    DERIVED_FROM = "derived-from"
    CLUSTERS_WITH = "clusters-with"


class Citation(BaseModel):
    source: str
    confidence: float = 0.5
    excerpt: str | None = None


class NodeArtifacts(BaseModel):
    """Optional content payload attached to a node."""

    reasoning: str | None = None
    evidence: list[str] = Field(default_factory=list)
    citations: list[Citation] = Field(default_factory=list)


class NodeScores(BaseModel):
    confidence: float = 0.5
    centrality: float = 0.0
    pass_scores: dict[str, float] = Field(default_factory=dict)


class NodeMetadata(BaseModel):
    created_in_pass: str = "initial"
    last_modified: datetime = Field(default_factory=lambda: datetime.now(UTC))
    tags: set[str] = Field(default_factory=set)
    pattern_used: str | None = None
    selected: bool = False

    @field_serializer("tags")
    def _serialize_tags(self, tags: set[str]) -> list[str]:
        return sorted(tags)


class GraphNode(BaseModel):
    """Node in the hierarchical + network knowledge graph."""

    id: str
    content: str = ""
    node_type: NodeType = NodeType.SUBJECT
    depth: int = 0
    parent_id: str | None = None

    # Hierarchy and adjacency; owned by the graph
    children_ids: set[str] = Field(default_factory=set)
    incoming_edges: set[str] = Field(default_factory=set)
    outgoing_edges: set[str] = Field(default_factory=set)

    scores: NodeScores = Field(default_factory=NodeScores)
    metadata: NodeMetadata = Field(default_factory=NodeMetadata)
    artifacts: NodeArtifacts | None = None

    @field_serializer("children_ids", "incoming_edges", "outgoing_edges")
    def _serialize_id_sets(self, ids: set[str]) -> list[str]:
        return sorted(ids)


class EdgeMetadata(BaseModel):
    created_in_pass: str = "initial"
    confidence: float = 0.5
    justification: str | None = None
    bidirectional: bool = False


class GraphEdge(BaseModel):
    """Typed, weighted edge between two existing nodes."""

    id: str
    source_id: str
    target_id: str
    edge_type: EdgeType = EdgeType.RELATES_TO
    weight: float = 0.5
    metadata: EdgeMetadata = Field(default_factory=EdgeMetadata)


class NodeInput(BaseModel):
    """Caller-supplied data for create_node."""

    content: str = ""
    node_type: NodeType = NodeType.SUBJECT
    depth: int = 0
    parent_id: str | None = None
    confidence: float = 0.5
    tags: list[str] = Field(default_factory=list)
    created_in_pass: str = "initial"
    pattern_used: str | None = None
    artifacts: NodeArtifacts | None = None


class EdgeInput(BaseModel):
    """Caller-supplied data for add_edge."""

    source_id: str
    target_id: str
    edge_type: EdgeType = EdgeType.RELATES_TO
    weight: float = 0.5
    confidence: float = 0.5
    justification: str | None = None
    bidirectional: bool = False
    created_in_pass: str = "initial"


class NodeUpdate(BaseModel):
    """Partial update for an existing node; unset fields are left alone."""

    content: str | None = None
    node_type: NodeType | None = None
    confidence: float | None = None
    pass_scores: dict[str, float] | None = None
    tags: list[str] | None = None
    pattern_used: str | None = None
    artifacts: NodeArtifacts | None = None


class Cluster(BaseModel):
    """Externally computed grouping of nodes."""

    id: str
    node_ids: set[str] = Field(default_factory=set)
    centroid: str | None = None
    coherence: float = 0.0

    @field_serializer("node_ids")
    def _serialize_node_ids(self, ids: set[str]) -> list[str]:
        return sorted(ids)


class KnowledgeGap(BaseModel):
    """Externally identified weakness in the graph."""

    type: Literal["missing-link", "weak-evidence", "contradiction", "isolated-cluster"]
    node_ids: list[str] = Field(default_factory=list)
    priority: float = 0.5
    description: str = ""


class GraphMetrics(BaseModel):
    node_count: int = 0
    edge_count: int = 0
    avg_degree: float = 0.0
    max_depth: int = 0
    cluster_count: int = 0
    gaps: list[KnowledgeGap] = Field(default_factory=list)
