"""
Data models for reasonkit.

- Artifacts: one frozen record type per reasoning kind, tagged by ArtifactKind
- Graph: knowledge graph nodes, edges, deployment modes and metrics
- Notebook: notebooks, cells, executions and their outputs
- Session: statistics and export envelopes
- Unified: kind-tagged records and the auxiliary graph projected from them
"""

from reasonkit.models.artifacts import (
    ARTIFACT_MODELS,
    EXPORT_TAGS,
    SESSION_KEY_FIELDS,
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
from reasonkit.models.graph import (
    MODE_LIMITS,
    Cluster,
    DeploymentMode,
    EdgeInput,
    EdgeType,
    GraphEdge,
    GraphMetrics,
    GraphNode,
    KnowledgeGap,
    NodeInput,
    NodeType,
    NodeUpdate,
    ResourceLimits,
)
from reasonkit.models.notebook import (
    Cell,
    CellStatus,
    CellType,
    Execution,
    ExecutionStatus,
    Notebook,
    NotebookPreset,
    Output,
    OutputType,
)
from reasonkit.models.session import SessionExport, SessionStatistics
from reasonkit.models.unified import AuxiliaryEdge, AuxiliaryGraph, AuxiliaryNode, UnifiedRecord

__all__ = [
    # Artifacts
    "ArtifactKind",
    "Artifact",
    "ThoughtData",
    "MentalModelData",
    "DebuggingSession",
    "CollaborativeSession",
    "DecisionData",
    "MetacognitiveData",
    "ScientificInquiryData",
    "CreativeData",
    "SystemsData",
    "VisualData",
    "ArgumentData",
    "SocraticData",
    "ARTIFACT_MODELS",
    "EXPORT_TAGS",
    "TOOL_NAMES",
    "SESSION_KEY_FIELDS",
    "kind_for_export_tag",
    # Graph
    "DeploymentMode",
    "ResourceLimits",
    "MODE_LIMITS",
    "NodeType",
    "EdgeType",
    "GraphNode",
    "GraphEdge",
    "NodeInput",
    "EdgeInput",
    "NodeUpdate",
    "Cluster",
    "KnowledgeGap",
    "GraphMetrics",
    # Notebook
    "Notebook",
    "NotebookPreset",
    "Cell",
    "CellType",
    "CellStatus",
    "Execution",
    "ExecutionStatus",
    "Output",
    "OutputType",
    # Session
    "SessionExport",
    "SessionStatistics",
    # Unified store
    "UnifiedRecord",
    "AuxiliaryGraph",
    "AuxiliaryNode",
    "AuxiliaryEdge",
]
