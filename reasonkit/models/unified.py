"""Unified store records and the auxiliary graph projected from them."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from reasonkit.models.artifacts import ArtifactKind


class UnifiedRecord(BaseModel):
    """Artifact tagged with its kind, stored as plain JSON data."""

    kind: ArtifactKind
    data: dict[str, Any] = Field(default_factory=dict)


class AuxiliaryNode(BaseModel):
    id: str
    type: str
    labels: list[str] = Field(default_factory=list)
    properties: dict[str, Any] = Field(default_factory=dict)


class AuxiliaryEdge(BaseModel):
    """Relation between auxiliary nodes; serialized with "from" / "to" keys."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_id: str = Field(alias="from")
    to_id: str = Field(alias="to")
    relation: str
    properties: dict[str, Any] = Field(default_factory=dict)


class AuxiliaryGraph(BaseModel):
    """
    Label/relation graph maintained beside the unified store.

    Lookups go through id indexes kept in step with the node and edge
    lists; add nodes and edges with add_node/add_edge so both stay aligned.
    """

    model_config = ConfigDict(populate_by_name=True)

    nodes: list[AuxiliaryNode] = Field(default_factory=list)
    edges: list[AuxiliaryEdge] = Field(default_factory=list)
    version: str = "1"
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC), alias="updatedAt")

    _node_index: dict[str, AuxiliaryNode] = PrivateAttr(default_factory=dict)
    _edge_index: dict[str, AuxiliaryEdge] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._node_index = {node.id: node for node in self.nodes}
        self._edge_index = {edge.id: edge for edge in self.edges}

    def add_node(self, node: AuxiliaryNode) -> AuxiliaryNode:
        self.nodes.append(node)
        self._node_index[node.id] = node
        return node

    def add_edge(self, edge: AuxiliaryEdge) -> AuxiliaryEdge:
        self.edges.append(edge)
        self._edge_index[edge.id] = edge
        return edge

    def find_node(self, node_id: str) -> AuxiliaryNode | None:
        return self._node_index.get(node_id)

    def find_edge(self, edge_id: str) -> AuxiliaryEdge | None:
        return self._edge_index.get(edge_id)
