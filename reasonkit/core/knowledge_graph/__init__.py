"""Resource-bounded knowledge graph."""

from reasonkit.core.knowledge_graph.graph import KnowledgeGraph

__all__ = ["KnowledgeGraph"]
