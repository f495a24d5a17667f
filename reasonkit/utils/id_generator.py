"""
ID generation utilities for reasonkit.

Provides consistent ID generation for all entity types:
- Artifacts: <prefix>_xxx (prefix per artifact kind, e.g. thought_xxx)
- Graph nodes: node_xxx
- Graph edges: edge_xxx
- Notebooks / cells / executions: nb_xxx / cell_xxx / exec_xxx
- Sessions: sess_xxx
"""

from uuid import uuid4


def _short_hex() -> str:
    return uuid4().hex[:12]


def generate_artifact_id(prefix: str) -> str:
    """
    Generate unique artifact ID.

    Args:
        prefix: Artifact kind prefix (e.g. "thought", "decision")

    Returns:
        ID in format "<prefix>_xxx" where xxx is 12 hex characters
    """
    return f"{prefix}_{_short_hex()}"


def generate_node_id() -> str:
    """
    Generate unique knowledge graph node ID.

    Returns:
        ID in format "node_xxx" where xxx is 12 hex characters
    """
    return f"node_{_short_hex()}"


def generate_edge_id() -> str:
    """
    Generate unique knowledge graph edge ID.

    Returns:
        ID in format "edge_xxx" where xxx is 12 hex characters
    """
    return f"edge_{_short_hex()}"


def generate_notebook_id() -> str:
    """Generate unique notebook ID ("nb_xxx")."""
    return f"nb_{_short_hex()}"


def generate_cell_id() -> str:
    """Generate unique cell ID ("cell_xxx")."""
    return f"cell_{_short_hex()}"


def generate_execution_id() -> str:
    """Generate unique execution ID ("exec_xxx")."""
    return f"exec_{_short_hex()}"


def generate_session_id() -> str:
    """Generate unique session ID ("sess_xxx")."""
    return f"sess_{_short_hex()}"
