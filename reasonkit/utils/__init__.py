"""Utility modules for reasonkit."""

from reasonkit.utils.exceptions import (
    CapacityExceededError,
    ConfigurationError,
    DepthLimitError,
    ExecutionError,
    ExecutionTimeoutError,
    NotFoundError,
    PersistenceError,
    ReasonKitError,
    SessionClosedError,
    ValidationError,
)
from reasonkit.utils.id_generator import (
    generate_artifact_id,
    generate_cell_id,
    generate_edge_id,
    generate_execution_id,
    generate_node_id,
    generate_notebook_id,
    generate_session_id,
)
from reasonkit.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_artifact_id",
    "generate_node_id",
    "generate_edge_id",
    "generate_notebook_id",
    "generate_cell_id",
    "generate_execution_id",
    "generate_session_id",
    # Exceptions
    "ReasonKitError",
    "CapacityExceededError",
    "DepthLimitError",
    "NotFoundError",
    "ValidationError",
    "SessionClosedError",
    "ExecutionError",
    "ExecutionTimeoutError",
    "PersistenceError",
    "ConfigurationError",
]
