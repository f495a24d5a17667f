"""
Custom exception hierarchy for reasonkit.

Provides structured error types for the session, graph, notebook and
persistence layers. All exceptions inherit from ReasonKitError for easy catching.
"""


class ReasonKitError(Exception):
    """
    Base exception for all reasonkit errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize reasonkit error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class CapacityExceededError(ReasonKitError):
    """
    Resource ceiling errors.
    Raised when a node, edge, cell or execution ceiling has been reached.
    """

    pass


class DepthLimitError(CapacityExceededError):
    """
    Hierarchy depth errors.
    Raised when a graph node would sit deeper than the deployment mode allows.
    """

    pass


class NotFoundError(ReasonKitError):
    """
    Resource not found errors.
    Raised when a requested node, edge, session, notebook or cell doesn't exist.
    """

    pass


class ValidationError(ReasonKitError):
    """
    Validation errors.
    Raised when input validation fails or data is invalid.
    """

    pass


class SessionClosedError(ReasonKitError):
    """
    Raised when a mutation reaches a session that has already been cleaned up.
    """

    pass


class ExecutionError(ReasonKitError):
    """
    Sandboxed execution errors.
    Raised when notebook code cannot be run to completion.
    """

    pass


class ExecutionTimeoutError(ExecutionError):
    """
    Raised when a sandboxed execution misses its wall-clock deadline.
    """

    pass


class PersistenceError(ReasonKitError):
    """
    Disk persistence errors (I/O or parse failures).
    """

    pass


class ConfigurationError(ReasonKitError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
