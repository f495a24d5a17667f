"""Session-level records: statistics and export envelopes."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


class SessionExport(BaseModel):
    """One exported artifact tagged with its session type."""

    version: str = "1.0.0"
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    session_id: str
    session_type: str
    data: dict[str, Any]


class SessionStatistics(BaseModel):
    """Aggregated view over a session's stores."""

    session_id: str
    created_at: datetime
    last_accessed_at: datetime
    thought_count: int
    tools_used: list[str]
    total_operations: int
    is_active: bool
    remaining_thoughts: int | None
    stores: dict[str, int]
