"""Ephemeral notebook models."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class CellType(str, Enum):
    MARKDOWN = "markdown"
    CODE = "code"


class CellStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    FAILED = "failed"


class ExecutionStatus(str, Enum):
    RUNNING = "running"
    COMPLETE = "complete"
    FAILED = "failed"


class OutputType(str, Enum):
    STDOUT = "stdout"
    STDERR = "stderr"
    RESULT = "result"
    ERROR = "error"


class Output(BaseModel):
    """One captured output record."""

    output_type: OutputType
    data: str


class Cell(BaseModel):
    """Markdown or code cell. Status and outputs only apply to code cells."""

    id: str
    cell_type: CellType
    source: str
    language: str | None = None
    status: CellStatus | None = None
    outputs: list[Output] = Field(default_factory=list)
    metadata: dict[str, Any] = Field(default_factory=dict)


class Execution(BaseModel):
    """Record of one execute_cell call."""

    id: str
    cell_id: str
    status: ExecutionStatus = ExecutionStatus.RUNNING
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    completed_at: datetime | None = None
    outputs: list[Output] = Field(default_factory=list)
    error: str | None = None

    @property
    def duration_ms(self) -> float | None:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds() * 1000


class Notebook(BaseModel):
    """Per-session ordered sequence of cells plus its execution log."""

    id: str
    session_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    last_accessed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    cells: list[Cell] = Field(default_factory=list)
    executions: dict[str, Execution] = Field(default_factory=dict)
    metadata: dict[str, Any] = Field(default_factory=dict)

    def find_cell(self, cell_id: str) -> Cell | None:
        for cell in self.cells:
            if cell.id == cell_id:
                return cell
        return None


class NotebookPreset(BaseModel):
    """Template notebook for a reasoning pattern."""

    name: str
    description: str
    cells: list[dict[str, str]] = Field(default_factory=list)
