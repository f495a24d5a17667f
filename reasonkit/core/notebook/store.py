"""
Ephemeral notebook store.

Holds at most one notebook per session. Code cells execute in a killable
sandbox process under a wall-clock deadline and an output-byte ceiling.
Notebooks idle longer than the configured TTL are evicted by a periodic
sweep task.
"""

import asyncio
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

from reasonkit.config import NotebookConfig
from reasonkit.core.notebook.presets import get_preset, list_presets
from reasonkit.core.notebook.sandbox import SandboxResult, run_in_sandbox
from reasonkit.models.notebook import (
    Cell,
    CellStatus,
    CellType,
    Execution,
    ExecutionStatus,
    Notebook,
    Output,
    OutputType,
)
from reasonkit.utils.exceptions import (
    CapacityExceededError,
    ExecutionTimeoutError,
    NotFoundError,
    ValidationError,
)
from reasonkit.utils.id_generator import (
    generate_cell_id,
    generate_execution_id,
    generate_notebook_id,
)
from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_LANGUAGES = frozenset({"python"})
DEFAULT_LANGUAGE = "python"

SandboxRunner = Callable[[str, float, int], Awaitable[SandboxResult]]


class NotebookStore:
    """Per-session notebooks with sandboxed code execution."""

    def __init__(
        self,
        config: NotebookConfig | None = None,
        runner: SandboxRunner = run_in_sandbox,
    ):
        """
        Initialize the store.

        Args:
            config: Notebook limits and timings
            runner: Coroutine executing one cell's source in isolation
        """
        self.config = config or NotebookConfig()
        self._runner = runner
        self._notebooks: dict[str, Notebook] = {}
        self._by_session: dict[str, str] = {}
        self._sweep_task: asyncio.Task | None = None

    # ═══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════

    def start(self) -> None:
        """Start the idle sweep. Must be called from a running event loop."""
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.get_running_loop().create_task(self._sweep_loop())
            logger.info(f"Notebook sweep started (every {self.config.sweep_interval}s)")

    def cleanup(self) -> None:
        """Stop the sweep and drop every notebook."""
        if self._sweep_task is not None:
            self._sweep_task.cancel()
            self._sweep_task = None
        self._notebooks.clear()
        self._by_session.clear()

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.sweep_interval)
            self.sweep_idle()

    def sweep_idle(self, now: datetime | None = None) -> list[str]:
        """
        Delete notebooks idle longer than the TTL.

        Returns:
            Ids of the evicted notebooks
        """
        now = now or datetime.now(UTC)
        cutoff = now - timedelta(seconds=self.config.idle_ttl)
        evicted = [nb.id for nb in list(self._notebooks.values()) if nb.last_accessed_at < cutoff]
        for notebook_id in evicted:
            self._remove(notebook_id)
        if evicted:
            logger.info(f"Evicted {len(evicted)} idle notebooks")
        return evicted

    # ═══════════════════════════════════════════════════════════
    # NOTEBOOKS
    # ═══════════════════════════════════════════════════════════

    def create_notebook(self, session_id: str) -> Notebook:
        """Return the session's notebook, creating it on first use."""
        existing = self.get_notebook_by_session(session_id)
        if existing is not None:
            return existing
        notebook = Notebook(id=generate_notebook_id(), session_id=session_id)
        self._notebooks[notebook.id] = notebook
        self._by_session[session_id] = notebook.id
        logger.info(f"Created notebook {notebook.id} for session {session_id}")
        return notebook

    def create_from_preset(self, session_id: str, preset_name: str) -> Notebook:
        """
        Populate the session's notebook with a preset's cells.

        Raises:
            ValidationError: Unknown preset name
        """
        preset = get_preset(preset_name)
        if preset is None:
            raise ValidationError(
                f"Unknown notebook preset: {preset_name}", {"available": list_presets()}
            )
        notebook = self.create_notebook(session_id)
        notebook.metadata["preset"] = preset_name
        for cell in preset.cells:
            self.add_cell(notebook.id, cell["cell_type"], cell["source"])
        return notebook

    def get_notebook(self, notebook_id: str) -> Notebook | None:
        notebook = self._notebooks.get(notebook_id)
        if notebook is not None:
            self._touch(notebook)
        return notebook

    def get_notebook_by_session(self, session_id: str) -> Notebook | None:
        notebook_id = self._by_session.get(session_id)
        return self.get_notebook(notebook_id) if notebook_id else None

    def list_notebooks(self) -> list[Notebook]:
        return list(self._notebooks.values())

    def delete_notebook(self, notebook_id: str) -> bool:
        return self._remove(notebook_id)

    # ═══════════════════════════════════════════════════════════
    # CELLS
    # ═══════════════════════════════════════════════════════════

    def add_cell(
        self,
        notebook_id: str,
        cell_type: CellType | str,
        source: str,
        language: str | None = None,
        index: int | None = None,
    ) -> Cell:
        """
        Insert a cell at index, or append when index is None or out of range.

        Raises:
            NotFoundError: Notebook does not exist
            CapacityExceededError: Notebook already holds max_cells cells
            ValidationError: Unknown cell type
        """
        notebook = self._require_notebook(notebook_id)
        try:
            cell_type = CellType(cell_type)
        except ValueError as e:
            raise ValidationError(f"Unknown cell type: {cell_type}") from e

        if len(notebook.cells) >= self.config.max_cells:
            raise CapacityExceededError(
                f"Maximum number of cells ({self.config.max_cells}) reached",
                {"notebook_id": notebook_id, "limit": self.config.max_cells},
            )

        is_code = cell_type == CellType.CODE
        cell = Cell(
            id=generate_cell_id(),
            cell_type=cell_type,
            source=source,
            language=(language or DEFAULT_LANGUAGE) if is_code else None,
            status=CellStatus.IDLE if is_code else None,
        )
        if index is not None and 0 <= index <= len(notebook.cells):
            notebook.cells.insert(index, cell)
        else:
            notebook.cells.append(cell)
        return cell

    def update_cell(
        self,
        notebook_id: str,
        cell_id: str,
        source: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> Cell:
        """
        Replace a cell's source and/or merge its metadata.

        A code cell whose source changes drops its stale outputs.

        Raises:
            NotFoundError: Notebook or cell does not exist
        """
        notebook = self._require_notebook(notebook_id)
        cell = self._require_cell(notebook, cell_id)
        if source is not None and source != cell.source:
            cell.source = source
            if cell.cell_type == CellType.CODE:
                cell.outputs = []
                cell.status = CellStatus.IDLE
        if metadata:
            cell.metadata.update(metadata)
        return cell

    def delete_cell(self, notebook_id: str, cell_id: str) -> bool:
        notebook = self._require_notebook(notebook_id)
        cell = notebook.find_cell(cell_id)
        if cell is None:
            return False
        notebook.cells.remove(cell)
        return True

    # ═══════════════════════════════════════════════════════════
    # EXECUTION
    # ═══════════════════════════════════════════════════════════

    async def execute_cell(
        self, notebook_id: str, cell_id: str, timeout: float | None = None
    ) -> Execution:
        """
        Run a code cell in the sandbox.

        A guest exception or a runner failure does not raise: the cell and
        execution end up failed with a single error output. Timeouts and
        cancellation fail the cell too, then propagate.

        Args:
            notebook_id: Notebook holding the cell
            cell_id: Code cell to run
            timeout: Deadline in seconds (default: config.default_timeout)

        Returns:
            The completed or failed Execution

        Raises:
            NotFoundError: Notebook or cell does not exist
            ValidationError: Cell is not a code cell, or timeout is not positive
            CapacityExceededError: Notebook reached max_executions
            ExecutionTimeoutError: Deadline passed; cell and execution are failed
        """
        notebook = self._require_notebook(notebook_id)
        cell = self._require_cell(notebook, cell_id)
        if cell.cell_type != CellType.CODE:
            raise ValidationError("Only code cells can be executed", {"cell_id": cell_id})
        if len(notebook.executions) >= self.config.max_executions:
            raise CapacityExceededError(
                f"Maximum number of executions ({self.config.max_executions}) reached",
                {"notebook_id": notebook_id, "limit": self.config.max_executions},
            )
        timeout = self.config.default_timeout if timeout is None else timeout
        if timeout <= 0:
            raise ValidationError("Timeout must be positive", {"timeout": timeout})

        execution = Execution(id=generate_execution_id(), cell_id=cell_id)
        notebook.executions[execution.id] = execution
        cell.status = CellStatus.RUNNING
        cell.outputs = []

        language = cell.language or DEFAULT_LANGUAGE
        if language not in SUPPORTED_LANGUAGES:
            self._fail(cell, execution, f"UnsupportedLanguage: {language}")
            return execution

        try:
            result = await self._runner(cell.source, timeout, self.config.max_output_bytes)
        except ExecutionTimeoutError as e:
            self._fail(cell, execution, f"TimeoutError: {e.message}")
            logger.warning(f"Cell {cell_id} in notebook {notebook_id} timed out after {timeout}s")
            raise
        except asyncio.CancelledError:
            self._fail(cell, execution, "CancelledError: execution cancelled")
            logger.warning(f"Cell {cell_id} in notebook {notebook_id} was cancelled")
            raise
        except Exception as e:
            self._fail(cell, execution, f"{type(e).__name__}: {e}")
            logger.error(f"Sandbox runner failed for cell {cell_id}: {e}")
            self._touch(notebook)
            return execution

        if result.status == ExecutionStatus.FAILED:
            self._fail(cell, execution, result.error or "Error: execution failed")
            logger.debug(f"Cell {cell_id} failed: {execution.error}")
        else:
            cell.status = CellStatus.IDLE
            cell.outputs = list(result.outputs)
            execution.outputs = list(result.outputs)
            execution.status = ExecutionStatus.COMPLETE
            execution.completed_at = datetime.now(UTC)
        self._touch(notebook)
        return execution

    @staticmethod
    def _fail(cell: Cell, execution: Execution, error: str) -> None:
        output = Output(output_type=OutputType.ERROR, data=error)
        cell.status = CellStatus.FAILED
        cell.outputs = [output]
        execution.status = ExecutionStatus.FAILED
        execution.outputs = [output]
        execution.error = error
        execution.completed_at = datetime.now(UTC)

    # ═══════════════════════════════════════════════════════════
    # EXPORT
    # ═══════════════════════════════════════════════════════════

    def export_to_srcmd(self, notebook_id: str) -> str:
        """Render the notebook as one markdown document."""
        notebook = self._require_notebook(notebook_id)
        parts: list[str] = []
        for cell in notebook.cells:
            if cell.cell_type == CellType.MARKDOWN:
                parts.append(f"{cell.source}\n\n")
                continue
            parts.append(f"```{cell.language or DEFAULT_LANGUAGE}\n{cell.source}\n```\n")
            if cell.outputs:
                parts.append("\n**Output:**\n```\n")
                for output in cell.outputs:
                    if output.output_type == OutputType.STDOUT:
                        parts.append(f"{output.data}\n")
                    elif output.output_type == OutputType.STDERR:
                        parts.append(f"Stderr: {output.data}\n")
                    elif output.output_type == OutputType.RESULT:
                        parts.append(f"Result: {output.data}\n")
                    else:
                        parts.append(f"Error: {output.data}\n")
                parts.append("```\n\n")
        return "".join(parts)

    def export_to_json(self, notebook_id: str) -> dict[str, Any]:
        """JSON-ready record with cells and the full execution log."""
        notebook = self._require_notebook(notebook_id)
        return {
            "id": notebook.id,
            "session_id": notebook.session_id,
            "created_at": notebook.created_at.isoformat(),
            "metadata": dict(notebook.metadata),
            "cells": [cell.model_dump(mode="json") for cell in notebook.cells],
            "executions": [
                execution.model_dump(mode="json") for execution in notebook.executions.values()
            ],
        }

    # ═══════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════

    def _require_notebook(self, notebook_id: str) -> Notebook:
        notebook = self.get_notebook(notebook_id)
        if notebook is None:
            raise NotFoundError(f"Notebook {notebook_id} not found", {"notebook_id": notebook_id})
        return notebook

    @staticmethod
    def _require_cell(notebook: Notebook, cell_id: str) -> Cell:
        cell = notebook.find_cell(cell_id)
        if cell is None:
            raise NotFoundError(
                f"Cell {cell_id} not found", {"notebook_id": notebook.id, "cell_id": cell_id}
            )
        return cell

    @staticmethod
    def _touch(notebook: Notebook) -> None:
        notebook.last_accessed_at = datetime.now(UTC)

    def _remove(self, notebook_id: str) -> bool:
        notebook = self._notebooks.pop(notebook_id, None)
        if notebook is None:
            return False
        if self._by_session.get(notebook.session_id) == notebook_id:
            del self._by_session[notebook.session_id]
        return True
