"""
Host side of sandboxed cell execution.

Each execution gets its own spawned interpreter, so a runaway cell can be
hard-killed once its deadline passes instead of merely being ignored.
"""

import asyncio
import multiprocessing
from typing import Any

from pydantic import BaseModel, Field

from reasonkit.core.notebook.guest import run_guest
from reasonkit.models.notebook import ExecutionStatus, Output
from reasonkit.utils.exceptions import ExecutionTimeoutError
from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)

_context = multiprocessing.get_context("spawn")


class SandboxResult(BaseModel):
    """Outcome reported by the guest process."""

    status: ExecutionStatus
    outputs: list[Output] = Field(default_factory=list)
    error: str | None = None


async def run_in_sandbox(source: str, timeout: float, max_output_bytes: int) -> SandboxResult:
    """
    Execute source in a fresh child process.

    Args:
        source: Python source of the cell
        timeout: Wall-clock deadline in seconds, process start included
        max_output_bytes: Cumulative output ceiling for this execution

    Returns:
        SandboxResult with captured outputs, or the guest's error

    Raises:
        ExecutionTimeoutError: The deadline passed; the child has been killed
    """
    parent_conn, child_conn = _context.Pipe(duplex=False)
    process = _context.Process(
        target=run_guest,
        args=(source, max_output_bytes, child_conn),
        daemon=True,
    )
    process.start()
    child_conn.close()

    try:
        ready = await asyncio.to_thread(parent_conn.poll, timeout)
        if not ready:
            raise ExecutionTimeoutError(
                f"Execution timed out after {timeout}s", {"timeout": timeout}
            )
        try:
            message: dict[str, Any] = parent_conn.recv()
        except EOFError:
            # Child died before reporting (e.g. killed by the OS)
            process.join(timeout=1.0)
            message = {
                "status": "failed",
                "outputs": [],
                "error": f"SandboxError: process exited with code {process.exitcode}",
            }
        return SandboxResult.model_validate(message)
    finally:
        if process.is_alive():
            logger.debug(f"Killing sandbox process {process.pid}")
            process.kill()
        process.join(timeout=1.0)
        parent_conn.close()
