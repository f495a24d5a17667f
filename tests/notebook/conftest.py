"""Fixtures for notebook tests.

Store tests run against a scripted runner so they stay fast and
deterministic; tests marked slow use the real spawned sandbox.
"""

import pytest

from reasonkit.config import NotebookConfig
from reasonkit.core.notebook import NotebookStore, SandboxResult
from reasonkit.models import ExecutionStatus, Output
from reasonkit.utils.exceptions import ExecutionTimeoutError


class ScriptedRunner:
    """Returns queued results in order and records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, float, int]] = []
        self.results: list[SandboxResult | Exception] = []

    def push(self, result: SandboxResult | Exception) -> None:
        self.results.append(result)

    def complete(self, *outputs: tuple[str, str]) -> None:
        self.push(
            SandboxResult(
                status=ExecutionStatus.COMPLETE,
                outputs=[Output(output_type=kind, data=data) for kind, data in outputs],
            )
        )

    def fail(self, error: str) -> None:
        self.push(SandboxResult(status=ExecutionStatus.FAILED, error=error))

    def time_out(self, timeout: float = 5.0) -> None:
        self.push(ExecutionTimeoutError(f"Execution timed out after {timeout}s"))

    async def __call__(self, source: str, timeout: float, max_output_bytes: int) -> SandboxResult:
        self.calls.append((source, timeout, max_output_bytes))
        result = self.results.pop(0) if self.results else SandboxResult(
            status=ExecutionStatus.COMPLETE
        )
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def runner() -> ScriptedRunner:
    return ScriptedRunner()


@pytest.fixture
def notebook_config() -> NotebookConfig:
    return NotebookConfig(max_cells=5, max_executions=3)


@pytest.fixture
def store(notebook_config, runner) -> NotebookStore:
    return NotebookStore(notebook_config, runner=runner)


@pytest.fixture
def sandbox_store() -> NotebookStore:
    """Store executing cells in real sandbox processes."""
    return NotebookStore(NotebookConfig(max_output_bytes=1024))
