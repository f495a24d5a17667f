"""Ephemeral notebooks with sandboxed code execution."""

from reasonkit.core.notebook.presets import NOTEBOOK_PRESETS
from reasonkit.core.notebook.sandbox import SandboxResult, run_in_sandbox
from reasonkit.core.notebook.store import NotebookStore

__all__ = [
    "NOTEBOOK_PRESETS",
    "NotebookStore",
    "SandboxResult",
    "run_in_sandbox",
]
