"""
Tests for sandboxed cell execution.

These spawn real interpreter processes.
"""

import pytest

from reasonkit.core.notebook import NOTEBOOK_PRESETS, run_in_sandbox
from reasonkit.models import CellStatus, CellType, ExecutionStatus, OutputType
from reasonkit.utils.exceptions import ExecutionTimeoutError

pytestmark = [pytest.mark.slow, pytest.mark.asyncio]


async def run(source: str, max_output_bytes: int = 1024, timeout: float = 10.0):
    return await run_in_sandbox(source, timeout, max_output_bytes)


class TestGuestExecution:
    async def test_print_and_result(self):
        result = await run("print('hello')\n1 + 2")

        assert result.status == ExecutionStatus.COMPLETE
        assert [(o.output_type, o.data) for o in result.outputs] == [
            (OutputType.STDOUT, "hello"),
            (OutputType.RESULT, "3"),
        ]

    async def test_stderr(self):
        result = await run("print('warn', file=stderr)")

        assert [(o.output_type, o.data) for o in result.outputs] == [
            (OutputType.STDERR, "warn")
        ]

    async def test_trailing_none_is_not_a_result(self):
        result = await run("x = [3, 1, 2]\nx.sort()")

        assert result.status == ExecutionStatus.COMPLETE
        assert result.outputs == []

    async def test_classes_and_allowed_imports(self):
        source = (
            "import math\n"
            "from collections import Counter\n"
            "class Point:\n"
            "    def __init__(self, x, y):\n"
            "        self.x = x\n"
            "        self.y = y\n"
            "    def norm(self):\n"
            "        return math.hypot(self.x, self.y)\n"
            "print(Counter('aab')['a'])\n"
            "Point(3, 4).norm()"
        )

        result = await run(source)

        assert result.status == ExecutionStatus.COMPLETE
        assert [o.data for o in result.outputs] == ["2", "5.0"]

    async def test_guest_exception(self):
        result = await run("print('lost')\nraise ValueError('boom')")

        assert result.status == ExecutionStatus.FAILED
        assert result.error == "ValueError: boom"
        assert result.outputs == []

    async def test_syntax_error(self):
        result = await run("def broken(:")

        assert result.status == ExecutionStatus.FAILED
        assert result.error.startswith("SyntaxError:")

    @pytest.mark.parametrize("source", ["import os", "import subprocess", "from . import x"])
    async def test_disallowed_imports(self, source):
        result = await run(source)

        assert result.status == ExecutionStatus.FAILED
        assert result.error.startswith("ImportError:")

    @pytest.mark.parametrize(
        "source", ["().__class__", "f = lambda: 0\nf.__globals__", "__builtins__"]
    )
    async def test_dunder_escapes_rejected(self, source):
        result = await run(source)

        assert result.status == ExecutionStatus.FAILED
        assert result.error.startswith("PermissionError:")

    @pytest.mark.parametrize(
        "source",
        [
            "import collections\ncollections._sys.modules['os']",
            "import random\nrandom._os.getcwd()",
            "from random import _os",
            "stdout._capture",
            "g = (x for x in [1])\ng.gi_frame.f_back",
            "import operator\noperator.attrgetter('x')",
            "from operator import attrgetter",
        ],
    )
    async def test_private_and_frame_attributes_rejected(self, source):
        result = await run(source)

        assert result.status == ExecutionStatus.FAILED
        assert result.error.startswith("PermissionError:")

    async def test_modules_expose_only_allowed_submodules(self):
        result = await run("import re\nre.enum")

        assert result.status == ExecutionStatus.FAILED
        assert result.error.startswith("AttributeError:")

    async def test_public_module_names_still_work(self):
        result = await run(
            "import json.decoder as decoder\n"
            "from math import *\n"
            "import collections.abc\n"
            "mapping = isinstance({}, collections.abc.Mapping)\n"
            "mapping, decoder.JSONDecoder().decode('[1]'), floor(pi)"
        )

        assert result.status == ExecutionStatus.COMPLETE, result.error
        assert result.outputs[-1].data == "(True, [1], 3)"

    async def test_open_is_unavailable(self):
        result = await run("open('/etc/passwd')")

        assert result.status == ExecutionStatus.FAILED
        assert result.error.startswith("NameError:")

    async def test_output_ceiling(self):
        result = await run("for _ in range(1000):\n    print('x' * 50)", max_output_bytes=1024)

        assert result.status == ExecutionStatus.COMPLETE
        assert len(result.outputs) == 20
        assert sum(len(o.data) for o in result.outputs) <= 1024

    async def test_deadline_kills_runaway_code(self):
        with pytest.raises(ExecutionTimeoutError):
            await run("while True:\n    pass", timeout=1.0)


class TestSandboxedNotebook:
    async def test_timeout_marks_cell_failed(self, sandbox_store):
        notebook = sandbox_store.create_notebook("sess-1")
        cell = sandbox_store.add_cell(notebook.id, CellType.CODE, "while True:\n    pass")

        with pytest.raises(ExecutionTimeoutError):
            await sandbox_store.execute_cell(notebook.id, cell.id, timeout=1.0)

        assert cell.status == CellStatus.FAILED
        assert cell.outputs[0].data.startswith("TimeoutError")

    async def test_notebook_namespace_is_per_execution(self, sandbox_store):
        notebook = sandbox_store.create_notebook("sess-1")
        first = sandbox_store.add_cell(notebook.id, CellType.CODE, "value = 42")
        second = sandbox_store.add_cell(notebook.id, CellType.CODE, "value")

        await sandbox_store.execute_cell(notebook.id, first.id)
        execution = await sandbox_store.execute_cell(notebook.id, second.id)

        assert execution.status == ExecutionStatus.FAILED
        assert execution.error.startswith("NameError:")

    @pytest.mark.parametrize("name", sorted(NOTEBOOK_PRESETS))
    async def test_preset_code_runs(self, sandbox_store, name):
        notebook = sandbox_store.create_from_preset("sess-1", name)

        for cell in notebook.cells:
            if cell.cell_type != CellType.CODE:
                continue
            execution = await sandbox_store.execute_cell(notebook.id, cell.id)
            assert execution.status == ExecutionStatus.COMPLETE, execution.error
