"""
Sandbox child process.

Runs one cell's source in a fresh interpreter started by the host. The
code sees a restricted set of builtins, an import hook that hands out
views of the public names of a few pure-computation modules, and
print/stdout/stderr channels that record output instead of writing it.
Results travel back over a one-way pipe.

This module only depends on the standard library.
"""

import ast
import builtins
import importlib
import types
from typing import Any

ALLOWED_MODULES = frozenset(
    {
        "bisect",
        "collections",
        "datetime",
        "functools",
        "heapq",
        "itertools",
        "json",
        "math",
        "operator",
        "random",
        "re",
        "statistics",
        "string",
    }
)

SAFE_BUILTINS = (
    "abs",
    "all",
    "any",
    "ascii",
    "bin",
    "bool",
    "bytes",
    "callable",
    "chr",
    "complex",
    "dict",
    "divmod",
    "enumerate",
    "filter",
    "float",
    "format",
    "frozenset",
    "hash",
    "hex",
    "int",
    "isinstance",
    "issubclass",
    "iter",
    "len",
    "list",
    "map",
    "max",
    "min",
    "next",
    "oct",
    "ord",
    "pow",
    "range",
    "repr",
    "reversed",
    "round",
    "set",
    "slice",
    "sorted",
    "str",
    "sum",
    "tuple",
    "type",
    "zip",
    "property",
    "staticmethod",
    "classmethod",
    "super",
    "object",
    "Exception",
    "ArithmeticError",
    "AssertionError",
    "AttributeError",
    "IndexError",
    "KeyError",
    "LookupError",
    "NotImplementedError",
    "RuntimeError",
    "StopIteration",
    "TypeError",
    "ValueError",
    "ZeroDivisionError",
    "NotImplemented",
    "True",
    "False",
    "None",
)

# The only underscore attributes guest code may touch
ALLOWED_DUNDERS = frozenset(
    {
        "__init__",
        "__name__",
        "__doc__",
        "__repr__",
        "__str__",
        "__len__",
        "__iter__",
        "__next__",
        "__contains__",
        "__getitem__",
        "__setitem__",
        "__eq__",
        "__lt__",
        "__le__",
        "__gt__",
        "__ge__",
        "__hash__",
        "__add__",
        "__call__",
    }
)

# Public names that reach frames or look attributes up by string
BLOCKED_ATTRIBUTES = frozenset(
    {
        "gi_frame",
        "gi_code",
        "gi_yieldfrom",
        "cr_frame",
        "cr_code",
        "cr_await",
        "ag_frame",
        "ag_code",
        "ag_await",
        "tb_frame",
        "tb_next",
        "f_back",
        "f_builtins",
        "f_code",
        "f_globals",
        "f_locals",
        "attrgetter",
        "methodcaller",
    }
)


class OutputCapture:
    """Collects output records under a cumulative UTF-8 byte ceiling."""

    def __init__(self, max_bytes: int):
        self.max_bytes = max_bytes
        self.used = 0
        self.records: list[dict[str, str]] = []

    def emit(self, output_type: str, data: str) -> None:
        size = len(data.encode("utf-8"))
        if self.used + size > self.max_bytes:
            # Past the ceiling output is dropped
            self.used = self.max_bytes
            return
        self.used += size
        self.records.append({"output_type": output_type, "data": data})


class Channel:
    """File-like writer bound to one output type."""

    def __init__(self, capture: OutputCapture, output_type: str):
        self._capture = capture
        self._output_type = output_type

    def write(self, text: str) -> int:
        text = str(text)
        if text.strip("\n"):
            self._capture.emit(self._output_type, text.rstrip("\n"))
        return len(text)

    def flush(self) -> None:
        pass


def _public_view(module: types.ModuleType, seen: dict | None = None) -> types.SimpleNamespace:
    """Namespace holding a module's public names; nested modules become views or vanish."""
    seen = {} if seen is None else seen
    view = seen.get(module.__name__)
    if view is not None:
        return view
    view = seen[module.__name__] = types.SimpleNamespace()
    for name, value in vars(module).items():
        if name.startswith("_") or name in BLOCKED_ATTRIBUTES:
            continue
        if isinstance(value, types.ModuleType):
            if value.__name__.split(".")[0] not in ALLOWED_MODULES:
                continue
            value = _public_view(value, seen)
        setattr(view, name, value)
    return view


def _guarded_import(name, globals=None, locals=None, fromlist=(), level=0):
    if level != 0 or name.split(".")[0] not in ALLOWED_MODULES:
        raise ImportError(f"Import of '{name}' is not allowed")
    return _public_view(importlib.__import__(name, globals, locals, fromlist, level))


def _is_blocked(name: str) -> bool:
    return name in BLOCKED_ATTRIBUTES or (name.startswith("_") and name not in ALLOWED_DUNDERS)


def _check_source(tree: ast.AST) -> None:
    for node in ast.walk(tree):
        if isinstance(node, ast.Attribute) and _is_blocked(node.attr):
            raise PermissionError(f"Access to '{node.attr}' is not allowed")
        if isinstance(node, ast.ImportFrom):
            for alias in node.names:
                if _is_blocked(alias.name):
                    raise PermissionError(f"Import of '{alias.name}' is not allowed")
        if isinstance(node, ast.Name):
            name = node.id
            if name.startswith("__") and name.endswith("__") and name not in ALLOWED_DUNDERS:
                raise PermissionError(f"Access to '{name}' is not allowed")


def build_globals(capture: OutputCapture) -> dict[str, Any]:
    """Fresh global namespace for one execution."""
    safe = {name: getattr(builtins, name) for name in SAFE_BUILTINS}
    safe["__build_class__"] = builtins.__build_class__
    safe["__import__"] = _guarded_import

    stdout = Channel(capture, "stdout")
    stderr = Channel(capture, "stderr")

    def guest_print(*args, sep=" ", end="\n", file=None, flush=False):
        # One record per call
        text = (" " if sep is None else str(sep)).join(str(arg) for arg in args)
        output_type = "stderr" if file is stderr else "stdout"
        capture.emit(output_type, text)

    safe["print"] = guest_print
    return {
        "__builtins__": safe,
        "__name__": "__notebook__",
        "stdout": stdout,
        "stderr": stderr,
    }


def execute(source: str, capture: OutputCapture) -> Any:
    """Run source; return the value of a trailing expression, if any."""
    tree = ast.parse(source, filename="<cell>", mode="exec")
    _check_source(tree)

    trailing = None
    if tree.body and isinstance(tree.body[-1], ast.Expr):
        trailing = ast.Expression(body=tree.body.pop().value)

    namespace = build_globals(capture)
    exec(compile(tree, "<cell>", "exec"), namespace)
    if trailing is None:
        return None
    return eval(compile(trailing, "<cell>", "eval"), namespace)


def run_guest(source: str, max_output_bytes: int, conn) -> None:
    """Child process entry point; sends exactly one message on conn."""
    capture = OutputCapture(max_output_bytes)
    try:
        result = execute(source, capture)
        if result is not None:
            capture.emit("result", repr(result))
        message = {"status": "complete", "outputs": capture.records, "error": None}
    except BaseException as e:  # SystemExit and friends are guest errors too
        message = {"status": "failed", "outputs": [], "error": f"{type(e).__name__}: {e}"}
    try:
        conn.send(message)
    finally:
        conn.close()
