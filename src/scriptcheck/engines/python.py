# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
In-process Python engine.

The script body runs inside a generated function so that a top-level
`return` hands an outcome back to the probe; a trailing bare expression is
returned as well. Bindings are the function's globals.

Output lands in the context's capture sinks instead of the process streams.
`print` is replaced, and `import sys` inside the script yields a view of the
`sys` module whose `stdout`/`stderr` are the sinks, so `sys.stderr.write`
is captured as well. Modules the script calls into still write to the real
process streams; only code in the script body is redirected.

Consequences of running as a function body: `from module import *` is not
allowed, and names assigned by the script are locals unless declared `global`.
"""

from __future__ import annotations

import ast
import builtins
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..errors import ScriptRuntimeError
from .base import EngineProvider, ScriptEngine

if TYPE_CHECKING:
    from ..context import ScriptContext

SCRIPT_FUNCTION = "__script__"
SCRIPT_FILENAME = "<script>"


def _wrap_module(tree: ast.Module) -> ast.Module:
    body = list(tree.body) or [ast.Pass()]
    last = body[-1]
    if isinstance(last, ast.Expr):
        body[-1] = ast.copy_location(ast.Return(value=last.value), last)
    wrapper = ast.parse(f"def {SCRIPT_FUNCTION}():\n    pass\n")
    wrapper.body[0].body = body
    return ast.fix_missing_locations(wrapper)


def _capturing_print(context: ScriptContext) -> Callable[..., None]:
    def _print(*args: Any, sep: str | None = " ", end: str | None = "\n", file: Any = None, flush: bool = False) -> None:
        if file is None or file is sys.stdout or file is sys.__stdout__:
            target = context.stdout
        elif file is sys.stderr or file is sys.__stderr__:
            target = context.stderr
        else:
            target = file
        builtins.print(*args, sep=sep, end=end, file=target, flush=flush)

    return _print


class _ScriptSys:
    """The `sys` module as seen by a script, with its streams swapped for the context sinks."""

    def __init__(self, context: ScriptContext):
        self.stdout = context.stdout
        self.stderr = context.stderr

    def __getattr__(self, name: str) -> Any:
        return getattr(sys, name)


def _script_builtins(context: ScriptContext) -> dict[str, Any]:
    script_sys = _ScriptSys(context)

    def _import(name: str, globals: Any = None, locals: Any = None, fromlist: Any = (), level: int = 0) -> Any:
        if name == "sys" and level == 0:
            return script_sys
        return builtins.__import__(name, globals, locals, fromlist, level)

    namespace = dict(vars(builtins))
    namespace["__import__"] = _import
    namespace["print"] = _capturing_print(context)
    return namespace


class PythonScriptEngine(ScriptEngine):
    def __init__(self, filename: str = SCRIPT_FILENAME):
        self.filename = filename

    def compile(self, text: str) -> Any:
        try:
            tree = ast.parse(text, filename=self.filename, mode="exec")
            return compile(_wrap_module(tree), self.filename, "exec")
        except SyntaxError as exc:
            raise ScriptRuntimeError(f"SyntaxError: {exc}") from exc

    def eval(self, text: str, context: ScriptContext) -> Any:
        code = self.compile(text)
        namespace: dict[str, Any] = {
            "__builtins__": _script_builtins(context),
            "__name__": "__script__",
        }
        namespace.update(context.bindings)
        try:
            exec(code, namespace)  # noqa: S102 - defines the wrapper function only
            return namespace[SCRIPT_FUNCTION]()
        except KeyboardInterrupt:
            raise
        except BaseException as exc:  # noqa: BLE001
            raise ScriptRuntimeError(f"{type(exc).__name__}: {exc}") from exc


class PythonEngineProvider(EngineProvider):
    engine_name = "python"
    language_name = "python"
    extensions = ("py",)
    names = ("python3", "cpython")

    def get_engine(self) -> PythonScriptEngine:
        return PythonScriptEngine()
