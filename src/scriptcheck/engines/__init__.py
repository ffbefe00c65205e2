# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Script engines and the registry that selects them by language."""

from .base import EngineProvider, ScriptEngine
from .python import PythonEngineProvider, PythonScriptEngine
from .registry import ENTRY_POINT_GROUP, EngineRegistry, EngineTracker, builtin_providers
from .shell import ShellEngineProvider, ShellScriptEngine

__all__ = [
    "ENTRY_POINT_GROUP",
    "EngineProvider",
    "EngineRegistry",
    "EngineTracker",
    "PythonEngineProvider",
    "PythonScriptEngine",
    "ScriptEngine",
    "ShellEngineProvider",
    "ShellScriptEngine",
    "builtin_providers",
]
