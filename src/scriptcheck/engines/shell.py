# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Shell engine: runs the script text with `<shell> -c` in a subprocess."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..config import load_settings
from ..errors import ScriptRuntimeError
from .base import EngineProvider, ScriptEngine

if TYPE_CHECKING:
    from ..context import ScriptContext

logger = logging.getLogger(__name__)

ENV_PREFIX = "SCRIPTCHECK_"
_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


def export_bindings(bindings: Mapping[str, Any]) -> dict[str, str]:
    """Scalar bindings as environment variables, e.g. `hcName` -> `SCRIPTCHECK_HC_NAME`."""
    env: dict[str, str] = {}
    for key, value in bindings.items():
        if isinstance(value, (str, int, float, bool)):
            env[ENV_PREFIX + _CAMEL_BOUNDARY.sub("_", key).upper()] = str(value)
    return env


class ShellScriptEngine(ScriptEngine):
    def __init__(self, shell: str):
        self.shell = shell

    def eval(self, text: str, context: ScriptContext) -> Any:
        env = dict(os.environ)
        env.update(export_bindings(context.bindings))
        logger.debug("Running shell script with %s", self.shell)
        try:
            completed = subprocess.run(
                [self.shell, "-c", text],
                capture_output=True,
                text=True,
                env=env,
                check=False,
            )
        except OSError as exc:
            raise ScriptRuntimeError(f"Could not start {self.shell}: {exc}") from exc

        context.stdout.write(completed.stdout or "")
        context.stderr.write(completed.stderr or "")
        if completed.returncode != 0:
            raise ScriptRuntimeError(f"Shell script exited with status {completed.returncode}")
        return None


class ShellEngineProvider(EngineProvider):
    engine_name = "shell"
    language_name = "shell"
    extensions = ("sh", "bash")

    def __init__(self, shell: str | None = None):
        self.shell = shell

    def get_engine(self) -> ShellScriptEngine:
        return ShellScriptEngine(self.shell or load_settings().shell)
