# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Script runner: evaluate under output capture, then release acquired services."""

from __future__ import annotations

import logging
from typing import Any

from .context import ScriptContext
from .engines import ScriptEngine
from .models import ResultLog

logger = logging.getLogger(__name__)


def append_streams(log: ResultLog, context: ScriptContext) -> None:
    context.stdout.flush()
    stdout = context.stdout.getvalue()
    if stdout.strip():
        log.info("stdout of script: {}", stdout)

    context.stderr.flush()
    stderr = context.stderr.getvalue()
    if stderr.strip():
        # error output alone marks the check as failing
        log.critical("stderr of script: {}", stderr)


def run_script(engine: ScriptEngine, text: str, context: ScriptContext) -> Any:
    """
    Evaluate `text` synchronously and return the script's value.

    Captured output is appended to the context log and every acquired service
    is released on all exit paths; engine exceptions propagate afterwards.
    """
    try:
        return engine.eval(text, context)
    finally:
        try:
            append_streams(context.log, context)
        finally:
            released = context.tracker.release_all()
            logger.debug("Script finished, %d acquired services released", released)


__all__ = ["append_streams", "run_script"]
