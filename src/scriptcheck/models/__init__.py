# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for ScriptCheck."""

from .result import Result, ResultEntry, ResultLog, Severity, Status
from .source import Provenance, ScriptSource

__all__ = [
    "Provenance",
    "Result",
    "ResultEntry",
    "ResultLog",
    "ScriptSource",
    "Severity",
    "Status",
]
