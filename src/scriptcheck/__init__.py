# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
ScriptCheck package entrypoint.

Runs operator-supplied scripts as health-check probes and turns their log
calls, printed output and return values into a severity-leveled Result.
Script sources, engines, the host service registry and the content repository
are all injectable; domain objects are modeled with typed dataclasses.
"""

from .check import ProbeStage, ScriptedHealthCheck
from .config import HealthCheckConfig, ScriptCheckSettings, load_settings
from .engines import EngineProvider, EngineRegistry, ScriptEngine
from .errors import (
    EngineNotFound,
    ScriptCheckError,
    ScriptRuntimeError,
    SetupError,
    SourceNotFound,
    SourceReadError,
)
from .log import setup_logging
from .models import Provenance, Result, ResultEntry, ResultLog, ScriptSource, Severity, Status
from .repository import FilesystemRepository, InMemoryRepository
from .services import InMemoryServiceRegistry
from .version import __version__

__all__ = [
    "EngineNotFound",
    "EngineProvider",
    "EngineRegistry",
    "FilesystemRepository",
    "HealthCheckConfig",
    "InMemoryRepository",
    "InMemoryServiceRegistry",
    "ProbeStage",
    "Provenance",
    "Result",
    "ResultEntry",
    "ResultLog",
    "ScriptCheckError",
    "ScriptCheckSettings",
    "ScriptEngine",
    "ScriptRuntimeError",
    "ScriptSource",
    "ScriptedHealthCheck",
    "SetupError",
    "Severity",
    "SourceNotFound",
    "SourceReadError",
    "Status",
    "load_settings",
    "setup_logging",
    "__version__",
]
