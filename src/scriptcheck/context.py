# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Execution context: bindings, output capture sinks and the resource tracker."""

from __future__ import annotations

import io
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from .models import ResultLog
from .services import ResourceTracker, ScriptHelper, ServiceRegistry

LOG_BINDING = "log"
SCRIPT_HELPER_BINDING = "scriptHelper"
OSGI_BINDING = "osgi"
BUNDLE_CONTEXT_BINDING = "bundleContext"
RESOURCE_RESOLVER_BINDING = "resourceResolver"
SESSION_BINDING = "session"


@dataclass
class ScriptContext:
    """Everything one script evaluation sees. Owned by a single execution."""

    bindings: Mapping[str, Any]
    log: ResultLog
    tracker: ResourceTracker
    stdout: io.StringIO = field(default_factory=io.StringIO)
    stderr: io.StringIO = field(default_factory=io.StringIO)


def build_context(
    service_registry: ServiceRegistry,
    log: ResultLog | None = None,
    extra_bindings: Mapping[str, Any] | None = None,
) -> ScriptContext:
    """
    Assemble a fresh context.

    Defaults are laid down first and `extra_bindings` merged over them, so an
    extra with a default's name replaces it. The resulting mapping is read-only.
    """
    log = log if log is not None else ResultLog()
    tracker = ResourceTracker(service_registry)
    helper = ScriptHelper(service_registry, tracker)

    bindings: dict[str, Any] = {
        LOG_BINDING: log,
        SCRIPT_HELPER_BINDING: helper,
        # also exposed under the name script consoles use
        OSGI_BINDING: helper,
        BUNDLE_CONTEXT_BINDING: service_registry,
    }
    bindings.update(extra_bindings or {})
    return ScriptContext(bindings=MappingProxyType(bindings), log=log, tracker=tracker)


__all__ = [
    "BUNDLE_CONTEXT_BINDING",
    "LOG_BINDING",
    "OSGI_BINDING",
    "RESOURCE_RESOLVER_BINDING",
    "SCRIPT_HELPER_BINDING",
    "SESSION_BINDING",
    "ScriptContext",
    "build_context",
]
