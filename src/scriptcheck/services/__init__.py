# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Host service registry and per-execution service tracking."""

from .registry import (
    InMemoryServiceRegistry,
    ServiceReference,
    ServiceRegistry,
    parse_filter,
    type_name_of,
)
from .tracker import ResourceTracker, ScriptHelper

__all__ = [
    "InMemoryServiceRegistry",
    "ResourceTracker",
    "ScriptHelper",
    "ServiceReference",
    "ServiceRegistry",
    "parse_filter",
    "type_name_of",
]
