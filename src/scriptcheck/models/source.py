# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Resolved script source model."""

from dataclasses import dataclass
from enum import Enum


class Provenance(str, Enum):
    INLINE = "inline"
    URL = "url"
    REPOSITORY_PATH = "repository-path"


@dataclass(frozen=True)
class ScriptSource:
    """Literal script text plus where it came from. Rebuilt on every execution."""

    text: str
    provenance: Provenance
    location: str | None = None

    @property
    def line_count(self) -> int:
        return len(self.text.split("\n"))

    @property
    def label(self) -> str:
        return self.location if self.location else " as configured"
