# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Engine provider and engine base classes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..context import ScriptContext


class ScriptEngine(ABC):
    """Evaluates script text for one language. Instances are used for a single execution."""

    @abstractmethod
    def eval(self, text: str, context: ScriptContext) -> Any:
        """Run `text` against `context` and return the script's value (or None)."""


class EngineProvider(ABC):
    """
    Capability provider for one language.

    New languages are added by subclassing this and registering an instance
    (or publishing it through the `scriptcheck.engines` entry point group).
    """

    engine_name: str = "base"
    language_name: str = "base"
    extensions: tuple[str, ...] = ()
    names: tuple[str, ...] = ()

    @abstractmethod
    def get_engine(self) -> ScriptEngine: ...

    def matches_extension(self, name: str) -> bool:
        return name.lower() in (ext.lower() for ext in self.extensions)

    def matches_language(self, name: str) -> bool:
        lowered = name.lower()
        return lowered == self.language_name.lower() or lowered in (alias.lower() for alias in self.names)

    def describe(self) -> str:
        return f"{self.engine_name} ({','.join(self.extensions)})"

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"{self.__class__.__name__}(language={self.language_name!r})"
