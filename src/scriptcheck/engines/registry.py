# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Engine provider registry."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable
from importlib.metadata import entry_points
from typing import Protocol

from ..errors import EngineNotFound
from .base import EngineProvider, ScriptEngine
from .python import PythonEngineProvider
from .shell import ShellEngineProvider

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "scriptcheck.engines"


class EngineTracker(Protocol):
    """External engine source consulted after the provider catalogs."""

    def get_engine(self, language: str) -> ScriptEngine | None: ...

    def available_languages(self) -> Iterable[str]: ...


def builtin_providers() -> list[EngineProvider]:
    return [PythonEngineProvider(), ShellEngineProvider()]


def load_entry_point_providers(group: str = ENTRY_POINT_GROUP) -> list[EngineProvider]:
    """Instantiate providers published by installed distributions; broken ones are skipped."""
    providers: list[EngineProvider] = []
    for entry_point in entry_points(group=group):
        try:
            loaded = entry_point.load()
            provider = loaded() if isinstance(loaded, type) else loaded
        except Exception:  # noqa: BLE001
            logger.warning("Failed to load engine provider %r", entry_point.name, exc_info=True)
            continue
        if not isinstance(provider, EngineProvider):
            logger.warning("Ignoring entry point %r: %r is not an EngineProvider", entry_point.name, provider)
            continue
        providers.append(provider)
    return providers


class EngineRegistry:
    """
    Resolves a language name to a fresh ScriptEngine.

    Catalogs, in order: registered providers, entry-point providers, then the
    optional external engine tracker. Within the provider catalogs an
    extension match beats a language-name match.
    """

    def __init__(
        self,
        providers: Iterable[EngineProvider] | None = None,
        *,
        load_entry_points: bool = True,
        engine_tracker: EngineTracker | None = None,
    ):
        self._providers = list(providers) if providers is not None else builtin_providers()
        self._load_entry_points = load_entry_points
        self._entry_point_providers: list[EngineProvider] | None = None
        self.engine_tracker = engine_tracker
        self._lock = threading.Lock()

    def register(self, provider: EngineProvider) -> None:
        with self._lock:
            self._providers.append(provider)

    def unregister(self, provider: EngineProvider) -> None:
        with self._lock:
            if provider in self._providers:
                self._providers.remove(provider)

    @property
    def providers(self) -> tuple[EngineProvider, ...]:
        with self._lock:
            if self._load_entry_points and self._entry_point_providers is None:
                self._entry_point_providers = load_entry_point_providers()
            return tuple(self._providers) + tuple(self._entry_point_providers or ())

    def available_languages(self) -> list[str]:
        languages = {provider.language_name for provider in self.providers}
        if self.engine_tracker is not None:
            languages.update(self.engine_tracker.available_languages())
        return sorted(languages)

    def get_engine(self, language: str) -> ScriptEngine:
        name = (language or "").strip()
        providers = self.providers

        for provider in providers:
            if provider.matches_extension(name):
                logger.debug("Engine for %s resolved by extension via %r", name, provider)
                return provider.get_engine()
        for provider in providers:
            if provider.matches_language(name):
                logger.debug("Engine for %s resolved by language name via %r", name, provider)
                return provider.get_engine()
        if self.engine_tracker is not None:
            engine = self.engine_tracker.get_engine(name.lower())
            if engine is not None:
                return engine

        available = self.available_languages()
        described = ", ".join(provider.describe() for provider in providers)
        raise EngineNotFound(
            name,
            available,
            message=(
                f"Could not get script engine for {name} from available providers: {described} "
                f"(available languages: {available})"
            ),
        )


__all__ = [
    "ENTRY_POINT_GROUP",
    "EngineRegistry",
    "EngineTracker",
    "builtin_providers",
    "load_entry_point_providers",
]
