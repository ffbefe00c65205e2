# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum


class ScriptCheckError(Exception):
    """Base class for every error raised by the probe pipeline."""


class SourceNotFound(ScriptCheckError):
    """The configured script location exists as a locator but holds no content."""

    def __init__(self, message: str, location: str | None = None):
        super().__init__(message)
        self.location = location


class SourceReadError(ScriptCheckError):
    """The script source could not be read (malformed locator, I/O failure)."""

    def __init__(self, message: str, location: str | None = None):
        super().__init__(message)
        self.location = location


class EngineNotFound(ScriptCheckError):
    """No engine provider matches the requested language."""

    def __init__(self, language: str, available_languages: Iterable[str] = (), message: str | None = None):
        self.language = language
        self.available_languages = sorted(set(available_languages))
        super().__init__(
            message
            or f"Could not get script engine for {language} (available languages: {self.available_languages})"
        )


class ScriptRuntimeError(ScriptCheckError):
    """Any failure raised while an engine evaluates a script."""


class SetupError(ScriptCheckError):
    """The execution environment (e.g. the resource resolver) could not be obtained."""


class InvalidFilterError(ScriptCheckError):
    """A service filter expression could not be parsed."""


class ErrorCategory(str, Enum):
    SOURCE_NOT_FOUND = "SOURCE_NOT_FOUND"
    SOURCE_READ_ERROR = "SOURCE_READ_ERROR"
    ENGINE_NOT_FOUND = "ENGINE_NOT_FOUND"
    SCRIPT_RUNTIME_ERROR = "SCRIPT_RUNTIME_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


def categorize_exception(exc: BaseException) -> ErrorCategory:
    """
    Map pipeline exceptions to ErrorCategory.
    """
    if isinstance(exc, SourceNotFound):
        return ErrorCategory.SOURCE_NOT_FOUND
    if isinstance(exc, SourceReadError):
        return ErrorCategory.SOURCE_READ_ERROR
    if isinstance(exc, EngineNotFound):
        return ErrorCategory.ENGINE_NOT_FOUND
    if isinstance(exc, ScriptRuntimeError):
        return ErrorCategory.SCRIPT_RUNTIME_ERROR
    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.SOURCE_NOT_FOUND: "Script source does not exist",
        ErrorCategory.SOURCE_READ_ERROR: "Script source could not be read",
        ErrorCategory.ENGINE_NOT_FOUND: "No script engine for the configured language",
        ErrorCategory.SCRIPT_RUNTIME_ERROR: "Script failed during evaluation",
        ErrorCategory.UNKNOWN_ERROR: "Unexpected error during probe execution",
    }
    return mapping.get(category, "Probe failed")


__all__ = [
    "EngineNotFound",
    "ErrorCategory",
    "InvalidFilterError",
    "ScriptCheckError",
    "ScriptRuntimeError",
    "SetupError",
    "SourceNotFound",
    "SourceReadError",
    "categorize_exception",
    "error_category_to_reason",
]
