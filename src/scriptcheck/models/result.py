# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Severity-leveled result log and probe result models."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Severity(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    CRITICAL = "CRITICAL"
    HEALTH_CHECK_ERROR = "HEALTH_CHECK_ERROR"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)

    @classmethod
    def parse(cls, value: Any) -> Severity:
        if isinstance(value, Severity):
            return value
        if isinstance(value, Status):
            return cls(value.value) if value is not Status.OK else cls.INFO
        raw = str(value or "").strip().upper()
        if raw == "OK":
            return cls.INFO
        if raw == "WARNING":
            return cls.WARN
        return cls(raw)


_SEVERITY_ORDER = (
    Severity.DEBUG,
    Severity.INFO,
    Severity.WARN,
    Severity.CRITICAL,
    Severity.HEALTH_CHECK_ERROR,
)


class Status(str, Enum):
    OK = "OK"
    WARN = "WARN"
    CRITICAL = "CRITICAL"
    HEALTH_CHECK_ERROR = "HEALTH_CHECK_ERROR"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER.index(self)

    @classmethod
    def from_severity(cls, severity: Severity | None) -> Status:
        if severity is None or severity in (Severity.DEBUG, Severity.INFO):
            return cls.OK
        return cls(severity.value)


_STATUS_ORDER = (Status.OK, Status.WARN, Status.CRITICAL, Status.HEALTH_CHECK_ERROR)


def _fill_placeholders(message: str, args: tuple[Any, ...]) -> str:
    # slf4j-style: each "{}" consumes the next argument, surplus arguments are dropped
    parts = message.split("{}")
    if len(parts) == 1:
        return message
    out = [parts[0]]
    for index, part in enumerate(parts[1:]):
        out.append(str(args[index]) if index < len(args) else "{}")
        out.append(part)
    return "".join(out)


@dataclass(frozen=True)
class ResultEntry:
    severity: Severity
    message: str
    exception: BaseException | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"severity": self.severity.value, "message": self.message}
        if self.exception is not None:
            data["exception"] = f"{type(self.exception).__name__}: {self.exception}"
        return data


class ResultLog:
    """
    Ordered log of result entries, exposed to scripts as the `log` binding.

    The derived severity only ever grows as entries are added.
    """

    def __init__(self, entries: Iterable[ResultEntry] = ()):
        self._entries: list[ResultEntry] = []
        self._max: Severity | None = None
        for entry in entries:
            self.add(entry)

    def add(self, entry: ResultEntry) -> None:
        self._entries.append(entry)
        if self._max is None or entry.severity.rank > self._max.rank:
            self._max = entry.severity

    def log(self, severity: Severity | str, message: Any, *args: Any) -> None:
        exception = None
        text = str(message)
        if args and isinstance(args[-1], BaseException) and text.count("{}") < len(args):
            exception = args[-1]
            args = args[:-1]
        if args:
            text = _fill_placeholders(text, args)
        self.add(ResultEntry(Severity.parse(severity), text, exception))

    def debug(self, message: Any, *args: Any) -> None:
        self.log(Severity.DEBUG, message, *args)

    def info(self, message: Any, *args: Any) -> None:
        self.log(Severity.INFO, message, *args)

    def warn(self, message: Any, *args: Any) -> None:
        self.log(Severity.WARN, message, *args)

    def critical(self, message: Any, *args: Any) -> None:
        self.log(Severity.CRITICAL, message, *args)

    def health_check_error(self, message: Any, *args: Any) -> None:
        self.log(Severity.HEALTH_CHECK_ERROR, message, *args)

    # script-facing spelling
    healthCheckError = health_check_error

    @property
    def entries(self) -> tuple[ResultEntry, ...]:
        return tuple(self._entries)

    @property
    def max_severity(self) -> Severity | None:
        return self._max

    @property
    def status(self) -> Status:
        return Status.from_severity(self._max)

    def __iter__(self) -> Iterator[ResultEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"ResultLog(status={self.status.value}, entries={len(self._entries)})"


@dataclass(frozen=True)
class Result:
    """
    Final result of one probe execution.

    A script may also build and return a Result; its entries are then merged
    into the probe's log.
    """

    entries: tuple[ResultEntry, ...] = ()
    name: str | None = None
    tags: tuple[str, ...] = ()
    metadata: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_log(cls, log: ResultLog, **kwargs: Any) -> Result:
        return cls(entries=log.entries, **kwargs)

    @classmethod
    def of(cls, status: Severity | Status | str, message: str) -> Result:
        """Single-entry result, the usual thing for a script to return."""
        return cls(entries=(ResultEntry(Severity.parse(status), message),))

    @property
    def status(self) -> Status:
        return ResultLog(self.entries).status

    def is_ok(self) -> bool:
        return self.status is Status.OK

    def __iter__(self) -> Iterator[ResultEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "tags": list(self.tags),
            "status": self.status.value,
            "entries": [entry.to_dict() for entry in self.entries],
            "metadata": dict(self.metadata),
        }


__all__ = [
    "Result",
    "ResultEntry",
    "ResultLog",
    "Severity",
    "Status",
]
