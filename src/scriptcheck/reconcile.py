# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Merging a script's return value into the result log."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .models import Result, ResultEntry, ResultLog


@dataclass(frozen=True)
class NoValue:
    pass


@dataclass(frozen=True)
class RawValue:
    value: Any


@dataclass(frozen=True)
class StructuredOutcome:
    entries: tuple[ResultEntry, ...]


ScriptOutcome = Union[NoValue, RawValue, StructuredOutcome]


def classify_return(value: Any, log: ResultLog | None = None) -> ScriptOutcome:
    """Tag a script's return value; Result and ResultLog objects are structured outcomes."""
    # returning the `log` binding itself adds nothing new
    if value is None or (log is not None and value is log):
        return NoValue()
    if isinstance(value, (Result, ResultLog)):
        return StructuredOutcome(tuple(value))
    return RawValue(value)


def reconcile(log: ResultLog, outcome: ScriptOutcome, *, log_script_result: bool = True) -> ResultLog:
    if isinstance(outcome, StructuredOutcome):
        for entry in outcome.entries:
            log.add(entry)
    elif isinstance(outcome, RawValue) and log_script_result:
        log.info("Script result: {}", outcome.value)
    return log


__all__ = [
    "NoValue",
    "RawValue",
    "ScriptOutcome",
    "StructuredOutcome",
    "classify_return",
    "reconcile",
]
