# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for ScriptCheck."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .utils.tag_manager import TagSet
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = f"ScriptCheck/{__version__}"
DEFAULT_NAME = "Scripted Health Check"
DEFAULT_LANGUAGE = "python"


def _float_env(name: str, default: float) -> float:
    try:
        value = os.getenv(name)
        return float(value) if value is not None else default
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    try:
        value = os.getenv(name)
        return int(value) if value is not None else default
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass
class ScriptCheckSettings:
    """Process-wide defaults for probe execution and script fetching."""

    log_script_result: bool = True
    debug_script_source: bool = True
    http_timeout: float = 10.0
    verify_ssl: bool = True
    allow_redirects: bool = True
    user_agent: str = DEFAULT_USER_AGENT
    max_body_bytes: int = 16 * 1024 * 1024
    shell: str = "/bin/sh"

    @classmethod
    def from_env(cls) -> "ScriptCheckSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _int_env("SCRIPTCHECK_HTTP_MAX_BODY_BYTES", cls.max_body_bytes)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            log_script_result=_bool_env("SCRIPTCHECK_LOG_SCRIPT_RESULT", cls.log_script_result),
            debug_script_source=_bool_env("SCRIPTCHECK_DEBUG_SCRIPT_SOURCE", cls.debug_script_source),
            http_timeout=_float_env("SCRIPTCHECK_HTTP_TIMEOUT", cls.http_timeout),
            verify_ssl=_bool_env("SCRIPTCHECK_HTTP_VERIFY_SSL", cls.verify_ssl),
            allow_redirects=_bool_env("SCRIPTCHECK_HTTP_REDIRECTS", cls.allow_redirects),
            user_agent=os.getenv("SCRIPTCHECK_USER_AGENT", cls.user_agent),
            max_body_bytes=max_body_bytes,
            shell=os.getenv("SCRIPTCHECK_SHELL", cls.shell),
        )


def load_settings() -> ScriptCheckSettings:
    """Return settings with environment overrides applied."""
    return ScriptCheckSettings.from_env()


def _is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def _normalize_tags(raw: Any) -> tuple[str, ...]:
    if raw is None:
        return ()
    if isinstance(raw, str):
        raw = raw.split(",")
    tags = TagSet()
    if isinstance(raw, Iterable):
        for tag in raw:
            text = str(tag).strip()
            if text:
                tags.add(text)
    return tuple(tags)


@dataclass(frozen=True)
class HealthCheckConfig:
    """
    Immutable configuration of one scripted health check.

    At most one script form is effective: when both `script` and `script_url`
    are non-blank, the inline script wins and the URL is moved to
    `ignored_script_url`.
    """

    name: str = DEFAULT_NAME
    tags: tuple[str, ...] = ()
    language: str = DEFAULT_LANGUAGE
    script: str | None = None
    script_url: str | None = None
    ignored_script_url: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "language", (self.language or "").strip().lower())
        object.__setattr__(self, "tags", _normalize_tags(self.tags))
        if not _is_blank(self.script) and not _is_blank(self.script_url):
            logger.info("Both 'script' and 'scriptUrl' (=%s) are configured, ignoring 'scriptUrl'", self.script_url)
            object.__setattr__(self, "ignored_script_url", self.script_url)
            object.__setattr__(self, "script_url", None)

    @property
    def uses_url(self) -> bool:
        return _is_blank(self.script)

    @property
    def source_label(self) -> str:
        return f"script url {self.script_url}" if self.uses_url else f"script {self.script}"

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HealthCheckConfig":
        """
        Build a config from activation-style properties.

        Accepts the dotted/camelCase keys used by host configuration
        (`hc.name`, `hc.tags`, `scriptUrl`) as well as the field names.
        """

        def pick(*keys: str) -> Any:
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return None

        return cls(
            name=str(pick("hc.name", "name") or DEFAULT_NAME),
            tags=pick("hc.tags", "tags") or (),
            language=str(pick("language") or DEFAULT_LANGUAGE),
            script=pick("script"),
            script_url=pick("scriptUrl", "script_url"),
        )


__all__ = [
    "DEFAULT_LANGUAGE",
    "DEFAULT_NAME",
    "DEFAULT_USER_AGENT",
    "HealthCheckConfig",
    "ScriptCheckSettings",
    "load_settings",
]
