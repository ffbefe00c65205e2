# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

from scriptcheck import config
from scriptcheck.config import DEFAULT_USER_AGENT, HealthCheckConfig, ScriptCheckSettings
from scriptcheck.errors import (
    EngineNotFound,
    ErrorCategory,
    ScriptRuntimeError,
    SourceNotFound,
    SourceReadError,
    categorize_exception,
    error_category_to_reason,
)
from scriptcheck.log import setup_logging
from scriptcheck.utils import TagSet


def test_settings_env_overrides(monkeypatch):
    monkeypatch.setenv("SCRIPTCHECK_LOG_SCRIPT_RESULT", "false")
    monkeypatch.setenv("SCRIPTCHECK_DEBUG_SCRIPT_SOURCE", "0")
    monkeypatch.setenv("SCRIPTCHECK_HTTP_TIMEOUT", "2.5")
    monkeypatch.setenv("SCRIPTCHECK_HTTP_VERIFY_SSL", "no")
    monkeypatch.setenv("SCRIPTCHECK_HTTP_REDIRECTS", "off")
    monkeypatch.setenv("SCRIPTCHECK_USER_AGENT", "Probe/2.0")
    monkeypatch.setenv("SCRIPTCHECK_HTTP_MAX_BODY_BYTES", "1024")
    monkeypatch.setenv("SCRIPTCHECK_SHELL", "/bin/bash")

    settings = config.load_settings()

    assert settings.log_script_result is False
    assert settings.debug_script_source is False
    assert settings.http_timeout == 2.5
    assert settings.verify_ssl is False
    assert settings.allow_redirects is False
    assert settings.user_agent == "Probe/2.0"
    assert settings.max_body_bytes == 1024
    assert settings.shell == "/bin/bash"


def test_settings_invalid_env_fall_back(monkeypatch):
    monkeypatch.setenv("SCRIPTCHECK_HTTP_TIMEOUT", "soon")
    monkeypatch.setenv("SCRIPTCHECK_HTTP_MAX_BODY_BYTES", "-5")
    monkeypatch.delenv("SCRIPTCHECK_USER_AGENT", raising=False)

    settings = config.load_settings()

    assert settings.http_timeout == ScriptCheckSettings.http_timeout
    assert settings.max_body_bytes == ScriptCheckSettings.max_body_bytes
    assert settings.user_agent == DEFAULT_USER_AGENT


def test_load_settings_reads_env_at_call_time(monkeypatch):
    monkeypatch.setenv("SCRIPTCHECK_LOG_SCRIPT_RESULT", "1")
    assert config.load_settings().log_script_result is True
    monkeypatch.setenv("SCRIPTCHECK_LOG_SCRIPT_RESULT", "0")
    assert config.load_settings().log_script_result is False


def test_inline_script_wins_over_url(caplog):
    with caplog.at_level(logging.INFO, logger="scriptcheck.config"):
        cfg = HealthCheckConfig(script="log.info('x')", script_url="file:///tmp/check.py")

    assert cfg.script_url is None
    assert cfg.ignored_script_url == "file:///tmp/check.py"
    assert cfg.uses_url is False
    assert "ignoring 'scriptUrl'" in caplog.text


def test_blank_script_keeps_url():
    cfg = HealthCheckConfig(script="   ", script_url="jcr:/apps/check.py")
    assert cfg.uses_url is True
    assert cfg.script_url == "jcr:/apps/check.py"
    assert cfg.ignored_script_url is None


def test_config_normalizes_language_and_tags():
    cfg = HealthCheckConfig(language=" Python ", tags=["db", "core", "db", " "])
    assert cfg.language == "python"
    assert cfg.tags == ("db", "core")


def test_config_from_activation_properties():
    cfg = HealthCheckConfig.from_mapping(
        {
            "hc.name": "Repository check",
            "hc.tags": "repo, nightly",
            "language": "SH",
            "scriptUrl": "file:///opt/checks/repo.sh",
        }
    )
    assert cfg.name == "Repository check"
    assert cfg.tags == ("repo", "nightly")
    assert cfg.language == "sh"
    assert cfg.script is None
    assert cfg.script_url == "file:///opt/checks/repo.sh"


def test_config_from_mapping_defaults():
    cfg = HealthCheckConfig.from_mapping({})
    assert cfg.name == config.DEFAULT_NAME
    assert cfg.language == config.DEFAULT_LANGUAGE
    assert cfg.tags == ()


def test_categorize_exception():
    assert categorize_exception(SourceNotFound("x")) == ErrorCategory.SOURCE_NOT_FOUND
    assert categorize_exception(SourceReadError("x")) == ErrorCategory.SOURCE_READ_ERROR
    assert categorize_exception(EngineNotFound("lua")) == ErrorCategory.ENGINE_NOT_FOUND
    assert categorize_exception(ScriptRuntimeError("x")) == ErrorCategory.SCRIPT_RUNTIME_ERROR
    assert categorize_exception(KeyError("x")) == ErrorCategory.UNKNOWN_ERROR


def test_error_category_reason():
    assert error_category_to_reason(ErrorCategory.ENGINE_NOT_FOUND)
    assert {category.value for category in ErrorCategory} == {
        "SOURCE_NOT_FOUND",
        "SOURCE_READ_ERROR",
        "ENGINE_NOT_FOUND",
        "SCRIPT_RUNTIME_ERROR",
        "UNKNOWN_ERROR",
    }
    assert all(error_category_to_reason(category) for category in ErrorCategory)


def test_engine_not_found_default_message_lists_languages():
    exc = EngineNotFound("lua", ["shell", "python", "shell"])
    assert exc.available_languages == ["python", "shell"]
    assert "Could not get script engine for lua" in str(exc)
    assert "python" in str(exc)


def test_setup_logging_uses_env_level(monkeypatch):
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setenv("SCRIPTCHECK_LOG_LEVEL", "debug")

    setup_logging()
    setup_logging("error")
    setup_logging("nonsense")

    assert [c["level"] for c in calls] == [logging.DEBUG, logging.ERROR, logging.WARNING]


def test_tag_set_keeps_first_occurrence_order():
    tags = TagSet(["b", "a"])
    assert tags.add("b") is False
    assert tags.update(["c", "a", "d"]) == 2
    assert list(tags) == ["b", "a", "c", "d"]
    assert len(tags) == 4
