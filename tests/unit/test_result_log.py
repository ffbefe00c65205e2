# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import pytest

from scriptcheck.models import Result, ResultEntry, ResultLog, Severity, Status


def test_entries_keep_insertion_order():
    log = ResultLog()
    log.warn("second")
    log.debug("first?")
    log.info("third")

    assert [e.message for e in log] == ["second", "first?", "third"]
    assert [e.severity for e in log.entries] == [Severity.WARN, Severity.DEBUG, Severity.INFO]


def test_status_is_max_severity_and_never_decreases():
    log = ResultLog()
    assert log.status is Status.OK
    log.debug("d")
    assert log.status is Status.OK
    log.critical("c")
    assert log.status is Status.CRITICAL
    log.info("later info")
    log.warn("later warn")
    assert log.status is Status.CRITICAL
    log.health_check_error("boom")
    assert log.status is Status.HEALTH_CHECK_ERROR
    assert log.max_severity is Severity.HEALTH_CHECK_ERROR


def test_placeholders_are_filled_in_order():
    log = ResultLog()
    log.info("{} of {} nodes", 3, 5)
    log.info("no args {}")
    log.info("surplus {}", "a", "b")

    assert [e.message for e in log] == ["3 of 5 nodes", "no args {}", "surplus a"]


def test_trailing_exception_argument_is_attached():
    log = ResultLog()
    exc = RuntimeError("disk gone")
    log.critical("check failed: {}", "disk", exc)
    entry = log.entries[0]

    assert entry.message == "check failed: disk"
    assert entry.exception is exc
    assert entry.to_dict()["exception"] == "RuntimeError: disk gone"


def test_exception_consumed_by_placeholder_is_not_attached():
    log = ResultLog()
    exc = ValueError("bad")
    log.warn("got {}", exc)
    assert log.entries[0].message == "got bad"
    assert log.entries[0].exception is None


def test_script_facing_alias():
    log = ResultLog()
    log.healthCheckError("oops")
    assert log.status is Status.HEALTH_CHECK_ERROR


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("warn", Severity.WARN),
        ("WARNING", Severity.WARN),
        ("ok", Severity.INFO),
        (Status.CRITICAL, Severity.CRITICAL),
        (Status.OK, Severity.INFO),
        (Severity.DEBUG, Severity.DEBUG),
    ],
)
def test_severity_parse(raw, expected):
    assert Severity.parse(raw) is expected


def test_severity_parse_rejects_unknown():
    with pytest.raises(ValueError):
        Severity.parse("FATAL")


def test_result_of_and_to_dict():
    result = Result.of("WARN", "disk low")
    assert result.status is Status.WARN
    assert not result.is_ok()
    assert len(result) == 1

    full = Result.from_log(ResultLog([ResultEntry(Severity.INFO, "fine")]), name="hc", tags=("a",), metadata={"k": 1})
    assert full.is_ok()
    assert full.to_dict() == {
        "name": "hc",
        "tags": ["a"],
        "status": "OK",
        "entries": [{"severity": "INFO", "message": "fine"}],
        "metadata": {"k": 1},
    }


def test_status_order():
    ranks = [s.rank for s in (Status.OK, Status.WARN, Status.CRITICAL, Status.HEALTH_CHECK_ERROR)]
    assert ranks == sorted(ranks)
    assert Severity.DEBUG.rank < Severity.INFO.rank < Severity.WARN.rank
