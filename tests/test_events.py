"""Tests for event sinks."""

from __future__ import annotations

from unittest.mock import MagicMock

from structlog.testing import capture_logs

from lockcheck.engines.compliance.errors import ErrorKind
from lockcheck.engines.compliance.events import (
    CheckEvent,
    EventSink,
    Level,
    LogSink,
    MemorySink,
    TeeSink,
)
from lockcheck.engines.compliance.models import Outcome


def _outcome_event(satisfies: bool = False) -> CheckEvent:
    outcome = Outcome("o/r", "@s/lib", "1.0.0", ">=2.0.0", satisfies)
    return CheckEvent(
        level=Level.INFO if satisfies else Level.WARNING,
        message="o/r library @s/lib at version 1.0.0 DOES NOT satisfy >=2.0.0",
        repository="o/r",
        outcome=outcome,
    )


class TestLogSink:
    def test_outcome_fields(self):
        with capture_logs() as logs:
            LogSink().emit(_outcome_event())

        [entry] = logs
        assert entry["log_level"] == "warning"
        assert entry["event"].endswith("DOES NOT satisfy >=2.0.0")
        assert entry["repository"] == "o/r"
        assert entry["version"] == "1.0.0"
        assert entry["satisfies"] is False
        assert "kind" not in entry

    def test_kind_field(self):
        event = CheckEvent(
            level=Level.ERROR,
            message="pnpm-lock.yaml is a dir, quitting.",
            repository="o/r",
            kind=ErrorKind.WRONG_ARTIFACT_TYPE,
        )
        with capture_logs() as logs:
            LogSink().emit(event)

        assert logs == [
            {
                "event": "pnpm-lock.yaml is a dir, quitting.",
                "log_level": "error",
                "repository": "o/r",
                "kind": "wrong_artifact_type",
            }
        ]

    def test_custom_logger(self):
        logger = MagicMock()
        LogSink(logger).emit(CheckEvent(Level.DEBUG, "skip", "o/r"))
        logger.debug.assert_called_once_with("skip", repository="o/r")


class TestMemorySink:
    def test_filters(self):
        sink = MemorySink()
        sink.emit(CheckEvent(Level.DEBUG, "a", "o/r", kind=ErrorKind.NOT_FOUND))
        sink.emit(_outcome_event(satisfies=True))

        assert sink.messages() == ["a", sink.events[1].message]
        assert sink.messages(Level.DEBUG) == ["a"]
        assert sink.kinds() == [ErrorKind.NOT_FOUND]
        assert [o.satisfies for o in sink.outcomes] == [True]

    def test_is_event_sink(self):
        assert isinstance(MemorySink(), EventSink)
        assert isinstance(LogSink(), EventSink)


class TestTeeSink:
    def test_forwards_in_order(self):
        first, second = MemorySink(), MemorySink()
        tee = TeeSink(first, second)
        event = _outcome_event()

        tee.emit(event)

        assert first.events == [event]
        assert second.events == [event]
