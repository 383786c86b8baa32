"""Event emission: the checker's only observable output.

A check reports everything it learns as an ordered sequence of
:class:`CheckEvent` records pushed into an :class:`EventSink`. The default
sink writes them to the structured log; hosts and tests can capture them
instead (or as well) with :class:`MemorySink` and :class:`TeeSink`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

import structlog

from lockcheck.engines.compliance.errors import ErrorKind
from lockcheck.engines.compliance.models import Outcome


class Level(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class CheckEvent:
    level: Level
    message: str
    repository: str
    kind: ErrorKind | None = None
    outcome: Outcome | None = None


@runtime_checkable
class EventSink(Protocol):
    """Anything that accepts check events."""

    def emit(self, event: CheckEvent) -> None: ...


class LogSink:
    """Render events through structlog, one log line per event."""

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._log = logger or structlog.get_logger("lockcheck.engine")

    def emit(self, event: CheckEvent) -> None:
        fields: dict[str, object] = {"repository": event.repository}
        if event.kind is not None:
            fields["kind"] = event.kind.value
        if event.outcome is not None:
            fields.update(
                identifier=event.outcome.identifier,
                version=event.outcome.version,
                requirement=event.outcome.requirement,
                satisfies=event.outcome.satisfies,
            )
        getattr(self._log, event.level.value)(event.message, **fields)


@dataclass
class MemorySink:
    """Keep events in emission order."""

    events: list[CheckEvent] = field(default_factory=list)

    def emit(self, event: CheckEvent) -> None:
        self.events.append(event)

    def messages(self, level: Level | None = None) -> list[str]:
        return [e.message for e in self.events if level is None or e.level is level]

    def kinds(self) -> list[ErrorKind]:
        return [e.kind for e in self.events if e.kind is not None]

    @property
    def outcomes(self) -> list[Outcome]:
        return [e.outcome for e in self.events if e.outcome is not None]


class TeeSink:
    """Forward each event to several sinks."""

    def __init__(self, *sinks: EventSink) -> None:
        self._sinks = sinks

    def emit(self, event: CheckEvent) -> None:
        for sink in self._sinks:
            sink.emit(event)
