"""
Events emitted by the orchestrator while a run progresses.

The orchestrator only knows the EventSink protocol.  Each event is a
point-in-time snapshot delivered as soon as it happens; sinks must not
assume any buffering.
"""
from __future__ import annotations

import dataclasses
import json
import logging
from dataclasses import dataclass
from typing import IO, Literal, Protocol, Union

from .logger import with_diagnostics
from .models import RunResult, RunScope, RunSummary, Verdict

NoticeLevel = Literal['info', 'warn', 'error']


@dataclass(frozen=True)
class ProgressEvent:
    scope: RunScope
    running: bool
    current_index: int | None = None

    type = 'run/progress'


@dataclass(frozen=True)
class ResultEvent:
    scope: RunScope
    result: RunResult

    type = 'run/result'


@dataclass(frozen=True)
class CompleteEvent:
    scope: RunScope
    summary: RunSummary

    type = 'run/complete'


@dataclass(frozen=True)
class NoticeEvent:
    level: NoticeLevel
    message: str

    type = 'notice'


Event = Union[ProgressEvent, ResultEvent, CompleteEvent, NoticeEvent]


class EventSink(Protocol):
    def emit(self, event: Event) -> None: ...


class MemorySink:
    """Keeps every event in a list."""

    def __init__(self) -> None:
        self.events: list[Event] = []

    def emit(self, event: Event) -> None:
        self.events.append(event)

    def of_type(self, kind: type) -> list:
        return [event for event in self.events if isinstance(event, kind)]


class LoggingSink:
    """Reports events through a logger, in the style of a console panel."""

    _LEVELS = {'info': logging.INFO, 'warn': logging.WARNING, 'error': logging.ERROR}

    def __init__(self, logger: logging.Logger | None = None, max_additional_info: int = 15) -> None:
        self.log = logger if logger is not None else logging.getLogger('localjudge.run')
        self._max_additional_info = max_additional_info

    def emit(self, event: Event) -> None:
        if isinstance(event, ProgressEvent):
            if event.running and event.current_index is not None:
                self.log.debug('Running test case #%d', event.current_index)
        elif isinstance(event, ResultEvent):
            self._log_result(event.result)
        elif isinstance(event, CompleteEvent):
            self.log.info('Run %s complete: %s', event.scope, event.summary)
        elif isinstance(event, NoticeEvent):
            message, _, diagnostics = event.message.partition('\n')
            self.log.log(self._LEVELS[event.level], with_diagnostics(message, diagnostics, self._max_additional_info))

    def _log_result(self, result: RunResult) -> None:
        if result.verdict == Verdict.AC:
            self.log.info('%s', result)
            return
        msg = with_diagnostics(str(result), result.actual and f'Actual:\n{result.actual}', self._max_additional_info)
        self.log.warning(with_diagnostics(msg, result.console and f'Console:\n{result.console}', self._max_additional_info))


class JsonLinesSink:
    """Writes one JSON object per event, for consumption by a UI process."""

    def __init__(self, stream: IO[str]) -> None:
        self.stream = stream

    def emit(self, event: Event) -> None:
        payload = {'type': event.type}
        payload.update(dataclasses.asdict(event))
        if isinstance(event, CompleteEvent):
            payload['summary'].pop('counts', None)
        self.stream.write(json.dumps(payload) + '\n')
        self.stream.flush()
