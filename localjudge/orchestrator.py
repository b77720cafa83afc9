"""
Drives a run: build once if the runtime needs it, then run the cases in
order, reporting progress, per-case results and a summary to an EventSink.

State machine of one run:

  IDLE -> BUILDING -> RUNNING_CASE (once per case, in index order) -> COMPLETE
              |              |
              +--------------+--> FAILED

BUILDING is passed through without doing anything for runtimes without a
build step.  Per-case verdicts (WA, TLE, RE) are ordinary results.
JudgeErrors (missing solution, failed build, failed launch, unreadable
test data) lead to FAILED and no further case is run.
Any other exception also leaves the run FAILED, after an error notice, and
propagates to the caller.
"""
from __future__ import annotations

import enum
import logging
import time
from typing import Callable, NoReturn

from . import run
from . import state as state_module
from .config import ConfigError
from .events import CompleteEvent, EventSink, NoticeEvent, ProgressEvent, ResultEvent
from .models import ProblemRecord, RunResult, RunScope, RunSummary, TestCase
from .run import JudgeError, Runtime
from .settings import RunSettings, resolve_settings
from .state import AlreadyRunning, ProblemState, RunRefused
from .summary import summarize

log = logging.getLogger(__name__)


class RunState(enum.Enum):
    IDLE = 'idle'
    BUILDING = 'building'
    RUNNING_CASE = 'running case'
    COMPLETE = 'complete'
    FAILED = 'failed'


class NoProblemLoaded(RunRefused):
    def __init__(self) -> None:
        super().__init__('No problem loaded.')


class InteractiveUnsupported(RunRefused):
    def __init__(self) -> None:
        super().__init__('Interactive problems are not supported yet.')


class NoTestCases(RunRefused):
    def __init__(self) -> None:
        super().__init__('No test cases available to run.')


class CaseNotFound(RunRefused):
    def __init__(self, index: int) -> None:
        super().__init__(f'Test case #{index} not found.')
        self.index = index


class Orchestrator:
    """Runs the current problem of a ProblemState.

    Args:
        sink: receives all events of all runs.
        problem_state: owner of the current problem and the run guard
            (defaults to the process-wide one).
        settings_resolver: called with the workspace root at the start
            of every run unless settings are passed explicitly.
        runtime_lookup: maps a runtime name to a Runtime.
    """

    def __init__(self, sink: EventSink,
                 problem_state: ProblemState | None = None,
                 settings_resolver: Callable[[str], RunSettings] = resolve_settings,
                 runtime_lookup: Callable[[str], Runtime] = run.get_runtime) -> None:
        self.sink = sink
        self.problem_state = problem_state if problem_state is not None else state_module.current
        self._resolve_settings = settings_resolver
        self._get_runtime = runtime_lookup
        self.state = RunState.IDLE
        self.current_index: int | None = None

    def run_all(self, root: str, settings: RunSettings | None = None) -> RunSummary | None:
        """Run every case of the current problem.

        Returns:
            the RunSummary, or None if the run failed (a notice with the
            reason has been emitted).

        Raises:
            RunRefused if the run could not be started.
        """
        problem = self._check_can_run()
        return self._run(RunScope.ALL, problem, list(problem.cases), root, settings)

    def run_one(self, root: str, index: int, settings: RunSettings | None = None) -> RunSummary | None:
        """Run the case with the given 1-based index.

        Raises:
            CaseNotFound if the problem has no such case, or another
            RunRefused if the run could not be started.
        """
        problem = self._check_can_run()
        case = problem.find_case(index)
        if case is None:
            self._refuse(CaseNotFound(index), 'error')
        return self._run(RunScope.ONE, problem, [case], root, settings)

    def _check_can_run(self) -> ProblemRecord:
        problem = self.problem_state.get()
        if problem is None:
            self._refuse(NoProblemLoaded())
        if self.problem_state.running:
            self._refuse(AlreadyRunning())
        if problem.interactive:
            self._refuse(InteractiveUnsupported())
        if not problem.cases:
            self._refuse(NoTestCases())
        return problem

    def _refuse(self, exc: RunRefused, level: str = 'warn') -> NoReturn:
        self.sink.emit(NoticeEvent(level, str(exc)))
        raise exc

    def _run(self, scope: RunScope, problem: ProblemRecord, cases: list[TestCase],
             root: str, settings: RunSettings | None) -> RunSummary | None:
        try:
            with self.problem_state.guard():
                return self._run_guarded(scope, problem, cases, root, settings)
        except AlreadyRunning as exc:
            self._refuse(exc)

    def _run_guarded(self, scope: RunScope, problem: ProblemRecord, cases: list[TestCase],
                     root: str, settings: RunSettings | None) -> RunSummary | None:
        self.state = RunState.IDLE
        self.current_index = None
        self.sink.emit(ProgressEvent(scope, True))
        try:
            if settings is None:
                settings = self._resolve_settings(root)
            runtime = self._get_runtime(settings.runtime)
            log.info('Run %s: %s with %s', scope, problem, runtime)

            self.state = RunState.BUILDING
            artifact = runtime.build(problem, settings, root)

            start = time.monotonic()
            results: list[RunResult] = []
            for case in cases:
                self.state = RunState.RUNNING_CASE
                self.current_index = case.index
                self.sink.emit(ProgressEvent(scope, True, case.index))
                result = runtime.run_case(problem, settings, root, case, artifact)
                results.append(result)
                self.sink.emit(ResultEvent(scope, result))
            summary = summarize(results, (time.monotonic() - start) * 1000.0)

            self.state = RunState.COMPLETE
            self.current_index = None
            self.sink.emit(CompleteEvent(scope, summary))
            return summary
        except (JudgeError, ConfigError) as exc:
            log.debug('Run %s failed in state %s: %s', scope, self.state.value, exc)
            self.state = RunState.FAILED
            self.sink.emit(NoticeEvent('error', str(exc)))
            return None
        except Exception as exc:
            log.exception('Run %s crashed in state %s', scope, self.state.value)
            self.state = RunState.FAILED
            self.sink.emit(NoticeEvent('error', f'Internal error: {exc}'))
            raise
        finally:
            self.sink.emit(ProgressEvent(scope, False))
