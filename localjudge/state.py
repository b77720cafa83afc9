"""
Process-wide state: the current problem and the exclusive-run guard.

The ingestion side (or the command line) is the only writer of the current
problem.  It replaces the record wholesale with set() and never mutates it.
The run guard makes sure at most one run is in flight; hold it for the whole
run with

    with state.guard():
        ...
"""
import contextlib
import threading
from typing import Iterator

from .models import ProblemRecord


class RunRefused(Exception):
    """A run was not started.  Nothing was built or executed."""
    pass


class AlreadyRunning(RunRefused):
    def __init__(self) -> None:
        super().__init__('Already running tests.')


class ProblemState:
    def __init__(self) -> None:
        self._problem: ProblemRecord | None = None
        self._run_lock = threading.Lock()

    def set(self, problem: ProblemRecord) -> None:
        self._problem = problem

    def get(self) -> ProblemRecord | None:
        return self._problem

    def clear(self) -> None:
        self._problem = None

    @property
    def running(self) -> bool:
        return self._run_lock.locked()

    @contextlib.contextmanager
    def guard(self) -> Iterator[None]:
        """Hold the exclusive-run guard.

        Raises:
            AlreadyRunning if another run holds it.
        """
        if not self._run_lock.acquire(blocking=False):
            raise AlreadyRunning()
        try:
            yield
        finally:
            self._run_lock.release()


current = ProblemState()
