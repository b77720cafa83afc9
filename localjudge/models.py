"""Data model shared by the runtimes, the orchestrator and the event sinks."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import StrEnum


class Verdict(StrEnum):
    AC = 'AC'
    WA = 'WA'
    TLE = 'TLE'
    RE = 'RE'


class RunScope(StrEnum):
    ALL = 'all'
    ONE = 'one'


@dataclass(frozen=True)
class TestCase:
    """One input/expected output pair.  The 1-based index orders the cases
    and names the files (1.in, 1.out, ...)."""

    index: int
    input_path: str
    output_path: str

    __test__ = False  # not a pytest class

    def read_input(self) -> bytes:
        with open(self.input_path, 'rb') as f:
            return f.read()

    def read_expected(self) -> str:
        """Expected output, or the empty string if there is no answer file."""
        if not os.path.isfile(self.output_path):
            return ''
        with open(self.output_path, 'rb') as f:
            return f.read().decode('utf-8', 'replace')

    def __str__(self) -> str:
        return f'test case #{self.index}'


@dataclass(frozen=True)
class ProblemRecord:
    contest_id: str
    task_id: str
    name: str
    time_limit_ms: int
    task_dir: str
    cases: tuple[TestCase, ...] = ()
    interactive: bool = False
    group: str = ''
    url: str = ''

    def find_case(self, index: int) -> TestCase | None:
        return next((case for case in self.cases if case.index == index), None)

    def solution_path(self, filename: str) -> str:
        return os.path.join(self.task_dir, filename)

    def __str__(self) -> str:
        return f'{self.name} ({self.contest_id}/{self.task_id})'


@dataclass(frozen=True)
class RunResult:
    index: int
    verdict: Verdict
    duration_ms: float
    actual: str = ''
    console: str = ''

    def __str__(self) -> str:
        return f'#{self.index} {self.verdict} ({self.duration_ms:.0f}ms)'


@dataclass(frozen=True)
class RunSummary:
    total: int
    passed: int
    failed: int
    timeouts: int
    runtime_errors: int
    duration_ms: float
    counts: dict[Verdict, int] = field(default_factory=dict, compare=False)

    @property
    def all_accepted(self) -> bool:
        return self.total > 0 and self.passed == self.total

    def __str__(self) -> str:
        def p(x: int) -> str:
            return '' if x == 1 else 's'

        return (f'{self.passed}/{self.total} accepted, {self.failed} wrong answer{p(self.failed)}, '
                f'{self.timeouts} timeout{p(self.timeouts)}, {self.runtime_errors} runtime error{p(self.runtime_errors)} '
                f'in {self.duration_ms:.0f}ms')
