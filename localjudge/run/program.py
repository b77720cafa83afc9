"""Abstract base class for runtimes.
"""
import logging
import os
import shlex
from dataclasses import dataclass

from ..compare import compare, normalize_line_endings
from ..models import ProblemRecord, RunResult, TestCase, Verdict
from ..settings import RunSettings
from . import process
from .errors import MissingSolutionFile, UnreadableTestCase
from .process import ProcessResult

log = logging.getLogger(__name__)

PYPY_CACHE_WARNING = 'Warning: cannot find your CPU L2 & L3 cache size'


@dataclass(frozen=True)
class Artifact:
    """Output of a build step, reused by every case of one run."""
    path: str


def derive_verdict(result: ProcessResult, expected: str, actual: str, case_sensitive: bool) -> Verdict:
    if result.timed_out:
        return Verdict.TLE
    if result.exit_code != 0:
        return Verdict.RE
    return Verdict.AC if compare(expected, actual, case_sensitive) else Verdict.WA


def filter_console(text: str) -> str:
    """Drop the startup warning PyPy prints on some machines and trim."""
    lines = normalize_line_endings(text).split('\n')
    return '\n'.join(line for line in lines if PYPY_CACHE_WARNING not in line).strip()


class Runtime(object):
    """Abstract base class for runtimes.

    A runtime knows how to turn a solution into something runnable
    (build()), and how to run it on one test case (run_case()).
    Subclasses provide solution_name and get_runcmd(), and override
    build() if they need one.
    """

    name: str = ''
    solution_name: str = 'main.py'

    def __str__(self) -> str:
        return self.name

    def build(self, problem: ProblemRecord, settings: RunSettings, root: str) -> Artifact | None:
        """Build the solution, if needed.  Called at most once per run,
        before any case runs.

        Returns:
            the Artifact to pass on to run_case(), or None.
        """
        return None

    def run_case(self, problem: ProblemRecord, settings: RunSettings, root: str,
                 case: TestCase, artifact: Artifact | None = None) -> RunResult:
        """Run the solution on one case and judge the output.

        Raises:
            UnreadableTestCase if the input or answer file cannot be read
        """
        argv, cwd = self.get_runcmd(problem, settings, root, case, artifact)
        try:
            input_bytes = case.read_input()
        except OSError as exc:
            raise UnreadableTestCase(case.input_path, exc.strerror or str(exc)) from exc
        result = process.execute(argv,
                                 cwd=cwd,
                                 env=self.get_environment(root),
                                 input_bytes=input_bytes,
                                 timeout_ms=settings.timeout_for(problem))
        try:
            expected = case.read_expected()
        except OSError as exc:
            raise UnreadableTestCase(case.output_path, exc.strerror or str(exc)) from exc
        actual = normalize_line_endings(result.stdout.decode('utf-8', 'replace'))
        verdict = derive_verdict(result, expected, actual, settings.compare.case_sensitive)
        log.debug('%s on %s: %s', self, case, verdict)
        return RunResult(index=case.index,
                         verdict=verdict,
                         duration_ms=result.duration_ms,
                         actual=actual,
                         console=filter_console(result.stderr.decode('utf-8', 'replace')))

    def get_runcmd(self, problem: ProblemRecord, settings: RunSettings, root: str,
                   case: TestCase, artifact: Artifact | None) -> tuple[list[str], str]:
        """Command line and working directory for running one case."""
        raise NotImplementedError

    def get_environment(self, root: str) -> dict[str, str]:
        """Environment of the child: the inherited one plus WORKSPACE_DIR,
        which helper scripts use to locate the workspace."""
        env = dict(os.environ)
        env['WORKSPACE_DIR'] = root
        return env

    def solution(self, problem: ProblemRecord) -> str:
        path = problem.solution_path(self.solution_name)
        if not os.path.isfile(path):
            raise MissingSolutionFile(path)
        return path

    @staticmethod
    def run_dir(problem: ProblemRecord, settings: RunSettings, root: str) -> str:
        if settings.run_cwd_mode == 'task':
            return problem.task_dir
        return root

    @staticmethod
    def split_command(command: str) -> list[str]:
        return shlex.split(command)
