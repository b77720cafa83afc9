"""
Runtimes that execute the source file directly through an interpreter.
"""
from ..models import ProblemRecord, TestCase
from ..settings import RunSettings
from .program import Artifact, Runtime


class InterpretedRuntime(Runtime):
    """Runs main.py with an interpreter; there is no build step.

    Args:
        name (str): runtime name, e.g. "cpython"
        command_setting (str): name of the RunSettings field holding
            the interpreter command, e.g. "python_command".
    """

    def __init__(self, name: str, command_setting: str) -> None:
        self.name = name
        self.command_setting = command_setting

    def get_runcmd(self, problem: ProblemRecord, settings: RunSettings, root: str,
                   case: TestCase, artifact: Artifact | None) -> tuple[list[str], str]:
        solution = self.solution(problem)
        interpreter = self.split_command(getattr(settings, self.command_setting))
        return interpreter + [solution], self.run_dir(problem, settings, root)
