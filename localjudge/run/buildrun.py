"""
Runtimes that build an artifact once per run and reuse it for every case.
"""
import logging
import os

from ..models import ProblemRecord, TestCase
from ..settings import RunSettings
from . import process
from .errors import BuildFailure, MissingArtifact
from .program import Artifact, Runtime, filter_console

log = logging.getLogger(__name__)


class BuildOnceRuntime(Runtime):
    """Base class for runtimes with a build step.

    Subclasses provide get_buildcmd(), artifact_path() and get_runcmd().
    Builds have no time limit.
    """

    label: str = ''

    def build(self, problem: ProblemRecord, settings: RunSettings, root: str) -> Artifact:
        """Run the build command.

        Raises:
            MissingSolutionFile if there is no source to build
            BuildFailure if the build command exits with non-zero status
            MissingArtifact if it succeeds without producing the artifact
            LaunchFailure if the build command cannot be started
        """
        solution = self.solution(problem)
        argv, cwd = self.get_buildcmd(problem, settings, root, solution)
        log.info('%s: building %s', self.label, solution)
        result = process.execute(argv, cwd=cwd, env=self.get_environment(root))
        if result.exit_code != 0:
            diagnostics = filter_console(result.stderr.decode('utf-8', 'replace'))
            if not diagnostics:
                diagnostics = filter_console(result.stdout.decode('utf-8', 'replace'))
            log.debug('Build failed (status %s) for %s', result.exit_code, problem)
            raise BuildFailure(f'{self.label} build failed.', diagnostics)

        artifact = self.artifact_path(problem, settings)
        if not os.path.isfile(artifact):
            raise MissingArtifact(artifact)
        log.info('%s: build succeeded: %s', self.label, artifact)
        return Artifact(artifact)

    def get_buildcmd(self, problem: ProblemRecord, settings: RunSettings, root: str,
                     solution: str) -> tuple[list[str], str]:
        raise NotImplementedError

    def artifact_path(self, problem: ProblemRecord, settings: RunSettings) -> str:
        raise NotImplementedError

    def built_artifact(self, problem: ProblemRecord, settings: RunSettings,
                       artifact: Artifact | None) -> Artifact:
        """The artifact handed over by the orchestrator, or the one at the
        declared location from an earlier build."""
        if artifact is None:
            artifact = Artifact(self.artifact_path(problem, settings))
        if not os.path.isfile(artifact.path):
            raise MissingArtifact(artifact.path)
        return artifact


class CompiledRuntime(BuildOnceRuntime):
    """C++ through a pair of helper commands.

    The compile command is called as "<compile> <contest> <task>" from the
    workspace root and must leave a.out in the task directory.  Each case
    runs "<run> <contest> <task> <input>" from the task directory, the
    input path given relative to it.
    """

    name = 'cpp'
    label = 'C++'
    solution_name = 'main.cpp'
    binary_name = 'a.out'

    def get_buildcmd(self, problem: ProblemRecord, settings: RunSettings, root: str,
                     solution: str) -> tuple[list[str], str]:
        argv = self.split_command(settings.cpp_compile_command) + [problem.contest_id, problem.task_id]
        return argv, root

    def artifact_path(self, problem: ProblemRecord, settings: RunSettings) -> str:
        return os.path.join(problem.task_dir, self.binary_name)

    def get_runcmd(self, problem: ProblemRecord, settings: RunSettings, root: str,
                   case: TestCase, artifact: Artifact | None) -> tuple[list[str], str]:
        self.built_artifact(problem, settings, artifact)
        relative_input = os.path.relpath(case.input_path, problem.task_dir)
        argv = self.split_command(settings.cpp_run_command) + [problem.contest_id, problem.task_id, relative_input]
        return argv, problem.task_dir


class AcceleratedRuntime(BuildOnceRuntime):
    """Python compiled ahead of time with Codon.

    Builds "<codon> build <args...> -o <output> main.py" in the task
    directory, then runs the produced executable directly.
    """

    name = 'codon'
    label = 'Codon'
    solution_name = 'main.py'

    def get_buildcmd(self, problem: ProblemRecord, settings: RunSettings, root: str,
                     solution: str) -> tuple[list[str], str]:
        argv = (self.split_command(settings.codon_command) + ['build'] + list(settings.codon_build_args)
                + ['-o', self.artifact_path(problem, settings), solution])
        return argv, problem.task_dir

    def artifact_path(self, problem: ProblemRecord, settings: RunSettings) -> str:
        return os.path.join(problem.task_dir, settings.codon_output_name)

    def get_runcmd(self, problem: ProblemRecord, settings: RunSettings, root: str,
                   case: TestCase, artifact: Artifact | None) -> tuple[list[str], str]:
        artifact = self.built_artifact(problem, settings, artifact)
        return [artifact.path], self.run_dir(problem, settings, root)
