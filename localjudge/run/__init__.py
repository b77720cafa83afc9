"""Package for building and running solutions under the supported
runtimes.
"""
from .buildrun import AcceleratedRuntime, BuildOnceRuntime, CompiledRuntime
from .errors import BuildFailure, JudgeError, LaunchFailure, MissingArtifact, MissingSolutionFile, UnreadableTestCase
from .process import ProcessResult, execute
from .program import Artifact, Runtime
from .source import InterpretedRuntime

RUNTIMES: dict[str, Runtime] = {
    'cpython': InterpretedRuntime('cpython', 'python_command'),
    'pypy': InterpretedRuntime('pypy', 'pypy_command'),
    'cpp': CompiledRuntime(),
    'codon': AcceleratedRuntime(),
}


def get_runtime(name: str) -> Runtime:
    """Get the Runtime for a configured runtime name.

    Raises:
        KeyError if there is no such runtime.
    """
    try:
        return RUNTIMES[name]
    except KeyError:
        raise KeyError(f'Unknown runtime "{name}", expected one of {", ".join(RUNTIMES)}') from None
