"""
Run settings: the validated snapshot of the configuration used for one run.
"""
import math
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from . import config
from .config import ConfigError
from .models import ProblemRecord

RuntimeName = Literal['cpython', 'pypy', 'cpp', 'codon']
RunCwdMode = Literal['workspace', 'task']


class CompareSettings(BaseModel):
    model_config = ConfigDict(extra='forbid', frozen=True)

    case_sensitive: bool = True


class RunSettings(BaseModel):
    """Resolved configuration for one run.  Never mutated once created;
    resolve a fresh one at the start of every run."""

    model_config = ConfigDict(extra='forbid', frozen=True)

    runtime: RuntimeName = 'cpython'
    python_command: str = 'python3'
    pypy_command: str = 'pypy3'
    cpp_compile_command: str = 'cpp_compile'
    cpp_run_command: str = 'cpp_run'
    codon_command: str = 'codon'
    codon_build_args: list[str] = Field(default_factory=lambda: ['-release'])
    codon_output_name: str = 'main'
    run_cwd_mode: RunCwdMode = 'workspace'
    timeout_ms: int | None = Field(default=None, ge=1)
    compare: CompareSettings = CompareSettings()
    tests_dir_name: str = 'tests'
    template_file_path: str = '.config/templates/main.py'
    template_file_path_cpp: str = '.config/templates/main.cpp'

    def timeout_for(self, problem: ProblemRecord) -> int:
        """Per-case wall-clock limit in ms: the explicit override if there
        is one, otherwise 1.2 times the problem's time limit."""
        if self.timeout_ms is not None:
            return max(1, self.timeout_ms)
        return max(1, math.ceil(problem.time_limit_ms * 1.2))


def resolve_settings(workspace: str | Path | None = None, overrides: dict[str, Any] | None = None) -> RunSettings:
    """Load and validate the layered configuration.

    Args:
        workspace: workspace root; its .localjudge/ directory has the
            highest priority among the config files.
        overrides (dict): values taking precedence over all config
            files, e.g. from the command line.  None values are ignored.

    Raises:
        ConfigError if a config file is broken or the result does not
        validate.
    """
    layers = config.user_config_files()
    if workspace is not None:
        layers.append(config.workspace_config_file(workspace))
    values = config.load_defaults()
    for path in layers:
        layer = config.read_config_file(path)
        if layer is not None:
            values = config.merged(values, layer)
    if overrides:
        values = config.merged(values, {key: value for key, value in overrides.items() if value is not None})
    try:
        return RunSettings.model_validate(values)
    except ValidationError as err:
        raise ConfigError(f'Invalid configuration: {err}')
