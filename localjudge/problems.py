"""
Loading problems from disk, and saving problems received from Competitive
Companion.

Layout of a workspace:

  <workspace>/<contest>/<task>/problem.yaml    metadata
  <workspace>/<contest>/<task>/main.py         solutions
  <workspace>/<contest>/<task>/main.cpp
  <workspace>/<contest>/<task>/tests/1.in      test cases
  <workspace>/<contest>/<task>/tests/1.out
"""
import logging
import os
import re
import shutil
from pathlib import Path
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .compare import normalize_line_endings
from .models import ProblemRecord, TestCase
from .settings import RunSettings

log = logging.getLogger(__name__)

PROBLEM_FILE = 'problem.yaml'
DEFAULT_TIME_LIMIT_MS = 2000

_CASE_RE = re.compile(r'^(\d+)\.in$')


class IngestError(Exception):
    pass


class CompanionTest(BaseModel):
    input: str = ''
    output: str = ''


class CompanionPayload(BaseModel):
    """The part of a Competitive Companion payload that localjudge uses."""

    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    name: str = ''
    group: str = ''
    url: str
    interactive: bool = False
    time_limit: int = Field(default=DEFAULT_TIME_LIMIT_MS, alias='timeLimit')
    tests: list[CompanionTest] = []


class ProblemMetadata(BaseModel):
    """Contents of problem.yaml."""

    model_config = ConfigDict(extra='forbid')

    contest_id: str
    task_id: str
    name: str = ''
    group: str = ''
    url: str = ''
    interactive: bool = False
    time_limit_ms: int = DEFAULT_TIME_LIMIT_MS


def collect_test_cases(tests_dir: str) -> list[TestCase]:
    """Find the test cases in a directory, ordered by index.

    A case is a file <n>.in; its expected output is <n>.out, which does
    not have to exist.
    """
    if not os.path.isdir(tests_dir):
        return []
    cases = []
    for name in os.listdir(tests_dir):
        match = _CASE_RE.match(name)
        if match and os.path.isfile(os.path.join(tests_dir, name)):
            index = int(match.group(1))
            cases.append(TestCase(index=index,
                                  input_path=os.path.join(tests_dir, name),
                                  output_path=os.path.join(tests_dir, f'{index}.out')))
    return sorted(cases, key=lambda case: case.index)


def next_test_index(tests_dir: str) -> int:
    cases = collect_test_cases(tests_dir)
    return cases[-1].index + 1 if cases else 1


def parse_task_url(url: str) -> tuple[str, str]:
    """Extract (contest id, task id) from a task URL such as
    https://atcoder.jp/contests/abc300/tasks/abc300_a.

    Raises:
        IngestError if the URL has no contest or no task part.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https'):
        raise IngestError(f'Invalid or missing URL: {url!r}')
    parts = parsed.path.split('/')

    def after(marker: str) -> str | None:
        if marker in parts:
            i = parts.index(marker)
            if i + 1 < len(parts) and parts[i + 1]:
                return parts[i + 1]
        return None

    contest_id = after('contests')
    task_id = after('tasks')
    if contest_id is None or task_id is None:
        raise IngestError(f'Could not extract contest or task ID from URL {url}')
    return contest_id, task_id


def load_problem(task_dir: str, tests_dir_name: str = 'tests') -> ProblemRecord:
    """Build a ProblemRecord from a task directory.

    Raises:
        IngestError if problem.yaml is missing or invalid.
    """
    task_dir = os.path.realpath(task_dir)
    path = os.path.join(task_dir, PROBLEM_FILE)
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        metadata = ProblemMetadata.model_validate(data)
    except FileNotFoundError:
        raise IngestError(f'No {PROBLEM_FILE} in {task_dir}')
    except (yaml.YAMLError, ValidationError) as err:
        raise IngestError(f'{path}: {err}')

    return ProblemRecord(contest_id=metadata.contest_id,
                         task_id=metadata.task_id,
                         name=metadata.name,
                         group=metadata.group,
                         url=metadata.url,
                         interactive=metadata.interactive,
                         time_limit_ms=metadata.time_limit_ms,
                         task_dir=task_dir,
                         cases=tuple(collect_test_cases(os.path.join(task_dir, tests_dir_name))))


def parse_payload(raw: bytes | str) -> CompanionPayload:
    try:
        return CompanionPayload.model_validate_json(raw)
    except ValidationError as err:
        raise IngestError(f'Invalid Competitive Companion payload: {err}')


def ingest(payload: CompanionPayload, workspace: str, settings: RunSettings) -> ProblemRecord:
    """Save a problem received from Competitive Companion.

    Test cases are only written if the tests directory has none yet, so
    hand-edited or added cases survive a second ingestion.  Templates are
    copied to main.py/main.cpp unless those already exist.

    Returns:
        the ProblemRecord of the saved problem.
    """
    workspace = os.path.realpath(workspace)
    contest_id, task_id = parse_task_url(payload.url)
    task_dir = os.path.join(workspace, contest_id, task_id)
    tests_dir = os.path.join(task_dir, settings.tests_dir_name)
    os.makedirs(tests_dir, exist_ok=True)

    if collect_test_cases(tests_dir):
        log.info('Tests already exist in %s; skipping addition.', tests_dir)
    elif payload.tests:
        first = next_test_index(tests_dir)
        for offset, test in enumerate(payload.tests):
            index = first + offset
            _write_text(os.path.join(tests_dir, f'{index}.in'), normalize_line_endings(test.input))
            _write_text(os.path.join(tests_dir, f'{index}.out'), normalize_line_endings(test.output))
        log.info('Saved %d test case(s) to %s.', len(payload.tests), tests_dir)
    else:
        log.info('No new test cases to save for %s.', tests_dir)

    metadata = ProblemMetadata(contest_id=contest_id,
                               task_id=task_id,
                               name=payload.name,
                               group=payload.group,
                               url=payload.url,
                               interactive=payload.interactive,
                               time_limit_ms=payload.time_limit)
    with open(os.path.join(task_dir, PROBLEM_FILE), 'w') as f:
        yaml.safe_dump(metadata.model_dump(), f, sort_keys=False)

    _copy_template(Path(workspace) / settings.template_file_path, os.path.join(task_dir, 'main.py'))
    _copy_template(Path(workspace) / settings.template_file_path_cpp, os.path.join(task_dir, 'main.cpp'))

    return load_problem(task_dir, settings.tests_dir_name)


def _write_text(path: str, text: str) -> None:
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(text)


def _copy_template(template: Path, destination: str) -> None:
    if os.path.exists(destination):
        return
    if not template.is_file():
        log.warning('Template file not found at %s. Skipping copy to %s.', template, destination)
        return
    shutil.copyfile(template, destination)
