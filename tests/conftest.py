import shlex
import sys
import textwrap
from pathlib import Path

import pytest

from localjudge.models import ProblemRecord, TestCase
from localjudge.settings import RunSettings

CONTEST = 'abc300'
TASK = 'abc300_a'

PYTHON = shlex.quote(sys.executable)

# Stand-ins for the cpp_compile/cpp_run helper scripts.  "Compiling" copies
# main.cpp (which holds Python code in these tests) to a.out and records the
# build in builds.log; "running" executes a.out with the input file on stdin.
FAKE_CPP_COMPILE = '''
import os, shutil, sys
contest, task = sys.argv[1:3]
root = os.environ['WORKSPACE_DIR']
task_dir = os.path.join(root, contest, task)
with open(os.path.join(root, 'builds.log'), 'a') as log:
    log.write('%s/%s\\n' % (contest, task))
source = open(os.path.join(task_dir, 'main.cpp')).read()
if 'syntax error' in source:
    sys.stderr.write('main.cpp:1:1: error: syntax error\\n')
    sys.exit(1)
if 'no binary' in source:
    sys.exit(0)
shutil.copyfile(os.path.join(task_dir, 'main.cpp'), os.path.join(task_dir, 'a.out'))
'''

FAKE_CPP_RUN = '''
import sys
contest, task, infile = sys.argv[1:4]
sys.stdin = open(infile)
code = compile(open('a.out').read(), 'a.out', 'exec')
exec(code, {'__name__': '__main__'})
'''

# Stand-in for "codon build [args] -o <output> <source>": writes an
# executable script running the source with the current interpreter.
FAKE_CODON = '''
import os, sys
args = sys.argv[1:]
assert args[0] == 'build'
output = args[args.index('-o') + 1]
source = open(args[-1]).read()
with open(os.path.join(os.path.dirname(output), 'codon_args.txt'), 'w') as f:
    f.write(' '.join(args))
with open(output, 'w') as f:
    f.write('#!%s\\n' % sys.executable)
    f.write(source)
os.chmod(output, 0o755)
'''

ECHO = '''
import sys
sys.stdout.write(sys.stdin.read())
'''


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / 'workspace'
    (root / CONTEST / TASK / 'tests').mkdir(parents=True)
    return root


def write_script(path: Path, code: str) -> Path:
    path.write_text(textwrap.dedent(code).lstrip())
    return path


def make_problem(workspace: Path, cases: list[tuple[str, str | None]], *,
                 solution: str | None = ECHO, solution_name: str = 'main.py',
                 time_limit_ms: int = 2000, interactive: bool = False) -> ProblemRecord:
    """Write the cases (input, expected or None) and the solution into the
    workspace and return the ProblemRecord for them."""
    task_dir = workspace / CONTEST / TASK
    tests_dir = task_dir / 'tests'
    test_cases = []
    for index, (data, expected) in enumerate(cases, start=1):
        infile = tests_dir / f'{index}.in'
        outfile = tests_dir / f'{index}.out'
        infile.write_text(data)
        if expected is not None:
            outfile.write_text(expected)
        test_cases.append(TestCase(index=index, input_path=str(infile), output_path=str(outfile)))
    if solution is not None:
        write_script(task_dir / solution_name, solution)
    return ProblemRecord(contest_id=CONTEST,
                         task_id=TASK,
                         name='A - Test',
                         time_limit_ms=time_limit_ms,
                         task_dir=str(task_dir),
                         cases=tuple(test_cases),
                         interactive=interactive)


@pytest.fixture
def settings() -> RunSettings:
    return RunSettings(runtime='cpython', python_command=sys.executable, pypy_command=sys.executable)


@pytest.fixture
def cpp_settings(tmp_path: Path) -> RunSettings:
    compile_script = write_script(tmp_path / 'cpp_compile.py', FAKE_CPP_COMPILE)
    run_script = write_script(tmp_path / 'cpp_run.py', FAKE_CPP_RUN)
    return RunSettings(runtime='cpp',
                       cpp_compile_command=f'{PYTHON} {shlex.quote(str(compile_script))}',
                       cpp_run_command=f'{PYTHON} {shlex.quote(str(run_script))}')


@pytest.fixture
def codon_settings(tmp_path: Path) -> RunSettings:
    codon = write_script(tmp_path / 'codon.py', FAKE_CODON)
    return RunSettings(runtime='codon',
                       codon_command=f'{PYTHON} {shlex.quote(str(codon))}',
                       codon_build_args=['-release'],
                       codon_output_name='main')
