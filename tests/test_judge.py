import json
import shlex
import sys

import pytest
import yaml

from localjudge import config, judge, state


@pytest.fixture(autouse=True)
def isolated(monkeypatch):
    monkeypatch.setattr(config, 'user_config_files', lambda: [])
    yield
    state.current.clear()


def write_payload(tmp_path, tests):
    path = tmp_path / 'payload.json'
    path.write_text(json.dumps({
        'name': 'A - Echo',
        'url': 'https://atcoder.jp/contests/abc300/tasks/abc300_a',
        'timeLimit': 2000,
        'tests': [{'input': i, 'output': o} for i, o in tests],
    }))
    return path


def run_main(monkeypatch, argv):
    monkeypatch.setattr(sys, 'argv', ['localjudge'] + argv)
    with pytest.raises(SystemExit) as excinfo:
        judge.main()
    return excinfo.value.code


def setup_task(tmp_path, monkeypatch, solution):
    workspace = tmp_path / 'ws'
    workspace.mkdir()
    payload = write_payload(tmp_path, [('hello\n', 'hello\n'), ('bye\n', 'bye\n')])
    assert run_main(monkeypatch, ['ingest', '-w', str(workspace), str(payload)]) == 0
    task_dir = workspace / 'abc300' / 'abc300_a'
    (task_dir / 'main.py').write_text(solution)
    (workspace / '.localjudge').mkdir()
    with open(workspace / '.localjudge' / 'localjudge.yaml', 'w') as f:
        yaml.safe_dump({'python_command': shlex.quote(sys.executable)}, f)
    return workspace, task_dir


def test_argparser():
    args = judge.argparser().parse_args(['run', '-c', '2', '-r', 'pypy', 'some/dir'])
    assert args.command == 'run'
    assert args.case == 2
    assert args.runtime == 'pypy'
    assert args.taskdir == 'some/dir'
    assert args.events == 'log'


def test_argparser_rejects_bad_index():
    with pytest.raises(SystemExit):
        judge.argparser().parse_args(['run', '-c', '0', 'dir'])


def test_ingest_and_run_all(tmp_path, monkeypatch, capsys):
    workspace, task_dir = setup_task(tmp_path, monkeypatch, 'import sys\nsys.stdout.write(sys.stdin.read())\n')
    assert (task_dir / 'tests' / '2.out').read_text() == 'bye\n'

    status = run_main(monkeypatch, ['run', '-w', str(workspace), '--events', 'json', str(task_dir)])

    assert status == 0
    events = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.startswith('{')]
    complete = [e for e in events if e['type'] == 'run/complete']
    assert len(complete) == 1
    assert complete[0]['summary']['passed'] == 2


def test_run_one_failing_case(tmp_path, monkeypatch):
    workspace, task_dir = setup_task(tmp_path, monkeypatch, 'print("hello")\n')
    assert run_main(monkeypatch, ['run', '-w', str(workspace), '-c', '1', str(task_dir)]) == 0
    assert run_main(monkeypatch, ['run', '-w', str(workspace), '-c', '2', str(task_dir)]) == 1


def test_run_unknown_case(tmp_path, monkeypatch):
    workspace, task_dir = setup_task(tmp_path, monkeypatch, 'print("hello")\n')
    assert run_main(monkeypatch, ['run', '-w', str(workspace), '-c', '99', str(task_dir)]) == 1


def test_run_without_problem_yaml(tmp_path, monkeypatch):
    assert run_main(monkeypatch, ['run', '-w', str(tmp_path), str(tmp_path)]) == 1
