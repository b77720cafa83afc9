import os
import sys

import pytest

from localjudge.run import LaunchFailure, execute


def python(code: str) -> list[str]:
    return [sys.executable, '-c', code]


def test_echo_stdin(tmp_path):
    res = execute(python('import sys; sys.stdout.write(sys.stdin.read())'),
                  cwd=str(tmp_path), input_bytes=b'hello\n', timeout_ms=10000)
    assert res.exit_code == 0
    assert not res.timed_out
    assert res.stdout == b'hello\n'
    assert res.stderr == b''
    assert res.duration_ms > 0


def test_stdin_is_closed(tmp_path):
    # Reading until EOF only terminates if stdin gets closed.
    res = execute(python('import sys; print(len(sys.stdin.read()))'),
                  cwd=str(tmp_path), input_bytes=b'', timeout_ms=10000)
    assert res.stdout.strip() == b'0'
    assert not res.timed_out


def test_exit_code_and_stderr(tmp_path):
    res = execute(python('import sys; sys.stderr.write("oops"); sys.exit(3)'),
                  cwd=str(tmp_path), timeout_ms=10000)
    assert res.exit_code == 3
    assert res.stderr == b'oops'
    assert not res.timed_out


def test_timeout_kills_process(tmp_path):
    res = execute(python('import time; time.sleep(30)'), cwd=str(tmp_path), timeout_ms=300)
    assert res.timed_out
    assert res.duration_ms < 20000


def test_timeout_regardless_of_exit_code(tmp_path):
    code = 'import signal, sys, time\nsignal.signal(signal.SIGTERM, lambda *a: sys.exit(0))\ntime.sleep(30)'
    res = execute(python(code), cwd=str(tmp_path), timeout_ms=300)
    assert res.timed_out


def test_child_that_ignores_input(tmp_path):
    res = execute(python('print("done")'), cwd=str(tmp_path),
                  input_bytes=b'x' * (4 * 1024 * 1024), timeout_ms=10000)
    assert res.exit_code == 0
    assert res.stdout == b'done\n'


def test_large_output_does_not_deadlock(tmp_path):
    code = 'import sys\ndata = sys.stdin.read()\nsys.stdout.write(data)\nsys.stderr.write(data)'
    data = b'0123456789' * 200000
    res = execute(python(code), cwd=str(tmp_path), input_bytes=data, timeout_ms=20000)
    assert not res.timed_out
    assert res.stdout == data
    assert res.stderr == data


def test_working_directory_and_environment(tmp_path):
    code = 'import os; print(os.getcwd()); print(os.environ["MARKER"])'
    env = dict(os.environ, MARKER='set')
    res = execute(python(code), cwd=str(tmp_path), env=env, timeout_ms=10000)
    cwd, marker = res.stdout.decode().split()
    assert os.path.realpath(cwd) == os.path.realpath(tmp_path)
    assert marker == 'set'


def test_launch_failure_for_missing_executable(tmp_path):
    with pytest.raises(LaunchFailure) as excinfo:
        execute([str(tmp_path / 'does-not-exist')], cwd=str(tmp_path), timeout_ms=1000)
    assert 'does-not-exist' in str(excinfo.value)


def test_launch_failure_for_non_executable(tmp_path):
    script = tmp_path / 'script.sh'
    script.write_text('echo hi\n')
    os.chmod(script, 0o644)
    with pytest.raises(LaunchFailure):
        execute([str(script)], cwd=str(tmp_path), timeout_ms=1000)


def test_no_timeout(tmp_path):
    res = execute(python('print(1)'), cwd=str(tmp_path), timeout_ms=None)
    assert res.stdout == b'1\n'
    assert not res.timed_out


BACKGROUND_SLEEPER = '''
import subprocess, sys
subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(6)'])
print('done', flush=True)
'''


def test_background_process_holding_stdout(tmp_path):
    res = execute(python(BACKGROUND_SLEEPER), cwd=str(tmp_path), timeout_ms=500)
    assert res.exit_code == 0
    assert not res.timed_out
    assert res.stdout == b'done\n'
    assert res.duration_ms < 5000


def test_background_process_of_timed_out_child(tmp_path):
    res = execute(python(BACKGROUND_SLEEPER + 'import time; time.sleep(30)\n'), cwd=str(tmp_path), timeout_ms=500)
    assert res.timed_out
    assert res.stdout == b'done\n'
    assert res.duration_ms < 5000
