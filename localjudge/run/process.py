"""
Execution of a single external process with a wall-clock deadline.
"""
import logging
import os
import signal
import subprocess
import threading
import time
from dataclasses import dataclass

from .errors import LaunchFailure

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int | None
    timed_out: bool
    stdout: bytes
    stderr: bytes
    duration_ms: float


def execute(argv: list[str], cwd: str, env: dict[str, str] | None = None,
            input_bytes: bytes = b'', timeout_ms: float | None = None) -> ProcessResult:
    """Run a program to completion.

    Args:
        argv (list of str): command line, argv[0] is the executable
        cwd (str): working directory of the child
        env (dict): complete environment of the child
        input_bytes (bytes): data written to the child's stdin, which
            is closed right after writing
        timeout_ms (float): wall-clock limit in milliseconds, or None
            for no limit.  A child still alive when the limit expires
            is killed and the result is marked as timed out.

    Returns:
        ProcessResult

    Raises:
        LaunchFailure if the child could not be started.
    """
    log.debug('run "%s" in %s (timeout %s ms)', ' '.join(argv), cwd, timeout_ms)
    start = time.monotonic()
    try:
        proc = subprocess.Popen(argv, cwd=cwd, env=env,
                                stdin=subprocess.PIPE,
                                stdout=subprocess.PIPE,
                                stderr=subprocess.PIPE,
                                start_new_session=True)
    except OSError as exc:
        raise LaunchFailure(argv, exc.strerror or str(exc)) from exc

    stdout_chunks: list[bytes] = []
    stderr_chunks: list[bytes] = []
    expired = threading.Event()

    def on_deadline() -> None:
        if proc.poll() is not None:
            return
        expired.set()
        _kill_group(proc.pid)

    timer = None
    if timeout_ms is not None:
        timer = threading.Timer(timeout_ms / 1000.0, on_deadline)
        timer.daemon = True
        timer.start()

    workers = [
        threading.Thread(target=_feed, args=(proc.stdin, input_bytes), daemon=True),
        threading.Thread(target=_drain, args=(proc.stdout, stdout_chunks), daemon=True),
        threading.Thread(target=_drain, args=(proc.stderr, stderr_chunks), daemon=True),
    ]
    for worker in workers:
        worker.start()
    try:
        status = proc.wait()
    finally:
        if timer is not None:
            timer.cancel()
        # Leftover members of the child's session may still hold the
        # output pipes open.
        _kill_group(proc.pid)
    for worker in workers:
        worker.join()
    duration_ms = (time.monotonic() - start) * 1000.0

    timed_out = expired.is_set()
    log.debug('"%s" finished with status %s after %.1f ms%s',
              argv[0], status, duration_ms, ' (timed out)' if timed_out else '')
    return ProcessResult(exit_code=status,
                         timed_out=timed_out,
                         stdout=b''.join(stdout_chunks),
                         stderr=b''.join(stderr_chunks),
                         duration_ms=duration_ms)


def _kill_group(pgid: int) -> None:
    try:
        os.killpg(pgid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        pass


def _feed(pipe, data: bytes) -> None:
    try:
        if data:
            pipe.write(data)
    except (BrokenPipeError, ConnectionResetError):
        # The child exited or closed stdin without reading all of it.
        pass
    finally:
        try:
            pipe.close()
        except (BrokenPipeError, ConnectionResetError):
            pass


def _drain(pipe, chunks: list[bytes]) -> None:
    with pipe:
        for chunk in iter(lambda: pipe.read(65536), b''):
            chunks.append(chunk)
