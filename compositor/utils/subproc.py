# compositor/utils/subproc.py
from collections import deque
import os
import subprocess
import threading
from typing import Mapping, Optional, Sequence

from compositor.core import get_logger

log = get_logger("subproc")


class CommandError(RuntimeError):
    """Non-zero exit or timeout of a subprocess; keeps the output tail."""

    def __init__(self, message: str, returncode: Optional[int], tail: str, timed_out: bool = False):
        super().__init__(message)
        self.returncode = returncode
        self.tail = tail
        self.timed_out = timed_out


def _ensure_parent(path: str) -> None:
    if not path:
        return
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)


def run_streamed(
    cmd: Sequence[str],
    cwd: Optional[str] = None,
    env: Optional[Mapping[str, str]] = None,
    log_path: Optional[str] = None,
    tail_lines: int = 200,
    timeout: Optional[float] = None,
    check: bool = True,
    echo: bool = False,
) -> int:
    """
    Stream a subprocess's merged stdout+stderr line by line to the logger
    (optional) and tee it to a logfile, keeping a tail of the last N lines for
    error messages. A timeout kills the process. Raises CommandError on non-zero
    exit when check=True, and always on timeout. Returns the process returncode.
    """
    if log_path:
        _ensure_parent(log_path)
    tail = deque(maxlen=tail_lines)
    log_fh = open(log_path, "a", encoding="utf-8") if log_path else None
    timed_out = threading.Event()
    timer = None
    try:
        proc = subprocess.Popen(
            list(cmd),
            cwd=cwd,
            env=dict(os.environ, **env) if env else None,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            bufsize=1,  # line-buffered
        )

        if timeout is not None:
            def _kill():
                timed_out.set()
                proc.kill()

            timer = threading.Timer(timeout, _kill)
            timer.daemon = True
            timer.start()

        for line in iter(proc.stdout.readline, ""):
            tail.append(line.rstrip("\n"))
            if echo:
                log.info(line.rstrip("\n"))
            if log_fh:
                log_fh.write(line)
        proc.stdout.close()
        proc.wait()
    finally:
        if timer is not None:
            timer.cancel()
        if log_fh:
            log_fh.flush()
            log_fh.close()

    rc = proc.returncode
    tail_str = "\n".join(tail)
    if timed_out.is_set():
        raise CommandError(
            f"Command timed out after {timeout}s: {' '.join(cmd)}\n--- tail({len(tail)} lines) ---\n{tail_str}\n",
            rc,
            tail_str,
            timed_out=True,
        )
    if check and rc != 0:
        raise CommandError(
            f"Command failed (rc={rc}): {' '.join(cmd)}\n--- tail({len(tail)} lines) ---\n{tail_str}\n",
            rc,
            tail_str,
        )
    return rc
