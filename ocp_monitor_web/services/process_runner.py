from __future__ import annotations

import logging
import os
import signal
import subprocess
from concurrent.futures import ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeout
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Sequence

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024
_DRAIN_GRACE_SECONDS = 5
_POSIX = os.name == "posix"


@dataclass(frozen=True)
class ProcessOutcome:
    exit_code: Optional[int]        # None when the process was killed on timeout
    output: str
    output_truncated: bool = False
    timed_out: bool = False


def _drain(proc: subprocess.Popen, buf: bytearray, limit: int) -> tuple[int, bool]:
    """
    Read merged stdout/stderr until EOF. Past `limit` bytes the output is read
    and dropped so the child never blocks on a full pipe.
    """
    truncated = False
    for chunk in iter(lambda: proc.stdout.read(_CHUNK_SIZE), b""):
        room = limit - len(buf)
        if room > 0:
            buf += chunk[:room]
        if len(chunk) > room:
            truncated = True
    return proc.wait(), truncated


def _kill(proc: subprocess.Popen) -> None:
    if _POSIX:
        try:
            # child runs in its own session; take its process group down with it
            os.killpg(proc.pid, signal.SIGKILL)
        except (ProcessLookupError, PermissionError):
            proc.kill()
    else:
        proc.kill()
    proc.wait()


def run_bounded(
    command: Sequence[str],
    *,
    cwd: Path,
    env: Mapping[str, str],
    timeout_seconds: float,
    max_output_bytes: int,
) -> ProcessOutcome:
    """
    Run `command` to completion with stderr merged into stdout.

    Draining and waiting run as one single-worker future so the wall-clock
    timeout covers both. On timeout the process is killed and its output
    discarded. Raises OSError if the process cannot be started.
    """
    proc = subprocess.Popen(
        list(command),
        cwd=str(cwd),
        env=dict(env),
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        start_new_session=_POSIX,
    )
    logger.debug("Started pid=%s: %s", proc.pid, " ".join(command))

    buf = bytearray()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="monitor-drain")
    future = None
    try:
        future = executor.submit(_drain, proc, buf, max_output_bytes)
        try:
            exit_code, truncated = future.result(timeout=timeout_seconds)
        except FutureTimeout:
            logger.error("pid=%s exceeded %ss; killing", proc.pid, timeout_seconds)
            _kill(proc)
            # the drain hits EOF once the process group is gone
            wait([future], timeout=_DRAIN_GRACE_SECONDS)
            return ProcessOutcome(exit_code=None, output="", timed_out=True)
    finally:
        executor.shutdown(wait=False)
        # closing under a still-blocked reader would stall on the buffer lock
        if future is None or future.done():
            proc.stdout.close()
        else:
            logger.warning("pid=%s output pipe still held open after kill", proc.pid)

    if truncated:
        logger.warning("pid=%s output exceeded %d bytes; remainder discarded", proc.pid, max_output_bytes)

    return ProcessOutcome(
        exit_code=exit_code,
        output=bytes(buf).decode("utf-8", errors="replace"),
        output_truncated=truncated,
    )
