"""Bounded subprocess execution.

``run`` drains stdout and stderr on reader threads as the child writes
them. As soon as either stream passes ``max_output`` bytes the child is
killed, so a runaway ``git log -p`` never sits in memory in full. Output
is decoded as UTF-8 (undecodable bytes are replaced). The usual failure
modes come back as ``Err(ProcessError)`` tagged with a ``reason``:

    exit      the process ran and returned non-zero
    spawn     the executable could not be started
    timeout   the deadline passed before the process finished
    overflow  stdout or stderr grew past ``max_output`` bytes
"""

from __future__ import annotations

import io
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Literal, cast

from gitcc.core.result import Err, Ok, Result

__all__ = ["MAX_OUTPUT_BYTES", "ProcessError", "ProcessFailure", "run"]

MAX_OUTPUT_BYTES = 16 * 1024 * 1024
_CHUNK = 64 * 1024

type ProcessFailure = Literal["exit", "spawn", "timeout", "overflow"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that did not complete successfully.

    Attributes:
        command: argv as executed
        cwd: Working directory it ran in
        reason: Which failure mode occurred
        returncode: Exit code; None unless ``reason == "exit"``
        stdout: Decoded standard output captured so far
        stderr: Decoded standard error, or a description of the failure
    """

    command: tuple[str, ...]
    cwd: Path
    reason: ProcessFailure
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""

    def __str__(self) -> str:
        program = self.command[0] if self.command else "<empty>"
        if self.reason == "exit":
            return f"{program} exited with {self.returncode}"
        return f"{program}: {self.reason} ({self.stderr.strip() or 'no details'})"


def _decode(data: bytes | bytearray) -> str:
    return bytes(data).decode("utf-8", errors="replace")


class _Capture:
    """Reads one pipe into memory, killing the child past ``limit`` bytes."""

    def __init__(self, stream: io.BufferedIOBase, limit: int, proc: subprocess.Popen[bytes]) -> None:
        self.data = bytearray()
        self.overflowed = False
        self._stream = stream
        self._limit = limit
        self._proc = proc
        self._thread = threading.Thread(target=self._drain, daemon=True)
        self._thread.start()

    def _drain(self) -> None:
        while chunk := self._stream.read1(_CHUNK):
            if len(self.data) + len(chunk) > self._limit:
                self.overflowed = True
                self._proc.kill()
                return
            self.data.extend(chunk)

    def join(self) -> None:
        self._thread.join()


def run(
    cmd: list[str],
    cwd: Path,
    env: dict[str, str] | None = None,
    *,
    timeout: float | None = None,
    max_output: int = MAX_OUTPUT_BYTES,
) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its decoded stdout."""
    argv = tuple(cmd)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=str(cwd),
            env=env,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
        )
    except OSError as e:
        return Err(ProcessError(argv, cwd, "spawn", stderr=e.strerror or str(e)))

    with proc:
        out = _Capture(cast(io.BufferedIOBase, proc.stdout), max_output, proc)
        err = _Capture(cast(io.BufferedIOBase, proc.stderr), max_output, proc)
        try:
            returncode = proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
            out.join()
            err.join()
            return Err(
                ProcessError(argv, cwd, "timeout", stdout=_decode(out.data), stderr=f"no result after {timeout}s")
            )
        out.join()
        err.join()

    if out.overflowed or err.overflowed:
        return Err(ProcessError(argv, cwd, "overflow", stderr=f"more than {max_output} bytes of output"))

    stdout = _decode(out.data)
    if returncode != 0:
        return Err(ProcessError(argv, cwd, "exit", returncode=returncode, stdout=stdout, stderr=_decode(err.data)))
    return Ok(stdout)
