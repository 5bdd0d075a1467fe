"""Typst -> LaTeX math conversion through an external pandoc process."""

from __future__ import annotations

import contextlib
import logging
import os
import subprocess
from typing import Optional, Protocol

from typstmath.errors import (
    ConverterExitError,
    ConverterTimeout,
    ConverterUnavailable,
    PipeReadError,
    PipeWriteError,
)

log = logging.getLogger(__name__)

DISPLAY_OPEN = r"\["
DISPLAY_CLOSE = r"\]"


class TextConverter(Protocol):
    def convert(self, text: str) -> str: ...


# -----------------------------
# Helpers
# -----------------------------
def wrap_math(text: str) -> str:
    # Delimiters make pandoc read the payload as an equation, not prose
    return f"$\n{text}\n$"


def clean_latex(stdout: str) -> str:
    out = stdout.strip()
    out = out.removeprefix(DISPLAY_OPEN)
    out = out.removesuffix(DISPLAY_CLOSE)
    return out.strip()


def strip_location(stderr: str) -> str:
    """Drop the ``<file>:<line>:<col>``-style prefix up to the first colon."""
    _, sep, rest = stderr.partition(":")
    return (rest if sep else stderr).strip()


class PandocConverter:
    def __init__(self, executable: str = "pandoc", timeout: Optional[float] = None):
        self.executable = executable
        self.timeout = timeout

    def command(self) -> list[str]:
        return [self.executable, "-f", "typst", "-t", "latex", "--"]

    def convert(self, text: str) -> str:
        cmd = self.command()
        log.debug("running %s", " ".join(cmd))
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                encoding="utf-8",
                errors="replace",
            )
        except OSError as e:
            name = os.path.basename(self.executable)
            log.warning("could not start %s: %s", name, e)
            raise ConverterUnavailable(f"Failed to execute {name}. Do you have it installed?") from e

        # communicate() closes stdin itself and fails on an already closed pipe
        try:
            proc.stdin.write(wrap_math(text))
            proc.stdin.flush()
        except OSError as e:
            _reap(proc)
            raise PipeWriteError("Failed to write to stdin") from e

        try:
            stdout, stderr = proc.communicate(timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            _reap(proc)
            log.warning("%s did not finish within %ss", self.executable, self.timeout)
            raise ConverterTimeout(f"Conversion timed out after {self.timeout:g} seconds") from e
        except (OSError, ValueError) as e:
            _reap(proc)
            raise PipeReadError("Failed to read stdout and stderr") from e

        if proc.returncode == 0:
            return clean_latex(stdout)
        message = strip_location(stderr)
        log.warning("%s exited with %s: %s", self.executable, proc.returncode, message)
        raise ConverterExitError(message)


def _reap(proc: subprocess.Popen) -> None:
    proc.kill()
    for pipe in (proc.stdin, proc.stdout, proc.stderr):
        if pipe is not None:
            with contextlib.suppress(OSError):
                pipe.close()
    proc.wait()
