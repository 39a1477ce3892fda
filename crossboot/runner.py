"""Run one step: skip if done, isolate, execute, record completion.

Per-step state lives only in the marker store:

    Pending   (no marker)  ──body succeeds──▶  Completed (marker written)
        ▲                                            │
        └────── body fails: no marker, StepFailure ──┘ (stays Pending)

A body receives a StepContext holding its own copy of the environment and
working directory. It may export variables and change directory freely;
those changes live in the context and are dropped when the step ends.
Bodies that touch os.environ or call os.chdir() directly are covered too:
the process-wide environment and cwd are snapshotted before the call and
restored afterwards, so nothing leaks into the runner or the next step.
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Mapping, Sequence

from crossboot.errors import StepFailure
from crossboot.markers import MarkerStore
from crossboot.pipeline import Step

log = logging.getLogger(__name__)


class StepStatus(Enum):
    SKIPPED = "skipped"
    COMPLETED = "completed"


@dataclass
class StepContext:
    """Private execution state handed to a step body."""

    step: str
    env: dict[str, str]
    cwd: Path

    def chdir(self, path: str | Path) -> Path:
        """Change the step's working directory (relative to the current one)."""
        self.cwd = self.cwd / path
        return self.cwd

    def export(self, name: str, value: str | os.PathLike) -> None:
        self.env[name] = os.fspath(value)

    def run(self, argv: Sequence[str | os.PathLike], *,
            cwd: str | Path | None = None,
            env: Mapping[str, str] | None = None) -> subprocess.CompletedProcess:
        """Run an external tool in the step's environment.

        Raises CalledProcessError on a non-zero exit status, which the
        runner turns into a StepFailure.
        """
        args = [os.fspath(a) for a in argv]
        workdir = self.cwd / cwd if cwd is not None else self.cwd
        full_env = {**self.env, **(env or {})}
        log.debug("[%s] (cd %s && %s)", self.step, workdir, shlex.join(args))
        return subprocess.run(args, cwd=workdir, env=full_env, check=True)


@contextmanager
def isolated_process_state() -> Iterator[None]:
    """Restore os.environ and the working directory on exit."""
    saved_env = dict(os.environ)
    saved_cwd = os.getcwd()
    try:
        yield
    finally:
        os.chdir(saved_cwd)
        if dict(os.environ) != saved_env:
            os.environ.clear()
            os.environ.update(saved_env)


def _succeeded(result: object) -> bool:
    if result is None or result is True:
        return True
    if result is False:
        return False
    if isinstance(result, subprocess.CompletedProcess):
        return result.returncode == 0
    if isinstance(result, int):
        return result == 0
    return False


def _describe(exc: BaseException) -> str:
    if isinstance(exc, subprocess.CalledProcessError):
        cmd = exc.cmd if isinstance(exc.cmd, str) else shlex.join(map(str, exc.cmd))
        return f"command `{cmd}` exited with status {exc.returncode}"
    return str(exc) or type(exc).__name__


class StepRunner:
    """Executes steps against a marker store.

    ``env`` and ``cwd`` seed every StepContext; they default to the
    process environment and working directory at the time each step starts.
    """

    def __init__(self, markers: MarkerStore, *,
                 env: Mapping[str, str] | None = None,
                 cwd: str | Path | None = None):
        self.markers = markers
        self.env = dict(env) if env is not None else None
        self.cwd = Path(cwd) if cwd is not None else None

    def context(self, step: Step) -> StepContext:
        env = dict(self.env if self.env is not None else os.environ)
        cwd = self.cwd if self.cwd is not None else Path.cwd()
        return StepContext(step=step.name, env=env, cwd=cwd)

    def run(self, step: Step, *, index: int | None = None,
            total: int | None = None) -> StepStatus:
        """Run step unless its marker exists.

        Returns SKIPPED or COMPLETED. Raises StepFailure (chained from the
        underlying error) if the body fails; no marker is written then.
        """
        prefix = f"[{index}/{total}] " if index is not None and total else ""
        log.info("==> %s%s", prefix, step.name)

        if self.markers.is_done(step.name):
            log.info("    %s already done, skipping", step.name)
            return StepStatus.SKIPPED

        ctx = self.context(step)
        start = time.monotonic()
        try:
            with isolated_process_state():
                result = step.body(ctx)
        except SystemExit as e:
            # sys.exit() in a body ends the step, not the pipeline
            if e.code not in (None, 0):
                log.error("step %r failed: body exited with status %r", step.name, e.code)
                raise StepFailure(step.name, f"body exited with status {e.code!r}") from e
            result = None
        except Exception as e:
            log.error("step %r failed: %s", step.name, _describe(e))
            raise StepFailure(step.name, _describe(e)) from e

        if not _succeeded(result):
            log.error("step %r failed: body returned %r", step.name, result)
            raise StepFailure(step.name, f"body returned {result!r}")

        elapsed = time.monotonic() - start
        self.markers.mark(step.name, elapsed)
        log.info("    %s done in %.1fs", step.name, elapsed)
        return StepStatus.COMPLETED
