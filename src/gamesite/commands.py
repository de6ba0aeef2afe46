# commands.py
from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Sequence, Tuple

from .errors import BuildError, ValidationError
from .model import BuildStep, Phase

# Keep failure output readable in the report
STDERR_TAIL = 4000


# ----------------------------------------------------------------------
# Parsing
# ----------------------------------------------------------------------

def parse_step(line: str) -> BuildStep:
    """
    Split a build command line into program + arguments.

    Quoting follows POSIX shell rules, but the step is never handed to a
    shell: pipes, globs and redirects are passed through as literal args.
    """
    try:
        parts = shlex.split(line or "")
    except ValueError as e:
        raise ValidationError(f"Invalid build step: {line!r} ({e})", Phase.BUILD) from e

    if not parts:
        raise ValidationError(f"Invalid build step: {line!r} (no program)", Phase.BUILD)

    return BuildStep(program=parts[0], args=tuple(parts[1:]), line=line.strip())


def parse_steps(lines: Iterable[str]) -> Tuple[BuildStep, ...]:
    return tuple(parse_step(line) for line in lines)


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------

@dataclass(frozen=True)
class StepsResult:
    ok: bool
    failed_index: Optional[int] = None
    exit_status: Optional[int] = None
    stderr: str = ""
    message: str = ""

    def to_error(self) -> BuildError:
        return BuildError(
            message=self.message,
            step_index=self.failed_index if self.failed_index is not None else -1,
            exit_status=self.exit_status,
            stderr=self.stderr,
        )


def _run_step(step: BuildStep, cwd: Path, timeout: Optional[float]) -> subprocess.CompletedProcess:
    return subprocess.run(
        step.argv,
        cwd=str(cwd),
        text=True,
        capture_output=True,
        stdin=subprocess.DEVNULL,
        timeout=timeout,
    )


def run_steps(
    steps: Sequence[BuildStep],
    working_dir: str | Path,
    *,
    timeout: Optional[float] = None,
) -> StepsResult:
    """
    Run build steps one after another inside working_dir.

    Stops at the first step that exits non-zero, cannot be launched or
    times out. Failed steps are not retried.
    """
    cwd = Path(working_dir)
    total = len(steps)

    for i, step in enumerate(steps):
        label = f"step {i + 1}/{total}"
        try:
            proc = _run_step(step, cwd, timeout)
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr.decode(errors="replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
            return StepsResult(
                ok=False,
                failed_index=i,
                stderr=stderr[-STDERR_TAIL:],
                message=f"Build {label} timed out after {timeout}s: {step}",
            )
        except OSError as e:
            return StepsResult(
                ok=False,
                failed_index=i,
                stderr=str(e),
                message=f"Failed to execute build {label}: {step}",
            )

        if proc.returncode != 0:
            return StepsResult(
                ok=False,
                failed_index=i,
                exit_status=proc.returncode,
                stderr=(proc.stderr or "")[-STDERR_TAIL:],
                message=f"Build {label} failed with code {proc.returncode}: {step}",
            )

    return StepsResult(ok=True)


class CommandRunner:
    """Thin object wrapper so the orchestrator can be handed a fake."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def run_steps(self, steps: Sequence[BuildStep], working_dir: str | Path) -> StepsResult:
        return run_steps(steps, working_dir, timeout=self.timeout)
