# runner.py
from __future__ import annotations

import os
import shutil
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .commands import CommandRunner, parse_steps
from .errors import FetchError, InfrastructureError, ValidationError
from .git_facts.git import GitRepo, validate_url
from .model import BatchReport, BuildStep, GameSpec, JobOutcome, JobStatus, Phase
from .report import summarize
from .ui.console import get_console

SkipPredicate = Callable[[str], bool]


def _now() -> datetime:
    return datetime.now(timezone.utc)


# ----------------------------------------------------------------------
# Per-job state
# ----------------------------------------------------------------------

class JobRecorder:
    """
    Mutable working state of one job.

    Owned by the thread running the job; finish() publishes the frozen
    JobOutcome and may only be called once.
    """

    def __init__(self, spec: GameSpec):
        self.spec = spec
        self.status = JobStatus.PENDING
        self.errors: List[str] = []
        self.warnings: List[str] = []
        self.phase: Optional[Phase] = None
        self.revision: Optional[str] = None
        self.outcome: Optional[JobOutcome] = None
        # set once the job has created <output>/<id>; removed again on failure
        self.workdir: Optional[Path] = None
        self._started: Optional[float] = None

    def start(self) -> None:
        if self.status is not JobStatus.PENDING:
            raise RuntimeError(f"[{self.spec.id}] cannot start a job that is {self.status.value}")
        self.status = JobStatus.RUNNING
        self._started = time.perf_counter()

    def warn(self, message: str) -> None:
        self.warnings.append(message)

    def fail(self, message: str, phase: Phase) -> JobOutcome:
        self.errors.append(message)
        self.phase = phase
        return self.finish(JobStatus.FAILED)

    def finish(self, status: JobStatus) -> JobOutcome:
        if self.outcome is not None:
            raise RuntimeError(f"[{self.spec.id}] job already finished as {self.outcome.status.value}")
        if not status.is_terminal:
            raise ValueError(f"{status.value} is not a terminal status")

        elapsed = time.perf_counter() - self._started if self._started is not None else 0.0
        self.status = status
        self.outcome = JobOutcome(
            game_id=self.spec.id,
            spec=self.spec,
            status=status,
            duration=elapsed,
            errors=tuple(self.errors),
            warnings=tuple(self.warnings),
            phase=self.phase,
            revision=self.revision,
            finished_at=_now(),
        )
        return self.outcome


# ----------------------------------------------------------------------
# Validation (before any I/O)
# ----------------------------------------------------------------------

def validate_game(spec: GameSpec) -> Tuple[BuildStep, ...]:
    """
    Check everything about a game that can be checked without I/O.

    Returns the parsed build steps.

    Raises:
        ValidationError: carrying the phase the bad field belongs to.
    """
    gid = spec.id
    if not gid or gid in (".", "..") or "/" in gid or "\\" in gid:
        raise ValidationError(f"Invalid game id {gid!r}: must be a plain directory name", Phase.CLONE)

    # host warnings are reported by the clone itself
    validate_url(spec.git)

    # git would read "-x" as an option
    if spec.branch is not None and spec.branch.startswith("-"):
        raise ValidationError(f"Invalid branch {spec.branch!r}: must not start with '-'", Phase.CHECKOUT)

    return parse_steps(spec.build)


# ----------------------------------------------------------------------
# One job
# ----------------------------------------------------------------------

def _fail(job: JobRecorder, error: BaseException, phase: Phase) -> JobOutcome:
    message = str(error) or type(error).__name__
    outcome = job.fail(message, phase)
    # a half-built game must not look like an earlier build to skip_if_present
    if job.workdir is not None:
        shutil.rmtree(job.workdir, ignore_errors=True)
    get_console().print_failure(job.spec.id, message, phase=phase.value)
    return outcome


def _run_phases(
    job: JobRecorder,
    game_dir: Path,
    git,
    commands,
    skip_existing: Optional[SkipPredicate],
) -> JobOutcome:
    console = get_console()
    spec = job.spec

    # ---- existence check ----
    if skip_existing is not None and skip_existing(spec.id):
        job.warn("already exists")
        console.print_job_skipped(spec.id, "already exists")
        return job.finish(JobStatus.SKIPPED)

    console.print_job_start(spec.id)

    try:
        steps = validate_game(spec)
    except ValidationError as e:
        return _fail(job, e, e.phase)

    # ---- fetch ----
    console.print_step(spec.id, f"clone {spec.git}")
    if not game_dir.exists():
        job.workdir = game_dir
    cloned = git.clone(spec.git, game_dir)
    for w in cloned.warnings:
        job.warn(w)
        console.print_warning(spec.id, w)
    if not cloned.ok:
        return _fail(job, FetchError(f"Clone failed: {cloned.error}", Phase.CLONE), Phase.CLONE)

    # ---- checkout ----
    if spec.branch:
        console.print_step(spec.id, f"checkout {spec.branch}")
        checked_out = git.checkout(game_dir, spec.branch)
        if not checked_out.ok:
            return _fail(job, FetchError(f"Checkout failed: {checked_out.error}", Phase.CHECKOUT), Phase.CHECKOUT)

    # ---- revision (best effort) ----
    revision = git.latest_revision(game_dir)
    if revision:
        job.revision = revision
    else:
        job.warn("Could not resolve current revision")
        console.print_warning(spec.id, "could not resolve current revision")

    # ---- build ----
    if steps:
        console.print_step(spec.id, f"{len(steps)} build step(s)")
        result = commands.run_steps(steps, game_dir)
        if not result.ok:
            return _fail(job, result.to_error(), Phase.BUILD)

    outcome = job.finish(JobStatus.SUCCESS)
    console.print_job_success(spec.id, outcome.duration)
    return outcome


def build_game(
    spec: GameSpec,
    output_dir: str | Path,
    *,
    git=None,
    commands=None,
    skip_existing: Optional[SkipPredicate] = None,
) -> JobOutcome:
    """
    Run one game through skip-check, validation, clone, checkout, revision
    capture and build steps.

    Only KeyboardInterrupt propagates: whatever else goes wrong ends up in
    the returned JobOutcome, and a failed job leaves no <output>/<id>
    directory behind.
    """
    git = git if git is not None else GitRepo()
    commands = commands if commands is not None else CommandRunner()

    job = JobRecorder(spec)
    job.start()
    try:
        return _run_phases(job, Path(output_dir) / spec.id, git, commands, skip_existing)
    except KeyboardInterrupt:
        raise
    except BaseException as e:
        if job.outcome is not None:
            return job.outcome
        return _fail(job, e, Phase.BUILD)


def _crashed(spec: GameSpec, exc: BaseException) -> JobOutcome:
    return JobOutcome(
        game_id=spec.id,
        spec=spec,
        status=JobStatus.FAILED,
        errors=(str(exc) or type(exc).__name__,),
        phase=Phase.BUILD,
        finished_at=_now(),
    )


def skip_if_present(output_dir: str | Path) -> SkipPredicate:
    """Skip predicate that treats an existing <output>/<id> directory as built."""
    root = Path(output_dir)
    return lambda game_id: (root / game_id).exists()


# ----------------------------------------------------------------------
# Batch
# ----------------------------------------------------------------------

class Orchestrator:
    """
    Runs one job per game on a bounded thread pool and aggregates the
    outcomes into a BatchReport.

    git/commands are injectable so the pipeline can run against fakes.
    """

    def __init__(
        self,
        output_dir: str | Path,
        *,
        git=None,
        commands=None,
        step_timeout: Optional[float] = None,
    ):
        self.output_dir = Path(output_dir)
        self.git = git if git is not None else GitRepo()
        self.commands = commands if commands is not None else CommandRunner(timeout=step_timeout)

    def _prepare_output(self) -> None:
        if self.output_dir.exists() and not self.output_dir.is_dir():
            raise InfrastructureError(f"Output path is not a directory: {self.output_dir}")
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InfrastructureError(f"Could not create output directory {self.output_dir}: {e}") from e

    def run(
        self,
        games: Mapping[str, GameSpec],
        concurrency: Optional[int] = None,
        skip_existing: Optional[SkipPredicate] = None,
    ) -> BatchReport:
        if concurrency is None:
            concurrency = os.cpu_count() or 1
        if concurrency < 1:
            raise ValueError(f"concurrency must be a positive integer, got {concurrency}")

        started_at = _now()

        # the mapping key is the id
        specs: List[GameSpec] = [
            spec if spec.id == game_id else replace(spec, id=game_id)
            for game_id, spec in games.items()
        ]
        if not specs:
            return summarize([], started_at=started_at, ended_at=_now())

        self._prepare_output()
        get_console().print_batch_started(str(self.output_dir), len(specs), concurrency)

        outcomes: List[Optional[JobOutcome]] = [None] * len(specs)

        with ThreadPoolExecutor(max_workers=concurrency) as pool:
            in_flight: Dict = {}
            for idx, spec in enumerate(specs):
                fut = pool.submit(
                    build_game,
                    spec,
                    self.output_dir,
                    git=self.git,
                    commands=self.commands,
                    skip_existing=skip_existing,
                )
                in_flight[fut] = idx

            for fut in as_completed(in_flight):
                idx = in_flight[fut]
                try:
                    outcomes[idx] = fut.result()
                except KeyboardInterrupt:
                    raise
                except BaseException as e:
                    outcomes[idx] = _crashed(specs[idx], e)

        return summarize(outcomes, started_at=started_at, ended_at=_now())
