# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


class JobStatus(str, Enum):
    """Lifecycle of a single game job: PENDING -> RUNNING -> terminal."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.SUCCESS, JobStatus.FAILED, JobStatus.SKIPPED)


class Phase(str, Enum):
    """Where inside a job a failure happened."""
    CLONE = "clone"
    CHECKOUT = "checkout"
    BUILD = "build"


@dataclass(frozen=True)
class BuildStep:
    """A build command split once into program + arguments."""
    program: str
    args: Tuple[str, ...] = ()
    line: str = ""

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def __str__(self) -> str:
        return self.line or " ".join(self.argv)


@dataclass(frozen=True)
class GameSpec:
    """
    One game to put on the site.

    `id` doubles as the output directory name and the link path segment,
    so it must be unique within a batch (it is the mapping key).
    """
    id: str
    name: str
    git: str
    tag: str = ""
    license: str = ""
    branch: Optional[str] = None
    build: Tuple[str, ...] = ()
    index: Optional[str] = None
    mobile: bool = True
    desktop: bool = True

    @property
    def href(self) -> str:
        return f"{self.id}/{self.index or ''}"


@dataclass(frozen=True)
class JobOutcome:
    """Terminal, read-only result of one job."""
    game_id: str
    spec: GameSpec
    status: JobStatus
    duration: float = 0.0
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()
    phase: Optional[Phase] = None
    revision: Optional[str] = None
    finished_at: Optional[datetime] = None

    @property
    def failed(self) -> bool:
        return self.status is JobStatus.FAILED

    @property
    def success(self) -> bool:
        # skipped games are already present in the output directory
        return not self.failed


@dataclass(frozen=True)
class ErrorRecord:
    message: str
    phase: Phase
    game_id: Optional[str] = None
    timestamp: Optional[datetime] = None


@dataclass(frozen=True)
class GameView:
    """What the page generator gets to see for each game."""
    id: str
    config: GameSpec
    success: bool
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class BatchReport:
    """
    Aggregate over one run.

    Invariant: success_count + failed_count + skipped_count == total.
    """
    total: int
    success_count: int
    failed_count: int
    skipped_count: int
    duration: float
    started_at: datetime
    ended_at: datetime
    games: Tuple[JobOutcome, ...] = ()
    errors: Tuple[ErrorRecord, ...] = ()
    warnings: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def success(self) -> bool:
        return self.failed_count == 0

    def views(self) -> List[GameView]:
        return [
            GameView(id=o.game_id, config=o.spec, success=o.success, errors=o.errors)
            for o in self.games
        ]
