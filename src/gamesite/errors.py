# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from .model import Phase


class GameSiteError(Exception):
    """Base class for every error raised by gamesite."""


# ----------------------------------------------------------------------
# Per-game errors: captured into JobOutcome, never raised to the caller
# ----------------------------------------------------------------------

@dataclass
class ValidationError(GameSiteError):
    """A game entry is malformed (bad URL scheme, empty build step, ...)."""
    message: str
    phase: Phase = Phase.CLONE

    def __str__(self) -> str:
        return self.message


@dataclass
class FetchError(GameSiteError):
    """Clone or checkout failed."""
    message: str
    phase: Phase = Phase.CLONE

    def __str__(self) -> str:
        return self.message


@dataclass
class BuildError(GameSiteError):
    """
    A build step exited non-zero or could not be launched.

    exit_status is None when the process never ran (missing program, timeout).
    """
    message: str
    step_index: int
    exit_status: Optional[int] = None
    stderr: str = ""
    phase: Phase = field(default=Phase.BUILD, init=False)

    def __str__(self) -> str:
        if self.stderr.strip():
            return f"{self.message}\nStderr: {self.stderr.strip()}"
        return self.message


# ----------------------------------------------------------------------
# Batch-level errors: abort the whole run before any job is scheduled
# ----------------------------------------------------------------------

class InfrastructureError(GameSiteError):
    """The batch cannot start (output root not writable, no game list, ...)."""


class ConfigError(InfrastructureError):
    """The games configuration exists but could not be read or validated."""
