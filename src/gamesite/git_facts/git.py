# git.py
# Small, focused wrapper around the Git CLI.
# Every clone/checkout/rev-parse the builder performs goes through here, and
# every failure comes back as a GitResult reason instead of an exception.

from __future__ import annotations

import os
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional
from urllib.parse import urlparse

from ..errors import ValidationError
from ..model import Phase

ALLOWED_SCHEMES = ("https", "git")

KNOWN_HOSTS = (
    "github.com",
    "gitlab.com",
    "bitbucket.org",
    "codeberg.org",
)


@dataclass
class GitResult:
    """Outcome of a fallible git operation."""
    ok: bool
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def failure(cls, error: str, warnings: Optional[List[str]] = None) -> GitResult:
        return cls(ok=False, error=error, warnings=list(warnings or []))


class GitCommandError(Exception):
    """Raised by _git when git exits non-zero, cannot start or times out."""


def validate_url(url: str) -> List[str]:
    """
    Check a repository URL before anything touches the network.

    Strict on scheme (https or git), permissive on host: an unknown host is
    accepted and reported back as a warning.

    Returns:
        List of warnings (empty for well-known hosts).

    Raises:
        ValidationError: if the URL does not parse or uses another scheme.
    """
    try:
        parsed = urlparse(url)
        host = parsed.hostname
    except ValueError as e:
        raise ValidationError(f"Invalid git URL: {url} ({e})", Phase.CLONE) from e

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise ValidationError(
            f"Invalid git URL: {url} (scheme must be one of {', '.join(ALLOWED_SCHEMES)})",
            Phase.CLONE,
        )
    if not host:
        raise ValidationError(f"Invalid git URL: {url} (missing host)", Phase.CLONE)

    if host not in KNOWN_HOSTS:
        return [f"Unknown git host: {host}"]
    return []


def _git(args: list[str], cwd: Optional[str | Path] = None, timeout: Optional[float] = None) -> str:
    """
    Execute a git command and return its stdout as a clean string.

    This is the single low-level entry point for all Git operations in this
    file. Prompts are disabled so a missing or private repository fails
    instead of hanging a worker thread on a credentials prompt.

    Raises:
        GitCommandError: with git's stderr (or the OS error) as the message.
    """
    env = os.environ.copy()
    env["GIT_TERMINAL_PROMPT"] = "0"

    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=str(cwd) if cwd is not None else None,
            env=env,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise GitCommandError("git command not found. Please install Git.") from e
    except subprocess.TimeoutExpired as e:
        raise GitCommandError(f"git {args[0]} timed out after {timeout}s") from e
    except OSError as e:
        raise GitCommandError(f"git {args[0]} could not be started: {e}") from e

    if proc.returncode != 0:
        reason = (proc.stderr or proc.stdout or "").strip()
        raise GitCommandError(reason or f"git {args[0]} exited with code {proc.returncode}")

    return proc.stdout.strip()


class GitRepo:
    """
    Revision control adapter used by the orchestrator.

    clone/checkout return GitResult; latest_revision returns None on failure.
    Nothing raised by git escapes these methods.
    """

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout

    def clone(self, url: str, target_dir: str | Path) -> GitResult:
        try:
            warnings = validate_url(url)
        except ValidationError as e:
            return GitResult.failure(e.message)

        try:
            _git(["clone", url, str(target_dir)], timeout=self.timeout)
        except GitCommandError as e:
            return GitResult.failure(str(e), warnings)
        return GitResult(ok=True, warnings=warnings)

    def checkout(self, target_dir: str | Path, branch: str) -> GitResult:
        if branch.startswith("-"):
            return GitResult.failure(f"Invalid branch {branch!r}: must not start with '-'")
        try:
            _git(["checkout", branch], cwd=target_dir, timeout=self.timeout)
        except GitCommandError as e:
            return GitResult.failure(str(e))
        return GitResult(ok=True)

    def latest_revision(self, target_dir: str | Path) -> Optional[str]:
        # `git rev-parse HEAD` resolves HEAD to its full commit hash
        try:
            sha = _git(["rev-parse", "HEAD"], cwd=target_dir, timeout=self.timeout)
        except GitCommandError:
            return None
        return sha or None
