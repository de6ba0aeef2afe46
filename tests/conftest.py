"""Shared fixtures: in-memory stand-ins for git and the build command runner."""

from __future__ import annotations

import threading
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import pytest

from gamesite.commands import StepsResult
from gamesite.git_facts.git import GitResult
from gamesite.model import BuildStep, GameSpec
from gamesite.ui.console import Console, set_console

_DEFAULT_REVISION = "0123456789abcdef0123456789abcdef01234567"


def make_spec(game_id: str, **overrides) -> GameSpec:
    fields = {
        "id": game_id,
        "name": game_id.title(),
        "git": f"https://github.com/example/{game_id}.git",
        "tag": "a game",
        "license": "MIT",
    }
    fields.update(overrides)
    return GameSpec(**fields)


class FakeGit:
    """Records calls and tracks how many clones overlap."""

    def __init__(
        self,
        *,
        clone_errors: Optional[Dict[str, str]] = None,
        checkout_errors: Optional[Dict[str, str]] = None,
        revisions: Optional[Dict[str, Optional[str]]] = None,
        delays: Optional[Dict[str, float]] = None,
        delay: float = 0.0,
        explode: Sequence[str] = (),
        explode_with: type = RuntimeError,
        clone_warnings: Optional[Dict[str, List[str]]] = None,
    ):
        self.clone_errors = clone_errors or {}
        self.checkout_errors = checkout_errors or {}
        self.revisions = revisions or {}
        self.delays = delays or {}
        self.delay = delay
        self.explode = set(explode)
        self.explode_with = explode_with
        self.clone_warnings = clone_warnings or {}
        self.calls: List[Tuple[str, str]] = []
        self.running = 0
        self.max_running = 0
        self._lock = threading.Lock()

    def _record(self, op: str, game_id: str) -> None:
        with self._lock:
            self.calls.append((op, game_id))

    def ops_for(self, game_id: str) -> List[str]:
        return [op for op, gid in self.calls if gid == game_id]

    def clone(self, url: str, target_dir) -> GitResult:
        game_id = Path(target_dir).name
        self._record("clone", game_id)
        with self._lock:
            self.running += 1
            self.max_running = max(self.max_running, self.running)
        try:
            wait = self.delays.get(game_id, self.delay)
            if wait:
                time.sleep(wait)
            if game_id in self.explode:
                raise self.explode_with(f"boom in {game_id}")
            if game_id in self.clone_errors:
                return GitResult.failure(self.clone_errors[game_id])
            Path(target_dir).mkdir(parents=True, exist_ok=True)
            return GitResult(ok=True, warnings=list(self.clone_warnings.get(game_id, ())))
        finally:
            with self._lock:
                self.running -= 1

    def checkout(self, target_dir, branch: str) -> GitResult:
        game_id = Path(target_dir).name
        self._record("checkout", game_id)
        if game_id in self.checkout_errors:
            return GitResult.failure(self.checkout_errors[game_id])
        return GitResult(ok=True)

    def latest_revision(self, target_dir) -> Optional[str]:
        game_id = Path(target_dir).name
        self._record("revision", game_id)
        return self.revisions.get(game_id, _DEFAULT_REVISION)


class FakeCommands:
    def __init__(self, results: Optional[Dict[str, StepsResult]] = None):
        self.results = results or {}
        self.calls: List[Tuple[str, Tuple[BuildStep, ...]]] = []

    def run_steps(self, steps: Sequence[BuildStep], working_dir) -> StepsResult:
        game_id = Path(working_dir).name
        self.calls.append((game_id, tuple(steps)))
        return self.results.get(game_id, StepsResult(ok=True))


@pytest.fixture(autouse=True)
def quiet_console():
    console = Console()
    set_console(console)
    return console


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def fake_commands() -> FakeCommands:
    return FakeCommands()
