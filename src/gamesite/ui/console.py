"""Console output formatting utilities for gamesite."""

from __future__ import annotations

import sys
import threading
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..model import BatchReport, GameSpec


class Console:
    """Centralized console output formatting.

    Jobs report from worker threads, so every write holds a lock to keep
    multi-line messages from interleaving.
    """

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug
        self._lock = threading.Lock()

    def _emit(self, *lines: str, err: bool = False) -> None:
        stream = sys.stderr if err else sys.stdout
        with self._lock:
            for line in lines:
                print(line, file=stream)

    def print_header(self, title: str) -> None:
        """Print a section header."""
        self._emit(f"\n{title}", "-" * len(title))

    def print_batch_started(self, output_dir: str, game_count: int, concurrency: int) -> None:
        """Print batch start information."""
        self._emit(
            "\nBUILD STARTED",
            f"Output: {output_dir}",
            f"Games: {game_count}",
            f"Concurrency: {concurrency}",
            "",
        )

    def print_job_start(self, game_id: str) -> None:
        self._emit(f"[{game_id}] building")

    def print_step(self, game_id: str, step: str) -> None:
        if self.debug:
            self._emit(f"[{game_id}] ▶ {step}")

    def print_job_success(self, game_id: str, duration: float) -> None:
        self._emit(f"[{game_id}] ✓ built in {duration:.2f}s")

    def print_job_skipped(self, game_id: str, reason: str) -> None:
        self._emit(f"[{game_id}] ⏭ skipped ({reason})")

    def print_failure(
        self,
        name: str,
        reason: str,
        phase: Optional[str] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Game id
            reason: Failure reason/error message
            phase: Optional phase the failure happened in
        """
        where = f" during {phase}" if phase else ""
        lines = [f"[{name}] ✗ failed{where}"]
        if self.debug:
            lines.append(f"Error details: {reason}")
        else:
            # Show first line of error for non-debug mode
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            lines.append(f"Error: {error_line}")
        self._emit(*lines)

    def print_warning(self, name: str, message: str) -> None:
        self._emit(f"[{name}] warning: {message}")

    def print_report(self, report: BatchReport) -> None:
        """Print final results summary."""
        lines = ["", "=" * 40, "RESULTS", "=" * 40]
        for outcome in report.games:
            lines.append(f"  {outcome.game_id}: {outcome.status.value.upper()}")
        lines.append("")
        lines.append(
            f"Success: {report.success_count}, Failed: {report.failed_count}, "
            f"Skipped: {report.skipped_count} ({report.duration:.2f}s)"
        )
        if report.errors:
            lines.append("\nErrors:")
            for error in report.errors:
                first = error.message.split("\n")[0] if not self.debug else error.message
                lines.append(f"  • [{error.game_id}] {error.phase.value}: {first}")
        self._emit(*lines)

    def print_game(self, spec: GameSpec, verbose: bool = False) -> None:
        """Print one entry of `gamesite list`."""
        lines = [f"{spec.id} - {spec.name}"]
        if verbose:
            lines.append(f"  Tag: {spec.tag}")
            lines.append(f"  License: {spec.license}")
            lines.append(f"  Repository: {spec.git}")
            lines.append(f"  Mobile: {'yes' if spec.mobile else 'no'}")
            lines.append(f"  Desktop: {'yes' if spec.desktop else 'no'}")
            if spec.branch:
                lines.append(f"  Branch: {spec.branch}")
            if spec.build:
                lines.append(f"  Build: {' && '.join(spec.build)}")
            lines.append("")
        self._emit(*lines)

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        lines = [f"\nERROR: {title}", message]
        if details:
            lines.extend(f"  {detail}" for detail in details)
        if suggestion:
            lines.append(f"\n{suggestion}")
        self._emit(*lines, err=True)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            with self._lock:
                traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            self._emit(f"Error: {exc}", err=True)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._emit(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            self._emit(f"[DEBUG] {message}", err=True)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
