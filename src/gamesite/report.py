# report.py
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Sequence

from .model import BatchReport, ErrorRecord, JobOutcome, JobStatus, Phase


def summarize(
    outcomes: Sequence[JobOutcome],
    *,
    started_at: datetime,
    ended_at: datetime,
    warnings: Iterable[str] = (),
) -> BatchReport:
    """
    Reduce per-game outcomes into a BatchReport.

    Pure: no I/O, no clock reads. Outcome order is kept as given, so callers
    pass outcomes in input order and get the same order back.
    """
    success = failed = skipped = 0
    errors: List[ErrorRecord] = []
    all_warnings: List[str] = list(warnings)

    for outcome in outcomes:
        if outcome.status is JobStatus.SUCCESS:
            success += 1
        elif outcome.status is JobStatus.SKIPPED:
            skipped += 1
        else:
            # anything non-terminal at this point counts as a failure
            failed += 1

        phase = outcome.phase or Phase.BUILD
        for message in outcome.errors:
            errors.append(
                ErrorRecord(
                    message=message,
                    phase=phase,
                    game_id=outcome.game_id,
                    timestamp=outcome.finished_at or ended_at,
                )
            )
        all_warnings.extend(f"{outcome.game_id}: {w}" for w in outcome.warnings)

    return BatchReport(
        total=len(outcomes),
        success_count=success,
        failed_count=failed,
        skipped_count=skipped,
        duration=max(0.0, (ended_at - started_at).total_seconds()),
        started_at=started_at,
        ended_at=ended_at,
        games=tuple(outcomes),
        errors=tuple(errors),
        warnings=tuple(all_warnings),
    )
