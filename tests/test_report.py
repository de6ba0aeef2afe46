"""Tests for the outcome aggregator."""

from datetime import datetime, timedelta, timezone

from gamesite.model import JobOutcome, JobStatus, Phase
from gamesite.report import summarize

from conftest import make_spec

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)
T1 = T0 + timedelta(seconds=42)


def outcome(game_id, status, **kwargs):
    return JobOutcome(game_id=game_id, spec=make_spec(game_id), status=status, **kwargs)


def test_counts_and_success_flag():
    outcomes = [
        outcome("a", JobStatus.SUCCESS),
        outcome("b", JobStatus.FAILED, errors=("Clone failed: nope",), phase=Phase.CLONE),
        outcome("c", JobStatus.SKIPPED, warnings=("already exists",)),
    ]
    report = summarize(outcomes, started_at=T0, ended_at=T1)

    assert report.total == 3
    assert (report.success_count, report.failed_count, report.skipped_count) == (1, 1, 1)
    assert report.success is False
    assert report.duration == 42.0
    assert report.started_at == T0
    assert report.ended_at == T1


def test_preserves_outcome_order():
    outcomes = [outcome(gid, JobStatus.SUCCESS) for gid in ("c", "a", "b")]
    report = summarize(outcomes, started_at=T0, ended_at=T1)
    assert [o.game_id for o in report.games] == ["c", "a", "b"]


def test_errors_are_flattened_with_provenance():
    finished = T0 + timedelta(seconds=3)
    outcomes = [
        outcome("a", JobStatus.FAILED, errors=("Checkout failed: x",), phase=Phase.CHECKOUT, finished_at=finished),
        outcome("b", JobStatus.SUCCESS),
        outcome("c", JobStatus.FAILED, errors=("boom",)),
    ]
    report = summarize(outcomes, started_at=T0, ended_at=T1)

    assert [(e.game_id, e.phase, e.message) for e in report.errors] == [
        ("a", Phase.CHECKOUT, "Checkout failed: x"),
        ("c", Phase.BUILD, "boom"),
    ]
    assert report.errors[0].timestamp == finished
    # no finish time recorded: falls back to the end of the batch
    assert report.errors[1].timestamp == T1


def test_warnings_are_prefixed_with_game_id():
    outcomes = [outcome("a", JobStatus.SKIPPED, warnings=("already exists",))]
    report = summarize(outcomes, started_at=T0, ended_at=T1, warnings=["batch note"])
    assert report.warnings == ("batch note", "a: already exists")


def test_empty_input():
    report = summarize([], started_at=T0, ended_at=T0)
    assert report.total == 0
    assert report.success is True
    assert report.errors == ()


def test_deterministic():
    outcomes = [
        outcome("a", JobStatus.FAILED, errors=("x",), phase=Phase.BUILD, finished_at=T0),
        outcome("b", JobStatus.SUCCESS, finished_at=T0),
    ]
    assert summarize(outcomes, started_at=T0, ended_at=T1) == summarize(outcomes, started_at=T0, ended_at=T1)


def test_views_for_page_generator():
    outcomes = [
        outcome("a", JobStatus.SUCCESS),
        outcome("b", JobStatus.FAILED, errors=("nope",), phase=Phase.CLONE),
        outcome("c", JobStatus.SKIPPED),
    ]
    views = summarize(outcomes, started_at=T0, ended_at=T1).views()

    assert [(v.id, v.success) for v in views] == [("a", True), ("b", False), ("c", True)]
    assert views[1].errors == ("nope",)
    assert views[0].config.id == "a"
