"""Tests for index page rendering."""

from datetime import datetime, timezone
from pathlib import Path

from gamesite.config import BuildSettings
from gamesite.model import GameView, JobOutcome, JobStatus, Phase
from gamesite.report import summarize
from gamesite.site import load_template, render_index, write_index

from conftest import make_spec

BUILT = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def view(game_id, success=True, **spec_kwargs):
    return GameView(id=game_id, config=make_spec(game_id, **spec_kwargs), success=success)


def test_only_successful_games_are_listed():
    html = render_index([view("pond"), view("broken", success=False)], build_time=BUILT)

    assert 'href="pond/"' in html
    assert "broken" not in html
    assert "1 games" in html
    assert "2024-05-01T12:00:00+00:00" in html


def test_index_override_in_link():
    html = render_index([view("taptaptap", index="play/")], build_time=BUILT)
    assert 'href="taptaptap/play/"' in html


def test_values_are_escaped():
    html = render_index([view("xss", name="<script>alert(1)</script>")], title="A & B", build_time=BUILT)
    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;" in html
    assert "A &amp; B" in html


def test_platform_badges():
    html = render_index([view("pond", mobile=True, desktop=False)], build_time=BUILT)
    assert ">mobile<" in html
    assert ">desktop<" not in html


def test_custom_template(tmp_path: Path):
    settings = BuildSettings.from_cwd(tmp_path / "site", cwd=tmp_path)
    settings.custom_dir.mkdir(parents=True)
    (settings.custom_dir / "index.html").write_text("<h1>$title</h1>$count")

    template = load_template(settings)
    html = render_index([view("pond")], title="Mine", template=template, build_time=BUILT)
    assert html == "<h1>Mine</h1>1"


def test_modern_template_when_no_custom(tmp_path: Path):
    settings = BuildSettings.from_cwd(tmp_path / "site", cwd=tmp_path)
    modern = settings.templates_dir / "modern"
    modern.mkdir(parents=True)
    (modern / "index.html").write_text("modern $version")

    assert load_template(settings) == "modern $version"


def test_builtin_template_when_nothing_configured(tmp_path: Path):
    settings = BuildSettings.from_cwd(tmp_path / "site", cwd=tmp_path)
    assert load_template(settings) is None


def test_write_index(tmp_path: Path):
    settings = BuildSettings.from_cwd(tmp_path / "site", cwd=tmp_path)
    settings.output_dir.mkdir()
    outcomes = [
        JobOutcome(game_id="pond", spec=make_spec("pond"), status=JobStatus.SUCCESS),
        JobOutcome(game_id="gone", spec=make_spec("gone"), status=JobStatus.FAILED, errors=("x",), phase=Phase.CLONE),
    ]
    report = summarize(outcomes, started_at=BUILT, ended_at=BUILT)

    path = write_index(report, settings)
    assert path == settings.output_dir / "index.html"
    html = path.read_text(encoding="utf-8")
    assert 'href="pond/"' in html
    assert 'href="gone/"' not in html
