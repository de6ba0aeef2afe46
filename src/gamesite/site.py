# site.py
# Renders the games index page. Rendering is a pure function of the game
# views; only write_index touches the filesystem.

from __future__ import annotations

from datetime import datetime, timezone
from html import escape
from pathlib import Path
from string import Template
from typing import Iterable, Optional

from . import __version__
from .config import BuildSettings
from .model import BatchReport, GameView

INDEX_TEMPLATE = "index.html"

TITLE = "Attogram Games Website"
HEADLINE = "Open Source Web Games Collection"

DEFAULT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>$title</title>
    <style>
        * { margin: 0; padding: 0; box-sizing: border-box; }
        body {
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
            min-height: 100vh;
            color: #333;
        }
        .header { text-align: center; padding: 2rem; color: white; }
        .header h1 { font-size: 2.5rem; margin-bottom: 0.5rem; }
        .games-grid {
            display: grid;
            grid-template-columns: repeat(auto-fill, minmax(280px, 1fr));
            gap: 2rem;
            padding: 2rem;
            max-width: 1200px;
            margin: 0 auto;
        }
        .game-card {
            background: white;
            border-radius: 12px;
            box-shadow: 0 8px 25px rgba(0,0,0,0.1);
            text-decoration: none;
            color: inherit;
            padding: 1.5rem;
        }
        .game-name { font-size: 1.4rem; font-weight: bold; }
        .game-tag { color: #666; margin: 0.5rem 0; }
        .game-meta { font-size: 0.8rem; color: #999; }
        .badge { background: #eef; border-radius: 4px; padding: 0 0.4rem; margin-right: 0.3rem; }
        .footer { text-align: center; color: white; padding: 2rem; opacity: 0.8; }
    </style>
</head>
<body>
    <div class="header">
        <h1>$title</h1>
        <p>$headline</p>
    </div>
    <div class="games-grid">
$games
    </div>
    <div class="footer">$count games &middot; built $build_time &middot; v$version</div>
</body>
</html>
"""


def _render_card(view: GameView) -> str:
    spec = view.config
    badges = []
    if spec.mobile:
        badges.append('<span class="badge">mobile</span>')
    if spec.desktop:
        badges.append('<span class="badge">desktop</span>')
    return (
        f'        <a class="game-card" href="{escape(spec.href)}">\n'
        f'            <div class="game-name">{escape(spec.name)}</div>\n'
        f'            <div class="game-tag">{escape(spec.tag)}</div>\n'
        f'            <div class="game-meta">{"".join(badges)}{escape(spec.license)}</div>\n'
        f"        </a>"
    )


def render_index(
    views: Iterable[GameView],
    *,
    title: str = TITLE,
    headline: str = HEADLINE,
    version: str = __version__,
    build_time: Optional[datetime] = None,
    template: Optional[str] = None,
) -> str:
    """Render the index page, listing only games whose build succeeded."""
    shown = [v for v in views if v.success]
    when = (build_time or datetime.now(timezone.utc)).isoformat(timespec="seconds")

    return Template(template or DEFAULT_TEMPLATE).safe_substitute(
        title=escape(title),
        headline=escape(headline),
        games="\n".join(_render_card(v) for v in shown),
        count=len(shown),
        build_time=escape(when),
        version=escape(version),
    )


def load_template(settings: BuildSettings) -> Optional[str]:
    """Custom template first, then the modern one; None means built-in."""
    for path in (
        settings.custom_dir / INDEX_TEMPLATE,
        settings.templates_dir / "modern" / INDEX_TEMPLATE,
    ):
        if path.is_file():
            return path.read_text(encoding="utf-8")
    return None


def write_index(report: BatchReport, settings: BuildSettings) -> Path:
    html = render_index(
        report.views(),
        build_time=report.ended_at,
        template=load_template(settings),
    )
    out = settings.output_dir / INDEX_TEMPLATE
    out.write_text(html, encoding="utf-8")
    return out
