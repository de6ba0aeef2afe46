# builder.py
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Dict, List

from .config import BuildSettings, load_games
from .errors import InfrastructureError
from .model import BatchReport, GameSpec
from .runner import Orchestrator, skip_if_present
from .site import write_index
from .ui.console import get_console


class Builder:
    """Load games, build them all, write index.html."""

    def __init__(self, settings: BuildSettings, *, git=None, commands=None):
        self.settings = settings
        self.orchestrator = Orchestrator(
            settings.output_dir,
            git=git,
            commands=commands,
            step_timeout=settings.step_timeout,
        )

    def list_games(self) -> List[GameSpec]:
        return list(load_games(self.settings).values())

    def build_all(self) -> BatchReport:
        games: Dict[str, GameSpec] = load_games(self.settings)
        skip = skip_if_present(self.settings.output_dir) if self.settings.skip_existing else None

        report = self.orchestrator.run(
            games,
            concurrency=self.settings.concurrency,
            skip_existing=skip,
        )

        # an empty batch never creates the output directory
        try:
            self.settings.output_dir.mkdir(parents=True, exist_ok=True)
            index = write_index(report, self.settings)
        except OSError as e:
            raise InfrastructureError(f"Could not write index page: {e}") from e
        get_console().print_info(f"Generated {index} with {sum(v.success for v in report.views())} games")
        return report


def clean(output_dir: str | Path) -> List[Path]:
    """
    Remove game directories from output_dir.

    Plain files (index.html, ...) and entries starting with '.' or '_'
    are kept.
    """
    root = Path(output_dir)
    removed: List[Path] = []
    if not root.is_dir():
        return removed

    for item in sorted(root.iterdir()):
        if not item.is_dir() or item.name.startswith((".", "_")):
            continue
        shutil.rmtree(item)
        removed.append(item)
        get_console().print_debug(f"Removed: {item.name}")
    return removed
