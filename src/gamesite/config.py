# config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as SchemaError

from .errors import ConfigError, InfrastructureError
from .model import GameSpec

GAMES_FILE = "games.json"
LEGACY_GAMES_FILE = "games.php"


# ----------------------------------------------------------------------
# Runtime settings
# ----------------------------------------------------------------------

@dataclass
class BuildSettings:
    """Where things live and how the batch runs."""
    output_dir: Path
    templates_dir: Path
    custom_dir: Path
    concurrency: Optional[int] = None
    skip_existing: bool = False
    step_timeout: Optional[float] = None
    games_file: Optional[Path] = None

    @property
    def build_dir(self) -> Path:
        return self.custom_dir.parent

    @classmethod
    def from_cwd(
        cls,
        output_dir: str | Path | None = None,
        *,
        cwd: str | Path | None = None,
        **overrides: Any,
    ) -> BuildSettings:
        """Default layout: _build/templates and _build/custom under the project dir."""
        base = Path(cwd) if cwd is not None else Path(os.getcwd())
        build_dir = base / "_build"
        return cls(
            output_dir=Path(output_dir).resolve() if output_dir is not None else base.resolve(),
            templates_dir=build_dir / "templates",
            custom_dir=build_dir / "custom",
            **overrides,
        )


# ----------------------------------------------------------------------
# games.json schema
# ----------------------------------------------------------------------

class GameConfig(BaseModel):
    """One entry of games.json, keyed by game id."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    git: str
    tag: str = ""
    license: str = ""
    branch: Optional[str] = None
    index: Optional[str] = None
    mobile: bool = True
    desktop: bool = True
    build: List[str] = Field(default_factory=list)

    def to_spec(self, game_id: str) -> GameSpec:
        return GameSpec(
            id=game_id,
            name=self.name,
            git=self.git,
            tag=self.tag,
            license=self.license,
            branch=self.branch or None,
            build=tuple(self.build),
            index=self.index or None,
            mobile=self.mobile,
            desktop=self.desktop,
        )


DEFAULT_GAMES: Dict[str, Dict[str, Any]] = {
    "hextris-lite": {
        "name": "Hextris",
        "tag": "hexagonal tetris",
        "license": "GPL-3.0",
        "git": "https://github.com/attogram/hextris-lite.git",
        "mobile": True,
        "desktop": True,
    },
    "pond": {
        "name": "The Pond",
        "tag": "eat, swim, love",
        "license": "GPL-3.0",
        "git": "https://github.com/attogram/pond-lite.git",
        "mobile": True,
        "desktop": True,
    },
    "2048-lite": {
        "name": "2048",
        "tag": "2, 4, 8, swipe",
        "license": "MIT",
        "git": "https://github.com/attogram/2048-lite.git",
        "mobile": True,
        "desktop": True,
    },
    "taptaptap": {
        "name": "Tap Tap Tap",
        "tag": "tap the blue",
        "license": "MIT",
        "git": "https://github.com/MahdiF/taptaptap.git",
        "index": "play/",
        "mobile": True,
        "desktop": True,
    },
    "particle-clicker": {
        "name": "Particle Clicker",
        "tag": "be like CERN",
        "license": "MIT",
        "git": "https://github.com/particle-clicker/particle-clicker.git",
        "mobile": True,
        "desktop": True,
    },
}


def parse_games(raw: Any, source: str = "<games>") -> Dict[str, GameSpec]:
    """Validate a {game_id: {...}} mapping and turn it into GameSpecs."""
    if not isinstance(raw, dict):
        raise ConfigError(f"{source}: expected an object mapping game ids to games")

    games: Dict[str, GameSpec] = {}
    for game_id, entry in raw.items():
        try:
            games[game_id] = GameConfig.model_validate(entry).to_spec(game_id)
        except SchemaError as e:
            raise ConfigError(f"{source}: invalid entry {game_id!r}:\n{e}") from e
    return games


def load_games(settings: BuildSettings) -> Dict[str, GameSpec]:
    """
    Resolve the games mapping.

    Order: explicit games_file, <custom_dir>/games.json, then the built-in
    list when only the legacy games.php is around.

    Raises:
        ConfigError: file present but unreadable or invalid
        InfrastructureError: no configuration found at all
    """
    path = settings.games_file or settings.custom_dir / GAMES_FILE

    if path.exists():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read games configuration {path}: {e}") from e
        return parse_games(raw, source=str(path))

    if settings.games_file:
        raise InfrastructureError(f"Games configuration not found: {settings.games_file}")

    if (settings.build_dir / LEGACY_GAMES_FILE).exists():
        return parse_games(DEFAULT_GAMES, source="built-in games")

    raise InfrastructureError(
        f"No games configuration found. Expected {settings.custom_dir / GAMES_FILE} "
        f"or {settings.build_dir / LEGACY_GAMES_FILE}"
    )
