__version__ = "2.0.0"

from .model import BatchReport, GameSpec, JobOutcome, JobStatus, Phase
from .runner import Orchestrator, build_game
from .report import summarize
from .builder import Builder

__all__ = [
    "BatchReport",
    "GameSpec",
    "JobOutcome",
    "JobStatus",
    "Phase",
    "Orchestrator",
    "build_game",
    "summarize",
    "Builder",
]
