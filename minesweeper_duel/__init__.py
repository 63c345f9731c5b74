"""
Minesweeper Duel

Minesweeper played alone or against a rule-based AI opponent:
- Board: first-click-safe mine placement, numbering, flood reveal, flags
- GameSession: game state machine, turn alternation, timing and events
- Solver: easy (random), medium (local counting rules) and hard
  (counting rules plus the 1-2-1 pattern) tiers
"""

from .board import Board, Cell, CellView, FlagResult, RevealResult
from .config import ConfigurationError, GameConfig, load_config_from_env
from .constants import (
    MAX_BOMBS,
    MIN_BOMBS,
    Actor,
    Difficulty,
    EndCondition,
    GameState,
)
from .events import CellChanged, GameEnded, StatusMessage, TimerTick
from .scheduling import ManualScheduler, TimerScheduler
from .session import GameSession, UnknownEndConditionError
from .solver import Move, MoveAction, Solver
from .analysis import (
    run_solver_many_games,
    run_solver_single_game,
    run_solver_tier_analysis,
)
from .cli import play_cli

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Board",
    "Cell",
    "CellView",
    "FlagResult",
    "RevealResult",
    "GameSession",
    "Solver",
    "Move",
    "MoveAction",
    # Configuration
    "GameConfig",
    "ConfigurationError",
    "load_config_from_env",
    "MIN_BOMBS",
    "MAX_BOMBS",
    "Actor",
    "Difficulty",
    "EndCondition",
    "GameState",
    # Events and scheduling
    "CellChanged",
    "GameEnded",
    "StatusMessage",
    "TimerTick",
    "ManualScheduler",
    "TimerScheduler",
    "UnknownEndConditionError",
    # CLI
    "play_cli",
    # Analysis functions
    "run_solver_single_game",
    "run_solver_many_games",
    "run_solver_tier_analysis",
]
