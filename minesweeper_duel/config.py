"""Session configuration and its validation."""

import os
import random
from dataclasses import dataclass
from typing import Mapping, Optional

from .constants import (
    AI_TURN_DELAY_SECONDS,
    DEFAULT_BOARD_SIDE,
    MAX_BOMBS,
    MIN_BOMBS,
    Difficulty,
)


class ConfigurationError(ValueError):
    """Raised when a game configuration is out of range or inconsistent."""


@dataclass(frozen=True)
class GameConfig:
    """Inputs consumed when a session starts."""

    mine_count: int
    board_side: int = DEFAULT_BOARD_SIDE
    ai_opponent_enabled: bool = False
    ai_difficulty: Difficulty = Difficulty.NONE
    ai_turn_delay: float = AI_TURN_DELAY_SECONDS
    seed: Optional[int] = None

    def validate(self) -> None:
        """
        Check the configuration.

        The first reveal and its (up to 8) neighbors are kept mine-free, so the
        board must hold at least `mine_count + 9` cells.

        Raises:
            ConfigurationError: Describing the first violated constraint.
        """
        if not MIN_BOMBS <= self.mine_count <= MAX_BOMBS:
            raise ConfigurationError(
                f"Please select a bomb value between {MIN_BOMBS} and {MAX_BOMBS}."
            )
        if self.board_side <= 0:
            raise ConfigurationError("board_side must be positive.")
        if self.mine_count > self.board_side * self.board_side - 9:
            raise ConfigurationError(
                f"A {self.board_side}x{self.board_side} board cannot hold "
                f"{self.mine_count} bombs outside the first-click safe zone."
            )
        if self.ai_opponent_enabled and self.ai_difficulty is Difficulty.NONE:
            raise ConfigurationError("An AI opponent needs a difficulty.")
        if self.ai_turn_delay < 0:
            raise ConfigurationError("ai_turn_delay must be non-negative.")

    def make_rng(self) -> random.Random:
        return random.Random(self.seed)


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}.")


def _parse_number(name: str, raw: str, kind: type):
    try:
        return kind(raw)
    except ValueError:
        raise ConfigurationError(
            f"{name} must be {kind.__name__}, got {raw!r}."
        ) from None


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> GameConfig:
    """
    Build a validated GameConfig from MINESWEEPER_* environment variables.

    Recognized variables: MINESWEEPER_MINES, MINESWEEPER_BOARD_SIDE,
    MINESWEEPER_AI, MINESWEEPER_AI_DIFFICULTY, MINESWEEPER_AI_DELAY and
    MINESWEEPER_SEED. Unset variables fall back to the defaults.
    """
    env = os.environ if environ is None else environ

    mine_count = _parse_number(
        "MINESWEEPER_MINES", env.get("MINESWEEPER_MINES", str(MIN_BOMBS)), int
    )
    board_side = _parse_number(
        "MINESWEEPER_BOARD_SIDE",
        env.get("MINESWEEPER_BOARD_SIDE", str(DEFAULT_BOARD_SIDE)),
        int,
    )
    ai_enabled = _parse_bool("MINESWEEPER_AI", env.get("MINESWEEPER_AI", ""))
    delay = _parse_number(
        "MINESWEEPER_AI_DELAY",
        env.get("MINESWEEPER_AI_DELAY", str(AI_TURN_DELAY_SECONDS)),
        float,
    )

    raw_difficulty = env.get("MINESWEEPER_AI_DIFFICULTY")
    if raw_difficulty is None:
        difficulty = Difficulty.EASY if ai_enabled else Difficulty.NONE
    else:
        try:
            difficulty = Difficulty.parse(raw_difficulty)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from None

    raw_seed = env.get("MINESWEEPER_SEED")
    seed = None if raw_seed in (None, "") else _parse_number("MINESWEEPER_SEED", raw_seed, int)

    config = GameConfig(
        mine_count=mine_count,
        board_side=board_side,
        ai_opponent_enabled=ai_enabled,
        ai_difficulty=difficulty,
        ai_turn_delay=delay,
        seed=seed,
    )
    config.validate()
    return config
