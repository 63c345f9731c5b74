"""Rule-based Minesweeper AI with easy, medium and hard tiers."""

import logging
import random
from collections import Counter
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from .board import CellView
from .constants import Actor, Difficulty

if TYPE_CHECKING:
    from .session import GameSession

logger = logging.getLogger(__name__)


class MoveAction(Enum):
    REVEAL = "reveal"
    FLAG = "flag"


@dataclass(frozen=True)
class Move:
    action: MoveAction
    index: int
    rule: str


# Rule names, in the order the tiers consult them.
RULE_FLAG_COMPLETION = "flag_completion"
RULE_SAFE_REVEAL = "safe_reveal"
RULE_PATTERN_MINE = "one_two_one_mine"
RULE_PATTERN_SAFE = "one_two_one_safe"
RULE_RANDOM = "random"

_PATTERN = (1, 2, 1)


class Solver:
    """
    Plays one move per call against a GameSession.

    The solver is stateless between calls apart from `rule_counts`: every
    call re-reads the player-visible snapshot (revealed numbers, flags and
    hidden cells) and never looks at where the mines actually are. Moves go
    through the session's public request methods as the AI actor.

    Tiers:
    - easy: reveal a uniformly random available cell.
    - medium: flag-completion and safe-reveal rules over numbered cells,
      falling back to easy.
    - hard: medium's rules, then the 1-2-1 pattern, then easy.
    """

    def __init__(
        self,
        session: "GameSession",
        difficulty: Difficulty,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.session = session
        self.difficulty = difficulty
        self.rng = rng if rng is not None else random.Random()
        self.rule_counts: Counter = Counter()

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------

    def make_move(self) -> Optional[Move]:
        """
        Choose and perform at most one move.

        Returns:
            The move that was applied, or None when the AI is disabled, it is
            not the AI's turn, the game is not active, or nothing is left to
            play.
        """
        session = self.session
        if self.difficulty is Difficulty.NONE:
            return None
        if not session.is_active:
            return None
        if session.turn_alternation and session.current_turn is not Actor.AI:
            return None

        move = self.choose_move(session.snapshot())
        if move is None:
            logger.info("AI (%s) has no moves available", self.difficulty.value)
            return None

        if move.action is MoveAction.FLAG:
            accepted = session.request_flag_toggle(move.index, Actor.AI)
        else:
            accepted = session.request_reveal(move.index, Actor.AI)
        if not accepted:
            logger.warning("AI move %s on %d was rejected", move.action.value, move.index)
            return None

        self.rule_counts[move.rule] += 1
        logger.debug("AI %s %d via %s", move.action.value, move.index, move.rule)
        return move

    def choose_move(self, views: Sequence[CellView]) -> Optional[Move]:
        """Pick a move for the configured tier without applying it."""
        move: Optional[Move] = None
        if self.difficulty in (Difficulty.MEDIUM, Difficulty.HARD):
            move = self.basic_rules_move(views)
        if move is None and self.difficulty is Difficulty.HARD:
            move = self.pattern_move(views)
        if move is None:
            move = self.random_move(views)
        return move

    # -------------------------------------------------------------------------
    # Easy
    # -------------------------------------------------------------------------

    def random_move(self, views: Sequence[CellView]) -> Optional[Move]:
        available = [v.index for v in views if v.is_hidden]
        if not available:
            return None
        return Move(MoveAction.REVEAL, self.rng.choice(available), RULE_RANDOM)

    # -------------------------------------------------------------------------
    # Medium
    # -------------------------------------------------------------------------

    def _partition(
        self, views: Sequence[CellView], index: int
    ) -> Tuple[List[int], List[int]]:
        """Split a cell's neighbors into (hidden, flagged), in neighbor order."""
        hidden: List[int] = []
        flagged: List[int] = []
        for n in self.session.board.neighbors(index):
            if views[n].is_flagged:
                flagged.append(n)
            elif not views[n].is_revealed:
                hidden.append(n)
        return hidden, flagged

    def basic_rules_move(self, views: Sequence[CellView]) -> Optional[Move]:
        """
        Apply the two local counting rules over numbered cells by index.

        Every numbered cell is checked for flag-completion before any cell is
        checked for a safe reveal.
        """
        numbered = [v for v in views if v.number]
        partitions = {v.index: self._partition(views, v.index) for v in numbered}

        for v in numbered:
            hidden, flagged = partitions[v.index]
            remaining = v.number - len(flagged)
            if remaining > 0 and len(hidden) == remaining:
                return Move(MoveAction.FLAG, hidden[0], RULE_FLAG_COMPLETION)

        for v in numbered:
            hidden, flagged = partitions[v.index]
            if hidden and len(flagged) == v.number:
                return Move(MoveAction.REVEAL, hidden[0], RULE_SAFE_REVEAL)

        return None

    # -------------------------------------------------------------------------
    # Hard: 1-2-1 pattern
    # -------------------------------------------------------------------------

    def _view_at(
        self, views: Sequence[CellView], row: int, col: int
    ) -> Optional[CellView]:
        board = self.session.board
        if 0 <= row < board.rows and 0 <= col < board.cols:
            return views[row * board.cols + col]
        return None

    def _pattern_at(
        self,
        views: Sequence[CellView],
        row: int,
        col: int,
        along: Tuple[int, int],
        across: Tuple[int, int],
    ) -> Optional[Move]:
        """
        Check a 1-2-1 run centered on (row, col).

        `along` is the run's direction and `across` is perpendicular to it.
        Of the three cells beside the run on one side, the two diagonal to
        the center ("outer") are mines and the one facing it ("inner") is
        safe, provided the mirror side holds no unknowns.
        """
        ar, ac = along
        pr, pc = across
        run = [self._view_at(views, row + k * ar, col + k * ac) for k in (-1, 0, 1)]
        if any(v is None or v.number is None for v in run):
            return None
        if tuple(v.number for v in run) != _PATTERN:
            return None

        for sign in (-1, 1):
            side = [
                self._view_at(views, row + sign * pr + k * ar, col + sign * pc + k * ac)
                for k in (-1, 0, 1)
            ]
            if any(v is None for v in side):
                continue
            mirror = [
                self._view_at(views, row - sign * pr + k * ar, col - sign * pc + k * ac)
                for k in (-1, 0, 1)
            ]
            if any(v is not None and v.number is None for v in mirror):
                continue

            outer = (side[0], side[2])
            inner = side[1]
            if any(v.is_revealed for v in outer):
                continue

            for v in outer:
                if v.is_hidden:
                    return Move(MoveAction.FLAG, v.index, RULE_PATTERN_MINE)
            if inner.is_hidden:
                return Move(MoveAction.REVEAL, inner.index, RULE_PATTERN_SAFE)

        return None

    def pattern_move(self, views: Sequence[CellView]) -> Optional[Move]:
        """
        Scan horizontal runs row-major, then vertical runs; first action wins.

        A run whose deductions are already resolved is skipped and the scan
        moves on to later runs before the caller falls back to a guess.
        """
        board = self.session.board

        for row in range(board.rows):
            for col in range(1, board.cols - 1):
                move = self._pattern_at(views, row, col, (0, 1), (1, 0))
                if move is not None:
                    return move

        for row in range(1, board.rows - 1):
            for col in range(board.cols):
                move = self._pattern_at(views, row, col, (1, 0), (0, 1))
                if move is not None:
                    return move

        return None
