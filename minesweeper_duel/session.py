"""Game session: state machine, turn alternation, timing and events."""

import logging
import random
import threading
import time
from typing import Callable, Iterable, List, Optional, Union

from .board import Board, CellView
from .config import ConfigurationError, GameConfig
from .constants import (
    AI_TURN_DELAY_SECONDS,
    DEFAULT_BOARD_SIDE,
    LOSE_MESSAGE,
    REMAINING_MESSAGE,
    START_MESSAGE,
    TURN_MESSAGE,
    UNKNOWN_END_MESSAGE,
    WIN_MESSAGE,
    Actor,
    Difficulty,
    EndCondition,
    GameState,
    difficulty_to_string,
)
from .events import CellChanged, GameEnded, GameEvent, Listener, StatusMessage, TimerTick
from .scheduling import ManualScheduler, ScheduledTask, TimerScheduler
from .solver import Move, Solver

logger = logging.getLogger(__name__)

AITurnCallback = Callable[[], Optional[Move]]

_MENU_STATES = (GameState.MAIN_MENU, GameState.OPTIONS, GameState.CREDITS)


class UnknownEndConditionError(RuntimeError):
    """Raised when a game is ended with a condition other than win or lose."""


class GameSession:
    """
    One game of Minesweeper, optionally played against an AI opponent.

    The session owns its Board and gates every mutation on the session state
    and, when turn alternation is on, on whose turn it is. Invalid moves are
    rejected by returning False and are only logged.

    All public mutators serialize on a re-entrant lock, so AI turns fired
    from a scheduler thread never interleave with player input.
    """

    def __init__(
        self,
        board_side: int = DEFAULT_BOARD_SIDE,
        scheduler: Optional[Union[TimerScheduler, ManualScheduler]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Create a session sitting in the main menu.

        Args:
            board_side: Default side length used by `start()`.
            scheduler: Deferred-task scheduler for AI turns; defaults to a
                TimerScheduler.
            clock: Monotonic time source in seconds.
        """
        self.board_side: int = board_side
        self.scheduler = scheduler if scheduler is not None else TimerScheduler()
        self.clock = clock

        self._lock = threading.RLock()
        self._listeners: List[Listener] = []

        self.state: GameState = GameState.MAIN_MENU
        self.config: Optional[GameConfig] = None
        self.board: Board = Board(board_side)
        self.generation: int = 0
        self.rng: random.Random = random.Random()
        self.halted: bool = False
        self.end_condition: Optional[EndCondition] = None

        self.solver: Optional[Solver] = None
        self._ai_turn_callback: Optional[AITurnCallback] = None
        self._custom_ai_callback: bool = False
        self._pending_ai: Optional[ScheduledTask] = None

        self._reset_counters()

    def _reset_counters(self) -> None:
        self.first_click_done: bool = False
        self.flagged_cells: List[int] = []
        self.user_flag_count: int = 0
        self.correctly_flagged_mine_count: int = 0
        self.turn_alternation: bool = False
        self.current_turn: Actor = Actor.PLAYER
        self.ai_difficulty: Difficulty = Difficulty.NONE
        self.ai_turn_delay: float = AI_TURN_DELAY_SECONDS
        self._start_time: Optional[float] = None
        self._end_time: Optional[float] = None

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _emit(self, event: GameEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    def _emit_cell(self, index: int) -> None:
        view = self.board.view(index)
        self._emit(
            CellChanged(
                index=index,
                revealed=view.is_revealed,
                flagged=view.is_flagged,
                mine_exposed=view.mine_exposed,
                number=view.number,
            )
        )

    def _status(self, text: str) -> None:
        self._emit(StatusMessage(text))

    def register_ai_turn(self, callback: Optional[AITurnCallback]) -> None:
        """
        Install the callable invoked on each AI turn.

        Passing None restores the default, which is a Solver built by
        `start()` for the configured difficulty.
        """
        with self._lock:
            self._custom_ai_callback = callback is not None
            self._ai_turn_callback = callback

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(
        self,
        mine_count: int,
        ai_opponent_enabled: bool = False,
        ai_difficulty: Difficulty = Difficulty.NONE,
        *,
        board_side: Optional[int] = None,
        ai_turn_delay: float = AI_TURN_DELAY_SECONDS,
        seed: Optional[int] = None,
    ) -> None:
        """
        Start a new game, discarding any previous one.

        Raises:
            ConfigurationError: If the configuration is invalid. The session
                is left exactly as it was.
        """
        config = GameConfig(
            mine_count=mine_count,
            board_side=self.board_side if board_side is None else board_side,
            ai_opponent_enabled=ai_opponent_enabled,
            ai_difficulty=ai_difficulty,
            ai_turn_delay=ai_turn_delay,
            seed=seed,
        )
        self.start_with_config(config)

    def start_with_config(self, config: GameConfig) -> None:
        """Validate `config` and start a game with mines placed on first reveal."""
        try:
            config.validate()
        except ConfigurationError as exc:
            logger.warning("Refusing to start: %s", exc)
            self._status(str(exc))
            raise

        with self._lock:
            board = Board(config.board_side, config.board_side, config.mine_count)
            self._begin(config, board, first_click_done=False)

    def start_with_layout(
        self,
        mine_indices: Iterable[int],
        rows: int,
        cols: Optional[int] = None,
        ai_opponent_enabled: bool = False,
        ai_difficulty: Difficulty = Difficulty.NONE,
        *,
        ai_turn_delay: float = AI_TURN_DELAY_SECONDS,
        seed: Optional[int] = None,
    ) -> None:
        """
        Start a game on a predetermined mine layout (puzzles and replays).

        The layout is used as given: no first-click safe zone is applied and
        the mine count is not held to the MIN_BOMBS..MAX_BOMBS range.

        Raises:
            ConfigurationError: If an index is off the board or the AI
                settings are inconsistent.
        """
        try:
            board = Board.from_mines(rows, cols, mine_indices)
        except (IndexError, ValueError) as exc:
            raise ConfigurationError(str(exc)) from None
        if ai_opponent_enabled and ai_difficulty is Difficulty.NONE:
            raise ConfigurationError("An AI opponent needs a difficulty.")

        config = GameConfig(
            mine_count=board.mine_count,
            board_side=rows,
            ai_opponent_enabled=ai_opponent_enabled,
            ai_difficulty=ai_difficulty,
            ai_turn_delay=ai_turn_delay,
            seed=seed,
        )
        with self._lock:
            self._begin(config, board, first_click_done=True)

    def _begin(self, config: GameConfig, board: Board, first_click_done: bool) -> None:
        self._cancel_pending_ai()
        self.generation += 1
        self.config = config
        self.rng = config.make_rng()
        self.board = board
        self._reset_counters()
        self.first_click_done = first_click_done
        self.halted = False
        self.end_condition = None

        self.turn_alternation = config.ai_opponent_enabled
        self.ai_difficulty = config.ai_difficulty
        self.ai_turn_delay = config.ai_turn_delay

        if config.ai_difficulty is not Difficulty.NONE:
            self.solver = Solver(self, config.ai_difficulty, rng=self.rng)
        else:
            self.solver = None
        if not self._custom_ai_callback:
            self._ai_turn_callback = self.solver.make_move if self.solver else None

        self.state = GameState.ACTIVE_GAME
        logger.info(
            "Game %d started: %dx%d board, %d mines, AI %s (%s)",
            self.generation,
            board.rows,
            board.cols,
            board.mine_count,
            "enabled" if config.ai_opponent_enabled else "disabled",
            config.ai_difficulty.value,
        )

        self._status(
            START_MESSAGE.format(
                mines=board.mine_count,
                ai="enabled" if config.ai_opponent_enabled else "disabled",
                difficulty=difficulty_to_string(config.ai_difficulty),
            )
        )
        self._status(REMAINING_MESSAGE.format(remaining=self.remaining_mines()))
        if self.turn_alternation:
            self._status(TURN_MESSAGE.format(actor=self.current_turn.value))

    def navigate(self, state: GameState) -> None:
        """Leave the current screen for one of the menus, abandoning any game."""
        if state not in _MENU_STATES:
            raise ValueError(f"Cannot navigate to {state.name}; use start().")
        with self._lock:
            self._cancel_pending_ai()
            self.state = state
            self._status("")

    def reset(self) -> None:
        """Discard the game and return to the main menu with an empty board."""
        with self._lock:
            self._cancel_pending_ai()
            self.generation += 1
            self.board = Board(self.board_side)
            self.config = None
            self.solver = None
            if not self._custom_ai_callback:
                self._ai_turn_callback = None
            self._reset_counters()
            self.halted = False
            self.end_condition = None
            self.state = GameState.MAIN_MENU
            self._status("")

    # -------------------------------------------------------------------------
    # Read-only helpers
    # -------------------------------------------------------------------------

    def snapshot(self) -> List[CellView]:
        """What a player can see of the board; hidden mines are not exposed."""
        with self._lock:
            return list(self.board.snapshot())

    def remaining_mines(self) -> int:
        return max(0, self.board.mine_count - self.user_flag_count)

    def elapsed_seconds(self) -> int:
        """Whole seconds since the first reveal, frozen once the game ends."""
        if self._start_time is None:
            return 0
        end = self._end_time if self._end_time is not None else self.clock()
        return int(end - self._start_time)

    def tick(self) -> int:
        """Emit a TimerTick for the presentation layer and return the seconds."""
        seconds = self.elapsed_seconds()
        if self.state is GameState.ACTIVE_GAME and self._start_time is not None:
            self._emit(TimerTick(seconds))
        return seconds

    @property
    def is_active(self) -> bool:
        return self.state is GameState.ACTIVE_GAME and not self.halted

    # -------------------------------------------------------------------------
    # Moves
    # -------------------------------------------------------------------------

    def _can_act(self, actor: Actor, action: str, index: int) -> bool:
        if not self.is_active:
            logger.debug("Rejected %s of %d by %s: game not active", action, index, actor.value)
            return False
        if self.turn_alternation and actor is not self.current_turn:
            logger.info(
                "Rejected %s of %d by %s: it is the %s's turn",
                action,
                index,
                actor.value,
                self.current_turn.value,
            )
            return False
        return True

    def request_reveal(self, index: int, actor: Actor = Actor.PLAYER) -> bool:
        """
        Reveal a cell on behalf of `actor`.

        The first accepted reveal places the mines (sparing the cell and its
        neighbors), numbers the board and starts the timer.

        Returns:
            True if the move was applied, False if it was rejected.
        """
        with self._lock:
            self.board.cell(index)
            if not self._can_act(actor, "reveal", index):
                return False

            cell = self.board.cells[index]
            if cell.is_revealed or cell.is_flagged:
                logger.debug("Rejected reveal of %d: cell already revealed or flagged", index)
                return False

            if not self.first_click_done:
                self.board.place_mines(index, self.board.neighbors(index), rng=self.rng)
                self.board.compute_numbers()
                self.first_click_done = True
            if self._start_time is None:
                self._start_time = self.clock()

            result = self.board.reveal(index)
            logger.debug(
                "%s revealed %s (%d cells)",
                actor.value,
                self.board.describe(index),
                len(result.revealed),
            )
            for revealed_index in result.revealed:
                self._emit_cell(revealed_index)

            if result.hit_mine:
                self.end_game(EndCondition.LOSE, actor)
                return True

            if self.board.is_winning_state(self.correctly_flagged_mine_count):
                self.end_game(EndCondition.WIN, actor)
                return True

            self.switch_turn()
            return True

    def request_flag_toggle(self, index: int, actor: Actor = Actor.PLAYER) -> bool:
        """
        Place or remove a flag on behalf of `actor`.

        Rejected before the first reveal and on revealed cells.

        Returns:
            True if the flag was toggled, False if the move was rejected.
        """
        with self._lock:
            cell = self.board.cell(index)
            if not self._can_act(actor, "flag", index):
                return False
            if not self.first_click_done:
                logger.debug("Rejected flag of %d: no cell revealed yet", index)
                return False
            if cell.is_revealed:
                logger.debug("Rejected flag of %d: cell already revealed", index)
                return False

            result = self.board.toggle_flag(index)
            if result.now_flagged:
                self.flagged_cells.append(index)
                self.user_flag_count += 1
                if cell.is_mine:
                    self.correctly_flagged_mine_count += 1
            else:
                self.flagged_cells.remove(index)
                self.user_flag_count = max(0, self.user_flag_count - 1)
                if cell.is_mine:
                    self.correctly_flagged_mine_count = max(
                        0, self.correctly_flagged_mine_count - 1
                    )

            self._emit_cell(index)
            self._status(REMAINING_MESSAGE.format(remaining=self.remaining_mines()))

            if self.board.is_winning_state(self.correctly_flagged_mine_count):
                self.end_game(EndCondition.WIN, actor)
                return True

            self.switch_turn()
            return True

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def switch_turn(self) -> None:
        """Hand the turn to the other actor; the AI acts after a delay."""
        with self._lock:
            if not self.turn_alternation or not self.is_active:
                return
            self.current_turn = self.current_turn.other()
            logger.debug("Turn passes to %s", self.current_turn.value)
            self._status(TURN_MESSAGE.format(actor=self.current_turn.value))
            if self.current_turn is Actor.AI:
                self._schedule_ai_turn()

    def _schedule_ai_turn(self) -> None:
        self._cancel_pending_ai()
        generation = self.generation
        self._pending_ai = self.scheduler.schedule(
            self.ai_turn_delay, lambda: self._run_ai_turn(generation)
        )

    def _cancel_pending_ai(self) -> None:
        if self._pending_ai is not None:
            self._pending_ai.cancel()
            self._pending_ai = None

    def _run_ai_turn(self, generation: int) -> None:
        # State may have moved on while the task was waiting.
        with self._lock:
            self._pending_ai = None
            if generation != self.generation:
                logger.debug("Dropping AI turn from game %d", generation)
                return
            if not self.is_active or self.current_turn is not Actor.AI:
                logger.debug("Dropping AI turn: game inactive or not the AI's turn")
                return

            move = self._ai_turn_callback() if self._ai_turn_callback else None
            if move is None and self.is_active and self.current_turn is Actor.AI:
                logger.info("AI made no move; turn returns to the player")
                self.switch_turn()

    # -------------------------------------------------------------------------
    # Ending
    # -------------------------------------------------------------------------

    def end_game(self, condition: EndCondition, actor: Optional[Actor] = None) -> None:
        """
        Finish the game with a win or a loss.

        Ignored unless a game is in progress, so a finished game keeps its
        first result and frozen time.

        Raises:
            UnknownEndConditionError: For any other condition. The session is
                halted and must be restarted.
        """
        with self._lock:
            self._cancel_pending_ai()
            if condition not in (EndCondition.WIN, EndCondition.LOSE):
                self.halted = True
                logger.error("Unknown end condition: %r", condition)
                self._status(UNKNOWN_END_MESSAGE)
                raise UnknownEndConditionError(f"Unknown end condition: {condition!r}")

            if self.state is not GameState.ACTIVE_GAME or self.halted:
                logger.debug("Ignoring end_game(%s): no game in progress", condition.name)
                return

            if self._start_time is not None:
                self._end_time = self.clock()
            self.state = GameState.GAME_OVER
            self.end_condition = condition
            seconds = self.elapsed_seconds()

            if condition is EndCondition.LOSE:
                for cell in self.board.cells:
                    if cell.is_mine and not cell.is_flagged and not cell.is_revealed:
                        self._emit(
                            CellChanged(
                                index=cell.index,
                                revealed=False,
                                flagged=False,
                                mine_exposed=True,
                            )
                        )
                who = "The AI" if actor is Actor.AI else "You"
                self._status(LOSE_MESSAGE.format(who=who, seconds=seconds))
            else:
                self._status(WIN_MESSAGE.format(seconds=seconds))

            logger.info(
                "Game %d over: %s by %s after %ds",
                self.generation,
                condition.name.lower(),
                actor.value if actor else "unknown",
                seconds,
            )
            self._emit(GameEnded(condition=condition, elapsed_seconds=seconds, actor=actor))
