"""Terminal front-end for playing against (or alongside) the AI."""

import logging
import time
from typing import Optional, Tuple

from .config import ConfigurationError, GameConfig, load_config_from_env
from .constants import Actor, EndCondition
from .events import GameEvent, StatusMessage
from .scheduling import ManualScheduler
from .session import GameSession
from .utils import coords_to_index


def parse_command(text: str, cols: int, rows: int) -> Optional[Tuple[str, int]]:
    """
    Parse "r x y" / "f x y" (or bare "x y", meaning reveal) into (action, index).

    Returns None for malformed input or coordinates outside the board.
    """
    parts = text.replace(",", " ").split()
    if len(parts) == 2:
        parts = ["r"] + parts
    if len(parts) != 3 or parts[0].lower() not in ("r", "f"):
        return None
    try:
        x = int(parts[1])
        y = int(parts[2])
    except ValueError:
        return None
    if not (0 <= x < cols and 0 <= y < rows):
        return None
    return parts[0].lower(), coords_to_index(y, x, cols)


def _wait_for_ai(session: GameSession) -> None:
    scheduler = session.scheduler
    if isinstance(scheduler, ManualScheduler):
        time.sleep(session.ai_turn_delay)
        scheduler.advance(session.ai_turn_delay)
        return
    while session.is_active and session.current_turn is Actor.AI:
        time.sleep(0.05)


def play_cli(session: GameSession) -> None:
    """
    Run a simple terminal UI for an already started session.

    Args:
        session: A GameSession in the active state.
    """

    def on_event(event: GameEvent) -> None:
        if isinstance(event, StatusMessage) and event.text:
            print(event.text)

    session.add_listener(on_event)
    board = session.board
    print("Minesweeper CLI (enter: r x y to reveal, f x y to flag). "
          "Coordinates are 0-based. Type 'q' to quit.\n")
    print(board.format_board())

    try:
        while session.is_active:
            if session.turn_alternation and session.current_turn is Actor.AI:
                _wait_for_ai(session)
                print()
                print(board.format_board())
                continue

            s = input("\nMove (r|f x y): ").strip()
            if s.lower() in {"q", "quit", "exit"}:
                print("Quit.")
                return

            command = parse_command(s, board.cols, board.rows)
            if command is None:
                print("Invalid input. Example: r 3 5")
                continue

            action, index = command
            if action == "r":
                accepted = session.request_reveal(index, Actor.PLAYER)
            else:
                accepted = session.request_flag_toggle(index, Actor.PLAYER)
            if not accepted:
                print("That move is not allowed right now.")
                continue

            print()
            print(board.format_board())

        if session.end_condition is EndCondition.LOSE:
            print("\nFull board:")
            print(board.format_board(reveal_all=True))
    finally:
        session.remove_listener(on_event)


def main() -> None:
    """Start a game configured from MINESWEEPER_* environment variables."""
    logging.basicConfig(level=logging.WARNING)
    try:
        config: GameConfig = load_config_from_env()
    except ConfigurationError as exc:
        print(f"Invalid configuration: {exc}")
        return

    session = GameSession(board_side=config.board_side, scheduler=ManualScheduler())
    session.start_with_config(config)
    play_cli(session)


if __name__ == "__main__":
    main()
