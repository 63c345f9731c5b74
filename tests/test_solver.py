import logging
import random

import pytest

from minesweeper_duel import (
    Actor,
    Difficulty,
    EndCondition,
    GameSession,
    GameState,
    UnknownEndConditionError,
)
from minesweeper_duel.solver import (
    RULE_FLAG_COMPLETION,
    RULE_PATTERN_MINE,
    RULE_PATTERN_SAFE,
    RULE_RANDOM,
    RULE_SAFE_REVEAL,
    Move,
    MoveAction,
    Solver,
)


def layout(session, mines, rows, cols=None, difficulty=Difficulty.MEDIUM):
    """Start a single-player game on a fixed layout and return its solver."""
    session.start_with_layout(mines, rows, cols, ai_difficulty=difficulty)
    return session.solver


# ============================================================================
# Easy
# ============================================================================

def test_easy_reveals_an_available_cell(session):
    solver = layout(session, [0, 24], 5, difficulty=Difficulty.EASY)
    session.request_flag_toggle(0)
    session.request_reveal(6)
    available = {c.index for c in session.board.available_cells()}

    move = solver.make_move()
    assert move.action is MoveAction.REVEAL
    assert move.rule == RULE_RANDOM
    assert move.index in available
    assert session.board.cells[move.index].is_revealed


def test_easy_opens_a_fresh_game(session):
    session.start(10, ai_difficulty=Difficulty.EASY, seed=4)
    move = session.solver.make_move()
    assert move.rule == RULE_RANDOM
    assert session.first_click_done
    assert len(session.board.mine_indices()) == 10


def test_random_move_reports_no_moves():
    session = GameSession()
    solver = Solver(session, Difficulty.EASY, rng=random.Random(0))
    session.start_with_layout([0], 2, ai_difficulty=Difficulty.EASY)
    views = session.snapshot()
    for index in range(4):
        session.board.cells[index].is_flagged = True
    assert solver.random_move(session.snapshot()) is None
    assert solver.random_move(views) is not None


def test_no_move_when_difficulty_none(session):
    session.start_with_layout([0, 24], 5)
    assert Solver(session, Difficulty.NONE).make_move() is None


def test_no_move_when_game_over(session):
    solver = layout(session, [0], 3)
    session.request_flag_toggle(0)
    assert session.state is GameState.GAME_OVER
    assert solver.make_move() is None


def test_no_move_when_session_halted(session, caplog):
    solver = layout(session, [0, 24], 5)
    with pytest.raises(UnknownEndConditionError):
        session.end_game("draw")

    caplog.clear()
    with caplog.at_level(logging.WARNING, logger="minesweeper_duel.solver"):
        assert solver.make_move() is None
    assert not caplog.records
    assert not any(c.is_revealed for c in session.board.cells)


def test_no_move_on_players_turn(session):
    session.start_with_layout(
        [0, 24], 5, ai_opponent_enabled=True, ai_difficulty=Difficulty.HARD
    )
    assert session.solver.make_move() is None
    assert not any(c.is_revealed for c in session.board.cells)


# ============================================================================
# Medium
# ============================================================================

def test_medium_flags_the_only_hidden_neighbor(session):
    # 1x4 strip, mines at both ends: once 1 and 2 are open, the "1" at
    # index 1 has a single hidden neighbor left.
    solver = layout(session, [0, 3], 1, 4)
    session.request_reveal(1)
    session.request_reveal(2)

    move = solver.make_move()
    assert move == Move(MoveAction.FLAG, 0, RULE_FLAG_COMPLETION)
    assert session.board.cells[0].is_flagged
    assert session.correctly_flagged_mine_count == 1


def test_medium_reveals_neighbor_once_number_is_satisfied(session):
    solver = layout(session, [0, 3], 1, 4)
    session.request_flag_toggle(0)
    session.request_reveal(1)

    move = solver.make_move()
    assert move == Move(MoveAction.REVEAL, 2, RULE_SAFE_REVEAL)
    assert session.board.cells[2].is_revealed
    assert session.state is GameState.ACTIVE_GAME


def test_medium_flag_completion_wins_game(session):
    solver = layout(session, [8], 3)
    session.request_reveal(0)
    assert [c.index for c in session.board.available_cells()] == [8]

    move = solver.make_move()
    assert move == Move(MoveAction.FLAG, 8, RULE_FLAG_COMPLETION)
    assert session.end_condition is EndCondition.WIN


def test_medium_prefers_flags_over_reveals(session):
    # Index 1 is satisfied by its flag (safe reveal of 2 available), while
    # the later "1" at index 5 still needs its only hidden neighbor flagged.
    solver = layout(session, [0, 4, 7], 1, 8)
    session.request_flag_toggle(0)
    for index in (1, 5, 6):
        session.request_reveal(index)

    move = solver.choose_move(session.snapshot())
    assert move == Move(MoveAction.FLAG, 4, RULE_FLAG_COMPLETION)


def test_medium_falls_back_to_random(session):
    solver = layout(session, [0, 24], 5)
    move = solver.make_move()
    assert move.rule == RULE_RANDOM


def test_medium_ignores_mine_positions_it_cannot_see(session):
    # Nothing revealed yet: the rules have no numbers to work from, so the
    # basic rules must not produce a move even though mines exist.
    solver = layout(session, [0, 24], 5)
    assert solver.basic_rules_move(session.snapshot()) is None


# ============================================================================
# Hard: 1-2-1
# ============================================================================

def test_hard_flags_outer_cell_of_horizontal_pattern(session):
    # Row 0 reads 1 2 1; row 1 below is hidden with mines at 6 and 8.
    solver = layout(session, [6, 8, 11], 2, 6, difficulty=Difficulty.HARD)
    for index in (0, 1, 2):
        session.request_reveal(index)
    assert [session.board.cells[i].adjacent_mine_count for i in (0, 1, 2)] == [1, 2, 1]

    first = solver.make_move()
    assert first == Move(MoveAction.FLAG, 6, RULE_PATTERN_MINE)

    second = solver.make_move()
    assert second.action is MoveAction.REVEAL
    assert second.index == 7
    assert session.board.cells[7].is_revealed
    assert session.state is GameState.ACTIVE_GAME


def test_pattern_reveals_inner_cell_once_outers_flagged(session):
    solver = layout(session, [6, 8, 11], 2, 6, difficulty=Difficulty.HARD)
    for index in (0, 1, 2):
        session.request_reveal(index)
    session.request_flag_toggle(6)
    session.request_flag_toggle(8)

    move = solver.pattern_move(session.snapshot())
    assert move == Move(MoveAction.REVEAL, 7, RULE_PATTERN_SAFE)


def test_resolved_pattern_yields_nothing(session):
    solver = layout(session, [6, 8, 11], 2, 6, difficulty=Difficulty.HARD)
    for index in (0, 1, 2, 7):
        session.request_reveal(index)
    session.request_flag_toggle(6)
    session.request_flag_toggle(8)
    assert solver.pattern_move(session.snapshot()) is None


def test_pattern_scan_moves_past_resolved_run(session):
    # Two 1-2-1 runs on row 0; the one at columns 0-2 is already settled.
    solver = layout(session, [9, 11, 14, 16], 2, 9, difficulty=Difficulty.HARD)
    for index in (0, 1, 2, 10, 5, 6, 7):
        session.request_reveal(index)
    session.request_flag_toggle(9)
    session.request_flag_toggle(11)

    move = solver.pattern_move(session.snapshot())
    assert move == Move(MoveAction.FLAG, 14, RULE_PATTERN_MINE)


def test_hard_finds_vertical_pattern(session):
    # Column 0 reads 1 2 1 downwards; column 1 holds mines at rows 0 and 2.
    solver = layout(session, [1, 5, 11], 6, 2, difficulty=Difficulty.HARD)
    for index in (0, 2, 4):
        session.request_reveal(index)

    move = solver.make_move()
    assert move == Move(MoveAction.FLAG, 1, RULE_PATTERN_MINE)


def test_pattern_needs_known_mirror_side(session):
    # Middle row reads 1 2 1 but both rows beside it are hidden.
    solver = layout(session, [0, 2], 3, 3, difficulty=Difficulty.HARD)
    for index in (3, 4, 5):
        session.request_reveal(index)
    assert solver.pattern_move(session.snapshot()) is None

    # Opening the bottom row pins the mines to the top row.
    session.request_reveal(6)
    assert all(session.board.cells[i].is_revealed for i in (6, 7, 8))
    assert solver.pattern_move(session.snapshot()) == Move(
        MoveAction.FLAG, 0, RULE_PATTERN_MINE
    )


def test_medium_does_not_use_pattern(session):
    solver = layout(session, [6, 8, 11], 2, 6, difficulty=Difficulty.MEDIUM)
    for index in (0, 1, 2):
        session.request_reveal(index)
    move = solver.choose_move(session.snapshot())
    assert move.rule == RULE_RANDOM


# ============================================================================
# Playing as the opponent
# ============================================================================

@pytest.mark.parametrize("difficulty", [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD])
def test_solver_only_acts_as_ai(session, scheduler, difficulty):
    session.start(10, ai_opponent_enabled=True, ai_difficulty=difficulty, seed=11)
    session.request_reveal(44)
    if session.state is not GameState.ACTIVE_GAME:
        return
    assert session.current_turn is Actor.AI

    scheduler.run_pending()
    assert sum(session.solver.rule_counts.values()) == 1
    if session.state is GameState.ACTIVE_GAME:
        assert session.current_turn is Actor.PLAYER


@pytest.mark.parametrize("seed", range(10))
def test_autopilot_games_terminate(seed):
    session = GameSession()
    session.start(12, ai_difficulty=Difficulty.HARD, seed=seed)
    for _ in range(session.board.size + 1):
        if session.solver.make_move() is None:
            break
    assert session.state is GameState.GAME_OVER or session.solver.make_move() is None
    # Deductions are sound: every flag from a rule lands on a mine.
    deduced = (
        session.solver.rule_counts[RULE_FLAG_COMPLETION]
        + session.solver.rule_counts[RULE_PATTERN_MINE]
    )
    assert session.correctly_flagged_mine_count == deduced
