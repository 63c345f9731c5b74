"""Benchmarking tools for the solver tiers in autopilot games."""

from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .constants import DEFAULT_BOARD_SIDE, MIN_BOMBS, Difficulty, EndCondition
from .scheduling import ManualScheduler
from .session import GameSession
from .solver import (
    RULE_FLAG_COMPLETION,
    RULE_PATTERN_MINE,
    RULE_PATTERN_SAFE,
    RULE_RANDOM,
    RULE_SAFE_REVEAL,
)

RULES: Tuple[str, ...] = (
    RULE_FLAG_COMPLETION,
    RULE_SAFE_REVEAL,
    RULE_PATTERN_MINE,
    RULE_PATTERN_SAFE,
    RULE_RANDOM,
)

TIERS: Tuple[Difficulty, ...] = (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD)


def run_solver_single_game(
    difficulty: Difficulty,
    mine_count: int = MIN_BOMBS,
    board_side: int = DEFAULT_BOARD_SIDE,
    *,
    seed: Optional[int] = None,
    max_moves: Optional[int] = None,
    show_board: bool = False,
) -> Dict[str, object]:
    """
    Let the solver play one single-player game from the first click to the end.

    Args:
        difficulty: Solver tier; must not be Difficulty.NONE.
        mine_count: Number of mines on the board.
        board_side: Side length of the square board.
        seed: Seed for mine placement and random guesses.
        max_moves: Safety cap on solver moves; defaults to the cell count.
        show_board: If True, print the underlying board once the game stops.

    Returns:
        Dict with "status" (1 win, -1 loss, 0 stalled), "moves_count",
        "revealed_cells_count", "flags_count", "correct_flags_count" and
        "rule_counts".
    """
    if difficulty is Difficulty.NONE:
        raise ValueError("A solver tier other than NONE is required.")

    session = GameSession(board_side=board_side, scheduler=ManualScheduler())
    session.start(mine_count, ai_difficulty=difficulty, seed=seed)
    solver = session.solver
    if solver is None:
        raise RuntimeError("Session did not create a solver.")

    limit = max_moves if max_moves is not None else session.board.size
    moves = 0
    while session.is_active and moves < limit:
        if solver.make_move() is None:
            break
        moves += 1

    if session.end_condition is EndCondition.WIN:
        status = 1
    elif session.end_condition is EndCondition.LOSE:
        status = -1
    else:
        status = 0

    if show_board:
        print(session.board.format_board(reveal_all=True))
        print(f"Finished with status {status} after {moves} moves.")

    return {
        "status": status,
        "moves_count": moves,
        "revealed_cells_count": sum(1 for c in session.board.cells if c.is_revealed),
        "flags_count": session.user_flag_count,
        "correct_flags_count": session.correctly_flagged_mine_count,
        "rule_counts": {rule: solver.rule_counts.get(rule, 0) for rule in RULES},
    }


def run_solver_many_games(
    difficulty: Difficulty,
    runs: int,
    mine_count: int = MIN_BOMBS,
    board_side: int = DEFAULT_BOARD_SIDE,
    *,
    seed: Optional[int] = None,
) -> Dict[str, float]:
    """
    Run independent autopilot games and average their results.

    Game i uses `seed + i` when a seed is given, so a run is reproducible.

    Returns:
        win_rate, loss_rate, stall_rate, avg_moves_count,
        avg_revealed_cells_count, avg_flags_count, avg_correct_flags_count,
        flag_accuracy, plus avg_<rule> and <rule>_frac for every rule.
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    statuses: List[int] = []
    moves: List[float] = []
    revealed: List[float] = []
    flags: List[float] = []
    correct: List[float] = []
    rules: List[List[float]] = []

    for i in range(runs):
        result = run_solver_single_game(
            difficulty,
            mine_count,
            board_side,
            seed=None if seed is None else seed + i,
        )
        statuses.append(int(result["status"]))  # type: ignore[arg-type]
        moves.append(float(result["moves_count"]))  # type: ignore[arg-type]
        revealed.append(float(result["revealed_cells_count"]))  # type: ignore[arg-type]
        flags.append(float(result["flags_count"]))  # type: ignore[arg-type]
        correct.append(float(result["correct_flags_count"]))  # type: ignore[arg-type]
        counts = result["rule_counts"]
        rules.append([float(counts[rule]) for rule in RULES])  # type: ignore[index]

    status_arr = np.array(statuses)
    rule_arr = np.array(rules)
    flags_total = float(np.sum(flags))

    out: Dict[str, float] = {
        "win_rate": float(np.mean(status_arr == 1)),
        "loss_rate": float(np.mean(status_arr == -1)),
        "stall_rate": float(np.mean(status_arr == 0)),
        "avg_moves_count": float(np.mean(moves)),
        "avg_revealed_cells_count": float(np.mean(revealed)),
        "avg_flags_count": float(np.mean(flags)),
        "avg_correct_flags_count": float(np.mean(correct)),
        "flag_accuracy": float(np.sum(correct)) / flags_total if flags_total > 0 else 0.0,
    }

    rule_means = rule_arr.mean(axis=0)
    rule_total = float(rule_arr.sum())
    for rule, mean in zip(RULES, rule_means):
        out[f"avg_{rule}"] = float(mean)
    for rule, total in zip(RULES, rule_arr.sum(axis=0)):
        out[f"{rule}_frac"] = float(total) / rule_total if rule_total > 0 else 0.0

    return out


def run_solver_tier_analysis(
    runs: int,
    mine_count: int = MIN_BOMBS,
    board_side: int = DEFAULT_BOARD_SIDE,
    *,
    seed: Optional[int] = None,
    show_plots: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Compare the easy, medium and hard tiers on the same board settings.

    Args:
        runs: Number of games per tier.
        mine_count: Number of mines per game.
        board_side: Side length of the square board.
        seed: Base seed; every tier plays the same sequence of boards.
        show_plots: If True, draw matplotlib charts of outcomes and rule mix.

    Returns:
        Mapping from tier name to the statistics of run_solver_many_games().
    """
    results: Dict[str, Dict[str, float]] = {}
    for tier in TIERS:
        results[tier.value] = run_solver_many_games(
            tier, runs, mine_count, board_side, seed=seed
        )

    if not show_plots:
        return results

    tier_names = list(results.keys())
    x = np.arange(len(tier_names))
    bar_w = 0.25

    # 1) Outcomes by tier
    wins = [results[n]["win_rate"] for n in tier_names]
    losses = [results[n]["loss_rate"] for n in tier_names]
    stalls = [results[n]["stall_rate"] for n in tier_names]

    plt.figure()  # type: ignore[misc]
    plt.bar(x - bar_w, wins, width=bar_w, label="win")  # type: ignore[misc]
    plt.bar(x, losses, width=bar_w, label="loss")  # type: ignore[misc]
    plt.bar(x + bar_w, stalls, width=bar_w, label="stalled")  # type: ignore[misc]
    plt.xticks(x, tier_names)  # type: ignore[misc]
    plt.ylabel("Rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title(f"Outcomes by tier ({board_side}x{board_side}, {mine_count} mines)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    # 2) Rule mix by tier (stacked)
    plt.figure()  # type: ignore[misc]
    bottom = np.zeros(len(tier_names))
    for rule in RULES:
        fracs = np.array([results[n][f"{rule}_frac"] for n in tier_names])
        plt.bar(x, fracs, bottom=bottom, label=rule)  # type: ignore[misc]
        bottom += fracs
    plt.xticks(x, tier_names)  # type: ignore[misc]
    plt.ylabel("Share of moves")  # type: ignore[misc]
    plt.title("Moves by rule (per tier)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()
    plt.show()  # type: ignore[misc]

    return results
