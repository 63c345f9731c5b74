"""
Quickstart example for Minesweeper Duel.

This script demonstrates basic usage of the session and the AI tiers.
"""

import logging

from minesweeper_duel import (
    Difficulty,
    GameSession,
    ManualScheduler,
    play_cli,
    run_solver_many_games,
)


def main():
    logging.basicConfig(level=logging.WARNING)

    print("=" * 60)
    print("Minesweeper Duel - Quickstart Example")
    print("=" * 60)

    # Example 1: Let the hard AI play a single game on its own
    print("\n1. Hard AI playing a 10x10 game with 12 mines...")
    print("-" * 60)

    session = GameSession(scheduler=ManualScheduler())
    session.start(12, ai_difficulty=Difficulty.HARD, seed=7)
    moves = 0
    while session.is_active and session.solver.make_move() is not None:
        moves += 1

    print(f"Result: {session.end_condition.name if session.end_condition else 'STALLED'}")
    print(f"Moves: {moves}")
    print(f"Rules used: {dict(session.solver.rule_counts)}")

    # Example 2: Show final board state
    print("\n2. Final board state:")
    print("-" * 60)
    print(session.board.format_board(reveal_all=True))

    # Example 3: Compare tiers
    print("\n3. Win rates by tier (20 games each)...")
    print("-" * 60)

    for tier in (Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD):
        results = run_solver_many_games(tier, runs=20, mine_count=10, seed=1)
        print(
            f"{tier.value:8s}: {results['win_rate']*100:5.1f}% win rate, "
            f"{results['avg_moves_count']:.1f} moves per game"
        )

    # Example 4: Play against the medium AI in the terminal
    print("\n4. Your turn: play against the medium AI")
    print("-" * 60)
    duel = GameSession(scheduler=ManualScheduler())
    duel.start(10, ai_opponent_enabled=True, ai_difficulty=Difficulty.MEDIUM)
    play_cli(duel)


if __name__ == "__main__":
    main()
