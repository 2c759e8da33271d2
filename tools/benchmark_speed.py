"""
Performance Benchmark
=====================

Measures headless engine throughput (ticks per second) with random
player commands, for performance tuning.

Usage:
    python -m tools.benchmark_speed [--ticks N] [--delta MS] [--quick]
"""

from __future__ import annotations

import argparse
import sys
import time
from typing import List

import numpy as np

from cyltris.tower_core.commands import ALL_GAME_COMMANDS, GameCommand
from cyltris.tower_core.config_loader import load_config
from cyltris.tower_core.game import GameController


# Pausing would freeze the benchmark; random play only uses movement
PLAY_COMMANDS: List[GameCommand] = [c for c in ALL_GAME_COMMANDS if c != GameCommand.TOGGLE_PAUSE]


def benchmark_ticks(
    num_ticks: int = 10000,
    delta_ms: float = 16.0,
    command_rate: float = 0.3,
    seed: int = 42
) -> dict:
    """
    Benchmark controller updates with random input.

    Clears complete automatically and finished games restart, so every
    update exercises the engine.

    Args:
        num_ticks: Number of updates to run.
        delta_ms: Simulated milliseconds per update.
        command_rate: Probability of queueing a command before an update.
        seed: Random seed for both the piece queue and the input stream.

    Returns:
        Dict with timing results.
    """
    config = load_config(overrides={"clearing": {"auto_complete_ms": 0}})
    game = GameController(config=config, seed=seed)
    rng = np.random.default_rng(seed)

    # Warmup
    game.start_new_game(seed)
    for _ in range(100):
        game.update(delta_ms)

    game.start_new_game(seed)
    games = 1
    start = time.perf_counter()

    for _ in range(num_ticks):
        if rng.random() < command_rate:
            game.enqueue_command(PLAY_COMMANDS[int(rng.integers(len(PLAY_COMMANDS)))])
        game.update(delta_ms)
        if game.is_over:
            game.start_new_game()
            games += 1

    elapsed = time.perf_counter() - start

    return {
        "num_ticks": num_ticks,
        "games": games,
        "final_score": game.score,
        "elapsed_seconds": elapsed,
        "ticks_per_second": num_ticks / elapsed,
        "ms_per_tick": (elapsed * 1000) / num_ticks,
        "simulated_realtime_factor": (num_ticks * delta_ms / 1000) / elapsed
    }


def main():
    parser = argparse.ArgumentParser(description="Benchmark Cyltris engine performance")
    parser.add_argument("--ticks", type=int, default=10000, help="Updates to run")
    parser.add_argument("--delta", type=float, default=16.0, help="Milliseconds per update")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer ticks)")

    args = parser.parse_args()

    ticks = 1000 if args.quick else args.ticks

    print("=" * 60)
    print("CYLTRIS ENGINE BENCHMARK")
    print("=" * 60)
    print()

    result = benchmark_ticks(num_ticks=ticks, delta_ms=args.delta, seed=args.seed)

    print(f"  Ticks:          {result['num_ticks']}")
    print(f"  Games played:   {result['games']}")
    print(f"  Ticks/sec:      {result['ticks_per_second']:.1f}")
    print(f"  ms/tick:        {result['ms_per_tick']:.3f}")
    print(f"  x realtime:     {result['simulated_realtime_factor']:.1f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
