"""
Scoring System
==============

Line clear awards, combo bonus and the level-driven gravity curve.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from cyltris.tower_core.config_loader import (
    FallSpeedConfig,
    GameConfig,
    LevelingConfig,
    ScoringConfig,
    get_config,
)


@dataclass(frozen=True)
class LevelProgress:
    """Result of a leveling update."""
    level: int
    fall_interval_ms: float


def get_line_clear_score(
    lines_cleared: int,
    level: int,
    combo_streak: int,
    rules: Optional[ScoringConfig] = None
) -> int:
    """
    Points for a single clear.

    Base award by count (1 single, 2 double, 3 triple, 4+ tetris) times
    max(1, level), plus combo_bonus for every consecutive clear after the first.

    Args:
        lines_cleared: Rows removed by this clear.
        level: Level in force when the rows were cleared.
        combo_streak: Consecutive line-clearing locks including this one.
        rules: Scoring parameters. Uses default config if None.

    Returns:
        Points awarded (0 when no rows were cleared).
    """
    if rules is None:
        rules = get_config().scoring

    if lines_cleared <= 0:
        return 0

    if lines_cleared == 1:
        base = rules.single
    elif lines_cleared == 2:
        base = rules.double
    elif lines_cleared == 3:
        base = rules.triple
    else:
        base = rules.tetris

    combo_bonus = rules.combo_bonus * (combo_streak - 1) if combo_streak > 1 else 0
    return base * max(1, level) + combo_bonus


def get_fall_interval_ms(level: int, params: FallSpeedConfig) -> float:
    """Gravity interval for a level, never below params.min_interval_ms."""
    level_index = max(0, level - 1)
    interval = params.base_interval_ms * math.pow(params.decay_per_level, level_index)
    return max(params.min_interval_ms, math.floor(interval))


def update_level(
    current_level: int,
    total_lines_cleared: int,
    rules: Optional[LevelingConfig] = None,
    fall_speed: Optional[FallSpeedConfig] = None
) -> LevelProgress:
    """
    Level reached after clearing lines. Levels never go down.

    Args:
        current_level: Level before the update.
        total_lines_cleared: Lines cleared over the whole game.
        rules: Leveling parameters. Uses default config if None.
        fall_speed: Gravity curve. Uses default config if None.
    """
    if rules is None or fall_speed is None:
        config: GameConfig = get_config()
        rules = rules or config.leveling
        fall_speed = fall_speed or config.fall_speed

    new_level = max(current_level, total_lines_cleared // rules.lines_per_level + 1)
    return LevelProgress(
        level=new_level,
        fall_interval_ms=get_fall_interval_ms(new_level, fall_speed)
    )
