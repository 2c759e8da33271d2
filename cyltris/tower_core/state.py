"""
Game State
==========

The immutable aggregate every engine operation consumes and returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from cyltris.tower_core.board import Board, BoardDimensions
from cyltris.tower_core.config_loader import GameConfig, get_config
from cyltris.tower_core.lock_delay import FallState, airborne_fall_state
from cyltris.tower_core.pieces import ActivePiece, PieceType
from cyltris.tower_core.rng import PieceQueue
from cyltris.tower_core.scoring import get_fall_interval_ms


class GameStatus(str, Enum):
    """
    Idle -> Running <-> Paused
    Running -> Clearing -> Running | GameOver
    any -> GameOver on spawn collision (terminal)
    """
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    CLEARING = "clearing"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class FallTiming:
    """
    Gravity accumulator. Progress carries its remainder across ticks.
    """
    fall_progress_ms: float
    fall_interval_ms: float


@dataclass(frozen=True)
class GameState:
    """
    Complete, self-consistent game state.

    Instances are never modified. Board, queue and piece are owned by this
    state; operations that change them build new ones.
    """
    board: Board
    current_piece: Optional[ActivePiece]
    piece_queue: PieceQueue
    score: int
    level: int
    lines_cleared: int
    combo_streak: int
    game_status: GameStatus
    timing: FallTiming
    fall_state: FallState
    clearing_layers: Tuple[int, ...]
    clearing_elapsed_ms: float
    spawn_column_hint: Optional[int]
    config: GameConfig

    @property
    def dimensions(self) -> BoardDimensions:
        return self.board.dimensions

    @property
    def next_pieces(self) -> Tuple[PieceType, ...]:
        return self.piece_queue.upcoming

    @property
    def is_over(self) -> bool:
        return self.game_status == GameStatus.GAME_OVER


def create_initial_game_state(
    config: Optional[GameConfig] = None,
    seed: Optional[int] = None
) -> GameState:
    """
    Build an Idle state with an empty board.

    Non-positive board dimensions are raised to 1 rather than rejected.

    Args:
        config: Game configuration. Uses default if None.
        seed: Piece queue seed. Overrides config.rng.seed when given.
    """
    if config is None:
        config = get_config()

    width = max(1, config.board.width)
    height = max(1, config.board.height)
    level = max(1, config.leveling.initial_level)

    return GameState(
        board=Board.create_empty(width, height),
        current_piece=None,
        piece_queue=PieceQueue.create(config, seed=seed),
        score=0,
        level=level,
        lines_cleared=0,
        combo_streak=0,
        game_status=GameStatus.IDLE,
        timing=FallTiming(
            fall_progress_ms=0.0,
            fall_interval_ms=get_fall_interval_ms(level, config.fall_speed)
        ),
        fall_state=airborne_fall_state(config.lock_delay.delay_ms),
        clearing_layers=(),
        clearing_elapsed_ms=0.0,
        spawn_column_hint=config.spawn.column_hint,
        config=config
    )
