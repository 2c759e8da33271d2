"""
State Snapshot
==============

Packs a game state into read-only numpy arrays for renderers and HUDs.

Arrays are allocated per snapshot and marked non-writeable, so a consumer
holding a snapshot can neither corrupt engine state nor see later frames.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import numpy as np

from cyltris.tower_core.config_loader import GameConfig, get_config
from cyltris.tower_core.movement import compute_hard_drop_position
from cyltris.tower_core.pieces import ActivePiece, get_world_blocks
from cyltris.tower_core.state import GameState


def _frozen(array: np.ndarray) -> np.ndarray:
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class GameSnapshot:
    """
    Point-in-time view of a game.

    Cell arrays have shape (n, 2) with columns (x, y); x is already wrapped.
    """
    # Core state
    status: str
    score: int
    level: int
    lines_cleared: int
    combo_streak: int

    # Board info
    board_width: int
    board_height: int
    board: np.ndarray                 # (height, width) int8, indexed [y, x]
    column_heights: np.ndarray        # (width,) int16

    # Active piece
    piece_type: Optional[str]
    piece_orientation: int
    active_cells: np.ndarray          # (n, 2) int16
    ghost_cells: np.ndarray           # (n, 2) int16, hard-drop landing preview

    # Timers
    fall_progress: float              # Fraction of the current fall interval, [0, 1]
    fall_interval_ms: float
    lock_active: bool
    lock_progress: float              # Fraction of lock delay used, [0, 1]
    lock_remaining_ms: float

    # Queue and clearing
    next_pieces: Tuple[str, ...]
    clearing_layers: Tuple[int, ...]

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping for renderers and debug tools."""
        return {
            "status": self.status,
            "score": self.score,
            "level": self.level,
            "lines_cleared": self.lines_cleared,
            "combo_streak": self.combo_streak,
            "board_width": self.board_width,
            "board_height": self.board_height,
            "board": self.board,
            "column_heights": self.column_heights,
            "piece_type": self.piece_type,
            "piece_orientation": self.piece_orientation,
            "active_cells": self.active_cells,
            "ghost_cells": self.ghost_cells,
            "fall_progress": self.fall_progress,
            "fall_interval_ms": self.fall_interval_ms,
            "lock_active": self.lock_active,
            "lock_progress": self.lock_progress,
            "lock_remaining_ms": self.lock_remaining_ms,
            "next_pieces": list(self.next_pieces),
            "clearing_layers": list(self.clearing_layers),
        }


class SnapshotBuilder:
    """Builds game state snapshots."""

    def __init__(self, config: Optional[GameConfig] = None, preview_count: Optional[int] = None):
        if config is None:
            config = get_config()

        self._config = config
        self._preview_count = preview_count if preview_count is not None else config.rng.queue_size

    @property
    def preview_count(self) -> int:
        return self._preview_count

    @staticmethod
    def _cells_array(piece: Optional[ActivePiece], state: GameState) -> np.ndarray:
        if piece is None:
            return _frozen(np.zeros((0, 2), dtype=np.int16))
        blocks = get_world_blocks(piece, state.board.dimensions)
        return _frozen(np.array([[c.x, c.y] for c in blocks], dtype=np.int16))

    def build(self, state: GameState) -> GameSnapshot:
        """Build a snapshot from a game state."""
        board = state.board
        piece = state.current_piece
        timing = state.timing
        fall_state = state.fall_state

        interval = timing.fall_interval_ms
        fall_progress = 0.0
        if interval > 0:
            fall_progress = float(min(1.0, max(0.0, timing.fall_progress_ms / interval)))

        return GameSnapshot(
            status=state.game_status.value,
            score=state.score,
            level=state.level,
            lines_cleared=state.lines_cleared,
            combo_streak=state.combo_streak,
            board_width=board.width,
            board_height=board.height,
            board=_frozen(np.array(board.cells, dtype=np.int8, copy=True)),
            column_heights=_frozen(board.column_heights()),
            piece_type=piece.type.value if piece is not None else None,
            piece_orientation=int(piece.orientation) if piece is not None else 0,
            active_cells=self._cells_array(piece, state),
            ghost_cells=self._cells_array(compute_hard_drop_position(state), state),
            fall_progress=fall_progress,
            fall_interval_ms=float(interval),
            lock_active=fall_state.landed,
            lock_progress=float(fall_state.lock_progress),
            lock_remaining_ms=float(fall_state.lock_time_ms),
            next_pieces=tuple(p.value for p in state.piece_queue.peek(self._preview_count)),
            clearing_layers=tuple(state.clearing_layers),
        )
