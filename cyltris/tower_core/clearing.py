"""
Line Clearing
=============

Full-row detection, the Clearing phase, and row collapse once the clear
animation has finished.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Tuple

import numpy as np

from cyltris.tower_core.board import Board, CellContent
from cyltris.tower_core.rules import lock_current_piece, spawn_next_piece
from cyltris.tower_core.scoring import get_line_clear_score, update_level
from cyltris.tower_core.state import FallTiming, GameState, GameStatus


def find_full_layers(board: Board) -> Tuple[int, ...]:
    """Rows whose every column holds a block, bottom to top."""
    return tuple(y for y in range(board.height) if board.is_layer_full(y))


def begin_clearing_phase(state: GameState) -> GameState:
    """
    Enter Clearing if the board has full rows.

    Full rows are recorded in clearing_layers. Without full rows only
    clearing_layers is reset.
    """
    layers = find_full_layers(state.board)
    if not layers:
        return replace(state, clearing_layers=())

    return replace(
        state,
        clearing_layers=layers,
        clearing_elapsed_ms=0.0,
        game_status=GameStatus.CLEARING
    )


def collapse_cleared_layers(board: Board, layers: Tuple[int, ...]) -> Board:
    """
    New board with the given rows removed and the rest compacted downward.

    Kept rows keep their order; the freed rows at the top are empty.
    """
    cleared = set(layers)
    kept = [y for y in range(board.height) if y not in cleared]
    cells = np.full(board.cells.shape, CellContent.EMPTY, dtype=np.int8)
    if kept:
        cells[:len(kept)] = board.cells[kept]
    return Board(cells)


def complete_clearing_phase(state: GameState) -> GameState:
    """
    Finish the clear: collapse rows, award score, update level, spawn.

    Score uses the level in force before the clear and the current combo
    streak. The next piece spawns immediately; GameOver if it collides.
    No-op when nothing is pending.
    """
    layers = state.clearing_layers
    if not layers:
        return state

    count = len(layers)
    config = state.config
    points = get_line_clear_score(count, state.level, state.combo_streak, config.scoring)
    lines_cleared = state.lines_cleared + count
    progress = update_level(state.level, lines_cleared, config.leveling, config.fall_speed)

    collapsed = replace(
        state,
        board=collapse_cleared_layers(state.board, layers),
        current_piece=None,
        clearing_layers=(),
        clearing_elapsed_ms=0.0,
        score=state.score + points,
        lines_cleared=lines_cleared,
        level=progress.level,
        timing=FallTiming(
            fall_progress_ms=state.timing.fall_progress_ms,
            fall_interval_ms=progress.fall_interval_ms
        ),
        game_status=GameStatus.GAME_OVER if state.is_over else GameStatus.RUNNING
    )

    if collapsed.is_over:
        return collapsed
    return spawn_next_piece(collapsed)


def commit_piece(state: GameState) -> GameState:
    """
    Lock the active piece and start clearing if rows filled.

    A lock that fills rows extends the combo streak; any other lock ends it.
    """
    locked = begin_clearing_phase(lock_current_piece(state))
    if locked.clearing_layers:
        return replace(locked, combo_streak=state.combo_streak + 1)
    return replace(locked, combo_streak=0)
