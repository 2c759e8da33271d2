"""
Game Rules
==========

Handles spawn positioning, committing a piece to the board, and the
spawn-collision game over condition.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from cyltris.tower_core.board import BoardDimensions, CellContent, CellCoord, wrap_x
from cyltris.tower_core.collision import can_place_piece
from cyltris.tower_core.lock_delay import airborne_fall_state
from cyltris.tower_core.pieces import (
    ActivePiece,
    PieceOrientation,
    PieceType,
    get_world_blocks,
    shape_top_row,
)
from cyltris.tower_core.state import GameState, GameStatus


def get_spawn_position(
    piece_type: PieceType,
    dimensions: BoardDimensions,
    column_hint: Optional[int] = None
) -> CellCoord:
    """
    Base position for a newly spawned piece.

    The column is the board center unless a hint is given (wrapped into
    range). The row puts the top of the spawn-orientation shape on the
    topmost board row.
    """
    width, height = dimensions
    if column_hint is None:
        x = width // 2
    else:
        x = wrap_x(column_hint, width)
    y = height - 1 - shape_top_row(piece_type, PieceOrientation.DEG_0)
    return CellCoord(x, y)


def spawn_next_piece(state: GameState) -> GameState:
    """
    Take the next piece from the queue and place it at the spawn position.

    On success the status becomes Running with a fresh lock-delay state.
    The fall accumulator keeps its remainder. If the spawn position
    collides the game is over.
    """
    piece_type, queue = state.piece_queue.get_next_piece()
    piece = ActivePiece(
        type=piece_type,
        orientation=PieceOrientation.DEG_0,
        position=get_spawn_position(piece_type, state.board.dimensions, state.spawn_column_hint)
    )

    if not can_place_piece(state.board, piece):
        return replace(
            state,
            piece_queue=queue,
            current_piece=None,
            game_status=GameStatus.GAME_OVER
        )

    return replace(
        state,
        piece_queue=queue,
        current_piece=piece,
        game_status=GameStatus.RUNNING,
        fall_state=airborne_fall_state(state.config.lock_delay.delay_ms)
    )


def lock_current_piece(state: GameState) -> GameState:
    """
    Write the active piece into a copy of the board and drop the piece.

    Cells whose row falls outside the board are skipped. Lock-delay state is
    reset to airborne. No-op without an active piece.
    """
    piece = state.current_piece
    if piece is None:
        return state

    board = state.board.clone()
    for block in get_world_blocks(piece, board.dimensions):
        if block.y < 0 or block.y >= board.height:
            continue
        board.set_cell(block, CellContent.BLOCK)

    return replace(
        state,
        board=board,
        current_piece=None,
        fall_state=airborne_fall_state(state.fall_state.lock_delay_ms)
    )
