"""
Collision
=========

Validates piece placements against board occupancy and vertical bounds.
A placement is accepted only if every one of its cells is valid.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from cyltris.tower_core.board import Board, CellContent, CellCoord
from cyltris.tower_core.pieces import (
    ActivePiece,
    RotationDirection,
    get_world_blocks,
    rotate_orientation,
)


REASON_OUT_OF_BOUNDS = "out_of_bounds"
REASON_OCCUPIED = "occupied"


def check_placement(
    board: Board,
    blocks: Iterable[CellCoord]
) -> Tuple[Optional[str], Tuple[CellCoord, ...]]:
    """
    Classify a set of world cells.

    Bounds are checked before occupancy, so a placement that is both out of
    bounds and overlapping reports out_of_bounds.

    Args:
        board: Board to test against.
        blocks: World cells (x already wrapped).

    Returns:
        (reason, offending_cells). reason is None when the placement is valid.
    """
    blocks = tuple(blocks)
    height = board.height

    out_of_bounds = tuple(cell for cell in blocks if cell.y < 0 or cell.y >= height)
    if out_of_bounds:
        return REASON_OUT_OF_BOUNDS, out_of_bounds

    occupied = tuple(cell for cell in blocks if board.get_cell(cell) != CellContent.EMPTY)
    if occupied:
        return REASON_OCCUPIED, occupied

    return None, ()


def can_place_piece(board: Board, piece: ActivePiece) -> bool:
    """True if every cell of the piece is on the board and empty."""
    reason, _ = check_placement(board, get_world_blocks(piece, board.dimensions))
    return reason is None


def can_move(board: Board, piece: ActivePiece, dx: int, dy: int) -> bool:
    """True if the piece can be translated by (dx, dy)."""
    return can_place_piece(board, piece.moved(dx, dy))


def can_rotate(board: Board, piece: ActivePiece, direction: RotationDirection) -> bool:
    """True if the piece can turn one step in place."""
    return can_place_piece(board, piece.rotated(rotate_orientation(piece.orientation, direction)))


def is_grounded(board: Board, piece: ActivePiece) -> bool:
    """True if the piece cannot move one cell down without colliding."""
    return not can_move(board, piece, 0, -1)
