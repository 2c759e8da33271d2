"""
Movement
========

Single entry point for translating and rotating the active piece.

Every position or orientation change of the active piece goes through
try_move_piece, so the no-overlap and in-bounds checks live in one place.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from cyltris.tower_core.board import CellCoord
from cyltris.tower_core.collision import can_move, check_placement
from cyltris.tower_core.pieces import (
    ActivePiece,
    PieceOrientation,
    RotationDirection,
    get_world_blocks,
    rotate_orientation,
)
from cyltris.tower_core.state import GameState


@dataclass(frozen=True)
class MoveRequest:
    """Translation by (dx, dy) combined with rotation in quarter turns (+ = clockwise)."""
    dx: float = 0
    dy: float = 0
    rotation: float = 0


@dataclass(frozen=True)
class MoveResult:
    """
    Outcome of a move attempt.

    On rejection state is the original state, reason is "out_of_bounds" or
    "occupied" and cells lists the offending world cells. reason is None when
    there was no active piece to move.
    """
    state: GameState
    moved: bool
    reason: Optional[str] = None
    cells: Tuple[CellCoord, ...] = ()


def normalize_rotation_steps(raw: float) -> int:
    """
    Reduce a rotation request to the range -1..2 quarter turns.

    Full turns cancel out; three clockwise turns become one counter-clockwise.
    Non-finite input counts as no rotation.
    """
    if raw is None or not math.isfinite(raw):
        return 0
    steps = int(math.floor(raw + 0.5)) % 4
    return steps - 4 if steps > 2 else steps


def _normalize_offset(raw: float) -> int:
    """Whole-cell offset, rounded half up; non-finite input is no offset."""
    if raw is None or not math.isfinite(raw):
        return 0
    return int(math.floor(raw + 0.5))


def apply_rotation_steps(orientation: PieceOrientation, steps: int) -> PieceOrientation:
    direction = RotationDirection.CLOCKWISE if steps >= 0 else RotationDirection.COUNTER_CLOCKWISE
    result = orientation
    for _ in range(abs(steps)):
        result = rotate_orientation(result, direction)
    return result


def try_move_piece(state: GameState, move: MoveRequest) -> MoveResult:
    """
    Attempt to translate and rotate the active piece in one step.

    The candidate is validated as a whole: first vertical bounds, then
    occupancy after horizontal wrap. Nothing is applied partially.

    Args:
        state: Current game state.
        move: Requested translation and rotation.

    Returns:
        MoveResult with the new state on success, or the unchanged state
        plus the rejection reason and offending cells.
    """
    piece = state.current_piece
    if piece is None:
        return MoveResult(state=state, moved=False)

    steps = normalize_rotation_steps(move.rotation)
    candidate = ActivePiece(
        type=piece.type,
        orientation=apply_rotation_steps(piece.orientation, steps),
        position=CellCoord(
            piece.position.x + _normalize_offset(move.dx),
            piece.position.y + _normalize_offset(move.dy)
        )
    )

    blocks = get_world_blocks(candidate, state.board.dimensions)
    reason, cells = check_placement(state.board, blocks)
    if reason is not None:
        return MoveResult(state=state, moved=False, reason=reason, cells=cells)

    return MoveResult(state=replace(state, current_piece=candidate), moved=True)


def try_translate_piece(state: GameState, dx: int, dy: int) -> MoveResult:
    """Pure translation through the unified movement path."""
    return try_move_piece(state, MoveRequest(dx=dx, dy=dy))


def compute_hard_drop_position(state: GameState) -> Optional[ActivePiece]:
    """
    Lowest reachable position straight below the active piece.

    Returns:
        The landed piece, or None if there is no active piece.
    """
    piece = state.current_piece
    if piece is None:
        return None
    landed = piece
    while can_move(state.board, landed, 0, -1):
        landed = landed.moved(0, -1)
    return landed
