"""
Piece Catalog
=============

Piece types, their shapes in a local 4x4 frame, and orientation handling.

Local frame: (0, 0) is the bottom-left of the 4x4 chunk and y grows upward.
Rotation is clockwise about the chunk center, without wall kicks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Dict, Tuple

from cyltris.tower_core.board import BoardDimensions, CellCoord, wrap_x


GRID_SIZE = 4


class PieceType(str, Enum):
    """The seven tetromino types."""
    I = "I"
    O = "O"
    T = "T"
    S = "S"
    Z = "Z"
    J = "J"
    L = "L"


ALL_PIECE_TYPES: Tuple[PieceType, ...] = tuple(PieceType)


class PieceOrientation(IntEnum):
    """Quarter turns clockwise from the spawn orientation."""
    DEG_0 = 0
    DEG_90 = 1
    DEG_180 = 2
    DEG_270 = 3


class RotationDirection(Enum):
    CLOCKWISE = "cw"
    COUNTER_CLOCKWISE = "ccw"


Shape = Tuple[CellCoord, ...]


BASE_PIECE_SHAPES: Dict[PieceType, Shape] = {
    PieceType.I: (CellCoord(0, 1), CellCoord(1, 1), CellCoord(2, 1), CellCoord(3, 1)),
    PieceType.O: (CellCoord(1, 0), CellCoord(2, 0), CellCoord(1, 1), CellCoord(2, 1)),
    PieceType.T: (CellCoord(1, 0), CellCoord(0, 1), CellCoord(1, 1), CellCoord(2, 1)),
    PieceType.S: (CellCoord(1, 0), CellCoord(2, 0), CellCoord(0, 1), CellCoord(1, 1)),
    PieceType.Z: (CellCoord(0, 0), CellCoord(1, 0), CellCoord(1, 1), CellCoord(2, 1)),
    PieceType.J: (CellCoord(0, 0), CellCoord(0, 1), CellCoord(1, 1), CellCoord(2, 1)),
    PieceType.L: (CellCoord(2, 0), CellCoord(0, 1), CellCoord(1, 1), CellCoord(2, 1)),
}


def _rotate_cell(cell: CellCoord, orientation: PieceOrientation) -> CellCoord:
    """Rotate a local cell clockwise by the given number of quarter turns."""
    x, y = cell
    if orientation == PieceOrientation.DEG_0:
        return cell
    if orientation == PieceOrientation.DEG_90:
        return CellCoord(GRID_SIZE - 1 - y, x)
    if orientation == PieceOrientation.DEG_180:
        return CellCoord(GRID_SIZE - 1 - x, GRID_SIZE - 1 - y)
    if orientation == PieceOrientation.DEG_270:
        return CellCoord(y, GRID_SIZE - 1 - x)
    raise ValueError(f"Unknown orientation: {orientation!r}")


def _build_orientation_table() -> Dict[Tuple[PieceType, PieceOrientation], Shape]:
    """Precompute every type x orientation shape; fails fast on a missing type."""
    table: Dict[Tuple[PieceType, PieceOrientation], Shape] = {}
    for piece_type in PieceType:
        if piece_type not in BASE_PIECE_SHAPES:
            raise ValueError(f"No base shape defined for piece type {piece_type.value}")
        base = BASE_PIECE_SHAPES[piece_type]
        for orientation in PieceOrientation:
            if piece_type == PieceType.O:
                # O is symmetric; rotating it would shift it inside the chunk
                table[(piece_type, orientation)] = base
            else:
                table[(piece_type, orientation)] = tuple(
                    _rotate_cell(cell, orientation) for cell in base
                )
    return table


PIECE_ORIENTATIONS = _build_orientation_table()


def get_piece_blocks(piece_type: PieceType, orientation: PieceOrientation) -> Shape:
    """Local cells of a piece type in the given orientation."""
    return PIECE_ORIENTATIONS[(piece_type, PieceOrientation(orientation))]


def rotate_orientation(
    orientation: PieceOrientation,
    direction: RotationDirection
) -> PieceOrientation:
    """Advance (clockwise) or retreat (counter-clockwise) one quarter turn."""
    step = 1 if direction == RotationDirection.CLOCKWISE else 3
    return PieceOrientation((int(orientation) + step) % 4)


@dataclass(frozen=True)
class ActivePiece:
    """The falling piece: type, orientation and base position of its 4x4 chunk."""
    type: PieceType
    orientation: PieceOrientation
    position: CellCoord

    def moved(self, dx: int, dy: int) -> "ActivePiece":
        return replace(self, position=CellCoord(self.position.x + dx, self.position.y + dy))

    def rotated(self, orientation: PieceOrientation) -> "ActivePiece":
        return replace(self, orientation=PieceOrientation(orientation))

    @property
    def local_blocks(self) -> Shape:
        return get_piece_blocks(self.type, self.orientation)

    def __repr__(self) -> str:
        return (
            f"ActivePiece({self.type.value}, rot={int(self.orientation)}, "
            f"x={self.position.x}, y={self.position.y})"
        )


def get_world_blocks(piece: ActivePiece, dimensions: BoardDimensions) -> Tuple[CellCoord, ...]:
    """
    Absolute cells covered by a piece.

    x wraps around the cylinder; y is left unwrapped so cells above or below
    the board stay representable and can be rejected at the boundary.

    Raises:
        ValueError: If the board width is not positive.
    """
    width = dimensions.width
    if width <= 0:
        raise ValueError(f"Board width must be positive for world projection, got {width}")
    px, py = piece.position
    return tuple(
        CellCoord(wrap_x(px + cell.x, width), py + cell.y)
        for cell in piece.local_blocks
    )


def shape_top_row(piece_type: PieceType, orientation: PieceOrientation = PieceOrientation.DEG_0) -> int:
    """Highest local row used by a shape."""
    return max(cell.y for cell in get_piece_blocks(piece_type, orientation))
