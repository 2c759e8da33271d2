"""
Board
=====

Cylindrical grid storage. Column indices wrap modulo the board width;
row indices are bounded to [0, height).
"""

from __future__ import annotations

from enum import IntEnum
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional

import numpy as np


class CellContent(IntEnum):
    """Content of a single board cell."""
    EMPTY = 0
    BLOCK = 1


class CellCoord(NamedTuple):
    """Cell address: x is the sector around the cylinder, y the level."""
    x: int
    y: int


class BoardDimensions(NamedTuple):
    """Width is the circumference, height the number of levels."""
    width: int
    height: int


def wrap_x(x: int, width: int) -> int:
    """
    Normalize a column index into [0, width).

    Raises:
        ValueError: If width is not positive.
    """
    if width <= 0:
        raise ValueError(f"Board width must be positive for wrap_x, got {width}")
    return x % width


def is_inside_board(coord: CellCoord, dimensions: BoardDimensions) -> bool:
    """True if the row lies in range. Any column is valid after wrapping."""
    width, height = dimensions
    if width <= 0 or height <= 0:
        return False
    return 0 <= coord.y < height


def get_neighbors(
    coord: CellCoord,
    dimensions: BoardDimensions
) -> Dict[str, CellCoord]:
    """
    Neighbors of a cell on the cylinder.

    Left and right always exist (they wrap). Down and up are present only
    when the neighboring row is on the board.
    """
    width, height = dimensions
    neighbors: Dict[str, CellCoord] = {}
    if width > 0:
        neighbors["left"] = CellCoord(wrap_x(coord.x - 1, width), coord.y)
        neighbors["right"] = CellCoord(wrap_x(coord.x + 1, width), coord.y)
    if coord.y > 0:
        neighbors["down"] = CellCoord(coord.x, coord.y - 1)
    if coord.y + 1 < height:
        neighbors["up"] = CellCoord(coord.x, coord.y + 1)
    return neighbors


class Board:
    """
    Grid of width x height cells backed by a numpy array indexed [y, x].

    Engine code treats a Board as a value: anything that needs to write
    calls clone() first and hands the copy to the new state, so a board
    held by an older state is never touched.
    """

    def __init__(self, cells: np.ndarray):
        """
        Wrap an existing cell array. Prefer create_empty() or from_rows().

        Args:
            cells: int8 array of shape (height, width).
        """
        if cells.ndim != 2 or cells.shape[0] <= 0 or cells.shape[1] <= 0:
            raise ValueError(f"Board cells must be a non-empty 2D array, got shape {cells.shape}")
        self._cells = cells

    @classmethod
    def create_empty(cls, width: int, height: int) -> "Board":
        """
        Create an empty board.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Board dimensions must be positive, got {width}x{height}")
        return cls(np.zeros((height, width), dtype=np.int8))

    @classmethod
    def from_rows(cls, rows: List[str]) -> "Board":
        """
        Build a board from text rows, top row first ('#' = block, '.' = empty).

        Handy for tests and debugging.
        """
        height = len(rows)
        width = len(rows[0]) if rows else 0
        board = cls.create_empty(width, height)
        for i, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"Row {i} has length {len(row)}, expected {width}")
            y = height - 1 - i
            for x, char in enumerate(row):
                if char == "#":
                    board._cells[y, x] = CellContent.BLOCK
        return board

    @property
    def width(self) -> int:
        return int(self._cells.shape[1])

    @property
    def height(self) -> int:
        return int(self._cells.shape[0])

    @property
    def dimensions(self) -> BoardDimensions:
        return BoardDimensions(self.width, self.height)

    @property
    def cells(self) -> np.ndarray:
        """Read-only view of the cell array, indexed [y, x]."""
        view = self._cells.view()
        view.flags.writeable = False
        return view

    def _check_row(self, y: int) -> int:
        if y < 0 or y >= self.height:
            raise IndexError(f"Row out of bounds: {y} (height {self.height})")
        return y

    def get_cell(self, coord: CellCoord) -> CellContent:
        """
        Read a cell. x wraps, y must be on the board.

        Raises:
            IndexError: If y is outside [0, height).
        """
        y = self._check_row(coord.y)
        return CellContent(int(self._cells[y, wrap_x(coord.x, self.width)]))

    def set_cell(self, coord: CellCoord, content: CellContent) -> None:
        """
        Write a cell in place. Only call this on a board you own (a clone).

        Raises:
            IndexError: If y is outside [0, height).
        """
        y = self._check_row(coord.y)
        self._cells[y, wrap_x(coord.x, self.width)] = content

    def is_empty(self, coord: CellCoord) -> bool:
        return self.get_cell(coord) == CellContent.EMPTY

    def is_layer_full(self, y: int) -> bool:
        """True if every column of row y holds a block."""
        y = self._check_row(y)
        return bool(np.all(self._cells[y] != CellContent.EMPTY))

    def clear_layer(self, y: int) -> None:
        """Empty row y in place."""
        y = self._check_row(y)
        self._cells[y].fill(CellContent.EMPTY)

    def clone(self) -> "Board":
        """Independent copy with its own storage."""
        return Board(self._cells.copy())

    def count_blocks(self) -> int:
        return int(np.count_nonzero(self._cells))

    def iter_blocks(self) -> Iterator[CellCoord]:
        """Yield the coordinates of every filled cell, bottom row first."""
        ys, xs = np.nonzero(self._cells)
        for y, x in zip(ys.tolist(), xs.tolist()):
            yield CellCoord(x, y)

    def column_heights(self) -> np.ndarray:
        """Per-column stack height (index of the highest block + 1, 0 if empty)."""
        filled = self._cells != CellContent.EMPTY
        any_filled = filled.any(axis=0)
        top = self.height - np.argmax(filled[::-1, :], axis=0)
        return np.where(any_filled, top, 0).astype(np.int16)

    def with_blocks(self, coords: Iterable[CellCoord]) -> "Board":
        """Return a copy with the given cells filled (rows off the board are skipped)."""
        board = self.clone()
        for coord in coords:
            if 0 <= coord.y < board.height:
                board.set_cell(coord, CellContent.BLOCK)
        return board

    def to_text(self, overlay: Optional[Iterable[CellCoord]] = None) -> str:
        """Render as text rows, top first. Overlay cells are drawn as '@'."""
        marks = {CellCoord(wrap_x(c.x, self.width), c.y) for c in (overlay or ())}
        lines = []
        for y in range(self.height - 1, -1, -1):
            chars = []
            for x in range(self.width):
                if CellCoord(x, y) in marks:
                    chars.append("@")
                elif self._cells[y, x] != CellContent.EMPTY:
                    chars.append("#")
                else:
                    chars.append(".")
            lines.append("".join(chars))
        return "\n".join(lines)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return np.array_equal(self._cells, other._cells)

    def __hash__(self) -> int:
        return hash((self._cells.shape, self._cells.tobytes()))

    def __repr__(self) -> str:
        return f"Board({self.width}x{self.height}, blocks={self.count_blocks()})"
