"""
Tests for spawn placement and locking.
"""

from dataclasses import replace

import pytest

from cyltris.tower_core.board import BoardDimensions, CellContent, CellCoord
from cyltris.tower_core.config_loader import load_config
from cyltris.tower_core.lock_delay import land
from cyltris.tower_core.pieces import ActivePiece, PieceOrientation, PieceType
from cyltris.tower_core.rules import get_spawn_position, lock_current_piece, spawn_next_piece
from cyltris.tower_core.state import GameStatus, create_initial_game_state


@pytest.fixture
def config():
    return load_config(overrides={"board": {"width": 10, "height": 12}})


@pytest.fixture
def state(config):
    return create_initial_game_state(config, seed=6)


class TestSpawnPosition:
    """Where new pieces appear."""

    def test_center_column(self):
        assert get_spawn_position(PieceType.T, BoardDimensions(10, 12)) == CellCoord(5, 10)

    def test_column_hint_wraps(self):
        assert get_spawn_position(PieceType.O, BoardDimensions(10, 12), column_hint=23).x == 3
        assert get_spawn_position(PieceType.O, BoardDimensions(10, 12), column_hint=-1).x == 9

    def test_hint_from_config(self):
        config = load_config(overrides={"board": {"width": 10, "height": 12}, "spawn": {"column_hint": 2}})
        spawned = spawn_next_piece(create_initial_game_state(config, seed=6))
        assert spawned.current_piece.position.x == 2


class TestSpawnNextPiece:
    """Queue consumption and game over."""

    def test_spawn_consumes_queue(self, state):
        expected, advanced = state.piece_queue.get_next_piece()
        spawned = spawn_next_piece(state)
        assert spawned.current_piece.type == expected
        assert spawned.piece_queue == advanced
        assert spawned.game_status == GameStatus.RUNNING
        assert not spawned.fall_state.landed

    def test_spawn_keeps_fall_progress(self, state):
        progressed = replace(state, timing=replace(state.timing, fall_progress_ms=420.0))
        spawned = spawn_next_piece(progressed)
        assert spawned.timing == progressed.timing

    def test_spawn_collision(self, state):
        full = state.board.with_blocks(CellCoord(x, y) for x in range(10) for y in range(12))
        over = spawn_next_piece(replace(state, board=full))
        assert over.game_status == GameStatus.GAME_OVER
        assert over.current_piece is None


class TestLock:
    """Writing the piece into the board."""

    def test_lock_writes_cells(self, state):
        piece = ActivePiece(PieceType.O, PieceOrientation.DEG_0, CellCoord(3, 0))
        running = replace(state, current_piece=piece, game_status=GameStatus.RUNNING)
        locked = lock_current_piece(replace(running, fall_state=land(running.fall_state)))

        assert locked.current_piece is None
        assert not locked.fall_state.landed
        assert {tuple(c) for c in locked.board.iter_blocks()} == {(4, 0), (5, 0), (4, 1), (5, 1)}
        assert running.board.count_blocks() == 0

    def test_lock_skips_rows_off_board(self, state):
        """Cells outside the board rows are dropped silently."""
        piece = ActivePiece(PieceType.O, PieceOrientation.DEG_0, CellCoord(3, -1))
        locked = lock_current_piece(replace(state, current_piece=piece))
        assert locked.board.count_blocks() == 2
        assert locked.board.get_cell(CellCoord(4, 0)) == CellContent.BLOCK

    def test_lock_without_piece(self, state):
        assert lock_current_piece(state) is state
