"""
Tests for renderer snapshots.
"""

from dataclasses import replace

import numpy as np
import pytest

from cyltris.tower_core.board import CellCoord
from cyltris.tower_core.config_loader import load_config
from cyltris.tower_core.pieces import get_world_blocks
from cyltris.tower_core.state import create_initial_game_state
from cyltris.tower_core.state_snapshot import SnapshotBuilder
from cyltris.tower_core.tick import start_game, tick


@pytest.fixture
def config():
    return load_config(overrides={"board": {"width": 10, "height": 12}})


@pytest.fixture
def builder(config):
    return SnapshotBuilder(config)


@pytest.fixture
def running(config):
    state = start_game(create_initial_game_state(config, seed=3))
    return replace(state, board=state.board.with_blocks([CellCoord(0, 0), CellCoord(9, 0), CellCoord(9, 1)]))


class TestSnapshotArrays:
    """Shapes, dtypes and isolation."""

    def test_board_grid(self, builder, running):
        snap = builder.build(running)
        assert snap.board.shape == (12, 10)
        assert snap.board.dtype == np.int8
        np.testing.assert_array_equal(snap.board, running.board.cells)
        np.testing.assert_array_equal(snap.column_heights, running.board.column_heights())

    def test_arrays_are_read_only(self, builder, running):
        snap = builder.build(running)
        for array in (snap.board, snap.active_cells, snap.ghost_cells, snap.column_heights):
            assert not array.flags.writeable
        with pytest.raises(ValueError):
            snap.board[0, 0] = 1

    def test_snapshots_do_not_alias(self, builder, running):
        """Each snapshot owns its arrays."""
        first = builder.build(running)
        second = builder.build(running)
        assert not np.shares_memory(first.board, second.board)
        assert not np.shares_memory(first.board, running.board.cells)

    def test_active_and_ghost_cells(self, builder, running):
        snap = builder.build(running)
        blocks = get_world_blocks(running.current_piece, running.dimensions)

        assert snap.active_cells.shape == (4, 2)
        assert {tuple(row) for row in snap.active_cells.tolist()} == {tuple(c) for c in blocks}
        assert snap.ghost_cells.shape == (4, 2)
        assert snap.ghost_cells[:, 1].min() == 0

    def test_no_piece(self, builder, config):
        snap = builder.build(create_initial_game_state(config, seed=3))
        assert snap.active_cells.shape == (0, 2)
        assert snap.ghost_cells.shape == (0, 2)
        assert snap.piece_type is None


class TestSnapshotScalars:
    """HUD values."""

    def test_hud_values(self, builder, running, config):
        snap = builder.build(replace(running, score=1200, level=3, lines_cleared=25, combo_streak=2))
        assert snap.score == 1200
        assert snap.level == 3
        assert snap.lines_cleared == 25
        assert snap.combo_streak == 2
        assert snap.status == "running"
        assert snap.piece_type == running.current_piece.type.value
        assert list(snap.next_pieces) == [p.value for p in running.next_pieces]
        assert len(snap.next_pieces) == config.rng.queue_size

    def test_fall_progress_fraction(self, builder, running):
        snap = builder.build(tick(running, 250))
        assert snap.fall_progress == pytest.approx(0.25)
        assert snap.fall_interval_ms == 1000

    def test_lock_progress(self, builder, running):
        fs = running.fall_state
        landed = replace(running, fall_state=replace(fs, landed=True, lock_time_ms=100, lock_elapsed_ms=400))
        snap = builder.build(landed)
        assert snap.lock_active
        assert snap.lock_progress == pytest.approx(0.8)
        assert snap.lock_remaining_ms == 100

    def test_to_dict(self, builder, running):
        data = builder.build(running).to_dict()
        assert data["status"] == "running"
        assert data["board"].shape == (12, 10)
        assert isinstance(data["next_pieces"], list)
        assert data["clearing_layers"] == []

    def test_preview_count(self, config, running):
        snap = SnapshotBuilder(config, preview_count=8).build(running)
        assert list(snap.next_pieces) == [p.value for p in running.piece_queue.peek(8)]
