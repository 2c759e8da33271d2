"""
Tests for the landing property: pieces dropped onto flat support leave no
floating blocks, through soft drops, hard drops and line clears.

Overhanging shapes (T, S, Z, J, L) and pieces straddling columns of
different heights can legitimately leave gaps, so these runs use a
vertical I (one column wide) and O pieces aligned to column pairs.
"""

import random
from dataclasses import replace

import pytest

from cyltris.tower_core.board import CellCoord
from cyltris.tower_core.clearing import complete_clearing_phase
from cyltris.tower_core.collision import can_place_piece, is_grounded
from cyltris.tower_core.commands import GameCommand, apply_command
from cyltris.tower_core.config_loader import load_config
from cyltris.tower_core.invariants import find_unsupported_blocks
from cyltris.tower_core.lock_delay import airborne_fall_state
from cyltris.tower_core.pieces import ActivePiece, PieceOrientation, PieceType, shape_top_row
from cyltris.tower_core.state import GameStatus, create_initial_game_state
from cyltris.tower_core.tick import tick


@pytest.fixture
def config():
    return load_config(overrides={"board": {"width": 8, "height": 16}})


def place(state, piece):
    return replace(
        state,
        current_piece=piece,
        game_status=GameStatus.RUNNING,
        fall_state=airborne_fall_state(state.config.lock_delay.delay_ms)
    )


def drop(state, rng):
    """Lock the active piece by hard drop or by soft drops plus gravity."""
    if rng.random() < 0.5:
        return apply_command(state, GameCommand.HARD_DROP)

    while not is_grounded(state.board, state.current_piece):
        state = apply_command(state, GameCommand.SOFT_DROP)
    return tick(state, state.timing.fall_interval_ms)


def run_drops(state, rng, make_piece, drops):
    for _ in range(drops):
        piece = make_piece(state)
        if not can_place_piece(state.board, piece):
            break

        state = drop(place(state, piece), rng)
        assert state.current_piece is None
        assert find_unsupported_blocks(state.board) == ()

        if state.game_status == GameStatus.CLEARING:
            state = complete_clearing_phase(state)
            assert find_unsupported_blocks(state.board) == ()
    return state


class TestLanding:
    """No floating blocks after landing."""

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_vertical_i_drops(self, config, seed):
        rng = random.Random(seed)
        state = create_initial_game_state(config, seed=seed)
        top = config.board.height - 1 - shape_top_row(PieceType.I, PieceOrientation.DEG_90)

        def make_piece(state):
            heights = state.board.column_heights()
            low = [x for x in range(config.board.width) if heights[x] <= heights.min() + 4]
            column = rng.choice(low)
            # Vertical I occupies local column 2
            return ActivePiece(PieceType.I, PieceOrientation.DEG_90, CellCoord(column - 2, top))

        state = run_drops(state, rng, make_piece, 200)
        assert state.lines_cleared > 0

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_aligned_o_drops(self, config, seed):
        rng = random.Random(seed)
        state = create_initial_game_state(config, seed=seed)
        top = config.board.height - 1 - shape_top_row(PieceType.O)

        def make_piece(state):
            heights = state.board.column_heights()
            low = [x for x in range(0, config.board.width, 2) if heights[x] <= heights.min() + 2]
            column = rng.choice(low)
            # O occupies local columns 1-2
            return ActivePiece(PieceType.O, PieceOrientation.DEG_0, CellCoord(column - 1, top))

        state = run_drops(state, rng, make_piece, 200)
        assert state.lines_cleared > 0

    def test_horizontal_i_on_flat_floor(self, config):
        """Flat pieces side by side on a flat floor fill a row cleanly."""
        rng = random.Random(5)
        state = create_initial_game_state(config, seed=5)
        top = config.board.height - 1 - shape_top_row(PieceType.I)
        columns = iter([0, 4])

        def make_piece(state):
            return ActivePiece(PieceType.I, PieceOrientation.DEG_0, CellCoord(next(columns), top))

        state = run_drops(state, rng, make_piece, 2)
        assert state.lines_cleared == 1
        assert state.board.count_blocks() == 0
