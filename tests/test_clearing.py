"""
Tests for line clearing and row collapse.
"""

from dataclasses import replace

import pytest

from cyltris.tower_core.board import Board, CellContent, CellCoord
from cyltris.tower_core.clearing import (
    begin_clearing_phase,
    collapse_cleared_layers,
    commit_piece,
    complete_clearing_phase,
    find_full_layers,
)
from cyltris.tower_core.config_loader import load_config
from cyltris.tower_core.pieces import ActivePiece, PieceOrientation, PieceType
from cyltris.tower_core.scoring import get_fall_interval_ms
from cyltris.tower_core.state import GameStatus, create_initial_game_state


@pytest.fixture
def small_config():
    return load_config(overrides={"board": {"width": 3, "height": 4}})


@pytest.fixture
def config():
    return load_config(overrides={
        "board": {"width": 6, "height": 10},
        "leveling": {"lines_per_level": 2},
    })


def running_with_board(config, rows):
    state = create_initial_game_state(config, seed=8)
    return replace(state, board=Board.from_rows(rows), game_status=GameStatus.RUNNING)


class TestCollapse:
    """Row removal."""

    def test_three_by_four_example(self, small_config):
        """Rows 0 and 3 full plus one block at (0, 1): the block ends up at (0, 0)."""
        state = running_with_board(small_config, [
            "###",
            "...",
            "#..",
            "###",
        ])

        clearing = begin_clearing_phase(state)
        assert clearing.game_status == GameStatus.CLEARING
        assert clearing.clearing_layers == (0, 3)

        done = complete_clearing_phase(clearing)
        assert done.board.get_cell(CellCoord(0, 0)) == CellContent.BLOCK
        assert done.board.count_blocks() == 1
        assert done.lines_cleared == state.lines_cleared + 2
        assert find_full_layers(done.board) == ()
        assert done.clearing_layers == ()
        assert done.game_status != GameStatus.CLEARING

    def test_collapse_keeps_row_order(self):
        board = Board.from_rows([
            "#..",
            "###",
            ".#.",
            "###",
            "..#",
        ])
        collapsed = collapse_cleared_layers(board, (1, 3))
        assert collapsed.to_text() == "...\n...\n#..\n.#.\n..#"

    def test_collapse_does_not_touch_input(self):
        board = Board.from_rows(["###", "#.."])
        collapse_cleared_layers(board, (1,))
        assert board.count_blocks() == 4

    def test_no_full_rows(self, config):
        """Without full rows the state keeps running."""
        state = running_with_board(config, ["......"] * 9 + ["##.###"])
        after = begin_clearing_phase(state)
        assert after.game_status == GameStatus.RUNNING
        assert after.clearing_layers == ()

    def test_complete_without_pending_is_noop(self, config):
        state = running_with_board(config, ["......"] * 10)
        assert complete_clearing_phase(state) is state


class TestClearingRewards:
    """Score, lines, level and speed after a clear."""

    def test_score_and_level_up(self, config):
        """Two lines at level 1 score a double and reach level 2."""
        state = running_with_board(config, ["......"] * 8 + ["######", "######"])
        done = complete_clearing_phase(begin_clearing_phase(state))

        assert done.score == config.scoring.double
        assert done.lines_cleared == 2
        assert done.level == 2
        assert done.timing.fall_interval_ms == get_fall_interval_ms(2, config.fall_speed)
        assert done.current_piece is not None
        assert done.game_status == GameStatus.RUNNING

    def test_score_uses_level_before_clear(self, config):
        """The level reached by a clear only applies to later clears."""
        state = replace(
            running_with_board(config, ["......"] * 9 + ["######"]),
            level=3,
            lines_cleared=5
        )
        done = complete_clearing_phase(begin_clearing_phase(state))
        assert done.score == config.scoring.single * 3
        assert done.level == 4


class TestCommitPiece:
    """Lock + clear + combo bookkeeping."""

    def _state_with_gap(self, config, combo):
        state = running_with_board(config, ["......"] * 9 + ["##..##"])
        piece = ActivePiece(PieceType.O, PieceOrientation.DEG_0, CellCoord(1, 0))
        return replace(state, current_piece=piece, combo_streak=combo)

    def test_lock_filling_row_extends_combo(self, config):
        state = self._state_with_gap(config, combo=2)
        after = commit_piece(state)

        assert after.current_piece is None
        assert after.game_status == GameStatus.CLEARING
        assert after.clearing_layers == (0,)
        assert after.combo_streak == 3

        done = complete_clearing_phase(after)
        assert done.score == config.scoring.single + config.scoring.combo_bonus * 2

    def test_lock_without_rows_resets_combo(self, config):
        state = self._state_with_gap(config, combo=2)
        state = replace(state, current_piece=ActivePiece(PieceType.O, PieceOrientation.DEG_0, CellCoord(1, 5)))
        after = commit_piece(state)

        assert after.combo_streak == 0
        assert after.game_status == GameStatus.RUNNING
        assert after.board.count_blocks() == 8
