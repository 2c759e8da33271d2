"""
Tests for player commands.
"""

from dataclasses import replace

import pytest

from cyltris.tower_core.board import CellCoord
from cyltris.tower_core.collision import can_move
from cyltris.tower_core.commands import GameCommand, apply_command, apply_command_detailed
from cyltris.tower_core.config_loader import load_config
from cyltris.tower_core.movement import compute_hard_drop_position
from cyltris.tower_core.pieces import ActivePiece, PieceOrientation, PieceType, get_world_blocks
from cyltris.tower_core.state import GameStatus, create_initial_game_state
from cyltris.tower_core.tick import start_game


@pytest.fixture
def config():
    return load_config(overrides={"board": {"width": 8, "height": 16}})


@pytest.fixture
def idle(config):
    return create_initial_game_state(config, seed=21)


@pytest.fixture
def running(idle):
    return replace(
        idle,
        current_piece=ActivePiece(PieceType.T, PieceOrientation.DEG_0, CellCoord(3, 10)),
        game_status=GameStatus.RUNNING
    )


class TestMovementCommands:
    """Translate, rotate, drop."""

    def test_move_left_right(self, running):
        left = apply_command(running, GameCommand.MOVE_LEFT)
        right = apply_command(running, GameCommand.MOVE_RIGHT)
        assert left.current_piece.position == CellCoord(2, 10)
        assert right.current_piece.position == CellCoord(4, 10)

    def test_rotations(self, running):
        cw = apply_command(running, GameCommand.ROTATE_CW)
        ccw = apply_command(running, GameCommand.ROTATE_CCW)
        assert cw.current_piece.orientation == PieceOrientation.DEG_90
        assert ccw.current_piece.orientation == PieceOrientation.DEG_270

    def test_soft_drop(self, running):
        after = apply_command(running, GameCommand.SOFT_DROP)
        assert after.current_piece.position == CellCoord(3, 9)

    def test_accepts_plain_strings(self, running):
        after = apply_command(running, "move_left")
        assert after.current_piece.position == CellCoord(2, 10)

    def test_rejected_move_keeps_state(self, running):
        """A blocked command returns the same state and reports why."""
        grounded = replace(running, current_piece=compute_hard_drop_position(running))
        result = apply_command_detailed(grounded, GameCommand.SOFT_DROP)

        assert result.state is grounded
        assert not result.move.moved
        assert result.move.reason == "out_of_bounds"


class TestHardDrop:
    """Instant drop and lock."""

    def test_hard_drop_lands_and_locks(self, running):
        """The piece locks at the lowest row where another step would collide."""
        expected = compute_hard_drop_position(running)
        after = apply_command(running, GameCommand.HARD_DROP)

        assert after.current_piece is None
        locked = set(get_world_blocks(expected, running.dimensions))
        assert set(after.board.iter_blocks()) == locked
        assert not can_move(running.board, expected, 0, -1)

    def test_hard_drop_without_piece(self, running):
        empty = replace(running, current_piece=None)
        assert apply_command(empty, GameCommand.HARD_DROP) is empty


class TestStatusGating:
    """Which statuses accept which commands."""

    def test_pause_toggle(self, running):
        paused = apply_command(running, GameCommand.TOGGLE_PAUSE)
        assert paused.game_status == GameStatus.PAUSED
        resumed = apply_command(paused, GameCommand.TOGGLE_PAUSE)
        assert resumed.game_status == GameStatus.RUNNING
        assert resumed.current_piece == running.current_piece

    def test_paused_ignores_movement(self, running):
        paused = apply_command(running, GameCommand.TOGGLE_PAUSE)
        for command in (GameCommand.MOVE_LEFT, GameCommand.ROTATE_CW, GameCommand.HARD_DROP):
            assert apply_command(paused, command) is paused

    def test_idle_ignores_everything(self, idle):
        for command in GameCommand:
            assert apply_command(idle, command) is idle

    def test_game_over_is_terminal(self, running):
        over = replace(running, current_piece=None, game_status=GameStatus.GAME_OVER)
        for command in GameCommand:
            assert apply_command(over, command) is over

    def test_clearing_ignores_commands(self, running):
        clearing = replace(running, current_piece=None, game_status=GameStatus.CLEARING)
        for command in GameCommand:
            assert apply_command(clearing, command) is clearing

    def test_commands_after_start(self, idle):
        started = start_game(idle)
        moved = apply_command(started, GameCommand.MOVE_RIGHT)
        assert moved.current_piece.position.x == started.current_piece.position.x + 1
