"""
Commands
========

Player commands and their effect on a game state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, Optional, Tuple

from cyltris.tower_core.clearing import commit_piece
from cyltris.tower_core.collision import is_grounded
from cyltris.tower_core.lock_delay import (
    airborne_fall_state,
    is_lock_due,
    register_lock_move,
)
from cyltris.tower_core.movement import (
    MoveRequest,
    MoveResult,
    compute_hard_drop_position,
    try_move_piece,
)
from cyltris.tower_core.state import GameState, GameStatus


class GameCommand(str, Enum):
    MOVE_LEFT = "move_left"
    MOVE_RIGHT = "move_right"
    ROTATE_CW = "rotate_cw"
    ROTATE_CCW = "rotate_ccw"
    SOFT_DROP = "soft_drop"
    HARD_DROP = "hard_drop"
    TOGGLE_PAUSE = "toggle_pause"


ALL_GAME_COMMANDS: Tuple[GameCommand, ...] = tuple(GameCommand)

COMMAND_MOVES: Dict[GameCommand, MoveRequest] = {
    GameCommand.MOVE_LEFT: MoveRequest(dx=-1),
    GameCommand.MOVE_RIGHT: MoveRequest(dx=1),
    GameCommand.ROTATE_CW: MoveRequest(rotation=1),
    GameCommand.ROTATE_CCW: MoveRequest(rotation=-1),
    GameCommand.SOFT_DROP: MoveRequest(dy=-1),
}


@dataclass(frozen=True)
class CommandResult:
    """New state plus the movement outcome, when the command attempted a move."""
    state: GameState
    move: Optional[MoveResult] = None


def toggle_pause(state: GameState) -> GameState:
    """Running <-> Paused. Ignored while clearing, idle or over."""
    if state.game_status == GameStatus.RUNNING:
        return replace(state, game_status=GameStatus.PAUSED)
    if state.game_status == GameStatus.PAUSED:
        return replace(state, game_status=GameStatus.RUNNING)
    return state


def hard_drop(state: GameState) -> GameState:
    """Drop the active piece to its landing row and lock it at once."""
    landed = compute_hard_drop_position(state)
    if landed is None:
        return state
    return commit_piece(replace(state, current_piece=landed))


def _apply_player_move(state: GameState, move: MoveRequest) -> CommandResult:
    result = try_move_piece(state, move)
    if not result.moved:
        return CommandResult(state=state, move=result)

    moved = result.state
    fall_state = moved.fall_state
    if not fall_state.landed:
        return CommandResult(state=moved, move=result)

    # Moves made while landed either free the piece or spend the move budget
    if not is_grounded(moved.board, moved.current_piece):
        freed = replace(moved, fall_state=airborne_fall_state(fall_state.lock_delay_ms))
        return CommandResult(state=freed, move=result)

    fall_state = register_lock_move(fall_state)
    moved = replace(moved, fall_state=fall_state)
    if is_lock_due(fall_state, moved.config.lock_delay.moves_max):
        return CommandResult(state=commit_piece(moved), move=result)
    return CommandResult(state=moved, move=result)


def apply_command_detailed(state: GameState, command: GameCommand) -> CommandResult:
    """
    Apply a command and keep the movement diagnostics.

    Movement commands only act on a Running game with an active piece.
    """
    command = GameCommand(command)

    if state.game_status == GameStatus.GAME_OVER:
        return CommandResult(state=state)

    if command == GameCommand.TOGGLE_PAUSE:
        return CommandResult(state=toggle_pause(state))

    if state.game_status != GameStatus.RUNNING or state.current_piece is None:
        return CommandResult(state=state)

    if command == GameCommand.HARD_DROP:
        return CommandResult(state=hard_drop(state))

    return _apply_player_move(state, COMMAND_MOVES[command])


def apply_command(state: GameState, command: GameCommand) -> GameState:
    """
    Apply a player command. Rejected moves leave the state unchanged.

    Args:
        state: Current state (left unmodified).
        command: Command to apply.

    Returns:
        The next state.
    """
    return apply_command_detailed(state, command).state
