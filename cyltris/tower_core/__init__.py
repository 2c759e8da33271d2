"""
Tower Core - The cylindrical block-stacking engine.

Every engine operation is a pure function from a GameState (plus input) to
a new GameState. The controller and snapshot layers sit on top for
interactive front ends.

Main exports:
- GameController: Command queue + tick driver for interactive play
- GameState / create_initial_game_state: The immutable game aggregate
- tick / apply_command / complete_clearing_phase: Core transitions
- GameConfig: Configuration loaded from game_config.yaml
"""

from cyltris.tower_core.config_loader import GameConfig, load_config, get_config
from cyltris.tower_core.board import Board, BoardDimensions, CellCoord, CellContent
from cyltris.tower_core.pieces import ActivePiece, PieceOrientation, PieceType
from cyltris.tower_core.rng import PieceQueue
from cyltris.tower_core.state import GameState, GameStatus, create_initial_game_state
from cyltris.tower_core.movement import MoveRequest, MoveResult, try_move_piece
from cyltris.tower_core.tick import start_game, tick
from cyltris.tower_core.clearing import complete_clearing_phase
from cyltris.tower_core.commands import GameCommand, apply_command
from cyltris.tower_core.events import GameEvent, GameEventType, Transition
from cyltris.tower_core.invariants import InvariantError, assert_game_state_invariants
from cyltris.tower_core.state_snapshot import GameSnapshot, SnapshotBuilder
from cyltris.tower_core.game import GameController, StepResult

__all__ = [
    "GameConfig",
    "load_config",
    "get_config",
    "Board",
    "BoardDimensions",
    "CellCoord",
    "CellContent",
    "ActivePiece",
    "PieceOrientation",
    "PieceType",
    "PieceQueue",
    "GameState",
    "GameStatus",
    "create_initial_game_state",
    "MoveRequest",
    "MoveResult",
    "try_move_piece",
    "start_game",
    "tick",
    "complete_clearing_phase",
    "GameCommand",
    "apply_command",
    "GameEvent",
    "GameEventType",
    "Transition",
    "InvariantError",
    "assert_game_state_invariants",
    "GameSnapshot",
    "SnapshotBuilder",
    "GameController",
    "StepResult",
]
