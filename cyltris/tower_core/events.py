"""
Events
======

Notifications for renderers and audio, derived from pairs of states.

Events are a convenience: every fact they carry can also be read from the
returned state, so a consumer that misses one can always catch up.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from cyltris.tower_core.clearing import complete_clearing_phase
from cyltris.tower_core.commands import GameCommand, apply_command
from cyltris.tower_core.pieces import PieceType
from cyltris.tower_core.state import GameState, GameStatus
from cyltris.tower_core.tick import start_game, tick


class GameEventType(str, Enum):
    PIECE_LOCKED = "piece_locked"
    LINE_CLEAR_STARTED = "line_clear_started"
    LINES_CLEARED = "lines_cleared"
    LEVEL_UP = "level_up"
    NEW_PIECE_SPAWNED = "new_piece_spawned"
    GAME_OVER = "game_over"
    PAUSED = "paused"
    RESUMED = "resumed"


@dataclass(frozen=True)
class GameEvent:
    """Record of something that happened during one transition."""
    type: GameEventType
    cleared_layers: Tuple[int, ...] = ()
    lines: int = 0
    points: int = 0
    level: Optional[int] = None
    piece_type: Optional[PieceType] = None

    def __repr__(self) -> str:
        if self.type == GameEventType.LINE_CLEAR_STARTED:
            return f"GameEvent(line_clear_started={list(self.cleared_layers)})"
        if self.type == GameEventType.LINES_CLEARED:
            return f"GameEvent(lines_cleared={self.lines}, points={self.points})"
        if self.type == GameEventType.LEVEL_UP:
            return f"GameEvent(level_up={self.level})"
        if self.type == GameEventType.NEW_PIECE_SPAWNED and self.piece_type is not None:
            return f"GameEvent(new_piece_spawned={self.piece_type.value})"
        return f"GameEvent({self.type.value})"


class Transition(NamedTuple):
    """A new state and the events that produced it."""
    state: GameState
    events: List[GameEvent]


def collect_events(prev: GameState, current: GameState) -> List[GameEvent]:
    """
    Events implied by a single transition from prev to current.

    Only valid for one engine call; across several calls a lock followed by
    a spawn would look like no change at all.
    """
    events: List[GameEvent] = []

    if prev.current_piece is not None and current.current_piece is None:
        events.append(GameEvent(GameEventType.PIECE_LOCKED))

    if current.clearing_layers and not prev.clearing_layers:
        events.append(GameEvent(
            GameEventType.LINE_CLEAR_STARTED,
            cleared_layers=current.clearing_layers
        ))

    lines = current.lines_cleared - prev.lines_cleared
    if lines > 0:
        events.append(GameEvent(
            GameEventType.LINES_CLEARED,
            lines=lines,
            points=current.score - prev.score
        ))

    if current.level > prev.level:
        events.append(GameEvent(GameEventType.LEVEL_UP, level=current.level))

    if prev.current_piece is None and current.current_piece is not None:
        events.append(GameEvent(
            GameEventType.NEW_PIECE_SPAWNED,
            piece_type=current.current_piece.type
        ))

    if prev.game_status != current.game_status:
        if current.game_status == GameStatus.GAME_OVER:
            events.append(GameEvent(GameEventType.GAME_OVER))
        elif current.game_status == GameStatus.PAUSED:
            events.append(GameEvent(GameEventType.PAUSED))
        elif prev.game_status == GameStatus.PAUSED:
            events.append(GameEvent(GameEventType.RESUMED))

    return events


def tick_with_events(state: GameState, delta_ms: float) -> Transition:
    next_state = tick(state, delta_ms)
    return Transition(next_state, collect_events(state, next_state))


def apply_command_with_events(state: GameState, command: GameCommand) -> Transition:
    next_state = apply_command(state, command)
    return Transition(next_state, collect_events(state, next_state))


def complete_clearing_with_events(state: GameState) -> Transition:
    next_state = complete_clearing_phase(state)
    return Transition(next_state, collect_events(state, next_state))


def start_game_with_events(state: GameState) -> Transition:
    next_state = start_game(state)
    return Transition(next_state, collect_events(state, next_state))
