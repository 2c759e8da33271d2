"""
Tick / Gravity Loop
===================

Advances a game state by elapsed time: fall accumulation, gravity steps,
lock delay, spawning, and the optional automatic end of a clear.
"""

from __future__ import annotations

import math
from dataclasses import replace

from cyltris.tower_core.clearing import commit_piece, complete_clearing_phase
from cyltris.tower_core.collision import is_grounded
from cyltris.tower_core.lock_delay import (
    airborne_fall_state,
    is_lock_due,
    land,
    update_grounded,
)
from cyltris.tower_core.movement import MoveRequest, try_move_piece
from cyltris.tower_core.rules import spawn_next_piece
from cyltris.tower_core.state import FallTiming, GameState, GameStatus


FROZEN_STATUSES = (GameStatus.GAME_OVER, GameStatus.PAUSED, GameStatus.IDLE)

GRAVITY_STEP = MoveRequest(dx=0, dy=-1)


def normalize_delta_ms(delta_ms: float) -> float:
    """Elapsed time as a non-negative finite number; anything else counts as 0."""
    if delta_ms is None or not math.isfinite(delta_ms) or delta_ms < 0:
        return 0.0
    return float(delta_ms)


def start_game(state: GameState) -> GameState:
    """
    Leave Idle by spawning the first piece.

    Returns Running, or GameOver if the spawn position is already blocked.
    States that are not Idle are returned unchanged.
    """
    if state.game_status != GameStatus.IDLE:
        return state
    return spawn_next_piece(state)


def _advance_clearing(state: GameState, delta_ms: float) -> GameState:
    auto_complete_ms = state.config.clearing.auto_complete_ms
    if auto_complete_ms is None:
        return state
    elapsed = state.clearing_elapsed_ms + delta_ms
    if elapsed < auto_complete_ms:
        return replace(state, clearing_elapsed_ms=elapsed)
    return complete_clearing_phase(replace(state, clearing_elapsed_ms=elapsed))


def tick(state: GameState, delta_ms: float) -> GameState:
    """
    Advance the game by delta_ms.

    Order within one tick:
    1. Idle, Paused and GameOver states are returned unchanged. A Clearing
       state only advances its optional auto-complete timer.
    2. The fall accumulator grows by delta_ms.
    3. Without an active piece, the next piece spawns and the tick ends.
    4. The lock-delay controller sees whether the piece is grounded.
    5. A landed piece whose countdown or move budget is spent locks now.
    6. For each whole fall interval accumulated, one gravity step is tried.
       A successful step resets lock delay (landing again if the piece is
       now grounded); a blocked step locks the piece and ends the tick.

    Args:
        state: Current state (left unmodified).
        delta_ms: Elapsed milliseconds since the previous tick.

    Returns:
        The next state.
    """
    if state.game_status in FROZEN_STATUSES:
        return state

    delta_ms = normalize_delta_ms(delta_ms)

    if state.game_status == GameStatus.CLEARING:
        return _advance_clearing(state, delta_ms)

    state = replace(
        state,
        timing=replace(state.timing, fall_progress_ms=state.timing.fall_progress_ms + delta_ms)
    )

    piece = state.current_piece
    if piece is None:
        return spawn_next_piece(state)

    lock_config = state.config.lock_delay
    fall_state = update_grounded(state.fall_state, is_grounded(state.board, piece), delta_ms)
    state = replace(state, fall_state=fall_state)

    if is_lock_due(fall_state, lock_config.moves_max):
        return commit_piece(state)

    interval = max(1.0, state.timing.fall_interval_ms)
    progress = state.timing.fall_progress_ms
    while progress >= interval:
        progress -= interval
        state = replace(state, timing=FallTiming(progress, state.timing.fall_interval_ms))

        result = try_move_piece(state, GRAVITY_STEP)
        if not result.moved:
            return commit_piece(state)

        state = result.state
        fall_state = airborne_fall_state(lock_config.delay_ms)
        if is_grounded(state.board, state.current_piece):
            fall_state = land(fall_state)
        state = replace(state, fall_state=fall_state)

    return state
