"""
Game Controller
===============

Application-level orchestrator around the pure engine functions.

Owns the current state and a FIFO command queue. Each update flushes the
queue in submission order, then advances time, collecting events from every
individual transition so a lock followed by a spawn is never lost.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, Dict, List, Optional

from cyltris.tower_core.clearing import complete_clearing_phase
from cyltris.tower_core.commands import GameCommand, apply_command_detailed
from cyltris.tower_core.config_loader import GameConfig, get_config
from cyltris.tower_core.events import GameEvent, collect_events
from cyltris.tower_core.movement import MoveResult
from cyltris.tower_core.state import GameState, GameStatus, create_initial_game_state
from cyltris.tower_core.state_snapshot import GameSnapshot, SnapshotBuilder
from cyltris.tower_core.tick import start_game, tick


@dataclass
class StepResult:
    """Result of a single controller update."""
    state: GameState
    snapshot: GameSnapshot
    events: List[GameEvent]
    delta_score: int


class GameController:
    """
    Main game session class.

    Orchestrates:
    - Command queue (player input)
    - Tick / gravity
    - Clear completion
    - Event collection
    - State snapshots
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        state: Optional[GameState] = None,
        debug: bool = False
    ):
        """
        Initialize controller.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for the piece queue.
            state: Starting state. A fresh Idle state is built if None.
            debug: If True, prints verbose debug output.
        """
        if config is None:
            config = state.config if state is not None else get_config()

        self._config = config
        self._seed = seed
        self._debug = debug
        self._state = state if state is not None else create_initial_game_state(config, seed)
        self._commands: Deque[GameCommand] = deque()
        self._snapshot_builder = SnapshotBuilder(config)
        self._last_rejection: Optional[MoveResult] = None

        if self._debug:
            print("[DEBUG] GameController initialized")
            print(f"[DEBUG]   Board: {self._state.board.width}x{self._state.board.height}")
            print(f"[DEBUG]   Piece mode: {self._state.piece_queue.mode}, seed: {seed}")
            print(f"[DEBUG]   Lock delay: {config.lock_delay.delay_ms}ms / {config.lock_delay.moves_max} moves")

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def state(self) -> GameState:
        """Current game state."""
        return self._state

    @property
    def score(self) -> int:
        return self._state.score

    @property
    def level(self) -> int:
        return self._state.level

    @property
    def status(self) -> GameStatus:
        return self._state.game_status

    @property
    def is_over(self) -> bool:
        """True if game has ended."""
        return self._state.is_over

    @property
    def pending_commands(self) -> int:
        """Number of queued commands not yet applied."""
        return len(self._commands)

    @property
    def last_rejection(self) -> Optional[MoveResult]:
        """Most recent rejected move, for diagnostics."""
        return self._last_rejection

    def reset(self, seed: Optional[int] = None) -> GameSnapshot:
        """
        Reset to a fresh Idle game.

        Args:
            seed: New random seed. Uses previous if None.

        Returns:
            Initial game snapshot.
        """
        if seed is not None:
            self._seed = seed

        self._state = create_initial_game_state(self._config, self._seed)
        self._commands.clear()
        self._last_rejection = None
        return self.get_snapshot()

    def start_new_game(self, seed: Optional[int] = None) -> StepResult:
        """Reset and spawn the first piece."""
        self.reset(seed)
        prev = self._state
        self._state = start_game(prev)
        return self._finish(prev, collect_events(prev, self._state))

    def enqueue_command(self, command: GameCommand) -> None:
        """Queue a command for the next update."""
        self._commands.append(GameCommand(command))

    def update(self, delta_ms: float) -> StepResult:
        """
        Apply queued commands in order, then advance time.

        Args:
            delta_ms: Elapsed milliseconds since the previous update.

        Returns:
            StepResult with the new state and every event it produced.
        """
        start = self._state
        events: List[GameEvent] = []

        while self._commands:
            command = self._commands.popleft()
            prev = self._state
            result = apply_command_detailed(prev, command)
            self._state = result.state

            if result.move is not None and not result.move.moved and result.move.reason is not None:
                self._last_rejection = result.move
                if self._debug:
                    print(f"[DEBUG] Rejected {command.value}: {result.move.reason} "
                          f"cells={[tuple(c) for c in result.move.cells]}")

            events.extend(collect_events(prev, self._state))

        prev = self._state
        self._state = tick(prev, delta_ms)
        events.extend(collect_events(prev, self._state))

        return self._finish(start, events)

    def complete_clearing(self) -> StepResult:
        """Finish a pending clear (renderers call this after their animation)."""
        prev = self._state
        self._state = complete_clearing_phase(prev)
        return self._finish(prev, collect_events(prev, self._state))

    def _finish(self, start: GameState, events: List[GameEvent]) -> StepResult:
        if self._debug and events:
            print(f"[DEBUG] Events: {events}")
            if self._state.is_over:
                print(f"[DEBUG] GAME OVER: score={self._state.score}, lines={self._state.lines_cleared}")

        return StepResult(
            state=self._state,
            snapshot=self.get_snapshot(),
            events=events,
            delta_score=self._state.score - start.score
        )

    def get_snapshot(self) -> GameSnapshot:
        """Build a snapshot of the current state."""
        return self._snapshot_builder.build(self._state)

    def get_info(self) -> Dict[str, Any]:
        """Summary values for HUDs and logs."""
        state = self._state
        return {
            "score": state.score,
            "level": state.level,
            "lines_cleared": state.lines_cleared,
            "combo_streak": state.combo_streak,
            "status": state.game_status.value,
            "piece": state.current_piece.type.value if state.current_piece is not None else None,
            "next_pieces": [p.value for p in state.next_pieces],
            "blocks": state.board.count_blocks(),
        }
