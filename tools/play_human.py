"""
Human Play Mode
================

Play Cyltris interactively. The cylinder is drawn unrolled around the
active piece's column, so the view scrolls as the piece wraps around.

Controls:
    - Left/Right: Move piece around the tower
    - Up/X: Rotate clockwise
    - Z: Rotate counter-clockwise
    - Down: Soft drop
    - Space: Hard drop
    - P: Pause
    - R: Restart game
    - ESC: Quit

Usage:
    python -m tools.play_human [--seed SEED] [--columns N] [--cell PIXELS]
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from cyltris.tower_core.commands import GameCommand
from cyltris.tower_core.config_loader import GameConfig, load_config
from cyltris.tower_core.events import GameEventType
from cyltris.tower_core.game import GameController
from cyltris.tower_core.state import GameStatus
from cyltris.tower_core.state_snapshot import GameSnapshot


KEY_BINDINGS = {
    "K_LEFT": GameCommand.MOVE_LEFT,
    "K_RIGHT": GameCommand.MOVE_RIGHT,
    "K_UP": GameCommand.ROTATE_CW,
    "K_x": GameCommand.ROTATE_CW,
    "K_z": GameCommand.ROTATE_CCW,
    "K_DOWN": GameCommand.SOFT_DROP,
    "K_SPACE": GameCommand.HARD_DROP,
    "K_p": GameCommand.TOGGLE_PAUSE,
}


class TowerRenderer:
    """Draws the unrolled cylinder, HUD and overlays."""

    def __init__(self, config: GameConfig, visible_columns: int, cell_size: int):
        self._config = config
        self._visible_columns = min(visible_columns, config.board.width)
        self._cell = cell_size

        # Colors
        self._bg = (24, 26, 38)
        self._well = (36, 40, 58)
        self._grid = (48, 52, 72)
        self._block = (120, 170, 230)
        self._active = (250, 200, 80)
        self._ghost = (90, 96, 120)
        self._clearing = (255, 255, 255)
        self._text_dark = (160, 165, 190)
        self._text_light = (235, 235, 245)

        pygame.font.init()
        self._font_large = pygame.font.Font(None, 42)
        self._font_medium = pygame.font.Font(None, 28)
        self._font_small = pygame.font.Font(None, 20)

        self._panel_width = 180
        self._margin = 20
        self.window_width = self._visible_columns * cell_size + self._panel_width + 2 * self._margin
        self.window_height = config.board.height * cell_size + 2 * self._margin

    def _column_offset(self, snapshot: GameSnapshot) -> int:
        """Leftmost board column shown, keeping the piece near the center."""
        if len(snapshot.active_cells) > 0:
            center = int(snapshot.active_cells[0][0])
        else:
            center = snapshot.board_width // 2
        return center - self._visible_columns // 2

    def _cell_rect(self, screen_col: int, y: int, height: int) -> "pygame.Rect":
        px = self._margin + screen_col * self._cell
        py = self._margin + (height - 1 - y) * self._cell
        return pygame.Rect(px, py, self._cell - 1, self._cell - 1)

    def render(self, screen: "pygame.Surface", snapshot: GameSnapshot) -> None:
        screen.fill(self._bg)

        width = snapshot.board_width
        height = snapshot.board_height
        offset = self._column_offset(snapshot)
        clearing = set(snapshot.clearing_layers)

        well = pygame.Rect(
            self._margin, self._margin,
            self._visible_columns * self._cell, height * self._cell
        )
        pygame.draw.rect(screen, self._well, well)

        for col in range(self._visible_columns):
            x = (offset + col) % width
            for y in range(height):
                rect = self._cell_rect(col, y, height)
                if snapshot.board[y, x]:
                    color = self._clearing if y in clearing else self._block
                    pygame.draw.rect(screen, color, rect)
                else:
                    pygame.draw.rect(screen, self._grid, rect, 1)

        for cells, color in ((snapshot.ghost_cells, self._ghost), (snapshot.active_cells, self._active)):
            for x, y in cells:
                col = (int(x) - offset) % width
                if col < self._visible_columns and 0 <= y < height:
                    pygame.draw.rect(screen, color, self._cell_rect(col, int(y), height))

        self._draw_panel(screen, snapshot, offset)

        if snapshot.status == "paused":
            self._draw_overlay(screen, "PAUSED", "Press P to resume")
        elif snapshot.status == "game_over":
            self._draw_overlay(screen, "GAME OVER", f"Score: {snapshot.score:,}  -  R to restart")

    def _draw_panel(self, screen: "pygame.Surface", snapshot: GameSnapshot, offset: int) -> None:
        x = self._margin * 2 + self._visible_columns * self._cell
        y = self._margin

        rows = [
            ("SCORE", f"{snapshot.score:,}"),
            ("LEVEL", str(snapshot.level)),
            ("LINES", str(snapshot.lines_cleared)),
            ("COMBO", str(snapshot.combo_streak)),
            ("NEXT", " ".join(snapshot.next_pieces)),
        ]
        for label, value in rows:
            screen.blit(self._font_small.render(label, True, self._text_dark), (x, y))
            screen.blit(self._font_medium.render(value, True, self._text_light), (x, y + 16))
            y += 48

        # Lock delay bar
        screen.blit(self._font_small.render("LOCK", True, self._text_dark), (x, y))
        bar = pygame.Rect(x, y + 18, self._panel_width - 40, 10)
        pygame.draw.rect(screen, self._grid, bar)
        if snapshot.lock_active:
            filled = bar.copy()
            filled.width = int(bar.width * snapshot.lock_progress)
            pygame.draw.rect(screen, self._active, filled)
        y += 44

        sector = f"cols {offset % snapshot.board_width}..{(offset + self._visible_columns - 1) % snapshot.board_width}"
        screen.blit(self._font_small.render(sector, True, self._text_dark), (x, y))

    def _draw_overlay(self, screen: "pygame.Surface", title: str, hint: str) -> None:
        overlay = pygame.Surface((self.window_width, self.window_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 150))
        screen.blit(overlay, (0, 0))

        title_surface = self._font_large.render(title, True, self._text_light)
        hint_surface = self._font_small.render(hint, True, self._text_dark)
        cy = self.window_height // 2
        screen.blit(title_surface, ((self.window_width - title_surface.get_width()) // 2, cy - 30))
        screen.blit(hint_surface, ((self.window_width - hint_surface.get_width()) // 2, cy + 10))


class HumanPlayer:
    """Keyboard-driven game loop around a GameController."""

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        visible_columns: int = 16,
        cell_size: int = 22,
        target_fps: int = 60,
        clear_animation_ms: float = 300.0,
        debug: bool = False
    ):
        if not PYGAME_AVAILABLE:
            raise ImportError("pygame required. Install: pip install pygame")

        if config is None:
            config = load_config()

        self._config = config
        self._seed = seed
        self._target_fps = target_fps
        self._clear_animation_ms = clear_animation_ms
        self._clearing_for_ms = 0.0

        self._game = GameController(config=config, seed=seed, debug=debug)
        self._game.start_new_game(seed)

        pygame.init()
        self._renderer = TowerRenderer(config, visible_columns, cell_size)
        self._screen = pygame.display.set_mode((self._renderer.window_width, self._renderer.window_height))
        pygame.display.set_caption("Cyltris")
        self._clock = pygame.time.Clock()

        self._keymap = {getattr(pygame, name): command for name, command in KEY_BINDINGS.items()}
        self._running = True

    def run(self) -> int:
        """Run the game loop. Returns final score."""
        print("=== Cyltris ===")
        print("Arrows move/rotate, Z/X rotate, Space hard drop, P pause")
        print("R to restart, ESC to quit")
        print()

        while self._running:
            delta_ms = self._clock.tick(self._target_fps)
            self._handle_events()

            result = self._game.update(delta_ms)
            self._report(result.events)

            if self._game.status == GameStatus.CLEARING:
                self._clearing_for_ms += delta_ms
                if self._clearing_for_ms >= self._clear_animation_ms:
                    self._clearing_for_ms = 0.0
                    self._report(self._game.complete_clearing().events)

            self._renderer.render(self._screen, self._game.get_snapshot())
            pygame.display.flip()

        pygame.quit()
        return self._game.score

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    self._running = False
                elif event.key == pygame.K_r:
                    self._restart()
                elif event.key in self._keymap:
                    self._game.enqueue_command(self._keymap[event.key])

    def _report(self, events) -> None:
        for event in events:
            if event.type == GameEventType.LINES_CLEARED:
                print(f"  +{event.points} for {event.lines} line(s) (Total: {self._game.score})")
            elif event.type == GameEventType.LEVEL_UP:
                print(f"  Level {event.level}!")
            elif event.type == GameEventType.GAME_OVER:
                print(f"\nGAME OVER - Score: {self._game.score}")

    def _restart(self) -> None:
        """Restart the game."""
        self._game.start_new_game(self._seed)
        self._clearing_for_ms = 0.0
        print("\n=== Game Restarted ===\n")


def main():
    parser = argparse.ArgumentParser(description="Play Cyltris interactively")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--columns", type=int, default=16, help="Visible columns (default: 16)")
    parser.add_argument("--cell", type=int, default=22, help="Cell size in pixels (default: 22)")
    parser.add_argument("--fps", type=int, default=60, help="Target FPS")
    parser.add_argument("--debug", action="store_true", help="Print engine debug output")

    args = parser.parse_args()

    try:
        config = load_config()
        player = HumanPlayer(
            config=config,
            seed=args.seed,
            visible_columns=args.columns,
            cell_size=args.cell,
            target_fps=args.fps,
            debug=args.debug
        )
        score = player.run()
        print(f"\nFinal Score: {score}")
        return 0
    except ImportError as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
