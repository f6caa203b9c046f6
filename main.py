"""
main.py — Entry point and game loop for Shadow Pieces.

Responsibilities:
    - Initialise pygame, logging and the window
    - Own the Scaler (window → game coordinate translation)
    - Show the how-to-play intro, then open the session in the background
      on START (pool fetch + entry fee)
    - Run the main loop: handle events → update → pump images → render → flip
    - Translate mouse positions to game coordinates and turn clicks into
      engine commands (submit, advance, claim)
    - Handle VIDEORESIZE: the puzzle picture is re-rendered at the new
      on-screen size from the cached source, so it stays crisp
    - Wrap the loop in async for pygbag (WASM export)

Architecture note:
    main.py is intentionally thin. It owns the pygame lifecycle and the
    window, nothing else. All game logic lives in core/engine.py.

Usage (local):
    python main.py [center-tile | shadow-pieces] [--practice]

Usage (WASM export):
    pygbag main.py
"""

import asyncio
import logging
import sys

import pygame
from settings import SCREEN_W, SCREEN_H, FPS, TITLE, COLOR, NOTICE_DURATION_S, PUZZLE_SIZE
from core.engine import ChallengeEngine
from core.errors import ChallengeError
from core.lobby import open_session
from core.session import Phase
from renderer import ui
from renderer.grid import OptionGrid
from renderer.images import ImageCache, ImagePump
from services.backend import BackendClient
from stages.registry import get_game
from utils.scaler import Scaler

logger = logging.getLogger(__name__)

# ── Window configuration ──────────────────────────────────────────────────────
_WINDOW_SCALE  = 2
_WINDOW_W      = SCREEN_W * _WINDOW_SCALE
_WINDOW_H      = SCREEN_H * _WINDOW_SCALE

_DEFAULT_GAME = "shadow-pieces"


class Shell:
    """Input and drawing glue between the window and one engine.

    Attributes:
        engine:     The running ChallengeEngine.
        grid:       OptionGrid for the current stage, rebuilt on stage change.
        _grid_for:  Stage index the grid was built for.
        _btn_rect:  Rect of the NEXT / CLAIM button from the last frame.
        _hover_btn: True if the cursor is over that button.
        claim_task: Running claim, once the result screen was closed.
    """

    def __init__(self, engine: ChallengeEngine) -> None:
        self.engine = engine
        self.grid: OptionGrid | None = None
        self._grid_for: int | None = None
        self._btn_rect: pygame.Rect | None = None
        self._hover_btn = False
        self.claim_task: asyncio.Task | None = None

    def _sync_grid(self) -> None:
        snap = self.engine.snapshot()
        if snap.round is None:
            self.grid = None
            return
        if self._grid_for != snap.round.stage_index:
            self.grid = OptionGrid(snap.round.options, top=ui.options_top())
            self._grid_for = snap.round.stage_index

    # ── Input ─────────────────────────────────────────────────────────────────

    def handle_event(self, event: pygame.event.Event) -> None:
        """Route one event (positions already in game coordinates)."""
        phase = self.engine.phase
        self._sync_grid()

        if event.type == pygame.MOUSEMOTION:
            if self.grid and phase in (Phase.PREFILL, Phase.COUNTING):
                hit = self.grid.hit_test(*event.pos)
                self.engine.highlight(hit.id if hit else None)
            self._hover_btn = bool(self._btn_rect and self._btn_rect.collidepoint(event.pos))

        elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
            if phase is Phase.COUNTING and self.grid:
                hit = self.grid.hit_test(*event.pos)
                if hit is not None:
                    self.engine.submit(hit.id)
            elif phase is Phase.RESOLVED:
                if self._btn_rect and self._btn_rect.collidepoint(event.pos):
                    self.engine.advance()
            elif phase is Phase.FINISHED:
                # Button and outside-click both close the result screen
                self.start_claim()

        elif event.type == pygame.KEYDOWN:
            if phase is Phase.RESOLVED and event.key in (pygame.K_RETURN, pygame.K_SPACE):
                self.engine.advance()
            elif phase is Phase.FINISHED and event.key in (pygame.K_RETURN, pygame.K_ESCAPE):
                self.start_claim()

    def start_claim(self) -> None:
        if self.claim_task is None:
            self.claim_task = asyncio.ensure_future(self.engine.claim())

    # ── Rendering ─────────────────────────────────────────────────────────────

    def render(self, surface: pygame.Surface, now: float) -> None:
        """Draw everything except the puzzle picture onto the game surface."""
        self._sync_grid()
        snap = self.engine.snapshot()

        ui.draw_header(surface, self.engine.game.title, snap.stage_label, snap.running_total)
        ui.draw_timer_bar(surface, snap.progress_percent, snap.danger_tier, now)
        ui.draw_outcome(surface, snap)

        if self.grid and snap.round:
            self.grid.render(
                surface, ui.font(14),
                highlighted_id=snap.highlighted_id,
                picked_id=snap.round.picked_id,
                answer_id=snap.round.answer_id,
            )

        ui.draw_result_strip(surface, snap.results, snap.total_stages)
        self._btn_rect = None
        if snap.phase is Phase.RESOLVED:
            last = snap.round.stage_index == snap.total_stages
            self._btn_rect = ui.draw_action_button(surface, "RESULT" if last else "NEXT", self._hover_btn)
        ui.draw_notice(surface, snap.notice)

        if snap.phase is Phase.FINISHED:
            self._btn_rect = ui.draw_result_screen(surface, snap)


async def main() -> None:
    """Async main loop — compatible with both CPython and pygbag WASM."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    game_id = args[0] if args else _DEFAULT_GAME
    practice = "--practice" in sys.argv
    game = get_game(game_id)

    pygame.init()
    window = pygame.display.set_mode((_WINDOW_W, _WINDOW_H), pygame.RESIZABLE)
    pygame.display.set_caption(f"{TITLE} — {game.title}")
    game_surface = pygame.Surface((SCREEN_W, SCREEN_H))
    scaler = Scaler(_WINDOW_W, _WINDOW_H)
    clock = pygame.time.Clock()

    backend = BackendClient()
    cache = ImageCache()
    pump = ImagePump(cache)

    entry: asyncio.Future | None = None
    intro_btn: pygame.Rect | None = None
    shell: Shell | None = None
    entry_error: str | None = None
    exit_at: float | None = None

    running = True
    while running:
        clock.tick(FPS)
        now = pygame.time.get_ticks() / 1000.0

        # ── Session entry ─────────────────────────────────────────────────────
        if shell is None and entry_error is None and entry is not None and entry.done():
            try:
                shell = Shell(entry.result())
                shell.engine.resize(round(PUZZLE_SIZE * scaler.scale))
            except ChallengeError as exc:
                logger.error("Could not start %s: %s", game_id, exc)
                entry_error = str(exc)

        # ── Event handling ────────────────────────────────────────────────────
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False

            elif event.type == pygame.VIDEORESIZE:
                scaler.update(event.w, event.h)
                if shell:
                    shell.engine.resize(round(PUZZLE_SIZE * scaler.scale))

            elif entry is None:
                if event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                    pos = scaler.to_game(*event.pos) if scaler.in_bounds(*event.pos) else None
                    start = bool(pos and intro_btn and intro_btn.collidepoint(pos))
                else:
                    start = event.type == pygame.KEYDOWN and event.key in (pygame.K_RETURN, pygame.K_SPACE)
                if start:
                    # The fee is charged only once the player has read the rules
                    entry = asyncio.ensure_future(
                        open_session(game_id, backend, charge_entry_fee=not practice))

            elif shell is None:
                continue

            elif event.type in (pygame.MOUSEBUTTONDOWN, pygame.MOUSEBUTTONUP, pygame.MOUSEMOTION):
                if scaler.in_bounds(*event.pos):
                    # Rebuild with the translated pos
                    translated = pygame.event.Event(
                        event.type, {**event.dict, "pos": scaler.to_game(*event.pos)},
                    )
                    shell.handle_event(translated)

            elif event.type == pygame.KEYDOWN:
                shell.handle_event(event)

        # ── Update ────────────────────────────────────────────────────────────
        if shell:
            shell.engine.update()
            pump.pump(shell.engine)
            if shell.claim_task and shell.claim_task.done() and exit_at is None:
                exit_at = now + NOTICE_DURATION_S
            if exit_at is not None and now >= exit_at:
                running = False

        # ── Render ────────────────────────────────────────────────────────────
        game_surface.fill(COLOR["background"])
        if shell:
            shell.render(game_surface, now)
        elif entry is None:
            intro_btn = ui.draw_intro(game_surface, game.title, game.how_to, game.entry_fee, practice)
        elif entry_error:
            ui.draw_message(game_surface, "Could not start the game", entry_error)
        else:
            ui.draw_message(game_surface, "Loading...")

        scaler.blit(window, game_surface)
        if shell and shell.engine.phase is not Phase.FINISHED:
            picture = shell.engine.view.surface
            dest = scaler.to_window_rect(ui.puzzle_rect())
            window.blit(picture, dest.topleft)
        pygame.display.flip()

        # ── Yield to the event loop (pygbag, pending HTTP) ────────────────────
        await asyncio.sleep(0)

    # ── Cleanup ───────────────────────────────────────────────────────────────
    if entry is not None and not entry.done():
        entry.cancel()
    if shell:
        shell.engine.close()
    pump.cancel()
    await backend.close()
    await cache.close()
    pygame.quit()


if __name__ == "__main__":
    asyncio.run(main())
