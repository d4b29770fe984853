"""
Ripple -- Live Window

Real-time pygame window around the FrameScheduler. The pointer drives the
wave origin; dropping an image file on the window loads it.

Hotkeys:
  C          = recenter origin
  R          = reload current image
  S          = save snapshot PNG
  H          = toggle HUD
  Esc / Q    = quit
"""

import time
from pathlib import Path

try:
    import pygame
except ImportError:
    pygame = None

from core.config import RippleConfig
from core.image_io import save_frame
from core.scheduler import FrameScheduler, Phase
from core.state import RenderState


class LiveRipple:
    """pygame front end: event translation, window sizing and presentation.

    Implements the DisplaySurface protocol itself, so the scheduler
    presents straight into the window.
    """

    def __init__(self, config: RippleConfig | None = None, source=None, show_hud=True,
                 snapshot_dir="."):
        if pygame is None:
            raise RuntimeError("pygame required for live mode. Install: pip install pygame")

        self.config = config or RippleConfig()
        self.source = source or self.config.default_image
        self.show_hud = show_hud
        self.snapshot_dir = Path(snapshot_dir)
        self.running = True

        self.state = RenderState(params=self.config.params,
                                 max_dimension=self.config.max_dimension)
        self.scheduler = FrameScheduler(
            self.state, self,
            workers=self.config.workers,
            timeout=self.config.request_timeout,
        )

        # Display
        self._screen = None
        self._clock = None
        self._font = None
        self._shown_generation = 0
        self._last_frame = None

    def init_display(self):
        pygame.init()
        self._screen = pygame.display.set_mode((600, 400), pygame.RESIZABLE)
        pygame.display.set_caption("Ripple")
        self._clock = pygame.time.Clock()
        self._font = pygame.font.SysFont("monospace", 14)

    def load(self, source):
        self.source = str(source)
        print(f"  Loading: {self.source}")
        self.scheduler.request_image(self.source)

    def present(self, buffer):
        """Blit a finished frame (scaled if the window changed size since it was rendered)."""
        self._last_frame = buffer
        image = pygame.image.frombuffer(buffer.to_bytes(), buffer.size, "RGBA")
        if image.get_size() != self._screen.get_size():
            image = pygame.transform.scale(image, self._screen.get_size())
        self._screen.blit(image, (0, 0))
        if self.show_hud:
            self._draw_hud()
        pygame.display.flip()

    def _draw_hud(self):
        origin = self.state.origin
        lines = [
            f"{self._clock.get_fps():5.1f} fps  t={self.state.elapsed():6.2f}s",
            f"origin ({origin.x:.3f}, {origin.y:.3f})",
        ]
        if self.scheduler.last_error is not None:
            lines.append(f"placeholder: {type(self.scheduler.last_error).__name__}")
        y = 8
        for line in lines:
            surf = self._font.render(line, True, (230, 230, 230))
            self._screen.blit(surf, (8, y))
            y += 16

    def _draw_loading(self):
        self._screen.fill((0, 0, 0))
        surf = self._font.render("Loading...", True, (200, 200, 200))
        self._screen.blit(surf, (10, 20))
        pygame.display.flip()

    def _sync_window(self):
        """Resize the window to the output size once per completed load."""
        if self.scheduler.phase is not Phase.READY:
            return
        if self._shown_generation == self.scheduler.generation:
            return
        self._shown_generation = self.scheduler.generation
        self._screen = pygame.display.set_mode(self.state.output_size, pygame.RESIZABLE)
        w, h = self.state.output_size
        print(f"  Ready: {self.state.source.width}x{self.state.source.height} -> {w}x{h}")

    def _snapshot(self):
        if self._last_frame is None:
            return
        path = self.snapshot_dir / f"ripple_{time.strftime('%Y%m%d_%H%M%S')}.png"
        save_frame(self._last_frame, path)
        print(f"  Saved: {path}")

    def _handle_events(self):
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False

            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_ESCAPE, pygame.K_q):
                    self.running = False
                elif event.key == pygame.K_c:
                    self.state.recenter()
                elif event.key == pygame.K_r:
                    self.load(self.source)
                elif event.key == pygame.K_s:
                    self._snapshot()
                elif event.key == pygame.K_h:
                    self.show_hud = not self.show_hud

            elif event.type == pygame.MOUSEMOTION:
                w, h = self._screen.get_size()
                self.state.update_origin(event.pos[0] / w, event.pos[1] / h)

            elif event.type == pygame.WINDOWLEAVE:
                if self.config.recenter_on_leave:
                    self.state.recenter()

            elif event.type == pygame.VIDEORESIZE:
                self.state.display_resize(max(1, event.w), max(1, event.h))

            elif event.type == pygame.DROPFILE:
                self.load(event.file)

    def run(self):
        """Main loop: events, window sync, one scheduler tick, frame pacing."""
        self.init_display()
        self.load(self.source)

        print("\n  Ripple Live")
        print("  " + "-" * 40)
        print("  Move pointer = origin  Drop file = load  C=Center  R=Reload  S=Snapshot  Esc=Exit")
        print()

        try:
            while self.running:
                self._handle_events()
                self._sync_window()
                if self.scheduler.tick() is None and self.scheduler.phase is not Phase.READY:
                    self._draw_loading()
                self._clock.tick(self.config.fps)
        except KeyboardInterrupt:
            print("\n  [INTERRUPTED]")
        finally:
            self._cleanup()

    def _cleanup(self):
        self.scheduler.close()
        if pygame and pygame.get_init():
            pygame.quit()
