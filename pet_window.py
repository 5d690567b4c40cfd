"""GTK3 transparent floating window hosting the Desk Cat engine.

Creates a borderless, always-on-top, RGBA-transparent window. The window
is plumbing only: it forwards input to the interaction layer, feeds
pointer samples and the work area to the sync channel, ticks the engine
on a render timer and paints the active frame.
"""

from __future__ import annotations

import logging
import subprocess

import cairo
import gi

gi.require_version("Gtk", "3.0")
gi.require_version("Gdk", "3.0")
from gi.repository import Gdk, GLib, Gtk  # noqa: E402

from behavior import Cue  # noqa: E402
from engine import CompanionEngine  # noqa: E402
from interaction import InteractionLayer  # noqa: E402
from position_sync import PointerPoller, PositionSync  # noqa: E402
from pursuit import Bounds  # noqa: E402
from sprite_character import SpriteCharacter  # noqa: E402

logger = logging.getLogger(__name__)

FRAME_INTERVAL_MS = 1000 // 60
HEART_MS = 1000
ZZZ_PERIOD_MS = 1500
BOUNCE_SQUASH = 0.85


def get_work_area() -> Bounds:
    """Work area of the primary monitor."""
    display = Gdk.Display.get_default()
    monitor = display.get_primary_monitor() or display.get_monitor(0)
    area = monitor.get_workarea()
    return Bounds(area.width, area.height)


def read_pointer() -> tuple[float, float] | None:
    display = Gdk.Display.get_default()
    if display is None:
        return None
    seat = display.get_default_seat()
    if seat is None:
        return None
    _screen, x, y = seat.get_pointer().get_position()
    return (float(x), float(y))


class PetWindow(Gtk.Window):
    """Transparent floating companion window.

    Uses POPUP type to bypass the window manager, so it is never tiled
    and always rendered on top.
    """

    def __init__(self, engine: CompanionEngine, character: SpriteCharacter) -> None:
        super().__init__(type=Gtk.WindowType.POPUP)

        self.engine = engine
        self.character = character
        t = engine.profile.thresholds
        self._width = t.sprite_width
        self._height = t.sprite_height

        self.sync = PositionSync(engine, self)
        self.interaction = InteractionLayer(engine.machine, self.sync)
        self._poller = PointerPoller(read_pointer)

        self._frame_timer_id: int | None = None
        self._last_tick_us: int = 0
        self._bounce_ms = 0.0
        self._heart_ms = 0.0
        self._zzz_ms = 0.0

        self._setup_window()
        self._setup_drawing()
        self._setup_input()
        self._place_on_screen()
        self._start_timers()
        self._poller.start_watching(self.sync.on_pointer_sample)

    # ------------------------------------------------------------------
    # Window configuration
    # ------------------------------------------------------------------

    def _setup_window(self) -> None:
        self.set_default_size(self._width, self._height)
        self.set_resizable(False)
        self.set_decorated(False)
        self.set_keep_above(True)
        self.stick()
        self.set_skip_taskbar_hint(True)
        self.set_skip_pager_hint(True)

        screen = self.get_screen()
        visual = screen.get_rgba_visual()
        if visual is not None:
            self.set_visual(visual)
            logger.debug("RGBA visual enabled")
        else:
            logger.warning("RGBA visual not available")

        self.set_app_paintable(True)
        self.set_type_hint(Gdk.WindowTypeHint.DOCK)
        self.connect("realize", self._on_realize)
        self.connect("destroy", self._on_destroy)

    def _setup_drawing(self) -> None:
        self._drawing_area = Gtk.DrawingArea()
        self._drawing_area.set_size_request(self._width, self._height)
        self._drawing_area.connect("draw", self._on_draw)
        self.add(self._drawing_area)

    def _setup_input(self) -> None:
        self.add_events(
            Gdk.EventMask.BUTTON_PRESS_MASK
            | Gdk.EventMask.BUTTON_RELEASE_MASK
            | Gdk.EventMask.POINTER_MOTION_MASK
        )
        self.connect("button-press-event", self._on_button_press)
        self.connect("button-release-event", self._on_button_release)
        self.connect("motion-notify-event", self._on_motion)

    def _place_on_screen(self) -> None:
        self.sync.on_screen_size(*self._work_area_size())
        s = self.engine.state
        self.move(int(s.x), int(s.y))
        self.sync.pull_position()
        logger.debug("Window placed at (%d, %d)", int(s.x), int(s.y))

    def _work_area_size(self) -> tuple[int, int]:
        bounds = get_work_area()
        return (bounds.width, bounds.height)

    # ------------------------------------------------------------------
    # Timers
    # ------------------------------------------------------------------

    def _start_timers(self) -> None:
        self._last_tick_us = GLib.get_monotonic_time()
        self._frame_timer_id = GLib.timeout_add(FRAME_INTERVAL_MS, self._on_frame_tick)

    def _stop_timers(self) -> None:
        if self._frame_timer_id is not None:
            GLib.source_remove(self._frame_timer_id)
            self._frame_timer_id = None

    def _on_frame_tick(self) -> bool:
        now = GLib.get_monotonic_time()
        delta_ms = (now - self._last_tick_us) / 1000.0
        self._last_tick_us = now

        s = self.engine.tick(delta_ms)
        if not s.is_dragging:
            self.sync.push()

        for cue in self.engine.drain_cues():
            if cue is Cue.BOUNCE:
                self._bounce_ms = self.engine.profile.thresholds.bounce_ms
            elif cue is Cue.HEART:
                self._heart_ms = HEART_MS
            elif cue is Cue.ZZZ:
                self._zzz_ms = 0.0
        self._bounce_ms = max(0.0, self._bounce_ms - delta_ms)
        self._heart_ms = max(0.0, self._heart_ms - delta_ms)
        if s.is_sleeping:
            self._zzz_ms = (self._zzz_ms + delta_ms) % ZZZ_PERIOD_MS

        self._drawing_area.queue_draw()
        return True

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def _on_draw(self, widget: Gtk.DrawingArea, ctx: cairo.Context) -> bool:
        ctx.set_operator(cairo.OPERATOR_SOURCE)
        ctx.set_source_rgba(0, 0, 0, 0)
        ctx.paint()
        ctx.set_operator(cairo.OPERATOR_OVER)

        s = self.engine.state
        squash = BOUNCE_SQUASH if self._bounce_ms > 0 else 1.0
        self.character.draw(ctx, self._width, self._height,
                            s.frames.frame_ref, s.facing_right, squash)

        if self._heart_ms > 0:
            rise = (1.0 - self._heart_ms / HEART_MS) * 30
            self._draw_text(ctx, "♥", self._width / 2, 40 - rise,
                            (0.9, 0.2, 0.3, self._heart_ms / HEART_MS))
        if s.is_sleeping:
            drift = self._zzz_ms / ZZZ_PERIOD_MS
            self._draw_text(ctx, "z", 50 + drift * 20, 30 - drift * 20,
                            (1, 1, 1, 1.0 - drift))
        return True

    @staticmethod
    def _draw_text(ctx: cairo.Context, text: str, x: float, y: float,
                   rgba: tuple[float, float, float, float]) -> None:
        ctx.save()
        ctx.select_font_face("Sans", cairo.FONT_SLANT_NORMAL, cairo.FONT_WEIGHT_BOLD)
        ctx.set_font_size(20)
        ctx.set_source_rgba(*rgba)
        ctx.move_to(x, y)
        ctx.show_text(text)
        ctx.restore()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def _on_button_press(self, widget: Gtk.Window, event: Gdk.EventButton) -> bool:
        if event.type == Gdk.EventType._2BUTTON_PRESS:
            return self.interaction.double_click(event.button)
        if event.type == Gdk.EventType.BUTTON_PRESS:
            return self.interaction.press(event.button, event.x_root, event.y_root)
        return False

    def _on_button_release(self, widget: Gtk.Window, event: Gdk.EventButton) -> bool:
        return self.interaction.release(event.button)

    def _on_motion(self, widget: Gtk.Window, event: Gdk.EventMotion) -> bool:
        return self.interaction.motion(event.x_root, event.y_root)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def _cleanup(self) -> None:
        self._stop_timers()
        self._poller.stop_watching()

    def _on_realize(self, widget: Gtk.Window) -> None:
        """Disable compositor shadow/border on this window."""
        try:
            xid = self.get_window().get_xid()
            subprocess.Popen(
                ["xprop", "-id", str(xid),
                 "-f", "_COMPTON_SHADOW", "32c",
                 "-set", "_COMPTON_SHADOW", "0"],
                stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL,
            )
            logger.debug("Set _COMPTON_SHADOW=0 on xid %d", xid)
        except (AttributeError, OSError):
            logger.debug("Could not set _COMPTON_SHADOW")

    def _on_destroy(self, widget: Gtk.Window) -> None:
        self._cleanup()
        Gtk.main_quit()
