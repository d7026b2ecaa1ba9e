from __future__ import annotations

from collections import deque
from dataclasses import dataclass
import logging
import shlex
from typing import Literal

from crispcache_core.render.errors import CrispCacheError
from crispcache_core.render.raster import RasterImage, Size
from crispcache_core.render.surface import Surface
from crispcache_ui.style.theme import ThemeProvider

from .config import RenderConfig
from .controller import InvalidationController
from .host import HostChannel, RecordingHostChannel
from .raster_cache import RasterCache
from .renderer import Renderer
from .state import RenderState

LOGGER = logging.getLogger(__name__)

MessageKind = Literal["scale", "bang", "hover_enter", "hover_leave", "direct_draw", "resize", "theme"]


@dataclass(frozen=True)
class HostMessage:
    kind: MessageKind
    args: tuple[str, ...] = ()


_SELECTORS: dict[str, MessageKind] = {
    "float": "scale",
    "int": "scale",
    "msg_float": "scale",
    "msg_int": "scale",
    "bang": "bang",
    "idle": "hover_enter",
    "onidle": "hover_enter",
    "idleout": "hover_leave",
    "onidleout": "hover_leave",
    "direct_draw": "direct_draw",
    "resize": "resize",
    "theme": "theme",
}

_ARITY: dict[MessageKind, int] = {
    "scale": 1,
    "bang": 0,
    "hover_enter": 0,
    "hover_leave": 0,
    "direct_draw": 1,
    "resize": 2,
    "theme": 2,
}


def parse_host_message(text: str) -> HostMessage | None:
    """Parse one host message line such as `float 3`, `bang` or `direct_draw 1`.

    A bare number is a scale-factor message. Unknown selectors and wrong
    argument counts yield None so the caller can drop them.
    """

    try:
        parts = shlex.split(text)
    except ValueError:
        return None
    if not parts:
        return None
    selector, args = parts[0], tuple(parts[1:])
    if _is_number(selector):
        return HostMessage(kind="scale", args=(selector,))
    kind = _SELECTORS.get(selector)
    if kind is None or len(args) != _ARITY[kind]:
        return None
    return HostMessage(kind=kind, args=args)


@dataclass(frozen=True)
class RuntimeTick:
    messages_processed: int
    painted: bool
    frame: RasterImage | None


class HostRuntime:
    """Single-threaded message loop sitting between a host and the renderer.

    Queued messages are all dispatched before any repaint they requested is
    serviced, and repeated repaint requests within one tick coalesce into one
    paint.
    """

    def __init__(self, config: RenderConfig | None = None, outlets: HostChannel | None = None) -> None:
        self.config = config or RenderConfig()
        self.outlets = outlets or RecordingHostChannel()
        self.size = Size(self.config.width, self.config.height)
        self.state = RenderState(
            use_cached_image=self.config.use_cached_image,
            scale_factor=self.config.scale_factor,
        )
        self.theme = ThemeProvider(self.config.theme)
        self.cache = RasterCache(max_pixels=self.config.max_offscreen_pixels)
        self.renderer = Renderer(
            self,
            self.theme,
            self.cache,
            label_text=self.config.label_text,
            indicator_size=self.config.indicator_size,
        )
        self.controller = InvalidationController(self.state, self.cache, self, self.theme)
        self._queue: deque[HostMessage] = deque()
        self._repaint_pending = False
        self._last_frame: RasterImage | None = None

    @property
    def last_frame(self) -> RasterImage | None:
        return self._last_frame

    @property
    def repaint_pending(self) -> bool:
        return self._repaint_pending

    # HostChannel

    def paint_complete(self) -> None:
        self.outlets.paint_complete()

    def draw_executed(self) -> None:
        self.outlets.draw_executed()

    def request_repaint(self) -> None:
        self._repaint_pending = True
        self.outlets.request_repaint()

    def report_error(self, error: Exception) -> None:
        self.outlets.report_error(error)

    # Inbound

    def post(self, message: HostMessage | str) -> bool:
        if isinstance(message, str):
            parsed = parse_host_message(message)
            if parsed is None:
                LOGGER.warning("dropping unrecognized host message: %r", message)
                return False
            message = parsed
        self._queue.append(message)
        return True

    def run_once(self) -> RuntimeTick:
        processed = 0
        while self._queue:
            message = self._queue.popleft()
            processed += 1
            try:
                self._dispatch(message)
            except (ValueError, OverflowError) as exc:
                LOGGER.warning("host message %s%r rejected: %s", message.kind, message.args, exc)
                self.report_error(exc)

        if not self._repaint_pending:
            return RuntimeTick(messages_processed=processed, painted=False, frame=None)
        self._repaint_pending = False
        frame = self._paint()
        return RuntimeTick(messages_processed=processed, painted=frame is not None, frame=frame)

    def run_until_idle(self, max_ticks: int = 100) -> list[RuntimeTick]:
        ticks: list[RuntimeTick] = []
        for _ in range(max_ticks):
            if not self._queue and not self._repaint_pending:
                break
            ticks.append(self.run_once())
        return ticks

    def _dispatch(self, message: HostMessage) -> None:
        ctl = self.controller
        if message.kind == "scale":
            ctl.on_scale_factor_change(float(message.args[0]))
        elif message.kind == "bang":
            ctl.on_refresh_requested()
        elif message.kind == "hover_enter":
            ctl.on_hover_enter()
        elif message.kind == "hover_leave":
            ctl.on_hover_leave()
        elif message.kind == "direct_draw":
            ctl.on_draw_mode_toggle(float(message.args[0]) != 0)
        elif message.kind == "resize":
            self.size = Size(int(message.args[0]), int(message.args[1]))
            self.request_repaint()
        elif message.kind == "theme":
            ctl.on_theme_change({message.args[0]: _coerce_token(message.args[1])})
        else:
            raise ValueError(f"unhandled message kind: {message.kind}")

    def _paint(self) -> RasterImage | None:
        try:
            surface = Surface(self.size.width, self.size.height)
        except CrispCacheError as exc:
            LOGGER.warning("skipping paint: %s", exc)
            self.report_error(exc)
            return None
        self.renderer.paint(surface, self.state)
        self._last_frame = surface.finalize()
        return self._last_frame


def _is_number(value: str) -> bool:
    try:
        float(value)
    except ValueError:
        return False
    return True


def _coerce_token(value: str) -> str | float:
    return float(value) if _is_number(value) else value
