from __future__ import annotations

import logging
from typing import Any, Mapping

from crispcache_ui.style.theme import ThemeProvider

from .host import HostChannel
from .raster_cache import RasterCache
from .state import RenderState, clamp_scale_factor

LOGGER = logging.getLogger(__name__)


class InvalidationController:
    """One handler per inbound host event.

    Every handler that can change the cached pixels clears the cache before it
    asks for a repaint; hover only touches the overlay and keeps the cache.
    """

    def __init__(
        self,
        state: RenderState,
        cache: RasterCache,
        host: HostChannel,
        theme: ThemeProvider | None = None,
    ) -> None:
        self._state = state
        self._cache = cache
        self._host = host
        self._theme = theme

    @property
    def state(self) -> RenderState:
        return self._state

    def on_scale_factor_change(self, value: float) -> None:
        clamped = clamp_scale_factor(value)
        if clamped != value:
            LOGGER.debug("scale factor %r clamped to %r", value, clamped)
        self._state.scale_factor = clamped
        self._cache.invalidate()
        self._host.request_repaint()

    def on_refresh_requested(self) -> None:
        self._cache.invalidate()
        self._host.request_repaint()

    def on_hover_enter(self) -> None:
        self._state.hover_indicator_visible = True
        self._host.request_repaint()

    def on_hover_leave(self) -> None:
        self._state.hover_indicator_visible = False
        self._host.request_repaint()

    def on_draw_mode_toggle(self, use_direct: bool) -> None:
        self._state.use_cached_image = not use_direct
        self._cache.invalidate()
        self._host.request_repaint()

    def on_theme_change(self, overrides: Mapping[str, Any]) -> None:
        if self._theme is None:
            raise RuntimeError("no theme provider attached to this controller")
        self._theme.update(overrides)
        self.on_refresh_requested()
