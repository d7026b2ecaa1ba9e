from __future__ import annotations

import logging

from crispcache_core.render.errors import ResourceExhaustionError
from crispcache_core.render.raster import Size
from crispcache_core.render.surface import Surface
from crispcache_ui.style.theme import ThemeProvider

from .host import HostChannel
from .raster_cache import RasterCache
from .state import RenderState

LOGGER = logging.getLogger(__name__)

DEFAULT_LABEL = "A quick brown fox jumps over the lazy dog."
DEFAULT_INDICATOR_SIZE = 5.0


class Renderer:
    """Paints the panel either from the upscaled raster cache or directly."""

    def __init__(
        self,
        host: HostChannel,
        theme: ThemeProvider,
        cache: RasterCache | None = None,
        *,
        label_text: str = DEFAULT_LABEL,
        indicator_size: float = DEFAULT_INDICATOR_SIZE,
    ) -> None:
        self._host = host
        self._theme = theme
        self.cache = cache or RasterCache()
        self.label_text = label_text
        self.indicator_size = indicator_size

    def paint(self, surface: Surface, state: RenderState) -> None:
        """Paint one frame. `surface` must arrive with the identity transform, which it is left in."""

        surface.rectangle(0, 0, surface.width, surface.height)
        surface.set_source_rgba(self._theme.get_color("live_lcd_bg"))
        surface.fill()

        composited = state.use_cached_image and self._composite_cached(surface, state.scale_factor)
        if not composited:
            # Native device resolution, so no scale/inverse-scale pair.
            self.draw_stuff(surface, surface.size)

        if state.hover_indicator_visible:
            self._draw_hover_indicator(surface)

        self._host.paint_complete()

    def draw_stuff(self, surface: Surface, logical_size: Size) -> None:
        """Draw the panel in logical 1x coordinates.

        Geometry comes from `logical_size`, never from `surface.size`: an
        off-screen target is already upscaled and also carries a scale transform,
        so reading its size would apply the factor twice.
        """
        width = logical_size.width
        height = logical_size.height

        surface.set_line_width(1)
        # Restore by value, not identity: the caller may have set a scale.
        saved = surface.get_transform()
        surface.translate(1.5, 1.5)
        surface.rectangle(0, 0, width - 3, height - 3)
        surface.set_source_rgba(self._theme.get_color("live_lcd_bg"))
        surface.fill_preserve()
        surface.set_source_rgba(self._theme.get_color("live_lcd_control_fg"))
        surface.stroke()
        surface.set_transform(saved)

        font = self._theme.get_font("label")
        surface.select_font_face(font.font)
        surface.set_font_size(font.size_px)
        _, text_height = surface.measure_text(self.label_text)
        surface.set_source_rgba(self._theme.get_color("live_lcd_control_fg_alt"))
        surface.draw_text(self.label_text, 5, (height + text_height / 2) / 2)

        self._host.draw_executed()

    def _composite_cached(self, surface: Surface, scale_factor: float) -> bool:
        try:
            image = self.cache.ensure(surface.size, scale_factor, self.draw_stuff)
        except ResourceExhaustionError as exc:
            LOGGER.warning("raster cache unavailable, drawing directly for this paint: %s", exc)
            self._host.report_error(exc)
            return False

        surface.scale(1 / scale_factor, 1 / scale_factor)
        surface.draw_raster_image(image)
        # The inverse scale above is the only transform applied so far.
        surface.identity_matrix()
        return True

    def _draw_hover_indicator(self, surface: Surface) -> None:
        r = self.indicator_size
        surface.set_source_rgba(self._theme.get_color("live_active_automation"))
        surface.rectangle(surface.width - 2 * r, (surface.height - r) / 2, r, r)
        surface.fill()
