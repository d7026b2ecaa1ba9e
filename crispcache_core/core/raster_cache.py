from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from crispcache_core.render.raster import DEFAULT_MAX_PIXELS, RasterImage, Size
from crispcache_core.render.surface import Surface

LOGGER = logging.getLogger(__name__)

DrawRoutine = Callable[[Surface, Size], None]
SurfaceFactory = Callable[[int, int], Surface]


@dataclass(frozen=True)
class CacheEntry:
    image: RasterImage | None = None
    built_at_scale: float = 1.0
    built_at_size: Size | None = None

    def is_valid_for(self, size: Size, scale_factor: float) -> bool:
        return self.image is not None and self.built_at_scale == scale_factor and self.built_at_size == size


class RasterCache:
    """Holds one upscaled snapshot of the drawing routine's output.

    The off-screen surface is sized in physical pixels (`size * scale`) and the
    scale is applied to it once before drawing, so the routine always draws in
    logical coordinates. A surface allocated at logical size would crop.
    """

    def __init__(
        self,
        *,
        max_pixels: int = DEFAULT_MAX_PIXELS,
        surface_factory: SurfaceFactory | None = None,
    ) -> None:
        self._entry = CacheEntry()
        self._max_pixels = max_pixels
        self._surface_factory = surface_factory or self._default_surface
        self.builds = 0
        self.hits = 0

    @property
    def entry(self) -> CacheEntry:
        return self._entry

    def is_valid_for(self, size: Size, scale_factor: float) -> bool:
        return self._entry.is_valid_for(size, scale_factor)

    def ensure(self, target_size: Size, scale_factor: float, draw_routine: DrawRoutine) -> RasterImage:
        if self._entry.is_valid_for(target_size, scale_factor):
            self.hits += 1
            assert self._entry.image is not None
            return self._entry.image

        # Never leave a stale image behind if the rebuild below fails.
        self._entry = CacheEntry()
        physical = target_size.scaled(scale_factor)
        offscreen = self._surface_factory(physical.width, physical.height)
        offscreen.scale(scale_factor, scale_factor)
        draw_routine(offscreen, target_size)
        image = offscreen.finalize()
        self._entry = CacheEntry(image=image, built_at_scale=scale_factor, built_at_size=target_size)
        self.builds += 1
        LOGGER.debug(
            "raster cache rebuilt: %dx%d logical at %.3fx -> %dx%d",
            target_size.width,
            target_size.height,
            scale_factor,
            physical.width,
            physical.height,
        )
        return image

    def invalidate(self) -> None:
        self._entry = CacheEntry()

    def _default_surface(self, width: int, height: int) -> Surface:
        return Surface(width, height, max_pixels=self._max_pixels)
