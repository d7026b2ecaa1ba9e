from __future__ import annotations

from dataclasses import dataclass
import math

import numpy as np
import torch

from crispcache_ui.text.renderer import FontSpec

from .errors import ConfigurationError
from .raster import (
    Color,
    DEFAULT_MAX_PIXELS,
    RasterImage,
    Size,
    allocate_frame,
    blend_coverage,
    composite_image,
    device_bounds,
    rect_corners,
    rect_coverage,
)
from .text import measure_text, render_text_mask
from .transform import Affine2D


TRANSPARENT: Color = (0, 0, 0, 0)


@dataclass(frozen=True)
class _PathRect:
    x: float
    y: float
    width: float
    height: float
    transform: Affine2D


class Surface:
    """Fixed-size RGBA drawing target with a cairo-style transform and path API.

    Pixels live in an (H, W, 4) uint8 tensor. Geometry is given in user space and
    mapped to device pixels by the current transform. Path segments capture the
    transform active when they are added.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        background: Color = TRANSPARENT,
        max_pixels: int = DEFAULT_MAX_PIXELS,
    ) -> None:
        if not isinstance(width, int) or not isinstance(height, int):
            raise ConfigurationError(f"surface dimensions must be integers, got {width!r}x{height!r}")
        self._frame = allocate_frame(width, height, background, max_pixels=max_pixels)
        self._width = width
        self._height = height
        self._transform = Affine2D()
        self._source: Color = (0, 0, 0, 255)
        self._line_width = 2.0
        self._font = FontSpec()
        self._font_size_px = 10.0
        self._path: list[_PathRect] = []

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def size(self) -> Size:
        return Size(self._width, self._height)

    @property
    def line_width(self) -> float:
        return self._line_width

    @property
    def source_rgba(self) -> Color:
        return self._source

    @property
    def font(self) -> FontSpec:
        return self._font

    @property
    def font_size_px(self) -> float:
        return self._font_size_px

    # Transform

    def get_transform(self) -> Affine2D:
        return self._transform

    def set_transform(self, transform: Affine2D) -> None:
        self._transform = transform

    def identity_matrix(self) -> None:
        self._transform = Affine2D()

    def scale(self, sx: float, sy: float) -> None:
        self._transform = self._transform.scaled(sx, sy)

    def translate(self, dx: float, dy: float) -> None:
        self._transform = self._transform.translated(dx, dy)

    def rotate(self, radians: float) -> None:
        self._transform = self._transform.rotated(radians)

    # Drawing state

    def set_source_rgba(self, color: Color) -> None:
        if len(color) != 4:
            raise ValueError(f"color must be an RGBA tuple, got {color!r}")
        self._source = tuple(int(max(0, min(255, c))) for c in color)  # type: ignore[assignment]

    def set_line_width(self, width: float) -> None:
        if width < 0:
            raise ValueError("line width must be >= 0")
        self._line_width = float(width)

    def select_font_face(self, font: FontSpec | str) -> None:
        self._font = font if isinstance(font, FontSpec) else FontSpec(family=font)

    def set_font_size(self, size_px: float) -> None:
        if size_px <= 0:
            raise ValueError("font size must be > 0")
        self._font_size_px = float(size_px)

    # Path

    def rectangle(self, x: float, y: float, width: float, height: float) -> None:
        if width < 0:
            x, width = x + width, -width
        if height < 0:
            y, height = y + height, -height
        self._path.append(_PathRect(float(x), float(y), float(width), float(height), self._transform))

    def new_path(self) -> None:
        self._path = []

    def fill(self) -> None:
        self.fill_preserve()
        self.new_path()

    def fill_preserve(self) -> None:
        for seg in self._path:
            rect = (seg.x, seg.y, seg.width, seg.height)
            region = device_bounds(rect_corners(seg.transform, *rect), self._width, self._height)
            if region is None:
                continue
            coverage = rect_coverage(seg.transform, rect, region)
            blend_coverage(self._frame, coverage, region[0], region[1], self._source)

    def stroke(self) -> None:
        self.stroke_preserve()
        self.new_path()

    def stroke_preserve(self) -> None:
        half = self._line_width / 2.0
        if half <= 0:
            return
        for seg in self._path:
            outer = (seg.x - half, seg.y - half, seg.width + 2 * half, seg.height + 2 * half)
            inner = (seg.x + half, seg.y + half, seg.width - 2 * half, seg.height - 2 * half)
            region = device_bounds(rect_corners(seg.transform, *outer), self._width, self._height)
            if region is None:
                continue
            coverage = rect_coverage(seg.transform, outer, region) - rect_coverage(seg.transform, inner, region)
            blend_coverage(self._frame, coverage.clamp(0.0, 1.0), region[0], region[1], self._source)

    # Text

    def measure_text(self, text: str) -> tuple[float, float]:
        """Return (width, height) of `text` in user units for the current font."""
        metrics = measure_text(text, self._font, self._font_size_px)
        return (metrics.width_px, metrics.height_px)

    def draw_text(self, text: str, x: float, y: float) -> None:
        """Draw `text` with its left baseline at user point (x, y).

        Glyphs are rasterized at the device font size, so only the translation
        and uniform scale of the transform apply to text.
        """
        if not text:
            return
        device_size = self._font_size_px * self._transform.uniform_scale()
        if device_size <= 0 or not math.isfinite(device_size):
            return
        mask, left, top = render_text_mask(text, self._font, device_size)
        dx, dy = self._transform.transform_point(x, y)
        coverage = torch.from_numpy(mask.astype(np.float32) / 255.0)
        blend_coverage(self._frame, coverage, int(round(dx)) + left, int(round(dy)) + top, self._source)

    # Images

    def draw_raster_image(self, image: RasterImage, x: float = 0.0, y: float = 0.0) -> None:
        composite_image(self._frame, image, self._transform, x, y)

    def read_pixels(self) -> torch.Tensor:
        return self._frame.clone()

    def finalize(self) -> RasterImage:
        return RasterImage(rgba=self._frame.clone(), width=self._width, height=self._height)
