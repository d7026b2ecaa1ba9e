from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from crispcache_ui.text.renderer import FontSpec, TextLayoutMetrics


DEFAULT_FONT_FALLBACK_PATTERNS = (
    "abletonsans",
    "helvetica",
    "arial",
    "dejavusans",
    "liberationsans",
)


def measure_text(text: str, font: FontSpec, size_px: float) -> TextLayoutMetrics:
    loaded = load_font(resolve_font_path(font), size_px)
    ascent, descent = font_metrics(loaded, size_px)
    width = float(loaded.getlength(text)) if text else 0.0
    return TextLayoutMetrics(width_px=width, height_px=float(ascent + descent), baseline_px=float(ascent))


def render_text_mask(text: str, font: FontSpec, size_px: float) -> tuple[np.ndarray, int, int]:
    """Rasterize `text` as an alpha mask anchored at its left baseline.

    Returns the mask plus the (left, top) offset of the mask relative to the
    baseline origin.
    """
    loaded = load_font(resolve_font_path(font), size_px)
    return _render_mask(text, loaded)


@lru_cache(maxsize=128)
def _render_mask(text: str, font: ImageFont.FreeTypeFont | ImageFont.ImageFont) -> tuple[np.ndarray, int, int]:
    if not text:
        return (np.zeros((1, 1), dtype=np.uint8), 0, 0)
    left, top, right, bottom = font.getbbox(text, anchor="ls")
    width = max(1, int(right - left))
    height = max(1, int(bottom - top))
    image = Image.new("L", (width, height), 0)
    draw = ImageDraw.Draw(image)
    draw.text((-left, -top), text, fill=255, font=font, anchor="ls")
    return (np.asarray(image, dtype=np.uint8), int(left), int(top))


@lru_cache(maxsize=64)
def load_font(font_path: str, size_px: float) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    size = max(1, int(round(size_px)))
    if not font_path:
        return ImageFont.load_default(size=size)
    try:
        return ImageFont.truetype(font_path, size=size)
    except OSError:
        return ImageFont.load_default(size=size)


def font_metrics(font: ImageFont.FreeTypeFont | ImageFont.ImageFont, size_px: float) -> tuple[int, int]:
    try:
        ascent, descent = font.getmetrics()
        return int(max(1, ascent)), int(max(0, descent))
    except AttributeError:
        return int(max(1, size_px * 0.8)), int(max(0, size_px * 0.2))


def resolve_font_path(font: FontSpec) -> str:
    if font.file_path:
        return str(Path(font.file_path).resolve())
    return _resolve_system_font_path(font.family)


@lru_cache(maxsize=32)
def _resolve_system_font_path(family: str) -> str:
    wanted = family.strip().lower().replace(" ", "")
    patterns = ((wanted,) if wanted else ()) + DEFAULT_FONT_FALLBACK_PATTERNS
    font_dirs = (
        Path.home() / "Library/Fonts",
        Path("/Library/Fonts"),
        Path("/System/Library/Fonts"),
        Path("/System/Library/Fonts/Supplemental"),
        Path("/usr/share/fonts"),
        Path("/usr/local/share/fonts"),
    )
    candidates: list[Path] = []
    for base in font_dirs:
        if not base.exists():
            continue
        for ext in ("*.ttf", "*.otf", "*.ttc"):
            candidates.extend(base.rglob(ext))
    for pattern in patterns:
        for path in candidates:
            name = path.name.lower().replace(" ", "")
            stem = path.stem.lower().replace(" ", "")
            if pattern in name or pattern in stem:
                return str(path)
    # Empty path selects Pillow's bundled default face.
    return ""
