from __future__ import annotations

from dataclasses import dataclass, field
import math
from pathlib import Path
import tomllib
from typing import Any, Mapping

from crispcache_core.render.errors import ConfigurationError
from crispcache_core.render.raster import DEFAULT_MAX_PIXELS
from crispcache_ui.style.theme import DEFAULT_TOKENS, ThemeTokens, validate_theme_tokens

from .renderer import DEFAULT_INDICATOR_SIZE, DEFAULT_LABEL
from .state import MAX_SCALE_FACTOR, MIN_SCALE_FACTOR


@dataclass(frozen=True)
class RenderConfig:
    width: int = 200
    height: int = 100
    scale_factor: float = 2.0
    use_cached_image: bool = True
    indicator_size: float = DEFAULT_INDICATOR_SIZE
    label_text: str = DEFAULT_LABEL
    max_offscreen_pixels: int = DEFAULT_MAX_PIXELS
    theme: ThemeTokens = field(default_factory=lambda: DEFAULT_TOKENS)


_RENDER_KEYS = {
    "width",
    "height",
    "scale_factor",
    "use_cached_image",
    "indicator_size",
    "label_text",
    "max_offscreen_pixels",
}


def load_render_config(path: str | Path) -> RenderConfig:
    """Read a TOML file with an optional `[render]` and `[theme]` table."""
    config_path = Path(path)
    try:
        with config_path.open("rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"config file not found: {config_path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"invalid TOML in {config_path}: {exc}") from exc
    return render_config_from_mapping(raw)


def render_config_from_mapping(raw: Mapping[str, Any]) -> RenderConfig:
    unknown_tables = set(raw) - {"render", "theme"}
    if unknown_tables:
        raise ConfigurationError(f"unknown config tables: {sorted(unknown_tables)}")
    render = dict(raw.get("render", {}))
    unknown = set(render) - _RENDER_KEYS
    if unknown:
        raise ConfigurationError(f"unknown render keys: {sorted(unknown)}")

    defaults = RenderConfig()
    width = _positive_int(render.get("width", defaults.width), "width")
    height = _positive_int(render.get("height", defaults.height), "height")
    max_pixels = _positive_int(render.get("max_offscreen_pixels", defaults.max_offscreen_pixels), "max_offscreen_pixels")

    scale_factor = render.get("scale_factor", defaults.scale_factor)
    if isinstance(scale_factor, bool) or not isinstance(scale_factor, (int, float)):
        raise ConfigurationError("`scale_factor` must be a number")
    if not MIN_SCALE_FACTOR <= float(scale_factor) <= MAX_SCALE_FACTOR:
        raise ConfigurationError(
            f"`scale_factor` must be in [{MIN_SCALE_FACTOR}, {MAX_SCALE_FACTOR}], got {scale_factor}"
        )

    use_cached_image = render.get("use_cached_image", defaults.use_cached_image)
    if not isinstance(use_cached_image, bool):
        raise ConfigurationError("`use_cached_image` must be a boolean")

    indicator_size = render.get("indicator_size", defaults.indicator_size)
    if (
        isinstance(indicator_size, bool)
        or not isinstance(indicator_size, (int, float))
        or not math.isfinite(indicator_size)
        or indicator_size <= 0
    ):
        raise ConfigurationError("`indicator_size` must be a positive finite number")

    label_text = render.get("label_text", defaults.label_text)
    if not isinstance(label_text, str):
        raise ConfigurationError("`label_text` must be a string")

    try:
        theme = validate_theme_tokens(raw.get("theme"))
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc

    return RenderConfig(
        width=width,
        height=height,
        scale_factor=float(scale_factor),
        use_cached_image=use_cached_image,
        indicator_size=float(indicator_size),
        label_text=label_text,
        max_offscreen_pixels=max_pixels,
        theme=theme,
    )


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"`{name}` must be a positive integer")
    return value
