from __future__ import annotations

from dataclasses import asdict, dataclass, replace
import math
import re
from typing import Any, Mapping

from crispcache_ui.text.renderer import FontDescriptor, FontSpec

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}([0-9a-fA-F]{2})?$")

_COLOR_TOKENS = (
    "live_lcd_bg",
    "live_lcd_control_fg",
    "live_lcd_control_fg_alt",
    "live_active_automation",
)


@dataclass(frozen=True)
class ThemeTokens:
    """Symbolic colour and font tokens read by the drawing routine."""

    live_lcd_bg: str = "#1E1E1E"
    live_lcd_control_fg: str = "#B3B3B3"
    live_lcd_control_fg_alt: str = "#FFB532"
    live_active_automation: str = "#FF5A1E"
    font_family: str = "Ableton Sans Medium"
    font_size_px: float = 10.0


DEFAULT_TOKENS = ThemeTokens()


def validate_theme_tokens(
    overrides: Mapping[str, Any] | None = None, base: ThemeTokens = DEFAULT_TOKENS
) -> ThemeTokens:
    """Validate and merge token overrides on top of `base`."""

    raw: dict[str, Any] = asdict(base)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown theme token: {key}")
            raw[key] = value

    for key in _COLOR_TOKENS:
        if not isinstance(raw[key], str) or not _HEX_COLOR.match(raw[key]):
            raise ValueError(f"Token `{key}` must be a hex color (#RRGGBB or #RRGGBBAA)")

    if not isinstance(raw["font_family"], str) or not raw["font_family"].strip():
        raise ValueError("Token `font_family` must be a non-empty string")

    if (
        isinstance(raw["font_size_px"], bool)
        or not isinstance(raw["font_size_px"], (int, float))
        or not math.isfinite(float(raw["font_size_px"]))
        or float(raw["font_size_px"]) <= 0
    ):
        raise ValueError("Token `font_size_px` must be a positive finite number")

    return replace(
        base,
        **{key: str(raw[key]) for key in _COLOR_TOKENS},
        font_family=str(raw["font_family"]),
        font_size_px=float(raw["font_size_px"]),
    )


def parse_hex_rgba(value: str) -> tuple[int, int, int, int]:
    raw = value.strip()
    if not _HEX_COLOR.match(raw):
        raise ValueError(f"color must be #RRGGBB or #RRGGBBAA, got `{value}`")
    h = raw[1:]
    alpha = int(h[6:8], 16) if len(h) == 8 else 255
    return (int(h[0:2], 16), int(h[2:4], 16), int(h[4:6], 16), alpha)


class ThemeProvider:
    """Resolves symbolic colour and font names against the active tokens.

    Values are looked up on every call so a token swap takes effect on the next
    draw; nothing here caches rendered output.
    """

    def __init__(self, tokens: ThemeTokens = DEFAULT_TOKENS) -> None:
        self._tokens = tokens

    @property
    def tokens(self) -> ThemeTokens:
        return self._tokens

    def set_tokens(self, tokens: ThemeTokens) -> None:
        self._tokens = tokens

    def update(self, overrides: Mapping[str, Any]) -> ThemeTokens:
        self._tokens = validate_theme_tokens(overrides, base=self._tokens)
        return self._tokens

    def get_color(self, name: str) -> tuple[int, int, int, int]:
        if name not in _COLOR_TOKENS:
            raise KeyError(f"unknown theme color: {name}")
        return parse_hex_rgba(getattr(self._tokens, name))

    def get_font(self, name: str = "label") -> FontDescriptor:
        if name != "label":
            raise KeyError(f"unknown theme font: {name}")
        return FontDescriptor(
            font=FontSpec(family=self._tokens.font_family),
            size_px=self._tokens.font_size_px,
        )
