"""Theme and font contracts consumed by the crispcache drawing routine."""

from .style.theme import DEFAULT_TOKENS, ThemeProvider, ThemeTokens, parse_hex_rgba, validate_theme_tokens
from .text.renderer import FontDescriptor, FontSpec, TextLayoutMetrics

__all__ = [
    "DEFAULT_TOKENS",
    "FontDescriptor",
    "FontSpec",
    "TextLayoutMetrics",
    "ThemeProvider",
    "ThemeTokens",
    "parse_hex_rgba",
    "validate_theme_tokens",
]
