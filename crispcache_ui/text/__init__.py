"""Font interfaces for crispcache UI."""

from .renderer import FontDescriptor, FontSpec, TextLayoutMetrics

__all__ = [
    "FontDescriptor",
    "FontSpec",
    "TextLayoutMetrics",
]
