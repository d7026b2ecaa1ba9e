from __future__ import annotations

from dataclasses import dataclass


MIN_SCALE_FACTOR = 0.125
MAX_SCALE_FACTOR = 8.0


def clamp_scale_factor(value: float) -> float:
    return max(MIN_SCALE_FACTOR, min(MAX_SCALE_FACTOR, float(value)))


@dataclass
class RenderState:
    """Paint parameters; written by the invalidation controller only."""

    use_cached_image: bool = True
    scale_factor: float = 2.0
    hover_indicator_visible: bool = False

    def __post_init__(self) -> None:
        self.scale_factor = clamp_scale_factor(self.scale_factor)
