from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


FontSlant = Literal["regular", "italic", "oblique"]


@dataclass(frozen=True)
class FontSpec:
    """Font definition from either system lookup or explicit file path.

    If `file_path` is set, the surface prefers file-backed font loading.
    """

    family: str = "Ableton Sans Medium"
    file_path: str | None = None
    weight: int = 400
    slant: FontSlant = "regular"

    def __post_init__(self) -> None:
        if not self.family.strip() and self.file_path is None:
            raise ValueError("FontSpec requires `family` when `file_path` is not set")
        if self.file_path is not None and not str(self.file_path).strip():
            raise ValueError("FontSpec `file_path` must be non-empty when provided")
        if self.weight < 1 or self.weight > 1000:
            raise ValueError("FontSpec `weight` must be in [1, 1000]")


@dataclass(frozen=True)
class FontDescriptor:
    """Font face plus nominal size, as handed out by a theme provider."""

    font: FontSpec
    size_px: float

    def __post_init__(self) -> None:
        if self.size_px <= 0:
            raise ValueError("FontDescriptor `size_px` must be > 0")


@dataclass(frozen=True)
class TextLayoutMetrics:
    width_px: float
    height_px: float
    baseline_px: float
