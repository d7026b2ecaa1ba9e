from __future__ import annotations

from dataclasses import dataclass
import math

import torch
import torch.nn.functional as F

from .errors import ConfigurationError, ResourceExhaustionError
from .transform import Affine2D


Color = tuple[int, int, int, int]

# 8192 x 8192 RGBA8, i.e. 256 MiB per surface.
DEFAULT_MAX_PIXELS = 8192 * 8192

_SUPERSAMPLE = 4


@dataclass(frozen=True)
class Size:
    width: int
    height: int

    def scaled(self, factor: float) -> "Size":
        """Physical pixel size needed to hold this size drawn at `factor`x."""
        return Size(
            width=int(math.ceil(self.width * factor - 1e-9)),
            height=int(math.ceil(self.height * factor - 1e-9)),
        )


@dataclass(frozen=True)
class RasterImage:
    """Read-only pixel snapshot taken from a finalized Surface.

    `rgba` is an (H, W, 4) uint8 tensor in straight alpha. Callers must treat it
    as immutable; `Surface.finalize` hands over a private copy.
    """

    rgba: torch.Tensor
    width: int
    height: int

    @property
    def size(self) -> Size:
        return Size(self.width, self.height)


def allocate_frame(width: int, height: int, color: Color, *, max_pixels: int = DEFAULT_MAX_PIXELS) -> torch.Tensor:
    if width <= 0 or height <= 0:
        raise ConfigurationError(f"surface dimensions must be > 0, got {width}x{height}")
    if width * height > max_pixels:
        raise ResourceExhaustionError(
            f"surface {width}x{height} exceeds the raster budget of {max_pixels} pixels"
        )
    try:
        frame = torch.empty((height, width, 4), dtype=torch.uint8)
    except RuntimeError as exc:
        raise ResourceExhaustionError(f"could not allocate {width}x{height} surface: {exc}") from exc
    frame[:, :, 0] = color[0]
    frame[:, :, 1] = color[1]
    frame[:, :, 2] = color[2]
    frame[:, :, 3] = color[3]
    return frame


def device_bounds(
    corners: list[tuple[float, float]], width: int, height: int
) -> tuple[int, int, int, int] | None:
    xs = [p[0] for p in corners]
    ys = [p[1] for p in corners]
    x0 = max(0, int(math.floor(min(xs))))
    y0 = max(0, int(math.floor(min(ys))))
    x1 = min(width, int(math.ceil(max(xs))))
    y1 = min(height, int(math.ceil(max(ys))))
    if x1 <= x0 or y1 <= y0:
        return None
    return (x0, y0, x1, y1)


def rect_corners(transform: Affine2D, x: float, y: float, w: float, h: float) -> list[tuple[float, float]]:
    return [
        transform.transform_point(x, y),
        transform.transform_point(x + w, y),
        transform.transform_point(x + w, y + h),
        transform.transform_point(x, y + h),
    ]


def rect_coverage(
    transform: Affine2D,
    rect: tuple[float, float, float, float],
    region: tuple[int, int, int, int],
) -> torch.Tensor:
    """Fractional pixel coverage of a user-space rect over a device region.

    Axis-aligned transforms get exact area coverage; anything rotated or
    sheared is supersampled.
    """
    x, y, w, h = rect
    rx0, ry0, rx1, ry1 = region
    if w <= 0 or h <= 0:
        return torch.zeros((ry1 - ry0, rx1 - rx0), dtype=torch.float32)
    if transform.is_axis_aligned():
        (ax, ay), (bx, by) = transform.transform_point(x, y), transform.transform_point(x + w, y + h)
        left, right = min(ax, bx), max(ax, bx)
        top, bottom = min(ay, by), max(ay, by)
        px = torch.arange(rx0, rx1, dtype=torch.float32)
        py = torch.arange(ry0, ry1, dtype=torch.float32)
        cov_x = (torch.clamp(px + 1.0, max=right) - torch.clamp(px, min=left)).clamp(0.0, 1.0)
        cov_y = (torch.clamp(py + 1.0, max=bottom) - torch.clamp(py, min=top)).clamp(0.0, 1.0)
        return cov_y.unsqueeze(1) * cov_x.unsqueeze(0)
    return _supersampled_quad(rect_corners(transform, x, y, w, h), region)


def _supersampled_quad(corners: list[tuple[float, float]], region: tuple[int, int, int, int]) -> torch.Tensor:
    rx0, ry0, rx1, ry1 = region
    n = _SUPERSAMPLE
    offsets = (torch.arange(n, dtype=torch.float32) + 0.5) / n
    sx = (torch.arange(rx0, rx1, dtype=torch.float32).unsqueeze(1) + offsets.unsqueeze(0)).reshape(-1)
    sy = (torch.arange(ry0, ry1, dtype=torch.float32).unsqueeze(1) + offsets.unsqueeze(0)).reshape(-1)
    gy, gx = torch.meshgrid(sy, sx, indexing="ij")
    inside_pos = torch.ones_like(gx, dtype=torch.bool)
    inside_neg = torch.ones_like(gx, dtype=torch.bool)
    for (ax, ay), (bx, by) in zip(corners, corners[1:] + corners[:1]):
        cross = (bx - ax) * (gy - ay) - (by - ay) * (gx - ax)
        inside_pos &= cross >= 0
        inside_neg &= cross <= 0
    inside = (inside_pos | inside_neg).to(torch.float32)
    h = ry1 - ry0
    w = rx1 - rx0
    return inside.reshape(h, n, w, n).mean(dim=(1, 3))


def blend_coverage(frame: torch.Tensor, coverage: torch.Tensor, x: int, y: int, color: Color) -> None:
    """Source-over a solid colour through a [0, 1] coverage mask placed at (x, y)."""
    h, w = coverage.shape
    if h <= 0 or w <= 0:
        return
    x0 = max(0, x)
    y0 = max(0, y)
    x1 = min(frame.shape[1], x + w)
    y1 = min(frame.shape[0], y + h)
    if x1 <= x0 or y1 <= y0:
        return
    cov = coverage[y0 - y : y1 - y, x0 - x : x1 - x]
    src_alpha = cov * (color[3] / 255.0)
    if not bool((src_alpha > 0).any()):
        return
    src_rgb = torch.tensor(color[:3], dtype=torch.float32).view(1, 1, 3)
    _over(frame[y0:y1, x0:x1], src_rgb * src_alpha.unsqueeze(-1), src_alpha)


def composite_image(frame: torch.Tensor, image: RasterImage, transform: Affine2D, x: float, y: float) -> None:
    """Draw `image` at its native pixel size placed at user (x, y) under `transform`."""
    corners = rect_corners(transform, x, y, image.width, image.height)
    region = device_bounds(corners, frame.shape[1], frame.shape[0])
    if region is None:
        return
    src = _premultiplied_nchw(image.rgba)
    if transform.is_axis_aligned():
        _composite_axis_aligned(frame, src, corners, transform)
        return
    _composite_sampled(frame, src, image, transform, x, y, region)


def _composite_axis_aligned(
    frame: torch.Tensor,
    src: torch.Tensor,
    corners: list[tuple[float, float]],
    transform: Affine2D,
) -> None:
    (ax, ay), (cx, cy) = corners[0], corners[2]
    left = int(round(min(ax, cx)))
    top = int(round(min(ay, cy)))
    dst_w = int(round(abs(cx - ax)))
    dst_h = int(round(abs(cy - ay)))
    if dst_w <= 0 or dst_h <= 0:
        return
    if transform.xx < 0:
        src = torch.flip(src, dims=(3,))
    if transform.yy < 0:
        src = torch.flip(src, dims=(2,))
    src_h, src_w = src.shape[2], src.shape[3]
    if (src_h, src_w) != (dst_h, dst_w):
        if dst_h <= src_h and dst_w <= src_w:
            # Box filter: an integer factor averages exactly the covered samples.
            src = F.interpolate(src, size=(dst_h, dst_w), mode="area")
        else:
            src = F.interpolate(src, size=(dst_h, dst_w), mode="bilinear", align_corners=False)
    x0 = max(0, left)
    y0 = max(0, top)
    x1 = min(frame.shape[1], left + dst_w)
    y1 = min(frame.shape[0], top + dst_h)
    if x1 <= x0 or y1 <= y0:
        return
    patch = src[0, :, y0 - top : y1 - top, x0 - left : x1 - left].permute(1, 2, 0)
    _over(frame[y0:y1, x0:x1], patch[:, :, :3], patch[:, :, 3].clamp(0.0, 1.0))


def _composite_sampled(
    frame: torch.Tensor,
    src: torch.Tensor,
    image: RasterImage,
    transform: Affine2D,
    x: float,
    y: float,
    region: tuple[int, int, int, int],
) -> None:
    rx0, ry0, rx1, ry1 = region
    inv = transform.inverted()
    py, px = torch.meshgrid(
        torch.arange(ry0, ry1, dtype=torch.float32) + 0.5,
        torch.arange(rx0, rx1, dtype=torch.float32) + 0.5,
        indexing="ij",
    )
    u = inv.xx * px + inv.xy * py + inv.x0 - x
    v = inv.yx * px + inv.yy * py + inv.y0 - y
    grid = torch.stack((2.0 * u / image.width - 1.0, 2.0 * v / image.height - 1.0), dim=-1).unsqueeze(0)
    sampled = F.grid_sample(src, grid, mode="bilinear", padding_mode="zeros", align_corners=False)
    patch = sampled[0].permute(1, 2, 0)
    _over(frame[ry0:ry1, rx0:rx1], patch[:, :, :3], patch[:, :, 3].clamp(0.0, 1.0))


def _premultiplied_nchw(rgba: torch.Tensor) -> torch.Tensor:
    src = rgba.to(torch.float32) / 255.0
    alpha = src[:, :, 3:4]
    premul = torch.cat((src[:, :, :3] * alpha * 255.0, alpha), dim=2)
    return premul.permute(2, 0, 1).unsqueeze(0)


def _over(patch: torch.Tensor, src_premul_rgb: torch.Tensor, src_alpha: torch.Tensor) -> None:
    dst_rgb = patch[:, :, :3].to(torch.float32)
    dst_alpha = patch[:, :, 3].to(torch.float32) / 255.0
    keep = (1.0 - src_alpha) * dst_alpha
    out_alpha = src_alpha + keep
    out_rgb_num = src_premul_rgb + dst_rgb * keep.unsqueeze(-1)
    safe = torch.where(out_alpha > 1e-6, out_alpha, torch.ones_like(out_alpha))
    out_rgb = out_rgb_num / safe.unsqueeze(-1)
    patch[:, :, :3] = torch.clamp(torch.round(out_rgb), 0, 255).to(torch.uint8)
    patch[:, :, 3] = torch.clamp(torch.round(out_alpha * 255.0), 0, 255).to(torch.uint8)
