from __future__ import annotations

from dataclasses import dataclass
import math


_EPS = 1e-9


@dataclass(frozen=True)
class Affine2D:
    """Immutable 2x3 affine matrix mapping user space to device pixels.

    Layout follows the usual cairo convention::

        x_dev = xx * x + xy * y + x0
        y_dev = yx * x + yy * y + y0
    """

    xx: float = 1.0
    yx: float = 0.0
    xy: float = 0.0
    yy: float = 1.0
    x0: float = 0.0
    y0: float = 0.0

    @classmethod
    def identity(cls) -> "Affine2D":
        return cls()

    @classmethod
    def scaling(cls, sx: float, sy: float) -> "Affine2D":
        return cls(xx=float(sx), yy=float(sy))

    @classmethod
    def translation(cls, dx: float, dy: float) -> "Affine2D":
        return cls(x0=float(dx), y0=float(dy))

    @classmethod
    def rotation(cls, radians: float) -> "Affine2D":
        c = math.cos(radians)
        s = math.sin(radians)
        return cls(xx=c, yx=s, xy=-s, yy=c)

    def multiply(self, other: "Affine2D") -> "Affine2D":
        """Return the transform that applies `self` first, then `other`."""
        return Affine2D(
            xx=self.xx * other.xx + self.yx * other.xy,
            yx=self.xx * other.yx + self.yx * other.yy,
            xy=self.xy * other.xx + self.yy * other.xy,
            yy=self.xy * other.yx + self.yy * other.yy,
            x0=self.x0 * other.xx + self.y0 * other.xy + other.x0,
            y0=self.x0 * other.yx + self.y0 * other.yy + other.y0,
        )

    def scaled(self, sx: float, sy: float) -> "Affine2D":
        return Affine2D.scaling(sx, sy).multiply(self)

    def translated(self, dx: float, dy: float) -> "Affine2D":
        return Affine2D.translation(dx, dy).multiply(self)

    def rotated(self, radians: float) -> "Affine2D":
        return Affine2D.rotation(radians).multiply(self)

    def determinant(self) -> float:
        return (self.xx * self.yy) - (self.xy * self.yx)

    def inverted(self) -> "Affine2D":
        det = self.determinant()
        if abs(det) < _EPS:
            raise ValueError("transform is singular")
        xx = self.yy / det
        xy = -self.xy / det
        yx = -self.yx / det
        yy = self.xx / det
        return Affine2D(
            xx=xx,
            yx=yx,
            xy=xy,
            yy=yy,
            x0=-(xx * self.x0 + xy * self.y0),
            y0=-(yx * self.x0 + yy * self.y0),
        )

    def transform_point(self, x: float, y: float) -> tuple[float, float]:
        return (self.xx * x + self.xy * y + self.x0, self.yx * x + self.yy * y + self.y0)

    def is_axis_aligned(self) -> bool:
        return abs(self.xy) < _EPS and abs(self.yx) < _EPS

    def is_identity(self) -> bool:
        return self.is_close(Affine2D())

    def uniform_scale(self) -> float:
        """Geometric mean scale; used to size fonts and pens in device space."""
        return math.sqrt(abs(self.determinant()))

    def is_close(self, other: "Affine2D", tol: float = 1e-9) -> bool:
        return all(
            abs(a - b) <= tol
            for a, b in zip(
                (self.xx, self.yx, self.xy, self.yy, self.x0, self.y0),
                (other.xx, other.yx, other.xy, other.yy, other.x0, other.y0),
            )
        )
