import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np


class AspectPolicy(Enum):
    STRETCH = "stretch"   # use the viewport as given, pixels may be non-square
    EXPAND = "expand"     # grow the narrow axis around the center
    STRICT = "strict"     # refuse a viewport whose aspect differs from the image

ASPECT_TOLERANCE = 1e-6


@dataclass(frozen=True)
class Resolution:
    width:  int
    height: int

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")

    def __str__(self):
        return f"{self.width}x{self.height}"


@dataclass(frozen=True)
class Viewport:
    upper_left:  complex
    lower_right: complex

    def __post_init__(self):
        upper_left, lower_right = complex(self.upper_left), complex(self.lower_right)
        for corner in (upper_left, lower_right):
            if not (math.isfinite(corner.real) and math.isfinite(corner.imag)):
                raise ValueError(f"viewport corner {corner} is not finite")
        if not upper_left.real < lower_right.real:
            raise ValueError(
                f"upper-left real part {upper_left.real} must be smaller than "
                f"lower-right real part {lower_right.real}")
        if not upper_left.imag > lower_right.imag:
            raise ValueError(
                f"upper-left imaginary part {upper_left.imag} must be greater than "
                f"lower-right imaginary part {lower_right.imag}")
        object.__setattr__(self, "upper_left", upper_left)
        object.__setattr__(self, "lower_right", lower_right)

    @property
    def width(self) -> float:
        return self.lower_right.real - self.upper_left.real

    @property
    def height(self) -> float:
        return self.upper_left.imag - self.lower_right.imag

    @property
    def center(self) -> complex:
        return complex((self.upper_left.real + self.lower_right.real) / 2,
                       (self.upper_left.imag + self.lower_right.imag) / 2)

    def fit(self, resolution: Resolution, policy=AspectPolicy.STRETCH) -> "Viewport":
        """Return the viewport to render at ``resolution`` under ``policy``.

        Aspect is compared in complex units per pixel step, using the same
        ``n - 1`` spans as :func:`pixel_to_point`. A single row or column
        has no aspect and is returned unchanged.
        """
        policy = AspectPolicy(policy)
        if policy is AspectPolicy.STRETCH or resolution.width == 1 or resolution.height == 1:
            return self

        step_x = self.width / (resolution.width - 1)
        step_y = self.height / (resolution.height - 1)
        if math.isclose(step_x, step_y, rel_tol=ASPECT_TOLERANCE):
            return self
        if policy is AspectPolicy.STRICT:
            raise ValueError(
                f"viewport aspect {self.width / self.height:.6g} does not match "
                f"image aspect {(resolution.width - 1) / (resolution.height - 1):.6g} "
                f"for {resolution}")

        center = self.center
        if step_x > step_y:
            half = step_x * (resolution.height - 1) / 2
            return Viewport(complex(self.upper_left.real, center.imag + half),
                            complex(self.lower_right.real, center.imag - half))
        half = step_y * (resolution.width - 1) / 2
        return Viewport(complex(center.real - half, self.upper_left.imag),
                        complex(center.real + half, self.lower_right.imag))


def _axis_value(index: int, count: int, start: float, end: float) -> float:
    if count == 1 or index == 0:
        return start
    if index == count - 1:
        return end
    return start + (index / (count - 1)) * (end - start)


def pixel_to_point(resolution: Resolution, pixel: Tuple[int, int], viewport: Viewport) -> complex:
    """Map pixel ``(x, y)`` to its point in the complex plane.

    ``y`` grows downward while the imaginary part grows upward, so row 0
    lies on ``upper_left.imag`` and the last row on ``lower_right.imag``.
    """
    x, y = pixel
    ul, lr = viewport.upper_left, viewport.lower_right
    return complex(_axis_value(x, resolution.width, ul.real, lr.real),
                   _axis_value(y, resolution.height, ul.imag, lr.imag))


def row_points(resolution: Resolution, y: int, viewport: Viewport) -> np.ndarray:
    """Vectorized :func:`pixel_to_point` over one image row, bit-identical to it."""
    ul, lr = viewport.upper_left, viewport.lower_right
    width = resolution.width
    re = np.full(width, ul.real, dtype=np.float64)
    if width > 1:
        xs = np.arange(1, width - 1, dtype=np.float64)
        re[1:-1] = ul.real + (xs / (width - 1)) * (lr.real - ul.real)
        re[-1] = lr.real
    points = np.empty(width, dtype=np.complex128)
    points.real = re
    points.imag = _axis_value(y, resolution.height, ul.imag, lr.imag)
    return points
