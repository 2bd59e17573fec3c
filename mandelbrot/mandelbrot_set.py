from dataclasses import dataclass
from typing import Optional

import numpy as np
from numba import njit

# Buffer value of a point that never escaped
BOUNDED = -1


def _in_interior(cr, ci):
    # Main cardioid or period-2 bulb; works on floats and on numpy arrays.
    xq = cr - 0.25
    q = xq*xq + ci*ci
    in_cardioid = q*(q + xq) <= 0.25*ci*ci
    in_bulb = (cr + 1.0)*(cr + 1.0) + ci*ci < 0.0625
    return in_cardioid | in_bulb


@njit(nogil=True, cache=True)
def _escape_times(cr, ci, max_iterations, limit, interior_check):
    # Compiled twin of MandelbrotSet.escape_time; runs without the GIL.
    # No fastmath, so the float64 operations stay unfused and in order.
    result = np.empty(cr.size, dtype=np.int32)
    for k in range(cr.size):
        x = cr[k]
        y = ci[k]
        result[k] = BOUNDED
        if interior_check:
            xq = x - 0.25
            q = xq*xq + y*y
            if q*(q + xq) <= 0.25*y*y or (x + 1.0)*(x + 1.0) + y*y < 0.0625:
                continue
        zr = 0.0
        zi = 0.0
        for i in range(max_iterations):
            zr, zi = zr*zr - zi*zi + x, 2.0*zr*zi + y
            if zr*zr + zi*zi > limit:
                result[k] = i
                break
    return result


@dataclass(frozen=True)
class MandelbrotSet:
    max_iterations: int
    escape_radius:  float = 2.0
    interior_check: bool = True

    def __post_init__(self):
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {self.max_iterations}")
        if not self.escape_radius > 0:
            raise ValueError(f"escape_radius must be positive, got {self.escape_radius}")

    def __contains__(self, c: complex) -> bool:
        return self.escape_time(c) is None

    def convergence(self, c: complex) -> float:
        n = self.escape_time(c)
        return 1.0 if n is None else n / self.max_iterations

    def escape_time(self, c: complex) -> Optional[int]:
        """Index of the first iterate with ``|z| > escape_radius``, or None if bounded."""
        cr, ci = c.real, c.imag
        if self.interior_check and _in_interior(cr, ci):
            return None

        limit = self.escape_radius * self.escape_radius
        zr = zi = 0.0
        for i in range(self.max_iterations):
            zr, zi = zr*zr - zi*zi + cr, 2.0*zr*zi + ci
            if zr*zr + zi*zi > limit:
                return i
        return None

    def escape_row(self, points: np.ndarray) -> np.ndarray:
        """Evaluate many points at once.

        Performs the same float64 operations in the same order as
        :meth:`escape_time`, so every entry equals the scalar result, with
        ``BOUNDED`` in place of None.
        """
        points = np.asarray(points, dtype=np.complex128)
        cr = np.ascontiguousarray(points.real).ravel()
        ci = np.ascontiguousarray(points.imag).ravel()
        result = np.full(cr.shape, BOUNDED, dtype=np.int32)

        # Indices of the points still iterating
        active = np.arange(cr.size)
        if self.interior_check:
            active = active[~_in_interior(cr, ci)]
        cr, ci = cr[active], ci[active]
        zr = np.zeros(active.size)
        zi = np.zeros(active.size)

        limit = self.escape_radius * self.escape_radius
        for i in range(self.max_iterations):
            if active.size == 0:
                break
            zr, zi = zr*zr - zi*zi + cr, 2.0*zr*zi + ci
            escaped = zr*zr + zi*zi > limit
            if escaped.any():
                result[active[escaped]] = i
                keep = ~escaped
                active, zr, zi, cr, ci = active[keep], zr[keep], zi[keep], cr[keep], ci[keep]
        return result.reshape(points.shape)

    def escape_row_compiled(self, points: np.ndarray) -> np.ndarray:
        """Same as :meth:`escape_row`, compiled with numba and run without the GIL."""
        points = np.asarray(points, dtype=np.complex128)
        cr = np.ascontiguousarray(points.real).ravel()
        ci = np.ascontiguousarray(points.imag).ravel()
        result = _escape_times(cr, ci, self.max_iterations,
                               float(self.escape_radius * self.escape_radius), self.interior_check)
        return result.reshape(points.shape)
