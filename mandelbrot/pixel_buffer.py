"""Preallocated result grid shared by the render workers.

Workers never touch the grid directly: each one writes through the
:class:`RowBand` returned by :meth:`PixelBuffer.claim` for its chunk, and a
row can be claimed only once. Once the scheduler has joined every worker
the driver calls :meth:`PixelBuffer.freeze`, after which the grid is
read-only and can be read with :meth:`PixelBuffer.get`.
"""
import threading
from typing import Optional

import numpy as np

from .mandelbrot_set import BOUNDED
from .partition import WorkChunk
from .viewport import Resolution


class RowBand:
    """Exclusive write handle on the rows of one :class:`WorkChunk`."""

    def __init__(self, owner: "PixelBuffer", chunk: WorkChunk, rows: np.ndarray):
        self.chunk = chunk
        self._owner = owner
        self._rows = rows

    def __repr__(self):
        return f"RowBand(y_start={self.chunk.y_start}, y_end={self.chunk.y_end})"

    def _local_row(self, y: int) -> int:
        if self._owner.frozen:
            raise RuntimeError("pixel buffer is frozen")
        if not self.chunk.y_start <= y < self.chunk.y_end:
            raise IndexError(f"row {y} is outside band [{self.chunk.y_start}, {self.chunk.y_end})")
        return y - self.chunk.y_start

    def write_row(self, y: int, values):
        """Copy one escape index per column into image row ``y``."""
        local = self._local_row(y)
        values = np.asarray(values)
        if values.shape != (self._rows.shape[1],):
            raise ValueError(f"row {y} needs {self._rows.shape[1]} values, got shape {values.shape}")
        self._rows[local] = values

    def set(self, x: int, y: int, result: Optional[int]):
        local = self._local_row(y)
        if not 0 <= x < self._rows.shape[1]:
            raise IndexError(f"column {x} is outside [0, {self._rows.shape[1]})")
        self._rows[local, x] = BOUNDED if result is None else result


class PixelBuffer:

    def __init__(self, resolution: Resolution):
        self.resolution = resolution
        self._values = np.full((resolution.height, resolution.width), BOUNDED, dtype=np.int32)
        self._claimed = np.zeros(resolution.height, dtype=bool)
        self._lock = threading.Lock()
        self._frozen = False
        self._bands = []

    def __repr__(self):
        state = "frozen" if self._frozen else "open"
        return f"PixelBuffer({self.resolution}, {state})"

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return (self.resolution == other.resolution
                and np.array_equal(self._values, other._values))

    __hash__ = None

    @property
    def width(self) -> int:
        return self.resolution.width

    @property
    def height(self) -> int:
        return self.resolution.height

    @property
    def frozen(self) -> bool:
        return self._frozen

    def claim(self, chunk: WorkChunk) -> RowBand:
        with self._lock:
            if self._frozen:
                raise RuntimeError("cannot claim rows of a frozen pixel buffer")
            if chunk.y_end > self.height:
                raise ValueError(f"chunk [{chunk.y_start}, {chunk.y_end}) exceeds height {self.height}")
            if self._claimed[chunk.y_start:chunk.y_end].any():
                raise ValueError(f"chunk [{chunk.y_start}, {chunk.y_end}) overlaps a claimed band")
            self._claimed[chunk.y_start:chunk.y_end] = True
            band = RowBand(self, chunk, self._values[chunk.y_start:chunk.y_end])
            self._bands.append(band)
            return band

    def freeze(self):
        with self._lock:
            missing = np.flatnonzero(~self._claimed)
            if missing.size:
                raise RuntimeError(f"{missing.size} row(s) were never claimed, first is row {missing[0]}")
            self._frozen = True
            # Views keep their own flag, so each band view is locked as well
            for band in self._bands:
                band._rows.flags.writeable = False
            self._values.flags.writeable = False

    @property
    def values(self) -> np.ndarray:
        """Read-only ``height x width`` array of escape indices (``BOUNDED`` = -1)."""
        if not self._frozen:
            raise RuntimeError("pixel buffer is still being rendered")
        return self._values

    def get(self, x: int, y: int) -> Optional[int]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside {self.resolution}")
        value = int(self.values[y, x])
        return None if value == BOUNDED else value
