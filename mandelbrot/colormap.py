"""Escape-time buffer to 8-bit pixels.

A :class:`ColorScheme` is a plain tagged value: ``kind`` selects one of the
mappings below and the other fields carry its parameters.

* ``GRAYSCALE``: bounded points black, escaped points brighter the sooner
  they escape (``L`` pixels).
* ``COLORMAP``: a matplotlib colormap over the convergence value, bounded
  points at the top of the map (``RGB`` pixels).
* ``HISTOGRAM``: a matplotlib colormap over the cumulative distribution of
  escape counts, bounded points black (``RGB`` pixels).
* ``CUSTOM``: ``fn(values, max_iterations)`` returns the pixels itself.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import matplotlib
import numpy as np

from .mandelbrot_set import BOUNDED
from .pixel_buffer import PixelBuffer

DEFAULT_CMAP = "plasma"


class SchemeKind(Enum):
    GRAYSCALE = "gray"
    COLORMAP = "colormap"
    HISTOGRAM = "histogram"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ColorScheme:
    kind: SchemeKind = SchemeKind.GRAYSCALE
    cmap: str = DEFAULT_CMAP
    fn:   Optional[Callable[[np.ndarray, int], np.ndarray]] = None

    def __post_init__(self):
        if self.kind is SchemeKind.CUSTOM and self.fn is None:
            raise ValueError("a custom color scheme needs a function")
        if self.kind in (SchemeKind.COLORMAP, SchemeKind.HISTOGRAM) and self.cmap not in matplotlib.colormaps:
            raise ValueError(f"unknown matplotlib colormap {self.cmap!r}")

    @classmethod
    def grayscale(cls):
        return cls(SchemeKind.GRAYSCALE)

    @classmethod
    def colormap(cls, name=DEFAULT_CMAP):
        return cls(SchemeKind.COLORMAP, cmap=name)

    @classmethod
    def histogram(cls, name=DEFAULT_CMAP):
        return cls(SchemeKind.HISTOGRAM, cmap=name)

    @classmethod
    def custom(cls, fn):
        return cls(SchemeKind.CUSTOM, fn=fn)

    @classmethod
    def parse(cls, text: str) -> "ColorScheme":
        """``gray``, ``histogram``, ``histogram:NAME`` or a matplotlib colormap name."""
        if text in ("gray", "grey", "grayscale"):
            return cls.grayscale()
        kind, _, name = text.partition(":")
        if kind == "histogram":
            return cls.histogram(name or DEFAULT_CMAP)
        return cls.colormap(text)


def convergence(values: np.ndarray, max_iterations: int) -> np.ndarray:
    return np.where(values == BOUNDED, 1.0, np.clip(values / max_iterations, 0.0, 1.0))


def _rgb(cmap_name, t):
    return np.uint8(matplotlib.colormaps[cmap_name](t)[..., :3] * 255)


def colorize(buffer: PixelBuffer, max_iterations: int, scheme: ColorScheme = ColorScheme()) -> np.ndarray:
    values = buffer.values
    kind = scheme.kind

    if kind is SchemeKind.GRAYSCALE:
        shade = 255 - (values.astype(np.int64) * 255) // max_iterations
        return np.where(values == BOUNDED, 0, np.clip(shade, 0, 255)).astype(np.uint8)

    if kind is SchemeKind.COLORMAP:
        return _rgb(scheme.cmap, convergence(values, max_iterations))

    if kind is SchemeKind.HISTOGRAM:
        escaped = values != BOUNDED
        counts = np.bincount(values[escaped], minlength=max_iterations)
        cdf = np.cumsum(counts) / max(int(escaped.sum()), 1)
        rgb = _rgb(scheme.cmap, np.where(escaped, cdf[np.where(escaped, values, 0)], 0.0))
        rgb[~escaped] = 0
        return rgb

    pixels = np.asarray(scheme.fn(values, max_iterations))
    if pixels.shape[:2] != values.shape:
        raise ValueError(f"custom color scheme returned shape {pixels.shape}, expected {values.shape}")
    return pixels.astype(np.uint8, copy=False)
