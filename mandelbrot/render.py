import logging
import os
import time
from dataclasses import dataclass
from typing import Optional

from .mandelbrot_set import BOUNDED, MandelbrotSet
from .partition import partition
from .pixel_buffer import PixelBuffer, RowBand
from .scheduler import Strategy, render_chunks
from .viewport import AspectPolicy, Resolution, Viewport, pixel_to_point, row_points

log = logging.getLogger(__name__)


def python_kernel(mandelbrot_set: MandelbrotSet, viewport: Viewport, resolution: Resolution):
    """Band filler evaluating one pixel at a time with the scalar loop."""
    def fill_band(band: RowBand):
        for y in band.chunk.rows():
            escapes = (mandelbrot_set.escape_time(pixel_to_point(resolution, (x, y), viewport))
                       for x in range(resolution.width))
            band.write_row(y, [BOUNDED if n is None else n for n in escapes])
    return fill_band


def numpy_kernel(mandelbrot_set: MandelbrotSet, viewport: Viewport, resolution: Resolution):
    """Band filler evaluating a whole row per call with numpy."""
    def fill_band(band: RowBand):
        for y in band.chunk.rows():
            band.write_row(y, mandelbrot_set.escape_row(row_points(resolution, y, viewport)))
    return fill_band


def numba_kernel(mandelbrot_set: MandelbrotSet, viewport: Viewport, resolution: Resolution):
    """Band filler running the compiled row loop, which releases the GIL."""
    def fill_band(band: RowBand):
        for y in band.chunk.rows():
            band.write_row(y, mandelbrot_set.escape_row_compiled(row_points(resolution, y, viewport)))
    return fill_band


KERNELS = {
    "numba": numba_kernel,
    "python": python_kernel,
    "numpy": numpy_kernel,
}


@dataclass
class RenderConfig:
    max_iterations: int = 255
    escape_radius:  float = 2.0
    workers:        Optional[int] = None    # None: os.cpu_count()
    strategy:       Strategy = Strategy.DYNAMIC
    chunk_rows:     Optional[int] = None    # None: one block per worker
    kernel:         str = "numba"
    aspect:         AspectPolicy = AspectPolicy.STRETCH
    interior_check: bool = True

    def __post_init__(self):
        self.strategy = Strategy(self.strategy)
        self.aspect = AspectPolicy(self.aspect)
        if self.kernel not in KERNELS:
            raise ValueError(f"unknown kernel {self.kernel!r}, expected one of {sorted(KERNELS)}")
        if self.workers is not None and self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")
        if self.chunk_rows is not None and self.chunk_rows <= 0:
            raise ValueError(f"chunk_rows must be positive, got {self.chunk_rows}")
        # Validates max_iterations and escape_radius
        self.mandelbrot_set()

    @property
    def worker_count(self) -> int:
        return self.workers or os.cpu_count() or 1

    def mandelbrot_set(self) -> MandelbrotSet:
        return MandelbrotSet(self.max_iterations, self.escape_radius, self.interior_check)


def render(viewport: Viewport, resolution: Resolution, config: Optional[RenderConfig] = None) -> PixelBuffer:
    """Render one frozen escape-time buffer.

    The result depends only on the viewport, resolution, aspect policy and
    iteration parameters; worker count, strategy, chunk size and kernel
    only change how fast it is produced.
    """
    config = config or RenderConfig()
    viewport = viewport.fit(resolution, config.aspect)
    workers = config.worker_count

    buffer = PixelBuffer(resolution)
    chunks = partition(resolution.height, workers, config.chunk_rows)
    bands = [buffer.claim(chunk) for chunk in chunks]
    fill_band = KERNELS[config.kernel](config.mandelbrot_set(), viewport, resolution)

    log.info("Rendering %s of [%s, %s] with %d thread(s), %d chunk(s), %s scheduling, %s kernel",
             resolution, viewport.upper_left, viewport.lower_right,
             min(workers, len(chunks)), len(chunks), config.strategy.value, config.kernel)
    deb = time.perf_counter()
    render_chunks(bands, fill_band, workers, config.strategy)
    fin = time.perf_counter()
    log.info("Total time spent on parallel computing: %.6f seconds", fin - deb)

    buffer.freeze()
    return buffer


def render_image(viewport: Viewport, resolution: Resolution, max_iterations: int,
                 worker_count: Optional[int] = None, **options) -> PixelBuffer:
    """Shorthand for :func:`render`; ``options`` are further :class:`RenderConfig` fields."""
    config = RenderConfig(max_iterations=max_iterations, workers=worker_count, **options)
    return render(viewport, resolution, config)
