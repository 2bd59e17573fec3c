from .colormap import ColorScheme, SchemeKind, colorize
from .image import write_image
from .mandelbrot_set import BOUNDED, MandelbrotSet
from .partition import WorkChunk, partition
from .pixel_buffer import PixelBuffer, RowBand
from .render import RenderConfig, render, render_image
from .scheduler import RenderError, Strategy, render_chunks
from .viewport import AspectPolicy, Resolution, Viewport, pixel_to_point, row_points

__all__ = [
    "AspectPolicy",
    "BOUNDED",
    "ColorScheme",
    "MandelbrotSet",
    "PixelBuffer",
    "RenderConfig",
    "RenderError",
    "Resolution",
    "RowBand",
    "SchemeKind",
    "Strategy",
    "Viewport",
    "WorkChunk",
    "colorize",
    "partition",
    "pixel_to_point",
    "render",
    "render_chunks",
    "render_image",
    "row_points",
    "write_image",
]
