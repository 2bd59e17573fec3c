import argparse
import logging
import re
import sys
from typing import Callable, Optional, Tuple, TypeVar

from .colormap import ColorScheme, colorize
from .image import write_image
from .render import KERNELS, RenderConfig, render
from .scheduler import RenderError, Strategy
from .viewport import AspectPolicy, Resolution, Viewport

log = logging.getLogger(__name__)

T = TypeVar("T")

# argparse reads "-1.20,0.35" as an option flag
_NEGATIVE_OPERAND = re.compile(r"^-\.?\d.*,")


def parse_pair(s: str, separator: str, convert: Callable[[str], T] = float) -> Optional[Tuple[T, T]]:
    """Parse ``"<a><separator><b>"`` into ``(a, b)``; None if either half does not convert.

    Halves must be bare literals: whitespace and digit-grouping underscores,
    which int() and float() would otherwise accept, are refused.
    """
    index = s.find(separator)
    if index == -1:
        return None
    halves = s[:index], s[index + 1:]
    if any(ch.isspace() or ch == "_" for half in halves for ch in half):
        return None
    try:
        return convert(halves[0]), convert(halves[1])
    except ValueError:
        return None


def parse_complex(s: str) -> Optional[complex]:
    pair = parse_pair(s, ",", float)
    if pair is None:
        return None
    return complex(*pair)


def _resolution(text):
    pair = parse_pair(text, "x", int)
    if pair is None:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text.strip()!r}")
    try:
        return Resolution(*pair)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def _corner(text):
    if text.startswith(" -"):
        text = text[1:]
    point = parse_complex(text)
    if point is None:
        raise argparse.ArgumentTypeError(f"expected RE,IM, got {text.strip()!r}")
    return point


def _positive_int(text):
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {text!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return value


def _color_scheme(text):
    try:
        return ColorScheme.parse(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def build_parser():
    parser = argparse.ArgumentParser(
        prog="mandelbrot",
        description="Render the Mandelbrot set to an image file on a pool of threads.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Example:
  mandelbrot mandel.png 1000x750 -1.20,0.35 -1,0.20
  mandelbrot mandel.png 1024x1024 -2,1.125 1,-1.125 --colormap plasma --workers 8
""",
    )
    parser.add_argument("file", help="output image, format taken from the extension (PNG if none)")
    parser.add_argument("pixels", type=_resolution, help="image size as WIDTHxHEIGHT")
    parser.add_argument("upper_left", type=_corner, help="upper-left corner as RE,IM")
    parser.add_argument("lower_right", type=_corner, help="lower-right corner as RE,IM")
    parser.add_argument("--max-iterations", type=_positive_int, default=RenderConfig.max_iterations,
                        help="iteration limit per pixel (default: %(default)s)")
    parser.add_argument("--workers", type=_positive_int, default=None,
                        help="number of threads (default: CPU count)")
    parser.add_argument("--strategy", choices=[s.value for s in Strategy], default=Strategy.DYNAMIC.value,
                        help="how chunks are handed to threads (default: %(default)s)")
    parser.add_argument("--chunk-rows", type=_positive_int, default=None,
                        help="rows per chunk (default: one block per thread)")
    parser.add_argument("--kernel", choices=sorted(KERNELS), default=RenderConfig.kernel,
                        help="pixel evaluation kernel (default: %(default)s)")
    parser.add_argument("--aspect", choices=[a.value for a in AspectPolicy], default=AspectPolicy.STRETCH.value,
                        help="viewport/image aspect mismatch handling (default: %(default)s)")
    parser.add_argument("--colormap", type=_color_scheme, default=ColorScheme.grayscale(),
                        metavar="NAME", help="gray, a matplotlib colormap, or histogram[:NAME] (default: gray)")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="log progress (-v) or per-thread detail (-vv)")
    return parser


def main(argv=None) -> int:
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else list(argv)
    # A leading space keeps negative corners positional; _corner drops it
    args = parser.parse_args([" " + arg if _NEGATIVE_OPERAND.match(arg) else arg for arg in argv])

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    try:
        viewport = Viewport(args.upper_left, args.lower_right)
        config = RenderConfig(
            max_iterations=args.max_iterations,
            workers=args.workers,
            strategy=args.strategy,
            chunk_rows=args.chunk_rows,
            kernel=args.kernel,
            aspect=args.aspect,
        )
        viewport = viewport.fit(args.pixels, config.aspect)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        buffer = render(viewport, args.pixels, config)
        write_image(args.file, colorize(buffer, config.max_iterations, args.colormap))
    except (RenderError, OSError, ValueError) as exc:
        log.error("could not render %s: %s", args.file, exc)
        return 1
    return 0
