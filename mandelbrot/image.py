import logging
from pathlib import Path

import numpy as np
from PIL import Image

log = logging.getLogger(__name__)


def write_image(path, pixels: np.ndarray) -> Path:
    """Encode ``pixels`` (``H x W`` gray or ``H x W x 3`` RGB, uint8) to ``path``.

    The format follows the file extension; a path without one is written as PNG.
    """
    path = Path(path)
    image = Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8))
    image.save(path, format=None if path.suffix else "PNG")
    log.info("Wrote %dx%d %s image to %s", image.width, image.height, image.mode, path)
    return path
