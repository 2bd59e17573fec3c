from dataclasses import dataclass
from typing import List, Optional

import numpy as np


@dataclass(frozen=True)
class WorkChunk:
    """Half-open range of image rows ``[y_start, y_end)``."""
    y_start: int
    y_end:   int

    def __post_init__(self):
        if not 0 <= self.y_start < self.y_end:
            raise ValueError(f"invalid row range [{self.y_start}, {self.y_end})")

    def __len__(self):
        return self.y_end - self.y_start

    def rows(self) -> range:
        return range(self.y_start, self.y_end)


def partition(height: int, worker_count: int, chunk_rows: Optional[int] = None) -> List[WorkChunk]:
    """Split rows ``[0, height)`` into contiguous, non-overlapping chunks.

    Without ``chunk_rows`` there is one block per worker, sizes differing
    by at most one row (never more blocks than rows). With ``chunk_rows``
    the image is cut into bands of that many rows, the last one possibly
    shorter; small bands even out the cost of rows near the set boundary.
    """
    if height <= 0:
        raise ValueError(f"height must be positive, got {height}")
    if worker_count <= 0:
        raise ValueError(f"worker_count must be positive, got {worker_count}")

    if chunk_rows is None:
        blocks = np.array_split(np.arange(height), min(worker_count, height))
        return [WorkChunk(int(rows[0]), int(rows[-1]) + 1) for rows in blocks]

    if chunk_rows <= 0:
        raise ValueError(f"chunk_rows must be positive, got {chunk_rows}")
    return [WorkChunk(y, min(y + chunk_rows, height)) for y in range(0, height, chunk_rows)]
