import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable, Iterable, Optional

from .pixel_buffer import RowBand

log = logging.getLogger(__name__)


class Strategy(Enum):
    STATIC = "static"     # band k goes to worker k % workers, fixed up front
    DYNAMIC = "dynamic"   # idle workers pull the next band from a shared queue


class RenderError(RuntimeError):
    """A worker failed; the render produced no buffer."""


def _static_source(bands, worker_id, workers):
    # Same row assignment as range(rank, height, nbp), one band at a time
    mine = iter(bands[worker_id::workers])
    return lambda: next(mine, None)


def _queue_source(work_queue):
    def next_band():
        try:
            return work_queue.get_nowait()
        except queue.Empty:
            return None
    return next_band


def render_chunks(bands: Iterable[RowBand], fill_band: Callable[[RowBand], None],
                  workers: int, strategy=Strategy.DYNAMIC):
    """Fill every band with ``fill_band`` on a pool of ``workers`` threads.

    Blocks until all workers are joined. If any ``fill_band`` call raises,
    the remaining workers stop before their next band and the earliest
    failure, in the order the workers hit them, is raised as :class:`RenderError`.
    """
    if workers <= 0:
        raise ValueError(f"workers must be positive, got {workers}")
    strategy = Strategy(strategy)
    bands = list(bands)
    if not bands:
        return
    workers = min(workers, len(bands))
    abort = threading.Event()
    failures = []

    if strategy is Strategy.STATIC:
        sources = [_static_source(bands, k, workers) for k in range(workers)]
    else:
        work_queue = queue.SimpleQueue()
        for band in bands:
            work_queue.put(band)
        sources = [_queue_source(work_queue)] * workers

    def run_worker(worker_id: int, next_band: Callable[[], Optional[RowBand]]) -> int:
        filled = 0
        while not abort.is_set():
            band = next_band()
            if band is None:
                break
            try:
                fill_band(band)
            except Exception as exc:
                failures.append(exc)
                abort.set()
                log.error("worker %d failed on %r", worker_id, band, exc_info=True)
                raise
            filled += 1
        log.debug("worker %d filled %d band(s)", worker_id, filled)
        return filled

    # Leaving the with-block joins every thread
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="mandelbrot") as pool:
        futures = [pool.submit(run_worker, k, source) for k, source in enumerate(sources)]

    if failures:
        raise RenderError(f"render aborted: {failures[0]!r}") from failures[0]
    for future in futures:
        future.result()
