"""Bounded data-parallel fan-out for per-neuron loops.

Every kernel handed to :class:`FanOut` writes a disjoint slice of its
output, addressed by a contiguous ``[start, stop)`` range of neuron
indices. :meth:`FanOut.run` returns only after every chunk finished, which
is the barrier separating consecutive layers and backpropagation steps.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Tuple

Kernel = Callable[[int, int], None]

_ENV_WORKERS = "GLYPHNET_MAX_WORKERS"
_DEFAULT_CAP = 8


def default_workers() -> int:
    """Resolve the worker count from the environment or the CPU count."""

    env = os.environ.get(_ENV_WORKERS)
    if env:
        workers = int(env)
        if workers < 1:
            raise ValueError(f"{_ENV_WORKERS} must be >= 1, got {workers}")
        return workers
    return max(1, min(_DEFAULT_CAP, os.cpu_count() or 1))


def partition(size: int, parts: int) -> List[Tuple[int, int]]:
    """Split ``range(size)`` into at most ``parts`` contiguous ranges."""

    parts = max(1, min(parts, size))
    step, extra = divmod(size, parts)
    ranges: List[Tuple[int, int]] = []
    start = 0
    for idx in range(parts):
        stop = start + step + (1 if idx < extra else 0)
        if stop > start:
            ranges.append((start, stop))
        start = stop
    return ranges


class FanOut:
    """Thread pool that runs a range kernel over disjoint index chunks."""

    def __init__(self, workers: int | None = None, *, min_chunk: int = 16) -> None:
        self.workers = int(workers) if workers is not None else default_workers()
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        self.min_chunk = max(1, int(min_chunk))
        self._pool: ThreadPoolExecutor | None = None

    def run(self, kernel: Kernel, size: int) -> None:
        if size <= 0:
            return
        parts = min(self.workers, size // self.min_chunk)
        if parts <= 1:
            kernel(0, size)
            return
        pool = self._ensure_pool()
        futures = [pool.submit(kernel, lo, hi) for lo, hi in partition(size, parts)]
        wait(futures)
        for future in futures:
            future.result()

    def _ensure_pool(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="glyphnet"
            )
        return self._pool

    def close(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self) -> "FanOut":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


__all__ = ["FanOut", "Kernel", "default_workers", "partition"]
