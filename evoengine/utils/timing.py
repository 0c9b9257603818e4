from __future__ import annotations

from datetime import timedelta
import time

__all__ = ["Stopwatch", "format_duration"]


class Stopwatch:
    """Wall-clock timer measured with ``time.perf_counter``.

    Usage::

        with Stopwatch() as watch:
            ...
        watch.elapsed  # timedelta
    """

    def __init__(self) -> None:
        self._start: float | None = None
        self._end: float | None = None

    def __enter__(self) -> "Stopwatch":
        self._start = time.perf_counter()
        self._end = None
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._end = time.perf_counter()

    @property
    def elapsed(self) -> timedelta:
        if self._start is None:
            return timedelta(0)
        end = self._end if self._end is not None else time.perf_counter()
        return timedelta(seconds=end - self._start)


def format_duration(duration: timedelta) -> str:
    """Compact human-readable form, e.g. ``1h 02m 03.450s`` or ``12.300ms``."""
    seconds = duration.total_seconds()
    if seconds < 1:
        return f"{seconds * 1000:.3f}ms"
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{int(hours)}h {int(minutes):02d}m {secs:06.3f}s"
    if minutes:
        return f"{int(minutes)}m {secs:06.3f}s"
    return f"{secs:.3f}s"
