import time
from typing import Self


class StopWatch:
    """Measure wall-clock time of a test run."""

    def __init__(self, start_time: int) -> None:
        self._start_time = start_time
        self._stop_time: int | None = None

    @classmethod
    def start(cls) -> Self:
        return cls(time.perf_counter_ns())

    def stop(self) -> None:
        if self._stop_time is None:
            self._stop_time = time.perf_counter_ns()

    def elapsed_ns(self) -> int:
        """Time since start, frozen once the watch is stopped."""
        end = self._stop_time if self._stop_time is not None else time.perf_counter_ns()
        return end - self._start_time

    def elapsed_ms(self) -> float:
        return self.elapsed_ns() / 1_000_000
