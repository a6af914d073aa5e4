# common/logger/phase_timer.py
import time
from contextlib import contextmanager
from typing import Iterator


class PhaseTimer:
    """Accumulates wall time per named phase (e.g. read, insert) in ms."""

    def __init__(self) -> None:
        self.timings: dict[str, float] = {}

    @contextmanager
    def capture(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            duration = (time.perf_counter() - start) * 1000
            # Same name used multiple times accumulates
            self.timings[name] = self.timings.get(name, 0.0) + duration

    def as_dict(self) -> dict[str, float]:
        return {name: round(dur, 2) for name, dur in self.timings.items()}


__all__ = ["PhaseTimer"]
