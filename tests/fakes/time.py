"""Fake Time implementation for testing.

FakeTime returns a clock reading that tests advance explicitly, so cache
expiry can be tested without waiting.
"""

from twiggit.core.time.abc import Time


class FakeTime(Time):
    """Fake clock that only moves when told to.

    All initial state is provided via constructor. ``advance`` is the one
    mutation, standing in for time passing between calls.
    """

    def __init__(self, *, start: float = 1000.0) -> None:
        self._now = start
        self._reads = 0

    @property
    def reads(self) -> int:
        """Read-only count of monotonic() calls for test assertions."""
        return self._reads

    def monotonic(self) -> float:
        self._reads += 1
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += seconds
