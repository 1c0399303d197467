"""Time operations abstraction for testing.

This module provides an ABC for reading a monotonic clock so that the
context-detection cache can expire entries in tests without waiting.
"""

from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract time operations for dependency injection."""

    @abstractmethod
    def monotonic(self) -> float:
        """Return a monotonic clock reading in seconds.

        Only differences between readings are meaningful.
        """
        ...
