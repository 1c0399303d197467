"""Clock abstraction for testing."""

from twiggit.core.time.abc import Time
from twiggit.core.time.real import RealTime

__all__ = ["RealTime", "Time"]
