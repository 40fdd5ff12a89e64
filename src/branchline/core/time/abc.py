"""Clock abstraction for testing.

Halted runs record when they stopped. Reading the clock through this ABC lets
tests pin timestamps without patching datetime.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class Time(ABC):
    """Abstract clock operations for dependency injection."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware datetime."""
        ...
