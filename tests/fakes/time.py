"""Fake Time implementation for testing.

FakeTime is an in-memory clock that always reports the same instant, so
persisted run states carry predictable timestamps.
"""

from datetime import UTC, datetime

from branchline.core.time.abc import Time

DEFAULT_NOW = datetime(2024, 1, 15, 14, 30, tzinfo=UTC)


class FakeTime(Time):
    """Fake clock frozen at a fixed instant.

    This class has NO public setup methods. All state is provided via constructor
    or captured during execution.
    """

    def __init__(self, now: datetime = DEFAULT_NOW) -> None:
        """Create FakeTime frozen at `now`."""
        self._now = now
        self._now_calls = 0

    @property
    def now_calls(self) -> int:
        """Read-only access to how often the clock was read, for test assertions."""
        return self._now_calls

    def now(self) -> datetime:
        self._now_calls += 1
        return self._now
