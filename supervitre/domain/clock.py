"""
Injectable wall clocks.
"""

from typing import Protocol

import pendulum
from pendulum import DateTime


class Clock(Protocol):
    """Anything that can tell the current time."""

    def now(self) -> DateTime:
        """Return the current, timezone-aware instant."""


class SystemClock:
    """Wall clock in the business timezone."""

    def __init__(self, timezone: str = "America/Toronto"):
        self.timezone = timezone

    def now(self) -> DateTime:
        return pendulum.now(self.timezone)


class FixedClock:
    """
    Clock frozen at a given instant, for tests and replays.
    """

    def __init__(self, moment: DateTime):
        self._moment = moment

    def now(self) -> DateTime:
        return self._moment

    def advance(self, **delta) -> DateTime:
        """Move the clock forward, e.g. ``clock.advance(hours=2)``."""
        self._moment = self._moment.add(**delta)
        return self._moment
