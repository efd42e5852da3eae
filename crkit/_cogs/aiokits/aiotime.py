"""
Deadlines for the API operations.

A deadline is an explicit point in time (by the monotonic clock), after which
the operation must not start, and must be aborted if it is in flight.
Unlike a timeout, it does not restart for every nested call: a series of
requests under the same deadline ends at the same moment.
"""
import dataclasses
import math
import time
from typing import Optional


@dataclasses.dataclass(frozen=True)
class Deadline:
    when: float  # by `time.monotonic()`; `math.inf` for never.

    @classmethod
    def at(cls, when: float) -> 'Deadline':
        return cls(when=when)

    @classmethod
    def after(cls, seconds: float) -> 'Deadline':
        return cls(when=time.monotonic() + seconds)

    @classmethod
    def never(cls) -> 'Deadline':
        return cls(when=math.inf)

    @property
    def remaining(self) -> Optional[float]:
        """ Seconds left till the deadline (never negative), or ``None`` if infinite. """
        if math.isinf(self.when):
            return None
        return max(0.0, self.when - time.monotonic())

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.when
