"""
Progress reporting for background computations.

A ProgressChannel only keeps the latest value: subscribers are called as
values are published, and readers that poll see the most recent one.
Intermediate values may be skipped.
"""

import threading
from typing import Callable, List, Optional, Protocol


class ProgressReporter(Protocol):
    """Anything that displays progress, e.g. a progress bar or dialog."""

    def set_maximum(self, maximum: int) -> None:
        ...

    def set_value(self, value: int) -> None:
        ...

    def close(self) -> None:
        ...


class ProgressChannel:
    """
    Monotonic progress counter from 0 to ``maximum``.

    Args:
        maximum: Final value of the counter
    """

    def __init__(self, maximum: int):
        self._maximum = int(maximum)
        self._value = 0
        self._subscribers: List[Callable[[int], None]] = []
        self._condition = threading.Condition()

    @property
    def maximum(self) -> int:
        return self._maximum

    @property
    def value(self) -> int:
        with self._condition:
            return self._value

    @property
    def fraction(self) -> float:
        """Completed fraction in [0, 1]."""
        if self._maximum == 0:
            return 1.0
        return self.value / self._maximum

    def subscribe(self, callback: Callable[[int], None]):
        """Call ``callback(value)`` whenever a new value is published."""
        with self._condition:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Callable[[int], None]):
        with self._condition:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    def publish(self, value: int):
        """
        Publish a new value; values lower than the current one are ignored.

        Args:
            value: New counter value, clipped to ``maximum``
        """
        value = min(int(value), self._maximum)
        with self._condition:
            if value <= self._value:
                return
            self._value = value
            subscribers = list(self._subscribers)
            self._condition.notify_all()

        for callback in subscribers:
            callback(value)

    def wait(self, above: int = -1, timeout: Optional[float] = None) -> int:
        """
        Block until the value exceeds ``above`` or the timeout expires.

        Returns:
            The latest value
        """
        with self._condition:
            self._condition.wait_for(lambda: self._value > above, timeout=timeout)
            return self._value
