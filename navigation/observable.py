"""
Purpose: Thread-safe observable value cell.
What it does:
Holds one current value written by a single owner (the controller) and read by
any number of observers (map display, notification updater, CLI).

- value / get(): current snapshot, lock-protected
- subscribe(callback): receive every later change; no replay of history
- wait_for(predicate, timeout): block until the value satisfies a condition

Readers never mutate. Callbacks run on the writer's thread, in publication order.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, List, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ObservableValue(Generic[T]):

    def __init__(self, initial: T, name: str = "value"):
        self.name = name
        self._value = initial
        self._condition = threading.Condition()
        self._subscribers: List[Callable[[T], None]] = []

    @property
    def value(self) -> T:
        with self._condition:
            return self._value

    def get(self) -> T:
        return self.value

    def set(self, value: T) -> None:
        """
        Publish a new value. Subscribers are only notified when it differs
        from the current one.
        """
        with self._condition:
            if value == self._value:
                return
            self._value = value
            subscribers = list(self._subscribers)
            self._condition.notify_all()

        for callback in subscribers:
            try:
                callback(value)
            except Exception:
                #one broken observer must not starve the others or the writer
                logger.exception(f"Observer of {self.name} failed")

    def subscribe(self, callback: Callable[[T], None]) -> Callable[[], None]:
        """
        Register `callback` for future values. Returns an unsubscribe function.
        """
        with self._condition:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            with self._condition:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def wait_for(self, predicate: Callable[[T], bool], timeout: Optional[float] = None) -> bool:
        """
        Block until predicate(value) holds. Returns False on timeout.
        """
        with self._condition:
            return self._condition.wait_for(lambda: predicate(self._value), timeout=timeout)

    def __repr__(self) -> str:
        return f"ObservableValue({self.name}={self.value!r})"
