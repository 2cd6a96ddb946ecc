"""Time abstraction so retry backoff can be tested without sleeping."""

import time
from abc import ABC, abstractmethod


class Time(ABC):
    """Abstract interface for time operations."""

    @abstractmethod
    def sleep(self, seconds: float) -> None:
        """Block for the given number of seconds."""
        ...


class RealTime(Time):
    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
