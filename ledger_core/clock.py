"""
Clock Module

Supplies the current instant to the ledger. The engine never reads the
system time directly so tests can pin it.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional


class Clock(ABC):
    """Source of the current UTC instant"""
    
    @abstractmethod
    def now(self) -> datetime:
        """Return the current instant (timezone-aware, UTC)"""
        pass


class SystemClock(Clock):
    """Wall clock"""
    
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class ManualClock(Clock):
    """
    Clock that only moves when told to.
    
    Used by tests and simulations that need deterministic timestamps.
    """
    
    def __init__(self, start: Optional[datetime] = None):
        self._now = start or datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    
    def now(self) -> datetime:
        return self._now
    
    def set(self, instant: datetime) -> None:
        """Jump to a specific instant"""
        self._now = instant
    
    def advance(self, delta: timedelta = timedelta(seconds=1)) -> datetime:
        """Move forward by delta and return the new instant"""
        self._now = self._now + delta
        return self._now
