#!/usr/bin/env python3
"""
Simulation clock.

Simulation time is "epoch time": seconds since J2000. The clock keeps the epoch
time the run started from and the time accumulated while playing; the
displayed date is derived from their sum.
"""
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Optional

from .constants import J2000


def epoch_time_of(date: Optional[datetime] = None) -> float:
    """Seconds from J2000 to `date` (now when None). Naive dates are taken as UTC."""
    if date is None:
        date = datetime.now(timezone.utc)
    elif date.tzinfo is None:
        date = date.replace(tzinfo=timezone.utc)
    return (date - J2000).total_seconds()


def date_of(epoch_time: float) -> datetime:
    # millisecond resolution
    return J2000 + timedelta(milliseconds=round(epoch_time * 1000.0))


@dataclass
class TimeModel:
    start_epoch_time: float = 0.0
    epoch_time: float = 0.0
    current_time: float = 0.0
    date: datetime = field(default_factory=lambda: J2000)

    def advance(self, delta_seconds: float) -> None:
        self.epoch_time += delta_seconds
        self.current_time = self.start_epoch_time + self.epoch_time

    def display_date(self) -> datetime:
        self.date = date_of(self.current_time)
        return self.date

    def reset_to(self, date: Optional[datetime] = None) -> None:
        self.epoch_time = 0.0
        self.start_epoch_time = self.current_time = epoch_time_of(date)


class DateDisplay:
    """
    Shared date readout.

    The orchestrator pushes the simulated date from the frame loop; the control
    panel reads it from its own thread, hence the lock.
    """

    def __init__(self, date: Optional[datetime] = None):
        self._lock = threading.Lock()
        self._date = date

    def get_date(self) -> Optional[datetime]:
        with self._lock:
            return self._date

    def set_date(self, date: Optional[datetime]) -> None:
        with self._lock:
            self._date = date
