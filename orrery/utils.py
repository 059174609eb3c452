#!/usr/bin/env python3
"""
General utilities for the Orrery Simulator.
"""
from typing import Optional, Tuple


def try_int(val) -> Optional[int]:
    try:
        return int(val)
    except (TypeError, ValueError):
        return None


def parse_time_of_day(text: str) -> Optional[Tuple[int, int, int]]:
    """Parse "HH:MM" or "HH:MM:SS" into (hour, minute, second); None when invalid."""
    parts = (text or "").strip().split(":")
    if len(parts) not in (2, 3):
        return None
    values = [try_int(p) for p in parts]
    if any(v is None for v in values):
        return None
    if len(values) == 2:
        values.append(0)
    hour, minute, second = values
    if not (0 <= hour < 24 and 0 <= minute < 60 and 0 <= second < 60):
        return None
    return (hour, minute, second)
