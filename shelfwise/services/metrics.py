"""
Rounding and percentage helpers shared by the derived-metric services
"""
import math
from typing import Optional


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round .5 away from zero for positive values (Python's round() is banker's rounding)"""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def seconds_to_minutes(seconds: float) -> int:
    return int(round_half_up(seconds / 60))


def seconds_to_hours(seconds: float) -> float:
    return round_half_up(seconds / 3600, 1)


def goal_percent(current: float, goal: Optional[float]) -> int:
    """Progress toward a goal as a whole percent, clamped to 100"""
    if not goal or goal <= 0:
        return 0
    return int(min(100, round_half_up(current / goal * 100)))
