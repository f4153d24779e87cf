"""
Module: scoring.py
Description: Toy score for a roast run.

The score weighs how close the roast came to its target time (70%)
against how close the final temperature is to 200 degrees (30%).
"""

import math

IDEAL_TEMPERATURE = 200.0
TIME_WEIGHT = 0.7
TEMPERATURE_WEIGHT = 0.3


def round_half_up(value: float) -> int:
    """Round halves away from zero for non-negative values (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def time_score(target_seconds: int, progress: int) -> float:
    """100 on target, falling linearly to 0 at a full target-length miss."""
    if target_seconds <= 0:
        raise ValueError("target_seconds must be positive")
    return max(0.0, 100 - abs(target_seconds - progress) / target_seconds * 100)


def temperature_stability(temperature: float) -> float:
    """100 at the ideal temperature, minus one point per degree off."""
    return max(0.0, 100 - abs(IDEAL_TEMPERATURE - temperature))


def compute_score(target_seconds: int, progress: int, temperature: float) -> int:
    """
    Score a run on a 0..100 scale.

    Example:
        >>> compute_score(300, 300, 200.0)
        100
        >>> compute_score(300, 150, 200.0)
        65
    """
    weighted = (
        time_score(target_seconds, progress) * TIME_WEIGHT
        + temperature_stability(temperature) * TEMPERATURE_WEIGHT
    )
    return round_half_up(min(100.0, weighted))
