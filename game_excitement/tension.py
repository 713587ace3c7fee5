"""
Tension: was there sustained reason to keep watching?

Two parts:
1. Recency-weighted closeness to 50%, bent by a concave transform
2. Comeback boost for the largest deficit the eventual winner overcame,
   worth more the later the trough came
"""
from typing import Sequence, Tuple

from .algorithm_config import TensionParams
from .curves import interpolate_knots


def closeness(p: float) -> float:
    """1.0 at a coin flip, 0.0 at a certainty."""
    return 1.0 - abs(p - 0.5) * 2


def calculate_closeness_score(probs: Sequence[float], params: TensionParams) -> float:
    """Closeness part of tension on a 0-10 scale."""
    n = len(probs)
    if n == 0:
        return 0.0

    total = 0.0
    for i, p in enumerate(probs):
        weight = 1 + params.recency_factor * (i / n)
        total += closeness(p) * weight

    # Dividing by the mean weight keeps the average on a 0-1 scale
    average_weight = 1 + params.recency_factor / 2
    avg_closeness = min(1.0, total / (n * average_weight))
    transformed = 1 - (1 - avg_closeness) ** params.closeness_exponent
    return transformed * 10


def find_comeback_trough(probs: Sequence[float]) -> Tuple[float, int]:
    """
    Largest deficit the eventual winner faced, and where it happened.

    The winner is whoever the final sample favours. Returns (0.0, 0) when the
    winner never trailed.
    """
    if not probs:
        return 0.0, 0

    home_won = probs[-1] > 0.5
    max_deficit = 0.0
    trough_index = 0
    for i, p in enumerate(probs):
        if home_won:
            deficit = 0.5 - p if p < 0.5 else 0.0
        else:
            deficit = p - 0.5 if p > 0.5 else 0.0
        if deficit > max_deficit:
            max_deficit = deficit
            trough_index = i
    return max_deficit, trough_index


def calculate_comeback_boost(probs: Sequence[float], params: TensionParams) -> float:
    max_deficit, trough_index = find_comeback_trough(probs)
    first_knot = params.comeback_knots[0][0]
    if max_deficit < first_knot:
        return 0.0

    boost = interpolate_knots(
        max_deficit,
        params.comeback_knots,
        tail_slope=params.comeback_tail_slope,
        cap=params.comeback_max_boost,
    )

    lateness = trough_index / len(probs)
    multiplier = params.comeback_lateness_base + (1 - params.comeback_lateness_base) * lateness
    return boost * multiplier


def calculate_tension(probs: Sequence[float], params: TensionParams) -> float:
    """Tension on a 0-10 scale."""
    if not probs:
        return 0.0
    score = calculate_closeness_score(probs, params) + calculate_comeback_boost(probs, params)
    return max(0.0, min(10.0, score))
