"""
Drama: did big swings happen?

Every step's swing is weighted by leverage (swings near 50% matter more) and
by how late it came, then the total is log-compressed so long, high-sample
basketball feeds don't saturate. Frequent lead changes add a small boost.
"""
from typing import Sequence

from .algorithm_config import DramaParams
from .curves import leverage, log_compress


def weighted_swing_total(
    probs: Sequence[float],
    leverage_floor: float,
    swing_scale: float,
    recency_factor: float = 0.0,
) -> float:
    """Sum of swing * leverage * recency weight * swing_scale over adjacent pairs."""
    n = len(probs)
    total = 0.0
    for i in range(1, n):
        swing = abs(probs[i] - probs[i - 1])
        weight = 1 + (i / n) ** 2 * recency_factor
        total += swing * leverage(probs[i - 1], leverage_floor) * weight * swing_scale
    return total


def count_lead_changes(probs: Sequence[float]) -> int:
    """Times the favourite flipped (sign change of p - 0.5 between neighbours)."""
    changes = 0
    for i in range(1, len(probs)):
        if (probs[i - 1] - 0.5) * (probs[i] - 0.5) < 0:
            changes += 1
    return changes


def calculate_lead_change_boost(probs: Sequence[float], params: DramaParams) -> float:
    changes = count_lead_changes(probs)
    for minimum, boost in params.lead_change_tiers:
        if changes >= minimum:
            return boost
    return 0.0


def calculate_momentum_drama(probs: Sequence[float], params: DramaParams, leverage_floor: float) -> float:
    """Swing-based drama before the lead-change boost, 0-10."""
    if len(probs) < 2:
        return 0.0
    total = weighted_swing_total(probs, leverage_floor, params.swing_scale, params.recency_factor)
    return log_compress(total, params.log_base)


def calculate_drama(probs: Sequence[float], params: DramaParams, leverage_floor: float) -> float:
    """Drama on a 0-10 scale."""
    base = calculate_momentum_drama(probs, params, leverage_floor)
    return min(10.0, base + calculate_lead_change_boost(probs, params))
