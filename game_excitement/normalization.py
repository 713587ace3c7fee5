"""
Raw score -> 1-10 excitement, and excitement -> recommendation tier.
"""
import math
from typing import Callable, Dict, Optional

from .algorithm_config import NormalizationMethod, NormalizationParams, TierConfig
from .curves import interpolate_knots
from .models import Sport, Tier


def sigmoid_normalize(raw_score: float, params: NormalizationParams) -> float:
    centered = (raw_score - params.sigmoid_midpoint) / params.sigmoid_steepness
    # Guard exp overflow for absurd raw scores
    centered = max(-700.0, min(700.0, centered))
    sigmoid = 1 / (1 + math.exp(-centered))
    return params.scale_min + (params.scale_max - params.scale_min) * sigmoid


def piecewise_normalize(raw_score: float, params: NormalizationParams) -> float:
    """Piecewise-linear curve used before the sigmoid (v2.0)."""
    knots = params.piecewise_knots
    if raw_score < knots[0][0]:
        # Extend the first segment downward; clamping happens afterwards
        (x0, y0), (x1, y1) = knots[0], knots[1]
        return y0 + (raw_score - x0) * (y1 - y0) / (x1 - x0)
    return interpolate_knots(raw_score, knots)


NormalizationStrategy = Callable[[float, NormalizationParams], float]

NORMALIZATION_STRATEGIES: Dict[NormalizationMethod, NormalizationStrategy] = {
    NormalizationMethod.SIGMOID: sigmoid_normalize,
    NormalizationMethod.PIECEWISE_LINEAR: piecewise_normalize,
}


def normalize_score(raw_score: float, params: NormalizationParams) -> float:
    """Map a raw score onto the display scale, rounded and clamped."""
    value = NORMALIZATION_STRATEGIES[params.method](raw_score, params)
    value = round(value, params.decimals)
    return max(params.scale_min, min(params.scale_max, value))


def get_tier(score: float, tiers: TierConfig, sport: Optional[Sport] = None) -> Tier:
    """Highest band whose cutoff the score reaches, using the sport's cutoffs when set."""
    cutoffs = tiers.for_sport(sport)
    if score >= cutoffs.must_watch:
        return Tier.MUST_WATCH
    if score >= cutoffs.recommended:
        return Tier.RECOMMENDED
    return Tier.SKIP
