"""
Decision point: the last moment the game was still statistically competitive.

Diagnostic by default. Two optional post-processing strategies can fold the
decision lateness into the raw score; which one runs is a property of the
algorithm version (adjustment_method), never of the base formula.
"""
from typing import Callable, Dict, Sequence

from .algorithm_config import AdjustmentMethod, DecisionPointParams
from .models import DecisionPoint


def find_decision_point(probs: Sequence[float], params: DecisionPointParams) -> DecisionPoint:
    """
    Locate the last sample inside the competitive band.

    lateness is index / (N - 1): 1.0 for a game that stayed competitive to the
    end, 0.0 for one that was never competitive.
    """
    n = len(probs)
    if n < 2:
        return DecisionPoint(index=max(0, n - 1), lateness=1.0, ever_competitive=True, always_competitive=True)

    in_band = [params.band_low <= p <= params.band_high for p in probs]
    ever_competitive = any(in_band)
    always_competitive = all(in_band)

    if not ever_competitive:
        return DecisionPoint(index=0, lateness=0.0, ever_competitive=False, always_competitive=False)
    if always_competitive:
        return DecisionPoint(index=n - 1, lateness=1.0, ever_competitive=True, always_competitive=True)

    index = n - 1
    while not in_band[index]:
        index -= 1

    return DecisionPoint(
        index=index,
        lateness=index / (n - 1),
        ever_competitive=True,
        always_competitive=False,
    )


def _no_adjustment(raw_score: float, decision: DecisionPoint, params: DecisionPointParams) -> float:
    return raw_score


def _multiplicative_adjustment(raw_score: float, decision: DecisionPoint, params: DecisionPointParams) -> float:
    return raw_score * decision.lateness ** params.multiplier_exponent


def _blend_adjustment(raw_score: float, decision: DecisionPoint, params: DecisionPointParams) -> float:
    weight = params.blend_weight
    return raw_score * ((1 - weight) + weight * decision.lateness)


AdjustmentStrategy = Callable[[float, DecisionPoint, DecisionPointParams], float]

ADJUSTMENT_STRATEGIES: Dict[AdjustmentMethod, AdjustmentStrategy] = {
    AdjustmentMethod.NONE: _no_adjustment,
    AdjustmentMethod.MULTIPLICATIVE: _multiplicative_adjustment,
    AdjustmentMethod.BLEND: _blend_adjustment,
}


def apply_decision_adjustment(
    raw_score: float,
    decision: DecisionPoint,
    params: DecisionPointParams,
) -> float:
    strategy = ADJUSTMENT_STRATEGIES[params.adjustment_method]
    return strategy(raw_score, decision, params)
