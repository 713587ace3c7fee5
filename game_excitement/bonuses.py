"""
Bonus evaluators applied on top of the weighted component score.

Each evaluator is independent and returns an additive delta (0 when its
trigger doesn't fire).
"""
from typing import Optional, Sequence

from .algorithm_config import (
    BonusParams,
    CloseGameBonus,
    ComebackBonus,
    OvertimeBonus,
    UpsetBonus,
    VolatilityBonus,
)
from .curves import interpolate_knots
from .models import BonusBreakdown, GameContext, ProbabilitySample


def calculate_upset_bonus(probs: Sequence[float], params: UpsetBonus) -> float:
    """Early favourite (averaged over the opening samples) ended up losing."""
    n = len(probs)
    if n == 0:
        return 0.0

    early_size = max(
        params.early_min_points,
        min(params.early_max_points, int(n * params.early_fraction)),
    )
    early_window = probs[:early_size]
    early_home_wp = sum(early_window) / len(early_window)

    home_favored = early_home_wp > 0.5
    favorite_wp = early_home_wp if home_favored else 1 - early_home_wp
    if favorite_wp < params.threshold:
        return 0.0

    home_won = probs[-1] > 0.5
    if home_favored == home_won:
        return 0.0

    magnitude = (favorite_wp - params.threshold) / (params.full_at - params.threshold)
    return max(0.0, min(1.0, magnitude)) * params.max


def find_extreme_comeback(probs: Sequence[float], params: ComebackBonus) -> float:
    """
    Largest deficit from an extreme point that was later overturned past 0.5.

    Only origins at least tail_exclusion samples before the end count.
    """
    max_deficit = 0.0
    for i in range(len(probs) - params.tail_exclusion):
        p = probs[i]
        home_extreme = p >= 1 - params.extreme_threshold
        away_extreme = p <= params.extreme_threshold
        if not (home_extreme or away_extreme):
            continue
        for later in probs[i + 1:]:
            if (away_extreme and later > 0.5) or (home_extreme and later < 0.5):
                deficit = 0.5 - p if away_extreme else p - 0.5
                max_deficit = max(max_deficit, deficit)
                break
    return max_deficit


def calculate_comeback_bonus(probs: Sequence[float], params: ComebackBonus) -> float:
    if len(probs) < params.min_samples:
        return 0.0
    deficit = find_extreme_comeback(probs, params)
    if deficit < params.knots[0][0]:
        return 0.0
    return interpolate_knots(deficit, params.knots, tail_slope=params.tail_slope, cap=params.max)


def calculate_volatility_bonus(probs: Sequence[float], params: VolatilityBonus) -> float:
    """Rare swing patterns: many large swings, one massive swing, or a swing off an extreme."""
    if len(probs) < params.min_samples:
        return 0.0

    large_swings = 0
    has_massive_swing = False
    has_extreme_recovery = False
    for i in range(1, len(probs)):
        prev = probs[i - 1]
        swing = abs(probs[i] - prev)
        if swing >= params.large_swing_threshold:
            large_swings += 1
        if swing >= params.massive_swing_threshold:
            has_massive_swing = True
        at_extreme = prev <= params.extreme_level or prev >= 1 - params.extreme_level
        if at_extreme and swing >= params.extreme_recovery_threshold:
            has_extreme_recovery = True

    bonus = 0.0
    if large_swings >= params.multi_swing_count:
        bonus = max(bonus, params.multi_swing_bonus)
    if has_massive_swing:
        bonus = max(bonus, params.massive_swing_bonus)
    if has_extreme_recovery:
        bonus = max(bonus, params.extreme_recovery_bonus)
    return bonus


def calculate_overtime_bonus(overtime_periods: int, params: OvertimeBonus) -> float:
    if overtime_periods <= 0:
        return 0.0
    return params.base + params.per_additional * (overtime_periods - 1)


def calculate_close_game_bonus(
    final_margin: Optional[int],
    tension: float,
    params: CloseGameBonus,
    basketball: bool = False,
) -> float:
    """
    Bonus for a tight final margin, scaled by how tense the game actually was.

    A close final score after a game that never felt close (late garbage-time
    scores) only earns a fraction of the bonus.
    """
    if final_margin is None:
        return 0.0

    multiplier = params.basketball_margin_multiplier if basketball else 1
    bonus = 0.0
    for max_margin, value in params.margins:
        if final_margin <= max_margin * multiplier:
            bonus = value
            break
    if bonus == 0.0:
        return 0.0

    if tension <= params.low_tension:
        credit = params.low_tension_factor
    elif tension >= params.full_tension:
        credit = 1.0
    else:
        progress = (tension - params.low_tension) / (params.full_tension - params.low_tension)
        credit = params.low_tension_factor + (1 - params.low_tension_factor) * progress
    return bonus * credit


def evaluate_bonuses(
    probs: Sequence[float],
    context: GameContext,
    tension: float,
    params: BonusParams,
    samples: Sequence[ProbabilitySample] = (),
) -> BonusBreakdown:
    return BonusBreakdown(
        upset=calculate_upset_bonus(probs, params.upset),
        comeback=calculate_comeback_bonus(probs, params.comeback),
        volatility=calculate_volatility_bonus(probs, params.volatility),
        overtime=calculate_overtime_bonus(context.resolve_overtime_periods(samples), params.overtime),
        close_game=calculate_close_game_bonus(
            context.final_margin,
            tension,
            params.close_game,
            basketball=context.sport.is_basketball,
        ),
    )
