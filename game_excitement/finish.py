"""
Finish: how did it end?

Four sub-scores over the closing samples, log-compressed into 0-10:

- closeness (<= 4): how near 50% the game got inside the final window
- volatility (<= 4): leverage-weighted movement over the final quarter
- walk-off (<= 3): the biggest competitive swing in the final window
- late drama (<= 2): a big swing in the very last samples
"""
from dataclasses import dataclass
from typing import Sequence

from .algorithm_config import FinishParams, Thresholds
from .curves import log_compress
from .drama import weighted_swing_total


@dataclass(frozen=True)
class FinishComponents:
    closeness: float = 0.0
    volatility: float = 0.0
    walkoff: float = 0.0
    late_drama: float = 0.0

    @property
    def total(self) -> float:
        return self.closeness + self.volatility + self.walkoff + self.late_drama


def _final_window(probs: Sequence[float], thresholds: Thresholds) -> Sequence[float]:
    return probs[-min(thresholds.final_moment_points, len(probs)):]


def closeness_subscore(probs: Sequence[float], thresholds: Thresholds, params: FinishParams) -> float:
    final_window = _final_window(probs, thresholds)
    pre_final = final_window[:-1]
    if pre_final:
        min_distance = min(abs(p - 0.5) for p in pre_final)
    else:
        min_distance = abs(probs[-1] - 0.5)
    final_closeness = max(0.0, 1 - min_distance * 2)
    return final_closeness ** params.closeness_power * params.closeness_max


def volatility_subscore(probs: Sequence[float], thresholds: Thresholds, params: FinishParams) -> float:
    window_size = max(params.volatility_min_window, int(len(probs) * params.volatility_fraction))
    final_period = probs[-window_size:]
    movement = weighted_swing_total(
        final_period,
        thresholds.leverage_floor,
        swing_scale=params.volatility_swing_scale,
    )
    return min(params.volatility_max, movement * params.volatility_gain)


def largest_competitive_swing(
    window: Sequence[float],
    band_low: float,
    band_high: float,
) -> float:
    """
    Largest swing that crossed 0.5 or started inside the competitive band.

    One-sided pull-aways (already decided, moving further away) don't qualify.
    """
    largest = 0.0
    for i in range(1, len(window)):
        start, end = window[i - 1], window[i]
        crossed_half = (start - 0.5) * (end - 0.5) < 0
        started_competitive = band_low <= start <= band_high
        if crossed_half or started_competitive:
            largest = max(largest, abs(end - start))
    return largest


def walkoff_subscore(probs: Sequence[float], thresholds: Thresholds, params: FinishParams) -> float:
    swing = largest_competitive_swing(
        _final_window(probs, thresholds),
        thresholds.competitive_band_low,
        thresholds.competitive_band_high,
    )
    if swing < thresholds.walkoff_swing_threshold:
        return 0.0
    bonus = params.walkoff_base + min(
        params.walkoff_max - params.walkoff_base,
        (swing - thresholds.walkoff_swing_threshold) * params.walkoff_slope,
    )
    return bonus


def late_drama_subscore(probs: Sequence[float], thresholds: Thresholds, params: FinishParams) -> float:
    window = probs[-thresholds.late_drama_window:]
    largest = 0.0
    for i in range(1, len(window)):
        largest = max(largest, abs(window[i] - window[i - 1]))
    if largest < thresholds.late_drama_swing_threshold:
        return 0.0
    return min(params.late_drama_max, (largest - params.late_drama_offset) * params.late_drama_slope)


def calculate_finish_components(
    probs: Sequence[float],
    thresholds: Thresholds,
    params: FinishParams,
) -> FinishComponents:
    if not probs:
        return FinishComponents()
    return FinishComponents(
        closeness=closeness_subscore(probs, thresholds, params),
        volatility=volatility_subscore(probs, thresholds, params),
        walkoff=walkoff_subscore(probs, thresholds, params),
        late_drama=late_drama_subscore(probs, thresholds, params),
    )


def calculate_finish(probs: Sequence[float], thresholds: Thresholds, params: FinishParams) -> float:
    """Finish quality on a 0-10 scale."""
    components = calculate_finish_components(probs, thresholds, params)
    return log_compress(components.total, params.log_base)
