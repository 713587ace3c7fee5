"""
Excitement Score Calculator

Three-factor model over the home-team win-probability curve:
1. Tension - sustained closeness plus comeback potential
2. Drama - leverage-weighted swings plus lead changes
3. Finish - how close and volatile the ending was

raw = weighted components + bonuses, optionally adjusted by decision
lateness, then mapped onto 1-10 and a recommendation tier.
"""
import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from .algorithm_config import ALGORITHM_VERSIONS, DEFAULT_VERSION, AlgorithmConfig
from .bonuses import evaluate_bonuses
from .decision_point import apply_decision_adjustment, find_decision_point
from .drama import calculate_drama
from .errors import InsufficientData
from .finish import calculate_finish
from .models import (
    ComponentScore,
    ExcitementResult,
    GameContext,
    ProbabilitySample,
    probability_values,
)
from .normalization import get_tier, normalize_score
from .probability_normalizer import prepare_probabilities, samples_from_records, samples_from_values
from .tension import calculate_tension

logger = logging.getLogger(__name__)


def _default_config() -> AlgorithmConfig:
    return ALGORITHM_VERSIONS[DEFAULT_VERSION]


def calculate_component_scores(probs: Sequence[float], config: AlgorithmConfig) -> ComponentScore:
    """Tension, drama and finish (each 0-10) for an already-filtered curve."""
    return ComponentScore(
        tension=calculate_tension(probs, config.tension),
        drama=calculate_drama(probs, config.drama, config.thresholds.leverage_floor),
        finish=calculate_finish(probs, config.thresholds, config.finish),
    )


def weighted_component_score(components: ComponentScore, config: AlgorithmConfig) -> float:
    weights = config.weights
    return (
        components.tension * weights.tension
        + components.drama * weights.drama
        + components.finish * weights.finish
    )


def calculate_fallback_score(context: GameContext, config: AlgorithmConfig) -> float:
    """
    Margin-only estimate for games without a usable probability curve.

    Tighter final margins score higher; overtime adds a flat bonus. An
    unknown margin gets the widest band's score.
    """
    params = config.fallback
    margin = context.final_margin

    score = params.default_score
    if margin is not None:
        for max_margin, band_score in params.margin_scores:
            if margin <= max_margin:
                score = band_score
                break

    if context.overtime:
        score += params.overtime_bonus

    scale = config.normalization
    return max(scale.scale_min, min(scale.scale_max, score))


def _fallback_result(
    context: GameContext,
    config: AlgorithmConfig,
    error: InsufficientData,
) -> ExcitementResult:
    score = calculate_fallback_score(context, config)
    logger.info(
        "Probability data unusable, using margin fallback",
        extra={
            "reason": error.reason,
            "sample_count": error.sample_count,
            "min_data_points": error.min_data_points,
            "fallback_score": score,
            "algorithm_version": config.version,
        },
    )
    return ExcitementResult(
        raw_score=score,
        normalized_score=score,
        breakdown=ComponentScore(),
        tier=get_tier(score, config.tiers, context.sport),
        algorithm_version=config.version,
        fallback_reason=error.reason,
        sample_count=error.sample_count,
    )


def calculate_excitement_score(
    samples: Sequence[ProbabilitySample],
    context: Optional[GameContext] = None,
    config: Optional[AlgorithmConfig] = None,
) -> ExcitementResult:
    """
    Score one game.

    Args:
        samples: Home-team win-probability samples in chronological order
        context: Sport, final score and overtime info (defaults to an NFL
            game with unknown score)
        config: Validated algorithm bundle (defaults to the default version)

    Returns:
        ExcitementResult. Never raises for bad game data: empty or short
        curves come back as a margin-only fallback result.
    """
    context = context or GameContext()
    config = config or _default_config()

    try:
        cleaned = prepare_probabilities(samples, config)
    except InsufficientData as e:
        return _fallback_result(context, config, e)

    probs = probability_values(cleaned)
    components = calculate_component_scores(probs, config)
    bonuses = evaluate_bonuses(probs, context, components.tension, config.bonuses, cleaned)

    decision = find_decision_point(probs, config.decision_point)
    raw_score = weighted_component_score(components, config) + bonuses.total
    raw_score = apply_decision_adjustment(raw_score, decision, config.decision_point)

    normalized = normalize_score(raw_score, config.normalization)

    return ExcitementResult(
        raw_score=raw_score,
        normalized_score=normalized,
        breakdown=components,
        tier=get_tier(normalized, config.tiers, context.sport),
        algorithm_version=config.version,
        bonuses=bonuses,
        decision_point=decision,
        sample_count=len(cleaned),
    )


def score_probabilities(
    probabilities: Iterable[Any],
    context: Optional[GameContext] = None,
    config: Optional[AlgorithmConfig] = None,
) -> ExcitementResult:
    """Score a bare list of home win probabilities."""
    return calculate_excitement_score(samples_from_values(probabilities), context, config)


def score_records(
    records: Iterable[Mapping[str, Any]],
    context: Optional[GameContext] = None,
    config: Optional[AlgorithmConfig] = None,
) -> ExcitementResult:
    """Score producer records such as {"homeWinPercentage": 0.61, "period": 2}."""
    return calculate_excitement_score(samples_from_records(records), context, config)
