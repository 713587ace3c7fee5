"""
Cleans a raw win-probability sequence before scoring.

Steps: clamp every sample to [0, 1], drop trailing post-game noise, then gate
on a minimum sample count.
"""
import logging
import math
from typing import Any, Iterable, List, Mapping, Optional, Sequence

from .algorithm_config import AlgorithmConfig, Thresholds
from .errors import InsufficientData, NoDataError
from .models import ProbabilitySample

logger = logging.getLogger(__name__)

NEUTRAL_PROBABILITY = 0.5

# Key names used by the probability feeds we consume, in priority order
_PROBABILITY_KEYS = ('winProbability', 'win_probability', 'homeWinPercentage', 'value')
_PERIOD_KEYS = ('periodLabel', 'period_label', 'period')
_CLOCK_KEYS = ('clockLabel', 'clock_label', 'clock')
_INDEX_KEYS = ('sequenceIndex', 'sequence_index', 'index')


def clamp_probability(value: Any) -> float:
    """
    Coerce a raw probability to [0, 1].

    Missing, non-numeric and NaN values become a neutral 0.5 instead of
    aborting the game.
    """
    if value is None or isinstance(value, bool):
        return NEUTRAL_PROBABILITY
    try:
        p = float(value)
    except (TypeError, ValueError):
        return NEUTRAL_PROBABILITY
    if math.isnan(p):
        return NEUTRAL_PROBABILITY
    return max(0.0, min(1.0, p))


def _first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    for key in keys:
        if record.get(key) is not None:
            return record[key]
    return None


def label_text(value: Any) -> Optional[str]:
    """Display text for a period or clock label, unwrapping ESPN-style objects."""
    if value is None:
        return None
    if isinstance(value, Mapping):
        # ESPN-style {"displayValue": "2:00"} objects
        value = value.get('displayValue', value.get('number', value.get('value')))
        if value is None:
            return None
    return str(value)


def sample_from_record(record: Mapping[str, Any], position: int = 0) -> ProbabilitySample:
    """Build a sample from one producer record (dict from a feed or JSON body)."""
    index = _first_present(record, _INDEX_KEYS)
    try:
        sequence_index = int(index) if index is not None else position
    except (TypeError, ValueError):
        sequence_index = position

    return ProbabilitySample(
        win_probability=clamp_probability(_first_present(record, _PROBABILITY_KEYS)),
        sequence_index=sequence_index,
        period_label=label_text(_first_present(record, _PERIOD_KEYS)),
        clock_label=label_text(_first_present(record, _CLOCK_KEYS)),
    )


def samples_from_records(records: Iterable[Mapping[str, Any]]) -> List[ProbabilitySample]:
    return [sample_from_record(record, i) for i, record in enumerate(records)]


def samples_from_values(values: Iterable[Any]) -> List[ProbabilitySample]:
    """Build samples from a bare list of probabilities."""
    return [
        ProbabilitySample(win_probability=clamp_probability(v), sequence_index=i)
        for i, v in enumerate(values)
    ]


def clamp_samples(samples: Sequence[ProbabilitySample]) -> List[ProbabilitySample]:
    clamped = []
    for sample in samples:
        p = clamp_probability(sample.win_probability)
        if p != sample.win_probability:
            sample = ProbabilitySample(p, sample.sequence_index, sample.period_label, sample.clock_label)
        clamped.append(sample)
    return clamped


def _is_decisive(p: float, threshold: float) -> bool:
    return p <= threshold or p >= 1.0 - threshold


def find_noise_cutoff(probs: Sequence[float], thresholds: Thresholds) -> Optional[int]:
    """
    Index of the last decisive sample when everything after it is post-game noise.

    Returns None when the sequence should be kept as-is: there is no decisive
    sample (the game was legitimately undecided), nothing after it bounces
    further than the bounce threshold, or the tail is a sustained late
    reversal: it crosses 0.5 and runs at least final_moment_points samples.
    A short tail is truncated even when it crosses 0.5.
    """
    decisive_index = None
    for i in range(len(probs) - 1, -1, -1):
        if _is_decisive(probs[i], thresholds.decisive_threshold):
            decisive_index = i
            break

    if decisive_index is None:
        return None

    decisive_value = probs[decisive_index]
    tail = probs[decisive_index + 1:]
    if not any(abs(p - decisive_value) > thresholds.bounce_back_threshold for p in tail):
        return None

    if len(tail) >= thresholds.final_moment_points:
        decisive_side = decisive_value > NEUTRAL_PROBABILITY
        if any((p > NEUTRAL_PROBABILITY) != decisive_side and p != NEUTRAL_PROBABILITY for p in tail):
            return None

    return decisive_index


def filter_trailing_noise(
    samples: Sequence[ProbabilitySample],
    thresholds: Thresholds,
) -> List[ProbabilitySample]:
    """Truncate post-game artifacts after the last decisive sample (inclusive)."""
    samples = list(samples)
    if len(samples) < 2:
        return samples

    cutoff = find_noise_cutoff([s.win_probability for s in samples], thresholds)
    if cutoff is None:
        return samples

    logger.debug(
        "Truncated trailing probability noise",
        extra={"original_count": len(samples), "retained_count": cutoff + 1},
    )
    return samples[:cutoff + 1]


def require_sufficient_data(samples: Sequence[ProbabilitySample], thresholds: Thresholds) -> None:
    if not samples:
        raise NoDataError(thresholds.min_data_points)
    if len(samples) < thresholds.min_data_points:
        raise InsufficientData(len(samples), thresholds.min_data_points)


def prepare_probabilities(
    samples: Sequence[ProbabilitySample],
    config: AlgorithmConfig,
) -> List[ProbabilitySample]:
    """
    Clamp, filter and gate a sample sequence.

    Raises:
        NoDataError: the sequence is empty.
        InsufficientData: fewer than min_data_points samples survive filtering.
    """
    cleaned = filter_trailing_noise(clamp_samples(samples), config.thresholds)
    require_sufficient_data(cleaned, config.thresholds)
    return cleaned
