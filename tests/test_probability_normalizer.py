"""
Tests for probability cleaning: clamping, trailing-noise filtering and the
minimum-sample gate.
"""
import math

import pytest

from game_excitement.algorithm_config import Thresholds
from game_excitement.errors import InsufficientData, NoDataError
from game_excitement.models import ProbabilitySample, probability_values
from game_excitement.probability_normalizer import (
    clamp_probability,
    filter_trailing_noise,
    find_noise_cutoff,
    prepare_probabilities,
    sample_from_record,
    samples_from_records,
    samples_from_values,
)


# ============================================================================
# TEST HELPERS
# ============================================================================

THRESHOLDS = Thresholds()


def filtered_values(values):
    return probability_values(filter_trailing_noise(samples_from_values(values), THRESHOLDS))


# ============================================================================
# TEST: CLAMPING
# ============================================================================

class TestClampProbability:

    @pytest.mark.parametrize("raw, expected", [
        (0.37, 0.37),
        (1.5, 1.0),
        (-0.2, 0.0),
        ("0.7", 0.7),
        (None, 0.5),
        ("abc", 0.5),
        (math.nan, 0.5),
        (True, 0.5),
    ])
    def test_clamp(self, raw, expected):
        assert clamp_probability(raw) == pytest.approx(expected)

    def test_samples_from_values_clamps_everything(self):
        samples = samples_from_values([1.2, None, -1, 0.4])
        assert probability_values(samples) == [1.0, 0.5, 0.0, 0.4]
        assert [s.sequence_index for s in samples] == [0, 1, 2, 3]


class TestRecordParsing:

    def test_feed_record_shapes(self):
        sample = sample_from_record(
            {"homeWinPercentage": 0.61, "period": {"number": 2}, "clock": {"displayValue": "2:00"}},
            position=7,
        )
        assert sample.win_probability == pytest.approx(0.61)
        assert sample.period_label == "2"
        assert sample.clock_label == "2:00"
        assert sample.sequence_index == 7

    def test_explicit_sequence_index_wins(self):
        sample = sample_from_record({"winProbability": 0.3, "sequenceIndex": 42}, position=0)
        assert sample.sequence_index == 42

    def test_missing_probability_is_neutral(self):
        samples = samples_from_records([{"value": None}, {"periodLabel": "OT"}])
        assert probability_values(samples) == [0.5, 0.5]
        assert samples[1].period_label == "OT"


# ============================================================================
# TEST: TRAILING NOISE
# ============================================================================

class TestTrailingNoise:

    def test_bounce_after_decisive_value_is_truncated(self):
        """Game decided at 0.05, then post-game noise bounces back to 0.30."""
        values = [0.55] * 15 + [0.3, 0.1, 0.05] + [0.20, 0.30]
        result = filtered_values(values)
        assert len(result) == 18
        assert result[-1] == pytest.approx(0.05)

    def test_undecided_game_is_not_filtered(self):
        """No decisive sample anywhere: a legitimately undecided curve stays intact."""
        values = [0.55] * 20 + [0.45, 0.30]
        assert filtered_values(values) == values

    def test_small_wobble_after_decisive_value_is_kept(self):
        values = [0.5] * 10 + [0.03, 0.10, 0.12]
        assert filtered_values(values) == values

    def test_sustained_late_reversal_across_half_is_kept(self):
        values = [0.02] * 12 + [0.3, 0.5, 0.6, 0.7, 0.75, 0.8, 0.85, 0.88, 0.9, 0.92]
        assert find_noise_cutoff(values, THRESHOLDS) is None
        assert filtered_values(values) == values

    def test_short_artifact_across_half_is_truncated(self):
        """Decided at 0.02 for the away team; two stray samples must not flip the winner."""
        values = [0.5] * 30 + [0.3, 0.1, 0.02] + [0.55, 0.6]
        assert find_noise_cutoff(values, THRESHOLDS) == 32
        result = filtered_values(values)
        assert len(result) == 33
        assert result[-1] == pytest.approx(0.02)

    def test_decisive_final_sample_needs_no_filtering(self):
        values = [0.5] * 10 + [0.99]
        assert find_noise_cutoff(values, THRESHOLDS) is None

    def test_filtering_is_idempotent(self):
        values = [0.55] * 15 + [0.3, 0.1, 0.05] + [0.20, 0.30]
        once = filter_trailing_noise(samples_from_values(values), THRESHOLDS)
        twice = filter_trailing_noise(once, THRESHOLDS)
        assert twice == once

    def test_sample_metadata_survives_truncation(self):
        samples = [
            ProbabilitySample(0.5, i, period_label="4", clock_label=f"0:{i:02d}")
            for i in range(10)
        ] + [ProbabilitySample(0.97, 10, "4", "0:00"), ProbabilitySample(0.7, 11, "4", "0:00")]
        result = filter_trailing_noise(samples, THRESHOLDS)
        assert result == samples[:11]


# ============================================================================
# TEST: SUFFICIENCY GATE
# ============================================================================

class TestPrepareProbabilities:

    def test_empty_sequence_raises_no_data(self, default_config):
        with pytest.raises(NoDataError) as exc:
            prepare_probabilities([], default_config)
        assert exc.value.reason == "no_data"

    def test_no_data_is_insufficient_data(self, default_config):
        with pytest.raises(InsufficientData):
            prepare_probabilities([], default_config)

    def test_short_sequence_raises_insufficient_data(self, default_config):
        with pytest.raises(InsufficientData) as exc:
            prepare_probabilities(samples_from_values([0.5] * 5), default_config)
        assert exc.value.sample_count == 5
        assert exc.value.reason == "insufficient_data"

    def test_boundary_count(self, default_config):
        with pytest.raises(InsufficientData):
            prepare_probabilities(samples_from_values([0.5] * 9), default_config)
        assert len(prepare_probabilities(samples_from_values([0.5] * 10), default_config)) == 10

    def test_truncation_can_push_below_minimum(self, default_config):
        values = [0.5] * 8 + [0.02] + [0.30, 0.35]
        with pytest.raises(InsufficientData) as exc:
            prepare_probabilities(samples_from_values(values), default_config)
        assert exc.value.sample_count == 9

    def test_out_of_range_samples_are_clamped(self, default_config):
        raw = [ProbabilitySample(1.4, i) for i in range(5)] + [ProbabilitySample(-0.3, i) for i in range(5, 10)]
        cleaned = prepare_probabilities(raw, default_config)
        assert all(0.0 <= s.win_probability <= 1.0 for s in cleaned)
