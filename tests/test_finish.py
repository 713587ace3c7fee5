"""Tests for the finish component and its sub-scores."""
import math

import pytest

from game_excitement.algorithm_config import FinishParams, Thresholds
from game_excitement.finish import (
    calculate_finish,
    calculate_finish_components,
    closeness_subscore,
    largest_competitive_swing,
    late_drama_subscore,
    volatility_subscore,
    walkoff_subscore,
)

THRESHOLDS = Thresholds()
PARAMS = FinishParams()


class TestClosenessSubscore:

    def test_coin_flip_ending_gets_full_credit(self):
        assert closeness_subscore([0.5] * 20, THRESHOLDS, PARAMS) == pytest.approx(PARAMS.closeness_max)

    def test_uses_pre_final_window_only(self):
        # The final (decisive) sample doesn't count, the 0.6 before it does
        probs = [0.9] * 10 + [0.6] * 9 + [1.0]
        expected = (1 - 0.1 * 2) ** PARAMS.closeness_power * PARAMS.closeness_max
        assert closeness_subscore(probs, THRESHOLDS, PARAMS) == pytest.approx(expected)


class TestVolatilitySubscore:

    def test_flat_ending(self):
        assert volatility_subscore([0.8] * 40, THRESHOLDS, PARAMS) == 0.0

    def test_capped(self, thriller):
        assert volatility_subscore(thriller, THRESHOLDS, PARAMS) == PARAMS.volatility_max


class TestWalkoff:

    def test_one_sided_pull_away_does_not_qualify(self):
        assert largest_competitive_swing([0.9, 0.95, 0.99], 0.35, 0.65) == 0.0
        assert largest_competitive_swing([0.2, 0.05, 0.01], 0.35, 0.65) == 0.0
        # A collapse that never reaches 0.5 from outside the band is still one-sided
        assert largest_competitive_swing([0.99, 0.7], 0.35, 0.65) == 0.0

    def test_crossing_half_qualifies(self):
        assert largest_competitive_swing([0.6, 0.3], 0.35, 0.65) == pytest.approx(0.3)

    def test_swing_from_competitive_band_qualifies(self):
        assert largest_competitive_swing([0.40, 0.20], 0.35, 0.65) == pytest.approx(0.2)

    def test_walkoff_scales_with_swing(self):
        # 1 + (0.3 - 0.15) * 8
        probs = [0.6] * 9 + [0.3]
        assert walkoff_subscore(probs, THRESHOLDS, PARAMS) == pytest.approx(2.2)

    def test_walkoff_is_capped(self):
        probs = [0.5] * 9 + [1.0]
        assert walkoff_subscore(probs, THRESHOLDS, PARAMS) == pytest.approx(PARAMS.walkoff_max)

    def test_small_swing_earns_nothing(self):
        probs = [0.5] * 9 + [0.6]
        assert walkoff_subscore(probs, THRESHOLDS, PARAMS) == 0.0


class TestLateDrama:

    def test_big_late_swing(self):
        probs = [0.5] * 10 + [0.6, 0.3]
        assert late_drama_subscore(probs, THRESHOLDS, PARAMS) == pytest.approx(1.2)

    def test_swing_below_threshold(self):
        probs = [0.5] * 10 + [0.5, 0.31]
        assert late_drama_subscore(probs, THRESHOLDS, PARAMS) == 0.0

    def test_only_last_samples_count(self):
        probs = [0.5, 0.1] + [0.1] * 10
        assert late_drama_subscore(probs, THRESHOLDS, PARAMS) == 0.0


class TestFinish:

    def test_empty(self):
        assert calculate_finish([], THRESHOLDS, PARAMS) == 0.0
        assert calculate_finish_components([], THRESHOLDS, PARAMS).total == 0.0

    def test_coin_flip_ending_compression(self):
        # closeness 4 only: log(5) / log(13) * 10
        expected = math.log(5) / math.log(13) * 10
        assert calculate_finish([0.5] * 20, THRESHOLDS, PARAMS) == pytest.approx(expected)

    def test_thriller_finish(self, thriller):
        components = calculate_finish_components(thriller, THRESHOLDS, PARAMS)
        assert components.walkoff > 0
        assert components.late_drama > 0
        assert calculate_finish(thriller, THRESHOLDS, PARAMS) >= 6.0

    def test_blowout_finish_has_no_walkoff(self, blowout):
        components = calculate_finish_components(blowout, THRESHOLDS, PARAMS)
        assert components.walkoff == 0.0
        assert components.late_drama == 0.0
        assert calculate_finish(blowout, THRESHOLDS, PARAMS) < 4.0

    def test_bounded(self):
        assert 0.0 <= calculate_finish([0.0, 1.0] * 50, THRESHOLDS, PARAMS) <= 10.0
