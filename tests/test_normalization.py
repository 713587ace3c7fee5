"""Tests for raw-score normalization and tier lookup."""
import pytest

from game_excitement.algorithm_config import (
    ALGORITHM_VERSIONS,
    AlgorithmVersion,
    NormalizationMethod,
    NormalizationParams,
    TierConfig,
    TierCutoffs,
)
from game_excitement.models import Sport, Tier
from game_excitement.normalization import (
    NORMALIZATION_STRATEGIES,
    get_tier,
    normalize_score,
    piecewise_normalize,
    sigmoid_normalize,
)

SIGMOID = NormalizationParams()
PIECEWISE = NormalizationParams(method=NormalizationMethod.PIECEWISE_LINEAR)


class TestSigmoid:

    def test_midpoint(self):
        assert sigmoid_normalize(5.0, SIGMOID) == pytest.approx(5.5)
        assert normalize_score(5.0, SIGMOID) == 5.5

    def test_extremes_are_clamped(self):
        assert normalize_score(1000.0, SIGMOID) == 10.0
        assert normalize_score(-1000.0, SIGMOID) == 1.0

    def test_rounded_to_one_decimal(self):
        value = normalize_score(7.3, SIGMOID)
        assert value == round(value, 1)

    def test_monotonic(self):
        scores = [normalize_score(raw / 4, SIGMOID) for raw in range(-20, 80)]
        assert scores == sorted(scores)


class TestPiecewise:

    @pytest.mark.parametrize("raw, expected", [
        (0.0, 1.0),
        (3.0, 4.0),
        (8.0, 7.7),
        (7.0, 7.0),
        (16.0, 10.0),
        (20.0, 10.0),
        (-2.0, 1.0),
    ])
    def test_knots(self, raw, expected):
        assert normalize_score(raw, PIECEWISE) == pytest.approx(expected)

    def test_extends_first_segment_below_zero(self):
        assert piecewise_normalize(-1.0, PIECEWISE) == pytest.approx(0.0)

    def test_every_method_has_a_strategy(self):
        assert set(NORMALIZATION_STRATEGIES) == set(NormalizationMethod)


class TestTiers:

    tiers = TierConfig()

    @pytest.mark.parametrize("score, tier", [
        (10.0, Tier.MUST_WATCH),
        (8.0, Tier.MUST_WATCH),
        (7.9, Tier.RECOMMENDED),
        (6.0, Tier.RECOMMENDED),
        (5.9, Tier.SKIP),
        (1.0, Tier.SKIP),
    ])
    def test_default_cutoffs(self, score, tier):
        assert get_tier(score, self.tiers) == tier

    def test_nba_cutoffs_are_stricter(self):
        tiers = ALGORITHM_VERSIONS[AlgorithmVersion.V2_4].tiers
        assert get_tier(8.2, tiers, Sport.NBA) == Tier.RECOMMENDED
        assert get_tier(8.5, tiers, Sport.NBA) == Tier.MUST_WATCH
        assert get_tier(6.2, tiers, Sport.NBA) == Tier.SKIP
        assert get_tier(8.2, tiers, Sport.NFL) == Tier.MUST_WATCH

    def test_per_sport_override(self):
        tiers = TierConfig(per_sport=((Sport.CFB, TierCutoffs(must_watch=9.0, recommended=7.0)),))
        assert get_tier(8.5, tiers, Sport.CFB) == Tier.RECOMMENDED
        assert get_tier(8.5, tiers, Sport.NFL) == Tier.MUST_WATCH

    def test_tier_never_drops_as_score_rises(self):
        tiers = ALGORITHM_VERSIONS[AlgorithmVersion.V2_4].tiers
        for sport in Sport:
            ranks = [get_tier(s / 10, tiers, sport).rank for s in range(10, 101)]
            assert ranks == sorted(ranks)
