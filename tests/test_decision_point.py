"""Tests for decision point detection and lateness adjustments."""
import pytest

from game_excitement.algorithm_config import AdjustmentMethod, DecisionPointParams
from game_excitement.decision_point import (
    ADJUSTMENT_STRATEGIES,
    apply_decision_adjustment,
    find_decision_point,
)
from game_excitement.models import DecisionPoint

PARAMS = DecisionPointParams()


class TestFindDecisionPoint:

    def test_always_competitive(self):
        point = find_decision_point([0.5] * 10, PARAMS)
        assert point.lateness == 1.0
        assert point.always_competitive
        assert point.index == 9

    def test_never_competitive(self):
        point = find_decision_point([0.9] * 10, PARAMS)
        assert point.lateness == 0.0
        assert not point.ever_competitive

    def test_decided_midway(self):
        point = find_decision_point([0.5] * 5 + [0.9] * 5, PARAMS)
        assert point.index == 4
        assert point.lateness == pytest.approx(4 / 9)
        assert point.ever_competitive and not point.always_competitive

    def test_band_edges_are_inclusive(self):
        point = find_decision_point([0.9, 0.75, 0.9, 0.9, 0.9], PARAMS)
        assert point.index == 1

    def test_blowout_was_never_competitive(self, blowout):
        assert find_decision_point(blowout, PARAMS).lateness == 0.0

    def test_single_sample(self):
        assert find_decision_point([0.9], PARAMS).lateness == 1.0


class TestAdjustments:

    decision = DecisionPoint(index=2, lateness=0.25, ever_competitive=True, always_competitive=False)

    def test_every_method_has_a_strategy(self):
        assert set(ADJUSTMENT_STRATEGIES) == set(AdjustmentMethod)

    def test_none_is_identity(self):
        assert apply_decision_adjustment(8.0, self.decision, PARAMS) == 8.0

    def test_multiplicative(self):
        params = DecisionPointParams(adjustment_method=AdjustmentMethod.MULTIPLICATIVE)
        assert apply_decision_adjustment(8.0, self.decision, params) == pytest.approx(4.0)

    def test_blend(self):
        params = DecisionPointParams(adjustment_method=AdjustmentMethod.BLEND)
        # 8 * (0.4 + 0.6 * 0.25)
        assert apply_decision_adjustment(8.0, self.decision, params) == pytest.approx(4.4)

    def test_late_decision_is_not_penalised(self):
        late = DecisionPoint(index=9, lateness=1.0, ever_competitive=True, always_competitive=True)
        for method in AdjustmentMethod:
            params = DecisionPointParams(adjustment_method=method)
            assert apply_decision_adjustment(6.0, late, params) == pytest.approx(6.0)
