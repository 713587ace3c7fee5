"""
Core value types for excitement scoring.

Samples are home-team win probabilities in chronological order. Everything
here is immutable once built.
"""
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, List, Optional, Sequence


REGULATION_PERIODS = 4


class Sport(str, Enum):
    NFL = "NFL"
    CFB = "CFB"
    NBA = "NBA"

    @classmethod
    def parse(cls, value) -> "Sport":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            raise ValueError(f"Unknown sport: {value!r}")

    @property
    def is_basketball(self) -> bool:
        return self is Sport.NBA


class Tier(str, Enum):
    MUST_WATCH = "must-watch"
    RECOMMENDED = "recommended"
    SKIP = "skip"

    @property
    def rank(self) -> int:
        return _TIER_RANKS[self]


_TIER_RANKS = {Tier.SKIP: 0, Tier.RECOMMENDED: 1, Tier.MUST_WATCH: 2}


@dataclass(frozen=True)
class ProbabilitySample:
    win_probability: float
    sequence_index: Optional[int] = None
    period_label: Optional[str] = None
    clock_label: Optional[str] = None


@dataclass(frozen=True)
class GameContext:
    """
    Game metadata the scorer needs beyond the probability curve.

    Scores are optional: without them the close-game bonus is skipped and the
    fallback heuristic uses its widest margin band.
    """
    sport: Sport = Sport.NFL
    home_score: Optional[int] = None
    away_score: Optional[int] = None
    overtime: bool = False
    overtime_periods: Optional[int] = None

    @property
    def final_margin(self) -> Optional[int]:
        if self.home_score is None or self.away_score is None:
            return None
        return abs(self.home_score - self.away_score)

    def resolve_overtime_periods(self, samples: Sequence[ProbabilitySample] = ()) -> int:
        """
        Number of overtime periods played (0 when the game ended in regulation).

        Falls back to the highest numeric period label seen in the samples
        when the producer did not say.
        """
        if not self.overtime:
            return 0
        if self.overtime_periods is not None:
            return max(1, self.overtime_periods)

        highest = 0
        for sample in samples:
            try:
                highest = max(highest, int(str(sample.period_label)))
            except (TypeError, ValueError):
                continue
        return max(1, highest - REGULATION_PERIODS)


@dataclass(frozen=True)
class ComponentScore:
    tension: float = 0.0
    drama: float = 0.0
    finish: float = 0.0

    def rounded(self, digits: int = 2) -> Dict[str, float]:
        return {
            'tension': round(self.tension, digits),
            'drama': round(self.drama, digits),
            'finish': round(self.finish, digits),
        }


@dataclass(frozen=True)
class BonusBreakdown:
    upset: float = 0.0
    comeback: float = 0.0
    volatility: float = 0.0
    overtime: float = 0.0
    close_game: float = 0.0

    @property
    def total(self) -> float:
        return self.upset + self.comeback + self.volatility + self.overtime + self.close_game


@dataclass(frozen=True)
class DecisionPoint:
    """Last moment the game was still inside the competitive band."""
    index: int
    lateness: float
    ever_competitive: bool
    always_competitive: bool


@dataclass(frozen=True)
class ExcitementResult:
    raw_score: float
    normalized_score: float
    breakdown: ComponentScore
    tier: Tier
    algorithm_version: str
    bonuses: Optional[BonusBreakdown] = None
    decision_point: Optional[DecisionPoint] = None
    fallback_reason: Optional[str] = None
    sample_count: int = 0

    @property
    def used_fallback(self) -> bool:
        return self.fallback_reason is not None

    def to_dict(self) -> Dict:
        """Render the public output contract plus diagnostics."""
        payload = {
            'excitement': round(self.normalized_score, 1),
            'breakdown': self.breakdown.rounded(2),
            'tier': self.tier.value,
            'raw_score': round(self.raw_score, 4),
            'algorithm_version': self.algorithm_version,
            'fallback_reason': self.fallback_reason,
            'sample_count': self.sample_count,
            'bonuses': None,
            'decision_point': None,
        }
        if self.bonuses is not None:
            payload['bonuses'] = {k: round(v, 4) for k, v in asdict(self.bonuses).items()}
            payload['bonuses']['total'] = round(self.bonuses.total, 4)
        if self.decision_point is not None:
            payload['decision_point'] = asdict(self.decision_point)
        return payload


def probability_values(samples: Sequence[ProbabilitySample]) -> List[float]:
    return [sample.win_probability for sample in samples]
