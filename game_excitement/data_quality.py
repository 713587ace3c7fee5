"""
Data quality checks for win-probability feeds.

Flags curves that are likely to produce a misleading score (post-game noise,
missing swings, sparse sampling) so consumers can show a warning. Purely
diagnostic: nothing here feeds back into the score.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence

from .drama import count_lead_changes
from .models import GameContext, ProbabilitySample, probability_values

MIN_DATA_POINTS = 10
DECISIVE_LOW = 0.05
DECISIVE_HIGH = 0.95
CLOSE_MARGIN_FOOTBALL = 7
CLOSE_MARGIN_BASKETBALL = 10
ONE_POSSESSION_MARGIN = 3
OVERTIME_WINDOW_START = 0.85
EXPECTED_POINTS_FOOTBALL = 150
EXPECTED_POINTS_BASKETBALL = 200


class Severity(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


_SEVERITY_ORDER = [Severity.NONE, Severity.LOW, Severity.MEDIUM, Severity.HIGH]


@dataclass(frozen=True)
class DataQualityIssue:
    type: str
    severity: Severity
    message: str


@dataclass(frozen=True)
class DataQualityReport:
    issues: List[DataQualityIssue] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)

    @property
    def severity(self) -> Severity:
        worst = Severity.NONE
        for issue in self.issues:
            if _SEVERITY_ORDER.index(issue.severity) > _SEVERITY_ORDER.index(worst):
                worst = issue.severity
        return worst

    def summary(self) -> str:
        return "; ".join(issue.message for issue in self.issues)

    def to_dict(self) -> Dict:
        return {
            'has_issues': self.has_issues,
            'severity': self.severity.value,
            'issues': [
                {'type': i.type, 'severity': i.severity.value, 'message': i.message}
                for i in self.issues
            ],
        }


def _check_trailing_noise(probs: Sequence[float]) -> Optional[DataQualityIssue]:
    final = probs[-1]
    if DECISIVE_LOW < final < DECISIVE_HIGH:
        return DataQualityIssue(
            type='trailing-noise',
            severity=Severity.HIGH,
            message=(
                f"Final win probability is {final * 100:.0f}% instead of near 0% or 100% "
                "- data may include post-game noise"
            ),
        )
    return None


def _check_margin_drama(probs: Sequence[float], context: GameContext) -> List[DataQualityIssue]:
    margin = context.final_margin
    if margin is None:
        return []

    issues = []
    lead_changes = count_lead_changes(probs)
    close_margin = CLOSE_MARGIN_BASKETBALL if context.sport.is_basketball else CLOSE_MARGIN_FOOTBALL

    if margin <= close_margin and lead_changes == 0:
        issues.append(DataQualityIssue(
            type='missing-drama',
            severity=Severity.HIGH,
            message=(
                f"Close game ({margin}-point margin) but 0 lead changes detected "
                "- dramatic moments may be missing from probability data"
            ),
        ))
    if margin <= ONE_POSSESSION_MARGIN and lead_changes == 1:
        issues.append(DataQualityIssue(
            type='low-drama-for-margin',
            severity=Severity.MEDIUM,
            message=f"One-possession game ({margin} pts) but only 1 lead change - data may be incomplete",
        ))
    return issues


def _check_overtime_crossings(probs: Sequence[float], context: GameContext) -> Optional[DataQualityIssue]:
    if not context.overtime:
        return None
    window = probs[int(len(probs) * OVERTIME_WINDOW_START):]
    if count_lead_changes(window) == 0:
        return DataQualityIssue(
            type='ot-no-crossings',
            severity=Severity.MEDIUM,
            message="Overtime game but no late lead changes in probability data",
        )
    return None


def _check_sparse(probs: Sequence[float], context: GameContext) -> Optional[DataQualityIssue]:
    expected = EXPECTED_POINTS_BASKETBALL if context.sport.is_basketball else EXPECTED_POINTS_FOOTBALL
    if len(probs) < expected:
        return DataQualityIssue(
            type='sparse-data',
            severity=Severity.LOW,
            message=(
                f"Only {len(probs)} data points (expected {expected}+) "
                "- score may not capture all moments"
            ),
        )
    return None


def detect_data_quality_issues(
    samples: Sequence[ProbabilitySample],
    context: Optional[GameContext] = None,
) -> DataQualityReport:
    """Run every feed check against a raw (unfiltered) sample sequence."""
    context = context or GameContext()
    probs = probability_values(samples)

    if len(probs) < MIN_DATA_POINTS:
        return DataQualityReport(issues=[DataQualityIssue(
            type='insufficient-data',
            severity=Severity.HIGH,
            message="Insufficient probability data points",
        )])

    issues = []
    trailing = _check_trailing_noise(probs)
    if trailing:
        issues.append(trailing)
    issues.extend(_check_margin_drama(probs, context))
    overtime = _check_overtime_crossings(probs, context)
    if overtime:
        issues.append(overtime)
    sparse = _check_sparse(probs, context)
    if sparse:
        issues.append(sparse)

    return DataQualityReport(issues=issues)
