"""Request and response bodies for the excitement API."""
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from .models import GameContext, ProbabilitySample, Sport
from .probability_normalizer import clamp_probability, label_text


class SampleIn(BaseModel):
    """One win-probability sample as sent by a feed producer."""

    model_config = ConfigDict(populate_by_name=True)

    # Missing, non-numeric or NaN values are neutralised to 0.5, not rejected here
    win_probability: Any = Field(
        None,
        validation_alias=AliasChoices(
            "winProbability", "win_probability", "homeWinPercentage", "value"
        ),
    )
    sequence_index: Optional[int] = Field(
        None, validation_alias=AliasChoices("sequenceIndex", "sequence_index")
    )
    # Plain values or ESPN-style {"number": 5} / {"displayValue": "2:00"} objects
    period_label: Any = Field(
        None, validation_alias=AliasChoices("periodLabel", "period_label", "period")
    )
    clock_label: Any = Field(
        None, validation_alias=AliasChoices("clockLabel", "clock_label", "clock")
    )

    def to_sample(self, position: int) -> ProbabilitySample:
        return ProbabilitySample(
            win_probability=clamp_probability(self.win_probability),
            sequence_index=self.sequence_index if self.sequence_index is not None else position,
            period_label=label_text(self.period_label),
            clock_label=label_text(self.clock_label),
        )


class ContextIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    sport: Sport = Sport.NFL
    home_score: Optional[int] = Field(None, ge=0, alias="homeScore")
    away_score: Optional[int] = Field(None, ge=0, alias="awayScore")
    overtime: bool = False
    overtime_periods: Optional[int] = Field(None, ge=1, alias="overtimePeriods")

    @field_validator("sport", mode="before")
    @classmethod
    def parse_sport(cls, v):
        return Sport.parse(v)

    def to_context(self) -> GameContext:
        return GameContext(
            sport=self.sport,
            home_score=self.home_score,
            away_score=self.away_score,
            overtime=self.overtime,
            overtime_periods=self.overtime_periods,
        )


class ScoreRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    game_id: Optional[str] = Field(None, alias="gameId")
    samples: List[SampleIn]
    context: ContextIn = Field(default_factory=ContextIn)
    version: Optional[str] = None

    def to_samples(self) -> List[ProbabilitySample]:
        return [sample.to_sample(i) for i, sample in enumerate(self.samples)]


class BatchRequest(BaseModel):
    # Each game is validated on its own so one malformed game can't fail the batch
    games: List[Dict[str, Any]]
    # Applied to games that don't name their own version
    version: Optional[str] = None


class BreakdownOut(BaseModel):
    tension: float
    drama: float
    finish: float


class BonusesOut(BaseModel):
    upset: float
    comeback: float
    volatility: float
    overtime: float
    close_game: float
    total: float


class DecisionPointOut(BaseModel):
    index: int
    lateness: float
    ever_competitive: bool
    always_competitive: bool


class DataQualityIssueOut(BaseModel):
    type: str
    severity: str
    message: str


class DataQualityOut(BaseModel):
    has_issues: bool
    severity: str
    issues: List[DataQualityIssueOut]


class ExcitementResponse(BaseModel):
    game_id: Optional[str] = None
    excitement: float
    breakdown: BreakdownOut
    tier: str
    raw_score: float
    algorithm_version: str
    fallback_reason: Optional[str] = None
    sample_count: int
    bonuses: Optional[BonusesOut] = None
    decision_point: Optional[DecisionPointOut] = None
    data_quality: Optional[DataQualityOut] = None


class BatchItem(BaseModel):
    game_id: Optional[str] = None
    result: Optional[ExcitementResponse] = None
    error: Optional[str] = None


class BatchResponse(BaseModel):
    results: List[BatchItem]
    scored: int
    failed: int


class HealthResponse(BaseModel):
    status: str
    service: str
    default_version: str


class VersionsResponse(BaseModel):
    default: str
    versions: Dict[str, str]
