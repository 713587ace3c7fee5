"""
Versioned algorithm configuration.

Each AlgorithmVersion carries its own immutable parameter bundle. Bundles are
built once, validated at load time and passed explicitly into the scorer;
experiments derive new bundles with dataclasses.replace instead of editing a
shared one.

Every constant below was hand-tuned against a small labeled benchmark of
canonical games. They are empirical, so they live here rather than inline in
the formulas.
"""
import json
import logging
import math
import os
from dataclasses import dataclass, field, fields, is_dataclass, replace
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union

from .errors import ConfigError
from .models import Sport

logger = logging.getLogger(__name__)

VERSION_ENV_VAR = "EXCITEMENT_ALGORITHM_VERSION"
OVERRIDES_ENV_VAR = "EXCITEMENT_CONFIG_PATH"


class AlgorithmVersion(str, Enum):
    V2_0 = "2.0"
    V2_2 = "2.2"
    V2_4 = "2.4"
    V2_5_MULTIPLIER = "2.5-multiplier"
    V2_5_BLEND = "2.5-blend"


class NormalizationMethod(str, Enum):
    SIGMOID = "sigmoid"
    PIECEWISE_LINEAR = "piecewise-linear"


class AdjustmentMethod(str, Enum):
    NONE = "none"
    MULTIPLICATIVE = "multiplicative"
    BLEND = "blend"


@dataclass(frozen=True)
class Weights:
    tension: float = 0.30
    drama: float = 0.35
    finish: float = 0.35


@dataclass(frozen=True)
class Thresholds:
    min_data_points: int = 10
    final_moment_points: int = 10
    # Trailing-noise filter
    decisive_threshold: float = 0.05
    bounce_back_threshold: float = 0.15
    # Shared swing/leverage constants
    leverage_floor: float = 0.05
    walkoff_swing_threshold: float = 0.15
    late_drama_swing_threshold: float = 0.20
    late_drama_window: int = 5
    competitive_band_low: float = 0.35
    competitive_band_high: float = 0.65


@dataclass(frozen=True)
class TensionParams:
    recency_factor: float = 0.3
    closeness_exponent: float = 1.3
    # Comeback boost curve: (deficit, boost) knots, linear between them
    comeback_knots: Tuple[Tuple[float, float], ...] = ((0.15, 0.0), (0.30, 1.0), (0.40, 2.5))
    comeback_tail_slope: float = 15.0
    comeback_max_boost: float = 4.0
    comeback_lateness_base: float = 0.5


@dataclass(frozen=True)
class DramaParams:
    swing_scale: float = 4.0
    recency_factor: float = 0.5
    log_base: float = 18.0
    # (minimum lead changes, boost), highest first
    lead_change_tiers: Tuple[Tuple[int, float], ...] = ((11, 1.0), (8, 0.6), (5, 0.3))


@dataclass(frozen=True)
class FinishParams:
    closeness_power: float = 0.6
    closeness_max: float = 4.0
    volatility_fraction: float = 0.25
    volatility_min_window: int = 2
    volatility_swing_scale: float = 4.0
    volatility_gain: float = 4.0
    volatility_max: float = 4.0
    walkoff_base: float = 1.0
    walkoff_slope: float = 8.0
    walkoff_max: float = 3.0
    late_drama_offset: float = 0.15
    late_drama_slope: float = 8.0
    late_drama_max: float = 2.0
    log_base: float = 12.0


@dataclass(frozen=True)
class UpsetBonus:
    max: float = 0.8
    threshold: float = 0.55
    full_at: float = 0.75
    early_fraction: float = 0.1
    early_min_points: int = 5
    early_max_points: int = 10


@dataclass(frozen=True)
class ComebackBonus:
    extreme_threshold: float = 0.15
    min_samples: int = 20
    tail_exclusion: int = 10
    # (deficit, bonus) knots; past the last knot the bonus keeps rising at tail_slope
    knots: Tuple[Tuple[float, float], ...] = ((0.35, 0.0), (0.40, 0.5), (0.45, 1.2))
    tail_slope: float = 20.0
    max: float = 2.0


@dataclass(frozen=True)
class VolatilityBonus:
    min_samples: int = 20
    large_swing_threshold: float = 0.18
    massive_swing_threshold: float = 0.50
    extreme_level: float = 0.10
    extreme_recovery_threshold: float = 0.18
    multi_swing_count: int = 6
    multi_swing_bonus: float = 1.0
    massive_swing_bonus: float = 1.5
    extreme_recovery_bonus: float = 0.75


@dataclass(frozen=True)
class OvertimeBonus:
    base: float = 0.8
    per_additional: float = 0.3


@dataclass(frozen=True)
class CloseGameBonus:
    # (max final margin, bonus), tightest first
    margins: Tuple[Tuple[int, float], ...] = ((3, 1.5), (7, 0.5), (10, 0.2))
    basketball_margin_multiplier: int = 2
    low_tension: float = 3.0
    full_tension: float = 5.0
    low_tension_factor: float = 0.25


@dataclass(frozen=True)
class BonusParams:
    upset: UpsetBonus = field(default_factory=UpsetBonus)
    comeback: ComebackBonus = field(default_factory=ComebackBonus)
    volatility: VolatilityBonus = field(default_factory=VolatilityBonus)
    overtime: OvertimeBonus = field(default_factory=OvertimeBonus)
    close_game: CloseGameBonus = field(default_factory=CloseGameBonus)


@dataclass(frozen=True)
class TierCutoffs:
    must_watch: float = 8.0
    recommended: float = 6.0


@dataclass(frozen=True)
class TierConfig:
    default: TierCutoffs = field(default_factory=TierCutoffs)
    per_sport: Tuple[Tuple[Sport, TierCutoffs], ...] = ()

    def for_sport(self, sport: Optional[Sport]) -> TierCutoffs:
        for candidate, cutoffs in self.per_sport:
            if candidate == sport:
                return cutoffs
        return self.default


@dataclass(frozen=True)
class NormalizationParams:
    method: NormalizationMethod = NormalizationMethod.SIGMOID
    scale_min: float = 1.0
    scale_max: float = 10.0
    decimals: int = 1
    sigmoid_midpoint: float = 5.0
    sigmoid_steepness: float = 2.5
    # (raw, normalized) knots for the piecewise-linear curve
    piecewise_knots: Tuple[Tuple[float, float], ...] = (
        (0.0, 1.0),
        (3.0, 4.0),
        (5.0, 5.5),
        (7.0, 7.0),
        (8.5, 8.0),
        (10.0, 9.0),
        (12.0, 9.5),
        (16.0, 10.0),
    )


@dataclass(frozen=True)
class DecisionPointParams:
    band_low: float = 0.25
    band_high: float = 0.75
    adjustment_method: AdjustmentMethod = AdjustmentMethod.NONE
    multiplier_exponent: float = 0.5
    blend_weight: float = 0.6


@dataclass(frozen=True)
class FallbackParams:
    # (max final margin, score), tightest first
    margin_scores: Tuple[Tuple[int, float], ...] = ((3, 8.0), (7, 7.0), (14, 6.0), (21, 5.0))
    default_score: float = 4.0
    overtime_bonus: float = 1.0


@dataclass(frozen=True)
class AlgorithmConfig:
    version: str = AlgorithmVersion.V2_4.value
    description: str = ""
    weights: Weights = field(default_factory=Weights)
    thresholds: Thresholds = field(default_factory=Thresholds)
    tension: TensionParams = field(default_factory=TensionParams)
    drama: DramaParams = field(default_factory=DramaParams)
    finish: FinishParams = field(default_factory=FinishParams)
    bonuses: BonusParams = field(default_factory=BonusParams)
    tiers: TierConfig = field(default_factory=TierConfig)
    normalization: NormalizationParams = field(default_factory=NormalizationParams)
    decision_point: DecisionPointParams = field(default_factory=DecisionPointParams)
    fallback: FallbackParams = field(default_factory=FallbackParams)


# =============================================================================
# VERSION REGISTRY
# =============================================================================

_V2_4 = AlgorithmConfig(
    version=AlgorithmVersion.V2_4.value,
    description=(
        "Sigmoid normalization, conditional close-game bonus, "
        "stricter NBA tiers"
    ),
    tiers=TierConfig(
        per_sport=((Sport.NBA, TierCutoffs(must_watch=8.5, recommended=6.5)),),
    ),
)

_V2_2 = replace(
    _V2_4,
    version=AlgorithmVersion.V2_2.value,
    description="Time-weighted drama, directional walk-off detection, sigmoid normalization",
    finish=replace(_V2_4.finish, closeness_power=0.7),
    bonuses=replace(
        _V2_4.bonuses,
        close_game=replace(_V2_4.bonuses.close_game, margins=((3, 1.0), (7, 0.5), (10, 0.2))),
    ),
    tiers=TierConfig(),
)

_V2_0 = replace(
    _V2_2,
    version=AlgorithmVersion.V2_0.value,
    description="Finish-heavy weights with piecewise-linear normalization",
    weights=Weights(tension=0.20, drama=0.30, finish=0.50),
    drama=replace(_V2_2.drama, recency_factor=0.0, log_base=8.0),
    normalization=replace(_V2_2.normalization, method=NormalizationMethod.PIECEWISE_LINEAR),
)

_V2_5_MULTIPLIER = replace(
    _V2_4,
    version=AlgorithmVersion.V2_5_MULTIPLIER.value,
    description="Experimental: raw score scaled by decision lateness",
    decision_point=replace(_V2_4.decision_point, adjustment_method=AdjustmentMethod.MULTIPLICATIVE),
)

_V2_5_BLEND = replace(
    _V2_4,
    version=AlgorithmVersion.V2_5_BLEND.value,
    description="Experimental: raw score blended with decision lateness",
    decision_point=replace(_V2_4.decision_point, adjustment_method=AdjustmentMethod.BLEND),
)

ALGORITHM_VERSIONS: Mapping[AlgorithmVersion, AlgorithmConfig] = MappingProxyType({
    AlgorithmVersion.V2_0: _V2_0,
    AlgorithmVersion.V2_2: _V2_2,
    AlgorithmVersion.V2_4: _V2_4,
    AlgorithmVersion.V2_5_MULTIPLIER: _V2_5_MULTIPLIER,
    AlgorithmVersion.V2_5_BLEND: _V2_5_BLEND,
})

DEFAULT_VERSION = AlgorithmVersion.V2_4


# =============================================================================
# VALIDATION
# =============================================================================

def _validate_cutoffs(cutoffs: TierCutoffs, label: str) -> None:
    if not (cutoffs.must_watch > cutoffs.recommended > 0):
        raise ConfigError(
            f"{label} tier cutoffs must satisfy must_watch > recommended > 0, "
            f"got {cutoffs.must_watch} / {cutoffs.recommended}"
        )


def _validate_band(low: float, high: float, label: str) -> None:
    if not (0.0 <= low < high <= 1.0):
        raise ConfigError(f"{label} band must satisfy 0 <= low < high <= 1, got {low}-{high}")


def validate_config(config: AlgorithmConfig) -> AlgorithmConfig:
    """Reject a bundle that would break scoring invariants. Returns it unchanged."""
    weights = (config.weights.tension, config.weights.drama, config.weights.finish)
    if any(w < 0 for w in weights):
        raise ConfigError(f"Weights must be non-negative, got {weights}")
    if not math.isclose(sum(weights), 1.0, abs_tol=1e-6):
        raise ConfigError(f"Weights must sum to 1.0, got {sum(weights):.6f}")

    _validate_cutoffs(config.tiers.default, "Default")
    for sport, cutoffs in config.tiers.per_sport:
        _validate_cutoffs(cutoffs, sport.value)

    if config.thresholds.min_data_points < 2:
        raise ConfigError("min_data_points must be at least 2")
    if config.thresholds.final_moment_points < 2:
        raise ConfigError("final_moment_points must be at least 2")
    if config.thresholds.leverage_floor <= 0:
        raise ConfigError("leverage_floor must be positive")
    _validate_band(
        config.thresholds.competitive_band_low,
        config.thresholds.competitive_band_high,
        "Competitive",
    )
    _validate_band(config.decision_point.band_low, config.decision_point.band_high, "Decision point")

    for label, base in (("drama", config.drama.log_base), ("finish", config.finish.log_base)):
        if base <= 0:
            raise ConfigError(f"{label} log_base must be positive")
    if config.normalization.sigmoid_steepness <= 0:
        raise ConfigError("sigmoid_steepness must be positive")
    if not (0.0 <= config.decision_point.blend_weight <= 1.0):
        raise ConfigError("blend_weight must be within [0, 1]")

    knots = config.normalization.piecewise_knots
    if len(knots) < 2 or any(b[0] <= a[0] for a, b in zip(knots, knots[1:])):
        raise ConfigError("piecewise_knots must have at least two strictly increasing raw values")

    return config


# =============================================================================
# LOADING
# =============================================================================

def resolve_version(version: Union[str, AlgorithmVersion, None] = None) -> AlgorithmVersion:
    if version is None:
        version = os.getenv(VERSION_ENV_VAR) or DEFAULT_VERSION
    try:
        return AlgorithmVersion(version)
    except ValueError:
        available = ", ".join(v.value for v in AlgorithmVersion)
        raise ConfigError(f"Unknown algorithm version {version!r} (available: {available})")


def _coerce(current: Any, value: Any, path: str) -> Any:
    """Convert a JSON override value into the type of the field it replaces."""
    if is_dataclass(current):
        if not isinstance(value, dict):
            raise ConfigError(f"{path} expects an object")
        return apply_overrides(current, value, path)
    if isinstance(current, Enum):
        try:
            return type(current)(value)
        except ValueError:
            raise ConfigError(f"{path}: invalid value {value!r}")
    if isinstance(current, tuple):
        return tuple(tuple(item) if isinstance(item, list) else item for item in value)
    if isinstance(current, bool):
        return bool(value)
    if isinstance(current, int) and not isinstance(value, bool):
        return int(value)
    if isinstance(current, float):
        return float(value)
    return value


def _per_sport_from_overrides(value: Dict[str, Any], path: str) -> Tuple[Tuple[Sport, TierCutoffs], ...]:
    entries = []
    for sport_name, cutoffs in value.items():
        try:
            sport = Sport.parse(sport_name)
        except ValueError as exc:
            raise ConfigError(f"{path}: {exc}")
        entries.append((sport, apply_overrides(TierCutoffs(), cutoffs, f"{path}.{sport.value}")))
    return tuple(entries)


def apply_overrides(base: Any, overrides: Dict[str, Any], path: str = "config") -> Any:
    """Return a copy of a config dataclass with nested JSON overrides applied."""
    known = {f.name for f in fields(base)}
    changes = {}
    for key, value in overrides.items():
        if key not in known:
            raise ConfigError(f"Unknown config key {path}.{key}")
        if isinstance(base, TierConfig) and key == "per_sport":
            changes[key] = _per_sport_from_overrides(value, f"{path}.per_sport")
            continue
        changes[key] = _coerce(getattr(base, key), value, f"{path}.{key}")
    return replace(base, **changes)


def load_config(
    version: Union[str, AlgorithmVersion, None] = None,
    overrides_path: Optional[Union[str, Path]] = None,
) -> AlgorithmConfig:
    """
    Load and validate an algorithm bundle.

    Args:
        version: Version to load. Defaults to $EXCITEMENT_ALGORITHM_VERSION,
            then DEFAULT_VERSION.
        overrides_path: Optional JSON file of nested overrides applied on top
            of the version. Defaults to $EXCITEMENT_CONFIG_PATH.

    Raises:
        ConfigError: unknown version, unreadable overrides or invalid bundle.
    """
    resolved = resolve_version(version)
    config = ALGORITHM_VERSIONS[resolved]

    overrides_path = overrides_path or os.getenv(OVERRIDES_ENV_VAR)
    if overrides_path:
        try:
            with open(overrides_path, 'r') as f:
                overrides = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigError(f"Could not read config overrides {overrides_path}: {e}")
        if not isinstance(overrides, dict):
            raise ConfigError(f"Config overrides in {overrides_path} must be a JSON object")
        config = apply_overrides(config, overrides)
        logger.info(
            "Applied algorithm config overrides",
            extra={"version": config.version, "overrides_path": str(overrides_path)},
        )

    return validate_config(config)


def _plain(value: Any) -> Any:
    if is_dataclass(value):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, tuple):
        return [_plain(item) for item in value]
    return value


def config_to_dict(config: AlgorithmConfig) -> Dict[str, Any]:
    """JSON-friendly view of a bundle (per-sport tiers keyed by sport)."""
    data = _plain(config)
    data["tiers"]["per_sport"] = {
        sport.value: _plain(cutoffs) for sport, cutoffs in config.tiers.per_sport
    }
    return data
