"""Excitement scoring for completed games from their win-probability curves."""
from .algorithm_config import (
    ALGORITHM_VERSIONS,
    DEFAULT_VERSION,
    AlgorithmConfig,
    AlgorithmVersion,
    load_config,
    validate_config,
)
from .data_quality import DataQualityReport, detect_data_quality_issues
from .errors import ConfigError, ExcitementError, InsufficientData, NoDataError
from .excitement_calculator import (
    calculate_excitement_score,
    calculate_fallback_score,
    score_probabilities,
    score_records,
)
from .models import ExcitementResult, GameContext, ProbabilitySample, Sport, Tier

__version__ = "2.4.0"
