#!/usr/bin/env python3
"""
Score a labeled benchmark of canonical games and report tier accuracy.

The benchmark file is a JSON list of games:

    [{"gameId": "401547417", "sport": "NFL", "label": "Bills at Chiefs",
      "expectedTier": "must-watch", "homeScore": 42, "awayScore": 36,
      "overtime": true, "probabilities": [0.52, 0.55, ...]}, ...]

"probabilities" may hold bare numbers or feed records. Scoring goes through
the same library as the API, so tuning results match production.

Usage:
    python -m game_excitement.benchmark canonical-games.json [version ...]
"""
import json
import logging
import sys
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from .algorithm_config import AlgorithmConfig, load_config
from .excitement_calculator import calculate_excitement_score
from .models import GameContext, ProbabilitySample, Sport, Tier
from .probability_normalizer import sample_from_record, samples_from_values

logger = logging.getLogger(__name__)

BENCHMARK_COLUMNS = [
    'game_id', 'sport', 'label', 'expected_tier',
    'home_score', 'away_score', 'overtime', 'samples',
]
RESULT_COLUMNS = [
    'excitement', 'tier', 'tension', 'drama', 'finish',
    'decision_lateness', 'fallback_reason', 'tier_match',
]


def _optional_int(value) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def _samples_from_entry(probabilities: Iterable) -> List[ProbabilitySample]:
    probabilities = list(probabilities or [])
    if probabilities and isinstance(probabilities[0], Mapping):
        return [sample_from_record(record, i) for i, record in enumerate(probabilities)]
    return samples_from_values(probabilities)


def load_benchmark(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a benchmark file into a DataFrame, one row per game.

    Raises:
        ValueError: an entry names an unknown sport or tier.
    """
    with open(path, 'r') as f:
        entries = json.load(f)

    rows = []
    for i, entry in enumerate(entries):
        expected = entry.get('expectedTier') or entry.get('expected_tier')
        rows.append({
            'game_id': str(entry.get('gameId') or entry.get('game_id') or i),
            'sport': Sport.parse(entry.get('sport', 'NFL')).value,
            'label': entry.get('label', ''),
            'expected_tier': Tier(expected).value if expected else None,
            'home_score': entry.get('homeScore', entry.get('home_score')),
            'away_score': entry.get('awayScore', entry.get('away_score')),
            'overtime': bool(entry.get('overtime', False)),
            'samples': _samples_from_entry(entry.get('probabilities')),
        })

    logger.info("Loaded benchmark", extra={"path": str(path), "games": len(rows)})
    return pd.DataFrame(rows, columns=BENCHMARK_COLUMNS)


def _context_from_row(row: pd.Series) -> GameContext:
    return GameContext(
        sport=Sport.parse(row['sport']),
        home_score=_optional_int(row['home_score']),
        away_score=_optional_int(row['away_score']),
        overtime=bool(row['overtime']),
    )


def evaluate_benchmark(df: pd.DataFrame, config: AlgorithmConfig) -> pd.DataFrame:
    """Score every benchmark game with one config. Returns a copy with result columns added."""
    records = []
    for _, row in df.iterrows():
        result = calculate_excitement_score(row['samples'], _context_from_row(row), config)
        expected = row['expected_tier'] if isinstance(row['expected_tier'], str) else None
        records.append({
            'excitement': result.normalized_score,
            'tier': result.tier.value,
            'tension': round(result.breakdown.tension, 2),
            'drama': round(result.breakdown.drama, 2),
            'finish': round(result.breakdown.finish, 2),
            'decision_lateness': result.decision_point.lateness if result.decision_point else None,
            'fallback_reason': result.fallback_reason,
            'tier_match': (result.tier.value == expected) if expected else None,
        })

    results = df.copy()
    scored = pd.DataFrame(records, columns=RESULT_COLUMNS, index=df.index)
    for column in RESULT_COLUMNS:
        results[column] = scored[column]
    results['algorithm_version'] = config.version
    return results


def summarize_benchmark(results: pd.DataFrame) -> pd.DataFrame:
    """Per-sport tier accuracy over labeled games, plus an overall row."""
    labeled = results[results['expected_tier'].notna()].copy()
    labeled['tier_match'] = labeled['tier_match'].astype(bool)

    summary = labeled.groupby('sport').agg(
        games=('game_id', 'count'),
        tier_matches=('tier_match', 'sum'),
        mean_excitement=('excitement', 'mean'),
    )
    summary.loc['ALL'] = [
        len(labeled),
        int(labeled['tier_match'].sum()),
        labeled['excitement'].mean() if len(labeled) else float('nan'),
    ]
    summary['games'] = summary['games'].astype(int)
    summary['tier_matches'] = summary['tier_matches'].astype(int)
    summary['accuracy'] = summary['tier_matches'] / summary['games'].where(summary['games'] > 0)
    return summary


def compare_versions(df: pd.DataFrame, versions: Sequence[str]) -> pd.DataFrame:
    """Evaluate several algorithm versions on the same games, stacked long-form."""
    frames = [evaluate_benchmark(df, load_config(version)) for version in versions]
    return pd.concat(frames, ignore_index=True)


def main(argv: Optional[Sequence[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        print("Usage: python -m game_excitement.benchmark <benchmark.json> [version ...]")
        return 2

    path, versions = argv[0], argv[1:]
    df = load_benchmark(path)

    if not versions:
        versions = [load_config().version]

    results = compare_versions(df, versions)
    for version, version_results in results.groupby('algorithm_version', sort=False):
        print("=" * 60)
        print(f"Algorithm {version}: {len(version_results)} games")
        print("=" * 60)
        print(summarize_benchmark(version_results).round(3).to_string())
        misses = version_results[version_results['tier_match'] == False]  # noqa: E712
        if not misses.empty:
            print()
            print("Tier mismatches:")
            print(misses[['game_id', 'label', 'expected_tier', 'tier', 'excitement']].to_string(index=False))
        print()
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    sys.exit(main())
