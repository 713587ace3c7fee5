"""
FastAPI backend for game excitement scores.

Provides endpoints to:
- Score a single game from its win-probability curve
- Score a batch of games and rank them, most exciting first
- Inspect the available algorithm versions and their parameters

Usage:
    python -m game_excitement.main
"""
import logging
from functools import lru_cache
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .algorithm_config import (
    ALGORITHM_VERSIONS,
    AlgorithmConfig,
    AlgorithmVersion,
    config_to_dict,
    load_config,
    resolve_version,
)
from .data_quality import detect_data_quality_issues
from .errors import ConfigError
from .excitement_calculator import calculate_excitement_score
from .schemas import (
    BatchItem,
    BatchRequest,
    BatchResponse,
    ExcitementResponse,
    HealthResponse,
    ScoreRequest,
    VersionsResponse,
)

logger = logging.getLogger(__name__)

SERVICE_NAME = "Game Excitement API"

app = FastAPI(title=SERVICE_NAME)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_config() -> AlgorithmConfig:
    """Active bundle, resolved once from the environment."""
    config = load_config()
    logger.info("Loaded algorithm config", extra={"version": config.version})
    return config


@lru_cache(maxsize=None)
def _config_for_version(version: AlgorithmVersion) -> AlgorithmConfig:
    return load_config(version)


def config_for_request(version: Optional[str], active: AlgorithmConfig) -> AlgorithmConfig:
    """Bundle named by a request, or the active one. Raises ConfigError for unknown versions."""
    if version is None or version == active.version:
        return active
    return _config_for_version(resolve_version(version))


def _describe_error(err) -> str:
    location = ".".join(str(part) for part in err['loc'])
    return f"{location}: {err['msg']}" if location else err['msg']


def score_request(request: ScoreRequest, config: AlgorithmConfig) -> ExcitementResponse:
    samples = request.to_samples()
    context = request.context.to_context()

    result = calculate_excitement_score(samples, context, config)
    quality = detect_data_quality_issues(samples, context)

    payload = result.to_dict()
    payload['game_id'] = request.game_id
    payload['data_quality'] = quality.to_dict()
    return ExcitementResponse.model_validate(payload)


@app.get("/", response_model=HealthResponse)
def root(config: AlgorithmConfig = Depends(get_config)):
    """Health check endpoint."""
    return HealthResponse(status="ok", service=SERVICE_NAME, default_version=config.version)


@app.get("/api/algorithm/versions", response_model=VersionsResponse)
def list_versions(config: AlgorithmConfig = Depends(get_config)):
    return VersionsResponse(
        default=config.version,
        versions={version.value: bundle.description for version, bundle in ALGORITHM_VERSIONS.items()},
    )


@app.get("/api/algorithm/{version}")
def get_algorithm(version: str):
    """Full parameter bundle for one version."""
    try:
        resolved = resolve_version(version)
    except ConfigError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return config_to_dict(ALGORITHM_VERSIONS[resolved])


@app.post("/api/excitement", response_model=ExcitementResponse)
def score_game(request: ScoreRequest, config: AlgorithmConfig = Depends(get_config)):
    try:
        game_config = config_for_request(request.version, config)
    except ConfigError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return score_request(request, game_config)


@app.post("/api/excitement/batch", response_model=BatchResponse)
def score_batch(batch: BatchRequest, config: AlgorithmConfig = Depends(get_config)):
    """
    Score many games independently, most exciting first.

    A game that can't be scored is reported in place and never fails the batch.
    """
    items = []
    for raw in batch.games:
        game_id = raw.get('gameId', raw.get('game_id'))
        game_id = str(game_id) if game_id is not None else None
        try:
            game = ScoreRequest.model_validate(raw)
            game_config = config_for_request(game.version or batch.version, config)
            items.append(BatchItem(game_id=game.game_id, result=score_request(game, game_config)))
        except ValidationError as e:
            error = "Invalid game: " + "; ".join(_describe_error(err) for err in e.errors())
            logger.warning("Skipping game in batch", extra={"game_id": game_id, "error": error})
            items.append(BatchItem(game_id=game_id, error=error))
        except ConfigError as e:
            logger.warning("Skipping game in batch", extra={"game_id": game_id, "error": str(e)})
            items.append(BatchItem(game_id=game_id, error=str(e)))

    # Sort by excitement (highest first), failures last
    items.sort(key=lambda item: item.result.excitement if item.result else float('-inf'), reverse=True)

    failed = sum(1 for item in items if item.error)
    return BatchResponse(results=items, scored=len(items) - failed, failed=failed)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
