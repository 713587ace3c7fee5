"""Shared probability curves for the excitement tests."""
import pytest

from game_excitement.algorithm_config import (
    ALGORITHM_VERSIONS,
    DEFAULT_VERSION,
    OVERRIDES_ENV_VAR,
    VERSION_ENV_VAR,
)


def oscillating_thriller():
    """200 samples bouncing 0.40/0.60 all game, decided on the final sample."""
    return [0.4 if i % 2 == 0 else 0.6 for i in range(199)] + [0.02]


def wire_to_wire_blowout():
    """Home team never in it: slides from 0.20 to 0.02 without a reversal."""
    return [0.20 - 0.18 * i / 199 for i in range(200)]


def steady_slide():
    """Heavy home favourite slides steadily 0.95 -> 0.05 and loses."""
    return [0.95 - 0.90 * i / 199 for i in range(200)]


def late_comeback():
    """Home team buried at 0.05 for 80% of the game, then rallies to 0.90."""
    buried = [0.05] * 160
    climb = [0.05 + 0.25 * (k + 1) / 20 for k in range(20)]
    rally = [0.30 + 0.60 * (k + 1) / 20 for k in range(20)]
    return buried + climb + rally


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    monkeypatch.delenv(VERSION_ENV_VAR, raising=False)
    monkeypatch.delenv(OVERRIDES_ENV_VAR, raising=False)


@pytest.fixture
def default_config():
    return ALGORITHM_VERSIONS[DEFAULT_VERSION]


@pytest.fixture
def thriller():
    return oscillating_thriller()


@pytest.fixture
def blowout():
    return wire_to_wire_blowout()


@pytest.fixture
def slide():
    return steady_slide()


@pytest.fixture
def comeback():
    return late_comeback()
