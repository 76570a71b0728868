import random

import pytest

from simulation import SimulationConfig, SimulationEngine


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_engine():
    """Build a set-up engine; spawning is off unless a probability is given."""

    def _make(lanes=None, spawnProbability=0.0, seed=0, **overrides):
        config = SimulationConfig(lanes=lanes, spawnProbability=spawnProbability, seed=seed, **overrides)
        engine = SimulationEngine(config)
        engine.setup()
        return engine

    return _make
