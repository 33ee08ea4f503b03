"""Shared pytest fixtures for ffafir tests."""

from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator so failures reproduce."""
    return np.random.default_rng(1234)


@pytest.fixture
def int_taps(rng):
    """Factory for random signed integer taps of a given coefficient width."""
    def _generate(n_taps: int, width: int = 24) -> np.ndarray:
        limit = 2 ** (width - 1) - 1
        return rng.integers(-limit, limit + 1, size=n_taps, dtype=np.int64)

    return _generate


@pytest.fixture
def int_signal(rng):
    """Factory for random 16-bit integer input signals."""
    def _generate(n_samples: int, width: int = 16) -> np.ndarray:
        limit = 2 ** (width - 1)
        return rng.integers(-limit, limit, size=n_samples, dtype=np.int64)

    return _generate


@pytest.fixture
def float_signal(rng):
    """Factory for random float64 signals."""
    def _generate(n_samples: int, amplitude: float = 1.0) -> np.ndarray:
        return amplitude * rng.standard_normal(n_samples)

    return _generate


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    return project_root / "config"
