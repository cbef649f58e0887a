"""Pytest configuration and shared draws fixtures.

The sys.path manipulation below enables running tests directly from a
checkout without requiring `pip install -e .`.
"""
import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from tidydraws.reshape import tidy_draws  # noqa: E402


@pytest.fixture
def arrays() -> dict[str, np.ndarray]:
    """Posterior arrays shaped (chain, draw, ...): 2 chains x 5 draws.

    mu, sigma   scalars
    a, d        3 levels of i
    b           3 x 2 (i, j)
    c           2 levels of k
    """
    rng = np.random.default_rng(1234)
    return {
        "mu": rng.normal(size=(2, 5)),
        "sigma": rng.gamma(2.0, size=(2, 5)),
        "a": rng.normal(size=(2, 5, 3)),
        "d": rng.normal(size=(2, 5, 3)),
        "b": rng.normal(size=(2, 5, 3, 2)),
        "c": rng.normal(size=(2, 5, 2)),
    }


@pytest.fixture
def draws(arrays):
    """Wide draws table with one row per draw (10 draws)."""
    return tidy_draws(arrays)


@pytest.fixture
def draws_csv(draws, tmp_path: Path) -> Path:
    path = tmp_path / "draws.csv"
    draws.to_csv(path, index=False)
    return path
