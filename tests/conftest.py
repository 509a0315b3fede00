"""Shared test fixtures for distapply."""

import numpy as np
import pandas as pd
import pytest

from distapply.datasets import load_mtcars


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def mtcars():
    return load_mtcars()


@pytest.fixture
def small_frame():
    return pd.DataFrame(
        {
            "g": ["a", "a", "b", "b", "b"],
            "x": [1.0, 2.0, 3.0, 4.0, 5.0],
            "n": [1, 2, 3, 4, 5],
        }
    )
