"""conftest.py: Shared fixtures"""

import numpy as np
import pytest


@pytest.fixture
def rng():
    return np.random.default_rng(20090613)


@pytest.fixture
def ramp():
    """10x10 plane holding the values 0..99."""
    return np.arange(100, dtype=np.float32).reshape(10, 10)


@pytest.fixture
def rgb_image(rng):
    """Interleaved RGB float image, values in [0,255]."""
    return rng.integers(0, 256, size=(12, 16, 3)).astype(np.float32)
