"""
Conftest: shared fixtures for all Ripple test modules.

1. Synthetic source images (gradients, distinct corners, noise)
2. A controllable clock so time-dependent code is deterministic
"""

import os
import sys

import numpy as np
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.buffer import PixelBuffer
from core.config import RippleParameters


def make_gradient(width=64, height=48):
    """Synthetic RGBA source (gradients, not blank) so displacement is visible."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[:, :, 0] = np.linspace(0, 255, width, dtype=np.uint8)[np.newaxis, :]
    pixels[:, :, 1] = np.linspace(0, 255, height, dtype=np.uint8)[:, np.newaxis]
    pixels[:, :, 2] = 128
    pixels[:, :, 3] = 255
    return PixelBuffer(pixels)


def make_noise(width=40, height=40, seed=7):
    rng = np.random.RandomState(seed)
    pixels = rng.randint(0, 256, (height, width, 4)).astype(np.uint8)
    return PixelBuffer(pixels)


class FakeTime:
    """Manually advanced replacement for time.monotonic."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def gradient():
    return make_gradient()


@pytest.fixture
def noise():
    return make_noise()


@pytest.fixture
def corners():
    """2x2 buffer with four distinct corner colors."""
    return PixelBuffer(np.array(
        [[[255, 0, 0, 255], [0, 255, 0, 255]],
         [[0, 0, 255, 255], [255, 255, 0, 128]]],
        dtype=np.uint8,
    ))


@pytest.fixture
def params():
    return RippleParameters()


@pytest.fixture
def fake_time():
    return FakeTime()
