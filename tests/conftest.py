"""Pytest configuration and fixtures."""
import numpy as np
import pytest

from sketchcut.types import PixelBuffer, PixelClass

S = PixelClass.STROKE
I = PixelClass.INTERIOR
E = PixelClass.EXTERIOR


def make_buffer(dark: np.ndarray) -> PixelBuffer:
    """RGBA buffer with black where ``dark`` is True and white elsewhere."""
    dark = np.asarray(dark, dtype=bool)
    height, width = dark.shape
    data = np.full((height, width, 4), 255, dtype=np.uint8)
    data[dark, :3] = 0
    return PixelBuffer(width=width, height=height, data=data)


def make_mask(rows) -> np.ndarray:
    """Class mask from strings: '#' stroke, '.' interior, 'x' exterior."""
    lookup = {'#': S, '.': I, 'x': E}
    return np.array([[lookup[c] for c in row] for row in rows], dtype=np.uint8)


def square_ring(size: int, lo: int, hi: int) -> np.ndarray:
    """Boolean image with a 1-pixel square ring spanning rows/cols lo..hi."""
    dark = np.zeros((size, size), dtype=bool)
    dark[lo, lo:hi + 1] = True
    dark[hi, lo:hi + 1] = True
    dark[lo:hi + 1, lo] = True
    dark[lo:hi + 1, hi] = True
    return dark


@pytest.fixture
def blank_buffer():
    """Uniformly light 16x16 image."""
    return make_buffer(np.zeros((16, 16), dtype=bool))


@pytest.fixture
def ring_buffer():
    """10x10 image with a black ring on rows/cols 2..7."""
    return make_buffer(square_ring(10, 2, 7))


@pytest.fixture
def two_blob_buffer():
    """Large ring in the middle, tiny blob in the bottom-right corner."""
    dark = square_ring(20, 4, 14)
    dark[18, 18] = True
    dark[18, 19] = True
    return make_buffer(dark)
