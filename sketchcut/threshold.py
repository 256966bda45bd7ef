"""Luminance thresholding of RGBA buffers into stroke / interior masks."""
from typing import Tuple

import numpy as np

from sketchcut.types import PixelBuffer, PixelClass

REC709_WEIGHTS = (0.2126, 0.7152, 0.0722)
DEFAULT_THRESHOLD = 100.0


def luminance(
    buffer: PixelBuffer,
    weights: Tuple[float, float, float] = REC709_WEIGHTS
) -> np.ndarray:
    """
    Compute per-pixel perceptual luminance.

    Alpha is ignored.

    Args:
        buffer: RGBA pixel buffer
        weights: R, G, B coefficients

    Returns:
        float64 array (H, W) in range [0, 255]
    """
    rgb = buffer.data[..., :3].astype(np.float64)
    return weights[0] * rgb[..., 0] + weights[1] * rgb[..., 1] + weights[2] * rgb[..., 2]


def binarize(
    buffer: PixelBuffer,
    threshold: float = DEFAULT_THRESHOLD,
    weights: Tuple[float, float, float] = REC709_WEIGHTS
) -> np.ndarray:
    """
    Classify every pixel as STROKE (luminance < threshold) or INTERIOR.

    Args:
        buffer: RGBA pixel buffer
        threshold: Luminance below which a pixel is a stroke
        weights: R, G, B luminance coefficients

    Returns:
        uint8 mask (H, W) of PixelClass values
    """
    dark = luminance(buffer, weights) < threshold
    return np.where(dark, PixelClass.STROKE, PixelClass.INTERIOR).astype(np.uint8)
