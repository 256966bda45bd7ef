"""Flood fill of the border-reachable background."""
from typing import List, Tuple

import numpy as np

from sketchcut.types import PixelClass


def corner_seeds(shape: Tuple[int, int]) -> List[Tuple[int, int]]:
    """The four image corners as (x, y)."""
    height, width = shape
    return [(0, 0), (width - 1, 0), (0, height - 1), (width - 1, height - 1)]


def flood_fill(mask: np.ndarray, x: int, y: int) -> int:
    """
    Mark every INTERIOR pixel 4-connected to (x, y) as EXTERIOR, in place.

    STROKE pixels block the fill. A seed that is not INTERIOR is a no-op,
    so repeated calls are idempotent.

    Args:
        mask: uint8 array (H, W) of PixelClass values, modified in place
        x, y: Seed pixel

    Returns:
        Number of pixels marked EXTERIOR
    """
    height, width = mask.shape
    if not (0 <= x < width and 0 <= y < height):
        return 0
    if mask[y, x] != PixelClass.INTERIOR:
        return 0

    flat = bytearray(mask.astype(np.uint8, copy=False).tobytes())
    interior = int(PixelClass.INTERIOR)
    exterior = int(PixelClass.EXTERIOR)

    start = y * width + x
    flat[start] = exterior
    stack = [start]
    filled = 0

    while stack:
        cur = stack.pop()
        filled += 1
        cy, cx = divmod(cur, width)

        if cx + 1 < width and flat[cur + 1] == interior:
            flat[cur + 1] = exterior
            stack.append(cur + 1)
        if cx > 0 and flat[cur - 1] == interior:
            flat[cur - 1] = exterior
            stack.append(cur - 1)
        if cy + 1 < height and flat[cur + width] == interior:
            flat[cur + width] = exterior
            stack.append(cur + width)
        if cy > 0 and flat[cur - width] == interior:
            flat[cur - width] = exterior
            stack.append(cur - width)

    mask[...] = np.frombuffer(bytes(flat), dtype=np.uint8).reshape(mask.shape)
    return filled


def fill_exterior(object_mask: np.ndarray) -> np.ndarray:
    """
    Mark the background reachable from any image corner as EXTERIOR.

    Args:
        object_mask: uint8 array (H, W) of STROKE / INTERIOR values

    Returns:
        New mask; enclosed INTERIOR regions are left untouched
    """
    filled = object_mask.copy()
    for x, y in corner_seeds(filled.shape):
        flood_fill(filled, x, y)
    return filled
