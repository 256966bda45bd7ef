"""Connected-component labeling of stroke pixels."""
import logging
from typing import List, Tuple

import numpy as np

from sketchcut.types import BoundingBox, Component, PixelClass

logger = logging.getLogger(__name__)


def label_components(mask: np.ndarray) -> List[Component]:
    """
    Find all 4-connected groups of STROKE pixels.

    Pixels are scanned in row-major order; each unvisited stroke pixel seeds
    a new component, grown by an explicit-stack depth-first traversal so
    large strokes never hit the recursion limit.

    Args:
        mask: uint8 array (H, W) of PixelClass values

    Returns:
        Components in discovery order (empty if there are no strokes)
    """
    height, width = mask.shape
    stroke = (mask.ravel() == PixelClass.STROKE).tolist()
    visited = bytearray(width * height)
    components: List[Component] = []

    for idx, is_stroke in enumerate(stroke):
        if not is_stroke or visited[idx]:
            continue

        visited[idx] = 1
        stack = [idx]
        pixels: List[Tuple[int, int]] = []
        min_x, min_y, max_x, max_y = width, height, -1, -1

        while stack:
            cur = stack.pop()
            cy, cx = divmod(cur, width)
            pixels.append((cx, cy))

            if cx < min_x:
                min_x = cx
            if cy < min_y:
                min_y = cy
            if cx > max_x:
                max_x = cx
            if cy > max_y:
                max_y = cy

            # right, left, down, up
            if cx + 1 < width:
                n = cur + 1
                if stroke[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)
            if cx > 0:
                n = cur - 1
                if stroke[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)
            if cy + 1 < height:
                n = cur + width
                if stroke[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)
            if cy > 0:
                n = cur - width
                if stroke[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)

        components.append(Component(
            label=len(components),
            pixels=pixels,
            bbox=BoundingBox(min_x, min_y, max_x, max_y),
        ))

    logger.debug(f"Labeled {len(components)} stroke components")
    return components


def label_map(components: List[Component], shape: Tuple[int, int]) -> np.ndarray:
    """
    Render components into a label image.

    Args:
        components: Components from label_components
        shape: (height, width) of the source mask

    Returns:
        int32 array where 0 is unlabeled and k + 1 marks component k
    """
    labels = np.zeros(shape, dtype=np.int32)
    for comp in components:
        if not comp.pixels:
            continue
        xs, ys = zip(*comp.pixels)
        labels[list(ys), list(xs)] = comp.label + 1
    return labels
