"""Debug utilities for auditing stage invariants."""
import logging
from typing import List

import numpy as np
from scipy import ndimage

from sketchcut.types import Component, PixelClass
from sketchcut.exterior_fill import corner_seeds

logger = logging.getLogger(__name__)


def audit_components(components: List[Component], binary_mask: np.ndarray) -> dict:
    """
    Check that components partition the stroke pixels and have tight boxes.

    Args:
        components: Components from label_components
        binary_mask: Thresholded mask the components came from

    Returns:
        Dictionary with audit statistics; ``ok`` is False on any violation
    """
    stroke = binary_mask == PixelClass.STROKE
    coverage = np.zeros(binary_mask.shape, dtype=np.int32)

    stats = {
        "components": len(components),
        "stroke_pixels": int(np.count_nonzero(stroke)),
        "labeled_pixels": 0,
        "overlapping_pixels": 0,
        "missing_pixels": 0,
        "foreign_pixels": 0,
        "loose_bboxes": 0,
        "ok": True,
    }

    for comp in components:
        stats["labeled_pixels"] += comp.size
        xs = np.array([p[0] for p in comp.pixels], dtype=np.intp)
        ys = np.array([p[1] for p in comp.pixels], dtype=np.intp)
        np.add.at(coverage, (ys, xs), 1)

        if comp.size and (
            xs.min() != comp.bbox.min_x or xs.max() != comp.bbox.max_x
            or ys.min() != comp.bbox.min_y or ys.max() != comp.bbox.max_y
        ):
            stats["loose_bboxes"] += 1
            logger.warning(f"Component {comp.label}: bbox {comp.bbox} is not tight")

    stats["overlapping_pixels"] = int(np.count_nonzero(coverage > 1))
    stats["missing_pixels"] = int(np.count_nonzero(stroke & (coverage == 0)))
    stats["foreign_pixels"] = int(np.count_nonzero(~stroke & (coverage > 0)))

    if stats["overlapping_pixels"] or stats["missing_pixels"] or stats["foreign_pixels"] or stats["loose_bboxes"]:
        stats["ok"] = False
        logger.error(
            f"Component partition broken: {stats['overlapping_pixels']} overlapping, "
            f"{stats['missing_pixels']} missing, {stats['foreign_pixels']} foreign pixels, "
            f"{stats['loose_bboxes']} loose bboxes"
        )
    else:
        logger.info(
            f"Component audit: {stats['components']} components cover "
            f"{stats['stroke_pixels']} stroke pixels"
        )

    return stats


def reachable_from_corners(object_mask: np.ndarray) -> np.ndarray:
    """
    Boolean mask of INTERIOR pixels 4-connected to an INTERIOR corner.

    Computed with scipy labelling, independently of the stack fill.
    """
    interior = object_mask == PixelClass.INTERIOR
    labeled, _ = ndimage.label(interior)  # default structure is 4-connected

    corner_labels = set()
    for x, y in corner_seeds(object_mask.shape):
        if labeled[y, x] != 0:
            corner_labels.add(int(labeled[y, x]))

    if not corner_labels:
        return np.zeros(object_mask.shape, dtype=bool)
    return np.isin(labeled, list(corner_labels))


def audit_exterior(object_mask: np.ndarray, filled_mask: np.ndarray) -> dict:
    """
    Check the exterior fill against the object mask it started from.

    Args:
        object_mask: Mask before filling (STROKE / INTERIOR)
        filled_mask: Mask after filling

    Returns:
        Dictionary with audit statistics; ``ok`` is False on any violation
    """
    exterior = filled_mask == PixelClass.EXTERIOR
    expected = reachable_from_corners(object_mask)

    stats = {
        "exterior_pixels": int(np.count_nonzero(exterior)),
        "enclosed_pixels": int(np.count_nonzero(filled_mask == PixelClass.INTERIOR)),
        "stroke_changed": int(np.count_nonzero(
            (object_mask == PixelClass.STROKE) != (filled_mask == PixelClass.STROKE)
        )),
        "unreachable_exterior": int(np.count_nonzero(exterior & ~expected)),
        "missed_exterior": int(np.count_nonzero(expected & ~exterior)),
        "ok": True,
    }

    if stats["stroke_changed"] or stats["unreachable_exterior"] or stats["missed_exterior"]:
        stats["ok"] = False
        logger.error(
            f"Exterior fill mismatch: {stats['stroke_changed']} stroke pixels changed, "
            f"{stats['unreachable_exterior']} exterior pixels not corner-reachable, "
            f"{stats['missed_exterior']} reachable pixels not filled"
        )
    else:
        logger.info(
            f"Exterior audit: {stats['exterior_pixels']} exterior, "
            f"{stats['enclosed_pixels']} enclosed pixels"
        )

    return stats
