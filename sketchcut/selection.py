"""Selection of the dominant sketched object."""
import logging
from typing import List, Optional, Tuple

import numpy as np

from sketchcut.types import Component, ObjectSelection, PixelClass

logger = logging.getLogger(__name__)


def select_main_frame(components: List[Component]) -> Optional[Component]:
    """
    Pick the component with the largest bounding-box area.

    Ties keep the earliest discovered component.
    """
    main_frame = None
    max_area = -1
    for comp in components:
        area = comp.bbox.area
        if area > max_area:
            max_area = area
            main_frame = comp
    return main_frame


def is_contained(component: Component, frame: Component) -> bool:
    """True if the centre of component's box lies inside frame's box."""
    cx, cy = component.bbox.center
    return frame.bbox.contains_point(cx, cy)


def select_object(components: List[Component], shape: Tuple[int, int]) -> ObjectSelection:
    """
    Build the object mask from the main frame and the components it contains.

    Args:
        components: Components in discovery order
        shape: (height, width) of the image

    Returns:
        ObjectSelection whose mask is STROKE on retained pixels, INTERIOR elsewhere
    """
    mask = np.full(shape, PixelClass.INTERIOR, dtype=np.uint8)

    main_frame = select_main_frame(components)
    if main_frame is None:
        return ObjectSelection(main_frame=None, retained=[], mask=mask)

    retained = [main_frame]
    for comp in components:
        if comp is main_frame:
            continue
        if is_contained(comp, main_frame):
            retained.append(comp)

    for comp in retained:
        xs, ys = zip(*comp.pixels)
        mask[list(ys), list(xs)] = PixelClass.STROKE

    logger.debug(
        f"Main frame #{main_frame.label} bbox={main_frame.bbox}, "
        f"retained {len(retained)}/{len(components)} components"
    )
    return ObjectSelection(main_frame=main_frame, retained=retained, mask=mask)
