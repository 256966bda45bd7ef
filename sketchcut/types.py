"""Core types for the sketch cutout pipeline."""
from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path
from typing import Optional, List, Tuple, Union
import numpy as np


class PixelClass(IntEnum):
    """Classification of a pixel at any pipeline stage."""
    STROKE = 0
    INTERIOR = 1
    EXTERIOR = 2


@dataclass
class PixelBuffer:
    """Decoded RGBA image, shape (height, width, 4), uint8."""
    width: int
    height: int
    data: np.ndarray

    def __post_init__(self):
        expected = (self.height, self.width, 4)
        if self.data.shape != expected:
            raise RenderingBackendUnavailable(
                f"Pixel buffer shape {self.data.shape} does not match {expected}"
            )


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive axis-aligned box around a component."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def area(self) -> int:
        # Spans, not pixel counts: a single pixel or a straight line has area 0
        return (self.max_x - self.min_x) * (self.max_y - self.min_y)

    @property
    def center(self) -> Tuple[float, float]:
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains_point(self, x: float, y: float) -> bool:
        """Inclusive on all four sides."""
        return self.min_x <= x <= self.max_x and self.min_y <= y <= self.max_y


@dataclass
class Component:
    """Maximal 4-connected group of stroke pixels."""
    label: int
    pixels: List[Tuple[int, int]]  # (x, y); order is incidental
    bbox: BoundingBox

    @property
    def size(self) -> int:
        return len(self.pixels)


@dataclass
class ObjectSelection:
    """Result of choosing the main frame and the components it contains."""
    main_frame: Optional[Component]
    retained: List[Component]
    mask: np.ndarray


@dataclass
class CutoutResult:
    """Output buffer plus the intermediate products of every stage."""
    output: PixelBuffer
    binary_mask: np.ndarray
    components: List[Component]
    selection: ObjectSelection
    filled_mask: np.ndarray

    @property
    def exterior_pixels(self) -> int:
        return int(np.count_nonzero(self.filled_mask == PixelClass.EXTERIOR))


@dataclass
class CutoutConfig:
    """Configuration for the cutout pipeline."""
    # Thresholding
    luminance_threshold: float = 100.0
    luminance_weights: Tuple[float, float, float] = (0.2126, 0.7152, 0.0722)

    # Ingest: composite transparent pixels onto white before thresholding
    flatten_alpha: bool = False

    # Diagnostics
    validate: bool = False
    save_stages: Optional[Union[str, Path]] = None


class CutoutError(Exception):
    """Base exception for cutout errors."""
    pass


class DecodeFailure(CutoutError):
    """Image bytes could not be decoded into a pixel buffer."""
    pass


class RenderingBackendUnavailable(CutoutError):
    """The RGBA read/write surface could not be obtained."""
    pass
