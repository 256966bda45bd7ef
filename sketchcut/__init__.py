"""Sketch cutout package."""
from sketchcut.types import (
    PixelBuffer,
    PixelClass,
    BoundingBox,
    Component,
    ObjectSelection,
    CutoutResult,
    CutoutConfig,
    CutoutError,
    DecodeFailure,
    RenderingBackendUnavailable,
)
from sketchcut.pipeline import CutoutPipeline, cutout

__all__ = [
    "PixelBuffer",
    "PixelClass",
    "BoundingBox",
    "Component",
    "ObjectSelection",
    "CutoutResult",
    "CutoutConfig",
    "CutoutError",
    "DecodeFailure",
    "RenderingBackendUnavailable",
    "CutoutPipeline",
    "cutout",
]
