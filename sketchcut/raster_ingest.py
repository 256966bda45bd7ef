"""Raster image ingestion into RGBA pixel buffers."""
import io
import logging
from pathlib import Path
from typing import Union
import numpy as np
from PIL import Image
from PIL import ImageOps
from PIL import UnidentifiedImageError

from sketchcut.types import PixelBuffer, DecodeFailure, RenderingBackendUnavailable

logger = logging.getLogger(__name__)


def flatten_on_white(rgba: np.ndarray) -> np.ndarray:
    """
    Composite an RGBA array onto an opaque white background.

    Args:
        rgba: uint8 array (H, W, 4)

    Returns:
        uint8 array (H, W, 4) with alpha set to 255
    """
    alpha = rgba[..., 3:4].astype(np.float32) / 255.0
    rgb = rgba[..., :3].astype(np.float32)
    flat = rgb * alpha + 255.0 * (1.0 - alpha)

    out = np.empty_like(rgba)
    out[..., :3] = np.clip(np.rint(flat), 0, 255).astype(np.uint8)
    out[..., 3] = 255
    return out


def _image_to_buffer(img: Image.Image, flatten_alpha: bool) -> PixelBuffer:
    """Read the RGBA surface of an opened PIL image."""
    # Apply EXIF orientation transformation to handle rotation
    img = ImageOps.exif_transpose(img)

    width, height = img.size
    if width == 0 or height == 0:
        raise RenderingBackendUnavailable(f"Cannot read pixels of a {width}x{height} image")

    try:
        if img.mode != 'RGBA':
            img = img.convert('RGBA')
        data = np.array(img, dtype=np.uint8)
    except (ValueError, MemoryError) as e:
        raise RenderingBackendUnavailable(f"Failed to obtain RGBA surface: {e}") from e

    if flatten_alpha:
        data = flatten_on_white(data)

    logger.debug(f"Ingested {width}x{height} image (flatten_alpha={flatten_alpha})")
    return PixelBuffer(width=width, height=height, data=data)


def ingest(path: Union[str, Path], flatten_alpha: bool = False) -> PixelBuffer:
    """
    Ingest a raster image file.

    Args:
        path: Path to image file
        flatten_alpha: Composite transparent pixels onto white

    Returns:
        PixelBuffer with RGBA data

    Raises:
        FileNotFoundError: If file doesn't exist
        DecodeFailure: If file cannot be decoded
        RenderingBackendUnavailable: If the decoded image has no usable pixels
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Image file not found: {path}")

    if not path.is_file():
        raise DecodeFailure(f"Path is not a file: {path}")

    try:
        with Image.open(path) as img:
            img.load()
            return _image_to_buffer(img, flatten_alpha)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise DecodeFailure(f"Failed to decode image {path}: {e}") from e


def ingest_bytes(data: bytes, flatten_alpha: bool = False) -> PixelBuffer:
    """
    Ingest encoded image bytes (PNG, JPEG, ...).

    Raises:
        DecodeFailure: If the bytes cannot be decoded
        RenderingBackendUnavailable: If the decoded image has no usable pixels
    """
    if not data:
        raise DecodeFailure("No image data")

    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            return _image_to_buffer(img, flatten_alpha)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise DecodeFailure(f"Failed to decode image bytes: {e}") from e


def ingest_from_array(image: np.ndarray, flatten_alpha: bool = False) -> PixelBuffer:
    """
    Create a PixelBuffer from a numpy array.

    Args:
        image: uint8 array (H, W), (H, W, 3) or (H, W, 4)
        flatten_alpha: Composite transparent pixels onto white

    Returns:
        PixelBuffer

    Raises:
        RenderingBackendUnavailable: If the array cannot be read as RGBA
    """
    image = np.asarray(image)

    if image.ndim == 2:
        # Grayscale - convert to RGB
        image = np.stack([image] * 3, axis=-1)

    if image.ndim != 3:
        raise RenderingBackendUnavailable(f"Expected 2D or 3D array, got {image.ndim}D")

    height, width = image.shape[:2]
    if width == 0 or height == 0:
        raise RenderingBackendUnavailable(f"Cannot read pixels of a {width}x{height} image")

    # Normalize float images in [0, 1] to 0-255
    if np.issubdtype(image.dtype, np.floating):
        if image.max() <= 1.0:
            image = image * 255.0
        image = np.clip(np.rint(image), 0, 255)
    elif image.dtype != np.uint8 and image.dtype != bool:
        # Wider integer types saturate instead of wrapping
        image = np.clip(image, 0, 255)

    if image.shape[2] == 3:
        alpha = np.full((height, width, 1), 255, dtype=np.uint8)
        rgba = np.concatenate([image.astype(np.uint8), alpha], axis=-1)
    elif image.shape[2] == 4:
        rgba = image.astype(np.uint8, copy=True)
    else:
        raise RenderingBackendUnavailable(f"Expected 3 or 4 channels, got {image.shape[2]}")

    if flatten_alpha:
        rgba = flatten_on_white(rgba)

    return PixelBuffer(width=width, height=height, data=rgba)
