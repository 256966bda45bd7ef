"""Mapping of final pixel classes to RGBA and PNG encoding."""
import base64
import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from sketchcut.types import PixelBuffer, PixelClass, RenderingBackendUnavailable

logger = logging.getLogger(__name__)

# Indexed by PixelClass value
CLASS_COLORS = np.array([
    [0, 0, 0, 255],        # STROKE: opaque black
    [255, 255, 255, 255],  # INTERIOR: opaque white
    [0, 0, 0, 0],          # EXTERIOR: transparent
], dtype=np.uint8)


def composite(filled_mask: np.ndarray) -> PixelBuffer:
    """
    Render a filled mask as an RGBA buffer.

    Args:
        filled_mask: uint8 array (H, W) of PixelClass values

    Returns:
        PixelBuffer of the same dimensions
    """
    height, width = filled_mask.shape
    rgba = CLASS_COLORS[filled_mask]
    return PixelBuffer(width=width, height=height, data=rgba)


def to_image(buffer: PixelBuffer) -> Image.Image:
    """Wrap a pixel buffer as a PIL RGBA image."""
    try:
        return Image.fromarray(np.ascontiguousarray(buffer.data, dtype=np.uint8))
    except (TypeError, ValueError) as e:
        raise RenderingBackendUnavailable(f"Cannot build RGBA image: {e}") from e


def encode_png(buffer: PixelBuffer) -> bytes:
    """
    Encode a pixel buffer as PNG bytes.

    Raises:
        RenderingBackendUnavailable: If the PNG encoder cannot be used
    """
    out = io.BytesIO()
    try:
        to_image(buffer).save(out, format='PNG')
    except (KeyError, OSError) as e:
        raise RenderingBackendUnavailable(f"PNG encoder unavailable: {e}") from e
    return out.getvalue()


def encode_data_url(buffer: PixelBuffer) -> str:
    """Encode a pixel buffer as a ``data:image/png;base64,...`` URL."""
    payload = base64.b64encode(encode_png(buffer)).decode('ascii')
    return f"data:image/png;base64,{payload}"


def save_png(buffer: PixelBuffer, path: Union[str, Path]) -> Path:
    """
    Write a pixel buffer to a PNG file.

    Returns:
        Path written

    Raises:
        RenderingBackendUnavailable: If the file cannot be written
    """
    path = Path(path)
    png = encode_png(buffer)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(png)
    except OSError as e:
        raise RenderingBackendUnavailable(f"Cannot write PNG to {path}: {e}") from e
    logger.info(f"Saved PNG to: {path}")
    return path
