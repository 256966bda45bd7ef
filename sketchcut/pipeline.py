"""Sketch cutout pipeline: threshold, label, select, fill, composite."""
from pathlib import Path
from typing import Union, Optional
import time
import logging

import numpy as np
from PIL import Image

from sketchcut.types import CutoutConfig, CutoutResult, PixelBuffer, PixelClass
from sketchcut.raster_ingest import ingest, ingest_bytes, flatten_on_white
from sketchcut.threshold import binarize
from sketchcut.labeling import label_components, label_map
from sketchcut.selection import select_object
from sketchcut.exterior_fill import fill_exterior
from sketchcut.compositor import composite, encode_png, save_png
from sketchcut.debug_utils import audit_components, audit_exterior

logger = logging.getLogger(__name__)

# Grey levels used when dumping class masks as images
_MASK_PREVIEW = np.array([0, 255, 128], dtype=np.uint8)


class CutoutPipeline:
    """Turns a dark-on-light sketch into a transparent-background cutout."""

    def __init__(self, config: Optional[CutoutConfig] = None):
        """
        Initialize cutout pipeline.

        Args:
            config: Configuration (uses defaults if None)
        """
        self.config = config or CutoutConfig()
        self.stages_dir = Path(self.config.save_stages) if self.config.save_stages else None

        if self.stages_dir is not None:
            self.stages_dir.mkdir(parents=True, exist_ok=True)

    def run(self, buffer: PixelBuffer) -> CutoutResult:
        """
        Run the five stages on a decoded RGBA buffer.

        The input buffer is not modified. Every call allocates its own
        masks, so independent calls may run concurrently.

        Args:
            buffer: Decoded RGBA pixel buffer

        Returns:
            CutoutResult with the output buffer and intermediate masks
        """
        start_time = time.time()
        shape = (buffer.height, buffer.width)
        logger.info(f"Image: {buffer.width}x{buffer.height}")

        if self.config.flatten_alpha:
            buffer = PixelBuffer(buffer.width, buffer.height, flatten_on_white(buffer.data))

        if self.stages_dir is not None:
            self._save_stage_image(buffer.data, "stage_01_input.png")

        # Step 1: Threshold
        binary_mask = binarize(
            buffer,
            threshold=self.config.luminance_threshold,
            weights=self.config.luminance_weights
        )
        logger.info(
            f"Step 1/5: {int(np.count_nonzero(binary_mask == PixelClass.STROKE))} stroke pixels "
            f"below luminance {self.config.luminance_threshold}"
        )
        if self.stages_dir is not None:
            self._save_mask(binary_mask, "stage_02_binary.png")

        # Step 2: Connected components
        components = label_components(binary_mask)
        logger.info(f"Step 2/5: Found {len(components)} stroke components")
        if self.config.validate:
            audit_components(components, binary_mask)
        if self.stages_dir is not None:
            self._save_label_map(components, shape, "stage_03_components.png")

        # Step 3: Object selection
        selection = select_object(components, shape)
        if selection.main_frame is None:
            logger.info("Step 3/5: No strokes found, nothing retained")
        else:
            logger.info(
                f"Step 3/5: Main frame {selection.main_frame.bbox}, "
                f"retained {len(selection.retained)} of {len(components)} components"
            )
        if self.stages_dir is not None:
            self._save_mask(selection.mask, "stage_04_object.png")

        # Step 4: Exterior fill from the corners
        filled_mask = fill_exterior(selection.mask)
        logger.info(
            f"Step 4/5: {int(np.count_nonzero(filled_mask == PixelClass.EXTERIOR))} exterior pixels "
            f"reachable from the corners"
        )
        if self.config.validate:
            audit_exterior(selection.mask, filled_mask)
        if self.stages_dir is not None:
            self._save_mask(filled_mask, "stage_05_filled.png")

        # Step 5: Composite
        output = composite(filled_mask)
        if self.stages_dir is not None:
            self._save_stage_image(output.data, "stage_06_output.png")

        result = CutoutResult(
            output=output,
            binary_mask=binary_mask,
            components=components,
            selection=selection,
            filled_mask=filled_mask,
        )
        elapsed = time.time() - start_time
        logger.info(f"Step 5/5: Composited in {elapsed:.2f}s")
        return result

    def process(
        self,
        input_path: Union[str, Path],
        output_path: Optional[Union[str, Path]] = None
    ) -> CutoutResult:
        """
        Decode an image file, run the pipeline and optionally save a PNG.

        Args:
            input_path: Path to input image
            output_path: Optional path for output PNG

        Returns:
            CutoutResult

        Raises:
            FileNotFoundError: If the input file doesn't exist
            DecodeFailure: If the input cannot be decoded
            RenderingBackendUnavailable: If no RGBA surface can be obtained
        """
        buffer = ingest(input_path)
        result = self.run(buffer)

        if output_path:
            save_png(result.output, output_path)

        return result

    def process_bytes(self, data: bytes) -> bytes:
        """Decode encoded image bytes and return the cutout as PNG bytes."""
        return encode_png(self.run(ingest_bytes(data)).output)

    def _save_stage_image(self, image: np.ndarray, filename: str):
        """Save an intermediate stage image."""
        try:
            output_path = self.stages_dir / filename
            Image.fromarray(image.astype(np.uint8)).save(output_path)
            logger.info(f"  Saved stage: {output_path}")
        except (OSError, ValueError, TypeError) as e:
            logger.warning(f"Failed to save stage {filename}: {e}")

    def _save_mask(self, mask: np.ndarray, filename: str):
        """Save a class mask: stroke black, interior white, exterior grey."""
        self._save_stage_image(_MASK_PREVIEW[mask], filename)

    def _save_label_map(self, components, shape, filename: str):
        """Save components in distinct colors over a white background."""
        labels = label_map(components, shape)
        rng = np.random.default_rng(0)
        palette = rng.integers(0, 200, size=(len(components) + 1, 3), dtype=np.uint8)
        palette[0] = [255, 255, 255]
        self._save_stage_image(palette[labels], filename)


def cutout(buffer: PixelBuffer, config: Optional[CutoutConfig] = None) -> PixelBuffer:
    """
    Run the cutout pipeline on a decoded buffer.

    Convenience function for one-off processing.

    Example:
        >>> out = cutout(ingest("sketch.png"))
        >>> save_png(out, "sketch_cutout.png")
    """
    return CutoutPipeline(config).run(buffer).output
