"""Integration tests for the cutout pipeline."""
import io

import numpy as np
import pytest
from PIL import Image

from sketchcut.types import CutoutConfig, PixelBuffer, PixelClass, DecodeFailure
from sketchcut.pipeline import CutoutPipeline, cutout
from sketchcut.raster_ingest import ingest
from conftest import make_buffer, square_ring

TRANSPARENT = [0, 0, 0, 0]
BLACK = [0, 0, 0, 255]
WHITE = [255, 255, 255, 255]


class TestScenarios:
    """End-to-end behaviour on synthetic sketches."""

    def test_blank_image_fully_transparent(self, blank_buffer):
        """A light image with no strokes becomes fully transparent."""
        result = CutoutPipeline().run(blank_buffer)
        assert result.components == []
        assert result.selection.main_frame is None
        assert np.all(result.output.data == 0)

    def test_ring_keeps_inside_white(self, ring_buffer):
        """Ring pixels black, inside white, outside transparent."""
        out = CutoutPipeline().run(ring_buffer).output.data
        ring = square_ring(10, 2, 7)
        inside = np.zeros_like(ring)
        inside[3:7, 3:7] = True
        outside = ~(ring | inside)

        assert all(px == BLACK for px in out[ring].tolist())
        assert all(px == WHITE for px in out[inside].tolist())
        assert all(px == TRANSPARENT for px in out[outside].tolist())

    def test_far_blob_is_dropped(self, two_blob_buffer):
        """A small blob whose box centre is outside the main frame is removed."""
        result = CutoutPipeline().run(two_blob_buffer)

        assert len(result.components) == 2
        assert result.selection.retained == [result.selection.main_frame]
        assert result.selection.mask[18, 18] == PixelClass.INTERIOR
        assert result.selection.mask[18, 19] == PixelClass.INTERIOR
        assert result.filled_mask[18, 18] == PixelClass.EXTERIOR
        assert result.output.data[18, 19].tolist() == TRANSPARENT
        assert result.output.data[4, 4].tolist() == BLACK
        assert result.output.data[9, 9].tolist() == WHITE

    def test_detail_inside_frame_is_kept(self):
        """A separate stroke drawn inside the main frame stays black."""
        dark = square_ring(20, 2, 17)
        dark[9:11, 9:11] = True
        out = CutoutPipeline().run(make_buffer(dark)).output.data

        assert out[9, 9].tolist() == BLACK
        assert out[5, 5].tolist() == WHITE

    def test_open_shape_leaks(self):
        """A ring with a gap has no enclosed region."""
        dark = square_ring(12, 2, 9)
        dark[2, 5] = False
        result = CutoutPipeline().run(make_buffer(dark))
        assert not np.any(result.filled_mask == PixelClass.INTERIOR)

    def test_all_dark_image(self):
        """An entirely dark image is one stroke component, all black."""
        out = cutout(make_buffer(np.ones((5, 7), dtype=bool)))
        assert np.all(out.data == np.array(BLACK, dtype=np.uint8))

    def test_cutout_returns_output_buffer(self, ring_buffer):
        """The convenience helper returns the composited buffer itself."""
        out = cutout(ring_buffer)
        assert isinstance(out, PixelBuffer)
        assert (out.width, out.height) == (10, 10)
        assert np.array_equal(out.data, CutoutPipeline().run(ring_buffer).output.data)


class TestPipelineProperties:
    """Determinism and stage outputs."""

    def test_deterministic(self, two_blob_buffer):
        pipeline = CutoutPipeline()
        first = pipeline.run(two_blob_buffer).output.data
        second = pipeline.run(two_blob_buffer).output.data
        assert np.array_equal(first, second)

    def test_input_not_modified(self, ring_buffer):
        before = ring_buffer.data.copy()
        CutoutPipeline().run(ring_buffer)
        assert np.array_equal(ring_buffer.data, before)

    def test_exterior_reachable_from_corners(self):
        """Every exterior pixel came from an interior pixel connected to a corner."""
        rng = np.random.default_rng(3)
        dark = rng.random((30, 30)) < 0.3
        dark |= square_ring(30, 5, 24)
        result = CutoutPipeline(CutoutConfig(validate=True)).run(make_buffer(dark))

        exterior = result.filled_mask == PixelClass.EXTERIOR
        was_interior = result.selection.mask == PixelClass.INTERIOR
        assert np.all(was_interior[exterior])
        assert result.exterior_pixels == int(np.count_nonzero(exterior))

    def test_flatten_alpha(self):
        """Transparent pixels read as black unless flattened onto white."""
        buf = make_buffer(np.zeros((4, 4), dtype=bool))
        buf.data[...] = 0  # fully transparent black

        raw = CutoutPipeline().run(buf)
        assert len(raw.components) == 1

        flat = CutoutPipeline(CutoutConfig(flatten_alpha=True)).run(buf)
        assert flat.components == []
        assert np.all(flat.output.data == 0)

    def test_save_stages(self, ring_buffer, tmp_path):
        stages = tmp_path / "stages"
        CutoutPipeline(CutoutConfig(save_stages=stages)).run(ring_buffer)
        names = sorted(p.name for p in stages.iterdir())
        assert names == [
            "stage_01_input.png",
            "stage_02_binary.png",
            "stage_03_components.png",
            "stage_04_object.png",
            "stage_05_filled.png",
            "stage_06_output.png",
        ]


class TestPipelineIO:
    """File and byte entry points."""

    def test_process_file(self, ring_buffer, tmp_path):
        src = tmp_path / "ring.png"
        Image.fromarray(ring_buffer.data).save(src)
        dst = tmp_path / "ring_cutout.png"

        result = CutoutPipeline().process(src, dst)

        assert dst.exists()
        assert np.array_equal(ingest(dst).data, result.output.data)

    def test_process_bytes(self, ring_buffer):
        data = io.BytesIO()
        Image.fromarray(ring_buffer.data).save(data, format="PNG")
        png = CutoutPipeline().process_bytes(data.getvalue())
        with Image.open(io.BytesIO(png)) as img:
            out = np.array(img)
        assert out[4, 4].tolist() == WHITE
        assert out[0, 0].tolist() == TRANSPARENT

    def test_undecodable_bytes(self):
        with pytest.raises(DecodeFailure):
            CutoutPipeline().process_bytes(b"\x00\x01garbage")
