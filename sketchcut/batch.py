"""Batch cutout of independent images across worker processes."""
import logging
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import asdict
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple, Union

from sketchcut.types import CutoutConfig, CutoutError
from sketchcut.pipeline import CutoutPipeline

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.gif', '.tiff', '.webp'}
OUTPUT_SUFFIX = "_cutout.png"


def get_image_files(folder: Union[str, Path], extensions: Optional[Set[str]] = None) -> List[Path]:
    """Get all image files from a folder."""
    if extensions is None:
        extensions = IMAGE_EXTENSIONS

    folder = Path(folder)
    if not folder.exists():
        raise FileNotFoundError(f"Input folder not found: {folder}")

    return sorted(p for p in folder.iterdir() if p.is_file() and p.suffix.lower() in extensions)


def output_path_for(input_path: Path, output_folder: Path) -> Path:
    """Output file for an input image: ``<stem>_cutout.png`` in output_folder."""
    return output_folder / f"{input_path.stem}{OUTPUT_SUFFIX}"


def process_one(
    input_path_str: str,
    output_path_str: str,
    config_fields: Optional[dict] = None
) -> Tuple[str, str, bool, str]:
    """
    Cut out a single image.

    Module-level so it can be shipped to worker processes.

    Returns:
        Tuple of (input_path_str, output_path_str, success, message)
    """
    config = CutoutConfig(**config_fields) if config_fields else CutoutConfig()
    if config.save_stages:
        # One stage folder per image
        config.save_stages = Path(config.save_stages) / Path(output_path_str).stem
    try:
        CutoutPipeline(config).process(input_path_str, output_path_str)
        return input_path_str, output_path_str, True, "Success"
    except (CutoutError, OSError) as e:
        return input_path_str, output_path_str, False, f"Error: {e}"


def _plan_outputs(inputs: List[Path], output_folder: Optional[Path]) -> List[Path]:
    """
    Pick an output path per input; beside the input when no folder is given.

    Inputs that would collide on the same output get ``<stem>_<n>_cutout.png``.
    """
    planned = []
    used = set()
    for path in inputs:
        folder = output_folder if output_folder is not None else path.parent
        candidate = output_path_for(path, folder)
        n = 2
        while candidate in used:
            candidate = folder / f"{path.stem}_{n}{OUTPUT_SUFFIX}"
            n += 1
        used.add(candidate)
        planned.append(candidate)
    return planned


def process_batch(
    inputs: Iterable[Union[str, Path]],
    output_folder: Optional[Union[str, Path]] = None,
    config: Optional[CutoutConfig] = None,
    max_workers: int = 1
) -> dict:
    """
    Cut out several images, each with its own pipeline call.

    Args:
        inputs: Image paths
        output_folder: Folder for ``<stem>_cutout.png`` outputs; None writes
            each output beside its input
        config: Pipeline configuration shared by every image
        max_workers: Worker processes; 1 or less runs sequentially

    Returns:
        Dictionary with ``total``, ``success``, ``failed`` counts and
        per-file ``results`` tuples in input order
    """
    if output_folder is not None:
        output_folder = Path(output_folder)
        output_folder.mkdir(parents=True, exist_ok=True)

    input_paths = [Path(p) for p in inputs]
    outputs = _plan_outputs(input_paths, output_folder)
    jobs = [(str(p), str(out)) for p, out in zip(input_paths, outputs)]
    config_fields = asdict(config) if config is not None else None

    results = [None] * len(jobs)
    if max_workers <= 1 or len(jobs) <= 1:
        for i, (input_str, output_str) in enumerate(jobs):
            results[i] = process_one(input_str, output_str, config_fields)
    else:
        workers = min(max_workers, len(jobs))
        logger.info(f"Processing {len(jobs)} images with {workers} workers")
        with ProcessPoolExecutor(max_workers=workers) as executor:
            futures = {
                executor.submit(process_one, input_str, output_str, config_fields): i
                for i, (input_str, output_str) in enumerate(jobs)
            }
            for future in as_completed(futures):
                i = futures[future]
                try:
                    results[i] = future.result()
                except Exception as e:
                    # Worker died or the result could not be returned
                    results[i] = (jobs[i][0], jobs[i][1], False, f"Error: {e}")

    for input_str, _, success, message in results:
        if success:
            logger.info(f"{input_str}: {message}")
        else:
            logger.warning(f"{input_str}: {message}")

    success_count = sum(1 for r in results if r[2])
    return {
        'total': len(results),
        'success': success_count,
        'failed': len(results) - success_count,
        'results': results,
    }
