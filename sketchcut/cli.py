"""Command line interface for sketchcut."""
import argparse
import logging
import sys
from pathlib import Path

from sketchcut.types import CutoutConfig, CutoutError
from sketchcut.pipeline import CutoutPipeline
from sketchcut.compositor import encode_data_url
from sketchcut.batch import process_batch, output_path_for


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog='sketchcut',
        description='Cut a hand-drawn sketch out of its background as a transparent PNG'
    )

    parser.add_argument(
        'inputs',
        nargs='+',
        type=str,
        help='Input image path(s)'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        help='Output PNG path for a single input (default: <input>_cutout.png)'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default=None,
        help='Output folder when processing several inputs (default: beside each input)'
    )

    parser.add_argument(
        '--threshold',
        type=float,
        default=100.0,
        help='Luminance below which a pixel counts as a stroke (default: 100)'
    )

    parser.add_argument(
        '--flatten-alpha',
        action='store_true',
        help='Composite transparent input pixels onto white before thresholding'
    )

    parser.add_argument(
        '--save-stages',
        type=str,
        default=None,
        help='Directory to save pipeline stage debug images'
    )

    parser.add_argument(
        '--validate',
        action='store_true',
        help='Audit component partition and exterior fill while processing'
    )

    parser.add_argument(
        '--data-url',
        action='store_true',
        help='Print the result as a data:image/png URL instead of writing a file'
    )

    parser.add_argument(
        '--workers',
        type=int,
        default=1,
        help='Worker processes for several inputs (default: 1)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Log each pipeline stage'
    )

    return parser


def main(args=None):
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    logging.basicConfig(
        level=logging.INFO if parsed_args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s'
    )

    config = CutoutConfig(
        luminance_threshold=parsed_args.threshold,
        flatten_alpha=parsed_args.flatten_alpha,
        validate=parsed_args.validate,
        save_stages=parsed_args.save_stages,
    )

    if parsed_args.save_stages:
        print(f"Debug stages will be saved to: {parsed_args.save_stages}", file=sys.stderr)

    if len(parsed_args.inputs) > 1:
        if parsed_args.output or parsed_args.data_url:
            print("Error: --output and --data-url take a single input", file=sys.stderr)
            return 1

        # No --output-dir: each output lands beside its input
        summary = process_batch(
            parsed_args.inputs,
            parsed_args.output_dir,
            config=config,
            max_workers=parsed_args.workers
        )
        for input_str, output_str, success, message in summary['results']:
            if success:
                print(f"{input_str} -> {output_str}")
            else:
                print(f"{input_str}: {message}", file=sys.stderr)
        print(f"Processed {summary['success']}/{summary['total']} images")
        return 0 if summary['failed'] == 0 else 1

    input_path = Path(parsed_args.inputs[0])
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1

    # Determine output path
    if parsed_args.output:
        output_path = Path(parsed_args.output)
    elif parsed_args.output_dir:
        output_path = output_path_for(input_path, Path(parsed_args.output_dir))
    else:
        output_path = output_path_for(input_path, input_path.parent)

    try:
        pipeline = CutoutPipeline(config)
        if parsed_args.data_url:
            result = pipeline.process(input_path)
            print(encode_data_url(result.output))
        else:
            pipeline.process(input_path, output_path)
            print(f"Saved cutout to: {output_path}")
        return 0

    except (CutoutError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
