#!/usr/bin/env python
"""
Command-line interface for the Ink Reconstruction Pipeline.

Usage:
    python -m inkrecon.cli --input <export_root> --output <output_dir> [options]

Examples:
    # Convert every collection of an export
    python -m inkrecon.cli --input ./export --output ./output --format all

    # Convert a single collection, stop at the first broken page
    python -m inkrecon.cli --input ./export/Notes.nebo --output ./output --fail-fast
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from . import __version__

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("inkrecon")


def setup_argparser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="Ink Reconstruction Pipeline - Convert handwriting exports to vector documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Convert an export and write every format:
    python -m inkrecon.cli --input ./export --output ./output --format all

  Convert selected collections only:
    python -m inkrecon.cli --input ./export --output ./output --collection Notes --collection Math

  Keep decoded alpha on every drawable:
    python -m inkrecon.cli --input ./export --output ./output --alpha-policy preserve
        """
    )

    # Required arguments
    parser.add_argument(
        "--input", "-i",
        required=True,
        help="Export root (folder of collections) or a single collection folder"
    )

    parser.add_argument(
        "--output", "-o",
        required=True,
        help="Output directory for generated files"
    )

    # Optional arguments
    parser.add_argument(
        "--format", "-f",
        nargs="+",
        default=None,
        choices=["json", "svg", "png", "all"],
        help="Output format(s) (default: json svg)"
    )

    parser.add_argument(
        "--collection", "-c",
        action="append",
        default=None,
        help="Only convert this collection (repeatable)"
    )

    parser.add_argument(
        "--scale",
        type=float,
        default=None,
        help="Coordinate and pen width scale factor (default: 7.0)"
    )

    parser.add_argument(
        "--alpha-policy",
        choices=["source", "opaque", "preserve"],
        default=None,
        help="Color alpha handling (default: source - strokes opaque, lines keep alpha)"
    )

    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Stop at the first page that cannot be converted"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode (re-raise unexpected errors)"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Suppress non-error output"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    return parser


def build_config(args):
    """Apply command-line overrides on top of the environment configuration."""
    from .config import get_config

    config = get_config()
    if args.scale is not None:
        config.geometry.coordinate_scale = args.scale
        config.geometry.width_scale = args.scale
    if args.alpha_policy:
        config.geometry.alpha_policy = args.alpha_policy
    if args.fail_fast:
        config.fail_fast = True
    if args.debug:
        config.debug_mode = True
    if args.format:
        config.export.formats = list(args.format)
    return config


def run_pipeline(args) -> int:
    """Run the ink reconstruction pipeline."""
    from .utils.assembler import ExportConverter
    from .utils.io import detect_input_type, ensure_dir, save_json

    start_time = time.time()

    input_path = Path(args.input)
    input_type = detect_input_type(input_path)
    logger.info(f"Input type detected: {input_type}")

    if input_type == "unknown":
        logger.error(f"No collections found in: {input_path}")
        return 1

    output_dir = ensure_dir(args.output)
    config = build_config(args)

    converter = ExportConverter(output_dir, config=config)
    report = converter.convert(input_path, collections=args.collection)

    report_path = save_json(report.to_dict(), output_dir / "report.json")
    logger.info(f"Saved report: {report_path}")

    elapsed = time.time() - start_time

    if not args.quiet:
        print("\n" + "=" * 60)
        print("INK RECONSTRUCTION COMPLETE")
        print("=" * 60)
        print(f"Source: {input_path}")
        print(f"Output: {output_dir}")
        print(f"Pages converted: {len(report.converted)}")
        print(f"Pages failed: {len(report.failed)}")
        print(f"Skipped items (glyphs/arcs): {report.skipped_items}")
        print(f"Skipped elements: {report.skipped_elements}")
        print(f"Processing time: {elapsed:.2f}s")
        for failure in report.failed:
            print(f"  FAILED {failure['page']}: {failure['error']} - {failure['message']}")
        print("=" * 60)

    return 0 if report.success else 1


def main():
    """Main entry point."""
    parser = setup_argparser()
    args = parser.parse_args()

    # Configure logging level
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    elif args.quiet:
        logging.getLogger().setLevel(logging.ERROR)

    try:
        exit_code = run_pipeline(args)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args.debug:
            raise
        sys.exit(1)


if __name__ == "__main__":
    main()
