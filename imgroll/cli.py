"""
Command Line Interface for the photo pipeline.
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional, Tuple

import urllib3

from .batch_stats import BatchStats
from .config import ProcessingConfig
from .errors import ImgrollError
from .lambda_handler import handle_event
from .processor import PhotoProcessor

STDIN_NAME = 'stdin'


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        stream=sys.stderr
    )

    logging.getLogger('boto3').setLevel(logging.WARNING)
    logging.getLogger('botocore').setLevel(logging.WARNING)
    logging.getLogger('urllib3').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('imgroll')


def get_processing_config(args: argparse.Namespace) -> ProcessingConfig:
    """Get processing configuration from environment and CLI overrides."""
    config = ProcessingConfig.from_env()

    if getattr(args, 'workers', None):
        config.max_workers = args.workers
    if getattr(args, 'jpeg_quality', None) is not None:
        config.jpeg_quality = args.jpeg_quality
    if getattr(args, 'webp_quality', None) is not None:
        config.webp_quality = args.webp_quality

    return config


def read_input(path: str) -> Tuple[bytes, str]:
    """
    Read one input photo.

    Returns:
        Tuple of (contents, display name); the name is path as given, and
        "-" reads stdin under the name "stdin"
    """
    if path == '-':
        return sys.stdin.buffer.read(), STDIN_NAME
    with open(path, 'rb') as f:
        return f.read(), path


def cmd_process(args: argparse.Namespace) -> int:
    """Execute process command."""
    logger = setup_logging(args.verbose)

    config = get_processing_config(args)
    errors = config.validate()
    if errors:
        for error in errors:
            logger.error(error)
        return 1

    os.makedirs(args.output_dir, exist_ok=True)
    processor = PhotoProcessor(config, logger)
    stats = BatchStats(total=len(args.paths))
    descriptors = {}

    for path in args.paths:
        try:
            raw, name = read_input(path)
            descriptor, files = processor.process(raw, name)
        except (ImgrollError, OSError) as e:
            logger.error(f"Failed to process {path}: {e}")
            stats.record_error(path, e)
            continue

        for out in files:
            with open(os.path.join(args.output_dir, out.name), 'wb') as f:
                f.write(out.data)
            logger.debug(f"Wrote {out.name} ({out.size} bytes)")

        print(descriptor.to_json())
        descriptors[name] = descriptor.to_dict()
        stats.record_success(len(files), sum(out.size for out in files))

    if args.json_out:
        with open(args.json_out, 'w') as f:
            json.dump(descriptors, f, indent=2)
        logger.info(f"Descriptors saved to: {args.json_out}")

    if not args.quiet:
        print(f"Processed: {stats.processed}", file=sys.stderr)
        print(f"Errors: {stats.errors}", file=sys.stderr)
        print(f"Files: {stats.files_written} ({stats.bytes_generated} bytes)", file=sys.stderr)
        print(f"Time: {stats.elapsed_seconds:.1f}s", file=sys.stderr)

    return 0 if stats.errors == 0 else 1


def cmd_event(args: argparse.Namespace) -> int:
    """Execute event command."""
    logger = setup_logging(args.verbose)
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)

    try:
        with open(args.event) as f:
            event = json.load(f)
    except FileNotFoundError:
        logger.error(f"Event file not found: {args.event}")
        return 1
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse event: {e}")
        return 1

    try:
        results = handle_event(event, logger=logger)
    except (ImgrollError, ValueError) as e:
        logger.error(f"Event handling failed: {e}")
        return 1

    for result in results:
        print(json.dumps(result, separators=(',', ':')))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='imgroll',
        description='Derived assets (renditions, preview, palette) for uploaded photos',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  imgroll process photo.jpg -o out/
  cat photo.jpg | imgroll process - -o out/
  imgroll event s3-event.json

Processing policy is read from IMGROLL_* environment variables,
storage settings from S3_* / AWS_* variables.
"""
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    process_parser = subparsers.add_parser('process', help='Process local photos')
    process_parser.add_argument('paths', nargs='+', metavar='PATH',
                                help='Photo file(s); "-" reads stdin')
    process_parser.add_argument('-o', '--output-dir', default='.',
                                help='Directory for derived files (default: .)')
    process_parser.add_argument('--json-out', metavar='FILE',
                                help='Also save all descriptors to FILE')
    process_parser.add_argument('-w', '--workers', type=int, metavar='N',
                                help='Encoder worker threads')
    process_parser.add_argument('--jpeg-quality', type=float, help='Override base JPEG quality')
    process_parser.add_argument('--webp-quality', type=float, help='Override base WebP quality')
    process_parser.add_argument('-q', '--quiet', action='store_true', help='Suppress summary output')
    process_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    event_parser = subparsers.add_parser('event', help='Handle a saved S3 event JSON file')
    event_parser.add_argument('event', metavar='FILE', help='S3 event JSON')
    event_parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')

    return parser


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if not parsed_args.command:
        parser.print_help()
        return 1

    if parsed_args.command == 'process':
        return cmd_process(parsed_args)
    elif parsed_args.command == 'event':
        return cmd_event(parsed_args)

    return 1
