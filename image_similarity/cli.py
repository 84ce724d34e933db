"""Command-line interface: pair, directory and match subcommands."""

import argparse
import logging
import sys
import threading
from typing import Iterable, Optional

from . import __version__
from .batch import BatchOrchestrator
from .comparator import PairComparator
from .config import (
    DEFAULT_BINS, DEFAULT_DCT_SIZE, DEFAULT_HASH_SIZE, DEFAULT_WORKERS,
    DescriptorConfig, parse_extensions,
)
from .errors import DirectoryError, ImageSimilarityError
from .models import ComparisonRequest
from .report import STYLES, format_pair, format_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

EXT_HELP = 'Allowed extensions, defaults are "png,jpg,jpeg"'


def _add_batch_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-d", "--directory", required=True, help="Directory")
    parser.add_argument("-e", "--ext", dest="extension", default=None, help=EXT_HELP)
    parser.add_argument("--workers", type=int, default=DEFAULT_WORKERS,
                        help=f"Worker threads used to decode images (default {DEFAULT_WORKERS})")
    parser.add_argument("--no-recursive", dest="recursive", action="store_false",
                        help="Only look at files directly inside the directory")
    parser.add_argument("--format", dest="style", choices=STYLES, default="lines",
                        help="Report layout (default lines)")


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--bins", type=int, default=DEFAULT_BINS,
                        help=f"Colour histogram bins per RGB axis (default {DEFAULT_BINS})")
    common.add_argument("--hash-size", type=int, default=DEFAULT_HASH_SIZE,
                        help=f"Resize side before the DCT, even (default {DEFAULT_HASH_SIZE})")
    common.add_argument("--dct-size", type=int, default=DEFAULT_DCT_SIZE,
                        help=f"Side of the hashed DCT block (default {DEFAULT_DCT_SIZE})")
    common.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-v) or debug details (-vv) to stderr")

    parser = argparse.ArgumentParser(prog="image-similarity", description="Compute image similarity")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    pair = subparsers.add_parser(
        "pair", parents=[common],
        help="Compute image similarity with image a and image b")
    pair.add_argument("-a", "--imagea", required=True, help="Image A")
    pair.add_argument("-b", "--imageb", required=True, help="Image B")

    directory = subparsers.add_parser(
        "directory", parents=[common],
        help="Compute image similarity of all image pairs with allowed extensions "
             "in given directory")
    _add_batch_options(directory)

    match = subparsers.add_parser(
        "match", parents=[common],
        help="Compute similarities of given image with all images that end in "
             "allowed extensions in given directory")
    match.add_argument("-i", "--image", required=True, help="Image")
    _add_batch_options(match)

    return parser


def build_request(args: argparse.Namespace) -> ComparisonRequest:
    """Fold parsed arguments into a read-only request. Raises ValueError on bad config."""
    config = DescriptorConfig(hash_size=args.hash_size, dct_size=args.dct_size, bins=args.bins)
    if args.mode == "pair":
        return ComparisonRequest(mode="pair", image_a=args.imagea, image_b=args.imageb,
                                 config=config)
    if args.workers < 1:
        raise ValueError(f"workers should be a positive number instead of {args.workers}")
    return ComparisonRequest(
        mode=args.mode,
        target=getattr(args, "image", None),
        directory=args.directory,
        extensions=parse_extensions(args.extension),
        config=config,
        workers=args.workers,
        recursive=args.recursive,
    )


def run(request: ComparisonRequest, style: str = "lines", out=None,
        cancel_event: Optional[threading.Event] = None) -> int:
    """
    Execute a request and write its output.

    Returns:
        Process exit code.
    """
    out = out or sys.stdout
    comparator = PairComparator(request.config)

    if request.mode == "pair":
        try:
            result = comparator.compare(request.image_a, request.image_b)
        except ImageSimilarityError as e:
            logger.debug("Comparison failed", exc_info=True)
            print(f"[ERROR] {e}", file=sys.stderr)
            return EXIT_FAILURE
        except KeyboardInterrupt:
            logger.warning("Interrupted before the pair was scored")
            return EXIT_INTERRUPTED
        print(format_pair(result), file=out)
        return EXIT_OK

    orchestrator = BatchOrchestrator(comparator, workers=request.workers,
                                     recursive=request.recursive, cancel_event=cancel_event)
    try:
        if request.mode == "directory":
            report = orchestrator.all_pairs(request.directory, request.extensions)
        else:
            report = orchestrator.match(request.target, request.directory, request.extensions)
    except DirectoryError as e:
        logger.debug("Cannot scan directory", exc_info=True)
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_FAILURE
    except ImageSimilarityError as e:
        logger.debug("Cannot use target image", exc_info=True)
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_FAILURE

    text = format_report(report, style=style, mode=request.mode)
    if text:
        print(text, file=out)
    return EXIT_INTERRUPTED if report.interrupted else EXIT_OK


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main(argv: Iterable[str] = None) -> int:
    """Entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(args.verbose)

    try:
        request = build_request(args)
    except ValueError as e:
        parser.error(str(e))

    return run(request, style=getattr(args, "style", "lines"))


if __name__ == "__main__":
    raise SystemExit(main())
