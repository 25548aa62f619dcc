"""
Command-line ingestion.

Reads a local directory or an S3 prefix and prints one JSON unit per line on
stdout. Logs and the final run report go to stderr so stdout stays pipeable.

Usage:
    python -m chunkstream local ./docs --kind section --workers 8
    python -m chunkstream s3 --bucket my-bucket --prefix notes/ --kind paragraph

Dependencies: argparse, python-dotenv
System role: CLI entry point
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

from chunkstream.configs import get_settings
from chunkstream.core.exceptions import SourceListingError
from chunkstream.core.ingestion import DocumentReader, create_local_reader, create_s3_reader
from chunkstream.observability import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chunkstream",
        description="Stream paragraphs or markdown sections from a local directory or S3",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (defaults to LOG_LEVEL setting)",
    )
    subparsers = parser.add_subparsers(dest="source", required=True)

    local = subparsers.add_parser("local", help="Read files from a local directory")
    local.add_argument(
        "directory",
        nargs="?",
        default=None,
        help="Directory to read (defaults to LOCAL_SOURCE_DIRECTORY)",
    )

    s3 = subparsers.add_parser("s3", help="Read objects under an S3 prefix")
    s3.add_argument("--bucket", default=None, help="Bucket (defaults to S3_SOURCE_BUCKET)")
    s3.add_argument("--prefix", default=None, help="Key prefix (defaults to S3_SOURCE_PREFIX)")
    s3.add_argument("--start-token", default=None, help="Continuation token to resume listing")

    for sub in (local, s3):
        sub.add_argument(
            "--kind",
            choices=["paragraph", "section"],
            default="paragraph",
            help="paragraph reads .txt items, section reads .md items",
        )
        sub.add_argument("--workers", type=int, default=None, help="Worker thread count")
        sub.add_argument("--suffix", default=None, help="Override the item suffix filter")

    return parser


def build_reader(args: argparse.Namespace) -> DocumentReader:
    if args.source == "local":
        return create_local_reader(args.directory)
    return create_s3_reader(args.bucket, prefix=args.prefix, start_token=args.start_token)


def main(argv: list[str] | None = None) -> int:
    """
    Run one ingestion and print its units.

    Args:
        argv: Command-line arguments (sys.argv[1:] if None)

    Returns:
        int: Exit code, 0 on success, 1 when the source cannot be listed,
            2 for invalid arguments
    """
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.workers is not None and args.workers < 1:
        parser.error("--workers must be a positive integer")

    configure_logging(args.log_level or get_settings().effective_log_level, stream=sys.stderr)

    reader = build_reader(args)
    try:
        run = reader.read(args.kind, worker_count=args.workers, suffix=args.suffix)
    except SourceListingError as e:
        logger.error(f"{__name__}:main - {e}")
        return 1

    with run:
        report = run.drain(lambda unit: print(unit.model_dump_json(), flush=True))

    print(report.model_dump_json(indent=2), file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
