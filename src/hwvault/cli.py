"""
Command-line front end: print a snapshot or summary of this machine as JSON.

    hwvault [--summary] [--indent N] [--timeout S] [--dataset-dir DIR] [--log-level L]
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from . import __version__
from .config import load_config
from .exceptions import AggregationError
from .hardware.aggregator import SnapshotAggregator
from .hardware.local_probe import LocalProbe
from .hardware.system_info import default_registry
from .utils.logging_config import LOG_LEVELS, setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hwvault",
        description="Collect a hardware inventory snapshot of this machine and print it as JSON",
    )
    parser.add_argument("--summary", action="store_true", help="Print only the flat system summary")
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")
    parser.add_argument("--timeout", type=float, help="Seconds each component probe may run")
    parser.add_argument("--dataset-dir", help="Directory holding the reference JSON datasets")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="Log level for stderr output")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the CLI.

    Returns:
        Exit code: 0 on success, 1 when no snapshot could be collected,
        2 for invalid settings
    """
    args = build_parser().parse_args(argv)

    try:
        settings = load_config({
            "probe_timeout": args.timeout,
            "dataset_dir": args.dataset_dir,
            "log_level": args.log_level,
        })
    except ValidationError as e:
        print(f"hwvault: invalid settings:\n{e}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level)

    aggregator = SnapshotAggregator(LocalProbe(), default_registry(settings.dataset_dir), settings)
    try:
        snapshot, summary = asyncio.run(aggregator.summarize())
    except AggregationError as e:
        logger.error(str(e))
        for kind, error in e.failures.items():
            logger.error(f"  {kind}: {error}")
        return 1

    document = summary if args.summary else snapshot
    print(document.model_dump_json(indent=args.indent if args.indent > 0 else None))
    return 0


if __name__ == "__main__":
    sys.exit(main())
