"""Command-line entry point for the media diet pipeline and read API."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import uvicorn
from dotenv import load_dotenv

from .api import create_app
from .config import Config, load_config
from .errors import MediaDietError
from .pipeline import Pipeline

LOGGER = logging.getLogger("media_diet")

COMMANDS = ("run", "serve")


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable debug logging")
    common.add_argument("--data-dir", type=Path, help="Optional override for the data directory")

    parser = argparse.ArgumentParser(description="Sync Letterboxd and Goodreads history into JSON")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("run", parents=[common], help="Fetch both feeds and persist changes")
    serve_parser = subparsers.add_parser("serve", parents=[common], help="Serve the persisted JSON over HTTP")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Interface to bind")
    serve_parser.add_argument("--port", type=int, help="Port to listen on (defaults to PORT)")

    argv = list(sys.argv[1:] if argv is None else argv)
    # "run" is the default command.
    if not argv or (argv[0] not in COMMANDS and argv[0] not in ("-h", "--help")):
        argv.insert(0, "run")
    return parser.parse_args(argv)


def serve(config: Config, host: str, port: Optional[int] = None) -> None:
    port = port or config.port
    LOGGER.info("Media Diet API listening on %s", port)
    uvicorn.run(create_app(config), host=host, port=port)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    config = load_config()
    if args.data_dir:
        config = replace(config, data_dir=args.data_dir)

    if args.command == "serve":
        serve(config, args.host, args.port)
        return 0

    try:
        result = Pipeline(config).run()
    except MediaDietError as exc:
        LOGGER.error("Run aborted: %s", exc)
        return 1
    LOGGER.info("Run finished: %s", result.outcome.value)
    return 0


if __name__ == "__main__":
    sys.exit(main())
