#!/usr/bin/env python

"""Command line interface: docker-retag [flags] <image> <new tag> ..."""

import argparse
import asyncio
import logging
import os
import sys

from typing import List, Optional

from .config import RetagConfig
from .errors import RetagError
from .registryclient import RegistryClient
from .retag import retag

LOGGER = logging.getLogger(__name__)


def get_parser() -> argparse.ArgumentParser:
    """Builds the argument parser."""
    parser = argparse.ArgumentParser(
        prog="docker-retag",
        usage="docker-retag [flags] <image> <new tag> ...",
        description="Retags a docker image by republishing its manifest.",
    )
    parser.add_argument("-u", dest="username", default="", help="Username for registry")
    parser.add_argument("-p", dest="password", default="", help="Password for registry")
    parser.add_argument(
        "-P",
        action="store_true",
        dest="password_stdin",
        help="Read password from stdin",
    )
    parser.add_argument(
        "-v", action="store_true", dest="version", help="Print version and exit"
    )
    parser.add_argument("images", nargs="*", help=argparse.SUPPRESS)
    return parser


def configure_logging(level: str = None):
    """
    Configures the root logger.

    Args:
        level: Name of the logging level; unrecognized names fall back to INFO.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", "")
    value = logging.getLevelName(level.upper()) if level else None
    if not isinstance(value, int):
        value = logging.INFO
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s: %(message)s", level=value
    )


async def run(source: str, targets: List[str], config: RetagConfig) -> bool:
    """
    Retags a source image to each target reference.

    Returns:
        True if every target was published, False otherwise.
    """
    async with RegistryClient(config=config) as client:
        try:
            result = await retag(source, targets, client=client)
        except RetagError as exception:
            LOGGER.error("Unable to retag %s: %s", source, exception)
            return False
    return result.result


def main(argv: Optional[List[str]] = None) -> int:
    """
    Command line entry point.

    Args:
        argv: Arguments to parse instead of sys.argv.

    Returns:
        The process exit code.
    """
    configure_logging()
    parser = get_parser()
    args = parser.parse_args(argv)

    if args.version:
        from . import __version__  # pylint: disable=import-outside-toplevel

        print(f"docker-retag version: {__version__}")
        return 0
    if len(args.images) < 2:
        parser.print_help(sys.stdout)
        return 1

    password = args.password
    if args.password_stdin:
        password = sys.stdin.read().strip()

    config = RetagConfig.from_environment(username=args.username, password=password)
    LOGGER.debug("Retagging %s to: %s", args.images[0], args.images[1:])
    try:
        success = asyncio.run(run(args.images[0], args.images[1:], config))
    except ValueError as exception:
        LOGGER.error("Invalid image reference: %s", exception)
        return 1
    return 0 if success else 1
