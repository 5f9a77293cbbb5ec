#!/usr/bin/env python3
"""
Command-line interface for NFT Viewer.

Usage:
    nft-viewer view --address <contract> [--token-id <id>] [--show]
    nft-viewer download --address <contract> [--token-id <id>]
"""

import argparse
import asyncio
import dataclasses
import sys
from typing import List, Optional

from nft_viewer import __version__
from nft_viewer.commands import open_pipeline
from nft_viewer.config import FAILURE_POLICIES, ViewerConfig, get_viewer_config
from nft_viewer.logging_config import configure_logging, get_logger
from nft_viewer.utils.errors import handle_cli_errors

logger = get_logger(__name__)


def token_id_type(value: str) -> int:
    """argparse type for a non-negative token id."""
    try:
        token_id = int(value, 0)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not a valid token id")
    if token_id < 0:
        raise argparse.ArgumentTypeError(f"token id must be non-negative: {value}")
    return token_id


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="nft-viewer",
        description="View and download ERC-721 collection metadata and images"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Logging level (default from NFT_VIEWER_LOG_LEVEL)")
    parser.add_argument("--policy", choices=FAILURE_POLICIES,
                        help="Batch failure policy (default from NFT_VIEWER_FAILURE_POLICY)")
    parser.add_argument("--concurrency", type=int,
                        help="Concurrent downloads under the collect policy")
    parser.add_argument("--output", help="Root directory for downloaded images")

    subparsers = parser.add_subparsers(dest="command", required=True)

    view = subparsers.add_parser("view", help="Show collection and token metadata")
    view.add_argument("-a", "--address", required=True, help="Collection contract address")
    view.add_argument("-t", "--token-id", type=token_id_type, help="Token to show")
    view.add_argument("-s", "--show", action="store_true", help="Render the token image")

    download = subparsers.add_parser("download", help="Save token images to disk")
    download.add_argument("-a", "--address", required=True, help="Collection contract address")
    download.add_argument("-t", "--token-id", type=token_id_type,
                          help="Token to save; omit to download the whole collection")

    return parser


def build_config(args: argparse.Namespace) -> ViewerConfig:
    """Apply command-line overrides to the environment configuration.

    Raises:
        ValueError: If the environment or an override is invalid
    """
    overrides = {}
    if args.log_level:
        overrides["log_level"] = args.log_level
    if args.policy:
        overrides["failure_policy"] = args.policy
    if args.concurrency is not None:
        overrides["batch_concurrency"] = args.concurrency
    if args.output:
        overrides["output_root"] = args.output
    return dataclasses.replace(get_viewer_config(), **overrides)


@handle_cli_errors
async def run(args: argparse.Namespace, config: ViewerConfig) -> int:
    """Execute a parsed command and return the exit status."""
    async with open_pipeline(args.address, config) as pipeline:
        if args.command == "view":
            await pipeline.view(args.token_id, args.show)
            return 0

        results = await pipeline.download(args.token_id)
        failures = [r for r in results if not r.ok]
        for result in failures:
            print(f"Token {result.token_id} failed: {result.error.message}")
        if failures:
            print(f"{len(failures)} of {len(results)} tokens failed")
            return 1
        return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    configure_logging(config.log_level)
    logger.debug(f"Running {args.command} with {config!r}")
    sys.exit(asyncio.run(run(args, config)))


if __name__ == "__main__":
    main()
