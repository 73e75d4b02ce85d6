#!/usr/bin/env python3
"""
R2 Local Sync Command Line Interface

Copies objects from a remote Cloudflare R2 bucket into the local Wrangler
(Miniflare) R2 store used by `wrangler dev`.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .common import format_bytes, format_duration, pluralize
from .config import SyncOptions, load_credentials, load_env_file
from .constants import DEFAULT_SCRATCH_DIR, DEFAULT_WRANGLER_DIR
from .exceptions import ConfigError, RuntimeUnavailableError
from .logging_config import setup_logging
from .remote import RemoteBucket, create_r2_client
from .sync import SyncSummary, sync_bucket
from .tools import SubprocessToolRunner, ToolRunner, check_wrangler_available

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="r2-local-sync",
        description="R2 Sync Tool: copy objects from a remote R2 bucket into local Wrangler R2 storage",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  r2-local-sync my-bucket                           # Sync only missing objects
  r2-local-sync my-bucket --force                   # Force sync all objects
  r2-local-sync my-bucket --clean                   # Clean local bucket and sync all objects
  r2-local-sync my-bucket --wrangler-dir ../.wrangler  # Use custom .wrangler location

Environment Variables Required (may also be set in a .env file):
  CLOUDFLARE_ACCOUNT_ID
  CLOUDFLARE_ACCESS_KEY_ID
  CLOUDFLARE_SECRET_ACCESS_KEY
        """,
    )

    parser.add_argument("bucket_name", nargs="?", help="Name of the R2 bucket to sync")
    parser.add_argument("--force", action="store_true", help="Force sync all objects (overwrite existing)")
    parser.add_argument(
        "--clean",
        action="store_true",
        help="Clean local bucket before syncing (delete all local objects first)",
    )
    parser.add_argument(
        "--wrangler-dir",
        type=Path,
        default=DEFAULT_WRANGLER_DIR,
        help=f"Custom location of .wrangler directory (default: ./{DEFAULT_WRANGLER_DIR})",
    )
    parser.add_argument(
        "--scratch-dir",
        type=Path,
        default=DEFAULT_SCRATCH_DIR,
        help=f"Empty or new download directory, removed after every run (default: ./{DEFAULT_SCRATCH_DIR})",
    )
    parser.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default="WARNING")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")

    return parser


def print_mode(options: SyncOptions) -> None:
    print(f"Using wrangler directory: {options.wrangler_dir}")
    print(f"Using bucket name: {options.bucket_name}")
    if options.clean:
        print("Clean mode enabled - will delete all local objects first")
    elif options.force:
        print("Force mode enabled - will overwrite all objects")
    else:
        print("Normal mode - will sync only missing objects")


def print_summary(summary: SyncSummary) -> None:
    if summary.synced_count == 0:
        print(f"✓ Nothing to sync ({format_duration(summary.duration)})")
        return
    print(
        f"✓ Successfully synced {summary.synced_count} {pluralize(summary.synced_count, 'object')} "
        f"({format_bytes(summary.bytes_transferred)}) to local Wrangler in {format_duration(summary.duration)}"
    )


async def run_sync(options: SyncOptions, runner: ToolRunner | None = None) -> int:
    """Run pre-flight checks and the sync; return the process exit status."""
    try:
        credentials = load_credentials()
    except ConfigError as e:
        print("❌ Missing required environment variables:")
        for name in e.missing:
            print(f"  - {name}")
        print("\nPlease set these in your environment or in a .env file")
        return 1

    runner = runner or SubprocessToolRunner()
    try:
        await check_wrangler_available(runner)
    except RuntimeUnavailableError as e:
        print(f"❌ {e}")
        return 1

    print("Starting R2 sync to local Wrangler...")
    try:
        async with create_r2_client(credentials) as client:
            summary = await sync_bucket(options, RemoteBucket(client, options.bucket_name), runner)
    except Exception as e:
        logger.error(f"Sync failed: {e}", exc_info=True)
        print(f"❌ Sync failed: {e}")
        return 1

    print_summary(summary)
    return 0


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit status."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if not args.bucket_name:
        print("❌ Bucket name is required")
        parser.print_help()
        return 0

    load_env_file()
    setup_logging(args.log_level, args.log_file)

    options = SyncOptions(
        bucket_name=args.bucket_name,
        force=args.force,
        clean=args.clean,
        wrangler_dir=args.wrangler_dir,
        scratch_dir=args.scratch_dir,
    )
    print_mode(options)
    logger.info(f"SYNC STARTED - bucket={options.bucket_name} mode={options.mode} wrangler_dir={options.wrangler_dir}")

    try:
        return asyncio.run(run_sync(options))
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 1


def entry_point() -> None:
    """Console script entry point."""
    sys.exit(main())
