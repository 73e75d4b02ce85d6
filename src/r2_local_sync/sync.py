#!/usr/bin/env python3
"""
Sync Orchestration

Runs one sync of a remote R2 bucket into the local Wrangler store:
clean (optional), list remote, list local (normal mode only), reconcile,
transfer. The scratch directory is removed however the run ends.
"""

import logging
import time
from dataclasses import dataclass

from .common import format_bytes, pluralize
from .config import SyncOptions
from .local_store import LocalStore
from .reconcile import select_objects_to_sync
from .remote import RemoteBucket
from .tools import ToolRunner
from .transfer import ScratchDirectory, transfer_objects

logger = logging.getLogger(__name__)


@dataclass
class SyncSummary:
    """Outcome of a completed sync run."""

    remote_count: int = 0
    local_count: int = 0
    synced_count: int = 0
    bytes_transferred: int = 0
    duration: float = 0.0


async def sync_bucket(options: SyncOptions, remote: RemoteBucket, runner: ToolRunner) -> SyncSummary:
    """
    Sync the remote bucket into the local store.

    Args:
        options: Run options (bucket name, mode flags, directories)
        remote: Remote bucket to copy from
        runner: Runner used to invoke wrangler

    Returns:
        SyncSummary describing what was transferred

    Raises:
        RemoteListError, DownloadError, UploadError: On the first fatal failure,
            after the scratch directory has been removed
    """
    start_time = time.perf_counter()
    summary = SyncSummary()
    local_store = LocalStore(options.wrangler_dir)

    async with ScratchDirectory(options.scratch_dir) as scratch:
        if options.clean:
            print("Clean mode enabled - removing all local objects...", flush=True)
            local_store.clean()

        print(f"Listing objects in remote bucket: {options.bucket_name}...", flush=True)
        remote_objects = await remote.list_objects()
        summary.remote_count = len(remote_objects)

        if not remote_objects:
            logger.warning("No objects found in remote bucket")
            summary.duration = time.perf_counter() - start_time
            return summary

        print(f"Found {len(remote_objects)} {pluralize(len(remote_objects), 'object')} in remote bucket", flush=True)

        local_keys: set[str] = set()
        if not options.clean and not options.force:
            print("Listing objects in local Wrangler R2...", flush=True)
            local_keys = await local_store.list_object_keys(options.bucket_name)
            summary.local_count = len(local_keys)
            print(f"Found {len(local_keys)} {pluralize(len(local_keys), 'object')} in local bucket", flush=True)

        objects_to_sync = select_objects_to_sync(remote_objects, local_keys, force=options.force, clean=options.clean)
        if not objects_to_sync:
            print("All objects are already in sync!", flush=True)
            summary.duration = time.perf_counter() - start_time
            return summary

        print(f"Need to sync {len(objects_to_sync)} {pluralize(len(objects_to_sync), 'object')}", flush=True)
        summary.bytes_transferred = await transfer_objects(
            remote, objects_to_sync, scratch, runner, options.persist_dir
        )
        summary.synced_count = len(objects_to_sync)

    summary.duration = time.perf_counter() - start_time
    logger.info(
        f"Synced {summary.synced_count} {pluralize(summary.synced_count, 'object')} "
        f"({format_bytes(summary.bytes_transferred)}) from '{options.bucket_name}'"
    )
    return summary
