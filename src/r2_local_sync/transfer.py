#!/usr/bin/env python3
"""
Transfer Pipeline

Moves objects from the remote bucket into the local store one at a time:
download into memory, write to a scratch file, hand the file to wrangler,
delete the scratch file.
"""

import logging
import shutil
from collections.abc import Sequence
from pathlib import Path, PurePosixPath

import aiofiles

from .exceptions import DownloadError, ScratchDirectoryError
from .remote import RemoteBucket, RemoteObject
from .tools import ToolRunner, upload_object_to_local

logger = logging.getLogger(__name__)


class ScratchDirectory:
    """Scratch space for downloads that is removed when the context exits.

    The directory is deleted on every exit path: normal completion, early
    return, or an exception propagating out of the block. An existing
    directory is only reused when it is empty.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    async def __aenter__(self) -> "ScratchDirectory":
        if self.path.exists():
            if not self.path.is_dir() or any(self.path.iterdir()):
                raise ScratchDirectoryError(f"Scratch directory must be empty or absent: {self.path}")
        else:
            self.path.mkdir(parents=True)
            logger.debug(f"Created scratch directory: {self.path}")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            self.remove()
        except OSError as e:
            if exc_type is None:
                raise
            logger.warning(f"Failed to remove scratch directory {self.path}: {e}")

    def remove(self) -> None:
        if self.path.exists():
            shutil.rmtree(self.path)
            logger.debug(f"Cleaned up scratch directory: {self.path}")

    def path_for(self, key: str) -> Path:
        """Scratch file path mirroring the object key's hierarchy.

        Leading slashes are dropped so "/logs/a.txt" lands at <root>/logs/a.txt.
        """
        root = self.path.resolve()
        file_path = root.joinpath(*PurePosixPath(key.lstrip("/")).parts).resolve()
        if file_path == root or not file_path.is_relative_to(root):
            raise DownloadError(f"Object key resolves outside the scratch directory: {key}")
        return file_path


async def write_scratch_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(path, "wb") as f:
        await f.write(data)


async def transfer_object(
    remote: RemoteBucket, key: str, scratch: ScratchDirectory, runner: ToolRunner, persist_dir: Path
) -> int:
    """Copy one object into the local store and return its size in bytes."""
    file_path = scratch.path_for(key)
    data = await remote.download(key)
    await write_scratch_file(file_path, data)
    logger.info(f"Downloaded: {key}")

    await upload_object_to_local(runner, remote.bucket_name, key, file_path, persist_dir)

    file_path.unlink(missing_ok=True)
    return len(data)


async def transfer_objects(
    remote: RemoteBucket,
    objects: Sequence[RemoteObject],
    scratch: ScratchDirectory,
    runner: ToolRunner,
    persist_dir: Path,
) -> int:
    """
    Transfer objects sequentially in the given order.

    The first failure stops the batch; objects already transferred stay in
    the local store.

    Returns:
        int: Total bytes transferred

    Raises:
        DownloadError: If an object cannot be downloaded
        UploadError: If wrangler fails to store an object
    """
    total = len(objects)
    bytes_transferred = 0

    for processed, obj in enumerate(objects, 1):
        print(f"[{processed}/{total}] Processing: {obj.key}", flush=True)
        bytes_transferred += await transfer_object(remote, obj.key, scratch, runner, persist_dir)

    return bytes_transferred
