#!/usr/bin/env python3
"""
External Tool Execution

Runs the wrangler CLI, which owns the write path into the local R2 store.
Commands go through a ToolRunner so sync logic can be exercised with a fake
runner instead of real subprocesses.
"""

import asyncio
import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .constants import WRANGLER_COMMAND, WRANGLER_INSTALL_HINT
from .exceptions import RuntimeUnavailableError, ToolError, UploadError

logger = logging.getLogger(__name__)


class ToolRunner(Protocol):
    async def run(self, name: str, args: Sequence[str]) -> str:
        """Run a command and return its stdout; raise ToolError on failure."""
        ...


class SubprocessToolRunner:
    """Runs commands as subprocesses, one at a time."""

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout

    async def run(self, name: str, args: Sequence[str]) -> str:
        command = [name, *args]
        logger.debug(f"Running: {' '.join(command)}")

        loop = asyncio.get_event_loop()

        def _run_command() -> str:
            try:
                result = subprocess.run(command, capture_output=True, text=True, check=True, timeout=self.timeout)
            except FileNotFoundError:
                raise ToolError(f"Command not found: {name}") from None
            except subprocess.CalledProcessError as e:
                raise ToolError(
                    f"Command failed with code {e.returncode}: {(e.stderr or '').strip()}",
                    returncode=e.returncode,
                    stderr=e.stderr or "",
                ) from e
            except subprocess.TimeoutExpired:
                raise ToolError(f"Command timed out after {self.timeout} seconds: {name}") from None
            return result.stdout

        return await loop.run_in_executor(None, _run_command)


async def run_wrangler(runner: ToolRunner, args: Sequence[str]) -> str:
    name, *prefix = WRANGLER_COMMAND
    return await runner.run(name, [*prefix, *args])


async def check_wrangler_available(runner: ToolRunner) -> str:
    """
    Verify that the wrangler CLI can be executed.

    Returns:
        str: The reported wrangler version

    Raises:
        RuntimeUnavailableError: If wrangler cannot be run
    """
    try:
        output = await run_wrangler(runner, ["--version"])
    except ToolError as e:
        logger.error(f"Wrangler CLI is not available: {e}")
        raise RuntimeUnavailableError(
            f"Wrangler CLI is not available or not in PATH. Please install Wrangler: {WRANGLER_INSTALL_HINT}"
        ) from e

    version = output.strip()
    logger.info(f"Wrangler CLI is available ({version})")
    return version


async def upload_object_to_local(
    runner: ToolRunner, bucket_name: str, key: str, file_path: Path, persist_dir: Path
) -> None:
    """
    Put a file into the local R2 bucket through wrangler.

    Raises:
        UploadError: If wrangler exits non-zero
    """
    args = [
        "r2",
        "object",
        "put",
        f"{bucket_name}/{key}",
        "--file",
        str(file_path),
        "--local",
        "--persist-to",
        str(persist_dir),
    ]
    try:
        await run_wrangler(runner, args)
    except ToolError as e:
        logger.error(f"Failed to upload {key} to local: {e}")
        raise UploadError(f"Failed to upload {key} to local bucket '{bucket_name}': {e}") from e

    logger.info(f"Uploaded to local: {key}")
