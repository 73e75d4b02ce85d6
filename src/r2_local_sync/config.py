#!/usr/bin/env python3
"""
Sync Configuration

Credentials loading and per-run options for syncing an R2 bucket into the
local Wrangler state directory.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .constants import (
    DEFAULT_SCRATCH_DIR,
    DEFAULT_WRANGLER_DIR,
    R2_ENDPOINT_TEMPLATE,
    R2_STATE_SUBPATH,
    REQUIRED_ENV_VARS,
    WRANGLER_STATE_DIR,
)
from .exceptions import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class R2Credentials:
    """Credentials for the remote R2 account."""

    account_id: str
    access_key_id: str
    secret_access_key: str

    @property
    def endpoint_url(self) -> str:
        return r2_endpoint_url(self.account_id)


@dataclass(frozen=True)
class SyncOptions:
    """Options for a single sync run."""

    bucket_name: str
    force: bool = False
    clean: bool = False
    wrangler_dir: Path = DEFAULT_WRANGLER_DIR
    scratch_dir: Path = DEFAULT_SCRATCH_DIR

    @property
    def persist_dir(self) -> Path:
        """Directory passed to wrangler as --persist-to."""
        return self.wrangler_dir / WRANGLER_STATE_DIR

    @property
    def r2_state_dir(self) -> Path:
        return self.persist_dir.joinpath(*R2_STATE_SUBPATH)

    @property
    def mode(self) -> str:
        if self.clean:
            return "clean"
        if self.force:
            return "force"
        return "normal"


def r2_endpoint_url(account_id: str) -> str:
    """Build the S3-compatible endpoint for an R2 account."""
    return R2_ENDPOINT_TEMPLATE.format(account_id=account_id)


def load_env_file(env_file: Path | None = None) -> bool:
    """Load variables from a .env file (default ./.env) without overriding the environment.

    Returns:
        True if a .env file was found and loaded
    """
    env_file = env_file or Path(".env")
    loaded = load_dotenv(dotenv_path=env_file, override=False)
    if loaded:
        logger.debug(f"Loaded environment from {env_file}")
    return loaded


def load_credentials(environ: Mapping[str, str] | None = None) -> R2Credentials:
    """
    Read the R2 credentials from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        R2Credentials built from the CLOUDFLARE_* variables

    Raises:
        ConfigError: If any required variable is missing or empty; lists every missing name
    """
    env = os.environ if environ is None else environ
    missing = [name for name in REQUIRED_ENV_VARS if not env.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}", missing=missing)

    return R2Credentials(
        account_id=env["CLOUDFLARE_ACCOUNT_ID"],
        access_key_id=env["CLOUDFLARE_ACCESS_KEY_ID"],
        secret_access_key=env["CLOUDFLARE_SECRET_ACCESS_KEY"],
    )
