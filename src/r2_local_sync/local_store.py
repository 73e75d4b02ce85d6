#!/usr/bin/env python3
"""
Local Wrangler R2 Store

Locates and reads the Miniflare SQLite database that backs a local R2 bucket.

Miniflare names each bucket's database after a durable object namespace id
derived from the bucket name, so the database for a bucket can be found
without asking wrangler. The derivation must match Miniflare exactly; a
different id points at a file that does not exist and the bucket looks empty.
"""

import hashlib
import hmac
import logging
import shutil
import sqlite3
from pathlib import Path

from .constants import (
    DATABASE_SUFFIX,
    DEFAULT_WRANGLER_DIR,
    KEY_COLUMN,
    MINIFLARE_KEY,
    OBJECTS_TABLE,
    R2_STATE_SUBPATH,
    WRANGLER_STATE_DIR,
)
from .database import connect_readonly, validate_table_columns
from .exceptions import LocalListError

logger = logging.getLogger(__name__)


def durable_object_namespace_id_from_name(unique_key: str, name: str) -> str:
    """
    Derive the Miniflare durable object id for a named resource.

    Args:
        unique_key: Miniflare unique key for the resource type (MINIFLARE_KEY for R2)
        name: Resource name, i.e. the bucket name

    Returns:
        str: 64 lowercase hex characters (16-byte name digest followed by a 16-byte MAC)
    """
    key = hashlib.sha256(unique_key.encode("utf-8")).digest()
    name_digest = hmac.new(key, name.encode("utf-8"), hashlib.sha256).digest()[:16]
    mac = hmac.new(key, name_digest, hashlib.sha256).digest()[:16]
    return (name_digest + mac).hex()


class LocalStore:
    """Read access to the local R2 state kept under a .wrangler directory."""

    def __init__(self, wrangler_dir: str | Path = DEFAULT_WRANGLER_DIR):
        self.wrangler_dir = Path(wrangler_dir)

    @property
    def r2_root(self) -> Path:
        """Root of all local R2 state; removed entirely in clean mode."""
        return self.wrangler_dir.joinpath(WRANGLER_STATE_DIR, *R2_STATE_SUBPATH)

    @property
    def objects_dir(self) -> Path:
        return self.r2_root / MINIFLARE_KEY

    def database_path(self, bucket_name: str) -> Path:
        database_id = durable_object_namespace_id_from_name(MINIFLARE_KEY, bucket_name)
        return self.objects_dir / f"{database_id}{DATABASE_SUFFIX}"

    async def list_object_keys(self, bucket_name: str) -> set[str]:
        """
        Return the keys of all objects stored locally for a bucket.

        A missing state directory or database means nothing has been synced
        yet. Unreadable databases are reported and treated the same way, since
        a failed local listing only means more objects get transferred.
        """
        if not self.objects_dir.exists():
            logger.warning(f"Miniflare R2 directory does not exist: {self.objects_dir}")
            return set()

        db_path = self.database_path(bucket_name)
        if not db_path.exists():
            logger.warning(f"No SQLite database found for bucket '{bucket_name}' (expected {db_path})")
            return set()

        try:
            return await self._read_keys(db_path)
        except (LocalListError, sqlite3.Error) as e:
            logger.warning(f"Failed to list local objects: {e}")
            logger.warning("This might be normal if the local R2 bucket is empty or doesn't exist yet")
            return set()

    async def _read_keys(self, db_path: Path) -> set[str]:
        logger.info(f"Reading from SQLite database: {db_path}")
        async with connect_readonly(db_path) as conn:
            await validate_table_columns(conn, OBJECTS_TABLE, [KEY_COLUMN])
            async with conn.execute(f"SELECT {KEY_COLUMN} FROM {OBJECTS_TABLE}") as cursor:
                rows = await cursor.fetchall()
        return {row[0] for row in rows if row[0]}

    def clean(self) -> bool:
        """
        Delete all local R2 state for every bucket.

        Returns:
            True if state was removed, False if there was nothing to remove
        """
        if not self.r2_root.exists():
            logger.warning(f"Local R2 state does not exist: {self.r2_root}")
            return False

        shutil.rmtree(self.r2_root)
        logger.info(f"Removed local R2 state: {self.r2_root}")
        return True
