"""
Read-only SQLite access for the Miniflare object databases.
"""

from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from .exceptions import LocalListError


def readonly_uri(db_path: str | Path) -> str:
    """Build a SQLite URI that opens the database without write access."""
    return f"{Path(db_path).resolve().as_uri()}?mode=ro"


@asynccontextmanager
async def connect_readonly(db_path: str | Path, timeout: float = 5.0) -> AsyncGenerator[aiosqlite.Connection, None]:
    """Open an existing database read-only.

    No pragmas are issued: the emulator may hold the file open, and journal
    mode changes would write to it.
    """
    async with aiosqlite.connect(readonly_uri(db_path), uri=True, timeout=timeout) as conn:
        yield conn


async def validate_table_columns(conn: aiosqlite.Connection, table: str, columns: Iterable[str]) -> None:
    """
    Check that a table exists and carries the expected columns.

    Raises:
        LocalListError: If the table or any column is missing
    """
    async with conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name = ?", (table,)) as cursor:
        if await cursor.fetchone() is None:
            raise LocalListError(f"Table '{table}' not found in database")

    async with conn.execute(f"PRAGMA table_info({table})") as cursor:
        present = {row[1] for row in await cursor.fetchall()}

    missing = [column for column in columns if column not in present]
    if missing:
        raise LocalListError(f"Table '{table}' is missing required columns: {missing}")
