#!/usr/bin/env python3
"""
Constants for r2-local-sync.

Centralized constants shared by the remote, local and CLI modules.
"""

from pathlib import Path

# Credentials required to talk to the remote R2 bucket
REQUIRED_ENV_VARS = (
    "CLOUDFLARE_ACCOUNT_ID",
    "CLOUDFLARE_ACCESS_KEY_ID",
    "CLOUDFLARE_SECRET_ACCESS_KEY",
)

R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"
R2_REGION = "auto"

# ListObjectsV2 page size
LIST_PAGE_SIZE = 1000

# Working directories
DEFAULT_WRANGLER_DIR = Path(".wrangler")
DEFAULT_SCRATCH_DIR = Path("temp-r2-sync")

# Miniflare persistence layout: <wrangler_dir>/state/v3/r2/<MINIFLARE_KEY>/<id>.sqlite
# The unique key doubles as the directory name and as the namespace for database ids.
MINIFLARE_KEY = "miniflare-R2BucketObject"
WRANGLER_STATE_DIR = "state"
R2_STATE_SUBPATH = ("v3", "r2")
DATABASE_SUFFIX = ".sqlite"
OBJECTS_TABLE = "_mf_objects"
KEY_COLUMN = "key"

# External tooling
WRANGLER_COMMAND = ("npx", "wrangler")
WRANGLER_INSTALL_HINT = "npm install -g wrangler"
