"""Sync a remote Cloudflare R2 bucket into local Wrangler R2 storage."""

__version__ = "0.1.0"
