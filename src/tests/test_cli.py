#!/usr/bin/env python3
"""
Tests for the r2-local-sync command line interface.
"""

from contextlib import asynccontextmanager
from pathlib import Path
from unittest.mock import patch

import pytest

from r2_local_sync.cli import create_parser, main, run_sync
from r2_local_sync.config import SyncOptions
from r2_local_sync.constants import REQUIRED_ENV_VARS
from tests.test_utils.remote_mocks import TEST_BUCKET, FakeToolRunner, create_s3_client_mock


@pytest.fixture(autouse=True)
def isolated_cli(monkeypatch, tmp_path):
    """Run each CLI test from an empty directory without reconfiguring logging."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr("r2_local_sync.cli.setup_logging", lambda *args, **kwargs: None)
    for name in REQUIRED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _patch_client(objects):
    client = create_s3_client_mock(objects)

    @asynccontextmanager
    async def fake_create_r2_client(credentials):
        yield client

    return patch("r2_local_sync.cli.create_r2_client", fake_create_r2_client)


class TestParser:
    def test_defaults(self):
        args = create_parser().parse_args([TEST_BUCKET])

        assert args.bucket_name == TEST_BUCKET
        assert args.force is False
        assert args.clean is False
        assert args.wrangler_dir == Path(".wrangler")
        assert args.scratch_dir == Path("temp-r2-sync")

    def test_wrangler_dir_with_equals(self):
        args = create_parser().parse_args([TEST_BUCKET, "--wrangler-dir=../app/.wrangler", "--force", "--clean"])

        assert args.wrangler_dir == Path("../app/.wrangler")
        assert args.force is True
        assert args.clean is True


class TestMain:
    @pytest.mark.parametrize("flag", ["--help", "-h"])
    def test_help_exits_zero(self, flag, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([flag])

        assert exc_info.value.code == 0
        assert "CLOUDFLARE_ACCOUNT_ID" in capsys.readouterr().out

    def test_missing_bucket_name_prints_usage_and_exits_zero(self, capsys):
        assert main([]) == 0

        out = capsys.readouterr().out
        assert "Bucket name is required" in out
        assert "usage:" in out

    def test_missing_credentials_exit_one_and_list_names(self, capsys, monkeypatch):
        monkeypatch.setenv("CLOUDFLARE_ACCOUNT_ID", "abc")

        assert main([TEST_BUCKET]) == 1

        out = capsys.readouterr().out
        assert "CLOUDFLARE_ACCESS_KEY_ID" in out
        assert "CLOUDFLARE_SECRET_ACCESS_KEY" in out
        assert "  - CLOUDFLARE_ACCOUNT_ID" not in out

    def test_credentials_from_dotenv_file(self, tmp_path, credentials_env, monkeypatch):
        for name in REQUIRED_ENV_VARS:
            monkeypatch.delenv(name)
        (tmp_path / ".env").write_text("\n".join(f"{k}={v}" for k, v in credentials_env.items()) + "\n")
        runner = FakeToolRunner()

        with _patch_client({"a.txt": b"alpha"}), patch("r2_local_sync.cli.SubprocessToolRunner", return_value=runner):
            assert main([TEST_BUCKET]) == 0

        assert runner.uploaded_keys == ["a.txt"]

    def test_mode_banner(self, capsys):
        main([TEST_BUCKET, "--force", "--clean"])

        assert "Clean mode enabled" in capsys.readouterr().out


class TestRunSync:
    @pytest.mark.asyncio
    async def test_successful_run(self, credentials_env, tmp_path, capsys):
        runner = FakeToolRunner()
        sync_options = SyncOptions(bucket_name=TEST_BUCKET)

        with _patch_client({"a.txt": b"alpha", "b/c.txt": b"charlie"}):
            assert await run_sync(sync_options, runner) == 0

        assert runner.uploaded_keys == ["a.txt", "b/c.txt"]
        assert "Successfully synced 2 objects" in capsys.readouterr().out
        assert not (tmp_path / "temp-r2-sync").exists()

    @pytest.mark.asyncio
    async def test_wrangler_unavailable_exits_one(self, credentials_env, capsys):
        runner = FakeToolRunner(unavailable=True)

        with _patch_client({"a.txt": b"alpha"}):
            assert await run_sync(SyncOptions(bucket_name=TEST_BUCKET), runner) == 1

        assert "Wrangler CLI is not available" in capsys.readouterr().out
        assert runner.uploads == []

    @pytest.mark.asyncio
    async def test_sync_failure_exits_one_and_cleans_up(self, credentials_env, tmp_path, capsys):
        runner = FakeToolRunner(fail_on=["a.txt"])

        with _patch_client({"a.txt": b"alpha"}):
            assert await run_sync(SyncOptions(bucket_name=TEST_BUCKET), runner) == 1

        assert "Sync failed" in capsys.readouterr().out
        assert not (tmp_path / "temp-r2-sync").exists()
