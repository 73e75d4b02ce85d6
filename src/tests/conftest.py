"""Shared test configuration utilities and fixtures."""

from pathlib import Path

import pytest

from r2_local_sync.config import SyncOptions
from r2_local_sync.remote import RemoteBucket
from tests.test_utils.remote_mocks import TEST_BUCKET, TEST_CREDENTIALS, FakeToolRunner, create_s3_client_mock


@pytest.fixture
def wrangler_dir(tmp_path) -> Path:
    return tmp_path / ".wrangler"


@pytest.fixture
def scratch_dir(tmp_path) -> Path:
    return tmp_path / "temp-r2-sync"


@pytest.fixture
def make_options(wrangler_dir, scratch_dir):
    """Build SyncOptions rooted in the test's temporary directory."""

    def _make(force: bool = False, clean: bool = False, bucket_name: str = TEST_BUCKET) -> SyncOptions:
        return SyncOptions(
            bucket_name=bucket_name,
            force=force,
            clean=clean,
            wrangler_dir=wrangler_dir,
            scratch_dir=scratch_dir,
        )

    return _make


@pytest.fixture
def remote_objects_data() -> dict[str, bytes]:
    return {
        "a.txt": b"alpha",
        "images/b.png": b"\x89PNG bravo",
        "docs/nested/c.json": b'{"charlie": true}',
    }


@pytest.fixture
def remote_bucket(remote_objects_data) -> RemoteBucket:
    return RemoteBucket(create_s3_client_mock(remote_objects_data), TEST_BUCKET)


@pytest.fixture
def tool_runner() -> FakeToolRunner:
    return FakeToolRunner()


@pytest.fixture
def credentials_env(monkeypatch):
    for name, value in TEST_CREDENTIALS.items():
        monkeypatch.setenv(name, value)
    return TEST_CREDENTIALS
