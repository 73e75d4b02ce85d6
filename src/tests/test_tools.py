#!/usr/bin/env python3
"""
Tests for running wrangler through the tool runner.
"""

import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from r2_local_sync.exceptions import RuntimeUnavailableError, ToolError, UploadError
from r2_local_sync.tools import SubprocessToolRunner, check_wrangler_available, upload_object_to_local
from tests.test_utils.remote_mocks import FakeToolRunner


class TestSubprocessToolRunner:
    @pytest.mark.asyncio
    async def test_returns_stdout(self):
        output = await SubprocessToolRunner().run(sys.executable, ["-c", "print('hello')"])

        assert output.strip() == "hello"

    @pytest.mark.asyncio
    async def test_non_zero_exit_raises_tool_error(self):
        runner = SubprocessToolRunner()

        with pytest.raises(ToolError) as exc_info:
            await runner.run(sys.executable, ["-c", "import sys; sys.stderr.write('boom'); sys.exit(3)"])

        assert exc_info.value.returncode == 3
        assert "boom" in exc_info.value.stderr
        assert "code 3" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_missing_command_raises_tool_error(self):
        with patch("r2_local_sync.tools.subprocess.run", side_effect=FileNotFoundError()):
            with pytest.raises(ToolError, match="Command not found: wrangler"):
                await SubprocessToolRunner().run("wrangler", ["--version"])

    @pytest.mark.asyncio
    async def test_timeout_raises_tool_error(self):
        with patch(
            "r2_local_sync.tools.subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="npx", timeout=1)
        ):
            with pytest.raises(ToolError, match="timed out"):
                await SubprocessToolRunner(timeout=1).run("npx", ["wrangler"])

    @pytest.mark.asyncio
    async def test_arguments_are_not_shell_interpreted(self):
        with patch("r2_local_sync.tools.subprocess.run") as mock_run:
            mock_run.return_value = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")

            await SubprocessToolRunner().run("npx", ["wrangler", "bucket/key with spaces; rm -rf"])

        args, kwargs = mock_run.call_args
        assert args[0] == ["npx", "wrangler", "bucket/key with spaces; rm -rf"]
        assert "shell" not in kwargs


class TestCheckWranglerAvailable:
    @pytest.mark.asyncio
    async def test_returns_version(self):
        runner = FakeToolRunner()

        assert await check_wrangler_available(runner) == "3.114.0"
        assert runner.calls == [("npx", ["wrangler", "--version"])]

    @pytest.mark.asyncio
    async def test_unavailable_raises_runtime_unavailable(self):
        with pytest.raises(RuntimeUnavailableError, match="npm install -g wrangler"):
            await check_wrangler_available(FakeToolRunner(unavailable=True))


class TestUploadObjectToLocal:
    @pytest.mark.asyncio
    async def test_invokes_wrangler_object_put(self, tmp_path):
        file_path = tmp_path / "a.txt"
        file_path.write_bytes(b"alpha")
        runner = FakeToolRunner()

        await upload_object_to_local(runner, "bucket", "dir/a.txt", file_path, Path(".wrangler/state"))

        assert runner.calls == [
            (
                "npx",
                [
                    "wrangler",
                    "r2",
                    "object",
                    "put",
                    "bucket/dir/a.txt",
                    "--file",
                    str(file_path),
                    "--local",
                    "--persist-to",
                    ".wrangler/state",
                ],
            )
        ]
        assert runner.uploads == [("bucket", "dir/a.txt", b"alpha")]

    @pytest.mark.asyncio
    async def test_failure_raises_upload_error(self, tmp_path):
        file_path = tmp_path / "a.txt"
        file_path.write_bytes(b"alpha")

        with pytest.raises(UploadError, match="a.txt"):
            await upload_object_to_local(
                FakeToolRunner(fail_on=["a.txt"]), "bucket", "a.txt", file_path, tmp_path / "state"
            )
