"""Tests for Context execution wrapper."""

import os
import signal
import stat

import pytest

from mountcheck.core.context import Context


class TestContext:
    """Tests for execution context."""

    def test_run_executes_command(self):
        """run() executes command and returns result."""
        ctx = Context()
        result = ctx.run(["echo", "hello"])
        assert result.returncode == 0
        assert "hello" in result.stdout

    def test_read_file_returns_content(self, tmp_path):
        """read_file() returns file content."""
        test_file = tmp_path / "fstab"
        test_file.write_text("/dev/sda1 / ext4 defaults 0 1\n")
        ctx = Context()
        assert ctx.read_file(str(test_file)).startswith("/dev/sda1")

    def test_read_file_raises_on_missing(self):
        """read_file() raises FileNotFoundError for missing files."""
        with pytest.raises(FileNotFoundError):
            Context().read_file("/nonexistent_file_xyz")

    def test_is_executable(self, tmp_path):
        """is_executable() needs a regular file with the execute bit."""
        tool = tmp_path / "lsfs"
        tool.write_text("#!/bin/sh\n")
        ctx = Context()

        assert ctx.is_executable(str(tool)) is False
        tool.chmod(tool.stat().st_mode | stat.S_IXUSR)
        assert ctx.is_executable(str(tool)) is True
        assert ctx.is_executable(str(tmp_path)) is False

    def test_file_exists(self, tmp_path):
        """file_exists() reflects the filesystem."""
        ctx = Context()
        assert ctx.file_exists(str(tmp_path)) is True
        assert ctx.file_exists(str(tmp_path / "missing")) is False

    def test_spawn_starts_new_process_group(self):
        """spawn() makes the child leader of its own process group."""
        ctx = Context()
        proc = ctx.spawn(["sleep", "30"])
        try:
            assert os.getpgid(proc.pid) == proc.pid
            assert os.getpgid(proc.pid) != os.getpgrp()
        finally:
            ctx.kill_group(proc.pid, signal.SIGKILL)
            proc.wait(timeout=5)

    def test_kill_group_missing_raises(self):
        """Signalling a group that no longer exists raises ProcessLookupError."""
        ctx = Context()
        proc = ctx.spawn(["true"])
        proc.wait(timeout=5)

        with pytest.raises(ProcessLookupError):
            ctx.kill_group(proc.pid, signal.SIGKILL)

    def test_system_is_lowercase(self):
        """system() returns a lowercase OS name."""
        name = Context().system()
        assert name == name.lower()
        assert name
