"""Execution context for testability."""

import os
import platform
import subprocess
from pathlib import Path


class Context:
    """
    Wraps external calls for testability.

    In production: executes real commands
    In tests: can be replaced with MockContext
    """

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        timeout: int | None = 60,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """
        Run a command and return result.

        Args:
            cmd: Command and arguments as list
            check: Raise on non-zero exit code
            timeout: Timeout in seconds
            **kwargs: Additional subprocess.run arguments

        Returns:
            CompletedProcess with stdout, stderr, returncode
        """
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=check,
            timeout=timeout,
            **kwargs,
        )

    def spawn(self, cmd: list[str]) -> subprocess.Popen:
        """
        Start a command in its own session without waiting for it.

        The child leads a new process group, so the whole group can be
        signalled with os.killpg(proc.pid, ...). Output is discarded.
        """
        return subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )

    def kill_group(self, pgid: int, sig: int) -> None:
        """Send a signal to every process in a process group."""
        os.killpg(pgid, sig)

    def read_file(self, path: str) -> str:
        """Read file contents."""
        return Path(path).read_text()

    def file_exists(self, path: str) -> bool:
        """Check if file exists."""
        return Path(path).exists()

    def is_executable(self, path: str) -> bool:
        """Check if path is a file the current user may execute."""
        return os.path.isfile(path) and os.access(path, os.X_OK)

    def is_readable(self, path: str) -> bool:
        """Check if path can be opened for reading."""
        return os.access(path, os.R_OK)

    def system(self) -> str:
        """Operating system name, lowercased (e.g. 'aix', 'linux')."""
        return platform.system().lower()
