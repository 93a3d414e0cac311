"""Shared test fixtures."""

import signal
import subprocess
import sys
import time
from pathlib import Path

import pytest

# Add project root to path for package imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mountcheck.core.config import CheckConfig  # noqa: E402
from mountcheck.core.logging import ScriptLogger  # noqa: E402
from mountcheck.core.output import Output  # noqa: E402
from mountcheck.core.runner import CheckRun  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"

AIX_CONFIG = CheckConfig(platform="aix")
LINUX_CONFIG = CheckConfig(platform="linux")


class FakeProcess:
    """Stands in for subprocess.Popen in probe tests."""

    _next_pid = 40000

    def __init__(
        self,
        cmd: list[str] | None = None,
        returncode: int | None = 0,
        ignore_term: bool = False,
        unkillable: bool = False,
        stragglers: bool = False,
    ):
        FakeProcess._next_pid += 1
        self.pid = FakeProcess._next_pid
        self.args = cmd or []
        self.returncode = returncode
        self.ignore_term = ignore_term
        self.unkillable = unkillable
        # Other members of the process group, alive after the leader exits
        self.stragglers = stragglers
        self.signals: list[int] = []

    def poll(self) -> int | None:
        return self.returncode

    def wait(self, timeout: float | None = None) -> int:
        if self.returncode is None:
            raise subprocess.TimeoutExpired(self.args, timeout)
        return self.returncode

    def deliver(self, sig: int) -> None:
        self.signals.append(sig)
        if self.returncode is not None:
            if sig == signal.SIGKILL:
                self.stragglers = False
            return
        if self.unkillable:
            return
        if sig == signal.SIGTERM and self.ignore_term:
            return
        self.returncode = -sig


def hanging_process(**kwargs) -> FakeProcess:
    """A probe that never finishes on its own."""
    return FakeProcess(returncode=None, **kwargs)


class MockContext:
    """Mock Context for testing checks without real system access."""

    def __init__(
        self,
        command_outputs: dict[tuple, str | Exception | subprocess.CompletedProcess] | None = None,
        file_contents: dict[str, str] | None = None,
        executables: list[str] | None = None,
        unreadable: list[str] | None = None,
        spawn_results: dict[tuple, int | FakeProcess | Exception] | None = None,
        system_name: str = "linux",
    ):
        self.command_outputs = command_outputs or {}
        self.file_contents = file_contents or {}
        self.executables = set(executables or [])
        self.unreadable = set(unreadable or [])
        self.spawn_results = spawn_results or {}
        self.system_name = system_name
        self.commands_run: list[list[str]] = []
        self.spawned: list[list[str]] = []
        self.processes: dict[int, FakeProcess] = {}
        self.signals_sent: list[tuple[int, int]] = []

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Return mocked command output."""
        self.commands_run.append(cmd)
        key = tuple(cmd)
        if key not in self.command_outputs:
            raise KeyError(f"No mock output for command: {cmd}")

        output = self.command_outputs[key]
        if isinstance(output, Exception):
            raise output

        # Allow passing CompletedProcess directly for more control (e.g., non-zero returncode)
        if isinstance(output, subprocess.CompletedProcess):
            if check and output.returncode != 0:
                raise subprocess.CalledProcessError(output.returncode, cmd, output.stdout, output.stderr)
            return output

        return subprocess.CompletedProcess(
            cmd,
            returncode=0,
            stdout=output,
            stderr="",
        )

    def spawn(self, cmd: list[str]) -> FakeProcess:
        """Return a fake process for the command."""
        self.spawned.append(cmd)
        key = tuple(cmd)
        if key not in self.spawn_results:
            raise KeyError(f"No mock process for command: {cmd}")

        result = self.spawn_results[key]
        if isinstance(result, Exception):
            raise result
        if isinstance(result, FakeProcess):
            proc = result
        else:
            proc = FakeProcess(cmd, returncode=result)
        self.processes[proc.pid] = proc
        return proc

    def kill_group(self, pgid: int, sig: int) -> None:
        """Deliver a signal to a fake process, like os.killpg."""
        self.signals_sent.append((pgid, sig))
        proc = self.processes.get(pgid)
        if proc is None or (proc.returncode is not None and not proc.stragglers):
            raise ProcessLookupError(pgid)
        if sig == 0:
            return
        proc.deliver(sig)

    def read_file(self, path: str) -> str:
        """Return mocked file content."""
        if path in self.unreadable:
            raise PermissionError(13, "Permission denied", path)
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")
        return self.file_contents[path]

    def file_exists(self, path: str) -> bool:
        """Check if path is in mocked files or executables."""
        return path in self.file_contents or path in self.executables

    def is_executable(self, path: str) -> bool:
        return path in self.executables

    def is_readable(self, path: str) -> bool:
        return path in self.file_contents and path not in self.unreadable

    def system(self) -> str:
        return self.system_name


def live_group_members(pgid: int, timeout: float = 2.0) -> list[int]:
    """
    Pids of processes still running in a process group.

    Zombies are not counted. Polls until the group is empty or timeout
    passes, since a killed process takes a moment to disappear.
    """
    deadline = time.monotonic() + timeout
    while True:
        members = []
        for stat_path in Path("/proc").glob("[0-9]*/stat"):
            try:
                stat = stat_path.read_text()
            except OSError:
                continue
            fields = stat.rsplit(")", 1)[1].split()
            if int(fields[2]) == pgid and fields[0] not in ("Z", "X"):
                members.append(int(stat_path.parent.name))
        if not members or time.monotonic() >= deadline:
            return members
        time.sleep(0.05)


requires_proc = pytest.mark.skipif(
    not Path("/proc/self/stat").exists(),
    reason="needs /proc to inspect process groups",
)


def load_fixture(category: str, name: str) -> str:
    """Load a fixture file by category and name."""
    fixture_path = FIXTURES_DIR / category / name
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")
    return fixture_path.read_text()


def aix_context(
    lsfs: str = "",
    lsnfsmnt: str = "",
    mount: str = "",
    probes: dict[str, int | FakeProcess] | None = None,
    missing: tuple[str, ...] = (),
    config: CheckConfig = AIX_CONFIG,
) -> MockContext:
    """
    MockContext for an AIX host with every dependency installed.

    Args:
        lsfs, lsnfsmnt, mount: Command outputs
        probes: Probe result per NFS target (exit code or FakeProcess)
        missing: Paths to leave out of the mocked filesystem
        config: Config whose tool paths are mocked
    """
    executables = [
        config.lsfs_path,
        config.lsnfsmnt_path,
        config.mount_path,
        config.ls_path,
        config.sudo_path,
    ]
    files = {config.sudoers_path: ""}
    return MockContext(
        command_outputs={
            (config.lsfs_path, "-c"): lsfs,
            (config.lsnfsmnt_path, "-c"): lsnfsmnt,
            (config.mount_path,): mount,
        },
        file_contents={k: v for k, v in files.items() if k not in missing},
        executables=[p for p in executables if p not in missing],
        spawn_results={
            tuple(config.probe_command(target)): result
            for target, result in (probes or {}).items()
        },
        system_name="aix",
    )


def make_run(context: MockContext, config: CheckConfig = AIX_CONFIG) -> CheckRun:
    """CheckRun with a silent logger."""
    return CheckRun(
        config=config,
        context=context,
        logger=ScriptLogger(config.check_name),
        output=Output(config.check_name),
    )


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


@pytest.fixture
def fixtures_dir() -> Path:
    """Path to test fixtures directory."""
    return FIXTURES_DIR
