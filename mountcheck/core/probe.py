"""
Bounded liveness probe for mount points.

A read of a hung NFS mount can block in the kernel forever, and the blocked
process cannot be asked to give up. The probe therefore runs as a separate
process in its own process group, and the caller waits on it with a
wall-clock deadline. When the deadline passes the whole group is terminated:

    1. SIGTERM to the group. A privilege helper such as sudo relays it to
       the command it started, even when that command runs as root in a
       session of its own.
    2. Up to kill_grace seconds for the group leader to exit.
    3. SIGKILL to the group if any member is still alive, then up to
       kill_grace seconds to reap.

The runner returns within timeout + 2 * kill_grace in every case.
"""

import signal
import subprocess
import time
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from mountcheck.core.logging import ScriptLogger

if TYPE_CHECKING:
    from mountcheck.core.config import CheckConfig
    from mountcheck.core.context import Context


class ProbeResult(Enum):
    SUCCESS = "success"
    TIMED_OUT = "timed_out"
    PROCESS_ERROR = "process_error"


@dataclass(frozen=True)
class ProbeOutcome:
    """Result of probing one target."""

    target: str
    result: ProbeResult
    elapsed_bounded: bool
    elapsed: float = 0.0
    returncode: int | None = None

    @property
    def success(self) -> bool:
        return self.result is ProbeResult.SUCCESS


class ProbeTask:
    """
    A probe process that can be waited on with a deadline and cancelled.

    cancel() is synchronous and safe to call any number of times, including
    after the process has exited on its own.
    """

    def __init__(
        self,
        cmd: list[str],
        context: "Context",
        kill_grace: float = 0.5,
        logger: ScriptLogger | None = None,
    ):
        self.cmd = cmd
        self.context = context
        self.kill_grace = kill_grace
        self.logger = logger or ScriptLogger("probe")
        self.proc: subprocess.Popen | None = None
        self.leaked = False

    def start(self) -> None:
        """Spawn the probe. Raises OSError if it cannot be started."""
        self.proc = self.context.spawn(self.cmd)
        self.logger.debug("probe started", cmd=self.cmd, pid=self.proc.pid)

    def wait(self, timeout: float) -> int | None:
        """Wait up to timeout seconds; return the exit status or None."""
        if self.proc is None:
            return None
        try:
            return self.proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return None

    def _group_exists(self) -> bool:
        """True while any member of the probe's process group is alive."""
        try:
            self.context.kill_group(self.proc.pid, 0)
        except ProcessLookupError:
            return False
        except PermissionError:
            return True
        return True

    def _signal_group(self, sig: int) -> None:
        try:
            self.context.kill_group(self.proc.pid, sig)
        except ProcessLookupError:
            # Group already gone
            pass
        except PermissionError:
            self.logger.warning(
                "not permitted to signal probe group",
                pid=self.proc.pid,
                signal=signal.Signals(sig).name,
            )

    def cancel(self) -> bool:
        """
        Terminate the probe's process group and reap the probe.

        Returns:
            True if the probe process has been reaped
        """
        if self.proc is None:
            return True

        if self.proc.poll() is None:
            self._signal_group(signal.SIGTERM)
            self.wait(self.kill_grace)

        if self.proc.poll() is None or self._group_exists():
            self._signal_group(signal.SIGKILL)

        if self.proc.poll() is None and self.wait(self.kill_grace) is None:
            if not self.leaked:
                self.leaked = True
                self.logger.error(
                    "probe process survived SIGKILL",
                    cmd=self.cmd,
                    pid=self.proc.pid,
                )
            return False
        return True


def run_probe(
    target: str,
    timeout: float,
    config: "CheckConfig",
    context: "Context",
    logger: ScriptLogger | None = None,
) -> ProbeOutcome:
    """
    Probe a mount point with a privileged directory read, bounded by timeout.

    Args:
        target: Mount point to read
        timeout: Seconds to wait for the probe to finish
        config: Run configuration (probe command, kill grace)
        context: Execution context
        logger: Run logger

    Returns:
        ProbeOutcome; the probe process is gone when this returns
    """
    logger = logger or ScriptLogger("probe")
    task = ProbeTask(
        config.probe_command(target),
        context,
        kill_grace=config.kill_grace,
        logger=logger,
    )
    bound = timeout + 2 * config.kill_grace

    started = time.monotonic()
    try:
        task.start()
    except OSError as e:
        logger.error("probe could not be started", target=target, error=str(e))
        return ProbeOutcome(target, ProbeResult.PROCESS_ERROR, True)

    try:
        returncode = task.wait(timeout)
    finally:
        task.cancel()
    elapsed = time.monotonic() - started

    if returncode is None:
        result = ProbeResult.TIMED_OUT
    elif returncode == 0:
        result = ProbeResult.SUCCESS
    else:
        result = ProbeResult.PROCESS_ERROR

    outcome = ProbeOutcome(
        target=target,
        result=result,
        elapsed_bounded=elapsed <= bound,
        elapsed=elapsed,
        returncode=returncode,
    )
    logger.debug(
        "probe finished",
        target=target,
        result=result.value,
        returncode=returncode,
        elapsed=round(elapsed, 3),
    )
    return outcome
