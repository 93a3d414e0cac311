"""Process utilities for inventory queries."""

import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from mountcheck.core.context import Context


class CommandError(Exception):
    """Error running a command."""

    pass


def run_command(
    cmd: list[str],
    context: "Context | None" = None,
    check: bool = True,
) -> str:
    """
    Run a command and return its output.

    Args:
        cmd: Command and arguments
        context: Execution context (for testing)
        check: Raise on non-zero exit

    Returns:
        Command stdout

    Raises:
        CommandError: If the command cannot be started, times out, or
            (with check=True) exits non-zero
    """
    if context is None:
        from mountcheck.core.context import Context
        context = Context()

    try:
        result = context.run(cmd, check=check)
    except subprocess.CalledProcessError as e:
        raise CommandError(f"{cmd[0]} exited with status {e.returncode}") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"{cmd[0]} timed out") from e
    except OSError as e:
        raise CommandError(f"{cmd[0]} could not be run: {e.strerror or e}") from e
    return result.stdout
