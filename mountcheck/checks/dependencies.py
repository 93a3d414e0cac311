"""Preflight: every external tool and file the check relies on must exist."""

from typing import TYPE_CHECKING

from mountcheck.core.output import Verdict, critical, unknown

if TYPE_CHECKING:
    from mountcheck.core.config import CheckConfig
    from mountcheck.core.context import Context
    from mountcheck.core.runner import CheckRun


EXECUTABLE = "executable"
READABLE = "readable"


def required_files(config: "CheckConfig") -> list[tuple[str, str]]:
    """Inventory sources and the probe binary, with the access each needs."""
    if config.platform == "aix":
        files = [
            (config.lsfs_path, EXECUTABLE),
            (config.lsnfsmnt_path, EXECUTABLE),
            (config.mount_path, EXECUTABLE),
        ]
    else:
        files = [
            (config.fstab_path, READABLE),
            (config.mounts_path, READABLE),
        ]
    files.append((config.ls_path, EXECUTABLE))
    return files


def file_problem(path: str, access: str, context: "Context") -> str | None:
    """Describe what is wrong with a required file, or None if it is usable."""
    if not context.file_exists(path):
        return f"required file {path} not found"
    if access == EXECUTABLE and not context.is_executable(path):
        return f"required file {path} is not executable"
    if access == READABLE and not context.is_readable(path):
        return f"required file {path} is not readable"
    return None


def check_dependencies(run: "CheckRun") -> Verdict | None:
    """
    Verify inventory tools, the probe binary and the privilege helper.

    A missing inventory tool leaves the state of the host unknown. A missing
    privilege helper or helper configuration is a host defect, and CRITICAL.
    """
    config, context = run.config, run.context

    for path, access in required_files(config):
        problem = file_problem(path, access, context)
        if problem:
            run.logger.error("missing dependency", path=path, access=access)
            return unknown(problem)

    problem = file_problem(config.sudo_path, EXECUTABLE, context)
    if problem:
        run.logger.error("privilege helper unavailable", path=config.sudo_path)
        return critical(problem)

    # sudoers is normally readable by root only; existence is all we can test
    if not context.file_exists(config.sudoers_path):
        run.logger.error("privilege configuration missing", path=config.sudoers_path)
        return critical(f"required file {config.sudoers_path} not found")

    return None
