"""Check stages, in the order they run."""

from mountcheck.checks.dependencies import check_dependencies
from mountcheck.checks.inventory import load_inventory
from mountcheck.checks.local import check_local_mounts
from mountcheck.checks.nfs import check_nfs_mounts
from mountcheck.core.output import Verdict
from mountcheck.core.runner import CheckRun, run_stages

STAGES = (
    check_dependencies,
    load_inventory,
    check_local_mounts,
    check_nfs_mounts,
)


def run_check(run: CheckRun) -> Verdict:
    """Run every stage, stopping at the first failure."""
    return run_stages(run, STAGES)


__all__ = [
    "STAGES",
    "check_dependencies",
    "check_local_mounts",
    "check_nfs_mounts",
    "load_inventory",
    "run_check",
]
