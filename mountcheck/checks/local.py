"""Local filesystems configured to mount at boot must be mounted."""

from typing import TYPE_CHECKING

from mountcheck.core.output import Verdict, critical, unknown
from mountcheck.lib.inventory import BootMount

if TYPE_CHECKING:
    from mountcheck.core.logging import ScriptLogger
    from mountcheck.core.runner import CheckRun
    from mountcheck.lib.inventory import Inventory


def evaluate_local_mounts(inventory: "Inventory", logger: "ScriptLogger") -> tuple[Verdict | None, int]:
    """
    Compare local filesystems against the mount table, in inventory order.

    Returns:
        (verdict for the first failure or None, number of filesystems checked)
    """
    checked = 0
    for fs in inventory.local_filesystems():
        checked += 1
        if fs.mount_at_boot is BootMount.NO:
            logger.debug("not mounted at boot, skipped", filesystem=fs.name)
            continue
        if fs.mount_at_boot is BootMount.UNKNOWN:
            logger.warning("unrecognized boot flag", filesystem=fs.name, flag=fs.boot_flag)
            return unknown(f"could not determine if {fs.name} should mount at boot time"), checked
        if fs.name not in inventory.mounted:
            return critical(f"the {fs.name} filesystem is not mounted"), checked
    return None, checked


def check_local_mounts(run: "CheckRun") -> Verdict | None:
    verdict, checked = evaluate_local_mounts(run.inventory, run.logger)
    run.output.emit({"local_checked": checked})
    return verdict
