"""Load the filesystem inventory for the rest of the run."""

from typing import TYPE_CHECKING

from mountcheck.core.output import Verdict, unknown
from mountcheck.lib.inventory import InventoryError, read_inventory

if TYPE_CHECKING:
    from mountcheck.core.runner import CheckRun


def load_inventory(run: "CheckRun") -> Verdict | None:
    """Read the inventory once; the run cannot go on without it."""
    try:
        run.inventory = read_inventory(run.config, run.context)
    except InventoryError as e:
        run.logger.error("inventory unavailable", error=str(e))
        return unknown(str(e))

    run.output.emit({
        "filesystems": len(run.inventory.filesystems),
        "nfs_mounts": len(run.inventory.nfs_mounts),
        "mounted": len(run.inventory.mounted),
    })
    run.logger.debug(
        "inventory loaded",
        platform=run.config.platform,
        filesystems=[fs.name for fs in run.inventory.filesystems],
        nfs_mounts=[fs.name for fs in run.inventory.nfs_mounts],
    )
    return None
