"""NFS mounts must answer a bounded, privileged directory read."""

from typing import TYPE_CHECKING

from mountcheck.core.output import Verdict, critical
from mountcheck.core.probe import run_probe

if TYPE_CHECKING:
    from mountcheck.core.runner import CheckRun


def check_nfs_mounts(run: "CheckRun") -> Verdict | None:
    """
    Probe each NFS mount in turn; stop at the first that does not answer.

    Probes run one at a time, so the worst-case run time grows with the
    number of NFS mounts: timeout plus kill grace for each.
    """
    config = run.config
    probed = 0
    verdict = None

    for fs in run.inventory.nfs_mounts:
        outcome = run_probe(fs.name, config.nfs_timeout, config, run.context, run.logger)
        probed += 1
        if not outcome.success:
            run.logger.warning(
                "NFS mount unavailable",
                target=outcome.target,
                result=outcome.result.value,
                returncode=outcome.returncode,
                elapsed=round(outcome.elapsed, 3),
            )
            verdict = critical(f"NFS mount {fs.name} is unavailable")
            break

    run.output.emit({"nfs_probed": probed})
    return verdict
