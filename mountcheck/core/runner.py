"""Check execution: a fail-fast pipeline of stages."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from mountcheck.core.output import Output, Verdict, ok

if TYPE_CHECKING:
    from mountcheck.core.config import CheckConfig
    from mountcheck.core.context import Context
    from mountcheck.core.logging import ScriptLogger
    from mountcheck.lib.inventory import Inventory


@dataclass
class CheckRun:
    """State shared by the stages of one check run."""

    config: "CheckConfig"
    context: "Context"
    logger: "ScriptLogger"
    output: Output
    inventory: "Inventory | None" = None


# A stage returns a verdict to stop the run, or None to continue
Stage = Callable[[CheckRun], "Verdict | None"]


def run_stages(run: CheckRun, stages: tuple[Stage, ...]) -> Verdict:
    """
    Run stages in order and stop at the first verdict.

    Args:
        run: Shared run state
        stages: Stage callables

    Returns:
        The first verdict produced, or OK if every stage passed
    """
    for stage in stages:
        verdict = stage(run)
        if verdict is not None:
            run.logger.info(
                "check stopped",
                stage=stage.__name__,
                severity=verdict.severity.name,
                detail=verdict.message,
            )
            return verdict
        run.logger.debug("stage passed", stage=stage.__name__)

    return ok()
