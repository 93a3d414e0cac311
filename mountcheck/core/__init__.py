"""Core mountcheck functionality."""

from mountcheck.core.config import CheckConfig, ConfigError, load_config
from mountcheck.core.context import Context
from mountcheck.core.logging import ScriptLogger
from mountcheck.core.output import Output, Severity, Verdict
from mountcheck.core.probe import ProbeOutcome, ProbeResult, ProbeTask, run_probe
from mountcheck.core.runner import CheckRun, run_stages

__all__ = [
    "CheckConfig",
    "CheckRun",
    "ConfigError",
    "Context",
    "Output",
    "ProbeOutcome",
    "ProbeResult",
    "ProbeTask",
    "ScriptLogger",
    "Severity",
    "Verdict",
    "load_config",
    "run_probe",
    "run_stages",
]
