"""Check verdicts and status line output."""

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Any


OK_MESSAGE = "all filesystems are in the appropriate mount state"


class Severity(IntEnum):
    """Monitoring severity. The value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


@dataclass(frozen=True)
class Verdict:
    """Outcome of a check run."""

    severity: Severity
    message: str

    @property
    def exit_code(self) -> int:
        return int(self.severity)

    def status_line(self, check_name: str) -> str:
        """Format as '<CHECK_NAME> <SEVERITY> - <message>' on a single line."""
        message = " ".join(self.message.split())
        return f"{check_name} {self.severity.name} - {message}"


def ok(message: str = OK_MESSAGE) -> Verdict:
    return Verdict(Severity.OK, message)


def critical(message: str) -> Verdict:
    return Verdict(Severity.CRITICAL, message)


def unknown(message: str) -> Verdict:
    return Verdict(Severity.UNKNOWN, message)


class Output:
    """Collects run data and prints the single status line."""

    def __init__(self, check_name: str):
        self.check_name = check_name
        self.data: dict[str, Any] = {}
        self.verdict: Verdict | None = None
        self._printed: bool = False

    def emit(self, data: dict[str, Any]) -> None:
        """Store structured run data."""
        self.data.update(data)

    def set_verdict(self, verdict: Verdict) -> None:
        self.verdict = verdict

    @property
    def summary(self) -> str:
        """Status line for the current verdict."""
        verdict = self.verdict or Verdict(Severity.UNKNOWN, "no result")
        return verdict.status_line(self.check_name)

    @property
    def exit_code(self) -> int:
        if self.verdict is None:
            return int(Severity.UNKNOWN)
        return self.verdict.exit_code

    def to_json(self) -> str:
        """Return verdict and data as one line of JSON."""
        verdict = self.verdict or Verdict(Severity.UNKNOWN, "no result")
        payload = {
            "check": self.check_name,
            "status": verdict.severity.name,
            "message": " ".join(verdict.message.split()),
            **self.data,
        }
        return json.dumps(payload, default=str)

    def render(self, format: str = "plain") -> None:
        """Print the verdict exactly once.

        Args:
            format: Output format - "json" or "plain"
        """
        if self._printed:
            return
        self._printed = True

        if format == "json":
            print(self.to_json())
        else:
            print(self.summary)
