"""
Nagios plugin result handling.

Collects findings and performance data during a run and renders the
single status line monitoring systems expect:

    WARNING: Jail web is using 5 / 3 GB disk space (166%) | InOctets=10c;;;; ...

Exit codes follow the Nagios plugin guidelines (0 OK, 1 WARNING,
2 CRITICAL, 3 UNKNOWN).
"""

import logging
from typing import List, NoReturn, Optional

from ..core.models import Finding, Number, PerfDatum, Status


logger = logging.getLogger(__name__)


class CheckExit(Exception):
    """Raised to end the check early with a given status."""

    def __init__(self, status: Status, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class Check:
    """
    Aggregates check results into one worst-status-wins verdict.

    Use as a context manager so a status line is produced on every
    exit path:

        with Check() as check:
            check.add_result(Status.OK, "all good")
        sys.exit(check.exit_code)
    """

    def __init__(self):
        self.results: List[Finding] = []
        self.perfdata: List[PerfDatum] = []
        self.output: Optional[str] = None
        self.exit_code: int = Status.UNKNOWN.value

    @property
    def status(self) -> Status:
        if not self.results:
            return Status.UNKNOWN
        return max(r.status for r in self.results)

    def add_result(self, status: Status, message: str):
        self.results.append(Finding(Status(status), message))

    def add_perf_datum(
        self,
        label: str,
        unit: str,
        value: Number,
        warn: Optional[Number] = None,
        crit: Optional[Number] = None,
        min: Optional[Number] = None,
        max: Optional[Number] = None,
    ):
        self.perfdata.append(PerfDatum(label, unit, value, warn, crit, min, max))

    def exit(self, status: Status, message: str) -> NoReturn:
        """Record a final result and stop the check."""
        self.add_result(status, message)
        raise CheckExit(status, message)

    def __str__(self) -> str:
        if not self.results:
            text = f"{Status.UNKNOWN.name}: no check result specified"
        else:
            status = self.status
            messages = [r.message for r in self.results if r.status == status]
            text = f"{status.name}: {', '.join(messages)}"
        if self.perfdata:
            text += " | " + " ".join(str(p) for p in self.perfdata)
        return text

    def finish(self) -> str:
        """Render the status line, print it and remember the exit code."""
        self.output = str(self)
        self.exit_code = self.status.value
        print(self.output)
        return self.output

    def __enter__(self) -> "Check":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if isinstance(exc, CheckExit):
            # An early exit reports only its own result
            self.results = [Finding(Status(exc.status), exc.message)]
        elif isinstance(exc, Exception):
            logger.exception("Check failed with an unexpected error")
            self.add_result(Status.UNKNOWN, f"{exc_type.__name__}: {exc}")
        elif exc is not None:
            return False
        self.finish()
        return True
