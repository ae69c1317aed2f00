"""
Data models for jail metrics.

These dataclasses represent the counters read from the jail MIB
and the results handed over to the monitoring plugin output.
"""

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Union


Number = Union[int, float]

# Units accepted by Nagios performance data
VALID_UNITS = ("", "s", "ms", "us", "%", "b", "kb", "mb", "gb", "tb", "c")


class Status(IntEnum):
    """Nagios plugin status, value is the process exit code."""

    OK = 0
    WARNING = 1
    CRITICAL = 2
    UNKNOWN = 3


@dataclass(frozen=True)
class CounterDescriptor:
    """A per-jail counter column in the jail MIB."""

    counter_id: int
    name: str
    unit: str = ""
    description: str = ""


@dataclass(frozen=True)
class Finding:
    """A single status result with its message."""

    status: Status
    message: str


@dataclass(frozen=True)
class EvaluatedMetric:
    """
    A counter value ready for performance data output.

    `sampled` is False when the walk returned no usable value for the
    counter; the value is then reported as 0.
    """

    name: str
    unit: str
    value: Number
    warn: Optional[Number] = None
    crit: Optional[Number] = None
    min: Optional[Number] = None
    max: Optional[Number] = None
    sampled: bool = True


def _fmt_perf_value(value: Optional[Number]) -> str:
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return str(value)


@dataclass
class PerfDatum:
    """Single performance data entry: label=value[unit];warn;crit;min;max"""

    label: str
    unit: str
    value: Number
    warn: Optional[Number] = None
    crit: Optional[Number] = None
    min: Optional[Number] = None
    max: Optional[Number] = None

    def __post_init__(self):
        if self.unit not in VALID_UNITS:
            raise ValueError(f"Invalid performance data unit: {self.unit!r}")
        if not self.label or "=" in self.label or "'" in self.label:
            raise ValueError(f"Invalid performance data label: {self.label!r}")

    def __str__(self) -> str:
        label = f"'{self.label}'" if " " in self.label else self.label
        fields = [
            f"{label}={_fmt_perf_value(self.value)}{self.unit}",
            _fmt_perf_value(self.warn),
            _fmt_perf_value(self.crit),
            _fmt_perf_value(self.min),
            _fmt_perf_value(self.max),
        ]
        return ";".join(fields)


@dataclass
class CheckOutcome:
    """Everything gathered for one jail during a single run."""

    jail: str
    jail_index: Optional[int] = None
    metrics: List[EvaluatedMetric] = field(default_factory=list)
    findings: List[Finding] = field(default_factory=list)

    @property
    def status(self) -> Status:
        """Worst status among the findings, UNKNOWN if there are none."""
        if not self.findings:
            return Status.UNKNOWN
        return max(f.status for f in self.findings)
