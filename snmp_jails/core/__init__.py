"""Core module containing data models, MIB layout and configuration."""

from .models import (
    Status,
    CounterDescriptor,
    Finding,
    EvaluatedMetric,
    PerfDatum,
    CheckOutcome,
)
from .config import CheckConfig, ConfigError
from .mib import JailMIB

__all__ = [
    "Status",
    "CounterDescriptor",
    "Finding",
    "EvaluatedMetric",
    "PerfDatum",
    "CheckOutcome",
    "CheckConfig",
    "ConfigError",
    "JailMIB",
]
