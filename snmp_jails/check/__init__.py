"""Check module evaluating jail counters into plugin results."""

from .plugin import Check, CheckExit
from .evaluator import (
    JailError,
    JailNotFoundError,
    JailIndexError,
    resolve_jail_index,
    evaluate_disk_space,
    evaluate_metrics,
    evaluate_jail,
)

__all__ = [
    "Check",
    "CheckExit",
    "JailError",
    "JailNotFoundError",
    "JailIndexError",
    "resolve_jail_index",
    "evaluate_disk_space",
    "evaluate_metrics",
    "evaluate_jail",
]
