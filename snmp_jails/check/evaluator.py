"""
Jail lookup and metric evaluation.

Works on the raw walk result (numeric OID -> SNMP value) and turns it
into performance data and a disk space verdict for a single jail.
"""

import logging
from typing import Any, Dict, List, Tuple

from ..collectors.snmp_collector import to_int, to_text
from ..core.config import ThresholdConfig
from ..core.mib import JailMIB, normalize_oid
from ..core.models import CheckOutcome, EvaluatedMetric, Finding, Status


logger = logging.getLogger(__name__)

GB = 1024 ** 3


class JailError(Exception):
    """Base class for jail lookup failures."""


class JailNotFoundError(JailError):
    """No entry in the jail name table matches the requested name."""

    def __init__(self, jail: str):
        super().__init__(f"Jail {jail} not found")
        self.jail = jail


class JailIndexError(JailError):
    """The matching jail name entry has an index that is not an integer."""


def resolve_jail_index(samples: Dict[str, Any], jail: str) -> int:
    """
    Find the numeric index of a jail by name.

    Scans the jail name table (`<base>.2.1.1.<index>`) for an entry whose
    value equals `jail`. If several jails share the name the lowest index
    wins.
    """
    prefix = JailMIB.JAIL_NAME + "."
    matches = []

    for oid, value in samples.items():
        oid = normalize_oid(oid)
        if not oid.startswith(prefix):
            continue
        if to_text(value) != jail:
            continue

        suffix = oid[len(prefix):]
        try:
            matches.append(int(suffix))
        except ValueError as e:
            raise JailIndexError(f"Can't determine jail index: {e}") from e

    if not matches:
        raise JailNotFoundError(jail)

    matches.sort()
    if len(matches) > 1:
        logger.warning(f"Jail {jail} found at several indexes {matches}, using {matches[0]}")

    logger.debug(f"Jail {jail} has index {matches[0]}")
    return matches[0]


def evaluate_disk_space(
    jail: str,
    used_bytes: int,
    thresholds: ThresholdConfig,
) -> Tuple[Finding, Dict[str, int]]:
    """
    Compare disk usage in whole GB against the thresholds.

    Returns the finding and the warn/crit bounds in bytes for the
    configured thresholds.
    """
    size = used_bytes // GB
    status = Status.OK
    bounds = {}

    if thresholds.warning > 0:
        bounds["warn"] = thresholds.warning * GB
        if size > thresholds.warning:
            status = Status.WARNING

    if thresholds.critical > 0:
        bounds["crit"] = thresholds.critical * GB
        if size > thresholds.critical:
            status = Status.CRITICAL

    message = f"Jail {jail} is using {size} / {thresholds.warning} GB disk space"
    if thresholds.warning > 0:
        message += f" ({size * 100 // thresholds.warning}%)"

    return Finding(status, message), bounds


def evaluate_metrics(
    samples: Dict[str, Any],
    jail: str,
    jail_index: int,
    thresholds: ThresholdConfig,
) -> Tuple[List[EvaluatedMetric], List[Finding]]:
    """Build one metric per known counter, in ascending counter id order."""
    metrics = []
    findings = []
    by_oid = {normalize_oid(oid): value for oid, value in samples.items()}

    for counter in JailMIB.counters():
        oid = JailMIB.counter_oid(counter.counter_id, jail_index)
        raw = to_int(by_oid.get(oid))
        sampled = raw is not None
        if not sampled:
            logger.debug(f"No value for {counter.name} at {oid}, reporting 0")
            raw = 0

        value = raw
        bounds = {}

        if counter.counter_id == JailMIB.DISK_SPACE:
            finding, bounds = evaluate_disk_space(jail, raw, thresholds)
            findings.append(finding)
        elif counter.counter_id == JailMIB.CPU_TIME:
            value = raw / 100

        metrics.append(EvaluatedMetric(
            name=counter.name,
            unit=counter.unit,
            value=value,
            warn=bounds.get("warn"),
            crit=bounds.get("crit"),
            sampled=sampled,
        ))

    return metrics, findings


def evaluate_jail(
    samples: Dict[str, Any],
    jail: str,
    thresholds: ThresholdConfig,
) -> CheckOutcome:
    """Resolve the jail and evaluate all of its counters."""
    jail_index = resolve_jail_index(samples, jail)
    metrics, findings = evaluate_metrics(samples, jail, jail_index, thresholds)
    return CheckOutcome(jail=jail, jail_index=jail_index, metrics=metrics, findings=findings)
