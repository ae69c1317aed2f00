"""Collectors module for reading jail counters."""

from .snmp_collector import JailSNMPCollector, SNMPError, SNMPConnectError, SNMPWalkError

__all__ = [
    "JailSNMPCollector",
    "SNMPError",
    "SNMPConnectError",
    "SNMPWalkError",
]
